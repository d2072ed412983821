from flowcanvas.config.settings import ConnectionPolicyConfig
from flowcanvas.graph.graph_query import (
    can_connect_to_destination_port,
    find_unreachable_nodes,
    is_node_reachable,
    nodes_reachable_from_start,
    validate_canvas,
)
from flowcanvas.graph.graph_schema import CanvasDataset, Edge, Node, Port


def _node(node_id: str, *sides: str, type=None) -> Node:
    ports = tuple(Port(id=f"{node_id}-{s.lower()}", side=s) for s in sides)
    return Node(id=node_id, type=type, ports=ports)


def _link(a: Node, b: Node) -> Edge:
    return Edge(
        id=f"{a.id}-{b.id}",
        source=a.id,
        target=b.id,
        source_port=f"{a.id}-east",
        target_port=f"{b.id}-west",
    )


START = _node("s", "EAST", type="start")
A = _node("a", "WEST", "EAST", type="information")
B = _node("b", "WEST", "EAST", type="question")
END = _node("e", "WEST", type="end")


# ---------------- Reachability ----------------


def test_start_is_reachable_without_edges():
    assert is_node_reachable(START, [])


def test_node_becomes_reachable_through_its_west_port():
    assert not is_node_reachable(A, [])

    edges = [_link(START, A)]
    assert is_node_reachable(A, edges)


def test_edge_on_another_port_does_not_count():
    edge = Edge(id="s-a", source="s", target="a", source_port="s-east", target_port="a-east")
    assert not is_node_reachable(A, [edge])


def test_node_without_west_port_is_never_reachable():
    orphan = _node("o", "EAST", type="information")
    edge = Edge(id="s-o", source="s", target="o", source_port="s-east", target_port="o-to")

    assert not is_node_reachable(orphan, [edge])


def test_find_unreachable_and_reachable_from_start():
    dataset = CanvasDataset.of([START, A, B, END], [_link(START, A), _link(B, END)])

    assert [n.id for n in find_unreachable_nodes(dataset)] == ["b"]
    assert nodes_reachable_from_start(dataset) == {"s", "a"}
    assert nodes_reachable_from_start(CanvasDataset.of([A])) == set()


# ---------------- Connectivity gate ----------------


def test_gate_accepts_a_plain_connection():
    assert can_connect_to_destination_port([], A, "a-east", B, "b-west")


def test_gate_rejects_missing_destination():
    assert not can_connect_to_destination_port([], A, "a-east", None, "b-west")
    assert not can_connect_to_destination_port([], A, "a-east", B, None)


def test_gate_rejects_identical_ports():
    assert not can_connect_to_destination_port([], A, "a-east", A, "a-east")


def test_gate_rejects_the_start_node_as_destination():
    assert not can_connect_to_destination_port([], A, "a-east", START, "s-east")
    assert not can_connect_to_destination_port([], A, "a-east", START, "s-to")


def test_gate_rejects_outbound_port_as_destination():
    assert not can_connect_to_destination_port([], A, "a-east", B, "b-east")


def test_gate_rejects_a_second_edge_between_the_same_pair():
    edges = [_link(A, B)]
    assert not can_connect_to_destination_port(edges, A, "a-east", B, "b-west")
    # Reverse direction is a different pair
    assert can_connect_to_destination_port(edges, B, "b-east", A, "a-west")


def test_gate_self_loop_policy():
    assert not can_connect_to_destination_port([], A, "a-east", A, "a-west")

    policy = ConnectionPolicyConfig(allow_node_self_loop=True)
    assert can_connect_to_destination_port([], A, "a-east", A, "a-west", policy)


def test_gate_multiple_inbound_policy():
    edges = [_link(START, B)]

    assert can_connect_to_destination_port(edges, A, "a-east", B, "b-west")

    strict = ConnectionPolicyConfig(allow_multiple_inbound=False)
    assert not can_connect_to_destination_port(edges, A, "a-east", B, "b-west", strict)


# ---------------- Validation ----------------


def test_valid_canvas():
    dataset = CanvasDataset.of([START, A, END], [_link(START, A), _link(A, END)])

    result = validate_canvas(dataset)

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []


def test_validation_errors():
    ghost = Edge(id="a-x", source="a", target="x")
    into_start = Edge(id="a-s", source="a", target="s", source_port="a-east", target_port="s-west")
    dataset = CanvasDataset.of([START, A, A], [ghost, into_start])

    result = validate_canvas(dataset)

    assert not result.is_valid
    assert "duplicate node id 'a'" in result.errors
    assert "edge 'a-x' enters unknown node 'x'" in result.errors
    assert "edge 'a-s' enters the start node" in result.errors
    assert "edge 'a-s' references unknown port 's-west' on 's'" in result.errors


def test_canvas_without_start_is_invalid():
    result = validate_canvas(CanvasDataset.of([A]))
    assert result.errors == ["expected exactly one start node, found 0"]


def test_validation_warnings():
    placeholder = Edge(id="s-a", source="s", target="a", source_port="s-east", target_port="a-to")
    dataset = CanvasDataset.of([START, A], [placeholder])

    result = validate_canvas(dataset)

    assert result.is_valid
    assert "edge 's-a' uses placeholder port 'a-to'" in result.warnings
    assert "node 'a' is unreachable" in result.warnings
