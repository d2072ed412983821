import logging

import pytest

from backend.app.services.canvas_service import REFUSED_CONNECTION_MESSAGE, CanvasService
from flowcanvas.config.settings import FlowCanvasConfig, MutationQueueConfig
from flowcanvas.errors import InvariantViolation, UnknownNodeTypeError
from flowcanvas.graph.graph_store import CanvasStore
from flowcanvas.mutations.mutation_queue import MutationQueue


def _start(service):
    return next(n for n in service.store.get_nodes() if n.type == "start")


def _port(node, side):
    return next(p for p in node.ports if p.side == side)


def test_service_seeds_a_single_start_node(service):
    nodes = service.store.get_nodes()

    assert [n.type for n in nodes] == ["start"]
    assert [p.side for p in nodes[0].ports] == ["EAST"]

    with pytest.raises(InvariantViolation):
        service.seed_start_node()


def test_append_from_east_port_goes_right(service):
    start = _start(service)

    result = service.append_node("question", from_node_id=start.id, from_port_id=_port(start, "EAST").id)

    new_node = result.node
    edge = service.store.get_edge(f"{start.id}-{new_node.id}")
    assert [m.element_type for m in result.applied] == ["node", "edge"]
    assert edge.source_port == _port(start, "EAST").id
    assert edge.target_port == _port(new_node, "WEST").id


def test_append_from_west_port_goes_left(service):
    start = _start(service)
    question = service.append_node("question", from_node_id=start.id).node

    result = service.append_node("if", from_node_id=question.id, from_port_id=_port(question, "WEST").id)

    edge = service.store.get_edge(f"{result.node.id}-{question.id}")
    assert edge.source_port == _port(result.node, "EAST").id
    assert edge.target_port == _port(question, "WEST").id


def test_append_to_a_missing_node_returns_none(service):
    assert service.append_node("question", from_node_id="ghost") is None
    assert service.store.node_count() == 1


def test_append_rejects_a_second_start_and_unknown_types(service):
    start = _start(service)

    with pytest.raises(InvariantViolation):
        service.append_node("start", from_node_id=start.id)
    with pytest.raises(UnknownNodeTypeError):
        service.append_node("loop", from_node_id=start.id)

    assert service.store.node_count() == 1


def test_insert_and_remove_round_trip(service):
    start = _start(service)
    end = service.append_node("end", from_node_id=start.id).node
    edge_id = f"{start.id}-{end.id}"

    middle = service.insert_node("information", edge_id=edge_id).node

    assert not service.store.has_edge(edge_id)
    assert [e.id for e in service.store.get_edges()] == [f"{start.id}-{middle.id}", f"{middle.id}-{end.id}"]

    service.remove_nodes([middle.id])

    assert [n.id for n in service.store.get_nodes()] == [start.id, end.id]
    assert [e.id for e in service.store.get_edges()] == [edge_id]
    assert service.validate().is_valid
    assert all(service.reachability().values())


def test_insert_into_a_missing_edge_returns_none(service):
    assert service.insert_node("information", edge_id="ghost") is None


def test_start_node_cannot_be_removed_or_cloned(service):
    start = _start(service)

    with pytest.raises(InvariantViolation):
        service.remove_nodes([start.id])
    with pytest.raises(InvariantViolation):
        service.clone_node(start.id)


def test_clone_node_adds_an_unconnected_copy(service):
    question = service.append_node("question", from_node_id=_start(service).id).node

    cloned = service.clone_node(question.id).node

    assert cloned.id != question.id
    assert service.store.get_node(cloned.id).type == "question"
    assert service.store.edge_count() == 1
    assert service.clone_node("ghost") is None


def test_refused_connection_is_logged_and_returns_none(service, caplog):
    start = _start(service)
    question = service.append_node("question", from_node_id=start.id).node

    with caplog.at_level(logging.WARNING, logger="flowcanvas.service"):
        result = service.connect(from_node_id=question.id, from_port_id=None, to_node_id=start.id)

    assert result is None
    assert REFUSED_CONNECTION_MESSAGE in caplog.text


def test_connect_two_existing_nodes(service):
    start = _start(service)
    question = service.append_node("question", from_node_id=start.id).node
    end = service.append_node("end", from_node_id=start.id).node

    result = service.connect(from_node_id=question.id, from_port_id=None, to_node_id=end.id)

    assert [m.element_id for m in result.applied] == [f"{question.id}-{end.id}"]
    assert service.reachable_from_start() == [start.id, question.id, end.id]


def test_edge_label_patch_and_delete(service):
    start = _start(service)
    question = service.append_node("question", from_node_id=start.id).node
    edge_id = f"{start.id}-{question.id}"

    service.patch_edge(edge_id, {"text": "next"})
    service.drain()
    assert service.store.get_edge(edge_id).text == "next"

    service.delete_edge(edge_id)
    assert service.store.edge_count() == 0
    assert service.reachability()[question.id] is False


def test_variables_follow_node_patches(service):
    question = service.append_node("question", from_node_id=_start(service).id).node

    service.patch_node(question.id, {"data": {"variableName": "email"}})
    service.drain()

    assert [v.name for v in service.variables()] == ["email"]
    assert service.store.get_node(question.id).data["questionChoiceType"] == "single-quick-reply"


def test_interaction_mutations_land_together(clock, registry):
    config = FlowCanvasConfig(queue=MutationQueueConfig(coalesce_delay_ms=100))
    store = CanvasStore()
    service = CanvasService(
        store=store,
        queue=MutationQueue(config=config.queue, clock=clock),
        registry=registry,
        config=config,
    )
    clock.advance(0.1)
    service.drain()
    batches = []
    store.subscribe(batches.append)

    result = service.append_node("question", from_node_id=_start(service).id)

    assert len(result.queued) == 2
    assert result.applied == []
    assert store.node_count() == 1

    clock.advance(0.1)
    service.drain()

    assert [[m.element_type for m in batch] for batch in batches] == [["node", "edge"]]


def test_queued_start_node_blocks_a_second_one(clock, registry):
    config = FlowCanvasConfig(queue=MutationQueueConfig(coalesce_delay_ms=100))
    store = CanvasStore()
    queue = MutationQueue(config=config.queue, clock=clock)
    service = CanvasService(store=store, queue=queue, registry=registry, config=config)

    assert store.node_count() == 0
    with pytest.raises(InvariantViolation):
        service.seed_start_node()

    # A second host on the same canvas does not seed again
    CanvasService(store=store, queue=queue, registry=registry, config=config)

    clock.advance(0.1)
    service.drain()

    assert [n.type for n in store.get_nodes()] == ["start"]
