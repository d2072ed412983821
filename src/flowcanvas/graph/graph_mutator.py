from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Sequence, Set, Union

from flowcanvas.config.settings import ConnectionPolicyConfig
from flowcanvas.graph.graph_factory import create_edge, make_edge_id
from flowcanvas.graph.graph_query import can_connect_to_destination_port
from flowcanvas.graph.graph_schema import (
    INBOUND_SIDE,
    OUTBOUND_SIDE,
    CanvasDataset,
    Edge,
    Node,
)
from flowcanvas.graph.graph_store import CanvasStore
from flowcanvas.graph.ports import (
    PortRef,
    find_port_by_side,
    get_default_from_port,
    get_default_to_port,
    port_id,
    synthetic_from_port_id,
    synthetic_to_port_id,
)
from flowcanvas.mutations.mutation_schema import (
    ElementType,
    Mutation,
    NewMutation,
)
from flowcanvas.utils.ids import new_id

logger = logging.getLogger("flowcanvas.mutator")

# (new_nodes, new_edges, source, target) -> False to skip the link
NodeLinkCheck = Callable[[List[Node], List[Edge], Node, Node], Optional[bool]]


@dataclass(frozen=True)
class AddNodeAndEdgeResult:
    node_mutation: NewMutation
    edge_mutation: Optional[NewMutation]

    def mutations(self) -> List[NewMutation]:
        """
        Mutations to enqueue, in order; the edge one only when present.
        """
        if self.edge_mutation is None:
            return [self.node_mutation]
        return [self.node_mutation, self.edge_mutation]


# ------------------------------------------------------------------
# Mutation builders
# ------------------------------------------------------------------


def add_element_mutation(element: Union[Node, Edge]) -> NewMutation:
    return NewMutation(
        element_id=element.id,
        element_type="node" if isinstance(element, Node) else "edge",
        operation_type="add",
        changes=element.to_dict(),
    )


def patch_element_mutation(
    element_type: ElementType,
    element_id: str,
    changes: dict,
) -> NewMutation:
    """
    Partial update: only the given fields change, nested dicts are merged.
    """
    return NewMutation(
        element_id=element_id,
        element_type=element_type,
        operation_type="patch",
        changes=dict(changes),
    )


def delete_element_mutation(element_type: ElementType, element_id: str) -> NewMutation:
    return NewMutation(
        element_id=element_id,
        element_type=element_type,
        operation_type="delete",
    )


# ------------------------------------------------------------------
# Graph algorithms
# ------------------------------------------------------------------


def add_node_and_edge_through_ports(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    new_node: Node,
    from_node: Optional[Node] = None,
    to_node: Optional[Node] = None,
    from_port: Optional[PortRef] = None,
    to_port: Optional[PortRef] = None,
) -> AddNodeAndEdgeResult:
    """
    Add a node and, when `from_node` is given, the edge leading to it.

    The destination defaults to the new node itself. The edge leaves
    through `from_port` (default: EAST) and enters through `to_port`
    (default: WEST), with synthetic ids for missing ports.
    """
    to_node = to_node or new_node

    node_mutation = add_element_mutation(new_node)

    edge_mutation: Optional[NewMutation] = None
    if from_node is not None:
        edge = create_edge(
            from_node,
            to_node,
            get_default_from_port(from_node, from_port),
            get_default_to_port(to_node, to_port),
        )
        edge_mutation = add_element_mutation(edge)

    return AddNodeAndEdgeResult(node_mutation=node_mutation, edge_mutation=edge_mutation)


def upsert_node_through_ports(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    edge: Edge,
    new_node: Node,
) -> List[NewMutation]:
    """
    Insert `new_node` in the middle of `edge`, splitting it in two.

    Order matters: the node exists before the edges that reference it,
    and the original edge is deleted only after both replacements.
    """
    before = replace(edge, id=make_edge_id(edge.source, new_node.id), target=new_node.id)
    after = replace(edge, id=make_edge_id(new_node.id, edge.target), source=new_node.id)

    if edge.source_port and edge.target_port:
        west = find_port_by_side(new_node, INBOUND_SIDE)
        east = find_port_by_side(new_node, OUTBOUND_SIDE)

        before = replace(
            before,
            source_port=edge.source_port,
            target_port=west.id if west else synthetic_to_port_id(new_node.id),
        )
        after = replace(
            after,
            source_port=east.id if east else synthetic_from_port_id(new_node.id),
            target_port=edge.target_port,
        )
    else:
        before = replace(before, source_port=None, target_port=None)
        after = replace(after, source_port=None, target_port=None)

    return [
        add_element_mutation(new_node),
        add_element_mutation(before),
        add_element_mutation(after),
        delete_element_mutation("edge", edge.id),
    ]


def remove_and_upsert_nodes_through_ports(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    remove_nodes: Union[Node, Sequence[Node]],
    on_node_link_check: Optional[NodeLinkCheck] = None,
) -> List[NewMutation]:
    """
    Remove nodes and relink their predecessors to their successors.

    Every (predecessor, successor) pair of a removed node is offered to
    `on_node_link_check`; unless it returns False an edge is created from
    the predecessor's EAST port to the successor's WEST port. Chains of
    removed nodes are walked through, so removing X and Y from A->X->Y->B
    links A->B.

    Returns [add relinking edges..., delete incident edges..., delete
    nodes...]; `apply_mutations` turns it into a full dataset.
    """
    if isinstance(remove_nodes, Node):
        remove_nodes = [remove_nodes]

    nodes_by_id = {n.id: n for n in nodes}
    removed_ids = list(dict.fromkeys(n.id for n in remove_nodes))
    removed: Set[str] = set(removed_ids)

    new_nodes = [n for n in nodes if n.id not in removed]
    new_edges = [e for e in edges if e.source not in removed and e.target not in removed]
    stale_edges = [e for e in edges if e.source in removed or e.target in removed]
    edge_ids = {e.id for e in new_edges}
    links: List[Edge] = []

    for node_id in removed_ids:
        sources = _surviving_neighbours(edges, node_id, removed, upstream=True)
        targets = _surviving_neighbours(edges, node_id, removed, upstream=False)

        for source_id in sources:
            for target_id in targets:
                source = nodes_by_id.get(source_id)
                target = nodes_by_id.get(target_id)
                if source is None or target is None:
                    continue

                link_id = make_edge_id(source.id, target.id)
                if link_id in edge_ids:
                    continue

                if on_node_link_check is not None:
                    if on_node_link_check(list(new_nodes), list(new_edges), source, target) is False:
                        logger.debug("link %s refused by check", link_id)
                        continue

                link = Edge(
                    id=link_id,
                    source=source.id,
                    target=target.id,
                    source_port=port_id(find_port_by_side(source, OUTBOUND_SIDE)),
                    target_port=port_id(find_port_by_side(target, INBOUND_SIDE)),
                    parent=source.parent,
                )
                new_edges.append(link)
                links.append(link)
                edge_ids.add(link_id)

    logger.debug(
        "removing %s node(s): %s relink(s), %s stale edge(s)",
        len(removed_ids),
        len(links),
        len(stale_edges),
    )

    return (
        [add_element_mutation(e) for e in links]
        + [delete_element_mutation("edge", e.id) for e in stale_edges]
        + [delete_element_mutation("node", i) for i in removed_ids if i in nodes_by_id]
    )


def _surviving_neighbours(
    edges: Iterable[Edge],
    node_id: str,
    removed: Set[str],
    *,
    upstream: bool,
) -> List[str]:
    # Breadth-first through removed nodes, collecting the first kept ones
    edges = list(edges)
    seen = {node_id}
    frontier = [node_id]
    found: List[str] = []

    while frontier:
        current = frontier.pop(0)
        for edge in edges:
            if upstream and edge.target == current:
                neighbour = edge.source
            elif not upstream and edge.source == current:
                neighbour = edge.target
            else:
                continue

            if neighbour in seen:
                continue
            seen.add(neighbour)

            if neighbour in removed:
                frontier.append(neighbour)
            else:
                found.append(neighbour)

    return found


def connect_nodes_through_ports(
    edges: Sequence[Edge],
    from_node: Optional[Node],
    from_port: Optional[PortRef],
    to_node: Optional[Node],
    to_port: Optional[PortRef] = None,
    policy: Optional[ConnectionPolicyConfig] = None,
) -> Optional[NewMutation]:
    """
    Edge between two existing nodes, e.g. a drag dropped onto a node.

    Returns None when the connectivity gate refuses the connection.
    """
    from_port = get_default_from_port(from_node, from_port)
    to_port = get_default_to_port(to_node, to_port)

    if not can_connect_to_destination_port(edges, from_node, from_port, to_node, to_port, policy):
        return None

    return add_element_mutation(create_edge(from_node, to_node, from_port, to_port))


def apply_mutations(
    dataset: CanvasDataset,
    mutations: Iterable[Union[NewMutation, Mutation]],
) -> CanvasDataset:
    """
    Fold mutations into a copy of `dataset` and return the new snapshot.
    """
    store = CanvasStore.from_dataset(dataset)
    entries = [
        m if isinstance(m, Mutation) else Mutation.enqueue(m, id=new_id(), enqueued_at=0.0, delay_ms=0.0)
        for m in mutations
    ]
    store.apply_batch(entries)
    return store.snapshot()
