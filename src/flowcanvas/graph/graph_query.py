from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

import networkx as nx

from flowcanvas.config.settings import ConnectionPolicyConfig
from flowcanvas.graph.graph_schema import (
    INBOUND_SIDE,
    OUTBOUND_SIDE,
    CanvasDataset,
    Edge,
    Node,
)
from flowcanvas.graph.ports import PortRef, find_port_by_side, is_synthetic_port_id, port_id


@dataclass(frozen=True)
class ValidationResult:
    """
    Structural report on a canvas: errors break invariants, warnings are
    conditions the editor should surface (dead nodes, placeholder ports).
    """

    errors: List[str]
    warnings: List[str]

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0


# ---------------------------------------------------------------------
# Reachability
# ---------------------------------------------------------------------


def is_node_reachable(node: Node, edges: Iterable[Edge]) -> bool:
    """
    A node is reachable when an edge enters it through its WEST port.

    The start node is the entry point and always reachable. A non-start
    node without WEST port can never be reached.
    """
    if node.type == "start":
        return True

    west = find_port_by_side(node, INBOUND_SIDE)
    if west is None:
        return False

    return any(edge.target_port == west.id for edge in edges)


def find_unreachable_nodes(dataset: CanvasDataset) -> List[Node]:
    return [n for n in dataset.nodes if not is_node_reachable(n, dataset.edges)]


def nodes_reachable_from_start(dataset: CanvasDataset) -> Set[str]:
    """
    Ids of the nodes with a directed path from the start node (start
    included). Empty when the canvas has no start node.
    """
    start = next((n for n in dataset.nodes if n.type == "start"), None)
    if start is None:
        return set()

    graph = dataset.to_networkx()
    known = {n.id for n in dataset.nodes}
    return ({start.id} | nx.descendants(graph, start.id)) & known


# ---------------------------------------------------------------------
# Connectivity gate
# ---------------------------------------------------------------------


def can_connect_to_destination_port(
    edges: Iterable[Edge],
    from_node: Optional[Node],
    from_port: Optional[PortRef],
    to_node: Optional[Node],
    to_port: Optional[PortRef],
    policy: Optional[ConnectionPolicyConfig] = None,
) -> bool:
    """
    Whether a new edge from `from_port` to `to_port` may be created.

    Evaluated before materialising an edge from a drag or a port click.
    A False answer must be turned into user feedback by the caller.
    """
    policy = policy or ConnectionPolicyConfig()

    if from_node is None or to_node is None:
        return False

    from_port_id = port_id(from_port)
    to_port_id = port_id(to_port)
    if from_port_id is None or to_port_id is None:
        return False

    if from_port_id == to_port_id:
        return False

    if from_node.id == to_node.id and not policy.allow_node_self_loop:
        return False

    # The start node has no inbound side
    if to_node.type == "start":
        return False

    to_port_obj = next((p for p in to_node.ports if p.id == to_port_id), None)
    if to_port_obj is not None and to_port_obj.side == OUTBOUND_SIDE:
        return False

    for edge in edges:
        # Same node pair would produce the same edge id
        if edge.source == from_node.id and edge.target == to_node.id:
            return False
        if not policy.allow_multiple_inbound and edge.target_port == to_port_id:
            return False

    return True


# ---------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------


def validate_canvas(dataset: CanvasDataset) -> ValidationResult:
    errors: List[str] = []
    warnings: List[str] = []

    starts = [n for n in dataset.nodes if n.type == "start"]
    if len(starts) != 1:
        errors.append(f"expected exactly one start node, found {len(starts)}")

    for node_id, count in Counter(n.id for n in dataset.nodes).items():
        if count > 1:
            errors.append(f"duplicate node id {node_id!r}")
    for edge_id, count in Counter(e.id for e in dataset.edges).items():
        if count > 1:
            errors.append(f"duplicate edge id {edge_id!r}")

    nodes = {n.id: n for n in dataset.nodes}

    for edge in dataset.edges:
        source = nodes.get(edge.source)
        target = nodes.get(edge.target)

        if source is None:
            errors.append(f"edge {edge.id!r} leaves unknown node {edge.source!r}")
        if target is None:
            errors.append(f"edge {edge.id!r} enters unknown node {edge.target!r}")
        if target is not None and target.type == "start":
            errors.append(f"edge {edge.id!r} enters the start node")

        for node, ref in ((source, edge.source_port), (target, edge.target_port)):
            if node is None or ref is None or ref in node.port_ids:
                continue
            if is_synthetic_port_id(node, ref):
                warnings.append(f"edge {edge.id!r} uses placeholder port {ref!r}")
            else:
                errors.append(f"edge {edge.id!r} references unknown port {ref!r} on {node.id!r}")

    for node in find_unreachable_nodes(dataset):
        warnings.append(f"node {node.id!r} is unreachable")

    return ValidationResult(errors=errors, warnings=warnings)
