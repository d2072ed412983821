from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from flowcanvas.config.settings import FlowCanvasConfig
from flowcanvas.errors import InvariantViolation
from flowcanvas.graph.graph_factory import clone_node, create_node_from_default_props
from flowcanvas.graph.graph_mutator import (
    NodeLinkCheck,
    add_element_mutation,
    add_node_and_edge_through_ports,
    connect_nodes_through_ports,
    delete_element_mutation,
    patch_element_mutation,
    remove_and_upsert_nodes_through_ports,
    upsert_node_through_ports,
)
from flowcanvas.graph.graph_query import (
    ValidationResult,
    is_node_reachable,
    nodes_reachable_from_start,
    validate_canvas,
)
from flowcanvas.graph.graph_schema import CanvasDataset, Node, NodeType, Port
from flowcanvas.graph.graph_store import CanvasStore
from flowcanvas.graph.node_registry import NodeRegistry
from flowcanvas.graph.variables import Variable, VariablesView
from flowcanvas.mutations.mutation_queue import MutationQueue
from flowcanvas.mutations.mutation_schema import Mutation, NewMutation

logger = logging.getLogger("flowcanvas.service")

REFUSED_CONNECTION_MESSAGE = "You cannot connect the link to that port."


@dataclass(frozen=True)
class InteractionResult:
    """
    Outcome of one user interaction.

    `queued` lists every mutation the interaction produced; `applied` the
    ones already folded into the store (delayed ones land on a later drain).
    """

    queued: List[Mutation] = field(default_factory=list)
    applied: List[Mutation] = field(default_factory=list)
    node: Optional[Node] = None


class CanvasService:
    """
    Host of the canvas.

    This is the ONLY place where:
    - interactions are turned into mutations
    - mutations are queued and drained
    - engine policies (start node, connection gate) are enforced
    """

    def __init__(
        self,
        *,
        store: CanvasStore,
        queue: MutationQueue,
        registry: NodeRegistry,
        config: FlowCanvasConfig,
    ) -> None:
        self.store = store
        self.queue = queue
        self.registry = registry
        self.config = config
        self.variables_view = VariablesView(self.store.get_nodes)

        if config.seed_start_node and not self._has_start_node():
            self.seed_start_node()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def dataset(self) -> CanvasDataset:
        return self.store.snapshot()

    def variables(self) -> List[Variable]:
        return self.variables_view.variables

    def validate(self) -> ValidationResult:
        return validate_canvas(self.dataset())

    def reachability(self) -> Dict[str, bool]:
        dataset = self.dataset()
        return {n.id: is_node_reachable(n, dataset.edges) for n in dataset.nodes}

    def reachable_from_start(self) -> List[str]:
        dataset = self.dataset()
        reachable = nodes_reachable_from_start(dataset)
        return [n.id for n in dataset.nodes if n.id in reachable]

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    def queue_mutation(self, mutation: NewMutation, delay_ms: Optional[float] = None) -> Mutation:
        return self.queue.queue_mutation(mutation, delay_ms)

    def drain(self) -> List[Mutation]:
        applied = self.store.drain(self.queue)
        if applied:
            logger.info(
                "applied %s mutation(s); nodes=%s edges=%s pending=%s",
                len(applied),
                self.store.node_count(),
                self.store.edge_count(),
                len(self.queue),
            )
        return applied

    def _commit(self, mutations: Iterable[NewMutation], node: Optional[Node] = None) -> InteractionResult:
        # All mutations of one interaction share a delay so they land together
        queued = self.queue.queue_all(mutations, self.config.queue.coalesce_delay_ms)
        return InteractionResult(queued=queued, applied=self.drain(), node=node)

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    def seed_start_node(self) -> InteractionResult:
        if self._has_start_node():
            raise InvariantViolation("The canvas already has a start node")

        node = self._new_node("start")
        logger.info("seeding start node %s", node.id)
        return self._commit([add_element_mutation(node)], node)

    def append_node(
        self,
        node_type: NodeType,
        *,
        from_node_id: str,
        from_port_id: Optional[str] = None,
    ) -> Optional[InteractionResult]:
        """
        Create a node next to an existing one, linked through ports.

        From an EAST port (or no port) the new node goes to the right; from
        a WEST port it goes to the left and feeds that port.
        Returns None when the anchor node does not exist.
        """
        dataset = self.dataset()
        anchor = dataset.get_node(from_node_id)
        if anchor is None:
            logger.debug("append skipped, node %s not found", from_node_id)
            return None

        port = self._find_port(anchor, from_port_id)
        new_node = self._new_node(node_type)

        if port is not None and port.side == "WEST":
            result = add_node_and_edge_through_ports(
                dataset.nodes,
                dataset.edges,
                new_node,
                from_node=new_node,
                to_node=anchor,
                to_port=port,
            )
        else:
            result = add_node_and_edge_through_ports(
                dataset.nodes,
                dataset.edges,
                new_node,
                from_node=anchor,
                to_node=new_node,
                from_port=port,
            )

        return self._commit(result.mutations(), new_node)

    def insert_node(self, node_type: NodeType, *, edge_id: str) -> Optional[InteractionResult]:
        """
        Split an edge and put a new node in between.
        """
        dataset = self.dataset()
        edge = dataset.get_edge(edge_id)
        if edge is None:
            logger.debug("insert skipped, edge %s not found", edge_id)
            return None

        new_node = self._new_node(node_type)
        mutations = upsert_node_through_ports(dataset.nodes, dataset.edges, edge, new_node)
        return self._commit(mutations, new_node)

    def remove_nodes(
        self,
        node_ids: Iterable[str],
        *,
        on_node_link_check: Optional[NodeLinkCheck] = None,
    ) -> InteractionResult:
        dataset = self.dataset()
        wanted = set(node_ids)
        targets = [n for n in dataset.nodes if n.id in wanted]

        if any(n.type == "start" for n in targets):
            raise InvariantViolation("The start node cannot be removed")

        mutations = remove_and_upsert_nodes_through_ports(
            dataset.nodes,
            dataset.edges,
            targets,
            on_node_link_check,
        )
        return self._commit(mutations)

    def connect(
        self,
        *,
        from_node_id: str,
        from_port_id: Optional[str],
        to_node_id: str,
        to_port_id: Optional[str] = None,
    ) -> Optional[InteractionResult]:
        """
        Link two existing nodes. Returns None when the connection is refused.
        """
        dataset = self.dataset()
        from_node = dataset.get_node(from_node_id)
        to_node = dataset.get_node(to_node_id)

        mutation = connect_nodes_through_ports(
            dataset.edges,
            from_node,
            self._find_port(from_node, from_port_id),
            to_node,
            self._find_port(to_node, to_port_id),
            self.config.connections,
        )
        if mutation is None:
            logger.warning(
                "%s from=%s:%s to=%s:%s",
                REFUSED_CONNECTION_MESSAGE,
                from_node_id,
                from_port_id,
                to_node_id,
                to_port_id,
            )
            return None

        return self._commit([mutation])

    def clone_node(self, node_id: str) -> Optional[InteractionResult]:
        node = self.store.get_node(node_id)
        if node is None:
            return None
        if node.type == "start":
            raise InvariantViolation("The start node cannot be cloned")

        cloned = clone_node(node)
        return self._commit([add_element_mutation(cloned)], cloned)

    def patch_edge(self, edge_id: str, changes: dict, delay_ms: Optional[float] = None) -> Mutation:
        return self.queue_mutation(patch_element_mutation("edge", edge_id, changes), delay_ms)

    def patch_node(self, node_id: str, changes: dict, delay_ms: Optional[float] = None) -> Mutation:
        return self.queue_mutation(patch_element_mutation("node", node_id, changes), delay_ms)

    def delete_edge(self, edge_id: str) -> InteractionResult:
        return self._commit([delete_element_mutation("edge", edge_id)])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _new_node(self, node_type: NodeType) -> Node:
        if node_type == "start" and self._has_start_node():
            raise InvariantViolation("The canvas already has a start node")
        defaults = self.registry.get_default_node_props_with_fallback(node_type)
        return create_node_from_default_props(defaults)

    def _has_start_node(self) -> bool:
        if any(n.type == "start" for n in self.store.get_nodes()):
            return True
        # A start node may still be waiting in the queue
        return any(
            m.element_type == "node"
            and m.operation_type == "add"
            and (m.changes or {}).get("type") == "start"
            for m in self.queue.pending()
        )

    @staticmethod
    def _find_port(node: Optional[Node], port_id: Optional[str]) -> Optional[Port]:
        if node is None or port_id is None:
            return None
        return next((p for p in node.ports if p.id == port_id), None)
