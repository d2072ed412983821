from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx

from flowcanvas.errors import DuplicateElementError, InvariantViolation
from flowcanvas.graph.graph_schema import CanvasDataset, Edge, Node
from flowcanvas.mutations.mutation_queue import MutationQueue
from flowcanvas.mutations.mutation_schema import Mutation
from flowcanvas.utils.helpers import deep_clone, deep_merge, utc_now

logger = logging.getLogger("flowcanvas.store")

Listener = Callable[[List[Mutation]], None]


class CanvasStore:
    """
    Authoritative in-memory canvas.

    Single writer: the only way to change it is to apply mutations, in
    the order the queue releases them. Readers get deep-cloned snapshots.
    """

    def __init__(self, *, history_limit: int = 1000) -> None:
        self._graph = nx.MultiDiGraph()
        # edge id -> (source, target), in insertion order
        self._edge_index: Dict[str, Tuple[str, str]] = {}
        self._history: Deque[Mutation] = deque(maxlen=history_limit)
        self._listeners: List[Listener] = []
        self.metadata: Dict[str, Any] = {}

    # -------------------- Nodes --------------------

    def has_node(self, node_id: str) -> bool:
        return node_id in self._graph and "data" in self._graph.nodes[node_id]

    def get_node(self, node_id: str) -> Optional[Node]:
        if not self.has_node(node_id):
            return None
        return self._graph.nodes[node_id]["data"]

    def get_nodes(self) -> List[Node]:
        return [data["data"] for _, data in self._graph.nodes(data=True) if "data" in data]

    def add_node(self, node: Node) -> None:
        if self.has_node(node.id):
            raise DuplicateElementError(f"Node {node.id!r} already exists")
        self._graph.add_node(node.id, data=node)

    def replace_node(self, node: Node) -> None:
        self._graph.nodes[node.id]["data"] = node

    def remove_node(self, node_id: str) -> bool:
        """
        Remove a node together with its incident edges.
        """
        if not self.has_node(node_id):
            return False

        incident = {
            key
            for _, _, key in list(self._graph.in_edges(node_id, keys=True))
            + list(self._graph.out_edges(node_id, keys=True))
        }
        for key in incident:
            self._edge_index.pop(key, None)
        if incident:
            logger.debug("node %s removed with %s incident edge(s)", node_id, len(incident))

        self._graph.remove_node(node_id)
        return True

    # -------------------- Edges --------------------

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edge_index

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        if edge_id not in self._edge_index:
            return None
        source, target = self._edge_index[edge_id]
        return self._graph.edges[source, target, edge_id]["data"]

    def get_edges(self) -> List[Edge]:
        return [self.get_edge(edge_id) for edge_id in self._edge_index]

    def add_edge(self, edge: Edge) -> None:
        if self.has_edge(edge.id):
            raise DuplicateElementError(f"Edge {edge.id!r} already exists")
        self._graph.add_edge(edge.source, edge.target, key=edge.id, data=edge)
        self._edge_index[edge.id] = (edge.source, edge.target)

    def replace_edge(self, edge: Edge) -> None:
        source, target = self._edge_index[edge.id]
        if (source, target) == (edge.source, edge.target):
            self._graph.edges[source, target, edge.id]["data"] = edge
            return

        self._graph.remove_edge(source, target, key=edge.id)
        self._prune_bare((source, target))
        self._graph.add_edge(edge.source, edge.target, key=edge.id, data=edge)
        # Assigning an existing key keeps the edge at its position
        self._edge_index[edge.id] = (edge.source, edge.target)

    def remove_edge(self, edge_id: str) -> bool:
        if edge_id not in self._edge_index:
            return False
        source, target = self._edge_index.pop(edge_id)
        self._graph.remove_edge(source, target, key=edge_id)
        self._prune_bare((source, target))
        return True

    def _prune_bare(self, node_ids: Iterable[str]) -> None:
        # Vertices created implicitly by edges to unknown nodes
        for node_id in set(node_ids):
            if (
                node_id in self._graph
                and "data" not in self._graph.nodes[node_id]
                and self._graph.degree(node_id) == 0
            ):
                self._graph.remove_node(node_id)

    # -------------------- Mutations --------------------

    def apply(self, mutation: Mutation) -> Mutation:
        return self.apply_batch([mutation])[0]

    def apply_batch(self, mutations: Iterable[Mutation]) -> List[Mutation]:
        """
        Fold mutations in order and notify listeners once for the batch.

        An invariant violation stops the batch: mutations folded before it
        stay applied (and are notified), the failing one is dropped and the
        error propagates.
        """
        applied: List[Mutation] = []
        try:
            for mutation in mutations:
                processing = mutation.processing()
                self._fold(processing)
                done = processing.applied(utc_now())
                self._history.append(done)
                applied.append(done)
        finally:
            if applied:
                self._notify(applied)
        return applied

    def drain(self, queue: MutationQueue, now: Optional[float] = None) -> List[Mutation]:
        """
        Apply every mutation the queue releases at `now`.

        Mutations leave the queue one at a time, as they are folded: when
        one fails it is dropped and the error propagates, while the ones
        enqueued after it stay queued for the next drain.
        """
        if now is None:
            now = queue.clock()

        def _released() -> Iterator[Mutation]:
            while True:
                mutation = queue.pop_next(now)
                if mutation is None:
                    return
                yield mutation

        return self.apply_batch(_released())

    async def flush(
        self,
        queue: MutationQueue,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> List[Mutation]:
        """
        Wait for delayed mutations and apply until the queue is empty.
        """
        applied: List[Mutation] = []
        while len(queue):
            wait = queue.next_ready_in()
            if wait:
                await sleep(wait)
            applied.extend(self.drain(queue))
        return applied

    def _fold(self, mutation: Mutation) -> None:
        changes = mutation.changes or {}
        if changes.get("id") not in (None, mutation.element_id):
            raise InvariantViolation(
                f"{mutation} tries to change the element id to {changes['id']!r}"
            )

        if mutation.element_type == "node":
            self._fold_node(mutation, changes)
        elif mutation.element_type == "edge":
            self._fold_edge(mutation, changes)
        else:
            raise InvariantViolation(f"Unknown element type in {mutation}")

    def _fold_node(self, mutation: Mutation, changes: Dict[str, Any]) -> None:
        op = mutation.operation_type

        if op == "add":
            self.add_node(Node.from_dict({**changes, "id": mutation.element_id}))
        elif op == "patch":
            current = self.get_node(mutation.element_id)
            if current is None:
                logger.debug("patch skipped, node %s not found", mutation.element_id)
                return
            self.replace_node(Node.from_dict(deep_merge(current.to_dict(), changes)))
        elif op == "delete":
            if not self.remove_node(mutation.element_id):
                logger.debug("delete skipped, node %s not found", mutation.element_id)
        else:
            raise InvariantViolation(f"Unknown operation type in {mutation}")

    def _fold_edge(self, mutation: Mutation, changes: Dict[str, Any]) -> None:
        op = mutation.operation_type

        if op == "add":
            self.add_edge(Edge.from_dict({**changes, "id": mutation.element_id}))
        elif op == "patch":
            current = self.get_edge(mutation.element_id)
            if current is None:
                logger.debug("patch skipped, edge %s not found", mutation.element_id)
                return
            self.replace_edge(Edge.from_dict(deep_merge(current.to_dict(), changes)))
        elif op == "delete":
            if not self.remove_edge(mutation.element_id):
                logger.debug("delete skipped, edge %s not found", mutation.element_id)
        else:
            raise InvariantViolation(f"Unknown operation type in {mutation}")

    # -------------------- Observers --------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with every applied batch.

        Returns a callable that unsubscribes it.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, batch: List[Mutation]) -> None:
        for listener in list(self._listeners):
            listener(list(batch))

    def history(self) -> List[Mutation]:
        return list(self._history)

    # -------------------- Snapshots --------------------

    def snapshot(self) -> CanvasDataset:
        return deep_clone(CanvasDataset.of(self.get_nodes(), self.get_edges()))

    def node_count(self) -> int:
        return len(self.get_nodes())

    def edge_count(self) -> int:
        return len(self._edge_index)

    @staticmethod
    def from_dataset(dataset: CanvasDataset, *, history_limit: int = 1000) -> "CanvasStore":
        store = CanvasStore(history_limit=history_limit)
        for node in dataset.nodes:
            store.add_node(node)
        for edge in dataset.edges:
            store.add_edge(edge)
        return store
