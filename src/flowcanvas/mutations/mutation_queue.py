from __future__ import annotations

import logging
import time
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional

from flowcanvas.config.settings import MutationQueueConfig
from flowcanvas.mutations.mutation_schema import Mutation, NewMutation
from flowcanvas.utils.ids import new_id

logger = logging.getLogger("flowcanvas.queue")

Clock = Callable[[], float]


class MutationQueue:
    """
    Ordered log of pending canvas mutations.

    The queue decides *when* a mutation may become visible; the canvas
    store decides *how* it is folded in. Release is head-of-line: a
    mutation leaves the queue only after every mutation enqueued before
    it, so a delayed head holds back the mutations behind it and the
    store always applies them in submission order.
    """

    def __init__(
        self,
        *,
        config: Optional[MutationQueueConfig] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.config = config or MutationQueueConfig()
        self.clock = clock
        self._pending: Deque[Mutation] = deque()

    # ------------------------------------------------------------------
    # Producer API
    # ------------------------------------------------------------------

    def queue_mutation(
        self,
        mutation: NewMutation,
        delay: Optional[float] = None,
    ) -> Mutation:
        """
        Append a mutation; it becomes releasable after `delay` ms.

        The id and the pending status are assigned here, never by the
        producer.
        """
        delay_ms = self.config.default_delay_ms if delay is None else delay
        entry = Mutation.enqueue(
            mutation,
            id=new_id(),
            enqueued_at=self.clock(),
            delay_ms=max(float(delay_ms), 0.0),
        )
        self._pending.append(entry)

        logger.debug("queued %s delay_ms=%.1f", entry, entry.delay_ms)
        return entry

    def queue_all(
        self,
        mutations: Iterable[NewMutation],
        delay: Optional[float] = None,
    ) -> List[Mutation]:
        return [self.queue_mutation(m, delay) for m in mutations]

    # ------------------------------------------------------------------
    # Consumer API
    # ------------------------------------------------------------------

    def pop_ready(self, now: Optional[float] = None) -> List[Mutation]:
        """
        Remove and return the longest FIFO prefix that is ready at `now`.
        """
        if now is None:
            now = self.clock()

        ready: List[Mutation] = []
        while True:
            mutation = self.pop_next(now)
            if mutation is None:
                break
            ready.append(mutation)

        if ready:
            logger.debug("released %s mutation(s), %s still pending", len(ready), len(self._pending))
        return ready

    def pop_next(self, now: Optional[float] = None) -> Optional[Mutation]:
        """
        Remove and return the head of the queue if it is ready at `now`.
        """
        if now is None:
            now = self.clock()
        if self._pending and self._pending[0].is_ready(now):
            return self._pending.popleft()
        return None

    def next_ready_in(self, now: Optional[float] = None) -> Optional[float]:
        """
        Seconds until the head of the queue is releasable, None when empty.
        """
        if not self._pending:
            return None
        if now is None:
            now = self.clock()
        return max(self._pending[0].ready_at - now, 0.0)

    def peek(self) -> Optional[Mutation]:
        return self._pending[0] if self._pending else None

    def pending(self) -> List[Mutation]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)
