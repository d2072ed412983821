from functools import lru_cache
import logging
import time

from flowcanvas.graph.graph_store import CanvasStore
from flowcanvas.graph.node_registry import NodeRegistry
from flowcanvas.mutations.mutation_queue import MutationQueue

from backend.app.config import AppConfig
from backend.app.services.canvas_service import CanvasService


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_canvas_store() -> CanvasStore:
    config = get_config()
    store = CanvasStore(history_limit=config.canvas.queue.history_limit)
    store.metadata["source"] = "backend"
    return store


@lru_cache
def get_mutation_queue() -> MutationQueue:
    return MutationQueue(config=get_config().canvas.queue)


@lru_cache
def get_node_registry() -> NodeRegistry:
    return NodeRegistry.default(get_config().canvas.ports)


@lru_cache
def get_canvas_service() -> CanvasService:
    logger = logging.getLogger("flowcanvas.startup")
    t0 = time.perf_counter()

    service = CanvasService(
        store=get_canvas_store(),
        queue=get_mutation_queue(),
        registry=get_node_registry(),
        config=get_config().canvas,
    )
    logger.info(
        "[startup] canvas service ready in %.3fs (nodes=%s)",
        time.perf_counter() - t0,
        service.store.node_count(),
    )
    return service
