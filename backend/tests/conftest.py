from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.dependencies import get_canvas_service
from backend.app.services.canvas_service import CanvasService

from flowcanvas.config.settings import FlowCanvasConfig
from flowcanvas.graph.graph_store import CanvasStore
from flowcanvas.graph.node_registry import NodeRegistry
from flowcanvas.mutations.mutation_queue import MutationQueue


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.advance(seconds)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> CanvasStore:
    return CanvasStore()


@pytest.fixture()
def queue(clock: FakeClock) -> MutationQueue:
    return MutationQueue(clock=clock)


@pytest.fixture()
def registry() -> NodeRegistry:
    return NodeRegistry.default()


@pytest.fixture()
def service(store: CanvasStore, queue: MutationQueue, registry: NodeRegistry) -> CanvasService:
    return CanvasService(
        store=store,
        queue=queue,
        registry=registry,
        config=FlowCanvasConfig(),
    )


@pytest.fixture()
def client(service: CanvasService):
    @asynccontextmanager
    async def _no_lifespan(_: FastAPI):
        yield

    app = create_app(AppConfig())
    app.router.lifespan_context = _no_lifespan

    app.dependency_overrides[get_canvas_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
