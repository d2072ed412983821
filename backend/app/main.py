from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from flowcanvas.errors import FlowCanvasError, UnknownNodeTypeError

from backend.app.config import AppConfig
from backend.app.api.routes_canvas import router as canvas_router
from backend.app.api.routes_mutations import router as mutations_router
from backend.app.api.routes_interactions import router as interactions_router
from backend.app.dependencies import get_canvas_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    Builds the canvas (and seeds its start node) once at startup.
    """
    # Force initialization
    get_canvas_service()

    yield


async def _unknown_node_type(request: Request, exc: UnknownNodeTypeError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _canvas_error(request: Request, exc: FlowCanvasError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    # Most specific handler first
    app.add_exception_handler(UnknownNodeTypeError, _unknown_node_type)
    app.add_exception_handler(FlowCanvasError, _canvas_error)

    app.include_router(
        canvas_router,
        prefix=f"{config.api_prefix}/canvas",
        tags=["canvas"],
    )

    app.include_router(
        mutations_router,
        prefix=f"{config.api_prefix}/mutations",
        tags=["mutations"],
    )

    app.include_router(
        interactions_router,
        prefix=f"{config.api_prefix}/interactions",
        tags=["interactions"],
    )

    return app


config = AppConfig()
app = create_app(config)
