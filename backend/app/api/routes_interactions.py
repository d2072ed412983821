from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from backend.app.api.schemas import (
    AppendNodeRequest,
    CloneNodeRequest,
    ConnectRequest,
    InsertNodeRequest,
    InteractionResponse,
    RemoveNodesRequest,
)
from backend.app.dependencies import get_canvas_service
from backend.app.services.canvas_service import (
    REFUSED_CONNECTION_MESSAGE,
    CanvasService,
    InteractionResult,
)

router = APIRouter()


def _found_or_404(result: Optional[InteractionResult], missing: str) -> InteractionResponse:
    if result is None:
        raise HTTPException(status_code=404, detail=missing)
    return _to_response(result)


def _to_response(result: InteractionResult) -> InteractionResponse:
    return InteractionResponse(
        node=result.node.to_dict() if result.node else None,
        queued=[m.to_dict() for m in result.queued],
        applied=[m.to_dict() for m in result.applied],
    )


@router.post("/append-node", response_model=InteractionResponse)
def append_node(
    request: AppendNodeRequest,
    service: CanvasService = Depends(get_canvas_service),
):
    result = service.append_node(
        request.node_type,
        from_node_id=request.from_node_id,
        from_port_id=request.from_port_id,
    )
    return _found_or_404(result, f"Node {request.from_node_id!r} not found")


@router.post("/insert-node", response_model=InteractionResponse)
def insert_node(
    request: InsertNodeRequest,
    service: CanvasService = Depends(get_canvas_service),
):
    result = service.insert_node(request.node_type, edge_id=request.edge_id)
    return _found_or_404(result, f"Edge {request.edge_id!r} not found")


@router.post("/remove-nodes", response_model=InteractionResponse)
def remove_nodes(
    request: RemoveNodesRequest,
    service: CanvasService = Depends(get_canvas_service),
):
    return _to_response(service.remove_nodes(request.node_ids))


@router.post("/connect", response_model=InteractionResponse)
def connect(
    request: ConnectRequest,
    service: CanvasService = Depends(get_canvas_service),
):
    result = service.connect(
        from_node_id=request.from_node_id,
        from_port_id=request.from_port_id,
        to_node_id=request.to_node_id,
        to_port_id=request.to_port_id,
    )
    if result is None:
        raise HTTPException(status_code=409, detail=REFUSED_CONNECTION_MESSAGE)
    return _to_response(result)


@router.post("/clone-node", response_model=InteractionResponse)
def clone_node(
    request: CloneNodeRequest,
    service: CanvasService = Depends(get_canvas_service),
):
    result = service.clone_node(request.node_id)
    return _found_or_404(result, f"Node {request.node_id!r} not found")
