from typing import List

from fastapi import APIRouter, Depends

from flowcanvas.mutations.mutation_schema import NewMutation

from backend.app.api.schemas import MutationRequest, MutationResponse
from backend.app.dependencies import get_canvas_service
from backend.app.services.canvas_service import CanvasService

router = APIRouter()


@router.post("/", response_model=MutationResponse)
def queue_mutation(
    request: MutationRequest,
    service: CanvasService = Depends(get_canvas_service),
):
    mutation = service.queue_mutation(
        NewMutation(
            element_id=request.element_id,
            element_type=request.element_type,
            operation_type=request.operation_type,
            changes=request.changes,
        ),
        request.delay_ms,
    )
    return mutation.to_dict()


@router.post("/drain", response_model=List[MutationResponse])
def drain_mutations(service: CanvasService = Depends(get_canvas_service)):
    return [m.to_dict() for m in service.drain()]


@router.get("/pending", response_model=List[MutationResponse])
def pending_mutations(service: CanvasService = Depends(get_canvas_service)):
    return [m.to_dict() for m in service.queue.pending()]


@router.get("/history", response_model=List[MutationResponse])
def mutation_history(service: CanvasService = Depends(get_canvas_service), limit: int = 50):
    return [m.to_dict() for m in service.store.history()[-limit:]]
