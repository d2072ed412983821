from typing import List

from fastapi import APIRouter, Depends

from backend.app.api.schemas import (
    CanvasResponse,
    ReachabilityResponse,
    ValidationResponse,
    VariableModel,
)
from backend.app.dependencies import get_canvas_service
from backend.app.services.canvas_service import CanvasService

router = APIRouter()


@router.get("/", response_model=CanvasResponse)
def canvas_snapshot(service: CanvasService = Depends(get_canvas_service)):
    return service.dataset().to_dict()


@router.get("/variables", response_model=List[VariableModel])
def canvas_variables(service: CanvasService = Depends(get_canvas_service)):
    return [v.to_dict() for v in service.variables()]


@router.get("/validation", response_model=ValidationResponse)
def canvas_validation(service: CanvasService = Depends(get_canvas_service)):
    result = service.validate()
    return ValidationResponse(
        is_valid=result.is_valid,
        errors=result.errors,
        warnings=result.warnings,
    )


@router.get("/reachability", response_model=ReachabilityResponse)
def canvas_reachability(service: CanvasService = Depends(get_canvas_service)):
    return ReachabilityResponse(
        reachable=service.reachability(),
        from_start=service.reachable_from_start(),
    )
