"""Canvas endpoints.

Canvases are mostly written by the partner during chat; these endpoints
let the owner browse, edit, publish and delete them. Anyone may read a
public canvas.
"""

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from canvaspartner.api.dependencies import CanvasStoreDep
from canvaspartner.api.exceptions import CanvasNotFoundError, InvalidRequestError
from canvaspartner.api.middleware.auth import OptionalUserContextDep, UserContextDep
from canvaspartner.api.models.canvas import (
    CanvasListResponse,
    CanvasResponse,
    CanvasWriteRequest,
    VisibilityRequest,
)
from canvaspartner.api.models.errors import ErrorDetail
from canvaspartner.canvas.models import Canvas, CanvasBlock
from canvaspartner.canvas.tags import validate_blocks
from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _validated_blocks(request: CanvasWriteRequest) -> list[CanvasBlock]:
    validation = validate_blocks(request.blocks)
    if not validation.valid:
        raise InvalidRequestError(
            "Canvas blocks are invalid",
            details=[ErrorDetail(field="blocks", message=e) for e in validation.errors],
        )
    return validation.blocks


def _not_found(canvas_id: UUID) -> CanvasNotFoundError:
    return CanvasNotFoundError(f"Canvas {canvas_id} not found")


@router.get("/canvases/public", response_model=CanvasListResponse)
async def list_public_canvases(
    canvas_store: CanvasStoreDep,
    limit: int = Query(default=50, ge=1, le=100),
) -> CanvasListResponse:
    canvases = await canvas_store.list_public(limit=limit)
    return CanvasListResponse(canvases=[CanvasResponse.from_canvas(c) for c in canvases])


@router.get("/canvases/mine", response_model=CanvasListResponse)
async def list_my_canvases(
    user: UserContextDep,
    canvas_store: CanvasStoreDep,
    limit: int = Query(default=50, ge=1, le=100),
) -> CanvasListResponse:
    canvases = await canvas_store.list_by_owner(user.user_id, limit=limit)
    return CanvasListResponse(canvases=[CanvasResponse.from_canvas(c) for c in canvases])


@router.get("/canvases/{canvas_id}", response_model=CanvasResponse)
async def get_canvas(
    canvas_id: UUID,
    user: OptionalUserContextDep,
    canvas_store: CanvasStoreDep,
) -> CanvasResponse:
    """Get a canvas the caller owns, or any public canvas."""
    canvas = await canvas_store.get_visible(canvas_id, user.user_id if user else None)
    if canvas is None:
        raise _not_found(canvas_id)
    return CanvasResponse.from_canvas(canvas)


@router.post(
    "/canvases",
    response_model=CanvasResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_canvas(
    request: CanvasWriteRequest,
    user: UserContextDep,
    canvas_store: CanvasStoreDep,
) -> CanvasResponse:
    canvas = await canvas_store.create(
        Canvas(
            owner_id=user.user_id,
            blocks=_validated_blocks(request),
            location=request.location,
            is_public=request.is_public,
        )
    )
    logger.info("canvas_created", canvas_id=str(canvas.canvas_id), blocks=len(canvas.blocks))
    return CanvasResponse.from_canvas(canvas)


@router.put("/canvases/{canvas_id}", response_model=CanvasResponse)
async def replace_canvas(
    canvas_id: UUID,
    request: CanvasWriteRequest,
    user: UserContextDep,
    canvas_store: CanvasStoreDep,
) -> CanvasResponse:
    """Replace every block of an owned canvas."""
    canvas = await canvas_store.update_blocks(
        canvas_id, user.user_id, _validated_blocks(request)
    )
    if canvas is None:
        raise _not_found(canvas_id)
    logger.info("canvas_replaced", canvas_id=str(canvas_id), blocks=len(canvas.blocks))
    return CanvasResponse.from_canvas(canvas)


@router.patch("/canvases/{canvas_id}/visibility", response_model=CanvasResponse)
async def set_canvas_visibility(
    canvas_id: UUID,
    request: VisibilityRequest,
    user: UserContextDep,
    canvas_store: CanvasStoreDep,
) -> CanvasResponse:
    canvas = await canvas_store.set_visibility(canvas_id, user.user_id, request.is_public)
    if canvas is None:
        raise _not_found(canvas_id)
    logger.info("canvas_visibility_changed", canvas_id=str(canvas_id), is_public=request.is_public)
    return CanvasResponse.from_canvas(canvas)


@router.delete("/canvases/{canvas_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_canvas(
    canvas_id: UUID,
    user: UserContextDep,
    canvas_store: CanvasStoreDep,
) -> Response:
    if not await canvas_store.delete(canvas_id, user.user_id):
        raise _not_found(canvas_id)
    logger.info("canvas_deleted", canvas_id=str(canvas_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
