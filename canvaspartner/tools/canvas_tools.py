"""Tools that write the Business Model Canvas.

Both tools scope every read and write to the requesting user. Blocks are
normalized and validated item by item; invalid items are reported back to
the model while the valid ones are still saved.
"""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from canvaspartner.canvas.models import Canvas, GeoPoint
from canvaspartner.canvas.store import CanvasStore
from canvaspartner.canvas.tags import CANONICAL_TAGS, BlockValidation, validate_blocks
from canvaspartner.observability.logging import get_logger
from canvaspartner.tools.models import (
    ToolContext,
    ToolName,
    ToolResult,
    ToolSpec,
    ToolStatus,
)

logger = get_logger(__name__)

_BLOCK_ITEMS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "tag": {
            "type": "string",
            "enum": sorted(CANONICAL_TAGS),
            "description": "Building block the entry belongs to, in snake_case",
        },
        "content": {
            "type": "string",
            "description": "What the user said about this building block",
        },
    },
    "required": ["tag", "content"],
}


class CreateCanvasArgs(BaseModel):
    blocks: list[Any] = Field(
        ...,
        description="Canvas entries, each with a tag and content",
        json_schema_extra={"items": _BLOCK_ITEMS_SCHEMA},
    )
    location: GeoPoint | None = Field(
        default=None, description="Where the business operates, if known"
    )


class UpdateCanvasArgs(BaseModel):
    canvas_id: str = Field(..., description="Id of the canvas to update")
    blocks: list[Any] = Field(
        ...,
        description="Canvas entries, each with a tag and content",
        json_schema_extra={"items": _BLOCK_ITEMS_SCHEMA},
    )
    mode: Literal["replace", "append"] = Field(
        default="replace",
        description="replace: the blocks become the whole canvas; append: add them",
    )


def _outcome(
    canvas: Canvas,
    validation: BlockValidation,
    saved_message: str,
) -> ToolResult:
    if validation.errors:
        return ToolResult(
            status=ToolStatus.PARTIAL_ERROR,
            message=f"{saved_message} Some entries were rejected.",
            canvas_id=canvas.canvas_id,
            system_note=(
                "Only the valid entries were saved. Ask the user to clarify the "
                "rejected ones if they matter."
            ),
            errors=validation.errors,
            data={"saved_blocks": len(validation.blocks)},
        )
    return ToolResult(
        status=ToolStatus.SUCCESS,
        message=saved_message,
        canvas_id=canvas.canvas_id,
        system_note=(
            f"Canvas saved. Use canvas_id {canvas.canvas_id} with update_canvas "
            "for further changes in this conversation."
        ),
        data={"saved_blocks": len(validation.blocks)},
    )


def build_canvas_tools(store: CanvasStore, default_location: GeoPoint) -> list[ToolSpec]:
    """Create the canvas-mutating tool specs bound to a store."""

    async def create_canvas(args: CreateCanvasArgs, ctx: ToolContext) -> ToolResult:
        validation = validate_blocks(args.blocks)
        if not validation.blocks:
            return ToolResult.failed(
                "No valid canvas entries were provided",
                errors=validation.errors,
            )

        # One canvas per session: later creates extend the active one
        if ctx.active_canvas_id is not None:
            canvas = await store.append_blocks(
                ctx.active_canvas_id, ctx.user_id, validation.blocks
            )
            if canvas is not None:
                logger.info(
                    "canvas_create_redirected",
                    canvas_id=str(canvas.canvas_id),
                    block_count=len(validation.blocks),
                )
                return _outcome(canvas, validation, "Entries added to the session's canvas.")
            logger.warning(
                "active_canvas_missing",
                canvas_id=str(ctx.active_canvas_id),
            )

        canvas = await store.create(
            Canvas(
                owner_id=ctx.user_id,
                session_id=ctx.session_id,
                blocks=validation.blocks,
                location=args.location or ctx.location or default_location,
            )
        )
        return _outcome(canvas, validation, "Canvas created.")

    async def update_canvas(args: UpdateCanvasArgs, ctx: ToolContext) -> ToolResult:
        try:
            canvas_id = UUID(args.canvas_id)
        except ValueError:
            return ToolResult.failed(f"Malformed canvas id: {args.canvas_id}")

        validation = validate_blocks(args.blocks)
        if not validation.blocks:
            return ToolResult.failed(
                "No valid canvas entries were provided",
                errors=validation.errors,
            )

        if args.mode == "append":
            canvas = await store.append_blocks(canvas_id, ctx.user_id, validation.blocks)
        else:
            canvas = await store.update_blocks(canvas_id, ctx.user_id, validation.blocks)

        if canvas is None:
            return ToolResult(
                status=ToolStatus.NOT_FOUND,
                message=f"Canvas {canvas_id} was not found",
                system_note="Do not retry with this id. Create a canvas instead if needed.",
            )
        return _outcome(canvas, validation, "Canvas updated.")

    return [
        ToolSpec(
            name=ToolName.CREATE_CANVAS,
            description=(
                "Save Business Model Canvas entries the user has described. Call "
                "this once the user has shared concrete details about at least one "
                "building block. Each entry needs a tag and content, for example "
                '{"tag": "customer_segments", "content": "Young professionals aged 25-35"}.'
            ),
            input_model=CreateCanvasArgs,
            handler=create_canvas,
            mutates_canvas=True,
        ),
        ToolSpec(
            name=ToolName.UPDATE_CANVAS,
            description=(
                "Change an existing canvas. Use the canvas_id returned by "
                "create_canvas or given in the instructions. mode 'replace' "
                "overwrites every entry, 'append' adds new entries."
            ),
            input_model=UpdateCanvasArgs,
            handler=update_canvas,
            mutates_canvas=True,
        ),
    ]
