"""Business Model Canvas domain: tags, blocks, canvases and their storage."""

from canvaspartner.canvas.models import Canvas, CanvasBlock, GeoPoint
from canvaspartner.canvas.store import CanvasStore
from canvaspartner.canvas.tags import (
    CANONICAL_TAGS,
    BlockValidation,
    CanvasTag,
    normalize_blocks,
    normalize_tag,
    validate_blocks,
)

__all__ = [
    "CANONICAL_TAGS",
    "BlockValidation",
    "Canvas",
    "CanvasBlock",
    "CanvasStore",
    "CanvasTag",
    "GeoPoint",
    "normalize_blocks",
    "normalize_tag",
    "validate_blocks",
]
