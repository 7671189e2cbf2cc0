"""Tools the planning partner can call, and the registry that runs them."""

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.canvas.store import CanvasStore
from canvaspartner.providers.search.base import SearchProvider
from canvaspartner.tools.canvas_tools import build_canvas_tools
from canvaspartner.tools.models import (
    ToolContext,
    ToolName,
    ToolResult,
    ToolSpec,
    ToolStatus,
)
from canvaspartner.tools.registry import ToolRegistry
from canvaspartner.tools.search_tools import build_location_tools, build_search_tools


def build_default_registry(
    canvas_store: CanvasStore,
    search_provider: SearchProvider,
    *,
    default_location: GeoPoint,
    timeout_seconds: float = 20.0,
) -> ToolRegistry:
    """Registry with every tool in ToolName registered."""
    registry = ToolRegistry(timeout_seconds=timeout_seconds)
    for spec in (
        *build_canvas_tools(canvas_store, default_location),
        *build_location_tools(default_location),
        *build_search_tools(search_provider),
    ):
        registry.register(spec)
    return registry


__all__ = [
    "ToolContext",
    "ToolName",
    "ToolRegistry",
    "ToolResult",
    "ToolSpec",
    "ToolStatus",
    "build_default_registry",
]
