"""In-memory implementation of CanvasStore."""

from uuid import UUID

from canvaspartner.canvas.models import Canvas, CanvasBlock, utc_now
from canvaspartner.canvas.store import CanvasStore


class InMemoryCanvasStore(CanvasStore):
    """In-memory implementation of CanvasStore for testing and development.

    Uses simple dict storage with linear scan for queries.
    Not suitable for production use.
    """

    def __init__(self) -> None:
        self._canvases: dict[UUID, Canvas] = {}

    async def create(self, canvas: Canvas) -> Canvas:
        self._canvases[canvas.canvas_id] = canvas.model_copy(deep=True)
        return canvas

    async def get(self, canvas_id: UUID, owner_id: str) -> Canvas | None:
        canvas = self._canvases.get(canvas_id)
        if canvas is None or not canvas.is_owned_by(owner_id):
            return None
        return canvas.model_copy(deep=True)

    async def get_visible(self, canvas_id: UUID, user_id: str | None) -> Canvas | None:
        canvas = self._canvases.get(canvas_id)
        if canvas is None:
            return None
        if not canvas.is_public and (user_id is None or not canvas.is_owned_by(user_id)):
            return None
        return canvas.model_copy(deep=True)

    async def update_blocks(
        self, canvas_id: UUID, owner_id: str, blocks: list[CanvasBlock]
    ) -> Canvas | None:
        canvas = self._owned(canvas_id, owner_id)
        if canvas is None:
            return None
        canvas.blocks = list(blocks)
        canvas.updated_at = utc_now()
        return canvas.model_copy(deep=True)

    async def append_blocks(
        self, canvas_id: UUID, owner_id: str, blocks: list[CanvasBlock]
    ) -> Canvas | None:
        canvas = self._owned(canvas_id, owner_id)
        if canvas is None:
            return None
        canvas.blocks = [*canvas.blocks, *blocks]
        canvas.updated_at = utc_now()
        return canvas.model_copy(deep=True)

    async def set_visibility(
        self, canvas_id: UUID, owner_id: str, is_public: bool
    ) -> Canvas | None:
        canvas = self._owned(canvas_id, owner_id)
        if canvas is None:
            return None
        canvas.is_public = is_public
        canvas.updated_at = utc_now()
        return canvas.model_copy(deep=True)

    async def delete(self, canvas_id: UUID, owner_id: str) -> bool:
        if self._owned(canvas_id, owner_id) is None:
            return False
        del self._canvases[canvas_id]
        return True

    async def list_by_owner(self, owner_id: str, *, limit: int = 100) -> list[Canvas]:
        results = [c for c in self._canvases.values() if c.is_owned_by(owner_id)]
        results.sort(key=lambda c: c.updated_at, reverse=True)
        return [c.model_copy(deep=True) for c in results[:limit]]

    async def list_public(self, *, limit: int = 100) -> list[Canvas]:
        results = [c for c in self._canvases.values() if c.is_public]
        results.sort(key=lambda c: c.updated_at, reverse=True)
        return [c.model_copy(deep=True) for c in results[:limit]]

    def _owned(self, canvas_id: UUID, owner_id: str) -> Canvas | None:
        canvas = self._canvases.get(canvas_id)
        if canvas is None or not canvas.is_owned_by(owner_id):
            return None
        return canvas
