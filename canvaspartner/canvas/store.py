"""CanvasStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from canvaspartner.canvas.models import Canvas, CanvasBlock


class CanvasStore(ABC):
    """Abstract interface for canvas storage.

    Owner-scoped lookups return None for canvases that exist but belong
    to someone else, so callers cannot tell the two cases apart.
    """

    @abstractmethod
    async def create(self, canvas: Canvas) -> Canvas:
        """Persist a new canvas."""
        pass

    @abstractmethod
    async def get(self, canvas_id: UUID, owner_id: str) -> Canvas | None:
        """Get a canvas owned by owner_id."""
        pass

    @abstractmethod
    async def get_visible(self, canvas_id: UUID, user_id: str | None) -> Canvas | None:
        """Get a canvas that is public or owned by user_id."""
        pass

    @abstractmethod
    async def update_blocks(
        self, canvas_id: UUID, owner_id: str, blocks: list[CanvasBlock]
    ) -> Canvas | None:
        """Replace every block of an owned canvas."""
        pass

    @abstractmethod
    async def append_blocks(
        self, canvas_id: UUID, owner_id: str, blocks: list[CanvasBlock]
    ) -> Canvas | None:
        """Add blocks after the existing ones of an owned canvas."""
        pass

    @abstractmethod
    async def set_visibility(
        self, canvas_id: UUID, owner_id: str, is_public: bool
    ) -> Canvas | None:
        """Publish or unpublish an owned canvas."""
        pass

    @abstractmethod
    async def delete(self, canvas_id: UUID, owner_id: str) -> bool:
        """Delete an owned canvas."""
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: str, *, limit: int = 100) -> list[Canvas]:
        """List a user's canvases, most recently updated first."""
        pass

    @abstractmethod
    async def list_public(self, *, limit: int = 100) -> list[Canvas]:
        """List public canvases, most recently updated first."""
        pass
