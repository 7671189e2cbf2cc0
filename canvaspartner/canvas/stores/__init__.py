"""Canvas store implementations."""

from canvaspartner.canvas.stores.inmemory import InMemoryCanvasStore
from canvaspartner.canvas.stores.postgres import PostgresCanvasStore

__all__ = ["InMemoryCanvasStore", "PostgresCanvasStore"]
