"""PostgreSQL implementation of CanvasStore."""

import json
from typing import Any
from uuid import UUID

import asyncpg

from canvaspartner.canvas.models import Canvas, CanvasBlock, GeoPoint
from canvaspartner.canvas.store import CanvasStore
from canvaspartner.db.errors import ConnectionError
from canvaspartner.db.pool import PostgresPool
from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = "canvas_id, owner_id, session_id, blocks, location, is_public, created_at, updated_at"


def _blocks_json(blocks: list[CanvasBlock]) -> str:
    return json.dumps([block.model_dump(mode="json") for block in blocks])


def _row_to_canvas(row: asyncpg.Record) -> Canvas:
    data: dict[str, Any] = dict(row)
    blocks = data["blocks"]
    if isinstance(blocks, str):
        blocks = json.loads(blocks)
    location = data["location"]
    if isinstance(location, str):
        location = json.loads(location)
    data["blocks"] = [CanvasBlock.model_validate(b) for b in blocks or []]
    data["location"] = GeoPoint.model_validate(location) if location else None
    return Canvas.model_validate(data)


class PostgresCanvasStore(CanvasStore):
    """Canvases in the `canvases` table, blocks kept as a JSONB array."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def create(self, canvas: Canvas) -> Canvas:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO canvases ({_COLUMNS})
                    VALUES ($1, $2, $3, $4::jsonb, $5::jsonb, $6, $7, $8)
                    """,
                    canvas.canvas_id,
                    canvas.owner_id,
                    canvas.session_id,
                    _blocks_json(canvas.blocks),
                    canvas.location.model_dump_json() if canvas.location else None,
                    canvas.is_public,
                    canvas.created_at,
                    canvas.updated_at,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_canvas_create_error", canvas_id=str(canvas.canvas_id), error=str(e))
            raise ConnectionError(f"Failed to create canvas: {e}", cause=e) from e

        logger.info(
            "canvas_created",
            canvas_id=str(canvas.canvas_id),
            block_count=len(canvas.blocks),
        )
        return canvas

    async def get(self, canvas_id: UUID, owner_id: str) -> Canvas | None:
        return await self._fetch_one(
            f"SELECT {_COLUMNS} FROM canvases WHERE canvas_id = $1 AND owner_id = $2",
            canvas_id,
            owner_id,
        )

    async def get_visible(self, canvas_id: UUID, user_id: str | None) -> Canvas | None:
        return await self._fetch_one(
            f"""
            SELECT {_COLUMNS} FROM canvases
            WHERE canvas_id = $1 AND (is_public OR owner_id = $2)
            """,
            canvas_id,
            user_id,
        )

    async def update_blocks(
        self, canvas_id: UUID, owner_id: str, blocks: list[CanvasBlock]
    ) -> Canvas | None:
        return await self._fetch_one(
            f"""
            UPDATE canvases SET blocks = $3::jsonb, updated_at = NOW()
            WHERE canvas_id = $1 AND owner_id = $2
            RETURNING {_COLUMNS}
            """,
            canvas_id,
            owner_id,
            _blocks_json(blocks),
        )

    async def append_blocks(
        self, canvas_id: UUID, owner_id: str, blocks: list[CanvasBlock]
    ) -> Canvas | None:
        return await self._fetch_one(
            f"""
            UPDATE canvases SET blocks = blocks || $3::jsonb, updated_at = NOW()
            WHERE canvas_id = $1 AND owner_id = $2
            RETURNING {_COLUMNS}
            """,
            canvas_id,
            owner_id,
            _blocks_json(blocks),
        )

    async def set_visibility(
        self, canvas_id: UUID, owner_id: str, is_public: bool
    ) -> Canvas | None:
        return await self._fetch_one(
            f"""
            UPDATE canvases SET is_public = $3, updated_at = NOW()
            WHERE canvas_id = $1 AND owner_id = $2
            RETURNING {_COLUMNS}
            """,
            canvas_id,
            owner_id,
            is_public,
        )

    async def delete(self, canvas_id: UUID, owner_id: str) -> bool:
        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(
                    "DELETE FROM canvases WHERE canvas_id = $1 AND owner_id = $2",
                    canvas_id,
                    owner_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_canvas_delete_error", canvas_id=str(canvas_id), error=str(e))
            raise ConnectionError(f"Failed to delete canvas: {e}", cause=e) from e

        deleted = result.split()[-1] == "1"
        logger.info("canvas_deleted", canvas_id=str(canvas_id), deleted=deleted)
        return deleted

    async def list_by_owner(self, owner_id: str, *, limit: int = 100) -> list[Canvas]:
        return await self._fetch_many(
            f"""
            SELECT {_COLUMNS} FROM canvases
            WHERE owner_id = $1
            ORDER BY updated_at DESC
            LIMIT $2
            """,
            owner_id,
            limit,
        )

    async def list_public(self, *, limit: int = 100) -> list[Canvas]:
        return await self._fetch_many(
            f"""
            SELECT {_COLUMNS} FROM canvases
            WHERE is_public
            ORDER BY updated_at DESC
            LIMIT $1
            """,
            limit,
        )

    async def _fetch_one(self, query: str, *args: Any) -> Canvas | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(query, *args)
        except asyncpg.PostgresError as e:
            logger.error("postgres_canvas_query_error", error=str(e))
            raise ConnectionError(f"Canvas query failed: {e}", cause=e) from e
        return _row_to_canvas(row) if row else None

    async def _fetch_many(self, query: str, *args: Any) -> list[Canvas]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
        except asyncpg.PostgresError as e:
            logger.error("postgres_canvas_query_error", error=str(e))
            raise ConnectionError(f"Canvas query failed: {e}", cause=e) from e
        return [_row_to_canvas(row) for row in rows]
