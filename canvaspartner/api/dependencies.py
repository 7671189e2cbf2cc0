"""Dependency injection for API routes.

Provides FastAPI dependencies for stores, providers and the turn
orchestrator. Instances are created once from settings and reused;
tests swap them with `app.dependency_overrides` or `reset_dependencies`.
"""

from typing import Annotated

from fastapi import Depends

from canvaspartner.canvas.store import CanvasStore
from canvaspartner.canvas.stores import InMemoryCanvasStore, PostgresCanvasStore
from canvaspartner.canvas.models import GeoPoint
from canvaspartner.config import get_settings
from canvaspartner.config.settings import Settings
from canvaspartner.conversation.store import MessageStore, SessionStore
from canvaspartner.conversation.stores import (
    InMemoryMessageStore,
    InMemorySessionStore,
    PostgresMessageStore,
    PostgresSessionStore,
)
from canvaspartner.db.pool import PostgresPool
from canvaspartner.observability.logging import get_logger
from canvaspartner.orchestration.orchestrator import TurnOrchestrator
from canvaspartner.providers.llm import LLMProvider, create_llm_provider
from canvaspartner.providers.search import SearchProvider, create_search_provider
from canvaspartner.tools import ToolRegistry, build_default_registry

logger = get_logger(__name__)

# Connection pool - shared across stores
_postgres_pool: PostgresPool | None = None

# Store and provider instances - created once and reused
_session_store: SessionStore | None = None
_message_store: MessageStore | None = None
_canvas_store: CanvasStore | None = None
_llm_provider: LLMProvider | None = None
_search_provider: SearchProvider | None = None
_tool_registry: ToolRegistry | None = None
_orchestrator: TurnOrchestrator | None = None


def _uses_postgres(settings: Settings) -> bool:
    return settings.storage.backend == "postgres"


async def get_postgres_pool() -> PostgresPool:
    """Get the shared PostgreSQL connection pool.

    Creates and connects the pool on first access. The DSN comes from
    CANVASPARTNER_DATABASE_URL or DATABASE_URL.
    """
    global _postgres_pool
    if _postgres_pool is None:
        pool = PostgresPool.from_config(get_settings().storage.postgres)
        await pool.connect()
        _postgres_pool = pool
        logger.info("postgres_pool_connected")
    return _postgres_pool


async def get_session_store() -> SessionStore:
    global _session_store
    if _session_store is None:
        settings = get_settings()
        if _uses_postgres(settings):
            _session_store = PostgresSessionStore(await get_postgres_pool())
        else:
            _session_store = InMemorySessionStore()
        logger.info("session_store_initialized", store_type=settings.storage.backend)
    return _session_store


async def get_message_store() -> MessageStore:
    global _message_store
    if _message_store is None:
        settings = get_settings()
        if _uses_postgres(settings):
            _message_store = PostgresMessageStore(await get_postgres_pool())
        else:
            _message_store = InMemoryMessageStore()
        logger.info("message_store_initialized", store_type=settings.storage.backend)
    return _message_store


async def get_canvas_store() -> CanvasStore:
    global _canvas_store
    if _canvas_store is None:
        settings = get_settings()
        if _uses_postgres(settings):
            _canvas_store = PostgresCanvasStore(await get_postgres_pool())
        else:
            _canvas_store = InMemoryCanvasStore()
        logger.info("canvas_store_initialized", store_type=settings.storage.backend)
    return _canvas_store


def get_llm_provider() -> LLMProvider:
    """Get the model provider configured under [providers.llm]."""
    global _llm_provider
    if _llm_provider is None:
        _llm_provider = create_llm_provider(get_settings().providers.llm)
    return _llm_provider


def get_search_provider() -> SearchProvider:
    global _search_provider
    if _search_provider is None:
        _search_provider = create_search_provider(get_settings().providers.search)
    return _search_provider


async def get_tool_registry() -> ToolRegistry:
    """Get the registry holding the canvas, location and search tools."""
    global _tool_registry
    if _tool_registry is None:
        agent = get_settings().agent
        _tool_registry = build_default_registry(
            await get_canvas_store(),
            get_search_provider(),
            default_location=GeoPoint(
                lat=agent.default_location.lat,
                lon=agent.default_location.lon,
            ),
            timeout_seconds=agent.tool_timeout_seconds,
        )
        logger.info("tool_registry_initialized", tools=_tool_registry.names)
    return _tool_registry


async def get_orchestrator() -> TurnOrchestrator:
    """Get the TurnOrchestrator wired to the configured stores and providers."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = TurnOrchestrator(
            session_store=await get_session_store(),
            message_store=await get_message_store(),
            provider=get_llm_provider(),
            registry=await get_tool_registry(),
            config=get_settings().agent,
        )
        logger.info("orchestrator_initialized")
    return _orchestrator


async def reset_dependencies() -> None:
    """Drop every cached instance and close the database pool."""
    global _postgres_pool, _session_store, _message_store, _canvas_store
    global _llm_provider, _search_provider, _tool_registry, _orchestrator

    if _postgres_pool is not None:
        await _postgres_pool.close()

    _postgres_pool = None
    _session_store = None
    _message_store = None
    _canvas_store = None
    _llm_provider = None
    _search_provider = None
    _tool_registry = None
    _orchestrator = None


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
MessageStoreDep = Annotated[MessageStore, Depends(get_message_store)]
CanvasStoreDep = Annotated[CanvasStore, Depends(get_canvas_store)]
OrchestratorDep = Annotated[TurnOrchestrator, Depends(get_orchestrator)]
