"""Tests for ToolRegistry and round execution."""

import asyncio
import json
from uuid import uuid4

import pytest
from pydantic import BaseModel

from canvaspartner.providers.llm import mock_tool_call
from canvaspartner.tools import ToolContext, ToolName, ToolRegistry, ToolResult, ToolSpec, ToolStatus


class EchoArgs(BaseModel):
    text: str


def _context() -> ToolContext:
    return ToolContext(user_id="user-1", session_id="s-1")


def _spec(name: ToolName, handler, *, mutates: bool = False) -> ToolSpec:
    return ToolSpec(
        name=name,
        description=f"{name.value} for tests",
        input_model=EchoArgs,
        handler=handler,
        mutates_canvas=mutates,
    )


async def _echo(args: EchoArgs, ctx: ToolContext) -> ToolResult:
    return ToolResult(status=ToolStatus.SUCCESS, message=args.text)


@pytest.fixture
def echo_registry() -> ToolRegistry:
    registry = ToolRegistry(timeout_seconds=0.2)
    registry.register(_spec(ToolName.SEARCH_WEB, _echo))
    return registry


class TestRegistration:
    def test_duplicate_registration_is_rejected(self, echo_registry: ToolRegistry) -> None:
        with pytest.raises(ValueError, match="already registered"):
            echo_registry.register(_spec(ToolName.SEARCH_WEB, _echo))

    def test_get_unknown_name(self, echo_registry: ToolRegistry) -> None:
        assert echo_registry.get("delete_everything") is None

    def test_declarations_are_function_tools(self, registry: ToolRegistry) -> None:
        declarations = registry.declarations()
        names = [d["function"]["name"] for d in declarations]

        assert sorted(names) == sorted(t.value for t in ToolName)
        for declaration in declarations:
            assert declaration["type"] == "function"
            parameters = declaration["function"]["parameters"]
            assert parameters["type"] == "object"
            assert "$defs" not in json.dumps(parameters)

    def test_create_canvas_schema_lists_tags(self, registry: ToolRegistry) -> None:
        declaration = next(
            d for d in registry.declarations() if d["function"]["name"] == "create_canvas"
        )
        blocks = declaration["function"]["parameters"]["properties"]["blocks"]
        assert "customer_segments" in blocks["items"]["properties"]["tag"]["enum"]

    def test_only_canvas_tools_mutate(self, registry: ToolRegistry) -> None:
        assert registry.is_mutating("create_canvas")
        assert registry.is_mutating("update_canvas")
        assert not registry.is_mutating("search_web")
        assert not registry.is_mutating("unknown")


class TestExecute:
    """Every failure becomes a failed result."""

    @pytest.mark.asyncio
    async def test_valid_call(self, echo_registry: ToolRegistry) -> None:
        result = await echo_registry.execute(
            mock_tool_call("search_web", {"text": "hello"}), _context()
        )
        assert result.status == ToolStatus.SUCCESS
        assert result.message == "hello"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, echo_registry: ToolRegistry) -> None:
        result = await echo_registry.execute(mock_tool_call("launch_rocket", {}), _context())
        assert result.status == ToolStatus.FAILED
        assert result.message == "Unknown tool: launch_rocket"

    @pytest.mark.asyncio
    async def test_invalid_json(self, echo_registry: ToolRegistry) -> None:
        result = await echo_registry.execute(
            mock_tool_call("search_web", "{not json"), _context()
        )
        assert result.status == ToolStatus.FAILED
        assert result.message == "Tool arguments are not valid JSON"

    @pytest.mark.asyncio
    async def test_non_object_arguments(self, echo_registry: ToolRegistry) -> None:
        result = await echo_registry.execute(mock_tool_call("search_web", "[1]"), _context())
        assert result.message == "Tool arguments must be a JSON object"

    @pytest.mark.asyncio
    async def test_schema_violation_lists_errors(self, echo_registry: ToolRegistry) -> None:
        result = await echo_registry.execute(mock_tool_call("search_web", {}), _context())

        assert result.status == ToolStatus.FAILED
        assert result.message == "Tool arguments failed validation"
        assert result.errors and result.errors[0].startswith("text:")

    @pytest.mark.asyncio
    async def test_handler_exception(self) -> None:
        async def boom(args: EchoArgs, ctx: ToolContext) -> ToolResult:
            raise RuntimeError("disk on fire")

        registry = ToolRegistry()
        registry.register(_spec(ToolName.SEARCH_WEB, boom))

        result = await registry.execute(mock_tool_call("search_web", {"text": "x"}), _context())

        assert result.status == ToolStatus.FAILED
        assert result.message == "Tool execution failed: disk on fire"

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        async def slow(args: EchoArgs, ctx: ToolContext) -> ToolResult:
            await asyncio.sleep(5)
            return ToolResult(status=ToolStatus.SUCCESS)

        registry = ToolRegistry(timeout_seconds=0.05)
        registry.register(_spec(ToolName.SEARCH_WEB, slow))

        result = await registry.execute(mock_tool_call("search_web", {"text": "x"}), _context())

        assert result.status == ToolStatus.FAILED
        assert result.message == "Tool timed out after 0.05s"


class TestExecuteRound:
    @pytest.mark.asyncio
    async def test_results_follow_call_order(self) -> None:
        async def slow_echo(args: EchoArgs, ctx: ToolContext) -> ToolResult:
            await asyncio.sleep(0.02)
            return ToolResult(status=ToolStatus.SUCCESS, message=args.text)

        registry = ToolRegistry()
        registry.register(_spec(ToolName.SEARCH_WEB, slow_echo))
        registry.register(_spec(ToolName.GET_USER_LOCATION, _echo))

        results = await registry.execute_round(
            [
                mock_tool_call("search_web", {"text": "first"}),
                mock_tool_call("get_user_location", {"text": "second"}),
                mock_tool_call("search_web", {"text": "third"}),
            ],
            _context(),
        )

        assert [r.message for r in results] == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_mutations_are_sequential_and_advance_canvas(self) -> None:
        created = uuid4()
        seen: list[object] = []
        running = 0

        async def create(args: EchoArgs, ctx: ToolContext) -> ToolResult:
            nonlocal running
            running += 1
            assert running == 1
            seen.append(ctx.active_canvas_id)
            await asyncio.sleep(0.01)
            running -= 1
            return ToolResult(status=ToolStatus.SUCCESS, canvas_id=created)

        registry = ToolRegistry()
        registry.register(_spec(ToolName.CREATE_CANVAS, create, mutates=True))
        registry.register(_spec(ToolName.UPDATE_CANVAS, create, mutates=True))
        context = _context()

        await registry.execute_round(
            [
                mock_tool_call("create_canvas", {"text": "a"}),
                mock_tool_call("update_canvas", {"text": "b"}),
            ],
            context,
        )

        assert seen == [None, created]
        assert context.active_canvas_id == created

    @pytest.mark.asyncio
    async def test_failed_mutation_leaves_canvas_unchanged(self) -> None:
        async def fail(args: EchoArgs, ctx: ToolContext) -> ToolResult:
            return ToolResult.failed("nope")

        registry = ToolRegistry()
        registry.register(_spec(ToolName.CREATE_CANVAS, fail, mutates=True))
        context = _context()

        await registry.execute_round([mock_tool_call("create_canvas", {"text": "a"})], context)

        assert context.active_canvas_id is None

    @pytest.mark.asyncio
    async def test_unknown_tool_in_round_gets_failed_result(self, echo_registry) -> None:
        results = await echo_registry.execute_round(
            [mock_tool_call("nope", {}), mock_tool_call("search_web", {"text": "ok"})],
            _context(),
        )
        assert [r.status for r in results] == [ToolStatus.FAILED, ToolStatus.SUCCESS]
