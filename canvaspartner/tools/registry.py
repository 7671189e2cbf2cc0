"""Tool registry and round executor.

The registry is the only way a model-requested call reaches a handler.
It owns the boundary checks (known name, decodable arguments, valid
schema) and converts every failure, including timeouts, into a `failed`
ToolResult so a broken tool never aborts the turn.
"""

import asyncio
import json
import time
from typing import Any

from pydantic import BaseModel, ValidationError

from canvaspartner.observability.logging import get_logger
from canvaspartner.observability.metrics import TOOL_CALLS
from canvaspartner.providers.llm.base import ModelToolCall
from canvaspartner.tools.models import (
    ToolContext,
    ToolName,
    ToolResult,
    ToolSpec,
)

logger = get_logger(__name__)


def _inline_refs(schema: dict[str, Any]) -> dict[str, Any]:
    """Resolve local $ref pointers so the schema is self-contained."""
    definitions = schema.pop("$defs", {})

    def resolve(node: Any) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str) and ref.startswith("#/$defs/"):
                target = definitions.get(ref.removeprefix("#/$defs/"), {})
                merged = {**resolve(target), **{k: v for k, v in node.items() if k != "$ref"}}
                return merged
            return {key: resolve(value) for key, value in node.items()}
        if isinstance(node, list):
            return [resolve(item) for item in node]
        return node

    return resolve(schema)


def tool_parameters(model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema of a tool's input model, as sent to the model."""
    schema = _inline_refs(model.model_json_schema())
    schema.pop("title", None)
    schema.setdefault("properties", {})
    return schema


def format_validation_errors(error: ValidationError) -> list[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        messages.append(f"{location}: {item['msg']}")
    return messages


class ToolRegistry:
    """Closed mapping of ToolName to ToolSpec."""

    def __init__(self, timeout_seconds: float = 20.0) -> None:
        self._specs: dict[ToolName, ToolSpec] = {}
        self._timeout_seconds = timeout_seconds

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._specs:
            raise ValueError(f"Tool already registered: {spec.name.value}")
        self._specs[spec.name] = spec

    def get(self, name: str) -> ToolSpec | None:
        try:
            return self._specs.get(ToolName(name))
        except ValueError:
            return None

    @property
    def names(self) -> list[str]:
        return [name.value for name in self._specs]

    def is_mutating(self, name: str) -> bool:
        spec = self.get(name)
        return spec is not None and spec.mutates_canvas

    def declarations(self) -> list[dict[str, Any]]:
        """Function-tool declarations in the chat-completions format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": spec.name.value,
                    "description": spec.description,
                    "parameters": tool_parameters(spec.input_model),
                },
            }
            for spec in self._specs.values()
        ]

    async def execute(self, call: ModelToolCall, context: ToolContext) -> ToolResult:
        """Run one call. Never raises."""
        start = time.perf_counter()
        result = await self._execute(call, context)
        elapsed_ms = (time.perf_counter() - start) * 1000

        TOOL_CALLS.labels(tool=call.name, status=result.status.value).inc()
        logger.info(
            "tool_executed",
            tool=call.name,
            call_id=call.id,
            status=result.status.value,
            elapsed_ms=round(elapsed_ms, 1),
        )
        return result

    async def _execute(self, call: ModelToolCall, context: ToolContext) -> ToolResult:
        spec = self.get(call.name)
        if spec is None:
            logger.warning("tool_unknown", tool=call.name, call_id=call.id)
            return ToolResult.failed(f"Unknown tool: {call.name}")

        try:
            payload = json.loads(call.arguments) if call.arguments.strip() else {}
        except ValueError:
            return ToolResult.failed("Tool arguments are not valid JSON")
        if not isinstance(payload, dict):
            return ToolResult.failed("Tool arguments must be a JSON object")

        try:
            arguments = spec.input_model.model_validate(payload)
        except ValidationError as e:
            return ToolResult.failed(
                "Tool arguments failed validation",
                errors=format_validation_errors(e),
            )

        try:
            return await asyncio.wait_for(
                spec.handler(arguments, context),
                timeout=self._timeout_seconds,
            )
        except TimeoutError:
            logger.warning("tool_timeout", tool=call.name, timeout=self._timeout_seconds)
            return ToolResult.failed(f"Tool timed out after {self._timeout_seconds:g}s")
        except Exception as e:  # noqa: BLE001
            logger.exception("tool_failed", tool=call.name, call_id=call.id, error=str(e))
            return ToolResult.failed(f"Tool execution failed: {e}")

    async def execute_round(
        self, calls: list[ModelToolCall], context: ToolContext
    ) -> list[ToolResult]:
        """Execute every call of one model response.

        Read-only calls run concurrently. Canvas-mutating calls run one
        after another in the order the model issued them, and each
        successful one moves context.active_canvas_id before the next
        starts. Results come back in call order.
        """
        results: list[ToolResult | None] = [None] * len(calls)
        mutating = [(i, c) for i, c in enumerate(calls) if self.is_mutating(c.name)]
        read_only = [(i, c) for i, c in enumerate(calls) if not self.is_mutating(c.name)]

        async def run_read_only(index: int, call: ModelToolCall) -> None:
            results[index] = await self.execute(call, context)

        async def run_mutations() -> None:
            for index, call in mutating:
                result = await self.execute(call, context)
                if result.success and result.canvas_id is not None:
                    context.active_canvas_id = result.canvas_id
                results[index] = result

        await asyncio.gather(
            run_mutations(),
            *(run_read_only(index, call) for index, call in read_only),
        )
        return [result for result in results if result is not None]
