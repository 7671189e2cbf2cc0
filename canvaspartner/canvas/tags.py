"""Canvas block tags and their normalization.

Models write tags loosely ("CustomerSegments", "Key Partnerships",
"VALUE_PROPOSITIONS"). Everything that reaches validation or storage goes
through normalize_tag first so only the canonical snake_case names persist.
"""

import re
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[\s\-]+")


class CanvasTag(str, Enum):
    """The nine Business Model Canvas building blocks."""

    CUSTOMER_SEGMENTS = "customer_segments"
    VALUE_PROPOSITIONS = "value_propositions"
    CHANNELS = "channels"
    CUSTOMER_RELATIONSHIPS = "customer_relationships"
    REVENUE_STREAMS = "revenue_streams"
    KEY_RESOURCES = "key_resources"
    KEY_ACTIVITIES = "key_activities"
    KEY_PARTNERSHIPS = "key_partnerships"
    COST_STRUCTURE = "cost_structure"


CANONICAL_TAGS: frozenset[str] = frozenset(tag.value for tag in CanvasTag)


def normalize_tag(tag: Any) -> Any:
    """Return the canonical form of a tag, or the tag unchanged.

    The result is always either a member of CANONICAL_TAGS or the exact
    input, which makes the function idempotent.
    """
    if not isinstance(tag, str) or not tag:
        return tag

    candidate = _CAMEL_BOUNDARY.sub(r"\1_\2", tag.strip())
    candidate = _SEPARATORS.sub("_", candidate).lower()

    return candidate if candidate in CANONICAL_TAGS else tag


def normalize_blocks(items: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Copy block dicts with their tags normalized."""
    return [{**item, "tag": normalize_tag(item.get("tag"))} for item in items]


class BlockValidation(BaseModel):
    """Outcome of validate_blocks."""

    blocks: list[Any] = Field(default_factory=list, description="Valid CanvasBlock items")
    errors: list[str] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors and bool(self.blocks)


def validate_blocks(items: Any) -> BlockValidation:
    """Validate raw block items, keeping the valid ones.

    Every rejected item contributes one error naming its index, so a
    partially valid list can still be written.
    """
    from canvaspartner.canvas.models import CanvasBlock

    if not isinstance(items, list):
        return BlockValidation(errors=["Canvas blocks must be a list"])
    if not items:
        return BlockValidation(errors=["Canvas blocks cannot be empty"])

    result = BlockValidation()
    for index, item in enumerate(items):
        if isinstance(item, BaseModel):
            item = item.model_dump()
        if not isinstance(item, Mapping):
            result.errors.append(f"Item at index {index} must be an object")
            continue

        tag = item.get("tag")
        content = item.get("content")
        item_errors: list[str] = []

        if not tag:
            item_errors.append(f"Item at index {index} is missing tag")
        elif normalize_tag(tag) not in CANONICAL_TAGS:
            item_errors.append(f"Item at index {index} has invalid tag: {tag}")

        if content is None or content == "":
            item_errors.append(f"Item at index {index} is missing content")
        elif not isinstance(content, str):
            item_errors.append(f"Item at index {index} content must be a string")
        elif not content.strip():
            item_errors.append(f"Item at index {index} content cannot be empty")

        if item_errors:
            result.errors.extend(item_errors)
        else:
            result.blocks.append(CanvasBlock(tag=normalize_tag(tag), content=content.strip()))

    return result
