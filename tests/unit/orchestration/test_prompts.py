"""Tests for system instruction rendering."""

from uuid import uuid4

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.canvas.tags import CanvasTag
from canvaspartner.orchestration.prompts import (
    PARTNER_PROMPT,
    InstructionContext,
    build_instructions,
)


class TestBuildInstructions:
    def test_base_prompt_lists_every_tag(self) -> None:
        for tag in CanvasTag:
            assert f"- {tag.value}" in PARTNER_PROMPT

    def test_without_context_is_base_prompt(self) -> None:
        assert build_instructions(InstructionContext()) == PARTNER_PROMPT

    def test_active_canvas_section(self) -> None:
        canvas_id = uuid4()
        text = build_instructions(InstructionContext(active_canvas_id=canvas_id))

        assert "## Current canvas" in text
        assert str(canvas_id) in text
        assert "update_canvas" in text

    def test_location_section(self) -> None:
        text = build_instructions(InstructionContext(location=GeoPoint(lat=1.25, lon=-3.5)))

        assert "## User location" in text
        assert "1.25" in text and "-3.5" in text

    def test_is_deterministic(self) -> None:
        context = InstructionContext(active_canvas_id=uuid4(), location=GeoPoint(lat=0, lon=0))
        assert build_instructions(context) == build_instructions(context)
