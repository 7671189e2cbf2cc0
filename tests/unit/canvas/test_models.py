"""Tests for canvas domain models."""

import pytest
from pydantic import ValidationError

from canvaspartner.canvas.models import Canvas, CanvasBlock, GeoPoint
from canvaspartner.canvas.tags import CanvasTag


class TestCanvasBlock:
    def test_tag_is_normalized_on_construction(self) -> None:
        block = CanvasBlock(tag="Value Propositions", content="Fresh food")
        assert block.tag is CanvasTag.VALUE_PROPOSITIONS

    def test_unknown_tag_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CanvasBlock(tag="marketing", content="Flyers")

    def test_empty_content_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CanvasBlock(tag="channels", content="")


class TestGeoPoint:
    def test_rejects_out_of_range_latitude(self) -> None:
        with pytest.raises(ValidationError):
            GeoPoint(lat=91, lon=0)


class TestCanvas:
    def test_defaults(self) -> None:
        canvas = Canvas(owner_id="user-1")
        assert canvas.blocks == []
        assert canvas.is_public is False
        assert canvas.is_owned_by("user-1")
        assert not canvas.is_owned_by("user-2")

    def test_blocks_by_tag_groups_in_canonical_order(self) -> None:
        canvas = Canvas(
            owner_id="user-1",
            blocks=[
                CanvasBlock(tag="cost_structure", content="Rent"),
                CanvasBlock(tag="customer_segments", content="Students"),
                CanvasBlock(tag="cost_structure", content="Salaries"),
            ],
        )

        grouped = canvas.blocks_by_tag()

        assert list(grouped) == [CanvasTag.CUSTOMER_SEGMENTS, CanvasTag.COST_STRUCTURE]
        assert grouped[CanvasTag.COST_STRUCTURE] == ["Rent", "Salaries"]
