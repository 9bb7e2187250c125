"""Tests for the geometry and visibility helpers."""

from section_cloner.dom import ComputedStyle
from section_cloner.geometry import (
    area,
    contains,
    has_image,
    is_significant,
    is_visible,
    overlap_ratio,
)
from section_cloner.models import BoundingBox

from conftest import el


class TestVisibility:
    def test_visible_block(self) -> None:
        assert is_visible(el("div", w=100, h=100))

    def test_hidden_styles(self) -> None:
        for style in (
            ComputedStyle(display="none"),
            ComputedStyle(visibility="hidden"),
            ComputedStyle(opacity=0),
        ):
            assert not is_visible(el("div", w=100, h=100, style=style))

    def test_zero_size_is_invisible(self) -> None:
        assert not is_visible(el("div", w=0, h=100))
        assert not is_visible(el("div", w=100, h=0))


class TestAreaAndContainment:
    def test_area(self) -> None:
        assert area(el("div", w=200, h=50)) == 10000

    def test_dom_containment_is_inclusive(self) -> None:
        inner = el("p", text="x")
        outer = el("div", children=[el("div", children=[inner])])

        assert contains(outer, inner)
        assert contains(inner, inner)
        assert not contains(inner, outer)


class TestOverlapRatio:
    def test_disjoint(self) -> None:
        a = BoundingBox(x=0, y=0, width=100, height=100)
        b = BoundingBox(x=0, y=200, width=100, height=100)
        assert overlap_ratio(a, b) == 0.0

    def test_nested_box_is_fully_overlapped(self) -> None:
        a = BoundingBox(x=0, y=0, width=100, height=100)
        b = BoundingBox(x=25, y=25, width=50, height=50)
        assert overlap_ratio(a, b) == 1.0

    def test_partial_overlap_relative_to_smaller(self) -> None:
        a = BoundingBox(x=0, y=0, width=100, height=100)
        b = BoundingBox(x=50, y=0, width=100, height=100)
        assert overlap_ratio(a, b) == 0.5

    def test_empty_box(self) -> None:
        a = BoundingBox(x=0, y=0, width=0, height=100)
        assert overlap_ratio(a, BoundingBox(width=10, height=10)) == 0.0


class TestSignificance:
    def test_text_block_is_significant(self) -> None:
        assert is_significant(el("div", w=300, h=80, text="Hello"))

    def test_container_without_text_is_significant(self) -> None:
        assert is_significant(el("div", w=300, h=80, children=[el("span", w=10, h=10)]))

    def test_empty_block_is_not(self) -> None:
        assert not is_significant(el("div", w=300, h=300))

    def test_small_block_is_not(self) -> None:
        assert not is_significant(el("div", w=49, h=300, text="narrow"))
        assert not is_significant(el("div", w=300, h=49, text="short"))

    def test_has_image(self) -> None:
        assert has_image(el("div", children=[el("div", children=[el("img")])]))
        assert has_image(el("img"))
        assert not has_image(el("div", text="text only"))
