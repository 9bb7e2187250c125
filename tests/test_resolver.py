"""Tests for overlap resolution between flattened candidates."""

from section_cloner.dom import ComputedStyle
from section_cloner.geometry import area
from section_cloner.resolver import is_overlay, is_section_worthy, resolve
from section_cloner.segmenter import find_sections

from conftest import el, page


def _assert_no_redundant_nesting(sections, ratio=0.6):
    for outer in sections:
        for inner in sections:
            if outer is inner:
                continue
            if outer.contains(inner):
                assert area(inner) <= ratio * area(outer)


class TestSectionWorthiness:
    def test_requires_height(self) -> None:
        assert not is_section_worthy(el("div", h=40, text="short"))

    def test_requires_text_or_image(self) -> None:
        assert not is_section_worthy(el("div", h=200, children=[el("div", h=100)]))
        assert is_section_worthy(el("div", h=200, children=[el("img", w=100, h=100)]))

    def test_fixed_high_z_overlay_excluded(self) -> None:
        modal = el("div", h=400, text="Subscribe!",
                   style=ComputedStyle(position="fixed", z_index=10000))
        assert is_overlay(modal)
        assert not is_section_worthy(modal)

    def test_sticky_navigation_is_not_an_overlay(self) -> None:
        nav = el("header", h=80, text="Menu", style=ComputedStyle(position="fixed", z_index=5000))
        assert not is_overlay(nav)

    def test_low_z_fixed_element_kept(self) -> None:
        banner = el("div", h=80, text="Notice", style=ComputedStyle(position="fixed", z_index=10))
        assert not is_overlay(banner)


class TestResolve:
    def test_empty_input(self) -> None:
        assert resolve([]) == []

    def test_sorted_top_to_bottom(self) -> None:
        a = el("div", y=900, h=300, text="c")
        b = el("div", y=0, h=100, text="a")
        c = el("div", y=100, h=800, text="b")

        result = resolve([a, b, c])

        assert result == [b, c, a]
        ys = [s.box.y for s in result]
        assert ys == sorted(ys)

    def test_duplicates_collapse(self) -> None:
        a = el("div", h=300, text="a")

        assert resolve([a, a, a]) == [a]

    def test_small_nested_candidate_is_covered_by_outer(self) -> None:
        inner = el("div", h=200, text="inner")
        outer = el("section", h=1000, text="outer", children=[inner])

        assert resolve([inner, outer]) == [outer]

    def test_inner_filling_most_of_outer_replaces_it(self) -> None:
        """Outer is padding around inner (area ratio 0.9 > 0.6): keep the finer element."""
        inner = el("div", y=50, h=900, text="inner")
        outer = el("section", h=1000, children=[inner])

        assert resolve([outer, inner]) == [inner]

    def test_equal_boxes_prefer_descendant(self) -> None:
        inner = el("div", h=500, text="content")
        outer = el("div", h=500, children=[inner])

        assert resolve([outer, inner]) == [inner]

    def test_containment_ratio_is_a_calibration_point(self) -> None:
        inner = el("div", h=600, text="inner")
        outer = el("section", h=1000, text="outer", children=[inner])
        assert resolve([outer, inner]) == [outer]

        inner = el("div", h=601, text="inner")
        outer = el("section", h=1000, text="outer", children=[inner])
        assert resolve([outer, inner]) == [inner]

    def test_siblings_of_replaced_outer_survive(self) -> None:
        big = el("div", y=0, h=700, text="big")
        small = el("div", y=700, h=100, text="small")
        outer = el("section", h=800, children=[big, small])

        result = resolve([outer, big, small])

        assert result == [big, small]
        _assert_no_redundant_nesting(result)

    def test_whole_page_candidate_dropped_when_finer_exist(self) -> None:
        body = el("div", h=3000, text="everything")
        part = el("div", y=3000, h=200, text="part")

        assert resolve([body, part], page_height=3200) == [part]

    def test_whole_page_candidate_never_returned(self) -> None:
        only = el("div", h=3000, text="everything")

        assert resolve([only], page_height=3000) == []

    def test_page_cover_ratio_is_a_calibration_point(self) -> None:
        at_limit = el("div", h=900, text="tall")
        assert resolve([at_limit], page_height=1000) == [at_limit]

        over = el("div", h=901, text="taller")
        assert resolve([over], page_height=1000) == []

    def test_page_sized_candidate_replaced_by_its_children(self) -> None:
        top = el("section", y=0, h=1200, text="top")
        bottom = el("section", y=1200, h=1800, text="bottom")
        spacer = el("div", y=3000, h=10)
        wrapper = el("div", h=3010, children=[top, bottom, spacer])

        assert resolve([wrapper], page_height=3010) == [top, bottom]

    def test_lone_page_section_yields_no_sections(self, settings) -> None:
        doc = page(el("section", h=3000, text="everything"))

        assert find_sections(doc, settings) == []

    def test_overlays_and_invisible_candidates_filtered(self) -> None:
        ok = el("div", h=300, text="ok")
        modal = el("div", h=300, text="modal", style=ComputedStyle(position="fixed", z_index=2000))
        hidden = el("div", h=300, text="hidden", style=ComputedStyle(display="none"))

        assert resolve([ok, modal, hidden]) == [ok]

    def test_no_redundant_nesting_survives(self) -> None:
        cards = [el("div", x=i * 600, y=1100, w=580, h=400, text=f"card {i}") for i in range(3)]
        grid = el("div", y=1100, h=400, children=cards)
        hero_inner = el("div", y=10, h=980, text="hero")
        hero = el("section", y=0, h=1000, children=[hero_inner])
        footer = el("footer", y=1500, h=300, text="bye")

        result = resolve([hero, hero_inner, grid, *cards, footer])

        _assert_no_redundant_nesting(result)
        assert hero_inner in result
        assert grid in result
        assert footer in result
