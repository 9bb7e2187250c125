"""
Overlap resolver. Turns flattener output (which may still nest) into a
non-overlapping, top-to-bottom list of sections.

Candidates are visited largest first. A candidate nested inside an accepted
element is dropped unless it fills most of it, in which case the outer one
was padding and the inner one replaces it. The bias is toward the finer element.
Nothing taller than page_cover_ratio of the document survives.
"""

import logging

from section_cloner.dom import Element
from section_cloner.geometry import area, contains, has_image, is_visible


logger = logging.getLogger(__name__)

MIN_SECTION_HEIGHT = 50
CONTAINMENT_RATIO = 0.6
PAGE_COVER_RATIO = 0.9
OVERLAY_Z_INDEX = 999


def is_overlay(element: Element) -> bool:
    style = element.style
    if style.position != "fixed" or style.z_index is None:
        return False
    return style.z_index > OVERLAY_Z_INDEX and element.tag not in ("nav", "header")


def is_section_worthy(element: Element, min_height: float = MIN_SECTION_HEIGHT) -> bool:
    if not is_visible(element) or element.box.height < min_height:
        return False
    if is_overlay(element):
        return False
    return bool(element.text.strip()) or has_image(element)


def _unique(candidates: list[Element]) -> list[Element]:
    seen = set()
    result = []
    for el in candidates:
        if id(el) in seen:
            continue
        seen.add(id(el))
        result.append(el)
    return result


def _split_page_sized(candidates: list[Element], max_height: float) -> list[Element]:
    """
    A candidate taller than max_height is the whole page, never a section.
    It is replaced by its children, in place, until nothing page-sized is left.
    """
    result = []
    stack = list(reversed(candidates))
    while stack:
        el = stack.pop()
        if el.box.height > max_height:
            stack.extend(reversed(el.children))
        else:
            result.append(el)
    return result


def resolve(
    candidates: list[Element],
    page_height: float | None = None,
    *,
    containment_ratio: float = CONTAINMENT_RATIO,
    min_height: float = MIN_SECTION_HEIGHT,
    page_cover_ratio: float = PAGE_COVER_RATIO,
) -> list[Element]:
    if page_height:
        candidates = _split_page_sized(candidates, page_height * page_cover_ratio)
    pool = [el for el in _unique(candidates) if is_section_worthy(el, min_height)]

    # sorted() is stable, so equal areas keep document order
    pool = sorted(pool, key=area, reverse=True)

    accepted = []
    for candidate in pool:
        replaced = []
        rejected = False
        for kept in accepted:
            if contains(kept, candidate):
                if area(candidate) > containment_ratio * area(kept):
                    replaced.append(kept)
                    continue
                rejected = True
                break
            if contains(candidate, kept) and area(kept) > containment_ratio * area(candidate):
                rejected = True
                break
        if rejected:
            continue
        for kept in replaced:
            accepted.remove(kept)
        accepted.append(candidate)

    accepted.sort(key=lambda el: (el.box.y, el.box.x))
    logger.debug("[detect] Resolved %d candidates into %d sections", len(candidates), len(accepted))
    return accepted
