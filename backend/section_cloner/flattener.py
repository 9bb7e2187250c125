"""
Tree flattener. Collapses framework wrapper nesting down to the elements
that read as independent visual sections.

    one significant child   → the parent is a wrapper, descend
    no significant children → leaf, keep it
    several children        → split when the parent is page-sized or a root
                              container, otherwise keep it whole (card grids etc.)
"""

import logging

from section_cloner.dom import DomDocument, Element, is_app_root
from section_cloner.geometry import MIN_SIZE, is_significant, is_visible


logger = logging.getLogger(__name__)

MAX_DEPTH = 20
WRAPPER_HEIGHT_RATIO = 0.8


def is_root_container(element: Element) -> bool:
    return element.tag in ("html", "body") or is_app_root(element)


def flatten(
    element: Element,
    viewport_height: float,
    max_depth: int = MAX_DEPTH,
    depth: int = 0,
    *,
    min_size: int = MIN_SIZE,
    wrapper_height_ratio: float = WRAPPER_HEIGHT_RATIO,
) -> list[Element]:
    # Past the depth limit the element is treated as a leaf
    if depth > max_depth:
        return [element]

    valid_children = [c for c in element.children if is_significant(c, min_size)]

    if not valid_children:
        return [element]

    if len(valid_children) == 1:
        return flatten(
            valid_children[0], viewport_height, max_depth, depth + 1,
            min_size=min_size, wrapper_height_ratio=wrapper_height_ratio,
        )

    if element.box.height > viewport_height * wrapper_height_ratio or is_root_container(element):
        result = []
        for child in valid_children:
            result.extend(flatten(
                child, viewport_height, max_depth, depth + 1,
                min_size=min_size, wrapper_height_ratio=wrapper_height_ratio,
            ))
        return result

    return [element]


def pick_root(document: DomDocument) -> Element:
    """Deepest visible app-root (#__next, #root, <app-root>, ...) if any, else <body>, else the document root."""
    app_roots = [n for n in document.find_all(is_app_root) if is_visible(n)]
    if app_roots:
        # find_all walks in document order, so a nested root comes after its ancestor
        deepest = app_roots[0]
        for candidate in app_roots[1:]:
            if deepest.contains(candidate):
                deepest = candidate
        return deepest
    body = document.body
    if body is not None:
        return body
    logger.info("[detect] No <body> in snapshot, flattening from document root")
    return document.root
