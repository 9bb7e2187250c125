"""Geometry and visibility checks shared by the flattener and the resolver."""

from section_cloner.dom import Element
from section_cloner.models import BoundingBox


MIN_SIZE = 50  # px


def is_visible(element: Element) -> bool:
    style = element.style
    if style.display == "none" or style.visibility == "hidden" or style.opacity == 0:
        return False
    return element.box.width > 0 and element.box.height > 0


def area(element: Element) -> float:
    return element.box.area


def contains(outer: Element, inner: Element) -> bool:
    """DOM containment (ancestor-or-self), not geometric."""
    return outer.contains(inner)


def overlap_ratio(a: BoundingBox, b: BoundingBox) -> float:
    """Intersection area as a fraction of the smaller box. 0 when either box is empty."""
    smaller = min(a.area, b.area)
    if smaller <= 0:
        return 0.0
    width = min(a.right, b.right) - max(a.x, b.x)
    height = min(a.bottom, b.bottom) - max(a.y, b.y)
    if width <= 0 or height <= 0:
        return 0.0
    return (width * height) / smaller


def has_image(element: Element) -> bool:
    if element.tag == "img":
        return True
    return any(node.tag == "img" for node in element.iter_descendants())


def is_significant(element: Element, min_size: int = MIN_SIZE) -> bool:
    """Visible, at least min_size on both axes, and carrying text or children."""
    if not is_visible(element):
        return False
    if element.box.width < min_size or element.box.height < min_size:
        return False
    return len(element.children) > 0 or bool(element.text.strip())
