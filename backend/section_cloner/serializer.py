"""
Section serializer. Turns a resolved element into a ScrapedSection:
sanitized HTML, a debug selector, absolute image references and geometry.
"""

import logging
import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from section_cloner.dom import Element
from section_cloner.models import BoundingBox, ScrapedSection, SectionImage


logger = logging.getLogger(__name__)

REMOVED_TAGS = ["script", "style", "iframe", "noscript", "svg"]
SECTION_ID_PREFIX = "scraped-section-"

_KEPT_SCHEMES = ("http", "https", "data")

# Pixel sizes only: "120", "120px". Percentages and ems fall back to the natural size.
_PIXEL_DIMENSION = re.compile(r"\s*(\d+)\s*(?:px)?\s*")


def section_id(index: int) -> str:
    return f"{SECTION_ID_PREFIX}{index}"


def get_selector(element: Element) -> str:
    """Best-effort locator for humans: #id, else .joined.classes, else tag. Not unique."""
    if element.element_id:
        return f"#{element.element_id}"
    if element.classes:
        return "." + ".".join(element.classes)
    return element.tag.lower()


def _is_stripped_attribute(name: str, strict: bool) -> bool:
    name = name.lower()
    if name.startswith("on") or name.startswith("data-"):
        return True
    return strict and name == "class"


def clean_html(html: str, strict: bool = False) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(REMOVED_TAGS):
        tag.decompose()
    for tag in soup.find_all(attrs={"aria-hidden": "true"}):
        if not tag.decomposed:
            tag.decompose()
    for tag in soup.find_all(True):
        for name in [n for n in tag.attrs if _is_stripped_attribute(n, strict)]:
            del tag.attrs[name]
    return str(soup)


def resolve_image_url(src: str | None, page_url: str) -> str | None:
    """
    Absolute http(s) and data: URIs pass through, //host/x inherits the page scheme,
    /x and x resolve against the page origin. Anything else is dropped.
    """
    if not src:
        return None
    src = src.strip()
    if not src:
        return None

    if src.startswith("data:"):
        return src

    page = urlparse(page_url)
    origin = f"{page.scheme}://{page.netloc}" if page.scheme and page.netloc else ""

    if src.startswith("//"):
        resolved = f"{page.scheme or 'https'}:{src}"
    elif re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*:", src):
        resolved = src
    elif not origin:
        return None
    elif src.startswith("/"):
        resolved = urljoin(origin, src)
    else:
        resolved = urljoin(origin + "/", src)

    parsed = urlparse(resolved)
    if parsed.scheme not in _KEPT_SCHEMES or (parsed.scheme != "data" and not parsed.netloc):
        return None
    return resolved


def _dimension(attr_value: str | None, natural: int | None) -> int | None:
    if attr_value:
        match = _PIXEL_DIMENSION.fullmatch(attr_value)
        if match:
            return int(match.group(1))
    return natural or None


def extract_images(element: Element, page_url: str) -> list[SectionImage]:
    images = []
    nodes = [element] if element.tag == "img" else []
    nodes += [n for n in element.iter_descendants() if n.tag == "img"]
    for img in nodes:
        src = resolve_image_url(img.current_src or img.attributes.get("src"), page_url)
        if src is None:
            logger.debug("[detect] Skipping image with unusable src on <%s>", element.tag)
            continue
        images.append(SectionImage(
            src=src,
            alt=img.attributes.get("alt"),
            width=_dimension(img.attributes.get("width"), img.natural_width),
            height=_dimension(img.attributes.get("height"), img.natural_height),
        ))
    return images


def serialize(
    element: Element,
    section_id: str,
    page_url: str,
    screenshot: str | None = None,
    strict: bool = False,
) -> ScrapedSection:
    box = element.box
    return ScrapedSection(
        id=section_id,
        selector=get_selector(element),
        tag_name=element.tag.lower(),
        html=clean_html(element.outer_html, strict=strict),
        text=element.text,
        bounding_box=BoundingBox(x=box.x, y=box.y, width=box.width, height=box.height),
        images=extract_images(element, page_url),
        screenshot=screenshot,
    )
