"""
Segmentation pipeline over one page snapshot:
flatten → resolve → assign ids → serialize.

The live document is never annotated; ids travel next to the element
handles as (section_id, element) pairs.
"""

import logging

from section_cloner.config import Settings, get_settings
from section_cloner.dom import DomDocument, Element, candidate_elements
from section_cloner.flattener import flatten, pick_root
from section_cloner.models import ScrapedSection
from section_cloner.resolver import resolve
from section_cloner.serializer import section_id, serialize


logger = logging.getLogger(__name__)


def _flatten(element: Element, document: DomDocument, settings: Settings) -> list[Element]:
    return flatten(
        element,
        document.viewport_height,
        settings.max_flatten_depth,
        min_size=settings.min_section_size,
        wrapper_height_ratio=settings.wrapper_height_ratio,
    )


def find_sections(document: DomDocument, settings: Settings | None = None) -> list[tuple[str, Element]]:
    settings = settings or get_settings()

    root = pick_root(document)
    candidates = _flatten(root, document, settings)

    if len(candidates) <= 1:
        # Root collapsed to a single block; fall back to the structural seeds
        seeds = candidate_elements(document)
        logger.info("[detect] Root flattened to %d candidate(s), trying %d seed elements",
                    len(candidates), len(seeds))
        for seed in seeds:
            candidates.extend(_flatten(seed, document, settings))

    resolved = resolve(
        candidates,
        page_height=document.page_height,
        containment_ratio=settings.containment_ratio,
        min_height=settings.min_section_size,
        page_cover_ratio=settings.page_cover_ratio,
    )

    if not resolved:
        logger.info("[detect] No sections found on %s", document.url or "page")

    return [(section_id(i), element) for i, element in enumerate(resolved)]


def build_sections(
    document: DomDocument,
    pairs: list[tuple[str, Element]],
    screenshots: dict[str, str] | None = None,
    settings: Settings | None = None,
) -> list[ScrapedSection]:
    settings = settings or get_settings()
    screenshots = screenshots or {}
    return [
        serialize(
            element,
            sid,
            document.url,
            screenshot=screenshots.get(sid),
            strict=settings.strict_html,
        )
        for sid, element in pairs
    ]


def segment_document(document: DomDocument, settings: Settings | None = None) -> list[ScrapedSection]:
    """Sections for a snapshot with no screenshots attached."""
    settings = settings or get_settings()
    return build_sections(document, find_sections(document, settings), settings=settings)
