"""Hand-built page snapshots: DomNode trees with explicit geometry, no browser involved."""

import pytest

from section_cloner.config import Settings
from section_cloner.dom import ComputedStyle, DomDocument, DomNode
from section_cloner.models import BoundingBox, ScrapedSection


def el(tag, x=0, y=0, w=1920, h=100, text="", children=(), attrs=None, style=None, **kwargs):
    return DomNode(
        tag=tag,
        attributes=dict(attrs or {}),
        box=BoundingBox(x=x, y=y, width=w, height=h),
        style=style or ComputedStyle(),
        own_text=text,
        children=list(children),
        **kwargs,
    )


def page(*body_children, url="https://example.com/page", viewport_height=1080, body_attrs=None):
    """<html><body>…</body></html> sized to its content."""
    height = max((c.box.bottom for c in body_children), default=0)
    body = el("body", h=height, children=body_children, attrs=body_attrs)
    html = el("html", h=height, children=[body])
    return DomDocument(root=html, url=url, viewport_height=viewport_height, scroll_height=height)


def scraped(id="scraped-section-0", tag="div", text="", html=None, selector=None,
            y=0, height=100, screenshot=None):
    return ScrapedSection(
        id=id,
        selector=selector or tag,
        tag_name=tag,
        html=html if html is not None else f"<{tag}>{text}</{tag}>",
        text=text,
        bounding_box=BoundingBox(x=0, y=y, width=1920, height=height),
        screenshot=screenshot,
    )


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def landing_page():
    """Header, a main with hero + pricing, and a footer at 1920x1080."""
    header = el("header", y=0, h=80, text="Menu", attrs={"class": "nav"})
    hero = el("section", y=80, h=600, attrs={"class": "hero"}, children=[
        el("h1", x=660, y=300, w=600, h=40, text="Get Started"),
    ])
    pricing = el("section", y=680, h=500, attrs={"class": "pricing"}, text="$9/mo Pro Plan")
    main = el("main", y=80, h=1100, children=[hero, pricing])
    footer = el("footer", y=1180, h=200, text="© 2024")
    return page(header, main, footer)
