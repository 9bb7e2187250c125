"""
Rendered-DOM snapshot model.

The segmentation core never talks to a browser. It works on anything that
looks like `Element`: a tag, attributes, resolved geometry, resolved
visibility flags, children and a containment test. `DomNode` is the one
implementation shipped here; it is built from the JSON snapshot the scraper
pulls out of the page, or by hand in tests.
"""

from dataclasses import dataclass, field
from functools import cached_property
from html import escape
from typing import Iterator, Protocol

from section_cloner.models import BoundingBox


VOID_TAGS = {"img", "br", "hr", "input", "meta", "link", "source", "area", "wbr", "col", "embed"}

APP_ROOT_IDS = ("__next", "root", "app", "__nuxt", "___gatsby", "app-root")

STRUCTURAL_TAGS = {"header", "footer", "nav", "main", "aside", "section", "article"}
STRUCTURAL_ROLES = {"banner", "main", "contentinfo"}


@dataclass
class ComputedStyle:
    display: str = "block"
    visibility: str = "visible"
    opacity: float = 1.0
    position: str = "static"
    z_index: int | None = None


class Element(Protocol):
    tag: str
    attributes: dict[str, str]
    box: BoundingBox
    style: ComputedStyle
    children: list["Element"]
    parent: "Element | None"

    @property
    def element_id(self) -> str: ...

    @property
    def classes(self) -> list[str]: ...

    @property
    def text(self) -> str: ...

    @property
    def outer_html(self) -> str: ...

    def contains(self, other: "Element") -> bool: ...

    def iter_descendants(self) -> Iterator["Element"]: ...


@dataclass(eq=False)
class DomNode:
    """One element of a rendered page. Identity-compared; trees are never mutated after build."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    box: BoundingBox = field(default_factory=BoundingBox)
    style: ComputedStyle = field(default_factory=ComputedStyle)
    own_text: str = ""
    children: list["DomNode"] = field(default_factory=list, repr=False)
    parent: "DomNode | None" = field(default=None, repr=False)

    # Index into the page-side node table; lets the scraper find the live element again.
    index: int | None = None
    html: str | None = field(default=None, repr=False)

    # <img> only: what the browser actually loaded
    current_src: str | None = None
    natural_width: int | None = None
    natural_height: int | None = None

    def __post_init__(self):
        self.tag = self.tag.lower()
        for child in self.children:
            child.parent = self

    @property
    def element_id(self) -> str:
        return self.attributes.get("id", "")

    @property
    def classes(self) -> list[str]:
        return self.attributes.get("class", "").split()

    @cached_property
    def text(self) -> str:
        """
        innerText equivalent: visible own text in document order, one chunk per line.

        display:none hides the whole subtree; visibility is the node's own computed value.
        """
        if _in_undisplayed_subtree(self.parent):
            return ""
        parts = []
        stack = [self]
        while stack:
            node = stack.pop()
            if node.style.display == "none":
                continue
            if node.style.visibility != "hidden" and node.own_text.strip():
                parts.append(node.own_text.strip())
            stack.extend(reversed(node.children))
        return "\n".join(parts)

    @property
    def outer_html(self) -> str:
        if self.html is not None:
            return self.html
        return self._render()

    def _render(self) -> str:
        out = []
        stack = [(self, False)]
        while stack:
            node, closing = stack.pop()
            if closing:
                out.append(f"</{node.tag}>")
                continue
            if node is not self and node.html is not None:
                out.append(node.html)
                continue
            attrs = "".join(f' {name}="{escape(value)}"' for name, value in node.attributes.items())
            out.append(f"<{node.tag}{attrs}>")
            if node.tag in VOID_TAGS:
                continue
            out.append(escape(node.own_text))
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))
        return "".join(out)

    def contains(self, other) -> bool:
        """DOM containment, inclusive like Node.contains."""
        node = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def iter_descendants(self) -> Iterator["DomNode"]:
        """Pre-order, document order. Iterative; snapshot trees can be thousands of levels deep."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_self_and_descendants(self) -> Iterator["DomNode"]:
        yield self
        yield from self.iter_descendants()


def _in_undisplayed_subtree(node: DomNode | None) -> bool:
    while node is not None:
        if node.style.display == "none":
            return True
        node = node.parent
    return False


@dataclass
class DomDocument:
    root: DomNode
    url: str = ""
    title: str = ""
    viewport_width: float = 1920
    viewport_height: float = 1080
    scroll_height: float | None = None

    @property
    def page_height(self) -> float:
        if self.scroll_height:
            return self.scroll_height
        return max((n.box.bottom for n in self.root.iter_self_and_descendants()), default=0)

    @property
    def body(self) -> DomNode | None:
        return self.find(lambda n: n.tag == "body")

    def find(self, predicate) -> DomNode | None:
        for node in self.root.iter_self_and_descendants():
            if predicate(node):
                return node
        return None

    def find_all(self, predicate) -> list[DomNode]:
        return [n for n in self.root.iter_self_and_descendants() if predicate(n)]


def is_app_root(node: DomNode) -> bool:
    return node.tag == "app-root" or node.element_id in APP_ROOT_IDS


def candidate_elements(document: DomDocument) -> list[DomNode]:
    """
    Seed elements for segmentation, in document order:
    header, footer, nav, main, aside, section, article, [role=banner|main|contentinfo],
    main > *, app-root > *, body > div.
    """
    def matches(node: DomNode) -> bool:
        if node.tag in STRUCTURAL_TAGS:
            return True
        if node.attributes.get("role", "") in STRUCTURAL_ROLES:
            return True
        parent = node.parent
        if parent is None:
            return False
        if parent.tag == "main" or is_app_root(parent):
            return True
        return parent.tag == "body" and node.tag == "div" and not is_app_root(node)

    return document.find_all(matches)


# ---------------------------------------------------------------------------
# Snapshot → tree
# ---------------------------------------------------------------------------

def _to_int(value) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def build_node(payload: dict) -> DomNode:
    """One DomNode from a snapshot table row. Children are linked by build_document."""
    rect = payload.get("rect") or {}
    style = payload.get("style") or {}
    opacity = style.get("opacity", 1)
    try:
        opacity = float(opacity)
    except (TypeError, ValueError):
        opacity = 1.0

    return DomNode(
        tag=payload.get("tag", "div"),
        attributes={k: str(v) for k, v in (payload.get("attrs") or {}).items()},
        box=BoundingBox(
            x=rect.get("x", 0) or 0,
            y=rect.get("y", 0) or 0,
            width=rect.get("width", 0) or 0,
            height=rect.get("height", 0) or 0,
        ),
        style=ComputedStyle(
            display=style.get("display", "block") or "block",
            visibility=style.get("visibility", "visible") or "visible",
            opacity=opacity,
            position=style.get("position", "static") or "static",
            z_index=_to_int(style.get("zIndex")),
        ),
        own_text=payload.get("text", "") or "",
        index=payload.get("index"),
        html=payload.get("html"),
        current_src=payload.get("currentSrc") or None,
        natural_width=_to_int(payload.get("naturalWidth")),
        natural_height=_to_int(payload.get("naturalHeight")),
    )


def build_document(snapshot: dict, url: str = "") -> DomDocument:
    """
    Link the flat node table from the snapshot script into a tree.

    Rows come in pre-order with a `parent` index, so every parent precedes its
    children. No recursion: pathological pages nest thousands of levels deep.
    """
    by_index = {}
    root = None
    for payload in snapshot.get("nodes") or []:
        node = build_node(payload)
        parent = by_index.get(payload.get("parent"))
        if parent is not None:
            node.parent = parent
            parent.children.append(node)
        elif root is None:
            root = node
        else:
            continue
        by_index[payload.get("index")] = node

    if root is None:
        root = DomNode(tag="html")

    viewport = snapshot.get("viewport") or {}
    return DomDocument(
        root=root,
        url=snapshot.get("url") or url,
        title=snapshot.get("title", ""),
        viewport_width=viewport.get("width", 1920),
        viewport_height=viewport.get("height", 1080),
        scroll_height=snapshot.get("scrollHeight"),
    )
