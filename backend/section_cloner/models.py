"""
Shared data models: scraped sections, classified sections, API payloads.
Serialized with camelCase aliases so browser-side clients can post them back as-is.
"""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


SectionType = Literal[
    "hero",
    "header",
    "footer",
    "features",
    "pricing",
    "testimonials",
    "faq",
    "contact",
    "unknown",
]


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class BoundingBox(CamelModel):
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def area(self) -> float:
        return max(self.width, 0) * max(self.height, 0)

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width


class SectionImage(CamelModel):
    src: str
    alt: str | None = None
    width: int | None = None
    height: int | None = None


class ScrapedSection(CamelModel):
    id: str
    selector: str
    tag_name: str = "div"
    html: str = ""
    text: str = ""
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    images: list[SectionImage] = Field(default_factory=list)
    screenshot: str | None = None


class SectionMetadata(CamelModel):
    id: str
    type: SectionType = "unknown"
    confidence: float = 0.0
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    screenshot: str | None = None
    html: str | None = None
    text: str | None = None
    images: list[SectionImage] = Field(default_factory=list)


class ScrapedPage(CamelModel):
    url: str
    title: str = ""
    full_page_screenshot: str | None = None
    sections: list[ScrapedSection] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------

class ScrapeRequest(CamelModel):
    url: str
    include_screenshots: bool = True


class DetectRequest(CamelModel):
    sections: list[ScrapedSection] | None = None
    url: str | None = None


class DetectResponse(CamelModel):
    sections: list[SectionMetadata]
    full_page_screenshot: str | None = None


class GenerateRequest(CamelModel):
    section: SectionMetadata
    model: str | None = None


class GenerateResponse(CamelModel):
    id: str
    type: SectionType
    code: str


class GenerateAllRequest(CamelModel):
    sections: list[SectionMetadata]
    model: str | None = None


class RefineRequest(CamelModel):
    code: str | None = None
    instruction: str | None = None
    model: str | None = None


class RefineResponse(CamelModel):
    code: str
