"""
Section classifier: pure weighted scoring, no I/O.

Every label starts at 0 and collects points from tag priors, keyword hits
(class/id hits count double), position on the page and CTA wording. The
highest score wins; first label in table order wins ties. Below the floor
the label falls back to "unknown".
"""

from section_cloner.models import ScrapedSection, SectionMetadata


MIN_CLASSIFICATION_SCORE = 4
CONFIDENCE_SCALE = 20

# Label → (keyword, weight). Table order is the tie-break order.
SECTION_KEYWORDS = {
    "hero": [
        ("welcome", 2),
        ("get started", 3),
        ("sign up", 2),
        ("hero", 4),
        ("intro", 2),
    ],
    "header": [
        ("nav", 3),
        ("header", 4),
        ("menu", 2),
        ("logo", 1),
    ],
    "footer": [
        ("copyright", 3),
        ("privacy", 2),
        ("terms", 2),
        ("footer", 5),
        ("social", 1),
        ("©", 3),
    ],
    "features": [
        ("features", 4),
        ("benefits", 3),
        ("includes", 2),
        ("why us", 3),
        ("capabilities", 2),
    ],
    "pricing": [
        ("pricing", 5),
        ("plan", 3),
        ("subscribe", 3),
        ("yearly", 2),
        ("monthly", 2),
        ("$", 1),
        ("free", 2),
        ("enterprise", 2),
    ],
    "testimonials": [
        ("testimonial", 5),
        ("reviews", 4),
        ("what they say", 3),
        ("customers", 2),
        ("clients", 2),
        ("feedback", 2),
    ],
    "faq": [
        ("faq", 5),
        ("frequently", 4),
        ("questions", 3),
        ("answers", 2),
        ("help", 2),
    ],
    "contact": [
        ("contact", 5),
        ("email", 2),
        ("phone", 2),
        ("message", 2),
        ("address", 2),
        ("touch", 2),
    ],
    "unknown": [],
}

TAG_WEIGHTS = {
    "HEADER": {"header": 15},
    "FOOTER": {"footer": 15},
    "NAV": {"header": 8},
    "MAIN": {"hero": 2},
}

CTA_PHRASES = ("get started", "sign up", "try for free")


def page_height_of(sections: list[ScrapedSection]) -> float:
    return max((s.bounding_box.y + s.bounding_box.height for s in sections), default=0)


def score_section(section: ScrapedSection, page_height: float) -> dict[str, float]:
    text = section.text.lower()
    html = section.html.lower()
    selector = section.selector.lower()

    scores = {label: 0 for label in SECTION_KEYWORDS}

    for label, weight in TAG_WEIGHTS.get(section.tag_name.upper(), {}).items():
        scores[label] += weight

    for label, keywords in SECTION_KEYWORDS.items():
        for word, weight in keywords:
            if word in text:
                scores[label] += weight
            if word in selector or f'class="{word}"' in html or f'id="{word}"' in html:
                scores[label] += weight * 2

    y = section.bounding_box.y
    height = section.bounding_box.height

    if y < 100 and height > 400:
        scores["hero"] += 3
    if y < 50 and height < 150:
        scores["header"] += 4
    if page_height > 0:
        if y < page_height * 0.1 and height < 200:
            scores["header"] += 2
        bottom = y + height
        if bottom > page_height * 0.8:
            scores["footer"] += 3
        if bottom >= page_height * 0.95:
            scores["footer"] += 2

    if y < 500 and any(phrase in html for phrase in CTA_PHRASES):
        scores["hero"] += 2

    return scores


def classify(section: ScrapedSection, page_height: float) -> tuple[str, float]:
    scores = score_section(section, page_height)

    best_type, best_score = "unknown", 0
    for label, score in scores.items():
        if score > best_score:
            best_type, best_score = label, score

    if not section.text.strip() and not section.screenshot:
        best_type, best_score = "unknown", 0

    if best_score < MIN_CLASSIFICATION_SCORE:
        best_type = "unknown"

    confidence = round(min(best_score / CONFIDENCE_SCALE, 1), 2)
    return best_type, confidence


def detect(sections: list[ScrapedSection]) -> list[SectionMetadata]:
    """Classify every section against the page height they span together."""
    page_height = page_height_of(sections)
    result = []
    for section in sections:
        section_type, confidence = classify(section, page_height)
        result.append(SectionMetadata(
            id=section.id,
            type=section_type,
            confidence=confidence,
            bounding_box=section.bounding_box,
            screenshot=section.screenshot,
            html=section.html,
            text=section.text,
            images=section.images,
        ))
    return result
