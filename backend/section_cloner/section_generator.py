"""
Section generator: ONE replica component per model call.
Sections are independent, so they fan out in parallel under a semaphore.
Refinement edits already generated code through the same retrying call.
"""

import asyncio
import logging
import os
import re

import anthropic

from section_cloner.config import get_settings
from section_cloner.errors import GenerationError
from section_cloner.image_utils import media_type_of
from section_cloner.models import SectionMetadata


logger = logging.getLogger(__name__)

_client = None


def _get_client():
    global _client
    if _client is None:
        api_key = os.getenv("ANTHROPIC_API_KEY") or get_settings().anthropic_api_key
        _client = anthropic.AsyncAnthropic(api_key=api_key)
    return _client


SECTION_SYSTEM_PROMPT = """You are a React component generator. You recreate ONE section of an existing web page at a time.

## Rules
1. Output ONLY the raw TSX file content. No markdown fences. No explanation.
2. One default-exported function component, named after the section type.
3. Style with Tailwind utility classes. Use arbitrary hex values (`bg-[#0a2540]`) for colors you can see.
4. Use the EXACT text content from the section. No lorem ipsum.
5. Use the EXACT image URLs provided. If none fit, use a neutral placeholder `div` with the right aspect ratio.
6. Make layouts responsive with `sm:`, `md:`, `lg:` prefixes.
7. No external data fetching, no global CSS, no imports other than `react` and `lucide-react`.
"""

REFINE_SYSTEM_PROMPT = """You edit an existing React component.

## Rules
1. Output ONLY the full updated TSX file content. No markdown fences. No explanation.
2. Apply the instruction and nothing else. Keep every other element, class and text as it is.
3. Keep the default export, its name, and the Tailwind styling approach.
4. No imports other than `react` and `lucide-react`.
"""

TYPE_INSTRUCTIONS = {
    "header": """HEADER RULES:
- Logo on the left, navigation links center or right
- Mobile hamburger menu toggled with useState (lucide-react Menu / X icons)""",

    "hero": """HERO RULES:
- Near full viewport height, main heading first, supporting text, then CTA buttons
- If the screenshot shows a background image, render it as a CSS background with an overlay""",

    "features": """FEATURES RULES:
- Grid of feature cards; keep the column count you see in the screenshot
- Icons from lucide-react where the original shows icons""",

    "pricing": """PRICING RULES:
- One card per plan, highlighted plan visually emphasized
- Keep prices, billing periods and feature lists verbatim""",

    "testimonials": """TESTIMONIALS RULES:
- Quote, author name and role for every testimonial
- Avatars from the provided image URLs when present""",

    "faq": """FAQ RULES:
- Accordion: one open item at a time, toggled with useState
- Questions and answers verbatim""",

    "contact": """CONTACT RULES:
- Form fields matching the original, submit handler that only prevents default""",

    "footer": """FOOTER RULES:
- Link columns as in the original, copyright line at the bottom""",
}

COMPONENT_NAMES = {
    "hero": "Hero",
    "header": "Header",
    "footer": "Footer",
    "features": "Features",
    "pricing": "Pricing",
    "testimonials": "Testimonials",
    "faq": "FAQ",
    "contact": "Contact",
    "unknown": "Section",
}

MAX_HTML_CHARS = 12000
RETRY_BASE_DELAY = 3  # seconds

_FENCE = re.compile(r"^```[a-zA-Z]*\n(.*?)\n?```\s*$", re.DOTALL)


def build_user_content(section: SectionMetadata) -> list:
    """Message content blocks: the section screenshot (if any) followed by its data."""
    content = []
    if section.screenshot:
        content.append({
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": media_type_of(section.screenshot),
                "data": section.screenshot,
            },
        })

    lines = [
        f"Section id: {section.id}",
        f"Section type: {section.type}",
        f"Component name: {COMPONENT_NAMES.get(section.type, 'Section')}",
    ]
    instructions = TYPE_INSTRUCTIONS.get(section.type)
    if instructions:
        lines += ["", instructions]
    if section.images:
        lines += ["", "Images (in DOM order):"]
        for img in section.images:
            size = f" {img.width}x{img.height}" if img.width and img.height else ""
            lines.append(f"- {img.src} alt={img.alt or ''!r}{size}")
    if section.html:
        lines += ["", "Section HTML:", section.html[:MAX_HTML_CHARS]]
    elif section.text:
        lines += ["", "Section text:", section.text[:MAX_HTML_CHARS]]

    content.append({"type": "text", "text": "\n".join(lines)})
    return content


def strip_code_fences(raw: str) -> str:
    raw = raw.strip()
    match = _FENCE.match(raw)
    return match.group(1).strip() if match else raw


async def _complete(system: str, content, model: str | None, label: str, context: dict) -> str:
    """One model call with exponential-backoff retries. Returns fence-stripped code."""
    settings = get_settings()
    client = _get_client()
    max_retries = max(1, settings.generation_max_retries)

    for attempt in range(max_retries):
        try:
            response = await client.messages.create(
                model=model or settings.default_model,
                max_tokens=settings.generation_max_tokens,
                system=system,
                messages=[{"role": "user", "content": content}],
            )
            break
        except Exception as e:
            if attempt < max_retries - 1:
                wait = 2 ** attempt * RETRY_BASE_DELAY
                logger.warning("[generate] %s attempt %d failed: %s, retrying in %ss",
                               label, attempt + 1, e, wait)
                await asyncio.sleep(wait)
            else:
                raise GenerationError(f"Generation failed for {label}: {e}", context) from e

    if getattr(response, "stop_reason", None) == "max_tokens":
        logger.warning("[generate] %s: output truncated (max_tokens reached)", label)

    raw = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
    code = strip_code_fences(raw)
    if not code:
        raise GenerationError(f"Empty generation for {label}", context)
    return code


async def generate_section(section: SectionMetadata, model: str | None = None) -> str:
    """Replica component code for one classified section. Raises GenerationError."""
    return await _complete(
        SECTION_SYSTEM_PROMPT,
        build_user_content(section),
        model,
        label=section.id,
        context={"section_id": section.id},
    )


async def refine_section(code: str, instruction: str, model: str | None = None) -> str:
    """Apply one natural-language edit to previously generated component code."""
    logger.info("[generate] Refining component (%d chars): %s", len(code), instruction[:80])
    return await _complete(
        REFINE_SYSTEM_PROMPT,
        f"Current Code:\n{code}\n\nInstruction: {instruction}",
        model,
        label="refinement",
        context={"instruction": instruction},
    )


async def generate_sections(sections: list[SectionMetadata], model: str | None = None,
                            concurrency: int | None = None) -> dict:
    """
    Generate every section concurrently.
    Returns {section_id: {"code": str} | {"error": str}}; one failure never cancels the rest.
    """
    semaphore = asyncio.Semaphore(concurrency or get_settings().generation_concurrency)

    async def _one(section: SectionMetadata):
        async with semaphore:
            try:
                return section.id, {"code": await generate_section(section, model)}
            except GenerationError as e:
                logger.error("[generate] %s", e)
                return section.id, {"error": str(e)}

    results = await asyncio.gather(*(_one(s) for s in sections))
    return dict(results)
