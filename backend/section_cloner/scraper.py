"""
Playwright rendering step.

Loads the page in Chromium, tidies it up (cookie banners, scroll locks,
lazy images), pulls one JSON snapshot of the rendered DOM and hands it to
the segmentation core. Only the final sections go back to the browser:
once for their real outerHTML and once each for an element screenshot.
"""

import logging

from playwright.async_api import async_playwright

from section_cloner.config import Settings, get_settings
from section_cloner.dom import DomDocument, build_document
from section_cloner.errors import ScrapingError
from section_cloner.image_utils import screenshot_to_b64
from section_cloner.models import ScrapedPage
from section_cloner.segmenter import build_sections, find_sections

try:
    from playwright_stealth import Stealth
    _stealth = Stealth()
except ImportError:
    _stealth = None


logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
]

# Page-side node table; indices in the snapshot point into it.
NODE_TABLE = "__sectionClonerNodes"

# Rows come out in pre-order; each carries its parent's index.
SNAPSHOT_JS = '''(tableName) => {
    const SKIP = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE', 'LINK', 'META', 'HEAD']);
    const KEEP_ATTRS = ['id', 'class', 'role', 'aria-hidden', 'src', 'alt', 'width', 'height'];
    const elements = [];
    const rows = [];
    const stack = [[document.documentElement, null]];

    while (stack.length) {
        const [el, parent] = stack.pop();
        const cs = getComputedStyle(el);
        const rect = el.getBoundingClientRect();
        const index = elements.length;
        elements.push(el);

        const attrs = {};
        for (const name of KEEP_ATTRS) {
            const value = el.getAttribute(name);
            if (value !== null) attrs[name] = value;
        }

        let text = '';
        for (const child of el.childNodes) {
            if (child.nodeType === Node.TEXT_NODE) text += ' ' + child.nodeValue;
        }

        const row = {
            index: index,
            parent: parent,
            tag: el.tagName.toLowerCase(),
            attrs: attrs,
            text: text.replace(/\\s+/g, ' ').trim(),
            rect: {
                x: rect.left + window.scrollX,
                y: rect.top + window.scrollY,
                width: rect.width,
                height: rect.height,
            },
            style: {
                display: cs.display,
                visibility: cs.visibility,
                opacity: cs.opacity,
                position: cs.position,
                zIndex: cs.zIndex,
            },
        };

        if (el.tagName === 'IMG') {
            row.currentSrc = el.currentSrc || el.src || '';
            row.naturalWidth = el.naturalWidth;
            row.naturalHeight = el.naturalHeight;
        }
        rows.push(row);

        // Hidden subtrees and SVG internals never become sections
        if (cs.display !== 'none' && el.tagName.toUpperCase() !== 'SVG') {
            const kids = Array.from(el.children).filter(c => !SKIP.has(c.tagName.toUpperCase()));
            for (let i = kids.length - 1; i >= 0; i--) stack.push([kids[i], index]);
        }
    }

    window[tableName] = elements;
    return {
        nodes: rows,
        url: location.href,
        title: document.title,
        viewport: { width: window.innerWidth, height: window.innerHeight },
        scrollHeight: document.documentElement.scrollHeight,
    };
}'''


OUTER_HTML_JS = '''([tableName, indices]) => indices.map(i => {
    const el = window[tableName][i];
    return el ? el.outerHTML : null;
})'''


async def prepare_page(page):
    """Dismiss cookie banners, unlock scrolling, and force lazy content to load."""

    await page.evaluate('''() => {
        const btns = document.querySelectorAll(
            '[class*="cookie"] button, [id*="cookie"] button, ' +
            '[class*="consent"] button, [aria-label*="accept" i], [class*="gdpr"] button'
        );
        for (const btn of btns) {
            if (btn.innerText.match(/accept|agree|got it|ok|close|dismiss/i)) {
                btn.click();
                break;
            }
        }
        document.querySelectorAll('[class*="cookie"], [id*="cookie"], [class*="consent"], [class*="gdpr"]')
            .forEach(el => {
                if (el.innerText.toLowerCase().match(/cookie|consent|privacy|gdpr/)) el.remove();
            });
    }''')
    await page.wait_for_timeout(500)

    await page.evaluate('''() => {
        for (const el of [document.documentElement, document.body]) {
            if (!el) continue;
            el.style.overflow = 'visible';
            el.style.height = 'auto';
            el.style.maxHeight = 'none';
        }
        if (document.body) {
            document.body.classList.remove('no-scroll', 'overflow-hidden', 'modal-open');
        }
    }''')

    # Scroll pass for lazy loading, capped for infinite-scroll pages
    await page.evaluate('''async () => {
        await new Promise(resolve => {
            let total = 0;
            let iterations = 0;
            const timer = setInterval(() => {
                window.scrollBy(0, 400);
                total += 400;
                iterations++;
                if (total >= document.body.scrollHeight || total >= 15000 || iterations >= 50) {
                    clearInterval(timer);
                    window.scrollTo(0, 0);
                    resolve();
                }
            }, 100);
        });
    }''')

    await page.evaluate('''() => {
        document.querySelectorAll('img[loading="lazy"]').forEach(img => {
            img.loading = 'eager';
            if (img.dataset.src) img.src = img.dataset.src;
            if (img.dataset.srcset) img.srcset = img.dataset.srcset;
        });
    }''')
    await page.wait_for_timeout(1000)


async def snapshot_document(page, url: str) -> DomDocument:
    snapshot = await page.evaluate(SNAPSHOT_JS, NODE_TABLE)
    return build_document(snapshot, url)


async def attach_outer_html(page, pairs: list) -> None:
    """Replace synthesized markup with the browser's outerHTML for the chosen sections."""
    indices = [el.index for _, el in pairs if el.index is not None]
    if not indices:
        return
    htmls = await page.evaluate(OUTER_HTML_JS, [NODE_TABLE, indices])
    by_index = dict(zip(indices, htmls))
    for _, el in pairs:
        html = by_index.get(el.index)
        if html:
            el.html = html


async def capture_section(page, element, settings: Settings) -> str | None:
    """Element screenshot as base64 JPEG. Failures are logged and return None."""
    if element.index is None:
        return None
    try:
        handle = await page.evaluate_handle(
            "([tableName, i]) => window[tableName][i]", [NODE_TABLE, element.index]
        )
        target = handle.as_element()
        if target is None:
            return None
        raw = await target.screenshot(
            type="jpeg",
            quality=settings.screenshot_quality,
            timeout=settings.section_screenshot_timeout,
        )
        return screenshot_to_b64(raw, compress=True, quality=settings.screenshot_quality)
    except Exception as e:
        logger.warning("[scrape] Screenshot failed for <%s> #%s: %s", element.tag, element.index, e)
        return None


async def capture_full_page(page, page_height: float, settings: Settings) -> str | None:
    try:
        # Cap very tall pages to avoid OOM in the capture
        capped = page_height > settings.max_full_page_height
        if capped:
            await page.evaluate(
                f"document.body.style.maxHeight = '{settings.max_full_page_height}px'"
            )
        raw = await page.screenshot(full_page=True, type="jpeg", quality=50)
        if capped:
            await page.evaluate("document.body.style.maxHeight = ''")
        return screenshot_to_b64(raw, compress=True, max_width=1024, quality=50)
    except Exception as e:
        logger.warning("[scrape] Full page screenshot failed: %s", e)
        return None


async def scrape_page(url: str, include_screenshots: bool = True,
                      settings: Settings | None = None) -> ScrapedPage:
    """Render url and return its sections (serialized, not yet classified)."""
    settings = settings or get_settings()

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, args=BROWSER_ARGS)
        try:
            context = await browser.new_context(
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                user_agent=USER_AGENT,
                locale="en-US",
            )
            page = await context.new_page()

            if _stealth:
                await _stealth.apply_stealth_async(page)

            try:
                await page.goto(url, wait_until="networkidle", timeout=settings.page_load_timeout)
            except Exception:
                try:
                    await page.goto(url, wait_until="domcontentloaded",
                                    timeout=settings.page_load_timeout)
                    await page.wait_for_timeout(2000)
                except Exception as e2:
                    raise ScrapingError(f"Failed to load {url}: {e2}", {"url": url})

            await prepare_page(page)
            title = await page.title()

            document = await snapshot_document(page, url)
            pairs = find_sections(document, settings)
            logger.info("[scrape] %s: %d sections", url, len(pairs))
            await attach_outer_html(page, pairs)

            screenshots = {}
            full_page = None
            if include_screenshots:
                full_page = await capture_full_page(page, document.page_height, settings)
                for sid, element in pairs:
                    shot = await capture_section(page, element, settings)
                    if shot:
                        screenshots[sid] = shot

            sections = build_sections(document, pairs, screenshots, settings)
        finally:
            await browser.close()

    return ScrapedPage(
        url=url,
        title=title or document.title,
        full_page_screenshot=full_page,
        sections=sections,
    )

