from contextlib import asynccontextmanager
import asyncio
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from section_cloner.classifier import detect
from section_cloner.config import get_settings
from section_cloner.errors import AppError, ScrapingError, SectionDetectionError, ValidationError
from section_cloner.models import (
    DetectRequest,
    DetectResponse,
    GenerateAllRequest,
    GenerateRequest,
    GenerateResponse,
    RefineRequest,
    RefineResponse,
    ScrapedPage,
    ScrapeRequest,
)
from section_cloner.validators import normalize_url


load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    yield


app = FastAPI(title="Section Cloner API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("[api] %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _scrape(url: str, include_screenshots: bool = True) -> ScrapedPage:
    from section_cloner.scraper import scrape_page

    settings = get_settings()
    try:
        return await asyncio.wait_for(
            scrape_page(url, include_screenshots=include_screenshots),
            timeout=settings.scrape_timeout,
        )
    except asyncio.TimeoutError:
        raise HTTPException(status_code=504, detail="Scrape timed out. Try a simpler page.")
    except AppError:
        raise
    except Exception as e:
        raise ScrapingError(f"Failed to scrape site: {e}", {"url": url})


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/")
def root():
    return {"message": "Backend is running"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/scrape", response_model=ScrapedPage)
async def scrape_endpoint(request: ScrapeRequest):
    """Render a page and return its serialized sections."""
    url = normalize_url(request.url)
    return await _scrape(url, request.include_screenshots)


@app.post("/detect-sections", response_model=DetectResponse)
async def detect_sections_endpoint(request: DetectRequest):
    """Classify posted sections, or scrape the URL first when no sections are given."""
    sections = request.sections
    full_page = None

    if not sections and request.url:
        url = normalize_url(request.url)
        logger.info("[detect] Detecting sections for %s", url)
        page = await _scrape(url, include_screenshots=True)
        sections = page.sections
        full_page = page.full_page_screenshot

    if sections is None:
        raise ValidationError("Invalid input: url or sections array is required")

    try:
        metadata = detect(sections)
    except Exception as e:
        raise SectionDetectionError(f"Section detection failed: {e}") from e

    return DetectResponse(sections=metadata, full_page_screenshot=full_page)


@app.post("/generate", response_model=GenerateResponse)
async def generate_endpoint(request: GenerateRequest):
    """Generate replica code for one classified section."""
    from section_cloner.section_generator import generate_section

    section = request.section
    logger.info("[generate] Generating component for %s (%s)", section.id, section.type)
    code = await generate_section(section, request.model)
    return GenerateResponse(id=section.id, type=section.type, code=code)


@app.post("/generate-all")
async def generate_all_endpoint(request: GenerateAllRequest):
    """Generate every section in parallel; per-section failures are reported inline."""
    from section_cloner.section_generator import generate_sections

    results = await generate_sections(request.sections, request.model)
    return {"results": results}


@app.post("/refine", response_model=RefineResponse)
async def refine_endpoint(request: RefineRequest):
    """Apply a natural-language edit to generated component code."""
    from section_cloner.section_generator import refine_section

    if not request.code or not request.instruction:
        raise ValidationError("Missing code or instruction")

    code = await refine_section(request.code, request.instruction, request.model)
    return RefineResponse(code=code)
