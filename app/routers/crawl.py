import logging

from fastapi import APIRouter, Request

from app.config import settings
from app.errors import ApiError
from app.limiter import limiter
from app.models.page import PageRecord, RawPage
from app.models.request import CrawlRequest
from app.models.response import ErrorResponse
from app.services.browser_fetcher import RenderError
from app.services.strategy import crawl_page

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/crawl",
    response_model=None,
    summary="Crawl a single page and extract SEO data",
    description=(
        "Fetches *url* over plain HTTP and extracts title, meta description, "
        "headings, word count, canonical URL, JSON-LD schema and link counts.  "
        "When the static fetch fails or yields no body text the page is "
        "rendered in a headless browser instead.\n\n"
        "With `extractData: false` only `{url, html}` is returned."
    ),
    responses={
        200: {"model": PageRecord},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
@limiter.limit(settings.rate_limit)
async def crawl_endpoint(request: Request, body: CrawlRequest) -> PageRecord | RawPage:
    url = body.url
    logger.info("Crawl request received", extra={"url": url, "extract_data": body.extract_data})

    try:
        return await crawl_page(url, extract_data=body.extract_data)
    except ValueError as exc:
        logger.warning("Invalid or blocked URL: %s – %s", url, exc)
        raise ApiError(400, "Invalid URL", str(exc))
    except RenderError as exc:
        logger.error("Crawl error for %s: %s", url, exc)
        raise ApiError(500, "Failed to crawl URL", str(exc))
