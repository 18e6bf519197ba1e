import logging

import httpx
from fastapi import APIRouter, Request

from app.config import settings
from app.errors import ApiError
from app.limiter import limiter
from app.models.blog import BlogCrawlResult
from app.models.request import BlogCrawlRequest
from app.models.response import ErrorResponse
from app.services.blog import crawl_blog

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/crawl-blog",
    response_model=BlogCrawlResult,
    summary="Crawl a blog listing page and analyse up to 15 articles",
    description=(
        "Finds links containing `/blog/`, `/article/` or `/post/` on the listing "
        "page, then fetches each article and returns its title, H2s, word count, "
        "top keywords and publish date.  Articles that cannot be fetched are "
        "left out; only a failing listing page fails the request."
    ),
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def crawl_blog_endpoint(request: Request, body: BlogCrawlRequest) -> BlogCrawlResult:
    url = body.url
    logger.info("Blog crawl request received", extra={"url": url})

    try:
        return await crawl_blog(url)
    except (ValueError, httpx.InvalidURL) as exc:
        logger.warning("Invalid or blocked URL: %s – %s", url, exc)
        raise ApiError(400, "Invalid URL", str(exc))
    except (httpx.HTTPError, RuntimeError) as exc:
        logger.error("Blog crawl error for %s: %s", url, exc)
        raise ApiError(500, "Failed to crawl blog", str(exc))
