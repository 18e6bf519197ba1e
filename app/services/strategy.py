"""Fallback orchestration: static fetch first, headless browser when that is not enough."""

import logging
from typing import Literal

import httpx

from app.models.page import PageRecord, RawPage
from app.services.browser_fetcher import render_page
from app.services.extractor import extract_seo
from app.services.fetcher import fetch_url

logger = logging.getLogger(__name__)

Method = Literal["static", "browser"]


async def _try_static(url: str) -> PageRecord | None:
    """Static fetch + extraction; ``None`` when either step failed.

    A ``ValueError`` from the fetcher means the URL (or a redirect target)
    was rejected by validation, so it propagates instead of falling back.
    """
    try:
        html = await fetch_url(url)
    except (httpx.HTTPError, httpx.InvalidURL, RuntimeError) as exc:
        logger.warning("Static fetch failed for %s: %s", url, exc)
        return None

    try:
        record = extract_seo(html, url)
    except ValueError as exc:
        logger.warning("Static extraction failed for %s: %s", url, exc)
        return None
    logger.info(
        "Static fetch %s: title=%r words=%d h1=%r", url, record.title, record.word_count, record.h1
    )
    return record


async def crawl_page(url: str, extract_data: bool = True) -> PageRecord | RawPage:
    """Return the SEO record (or raw markup) for *url*.

    Decision procedure:

    1. Fetch the page over plain HTTP and extract it.
    2. If the fetch failed, or the extracted body has no words at all (content
       is probably produced client-side), render the page once in a headless
       browser.  There is no further fallback: a render failure propagates.

    The word count is always computed, even when *extract_data* is ``False``
    and only ``{url, html}`` is returned, because it drives step 2.

    Raises:
        ValueError: if the URL fails SSRF / scheme validation.
        RenderError: if the browser fallback was needed and failed.
    """
    method: Method = "static"
    record = await _try_static(url)

    if record is None or record.word_count == 0:
        logger.info("Falling back to browser rendering for %s", url)
        method = "browser"
        result = await render_page(url, extract_data=extract_data)
    elif extract_data:
        result = record
    else:
        result = RawPage(url=url, html=record.html)

    if isinstance(result, PageRecord):
        logger.info(
            "Crawled %s via %s: title=%r h1=%r h2s=%d words=%d",
            url,
            method,
            result.title,
            result.h1,
            len(result.h2s),
            result.word_count,
        )
    else:
        logger.info("Crawled %s via %s (raw html, %d chars)", url, method, len(result.html))
    return result
