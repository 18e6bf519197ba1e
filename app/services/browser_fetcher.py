"""Playwright-based fetcher for JavaScript-rendered (dynamic) web pages."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, async_playwright
from playwright.async_api import Error as PlaywrightError
from pydantic import ValidationError

from app.config import (
    BROWSER_ARGS,
    BROWSER_HEADERS,
    NAVIGATION_TIMEOUT_MS,
    SESSION_TIMEOUT,
    SETTLE_MS,
)
from app.models.page import PageRecord, RawPage
from app.services.fetcher import validate_url

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """Browser launch, navigation or in-page extraction failed."""


# In-page counterpart of app.services.extractor.extract_seo.  Receives the
# page URL and returns a JSON object keyed like PageRecord's aliases.
_EXTRACT_SCRIPT = """
(pageUrl) => {
  const INVISIBLE = 'script, style, noscript, template'
  const NON_NAVIGABLE = ['#', 'javascript:', 'mailto:', 'tel:']

  const text = (el) => (el ? el.textContent.trim() : '')
  const visibleText = (node) => {
    if (!node) return ''
    const clone = node.cloneNode(true)
    clone.querySelectorAll(INVISIBLE).forEach((el) => el.remove())
    return clone.textContent
  }

  const meta = document.querySelector('meta[name="description"]')
  const canonicalEl = document.querySelector('link[rel~="canonical"]')

  let schema = null
  const schemaEl = document.querySelector('script[type="application/ld+json"]')
  if (schemaEl) {
    try { schema = JSON.parse(schemaEl.textContent) } catch (e) { schema = null }
  }

  const hostname = new URL(pageUrl).hostname
  let internal = 0
  let httpLinks = 0
  for (const a of document.querySelectorAll('a[href]')) {
    const href = a.getAttribute('href').trim()
    const lower = href.toLowerCase()
    if (lower.startsWith('http')) httpLinks++
    if (!href || NON_NAVIGABLE.some((p) => lower.startsWith(p))) continue
    let resolvedHost = null
    try { resolvedHost = new URL(href, pageUrl).hostname } catch (e) {}
    if (href.startsWith('/') || resolvedHost === hostname) internal++
  }

  return {
    url: pageUrl,
    title: text(document.querySelector('title')),
    metaDescription: meta ? (meta.getAttribute('content') || '') : '',
    h1: text(document.querySelector('h1')),
    h2s: Array.from(document.querySelectorAll('h2')).map((el) => el.textContent.trim()),
    wordCount: visibleText(document.body).split(/\\s+/).filter(Boolean).length,
    canonical: canonicalEl ? (canonicalEl.getAttribute('href') || '') : '',
    schema,
    internalLinksCount: internal,
    externalLinksCount: Math.max(0, httpLinks - internal),
    html: document.documentElement.outerHTML,
  }
}
"""


@asynccontextmanager
async def launch_browser(browser_args: Sequence[str] = BROWSER_ARGS) -> AsyncIterator[Browser]:
    """Launch a disposable headless Chromium and close it on every exit path."""
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(
            headless=True, args=list(browser_args), timeout=SESSION_TIMEOUT * 1000
        )
        try:
            yield browser
        finally:
            await browser.close()


async def _render(
    url: str,
    extract_data: bool,
    headers: Mapping[str, str],
    browser_args: Sequence[str],
) -> PageRecord | RawPage:
    logger.debug("Browser: rendering %s", url)
    async with launch_browser(browser_args) as browser:
        context = await browser.new_context(user_agent=headers.get("User-Agent"))
        accept_language = headers.get("Accept-Language")
        if accept_language:
            await context.set_extra_http_headers({"Accept-Language": accept_language})
        page = await context.new_page()

        await page.goto(url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)
        # Give client-side scripts time to populate the DOM.
        await page.wait_for_timeout(SETTLE_MS)

        if not extract_data:
            return RawPage(url=url, html=await page.content())

        data = await page.evaluate(_EXTRACT_SCRIPT, url)
        try:
            return PageRecord.model_validate(data)
        except ValidationError as exc:
            raise RenderError(f"Unexpected in-page extraction result: {exc}") from exc


async def render_page(
    url: str,
    *,
    extract_data: bool = True,
    headers: Mapping[str, str] = BROWSER_HEADERS,
    browser_args: Sequence[str] = BROWSER_ARGS,
) -> PageRecord | RawPage:
    """Render *url* in a fresh headless browser and extract it in-page.

    Navigation waits for ``DOMContentLoaded`` (30 s limit) plus a fixed
    settle delay; the whole session is capped at ``SESSION_TIMEOUT``.

    Raises:
        ValueError: if the URL fails SSRF / scheme validation.
        RenderError: on any browser, navigation or extraction failure.
    """
    validate_url(url)

    try:
        return await asyncio.wait_for(
            _render(url, extract_data, headers, browser_args), timeout=SESSION_TIMEOUT
        )
    except asyncio.TimeoutError as exc:
        raise RenderError(f"Browser session exceeded {SESSION_TIMEOUT}s.") from exc
    except PlaywrightError as exc:
        raise RenderError(f"Browser error: {exc}") from exc
