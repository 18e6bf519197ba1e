"""Blog crawler: discovers article links on a listing page and analyses each article."""

import logging
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from app.config import ARTICLE_TIMEOUT, MAX_ARTICLES, PAGE_TIMEOUT
from app.models.blog import ArticleRecord, BlogCrawlResult
from app.services.extractor import count_words, parse_html, visible_text
from app.services.fetcher import fetch_url
from app.services.keywords import rank_keywords

logger = logging.getLogger(__name__)

_ARTICLE_LINK_SELECTOR = 'a[href*="/blog/"], a[href*="/article/"], a[href*="/post/"]'

# Checked in order; the first match holds the article body
_CONTENT_SELECTORS = ("article", "main", ".content", ".post-content")


def discover_article_links(html: str, base_url: str, limit: int = MAX_ARTICLES) -> List[str]:
    """Return up to *limit* unique article URLs linked from a listing page.

    Root-relative hrefs are resolved against the listing page's scheme and
    host; anything else is kept as written.  Discovery order is preserved.
    """
    base = urlparse(base_url)
    origin = f"{base.scheme}://{base.netloc}"

    links: List[str] = []
    seen: set = set()
    for a in parse_html(html).select(_ARTICLE_LINK_SELECTOR):
        href = str(a.get("href", "")).strip()
        if not href:
            continue
        link = f"{origin}{href}" if href.startswith("/") else href
        if link in seen:
            continue
        seen.add(link)
        links.append(link)
        if len(links) >= limit:
            break
    return links


def _find_content(soup: BeautifulSoup) -> Optional[Tag]:
    for selector in _CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node:
            return node
    return soup.body


def _published_date(soup: BeautifulSoup) -> Optional[str]:
    time_tag = soup.find("time", attrs={"datetime": True})
    if time_tag and time_tag.get("datetime"):
        return str(time_tag["datetime"])
    meta = soup.find("meta", attrs={"property": "article:published_time"})
    if meta and meta.get("content"):
        return str(meta["content"])
    return None


def extract_article(html: str, url: str) -> ArticleRecord:
    """Extract title, headings, word count, keywords and publish date of one article."""
    soup = parse_html(html)

    h1 = soup.find("h1")
    title = h1.get_text().strip() if h1 else ""
    if not title:
        title_tag = soup.find("title")
        title = title_tag.get_text().strip() if title_tag else ""

    text = visible_text(_find_content(soup))

    return ArticleRecord(
        url=url,
        title=title,
        h2s=[h2.get_text().strip() for h2 in soup.find_all("h2")],
        keywords=rank_keywords(text),
        published_date=_published_date(soup),
        word_count=count_words(text),
    )


async def crawl_blog(url: str) -> BlogCrawlResult:
    """Crawl the listing page at *url* and every article it links to.

    Only the listing fetch can fail the call.  Articles are fetched one at a
    time; an article that fails is logged and left out of the result.

    Raises:
        ValueError: if the URL fails SSRF / scheme validation.
        httpx.HTTPError, httpx.InvalidURL, RuntimeError: if the listing page
            cannot be fetched.
    """
    listing_html = await fetch_url(url, timeout=PAGE_TIMEOUT)
    links = discover_article_links(listing_html, url)
    logger.info("Blog: found %d article links on %s", len(links), url)

    articles: List[ArticleRecord] = []
    for link in links:
        try:
            html = await fetch_url(link, timeout=ARTICLE_TIMEOUT)
            article = extract_article(html, link)
        except Exception as exc:
            # One bad article never fails the batch
            logger.warning("Blog: skipping article %s – %s", link, exc)
            continue

        articles.append(article)
        logger.info("Blog: extracted %s → %r", link, article.title)

    return BlogCrawlResult(url=url, total_articles=len(articles), articles=articles)
