"""DOM extractor: turns a page's HTML into a :class:`PageRecord`.

The same algorithm runs inside the browser on the rendered path (see
``browser_fetcher._EXTRACT_SCRIPT``); keep the two in step.
"""

import copy
import json
from typing import Any, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from app.models.page import PageRecord

# Subtrees whose text is never rendered to the reader
_INVISIBLE_TAGS = ("script", "style", "noscript", "template")

_NON_NAVIGABLE_PREFIXES = ("#", "javascript:", "mailto:", "tel:")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _text(node: Optional[Tag]) -> str:
    return node.get_text().strip() if node else ""


def visible_text(node: Optional[Tag]) -> str:
    """Return the text of *node* without script/style/noscript/template content.

    Text nodes are concatenated as they appear in the markup, like the
    in-page ``textContent`` used on the rendered path.  *node* itself is
    left untouched.
    """
    if node is None:
        return ""
    clone = copy.copy(node)
    for tag in clone.find_all(_INVISIBLE_TAGS):
        tag.decompose()
    return clone.get_text()


def count_words(text: str) -> int:
    return len(text.split())


def page_word_count(html: str) -> int:
    """Word count of the visible body text of *html*."""
    return count_words(visible_text(parse_html(html).body))


def _extract_schema(soup: BeautifulSoup) -> Optional[Any]:
    """Parse the first JSON-LD block; malformed JSON is treated as absent."""
    script = soup.find("script", attrs={"type": "application/ld+json"})
    if not script:
        return None
    try:
        return json.loads(script.get_text())
    except json.JSONDecodeError:
        return None


def _count_links(soup: BeautifulSoup, url: str) -> Tuple[int, int]:
    """Return ``(internal, external)`` anchor counts for a page at *url*.

    Internal anchors are root-relative or resolve to the page's own host.
    External is every ``http*`` anchor minus the internal count, floored at
    zero; root-relative internals are subtracted too, so external may
    undercount on mixed pages.
    """
    hostname = urlparse(url).hostname
    internal = 0
    http_links = 0
    for a in soup.find_all("a", href=True):
        href = str(a["href"]).strip()
        if href.lower().startswith("http"):
            http_links += 1
        if not href or href.lower().startswith(_NON_NAVIGABLE_PREFIXES):
            continue
        if href.startswith("/"):
            internal += 1
            continue
        try:
            resolved_host = urlparse(urljoin(url, href)).hostname
        except ValueError:
            # Unparseable href (e.g. "http://[oops/x"); never internal
            continue
        if resolved_host == hostname:
            internal += 1
    return internal, max(0, http_links - internal)


def extract_seo(html: str, url: str) -> PageRecord:
    """Extract SEO signals from *html* describing the page at *url*."""
    soup = parse_html(html)

    meta = soup.find("meta", attrs={"name": "description"})
    meta_description = str(meta.get("content", "")) if meta else ""

    canonical_tag = soup.find("link", rel="canonical")
    canonical = str(canonical_tag.get("href", "")) if canonical_tag else ""

    internal, external = _count_links(soup, url)

    return PageRecord(
        url=url,
        title=_text(soup.find("title")),
        meta_description=meta_description,
        h1=_text(soup.find("h1")),
        h2s=[h2.get_text().strip() for h2 in soup.find_all("h2")],
        word_count=count_words(visible_text(soup.body)),
        canonical=canonical,
        schema_data=_extract_schema(soup),
        internal_links_count=internal,
        external_links_count=external,
        html=str(soup),
    )
