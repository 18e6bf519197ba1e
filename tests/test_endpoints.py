"""Tests for the HTTP surface: /crawl, /crawl-blog, /generate-pdf, /health and /.

Network fetches and the Playwright browser are replaced with lightweight
mocks so the tests run without internet access or a browser install.
"""

import base64
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.page import PageRecord
from app.services.browser_fetcher import RenderError

client = TestClient(app)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Clear the slowapi in-memory counter before every test."""
    app.state.limiter._storage.reset()
    yield


# ---------------------------------------------------------------------------
# Shared HTML fixtures
# ---------------------------------------------------------------------------

_EXAMPLE_HTML = (
    '<html><head><title>T</title><meta name="description" content="D"></head>'
    "<body><h1>H</h1><h2>A</h2><h2>B</h2><p>one two three</p></body></html>"
)

_SPA_SHELL_HTML = """
<!DOCTYPE html>
<html>
<head><title>React App</title></head>
<body>
  <div id="root"></div>
  <script src="/static/js/main.js"></script>
</body>
</html>
"""

_RENDERED_RECORD = PageRecord(
    url="https://ex.com/p",
    title="React App",
    meta_description="Rendered by the browser.",
    h1="Welcome to the SPA",
    h2s=[],
    word_count=25,
    html="<html>...</html>",
)

_PAGE_RECORD_KEYS = {
    "url",
    "title",
    "metaDescription",
    "h1",
    "h2s",
    "wordCount",
    "canonical",
    "schema",
    "internalLinksCount",
    "externalLinksCount",
    "html",
}


def _crawl(**payload):
    return client.post("/crawl", json={"url": "https://ex.com/p", **payload})


# ---------------------------------------------------------------------------
# POST /crawl
# ---------------------------------------------------------------------------

class TestCrawlEndpoint:
    def test_static_page_returns_full_record(self):
        with (
            patch("app.services.strategy.fetch_url", new=AsyncMock(return_value=_EXAMPLE_HTML)),
            patch(
                "app.services.strategy.render_page",
                new=AsyncMock(side_effect=AssertionError("browser must not be called")),
            ),
        ):
            resp = _crawl()

        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == _PAGE_RECORD_KEYS
        assert data["title"] == "T"
        assert data["metaDescription"] == "D"
        assert data["h1"] == "H"
        assert data["h2s"] == ["A", "B"]
        assert data["wordCount"] == 3
        assert data["schema"] is None

    def test_js_shell_falls_back_to_browser(self):
        render = AsyncMock(return_value=_RENDERED_RECORD)
        with (
            patch("app.services.strategy.fetch_url", new=AsyncMock(return_value=_SPA_SHELL_HTML)),
            patch("app.services.strategy.render_page", new=render),
        ):
            resp = _crawl()

        assert resp.status_code == 200
        assert resp.json()["h1"] == "Welcome to the SPA"
        render.assert_awaited_once()

    def test_extract_data_false_returns_url_and_html(self):
        with patch("app.services.strategy.fetch_url", new=AsyncMock(return_value=_EXAMPLE_HTML)):
            resp = _crawl(extractData=False)

        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == {"url", "html"}
        assert "one two three" in data["html"]

    def test_both_strategies_failing_returns_500(self):
        with (
            patch(
                "app.services.strategy.fetch_url",
                new=AsyncMock(side_effect=httpx.ConnectError("connection refused")),
            ),
            patch(
                "app.services.strategy.render_page",
                new=AsyncMock(side_effect=RenderError("Browser error: crashed")),
            ),
        ):
            resp = _crawl()

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to crawl URL", "message": "Browser error: crashed"}

    def test_blocked_url_returns_400(self):
        with patch(
            "app.services.strategy.fetch_url",
            new=AsyncMock(side_effect=ValueError("Requests to private/internal addresses are not allowed.")),
        ):
            resp = _crawl()

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid URL"

    def test_malformed_anchor_does_not_fail_the_crawl(self):
        html = '<html><body><p>hello world</p><a href="http://[oops/x">bad</a></body></html>'
        render = AsyncMock(side_effect=AssertionError("browser must not be called"))
        with (
            patch("app.services.strategy.fetch_url", new=AsyncMock(return_value=html)),
            patch("app.services.strategy.render_page", new=render),
        ):
            resp = _crawl()

        assert resp.status_code == 200
        data = resp.json()
        assert data["wordCount"] == 2
        assert data["internalLinksCount"] == 0
        render.assert_not_awaited()

    def test_missing_url_returns_400(self):
        resp = client.post("/crawl", json={})
        assert resp.status_code == 400
        data = resp.json()
        assert "error" in data
        assert data["message"] == "url is required"

    def test_empty_url_returns_400(self):
        resp = client.post("/crawl", json={"url": ""})
        assert resp.status_code == 400
        assert "error" in resp.json()


# ---------------------------------------------------------------------------
# POST /crawl-blog
# ---------------------------------------------------------------------------

class TestCrawlBlogEndpoint:
    def test_returns_articles(self):
        pages = {
            "https://ex.com/blog": '<a href="/blog/first">1</a><a href="/blog/first">again</a>',
            "https://ex.com/blog/first": (
                "<html><head><title>First</title></head><body><article>"
                "<h2>Intro</h2>\n<p>keyword keyword analysis</p></article></body></html>"
            ),
        }

        def fake_fetch(url, **kwargs):
            return pages[url]

        with patch("app.services.blog.fetch_url", new=AsyncMock(side_effect=fake_fetch)):
            resp = client.post("/crawl-blog", json={"url": "https://ex.com/blog"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["url"] == "https://ex.com/blog"
        assert data["totalArticles"] == 1
        article = data["articles"][0]
        assert set(article) == {"url", "title", "h2s", "keywords", "publishedDate", "wordCount"}
        assert article["title"] == "First"
        assert article["keywords"] == {"keyword": 2, "intro": 1, "analysis": 1}
        assert article["publishedDate"] is None

    def test_bad_article_is_left_out(self):
        pages = {
            "https://ex.com/blog": (
                '<a href="http://ex.com:abc/blog/bad">x</a><a href="/blog/good">y</a>'
            ),
            "https://ex.com/blog/good": "<html><body><h1>Good</h1><p>fine words</p></body></html>",
        }

        def fake_fetch(url, **kwargs):
            if url not in pages:
                raise httpx.InvalidURL("Invalid port: 'abc'")
            return pages[url]

        with patch("app.services.blog.fetch_url", new=AsyncMock(side_effect=fake_fetch)):
            resp = client.post("/crawl-blog", json={"url": "https://ex.com/blog"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["totalArticles"] == 1
        assert data["articles"][0]["title"] == "Good"

    def test_listing_failure_returns_500(self):
        with patch(
            "app.services.blog.fetch_url",
            new=AsyncMock(side_effect=httpx.ReadTimeout("timed out")),
        ):
            resp = client.post("/crawl-blog", json={"url": "https://ex.com/blog"})

        assert resp.status_code == 500
        assert resp.json()["error"] == "Failed to crawl blog"

    def test_listing_url_rejected_by_httpx_returns_400(self):
        with patch(
            "app.services.blog.fetch_url",
            new=AsyncMock(side_effect=httpx.InvalidURL("Invalid port: 'abc'")),
        ):
            resp = client.post("/crawl-blog", json={"url": "http://ex.com:abc/blog"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid URL"

    def test_missing_url_returns_400(self):
        resp = client.post("/crawl-blog", json={})
        assert resp.status_code == 400
        assert "error" in resp.json()


# ---------------------------------------------------------------------------
# POST /generate-pdf
# ---------------------------------------------------------------------------

_FAKE_PDF = b"%PDF-1.4\n%fake pdf body\n%%EOF"


class TestGeneratePdfEndpoint:
    def test_returns_base64_pdf(self):
        render = AsyncMock(return_value=_FAKE_PDF)
        with patch("app.routers.pdf.render_pdf", new=render):
            resp = client.post("/generate-pdf", json={"html": "<h1>Hi</h1>"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["fileName"] == "report.pdf"
        assert data["sizeBytes"] == len(_FAKE_PDF) > 0
        assert base64.b64decode(data["pdf"]) == _FAKE_PDF
        render.assert_awaited_once_with("<h1>Hi</h1>")

    def test_custom_file_name(self):
        with patch("app.routers.pdf.render_pdf", new=AsyncMock(return_value=_FAKE_PDF)):
            resp = client.post(
                "/generate-pdf", json={"html": "<p>x</p>", "fileName": "audit.pdf"}
            )

        assert resp.json()["fileName"] == "audit.pdf"

    def test_render_failure_returns_500(self):
        with patch(
            "app.routers.pdf.render_pdf",
            new=AsyncMock(side_effect=RenderError("Browser error: launch failed")),
        ):
            resp = client.post("/generate-pdf", json={"html": "<h1>Hi</h1>"})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Failed to generate PDF",
            "message": "Browser error: launch failed",
        }

    def test_missing_html_returns_400(self):
        resp = client.post("/generate-pdf", json={"fileName": "x.pdf"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "html is required"


# ---------------------------------------------------------------------------
# Service metadata
# ---------------------------------------------------------------------------

class TestServiceMetadata:
    def test_health(self):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["endpoints"]["crawlBlog"] == "POST /crawl-blog"

    def test_catalogue_lists_endpoints(self):
        resp = client.get("/")
        assert resp.status_code == 200
        paths = {endpoint["path"] for endpoint in resp.json()["endpoints"]}
        assert paths == {"/crawl", "/crawl-blog", "/generate-pdf", "/health"}


class TestUnexpectedErrors:
    def test_unhandled_exception_hides_details(self):
        quiet_client = TestClient(app, raise_server_exceptions=False)
        with patch(
            "app.routers.crawl.crawl_page",
            new=AsyncMock(side_effect=KeyError("internal detail")),
        ):
            resp = quiet_client.post("/crawl", json={"url": "https://ex.com/p"})

        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal server error"
        assert "internal detail" not in resp.text
