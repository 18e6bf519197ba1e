from pydantic import Field

from app.models.base import CamelModel


class CrawlRequest(CamelModel):
    url: str = Field(min_length=1, description="Absolute http(s) URL of the page to crawl.")
    extract_data: bool = True
    """When ``False`` only ``{url, html}`` is returned.

    The static-then-browser fallback still runs: the static capture's word
    count is computed internally to decide whether a browser render is needed.
    """


class BlogCrawlRequest(CamelModel):
    url: str = Field(min_length=1, description="Blog or article listing page.")


class PdfRequest(CamelModel):
    html: str = Field(min_length=1, description="Complete HTML document to render.")
    file_name: str = "report.pdf"
