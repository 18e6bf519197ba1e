from typing import Any, List, Optional

from pydantic import Field

from app.models.base import CamelModel


class PageRecord(CamelModel):
    """SEO signals extracted from a single page."""

    url: str
    title: str = ""
    meta_description: str = ""
    h1: str = ""
    h2s: List[str] = []
    word_count: int = Field(default=0, ge=0)
    canonical: str = ""
    # First JSON-LD block, any JSON shape; None when absent or malformed.
    # Stored as ``schema_data`` because ``schema`` shadows a BaseModel attribute.
    schema_data: Optional[Any] = Field(default=None, alias="schema")
    internal_links_count: int = Field(default=0, ge=0)
    external_links_count: int = Field(default=0, ge=0)
    html: str = ""


class RawPage(CamelModel):
    """Page markup only, returned when the caller opts out of extraction."""

    url: str
    html: str
