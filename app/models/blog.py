from typing import Dict, List, Optional

from app.models.base import CamelModel


class ArticleRecord(CamelModel):
    url: str
    title: str
    h2s: List[str]
    keywords: Dict[str, int]
    published_date: Optional[str] = None
    word_count: int


class BlogCrawlResult(CamelModel):
    url: str
    total_articles: int
    articles: List[ArticleRecord]
