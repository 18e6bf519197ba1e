"""Keyword frequency ranking."""

import re
from collections import Counter
from typing import Dict

from app.config import MAX_KEYWORDS

_WORD_RE = re.compile(r"\b\w{4,}\b")

STOPWORDS = frozenset(
    {
        "this", "that", "with", "from", "have", "been", "were", "they", "their", "will",
        "what", "when", "your", "more", "also", "some", "than", "then", "into", "about",
    }
)


def rank_keywords(text: str, limit: int = MAX_KEYWORDS) -> Dict[str, int]:
    """Return the *limit* most frequent words of *text*.

    Words are lowercased runs of at least four word characters, stopwords
    excluded.  Ordered by count descending; equal counts keep first-seen order.
    """
    counts = Counter(
        word for word in _WORD_RE.findall(text.lower()) if word not in STOPWORDS
    )
    # most_common() orders equal counts by first insertion
    return dict(counts.most_common(limit))
