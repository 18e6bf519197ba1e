"""Process-wide configuration: fixed header sets, browser flags, limits and timeouts.

Everything here is created once at import time and never mutated.  Services
receive these values as keyword-argument defaults so tests can pass their own.
"""

import os
from dataclasses import dataclass
from types import MappingProxyType

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
ACCEPT_LANGUAGE = "en-US,en;q=0.9"

BROWSER_HEADERS = MappingProxyType(
    {
        "User-Agent": BROWSER_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": ACCEPT_LANGUAGE,
        "Accept-Encoding": "gzip, deflate, br",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Cache-Control": "max-age=0",
    }
)

# --no-sandbox is required when running as root inside a container
# (Docker drops the user namespace needed by Chromium's sandbox).
BROWSER_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-zygote",
    "--single-process",
    "--disable-extensions",
)

# Static fetcher
PAGE_TIMEOUT = 20  # seconds
ARTICLE_TIMEOUT = 15  # seconds
MAX_REDIRECTS = 5
MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10 MB

# Rendered fetcher
NAVIGATION_TIMEOUT_MS = 30_000
SETTLE_MS = 2_500
SESSION_TIMEOUT = 60  # seconds, hard ceiling for one browser session

# Blog crawler / keyword ranker
MAX_ARTICLES = 15
MAX_KEYWORDS = 10

SERVICE_NAME = "seo-automation-service"
SERVICE_VERSION = "3.0.0"


@dataclass(frozen=True)
class Settings:
    port: int = 3000
    log_level: str = "INFO"
    rate_limit: str = "60/minute"


def load_settings() -> Settings:
    """Build :class:`Settings` from the environment."""
    return Settings(
        port=int(os.environ.get("PORT", "3000")),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        rate_limit=os.environ.get("RATE_LIMIT", "60/minute"),
    )


settings = load_settings()
