import logging
import logging.config

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import SERVICE_NAME, SERVICE_VERSION, settings
from app.errors import ApiError
from app.limiter import limiter
from app.routers.blog import router as blog_router
from app.routers.crawl import router as crawl_router
from app.routers.pdf import router as pdf_router

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": settings.log_level, "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="SEO Automation Service",
    description="Crawl competitor pages, blog articles, and generate PDFs.",
    version=SERVICE_VERSION,
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def _describe_validation_error(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    if error.get("type") == "missing":
        return f"{field or 'body'} is required"
    return f"{field or 'body'}: {error.get('msg', 'invalid value')}"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(_describe_validation_error(err) for err in exc.errors())
    logger.warning("Rejected request to %s: %s", request.url.path, message)
    return JSONResponse(status_code=400, content={"error": "Invalid request", "message": message})


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.error, "message": exc.message}
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": "An unexpected error occurred."},
    )


app.include_router(crawl_router)
app.include_router(blog_router)
app.include_router(pdf_router)


@app.get("/health", summary="Health check")
async def health() -> dict:
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": {
            "crawl": "POST /crawl",
            "crawlBlog": "POST /crawl-blog",
            "generatePdf": "POST /generate-pdf",
        },
    }


@app.get("/", summary="Endpoint catalogue")
async def root() -> dict:
    return {
        "service": "SEO Automation Service",
        "version": SERVICE_VERSION,
        "description": "Crawl competitor pages, blog articles, and generate PDFs",
        "endpoints": [
            {
                "method": "POST",
                "path": "/crawl",
                "description": "Crawl a single page and extract SEO data",
                "body": {"url": "string (required)", "extractData": "boolean (default: true)"},
                "returns": (
                    "url, title, metaDescription, h1, h2s, wordCount, canonical, schema, "
                    "internalLinksCount, externalLinksCount, html"
                ),
            },
            {
                "method": "POST",
                "path": "/crawl-blog",
                "description": "Crawl blog/article listing page and extract up to 15 articles",
                "body": {"url": "string (required)"},
                "returns": (
                    "url, totalArticles, "
                    "articles[{ url, title, h2s, keywords, publishedDate, wordCount }]"
                ),
            },
            {
                "method": "POST",
                "path": "/generate-pdf",
                "description": "Generate a PDF from HTML content",
                "body": {"html": "string (required)", "fileName": "string (default: report.pdf)"},
                "returns": "success, pdf (base64), fileName, sizeBytes",
            },
            {"method": "GET", "path": "/health", "description": "Health check"},
        ],
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
