import base64
import logging

from fastapi import APIRouter, Request

from app.config import settings
from app.errors import ApiError
from app.limiter import limiter
from app.models.request import PdfRequest
from app.models.response import ErrorResponse, PdfResponse
from app.services.browser_fetcher import RenderError
from app.services.pdf import render_pdf

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/generate-pdf",
    response_model=PdfResponse,
    summary="Generate a PDF from HTML",
    description=(
        "Renders *html* in a headless browser and prints it to an A4 PDF with "
        "a page-number footer.  The document is returned base64-encoded."
    ),
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def generate_pdf(request: Request, body: PdfRequest) -> PdfResponse:
    try:
        pdf = await render_pdf(body.html)
    except RenderError as exc:
        logger.error("PDF generation failed for %s: %s", body.file_name, exc)
        raise ApiError(500, "Failed to generate PDF", str(exc))

    logger.info("Generated %s (%d bytes)", body.file_name, len(pdf))
    return PdfResponse(
        success=True,
        pdf=base64.b64encode(pdf).decode("ascii"),
        file_name=body.file_name,
        size_bytes=len(pdf),
    )
