from app.models.base import CamelModel


class PdfResponse(CamelModel):
    success: bool
    pdf: str
    """Base64-encoded PDF document."""
    file_name: str
    size_bytes: int


class ErrorResponse(CamelModel):
    error: str
    message: str
