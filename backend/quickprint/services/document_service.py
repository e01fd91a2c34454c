# Overview: Document-inspection collaborator; reads page counts from uploaded files.

from __future__ import annotations

from io import BytesIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..validation import ValidationError


PDF_MAGIC = b"%PDF-"


def is_pdf(file_name: str, data: bytes) -> bool:
    return data[:5] == PDF_MAGIC or file_name.lower().endswith(".pdf")


def count_document_pages(file_name: str, data: bytes) -> int:
    """
    Page count of an uploaded document.

    Only PDFs can be inspected. Other formats (DOC/DOCX/images) need the
    page count supplied by the caller.

    Raises:
        ValidationError: not a PDF, unreadable PDF, or a PDF with no pages
    """
    if not is_pdf(file_name, data):
        raise ValidationError(
            f"Cannot detect the page count of '{file_name}'; total_pages is required",
            field="total_pages",
        )

    try:
        reader = PdfReader(BytesIO(data))
        pages = len(reader.pages)
    except (PdfReadError, ValueError, OSError) as exc:
        raise ValidationError(f"Could not read PDF '{file_name}': {exc}", field="file") from exc

    if pages < 1:
        raise ValidationError(f"PDF '{file_name}' has no pages", field="file")
    return pages
