import io
import logging
from typing import Optional

import PyPDF2

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"


def is_pdf(data: bytes) -> bool:
    """Cheap header check used to reject non-PDF uploads"""
    return bool(data) and data.lstrip()[:5] == PDF_MAGIC


def count_pages(data: bytes) -> Optional[int]:
    """
    Return the page count of a PDF
    Returns: page_count or None if invalid/corrupted
    """
    try:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(data))
        return len(pdf_reader.pages)
    except Exception as e:
        logger.warning("PDF page count failed: %s", e)
        return None
