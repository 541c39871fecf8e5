"""
Text Extractor Module
Extracts the text layer of an uploaded PDF using pdfminer.six.
A file that cannot be parsed is reported as needing OCR, never raised.
"""
import logging
from dataclasses import dataclass
from io import BytesIO, StringIO
from typing import Optional

from pdfminer.high_level import extract_text_to_fp
from pdfminer.layout import LAParams
from pdfminer.pdfinterp import PDFResourceManager, PDFPageInterpreter
from pdfminer.converter import TextConverter
from pdfminer.pdfpage import PDFPage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    usable: bool
    error: Optional[str] = None


def extract_text(data: bytes, name: str = "paper.pdf") -> ExtractionResult:
    """
    Extract text from PDF bytes, trying the high-level API first and
    a tuned layout pass second.

    Args:
        data: Raw PDF bytes
        name: File name used for log context

    Returns:
        ExtractionResult; usable is False when the text is empty or
        whitespace-only, or when the file could not be parsed.
    """
    if not data:
        return ExtractionResult(text="", usable=False, error="empty file")

    try:
        text = _extract_primary(data)
        if text.strip():
            logger.info("Extracted %d characters from %s", len(text), name)
            return ExtractionResult(text=text.strip(), usable=True)

        logger.info("Primary extraction returned empty, trying fallback for %s", name)
        text = _extract_fallback(data)
        if text.strip():
            logger.info("Fallback extracted %d characters from %s", len(text), name)
            return ExtractionResult(text=text.strip(), usable=True)

        logger.info("No text layer found in %s", name)
        return ExtractionResult(text="", usable=False)

    except Exception as e:
        # pdfminer raises a wide range of errors (PDFSyntaxError, struct.error,
        # KeyError, UnicodeDecodeError...) for malformed files
        logger.warning("Direct extraction failed for %s: %s", name, e)
        return ExtractionResult(text="", usable=False, error=str(e) or type(e).__name__)


def needs_ocr(data: bytes, name: str = "paper.pdf") -> bool:
    """True when the PDF has no usable text layer"""
    return not extract_text(data, name).usable


def _extract_primary(data: bytes) -> str:
    output_string = StringIO()
    extract_text_to_fp(BytesIO(data), output_string, laparams=LAParams())
    return output_string.getvalue()


def _extract_fallback(data: bytes) -> str:
    output_string = StringIO()

    # Tuned for scanned-then-typeset papers with rotated or vertical text
    laparams = LAParams(
        line_overlap=0.5,
        char_margin=2.0,
        line_margin=0.5,
        word_margin=0.1,
        boxes_flow=0.5,
        detect_vertical=True,
        all_texts=False
    )

    rsrcmgr = PDFResourceManager()
    device = TextConverter(rsrcmgr, output_string, laparams=laparams)
    try:
        interpreter = PDFPageInterpreter(rsrcmgr, device)
        for page in PDFPage.get_pages(BytesIO(data), check_extractable=False):
            interpreter.process_page(page)
    finally:
        device.close()

    return output_string.getvalue()
