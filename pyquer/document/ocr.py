"""
OCR Fallback Module
Rasterizes each page of an image-only PDF with pdf2image and runs
Tesseract on it. A page that fails contributes an empty string; the
document only fails when no page could be processed at all.
"""
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

import pytesseract
from pdf2image import convert_from_bytes

from pyquer.document.validator import count_pages
from pyquer.errors import PaperExtractionError

logger = logging.getLogger(__name__)

# Roughly an A4 page at 260 dpi
DEFAULT_PAGE_SIZE = (2200, 3000)

PageHook = Callable[[int, Any, "PageResult"], None]


@dataclass(frozen=True)
class PageResult:
    page_number: int
    text: str
    error: Optional[str] = None
    image: Any = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class OCRResult:
    text: str
    pages: List[PageResult]

    @property
    def failed_pages(self) -> List[int]:
        return [p.page_number for p in self.pages if not p.ok]


def rasterize_page(data: bytes, page_number: int, size: Tuple[int, int] = DEFAULT_PAGE_SIZE):
    """Render a single 1-based page to a PIL image"""
    images = convert_from_bytes(
        data,
        first_page=page_number,
        last_page=page_number,
        size=size,
        fmt="png",
        thread_count=1,
    )
    if not images:
        raise ValueError(f"no image rendered for page {page_number}")
    return images[0]


def recognize_image(image, lang: str = "eng") -> str:
    return pytesseract.image_to_string(image, lang=lang).strip()


def ocr_page(
    data: bytes,
    page_number: int,
    size: Tuple[int, int] = DEFAULT_PAGE_SIZE,
    lang: str = "eng",
) -> PageResult:
    """
    Rasterize and recognize one page.

    Never raises: rasterization or recognition errors are returned in
    PageResult.error with empty text.
    """
    image = None
    try:
        image = rasterize_page(data, page_number, size)
        text = recognize_image(image, lang)
        return PageResult(page_number=page_number, text=text, image=image)
    except Exception as e:
        return PageResult(
            page_number=page_number,
            text="",
            error=str(e) or type(e).__name__,
            image=image,
        )


def ocr_pdf(
    data: bytes,
    name: str = "paper.pdf",
    *,
    size: Tuple[int, int] = DEFAULT_PAGE_SIZE,
    lang: str = "eng",
    max_workers: int = 2,
    on_page: Optional[PageHook] = None,
) -> OCRResult:
    """
    OCR every page of a PDF and join page texts in page order.

    Args:
        data: Raw PDF bytes
        name: File name used in errors and logs
        size: Target raster size per page
        lang: Tesseract language
        max_workers: Pages processed concurrently
        on_page: Optional diagnostic hook called with (page_number, image, result)

    Raises:
        PaperExtractionError: If the document cannot be opened or every page failed
    """
    page_count = count_pages(data)
    if page_count is None:
        raise PaperExtractionError(name, "document could not be opened for OCR")
    if page_count == 0:
        raise PaperExtractionError(name, "document has no pages")

    logger.info("Running OCR on %d page(s) of %s", page_count, name)

    page_numbers = range(1, page_count + 1)
    workers = max(1, min(max_workers, page_count))
    if workers == 1:
        results = [ocr_page(data, n, size, lang) for n in page_numbers]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order, i.e. page order
            results = list(executor.map(lambda n: ocr_page(data, n, size, lang), page_numbers))

    pages = []
    for result in results:
        if not result.ok:
            logger.warning("OCR failed for page %d of %s: %s", result.page_number, name, result.error)
        if on_page is not None:
            _run_hook(on_page, result, name)
        pages.append(PageResult(result.page_number, result.text, result.error))

    if not any(p.ok for p in pages):
        raise PaperExtractionError(name, f"OCR failed on all {page_count} page(s)")

    text = "\n".join(p.text for p in pages)
    logger.info("OCR extracted %d characters from %s", len(text), name)
    return OCRResult(text=text, pages=pages)


def _run_hook(hook: PageHook, result: PageResult, name: str):
    try:
        hook(result.page_number, result.image, result)
    except Exception as e:
        logger.warning("OCR page hook failed for page %d of %s: %s", result.page_number, name, e)


def debug_image_writer(directory: str, prefix: str = "page") -> PageHook:
    """Build an on_page hook that saves every rendered page image to directory"""
    os.makedirs(directory, exist_ok=True)

    def write(page_number: int, image, result: PageResult):
        if image is None:
            return
        path = os.path.join(directory, f"{prefix}-{page_number}.png")
        image.save(path)
        logger.debug("Saved OCR debug image %s", path)

    return write
