"""
Tests for the OCR fallback: page ordering, partial failure and hooks
"""
import time

import pytest
from conftest import FakeImage, build_pdf

from pyquer.document import ocr
from pyquer.document.ocr import debug_image_writer, ocr_page, ocr_pdf
from pyquer.errors import PaperExtractionError


def test_pages_joined_in_order(fake_ocr):
    result = ocr_pdf(build_pdf([None, None, None]), "scan.pdf", max_workers=1)

    assert result.text == "OCR page 1\nOCR page 2\nOCR page 3"
    assert [p.page_number for p in result.pages] == [1, 2, 3]
    assert result.failed_pages == []


def test_concurrent_pages_keep_page_order(monkeypatch):
    def rasterize(data, page_number, size=None):
        return FakeImage(page_number)

    def recognize(image, lang="eng"):
        # Earlier pages finish last
        time.sleep(0.02 * (5 - image.page_number))
        return f"page {image.page_number}"

    monkeypatch.setattr(ocr, "rasterize_page", rasterize)
    monkeypatch.setattr(ocr, "recognize_image", recognize)

    result = ocr_pdf(build_pdf([None] * 4), "scan.pdf", max_workers=4)

    assert result.text == "page 1\npage 2\npage 3\npage 4"


def test_failed_page_contributes_empty_string(monkeypatch):
    def rasterize(data, page_number, size=None):
        if page_number == 2:
            raise RuntimeError("poppler crashed")
        return FakeImage(page_number)

    monkeypatch.setattr(ocr, "rasterize_page", rasterize)
    monkeypatch.setattr(ocr, "recognize_image", lambda image, lang="eng": f"text {image.page_number}")

    result = ocr_pdf(build_pdf([None, None, None]), "scan.pdf", max_workers=1)

    assert result.text == "text 1\n\ntext 3"
    assert result.failed_pages == [2]
    assert "poppler crashed" in result.pages[1].error


def test_recognition_failure_is_per_page(monkeypatch):
    def recognize(image, lang="eng"):
        if image.page_number == 1:
            raise OSError("tesseract not found")
        return "second page"

    monkeypatch.setattr(ocr, "rasterize_page", lambda data, n, size=None: FakeImage(n))
    monkeypatch.setattr(ocr, "recognize_image", recognize)

    result = ocr_pdf(build_pdf([None, None]), "scan.pdf")

    assert result.text == "\nsecond page"
    assert result.failed_pages == [1]


def test_all_pages_failing_raises(monkeypatch):
    def rasterize(data, page_number, size=None):
        raise RuntimeError("no poppler")

    monkeypatch.setattr(ocr, "rasterize_page", rasterize)

    with pytest.raises(PaperExtractionError) as exc_info:
        ocr_pdf(build_pdf([None, None]), "scan.pdf")

    assert exc_info.value.file_name == "scan.pdf"


def test_blank_pages_are_not_failures(monkeypatch):
    monkeypatch.setattr(ocr, "rasterize_page", lambda data, n, size=None: FakeImage(n))
    monkeypatch.setattr(ocr, "recognize_image", lambda image, lang="eng": "")

    result = ocr_pdf(build_pdf([None]), "blank.pdf")

    assert result.text == ""
    assert result.failed_pages == []


def test_unreadable_document_raises(fake_ocr):
    with pytest.raises(PaperExtractionError):
        ocr_pdf(b"not a pdf at all", "broken.pdf")
    assert fake_ocr == []


def test_ocr_page_never_raises(monkeypatch):
    monkeypatch.setattr(ocr, "rasterize_page", lambda data, n, size=None: FakeImage(n))

    def recognize(image, lang="eng"):
        raise ValueError("bad image")

    monkeypatch.setattr(ocr, "recognize_image", recognize)

    result = ocr_page(b"%PDF", 7)

    assert result.page_number == 7
    assert result.text == ""
    assert result.error == "bad image"
    assert not result.ok


def test_rasterize_uses_fixed_size_and_single_page(monkeypatch):
    calls = {}

    def convert(data, **kwargs):
        calls.update(kwargs)
        return [FakeImage(kwargs["first_page"])]

    monkeypatch.setattr(ocr, "convert_from_bytes", convert)

    image = ocr.rasterize_page(b"%PDF", 3)

    assert image.page_number == 3
    assert calls["first_page"] == 3
    assert calls["last_page"] == 3
    assert calls["size"] == (2200, 3000)


def test_recognize_passes_language(monkeypatch):
    seen = {}

    def image_to_string(image, lang=None):
        seen["lang"] = lang
        return "  Q1. Define entropy.\n\x0c"

    monkeypatch.setattr(ocr.pytesseract, "image_to_string", image_to_string)

    assert ocr.recognize_image(FakeImage(1), lang="hin") == "Q1. Define entropy."
    assert seen["lang"] == "hin"


def test_on_page_hook_called_for_every_page(fake_ocr):
    seen = []

    def hook(page_number, image, result):
        seen.append((page_number, image.page_number, result.text))

    ocr_pdf(build_pdf([None, None]), "scan.pdf", max_workers=1, on_page=hook)

    assert seen == [(1, 1, "OCR page 1"), (2, 2, "OCR page 2")]


def test_hook_failure_does_not_break_ocr(fake_ocr):
    def hook(page_number, image, result):
        raise IOError("disk full")

    result = ocr_pdf(build_pdf([None]), "scan.pdf", on_page=hook)

    assert result.text == "OCR page 1"


def test_results_do_not_keep_images(fake_ocr):
    result = ocr_pdf(build_pdf([None]), "scan.pdf")
    assert result.pages[0].image is None


def test_debug_image_writer(tmp_path):
    image = FakeImage(2)
    hook = debug_image_writer(str(tmp_path / "debug"), prefix="paper")

    hook(2, image, None)
    hook(3, None, None)

    assert image.saved_to == [str(tmp_path / "debug" / "paper-2.png")]
