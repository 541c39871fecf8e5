"""
Shared fixtures: in-memory PDFs, fake provider clients and storage.
"""
from typing import List, Optional, Sequence

import pytest

from pyquer.services.provider_dispatcher import ProviderDispatcher
from pyquer.services.storage_service import FileStorage


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages: Sequence[Optional[List[str]]]) -> bytes:
    """
    Build a minimal PDF. Each entry is a list of text lines for that page,
    or None for a page with no text layer (stand-in for a scanned page).
    """
    bodies = {
        1: "<< /Type /Catalog /Pages 2 0 R >>",
        3: "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    kids = []
    for index, lines in enumerate(pages):
        page_num = 4 + 2 * index
        content_num = page_num + 1
        kids.append(f"{page_num} 0 R")

        if lines:
            ops = ["BT", "/F1 12 Tf", "72 720 Td"]
            for i, line in enumerate(lines):
                if i:
                    ops.append("0 -18 Td")
                ops.append(f"({_escape(line)}) Tj")
            ops.append("ET")
            stream = "\n".join(ops)
        else:
            stream = ""

        bodies[page_num] = (
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {content_num} 0 R >>"
        )
        bodies[content_num] = f"<< /Length {len(stream.encode('latin-1'))} >>\nstream\n{stream}\nendstream"

    bodies[2] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {len(pages)} >>"

    out = bytearray(b"%PDF-1.4\n")
    offsets = {}
    for num in sorted(bodies):
        offsets[num] = len(out)
        out += f"{num} 0 obj\n{bodies[num]}\nendobj\n".encode("latin-1")

    xref_offset = len(out)
    size = max(bodies) + 1
    out += f"xref\n0 {size}\n".encode("latin-1")
    out += b"0000000000 65535 f \n"
    for num in range(1, size):
        out += f"{offsets[num]:010d} 00000 n \n".encode("latin-1")
    out += f"trailer\n<< /Size {size} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode("latin-1")
    return bytes(out)


class FakeLLMClient:
    """Records prompts and returns a canned analysis"""

    def __init__(self, name: str, response: str = None, error: Exception = None):
        self.name = name
        self.response = response if response is not None else f"{name} analysis"
        self.error = error
        self.prompts = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakeImage:
    def __init__(self, page_number: int):
        self.page_number = page_number
        self.saved_to = []

    def save(self, path):
        self.saved_to.append(path)


@pytest.fixture
def text_pdf() -> bytes:
    return build_pdf([
        ["Q1. What is a compiler?", "Q2. Define a regular expression."],
        ["Q3. Explain lexical analysis with an example."],
    ])


@pytest.fixture
def blank_pdf() -> bytes:
    return build_pdf([None, None])


@pytest.fixture
def fake_clients():
    return {
        "gemini": FakeLLMClient("gemini"),
        "mistral": FakeLLMClient("mistral"),
        "cohere": FakeLLMClient("cohere"),
    }


@pytest.fixture
def dispatcher(fake_clients):
    return ProviderDispatcher(**fake_clients)


@pytest.fixture
def storage(tmp_path):
    return FileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def fake_ocr(monkeypatch):
    """
    Replace rasterization and recognition: every page renders to a FakeImage
    and is recognized as "OCR page N". Returns the list of recognized pages.
    """
    recognized = []

    def rasterize(data, page_number, size=None):
        return FakeImage(page_number)

    def recognize(image, lang="eng"):
        recognized.append(image.page_number)
        return f"OCR page {image.page_number}"

    monkeypatch.setattr("pyquer.document.ocr.rasterize_page", rasterize)
    monkeypatch.setattr("pyquer.document.ocr.recognize_image", recognize)
    return recognized
