"""
Exception types shared by the ingestion pipeline, provider clients and API
"""
from typing import Optional


class PyquerError(Exception):
    """Base class for all application errors"""


class InputError(PyquerError):
    """Request rejected before any file or network I/O"""


class InvalidProviderError(InputError):
    def __init__(self, selector):
        self.selector = selector
        super().__init__(f"Unsupported provider: {selector!r}")


class PaperExtractionError(PyquerError):
    """A paper could not be read directly or through OCR"""

    def __init__(self, file_name: str, detail: str):
        self.file_name = file_name
        self.detail = detail
        super().__init__(f"Failed to extract text from {file_name}: {detail}")


class ProviderError(PyquerError):
    """Normalized failure of an LLM provider call"""

    def __init__(self, provider: str, detail: str, retryable: bool = False):
        self.provider = provider
        self.detail = detail
        self.retryable = retryable
        super().__init__(f"{provider} request failed: {detail}")


class AuthenticationError(PyquerError):
    pass


class DuplicateUserError(PyquerError):
    def __init__(self, email: Optional[str] = None):
        self.email = email
        super().__init__("User already exists with this email")
