import logging
from typing import Optional

from google import genai
from google.genai import types

from pyquer.errors import ProviderError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "gemini"


class GeminiClient:
    """Sends a prompt through google-genai and returns the generated text"""

    def __init__(self, client: genai.Client, model: str = "gemini-1.5-flash"):
        self._client = client
        self.model = model

    def generate(self, prompt: str) -> str:
        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=[prompt],
            )
        except Exception as e:
            error_str = str(e)
            retryable = any(marker in error_str for marker in ("503", "UNAVAILABLE", "429", "timed out", "Timeout"))
            raise ProviderError(PROVIDER_NAME, error_str or type(e).__name__, retryable=retryable) from e

        return normalize_response(response)


def normalize_response(response) -> str:
    """Pull the generated text out of a GenerateContentResponse"""
    if response is None:
        raise ProviderError(PROVIDER_NAME, "empty response")
    try:
        text = response.text
    except (AttributeError, ValueError) as e:
        raise ProviderError(PROVIDER_NAME, f"malformed response: {e}") from e
    if not text or not text.strip():
        raise ProviderError(PROVIDER_NAME, "response did not contain generated text")
    return text


def create_gemini_client(api_key: Optional[str], model: str, timeout_seconds: float) -> Optional[GeminiClient]:
    """Build a client handle, or None when no API key is configured"""
    if not api_key:
        logger.info("GEMINI_API_KEY not set, Gemini provider disabled")
        return None
    client = genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
    )
    logger.info("Gemini client initialized (model=%s)", model)
    return GeminiClient(client, model)
