import logging
from typing import Any, Dict, Optional

import requests

from pyquer.errors import ProviderError

logger = logging.getLogger(__name__)


class ChatHTTPClient:
    """
    Shared transport for JSON chat APIs authenticated with a bearer key.
    Subclasses build the payload and normalize the response envelope.
    """

    provider_name = "http"

    def __init__(
        self,
        api_key: str,
        model: str,
        url: str,
        timeout: float = 120.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    def normalize_response(self, body: Dict[str, Any]) -> str:
        raise NotImplementedError

    def generate(self, prompt: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            response = self.session.post(
                self.url,
                json=self.build_payload(prompt),
                headers=headers,
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            raise ProviderError(self.provider_name, f"transport error: {e}", retryable=True) from e
        except requests.RequestException as e:
            raise ProviderError(self.provider_name, f"request failed: {e}") from e

        if response.status_code >= 400:
            retryable = response.status_code in (429, 500, 502, 503, 504)
            raise ProviderError(
                self.provider_name,
                f"HTTP {response.status_code}: {response.text[:500]}",
                retryable=retryable,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(self.provider_name, "response was not valid JSON") from e

        return self.normalize_response(body)
