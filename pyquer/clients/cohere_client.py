from typing import Any, Dict

from pyquer.clients.http_client import ChatHTTPClient
from pyquer.errors import ProviderError


class CohereClient(ChatHTTPClient):
    """Cohere v2 chat API"""

    provider_name = "cohere"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }

    def normalize_response(self, body: Dict[str, Any]) -> str:
        # {"message": {"role": "assistant", "content": [{"type": "text", "text": "..."}]}}
        try:
            parts = body["message"]["content"]
        except (KeyError, TypeError) as e:
            raise ProviderError(self.provider_name, f"malformed response: missing {e}") from e

        if not isinstance(parts, list):
            raise ProviderError(self.provider_name, "malformed response: content is not a list")

        text = "".join(
            part.get("text") or "" for part in parts
            if isinstance(part, dict) and part.get("type") == "text"
        )
        if not text.strip():
            raise ProviderError(self.provider_name, "response did not contain generated text")
        return text
