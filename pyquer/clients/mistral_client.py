from typing import Any, Dict

from pyquer.clients.http_client import ChatHTTPClient
from pyquer.errors import ProviderError


class MistralClient(ChatHTTPClient):
    """Mistral chat completions API"""

    provider_name = "mistral"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }

    def normalize_response(self, body: Dict[str, Any]) -> str:
        # {"choices": [{"message": {"role": "assistant", "content": "..."}}]}
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.provider_name, f"malformed response: missing {e}") from e

        if isinstance(content, list):
            content = "".join(
                part.get("text", "") for part in content
                if isinstance(part, dict) and part.get("type", "text") == "text"
            )
        if not isinstance(content, str) or not content.strip():
            raise ProviderError(self.provider_name, "response did not contain generated text")
        return content
