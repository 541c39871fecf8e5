"""
Routes an assembled prompt to one of the configured LLM providers and
returns plain text. Client handles are injected at construction.
"""
import logging
from typing import Dict, Optional, Protocol

from pyquer.clients.cohere_client import CohereClient
from pyquer.clients.gemini_client import create_gemini_client
from pyquer.clients.mistral_client import MistralClient
from pyquer.errors import InputError, ProviderError
from pyquer.models.analysis import Provider

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    def generate(self, prompt: str) -> str:
        ...


class ProviderDispatcher:
    def __init__(
        self,
        gemini: Optional[LLMClient] = None,
        mistral: Optional[LLMClient] = None,
        cohere: Optional[LLMClient] = None,
    ):
        self._clients: Dict[Provider, Optional[LLMClient]] = {
            Provider.GEMINI: gemini,
            Provider.MISTRAL: mistral,
            Provider.COHERE: cohere,
        }
        missing = set(Provider) - set(self._clients)
        if missing:
            raise ValueError(f"No client slot for provider(s): {sorted(p.value for p in missing)}")

    @property
    def available_providers(self):
        return [p for p, client in self._clients.items() if client is not None]

    def dispatch(self, prompt: str, provider) -> str:
        """
        Send the prompt to the selected provider.

        Raises:
            InvalidProviderError: Unknown selector; no client is contacted
            InputError: Empty prompt
            ProviderError: Provider not configured, transport or envelope failure
        """
        selected = Provider.parse(provider)
        if not prompt or not prompt.strip():
            raise InputError("Prompt is empty")

        client = self._clients[selected]
        if client is None:
            raise ProviderError(selected.value, "provider is not configured (missing API key)")

        logger.info("Sending prompt (%d chars) to %s", len(prompt), selected.value)
        try:
            text = client.generate(prompt)
        except ProviderError as e:
            logger.error("%s request failed: %s", selected.value, e.detail)
            raise
        except Exception as e:
            logger.error("%s request failed: %s", selected.value, e)
            raise ProviderError(selected.value, str(e) or type(e).__name__) from e

        if not isinstance(text, str) or not text.strip():
            raise ProviderError(selected.value, "response did not contain generated text")
        return text


def create_dispatcher(config) -> ProviderDispatcher:
    """Build a dispatcher with one client per provider that has an API key"""
    timeout = config.LLM_TIMEOUT_SECONDS

    mistral = None
    if config.MISTRAL_API_KEY:
        mistral = MistralClient(config.MISTRAL_API_KEY, config.MISTRAL_MODEL, config.MISTRAL_API_URL, timeout)
    cohere = None
    if config.COHERE_API_KEY:
        cohere = CohereClient(config.COHERE_API_KEY, config.COHERE_MODEL, config.COHERE_API_URL, timeout)

    return ProviderDispatcher(
        gemini=create_gemini_client(config.GEMINI_API_KEY, config.GEMINI_MODEL, timeout),
        mistral=mistral,
        cohere=cohere,
    )
