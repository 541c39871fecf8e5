"""
Tests for provider clients: request shape and response envelope handling
"""
import pytest
import requests

from pyquer.clients.cohere_client import CohereClient
from pyquer.clients.gemini_client import GeminiClient
from pyquer.clients.mistral_client import MistralClient
from pyquer.errors import ProviderError


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def mistral(session):
    return MistralClient("m-key", "mistral-large-latest", "https://mistral.test/v1/chat/completions", 30, session)


def cohere(session):
    return CohereClient("c-key", "command-r-plus", "https://cohere.test/v2/chat", 30, session)


class TestMistralClient:

    def test_request_and_response(self):
        session = FakeSession(FakeResponse(body={
            "choices": [{"message": {"role": "assistant", "content": "1. Repeated Questions..."}}]
        }))

        assert mistral(session).generate("the prompt") == "1. Repeated Questions..."

        sent = session.requests[0]
        assert sent["json"]["model"] == "mistral-large-latest"
        assert sent["json"]["messages"] == [{"role": "user", "content": "the prompt"}]
        assert sent["headers"]["Authorization"] == "Bearer m-key"
        assert sent["timeout"] == 30

    def test_missing_choices(self):
        session = FakeSession(FakeResponse(body={"object": "chat.completion"}))

        with pytest.raises(ProviderError) as exc_info:
            mistral(session).generate("p")
        assert exc_info.value.provider == "mistral"

    def test_empty_content(self):
        session = FakeSession(FakeResponse(body={"choices": [{"message": {"content": ""}}]}))

        with pytest.raises(ProviderError):
            mistral(session).generate("p")

    def test_http_error(self):
        session = FakeSession(FakeResponse(status_code=401, text='{"message": "Unauthorized"}'))

        with pytest.raises(ProviderError) as exc_info:
            mistral(session).generate("p")
        assert "401" in exc_info.value.detail
        assert exc_info.value.retryable is False

    def test_rate_limit_is_retryable(self):
        session = FakeSession(FakeResponse(status_code=429, text="slow down"))

        with pytest.raises(ProviderError) as exc_info:
            mistral(session).generate("p")
        assert exc_info.value.retryable is True

    def test_timeout_is_retryable(self):
        session = FakeSession(error=requests.Timeout("read timed out"))

        with pytest.raises(ProviderError) as exc_info:
            mistral(session).generate("p")
        assert exc_info.value.retryable is True
        assert "timed out" in exc_info.value.detail

    def test_invalid_json(self):
        session = FakeSession(FakeResponse(body=None, text="<html>"))

        with pytest.raises(ProviderError):
            mistral(session).generate("p")


class TestCohereClient:

    def test_joins_text_parts(self):
        session = FakeSession(FakeResponse(body={
            "message": {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": "Part one. "},
                    {"type": "thinking", "thinking": "hidden"},
                    {"type": "text", "text": "Part two."},
                ],
            }
        }))

        assert cohere(session).generate("p") == "Part one. Part two."
        assert session.requests[0]["json"]["model"] == "command-r-plus"

    def test_missing_message(self):
        session = FakeSession(FakeResponse(body={"text": "v1 style answer"}))

        with pytest.raises(ProviderError) as exc_info:
            cohere(session).generate("p")
        assert exc_info.value.provider == "cohere"

    def test_content_not_a_list(self):
        session = FakeSession(FakeResponse(body={"message": {"content": "plain"}}))

        with pytest.raises(ProviderError):
            cohere(session).generate("p")

    def test_connection_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))

        with pytest.raises(ProviderError) as exc_info:
            cohere(session).generate("p")
        assert exc_info.value.retryable is True


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append((model, contents))
        if self.error is not None:
            raise self.error
        return self.response


class FakeGenaiClient:
    def __init__(self, models):
        self.models = models


class FakeGenerateResponse:
    def __init__(self, text):
        self.text = text


class TestGeminiClient:

    def test_returns_response_text(self):
        models = FakeModels(FakeGenerateResponse("analysis text"))
        client = GeminiClient(FakeGenaiClient(models), "gemini-1.5-flash")

        assert client.generate("prompt") == "analysis text"
        assert models.calls == [("gemini-1.5-flash", ["prompt"])]

    def test_missing_text(self):
        client = GeminiClient(FakeGenaiClient(FakeModels(FakeGenerateResponse(None))))

        with pytest.raises(ProviderError) as exc_info:
            client.generate("prompt")
        assert exc_info.value.provider == "gemini"

    def test_unavailable_is_retryable(self):
        models = FakeModels(error=RuntimeError("503 UNAVAILABLE. The model is overloaded."))
        client = GeminiClient(FakeGenaiClient(models))

        with pytest.raises(ProviderError) as exc_info:
            client.generate("prompt")
        assert exc_info.value.retryable is True

    def test_other_errors_not_retryable(self):
        models = FakeModels(error=RuntimeError("400 INVALID_ARGUMENT"))
        client = GeminiClient(FakeGenaiClient(models))

        with pytest.raises(ProviderError) as exc_info:
            client.generate("prompt")
        assert exc_info.value.retryable is False
        assert "INVALID_ARGUMENT" in exc_info.value.detail
