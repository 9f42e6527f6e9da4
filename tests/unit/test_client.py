"""Tests for Client configuration."""

import pytest
import responses

from respstream import Client
from respstream._client import DEFAULT_BASE_URL
from respstream._exceptions import AuthenticationError
from respstream._resources import Chat, Responses
from respstream.streaming import DEFAULT_MAX_FRAME_BYTES
from tests.utils.sse import response_dict


class TestClient:
    def test_missing_api_key_raises(self):
        with pytest.raises(AuthenticationError, match="OPENAI_API_KEY"):
            Client()

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        client = Client()
        assert client._http._session.headers["Authorization"] == "Bearer sk-env"

    def test_explicit_key_wins(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        client = Client(api_key="sk-arg")
        assert client._http._session.headers["Authorization"] == "Bearer sk-arg"

    def test_default_base_url(self, api_key):
        client = Client(api_key=api_key)
        assert client._http._base_url == DEFAULT_BASE_URL

    def test_base_url_from_env(self, monkeypatch, api_key):
        monkeypatch.setenv("OPENAI_BASE_URL", "http://localhost:8080/v1/")
        client = Client(api_key=api_key)
        assert client._http._base_url == "http://localhost:8080/v1"

    def test_has_resources(self, client):
        assert isinstance(client.responses, Responses)
        assert isinstance(client.chat, Chat)

    def test_max_frame_bytes_default(self, client):
        assert client.responses._max_frame_bytes == DEFAULT_MAX_FRAME_BYTES

    def test_max_frame_bytes_from_env(self, monkeypatch, api_key):
        monkeypatch.setenv("RESPSTREAM_MAX_FRAME_BYTES", "1024")
        assert Client(api_key=api_key).responses._max_frame_bytes == 1024

    def test_max_frame_bytes_argument_wins(self, monkeypatch, api_key):
        monkeypatch.setenv("RESPSTREAM_MAX_FRAME_BYTES", "1024")
        client = Client(api_key=api_key, max_frame_bytes=2048)
        assert client.responses._max_frame_bytes == 2048

    @pytest.mark.parametrize("value", ["lots", "0", "-5"])
    def test_invalid_max_frame_bytes_env(self, monkeypatch, api_key, value):
        monkeypatch.setenv("RESPSTREAM_MAX_FRAME_BYTES", value)
        with pytest.raises(ValueError, match="RESPSTREAM_MAX_FRAME_BYTES"):
            Client(api_key=api_key)

    @responses.activate
    def test_context_manager(self, api_key, base_url):
        responses.add(
            responses.GET, f"{base_url}/responses/resp_123", json=response_dict(), status=200
        )
        with Client(api_key=api_key, base_url=base_url) as client:
            assert client.responses.retrieve("resp_123").id == "resp_123"
