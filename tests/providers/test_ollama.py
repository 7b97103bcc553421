import pytest
from types import SimpleNamespace
from unittest.mock import Mock, patch

from httpx import ReadTimeout, ConnectError
from ollama import ResponseError

from src.models.providers.ollama import OllamaProvider
from src.models.providers.base import ChatRequest, ModelError, ModelTimeout


class TestOllamaProvider:
    """Test suite for OllamaProvider functionality"""

    @pytest.fixture
    def provider(self):
        with patch('src.models.providers.ollama.Client'):
            return OllamaProvider(host="http://localhost:11434", request_timeout_s=30)

    @pytest.fixture
    def mock_client(self, provider):
        return provider.client

    @pytest.fixture
    def request_(self):
        return ChatRequest(
            model="qwen2.5:7b",
            messages=[{"role": "user", "content": "Problem: 2+2="}],
            params={"temperature": 0.2},
        )

    def test_initialization_defaults(self):
        with patch('src.models.providers.ollama.Client'):
            provider = OllamaProvider()
            assert provider.host == "http://localhost:11434"
            assert provider.keep_alive == "5m"

    def test_dict_response(self, provider, mock_client, request_):
        """
        Test: Chat completion returning a plain dict
        Ensures: content and timing metadata are extracted
        """
        mock_client.chat.return_value = {
            "model": "qwen2.5:7b",
            "message": {"role": "assistant", "content": "2 + 2 = 4\n(Answer: 4)"},
            "total_duration": 1000000000,
            "eval_count": 10,
        }

        response = provider.chat(request_)

        assert response.content == "2 + 2 = 4\n(Answer: 4)"
        assert response.meta["provider"] == "ollama"
        assert response.meta["model"] == "qwen2.5:7b"
        assert response.meta["total_duration"] == 1000000000
        assert response.meta["eval_count"] == 10
        assert "latency" in response.meta

        call_args = mock_client.chat.call_args
        assert call_args[1]["model"] == "qwen2.5:7b"
        assert call_args[1]["messages"] == request_.messages
        assert call_args[1]["options"] == {"temperature": 0.2}
        assert call_args[1]["keep_alive"] == "5m"

    def test_object_response(self, provider, mock_client, request_):
        mock_client.chat.return_value = SimpleNamespace(
            message=SimpleNamespace(content="(Answer: 4)"), model="qwen2.5:7b"
        )

        response = provider.chat(request_)

        assert response.content == "(Answer: 4)"
        assert response.meta["model"] == "qwen2.5:7b"

    def test_malformed_response(self, provider, mock_client, request_):
        mock_client.chat.return_value = "not a response"
        with pytest.raises(ModelError, match="unexpected response structure"):
            provider.chat(request_)

    def test_timeout_handling(self, provider, mock_client, request_):
        mock_client.chat.side_effect = ReadTimeout("Request timed out")
        with pytest.raises(ModelTimeout):
            provider.chat(request_)
        assert mock_client.chat.call_count == 1

    def test_response_error_is_not_retried(self, provider, mock_client, request_):
        mock_client.chat.side_effect = ResponseError("server busy", 503)
        with pytest.raises(ModelError, match="server busy"):
            provider.chat(request_)
        assert mock_client.chat.call_count == 1

    def test_connection_error(self, provider, mock_client, request_):
        mock_client.chat.side_effect = ConnectError("Connection failed")
        with pytest.raises(ModelError, match="Ollama request failed"):
            provider.chat(request_)

    def test_keep_alive_and_timeout_overrides(self, provider, request_):
        override = ChatRequest(
            model="qwen2.5:7b",
            messages=request_.messages,
            params={"keep_alive": "10m", "timeout": 5, "temperature": 0},
        )
        with patch('src.models.providers.ollama.Client') as client_cls:
            client_cls.return_value.chat.return_value = {"message": {"content": "ok"}}
            provider.chat(override)

            client_cls.assert_called_once_with(host="http://localhost:11434", timeout=5)
            kwargs = client_cls.return_value.chat.call_args[1]
            assert kwargs["keep_alive"] == "10m"
            assert kwargs["options"] == {"temperature": 0}

    def test_health_check(self, provider, mock_client):
        mock_client.list.return_value = {"models": []}
        assert provider.health_check() is True
        mock_client.list.side_effect = Exception("Connection failed")
        assert provider.health_check() is False
