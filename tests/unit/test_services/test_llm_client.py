from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from math_solver.clients.llm import LLMClient, build_llm_client
from math_solver.config import Config
from math_solver.errors import UpstreamCallFailure


def _mock_openai(content):
    """Build a mocked OpenAI client whose completion returns ``content``."""
    mock_message = MagicMock()
    mock_message.content = content
    mock_choice = MagicMock()
    mock_choice.message = mock_message
    mock_response = MagicMock()
    mock_response.choices = [mock_choice]

    mock_client = MagicMock()
    mock_client.chat.completions.create.return_value = mock_response
    return mock_client


@pytest.mark.unit
def test_complete_returns_content():
    """Test the reply text is returned unchanged."""
    mock_client = _mock_openai("OPERATION: derivative")
    llm = LLMClient(mock_client, model="gemini-test", temperature=0.2, top_p=0.8)

    assert llm.complete("d/dx x^2") == "OPERATION: derivative"

    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert kwargs["messages"] == [{"role": "user", "content": "d/dx x^2"}]
    assert kwargs["temperature"] == 0.2
    assert kwargs["top_p"] == 0.8
    assert "max_tokens" not in kwargs


@pytest.mark.unit
def test_complete_passes_max_tokens():
    mock_client = _mock_openai("ok")
    llm = LLMClient(mock_client, model="gemini-test", max_tokens=256)

    llm.complete("prompt")

    assert mock_client.chat.completions.create.call_args.kwargs["max_tokens"] == 256


@pytest.mark.unit
@pytest.mark.parametrize("content", [None, "", "   \n"])
def test_complete_empty_reply_raises(content):
    """Test an empty completion is an upstream failure."""
    llm = LLMClient(_mock_openai(content), model="gemini-test")

    with pytest.raises(UpstreamCallFailure):
        llm.complete("prompt")


@pytest.mark.unit
def test_complete_no_choices_raises():
    mock_client = _mock_openai("unused")
    mock_client.chat.completions.create.return_value.choices = []
    llm = LLMClient(mock_client, model="gemini-test")

    with pytest.raises(UpstreamCallFailure, match="no choices"):
        llm.complete("prompt")


@pytest.mark.unit
def test_complete_wraps_sdk_errors():
    """Test SDK errors surface as UpstreamCallFailure with the cause kept."""
    mock_client = MagicMock()
    mock_client.chat.completions.create.side_effect = OpenAIError("invalid api key")
    llm = LLMClient(mock_client, model="gemini-test")

    with pytest.raises(UpstreamCallFailure, match="invalid api key") as exc_info:
        llm.complete("prompt")

    assert isinstance(exc_info.value.__cause__, OpenAIError)


@pytest.mark.unit
def test_build_llm_client_without_key(monkeypatch):
    """Test no client is built when GEMINI_API_KEY is unset."""
    monkeypatch.setattr(Config.GEMINI, "API_KEY", None)

    assert build_llm_client() is None


@pytest.mark.unit
def test_build_llm_client_with_key(monkeypatch):
    """Test the client targets the configured model and endpoint."""
    monkeypatch.setattr(Config.GEMINI, "API_KEY", "test-key")
    monkeypatch.setattr(Config.GEMINI, "MODEL_NAME", "gemini-test")

    llm = build_llm_client()

    assert isinstance(llm, LLMClient)
    assert llm.model == "gemini-test"
    assert str(llm.client.base_url).startswith(Config.GEMINI.BASE_URL.rstrip("/"))
