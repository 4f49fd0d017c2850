from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from video_transcriber.config import Settings
from video_transcriber.errors import SummaryError
from video_transcriber.summarizer import (
    ClaudeSummarizer,
    OllamaSummarizer,
    OpenAISummarizer,
    create_summarizer,
    generate_summary,
)


def _capture_post(monkeypatch: pytest.MonkeyPatch, payload: object) -> dict:
    captured: dict = {}

    mock_response = MagicMock()
    mock_response.json.return_value = payload
    mock_response.raise_for_status.return_value = None

    def fake_post(url: str, headers: dict, json: dict, timeout: int) -> MagicMock:  # type: ignore[override]
        captured["url"] = url
        captured["headers"] = headers
        captured["json"] = json
        captured["timeout"] = timeout
        return mock_response

    monkeypatch.setattr("video_transcriber.summarizer.requests.post", fake_post)
    return captured


def test_claude_summarizer_posts_messages(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture_post(monkeypatch, {"content": [{"type": "text", "text": "Key points"}]})

    result = ClaudeSummarizer(api_key="sk-ant").summarize("we agreed to ship")

    assert result == "Key points"
    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    assert captured["headers"]["x-api-key"] == "sk-ant"
    assert captured["json"]["model"] == "claude-3-haiku-20240307"
    assert captured["json"]["max_tokens"] == 1000
    prompt = captured["json"]["messages"][0]["content"]
    assert prompt.startswith("Below is a transcript of a video call.")
    assert "Transcript:\nwe agreed to ship\n\nSummary:" in prompt


def test_claude_summarizer_returns_empty_for_non_text_block(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_post(monkeypatch, {"content": [{"type": "tool_use", "id": "x"}]})

    assert ClaudeSummarizer(api_key="sk-ant").summarize("text") == ""


def test_openai_summarizer_posts_chat_completion(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture_post(monkeypatch, {"choices": [{"message": {"content": "Summary text"}}]})

    result = OpenAISummarizer(api_key="sk-openai").summarize("hello")

    assert result == "Summary text"
    assert captured["url"].endswith("/chat/completions")
    assert captured["headers"]["Authorization"] == "Bearer sk-openai"
    assert captured["json"]["model"] == "gpt-3.5-turbo"


def test_openai_summarizer_handles_empty_content(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_post(monkeypatch, {"choices": [{"message": {"content": None}}]})

    assert OpenAISummarizer(api_key="sk").summarize("hello") == "No summary generated"


def test_openai_summarizer_rejects_malformed_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_post(monkeypatch, {"choices": []})

    with pytest.raises(SummaryError, match="Unexpected OpenAI"):
        OpenAISummarizer(api_key="sk").summarize("hello")


def test_ollama_summarizer_disables_streaming(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture_post(monkeypatch, {"response": "local summary"})

    result = OllamaSummarizer(base_url="http://gpu-box:11434/", model="mistral").summarize("text")

    assert result == "local summary"
    assert captured["url"] == "http://gpu-box:11434/api/generate"
    assert captured["json"]["model"] == "mistral"
    assert captured["json"]["stream"] is False


def test_request_failures_raise_summary_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(*_args, **_kwargs):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr("video_transcriber.summarizer.requests.post", fake_post)

    with pytest.raises(SummaryError, match="Ollama API error: read timed out"):
        OllamaSummarizer().summarize("text")


@pytest.mark.parametrize(
    ("summarizer_class", "message"),
    [(ClaudeSummarizer, "Claude API key is not set"), (OpenAISummarizer, "OpenAI API key is not set")],
)
def test_hosted_summarizers_require_api_key(summarizer_class: type, message: str) -> None:
    with pytest.raises(SummaryError, match=message):
        summarizer_class(api_key="")


def test_create_summarizer_dispatches_on_provider() -> None:
    settings = Settings(claude_api_key="c", openai_api_key="o", ollama_model="phi3")

    assert isinstance(create_summarizer("claude", settings), ClaudeSummarizer)
    assert isinstance(create_summarizer("OpenAI", settings), OpenAISummarizer)
    ollama = create_summarizer("ollama", settings)
    assert isinstance(ollama, OllamaSummarizer)
    assert ollama.model == "phi3"


def test_create_summarizer_rejects_unknown_provider() -> None:
    with pytest.raises(SummaryError, match="Unknown LLM provider: gemini"):
        create_summarizer("gemini", Settings())


def test_generate_summary_falls_back_to_default_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_post(monkeypatch, {"choices": [{"message": {"content": "ok"}}]})
    settings = Settings(openai_api_key="sk", default_llm_provider="openai")

    assert generate_summary("text", settings=settings) == ("ok", "openai")
