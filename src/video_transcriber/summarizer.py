from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .config import Settings
from .errors import SummaryError

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "Below is a transcript of a video call. Please summarize the key points, main topics "
    "discussed, and any decisions or action items mentioned.\n\n"
    "Transcript:\n{transcript}\n\n"
    "Summary:"
)


def build_prompt(transcript: str) -> str:
    return SUMMARY_PROMPT.format(transcript=transcript)


def _post_json(url: str, *, headers: dict[str, str], payload: dict[str, Any], timeout: int, label: str) -> Any:
    try:
        response = requests.post(url, headers=headers, json=payload, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise SummaryError(f"{label} API error: {exc}") from exc

    try:
        return response.json()
    except ValueError as exc:
        raise SummaryError(f"{label} API returned a non-JSON payload") from exc


class ClaudeSummarizer:
    """Summaries from the Anthropic Messages API."""

    provider = "claude"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.anthropic.com/v1",
        model: str = "claude-3-haiku-20240307",
        max_tokens: int = 1000,
        timeout: int = 120,
    ) -> None:
        if not api_key:
            raise SummaryError("Claude API key is not set")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    def summarize(self, text: str) -> str:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": build_prompt(text)}],
        }
        data = _post_json(
            f"{self.base_url}/messages", headers=headers, payload=payload, timeout=self.timeout, label="Claude"
        )

        try:
            first_block = data["content"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise SummaryError("Unexpected Claude response payload") from exc

        if first_block.get("type") != "text":
            logger.warning("Unexpected content type from Claude API: %s", first_block.get("type"))
            return ""
        return first_block.get("text", "")


class OpenAISummarizer:
    """Summaries from the OpenAI chat completions endpoint."""

    provider = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-3.5-turbo",
        max_tokens: int = 1000,
        timeout: int = 120,
    ) -> None:
        if not api_key:
            raise SummaryError("OpenAI API key is not set")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    def summarize(self, text: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(text)}],
            "max_tokens": self.max_tokens,
        }
        data = _post_json(
            f"{self.base_url}/chat/completions", headers=headers, payload=payload, timeout=self.timeout, label="OpenAI"
        )

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise SummaryError("Unexpected OpenAI response payload") from exc

        return content or "No summary generated"


class OllamaSummarizer:
    """Summaries from a local Ollama server."""

    provider = "ollama"

    def __init__(
        self,
        *,
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        timeout: int = 300,
    ) -> None:
        self.base_url = (base_url or "http://localhost:11434").rstrip("/")
        self.model = model or "llama3"
        self.timeout = timeout

    def summarize(self, text: str) -> str:
        payload = {"model": self.model, "prompt": build_prompt(text), "stream": False}
        data = _post_json(
            f"{self.base_url}/api/generate", headers={}, payload=payload, timeout=self.timeout, label="Ollama"
        )

        content = data.get("response") if isinstance(data, dict) else None
        if not isinstance(content, str):
            raise SummaryError("Unexpected Ollama response payload")
        return content


def create_summarizer(provider: str, settings: Settings) -> ClaudeSummarizer | OpenAISummarizer | OllamaSummarizer:
    name = provider.lower()
    if name == "claude":
        return ClaudeSummarizer(api_key=settings.claude_api_key)
    if name == "openai":
        return OpenAISummarizer(api_key=settings.openai_api_key)
    if name == "ollama":
        return OllamaSummarizer(base_url=settings.ollama_base_url, model=settings.ollama_model)
    raise SummaryError(f"Unknown LLM provider: {provider}")


def generate_summary(text: str, provider: Optional[str] = None, *, settings: Settings) -> tuple[str, str]:
    """Summarize ``text`` and return ``(summary, provider_used)``."""

    chosen = provider or settings.default_llm_provider
    if provider is None:
        logger.info("Using default LLM provider: %s", chosen)
    summarizer = create_summarizer(chosen, settings)
    return summarizer.summarize(text), summarizer.provider
