from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

_CONFIG_ENV = "VIDEO_TRANSCRIBER_CONFIG"
SUPPORTED_PROVIDERS = ("claude", "openai", "ollama")
DEFAULT_PROVIDER = "ollama"

# Settings field -> environment variable consulted when the stored value is empty.
_ENV_FALLBACKS = {
    "huggingface_api_key": "HUGGINGFACE_API_KEY",
    "claude_api_key": "ANTHROPIC_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
}


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def _coerce(value: object, default: object) -> object | None:
    """Return ``value`` converted to the type of ``default``, or ``None`` if it can't be."""

    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return None
    if isinstance(default, str):
        return value if isinstance(value, str) else None
    return value


@dataclass
class Settings:
    huggingface_api_key: str = ""
    claude_api_key: str = ""
    openai_api_key: str = ""
    default_llm_provider: str = DEFAULT_PROVIDER
    enable_speaker_diarization: bool = True
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3"

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            coerced = _coerce(value, field.default)
            if coerced is None:
                logger.warning(
                    "Invalid value for %s: %r, using default %r", field.name, value, field.default
                )
                coerced = field.default
            setattr(self, field.name, coerced)

        if self.default_llm_provider not in SUPPORTED_PROVIDERS:
            logger.warning(
                "Invalid LLM provider: %s, using %s as fallback",
                self.default_llm_provider,
                DEFAULT_PROVIDER,
            )
            self.default_llm_provider = DEFAULT_PROVIDER


def settings_path() -> Path:
    override = os.getenv(_CONFIG_ENV)
    if override:
        return Path(override)

    base_dir = os.getenv("XDG_CONFIG_HOME")
    if base_dir:
        base = Path(base_dir)
    else:
        base = Path.home() / ".config"
    return base / "video_transcriber" / "settings.json"


def load_settings(path: Path | str | None = None, *, use_env: bool = True) -> Settings:
    """Read settings from disk, then fill empty API keys from the environment."""

    target = Path(path) if path is not None else settings_path()
    stored: dict = {}
    try:
        data = json.loads(target.read_text())
    except FileNotFoundError:
        data = {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", target, exc)
        data = {}

    if isinstance(data, dict):
        known = {field.name for field in fields(Settings)}
        stored = {key: value for key, value in data.items() if key in known}

    settings = Settings(**stored)
    for name, env_var in (_ENV_FALLBACKS.items() if use_env else ()):
        if not getattr(settings, name):
            setattr(settings, name, os.getenv(env_var, ""))
    return settings


def save_settings(settings: Settings, path: Path | str | None = None) -> Path:
    target = Path(path) if path is not None else settings_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(asdict(settings), indent=2))
    logger.info("Saved settings to %s", target)
    return target
