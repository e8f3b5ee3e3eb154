"""
Configuration management (SSOT).

This module defines ALL configuration for auto-title.
All config keys are defined here; no other module should invent config keys.

Key invariants:
- ProviderConfig is a frozen snapshot. A settings change builds a new one
  (dataclasses.replace) and a new provider; in-flight requests keep theirs.
- Name patterns are validated (compiled) at load time, never per event.
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml

from .errors import ConfigValidationError

__all__ = [
    "Config",
    "ConfigValidationError",
    "FileHandlingConfig",
    "GenerationConfig",
    "MonitorConfig",
    "ProviderConfig",
    "ProviderType",
    "TitleStyle",
    "create_default_config",
    "load_config",
]


class ProviderType(str, Enum):
    """Supported generation backends."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"
    CUSTOM = "custom"


class TitleStyle(str, Enum):
    """Style of generated titles."""

    CONCISE = "concise"
    DESCRIPTIVE = "descriptive"
    QUESTION = "question"
    ACTION = "action"


DEFAULT_UNTITLED_PATTERNS = ["Untitled", r"Untitled \d+", "New Note", r"New Note \d+"]


@dataclass(frozen=True)
class ProviderConfig:
    """Generation backend configuration.

    Immutable: providers are built from one snapshot and never see later
    edits. Use dataclasses.replace() to derive a changed copy.
    """

    selected: ProviderType = ProviderType.OPENAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-haiku-20240307"
    ollama_endpoint: str = "http://localhost:11434"
    ollama_model: str = "llama2"
    custom_endpoint: str = ""
    custom_api_key: str = ""
    custom_model: str = ""
    # Request timeout (seconds)
    timeout_seconds: float = 30.0
    # Attempts per request, including the first one
    max_attempts: int = 3
    # Backoff delay is 2**attempt * backoff_base_seconds
    backoff_base_seconds: float = 1.0


@dataclass
class MonitorConfig:
    """Automatic monitoring settings."""

    enabled: bool = True
    # Quiet period after the last modification before evaluating
    debounce_seconds: float = 3.0
    # Minimum word count (front matter excluded) before generating
    content_threshold_words: int = 100
    # Minimum body length in characters for any generation, manual included
    min_content_chars: int = 50
    untitled_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_UNTITLED_PATTERNS))


@dataclass
class GenerationConfig:
    """Title generation settings."""

    suggestion_count: int = 3
    max_title_length: int = 60
    style: TitleStyle = TitleStyle.CONCISE


@dataclass
class FileHandlingConfig:
    """What to do with a chosen title."""

    rename_file: bool = True
    update_front_matter_title: bool = True


@dataclass
class Config:
    """Application configuration (SSOT)."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    files: FileHandlingConfig = field(default_factory=FileHandlingConfig)
    vault_path: Path = field(default_factory=lambda: Path("."))
    show_notifications: bool = True

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if self.monitor.debounce_seconds <= 0:
            errors.append("monitor.debounce_seconds must be > 0")
        if self.monitor.content_threshold_words < 0:
            errors.append("monitor.content_threshold_words must be >= 0")
        if self.generation.suggestion_count < 1:
            errors.append("generation.suggestion_count must be >= 1")
        if self.generation.max_title_length < 1:
            errors.append("generation.max_title_length must be >= 1")
        if self.provider.max_attempts < 1:
            errors.append("provider.max_attempts must be >= 1")

        for pattern in self.monitor.untitled_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                errors.append(f"monitor.untitled_patterns: invalid pattern {pattern!r}: {e}")

        return errors


def _parse_enum(enum_cls, value, key: str, errors: list[str]):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        errors.append(f"{key} must be one of: {allowed} (got {value!r})")
        return next(iter(enum_cls))


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    Environment variables can override config values:
    - AUTO_TITLE_PROVIDER (openai/anthropic/ollama/custom)
    - OPENAI_API_KEY
    - ANTHROPIC_API_KEY
    - OLLAMA_URL
    - OLLAMA_MODEL
    - AUTO_TITLE_CUSTOM_ENDPOINT
    - AUTO_TITLE_CUSTOM_API_KEY
    - AUTO_TITLE_VAULT
    - AUTO_TITLE_ENABLED (true/false)

    Raises:
        ConfigValidationError: If the resulting configuration is invalid.
    """
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    errors: list[str] = []

    # Provider config
    provider_data = data.get("provider", {}) or {}
    selected = _parse_enum(
        ProviderType,
        os.environ.get("AUTO_TITLE_PROVIDER", provider_data.get("selected", "openai")),
        "provider.selected",
        errors,
    )
    provider = ProviderConfig(
        selected=selected,
        openai_api_key=os.environ.get("OPENAI_API_KEY", provider_data.get("openai_api_key", "")),
        openai_model=provider_data.get("openai_model", "gpt-4o-mini"),
        anthropic_api_key=os.environ.get(
            "ANTHROPIC_API_KEY", provider_data.get("anthropic_api_key", "")
        ),
        anthropic_model=provider_data.get("anthropic_model", "claude-3-haiku-20240307"),
        ollama_endpoint=os.environ.get(
            "OLLAMA_URL", provider_data.get("ollama_endpoint", "http://localhost:11434")
        ),
        ollama_model=os.environ.get("OLLAMA_MODEL", provider_data.get("ollama_model", "llama2")),
        custom_endpoint=os.environ.get(
            "AUTO_TITLE_CUSTOM_ENDPOINT", provider_data.get("custom_endpoint", "")
        ),
        custom_api_key=os.environ.get(
            "AUTO_TITLE_CUSTOM_API_KEY", provider_data.get("custom_api_key", "")
        ),
        custom_model=provider_data.get("custom_model", ""),
        timeout_seconds=float(provider_data.get("timeout_seconds", 30.0)),
        max_attempts=int(provider_data.get("max_attempts", 3)),
        backoff_base_seconds=float(provider_data.get("backoff_base_seconds", 1.0)),
    )

    # Monitor config
    monitor_data = data.get("monitor", {}) or {}
    enabled = monitor_data.get("enabled", True)
    enabled_env = os.environ.get("AUTO_TITLE_ENABLED", "").lower()
    if enabled_env == "true":
        enabled = True
    elif enabled_env == "false":
        enabled = False

    monitor = MonitorConfig(
        enabled=enabled,
        debounce_seconds=float(monitor_data.get("debounce_seconds", 3.0)),
        content_threshold_words=int(monitor_data.get("content_threshold_words", 100)),
        min_content_chars=int(monitor_data.get("min_content_chars", 50)),
        untitled_patterns=list(
            monitor_data.get("untitled_patterns", DEFAULT_UNTITLED_PATTERNS)
        ),
    )

    # Generation config
    generation_data = data.get("generation", {}) or {}
    generation = GenerationConfig(
        suggestion_count=int(generation_data.get("suggestion_count", 3)),
        max_title_length=int(generation_data.get("max_title_length", 60)),
        style=_parse_enum(
            TitleStyle, generation_data.get("style", "concise"), "generation.style", errors
        ),
    )

    # File handling
    files_data = data.get("files", {}) or {}
    files = FileHandlingConfig(
        rename_file=files_data.get("rename_file", True),
        update_front_matter_title=files_data.get("update_front_matter_title", True),
    )

    config = Config(
        provider=provider,
        monitor=monitor,
        generation=generation,
        files=files,
        vault_path=Path(os.environ.get("AUTO_TITLE_VAULT", data.get("vault_path", "."))),
        show_notifications=data.get("show_notifications", True),
    )

    errors.extend(config.validate())
    if errors:
        raise ConfigValidationError("Invalid configuration: " + "; ".join(errors))

    return config


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# auto-title configuration
#
# API keys can also be supplied through OPENAI_API_KEY / ANTHROPIC_API_KEY.

vault_path: "."                            # Folder containing the Markdown notes
show_notifications: true

provider:
  selected: "openai"                       # openai | anthropic | ollama | custom
  openai_api_key: ""
  openai_model: "gpt-4o-mini"
  anthropic_api_key: ""
  anthropic_model: "claude-3-haiku-20240307"
  ollama_endpoint: "http://localhost:11434"
  ollama_model: "llama2"
  custom_endpoint: ""                      # OpenAI-compatible chat completions URL
  custom_api_key: ""
  custom_model: ""
  timeout_seconds: 30
  max_attempts: 3                          # Rate limits and 5xx are retried
  backoff_base_seconds: 1.0                # Delay = 2^attempt * base

monitor:
  enabled: true                            # Watch the vault for untitled notes
  debounce_seconds: 3.0                    # Quiet period before evaluating a note
  content_threshold_words: 100             # Words needed before suggesting a title
  min_content_chars: 50
  untitled_patterns:                       # Regular expressions, full match, case-insensitive
    - "Untitled"
    - "Untitled \\\\d+"
    - "New Note"
    - "New Note \\\\d+"

generation:
  suggestion_count: 3
  max_title_length: 60
  style: "concise"                         # concise | descriptive | question | action

files:
  rename_file: true
  update_front_matter_title: true
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
