"""
VOICEGIT Configuration

Typed configuration for the voice workflow commands, loaded from YAML with
environment variable overrides and validated with pydantic.

Configuration sources, lowest to highest precedence:
    1. Model defaults
    2. First YAML file found (explicit path, or get_config_paths())
    3. Environment variables: VOICEGIT_<KEY>, VOICEGIT_<SECTION>__<KEY>
       (lists and mappings as JSON, e.g. VOICEGIT_LLM__FALLBACK_BACKENDS='["mock"]')
    4. Command-line flags (applied by voicegit.main through apply_overrides)

A loaded VoicegitConfig is immutable for the duration of one invocation.
Commands that need a variant (e.g. injecting a transcript into the commit
block) derive a new one with ``model_copy(update=...)``.

Usage:
    from voicegit.config import load_config

    config = load_config()
    print(config.audio_review.directory)
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)

from voicegit.constants import (
    CONFIG_FILENAME,
    DEFAULT_CHANNELS,
    DEFAULT_OUTPUT_DIRECTORY,
    DEFAULT_PREFERENCES_DIRNAME,
    DEFAULT_SAMPLE_RATE,
    DEFAULT_TRANSCRIPTION_LANGUAGE,
    DEFAULT_TRANSCRIPTION_MODEL,
    ENV_PREFIX,
)
from voicegit.exceptions import ConfigurationError
from voicegit.logging_config import LOG_LEVELS, get_logger

logger = get_logger(__name__)

__all__ = [
    "AudioCommitOptions",
    "AudioReviewOptions",
    "CommitOptions",
    "ReviewOptions",
    "TranscriptionConfig",
    "RecordingConfig",
    "LLMConfig",
    "GitHubConfig",
    "VoicegitConfig",
    "get_config_paths",
    "load_config",
    "apply_overrides",
]


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Audio Command Options
# =============================================================================


class AudioCommitOptions(_Section):
    """Options of the audio-commit command."""
    file: Optional[str] = None
    max_recording_time: Optional[int] = None
    archive: Optional[bool] = None
    context: Optional[str] = None
    sendit: Optional[bool] = None

    @field_validator("max_recording_time")
    @classmethod
    def _positive_duration(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("max_recording_time must be a positive number of seconds")
        return v


class AudioReviewOptions(AudioCommitOptions):
    """Options of the audio-review command.

    Setting ``directory`` switches the command to batch mode.
    """
    directory: Optional[str] = None
    include_commit_history: Optional[bool] = None
    include_recent_diffs: Optional[bool] = None
    include_release_notes: Optional[bool] = None
    include_github_issues: Optional[bool] = None
    commit_history_limit: Optional[int] = Field(default=None, ge=0)
    diff_history_limit: Optional[int] = Field(default=None, ge=0)
    release_notes_limit: Optional[int] = Field(default=None, ge=0)
    github_issues_limit: Optional[int] = Field(default=None, ge=0)


# =============================================================================
# Downstream Command Options
# =============================================================================


class CommitOptions(BaseModel):
    """Options of the commit-message generator.

    Unknown keys are kept and passed through untouched.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    direction: Optional[str] = None
    context: Optional[str] = None
    sendit: bool = False
    cached: Optional[bool] = None


class ReviewOptions(BaseModel):
    """Options of the review generator.

    Unknown keys are kept and passed through untouched.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    note: Optional[str] = None
    context: Optional[str] = None
    sendit: bool = False
    include_commit_history: bool = False
    include_recent_diffs: bool = False
    include_release_notes: bool = False
    include_github_issues: bool = False
    commit_history_limit: int = Field(default=10, ge=0)
    diff_history_limit: int = Field(default=5, ge=0)
    release_notes_limit: int = Field(default=3, ge=0)
    github_issues_limit: int = Field(default=20, ge=0)


# =============================================================================
# Service Configuration
# =============================================================================


class TranscriptionConfig(_Section):
    """faster-whisper settings."""
    model: str = DEFAULT_TRANSCRIPTION_MODEL
    device: str = "cpu"
    compute_type: str = "int8"
    language: str = DEFAULT_TRANSCRIPTION_LANGUAGE
    beam_size: int = Field(default=5, ge=1)


class RecordingConfig(_Section):
    """Microphone capture settings."""
    sample_rate: int = DEFAULT_SAMPLE_RATE
    channels: int = Field(default=DEFAULT_CHANNELS, ge=1, le=2)
    device: Optional[str] = None  # Overrides the saved device preference

    @field_validator("sample_rate")
    @classmethod
    def _supported_rate(cls, v: int) -> int:
        if v not in (8000, 16000, 22050, 32000, 44100, 48000):
            raise ValueError(f"Unsupported sample rate: {v}")
        return v


class LLMConfig(_Section):
    """Text generation backend used by the commit and review generators."""
    backend: Literal["openai", "anthropic", "local", "mock"] = "openai"
    model: Optional[str] = None
    model_path: Optional[str] = None
    api_key: Optional[str] = None
    fallback_backends: List[Literal["openai", "anthropic", "local", "mock"]] = Field(default_factory=list)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, gt=0)


class GitHubConfig(_Section):
    """GitHub access for issue context and filing reviews."""
    token: Optional[str] = None
    repository: Optional[str] = None  # "owner/name"; derived from git remote if unset
    api_url: str = "https://api.github.com"

    @field_validator("repository")
    @classmethod
    def _owner_slash_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.count("/") != 1:
            raise ValueError("repository must look like 'owner/name'")
        return v


# =============================================================================
# Root Configuration
# =============================================================================


def _default_preferences_directory() -> str:
    return str(Path.home() / DEFAULT_PREFERENCES_DIRNAME)


# Values of the YAML file being loaded; set by load_config() for one construction
_file_values: ContextVar[Optional[Dict[str, Any]]] = ContextVar("voicegit_file_values", default=None)


class VoicegitConfig(BaseSettings):
    """Complete configuration of one VOICEGIT invocation.

    Constructing it reads VOICEGIT_* environment variables on top of the
    YAML values handed over by load_config(). ``model_validate`` reads
    neither.
    """
    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    dry_run: bool = False
    debug: bool = False
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    preferences_directory: str = Field(default_factory=_default_preferences_directory)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    service_log_levels: Dict[str, str] = Field(default_factory=dict)  # e.g. {"stt": "DEBUG"}

    audio_commit: AudioCommitOptions = Field(default_factory=AudioCommitOptions)
    audio_review: AudioReviewOptions = Field(default_factory=AudioReviewOptions)
    commit: CommitOptions = Field(default_factory=CommitOptions)
    review: ReviewOptions = Field(default_factory=ReviewOptions)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return v.upper()

    @field_validator("service_log_levels")
    @classmethod
    def _known_service_levels(cls, v: Dict[str, str]) -> Dict[str, str]:
        for service, level in v.items():
            if level.upper() not in LOG_LEVELS:
                raise ValueError(f"Unknown log level for service '{service}': {level}")
        return {service: level.upper() for service, level in v.items()}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        file_settings = InitSettingsSource(settings_cls, _file_values.get() or {})
        return init_settings, env_settings, file_settings


# =============================================================================
# Loading
# =============================================================================


def get_config_paths() -> List[Path]:
    """Return candidate configuration file paths in search order."""
    return [
        Path.cwd() / CONFIG_FILENAME,
        Path.cwd() / DEFAULT_PREFERENCES_DIRNAME / "config.yaml",
        Path.home() / DEFAULT_PREFERENCES_DIRNAME / "config.yaml",
    ]


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}", config_file=str(path))
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file: {e}", config_file=str(path))

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping at the top level",
            config_file=str(path),
        )
    return data


def load_config(config_path: Optional[str | Path] = None) -> VoicegitConfig:
    """Load and validate configuration.

    Args:
        config_path: Explicit YAML file. When omitted, the first existing file
            from get_config_paths() is used, or defaults if none exists.

    Returns:
        Validated, immutable VoicegitConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable, not valid
            YAML, or contains invalid values (in the file or the environment).
    """
    data: Dict[str, Any] = {}
    source: Optional[Path] = None

    if config_path is not None:
        source = Path(config_path).expanduser()
        if not source.exists():
            raise ConfigurationError(
                f"Configuration file not found: {source}",
                config_file=str(source),
            )
    else:
        source = next((p for p in get_config_paths() if p.exists()), None)

    if source is not None:
        logger.debug(f"Loading configuration from {source}")
        data = _read_yaml(source)

    token = _file_values.set(data)
    try:
        return VoicegitConfig()
    except (ValidationError, SettingsError) as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            config_file=str(source) if source else None,
        )
    finally:
        _file_values.reset(token)


def apply_overrides(config: VoicegitConfig, overrides: Dict[str, Any]) -> VoicegitConfig:
    """Derive a validated config with ``overrides`` merged on top.

    Used for command-line flags, which take precedence over files and the
    environment. Section dicts are merged key by key; the environment is
    not read again.

    Raises:
        ConfigurationError: If an override value is invalid
    """
    if not overrides:
        return config
    data = config.model_dump()
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key] = {**data[key], **value}
        else:
            data[key] = value
    try:
        return VoicegitConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}")
