"""Cleaner configuration loading and validation.

Configuration comes from the process environment, optionally layered over
a TOML file that uses the same upper-case keys:

    CACHE_DIRS                    comma-separated root directories (required)
    FILE_EXPIRED_TIME             normal retention in milliseconds (7 days)
    DEEP_CLEAN_FILE_EXPIRED_TIME  deep-clean retention in milliseconds (5 days)
    FREE_SPACE_THRESHOLD          minimum free space in percent (60)
    SLEEP_TIME                    interval between iterations in milliseconds (1 hour)

The result is an immutable :class:`CleanerConfig`. Any invalid value is
fatal; nothing is silently replaced by a default.
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

CACHE_DIRS_KEY = "CACHE_DIRS"
FILE_EXPIRED_TIME_KEY = "FILE_EXPIRED_TIME"
DEEP_CLEAN_FILE_EXPIRED_TIME_KEY = "DEEP_CLEAN_FILE_EXPIRED_TIME"
FREE_SPACE_THRESHOLD_KEY = "FREE_SPACE_THRESHOLD"
SLEEP_TIME_KEY = "SLEEP_TIME"

DEFAULT_FILE_EXPIRED_TIME_MS = 604_800_000
DEFAULT_DEEP_CLEAN_FILE_EXPIRED_TIME_MS = 432_000_000
DEFAULT_FREE_SPACE_THRESHOLD = 60
DEFAULT_SLEEP_TIME_MS = 3_600_000

# Model field name -> configuration key
FIELD_KEYS: dict[str, str] = {
    "cache_dirs": CACHE_DIRS_KEY,
    "file_expired_time": FILE_EXPIRED_TIME_KEY,
    "free_space_threshold": FREE_SPACE_THRESHOLD_KEY,
    "sleep_time": SLEEP_TIME_KEY,
    "deep_clean_file_expired_time": DEEP_CLEAN_FILE_EXPIRED_TIME_KEY,
}

_INTEGER_FIELDS: tuple[str, ...] = (
    "file_expired_time",
    "free_space_threshold",
    "sleep_time",
    "deep_clean_file_expired_time",
)


class CleanerConfig(BaseModel):
    """Validated, immutable cleaner configuration.

    Attributes:
        cache_dirs: Root directories to clean, in configuration order.
        file_expired_time: Normal retention window in milliseconds.
        deep_clean_file_expired_time: Retention window used when free space
            is below the threshold, in milliseconds.
        free_space_threshold: Minimum percentage of free space to maintain.
        sleep_time: Pause between iterations in milliseconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cache_dirs: Annotated[
        tuple[Path, ...],
        Field(min_length=1, description="Root directories to clean"),
    ]
    file_expired_time: Annotated[
        int,
        Field(ge=0, description="Normal retention in milliseconds"),
    ] = DEFAULT_FILE_EXPIRED_TIME_MS
    deep_clean_file_expired_time: Annotated[
        int,
        Field(ge=0, description="Deep-clean retention in milliseconds"),
    ] = DEFAULT_DEEP_CLEAN_FILE_EXPIRED_TIME_MS
    free_space_threshold: Annotated[
        int,
        Field(ge=0, le=100, description="Minimum free space in percent (0-100)"),
    ] = DEFAULT_FREE_SPACE_THRESHOLD
    sleep_time: Annotated[
        int,
        Field(ge=0, description="Interval between iterations in milliseconds"),
    ] = DEFAULT_SLEEP_TIME_MS

    @property
    def sleep_seconds(self) -> float:
        """Interval between iterations in seconds."""
        return self.sleep_time / 1000

    def to_mapping(self) -> dict[str, str | int]:
        """Express the configuration with its configuration keys.

        Returns:
            Dictionary keyed like the environment, suitable for TOML output.
        """
        return {
            CACHE_DIRS_KEY: ",".join(str(d) for d in self.cache_dirs),
            FILE_EXPIRED_TIME_KEY: self.file_expired_time,
            FREE_SPACE_THRESHOLD_KEY: self.free_space_threshold,
            SLEEP_TIME_KEY: self.sleep_time,
            DEEP_CLEAN_FILE_EXPIRED_TIME_KEY: self.deep_clean_file_expired_time,
        }

    def to_toml(self) -> str:
        """Render the configuration as TOML accepted by ``load_config``."""
        return tomli_w.dumps(self.to_mapping())

    def summary(self) -> str:
        """One-line description of the resolved values."""
        return ", ".join(f"{key}: {value}" for key, value in self.to_mapping().items())


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file does not exist."""


class ConfigParseError(ConfigError):
    """Raised when a config file is not valid TOML."""


class ConfigValidationError(ConfigError):
    """Raised when a configuration value is missing or out of range."""


def load_config(
    environ: Mapping[str, str] | None = None,
    config_file: Path | None = None,
) -> CleanerConfig:
    """Load and validate the cleaner configuration.

    Environment values take precedence over values from ``config_file``.

    Args:
        environ: Key/value source. Defaults to ``os.environ``.
        config_file: Optional TOML file read before the environment.

    Returns:
        Validated CleanerConfig.

    Raises:
        ConfigNotFoundError: If ``config_file`` does not exist.
        ConfigParseError: If ``config_file`` is not valid TOML.
        ConfigValidationError: If any value is missing or invalid.
    """
    env = os.environ if environ is None else environ

    raw: dict[str, object] = {}
    if config_file is not None:
        raw.update(_read_config_file(config_file))
    for key in FIELD_KEYS.values():
        if key in env:
            raw[key] = env[key]

    if raw.get(CACHE_DIRS_KEY) is None:
        raise ConfigValidationError(f"the env {CACHE_DIRS_KEY} must not be null")

    values: dict[str, object] = {"cache_dirs": _split_dirs(raw[CACHE_DIRS_KEY])}
    for field in _INTEGER_FIELDS:
        key = FIELD_KEYS[field]
        if key in raw:
            values[field] = _parse_int(key, raw[key])

    try:
        config = CleanerConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigValidationError(_describe_validation_error(e)) from e

    logger.info("finish initializing configuration, use %s", config.summary())
    return config


def _read_config_file(path: Path) -> dict[str, object]:
    """Read configuration keys from a TOML file.

    Args:
        path: TOML file path.

    Returns:
        Top-level key/value pairs of the file.

    Raises:
        ConfigNotFoundError: If the file does not exist.
        ConfigParseError: If the TOML is invalid.
        ConfigValidationError: If the file holds unknown keys.
        ConfigError: If the file cannot be read.
    """
    if not path.exists():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    unknown = sorted(set(data) - set(FIELD_KEYS.values()))
    if unknown:
        raise ConfigValidationError(f"Unknown keys in {path}: {', '.join(unknown)}")
    return data


def _split_dirs(value: object) -> tuple[Path, ...]:
    """Turn a comma-separated string (or TOML list) into root paths.

    Empty segments are dropped.
    """
    if isinstance(value, str):
        segments = value.split(",")
    elif isinstance(value, list):
        segments = [str(item) for item in value]
    else:
        raise ConfigValidationError(f"the env {CACHE_DIRS_KEY} must be a comma-separated string")
    return tuple(Path(s.strip()) for s in segments if s.strip())


def _parse_int(key: str, value: object) -> int:
    """Parse an integer configuration value."""
    if isinstance(value, bool):
        raise ConfigValidationError(f"the env {key} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigValidationError(f"the env {key} must be an integer, got {value!r}") from None


def _describe_validation_error(error: ValidationError) -> str:
    """Translate pydantic errors into messages naming configuration keys."""
    messages: list[str] = []
    for detail in error.errors():
        field = str(detail["loc"][0]) if detail["loc"] else ""
        key = FIELD_KEYS.get(field, field)
        if field == "free_space_threshold":
            messages.append(f"the env {key} should be between 0 and 100")
        elif field == "cache_dirs":
            messages.append(f"the env {key} must not be null")
        else:
            messages.append(f"the env {key} should not be negative: {detail['msg']}")
    return "; ".join(messages)
