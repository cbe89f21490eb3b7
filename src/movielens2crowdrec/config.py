from __future__ import annotations

import codecs
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class ConverterConfig:
    """
    Configuration shared by the entity and relation converters.

    Attributes:
        input_encoding: Encoding of the MovieLens source files.
        output_encoding: Encoding of entities.dat / relations.dat.
        progress_interval: Records written between flush + progress log.
        default_output_dir: Output directory used when none is given on the CLI.
        log_level: Logging level name (e.g. "INFO").
    """
    input_encoding: str = "latin-1"
    output_encoding: str = "utf-8"
    progress_interval: int = 100
    default_output_dir: Path = Path(".")
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.progress_interval <= 0:
            raise ConfigError(
                f"progress_interval must be positive, got {self.progress_interval}."
            )


def _check_encoding(env_var_name: str, value: str) -> str:
    try:
        codecs.lookup(value)
    except LookupError as exc:
        raise ConfigError(f"{env_var_name}={value!r} is not a known encoding.") from exc
    return value


def _parse_progress_interval(value: str) -> int:
    try:
        interval = int(value)
    except ValueError as exc:
        raise ConfigError(
            f"CROWDREC_PROGRESS_INTERVAL must be an integer, got {value!r}."
        ) from exc

    if interval <= 0:
        raise ConfigError(f"CROWDREC_PROGRESS_INTERVAL must be positive, got {interval}.")
    return interval


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"CROWDREC_LOG_LEVEL={value!r} is not a logging level.")
    return level


def load_converter_config_from_env() -> ConverterConfig:
    """
    Load converter configuration from environment variables (and a .env file).

    Unset variables fall back to the dataclass defaults.

    Raises:
        ConfigError: If any variable is set to an invalid value.
    """
    load_dotenv()
    defaults = ConverterConfig()

    input_encoding = os.getenv("CROWDREC_INPUT_ENCODING") or defaults.input_encoding
    output_encoding = os.getenv("CROWDREC_OUTPUT_ENCODING") or defaults.output_encoding
    interval_raw = os.getenv("CROWDREC_PROGRESS_INTERVAL")
    output_dir_raw = os.getenv("CROWDREC_OUTPUT_DIR")
    log_level_raw = os.getenv("CROWDREC_LOG_LEVEL")

    return ConverterConfig(
        input_encoding=_check_encoding("CROWDREC_INPUT_ENCODING", input_encoding),
        output_encoding=_check_encoding("CROWDREC_OUTPUT_ENCODING", output_encoding),
        progress_interval=(
            _parse_progress_interval(interval_raw) if interval_raw else defaults.progress_interval
        ),
        default_output_dir=Path(output_dir_raw) if output_dir_raw else defaults.default_output_dir,
        log_level=_parse_log_level(log_level_raw) if log_level_raw else defaults.log_level,
    )
