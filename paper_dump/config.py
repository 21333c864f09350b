"""
Module for managing project configuration.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .constants import DEFAULT_TIMEOUT_SECONDS, IMAGES_DIR, OUTPUT_DIR
from .exceptions import ConfigurationError, OutputError

TOKEN_ENV_VAR = "DBX_OAUTH_TOKEN"
TIMEOUT_ENV_VAR = "PAPER_DUMP_TIMEOUT"


@dataclass(frozen=True)
class Config:
    """Runtime settings shared by the client, the image downloader and the writer."""

    token: str
    output_dir: Path = Path(OUTPUT_DIR)
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def images_dir(self) -> Path:
        return self.output_dir / IMAGES_DIR


def load_config(environ: Optional[Mapping[str, str]] = None,
                output_dir: Optional[Path] = None) -> Config:
    """
    Load configuration from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)
        output_dir: Override for the output directory, relative to the cwd by default

    Returns:
        Config: the access token and output settings

    Raises:
        ConfigurationError: If the token is missing or the timeout is invalid
    """
    if environ is None:
        environ = os.environ

    token = (environ.get(TOKEN_ENV_VAR) or "").strip()
    if not token:
        raise ConfigurationError(
            f"Environment variable {TOKEN_ENV_VAR} is not set. "
            "Generate an access token in the Dropbox App Console and export it."
        )

    raw_timeout = environ.get(TIMEOUT_ENV_VAR)
    timeout = DEFAULT_TIMEOUT_SECONDS
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"{TIMEOUT_ENV_VAR} must be a number of seconds, got '{raw_timeout}'"
            )
        if timeout <= 0:
            raise ConfigurationError(f"{TIMEOUT_ENV_VAR} must be positive, got {timeout}")

    return Config(
        token=token,
        output_dir=Path(output_dir) if output_dir is not None else Path(OUTPUT_DIR),
        timeout=timeout,
    )


def ensure_directories(config: Config) -> None:
    """Create the output and image directories if they don't exist."""
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)
        config.images_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(f"Unable to create directory '{config.output_dir}': {e}")
