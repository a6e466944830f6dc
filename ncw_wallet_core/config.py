"""Client configuration loading.

Configuration is data: a small YAML document read once at startup and passed
explicitly to the components that need it.

Example::

    base_url: https://api-sb-1.ncw-demo.com
    poll_error_delay: 5
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

from .errors import ConfigurationError

DEFAULT_BASE_URL = "https://api-sb-1.ncw-demo.com"


@dataclass(frozen=True)
class WalletConfig:
    """Backend connection settings.

    Attributes:
        base_url: Absolute http(s) URL of the NCW demo backend.
        poll_error_delay: Seconds a poll stream waits after a failed cycle.
    """

    base_url: str = DEFAULT_BASE_URL
    poll_error_delay: float = 5.0

    def __post_init__(self) -> None:
        parts = urlsplit(self.base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"Invalid base_url: {self.base_url!r}")
        if self.poll_error_delay < 0:
            raise ConfigurationError("poll_error_delay must be non-negative")


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise ConfigurationError(f"File not found: {path}")
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as err:
        raise ConfigurationError(f"Invalid YAML in {path}") from err
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping in {path}")
    return data


def load_config(path: Path) -> WalletConfig:
    """Load client configuration from a YAML file.

    Missing keys take their defaults.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or holds
            invalid values.
    """
    data = _load_yaml(path)
    try:
        return WalletConfig(
            base_url=str(data.get("base_url", DEFAULT_BASE_URL)),
            poll_error_delay=float(data.get("poll_error_delay", 5.0)),
        )
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"Invalid value in {path}: {err}") from err
