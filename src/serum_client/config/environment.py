"""
Client settings taken from the process environment.

Three settings exist: ``PRIVATE_KEY`` (base58 signing key),
``SERUM_API_TIMEOUT_SECONDS`` (unary call timeout) and ``SERUM_LOG_APPEND``
(append to the log file instead of truncating it). A value set in the process
environment wins; otherwise the first ``.env`` candidate that defines it is
used. The ``.env`` files are read once and cached until
``clear_dotenv_cache()``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .errors import ConfigurationError

PRIVATE_KEY_ENV = "PRIVATE_KEY"
TIMEOUT_ENV = "SERUM_API_TIMEOUT_SECONDS"
LOG_APPEND_ENV = "SERUM_LOG_APPEND"

DEFAULT_RPC_TIMEOUT_SECONDS = 7.0

_FLAG_VALUES = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".serum_env")

_dotenv_cache: Optional[Dict[str, str]] = None


def read_dotenv(path: Path) -> Dict[str, str]:
    """Parse the ``NAME=value`` lines of one ``.env`` file; a missing file yields ``{}``."""
    if not path.exists():
        return {}
    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigurationError.load_failed(".env file", str(path)) from exc

    values: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        name, sep, raw = line.partition("=")
        name = name.strip()
        if sep and name:
            values[name] = raw.strip().strip("'\"")
    return values


def _dotenv_values() -> Dict[str, str]:
    global _dotenv_cache
    if _dotenv_cache is None:
        merged: Dict[str, str] = {}
        for path in _DOTENV_CANDIDATES:
            for name, value in read_dotenv(path).items():
                merged.setdefault(name, value)
        _dotenv_cache = merged
    return _dotenv_cache


def clear_dotenv_cache() -> None:
    """Re-read the ``.env`` files on the next lookup."""
    global _dotenv_cache
    _dotenv_cache = None


def _lookup(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    if value:
        return value
    return _dotenv_values().get(name) or None


def private_key_setting() -> Optional[str]:
    return _lookup(PRIVATE_KEY_ENV)


def timeout_setting() -> float:
    raw = _lookup(TIMEOUT_ENV)
    if raw is None:
        return DEFAULT_RPC_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigurationError.invalid_value(TIMEOUT_ENV, raw, "Expected a number of seconds") from exc
    if timeout <= 0:
        raise ConfigurationError.invalid_value(TIMEOUT_ENV, raw, "Timeout must be positive")
    return timeout


def log_append_setting() -> bool:
    raw = _lookup(LOG_APPEND_ENV)
    if raw is None:
        return False
    try:
        return _FLAG_VALUES[raw.lower()]
    except KeyError as exc:
        raise ConfigurationError.invalid_value(LOG_APPEND_ENV, raw, "Expected 1/0, true/false, yes/no or on/off") from exc


@dataclass(frozen=True)
class EnvironmentSettings:
    """Snapshot of every client setting, resolved once."""

    private_key: Optional[str] = None
    timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS
    log_append: bool = False

    @classmethod
    def load(cls) -> "EnvironmentSettings":
        return cls(
            private_key=private_key_setting(),
            timeout_seconds=timeout_setting(),
            log_append=log_append_setting(),
        )


__all__ = [
    "DEFAULT_RPC_TIMEOUT_SECONDS",
    "EnvironmentSettings",
    "LOG_APPEND_ENV",
    "PRIVATE_KEY_ENV",
    "TIMEOUT_ENV",
    "clear_dotenv_cache",
    "log_append_setting",
    "private_key_setting",
    "read_dotenv",
    "timeout_setting",
]
