"""
Logging configuration for applications built on the Serum client.

The library itself only creates module loggers; ``setup_logging`` is the
opt-in entry point for scripts and services that want:
- Console output on stdout (technical or user-friendly format)
- Optional file output, truncated on each start unless SERUM_LOG_APPEND=1
- Quiet third-party transport loggers (aiohttp, websockets, grpc)
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional, Union

from serum_client.config import log_append_setting

_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)

TECHNICAL_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
TECHNICAL_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = (
    "asyncio",
    "aiohttp",
    "websockets",
    "grpc",
    "grpc._cython",
    "urllib3",
)

_MANAGED_HANDLER_ATTR = "_serum_client_managed"


def _build_console_handler(level: int, user_friendly: bool) -> logging.Handler:
    if user_friendly:
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter(TECHNICAL_FORMAT, TECHNICAL_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING if user_friendly else level)
    return console_handler


def _build_file_handler(log_file: Path, level: int) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_mode = "a" if log_append_setting() else "w"
    file_handler = logging.FileHandler(log_file, mode=file_mode)
    file_handler.setFormatter(logging.Formatter(TECHNICAL_FORMAT, TECHNICAL_DATE_FORMAT))
    file_handler.setLevel(level)
    return file_handler


def _remove_managed_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        if not getattr(handler, _MANAGED_HANDLER_ATTR, False):
            continue
        root_logger.removeHandler(handler)
        try:
            handler.close()
        except OSError as exc:
            _MODULE_LOGGER.debug("Handler close failed: %s", exc)


def _suppress_noisy_third_parties() -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(
    level: int = logging.INFO,
    *,
    user_friendly: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Configure root logging; calling it again replaces the previous setup."""

    with _config_lock:
        root_logger = logging.getLogger()
        _remove_managed_handlers(root_logger)

        handlers = [_build_console_handler(level, user_friendly)]
        if log_file is not None:
            handlers.append(_build_file_handler(Path(log_file).expanduser(), level))

        for handler in handlers:
            setattr(handler, _MANAGED_HANDLER_ATTR, True)
            root_logger.addHandler(handler)

        root_logger.setLevel(level)
        _suppress_noisy_third_parties()


__all__ = ["setup_logging", "TECHNICAL_FORMAT"]
