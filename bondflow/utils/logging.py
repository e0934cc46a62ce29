from __future__ import annotations

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"
_LEVEL_ENV_VAR = "BONDFLOW_LOG_LEVEL"
_DEBUG_FLAG = "BONDFLOW_DEBUG"
# web3 and urllib3 log every RPC round-trip at DEBUG.
_NOISY_LOGGERS = ("web3", "urllib3")


def _coerce_level(value: Optional[str], fallback: int) -> int:
    if not value:
        return fallback
    text = value.strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    candidate = getattr(logging, text.upper(), None)
    if isinstance(candidate, int):
        return candidate
    return fallback


def _env_truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_env_level() -> Optional[int]:
    value = os.getenv(_LEVEL_ENV_VAR)
    if value:
        return _coerce_level(value, logging.INFO)
    if _env_truthy(os.getenv(_DEBUG_FLAG)):
        return logging.DEBUG
    return None


def configure_root(default_level: int | str = logging.INFO, *, quiet_transport: bool = True) -> int:
    """
    Configure the root logger with a compact format.

    Environment overrides:
      - BONDFLOW_LOG_LEVEL: explicit log level (name or number)
      - BONDFLOW_DEBUG: truthy -> DEBUG

    Returns the effective level.
    """
    fallback = (
        _coerce_level(default_level, logging.INFO)
        if isinstance(default_level, str)
        else int(default_level)
    )
    env_level = _resolve_env_level()
    effective = env_level if env_level is not None else fallback

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=effective, format=_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)
    root.setLevel(effective)

    if quiet_transport:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(effective, logging.INFO))
    return effective


def apply_verbosity(verbose: bool) -> int:
    """
    Switch the root level from a CLI flag while honoring env overrides.
    Returns the effective level after the update.
    """
    env_level = _resolve_env_level()
    level = env_level if env_level is not None else (logging.DEBUG if verbose else logging.INFO)
    logging.getLogger().setLevel(level)
    return level


def level_name(level: int) -> str:
    """Return logging level name for diagnostics."""
    return logging.getLevelName(level)


def env_requests_debug() -> bool:
    """Return True if environment variables force DEBUG logging."""
    env_level = _resolve_env_level()
    if env_level is None:
        return False
    return env_level <= logging.DEBUG
