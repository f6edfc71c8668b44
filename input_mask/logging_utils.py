from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Mapping, Optional

LOGGER_ROOT = "InputMask"
LOG_DIR_ENV_VAR = "INPUT_MASK_LOG_DIR"
DEBUG_ENV_VAR = "INPUT_MASK_DEBUG"
LOG_FILENAME = "input_mask.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


def debug_enabled_from_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    return str(env.get(DEBUG_ENV_VAR, "")).strip().lower() in _TRUTHY


def resolve_logs_dir(preferred: Optional[Path] = None) -> Path:
    """Pick the first writable log directory.

    Order: ``preferred`` (from the binding config), ``INPUT_MASK_LOG_DIR``,
    ``$XDG_STATE_HOME/InputMask``, then the temp directory.
    """
    candidates = []
    if preferred is not None:
        candidates.append(Path(preferred).expanduser())
    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())
    state_home = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    candidates.append(Path(state_home) / LOGGER_ROOT)

    for target in candidates:
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        return target

    fallback = Path(tempfile.gettempdir()) / LOGGER_ROOT
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def build_rotating_file_handler(log_dir: Path, *, retention: int = 3, max_bytes: int = 256 * 1024) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=max_bytes,
        backupCount=max(0, retention - 1),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(*, debug_enabled: Optional[bool] = None, log_dir: Optional[Path] = None) -> logging.Logger:
    """Route the ``InputMask.*`` loggers to a rotating file.

    ``debug_enabled`` of None defers to ``INPUT_MASK_DEBUG``. Repeated calls
    for the same directory reuse the existing handler.
    """
    if debug_enabled is None:
        debug_enabled = debug_enabled_from_env()
    logger = logging.getLogger(LOGGER_ROOT)
    logger.setLevel(logging.DEBUG if debug_enabled else logging.INFO)

    target_dir = resolve_logs_dir(log_dir)
    target_file = (target_dir / LOG_FILENAME).resolve()
    if any(
        isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename).resolve() == target_file
        for handler in logger.handlers
    ):
        return logger
    logger.addHandler(build_rotating_file_handler(target_dir))
    logger.debug("Logging to %s (debug=%s)", target_file, debug_enabled)
    return logger


__all__ = [
    "DEBUG_ENV_VAR",
    "LOGGER_ROOT",
    "LOG_DIR_ENV_VAR",
    "LOG_FILENAME",
    "build_rotating_file_handler",
    "configure_logging",
    "debug_enabled_from_env",
    "resolve_logs_dir",
]
