from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Dict, Optional

LOGGER_NAME = "evm_device_signer"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _level_from_env() -> int:
    raw = (os.getenv("SIGNER_LOG_LEVEL") or "info").strip().lower()
    return _LEVELS.get(raw, logging.INFO)


def get_logger() -> logging.Logger:
    """
    Library logger. No handler is installed here; applications configure output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.level == logging.NOTSET:
        logger.setLevel(_level_from_env())
    return logger


def build_log_context(**fields: Any) -> Dict[str, Any]:
    ctx: Dict[str, Any] = {"service": os.getenv("SIGNER_SERVICE_NAME", "evm-device-signer").strip()}
    ctx.update({k: v for k, v in fields.items() if v is not None})
    return ctx


def log_event(
    event: str,
    *,
    ctx: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    level: str = "info",
) -> None:
    """
    Emit a single JSON line describing `event`.

    Values that are not JSON-native (bytes, ints too big for some consumers) are
    rendered with `str()`; callers should pass hex strings for binary data.
    """
    logger = get_logger()
    lvl = _LEVELS.get(level, logging.INFO)
    if not logger.isEnabledFor(lvl):
        return
    record = {"ts_ms": int(time.time() * 1000), "event": event, **(ctx or {}), "data": data or {}}
    logger.log(lvl, json.dumps(record, sort_keys=True, default=str))
