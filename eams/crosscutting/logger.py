"""
===============================================================================
MODULE: Structured (JSON) logger with request context
===============================================================================

Every process (gateway, auth, absence) writes one JSON object per line on
stdout. Lines carry the correlation fields from eams/context.py so a single
request can be followed across the three processes by its request_id.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  JSONFormatter + setup_logger()

Responsibilities:
  - Render records as compact JSON with timestamp, level and origin
  - Merge request context and caller-supplied `extra` fields
  - Mask credentials: signing secrets, Authorization headers, access tokens

Collaborators:
  - eams/context.py (ContextVars)
  - crosscutting/config.py (LOG_LEVEL, LOG_JSON)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import re
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

# Attributes present on every LogRecord; anything else came in via `extra`.
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_MASK = "***"
_MASKED_KEYS = frozenset(
    {
        "authorization",
        "token",
        "access_token",
        "accesstoken",
        "jwt_secret",
        "secret",
        "database_url",
    }
)
_BEARER = re.compile(r"(?i)bearer\s+[\w\-.=]+")
_MAX_STR = 4_000


def _clean(key: str, value: Any) -> Any:
    if key.lower() in _MASKED_KEYS:
        return _MASK
    if isinstance(value, str):
        value = _BEARER.sub("Bearer " + _MASK, value)
        return value if len(value) <= _MAX_STR else value[:_MAX_STR] + "..."
    if isinstance(value, dict):
        return {str(k): _clean(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean(key, v) for v in value]
    return value


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": _clean("msg", record.getMessage()),
            "at": f"{record.module}:{record.lineno}",
        }
        line.update(get_context_dict())

        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                line[key] = _clean(key, value)

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            line["exc"] = {
                "type": exc_type.__name__,
                "message": _clean("message", str(exc)),
                "trace": "".join(traceback.format_tb(tb)),
            }

        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logger(name: str = "eams") -> logging.Logger:
    """
    Configure the package logger once.

    ``logging.getLogger(__name__)`` loggers under ``eams.*`` propagate here,
    so this single handler covers the whole package.
    """
    from .config import get_settings

    settings = get_settings()

    log = logging.getLogger(name)
    level = (settings.log_level or "INFO").upper()
    log.setLevel(getattr(logging, level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.log_json:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
            )
        log.addHandler(handler)

    return log


logger = setup_logger()
