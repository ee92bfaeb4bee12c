# /gemclient/adapters/system/logging_cfg.py
from __future__ import annotations

import json
import logging
import sys
from typing import Any


class JSONHandler(logging.StreamHandler):
    """One JSON object per record; fields passed as extra={"extra": {...}} are merged in."""

    def emit(self, record: logging.LogRecord) -> None:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        self.stream.write(json.dumps(payload, default=str) + "\n")
        self.flush()


def configure_logger(level: int | str = logging.INFO) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(JSONHandler(stream=sys.stdout))
