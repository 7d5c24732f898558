from __future__ import annotations

import json
import logging
from typing import Any

__all__ = ["LOGGER", "configure_logging", "log_json"]

LOGGER = logging.getLogger("commit_stats")


def configure_logging(level: str = "INFO") -> None:
    LOGGER.setLevel(level)
    if LOGGER.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    LOGGER.addHandler(handler)


def log_json(level: int, message: str, **fields: Any) -> None:
    payload = {"message": message, **fields}
    LOGGER.log(level, json.dumps(payload, ensure_ascii=True))
