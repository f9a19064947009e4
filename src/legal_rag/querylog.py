from __future__ import annotations
import json
import os
from datetime import datetime, timezone

from .logging_setup import logger


class QueryLogger:
    """Append-only JSON-lines log, one record per /ask request. Never read back."""

    def __init__(self, path: str):
        self.path = path

    def log(self, **fields) -> None:
        record = dict(fields)
        record["ts"] = datetime.now(timezone.utc).isoformat()
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
        except (OSError, TypeError, ValueError) as e:
            # the response has already gone out; losing a record is acceptable
            logger.debug(f"Query log write failed: {e}")
