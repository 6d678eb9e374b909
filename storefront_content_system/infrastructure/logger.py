"""
Structured pipeline logging.

Every record is a JSON document tagged with a "type" (generation, poll,
scheduler) so logs from many devices can be filtered per product.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

LOG_FILE_NAME = "content_system.log"

_loggers: Dict[str, "StructuredLogger"] = {}
_log_dir = "logs"


class StructuredLogger:
    """Wraps a stdlib logger and renders each message as JSON."""

    def __init__(self, name: str, log_dir: Optional[str] = None):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)
        self._file_handler: Optional[logging.FileHandler] = None

        if not self.logger.handlers:
            console = logging.StreamHandler()
            console.setFormatter(logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"))
            self.logger.addHandler(console)

        self.use_log_dir(log_dir or _log_dir)

    def use_log_dir(self, log_dir: str):
        """Point the file handler at log_dir. No file logging if the directory is missing."""
        if self._file_handler is not None:
            self.logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

        if os.path.isdir(log_dir):
            self._file_handler = logging.FileHandler(os.path.join(log_dir, LOG_FILE_NAME), encoding="utf-8")
            self.logger.addHandler(self._file_handler)

    def _emit(self, level: int, message: str, fields: Dict[str, Any]):
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "logger": self.name,
            "message": message,
        }
        payload.update({k: v for k, v in fields.items() if v is not None})
        self.logger.log(level, json.dumps(payload), extra={"product_id": fields.get("product_id")})

    def generation_event(self, product_id: str, stage: str, success: Optional[bool] = None, reason: str = ""):
        """One orchestrator step. Failures are logged as warnings."""
        level = logging.WARNING if success is False else logging.INFO
        self._emit(level, f"Generation {stage}: {product_id}", {
            "type": "generation",
            "product_id": product_id,
            "stage": stage,
            "success": success,
            "reason": reason or None,
        })

    def poll_result(self, product_id: str, status: str, attempts: int):
        self._emit(logging.INFO, f"Poll {status}: {product_id} after {attempts} attempt(s)", {
            "type": "poll",
            "product_id": product_id,
            "status": status,
            "attempts": attempts,
        })

    def scheduler_tick(self, outcome: str, product_id: Optional[str] = None):
        self._emit(logging.INFO, f"Scheduler tick: {outcome}", {
            "type": "scheduler",
            "outcome": outcome,
            "product_id": product_id,
        })


def get_logger(name: str = "SCS") -> StructuredLogger:
    """Return the shared StructuredLogger for name, creating it on first use."""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def set_log_dir(log_dir: str):
    """Send every structured logger's file output to log_dir, creating it if needed."""
    global _log_dir
    os.makedirs(log_dir, exist_ok=True)
    _log_dir = log_dir
    for structured_logger in _loggers.values():
        structured_logger.use_log_dir(log_dir)
