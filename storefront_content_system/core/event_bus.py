"""
Pipeline event bus.

Generation, polling and scheduling emit events here so a UI or a test can
follow one product through the pipeline without reading logs.
"""

import json
import logging
import os
from collections import deque
from datetime import datetime
from threading import Thread
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger("EventBus")

EVENT_LOG_LIMIT = 1000

Subscriber = Callable[[str, Dict[str, Any]], None]


class EventBus:
    """
    Process-wide observer registry.

    Subscribers may restrict themselves to certain event types. Each one is
    called on a daemon thread, so a slow subscriber never stalls the event loop.
    """

    _subscribers: List[Tuple[Subscriber, Optional[frozenset]]] = []
    _event_log: Deque[Dict[str, Any]] = deque(maxlen=EVENT_LOG_LIMIT)

    @classmethod
    def subscribe(cls, callback: Subscriber, events: Optional[Iterable[str]] = None):
        """Register callback for all events, or only for the given event types."""
        wanted = frozenset(events) if events is not None else None
        cls._subscribers.append((callback, wanted))

    @classmethod
    def unsubscribe(cls, callback: Subscriber):
        cls._subscribers = [(cb, wanted) for cb, wanted in cls._subscribers if cb is not callback]

    @classmethod
    def emit(cls, event: str, data: Dict[str, Any] = None, product_id: str = None):
        record = {
            "timestamp": datetime.now().isoformat(),
            "event": event,
            "data": data or {},
            "product_id": product_id,
        }
        cls._event_log.append(record)
        logger.debug(f"{event} for {product_id}", extra={"product_id": product_id})

        for callback, wanted in list(cls._subscribers):
            if wanted is None or event in wanted:
                Thread(target=cls._deliver, args=(callback, event, record), daemon=True).start()

    @staticmethod
    def _deliver(callback: Subscriber, event: str, record: Dict[str, Any]):
        try:
            callback(event, record)
        except Exception:
            logger.exception(f"Subscriber failed handling {event}")

    @classmethod
    def get_events(cls, event_type: str = None, product_id: str = None) -> List[Dict[str, Any]]:
        """Recorded events, oldest first, optionally filtered."""
        return [
            e
            for e in cls._event_log
            if (event_type is None or e["event"] == event_type)
            and (product_id is None or e["product_id"] == product_id)
        ]

    @classmethod
    def clear(cls):
        cls._event_log = deque(maxlen=EVENT_LOG_LIMIT)
        cls._subscribers = []


class Events:
    """Event type names."""

    GENERATION_START = "GENERATION_START"
    GENERATION_COMPLETE = "GENERATION_COMPLETE"
    GENERATION_FAILED = "GENERATION_FAILED"
    STORE_CONFLICT = "STORE_CONFLICT"
    CONTENT_FOUND = "CONTENT_FOUND"
    POLL_TIMEOUT = "POLL_TIMEOUT"
    SCHEDULER_TICK = "SCHEDULER_TICK"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, carrying product_id and any pipeline extras."""

    EXTRA_FIELDS = ("product_id", "attempt", "stage", "outcome")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "component": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_json_logging(log_file: str = "logs/pipeline.log", level: int = logging.INFO):
    """Attach a JSON-lines file handler to the root logger and return it."""
    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)

    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(JSONFormatter())
    handler.setLevel(level)
    logging.getLogger().addHandler(handler)

    logger.info(f"JSON logging to {log_file}")
    return handler
