"""
Local Device Cache: per-device key/value storage with string values.

Best-effort. It may be cleared at any time, and every read or write failure
degrades to a cache miss instead of failing the caller.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from storefront_content_system.core.errors import CacheUnavailable
from storefront_content_system.core.models import DEFAULT_DOCUMENT_TITLE, GeneratedDocument

logger = logging.getLogger("LocalCache")


class LocalCache(ABC):
    """Abstract key/value cache. get/set may raise CacheUnavailable."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str):
        pass

    # --- Tolerant helpers used by the pipeline ---

    def safe_get(self, key: str) -> Optional[str]:
        try:
            return self.get(key)
        except CacheUnavailable as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    def safe_set(self, key: str, value: str) -> bool:
        try:
            self.set(key, value)
            return True
        except CacheUnavailable as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False

    def get_document(self, product_id: str) -> Optional[GeneratedDocument]:
        """
        Read a cached document.
        Values in the legacy raw-string format are treated as content only.
        """
        raw = self.safe_get(product_id)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return GeneratedDocument(title=DEFAULT_DOCUMENT_TITLE, content=raw)

        if not isinstance(data, dict):
            return GeneratedDocument(title=DEFAULT_DOCUMENT_TITLE, content=raw)
        content = data.get("content")
        if not content:
            return None
        try:
            return GeneratedDocument(
                title=data.get("title") or DEFAULT_DOCUMENT_TITLE, content=content
            )
        except ValueError:
            logger.warning(f"Ignoring malformed cached document for {product_id}")
            return None

    def set_document(self, product_id: str, document: GeneratedDocument) -> bool:
        return self.safe_set(product_id, json.dumps(document.to_cache_payload()))

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.safe_get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding unreadable cache value for {key}")
            return default

    def set_json(self, key: str, value: Any) -> bool:
        return self.safe_set(key, json.dumps(value))


class InMemoryLocalCache(LocalCache):
    """Dict-backed cache, one per simulated device."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value

    def clear(self):
        self._data.clear()


class NullLocalCache(LocalCache):
    """Always misses. Used when no device storage is available."""

    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, value: str):
        pass


class JsonFileLocalCache(LocalCache):
    """Single JSON object on disk, rewritten atomically on each set."""

    def __init__(self, path: str = "data/local_cache.json"):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise CacheUnavailable(f"Cannot read {self.path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str):
        data = self._load()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise CacheUnavailable(f"Cannot write {self.path}: {e}") from e
