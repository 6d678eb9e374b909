"""
Content Store: shared, multi-writer document storage keyed by product id.

The only write is create-only. A second writer for the same id gets
StoreWriteConflict, which turns concurrent generation into
"first successful write wins".
"""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import quote

from storefront_content_system.core.errors import StoreUnavailable, StoreWriteConflict
from storefront_content_system.core.models import GeneratedDocument, utc_now

logger = logging.getLogger("ContentStore")


class ContentStore(ABC):
    """Abstract keyed document access."""

    @abstractmethod
    async def get(self, product_id: str) -> Optional[GeneratedDocument]:
        """Return the stored document or None. Raises StoreUnavailable."""
        pass

    @abstractmethod
    async def create_only(self, product_id: str, document: GeneratedDocument) -> GeneratedDocument:
        """
        Persist a new document, assigning created_at.

        Raises:
            StoreWriteConflict: a record already exists for product_id
            StoreUnavailable: transport failure
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored documents."""
        pass


class InMemoryContentStore(ContentStore):
    """Process-local store, shared by every orchestrator holding a reference."""

    def __init__(self):
        self._records: Dict[str, GeneratedDocument] = {}
        self._lock = asyncio.Lock()

    async def get(self, product_id: str) -> Optional[GeneratedDocument]:
        record = self._records.get(product_id)
        return record.model_copy() if record else None

    async def create_only(self, product_id: str, document: GeneratedDocument) -> GeneratedDocument:
        async with self._lock:
            if product_id in self._records:
                raise StoreWriteConflict(
                    f"Document already exists: {product_id}", product_id=product_id
                )
            stored = document.model_copy(update={"created_at": utc_now()})
            self._records[product_id] = stored
            logger.debug(f"Created document {product_id}")
            return stored.model_copy()

    async def count(self) -> int:
        return len(self._records)


class FileSystemContentStore(ContentStore):
    """
    One JSON file per document.

    Records are written to a temp file and hard-linked into place; the link
    fails if the target exists, which gives an atomic create-only write
    that never exposes a half-written record.
    """

    def __init__(self, root_dir: str = "data/generated_content"):
        self.root = Path(root_dir)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, product_id: str) -> Path:
        return self.root / f"{quote(product_id, safe='')}.json"

    async def get(self, product_id: str) -> Optional[GeneratedDocument]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read, product_id)

    async def create_only(self, product_id: str, document: GeneratedDocument) -> GeneratedDocument:
        loop = asyncio.get_running_loop()
        stored = document.model_copy(update={"created_at": utc_now()})
        await loop.run_in_executor(None, self._write_exclusive, product_id, stored)
        return stored

    async def count(self) -> int:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, lambda: sum(1 for _ in self.root.glob("*.json"))
        )

    def _read(self, product_id: str) -> Optional[GeneratedDocument]:
        path = self._path(product_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailable(f"Failed to read {path}: {e}", product_id=product_id) from e

        # Valid JSON of the wrong shape is as unreadable as a torn file.
        try:
            return GeneratedDocument(**data)
        except (TypeError, ValueError) as e:
            raise StoreUnavailable(f"Malformed record {path}: {e}", product_id=product_id) from e

    def _write_exclusive(self, product_id: str, document: GeneratedDocument):
        path = self._path(product_id)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.root, suffix=".tmp")
        except OSError as e:
            raise StoreUnavailable(f"Store not writable: {e}", product_id=product_id) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document.model_dump_json())
            os.link(tmp_name, path)
        except FileExistsError as e:
            raise StoreWriteConflict(
                f"Document already exists: {product_id}", product_id=product_id
            ) from e
        except OSError as e:
            raise StoreUnavailable(f"Failed to write {path}: {e}", product_id=product_id) from e
        finally:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass

        logger.debug(f"Created document file {path}")
