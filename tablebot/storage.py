"""Durable key/value storage backing the per-turn state store."""
from __future__ import annotations

import asyncio
import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .errors import StoreUnavailableError
from .models import StateRecord

logger = logging.getLogger(__name__)


class Storage(ABC):
    """Reads and writes JSON-compatible documents by key.

    ``write`` must apply every change it is given or none of them.
    """

    @abstractmethod
    async def read(self, keys: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Return the stored documents for the keys that exist."""

    @abstractmethod
    async def write(self, changes: Dict[str, Dict[str, Any]]) -> None:
        """Store all documents in ``changes`` together."""


class MemoryStorage(Storage):
    """Process-local storage for development and tests."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    async def read(self, keys: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        return {k: copy.deepcopy(self._data[k]) for k in keys if k in self._data}

    async def write(self, changes: Dict[str, Dict[str, Any]]) -> None:
        self._data.update({k: copy.deepcopy(v) for k, v in changes.items()})

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class SqlStorage(Storage):
    """SQLAlchemy-backed storage; one transaction per ``write``."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def read(self, keys: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        return await asyncio.to_thread(self._read, list(keys))

    async def write(self, changes: Dict[str, Dict[str, Any]]) -> None:
        if not changes:
            return
        await asyncio.to_thread(self._write, dict(changes))

    def _read(self, keys: list[str]) -> Dict[str, Dict[str, Any]]:
        if not keys:
            return {}
        try:
            with self.session_factory() as db:
                rows = db.query(StateRecord).filter(StateRecord.key.in_(keys)).all()
                return {row.key: json.loads(row.data) for row in rows}
        except SQLAlchemyError as e:
            logger.error("State read failed for %s: %s", keys, e)
            raise StoreUnavailableError(str(e)) from e

    def _write(self, changes: Dict[str, Dict[str, Any]]) -> None:
        try:
            with self.session_factory() as db, db.begin():
                for key, doc in changes.items():
                    db.merge(StateRecord(key=key, data=json.dumps(doc)))
        except SQLAlchemyError as e:
            logger.error("State write failed for %s: %s", list(changes), e)
            raise StoreUnavailableError(str(e)) from e
