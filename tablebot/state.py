"""Per-turn view over durable conversation state.

Values read during a turn are cached per conversation so that repeated reads
return the same object. Writes are staged and only reach the storage backend
when ``flush`` is called, which commits every staged value of the conversation
in a single ``Storage.write`` call.
"""
from __future__ import annotations

import logging
from typing import Dict, Set, Tuple, Type, TypeVar

from pydantic import BaseModel

from .storage import Storage

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def state_key(conversation_id: str, kind: str) -> str:
    return f"conversations/{conversation_id}/{kind}"


class StateStore:
    def __init__(self, storage: Storage):
        self.storage = storage
        self._cache: Dict[Tuple[str, str], BaseModel] = {}
        self._dirty: Set[Tuple[str, str]] = set()

    async def get(self, conversation_id: str, kind: str, model: Type[T]) -> T:
        """Return the value for ``kind``, or a fresh ``model()`` when absent."""
        slot = (conversation_id, kind)
        if slot in self._cache:
            return self._cache[slot]  # type: ignore[return-value]
        key = state_key(conversation_id, kind)
        docs = await self.storage.read([key])
        value = model.model_validate(docs[key]) if key in docs else model()
        self._cache[slot] = value
        return value

    def set(self, conversation_id: str, kind: str, value: BaseModel) -> None:
        slot = (conversation_id, kind)
        self._cache[slot] = value
        self._dirty.add(slot)

    def pending(self, conversation_id: str) -> Set[str]:
        return {kind for cid, kind in self._dirty if cid == conversation_id}

    async def flush(self, conversation_id: str) -> None:
        """Commit every staged write for the conversation, then drop its cache."""
        changes = {
            state_key(cid, kind): self._cache[(cid, kind)].model_dump(mode="json")
            for cid, kind in self._dirty
            if cid == conversation_id
        }
        if changes:
            logger.debug("Flushing %d state record(s) for %s", len(changes), conversation_id)
            await self.storage.write(changes)
        self.discard(conversation_id)

    def discard(self, conversation_id: str) -> None:
        """Forget cached and staged values for the conversation without writing."""
        for slot in [s for s in self._cache if s[0] == conversation_id]:
            del self._cache[slot]
        self._dirty = {s for s in self._dirty if s[0] != conversation_id}
