"""Tracks the (single) active dialog of a conversation."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable

from .context import DIALOG_STACK_KIND, TurnContext
from .errors import UnknownDialogError
from .schemas import ActiveDialog, DialogStackRecord, NoDialog

logger = logging.getLogger(__name__)


class DialogTurnStatus(str, Enum):
    EMPTY = "empty"          # no dialog was active
    WAITING = "waiting"      # dialog consumed the input and wants more
    COMPLETE = "complete"    # dialog finished and replied
    CANCELLED = "cancelled"  # dialog gave up; also the catch-all


@dataclass
class DialogTurnResult:
    status: DialogTurnStatus
    state: Dict[str, Any] = field(default_factory=dict)


class Dialog(ABC):
    dialog_id: str

    @abstractmethod
    async def begin(self, ctx: TurnContext) -> DialogTurnResult:
        """Start the dialog for this turn."""

    @abstractmethod
    async def resume(self, ctx: TurnContext, state: Dict[str, Any]) -> DialogTurnResult:
        """Feed the turn's input to a dialog that was waiting."""


class DialogStack:
    def __init__(self, dialogs: Iterable[Dialog]):
        self.dialogs: Dict[str, Dialog] = {d.dialog_id: d for d in dialogs}

    async def _record(self, ctx: TurnContext) -> DialogStackRecord:
        return await ctx.state.get(ctx.conversation_id, DIALOG_STACK_KIND, DialogStackRecord)

    async def active(self, ctx: TurnContext) -> ActiveDialog | None:
        return (await self._record(ctx)).active

    async def continue_dialog(self, ctx: TurnContext) -> DialogTurnResult:
        entry = await self.active(ctx)
        if entry is None:
            return DialogTurnResult(DialogTurnStatus.EMPTY)
        dialog = self.dialogs.get(entry.dialog_id)
        if dialog is None:
            logger.warning("Active dialog %r is not registered", entry.dialog_id)
            return DialogTurnResult(DialogTurnStatus.CANCELLED)
        result = await dialog.resume(ctx, dict(entry.state))
        self._apply(ctx, entry.dialog_id, result)
        return result

    async def begin(self, dialog_id: str, ctx: TurnContext) -> DialogTurnResult:
        dialog = self.dialogs.get(dialog_id)
        if dialog is None:
            raise UnknownDialogError(dialog_id)
        self._store(ctx, ActiveDialog(dialog_id=dialog_id))
        result = await dialog.begin(ctx)
        self._apply(ctx, dialog_id, result)
        return result

    async def end(self, ctx: TurnContext) -> None:
        await self._clear(ctx)

    async def cancel_all(self, ctx: TurnContext) -> None:
        await self._clear(ctx)

    async def _clear(self, ctx: TurnContext) -> None:
        if await self.active(ctx) is not None:
            self._store(ctx, NoDialog())

    def _apply(self, ctx: TurnContext, dialog_id: str, result: DialogTurnResult) -> None:
        if result.status is DialogTurnStatus.WAITING:
            self._store(ctx, ActiveDialog(dialog_id=dialog_id, state=result.state))
        else:
            logger.debug("Dialog %s finished with %s", dialog_id, result.status.value)
            self._store(ctx, NoDialog())

    def _store(self, ctx: TurnContext, entry: NoDialog | ActiveDialog) -> None:
        ctx.state.set(ctx.conversation_id, DIALOG_STACK_KIND, DialogStackRecord(entry=entry))
