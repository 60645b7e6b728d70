"""Tests for the dialog stack."""

from typing import Any

import pytest

from tablebot.context import DIALOG_STACK_KIND, TurnContext
from tablebot.dialog_stack import Dialog, DialogStack, DialogTurnResult, DialogTurnStatus
from tablebot.errors import UnknownDialogError
from tablebot.schemas import ActiveDialog, DialogStackRecord


class EchoDialog(Dialog):
    """Waits until it hears 'done', counting the turns it saw."""

    dialog_id = "echo"

    async def begin(self, ctx: TurnContext) -> DialogTurnResult:
        return DialogTurnResult(DialogTurnStatus.WAITING, {"turns": 0})

    async def resume(self, ctx: TurnContext, state: dict[str, Any]) -> DialogTurnResult:
        if ctx.text == "done":
            await ctx.send("bye")
            return DialogTurnResult(DialogTurnStatus.COMPLETE)
        return DialogTurnResult(DialogTurnStatus.WAITING, {"turns": state["turns"] + 1})


@pytest.fixture
def stack() -> DialogStack:
    return DialogStack([EchoDialog()])


class TestDialogStack:
    @pytest.mark.asyncio
    async def test_continue_without_dialog_is_empty_and_side_effect_free(
        self, stack, make_context, state, storage, transport
    ) -> None:
        ctx = make_context("hello")
        for _ in range(3):
            result = await stack.continue_dialog(ctx)
            assert result.status is DialogTurnStatus.EMPTY

        assert state.pending("conv-1") == set()
        assert transport.drain("conv-1") == []
        await state.flush("conv-1")
        assert len(storage) == 0

    @pytest.mark.asyncio
    async def test_begin_records_active_entry(self, stack, make_context, state) -> None:
        ctx = make_context("start")
        result = await stack.begin("echo", ctx)

        assert result.status is DialogTurnStatus.WAITING
        active = await stack.active(ctx)
        assert active == ActiveDialog(dialog_id="echo", state={"turns": 0})

    @pytest.mark.asyncio
    async def test_continue_passes_and_stores_dialog_state(self, stack, make_context) -> None:
        await stack.begin("echo", make_context("start"))
        await stack.continue_dialog(make_context("one"))
        await stack.continue_dialog(make_context("two"))

        active = await stack.active(make_context())
        assert active.state == {"turns": 2}

    @pytest.mark.asyncio
    async def test_complete_removes_entry(self, stack, make_context) -> None:
        await stack.begin("echo", make_context("start"))
        result = await stack.continue_dialog(make_context("done"))

        assert result.status is DialogTurnStatus.COMPLETE
        assert await stack.active(make_context()) is None

    @pytest.mark.asyncio
    async def test_end_and_cancel_all_are_unconditional(self, stack, make_context) -> None:
        ctx = make_context()
        await stack.begin("echo", ctx)
        await stack.cancel_all(ctx)
        assert await stack.active(ctx) is None

        await stack.end(ctx)
        await stack.cancel_all(ctx)
        assert await stack.active(ctx) is None

    @pytest.mark.asyncio
    async def test_unregistered_active_dialog_reports_cancelled(self, stack, make_context, state) -> None:
        state.set("conv-1", DIALOG_STACK_KIND, DialogStackRecord(entry=ActiveDialog(dialog_id="gone")))
        result = await stack.continue_dialog(make_context("hi"))
        assert result.status is DialogTurnStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_begin_unknown_dialog_raises(self, stack, make_context) -> None:
        with pytest.raises(UnknownDialogError):
            await stack.begin("missing", make_context())
