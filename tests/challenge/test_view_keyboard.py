from __future__ import annotations

import asyncio
import random

from textual.widgets import Button

from trivia_challenge.challenge.engine import RoundStatus
from trivia_challenge.challenge.view.app import (
    ChallengeApp,
    answer_button_name,
)

from fixtures import make_bank


def _answer_button(app: ChallengeApp, question: int, answer: int) -> Button:
    name = answer_button_name(question, answer)
    return next(b for b in app.query(Button) if b.name == name)


async def _play_keyboard_round() -> dict[str, object]:
    app = ChallengeApp(
        make_bank(6), time_limit_seconds=300, rng=random.Random(3)
    )
    seen: dict[str, object] = {}
    async with app.run_test() as pilot:
        await pilot.pause()
        for question in range(4):
            _answer_button(app, question, 0).focus()
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
        seen["answered"] = app.engine.answered_count()
        seen["focused_after_select"] = getattr(app.focused, "name", None)

        await pilot.press("s")
        await pilot.pause()
        seen["after_submit"] = app.engine.status
        seen["focused_after_submit"] = getattr(app.focused, "id", None)

        await pilot.press("enter")
        await pilot.pause()
        seen["round"] = app.engine.round_number
        seen["after_enter"] = app.engine.status
        seen["cards"] = len(app._cards)
    return seen


def test_keyboard_round_advances_with_enter() -> None:
    seen = asyncio.run(_play_keyboard_round())

    assert seen["answered"] == 4
    assert seen["focused_after_select"] == answer_button_name(3, 0)
    assert seen["after_submit"] is RoundStatus.SUBMITTED
    assert seen["focused_after_submit"] == "next"
    assert seen["round"] == 2
    assert seen["after_enter"] is RoundStatus.ACTIVE
    assert seen["cards"] == 4
