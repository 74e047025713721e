from __future__ import annotations

import random
from types import SimpleNamespace

import pytest

from trivia_challenge.challenge.engine import RoundStatus
from trivia_challenge.challenge.timer import PolledScheduler
from trivia_challenge.challenge.view import app as view

from fixtures import FakeClock, make_question


class StubContainer:
    def __init__(self, *_, **kwargs):
        self.id = kwargs.get("id")
        self.classes = kwargs.get("classes")
        self.children = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False

    def remove_children(self) -> None:
        self.children.clear()

    def mount(self, widget) -> None:
        self.children.append(widget)


class StubVertical(StubContainer):
    pass


class StubStatic:
    def __init__(self, text: str = "", id: str | None = None, **kwargs):
        self.text = text
        self.id = id
        self.classes = kwargs.get("classes")

    def update(self, new: str) -> None:
        self.text = new


class StubButton:
    def __init__(
        self, label: str, id: str | None = None, name: str | None = None
    ):
        self.label = label
        self.id = id
        self.name = name
        self.class_names: list[str] = []
        self.disabled = False
        self.focused = False

    def add_class(self, name: str) -> None:
        self.class_names.append(name)

    def set_class(self, add: bool, name: str) -> None:
        if add and name not in self.class_names:
            self.class_names.append(name)
        elif not add and name in self.class_names:
            self.class_names.remove(name)

    def focus(self) -> None:
        self.focused = True


@pytest.fixture
def stub_widgets(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(view, "Container", StubContainer)
    monkeypatch.setattr(view, "Vertical", StubVertical)
    monkeypatch.setattr(view, "Static", StubStatic)
    monkeypatch.setattr(view, "Button", StubButton)


@pytest.fixture
def app(clock: FakeClock, monkeypatch: pytest.MonkeyPatch):
    bank = [make_question(n) for n in range(1, 7)]
    instance = view.ChallengeApp(
        bank,
        time_limit_seconds=5,
        scheduler=PolledScheduler(clock=clock),
        rng=random.Random(4),
    )
    stage = StubContainer(id="stage")
    status = StubStatic("", id="status")
    submit = StubButton("Submit", id="submit")
    next_button = StubButton("Next round", id="next")
    widgets = {
        "#stage": stage,
        "#status": status,
        "#submit": submit,
        "#next": next_button,
    }
    monkeypatch.setattr(
        instance, "query_one", lambda selector, _type: widgets[selector]
    )
    themes: list[str] = []
    monkeypatch.setattr(
        instance, "_apply_theme", lambda: themes.append(instance.engine.theme)
    )
    instance.stub_widgets = widgets  # type: ignore[attr-defined]
    instance.stub_themes = themes  # type: ignore[attr-defined]
    return instance


def _press(app, *, id=None, name=None) -> None:
    app.on_button_pressed(
        SimpleNamespace(button=SimpleNamespace(id=id, name=name))
    )


def test_parse_answer_button_name() -> None:
    assert view.parse_answer_button_name("answer-2-3") == (2, 3)
    assert view.answer_button_name(1, 0) == "answer-1-0"
    assert view.parse_answer_button_name("answer-x-1") is None
    assert view.parse_answer_button_name("submit") is None
    assert view.parse_answer_button_name("") is None


def test_compose_before_mount_has_empty_stage(stub_widgets, app) -> None:
    rendered = list(app.compose())

    ids = {getattr(widget, "id", None) for widget in rendered}
    assert {"status", "submit", "next", "menu"}.issubset(ids)
    assert not any(isinstance(w, view.QuestionCard) for w in rendered)


def test_mount_starts_round_and_builds_cards(app) -> None:
    app.on_mount()

    stage = app.stub_widgets["#stage"]
    assert app.engine.status is RoundStatus.ACTIVE
    assert len(stage.children) == 4
    assert all(isinstance(c, view.QuestionCard) for c in stage.children)
    assert app.stub_themes == [app.engine.theme]
    assert "Answered 0/4" in app.stub_widgets["#status"].text
    assert app.stub_widgets["#submit"].disabled is True


def test_answer_buttons_select_and_enable_submit(app) -> None:
    app.on_mount()

    for index in range(4):
        _press(app, name=view.answer_button_name(index, 0))

    assert app.engine.answered_count() == 4
    assert app.stub_widgets["#submit"].disabled is False

    _press(app, id="submit")

    assert app.engine.status is RoundStatus.SUBMITTED
    assert "Perfect round!" in app.stub_widgets["#status"].text


def test_ticks_only_refresh_status(app, clock: FakeClock) -> None:
    app.on_mount()
    stage = app.stub_widgets["#stage"]
    cards = list(stage.children)

    app.engine.tick()

    assert stage.children == cards
    assert "0:04" in app.stub_widgets["#status"].text


def test_timeout_is_reported(app) -> None:
    app.on_mount()

    for _ in range(5):
        app.engine.tick()

    assert app.engine.time_expired
    assert "Time's up!" in app.stub_widgets["#status"].text


def test_next_round_only_after_round_ends(app) -> None:
    app.on_mount()

    app.action_next_round()
    assert app.engine.round_number == 1

    for _ in range(5):
        app.engine.tick()
    _press(app, id="next")

    assert app.engine.round_number == 2
    assert app.engine.is_active


def test_menu_exits_with_summary(app, monkeypatch) -> None:
    exits: list[object] = []
    monkeypatch.setattr(app, "exit", lambda result=None: exits.append(result))
    app.on_mount()
    for _ in range(5):
        app.engine.tick()

    _press(app, id="menu")

    assert exits == [app.summary]
    assert app.summary.rounds_played == 1
    assert app.summary.timed_out_rounds == 1
    assert len(app.rounds) == 1
    assert app.engine.status is RoundStatus.IDLE

    app.on_unmount()
    assert app.engine.status is RoundStatus.IDLE


def test_question_card_marks_answers(stub_widgets, app) -> None:
    app.on_mount()
    engine = app.engine
    correct = engine.question_states[0].question.correct_index
    wrong = (correct + 1) % 4
    engine.select_answer(0, wrong)
    for index in range(1, 4):
        engine.select_answer(index, 0)
    engine.submit()

    elements = list(view.QuestionCard(engine, 0).compose())

    buttons = [e for e in elements if isinstance(e, StubButton)]
    assert len(buttons) == 4
    assert buttons[wrong].class_names == ["selected", "wrong"]
    assert buttons[correct].class_names == ["correct"]
    assert buttons[0].name == "answer-0-0"
    assert elements[0].text.startswith("1. Question")


def test_selection_keeps_existing_cards(app) -> None:
    app.on_mount()
    stage = app.stub_widgets["#stage"]
    cards = list(stage.children)

    _press(app, name=view.answer_button_name(0, 1))
    _press(app, name=view.answer_button_name(0, 2))

    assert stage.children == cards
    assert app.engine.is_selected(0, 2)


def test_finished_round_moves_focus_to_next(app) -> None:
    app.on_mount()
    for index in range(4):
        _press(app, name=view.answer_button_name(index, 0))

    assert app.stub_widgets["#next"].focused is False
    _press(app, id="submit")

    assert app.stub_widgets["#next"].focused is True


def test_refresh_answers_updates_classes_in_place(stub_widgets, app) -> None:
    app.on_mount()
    engine = app.engine
    card = view.QuestionCard(engine, 0)
    buttons = [e for e in card.compose() if isinstance(e, StubButton)]

    engine.select_answer(0, 1)
    card.refresh_answers()
    assert buttons[1].class_names == ["selected"]

    engine.select_answer(0, 2)
    card.refresh_answers()
    assert buttons[1].class_names == []
    assert buttons[2].class_names == ["selected"]

    card.focus_first_answer()
    assert buttons[0].focused is True
