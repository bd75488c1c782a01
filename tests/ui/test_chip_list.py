"""Tests for the chip list editor state machine."""

import pytest

from webmarker.domain.events import ChipListClosed, SubmitTriggered, TagsChanged
from webmarker.domain.models import Mark, Tag
from webmarker.infrastructure.messaging.event_bus import EventBus
from webmarker.store import ActionCreators, Store, Tab
from webmarker.store.state import find_bookmark, find_mark
from webmarker.ui import ChipInputState, ChipListModel

URL = "https://example.com/post"


class Recorder:
    def __init__(self, bus: EventBus) -> None:
        self.events = []
        for event_type in (TagsChanged, SubmitTriggered, ChipListClosed):
            bus.subscribe(event_type, self.record)

    async def record(self, event) -> None:
        self.events.append(event)

    def of(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def actions():
    return ActionCreators(Store())


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    return Recorder(bus)


@pytest.fixture
def chips(actions, bus):
    model = ChipListModel(actions, bus)
    model.chips = ["python", "rust"]
    return model


# ---------------------------------------------------------------------------
# Backspace
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_two_backspaces_delete_last_chip(chips, recorder):
    await chips.key_down("Backspace", "")
    assert chips.delete_armed
    assert chips.chips == ["python", "rust"]
    assert recorder.events == []

    await chips.key_down("Backspace", "")

    assert chips.chips == ["python"]
    assert chips.input_state is ChipInputState.IDLE
    [event] = recorder.of(TagsChanged)
    assert event.chips == ("python",)
    assert event.deleted_chip == "rust"


@pytest.mark.asyncio
async def test_typing_disarms_pending_delete(chips):
    await chips.key_down("Backspace", "")
    await chips.key_down("x", "x")
    assert chips.input_state is ChipInputState.IDLE

    await chips.key_down("Backspace", "")
    assert chips.chips == ["python", "rust"]
    assert chips.delete_armed


@pytest.mark.asyncio
async def test_backspace_with_text_does_not_arm(chips):
    await chips.key_down("Backspace", "pyt")

    assert chips.input_state is ChipInputState.IDLE
    assert chips.chips == ["python", "rust"]


@pytest.mark.asyncio
async def test_backspace_without_chips_does_nothing(actions, bus, recorder):
    model = ChipListModel(actions, bus)

    await model.key_down("Backspace", "")
    await model.key_down("Backspace", "")

    assert model.input_state is ChipInputState.IDLE
    assert recorder.events == []


# ---------------------------------------------------------------------------
# Enter
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_enter_commits_chip(chips, recorder):
    await chips.key_down("Enter", " go ")

    assert chips.chips == ["python", "rust", "go"]
    assert chips.input_value == ""
    assert chips.input_state is ChipInputState.PENDING_SUBMIT
    assert recorder.of(TagsChanged)[-1].chips == ("python", "rust", "go")


@pytest.mark.asyncio
async def test_duplicate_chip_is_ignored_case_insensitively(chips):
    await chips.key_down("Enter", "PYTHON")

    assert chips.chips == ["python", "rust"]


@pytest.mark.asyncio
async def test_enter_on_empty_input_twice_submits(chips, recorder):
    await chips.key_down("Enter", "")
    assert chips.input_state is ChipInputState.PENDING_SUBMIT
    assert recorder.of(SubmitTriggered) == []

    await chips.key_down("Enter", "")

    [event] = recorder.of(SubmitTriggered)
    assert event.chips == ("python", "rust")
    assert chips.input_state is ChipInputState.IDLE


@pytest.mark.asyncio
async def test_enter_after_commit_submits(chips, recorder):
    await chips.key_down("Enter", "go")
    await chips.key_down("Enter", "")

    assert recorder.of(SubmitTriggered)[0].chips == ("python", "rust", "go")


@pytest.mark.asyncio
async def test_highlighted_autocomplete_wins_over_typed_text(chips):
    await chips.select_autocomplete("golang")
    await chips.key_down("Enter", "go")

    assert chips.chips == ["python", "rust", "golang"]
    assert chips.autocomplete_value == ""


@pytest.mark.asyncio
async def test_clicked_autocomplete_commits_immediately(chips, recorder):
    await chips.select_autocomplete("zig", click=True)

    assert chips.chips == ["python", "rust", "zig"]
    assert recorder.of(TagsChanged)[-1].chips == ("python", "rust", "zig")


# ---------------------------------------------------------------------------
# Store interaction
# ---------------------------------------------------------------------------


def test_suggestions_come_from_tag_dictionary(actions, bus):
    actions.init_tags([Tag(name="Python"), Tag(name="pytest"), Tag(name="Rust")])
    model = ChipListModel(actions, bus)

    assert model.suggestions("PY") == ["pytest", "Python"]
    assert model.suggestions("") == []
    assert model.all_tag_names == ["pytest", "Python", "Rust"]


def test_click_chip_opens_tags_view(chips, actions):
    chips.click_chip("rust")

    state = actions.store.get_state()
    assert state.active_view is Tab.TAGS
    assert state.search_value == "rust"


@pytest.mark.asyncio
async def test_dismiss_detaches_and_notifies(actions, bus, recorder):
    model = ChipListModel(actions, bus)
    assert actions.store.subscriber_count == 1

    await model.dismiss()

    assert actions.store.subscriber_count == 0
    assert len(recorder.of(ChipListClosed)) == 1


def test_follows_updates_of_bound_mark(actions, bus):
    mark = Mark(id="m1", url=URL, tags=["a"])
    actions.init_marks([mark])
    model = ChipListModel(actions, bus, mark=mark)

    actions.update_mark(mark.with_tags(["a", "b"]))
    assert model.chips == ["a", "b"]

    actions.update_mark(Mark(id="other", url=URL, tags=["z"]))
    assert model.chips == ["a", "b"]


@pytest.mark.asyncio
async def test_bound_chip_list_updates_mark_and_propagates(container, backend):
    backend.seed("marks", {"id": "m1", "url": URL, "text": "t", "tags": ["a"]})
    backend.seed("bookmarks", {"id": "b1", "url": URL, "tags": []})
    await container.bookmark_service.get_bookmarks()
    await container.mark_service.get_marks()
    model = container.chip_list(mark=find_mark(container.store.get_state(), "m1"))

    await model.key_down("Enter", "b")

    assert [t["name"] for t in backend.resources["marks"]["m1"]["tags"]] == ["a", "b"]
    assert find_bookmark(container.store.get_state(), "b1").tag_names == ["a", "b"]
    assert model.mark.tag_names == ["a", "b"]
    model.close()


@pytest.mark.asyncio
async def test_bound_chip_list_skips_update_when_count_unchanged(container, backend):
    backend.seed("marks", {"id": "m1", "url": URL, "text": "t", "tags": ["a"]})
    await container.mark_service.get_marks()
    model = container.chip_list(mark=find_mark(container.store.get_state(), "m1"))

    await model.key_down("Enter", "A")

    assert backend.calls("PUT", "/marks") == []
