"""Tests for the popup header model."""

import pytest

from webmarker.store import ActionCreators, Store, Tab
from webmarker.ui import HeaderToggleModel


@pytest.fixture
def actions():
    return ActionCreators(Store())


def test_starts_on_accordion_view(actions):
    header = HeaderToggleModel(actions)

    assert header.active_view is Tab.ACCORDION
    assert header.search_active is False


def test_select_view_dispatches_navigation(actions):
    header = HeaderToggleModel(actions)

    header.select_view("mark-view")

    assert header.active_view is Tab.MARK
    assert actions.store.get_state().active_view is Tab.MARK


def test_search_input_is_lower_cased_in_store(actions):
    header = HeaderToggleModel(actions)
    header.toggle_search()

    header.input_search("PyThOn")

    assert header.search_input == "PyThOn"
    assert actions.store.get_state().search_value == "python"


def test_external_clear_resets_search_field(actions):
    header = HeaderToggleModel(actions)
    header.toggle_search()
    header.input_search("rust")

    actions.navigate_to_tab(Tab.ACCORDION, "")

    assert header.search_input == ""
    assert header.search_active is False
    assert header.active_view is Tab.ACCORDION


def test_close_unsubscribes(actions):
    header = HeaderToggleModel(actions)
    header.close()

    assert actions.store.subscriber_count == 0
