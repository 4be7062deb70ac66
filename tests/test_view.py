"""Tests for view-model construction."""

import pytest

from breadboard.graph import GraphStore
from breadboard.models import (
    KEY_CONNECT,
    KEY_DELETE,
    KEY_DOWN,
    KEY_FILTER,
    KEY_TAB,
    KEY_TOGGLE_VIEW,
    KEY_UP,
)
from breadboard.state import Navigator
from breadboard.view import build_view, source_names


@pytest.fixture
def nav(board):
    return Navigator(board.store)


def texts(view):
    return [row.text for row in view.rows]


class TestExpanded:
    def test_rows(self, nav):
        view = build_view(nav)
        assert view.mode == "NAVIGATE"
        assert view.title == "Breadboard"
        assert texts(view) == [
            "+- Invoice  <- Setup Autopay",
            "|- Turn on Autopay -> Setup Autopay",
            "|- View Details",
            "+- Setup Autopay  <- Invoice",
            "|- CC Fields -> Confirm",
            "|- Cancel -> Invoice",
            "+- Confirm  <- Setup Autopay",
            "|- Thank You Message",
        ]

    def test_place_selection(self, nav):
        view = build_view(nav)
        assert view.selected_row == 0
        assert [r.selected for r in view.rows].count(True) == 1

    def test_affordance_selection(self, nav):
        nav.handle(KEY_TAB)
        nav.handle(KEY_TAB)
        view = build_view(nav)
        assert view.selected_row == 2
        assert view.rows[2].kind == "affordance"
        assert not view.rows[0].selected

    def test_empty_board(self):
        view = build_view(Navigator(GraphStore()))
        assert [r.kind for r in view.rows] == ["empty"]
        assert view.selected_row is None


class TestCollapsed:
    def test_rows_with_source_counts(self, nav):
        nav.handle(KEY_TOGGLE_VIEW)
        view = build_view(nav)
        assert view.collapsed
        assert view.title == "Breadboard (Collapsed)"
        assert texts(view) == [
            "Invoice (2) <- 1 source -> Setup Autopay",
            "Setup Autopay (2) <- 1 source -> Confirm, Invoice",
            "Confirm (1) <- 1 source",
        ]

    def test_plural_sources(self, nav, board):
        board.store.connect(board.view_details, board.confirm)
        nav.handle(KEY_TOGGLE_VIEW)
        assert texts(build_view(nav))[2] == "Confirm (1) <- 2 sources"

    def test_affordance_selection_is_named_on_its_place(self, nav):
        nav.handle(KEY_TOGGLE_VIEW)
        nav.handle(KEY_DOWN)
        nav.handle(KEY_TAB)
        view = build_view(nav)
        assert view.selected_row == 1
        assert view.rows[1].text == "Setup Autopay (2) <- 1 source -> Confirm, Invoice  [CC Fields]"
        assert "[" not in view.rows[0].text

    def test_place_selection_has_no_affordance_marker(self, nav):
        nav.handle(KEY_TOGGLE_VIEW)
        assert build_view(nav).rows[0].text == "Invoice (2) <- 1 source -> Setup Autopay"

    def test_delete_acts_on_the_named_affordance(self, nav, board):
        nav.handle(KEY_TOGGLE_VIEW)
        nav.handle(KEY_TAB)
        assert build_view(nav).rows[0].text.endswith("[Turn on Autopay]")
        nav.handle(KEY_DELETE)
        assert board.invoice in board.store.places
        assert board.turn_on not in board.store.affordances
        assert build_view(nav).rows[0].text.endswith("[View Details]")


class TestFilter:
    def test_filter_narrows_to_neighbours(self, nav):
        nav.handle(KEY_FILTER)
        nav.handle(KEY_TOGGLE_VIEW)
        view = build_view(nav)
        assert view.filtered
        assert view.title == "Breadboard (Collapsed) (Filtered)"
        assert [t.split(" (")[0] for t in texts(view)] == ["Invoice", "Setup Autopay"]

    def test_filter_follows_focus(self, nav):
        nav.handle(KEY_FILTER)
        nav.handle(KEY_UP)
        view = build_view(nav)
        assert [r.text for r in view.rows if r.kind == "place"] == [
            "+- Setup Autopay  <- Invoice",
            "+- Confirm  <- Setup Autopay",
        ]


class TestSearchViews:
    def test_quick_search(self, nav):
        nav.handle("c")
        view = build_view(nav)
        assert view.mode == "SEARCH"
        assert view.prompt == "Jump to: c"
        assert texts(view) == ["Invoice", "Confirm"]
        assert view.selected_row == 0

    def test_quick_search_no_results(self, nav):
        nav.handle("q")
        assert [r.kind for r in build_view(nav).rows] == ["empty"]

    def test_connection_search_removal_row_first(self, nav):
        nav.handle(KEY_TAB)
        nav.handle(KEY_CONNECT)
        view = build_view(nav)
        assert view.mode == "CONNECT"
        assert view.title == "Connect Turn on Autopay to:"
        assert view.rows[0].kind == "remove"
        assert texts(view) == ["Remove connection", "Invoice", "Setup Autopay", "Confirm"]

    def test_edit_prompt(self, nav):
        nav.handle("e")
        nav.handle("!")
        view = build_view(nav)
        assert view.mode == "EDIT"
        assert view.prompt == "Editing: Invoice!"
        assert view.rows[0].text == "+- Invoice  <- Setup Autopay"


def test_source_names(board):
    assert source_names(board.store) == {
        board.setup: ["Invoice"],
        board.confirm: ["Setup Autopay"],
        board.invoice: ["Setup Autopay"],
    }
