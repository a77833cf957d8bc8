"""Tests for list view state transitions."""

import pytest

from cardshelf.listing import ListState


class TestSort:
    def test_cycle_on_same_field(self):
        state = ListState(sort_field=None, sort_order=None)

        state = state.toggle_sort("year")
        assert (state.sort_field, state.sort_order) == ("year", "ASC")
        state = state.toggle_sort("year")
        assert (state.sort_field, state.sort_order) == ("year", "DESC")
        state = state.toggle_sort("year")
        assert (state.sort_field, state.sort_order) == (None, None)
        state = state.toggle_sort("year")
        assert (state.sort_field, state.sort_order) == ("year", "ASC")

    def test_other_field_resets_to_ascending(self):
        state = ListState(sort_field="year", sort_order="DESC")
        state = state.toggle_sort("player")
        assert (state.sort_field, state.sort_order) == ("player", "ASC")

    def test_default_state_sorted_by_id(self):
        state = ListState().toggle_sort("id")
        assert state.sort_order == "DESC"

    def test_sort_arrow(self):
        state = ListState(sort_field="year", sort_order="ASC")
        assert state.sort_arrow("year") == " ↑"
        assert state.sort_arrow("player") == ""
        assert state.toggle_sort("year").sort_arrow("year") == " ↓"

    def test_unsorted_params_omit_sort(self):
        params = ListState(sort_field=None, sort_order=None).query_params()
        assert "sortField" not in params
        assert "sortOrder" not in params


class TestPaging:
    def test_total_pages_and_window(self):
        state = ListState(total=95, limit=10, page=5)
        assert state.total_pages == 10
        assert state.page_numbers() == [3, 4, 5, 6, 7]

    def test_window_at_start_and_end(self):
        assert ListState(total=95, limit=10, page=1).page_numbers() == [1, 2, 3, 4, 5]
        assert ListState(total=95, limit=10, page=10).page_numbers() == [8, 9, 10]
        assert ListState(total=0).page_numbers() == []

    def test_next_and_previous(self):
        state = ListState(total=25, limit=10, page=1)
        assert not state.has_previous
        state = state.next_page().next_page()
        assert state.page == 3
        assert not state.has_next
        assert state.next_page().page == 3
        assert state.previous_page().page == 2

    @pytest.mark.parametrize("value, expected", [("25", 25), ("3", 10), ("abc", 10)])
    def test_with_limit(self, value, expected):
        state = ListState(total=100, page=4).with_limit(value)
        assert state.limit == expected
        assert state.page == 1

    @pytest.mark.parametrize("target, expected", [("3", 3), ("0", 2), ("9", 2), ("x", 2)])
    def test_go_to(self, target, expected):
        state = ListState(total=30, limit=10, page=2)
        assert state.go_to(target).page == expected

    def test_with_result(self):
        state = ListState().with_result({"data": [], "total": 42, "page": 3, "limit": 20})
        assert (state.total, state.page, state.limit) == (42, 3, 20)

    def test_query_params(self):
        state = ListState(page=2, limit=20).with_filters({"player": "Jordan", "sport": ""})
        assert state.query_params() == {
            "player": "Jordan",
            "page": 1,
            "limit": 20,
            "sortField": "id",
            "sortOrder": "ASC",
        }


class TestSelection:
    def test_toggle_and_clear(self):
        state = ListState().toggle_selected(1).toggle_selected(2).toggle_selected(1)
        assert state.selected == frozenset({2})
        assert state.clear_selection().selected == frozenset()


class TestEditing:
    CARD = {
        "id": 7,
        "year": 1986,
        "player": "Michael Jordan",
        "manufacturer": "Fleer",
        "cardSet": "Basketball",
        "type": "Base",
        "onCardCode": "57",
        "sport": "Basketball",
        "notes": "a long story about this card",
    }

    def test_edit_buffer(self):
        state = ListState().start_edit(self.CARD)
        assert state.editing.card_id == 7
        assert state.edit_errors() == {}

        state = state.edit_field("player", "")
        assert state.edit_errors() == {"player": "Player is required"}
        assert state.cancel_edit().editing is None

    def test_edit_field_without_buffer(self):
        state = ListState()
        assert state.edit_field("player", "x") is state
        assert state.edit_errors() == {}

    def test_note_overlay(self):
        state = ListState().expand_note(self.CARD["notes"])
        assert state.expanded_note == "a long story about this card"
        assert state.close_note().expanded_note is None
