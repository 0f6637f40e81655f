"""Tests for ListCursor movement."""

from clusterscope.view.navigation import ListCursor, Navigate


class TestVerticalCursor:
    """Tests for list and table cursors."""

    def test_down_from_none_selects_first(self):
        cursor = ListCursor()
        assert cursor.apply(Navigate.DOWN, 3)
        assert cursor.selected == 0

    def test_up_from_none_selects_last(self):
        cursor = ListCursor()
        assert cursor.apply(Navigate.UP, 3)
        assert cursor.selected == 2

    def test_down_from_last_wraps_to_first(self):
        cursor = ListCursor(selected=2)
        cursor.apply(Navigate.DOWN, 3)
        assert cursor.selected == 0

    def test_up_from_first_wraps_to_last(self):
        cursor = ListCursor(selected=0)
        cursor.apply(Navigate.UP, 3)
        assert cursor.selected == 2

    def test_empty_collection_never_moves(self):
        cursor = ListCursor()
        assert not cursor.apply(Navigate.DOWN, 0)
        assert not cursor.apply(Navigate.UP, 0)
        assert cursor.selected is None

    def test_single_element_reports_no_change(self):
        cursor = ListCursor(selected=0)
        assert not cursor.apply(Navigate.DOWN, 1)
        assert cursor.selected == 0

    def test_horizontal_keys_ignored(self):
        cursor = ListCursor(selected=1)
        assert not cursor.apply(Navigate.LEFT, 3)
        assert not cursor.apply(Navigate.RIGHT, 3)
        assert cursor.selected == 1

    def test_out_of_range_selection_counts_as_none(self):
        """A cursor left past the end of a shrunken table restarts."""
        cursor = ListCursor(selected=5)
        assert cursor.get(3) is None

        cursor.apply(Navigate.DOWN, 3)
        assert cursor.selected == 0

    def test_reset(self):
        cursor = ListCursor(selected=2)
        cursor.reset()
        assert cursor.get(3) is None


class TestHorizontalCursor:
    """Tests for the tab cursor."""

    def test_right_wraps(self):
        cursor = ListCursor(selected=2, horizontal=True)
        assert cursor.apply(Navigate.RIGHT, 3)
        assert cursor.selected == 0

    def test_left_wraps(self):
        cursor = ListCursor(selected=0, horizontal=True)
        assert cursor.apply(Navigate.LEFT, 3)
        assert cursor.selected == 2

    def test_vertical_keys_ignored(self):
        cursor = ListCursor(selected=0, horizontal=True)
        assert not cursor.apply(Navigate.DOWN, 3)
        assert cursor.selected == 0
