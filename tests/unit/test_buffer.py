"""Tests for the editor text buffer."""

import pytest

from piemme.editor import SelectionKind, TextBuffer
from piemme.errors import BufferInvariantViolation


class TestBufferBasics:
    """Tests for construction, cursor and clamping."""

    def test_empty_buffer_has_one_line(self):
        """An empty buffer still has exactly one (empty) line."""
        buf = TextBuffer("")
        assert buf.lines == [""]
        assert buf.line_count == 1
        assert buf.cursor == (0, 0)

    def test_text_round_trips_newlines(self):
        buf = TextBuffer("a\nb\n")
        assert buf.lines == ["a", "b", ""]
        assert buf.text == "a\nb\n"

    def test_move_cursor_clamps_into_buffer(self):
        """Out of range positions are clamped, never rejected."""
        buf = TextBuffer("ab\ncd")
        buf.move_cursor((5, 99))
        assert buf.cursor == (1, 2)
        buf.move_cursor((-3, -1))
        assert buf.cursor == (0, 0)

    def test_check_invariants_detects_bad_cursor(self):
        buf = TextBuffer("abc")
        buf.check_invariants()
        buf._cursor = (3, 0)
        with pytest.raises(BufferInvariantViolation):
            buf.check_invariants()

    def test_selection_bounds_are_ordered(self):
        buf = TextBuffer("abc\ndef")
        buf.move_cursor((1, 1))
        buf.set_selection((1, 1))
        buf.move_cursor((0, 2))
        assert buf.selection_bounds() == ((0, 2), (1, 1))

    def test_no_selection_bounds_without_selection(self):
        assert TextBuffer("abc").selection_bounds() is None


class TestNavigation:
    """Tests for position helpers used by motions."""

    def test_word_start_forward(self):
        buf = TextBuffer("hello world")
        assert buf.get_word_start_forward() == (0, 6)

    def test_word_start_forward_stops_at_punctuation(self):
        buf = TextBuffer("foo.bar")
        assert buf.get_word_start_forward() == (0, 3)

    def test_word_start_forward_crosses_lines(self):
        buf = TextBuffer("foo\n  bar")
        assert buf.get_word_start_forward() == (1, 2)

    def test_word_start_forward_at_last_word_goes_to_end(self):
        buf = TextBuffer("hello")
        assert buf.get_word_start_forward() == (0, 5)

    def test_word_end_forward(self):
        buf = TextBuffer("hello world")
        assert buf.get_word_end_forward() == (0, 4)
        buf.move_cursor((0, 4))
        assert buf.get_word_end_forward() == (0, 10)

    def test_word_start_backward(self):
        buf = TextBuffer("hello world")
        buf.move_cursor((0, 8))
        assert buf.get_word_start_backward() == (0, 6)
        buf.move_cursor((0, 6))
        assert buf.get_word_start_backward() == (0, 0)

    def test_word_start_backward_at_start_stays(self):
        assert TextBuffer("hello").get_word_start_backward() == (0, 0)

    def test_line_end_is_last_character(self):
        buf = TextBuffer("abc")
        assert buf.get_line_end() == (0, 2)

    def test_first_non_blank(self):
        buf = TextBuffer("   x")
        assert buf.get_first_non_blank() == (0, 3)

    def test_document_end_is_first_non_blank_of_last_line(self):
        buf = TextBuffer("a\nb\n  c")
        assert buf.get_document_end() == (2, 2)

    def test_paragraph_forward(self):
        buf = TextBuffer("a\nb\n\nc")
        assert buf.get_paragraph_forward() == (2, 0)

    def test_paragraph_forward_without_blank_goes_to_end(self):
        buf = TextBuffer("a\nbc")
        assert buf.get_paragraph_forward() == (1, 2)

    def test_paragraph_backward(self):
        buf = TextBuffer("a\n\nb\nc")
        buf.move_cursor((3, 0))
        assert buf.get_paragraph_backward() == (1, 0)

    def test_up_down_clamp_column(self):
        buf = TextBuffer("long line\nab")
        buf.move_cursor((0, 7))
        assert buf.get_cursor_down() == (1, 1)


class TestEditing:
    """Tests for mutations."""

    def test_insert_moves_cursor_after_text(self):
        buf = TextBuffer("")
        buf.insert("abc")
        assert buf.text == "abc"
        assert buf.cursor == (0, 3)

    def test_insert_multiline(self):
        buf = TextBuffer("ab")
        buf.move_cursor((0, 1))
        buf.insert("x\ny")
        assert buf.text == "ax\nyb"
        assert buf.cursor == (1, 1)

    def test_delete_range_returns_deleted_text(self):
        buf = TextBuffer("hello world")
        assert buf.delete_range((0, 0), (0, 6)) == "hello "
        assert buf.text == "world"
        assert buf.cursor == (0, 0)

    def test_delete_range_across_lines(self):
        buf = TextBuffer("abc\ndef")
        assert buf.delete_range((0, 1), (1, 2)) == "bc\nde"
        assert buf.text == "af"

    def test_delete_only_line_leaves_empty_line(self):
        """Deleting every line leaves one empty line rather than none."""
        buf = TextBuffer("only")
        assert buf.delete_lines(0, 0) == "only"
        assert buf.lines == [""]
        buf.check_invariants()

    def test_delete_middle_line(self):
        buf = TextBuffer("a\n  b\nc")
        buf.delete_lines(1, 1)
        assert buf.text == "a\nc"
        assert buf.cursor == (1, 0)

    def test_replace_lines(self):
        buf = TextBuffer("a\nb\nc")
        assert buf.replace_lines(0, 1, "x") == "a\nb"
        assert buf.text == "x\nc"

    def test_get_text_between_multiline(self):
        buf = TextBuffer("abc\ndef")
        assert buf.get_text_between((0, 1), (1, 2)) == "bc\nde"

    def test_get_line_range(self):
        buf = TextBuffer("a\nb\nc")
        assert buf.get_line_range(1, 5) == "b\nc"


class TestPut:
    """Tests for putting register text."""

    def test_put_line_below(self):
        buf = TextBuffer("one\ntwo")
        buf.put("one", SelectionKind.LINE)
        assert buf.text == "one\none\ntwo"
        assert buf.cursor == (1, 0)

    def test_put_line_above(self):
        buf = TextBuffer("one\ntwo")
        buf.move_cursor((1, 0))
        buf.put("  new", SelectionKind.LINE, before=True)
        assert buf.text == "one\n  new\ntwo"
        assert buf.cursor == (1, 2)

    def test_put_characters_after_cursor(self):
        buf = TextBuffer("ac")
        buf.put("b", SelectionKind.CHARACTER)
        assert buf.text == "abc"
        assert buf.cursor == (0, 1)

    def test_put_characters_before_cursor(self):
        buf = TextBuffer("ac")
        buf.move_cursor((0, 1))
        buf.put("b", SelectionKind.CHARACTER, before=True)
        assert buf.text == "abc"

    def test_put_into_empty_line(self):
        buf = TextBuffer("")
        buf.put("xy", SelectionKind.CHARACTER)
        assert buf.text == "xy"
        assert buf.cursor == (0, 1)

    def test_put_empty_line_kind_adds_line(self):
        buf = TextBuffer("")
        buf.put("", SelectionKind.LINE)
        assert buf.lines == ["", ""]


class TestUndoRedo:
    """Tests for the undo history."""

    def test_undo_and_redo(self):
        buf = TextBuffer("")
        buf.insert("x")
        assert buf.undo() is True
        assert buf.text == ""
        assert buf.redo() is True
        assert buf.text == "x"

    def test_undo_on_empty_history_is_noop(self):
        buf = TextBuffer("abc")
        assert buf.undo() is False
        assert buf.redo() is False
        assert buf.text == "abc"

    def test_new_edit_clears_redo(self):
        buf = TextBuffer("")
        buf.insert("x")
        buf.undo()
        assert buf.can_redo
        buf.insert("y")
        assert not buf.can_redo

    def test_undo_restores_cursor(self):
        buf = TextBuffer("hello world")
        buf.move_cursor((0, 6))
        buf.delete_range((0, 6), (0, 11))
        buf.undo()
        assert buf.text == "hello world"
        assert buf.cursor == (0, 6)

    def test_group_is_one_record(self):
        buf = TextBuffer("")
        buf.begin_group()
        buf.insert("a")
        buf.insert("b")
        buf.insert("\nc")
        buf.end_group()
        assert buf.text == "ab\nc"
        buf.undo()
        assert buf.text == ""
        assert not buf.can_undo

    def test_nested_groups_record_once(self):
        buf = TextBuffer("")
        buf.begin_group()
        buf.begin_group()
        buf.insert("a")
        buf.end_group()
        buf.insert("b")
        buf.end_group()
        buf.undo()
        assert buf.text == ""

    def test_group_without_changes_records_nothing(self):
        buf = TextBuffer("abc")
        buf.begin_group()
        buf.end_group()
        assert not buf.can_undo

    def test_undo_closes_open_group(self):
        buf = TextBuffer("")
        buf.begin_group()
        buf.insert("abc")
        assert buf.undo() is True
        assert buf.text == ""
