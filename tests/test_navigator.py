"""Tests for the navigator state machine, selection and copy."""

import pytest

from mongopeek.exceptions import ClipboardError
from mongopeek.navigator.lines import wrap_lines
from mongopeek.navigator.selection import CopyMode, clean_json_whitespace, selection_text
from mongopeek.navigator.state import DocumentNavigator

KEY_AND_OBJECT = '{\n  "key": "value",\n  "object": {\n    "nested": "test"\n  }\n}'
OBJECT_ONLY = '{\n  "object": {\n    "nested": "test"\n  }\n}'


def _long_document(count: int) -> str:
    body = ",\n".join(f'  "k{i}": {i}' for i in range(count))
    return "{\n" + body + "\n}"


class TestMovement:
    """Cursor and scroll movement keeps the state invariants."""

    def setup_method(self):
        self.nav = DocumentNavigator(_long_document(20), width=40, height=5)

    def test_starts_at_top(self):
        assert self.nav.state.scroll_position == 0
        assert self.nav.state.selected_line == 0

    def test_move_down_moves_cursor_then_scrolls(self):
        for _ in range(4):
            self.nav.move_down()
        assert (self.nav.state.scroll_position, self.nav.state.selected_line) == (0, 4)
        self.nav.move_down()
        assert (self.nav.state.scroll_position, self.nav.state.selected_line) == (1, 4)

    def test_move_down_stops_at_end(self):
        for _ in range(100):
            self.nav.move_down()
        state = self.nav.state
        assert state.scroll_position == state.end_position == 22 - 5
        assert state.selected_line == 4
        assert state.absolute_line == 21

    def test_move_up_at_top_is_noop(self):
        self.nav.move_up()
        assert (self.nav.state.scroll_position, self.nav.state.selected_line) == (0, 0)

    def test_move_up_scrolls_back(self):
        for _ in range(10):
            self.nav.move_down()
        for _ in range(6):
            self.nav.move_up()
        assert (self.nav.state.scroll_position, self.nav.state.selected_line) == (4, 0)

    def test_bottom_then_top_restores_origin(self):
        self.nav.move_to_bottom()
        assert self.nav.state.absolute_line == 21
        self.nav.move_to_top()
        assert (self.nav.state.scroll_position, self.nav.state.selected_line) == (0, 0)

    def test_page_moves_half_a_window(self):
        self.nav.page_down()
        assert self.nav.state.absolute_line == 2
        self.nav.page_up()
        assert self.nav.state.absolute_line == 0

    def test_short_document_never_scrolls(self):
        nav = DocumentNavigator('{\n  "a": 1\n}', width=40, height=10)
        for _ in range(5):
            nav.move_down()
        assert (nav.state.scroll_position, nav.state.selected_line) == (0, 2)

    def test_resize_clamps_state(self):
        self.nav.move_to_bottom()
        self.nav.resize(40, 30)
        state = self.nav.state
        assert state.scroll_position == 0
        assert 0 <= state.selected_line < len(state.lines)

    def test_open_resets(self):
        self.nav.move_to_bottom()
        self.nav.open(OBJECT_ONLY)
        assert (self.nav.state.scroll_position, self.nav.state.selected_line) == (0, 0)
        assert self.nav.lines[1] == '  "object": {'

    def test_visible_range(self):
        self.nav.move_to_bottom()
        assert self.nav.visible_range() == (17, 22)


class TestCopySelection:
    """Copying the highlighted value."""

    @pytest.mark.parametrize(
        "content,mode,expected",
        [
            (KEY_AND_OBJECT, CopyMode.FULL, '"key": "value"'),
            (OBJECT_ONLY, CopyMode.FULL, '"object": { "nested": "test" }'),
            (KEY_AND_OBJECT, CopyMode.VALUE, '"value"'),
            (OBJECT_ONLY, CopyMode.VALUE, '{ "nested": "test" }'),
        ],
        ids=["full single line", "full multiline", "value only", "value that is an object"],
    )
    def test_copy_second_line(self, content, mode, expected, clipboard):
        nav = DocumentNavigator(content, width=50, height=10)
        nav.move_down()
        assert nav.copy_selection(mode, clipboard) == expected
        assert clipboard.text == expected

    def test_copy_wrapped_value(self, clipboard):
        content = '{\n  "text": "alpha beta gamma delta epsilon",\n  "n": 1\n}'
        nav = DocumentNavigator(content, width=20, height=10)
        nav.move_down()
        assert nav.highlighted_range()[1] - nav.highlighted_range()[0] > 1
        assert nav.copy_selection("value", clipboard) == '"alpha beta gamma delta epsilon"'

    def test_copy_value_keeps_nested_keys(self, clipboard):
        content = '{\n  "outer": {\n    "inner": {\n      "x": 1\n    }\n  },\n  "k": 2\n}'
        nav = DocumentNavigator(content, width=80, height=10)
        nav.move_down()
        assert nav.copy_selection("value", clipboard) == '{ "inner": { "x": 1 } }'

    @pytest.mark.parametrize("line,expected", [(2, '{ "x": 1, "y": 2 }'), (6, '{ "x": 3 }')])
    def test_copy_value_of_object_in_array(self, line, expected, clipboard):
        content = '{\n  "a": [\n    {\n      "x": 1,\n      "y": 2\n    },\n    {\n      "x": 3\n    }\n  ]\n}'
        nav = DocumentNavigator(content, width=80, height=20)
        for _ in range(line):
            nav.move_down()
        assert nav.copy_selection(CopyMode.VALUE, clipboard) == expected
        assert nav.selection_text(CopyMode.FULL) == expected

    def test_unknown_mode_copies_raw_lines(self, clipboard):
        nav = DocumentNavigator(OBJECT_ONLY, width=80, height=10)
        nav.move_down()
        assert nav.copy_selection("raw", clipboard) == '"object": {\n    "nested": "test"\n  }'

    def test_clipboard_error_propagates(self):
        class Broken:
            def write(self, text):
                raise ClipboardError("no clipboard")

        nav = DocumentNavigator(OBJECT_ONLY, width=80, height=10)
        with pytest.raises(ClipboardError):
            nav.copy_selection(CopyMode.FULL, Broken())


class TestCleanJsonWhitespace:
    """Whitespace collapse outside strings."""

    def test_collapses_and_pads(self):
        assert clean_json_whitespace('{\n    "a":   1\n  }') == '{ "a": 1 }'

    def test_string_contents_untouched(self):
        assert clean_json_whitespace('"a  {b}\\"  c"') == '"a  {b}\\"  c"'

    def test_empty_object(self):
        assert clean_json_whitespace("{}") == "{}"


def test_selection_text_value_strips_trailing_comma():
    lines = wrap_lines('  "obj": {\n    "a": 1\n  },', 0)
    assert selection_text(lines, CopyMode.VALUE) == '{ "a": 1 }'
