"""Tests for painting navigator lines."""

from rich.style import Style

from mongopeek.navigator.state import DocumentNavigator, NavigatorState
from mongopeek.ui.render import DEFAULT_COLORS, ViewerColors, paint_line, paint_lines

CONTENT = '{\n  "key": "value",\n  "object": {\n    "nested": "a{b}"\n  }\n}'


def _styles_for(text, fragment):
    start = text.plain.index(fragment)
    end = start + len(fragment)
    return [span.style for span in text.spans if span.start <= start and span.end >= end]


def _styles_within(text, fragment):
    start = text.plain.index(fragment)
    end = start + len(fragment)
    return [span.style for span in text.spans if span.start < end and span.end > start]


class TestPaintLine:
    """Colouring of a single line."""

    def test_key_and_value_colours(self):
        text = paint_line('  "key": "value",')
        assert text.plain == '  "key": "value",'
        assert DEFAULT_COLORS.key in _styles_for(text, '"key"')
        assert DEFAULT_COLORS.value in _styles_for(text, '"value"')

    def test_brackets(self):
        colors = ViewerColors(bracket="#0000FF", value="#008000")
        text = paint_line('  "object": {', colors)
        assert "#0000FF" in _styles_for(text, "{")

    def test_braces_inside_strings_are_values(self):
        colors = ViewerColors(bracket="#0000FF", value="#008000")
        text = paint_line('    "nested": "a{b}"', colors)
        assert "#0000FF" not in _styles_within(text, "a{b}")


class TestPaintLines:
    """Painting the visible window."""

    def test_marker_on_selected_line(self):
        nav = DocumentNavigator(CONTENT, width=80, height=10)
        nav.move_down()
        painted = paint_lines(nav.lines, nav.state, nav.highlighted_range())
        rows = painted.plain.split("\n")
        assert rows[1].startswith("> ")
        assert rows[0].startswith("  ")
        assert len(rows) == 6

    def test_highlight_background(self):
        nav = DocumentNavigator(CONTENT, width=80, height=10)
        nav.move_down()
        nav.move_down()
        painted = paint_lines(nav.lines, nav.state, nav.highlighted_range())
        highlight = Style(bgcolor=DEFAULT_COLORS.highlight)
        highlighted_rows = {
            painted.plain[: span.start].count("\n") for span in painted.spans if span.style == highlight
        }
        assert highlighted_rows == {2, 3, 4}

    def test_only_window_is_painted(self):
        state = NavigatorState(lines=[str(i) for i in range(10)], scroll_position=4, window_height=3)
        painted = paint_lines(state.lines, state, (4, 5))
        assert painted.plain.split("\n") == ["> 4", "  5", "  6"]

    def test_wrapped_string_keeps_value_colour(self):
        colors = ViewerColors(bracket="#0000FF", value="#008000")
        lines = ["{", '  "s": "alpha', 'beta [x] {y}"', '  "k": [', "  ]", "}"]
        state = NavigatorState(lines=lines, window_height=10)
        painted = paint_lines(lines, state, (0, 1), colors)
        assert "#0000FF" not in _styles_within(painted, "beta [x] {y}")
        assert DEFAULT_COLORS.key in _styles_for(painted, '"k"')

    def test_window_starting_inside_a_string(self):
        colors = ViewerColors(bracket="#0000FF", value="#008000")
        lines = ["{", '  "s": "alpha', 'beta [x] {y}"', "}"]
        state = NavigatorState(lines=lines, scroll_position=2, window_height=2)
        painted = paint_lines(lines, state, (2, 3), colors)
        assert painted.plain.split("\n")[0] == '> beta [x] {y}"'
        assert "#0000FF" not in _styles_within(painted, "beta [x] {y}")
