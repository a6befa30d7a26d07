"""Tests for TextContent class."""

import pytest
from term_compositor import KeyEvent, Size, TextContent


def make_content(lines=50, width=20, height=10):
    """Create a sized TextContent holding ``lines`` numbered lines."""
    content = TextContent('\n'.join(f'Line {i}' for i in range(lines)))
    content.size = Size(width, height)
    return content


class TestTextContent:
    """Tests for the TextContent class."""

    def test_string_text_initialization(self):
        """Test initialization with string text."""
        content = TextContent("Line 1\nLine 2\nLine 3")

        assert content.text == "Line 1\nLine 2\nLine 3"
        assert content.scroll == 0

    def test_list_text_initialization(self):
        """Test initialization with list of lines."""
        content = TextContent(["Line 1", "Line 2", "Line 3"])

        assert content.text == "Line 1\nLine 2\nLine 3"

    def test_tuple_text_initialization(self):
        """Test initialization with tuple of lines."""
        content = TextContent(("Line 1", "Line 2"))

        assert content.text == "Line 1\nLine 2"

    def test_resize_wraps_text(self):
        """Test that setting the size wraps text to the width."""
        content = TextContent(
            "This is a very long line that should be wrapped to fit within the window width"
        )
        content.size = Size(20, 5)

        assert len(content.lines) > 1
        for line in content.lines:
            assert len(line) <= 20

    def test_blank_lines_are_kept(self):
        """Test empty lines survive wrapping."""
        content = TextContent("a\n\nb")
        content.size = Size(10, 5)
        assert content.lines == ['a', '', 'b']

    def test_render_shows_visible_window(self):
        """Test render returns the lines in view."""
        content = make_content(height=3)
        assert content.render() == 'Line 0\nLine 1\nLine 2'
        content.scroll = 2
        assert content.render() == 'Line 2\nLine 3\nLine 4'

    def test_handle_input_scroll_down(self):
        """Test scrolling down with arrow key."""
        content = make_content()

        assert content.handle_input(KeyEvent('down')) is True
        assert content.scroll == 1
        assert content.redraw is True

    def test_handle_input_scroll_up(self):
        """Test scrolling up with arrow key."""
        content = make_content()
        content.scroll = 5

        content.handle_input(KeyEvent('up'))
        assert content.scroll == 4

    def test_handle_input_scroll_up_at_top(self):
        """Test scrolling up at the top does nothing."""
        content = make_content()

        assert content.handle_input(KeyEvent('up')) is False
        assert content.scroll == 0

    def test_handle_input_page_down(self):
        """Test page down scrolls by the visible height."""
        content = make_content()

        content.handle_input(KeyEvent('pgdown'))
        assert content.scroll == 10

    def test_handle_input_page_down_stops_at_bottom(self):
        """Test page down never scrolls past the last page."""
        content = make_content()
        for _ in range(10):
            content.handle_input(KeyEvent('pgdown'))

        assert content.scroll == 40
        assert content.handle_input(KeyEvent('down')) is False

    def test_handle_input_page_up(self):
        """Test page up scrolls back by the visible height."""
        content = make_content()
        content.scroll = 15

        content.handle_input(KeyEvent('pgup'))
        assert content.scroll == 5
        content.handle_input(KeyEvent('pgup'))
        assert content.scroll == 0

    def test_no_scrolling_when_text_fits(self):
        """Test short text never scrolls."""
        content = make_content(lines=5)

        assert content.handle_input(KeyEvent('down')) is False
        assert content.scroll == 0
        assert content.scroll_pos is None

    def test_scroll_pos(self):
        """Test the scroll position runs from 0.0 to 1.0."""
        content = make_content(lines=30)
        assert content.scroll_pos == 0.0
        content.scroll = 10
        assert content.scroll_pos == pytest.approx(0.5)
        content.scroll = 20
        assert content.scroll_pos == 1.0

    def test_growing_view_clamps_scroll(self):
        """Test growing the view pulls the scroll back into range."""
        content = make_content()
        content.scroll = 40
        content.size = Size(20, 45)
        assert content.scroll == 5

    def test_modified_keys_ignored(self):
        """Test Alt and Ctrl combinations are left to the window."""
        content = make_content()
        assert content.handle_input(KeyEvent('down', alt=True)) is False
        assert content.handle_input(KeyEvent('down', ctrl=True)) is False
        assert content.scroll == 0
