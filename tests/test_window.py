"""Tests for Window class."""

import pytest
from term_compositor import (
    HitRegion,
    KeyEvent,
    MouseEvent,
    Position,
    Size,
    TextContent,
    Window,
    WindowEventKind,
    WindowState,
)
from term_compositor.events import RIGHT_BUTTON


def make_window(**kwargs):
    """Create a 20x6 window at (10, 5) inside an 80x24 screen."""
    kwargs.setdefault('position', Position(10, 5))
    kwargs.setdefault('size', Size(20, 6))
    kwargs.setdefault('bounds', Size(80, 24))
    return Window('w1', 'Test', **kwargs)


def record_events(window):
    """Subscribe to all events of ``window`` and return the list they land in."""
    events = []
    window.events.subscribe(events.append)
    return events


class TestWindow:
    """Tests for window construction and geometry."""

    def test_default_initialization(self):
        """Test default window initialization."""
        window = Window('main')

        assert window.id == 'main'
        assert window.title == ''
        assert window.state is WindowState.NORMAL
        assert window.visible is True
        assert window.focused is False
        assert window.redraw is True
        assert window.position == Position(0, 0)
        assert window.size == Size(40, 15)
        assert window.saved_geometry is None

    def test_custom_initialization(self):
        """Test custom window initialization."""
        window = Window('w', 'Title', position=Position(3, 4), size=Size(30, 10),
                        closable=False, modal=True, status_bar='Ready')

        assert window.title == 'Title'
        assert window.rect.x == 3 and window.rect.bottom == 14
        assert window.closable is False
        assert window.modal is True
        assert window.status_bar == 'Ready'

    def test_geometry_change_sets_redraw(self):
        """Test moving or resizing marks the window for redraw."""
        window = make_window()
        window.redraw = False
        window.move_to(Position(10, 5))
        assert window.redraw is False
        window.move_to(Position(11, 5))
        assert window.redraw is True
        window.redraw = False
        window.resize_to(Size(21, 6))
        assert window.redraw is True

    def test_place_returns_to_normal(self):
        """Test place drops the snapshot and leaves the window normal."""
        window = make_window()
        window.maximize()
        assert window.place(Position(0, 0), Size(40, 24))
        assert window.state is WindowState.NORMAL
        assert window.saved_geometry is None
        assert window.size == Size(40, 24)

    def test_place_ignores_closed_window(self):
        """Test place leaves closed windows alone."""
        window = make_window()
        window.close()
        assert window.place(Position(0, 0), Size(40, 24)) is False
        assert window.state is WindowState.CLOSED


class TestWindowStates:
    """Tests for the window state machine."""

    def test_close(self):
        """Test closing hides the window and emits CLOSE once."""
        window = make_window()
        events = record_events(window)

        assert window.close() is True
        assert window.state is WindowState.CLOSED
        assert window.visible is False
        assert window.close() is False
        assert [e.kind for e in events] == [WindowEventKind.CLOSE]
        assert events[0].window_id == 'w1'

    def test_close_refused_when_not_closable(self):
        """Test a non-closable window stays open without events."""
        window = make_window(closable=False)
        events = record_events(window)
        assert window.close() is False
        assert window.state is WindowState.NORMAL
        assert events == []

    def test_minimize_and_restore(self):
        """Test restore brings back the geometry from before minimizing."""
        window = make_window()
        assert window.minimize() is True
        assert window.state is WindowState.MINIMIZED
        assert window.visible is False
        assert window.restore() is True
        assert window.state is WindowState.NORMAL
        assert window.visible is True
        assert window.position == Position(10, 5)
        assert window.size == Size(20, 6)

    def test_maximize_and_restore(self):
        """Test maximize fills the bounds and restore returns the old geometry."""
        window = make_window()
        events = record_events(window)

        assert window.maximize() is True
        assert window.position == Position(0, 0)
        assert window.size == Size(80, 24)
        assert window.restore() is True
        assert window.position == Position(10, 5)
        assert window.size == Size(20, 6)
        assert [e.kind for e in events] == [WindowEventKind.MAXIMIZE, WindowEventKind.RESTORE]

    def test_maximize_requires_bounds(self):
        """Test a window without bounds cannot maximize."""
        window = make_window(bounds=None)
        assert window.maximize() is False
        assert window.state is WindowState.NORMAL

    def test_maximize_twice_refused(self):
        """Test maximizing a maximized window is refused."""
        window = make_window()
        window.maximize()
        assert window.maximize() is False

    def test_minimize_maximized_keeps_first_snapshot(self):
        """Test restoring after maximize then minimize returns the normal geometry."""
        window = make_window()
        window.maximize()
        window.minimize()
        window.restore()
        assert window.position == Position(10, 5)
        assert window.size == Size(20, 6)

    def test_restore_from_normal_refused(self):
        """Test restore is only valid from minimized or maximized."""
        window = make_window()
        assert window.restore() is False

    def test_closed_window_stays_closed(self):
        """Test no transition leaves the closed state."""
        window = make_window()
        window.close()
        assert window.minimize() is False
        assert window.maximize() is False
        assert window.restore() is False
        assert window.state is WindowState.CLOSED

    def test_capability_flags(self):
        """Test disabled capabilities refuse their transition."""
        window = make_window(minimizable=False, maximizable=False)
        assert window.minimize() is False
        assert window.maximize() is False

    def test_focus_and_blur_emit_on_change(self):
        """Test focus events fire only when the focus changes."""
        window = make_window()
        events = record_events(window)
        window.focus()
        window.focus()
        window.blur()
        window.blur()
        assert [e.kind for e in events] == [WindowEventKind.FOCUS, WindowEventKind.BLUR]

    def test_unsubscribe(self):
        """Test an unsubscribed callback receives nothing."""
        window = make_window()
        events = []
        unsubscribe = window.events.subscribe(events.append, kinds={WindowEventKind.CLOSE})
        window.focus()
        unsubscribe()
        window.close()
        assert events == []


class TestHitTest:
    """Tests for Window.hit_test."""

    def test_title_bar(self):
        """Test the top row is the title bar."""
        window = make_window()
        assert window.hit_test(Position(10, 5)) is HitRegion.TITLE
        assert window.hit_test(Position(15, 5)) is HitRegion.TITLE

    def test_controls(self):
        """Test the control glyphs sit at the right end of the title bar."""
        window = make_window()
        assert window.hit_test(Position(26, 5)) is HitRegion.MINIMIZE
        assert window.hit_test(Position(27, 5)) is HitRegion.MAXIMIZE
        assert window.hit_test(Position(28, 5)) is HitRegion.CLOSE
        assert window.hit_test(Position(29, 5)) is HitRegion.TITLE

    def test_disabled_controls_shift(self):
        """Test only enabled controls get a column."""
        window = make_window(closable=False)
        assert window.hit_test(Position(28, 5)) is HitRegion.MAXIMIZE
        assert window.hit_test(Position(27, 5)) is HitRegion.MINIMIZE

    def test_resize_grip(self):
        """Test the bottom-right 3x2 cells are the resize grip."""
        window = make_window()
        assert window.hit_test(Position(29, 10)) is HitRegion.RESIZE
        assert window.hit_test(Position(27, 9)) is HitRegion.RESIZE
        assert window.hit_test(Position(26, 10)) is HitRegion.CONTENT
        assert window.hit_test(Position(29, 8)) is HitRegion.CONTENT

    def test_no_grip_when_not_resizable(self):
        """Test a fixed-size window has no grip."""
        window = make_window(resizable=False)
        assert window.hit_test(Position(29, 10)) is HitRegion.CONTENT

    def test_outside_and_hidden(self):
        """Test points outside or on a hidden window hit nothing."""
        window = make_window()
        assert window.hit_test(Position(30, 5)) is HitRegion.NONE
        assert window.hit_test(Position(9, 7)) is HitRegion.NONE
        window.minimize()
        assert window.hit_test(Position(15, 5)) is HitRegion.NONE


class TestGestures:
    """Tests for dragging and resizing through Window.handle_input."""

    def test_drag_by_title(self):
        """Test pressing the title and moving drags the window."""
        window = make_window()
        events = record_events(window)

        assert window.handle_input(MouseEvent(Position(15, 5)))
        assert window.is_dragging
        window.handle_input(MouseEvent(Position(20, 8)))
        assert window.position == Position(15, 8)
        window.handle_input(MouseEvent(Position(20, 8), pressed=False))

        assert not window.is_dragging
        assert events[-1].kind is WindowEventKind.MOVE
        assert events[-1].payload == Position(15, 8)

    def test_drag_clamped_to_bounds(self):
        """Test a drag cannot leave the bounds."""
        window = make_window()
        window.begin_drag(Position(15, 5))
        window.update_gesture(Position(-50, -50))
        assert window.position == Position(0, 0)
        window.update_gesture(Position(200, 200))
        assert window.position == Position(60, 18)

    def test_resize_by_grip(self):
        """Test dragging the grip resizes the window."""
        window = make_window()
        events = record_events(window)

        window.handle_input(MouseEvent(Position(29, 10)))
        assert window.is_resizing
        window.handle_input(MouseEvent(Position(34, 12)))
        assert window.size == Size(25, 8)
        window.handle_input(MouseEvent(Position(34, 12), pressed=False))

        assert events[-1].kind is WindowEventKind.RESIZE
        assert events[-1].payload == Size(25, 8)

    def test_resize_respects_minimum(self):
        """Test a resize cannot go below the minimum size."""
        window = make_window(size=Size(30, 10))
        window.begin_resize(Position(39, 14))
        window.update_gesture(Position(0, 0))
        assert window.size == Size(20, 5)

    def test_resize_respects_maximum_and_bounds(self):
        """Test a resize is limited by max size and the bounds."""
        window = make_window(max_width=25)
        window.begin_resize(Position(29, 10))
        window.update_gesture(Position(200, 200))
        assert window.size == Size(25, 19)

    def test_no_drag_when_maximized(self):
        """Test a maximized window cannot be dragged."""
        window = make_window()
        window.maximize()
        assert window.begin_drag(Position(5, 0)) is False

    def test_click_controls(self):
        """Test clicking the control glyphs runs the transitions."""
        window = make_window()
        window.handle_input(MouseEvent(Position(27, 5)))
        assert window.state is WindowState.MAXIMIZED
        window.handle_input(MouseEvent(Position(77, 0)))
        assert window.state is WindowState.NORMAL
        window.handle_input(MouseEvent(Position(28, 5)))
        assert window.state is WindowState.CLOSED


class TestKeys:
    """Tests for keyboard handling."""

    def test_alt_f4_closes_focused_window(self):
        """Test Alt+F4 closes only the focused window."""
        window = make_window()
        window.handle_input(KeyEvent('f4', alt=True))
        assert window.state is WindowState.NORMAL
        window.focus()
        assert window.handle_input(KeyEvent('f4', alt=True))
        assert window.state is WindowState.CLOSED

    def test_alt_f9_and_f10(self):
        """Test Alt+F10 toggles maximize and Alt+F9 minimizes."""
        window = make_window()
        window.focus()
        window.handle_input(KeyEvent('f10', alt=True))
        assert window.state is WindowState.MAXIMIZED
        window.handle_input(KeyEvent('f10', alt=True))
        assert window.state is WindowState.NORMAL
        window.handle_input(KeyEvent('f9', alt=True))
        assert window.state is WindowState.MINIMIZED

    def test_other_keys_forwarded_to_content(self):
        """Test unhandled keys reach the content component."""
        content = TextContent('\n'.join(f'Line {i}' for i in range(20)))
        window = make_window(content=content)
        window.render()
        assert window.handle_input(KeyEvent('down'))
        assert content.scroll == 1

    def test_other_buttons_forwarded_inside_window_only(self):
        """Test non-left mouse events outside the window are not consumed."""
        class Recorder:
            def __init__(self):
                self.events = []

            def handle_input(self, event):
                self.events.append(event)
                return True

        content = Recorder()
        window = make_window(content=content)
        inside = MouseEvent(Position(15, 7), button=RIGHT_BUTTON)
        outside = MouseEvent(Position(60, 20), button=RIGHT_BUTTON)

        assert window.handle_input(inside)
        assert window.handle_input(outside) is False
        assert content.events == [inside]

    def test_closed_window_ignores_input(self):
        """Test a closed window consumes nothing."""
        window = make_window()
        window.close()
        assert window.handle_input(KeyEvent('f10', alt=True)) is False


class TestRender:
    """Tests for window rendering."""

    def test_frame(self):
        """Test the border, title, controls and grip."""
        window = make_window(size=Size(20, 4))
        lines = window.render().split('\n')

        assert len(lines) == 4
        assert all(len(line) == 20 for line in lines)
        assert lines[0].startswith('+-')
        assert ' Test ' in lines[0]
        assert lines[0].endswith('_^x+')
        assert lines[1] == '|' + ' ' * 18 + '|'
        assert lines[3] == '+' + '-' * 17 + '#+'

    def test_maximized_shows_restore_glyph(self):
        """Test the maximize control turns into a restore control."""
        window = make_window()
        window.maximize()
        assert window.render().split('\n')[0].endswith('_vx+')

    def test_status_bar(self):
        """Test the status text sits in the bottom border."""
        window = make_window(size=Size(20, 3), status_bar='ok', resizable=False)
        assert window.render().split('\n')[-1] == '+' + '-' * 13 + ' ok -+'

    def test_hidden_window_renders_nothing(self):
        """Test minimized windows render an empty string."""
        window = make_window()
        window.minimize()
        assert window.render() == ''

    def test_content_sized_to_interior(self):
        """Test the content is laid out inside the border."""
        content = TextContent('hello')
        window = make_window(content=content)
        lines = window.render().split('\n')
        assert content.position == Position(11, 6)
        assert content.size == Size(18, 4)
        assert lines[1] == '|hello' + ' ' * 13 + '|'

    def test_scroll_indicator(self):
        """Test the right border shows the scroll position."""
        content = TextContent('\n'.join(str(i) for i in range(10)))
        window = make_window(content=content)
        lines = window.render().split('\n')
        assert lines[1].endswith('=')
        content.scroll = content._max_scroll()
        lines = window.render().split('\n')
        assert lines[4].endswith('=')
