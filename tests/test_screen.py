from unittest import mock

import pytest

from relaychat.screen import ChatScreen


class FakeWindow:
    def __init__(self, size=(24, 80), typed=b""):
        self.size = size
        self.typed = typed
        self.calls = []
        self.lines = {}

    def getmaxyx(self):
        return self.size

    def addstr(self, y, x, text):
        self.calls.append("addstr")
        self.lines[y] = (x, text)

    def refresh(self):
        self.calls.append("refresh")

    def box(self, *args):
        self.calls.append("box")

    def clear(self):
        self.calls.append("clear")

    def getstr(self, y, x, n):
        self.calls.append(("getstr", y, x, n))
        return self.typed


def test_post_message_writes_successive_rows():
    stdscr = FakeWindow()
    screen = ChatScreen(stdscr)
    screen.post_message("alice", "hi")
    screen.post_message("bob", "hey")
    assert stdscr.lines[0] == (1, "alice: hi")
    assert stdscr.lines[1] == (1, "bob: hey")
    assert screen.next_row == 2


@mock.patch("curses.newwin")
def test_init_places_input_box_from_screen_size(newwin):
    stdscr = FakeWindow(size=(30, 100))
    inputwin = FakeWindow(typed=b"from the box")
    newwin.return_value = inputwin
    screen = ChatScreen(stdscr)
    screen.init()
    newwin.assert_called_once_with(3, 100 - 12, 30 - 5, 5)
    assert inputwin.calls == ["box", "refresh"]
    assert screen.check_box_input() == "from the box"


@mock.patch("curses.newwin")
def test_check_box_input_clears_then_reads(newwin):
    inputwin = FakeWindow(typed=b"hello world")
    newwin.return_value = inputwin
    screen = ChatScreen(FakeWindow())
    screen.init()
    inputwin.calls.clear()
    assert screen.check_box_input() == "hello world"
    assert inputwin.calls[:2] == ["clear", "box"]
    assert inputwin.calls[2][:3] == ("getstr", 1, 1)


def test_check_box_input_before_init_raises():
    with pytest.raises(RuntimeError):
        ChatScreen(FakeWindow()).check_box_input()


@mock.patch("curses.endwin")
@mock.patch("curses.newwin")
def test_context_manager_closes_screen(newwin, endwin):
    newwin.return_value = FakeWindow()
    with ChatScreen(FakeWindow()) as screen:
        assert endwin.call_count == 0
    assert endwin.call_count == 1
    with pytest.raises(RuntimeError):
        screen.check_box_input()