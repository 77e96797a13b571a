"""Terminal chat window: a scrolling message log with an input box."""

from __future__ import annotations

import curses
import threading

__all__ = ["ChatScreen"]

MAX_INPUT = 79


class ChatScreen:
    """Curses screen that shows posted messages and reads typed lines."""

    def __init__(self, stdscr) -> None:
        self._stdscr = stdscr
        self._inputwin = None
        self._msg_y = 0
        self._lock = threading.Lock()

    @property
    def next_row(self) -> int:
        """Row where the next posted message will be drawn."""
        return self._msg_y

    def init(self) -> None:
        """Create and draw the boxed input window near the bottom."""
        y_max, x_max = self._stdscr.getmaxyx()
        with self._lock:
            self._inputwin = curses.newwin(3, x_max - 12, y_max - 5, 5)
            self._inputwin.box(0, 0)
            self._stdscr.refresh()
            self._inputwin.refresh()

    def check_box_input(self) -> str:
        """Clear the input box and block until the user enters a line."""
        if self._inputwin is None:
            raise RuntimeError("screen is not initialised")
        with self._lock:
            self._inputwin.clear()
            self._inputwin.box(0, 0)
        raw = self._inputwin.getstr(1, 1, MAX_INPUT)
        return raw.decode("utf-8", errors="replace").split("\n", 1)[0]

    def post_message(self, username: str, msg: str) -> None:
        """Draw ``username: msg`` on the next line of the log."""
        with self._lock:
            self._stdscr.addstr(self._msg_y, 1, f"{username}: {msg}")
            self._stdscr.refresh()
            self._msg_y += 1

    def close(self) -> None:
        """Tear down the input window and leave curses mode."""
        with self._lock:
            self._inputwin = None
        curses.endwin()

    def __enter__(self) -> ChatScreen:
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()