"""Breadboard curses-based terminal user interface."""

import curses
import curses.ascii as ascii
import curses.textpad
import locale
import logging
import os
from typing import Optional, Union

from .errors import ParseError
from .models import (
    BOARD_SUFFIX,
    KEY_BACKSPACE,
    KEY_BACKTAB,
    KEY_DELETE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESC,
    KEY_HELP,
    KEY_TAB,
    KEY_UP,
)
from .state import Navigator
from .storage import list_board_files, load_or_new, read_file, write_file
from .view import build_view

logger = logging.getLogger(__name__)

HELP_TEXT = [
    "Breadboard - Keymap",
    "Places:      Up/Down previous/next place     type to jump to a place by name",
    "Affordances: Tab drill in / next   Shift+Tab previous / back to place",
    "Follow:      Enter follow connection   Esc/Backspace back along the trail",
    "Edit:        e rename   Ctrl+N new place   Ctrl+A new affordance   Del/Ctrl+D delete",
    "Connect:     Ctrl+C choose target   Ctrl+R disconnect",
    "View:        Ctrl+T collapsed/expanded   Ctrl+F connected places only",
    "File:        Ctrl+S save   Ctrl+W save as   Ctrl+O open   Ctrl+Q quit",
    "",
    "Prompts and searches: Enter accepts, Esc cancels, Up/Down picks a result",
]

SPECIAL_KEYS = {
    curses.KEY_UP: KEY_UP,
    curses.KEY_DOWN: KEY_DOWN,
    curses.KEY_BTAB: KEY_BACKTAB,
    curses.KEY_ENTER: KEY_ENTER,
    curses.KEY_BACKSPACE: KEY_BACKSPACE,
    curses.KEY_DC: KEY_DELETE,
    curses.KEY_F1: KEY_HELP,
}

CONTROL_CHARS = {
    "\n": KEY_ENTER,
    "\r": KEY_ENTER,
    "\t": KEY_TAB,
    "\x1b": KEY_ESC,
    "\x7f": KEY_BACKSPACE,
    "\x08": KEY_BACKSPACE,
}


def decode_key(ch: Union[int, str]) -> Optional[str]:
    """Turn a get_wch() result into a logical key name, or None to ignore it."""
    if isinstance(ch, int):
        return SPECIAL_KEYS.get(ch)
    if ch in CONTROL_CHARS:
        return CONTROL_CHARS[ch]
    code = ord(ch)
    if 1 <= code <= 26:
        return "ctrl+" + chr(code + ord("a") - 1)
    if ch.isprintable():
        return ch
    return None


def pick_file(stdscr, directory: str) -> Optional[str]:
    """Curses-based board picker. Returns a file name or None if cancelled."""
    files = list_board_files(directory)
    cursor = 0
    while True:
        stdscr.erase()
        height, width = stdscr.getmaxyx()

        stdscr.addnstr(0, 0, "Open a breadboard", width - 1, curses.A_BOLD)
        stdscr.addnstr(1, 0, f"Boards in {directory}/", width - 1, curses.A_DIM)

        top = 3
        body_h = height - top - 2
        scroll = max(0, cursor - body_h + 1)

        if not files:
            stdscr.addnstr(top, 2, f"No {BOARD_SUFFIX} files here.", width - 3, curses.A_DIM)
        for i, name in enumerate(files[scroll : scroll + body_h]):
            idx = scroll + i
            attrs = curses.A_REVERSE if idx == cursor else curses.A_NORMAL
            stdscr.addnstr(top + i, 0, f"  {name}", width - 1, attrs)

        stdscr.hline(height - 2, 0, curses.ACS_HLINE, width)
        status = "up/down: select | Enter: open | Esc: cancel"
        stdscr.addnstr(height - 1, 0, status, width - 1)

        stdscr.refresh()
        ch = stdscr.getch()

        if ch in (27, ord("q")):
            return None
        elif ch == curses.KEY_UP:
            cursor = max(0, cursor - 1)
        elif ch == curses.KEY_DOWN:
            cursor = min(max(len(files) - 1, 0), cursor + 1)
        elif ch in (10, 13, curses.KEY_ENTER) and files:
            return files[cursor]


class TUI:
    """Curses front end: draws the view model and feeds keys to the navigator."""

    def __init__(self, stdscr, path: str, navigator: Navigator):
        self.stdscr = stdscr
        self.path = path
        self.nav = navigator
        curses.curs_set(0)
        self.stdscr.keypad(True)
        self.height, self.width = self.stdscr.getmaxyx()

        self.has_colors = curses.has_colors()
        if self.has_colors:
            curses.start_color()
            try:
                curses.use_default_colors()
            except curses.error:
                pass
            curses.init_pair(1, curses.COLOR_CYAN, -1)
            curses.init_pair(2, curses.COLOR_RED, -1)
            curses.init_pair(3, curses.COLOR_GREEN, -1)
            self.COL_PLACE = curses.color_pair(1)
            self.COL_REMOVE = curses.color_pair(2)
            self.COL_MODE = curses.color_pair(3)
        else:
            self.COL_PLACE = curses.A_BOLD
            self.COL_REMOVE = curses.A_UNDERLINE
            self.COL_MODE = curses.A_BOLD

    def draw(self):
        """Render header, rows, status line and mode line."""
        view = build_view(self.nav)
        self.stdscr.erase()
        self.height, self.width = self.stdscr.getmaxyx()

        store = self.nav.store
        dirty = " *" if self.nav.dirty else ""
        header = f"Board: {store.name}{dirty}   Places: {len(store.places)}   {self.path}"
        self.stdscr.addnstr(0, 0, header, self.width - 1, curses.A_BOLD)
        self.stdscr.addnstr(1, 0, view.title, self.width - 1, curses.A_DIM)

        top = 2
        body_h = self.height - top - 3
        if body_h < 1:
            self.stdscr.refresh()
            return

        scroll = 0
        if view.selected_row is not None and view.selected_row >= body_h:
            scroll = view.selected_row - body_h + 1
        for i, row in enumerate(view.rows[scroll : scroll + body_h]):
            attrs = curses.A_NORMAL
            if row.kind == "place":
                attrs |= self.COL_PLACE
            elif row.kind == "remove":
                attrs |= self.COL_REMOVE
            elif row.kind == "empty":
                attrs |= curses.A_DIM
            if row.selected:
                attrs |= curses.A_REVERSE
            text = row.text
            if len(text) > self.width - 1:
                text = text[: max(self.width - 4, 0)] + "..."
            self.stdscr.addnstr(top + i, 0, text, self.width - 1, attrs)

        self.stdscr.hline(self.height - 3, 0, curses.ACS_HLINE, self.width)
        line = view.prompt if view.prompt is not None else view.status
        self.stdscr.addnstr(self.height - 2, 0, line, self.width - 1)

        layout = "Collapsed" if view.collapsed else "Expanded"
        if view.filtered:
            layout += ", filtered"
        mode_line = f"Mode: {view.mode} | {layout} | F1 help"
        self.stdscr.addnstr(self.height - 1, 0, mode_line, self.width - 1, self.COL_MODE)
        self.stdscr.refresh()

    def prompt(self, prompt: str, initial: str = "") -> Optional[str]:
        """Inline text input (Enter submits, ESC cancels)."""
        curses.curs_set(1)
        win = curses.newwin(3, self.width, self.height - 4, 0)
        win.erase()
        win.border()
        win.addnstr(0, 2, " Input (Enter submits, ESC cancels) ", self.width - 4, curses.A_DIM)
        win.addnstr(1, 2, (prompt + " ").ljust(self.width - 4), self.width - 4)
        win.refresh()
        edit = curses.newwin(1, self.width - 4 - len(prompt) - 1, self.height - 3, len(prompt) + 3)
        edit.keypad(True)
        tb = curses.textpad.Textbox(edit, insert_mode=True)
        edit.addstr(0, 0, initial)

        cancelled = {"value": False}

        def validator(ch: int) -> int:
            if ch in (10, 13):
                return ascii.BEL
            if ch == 27:
                cancelled["value"] = True
                return ascii.BEL
            if ch in (curses.KEY_BACKSPACE, 127, 8):
                return ascii.BS
            return ch

        s = tb.edit(validator)
        curses.curs_set(0)
        if cancelled["value"]:
            return None
        s = (s or "").strip()
        return s or None

    def confirm(self, prompt: str) -> bool:
        """One-line y/N prompt on the status line."""
        msg = f"{prompt} [y/N]: "
        self.stdscr.addnstr(self.height - 2, 0, msg.ljust(self.width - 1), self.width - 1)
        self.stdscr.refresh()
        ch = self.stdscr.getch()
        return ch in (ord("y"), ord("Y"))

    def help_popup(self):
        h, w = self.height, self.width
        win_h = min(len(HELP_TEXT) + 2, h - 2)
        win_w = min(max(len(line) for line in HELP_TEXT) + 4, w - 2)
        win = curses.newwin(win_h, win_w, (h - win_h) // 2, (w - win_w) // 2)
        win.border()
        for i, line in enumerate(HELP_TEXT[: win_h - 2], start=1):
            win.addnstr(i, 2, line, win_w - 4)
        win.addnstr(win_h - 1, 2, "Press any key...", win_w - 4, curses.A_DIM)
        win.refresh()
        win.getch()

    def save(self, path: Optional[str] = None) -> bool:
        """Write the board to path (default: the current file).

        The current file only changes once the write has succeeded.
        """
        path = path or self.path
        try:
            write_file(path, self.nav.store)
        except OSError as e:
            logger.error("Save to %s failed: %s", path, e)
            self.nav.status = f"Save failed: {e}"
            return False
        self.path = path
        self.nav.mark_saved()
        self.nav.status = f"Saved to {path}."
        return True

    def save_as(self):
        name = self.prompt("Save as:", os.path.basename(self.path))
        if name is None:
            self.nav.status = "Save cancelled."
            return
        if not name.endswith(BOARD_SUFFIX):
            name += BOARD_SUFFIX
        self.save(os.path.join(os.path.dirname(os.path.abspath(self.path)), name))

    def open_file(self):
        directory = os.path.dirname(os.path.abspath(self.path))
        name = pick_file(self.stdscr, directory)
        if name is None:
            self.nav.status = "Open cancelled."
            return
        if self.nav.dirty and not self.confirm("Discard unsaved changes?"):
            self.nav.status = "Open cancelled."
            return
        path = os.path.join(directory, name)
        try:
            store = read_file(path)
        except (ParseError, OSError) as e:
            logger.error("Open %s failed: %s", path, e)
            self.nav.status = f"Could not open {name}: {e}"
            return
        self.nav.load(store)
        self.path = path
        self.nav.status = f"Opened {name}."

    def run(self):
        """Main event loop."""
        while True:
            self.draw()
            try:
                ch = self.stdscr.get_wch()
            except curses.error:
                continue
            key = decode_key(ch)
            if key is None:
                continue

            request = self.nav.handle(key)
            if request == "quit":
                if not self.nav.dirty or self.confirm("Quit without saving?"):
                    break
            elif request == "save":
                self.save()
            elif request == "save_as":
                self.save_as()
            elif request == "open":
                self.open_file()
            elif request == "help":
                self.help_popup()


def start_curses(path: str, navigator: Navigator):
    """Initialize curses and run TUI."""

    def _main(stdscr):
        # Raw mode so Ctrl+S / Ctrl+Q reach the app instead of flow control.
        curses.raw()
        curses.set_escdelay(25)
        tui = TUI(stdscr, path, navigator)
        tui.run()

    curses.wrapper(_main)


def main(path: str) -> None:
    """TUI entry point."""
    locale.setlocale(locale.LC_ALL, "")
    store, error = load_or_new(path)
    navigator = Navigator(store)
    if error:
        navigator.status = f"{error}. Started a new board."
    start_curses(path, navigator)
