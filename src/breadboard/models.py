"""Data models and constants for Breadboard."""

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_FILE = "breadboard.toml"
DEFAULT_BOARD_NAME = "New Breadboard"
BOARD_SUFFIX = ".toml"

# Logical keys produced by the terminal layer. Printable characters are
# passed through as one-character strings.
KEY_UP = "up"
KEY_DOWN = "down"
KEY_TAB = "tab"
KEY_BACKTAB = "backtab"
KEY_ENTER = "enter"
KEY_ESC = "esc"
KEY_BACKSPACE = "backspace"
KEY_DELETE = "delete"
KEY_HELP = "f1"

KEY_NEW_PLACE = "ctrl+n"
KEY_NEW_AFFORDANCE = "ctrl+a"
KEY_CONNECT = "ctrl+c"
KEY_DISCONNECT = "ctrl+r"
KEY_TOGGLE_VIEW = "ctrl+t"
KEY_FILTER = "ctrl+f"
KEY_DELETE_ALT = "ctrl+d"
KEY_SAVE = "ctrl+s"
KEY_SAVE_AS = "ctrl+w"
KEY_OPEN = "ctrl+o"
KEY_QUIT = "ctrl+q"


def is_printable(key: str) -> bool:
    """True for a single printable character (typed text, not a command)."""
    return len(key) == 1 and key.isprintable()


@dataclass
class Affordance:
    """An action on a place, optionally leading to another place."""

    id: str
    place_id: str
    name: str
    connects_to: Optional[str] = None  # target place id, lookup only


@dataclass
class Place:
    """A screen in the flow; owns its affordances by id, in display order."""

    id: str
    name: str
    group: Optional[str] = None
    affordance_ids: List[str] = field(default_factory=list)
