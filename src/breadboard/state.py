"""Modal navigation and editing over a GraphStore.

The navigator is always in exactly one mode. Each mode is its own
dataclass holding only its own fields; the overlay modes (Edit,
QuickSearch, ConnectionSearch) keep the Navigate state they return to in
`origin`.
"""

import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Union

from .core import search_filter
from .errors import NotFound
from .graph import GraphStore
from .models import (
    KEY_BACKSPACE,
    KEY_BACKTAB,
    KEY_CONNECT,
    KEY_DELETE,
    KEY_DELETE_ALT,
    KEY_DISCONNECT,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESC,
    KEY_FILTER,
    KEY_HELP,
    KEY_NEW_AFFORDANCE,
    KEY_NEW_PLACE,
    KEY_OPEN,
    KEY_QUIT,
    KEY_SAVE,
    KEY_SAVE_AS,
    KEY_TAB,
    KEY_TOGGLE_VIEW,
    KEY_UP,
    is_printable,
)

logger = logging.getLogger(__name__)

# Keys in Navigate mode that the outer loop fulfils (file dialogs, quitting).
REQUESTS = {
    KEY_SAVE: "save",
    KEY_SAVE_AS: "save_as",
    KEY_OPEN: "open",
    KEY_QUIT: "quit",
    KEY_HELP: "help",
}

# Marks the "Remove connection" entry in ConnectionSearch.results.
REMOVE_CONNECTION = None


class EditTarget(NamedTuple):
    place_id: str
    affordance_id: Optional[str] = None


@dataclass
class Navigate:
    place_index: Optional[int] = None
    affordance_index: Optional[int] = None  # None = the place itself is selected
    trail: List[str] = field(default_factory=list)
    collapsed: bool = False
    filtered: bool = False


@dataclass
class Edit:
    target: EditTarget
    buffer: str
    origin: Navigate


@dataclass
class QuickSearch:
    buffer: str
    results: List[str]
    selected: int
    origin: Navigate


@dataclass
class ConnectionSearch:
    source_id: str
    buffer: str
    results: List[Optional[str]]
    selected: int
    origin: Navigate


Mode = Union[Navigate, Edit, QuickSearch, ConnectionSearch]


class Navigator:
    """Drives a GraphStore from logical key events."""

    def __init__(self, store: GraphStore):
        self.store = store
        self.mode: Mode = Navigate(place_index=0 if store.places else None)
        self.status = "F1 for help. Type to jump to a place."
        self.dirty = False

    # Selection helpers

    def current_place_id(self, nav: Optional[Navigate] = None) -> Optional[str]:
        if nav is None:
            nav = self.navigate_state()
        ids = self.store.place_ids()
        if nav.place_index is None or not 0 <= nav.place_index < len(ids):
            return None
        return ids[nav.place_index]

    def current_affordance_id(self, nav: Optional[Navigate] = None) -> Optional[str]:
        if nav is None:
            nav = self.navigate_state()
        pid = self.current_place_id(nav)
        if pid is None or nav.affordance_index is None:
            return None
        aids = self.store.place(pid).affordance_ids
        if not 0 <= nav.affordance_index < len(aids):
            return None
        return aids[nav.affordance_index]

    def navigate_state(self) -> Navigate:
        """The active Navigate state, or the one an overlay mode returns to."""
        if isinstance(self.mode, Navigate):
            return self.mode
        return self.mode.origin

    # Entry points

    def handle(self, key: str) -> Optional[str]:
        """Process one key. Returns a request for the outer loop, or None."""
        mode = self.mode
        try:
            if isinstance(mode, Navigate):
                return self._navigate_key(mode, key)
            if isinstance(mode, Edit):
                self._edit_key(mode, key)
            elif isinstance(mode, QuickSearch):
                self._quick_search_key(mode, key)
            elif isinstance(mode, ConnectionSearch):
                self._connection_search_key(mode, key)
        except NotFound as e:
            logger.warning("Ignored %r in %s: %s", key, type(mode).__name__, e)
            self.mode = self.navigate_state()
            self.status = "Nothing to do: selection is out of date."
        return None

    def load(self, store: GraphStore) -> None:
        """Replace the graph wholesale and start over in Navigate."""
        nav = self.navigate_state()
        self.store = store
        self.mode = Navigate(
            place_index=0 if store.places else None,
            collapsed=nav.collapsed,
            filtered=nav.filtered,
        )
        self.dirty = False

    def mark_saved(self) -> None:
        self.dirty = False

    # Navigate

    def _navigate_key(self, nav: Navigate, key: str) -> Optional[str]:
        if key in REQUESTS:
            return REQUESTS[key]
        if key == KEY_DOWN:
            self._cycle_place(nav, +1)
        elif key == KEY_UP:
            self._cycle_place(nav, -1)
        elif key == KEY_TAB:
            self._drill(nav, +1)
        elif key == KEY_BACKTAB:
            self._drill(nav, -1)
        elif key == KEY_ENTER:
            self.follow_connection(nav)
        elif key in (KEY_ESC, KEY_BACKSPACE):
            self.navigate_back(nav)
        elif key in (KEY_DELETE, KEY_DELETE_ALT):
            self.delete_selected(nav)
        elif key == KEY_NEW_PLACE:
            self.new_place(nav)
        elif key == KEY_NEW_AFFORDANCE:
            self.new_affordance(nav)
        elif key == KEY_CONNECT:
            self.start_connection_search(nav)
        elif key == KEY_DISCONNECT:
            self.remove_connection(nav)
        elif key == KEY_TOGGLE_VIEW:
            nav.collapsed = not nav.collapsed
            self.status = "Collapsed view." if nav.collapsed else "Expanded view."
        elif key == KEY_FILTER:
            nav.filtered = not nav.filtered
            self.status = "Showing connected places only." if nav.filtered else "Filter off."
        elif key == "e" and self.current_place_id(nav) is not None:
            self.start_edit(nav)
        elif is_printable(key):
            self.start_quick_search(nav, key)
        return None

    def _cycle_place(self, nav: Navigate, delta: int) -> None:
        count = len(self.store.places)
        if count == 0:
            return
        if nav.place_index is None:
            nav.place_index = 0
        else:
            nav.place_index = (nav.place_index + delta) % count
        nav.affordance_index = None

    def _drill(self, nav: Navigate, delta: int) -> None:
        pid = self.current_place_id(nav)
        if pid is None:
            return
        count = len(self.store.place(pid).affordance_ids)
        if nav.affordance_index is None:
            if delta > 0 and count:
                nav.affordance_index = 0
        elif delta > 0:
            nav.affordance_index = min(nav.affordance_index + 1, count - 1)
        elif nav.affordance_index == 0:
            nav.affordance_index = None
        else:
            nav.affordance_index -= 1

    def _jump_to(self, nav: Navigate, place_id: str) -> None:
        current = self.current_place_id(nav)
        if current is not None:
            nav.trail.append(current)
        nav.place_index = self.store.place_index(place_id)
        nav.affordance_index = None

    def follow_connection(self, nav: Navigate) -> None:
        aid = self.current_affordance_id(nav)
        if aid is None:
            return
        target = self.store.affordance(aid).connects_to
        if target is None:
            self.status = "Not connected. Ctrl+C to connect."
            return
        self._jump_to(nav, target)
        self.status = f"Went to {self.store.place(target).name}."

    def navigate_back(self, nav: Navigate) -> None:
        while nav.trail:
            previous = nav.trail.pop()
            if previous in self.store.places:
                nav.place_index = self.store.place_index(previous)
                nav.affordance_index = None
                self.status = f"Back to {self.store.place(previous).name}."
                return
        self.status = "Trail is empty."

    def delete_selected(self, nav: Navigate) -> None:
        pid = self.current_place_id(nav)
        if pid is None:
            return
        aid = self.current_affordance_id(nav)
        if aid is None:
            name = self.store.place(pid).name
            self.store.remove_place(pid)
            nav.trail = [p for p in nav.trail if p != pid]
            count = len(self.store.places)
            nav.place_index = min(nav.place_index, count - 1) if count else None
            nav.affordance_index = None
            self.status = f"Deleted place {name}."
        else:
            name = self.store.affordance(aid).name
            self.store.remove_affordance(pid, aid)
            count = len(self.store.place(pid).affordance_ids)
            nav.affordance_index = min(nav.affordance_index, count - 1) if count else None
            self.status = f"Deleted affordance {name}."
        self.dirty = True

    def new_place(self, nav: Navigate) -> None:
        name = f"Place {len(self.store.places) + 1}"
        self.store.add_place(name)
        nav.place_index = len(self.store.places) - 1
        nav.affordance_index = None
        self.dirty = True
        self.status = f"Added {name}. Press e to rename."

    def new_affordance(self, nav: Navigate) -> None:
        pid = self.current_place_id(nav)
        if pid is None:
            self.status = "Add a place first (Ctrl+N)."
            return
        place = self.store.place(pid)
        name = f"Action {len(place.affordance_ids) + 1}"
        self.store.add_affordance(pid, name)
        nav.affordance_index = len(place.affordance_ids) - 1
        self.dirty = True
        self.status = f"Added {name} to {place.name}."

    def remove_connection(self, nav: Navigate) -> None:
        aid = self.current_affordance_id(nav)
        if aid is None or self.store.affordance(aid).connects_to is None:
            self.status = "Select a connected affordance to disconnect."
            return
        self.store.disconnect(aid)
        self.dirty = True
        self.status = f"Disconnected {self.store.affordance(aid).name}."

    # Edit

    def start_edit(self, nav: Navigate) -> None:
        pid = self.current_place_id(nav)
        aid = self.current_affordance_id(nav)
        entity = self.store.affordance(aid) if aid else self.store.place(pid)
        self.mode = Edit(target=EditTarget(pid, aid), buffer=entity.name, origin=nav)

    def _edit_key(self, mode: Edit, key: str) -> None:
        if key == KEY_ENTER:
            self._commit_edit(mode)
        elif key == KEY_ESC:
            self._cancel(mode, "Edit cancelled.")
        elif key == KEY_BACKSPACE:
            if mode.buffer:
                mode.buffer = mode.buffer[:-1]
            else:
                self._cancel(mode, "Edit cancelled.")
        elif is_printable(key):
            mode.buffer += key

    def _commit_edit(self, mode: Edit) -> None:
        name = mode.buffer.strip()
        self.mode = mode.origin
        if not name:
            self.status = "Name cannot be empty; kept the old one."
            return
        place_id, affordance_id = mode.target
        if affordance_id is None:
            self.store.rename_place(place_id, name)
        else:
            self.store.rename_affordance(place_id, affordance_id, name)
        self.dirty = True
        self.status = f"Renamed to {name}."

    def _cancel(self, mode: Union[Edit, QuickSearch, ConnectionSearch], message: str) -> None:
        self.mode = mode.origin
        self.status = message

    # QuickSearch

    def _place_matches(self, query: str) -> List[str]:
        return [p.id for p in search_filter(query, list(self.store.places.values()))]

    def start_quick_search(self, nav: Navigate, first: str) -> None:
        self.mode = QuickSearch(
            buffer=first, results=self._place_matches(first), selected=0, origin=nav
        )

    def _quick_search_key(self, mode: QuickSearch, key: str) -> None:
        if key == KEY_ENTER:
            self.mode = mode.origin
            if not mode.results:
                self.status = f"No place matches {mode.buffer!r}."
                return
            target = mode.results[mode.selected]
            self._jump_to(mode.origin, target)
            self.status = f"Jumped to {self.store.place(target).name}."
        elif key == KEY_ESC:
            self._cancel(mode, "Search cancelled.")
        elif key == KEY_BACKSPACE and not mode.buffer:
            self._cancel(mode, "Search cancelled.")
        elif key in (KEY_UP, KEY_DOWN):
            mode.selected = _step(mode.selected, key, len(mode.results))
        elif key == KEY_BACKSPACE or is_printable(key):
            mode.buffer = mode.buffer[:-1] if key == KEY_BACKSPACE else mode.buffer + key
            mode.results = self._place_matches(mode.buffer)
            mode.selected = 0

    # ConnectionSearch

    def _connection_results(self, source_id: str, query: str) -> List[Optional[str]]:
        # Self-connections are allowed, so the source's own place is listed too.
        results: List[Optional[str]] = []
        if self.store.affordance(source_id).connects_to is not None:
            results.append(REMOVE_CONNECTION)
        results.extend(self._place_matches(query))
        return results

    def start_connection_search(self, nav: Navigate) -> None:
        aid = self.current_affordance_id(nav)
        if aid is None:
            self.status = "Select an affordance to connect (Tab)."
            return
        self.mode = ConnectionSearch(
            source_id=aid,
            buffer="",
            results=self._connection_results(aid, ""),
            selected=0,
            origin=nav,
        )

    def _connection_search_key(self, mode: ConnectionSearch, key: str) -> None:
        if key == KEY_ENTER:
            self.mode = mode.origin
            if not mode.results:
                self.status = f"No place matches {mode.buffer!r}."
                return
            choice = mode.results[mode.selected]
            affordance = self.store.affordance(mode.source_id)
            if choice is REMOVE_CONNECTION:
                self.store.disconnect(mode.source_id)
                self.status = f"Disconnected {affordance.name}."
            else:
                self.store.connect(mode.source_id, choice)
                self.status = f"{affordance.name} -> {self.store.place(choice).name}."
            self.dirty = True
        elif key == KEY_ESC:
            self._cancel(mode, "Connection cancelled.")
        elif key == KEY_BACKSPACE and not mode.buffer:
            self._cancel(mode, "Connection cancelled.")
        elif key in (KEY_UP, KEY_DOWN):
            mode.selected = _step(mode.selected, key, len(mode.results))
        elif key == KEY_BACKSPACE or is_printable(key):
            mode.buffer = mode.buffer[:-1] if key == KEY_BACKSPACE else mode.buffer + key
            mode.results = self._connection_results(mode.source_id, mode.buffer)
            mode.selected = 0


def _step(selected: int, key: str, count: int) -> int:
    if count == 0:
        return 0
    delta = 1 if key == KEY_DOWN else -1
    return max(0, min(count - 1, selected + delta))
