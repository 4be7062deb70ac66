"""View model: what the renderer draws, built from the navigator's state."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .core import connected_places
from .graph import GraphStore
from .models import Place
from .state import ConnectionSearch, Edit, Navigate, Navigator, QuickSearch


@dataclass
class Row:
    kind: str  # "place" | "affordance" | "result" | "remove" | "empty"
    text: str
    selected: bool = False


@dataclass
class ViewModel:
    mode: str
    title: str
    rows: List[Row] = field(default_factory=list)
    prompt: Optional[str] = None
    selected_row: Optional[int] = None
    collapsed: bool = False
    filtered: bool = False
    status: str = ""


def source_names(store: GraphStore) -> Dict[str, List[str]]:
    """Map each place id to the names of the places that connect to it."""
    sources: Dict[str, List[str]] = {}
    for place in store.places.values():
        for a in store.affordances_of(place.id):
            if a.connects_to:
                sources.setdefault(a.connects_to, []).append(place.name)
    return sources


def visible_places(navigator: Navigator, nav: Navigate) -> List[Place]:
    store = navigator.store
    focus = navigator.current_place_id(nav)
    if nav.filtered and focus is not None:
        return connected_places(store, focus)
    return list(store.places.values())


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def expanded_rows(navigator: Navigator, nav: Navigate) -> List[Row]:
    store = navigator.store
    sources = source_names(store)
    current = navigator.current_place_id(nav)
    current_aff = navigator.current_affordance_id(nav)
    rows: List[Row] = []
    for place in visible_places(navigator, nav):
        header = f"+- {place.name}"
        if place.id in sources:
            header += f"  <- {', '.join(sources[place.id])}"
        rows.append(Row("place", header, place.id == current and current_aff is None))
        for a in store.affordances_of(place.id):
            text = f"|- {a.name}"
            if a.connects_to:
                text += f" -> {store.places[a.connects_to].name}"
            rows.append(Row("affordance", text, a.id == current_aff))
    return rows


def collapsed_rows(navigator: Navigator, nav: Navigate) -> List[Row]:
    store = navigator.store
    current = navigator.current_place_id(nav)
    current_aff = navigator.current_affordance_id(nav)
    rows: List[Row] = []
    for place in visible_places(navigator, nav):
        text = f"{place.name} ({len(place.affordance_ids)})"
        incoming = len(store.incoming_connections(place.id))
        if incoming:
            text += f" <- {_plural(incoming, 'source')}"
        targets = [store.places[t].name for t in store.outgoing_targets(place.id)]
        if targets:
            text += f" -> {', '.join(targets)}"
        # Affordance rows are hidden here; name the selected one on its place.
        if place.id == current and current_aff is not None:
            text += f"  [{store.affordances[current_aff].name}]"
        rows.append(Row("place", text, place.id == current))
    return rows


def _navigate_view(navigator: Navigator, nav: Navigate, mode: str) -> ViewModel:
    if nav.collapsed:
        rows = collapsed_rows(navigator, nav)
        title = "Breadboard (Collapsed)"
    else:
        rows = expanded_rows(navigator, nav)
        title = "Breadboard"
    if nav.filtered:
        title += " (Filtered)"
    return ViewModel(mode=mode, title=title, rows=rows, collapsed=nav.collapsed, filtered=nav.filtered)


def _result_rows(store: GraphStore, results: List[Optional[str]], selected: int) -> List[Row]:
    if not results:
        return [Row("empty", "No places found")]
    rows = []
    for i, pid in enumerate(results):
        if pid is None:
            rows.append(Row("remove", "Remove connection", i == selected))
        else:
            rows.append(Row("result", store.places[pid].name, i == selected))
    return rows


def build_view(navigator: Navigator) -> ViewModel:
    """Build the view model for the navigator's current mode."""
    store = navigator.store
    mode = navigator.mode
    nav = navigator.navigate_state()

    if isinstance(mode, QuickSearch):
        view = ViewModel(
            mode="SEARCH",
            title=f"Jump to place: {mode.buffer}",
            rows=_result_rows(store, mode.results, mode.selected),
            prompt=f"Jump to: {mode.buffer}",
        )
    elif isinstance(mode, ConnectionSearch):
        source = store.affordances[mode.source_id].name
        view = ViewModel(
            mode="CONNECT",
            title=f"Connect {source} to:",
            rows=_result_rows(store, mode.results, mode.selected),
            prompt=f"Connect to: {mode.buffer}",
        )
    elif isinstance(mode, Edit):
        view = _navigate_view(navigator, nav, "EDIT")
        view.prompt = f"Editing: {mode.buffer}"
    else:
        view = _navigate_view(navigator, nav, "NAVIGATE")
        if not store.places:
            view.rows = [Row("empty", "No places yet. Press Ctrl+N to create a place.")]

    view.collapsed = nav.collapsed
    view.filtered = nav.filtered
    view.status = navigator.status
    for i, row in enumerate(view.rows):
        if row.selected:
            view.selected_row = i
            break
    return view
