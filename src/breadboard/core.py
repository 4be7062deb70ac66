"""Search and connectivity helpers (pure functions, no I/O)."""

from typing import Callable, List, Optional, Sequence, Set, TypeVar

from .graph import GraphStore
from .models import Place

T = TypeVar("T")


def _name_of(item) -> str:
    return item if isinstance(item, str) else item.name


def search_filter(
    query: str, items: Sequence[T], key: Optional[Callable[[T], str]] = None
) -> List[T]:
    """Return the items whose name contains query, case-insensitively.

    Order is preserved (no ranking). An empty query returns every item.
    """
    if key is None:
        key = _name_of
    if not query:
        return list(items)
    q = query.casefold()
    return [item for item in items if q in key(item).casefold()]


def related_places(store: GraphStore, focus_id: str) -> Set[str]:
    """Place ids one hop away from focus_id, following connections either way.

    The focus itself is only included when it connects to itself.
    """
    related = set(store.outgoing_targets(focus_id))
    for aid in store.incoming_connections(focus_id):
        related.add(store.affordances[aid].place_id)
    return related


def connected_places(store: GraphStore, focus_id: str) -> List[Place]:
    """The board's places narrowed to the focus and its related places, in order."""
    keep = related_places(store, focus_id)
    keep.add(focus_id)
    return [p for p in store.places.values() if p.id in keep]
