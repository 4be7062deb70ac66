"""The place/affordance graph (pure data, no I/O)."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from .errors import NotFound
from .models import DEFAULT_BOARD_NAME, Affordance, Place

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class GraphStore:
    """A breadboard: ordered places plus a flat arena of affordances.

    Places live in an insertion-ordered dict keyed by id; each place keeps
    the ids of its affordances in display order. `connects_to` is a plain
    key into `places`, so cycles between places need no special handling.
    Every non-empty `connects_to` resolves to an existing place.
    """

    def __init__(self, name: str = DEFAULT_BOARD_NAME, created: Optional[str] = None):
        self.name = name
        self.created = created or utc_timestamp()
        self.places: Dict[str, Place] = {}
        self.affordances: Dict[str, Affordance] = {}

    # Lookups

    def place(self, place_id: str) -> Place:
        try:
            return self.places[place_id]
        except KeyError:
            raise NotFound(f"no place with id {place_id!r}") from None

    def affordance(self, affordance_id: str) -> Affordance:
        try:
            return self.affordances[affordance_id]
        except KeyError:
            raise NotFound(f"no affordance with id {affordance_id!r}") from None

    def place_ids(self) -> List[str]:
        return list(self.places)

    def place_index(self, place_id: str) -> Optional[int]:
        """0-based position of a place in display order, or None."""
        for i, pid in enumerate(self.places):
            if pid == place_id:
                return i
        return None

    def affordances_of(self, place_id: str) -> List[Affordance]:
        place = self.place(place_id)
        return [self.affordances[aid] for aid in place.affordance_ids]

    def find_places_by_name(self, name: str) -> List[Place]:
        return [p for p in self.places.values() if p.name == name]

    def outgoing_targets(self, place_id: str) -> List[str]:
        """Target place ids of a place's connected affordances, in order."""
        return [a.connects_to for a in self.affordances_of(place_id) if a.connects_to]

    def incoming_connections(self, place_id: str) -> Set[str]:
        """Ids of every affordance on the board that connects to place_id."""
        return {a.id for a in self.affordances.values() if a.connects_to == place_id}

    # Places

    def add_place(self, name: str, place_id: Optional[str] = None, group: Optional[str] = None) -> str:
        """Append a place and return its id."""
        if place_id is None:
            place_id = new_id()
        elif place_id in self.places:
            raise ValueError(f"duplicate place id {place_id!r}")
        self.places[place_id] = Place(id=place_id, name=name, group=group)
        return place_id

    def remove_place(self, place_id: str) -> None:
        """Remove a place and its affordances; disconnect everything that led to it."""
        place = self.places.pop(place_id, None)
        if place is None:
            return
        for aid in place.affordance_ids:
            del self.affordances[aid]
        dropped = 0
        for a in self.affordances.values():
            if a.connects_to == place_id:
                a.connects_to = None
                dropped += 1
        logger.info("Removed place %r (%d incoming connections cleared)", place.name, dropped)

    def rename_place(self, place_id: str, name: str) -> None:
        self.place(place_id).name = name

    # Affordances

    def add_affordance(self, place_id: str, name: str, affordance_id: Optional[str] = None) -> str:
        """Append an affordance to a place and return its id."""
        place = self.place(place_id)
        if affordance_id is None:
            affordance_id = new_id()
        elif affordance_id in self.affordances:
            raise ValueError(f"duplicate affordance id {affordance_id!r}")
        self.affordances[affordance_id] = Affordance(id=affordance_id, place_id=place_id, name=name)
        place.affordance_ids.append(affordance_id)
        return affordance_id

    def remove_affordance(self, place_id: str, affordance_id: str) -> None:
        place = self.places.get(place_id)
        if place is None or affordance_id not in place.affordance_ids:
            return
        place.affordance_ids.remove(affordance_id)
        removed = self.affordances.pop(affordance_id)
        logger.info("Removed affordance %r from %r", removed.name, place.name)

    def rename_affordance(self, place_id: str, affordance_id: str, name: str) -> None:
        place = self.place(place_id)
        if affordance_id not in place.affordance_ids:
            raise NotFound(f"place {place.name!r} has no affordance {affordance_id!r}")
        self.affordances[affordance_id].name = name

    def connect(self, affordance_id: str, target_place_id: str) -> None:
        affordance = self.affordance(affordance_id)
        self.place(target_place_id)
        affordance.connects_to = target_place_id

    def disconnect(self, affordance_id: str) -> None:
        affordance = self.affordances.get(affordance_id)
        if affordance is not None:
            affordance.connects_to = None
