"""File I/O for breadboards (TOML)."""

import logging
import os
import shutil
import tempfile
import tomllib
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Tuple

import tomli_w

from .errors import ParseError
from .graph import GraphStore, new_id, utc_timestamp
from .models import BOARD_SUFFIX, DEFAULT_BOARD_NAME

logger = logging.getLogger(__name__)


def to_document(store: GraphStore) -> Dict[str, Any]:
    """Snapshot a board as plain TOML-ready data."""
    places = []
    for place in store.places.values():
        entry: Dict[str, Any] = {"id": place.id, "name": place.name}
        if place.group is not None:
            entry["group"] = place.group
        affordances = []
        for a in store.affordances_of(place.id):
            item = {"id": a.id, "name": a.name}
            if a.connects_to is not None:
                item["connects_to"] = a.connects_to
            affordances.append(item)
        if affordances:
            entry["affordances"] = affordances
        places.append(entry)
    doc: Dict[str, Any] = {"name": store.name, "created": store.created}
    if places:
        doc["places"] = places
    return doc


def _text(table: Dict[str, Any], key: str, where: str, required: bool = True) -> Optional[str]:
    value = table.get(key)
    if value is None:
        if required:
            raise ParseError(f"{where}: missing {key!r}")
        return None
    if not isinstance(value, str):
        raise ParseError(f"{where}: {key!r} must be a string")
    return value


def _ident(table: Dict[str, Any], where: str) -> Optional[str]:
    value = table.get("id")
    if value is None or value == "":
        return None
    # Older boards used numeric ids.
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ParseError(f"{where}: 'id' must be a string")
    return str(value)


def _tables(table: Dict[str, Any], key: str, where: str) -> List[Dict[str, Any]]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ParseError(f"{where}: {key!r} must be an array of tables")
    return value


def _timestamp(value: Any) -> str:
    if value is None:
        return utc_timestamp()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, str):
        return value
    raise ParseError("'created' must be a timestamp")


def from_document(doc: Dict[str, Any]) -> GraphStore:
    """Build and validate a board from parsed TOML data.

    Connections that name no existing place are dropped.
    """
    store = GraphStore(name=_text(doc, "name", "board"), created=_timestamp(doc.get("created")))

    pending = []  # (affordance id, raw connects_to)
    for i, ptable in enumerate(_tables(doc, "places", "board"), start=1):
        where = f"place {i}"
        pid = _ident(ptable, where)
        if pid in store.places:
            raise ParseError(f"{where}: duplicate id {pid!r}")
        pid = store.add_place(
            _text(ptable, "name", where),
            place_id=pid,
            group=_text(ptable, "group", where, required=False),
        )
        seen = set()
        for j, atable in enumerate(_tables(ptable, "affordances", where), start=1):
            awhere = f"{where}, affordance {j}"
            aid = _ident(atable, awhere)
            if aid is not None:
                if aid in seen:
                    raise ParseError(f"{awhere}: duplicate id {aid!r}")
                seen.add(aid)
                if aid in store.affordances:
                    logger.debug("Re-issuing affordance id %r reused across places", aid)
                    aid = new_id()
            aid = store.add_affordance(pid, _text(atable, "name", awhere), affordance_id=aid)
            target = atable.get("connects_to")
            if target is not None:
                if isinstance(target, bool) or not isinstance(target, (str, int)):
                    raise ParseError(f"{awhere}: 'connects_to' must be a place id")
                pending.append((aid, str(target)))

    for aid, target in pending:
        if target not in store.places:
            # Hand-written boards may refer to places by name.
            by_name = store.find_places_by_name(target)
            if len(by_name) != 1:
                logger.warning(
                    "Dropping connection of %r: no place %r",
                    store.affordances[aid].name,
                    target,
                )
                continue
            target = by_name[0].id
        store.connect(aid, target)
    return store


def read_file(path: str) -> GraphStore:
    """Load a board file.

    Raises OSError if the file cannot be read and ParseError if it is not
    a valid board. Nothing is returned unless the whole file validates.
    """
    logger.info("Loading board from %s", path)
    with open(path, "rb") as f:
        data = f.read()
    try:
        doc = tomllib.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ParseError(f"{os.path.basename(path)}: {e}") from e
    store = from_document(doc)
    logger.info("Loaded %d places from %s", len(store.places), path)
    return store


def write_file(path: str, store: GraphStore) -> None:
    """Save a board, replacing path atomically.

    The snapshot goes to a temporary file next to path first, so a failed
    write leaves any existing file untouched.
    """
    text = tomli_w.dumps(to_document(store))
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp = tempfile.mkstemp(prefix=".breadboard-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if os.path.exists(path):
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    logger.info("Saved %d places to %s", len(store.places), path)


def load_or_new(path: str) -> Tuple[GraphStore, Optional[str]]:
    """Load path if it exists, else start a board named after the file.

    Returns the board and, when the file exists but could not be loaded,
    an error message (the board is then a fresh empty one).
    """
    if not os.path.exists(path):
        stem = os.path.splitext(os.path.basename(path))[0]
        return GraphStore(name=stem or DEFAULT_BOARD_NAME), None
    try:
        return read_file(path), None
    except (ParseError, OSError) as e:
        logger.error("Could not open %s: %s", path, e)
        return GraphStore(), f"Could not open {os.path.basename(path)}: {e}"


def list_board_files(directory: str) -> List[str]:
    """Return the sorted .toml file names in directory."""
    try:
        names = os.listdir(directory)
    except FileNotFoundError:
        return []
    return sorted(
        n for n in names
        if n.endswith(BOARD_SUFFIX) and os.path.isfile(os.path.join(directory, n))
    )
