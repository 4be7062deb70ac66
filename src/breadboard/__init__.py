"""Breadboard - sketch UI flows as places and affordances in the terminal."""

__version__ = "1.0.0"

from .models import Place, Affordance, DEFAULT_FILE
from .errors import BreadboardError, NotFound, ParseError
from .graph import GraphStore
from .core import search_filter, related_places, connected_places
from .state import Navigator, Navigate, Edit, QuickSearch, ConnectionSearch
from .storage import read_file, write_file

__all__ = [
    "Place",
    "Affordance",
    "DEFAULT_FILE",
    "BreadboardError",
    "NotFound",
    "ParseError",
    "GraphStore",
    "search_filter",
    "related_places",
    "connected_places",
    "Navigator",
    "Navigate",
    "Edit",
    "QuickSearch",
    "ConnectionSearch",
    "read_file",
    "write_file",
]
