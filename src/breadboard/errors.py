"""Exception types raised by the graph and the file layer."""


class BreadboardError(Exception):
    """Base class for Breadboard errors."""


class NotFound(BreadboardError, KeyError):
    """A graph operation named a place or affordance that does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else "not found"


class ParseError(BreadboardError, ValueError):
    """A board file is not valid TOML or does not describe a breadboard."""
