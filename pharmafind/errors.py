"""Exception types raised by the proximity search core."""

from __future__ import annotations


class PharmaFindError(Exception):
    """Base class for all search-core errors."""


class InvalidInput(PharmaFindError):
    """
    Raised when a call is rejected before any computation takes place:
    malformed coordinates, negative radius or price, unknown filter keys.

    The request layer translates this into a client-facing 400.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidQuery(InvalidInput):
    """Raised for a blank or whitespace-only search term."""
