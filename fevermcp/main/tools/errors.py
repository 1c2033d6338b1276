"""Exceptions raised while talking to the Fever endpoint."""

from __future__ import annotations


class FeverAPIError(Exception):
    """Base exception for upstream failures (transport or response)."""
    pass


class MalformedResponseError(FeverAPIError):
    """The upstream answered, but not with a usable Fever payload."""
    pass


class AuthenticationError(FeverAPIError):
    """The upstream rejected the account key (``auth`` is 0)."""
    pass


class InvalidIdentifierError(ValueError):
    """A feed or item identifier could not be turned into a valid id."""
    pass
