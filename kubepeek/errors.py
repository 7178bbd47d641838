"""Error taxonomy for kubectl-peek.

Every failure that ends an invocation is a ``PeekError``; the CLI turns
it into a message on stderr and a non-zero exit code.
"""

from __future__ import annotations

from typing import Optional


class PeekError(Exception):
    """Base class for all errors surfaced to the user."""

    exit_code: int = 1


class ConfigurationError(PeekError):
    """Invalid flag combination or unusable connection configuration."""


class UnknownResourceError(PeekError):
    """The API server has no resource type matching the user's input."""

    def __init__(self, user_input: str) -> None:
        self.user_input = user_input
        super().__init__(f'the server doesn\'t have a resource type "{user_input}"')


class RemoteQueryError(PeekError):
    """A list or discovery call failed (transport, auth, server or bad body)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 status: Optional[int] = None) -> None:
        self.cause = cause
        self.status = status
        super().__init__(message)


class InputError(PeekError):
    """The interactive keystroke could not be read."""
