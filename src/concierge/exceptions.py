# src/concierge/exceptions.py
"""
Custom exceptions for concierge.

All exceptions inherit from ConciergeError so that callers can catch
concierge-specific errors without grabbing unrelated built-in exceptions.

A value that is simply absent from an identifier system is not an error:
resolvers and mappers report it by returning None.
"""


class ConciergeError(Exception):
    """Base class for all concierge exceptions."""

    pass


class UnknownSystemError(ConciergeError):
    """Raised when no resolver or mapper is bound for a system URI."""

    pass


class InvalidIdentifierError(ConciergeError):
    """Raised when a value is not well-formed in its identifier system."""

    pass


class InvalidAuthorityError(ConciergeError):
    """Raised when an authority code is outside the supported set."""

    pass


class RemoteError(ConciergeError):
    """Base class for failures talking to a remote service."""

    pass


class RemoteTimeoutError(RemoteError):
    """Raised when a remote call exceeds its deadline."""

    pass


class RemoteTransportError(RemoteError):
    """Raised when a remote call fails for any reason other than a timeout."""

    pass


class MalformedResponseError(ConciergeError):
    """Raised when a remote service answers with a document we cannot read."""

    pass
