from __future__ import annotations


class TripWageError(Exception):
    """Base class for errors raised by the bookkeeping core."""


class InvalidInputError(TripWageError):
    """Caller supplied something the core refuses; the message is shown to the user."""


class NotFoundError(TripWageError):
    pass


class PermissionDeniedError(TripWageError):
    pass


class AuthenticationError(TripWageError):
    pass


class BackendUnavailableError(TripWageError):
    """No storage backend could be reached while starting up."""
