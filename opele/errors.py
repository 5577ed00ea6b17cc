"""
Exceptions raised by the casting layer.

Sensor failures surface from ``EntropyCollector.start_session``; callers
recover by casting without samples (random fallback seed).
"""


class CastError(Exception):
    """Base class for casting errors."""


class PermissionDenied(CastError):
    """The user declined access to the motion sensor."""


class Unsupported(CastError):
    """No motion sensor is available on this device."""


class AlreadyActive(CastError):
    """A collection session is already running."""


class VerseLibraryError(CastError):
    """The verse database could not be read."""
