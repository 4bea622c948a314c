# roadsnap/errors.py


class RoadsnapError(Exception):
    """Base class for engine errors."""


class InvalidInput(RoadsnapError, ValueError):
    """Query coordinates are missing, non-numeric or NaN (caller contract violation)."""


class DatasetError(RoadsnapError):
    """Segment dataset is malformed; no store/index pair is published from it."""
