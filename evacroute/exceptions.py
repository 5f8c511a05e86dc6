"""Exceptions raised by the evacuation routing package."""


class EvacRouteError(Exception):
    """Base class for all evacroute errors."""


class MalformedLayoutError(EvacRouteError, ValueError):
    """Layout string is empty or its rows differ in length."""


class InvalidPositionError(EvacRouteError, ValueError):
    """Row/column lies outside the floor plan."""


class BuildingNotFoundError(EvacRouteError, KeyError):
    """No floor plans are stored for the requested building."""


class FloorNotFoundError(EvacRouteError, KeyError):
    """The building has no plan for the requested floor."""


class PersistenceError(EvacRouteError):
    """Writing a route result failed after every retry attempt."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts
