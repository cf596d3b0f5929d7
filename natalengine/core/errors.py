"""Exception hierarchy shared by every natalengine component."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "EphemerisDataUnavailable",
    "HouseSystemUnavailable",
    "InvalidDateError",
    "NatalEngineError",
    "UnknownBody",
]


class NatalEngineError(Exception):
    """Base class for errors raised by the engine."""


class InvalidDateError(NatalEngineError, ValueError):
    """Raised when calendar components do not describe a real civil date."""


class EphemerisDataUnavailable(NatalEngineError, LookupError):
    """Raised when no coefficient table or element set covers ``body``."""

    def __init__(self, body: str, source: str | None = None, detail: str | None = None) -> None:
        self.body = body
        self.source = source
        message = f"no ephemeris data for {body!r}"
        if source:
            message += f" from {source}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class HouseSystemUnavailable(NatalEngineError, ArithmeticError):
    """Raised when a house system is undefined for the observer latitude."""

    def __init__(self, system: str, latitude: float, detail: str | None = None) -> None:
        self.system = system
        self.latitude = float(latitude)
        message = f"{system} houses undefined at latitude {self.latitude:.4f}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class UnknownBody(NatalEngineError, KeyError):
    """Raised for bodies outside the supported roster."""

    def __init__(self, body: str, supported: Iterable[str] = ()) -> None:
        self.body = body
        self.supported = tuple(supported)
        super().__init__(body)

    def __str__(self) -> str:
        message = f"unsupported body {self.body!r}"
        if self.supported:
            message += ". Valid options: " + ", ".join(self.supported)
        return message
