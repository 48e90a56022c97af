"""Exceptions raised by the yield and tariff engine."""

from __future__ import annotations


class EngineError(Exception):
    """Base class for every error the engine raises on malformed input."""


class UnknownCatalogKeyError(EngineError, KeyError):
    """Raised when a configuration references a catalog entry that does not exist."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"Unknown {kind} {key!r}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class IrradianceShapeError(EngineError, ValueError):
    """Raised when a measured irradiance series is not one value per hour of day."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AmbiguousSeasonError(EngineError, ValueError):
    """Raised when a tariff season label names both the high and the low season."""

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"Season label {label!r} matches both high and low season")
