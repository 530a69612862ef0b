"""Exception types raised by the cave engine."""

from __future__ import annotations


class CaveError(Exception):
    """Base class for cave engine failures."""


class InvalidConfiguration(CaveError, ValueError):
    """Raised for non-positive dimensions, mismatched shapes or bad settings."""


class OutOfBounds(CaveError, IndexError):
    """Raised when a coordinate falls outside the grid extent."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"Coordinate ({x}, {y}) outside grid of size {width}x{height}")
        self.x = x
        self.y = y
        self.width = width
        self.height = height


__all__ = ["CaveError", "InvalidConfiguration", "OutOfBounds"]
