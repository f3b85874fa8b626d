"""Errors raised by the hash ring.

All of them are caller-input errors: none is transient and none should be
retried automatically.
"""

from __future__ import annotations


class HashRingError(Exception):
    """Base class for hash ring errors."""


class DuplicateTargetError(HashRingError, ValueError):
    """A target was added while already registered in the ring."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Target '{target}' already exists")


class UnknownTargetError(HashRingError, KeyError):
    """A target was removed while not registered in the ring."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Target '{target}' does not exist")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0])


class InvalidCountError(HashRingError, ValueError):
    """lookup_list was asked for fewer than one target."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"Need to request at least 1 target, got {count}")


class EmptyRingError(HashRingError, LookupError):
    """lookup found no target: none registered, or none reachable."""

    def __init__(self, message: str = "No targets set") -> None:
        super().__init__(message)


__all__ = [
    "HashRingError",
    "DuplicateTargetError",
    "UnknownTargetError",
    "InvalidCountError",
    "EmptyRingError",
]
