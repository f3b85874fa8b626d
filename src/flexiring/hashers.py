"""Position hashers: turn a string into a comparable ring position."""

from __future__ import annotations

import hashlib
import zlib
from enum import Enum
from typing import Protocol, runtime_checkable


@runtime_checkable
class PositionHasher(Protocol):
    """Anything with a deterministic ``hash(str) -> int`` method."""

    def hash(self, value: str) -> int:
        ...


class HasherName(str, Enum):
    CRC32 = "crc32"
    MD5 = "md5"
    SHA256 = "sha256"


def consistent_hash(value: str, n_bits: int) -> int:
    """
    Deterministic hash using the first n_bits of the SHA-256 digest.

    Args:
        value: Input string (e.g., a target replica or resource key)
        n_bits: Number of bits to keep (1-256)

    Returns:
        Integer in range [0, 2**n_bits - 1]
    """
    if n_bits <= 0 or n_bits > 256:
        raise ValueError("n_bits must be in [1, 256]")

    digest = hashlib.sha256(value.encode("utf-8")).digest()
    hash_int = int.from_bytes(digest, "big")
    # Take the most significant n_bits of the digest
    return (hash_int >> (256 - n_bits)) & ((1 << n_bits) - 1)


class Crc32Hasher:
    """IEEE CRC-32 checksum. Fast, weaker distribution."""

    def hash(self, value: str) -> int:
        return zlib.crc32(value.encode("utf-8")) & 0xFFFFFFFF

    def __repr__(self) -> str:
        return "Crc32Hasher()"


class Md5Hasher:
    """MD5 digest read as a 128-bit big-endian integer."""

    def hash(self, value: str) -> int:
        return int.from_bytes(hashlib.md5(value.encode("utf-8")).digest(), "big")

    def __repr__(self) -> str:
        return "Md5Hasher()"


class Sha256Hasher:
    """Most significant ``n_bits`` of the SHA-256 digest."""

    def __init__(self, n_bits: int = 64) -> None:
        if n_bits <= 0 or n_bits > 256:
            raise ValueError("n_bits must be in [1, 256]")
        self.n_bits = n_bits

    def hash(self, value: str) -> int:
        return consistent_hash(value, self.n_bits)

    def __repr__(self) -> str:
        return f"Sha256Hasher(n_bits={self.n_bits})"


class MockHasher:
    """
    Returns whatever position was last set, ignoring the input.

    Used to place targets and resources at known positions in tests.
    """

    def __init__(self, value: int = 0) -> None:
        self.value = value

    def set_value(self, value: int) -> None:
        self.value = value

    def hash(self, value: str) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"MockHasher(value={self.value})"


_BUILTIN = {
    HasherName.CRC32: Crc32Hasher,
    HasherName.MD5: Md5Hasher,
    HasherName.SHA256: Sha256Hasher,
}


def get_hasher(name: str | HasherName) -> PositionHasher:
    """Instantiate a built-in hasher by name (``crc32``, ``md5``, ``sha256``)."""
    try:
        key = HasherName(name.lower() if isinstance(name, str) else name)
    except ValueError:
        choices = ", ".join(h.value for h in HasherName)
        raise ValueError(f"Unknown hasher: {name!r} (expected one of {choices})") from None
    return _BUILTIN[key]()


__all__ = [
    "PositionHasher",
    "HasherName",
    "consistent_hash",
    "Crc32Hasher",
    "Md5Hasher",
    "Sha256Hasher",
    "MockHasher",
    "get_hasher",
]
