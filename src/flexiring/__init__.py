"""flexiring - consistent hash ring for distributing keys across targets."""

from .exceptions import (
    DuplicateTargetError,
    EmptyRingError,
    HashRingError,
    InvalidCountError,
    UnknownTargetError,
)
from .hashers import (
    Crc32Hasher,
    HasherName,
    Md5Hasher,
    MockHasher,
    PositionHasher,
    Sha256Hasher,
    get_hasher,
)
from .ring import DEFAULT_REPLICAS, HashRing
from .version import __version__

__all__ = [
    "HashRing",
    "DEFAULT_REPLICAS",
    "PositionHasher",
    "HasherName",
    "Crc32Hasher",
    "Md5Hasher",
    "Sha256Hasher",
    "MockHasher",
    "get_hasher",
    "HashRingError",
    "DuplicateTargetError",
    "UnknownTargetError",
    "InvalidCountError",
    "EmptyRingError",
    "__version__",
]
