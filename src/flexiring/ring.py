"""Consistent hash ring mapping resource keys to targets."""

from __future__ import annotations

import threading
from bisect import bisect_left
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from flexiring.exceptions import (
    DuplicateTargetError,
    EmptyRingError,
    InvalidCountError,
    UnknownTargetError,
)
from flexiring.hashers import Crc32Hasher, PositionHasher, get_hasher
from flexiring.monitoring.metrics import (
    LOOKUP_DURATION,
    LOOKUPS,
    POSITION_COLLISIONS,
    RING_POSITIONS,
    RING_TARGETS,
)
from flexiring.utils.logging import get_logger

if TYPE_CHECKING:
    from flexiring.config.ring_config import RingConfig

logger = get_logger(__name__)

DEFAULT_REPLICAS = 64


@dataclass(frozen=True)
class _RingSnapshot:
    """
    Immutable view of the ring read by lookups.

    Attributes:
        positions: Ring positions in ascending order
        owners: Target owning each entry of ``positions``
        targets: Registered targets in insertion order
    """

    positions: Tuple[int, ...] = ()
    owners: Tuple[str, ...] = ()
    targets: Tuple[str, ...] = ()


def _validate_replicas(replicas: int) -> int:
    if isinstance(replicas, bool) or not isinstance(replicas, int) or replicas < 1:
        raise ValueError(f"replicas must be a positive integer, got {replicas!r}")
    return replicas


class HashRing:
    """
    Consistent hash ring with weighted replicas.

    Each target is hashed onto the ring ``replicas * weight`` times. A resource
    belongs to the first target found at or after its own position, walking
    clockwise and wrapping past the largest position.

    Writers are serialised with a lock and publish a new snapshot when done;
    lookups read the current snapshot without locking.
    """

    def __init__(
        self,
        hasher: Optional[PositionHasher] = None,
        replicas: int = DEFAULT_REPLICAS,
        name: str = "default",
    ) -> None:
        """
        Args:
            hasher: Position hasher (default: Crc32Hasher).
            replicas: Positions generated per target and unit of weight.
            name: Ring name used to label metrics and log records.
        """
        self._hasher: PositionHasher = hasher if hasher is not None else Crc32Hasher()
        self._replicas = _validate_replicas(replicas)
        self._name = name

        self._lock = threading.Lock()
        self._position_to_target: Dict[int, str] = {}
        self._target_to_positions: Dict[str, List[int]] = {}
        self._snapshot = _RingSnapshot()

        self._lookup_hits = LOOKUPS.labels(ring=name, result="hit")
        self._lookup_empty = LOOKUPS.labels(ring=name, result="empty")
        self._lookup_duration = LOOKUP_DURATION.labels(ring=name)
        self._collisions = POSITION_COLLISIONS.labels(ring=name)
        self._publish()

    @classmethod
    def from_config(cls, config: "RingConfig") -> "HashRing":
        """Build a ring and add the configured targets in order."""
        ring = cls(
            hasher=get_hasher(config.hasher),
            replicas=config.replicas,
            name=config.name,
        )
        for target in config.targets:
            ring.add_target(target, config.weight_for(target))
        return ring

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self._name

    @property
    def hasher(self) -> PositionHasher:
        return self._hasher

    @hasher.setter
    def hasher(self, hasher: PositionHasher) -> None:
        self.set_hasher(hasher)

    @property
    def replicas(self) -> int:
        return self._replicas

    @replicas.setter
    def replicas(self, replicas: int) -> None:
        self.set_replicas(replicas)

    def set_hasher(self, hasher: PositionHasher) -> "HashRing":
        """Use ``hasher`` for lookups and for targets added from now on."""
        with self._lock:
            self._hasher = hasher
            self._log_reconfigured(hasher=repr(hasher))
        return self

    def set_replicas(self, replicas: int) -> "HashRing":
        """Use ``replicas`` for targets added from now on."""
        replicas = _validate_replicas(replicas)
        with self._lock:
            self._replicas = replicas
            self._log_reconfigured(replicas=replicas)
        return self

    def _log_reconfigured(self, **changes) -> None:
        # existing targets keep their positions
        if self._target_to_positions:
            logger.warning(
                "ring_reconfigured_with_targets",
                ring=self._name,
                targets=len(self._target_to_positions),
                **changes,
            )
        else:
            logger.info("ring_reconfigured", ring=self._name, **changes)

    # ------------------------------------------------------------------ #
    # Add / remove targets
    # ------------------------------------------------------------------ #

    def add_target(self, target: str, weight: int = 1) -> "HashRing":
        """
        Add a target with ``replicas * weight`` positions.

        Raises:
            DuplicateTargetError: target is already registered.
            ValueError: empty target or non-positive weight.
        """
        if not isinstance(target, str) or not target:
            raise ValueError(f"target must be a non-empty string, got {target!r}")
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 1:
            raise ValueError(f"weight must be a positive integer, got {weight!r}")

        with self._lock:
            if target in self._target_to_positions:
                raise DuplicateTargetError(target)

            hasher = self._hasher
            positions = [
                hasher.hash(f"{target}{i}") for i in range(self._replicas * weight)
            ]

            collisions = 0
            for position in positions:
                previous = self._position_to_target.get(position)
                if previous is not None:
                    collisions += 1
                    logger.debug(
                        "position_collision",
                        ring=self._name,
                        position=position,
                        previous=previous,
                        target=target,
                    )
                self._position_to_target[position] = target
            self._target_to_positions[target] = positions
            self._publish()

        if collisions:
            self._collisions.inc(collisions)
        logger.debug(
            "target_added",
            ring=self._name,
            target=target,
            weight=weight,
            positions=len(positions),
            collisions=collisions,
        )
        return self

    def add_targets(self, targets: Iterable[str]) -> "HashRing":
        """Add each target with weight 1; stops at the first error."""
        for target in targets:
            self.add_target(target, 1)
        return self

    def remove_target(self, target: str) -> "HashRing":
        """
        Remove a target and every position it still owns.

        Positions taken over by another target through a collision are left
        with their new owner.

        Raises:
            UnknownTargetError: target is not registered.
        """
        with self._lock:
            positions = self._target_to_positions.get(target)
            if positions is None:
                raise UnknownTargetError(target)

            removed = 0
            for position in positions:
                if self._position_to_target.get(position) == target:
                    del self._position_to_target[position]
                    removed += 1
            del self._target_to_positions[target]
            self._publish()

        logger.debug(
            "target_removed",
            ring=self._name,
            target=target,
            positions=len(positions),
            removed=removed,
        )
        return self

    def get_all_targets(self) -> List[str]:
        """Return registered targets sorted lexicographically."""
        return sorted(self._snapshot.targets)

    def _publish(self) -> None:
        """Rebuild the lookup snapshot. Caller holds the lock (or is __init__)."""
        ordered = sorted(self._position_to_target.items())
        self._snapshot = _RingSnapshot(
            positions=tuple(position for position, _ in ordered),
            owners=tuple(owner for _, owner in ordered),
            targets=tuple(self._target_to_positions),
        )
        RING_TARGETS.labels(ring=self._name).set(len(self._target_to_positions))
        RING_POSITIONS.labels(ring=self._name).set(len(ordered))

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def lookup(self, resource: str) -> str:
        """
        Return the target owning ``resource``.

        Raises:
            EmptyRingError: no targets are registered, or every position of
                the registered targets was overwritten.
        """
        targets = self.lookup_list(resource, 1)
        if not targets:
            if len(self):
                raise EmptyRingError("No reachable targets")
            raise EmptyRingError()
        return targets[0]

    def lookup_list(self, resource: str, requested_count: int) -> List[str]:
        """
        Return up to ``requested_count`` distinct targets for ``resource``.

        Targets are ordered as met walking clockwise from the resource
        position. Fewer are returned when the ring holds fewer reachable
        targets.

        Raises:
            InvalidCountError: requested_count < 1.
        """
        if requested_count < 1:
            raise InvalidCountError(requested_count)

        snapshot = self._snapshot
        target_count = len(snapshot.targets)
        if target_count == 0:
            self._lookup_empty.inc()
            return []
        if target_count == 1:
            self._lookup_hits.inc()
            return [snapshot.targets[0]]

        with self._lookup_duration.time():
            results = self._walk(snapshot, self._hasher.hash(resource), requested_count)

        if results:
            self._lookup_hits.inc()
        else:
            self._lookup_empty.inc()
        return results

    @staticmethod
    def _walk(snapshot: _RingSnapshot, position: int, requested_count: int) -> List[str]:
        positions = snapshot.positions
        owners = snapshot.owners
        size = len(positions)
        wanted = min(requested_count, len(snapshot.targets))

        results: List[str] = []
        seen = set()
        offset = bisect_left(positions, position)
        # one full lap at most; clobbered targets may never show up
        for i in range(size):
            target = owners[(offset + i) % size]
            if target in seen:
                continue
            seen.add(target)
            results.append(target)
            if len(results) == wanted:
                break
        return results

    # ------------------------------------------------------------------ #
    # Formatting
    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return len(self._snapshot.targets)

    def __contains__(self, target: object) -> bool:
        return target in self._snapshot.targets

    def __str__(self) -> str:
        return f"HashRing({list(self._snapshot.targets)!r})"

    def __repr__(self) -> str:
        snapshot = self._snapshot
        return (
            f"HashRing(name={self._name!r}, "
            f"hasher={self._hasher!r}, "
            f"replicas={self._replicas}, "
            f"targets={len(snapshot.targets)}, "
            f"positions={len(snapshot.positions)})"
        )


__all__ = ["HashRing", "DEFAULT_REPLICAS"]
