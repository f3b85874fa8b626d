"""
Monitoring utilities for flexiring.
"""

from flexiring.monitoring.metrics import (
    CONTENT_TYPE_LATEST,
    LOOKUP_DURATION,
    LOOKUPS,
    POSITION_COLLISIONS,
    RING_POSITIONS,
    RING_TARGETS,
    generate_latest,
)

__all__ = [
    "RING_TARGETS",
    "RING_POSITIONS",
    "POSITION_COLLISIONS",
    "LOOKUPS",
    "LOOKUP_DURATION",
    "CONTENT_TYPE_LATEST",
    "generate_latest",
]
