"""Prometheus metrics for hash rings."""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Gauges
RING_TARGETS = Gauge(
    "flexiring_targets", "Number of targets registered in the ring", ["ring"]
)
RING_POSITIONS = Gauge(
    "flexiring_positions", "Number of positions in the ring index", ["ring"]
)

# Counters
POSITION_COLLISIONS = Counter(
    "flexiring_position_collisions_total",
    "Replica positions that overwrote an existing ring position",
    ["ring"],
)
LOOKUPS = Counter(
    "flexiring_lookups_total",
    "Number of lookup_list calls",
    ["ring", "result"],
)

LOOKUP_DURATION = Histogram(
    "flexiring_lookup_duration_seconds",
    "Duration of lookup_list calls",
    ["ring"],
    buckets=(1e-6, 5e-6, 1e-5, 5e-5, 1e-4, 5e-4, 1e-3, 5e-3, 1e-2),
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
