"""Configuration for flexiring."""

from flexiring.config.ring_config import RingConfig, parse_target_spec

__all__ = ["RingConfig", "parse_target_spec"]
