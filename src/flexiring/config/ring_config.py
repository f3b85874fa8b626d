"""Ring configuration loaded from the environment or a YAML file."""

from __future__ import annotations

import os
from typing import Dict, List, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from flexiring.hashers import HasherName


def parse_target_spec(raw: str) -> Tuple[str, int]:
    """
    Split ``name`` or ``name=weight`` into its parts.

    Example:
        parse_target_spec("cache-1=3") -> ("cache-1", 3)
    """
    name, sep, weight = raw.strip().rpartition("=")
    if not sep:
        name, weight = weight, "1"
    name = name.strip()
    if not name:
        raise ValueError(f"Invalid target spec: {raw!r}")
    try:
        parsed = int(weight)
    except ValueError:
        raise ValueError(f"Invalid weight in target spec: {raw!r}") from None
    if parsed < 1:
        raise ValueError(f"Weight must be positive in target spec: {raw!r}")
    return name, parsed


class RingConfig(BaseModel):
    """Hash ring configuration."""

    name: str = Field(
        "default",
        description="Ring name, used as the metrics label",
    )
    hasher: HasherName = Field(
        HasherName.CRC32,
        description="Position hasher: crc32, md5 or sha256",
    )
    replicas: int = Field(
        64,
        ge=1,
        description="Positions generated per target and unit of weight",
    )
    targets: List[str] = Field(
        default_factory=list,
        description="Targets added to the ring, in order",
    )
    weights: Dict[str, int] = Field(
        default_factory=dict,
        description="Per-target weight multipliers (default 1)",
    )

    @field_validator("hasher", mode="before")
    @classmethod
    def normalize_hasher(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: Dict[str, int]) -> Dict[str, int]:
        for target, weight in v.items():
            if weight < 1:
                raise ValueError(f"weight for {target!r} must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_targets(self) -> "RingConfig":
        seen = set()
        for target in self.targets:
            if not target:
                raise ValueError("targets must be non-empty strings")
            if target in seen:
                raise ValueError(f"duplicate target {target!r}")
            seen.add(target)
        unknown = set(self.weights) - seen
        if unknown:
            raise ValueError(f"weights given for unknown targets: {sorted(unknown)}")
        return self

    def weight_for(self, target: str) -> int:
        return self.weights.get(target, 1)

    @classmethod
    def from_specs(cls, specs: List[str], **kwargs) -> "RingConfig":
        """Build a config from ``name`` / ``name=weight`` strings."""
        targets: List[str] = []
        weights: Dict[str, int] = {}
        for spec in specs:
            target, weight = parse_target_spec(spec)
            targets.append(target)
            if weight != 1:
                weights[target] = weight
        return cls(targets=targets, weights=weights, **kwargs)

    @classmethod
    def from_env(cls) -> "RingConfig":
        targets_raw = os.getenv("FLEXIRING_TARGETS", "")
        specs = [t.strip() for t in targets_raw.split(",") if t.strip()]

        return cls.from_specs(
            specs,
            name=os.getenv("FLEXIRING_NAME", "default"),
            hasher=os.getenv("FLEXIRING_HASHER", "crc32"),
            replicas=int(os.getenv("FLEXIRING_REPLICAS", "64")),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "RingConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        section = data.get("ring", data) if isinstance(data, dict) else data
        if not isinstance(section, dict):
            raise ValueError(f"Invalid ring configuration in {path}")
        return cls(**section)


__all__ = ["RingConfig", "parse_target_spec"]
