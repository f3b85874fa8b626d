"""Tests for ring configuration."""

import pytest
from pydantic import ValidationError

from flexiring import HashRing, Md5Hasher, Sha256Hasher
from flexiring.config import RingConfig, parse_target_spec
from flexiring.hashers import HasherName


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("cache-1", ("cache-1", 1)),
        ("cache-1=3", ("cache-1", 3)),
        (" http://cache-2:11211 = 2 ", ("http://cache-2:11211", 2)),
    ],
)
def test_parse_target_spec(raw, expected):
    assert parse_target_spec(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["", "=2", "a=x", "a=0"])
def test_parse_target_spec_invalid(raw):
    with pytest.raises(ValueError):
        parse_target_spec(raw)


@pytest.mark.unit
def test_defaults():
    config = RingConfig()
    assert config.name == "default"
    assert config.hasher == HasherName.CRC32
    assert config.replicas == 64
    assert config.targets == []


@pytest.mark.unit
def test_validation_errors():
    with pytest.raises(ValidationError):
        RingConfig(replicas=0)
    with pytest.raises(ValidationError):
        RingConfig(hasher="sha1")
    with pytest.raises(ValidationError):
        RingConfig(targets=["a", "a"])
    with pytest.raises(ValidationError):
        RingConfig(targets=["a"], weights={"a": 0})
    with pytest.raises(ValidationError):
        RingConfig(targets=["a"], weights={"b": 2})


@pytest.mark.unit
def test_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FLEXIRING_NAME", "sessions")
    monkeypatch.setenv("FLEXIRING_HASHER", "MD5")
    monkeypatch.setenv("FLEXIRING_REPLICAS", "16")
    monkeypatch.setenv("FLEXIRING_TARGETS", "cache-a, cache-b=3,,cache-c")

    config = RingConfig.from_env()

    assert config.name == "sessions"
    assert config.hasher == HasherName.MD5
    assert config.replicas == 16
    assert config.targets == ["cache-a", "cache-b", "cache-c"]
    assert config.weight_for("cache-b") == 3
    assert config.weight_for("cache-a") == 1


@pytest.mark.unit
def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch):
    for var in ("FLEXIRING_NAME", "FLEXIRING_HASHER", "FLEXIRING_REPLICAS", "FLEXIRING_TARGETS"):
        monkeypatch.delenv(var, raising=False)
    assert RingConfig.from_env() == RingConfig()


@pytest.mark.unit
def test_from_yaml(tmp_path):
    path = tmp_path / "ring.yaml"
    path.write_text(
        "ring:\n"
        "  name: shards\n"
        "  hasher: sha256\n"
        "  replicas: 8\n"
        "  targets: [shard-0, shard-1]\n"
        "  weights:\n"
        "    shard-1: 2\n",
        encoding="utf-8",
    )

    config = RingConfig.from_yaml(str(path))

    assert config.name == "shards"
    assert config.hasher == HasherName.SHA256
    assert config.targets == ["shard-0", "shard-1"]
    assert config.weights == {"shard-1": 2}


@pytest.mark.unit
def test_from_yaml_without_section(tmp_path):
    path = tmp_path / "ring.yaml"
    path.write_text("targets: [a, b]\n", encoding="utf-8")
    assert RingConfig.from_yaml(str(path)).targets == ["a", "b"]


@pytest.mark.integration
def test_ring_from_config():
    config = RingConfig(
        name="cfg",
        hasher="md5",
        replicas=4,
        targets=["a", "b"],
        weights={"b": 2},
    )

    ring = HashRing.from_config(config)

    assert ring.name == "cfg"
    assert isinstance(ring.hasher, Md5Hasher)
    assert ring.replicas == 4
    assert ring.get_all_targets() == ["a", "b"]
    assert "positions=12" in repr(ring)


@pytest.mark.integration
def test_rings_from_same_config_agree():
    config = RingConfig(hasher="sha256", targets=[f"node{i}" for i in range(5)])
    ring1 = HashRing.from_config(config)
    ring2 = HashRing.from_config(config)

    assert isinstance(ring1.hasher, Sha256Hasher)
    for i in range(100):
        assert ring1.lookup_list(f"key{i}", 2) == ring2.lookup_list(f"key{i}", 2)


@pytest.mark.unit
@pytest.mark.parametrize("content", ["- a\n- b\n", "just-a-string\n", "ring: [a, b]\n"])
def test_from_yaml_rejects_non_mapping(tmp_path, content):
    path = tmp_path / "ring.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid ring configuration"):
        RingConfig.from_yaml(str(path))
