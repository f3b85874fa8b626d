import sys
from pathlib import Path
from typing import Callable, Iterable, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from flexiring import HashRing, MockHasher  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line(
        "markers",
        "integration: tests that exercise several components together (config, CLI)",
    )
    config.addinivalue_line("markers", "slow: slow-running tests")


@pytest.fixture
def mock_hasher() -> MockHasher:
    return MockHasher()


@pytest.fixture
def placed_ring(mock_hasher: MockHasher) -> Callable[[Iterable[Tuple[str, int]]], HashRing]:
    """
    Build a single-replica ring with each target at a fixed position.

    The mock hasher stays attached to the ring; set its value before a
    lookup to choose the resource position.
    """

    def build(placements: Iterable[Tuple[str, int]]) -> HashRing:
        ring = HashRing(hasher=mock_hasher, replicas=1, name="test")
        for target, position in placements:
            mock_hasher.set_value(position)
            ring.add_target(target)
        return ring

    return build
