"""Shared fixtures for engine tests."""

from typing import Any

import pytest

from partsmith.core.engine import Engine
from tests.fakes import FakeSource, passthrough


@pytest.fixture
def raw_records() -> list[dict[str, Any]]:
    return [{"id": 1}, {"id": 2}]


@pytest.fixture
def source(raw_records: list[dict[str, Any]]) -> FakeSource:
    return FakeSource(raw_records)


@pytest.fixture
def engine(source: FakeSource) -> Engine:
    """Engine over the fake source with a pass-through transformer."""
    return Engine(source=source).set_transformer(passthrough)
