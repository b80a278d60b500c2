"""Shared fixtures for scmt tests.

Provides a deterministic clock and store/log factories rooted in pytest's
``tmp_path`` so that tests never touch /etc/scmt or /var/log.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import structlog

from scmt.changelog import ChangeLog
from scmt.store import ConfigStore

_T0 = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Returns strictly increasing UTC timestamps, one step per call."""

    def __init__(self, start: datetime = _T0, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_clock() -> Callable[..., FakeClock]:
    """Factory for independent clocks, for tests that build their own stores."""
    return FakeClock


@pytest.fixture
def datafile(tmp_path: Path) -> Path:
    return tmp_path / "etc" / "scmt" / "data.json"


@pytest.fixture
def logfile(tmp_path: Path) -> Path:
    return tmp_path / "scmt.log"


@pytest.fixture
def store(datafile: Path, logfile: Path, clock: FakeClock) -> ConfigStore:
    return ConfigStore(datafile, logfile, clock=clock)


@pytest.fixture
def changelog(logfile: Path, clock: FakeClock) -> ChangeLog:
    return ChangeLog(logfile, clock=clock)


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """CLI tests configure structlog against captured streams; undo that."""
    yield
    structlog.reset_defaults()
