"""Shared fixtures: a deterministic clock and a store wired to it."""
from datetime import datetime, timedelta, timezone

import pytest

from timefs.store import FileStore

EPOCH = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


class StepClock:
    """Advances by a fixed step on every reading."""

    def __init__(self, start: datetime = EPOCH, step: timedelta = timedelta(seconds=1)):
        self.current = start - step
        self.step = step

    def __call__(self) -> datetime:
        self.current += self.step
        return self.current


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def store(clock) -> FileStore:
    return FileStore(clock=clock)
