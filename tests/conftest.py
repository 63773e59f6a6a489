"""Shared pytest fixtures for the logvault test suite."""

from datetime import datetime, timezone

import pytest

from logvault.clock import fixed_clock
from logvault.handler import PersistentLogHandler
from logvault.session import SessionRegistry
from logvault.store import LogStore

FIXED_NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def store(tmp_path):
    """A fresh store in a temp directory; its writer is closed on teardown."""
    s = LogStore(tmp_path / "logs.db")
    yield s
    s.close()


@pytest.fixture()
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture()
def handler(store, registry) -> PersistentLogHandler:
    """Handler with a frozen clock and a private session registry."""
    return PersistentLogHandler(
        label="test",
        store=store,
        time_func=fixed_clock(FIXED_NOW),
        registry=registry,
    )
