"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import inspect
import os
import sys
from typing import Any

import pytest

# Ensure src/ is on sys.path for tests so the src layout is used during test runs
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

# Fixed scalar inside [1, n-1]; acceptable only in tests.
TEST_PRIVATE_KEY = "9f2c4b7a1d08e3f5a6b0c3d4e7f812349abcedf00123456789abcdef01234567"
OTHER_PRIVATE_KEY = "1111111111111111111111111111111111111111111111111111111111111111"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as requiring an event loop")


def pytest_pyfunc_call(pyfuncitem: Any) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
        }

        event_loop = asyncio.new_event_loop()
        try:
            event_loop.run_until_complete(pyfuncitem.obj(**call_kwargs))
        finally:
            event_loop.close()
        return True
    return None


@pytest.fixture(autouse=True)
def _clean_sigdebug_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell settings out of the test run."""

    for name in (
        "SIGDEBUG_PUBLIC_KEY_FORMAT",
        "SIGDEBUG_HASH_PREVIEW_CHARS",
        "SIGDEBUG_KEY_PREVIEW_CHARS",
        "SIGDEBUG_DID_PREFIX_CHARS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def private_key() -> str:
    return TEST_PRIVATE_KEY


@pytest.fixture
def other_private_key() -> str:
    return OTHER_PRIVATE_KEY
