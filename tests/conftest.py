from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest


def pytest_configure() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    # lifecycle.main() reconfigures the root logger; keep tests isolated.
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def state_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "boot_state.json"


@pytest.fixture()
def store(state_path: Path):
    from boot_orchestrator.state.flag_store import PersistedFlagStore

    return PersistedFlagStore(state_path)


@pytest.fixture()
def registry():
    from boot_orchestrator.runtime.registry import SingletonRegistry

    return SingletonRegistry("orchestrator")


@pytest.fixture()
def services():
    from boot_orchestrator.runtime.services import ServiceLocator

    return ServiceLocator()


@pytest.fixture()
def sink():
    from boot_orchestrator.runtime.scenes import LoggingSceneSink

    return LoggingSceneSink()
