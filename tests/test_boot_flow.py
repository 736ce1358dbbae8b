from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from boot_orchestrator.config import BootConfig
from boot_orchestrator.core.errors import MissingDependencyError, ReadinessTimeoutError
from boot_orchestrator.gates.consent import FixedAnswerPrompt
from boot_orchestrator.gates.cutscene import CutsceneGate
from boot_orchestrator.runtime.boot_sequence import BootSequence
from boot_orchestrator.runtime.lifecycle import register_headless_services, run_boot
from boot_orchestrator.runtime.orchestrator import BootOrchestrator
from boot_orchestrator.runtime.readiness import ReadinessPoller
from boot_orchestrator.runtime.registry import SingletonRegistry
from boot_orchestrator.runtime.scenes import LoggingSceneSink
from boot_orchestrator.runtime.services import ServiceLocator
from boot_orchestrator.state.flag_store import CONSENT_ACCEPTED, CUTSCENE_SEEN, PersistedFlagStore


def _cfg(tmp_path: Path, **overrides) -> BootConfig:
    raw = {
        "build": "release",
        "boot": {"readiness_timeout_s": 0.2, "poll_interval_s": 0.01},
        "state": {"path": str(tmp_path / "state.json")},
    }
    raw.update(overrides)
    return BootConfig.from_mapping(raw)


def _boot(cfg: BootConfig, *, accept: bool = True, without: tuple[str, ...] = ()):
    store = PersistedFlagStore(cfg.state.path)
    services = ServiceLocator()
    register_headless_services(cfg, services, without=without)
    sink = LoggingSceneSink()
    registry: SingletonRegistry[BootOrchestrator] = SingletonRegistry()
    destination = asyncio.run(
        run_boot(
            cfg,
            store=store,
            services=services,
            prompt=FixedAnswerPrompt(accept=accept),
            sink=sink,
            registry=registry,
        )
    )
    return destination, sink, store, registry


def test_first_launch_goes_through_consent_and_cutscene(tmp_path: Path) -> None:
    destination, sink, store, registry = _boot(_cfg(tmp_path))

    assert destination == "02_Cutscene"
    assert sink.loaded == ["01_Bootstrap", "02_Cutscene"]
    assert store.snapshot() == {CONSENT_ACCEPTED: True, CUTSCENE_SEEN: True}
    # Teardown released the slot.
    assert registry.current() is None


def test_second_launch_goes_to_lockscreen(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path)
    _boot(cfg)

    destination, sink, _, _ = _boot(cfg, accept=False)

    assert destination == "03_Lockscreen"
    assert sink.loaded == ["01_Bootstrap", "03_Lockscreen"]


def test_declined_consent_ends_session(tmp_path: Path) -> None:
    destination, sink, store, _ = _boot(_cfg(tmp_path), accept=False)

    assert destination is None
    assert sink.loaded == []
    assert store.get(CONSENT_ACCEPTED) is False
    assert store.get(CUTSCENE_SEEN) is False


def test_missing_dependency_in_release_times_out_without_transition(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path)

    with pytest.raises(ReadinessTimeoutError):
        _boot(cfg, without=("save_manager",))

    store = PersistedFlagStore(cfg.state.path)
    assert store.get(CUTSCENE_SEEN) is False


def test_missing_dependency_in_dev_halts(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path, build="dev")

    with pytest.raises(MissingDependencyError) as ei:
        _boot(cfg, without=("profile_manager",))

    assert ei.value.missing == ("profile_manager",)
    assert PersistedFlagStore(cfg.state.path).get(CUTSCENE_SEEN) is False


def test_optional_service_missing_still_boots(tmp_path: Path) -> None:
    destination, _, _, _ = _boot(_cfg(tmp_path), without=("audio_manager",))

    assert destination == "02_Cutscene"


def test_boot_sequence_stops_when_profile_manager_not_bound(tmp_path: Path) -> None:
    registry: SingletonRegistry[BootOrchestrator] = SingletonRegistry()
    services = ServiceLocator()
    services.register("save_manager", object())
    sink = LoggingSceneSink()
    store = PersistedFlagStore(tmp_path / "state.json")

    async def scenario() -> str | None:
        orch = BootOrchestrator(registry=registry, services=services, sink=sink, required=("save_manager",))
        orch.start()
        sequence = BootSequence(
            poller=ReadinessPoller(registry.current, timeout_s=1.0, poll_interval_s=0.01),
            cutscene_gate=CutsceneGate(store, sink=sink),
        )
        return await sequence.run()

    assert asyncio.run(scenario()) is None
    assert sink.loaded == []
    assert store.get(CUTSCENE_SEEN) is False
