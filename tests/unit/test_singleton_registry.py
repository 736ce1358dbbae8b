from __future__ import annotations

import asyncio
import threading

from boot_orchestrator.runtime.orchestrator import BootOrchestrator
from boot_orchestrator.runtime.registry import SingletonRegistry
from boot_orchestrator.runtime.scenes import LoggingSceneSink
from boot_orchestrator.runtime.services import ServiceLocator


def test_first_registration_wins(registry: SingletonRegistry) -> None:
    a, b = object(), object()

    assert registry.try_register(a) is True
    assert registry.try_register(b) is False
    assert registry.try_register(a) is True
    assert registry.current() is a


def test_release_only_by_owner(registry: SingletonRegistry) -> None:
    a, b = object(), object()
    registry.try_register(a)

    assert registry.release(b) is False
    assert registry.current() is a
    assert registry.release(a) is True
    assert registry.current() is None

    assert registry.try_register(b) is True


def test_concurrent_construction_leaves_one_active_binder() -> None:
    registry: SingletonRegistry[BootOrchestrator] = SingletonRegistry()
    services = ServiceLocator()
    services.register("save_manager", object())
    services.register("profile_manager", object())
    sink = LoggingSceneSink()

    n = 8
    barrier = threading.Barrier(n)
    built: list[BootOrchestrator] = []
    lock = threading.Lock()

    def construct() -> None:
        barrier.wait()
        orch = BootOrchestrator(registry=registry, services=services, sink=sink)
        with lock:
            built.append(orch)

    threads = [threading.Thread(target=construct) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    active = [o for o in built if o.is_active]
    assert len(active) == 1
    assert registry.current() is active[0]

    async def start_all() -> list[bool | None]:
        tasks = [o.start() for o in built]
        return [await t if t is not None else None for t in tasks]

    results = asyncio.run(start_all())

    assert results.count(True) == 1
    assert results.count(None) == n - 1
    assert [o.is_ready for o in built].count(True) == 1


def test_slot_is_free_after_teardown(registry, services, sink) -> None:
    first = BootOrchestrator(registry=registry, services=services, sink=sink)
    first.close()

    second = BootOrchestrator(registry=registry, services=services, sink=sink)
    assert second.is_active
    assert registry.current() is second
