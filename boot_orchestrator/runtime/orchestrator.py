"""Bootstrap orchestrator.

Startup is two-phase:

1. Every subsystem is constructed and registers itself with the
   `ServiceLocator`; nothing cross-references anything yet.
2. `start()` schedules binding. Binding waits one scheduler tick (the
   barrier) and then resolves each required service kind by lookup.

Readiness flips False -> True at most once, and only after every binding has
been stored, so anyone observing `is_ready` can use the bound services.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Sequence

from boot_orchestrator.core.errors import DebugSurfaceUnavailable, MissingDependencyError
from boot_orchestrator.runtime.registry import SingletonRegistry
from boot_orchestrator.runtime.scenes import SceneSink
from boot_orchestrator.runtime.services import ServiceLocator


logger = logging.getLogger(__name__)

SAVE_MANAGER = "save_manager"
PROFILE_MANAGER = "profile_manager"


class BootOrchestrator:
    def __init__(
        self,
        *,
        registry: SingletonRegistry["BootOrchestrator"],
        services: ServiceLocator,
        sink: SceneSink,
        required: Sequence[str] = (SAVE_MANAGER, PROFILE_MANAGER),
        optional: Sequence[str] = (),
        halt_on_missing_dependency: bool = False,
        debug_enabled: bool = False,
        current_scene: str | None = None,
        main_menu_scene: str = "04_MainMenu",
        on_quit: Callable[[], None] | None = None,
    ) -> None:
        self._registry = registry
        self._services = services
        self._sink = sink
        self._required = tuple(required)
        self._optional = tuple(optional)
        self._halt_on_missing = halt_on_missing_dependency
        self._debug_enabled = debug_enabled
        self._main_menu_scene = main_menu_scene
        self._on_quit = on_quit

        self._state_lock = threading.Lock()
        self._ready = False
        self._ready_event = asyncio.Event()
        self._bindings: dict[str, Any] = {}
        self._failure: MissingDependencyError | None = None
        self._bind_task: asyncio.Task[bool] | None = None

        self.current_scene = current_scene
        self.time_scale = 1.0

        # A rejected duplicate stops here: no binding, no side effects.
        self._active = registry.try_register(self)

    # -- lifecycle ---------------------------------------------------------

    @property
    def is_active(self) -> bool:
        """Whether this instance won the registry slot."""

        return self._active

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def failure(self) -> MissingDependencyError | None:
        return self._failure

    def start(self) -> asyncio.Task[bool] | None:
        """Schedule deferred binding on the running loop.

        Returns None for a rejected duplicate. Binding runs once per instance;
        later calls return the same task (see `debug_force_rebind`).
        """

        if not self._active:
            return None
        if self._bind_task is not None:
            return self._bind_task
        self._bind_task = self._schedule_bind()
        return self._bind_task

    async def wait_ready(self) -> None:
        await self._ready_event.wait()

    def close(self) -> None:
        if self._bind_task is not None and not self._bind_task.done():
            self._bind_task.cancel()
        if self._registry.release(self):
            logger.info("orchestrator_closed")

    async def __aenter__(self) -> "BootOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    # -- binding -----------------------------------------------------------

    def _schedule_bind(self) -> asyncio.Task[bool]:
        return asyncio.get_running_loop().create_task(self._deferred_bind(), name="orchestrator-bind")

    async def _deferred_bind(self) -> bool:
        logger.info("orchestrator_bind_deferred", extra={"required": list(self._required)})
        # Barrier: let every sibling finish its own construction first.
        await asyncio.sleep(0)
        return self._bind()

    def _bind(self) -> bool:
        bound: dict[str, Any] = {}
        missing: list[str] = []

        for kind in self._required:
            handle = self._services.get(kind)
            if handle is None:
                missing.append(kind)
                logger.error("missing_dependency", extra={"kind": kind})
            else:
                bound[kind] = handle
                logger.info("service_bound", extra={"kind": kind})

        for kind in self._optional:
            handle = self._services.get(kind)
            if handle is None:
                logger.warning("optional_service_absent", extra={"kind": kind})
            else:
                bound[kind] = handle

        if missing:
            # A failed bind exposes no services.
            self._bindings = {}
            self._failure = MissingDependencyError(missing)
            logger.error(
                "orchestrator_init_failed",
                extra={"missing": missing, "halt": self._halt_on_missing},
            )
            if self._halt_on_missing:
                raise self._failure
            return False

        self._failure = None
        self._bindings = bound
        self._mark_ready()
        return True

    def _mark_ready(self) -> bool:
        with self._state_lock:
            if self._ready:
                return False
            self._ready = True
        self._ready_event.set()
        logger.info("orchestrator_ready", extra={"services": sorted(self._bindings)})
        return True

    # -- bound services ----------------------------------------------------

    def service(self, kind: str) -> Any | None:
        return self._bindings.get(kind)

    @property
    def save_manager(self) -> Any | None:
        return self._bindings.get(SAVE_MANAGER)

    @property
    def profile_manager(self) -> Any | None:
        return self._bindings.get(PROFILE_MANAGER)

    # -- scene / game state ------------------------------------------------

    def on_scene_loaded(self, name: str) -> None:
        self.current_scene = name

    def load_scene(self, name: str) -> None:
        self.current_scene = name
        logger.info("orchestrator_load_scene", extra={"scene": name})
        self._sink.load_scene(name)

    def pause(self) -> None:
        self.time_scale = 0.0
        logger.info("game_paused")

    def resume(self) -> None:
        self.time_scale = 1.0
        logger.info("game_resumed")

    def quit_to_main_menu(self) -> None:
        self.resume()
        self.load_scene(self._main_menu_scene)

    def quit(self) -> None:
        logger.info("game_quit")
        if self._on_quit is not None:
            self._on_quit()

    def status(self) -> dict[str, Any]:
        return {
            "active": self._active,
            "initialized": self._ready,
            "services": {kind: self._bindings.get(kind) is not None for kind in (*self._required, *self._optional)},
            "current_scene": self.current_scene,
            "time_scale": self.time_scale,
        }

    # -- debug surface (dev builds only) ----------------------------------

    def _require_debug(self, op: str) -> None:
        if not self._debug_enabled:
            raise DebugSurfaceUnavailable(f"{op} is only available in dev builds")

    def debug_reset_readiness(self) -> None:
        self._require_debug("debug_reset_readiness")
        with self._state_lock:
            self._ready = False
            self._ready_event.clear()
        logger.info("readiness_reset")

    def debug_force_rebind(self) -> asyncio.Task[bool]:
        """Reset readiness and re-run binding, even for a non-owning instance."""

        self._require_debug("debug_force_rebind")
        self.debug_reset_readiness()
        if self._bind_task is not None and not self._bind_task.done():
            self._bind_task.cancel()
        self._bind_task = self._schedule_bind()
        logger.info("forced_rebind_started", extra={"owns_slot": self._registry.owns(self)})
        return self._bind_task
