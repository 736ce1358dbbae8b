"""Process entry: config, consent gate, orchestrator bootstrap, cutscene gate."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

from boot_orchestrator.config import BootConfig, load_config, resolve_profile_configs
from boot_orchestrator.core.errors import (
    ConfigError,
    DebugSurfaceUnavailable,
    MissingDependencyError,
    ReadinessTimeoutError,
)
from boot_orchestrator.gates.consent import (
    ConsentGate,
    ConsentOutcome,
    ConsentPrompt,
    ConsentText,
    ConsolePrompt,
    FixedAnswerPrompt,
)
from boot_orchestrator.gates.cutscene import CutsceneGate
from boot_orchestrator.observability.logging import configure_logging
from boot_orchestrator.runtime.boot_sequence import BootSequence
from boot_orchestrator.runtime.orchestrator import BootOrchestrator
from boot_orchestrator.runtime.readiness import ReadinessPoller
from boot_orchestrator.runtime.registry import SingletonRegistry
from boot_orchestrator.runtime.scenes import LoggingSceneSink, SceneSink
from boot_orchestrator.runtime.services import ServiceLocator
from boot_orchestrator.state.flag_store import PersistedFlagStore


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2
EXIT_MISSING_DEPENDENCY = 3
EXIT_READINESS_TIMEOUT = 4


class HeadlessService:
    """Stand-in handle for a collaborator when running without the game client."""

    def __init__(self, kind: str) -> None:
        self.kind = kind

    def __repr__(self) -> str:
        return f"HeadlessService({self.kind!r})"


def register_headless_services(cfg: BootConfig, services: ServiceLocator, *, without: Sequence[str] = ()) -> None:
    skip = set(without)
    for kind in (*cfg.boot.required_services, *cfg.boot.optional_services):
        if kind not in skip:
            services.register(kind, HeadlessService(kind))


async def run_boot(
    cfg: BootConfig,
    *,
    store: PersistedFlagStore,
    services: ServiceLocator,
    prompt: ConsentPrompt,
    sink: SceneSink,
    registry: SingletonRegistry[BootOrchestrator] | None = None,
) -> str | None:
    """Run the whole boot flow once.

    Returns the last scene requested, or None when the session ended at the
    consent gate or boot stopped short.

    Raises:
        MissingDependencyError: Binding failed and the build halts on it.
        ReadinessTimeoutError: The orchestrator never became ready.
    """

    consent = ConsentGate(
        store,
        sink=sink,
        prompt=prompt,
        bootstrap_scene=cfg.scenes.bootstrap,
        text=ConsentText.with_custom_body(cfg.consent.custom_text),
        enabled=cfg.consent.enabled,
        force_skip=cfg.consent.force_skip,
        debug_enabled=cfg.debug_enabled,
    )
    if consent.run() is ConsentOutcome.DECLINED:
        logger.info("session_ended", extra={"reason": "consent_declined"})
        return None

    registry = registry if registry is not None else SingletonRegistry("orchestrator")
    orchestrator = BootOrchestrator(
        registry=registry,
        services=services,
        sink=sink,
        required=cfg.boot.required_services,
        optional=cfg.boot.optional_services,
        halt_on_missing_dependency=cfg.halt_on_missing_dependency,
        debug_enabled=cfg.debug_enabled,
        current_scene=cfg.scenes.bootstrap,
        main_menu_scene=cfg.scenes.main_menu,
    )

    sequence = BootSequence(
        poller=ReadinessPoller(
            registry.current,
            timeout_s=cfg.boot.readiness_timeout_s,
            poll_interval_s=cfg.boot.poll_interval_s,
        ),
        cutscene_gate=CutsceneGate(
            store,
            sink=sink,
            cutscene_scene=cfg.scenes.cutscene,
            lockscreen_scene=cfg.scenes.lockscreen,
            enabled=cfg.cutscene.enabled,
            force_skip=cfg.cutscene.force_skip,
            debug_enabled=cfg.debug_enabled,
        ),
    )

    async with orchestrator:
        bind_task = orchestrator.start()
        seq_task = asyncio.create_task(sequence.run(), name="boot-sequence")
        try:
            if bind_task is not None:
                await bind_task
            destination = await seq_task
        finally:
            if not seq_task.done():
                seq_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await seq_task
        logger.debug("orchestrator_status", extra={"status": orchestrator.status()})
        return destination


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boot-orchestrator",
        description="Game client bootstrap: consent gate, service binding, cutscene gate",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (e.g. DEBUG, INFO, WARNING)")

    group = parser.add_mutually_exclusive_group()
    group.add_argument("--config", type=Path, help="Path to a YAML config file (skips profile resolution)")
    group.add_argument(
        "--profile",
        choices=["app", "dev"],
        default="app",
        help="Config profile under ./configs (app loads app.yaml; dev overlays dev.yaml)",
    )

    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="Run the boot flow once")
    run_p.add_argument(
        "--consent",
        choices=["prompt", "accept", "decline"],
        default="prompt",
        help="How to answer the consent gate when it is shown",
    )
    run_p.add_argument(
        "--without",
        action="append",
        default=[],
        metavar="KIND",
        help="Do not register this service kind (repeatable)",
    )

    sub.add_parser("print-config", help="Load and print the validated config")

    flags_p = sub.add_parser("flags", help="Inspect or edit persisted flags")
    flags_sub = flags_p.add_subparsers(dest="flags_command", required=True)
    flags_sub.add_parser("show", help="Print all persisted flags")
    reset_p = flags_sub.add_parser("reset", help="Reset a flag to its default (dev builds)")
    reset_p.add_argument("key", help="Flag key, or 'all'")
    set_p = flags_sub.add_parser("set", help="Set a flag to true (dev builds)")
    set_p.add_argument("key", help="Flag key")

    return parser


_RUN_OPTIONS = ("--consent", "--without")


def _normalize_argv(argv_list: list[str]) -> list[str]:
    # Default to `run` when no subcommand is provided. Top-level options stay
    # ahead of it and run-only options follow it.
    known = {"run", "print-config", "flags"}
    if any(tok in known for tok in argv_list) or any(tok in {"-h", "--help"} for tok in argv_list):
        return argv_list
    for i, tok in enumerate(argv_list):
        if tok.split("=", 1)[0] in _RUN_OPTIONS:
            return [*argv_list[:i], "run", *argv_list[i:]]
    return [*argv_list, "run"]


def _flags_command(ns: argparse.Namespace, cfg: BootConfig, store: PersistedFlagStore) -> int:
    if ns.flags_command == "show":
        sys.stdout.write(json.dumps(store.snapshot(), indent=2))
        sys.stdout.write("\n")
        return EXIT_OK

    if not cfg.debug_enabled:
        raise DebugSurfaceUnavailable(f"flags {ns.flags_command} is only available in dev builds")

    try:
        if ns.flags_command == "reset":
            ok = store.reset_all() if ns.key == "all" else store.reset(ns.key)
        else:
            ok = store.set(ns.key, True)
    except KeyError as e:
        raise ConfigError(f"unknown flag {ns.key!r}", path="flags") from e
    return EXIT_OK if ok else EXIT_FATAL


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint referenced by pyproject.toml."""

    argv_list = _normalize_argv(list(argv) if argv is not None else sys.argv[1:])
    parser = _build_parser()

    try:
        ns = parser.parse_args(argv_list)
    except SystemExit as e:
        code = e.code
        return int(code) if isinstance(code, int) else 1

    configure_logging(level=ns.log_level)

    configs_dir = Path.cwd() / "configs"
    try:
        if ns.config is not None:
            config_paths = [ns.config]
        else:
            config_paths = resolve_profile_configs(profile=ns.profile, configs_dir=configs_dir)

        cfg = BootConfig.from_mapping(load_config(config_paths))
        configure_logging(level=ns.log_level, build=cfg.build)
        logger.info("config_loaded", extra={"config_files": [str(p) for p in config_paths]})

        if ns.command == "print-config":
            sys.stdout.write(json.dumps(asdict(cfg), default=str, ensure_ascii=False, indent=2))
            sys.stdout.write("\n")
            return EXIT_OK

        store = PersistedFlagStore(cfg.state.path)

        if ns.command == "flags":
            return _flags_command(ns, cfg, store)

        services = ServiceLocator()
        register_headless_services(cfg, services, without=ns.without)

        if ns.consent == "prompt":
            prompt: ConsentPrompt = ConsolePrompt()
        else:
            prompt = FixedAnswerPrompt(accept=ns.consent == "accept")

        sink = LoggingSceneSink()
        destination = asyncio.run(run_boot(cfg, store=store, services=services, prompt=prompt, sink=sink))
        logger.info("boot_finished", extra={"scene": destination, "transitions": sink.loaded})
        return EXIT_OK

    except (ConfigError, DebugSurfaceUnavailable) as e:
        logger.error("config_error", extra={"error": str(e)})
        sys.stderr.write(f"{type(e).__name__}: {e}\n")
        return EXIT_CONFIG
    except MissingDependencyError as e:
        sys.stderr.write(f"MissingDependencyError: {e}\n")
        return EXIT_MISSING_DEPENDENCY
    except ReadinessTimeoutError as e:
        sys.stderr.write(f"ReadinessTimeoutError: {e}\n")
        return EXIT_READINESS_TIMEOUT
    except Exception as e:  # noqa: BLE001
        logger.exception("fatal_error")
        sys.stderr.write(f"Fatal error: {e}\n")
        return EXIT_FATAL
