from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from boot_orchestrator.core.errors import ConfigError


BUILDS = frozenset({"dev", "release"})


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError("must be a mapping", path=key)
    return value


def _str_tuple(value: Any, *, path: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(x, str) and x for x in value):
        raise ConfigError("must be a list of non-empty strings", path=path)
    return tuple(value)


def _positive_float(value: Any, *, path: str) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"must be a number, got {value!r}", path=path) from e
    if out <= 0:
        raise ConfigError("must be > 0", path=path)
    return out


def _bool(value: Any, *, path: str) -> bool:
    # ${ENV} expansion always yields strings.
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ConfigError(f"must be true or false, got {value!r}", path=path)


@dataclass(frozen=True)
class BootSection:
    required_services: tuple[str, ...] = ("save_manager", "profile_manager")
    optional_services: tuple[str, ...] = ("audio_manager",)
    readiness_timeout_s: float = 5.0
    poll_interval_s: float = 1 / 60
    # None -> follow the build (halt in dev, stay non-ready in release).
    halt_on_missing_dependency: bool | None = None


@dataclass(frozen=True)
class GateSection:
    enabled: bool = True
    force_skip: bool = False


@dataclass(frozen=True)
class ConsentSection(GateSection):
    custom_text: str | None = None


@dataclass(frozen=True)
class SceneNames:
    consent: str = "00_Consent"
    bootstrap: str = "01_Bootstrap"
    cutscene: str = "02_Cutscene"
    lockscreen: str = "03_Lockscreen"
    main_menu: str = "04_MainMenu"


@dataclass(frozen=True)
class StateSection:
    path: Path = Path(".boot_state.json")


@dataclass(frozen=True)
class BootConfig:
    build: str = "release"
    boot: BootSection = field(default_factory=BootSection)
    consent: ConsentSection = field(default_factory=ConsentSection)
    cutscene: GateSection = field(default_factory=GateSection)
    scenes: SceneNames = field(default_factory=SceneNames)
    state: StateSection = field(default_factory=StateSection)

    @property
    def debug_enabled(self) -> bool:
        return self.build == "dev"

    @property
    def halt_on_missing_dependency(self) -> bool:
        if self.boot.halt_on_missing_dependency is None:
            return self.debug_enabled
        return self.boot.halt_on_missing_dependency

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "BootConfig":
        """Validate an expanded config mapping (see `load_config`)."""

        build = str(raw.get("build", cls.build))
        if build not in BUILDS:
            raise ConfigError(f"must be one of {sorted(BUILDS)}, got {build!r}", path="build")

        boot_raw = _section(raw, "boot")
        halt = boot_raw.get("halt_on_missing_dependency")
        boot = BootSection(
            required_services=_str_tuple(
                boot_raw.get("required_services", list(BootSection.required_services)),
                path="boot.required_services",
            ),
            optional_services=_str_tuple(
                boot_raw.get("optional_services", list(BootSection.optional_services)),
                path="boot.optional_services",
            ),
            readiness_timeout_s=_positive_float(
                boot_raw.get("readiness_timeout_s", BootSection.readiness_timeout_s),
                path="boot.readiness_timeout_s",
            ),
            poll_interval_s=_positive_float(
                boot_raw.get("poll_interval_s", BootSection.poll_interval_s),
                path="boot.poll_interval_s",
            ),
            halt_on_missing_dependency=(
                None if halt is None else _bool(halt, path="boot.halt_on_missing_dependency")
            ),
        )

        consent_raw = _section(raw, "consent")
        custom_text = consent_raw.get("custom_text")
        if custom_text is not None and not isinstance(custom_text, str):
            raise ConfigError("must be a string", path="consent.custom_text")
        consent = ConsentSection(
            enabled=_bool(consent_raw.get("enabled", True), path="consent.enabled"),
            force_skip=_bool(consent_raw.get("force_skip", False), path="consent.force_skip"),
            custom_text=custom_text or None,
        )

        cutscene_raw = _section(raw, "cutscene")
        cutscene = GateSection(
            enabled=_bool(cutscene_raw.get("enabled", True), path="cutscene.enabled"),
            force_skip=_bool(cutscene_raw.get("force_skip", False), path="cutscene.force_skip"),
        )

        scenes_raw = _section(raw, "scenes")
        defaults = SceneNames()
        scene_kwargs: dict[str, str] = {}
        for name in ("consent", "bootstrap", "cutscene", "lockscreen", "main_menu"):
            value = scenes_raw.get(name, getattr(defaults, name))
            if not isinstance(value, str) or not value.strip():
                raise ConfigError("must be a non-empty string", path=f"scenes.{name}")
            scene_kwargs[name] = value
        scenes = SceneNames(**scene_kwargs)

        state_raw = _section(raw, "state")
        state_path = state_raw.get("path", str(StateSection.path))
        if not isinstance(state_path, str) or not state_path.strip():
            raise ConfigError("must be a non-empty string", path="state.path")

        return cls(
            build=build,
            boot=boot,
            consent=consent,
            cutscene=cutscene,
            scenes=scenes,
            state=StateSection(path=Path(state_path).expanduser()),
        )
