from __future__ import annotations

from pathlib import Path

import pytest

from boot_orchestrator.config import BootConfig, ConfigError, load_config, resolve_profile_configs


REPO_CONFIGS = Path(__file__).resolve().parents[1] / "configs"


def test_defaults_from_empty_mapping() -> None:
    cfg = BootConfig.from_mapping({})

    assert cfg.build == "release"
    assert cfg.debug_enabled is False
    assert cfg.halt_on_missing_dependency is False
    assert cfg.boot.required_services == ("save_manager", "profile_manager")
    assert cfg.boot.readiness_timeout_s == 5.0
    assert cfg.scenes.cutscene == "02_Cutscene"
    assert cfg.scenes.lockscreen == "03_Lockscreen"


def test_dev_build_enables_debug_and_halt() -> None:
    cfg = BootConfig.from_mapping({"build": "dev"})

    assert cfg.debug_enabled is True
    assert cfg.halt_on_missing_dependency is True


def test_halt_override_wins_over_build() -> None:
    cfg = BootConfig.from_mapping({"build": "dev", "boot": {"halt_on_missing_dependency": False}})

    assert cfg.halt_on_missing_dependency is False


@pytest.mark.parametrize(
    ("raw", "path"),
    [
        ({"build": "beta"}, "build"),
        ({"boot": {"readiness_timeout_s": 0}}, "boot.readiness_timeout_s"),
        ({"boot": {"poll_interval_s": "fast"}}, "boot.poll_interval_s"),
        ({"boot": {"required_services": "save_manager"}}, "boot.required_services"),
        ({"scenes": {"lockscreen": ""}}, "scenes.lockscreen"),
        ({"cutscene": ["enabled"]}, "cutscene"),
        ({"cutscene": {"enabled": "maybe"}}, "cutscene.enabled"),
        ({"consent": {"force_skip": 1}}, "consent.force_skip"),
        ({"boot": {"halt_on_missing_dependency": "no"}}, "boot.halt_on_missing_dependency"),
    ],
)
def test_invalid_values_are_rejected(raw: dict, path: str) -> None:
    with pytest.raises(ConfigError) as ei:
        BootConfig.from_mapping(raw)

    assert ei.value.path == path


def test_repository_profiles_load() -> None:
    app = BootConfig.from_mapping(
        load_config(resolve_profile_configs(profile="app", configs_dir=REPO_CONFIGS), load_dotenv_file=False)
    )
    dev = BootConfig.from_mapping(
        load_config(resolve_profile_configs(profile="dev", configs_dir=REPO_CONFIGS), load_dotenv_file=False)
    )

    assert app.build == "release"
    assert dev.build == "dev"
    assert dev.boot.required_services == app.boot.required_services
    assert dev.state.path != app.state.path


def test_env_expanded_false_strings_disable_toggles(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CUTSCENE_ENABLED", "false")
    monkeypatch.setenv("CONSENT_FORCE_SKIP", "FALSE")
    monkeypatch.setenv("HALT", "false")
    cfg_path = tmp_path / "app.yaml"
    cfg_path.write_text(
        "build: dev\n"
        "boot:\n"
        "  halt_on_missing_dependency: ${HALT}\n"
        "consent:\n"
        "  force_skip: ${CONSENT_FORCE_SKIP}\n"
        "cutscene:\n"
        "  enabled: ${CUTSCENE_ENABLED}\n",
        encoding="utf-8",
    )

    cfg = BootConfig.from_mapping(load_config([cfg_path], load_dotenv_file=False))

    assert cfg.cutscene.enabled is False
    assert cfg.consent.force_skip is False
    assert cfg.boot.halt_on_missing_dependency is False
    assert cfg.halt_on_missing_dependency is False


def test_string_true_is_accepted() -> None:
    cfg = BootConfig.from_mapping({"cutscene": {"force_skip": "True"}, "consent": {"enabled": "true"}})

    assert cfg.cutscene.force_skip is True
    assert cfg.consent.enabled is True
