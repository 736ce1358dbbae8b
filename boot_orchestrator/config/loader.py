"""Configuration loader (YAML overlays + strict env expansion).

Env expansion syntax:
  - `${ENV_VAR}` inside YAML string values.
  - Missing or empty env values raise ConfigError, reported all at once.

A `.env` file in the working directory is loaded before expansion when present.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

import yaml
from dotenv import load_dotenv

from boot_orchestrator.core.errors import ConfigError


_ENV_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass(frozen=True, slots=True)
class _UnresolvedEnvRef:
    var_name: str
    key_path: str
    reason: str  # "missing" | "empty"


def _deep_merge(base: MutableMapping[str, Any], overlay: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for k, v in overlay.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), Mapping):
            base[k] = _deep_merge(dict(base[k]), v)
        else:
            base[k] = v
    return base


def _read_yaml(path: Path) -> Mapping[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
        data = yaml.safe_load(text) if text.strip() else {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read YAML config: {e}", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError("Top-level YAML must be a mapping", path=str(path))
    return data


def _expand(obj: Any, *, key_path: str, unresolved: list[_UnresolvedEnvRef]) -> Any:
    if isinstance(obj, str):

        def repl(match: re.Match[str]) -> str:
            name = match.group(1)
            value = os.getenv(name)
            if value is None or value == "":
                unresolved.append(
                    _UnresolvedEnvRef(
                        var_name=name,
                        key_path=key_path,
                        reason="missing" if value is None else "empty",
                    )
                )
                return match.group(0)
            return value

        return _ENV_PLACEHOLDER_RE.sub(repl, obj)

    if isinstance(obj, Mapping):
        return {
            str(k): _expand(v, key_path=f"{key_path}.{k}" if key_path else str(k), unresolved=unresolved)
            for k, v in obj.items()
        }

    if isinstance(obj, list):
        return [_expand(v, key_path=f"{key_path}[{i}]", unresolved=unresolved) for i, v in enumerate(obj)]

    return obj


def load_config(
    paths: Path | Sequence[Path],
    *,
    load_dotenv_file: bool = True,
    dotenv_path: Path | None = None,
) -> dict[str, Any]:
    """Load and merge YAML config files, then expand `${ENV_VAR}` placeholders.

    Later files override earlier ones (dicts merge recursively).

    Raises:
        ConfigError: If a file is unreadable/invalid, or env expansion is unresolved.
    """

    file_list: list[Path] = [paths] if isinstance(paths, Path) else list(paths)
    if not file_list:
        raise ConfigError("No config files provided")

    if load_dotenv_file:
        load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)

    merged: MutableMapping[str, Any] = {}
    for p in file_list:
        merged = _deep_merge(merged, _read_yaml(p))

    unresolved: list[_UnresolvedEnvRef] = []
    expanded = _expand(merged, key_path="", unresolved=unresolved)

    if unresolved:
        sources = ",".join(str(p) for p in file_list)
        lines = ["Unresolved environment variables in config:"]
        lines.extend(f"- {r.var_name} ({r.reason}) at {r.key_path or '<root>'} in {sources}" for r in unresolved)
        raise ConfigError("\n".join(lines))

    return expanded


def resolve_profile_configs(*, profile: str, configs_dir: Path) -> list[Path]:
    """Resolve config file list for a given profile.

    - profile=app -> [configs/app.yaml]
    - profile=dev -> [configs/app.yaml, configs/dev.yaml]
    """

    if profile == "app":
        return [configs_dir / "app.yaml"]
    if profile == "dev":
        return [configs_dir / "app.yaml", configs_dir / "dev.yaml"]
    raise ConfigError(f"Unknown profile: {profile}")
