"""Durable key -> bool flags backed by a small JSON state file.

The file is read once at construction. Every write goes through `_flush()`,
which serializes the whole table to a temp file and `os.replace`s it into
place, so a crash leaves either the old or the new file, never a partial one.

Write failures are non-fatal: the in-memory value stands for the rest of the
session and the caller gets `False` back.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Mapping


logger = logging.getLogger(__name__)

CONSENT_ACCEPTED = "consent-accepted"
CUTSCENE_SEEN = "cutscene-seen"

FLAG_DEFAULTS: Mapping[str, bool] = {
    CONSENT_ACCEPTED: False,
    CUTSCENE_SEEN: False,
}

_SCHEMA_VERSION = 1


class PersistedFlagStore:
    def __init__(self, path: Path, *, defaults: Mapping[str, bool] = FLAG_DEFAULTS) -> None:
        self._path = Path(path)
        self._defaults = dict(defaults)
        self._lock = threading.Lock()
        self._values: dict[str, bool] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def keys(self) -> list[str]:
        return list(self._defaults)

    def get(self, key: str) -> bool:
        self._check_key(key)
        with self._lock:
            return self._values.get(key, self._defaults[key])

    def set(self, key: str, value: bool) -> bool:
        """Set and persist a flag. Returns whether the state file is up to date.

        Re-setting the current value performs no write.
        """

        self._check_key(key)
        value = bool(value)
        with self._lock:
            if self._values.get(key, self._defaults[key]) == value:
                return True
            self._values[key] = value
            ok = self._flush()

        logger.info("flag_set", extra={"key": key, "value": value, "persisted": ok})
        return ok

    def reset(self, key: str) -> bool:
        """Drop a flag back to its default (the key is removed from the file)."""

        self._check_key(key)
        with self._lock:
            if key not in self._values:
                return True
            del self._values[key]
            ok = self._flush()

        logger.info("flag_reset", extra={"key": key, "persisted": ok})
        return ok

    def reset_all(self) -> bool:
        ok = True
        for key in self.keys():
            ok = self.reset(key) and ok
        return ok

    def snapshot(self) -> dict[str, bool]:
        with self._lock:
            return {k: self._values.get(k, d) for k, d in self._defaults.items()}

    def _check_key(self, key: str) -> None:
        if key not in self._defaults:
            raise KeyError(f"Unknown persisted flag: {key!r} (known: {', '.join(self._defaults)})")

    def _load(self) -> dict[str, bool]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("flag_store_unreadable", extra={"path": str(self._path), "error": str(e)})
            return {}

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("flag_store_corrupt", extra={"path": str(self._path), "error": str(e)})
            return {}

        flags = data.get("flags") if isinstance(data, dict) else None
        if not isinstance(flags, dict):
            logger.warning("flag_store_corrupt", extra={"path": str(self._path), "error": "missing 'flags'"})
            return {}

        out: dict[str, bool] = {}
        for k, v in flags.items():
            if k in self._defaults and isinstance(v, bool):
                out[k] = v
        return out

    def _flush(self) -> bool:
        payload = {"version": _SCHEMA_VERSION, "flags": dict(sorted(self._values.items()))}
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
            return True
        except OSError as e:
            logger.warning("flag_write_failed", extra={"path": str(self._path), "error": str(e)})
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False
