from __future__ import annotations

from .flag_store import CONSENT_ACCEPTED, CUTSCENE_SEEN, FLAG_DEFAULTS, PersistedFlagStore

__all__ = ["CONSENT_ACCEPTED", "CUTSCENE_SEEN", "FLAG_DEFAULTS", "PersistedFlagStore"]
