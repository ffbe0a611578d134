"""
process-wide store handle

the store itself is an ordinary object (services.encounter_store.EncounterStore).
this module only owns the one instance the web app builds at start-up, so routes
can get it through a FastAPI dependency instead of importing a global.

tests build their own stores, or swap this one out with reset_store().
"""

from __future__ import annotations

from typing import Optional

from wardflow.core.config import Settings, settings
from wardflow.services.cache import cache_from_path
from wardflow.services.encounter_store import EncounterStore
from wardflow.services.seed import build_default_records

_STORE: Optional[EncounterStore] = None


def build_store(config: Settings = settings) -> EncounterStore:
    return EncounterStore(
        cache=cache_from_path(config.cache_path),
        seed=build_default_records if config.seed_defaults else None,
        sticky_discharge=config.sticky_discharge,
    )


def get_store() -> EncounterStore:
    """
    Returns the shared store, building it on first use.

    Kept behind a function so routes don't care where the store comes from.
    """
    global _STORE
    if _STORE is None:
        _STORE = build_store()
    return _STORE


def reset_store(store: Optional[EncounterStore] = None) -> None:
    """Replaces the shared store (None means build a fresh one on next use)."""
    global _STORE
    _STORE = store
