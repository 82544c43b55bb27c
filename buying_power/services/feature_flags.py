# This project was developed with assistance from AI tools.
"""Feature flags with per-user overrides.

Defaults live in ``FeatureFlags``; overrides are stored as a JSON object in
the key-value store under ``feature_flags:<user_id>``. Unknown keys are
ignored and an unreadable override falls back to the defaults.
"""

import json
import logging

from pydantic import BaseModel, ValidationError

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_USER = "default"


class FeatureFlags(BaseModel):
    scenarios_enabled: bool = True
    scenarios_read_only: bool = False
    advanced_sync_enabled: bool = False


def _key(user_id: str | None) -> str:
    return f"feature_flags:{user_id or DEFAULT_USER}"


def get_feature_flags(store: KeyValueStore, user_id: str | None = None) -> FeatureFlags:
    """Return the defaults merged with any stored overrides for ``user_id``."""
    raw = store.get(_key(user_id))
    if raw is None:
        return FeatureFlags()
    try:
        overrides = json.loads(raw)
        if not isinstance(overrides, dict):
            raise ValueError("feature flag overrides must be an object")
        known = {k: v for k, v in overrides.items() if k in FeatureFlags.model_fields}
        return FeatureFlags.model_validate(FeatureFlags().model_dump() | known)
    except (ValueError, ValidationError) as exc:
        logger.warning("Ignoring malformed feature flags for %s: %s", user_id or DEFAULT_USER, exc)
        return FeatureFlags()


def save_feature_flags(
    store: KeyValueStore, overrides: dict[str, bool], user_id: str | None = None
) -> FeatureFlags:
    """Merge ``overrides`` into the stored flags for ``user_id`` and persist them."""
    current = get_feature_flags(store, user_id)
    updated = FeatureFlags.model_validate(current.model_dump() | overrides)
    store.set(_key(user_id), updated.model_dump_json())
    logger.info("Feature flags updated for %s", user_id or DEFAULT_USER)
    return updated
