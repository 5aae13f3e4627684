from __future__ import annotations


# Overrides come from JSON payloads (dict-like objects), so typing stays flexible here
# and we raise clear error messages when callers send unexpected shapes.
from typing import Any, Mapping

from g25atlas.config.settings import Settings

"""
Per-request settings overrides (safe subset).

API callers can send `settings_overrides` to tune engine knobs for a single request
(e.g. a sharper plot color scale or a wider jitter spiral). This module:
- validates the override payload against a whitelist,
- deep-merges the safe subset onto current settings,
- re-validates with Pydantic to ensure types/ranges remain correct.

Security note:
Panel size caps and the catalog path are not overridable per request.
"""

# A value of True means "allow any keys under this subtree".
# A nested dict means "only allow the listed keys, recursively".
ALLOWED_SETTINGS_OVERRIDES_TREE: dict[str, Any] = {
    "engine": {
        "default_limit": True,
        "distance_decimals": True,
        "plot_scale_fraction": True,
        "min_vector_length": True,
        "missing_distance": True,
    },
    "projection": {
        "jitter_step_radians": True,
        "jitter_radius_deg": True,
        "key_decimals": True,
    },
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    # A new dict, so the cached `base` payload is never mutated.
    merged: dict[str, Any] = dict(base)
    for key, override_value in override.items():
        if isinstance(override_value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(dict(merged[key]), override_value)
            continue
        merged[key] = override_value
    return merged


def _filter_overrides(
    overrides: Mapping[str, Any],
    *,
    allowed_tree: Mapping[str, Any],
    path: tuple[str, ...] = (),
) -> dict[str, Any]:
    filtered: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in allowed_tree:
            dotted_path = ".".join((*path, key))
            raise ValueError(
                f"settings_overrides contains a disallowed key: '{dotted_path}'"
            )

        allowed = allowed_tree[key]
        if allowed is True:
            filtered[key] = value
            continue

        # Restricted subtrees must be mappings we can recurse into.
        if not isinstance(value, Mapping):
            dotted_path = ".".join((*path, key))
            raise ValueError(
                f"settings_overrides key '{dotted_path}' must be a mapping"
            )

        filtered[key] = _filter_overrides(
            value, allowed_tree=allowed, path=(*path, key)
        )
    return filtered


def apply_settings_overrides(
    settings: Settings, overrides: Mapping[str, Any] | None
) -> Settings:
    """Return `settings` with a whitelisted override payload merged in (validated)."""
    if not overrides:
        return settings

    safe_overrides = _filter_overrides(
        overrides, allowed_tree=ALLOWED_SETTINGS_OVERRIDES_TREE
    )
    merged_payload = _deep_merge(settings.model_dump(mode="python"), safe_overrides)

    # Pydantic raises ValidationError (a ValueError subclass) on out-of-range values.
    return Settings.model_validate(merged_payload)
