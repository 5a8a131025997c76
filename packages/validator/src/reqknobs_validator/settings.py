"""Settings for the validator engine.

Settings can be built from a dictionary, loaded from a YAML or JSON file, and
overridden through environment variables of the form::

    REQKNOBS_VALIDATOR__<ATTRIBUTE>=<value>

e.g. ``REQKNOBS_VALIDATOR__DEFAULT_MESSAGE="Bad value"`` or
``REQKNOBS_VALIDATOR__LOCATIONS=body,query``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from .exceptions import SettingsError

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = ("body", "cookies", "headers", "params", "query")


@dataclass(frozen=True)
class ValidatorSettings:
    """Engine-wide defaults.

    Attributes:
        default_message: Failure message used when neither the step nor the
            chain supplies one
        locations: Request sub-objects searched by ``check()`` when no
            location is given
        wildcard: Path segment that matches every key or index
        concurrent_instances: Run the pipelines of wildcard-matched field
            instances concurrently instead of one after another
    """

    default_message: str = "Invalid value"
    locations: tuple[str, ...] = DEFAULT_LOCATIONS
    wildcard: str = "*"
    concurrent_instances: bool = True

    ENV_PREFIX = "REQKNOBS_VALIDATOR__"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidatorSettings:
        """Create settings from a dictionary.

        Raises:
            SettingsError: If the dictionary holds keys that are not settings
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise SettingsError(
                f"Unknown validator settings: {', '.join(sorted(unknown))}",
                context={"unknown": sorted(unknown), "known": sorted(known)},
            )
        values = dict(data)
        if "locations" in values:
            values["locations"] = _parse_locations(values["locations"])
        return cls(**values)

    @classmethod
    def from_file(cls, path: str | Path) -> ValidatorSettings:
        """Load settings from a YAML or JSON file.

        The file may hold the settings at its top level or under a
        ``validator`` key.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise SettingsError(f"Settings file not found: {path}", context={"path": str(path)})

        suffix = path.suffix.lower()
        with open(path) as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise SettingsError(f"Unsupported file format: {suffix}", context={"path": str(path)})

        data = data or {}
        if not isinstance(data, dict):
            raise SettingsError("Settings file must hold a mapping", context={"path": str(path)})
        if isinstance(data.get("validator"), dict):
            data = data["validator"]
        logger.debug("Loaded validator settings from %s", path)
        return cls.from_dict(data)

    def with_env_overrides(self, environ: dict[str, str] | None = None) -> ValidatorSettings:
        """Return a copy with ``REQKNOBS_VALIDATOR__*`` variables applied."""
        environ = os.environ if environ is None else environ
        known = {f.name for f in fields(self)}
        overrides: dict[str, Any] = {}

        for key, raw in environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue
            attribute = key[len(self.ENV_PREFIX):].lower()
            if attribute not in known:
                logger.warning("Ignoring unknown validator setting from environment: %s", key)
                continue
            if attribute == "locations":
                overrides[attribute] = _parse_locations(raw)
            elif attribute in ("default_message", "wildcard"):
                overrides[attribute] = raw
            else:
                overrides[attribute] = _parse_env_value(raw)

        return replace(self, **overrides) if overrides else self


def _parse_locations(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",")]
    locations = tuple(str(v) for v in value if v)
    if not locations:
        raise SettingsError("At least one location is required", context={"locations": value})
    return locations


def _parse_env_value(value: str) -> Any:
    """Parse an environment variable value into bool, int, float or str."""
    if value.lower() in ["true", "yes", "1"]:
        return True
    elif value.lower() in ["false", "no", "0"]:
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


_settings: ValidatorSettings | None = None


def get_settings() -> ValidatorSettings:
    """Get the process-wide default settings (environment applied once)."""
    global _settings
    if _settings is None:
        _settings = ValidatorSettings().with_env_overrides()
    return _settings


def configure(settings: ValidatorSettings | None = None, **overrides: Any) -> ValidatorSettings:
    """Replace the process-wide default settings.

    Intended to be called once at application start-up, before any chain runs.

    Args:
        settings: Settings to install. Defaults to the current settings.
        **overrides: Individual attributes to change

    Returns:
        The installed settings
    """
    global _settings
    base = settings if settings is not None else get_settings()
    if overrides:
        base = ValidatorSettings.from_dict({**_as_dict(base), **overrides})
    _settings = base
    return base


def reset_settings() -> None:
    """Forget the process-wide settings so they are rebuilt on next use."""
    global _settings
    _settings = None


def _as_dict(settings: ValidatorSettings) -> dict[str, Any]:
    return {f.name: getattr(settings, f.name) for f in fields(settings)}


__all__ = [
    "DEFAULT_LOCATIONS",
    "ValidatorSettings",
    "get_settings",
    "configure",
    "reset_settings",
]
