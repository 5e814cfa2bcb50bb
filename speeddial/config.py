"""Settings dataclasses and YAML loader."""

from __future__ import annotations

import getpass
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_FALLBACK_WIDTH = 80


def _default_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


@dataclass
class ExportSettings:
    identity_file: str = "~/.ssh/id_rsa"
    user: str = field(default_factory=_default_user)


@dataclass
class Settings:
    keys_file: str = "~/.dial_keys"
    alias_file: str = "~/.bash_aliases"
    shell: str = "bash"
    fallback_width: int = DEFAULT_FALLBACK_WIDTH
    export: ExportSettings = field(default_factory=ExportSettings)

    @property
    def keys_path(self) -> Path:
        env = os.environ.get("SPEEDDIAL_KEYS_FILE")
        if env:
            return Path(env).expanduser()
        return Path(self.keys_file).expanduser()

    @property
    def alias_path(self) -> Path:
        return Path(self.alias_file).expanduser()

    @property
    def identity_path(self) -> Path:
        return Path(self.export.identity_file).expanduser()


_TOP_KEYS = frozenset(
    f.name for f in Settings.__dataclass_fields__.values()
)
_EXPORT_KEYS = frozenset(
    f.name for f in ExportSettings.__dataclass_fields__.values()
)


def config_path() -> Path:
    """Return the settings file path, respecting SPEEDDIAL_CONFIG env var."""
    env = os.environ.get("SPEEDDIAL_CONFIG")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".config" / "speeddial" / "config.yaml"


def default_settings() -> Settings:
    return Settings()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file, falling back to defaults.

    A missing file yields the defaults. Unknown keys, unreadable files and
    mistyped values cause a ``ValueError`` so typos are caught early.
    """
    path = Path(path) if path else config_path()
    if not path.exists():
        return default_settings()

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except OSError as exc:
        raise ValueError(f"could not read {path}: {exc}") from exc

    if raw is None:
        return default_settings()
    if not isinstance(raw, dict):
        raise ValueError(f"Settings YAML must be a mapping, got {type(raw).__name__}")

    _validate_keys("settings", raw, _TOP_KEYS)
    export_raw = raw.pop("export", {}) or {}
    _validate_keys("export", export_raw, _EXPORT_KEYS)
    _validate_strings("settings", raw, ("keys_file", "alias_file", "shell"))
    _validate_strings("export", export_raw, ("identity_file",))
    _validate_strings("export", export_raw, ("user",), allow_empty=True)

    if "fallback_width" in raw:
        try:
            raw["fallback_width"] = int(raw["fallback_width"])
        except (TypeError, ValueError):
            raise ValueError(
                f"'fallback_width' must be an integer, got {raw['fallback_width']!r}"
            ) from None
        if raw["fallback_width"] <= 0:
            raise ValueError("'fallback_width' must be positive")

    return Settings(export=ExportSettings(**export_raw), **raw)


def _validate_keys(section: str, raw: dict, allowed: frozenset[str]) -> None:
    if not isinstance(raw, dict):
        raise ValueError(f"'{section}' must be a mapping, got {type(raw).__name__}")
    unknown = set(raw) - allowed
    if unknown:
        raise ValueError(
            f"Unknown keys in '{section}': {sorted(unknown)}. "
            f"Allowed: {sorted(allowed)}"
        )


def _validate_strings(
    section: str, raw: dict, names: tuple[str, ...], allow_empty: bool = False
) -> None:
    for name in names:
        if name not in raw:
            continue
        value = raw[name]
        if not isinstance(value, str) or (not value and not allow_empty):
            kind = "a string" if allow_empty else "a non-empty string"
            raise ValueError(f"'{section}.{name}' must be {kind}, got {value!r}")
