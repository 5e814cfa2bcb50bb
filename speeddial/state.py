"""JSON persistence for speed dial keys."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

NEW_FILE_MODE = 0o644


class StoreError(RuntimeError):
    """The keys file could not be read, decoded or written."""


class InvalidEntryError(ValueError):
    """A key/value pair that may not be stored."""


class UnknownKeyError(KeyError):
    """The key is not present in the store."""

    def __str__(self) -> str:
        return f"unknown key {self.args[0]}"


def _keys_path(path: Path | str | None = None) -> Path:
    """Return the keys file path, respecting SPEEDDIAL_KEYS_FILE env var."""
    if path:
        return Path(path)
    from speeddial.config import load_settings

    return load_settings().keys_path


def keys_file_exists(path: Path | str | None = None) -> bool:
    return _keys_path(path).is_file()


def load_keys(*, path=None, strict: bool = True) -> dict[str, str]:
    """Load the key -> command mapping.

    A missing file is an empty mapping. A file that is not a UTF-8 encoded flat
    JSON object of strings raises :class:`StoreError`, unless *strict* is False,
    in which case the problem is logged and an empty mapping returned.
    """
    path = _keys_path(path)
    if not path.exists():
        logger.debug("No keys file at %s", path)
        return {}

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise StoreError(f"could not read {path}: {exc}") from exc

    try:
        data = json.loads(raw.decode("utf-8"))
        _check_mapping(data)
    except ValueError as exc:
        if strict:
            raise StoreError(f"malformed keys file {path}: {exc}") from exc
        logger.warning("Ignoring malformed keys file %s: %s", path, exc)
        return {}

    logger.debug("Loaded %d key(s) from %s", len(data), path)
    return data


def _check_mapping(data) -> None:
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    for key, value in data.items():
        if not isinstance(value, str):
            raise ValueError(f"value for {key!r} is not a string")


def write_keys(mapping: dict[str, str], *, path=None) -> None:
    """Overwrite the keys file with *mapping*.

    Written to a temp file beside the target and renamed into place, so a
    failed write leaves the previous file intact. An existing file keeps its
    permission bits.
    """
    path = _keys_path(path)
    try:
        try:
            mode = path.stat().st_mode & 0o777
        except FileNotFoundError:
            mode = NEW_FILE_MODE
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(mapping, f, indent=2, ensure_ascii=False, sort_keys=True)
                f.write("\n")
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        finally:
            Path(tmp_path).unlink(missing_ok=True)
    except OSError as exc:
        raise StoreError(f"could not write {path}: {exc}") from exc
    logger.debug("Wrote %d key(s) to %s", len(mapping), path)


def validate_entry(key: str, value: str) -> None:
    if not key:
        raise InvalidEntryError("key must not be empty")
    if any(ch.isspace() for ch in key):
        raise InvalidEntryError(f"key {key!r} must not contain whitespace")
    if not value:
        raise InvalidEntryError("value must not be empty")


def save_entry(mapping: dict[str, str], key: str, value: str, *, path=None) -> dict[str, str]:
    """Insert or overwrite *key* and persist the whole mapping."""
    validate_entry(key, value)
    updated = dict(mapping)
    if key in updated:
        logger.info("Overwriting key %s", key)
    updated[key] = value
    write_keys(updated, path=path)
    return updated


def delete_entry(mapping: dict[str, str], key: str, *, path=None) -> dict[str, str]:
    """Remove *key* and persist the whole mapping."""
    if not key:
        raise InvalidEntryError("key must not be empty")
    if key not in mapping:
        raise UnknownKeyError(key)
    updated = {k: v for k, v in mapping.items() if k != key}
    write_keys(updated, path=path)
    return updated


def lookup(mapping: dict[str, str], key: str) -> tuple[Optional[str], bool]:
    if key in mapping:
        return mapping[key], True
    return None, False
