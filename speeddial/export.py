"""Export the keys file: scp to another host, or rewrite as shell aliases."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def scp_command(
    keys_path: Path,
    *,
    ip: str | None = None,
    identity_file: Path | str | None = None,
    user: str | None = None,
    ssh_alias: str | None = None,
) -> list[str]:
    """Build the scp argv for copying *keys_path* into the remote home dir."""
    if ssh_alias:
        return ["scp", str(keys_path), f"{ssh_alias}:"]
    if not ip:
        raise ValueError("either ip or ssh_alias is required")
    cmd = ["scp"]
    if identity_file:
        cmd += ["-i", str(identity_file)]
    target = f"{user}@{ip}:" if user else f"{ip}:"
    return cmd + [str(keys_path), target]


def transfer_keys(keys_path: Path, **kwargs) -> int:
    """Copy the keys file to a remote host. Returns scp's exit status."""
    cmd = scp_command(keys_path, **kwargs)
    logger.info("Transferring %s: %s", keys_path, " ".join(cmd))
    try:
        result = subprocess.run(cmd)
    except FileNotFoundError:
        logger.error("scp not found on PATH")
        return 1
    if result.returncode != 0:
        logger.error("scp exited with status %d", result.returncode)
    return result.returncode


def alias_lines(mapping: dict[str, str]) -> list[str]:
    return [f"alias {key}={shlex.quote(mapping[key])}" for key in sorted(mapping)]


def export_aliases(mapping: dict[str, str], alias_path: Path) -> int:
    """Overwrite *alias_path* with one ``alias key='command'`` line per entry.

    Returns the number of aliases written.
    """
    lines = alias_lines(mapping)
    alias_path.parent.mkdir(parents=True, exist_ok=True)
    alias_path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    logger.info("Wrote %d alias(es) to %s", len(lines), alias_path)
    return len(lines)
