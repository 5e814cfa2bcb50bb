"""Tests for speeddial.export: scp transfer and alias files."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from speeddial.export import alias_lines, export_aliases, scp_command, transfer_keys

KEYS = Path("/home/me/.dial_keys")


class TestScpCommand:
    def test_ssh_alias(self):
        assert scp_command(KEYS, ssh_alias="myAlias") == ["scp", str(KEYS), "myAlias:"]

    def test_ip_with_identity_and_user(self):
        cmd = scp_command(KEYS, ip="127.0.0.1", identity_file="/home/me/.ssh/id_rsa", user="me")
        assert cmd == ["scp", "-i", "/home/me/.ssh/id_rsa", str(KEYS), "me@127.0.0.1:"]

    def test_ip_without_user(self):
        assert scp_command(KEYS, ip="10.0.0.2") == ["scp", str(KEYS), "10.0.0.2:"]

    def test_alias_wins_over_identity(self):
        cmd = scp_command(KEYS, ssh_alias="hop", identity_file="/id", user="me")
        assert cmd == ["scp", str(KEYS), "hop:"]

    def test_needs_destination(self):
        with pytest.raises(ValueError):
            scp_command(KEYS)


class TestTransferKeys:
    @patch("speeddial.export.subprocess.run")
    def test_returns_scp_status(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
        assert transfer_keys(KEYS, ssh_alias="myAlias") == 0
        mock_run.assert_called_once_with(["scp", str(KEYS), "myAlias:"])

    @patch("speeddial.export.subprocess.run")
    def test_failure_status_propagates(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=1)
        assert transfer_keys(KEYS, ip="127.0.0.1", user="me") == 1

    @patch("speeddial.export.subprocess.run", side_effect=FileNotFoundError("scp"))
    def test_scp_missing(self, mock_run):
        assert transfer_keys(KEYS, ssh_alias="x") == 1


class TestAliases:
    def test_alias_lines_sorted_and_quoted(self):
        lines = alias_lines({"zz": "ls -la", "aa": "echo it's"})
        assert lines == [
            "alias aa='echo it'\"'\"'s'",
            "alias zz='ls -la'",
        ]

    def test_export_writes_file(self, tmp_path):
        path = tmp_path / ".bash_aliases"
        count = export_aliases({"hello": "echo world", "gs": "git status"}, path)
        assert count == 2
        assert path.read_text() == "alias gs='git status'\nalias hello='echo world'\n"

    def test_export_overwrites(self, tmp_path):
        path = tmp_path / ".bash_aliases"
        path.write_text("alias old='x'\n")
        export_aliases({"new": "y"}, path)
        assert path.read_text() == "alias new=y\n"

    def test_export_empty(self, tmp_path):
        path = tmp_path / ".bash_aliases"
        assert export_aliases({}, path) == 0
        assert path.read_text() == ""
