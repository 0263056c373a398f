"""Tests for autobump.platform.process."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from autobump.core.result import Err, Ok
from autobump.platform.process import ProcessError, run


@patch("subprocess.run")
def test_run_returns_stdout(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = subprocess.CompletedProcess(
        args=["git"], returncode=0, stdout="ok\n", stderr=""
    )
    assert run(["git", "status"], cwd=tmp_path) == Ok("ok\n")
    assert mock_run.call_args.kwargs["cwd"] == str(tmp_path)


@patch("subprocess.run")
def test_run_nonzero_exit(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = subprocess.CompletedProcess(
        args=["git"], returncode=128, stdout="", stderr="fatal: not a git repository"
    )
    result = run(["git", "status"], cwd=tmp_path)
    assert isinstance(result, Err)
    assert result.error.returncode == 128
    assert "not a git repository" in result.error.stderr


@patch("subprocess.run")
def test_run_timeout(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.side_effect = subprocess.TimeoutExpired(cmd=["git", "fetch"], timeout=5)
    result = run(["git", "fetch"], cwd=tmp_path, timeout=5)
    assert isinstance(result, Err)
    assert result.error.returncode == -1
    assert "timed out" in result.error.stderr


@patch("subprocess.run")
def test_run_missing_binary(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.side_effect = FileNotFoundError("No such file or directory: 'gh'")
    result = run(["gh", "pr", "list"], cwd=tmp_path)
    assert isinstance(result, Err)
    assert result.error.returncode == -1


@patch("subprocess.run")
def test_run_passes_environment(mock_run: MagicMock, tmp_path: Path) -> None:
    mock_run.return_value = subprocess.CompletedProcess(
        args=["gh"], returncode=0, stdout="", stderr=""
    )
    run(["gh", "auth", "status"], cwd=tmp_path, env={"GH_TOKEN": "t"})
    assert mock_run.call_args.kwargs["env"] == {"GH_TOKEN": "t"}


def test_process_error_str_truncates_command() -> None:
    error = ProcessError(
        command=("git", "push", "--force", "origin", "main"),
        returncode=1,
        stdout="",
        stderr="",
    )
    assert str(error) == "git push --force ... failed (exit 1)"
