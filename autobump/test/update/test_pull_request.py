"""Tests for the gh-backed pull request client."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from autobump.core.result import Err, Ok, Result
from autobump.output.console import MockConsole
from autobump.platform.process import ProcessError
from autobump.update import pull_request as pr_mod
from autobump.update.pull_request import PullRequestClient, read_maintainers


class RecordingRun:
    def __init__(self, *results: Result[str, ProcessError]) -> None:
        self.results = list(results)
        self.calls: list[dict[str, Any]] = []

    def __call__(
        self,
        cmd: list[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        self.calls.append({"cmd": cmd, "cwd": cwd, "env": env, "timeout": timeout})
        return self.results.pop(0)


def _client(tmp_path: Path, *, dry_run: bool = False) -> PullRequestClient:
    return PullRequestClient(
        workdir=tmp_path,
        repo_slug="bitnami/charts",
        head_owner="bot",
        token="s3cret",
        console=MockConsole(),
        dry_run=dry_run,
    )


def _failure(stderr: str) -> Err[ProcessError]:
    return Err(ProcessError(command=("gh",), returncode=1, stdout="", stderr=stderr))


class TestCreate:
    def test_builds_gh_command(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = RecordingRun(Ok("https://github.com/bitnami/charts/pull/7\n"))
        monkeypatch.setattr(pr_mod, "run_process", fake)

        result = _client(tmp_path).create(
            base_branch="main",
            branch="autoupdate-main-app-1.1.0",
            title="title",
            body="body",
            label="verify",
            reviewers=["alice", "bob"],
        )

        assert result == Ok("https://github.com/bitnami/charts/pull/7")
        call = fake.calls[0]
        cmd = call["cmd"]
        assert cmd[:3] == ["gh", "pr", "create"]
        assert cmd[cmd.index("--repo") + 1] == "bitnami/charts"
        assert cmd[cmd.index("--base") + 1] == "main"
        assert cmd[cmd.index("--head") + 1] == "bot:autoupdate-main-app-1.1.0"
        assert cmd[cmd.index("--label") + 1] == "verify"
        assert cmd[cmd.index("--reviewer") + 1] == "alice,bob"
        assert call["env"]["GH_TOKEN"] == "s3cret"
        assert call["timeout"] == pr_mod.GH_TIMEOUT_SECONDS

    def test_omits_empty_label_and_reviewers(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake = RecordingRun(Ok("https://github.com/bitnami/charts/pull/8"))
        monkeypatch.setattr(pr_mod, "run_process", fake)

        _client(tmp_path).create(
            base_branch="main", branch="b", title="t", body="b", label=None, reviewers=[]
        )

        cmd = fake.calls[0]["cmd"]
        assert "--label" not in cmd
        assert "--reviewer" not in cmd

    def test_url_is_last_line(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        output = "Creating pull request for bot:b into main\n\nhttps://github.com/x/y/pull/1\n"
        monkeypatch.setattr(pr_mod, "run_process", RecordingRun(Ok(output)))

        result = _client(tmp_path).create(
            base_branch="main", branch="b", title="t", body="b", label=None, reviewers=[]
        )

        assert result == Ok("https://github.com/x/y/pull/1")

    def test_unexpected_output(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(pr_mod, "run_process", RecordingRun(Ok("something else")))

        result = _client(tmp_path).create(
            base_branch="main", branch="b", title="t", body="b", label=None, reviewers=[]
        )

        assert isinstance(result, Err)
        assert result.error.hint == "something else"

    def test_gh_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(pr_mod, "run_process", RecordingRun(_failure("HTTP 422\n")))

        result = _client(tmp_path).create(
            base_branch="main", branch="b", title="t", body="b", label=None, reviewers=[]
        )

        assert isinstance(result, Err)
        assert result.error.message == "failed to create PR for b"
        assert result.error.hint == "HTTP 422"

    def test_dry_run_does_not_call_gh(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake = RecordingRun()
        monkeypatch.setattr(pr_mod, "run_process", fake)

        result = _client(tmp_path, dry_run=True).create(
            base_branch="main", branch="b", title="t", body="b", label=None, reviewers=[]
        )

        assert result == Ok("(dry-run)")
        assert fake.calls == []


class TestFindOpen:
    def test_matches_head_owner(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        payload = [
            {"url": "https://github.com/x/y/pull/1", "headRepositoryOwner": {"login": "other"}},
            {"url": "https://github.com/x/y/pull/2", "headRepositoryOwner": {"login": "Bot"}},
        ]
        fake = RecordingRun(Ok(json.dumps(payload)))
        monkeypatch.setattr(pr_mod, "run_process", fake)

        result = _client(tmp_path).find_open("autoupdate-main-app-1.1.0")

        assert result == Ok("https://github.com/x/y/pull/2")
        cmd = fake.calls[0]["cmd"]
        assert cmd[:3] == ["gh", "pr", "list"]
        assert cmd[cmd.index("--head") + 1] == "autoupdate-main-app-1.1.0"
        assert cmd[cmd.index("--state") + 1] == "open"

    def test_none_open(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(pr_mod, "run_process", RecordingRun(Ok("[]")))
        assert _client(tmp_path).find_open("b") == Ok(None)

    def test_invalid_json(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(pr_mod, "run_process", RecordingRun(Ok("{not json")))
        result = _client(tmp_path).find_open("b")
        assert isinstance(result, Err)
        assert "invalid JSON" in result.error.message

    def test_unexpected_payload(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(pr_mod, "run_process", RecordingRun(Ok('{"url": "x"}')))
        assert isinstance(_client(tmp_path).find_open("b"), Err)

    def test_gh_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(pr_mod, "run_process", RecordingRun(_failure("auth required")))
        result = _client(tmp_path).find_open("b")
        assert isinstance(result, Err)
        assert result.error.hint == "auth required"


class TestReadMaintainers:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_maintainers(tmp_path / "MAINTAINERS") == Ok([])
        assert read_maintainers(None) == Ok([])

    def test_parses_handles(self, tmp_path: Path) -> None:
        path = tmp_path / "MAINTAINERS"
        path.write_text(
            "# chart maintainers\n@alice\n\nbob  # backup\n@alice\n",
            encoding="utf-8",
        )
        assert read_maintainers(path) == Ok(["alice", "bob"])

    def test_unreadable_file_is_an_error(self, tmp_path: Path) -> None:
        result = read_maintainers(tmp_path)

        assert isinstance(result, Err)
        assert result.error.path == tmp_path
        assert result.error.reason.startswith("cannot read maintainers")

    def test_undecodable_file_is_an_error(self, tmp_path: Path) -> None:
        path = tmp_path / "MAINTAINERS"
        path.write_bytes(b"\xff\xfe\x00alice\n")

        assert isinstance(read_maintainers(path), Err)
