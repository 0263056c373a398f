"""CLI tests using typer's runner."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from autobump import __version__
from autobump.cli import context as context_mod
from autobump.cli.app import app
from autobump.cli.commands import update_cmd
from autobump.core.result import Err, Ok
from autobump.update.errors import VcsOperationError

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ("1.2.3", "1.2.4", "-1"),
        ("1.2", "1.2.0", "0"),
        ("1.10.0", "1.9.9", "1"),
    ],
)
def test_compare(a: str, b: str, expected: str) -> None:
    result = runner.invoke(app, ["compare", a, b])
    assert result.exit_code == 0
    assert result.output.strip() == expected


class TestDecide:
    def test_create(self) -> None:
        result = runner.invoke(app, ["decide", "bitnami/app:1.1.0-r0", "--tracked", "1.0.0-r3"])
        assert result.exit_code == 0
        assert result.output.startswith("create-new:")

    def test_refresh_with_open_branch(self) -> None:
        result = runner.invoke(
            app,
            ["decide", "bitnami/app:1.0.0-r4", "--tracked", "1.0.0-r3", "--branch-exists"],
        )
        assert result.exit_code == 0
        assert result.output.startswith("refresh-existing:")

    def test_not_tracked(self) -> None:
        result = runner.invoke(app, ["decide", "bitnami/app:1.0.0-r4"])
        assert result.exit_code == 0
        assert result.output.startswith("no-op:")

    def test_reject_exits_with_policy_code(self) -> None:
        result = runner.invoke(
            app,
            ["decide", "bitnami/app:2.0.0-r0", "--tracked", "1.9.0-r1", "-b", "release-1.9"],
        )
        assert result.exit_code == 3
        assert "reject-policy" in result.output

    def test_invalid_image(self) -> None:
        result = runner.invoke(app, ["decide", "bitnami/app:latest"])
        assert result.exit_code == 1
        assert "invalid image reference: bitnami/app:latest" in result.output


class TestUpdate:
    @pytest.fixture(autouse=True)
    def _tools(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(context_mod, "ensure_tools_available", lambda: Ok(None))
        monkeypatch.setenv("GITHUB_USER", "bot")
        monkeypatch.setenv("GITHUB_TOKEN", "s3cret")
        monkeypatch.delenv("UPSTREAM_REPO_URL", raising=False)

    def test_invalid_image_is_rejected_before_config(self) -> None:
        result = runner.invoke(app, ["update", "nginx"])
        assert result.exit_code == 1

    def test_missing_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN")
        result = runner.invoke(app, ["update", "bitnami/app:1.1.0-r0"])
        assert result.exit_code == 2

    def test_non_github_upstream(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("UPSTREAM_REPO_URL", "https://gitlab.com/acme/charts.git")
        result = runner.invoke(app, ["update", "bitnami/app:1.1.0-r0"])
        assert result.exit_code == 2

    def test_workspace_failure_exits_with_vcs_code(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        seen: dict[str, object] = {}

        def fail(**kwargs: object) -> Err[VcsOperationError]:
            seen.update(kwargs)
            return Err(VcsOperationError(command="git fetch", message="unreachable"))

        monkeypatch.setattr(update_cmd, "prepare_workspace", fail)

        result = runner.invoke(
            app, ["update", "bitnami/app:1.1.0-r0", "--workdir", str(tmp_path / "work")]
        )

        assert result.exit_code == 4
        assert seen["workdir"] == (tmp_path / "work").resolve()

    def test_unreadable_maintainers_exits_with_io_code(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setattr(update_cmd, "prepare_workspace", lambda **_: Ok(object()))

        result = runner.invoke(
            app,
            [
                "update",
                "bitnami/app:1.1.0-r0",
                "--workdir",
                str(tmp_path / "work"),
                "--maintainers",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 5
        assert "cannot read maintainers" in " ".join(result.output.split())
