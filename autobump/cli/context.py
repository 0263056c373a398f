from __future__ import annotations

import os
from dataclasses import dataclass

import typer

from autobump.core.config import BotConfig, ConfigurationError, ensure_tools_available, load_config
from autobump.core.result import Err
from autobump.output.console import ConsoleProtocol
from autobump.output.errors import print_update_error, update_error_exit_code


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: BotConfig
    upstream_slug: str
    console: ConsoleProtocol


def _fail(error: ConfigurationError, console: ConsoleProtocol) -> typer.Exit:
    print_update_error(error, console)
    return typer.Exit(code=update_error_exit_code(error))


def build_context(console: ConsoleProtocol) -> CLIContext:
    """Validate tools and credentials before anything touches a repository."""

    tools = ensure_tools_available()
    if isinstance(tools, Err):
        raise _fail(tools.error, console)

    config = load_config(os.environ)
    if isinstance(config, Err):
        raise _fail(config.error, console)

    slug = config.value.upstream_slug
    if slug is None:
        url = config.value.upstream_repo_url
        raise _fail(
            ConfigurationError(
                message=f"UPSTREAM_REPO_URL is not a GitHub repository: {url}",
                hint="Use https://github.com/<owner>/<name>.git",
            ),
            console,
        )

    return CLIContext(config=config.value, upstream_slug=slug, console=console)
