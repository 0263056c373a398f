"""Typed bot configuration.

The configuration is read once from the process environment at start-up and
passed explicitly to the components that need it. Nothing below the CLI layer
reads ``os.environ``.

Environment variables:
    UPSTREAM_REPO_URL     repository that receives the pull requests
    DEVELOPMENT_REPO_URL  fork the update branches are pushed to
    GIT_AUTHOR_NAME       commit author name
    GIT_AUTHOR_EMAIL      commit author email
    GITHUB_USER           account owning the fork (required)
    GITHUB_TOKEN          token used by git push and gh (required)
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

from .result import Err, Ok, Result

__all__ = [
    "BotConfig",
    "ConfigurationError",
    "DEFAULT_GIT_AUTHOR_EMAIL",
    "DEFAULT_GIT_AUTHOR_NAME",
    "DEFAULT_UPSTREAM_REPO_URL",
    "REQUIRED_TOOLS",
    "ensure_tools_available",
    "github_slug",
    "load_config",
]

DEFAULT_UPSTREAM_REPO_URL = "https://github.com/bitnami/charts.git"
DEFAULT_GIT_AUTHOR_NAME = "Bitnami Bot"
DEFAULT_GIT_AUTHOR_EMAIL = "bitnami-bot@vmware.com"

REQUIRED_TOOLS: tuple[str, ...] = ("git", "gh")

_GITHUB_URL_RE = re.compile(
    r"^(?:https://(?:[^@/]+@)?github\.com/|git@github\.com:)"
    r"(?P<owner>[\w.-]+)/(?P<name>[\w.-]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True, slots=True)
class ConfigurationError:
    """A required tool or credential is missing."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class BotConfig:
    upstream_repo_url: str
    development_repo_url: str
    git_author_name: str
    git_author_email: str
    github_user: str
    github_token: str

    @property
    def upstream_slug(self) -> str | None:
        """``owner/name`` of the upstream repository, if it is on GitHub."""
        return github_slug(self.upstream_repo_url)

    def authenticated_development_url(self) -> str:
        """Development URL with credentials embedded for ``git push``.

        Non-HTTPS URLs (ssh) are returned unchanged.
        """
        parts = urlsplit(self.development_repo_url)
        if parts.scheme != "https":
            return self.development_repo_url
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        netloc = f"{self.github_user}:{self.github_token}@{host}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))

    def redact(self, text: str) -> str:
        """Remove the token from text that may end up on the console."""
        if not self.github_token:
            return text
        return text.replace(self.github_token, "***")


def github_slug(url: str) -> str | None:
    m = _GITHUB_URL_RE.match(url.strip())
    if m is None:
        return None
    return f"{m.group('owner')}/{m.group('name')}"


def _default_development_url(upstream_url: str, github_user: str) -> str:
    slug = github_slug(upstream_url)
    name = slug.split("/", 1)[1] if slug else "charts"
    return f"https://github.com/{github_user}/{name}.git"


def _env(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config(environ: Mapping[str, str]) -> Result[BotConfig, ConfigurationError]:
    """Build the configuration from an environment mapping.

    Returns:
        Ok(BotConfig) when the credentials are present,
        Err(ConfigurationError) naming the first missing variable otherwise.
    """
    github_user = _env(environ, "GITHUB_USER")
    if github_user is None:
        return Err(
            ConfigurationError(
                message="GITHUB_USER is not set",
                hint="Export GITHUB_USER with the account that owns the development fork.",
            )
        )

    github_token = _env(environ, "GITHUB_TOKEN")
    if github_token is None:
        return Err(
            ConfigurationError(
                message="GITHUB_TOKEN is not set",
                hint="Export GITHUB_TOKEN with a token allowed to push and open pull requests.",
            )
        )

    upstream = _env(environ, "UPSTREAM_REPO_URL") or DEFAULT_UPSTREAM_REPO_URL
    development = _env(environ, "DEVELOPMENT_REPO_URL") or _default_development_url(
        upstream, github_user
    )

    return Ok(
        BotConfig(
            upstream_repo_url=upstream,
            development_repo_url=development,
            git_author_name=_env(environ, "GIT_AUTHOR_NAME") or DEFAULT_GIT_AUTHOR_NAME,
            git_author_email=_env(environ, "GIT_AUTHOR_EMAIL") or DEFAULT_GIT_AUTHOR_EMAIL,
            github_user=github_user,
            github_token=github_token,
        )
    )


def ensure_tools_available(
    tools: tuple[str, ...] = REQUIRED_TOOLS,
) -> Result[None, ConfigurationError]:
    for tool in tools:
        if shutil.which(tool) is None:
            return Err(
                ConfigurationError(
                    message=f"{tool}: missing",
                    hint=f"Install {tool} and make sure it is on PATH.",
                )
            )
    return Ok(None)
