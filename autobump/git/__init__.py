"""Git operations on the bot's scratch clone."""

from .repository import GitAuthor, GitError, Repository

__all__ = ["GitAuthor", "GitError", "Repository"]
