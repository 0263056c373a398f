"""autobump: keep container image tags in a manifest up to date via pull requests."""

__version__ = "0.1.0"
