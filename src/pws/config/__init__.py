"""Configuration for the workspace core."""

from .settings import Settings, settings  # noqa: F401
