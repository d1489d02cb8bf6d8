"""Access to the marketplace API: workspace persistence and file uploads."""

from .base import UploadResult, WorkspaceRepository  # noqa: F401
from .client import HttpWorkspaceRepository  # noqa: F401
