"""Collaborative workspace management.

This package holds the in-memory model of one project's workspace,
the role table deciding who may change what, and the reconciliation
functions that fold authoritative API responses into local state.
"""

from .roles import Operation, UserRole, WorkspaceSession, can_mutate  # noqa: F401
from .workspace import Notification, WorkspaceStateManager  # noqa: F401
