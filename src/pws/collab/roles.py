"""Role-gated mutation rules for a project workspace.

The workspace has two participants: the client who owns the job and the
professional doing the work. Professionals curate the content (sections
and items); clients react to it; both can comment. The table below is
consulted before an operation is attempted and before the corresponding
control is offered. It is a convenience for the user, the API enforces
the same table on its side.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Union

from pydantic import BaseModel


class UserRole(str, Enum):
    """Possible roles a user can have in a workspace."""

    CLIENT = "client"
    PROFESSIONAL = "professional"


class Operation(str, Enum):
    """Kinds of workspace operation subject to the role table."""

    CREATE_SECTION = "create_section"
    EDIT_SECTION = "edit_section"
    DELETE_SECTION = "delete_section"
    CREATE_ITEM = "create_item"
    DELETE_ITEM = "delete_item"
    REACT = "react"
    COMMENT = "comment"
    VIEW = "view"


_PERMISSIONS: Dict[UserRole, FrozenSet[Operation]] = {
    UserRole.CLIENT: frozenset({Operation.REACT, Operation.COMMENT, Operation.VIEW}),
    UserRole.PROFESSIONAL: frozenset(
        {
            Operation.CREATE_SECTION,
            Operation.EDIT_SECTION,
            Operation.DELETE_SECTION,
            Operation.CREATE_ITEM,
            Operation.DELETE_ITEM,
            Operation.COMMENT,
            Operation.VIEW,
        }
    ),
}


def can_mutate(role: Union[UserRole, str], operation: Union[Operation, str]) -> bool:
    """Return whether ``role`` may perform ``operation``.

    Unknown roles or operations are denied.
    """
    try:
        role = UserRole(role)
        operation = Operation(operation)
    except ValueError:
        return False
    return operation in _PERMISSIONS[role]


class WorkspaceSession(BaseModel):
    """Acting user for one open workspace view."""

    model_config = {"frozen": True}

    role: UserRole
    user_id: str
    user_name: str = ""

    def can(self, operation: Union[Operation, str]) -> bool:
        return can_mutate(self.role, operation)
