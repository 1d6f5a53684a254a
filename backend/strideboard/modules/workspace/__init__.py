"""
Workspace module.

This module handles workspaces, memberships and member roles.
"""

from .models import Membership, Workspace, WorkspaceRole
from .schemas import MemberResponse, WorkspaceCreate, WorkspaceResponse, WorkspaceUpdate

__all__ = [
    "Workspace",
    "Membership",
    "WorkspaceRole",
    "WorkspaceCreate",
    "WorkspaceResponse",
    "WorkspaceUpdate",
    "MemberResponse",
]
