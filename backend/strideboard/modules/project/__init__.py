"""
Project module.

Projects group work items inside a workspace.
"""

from .models import Project

__all__ = ["Project"]
