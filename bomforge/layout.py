"""Classify the topology of a resolved project."""

from __future__ import annotations

from enum import Enum

from bomforge.exceptions import LayoutError
from bomforge.metadata import ResolvedMetadata


class ProjectLayout(Enum):
    SINGLE_PACKAGE = "single_package"
    WORKSPACE_WITH_ROOT = "workspace_with_root"
    WORKSPACE_VIRTUAL = "workspace_virtual"


def classify_layout(metadata: ResolvedMetadata) -> ProjectLayout:
    """Derive the layout from the resolver root and workspace members.

    Native tools list a single package as the sole member of its own
    implicit workspace, so a lone member equal to the root is a single
    package.
    """
    root = metadata.root_id
    members = metadata.workspace_members

    if root is not None:
        if not members or (len(members) == 1 and members[0] == root):
            return ProjectLayout.SINGLE_PACKAGE
        return ProjectLayout.WORKSPACE_WITH_ROOT
    if members:
        return ProjectLayout.WORKSPACE_VIRTUAL
    raise LayoutError("Invalid project layout: no root package and no workspace members")
