"""Projects - named documents and the container that holds them.

A ProjectContainer always holds at least one project and always has a
current one. Projects are immutable values; the container replaces
them wholesale when a name or document changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterator

from outliner.outline.OutlineNode import OutlineDocument, blank_document
from outliner.utilities.ids import IdGenerator, new_id, project_id

logger = logging.getLogger(__name__)

FIRST_PROJECT_NAME = "Project 1"
DEFAULT_PROJECT_NAME = "New Project"


@dataclass(frozen=True)
class Project:
    """A named container holding exactly one outline document.

    Attributes:
        id: Unique project identifier.
        name: User-editable display name (not unique).
        doc: The project's outline document.
    """

    id: str
    name: str
    doc: OutlineDocument


class ProjectContainer:
    """All projects of one running instance, plus the current-project cursor.

    Example:
        >>> container = ProjectContainer()
        >>> pid = container.create_project("Notes")
        >>> container.current_project_id == pid
        True
        >>> container.delete_project(pid)
        True
        >>> container.delete_project(container.current_project_id)
        False
    """

    def __init__(
        self,
        projects: dict[str, Project] | None = None,
        current_project_id: str | None = None,
        generate: IdGenerator = new_id,
        first_name: str = FIRST_PROJECT_NAME,
        default_name: str = DEFAULT_PROJECT_NAME,
    ) -> None:
        """Initialize the container.

        Args:
            projects: Existing projects (e.g. from a snapshot). When empty,
                one blank project named first_name is created.
            current_project_id: The current project. Falls back to the
                first project when missing or unknown.
            generate: Id generator for projects and their documents.
            first_name: Name of the project created for an empty container.
            default_name: Name used by create_project when none is given.
        """
        self._generate = generate
        self.default_name = default_name
        self._projects: dict[str, Project] = dict(projects or {})
        if not self._projects:
            pid = project_id(generate)
            self._projects[pid] = Project(pid, first_name, blank_document(generate))
        if current_project_id not in self._projects:
            current_project_id = next(iter(self._projects))
        self._current_id: str = current_project_id

    @property
    def generate(self) -> IdGenerator:
        """The injected id generator."""
        return self._generate

    @property
    def current_project_id(self) -> str:
        """Id of the current project."""
        return self._current_id

    @property
    def current(self) -> Project:
        """The current project."""
        return self._projects[self._current_id]

    def get(self, pid: str) -> Project | None:
        """Find a project by id."""
        return self._projects.get(pid)

    def iter_projects(self) -> Iterator[Project]:
        """Iterate projects in creation order."""
        yield from self._projects.values()

    def project_count(self) -> int:
        """Return the number of projects."""
        return len(self._projects)

    def __contains__(self, pid: object) -> bool:
        return pid in self._projects

    # ─────────────────────────────────────────────────────────────────────────
    # Project operations
    # ─────────────────────────────────────────────────────────────────────────

    def create_project(self, name: str | None = None) -> str:
        """Create a project with a blank document and make it current.

        Returns:
            The new project id.
        """
        pid = project_id(self._generate)
        name = self.default_name if name is None else name
        self._projects[pid] = Project(pid, name, blank_document(self._generate))
        self._current_id = pid
        logger.debug("created project %s", pid)
        return pid

    def switch_project(self, pid: str) -> str:
        """Make a project current.

        Unknown ids fall back to the first project, so the container is
        never without a current project.

        Returns:
            The id that is now current.
        """
        if pid not in self._projects:
            pid = next(iter(self._projects))
        self._current_id = pid
        return pid

    def rename_project(self, pid: str, name: str) -> bool:
        """Rename a project. Unknown ids are ignored.

        Returns:
            True if a project was renamed.
        """
        project = self._projects.get(pid)
        if project is None:
            return False
        self._projects[pid] = replace(project, name=name)
        return True

    def delete_project(self, pid: str) -> bool:
        """Delete a project, never the last one.

        If the deleted project was current, the first remaining project
        becomes current.

        Returns:
            True if a project was deleted.
        """
        if pid not in self._projects or len(self._projects) <= 1:
            return False
        del self._projects[pid]
        if self._current_id == pid:
            self._current_id = next(iter(self._projects))
        logger.debug("deleted project %s", pid)
        return True

    def replace_document(self, pid: str, doc: OutlineDocument) -> None:
        """Record the next document value of a project."""
        self._projects[pid] = replace(self._projects[pid], doc=doc)


__all__ = [
    "FIRST_PROJECT_NAME",
    "DEFAULT_PROJECT_NAME",
    "Project",
    "ProjectContainer",
]
