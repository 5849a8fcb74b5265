# Rev 0.1.0

"""Project service
Thin facade over ProjectDao: checks IDs up front and turns missing rows into
NotFoundError. Store errors (DbError) pass through unchanged.
"""
from __future__ import annotations
from typing import List

from ..models.dao import ProjectDao
from ..models.entities import Project
from ..models.errors import InvalidArgumentError, NotFoundError
from ..models.values import to_int


class ProjectService:
    def __init__(self, dao: ProjectDao):
        self._dao = dao

    @staticmethod
    def _project_id(project_id) -> int:
        pid = to_int(project_id, "project ID")
        if pid is None:
            raise InvalidArgumentError("A project ID is required.")
        return pid

    def add_project(self, project: Project) -> Project:
        return self._dao.insert_project(project)

    def fetch_all_projects(self) -> List[Project]:
        return self._dao.fetch_all_projects()

    def fetch_project_by_id(self, project_id) -> Project:
        pid = self._project_id(project_id)
        project = self._dao.fetch_project_by_id(pid)
        if project is None:
            raise NotFoundError("Project", pid)
        return project

    def update_project(self, project: Project, *, replace_children: bool = False) -> int:
        self._project_id(project.id)
        return self._dao.update_project(project, replace_children=replace_children)

    def delete_project(self, project_id) -> int:
        return self._dao.delete_project(self._project_id(project_id))

    # ---------- strict variants used by the menu ----------

    def modify_project_details(self, project: Project) -> None:
        if self.update_project(project) == 0:
            raise NotFoundError("Project", project.id)

    def remove_project(self, project_id) -> None:
        pid = self._project_id(project_id)
        if self.delete_project(pid) == 0:
            raise NotFoundError("Project", pid)
