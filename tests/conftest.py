# Rev 0.1.0

"""Pytest fixtures for diyProjects"""
from __future__ import annotations
from decimal import Decimal
from pathlib import Path

import pytest

from diy_projects.models.dao import ProjectDao
from diy_projects.models.entities import Category, Material, Project, Step
from diy_projects.repositories.db import Database
from diy_projects.services.project_service import ProjectService


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch):
    # keep XDG lookups (settings, logs, default DB) out of the real home dir
    for var in ("XDG_DATA_HOME", "XDG_STATE_HOME", "XDG_CONFIG_HOME"):
        monkeypatch.setenv(var, str(tmp_path / "xdg" / var.lower()))
    for var in ("DIYPROJECTS_DB", "DIYPROJECTS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def db(tmp_path: Path) -> Database:
    database = Database(tmp_path / "test.db")
    database.run_migrations()
    return database


@pytest.fixture()
def dao(db: Database) -> ProjectDao:
    return ProjectDao(db)


@pytest.fixture()
def service(dao: ProjectDao) -> ProjectService:
    return ProjectService(dao)


@pytest.fixture()
def birdhouse() -> Project:
    return Project(
        id=None,
        name="Birdhouse",
        estimated_hours=Decimal("3.50"),
        difficulty=2,
        materials=(Material(id=None, name="Wood", num_required=4, cost=Decimal("5.00")),),
        steps=(Step(id=None, text="Cut wood"), Step(id=None, text="Assemble")),
        categories=(Category(id=None, name="Woodworking"),),
    )


def count_rows(db: Database, table: str, where: str = "", params: tuple = ()) -> int:
    with db.session() as conn:
        sql = f"SELECT COUNT(*) FROM {table}" + (f" WHERE {where}" if where else "")
        return conn.execute(sql, params).fetchone()[0]
