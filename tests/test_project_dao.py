# Integration tests for ProjectDao against a migrated SQLite file
from __future__ import annotations

import sqlite3
from decimal import Decimal
from pathlib import Path

import pytest

from diy_projects.models.dao import ProjectDao
from diy_projects.models.entities import Category, Material, Project, Step
from diy_projects.models.errors import DbError, InvalidArgumentError
from diy_projects.repositories.db import Database

from conftest import count_rows

ALL_TABLES = ("project", "material", "step", "category", "project_category")


def _project(name: str, *categories: str, **kw) -> Project:
    return Project(id=None, name=name, categories=tuple(Category(id=None, name=c) for c in categories), **kw)


# ---------- insert / fetch ----------

def test_insert_assigns_ids_to_project_and_children(dao: ProjectDao, birdhouse: Project):
    stored = dao.insert_project(birdhouse)

    assert stored.id is not None
    assert birdhouse.id is None  # input value untouched
    assert all(m.id is not None and m.project_id == stored.id for m in stored.materials)
    assert [s.order for s in stored.steps] == [1, 2]
    assert all(s.id is not None and s.project_id == stored.id for s in stored.steps)
    assert stored.categories[0].id is not None


def test_birdhouse_round_trip(dao: ProjectDao, birdhouse: Project):
    stored = dao.insert_project(birdhouse)
    fetched = dao.fetch_project_by_id(stored.id)

    assert fetched == stored
    assert (fetched.name, fetched.estimated_hours, fetched.actual_hours, fetched.difficulty, fetched.notes) == (
        "Birdhouse", Decimal("3.50"), None, 2, None,
    )
    assert len(fetched.materials) == 1
    assert fetched.materials[0].cost == Decimal("5.00")
    assert str(fetched.materials[0].cost) == "5.00"
    assert fetched.materials[0].num_required == 4
    assert [(s.text, s.order) for s in fetched.steps] == [("Cut wood", 1), ("Assemble", 2)]
    assert [c.name for c in fetched.categories] == ["Woodworking"]
    assert fetched.categories[0].id == stored.categories[0].id


def test_user_supplied_step_order_is_ignored(dao: ProjectDao):
    project = Project(
        id=None, name="Shelf",
        steps=(Step(id=None, text="Sand", order=7), Step(id=None, text="Paint", order=3), Step(id=None, text="Hang", order=1)),
    )
    fetched = dao.fetch_project_by_id(dao.insert_project(project).id)
    assert [(s.text, s.order) for s in fetched.steps] == [("Sand", 1), ("Paint", 2), ("Hang", 3)]


def test_decimal_inputs_are_stored_rounded(dao: ProjectDao, db: Database):
    stored = dao.insert_project(Project(id=None, name="Lamp", estimated_hours="12.345", actual_hours="0.004"))
    fetched = dao.fetch_project_by_id(stored.id)
    assert fetched.estimated_hours == Decimal("12.35")
    assert fetched.actual_hours == Decimal("0.00")


def test_largest_amounts_round_trip_exactly(dao: ProjectDao):
    stored = dao.insert_project(
        Project(id=None, name="Cabin", estimated_hours="99999.99", actual_hours="-99999.99",
                materials=(Material(id=None, name="Logs", num_required=1, cost="99999.99"),))
    )
    fetched = dao.fetch_project_by_id(stored.id)
    assert fetched.estimated_hours == Decimal("99999.99")
    assert fetched.actual_hours == Decimal("-99999.99")
    assert str(fetched.materials[0].cost) == "99999.99"


def test_insert_rejects_already_stored_project(dao: ProjectDao, db: Database, birdhouse: Project):
    stored = dao.insert_project(birdhouse)
    with pytest.raises(InvalidArgumentError, match=f"ID={stored.id}"):
        dao.insert_project(stored)
    assert count_rows(db, "project") == 1
    assert count_rows(db, "material") == 1


def test_shared_category_is_stored_once(dao: ProjectDao, db: Database):
    a = dao.insert_project(_project("Radio", "Electronics"))
    b = dao.insert_project(_project("Clock", "Electronics", "Gifts"))

    assert count_rows(db, "category", "category_name = ?", ("Electronics",)) == 1
    assert count_rows(db, "project_category") == 3
    assert a.categories[0].id == b.categories[0].id


def test_repeated_category_in_one_project_links_once(dao: ProjectDao, db: Database):
    stored = dao.insert_project(_project("Radio", "Electronics", "Electronics"))
    assert [c.name for c in stored.categories] == ["Electronics"]
    assert count_rows(db, "project_category", "project_id = ?", (stored.id,)) == 1


class _StaleLookupDao(ProjectDao):
    """First category lookup misses, as if another client created the row just after it."""

    def __init__(self, db):
        super().__init__(db)
        self.stale = True

    def _find_category_id(self, cur, name):
        if self.stale:
            self.stale = False
            return None
        return super()._find_category_id(cur, name)


def test_category_created_by_someone_else_is_reused(dao: ProjectDao, db: Database):
    first = dao.insert_project(_project("Radio", "Electronics"))

    racing = _StaleLookupDao(db)
    second = racing.insert_project(_project("Clock", "Electronics"))

    assert racing.stale is False
    assert second.categories[0].id == first.categories[0].id
    assert count_rows(db, "category") == 1
    assert count_rows(db, "project_category") == 2


def test_fetch_all_is_ordered_and_hydrated(dao: ProjectDao):
    ids = [dao.insert_project(_project(n, "Shared")).id for n in ("A", "B", "C")]
    dao.insert_project(
        Project(id=None, name="D", materials=(Material(id=None, name="Screws"), Material(id=None, name="Glue")))
    )

    projects = dao.fetch_all_projects()
    assert [p.name for p in projects] == ["A", "B", "C", "D"]
    assert [p.id for p in projects][:3] == ids
    assert all(p.categories[0].name == "Shared" for p in projects[:3])
    assert [m.name for m in projects[3].materials] == ["Screws", "Glue"]


def test_fetch_all_on_empty_store(dao: ProjectDao):
    assert dao.fetch_all_projects() == []


def test_fetch_unknown_id_returns_none(dao: ProjectDao):
    assert dao.fetch_project_by_id(12345) is None


def test_fetch_without_id_is_rejected(dao: ProjectDao):
    with pytest.raises(InvalidArgumentError):
        dao.fetch_project_by_id(None)


# ---------- rollback ----------

def test_failure_while_linking_categories_rolls_back_everything(dao: ProjectDao, db: Database, birdhouse: Project):
    with db.session() as conn:
        conn.execute(
            """
            CREATE TRIGGER fail_link BEFORE INSERT ON project_category
            BEGIN
                SELECT RAISE(ABORT, 'injected link failure');
            END;
            """
        )

    with pytest.raises(DbError) as exc_info:
        dao.insert_project(birdhouse)

    assert isinstance(exc_info.value.__cause__, sqlite3.Error)
    assert exc_info.value.cause is exc_info.value.__cause__
    assert "injected link failure" in str(exc_info.value)
    for table in ALL_TABLES:
        assert count_rows(db, table) == 0, table


def test_failed_insert_leaves_earlier_projects_alone(dao: ProjectDao, db: Database, birdhouse: Project):
    kept = dao.insert_project(birdhouse)
    with db.session() as conn:
        conn.execute("CREATE TRIGGER fail_step BEFORE INSERT ON step BEGIN SELECT RAISE(ABORT, 'no steps'); END;")

    with pytest.raises(DbError):
        dao.insert_project(_project("Doomed", "Woodworking").add_step(Step(id=None, text="x")))

    assert [p.id for p in dao.fetch_all_projects()] == [kept.id]
    assert count_rows(db, "category") == 1


def test_unreachable_store_surfaces_db_error(tmp_path: Path):
    # a directory cannot be opened as a database file
    broken = ProjectDao(Database(tmp_path))
    with pytest.raises(DbError) as exc_info:
        broken.fetch_all_projects()
    assert isinstance(exc_info.value.cause, sqlite3.Error)


def test_uncreatable_store_directory_surfaces_db_error(tmp_path: Path):
    blocker = tmp_path / "afile"
    blocker.write_text("not a directory")
    broken = ProjectDao(Database(blocker / "x.db"))
    with pytest.raises(DbError, match="cannot create database directory") as exc_info:
        broken.fetch_all_projects()
    assert isinstance(exc_info.value.cause, sqlite3.OperationalError)
    assert isinstance(exc_info.value.cause.__cause__, OSError)


# ---------- update ----------

def test_update_changes_scalars_only(dao: ProjectDao, birdhouse: Project):
    stored = dao.insert_project(birdhouse)
    changed = stored.with_details(name="Big birdhouse", actual_hours="4.255", difficulty=3, notes="Painted")

    assert dao.update_project(changed.with_children(materials=(), steps=(), categories=())) == 1

    fetched = dao.fetch_project_by_id(stored.id)
    assert (fetched.name, fetched.actual_hours, fetched.difficulty, fetched.notes) == (
        "Big birdhouse", Decimal("4.26"), 3, "Painted",
    )
    assert fetched.materials == stored.materials
    assert fetched.steps == stored.steps
    assert fetched.categories == stored.categories


def test_update_unknown_id_affects_nothing(dao: ProjectDao, birdhouse: Project):
    stored = dao.insert_project(birdhouse)
    before = dao.fetch_all_projects()

    assert dao.update_project(Project(id=stored.id + 100, name="Ghost")) == 0
    assert dao.fetch_all_projects() == before


def test_update_requires_id(dao: ProjectDao):
    with pytest.raises(InvalidArgumentError):
        dao.update_project(Project(id=None, name="X"))


def test_update_can_replace_children(dao: ProjectDao, db: Database, birdhouse: Project):
    stored = dao.insert_project(birdhouse)
    replacement = stored.with_children(
        materials=(Material(id=None, name="Plywood", num_required=1, cost="12.5"),),
        steps=(Step(id=None, text="Glue"), Step(id=None, text="Clamp"), Step(id=None, text="Wait")),
        categories=(Category(id=None, name="Outdoor"),),
    )

    assert dao.update_project(replacement, replace_children=True) == 1

    fetched = dao.fetch_project_by_id(stored.id)
    assert [(m.name, m.cost) for m in fetched.materials] == [("Plywood", Decimal("12.50"))]
    assert [(s.text, s.order) for s in fetched.steps] == [("Glue", 1), ("Clamp", 2), ("Wait", 3)]
    assert [c.name for c in fetched.categories] == ["Outdoor"]
    # the old category row stays; only the link is gone
    assert count_rows(db, "category") == 2


# ---------- delete ----------

def test_delete_removes_project_and_children(dao: ProjectDao, db: Database, birdhouse: Project):
    stored = dao.insert_project(birdhouse)
    other = dao.insert_project(_project("Feeder", "Woodworking"))

    assert dao.delete_project(stored.id) == 1

    assert dao.fetch_project_by_id(stored.id) is None
    for table in ("material", "step", "project_category"):
        assert count_rows(db, table, "project_id = ?", (stored.id,)) == 0, table
    # shared category and the other project survive
    assert count_rows(db, "category") == 1
    assert dao.fetch_project_by_id(other.id).categories[0].name == "Woodworking"


def test_delete_unknown_id_returns_zero(dao: ProjectDao):
    assert dao.delete_project(999) == 0


def test_delete_requires_id(dao: ProjectDao):
    with pytest.raises(InvalidArgumentError):
        dao.delete_project(None)
