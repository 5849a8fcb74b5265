# diyProjects DAO
# Rev 0.1.0

from __future__ import annotations
import sqlite3
from dataclasses import replace
from typing import Iterable, List, Optional

from ..repositories.db import Database
from ..utils.logging_setup import get_logger
from .entities import Category, Material, Project, Step
from .errors import DbError, InvalidArgumentError
from .values import to_int

PROJECT_TABLE = "project"
MATERIAL_TABLE = "material"
STEP_TABLE = "step"
CATEGORY_TABLE = "category"
PROJECT_CATEGORY_TABLE = "project_category"


def _require_id(project_id, what: str = "project ID") -> int:
    pid = to_int(project_id, what)
    if pid is None:
        raise InvalidArgumentError(f"A {what} is required.")
    return pid


class ProjectDao:
    """
    Direct SQL accessors for the project aggregate.
    Every public call takes its own connection from `db` and closes it;
    mutations run inside one transaction each and roll back as a whole.
    """

    def __init__(self, db: Database):
        self.db = db
        self._log = get_logger("ProjectDao")

    # ---------- insert ----------

    def insert_project(self, project: Project) -> Project:
        """Store the project and all its children; returns a copy carrying every new ID."""
        if project.id is not None:
            raise InvalidArgumentError(
                f"Project already has ID={project.id}; use update_project to change a stored project."
            )
        try:
            with self.db.transaction() as conn:
                cur = conn.cursor()
                cur.execute(
                    f"""
                    INSERT INTO {PROJECT_TABLE}
                        (project_name, estimated_hours, actual_hours, difficulty, notes)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (project.name, project.estimated_hours, project.actual_hours,
                     project.difficulty, project.notes),
                )
                project_id = cur.lastrowid
                stored = replace(
                    project,
                    id=project_id,
                    materials=self._insert_materials(cur, project_id, project.materials),
                    steps=self._insert_steps(cur, project_id, project.steps),
                    categories=self._insert_categories(cur, project_id, project.categories),
                )
        except sqlite3.Error as e:
            self._log.warning("Rolled back insert of project %r: %s", project.name, e)
            raise DbError(f"Error inserting project: {e}", e) from e

        self._log.info(
            "Inserted project %s %r (%d materials, %d steps, %d categories)",
            stored.id, stored.name, len(stored.materials), len(stored.steps), len(stored.categories),
        )
        return stored

    def _insert_materials(self, cur: sqlite3.Cursor, project_id: int, materials: Iterable[Material]) -> tuple:
        out = []
        for m in materials:
            cur.execute(
                f"INSERT INTO {MATERIAL_TABLE} (project_id, material_name, num_required, cost) VALUES (?, ?, ?, ?)",
                (project_id, m.name, m.num_required, m.cost),
            )
            out.append(replace(m, id=cur.lastrowid, project_id=project_id))
        return tuple(out)

    def _insert_steps(self, cur: sqlite3.Cursor, project_id: int, steps: Iterable[Step]) -> tuple:
        # order is positional, whatever the caller put in step.order
        out = []
        for order, s in enumerate(steps, start=1):
            cur.execute(
                f"INSERT INTO {STEP_TABLE} (project_id, step_text, step_order) VALUES (?, ?, ?)",
                (project_id, s.text, order),
            )
            out.append(replace(s, id=cur.lastrowid, order=order, project_id=project_id))
        return tuple(out)

    def _insert_categories(self, cur: sqlite3.Cursor, project_id: int, categories: Iterable[Category]) -> tuple:
        out = []
        seen = set()
        for c in categories:
            if c.name in seen:
                continue
            seen.add(c.name)
            category_id = self._category_id_for(cur, c.name)
            cur.execute(
                f"INSERT INTO {PROJECT_CATEGORY_TABLE} (project_id, category_id) VALUES (?, ?)",
                (project_id, category_id),
            )
            out.append(replace(c, id=category_id))
        return tuple(out)

    def _find_category_id(self, cur: sqlite3.Cursor, name: str) -> Optional[int]:
        row = cur.execute(
            f"SELECT category_id FROM {CATEGORY_TABLE} WHERE category_name = ?", (name,)
        ).fetchone()
        return int(row[0]) if row else None

    def _category_id_for(self, cur: sqlite3.Cursor, name: str) -> int:
        """Reuse the category row for `name`, creating it if needed."""
        category_id = self._find_category_id(cur, name)
        if category_id is not None:
            return category_id
        try:
            cur.execute(f"INSERT INTO {CATEGORY_TABLE} (category_name) VALUES (?)", (name,))
            return cur.lastrowid
        except sqlite3.IntegrityError:
            # another writer created it after our lookup; the failed INSERT
            # only undoes itself, the surrounding transaction stays open
            category_id = self._find_category_id(cur, name)
            if category_id is None:
                raise
            self._log.info("Category %r created concurrently; reusing ID %s", name, category_id)
            return category_id

    # ---------- reads ----------

    def fetch_all_projects(self) -> List[Project]:
        try:
            with self.db.session() as conn:
                rows = conn.execute(
                    f"""
                    SELECT project_id, project_name, estimated_hours, actual_hours, difficulty, notes
                    FROM {PROJECT_TABLE}
                    ORDER BY project_id
                    """
                ).fetchall()
                return [self._hydrate(conn, r) for r in rows]
        except sqlite3.Error as e:
            raise DbError(f"Error fetching all projects: {e}", e) from e

    def fetch_project_by_id(self, project_id) -> Optional[Project]:
        """Hydrated project, or None when no row has this ID."""
        pid = _require_id(project_id)
        try:
            with self.db.session() as conn:
                row = conn.execute(
                    f"""
                    SELECT project_id, project_name, estimated_hours, actual_hours, difficulty, notes
                    FROM {PROJECT_TABLE}
                    WHERE project_id = ?
                    """,
                    (pid,),
                ).fetchone()
                return self._hydrate(conn, row) if row else None
        except sqlite3.Error as e:
            raise DbError(f"Error fetching project {pid}: {e}", e) from e

    def _hydrate(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Project:
        project_id = row["project_id"]
        return Project(
            id=project_id,
            name=row["project_name"],
            estimated_hours=row["estimated_hours"],
            actual_hours=row["actual_hours"],
            difficulty=row["difficulty"],
            notes=row["notes"],
            materials=self._fetch_materials(conn, project_id),
            steps=self._fetch_steps(conn, project_id),
            categories=self._fetch_categories(conn, project_id),
        )

    def _fetch_materials(self, conn: sqlite3.Connection, project_id: int) -> tuple:
        rows = conn.execute(
            f"""
            SELECT material_id, project_id, material_name, num_required, cost
            FROM {MATERIAL_TABLE}
            WHERE project_id = ?
            ORDER BY material_id
            """,
            (project_id,),
        ).fetchall()
        return tuple(
            Material(id=r["material_id"], project_id=r["project_id"], name=r["material_name"],
                     num_required=r["num_required"], cost=r["cost"])
            for r in rows
        )

    def _fetch_steps(self, conn: sqlite3.Connection, project_id: int) -> tuple:
        rows = conn.execute(
            f"""
            SELECT step_id, project_id, step_text, step_order
            FROM {STEP_TABLE}
            WHERE project_id = ?
            ORDER BY step_order, step_id
            """,
            (project_id,),
        ).fetchall()
        return tuple(
            Step(id=r["step_id"], project_id=r["project_id"], text=r["step_text"], order=r["step_order"])
            for r in rows
        )

    def _fetch_categories(self, conn: sqlite3.Connection, project_id: int) -> tuple:
        rows = conn.execute(
            f"""
            SELECT c.category_id, c.category_name
            FROM {CATEGORY_TABLE} c
            JOIN {PROJECT_CATEGORY_TABLE} pc USING (category_id)
            WHERE pc.project_id = ?
            ORDER BY c.category_id
            """,
            (project_id,),
        ).fetchall()
        return tuple(Category(id=r["category_id"], name=r["category_name"]) for r in rows)

    # ---------- update / delete ----------

    def update_project(self, project: Project, *, replace_children: bool = False) -> int:
        """
        Update the scalar columns of one project. Returns rows affected (0 when
        the ID is unknown; the transaction still commits).
        With replace_children=True the materials, steps and category links are
        rewritten from `project` in the same transaction.
        """
        pid = _require_id(project.id)
        try:
            with self.db.transaction() as conn:
                cur = conn.cursor()
                cur.execute(
                    f"""
                    UPDATE {PROJECT_TABLE}
                    SET project_name = ?, estimated_hours = ?, actual_hours = ?, difficulty = ?, notes = ?
                    WHERE project_id = ?
                    """,
                    (project.name, project.estimated_hours, project.actual_hours,
                     project.difficulty, project.notes, pid),
                )
                rows_affected = cur.rowcount
                if rows_affected and replace_children:
                    self._delete_children(cur, pid)
                    self._insert_materials(cur, pid, project.materials)
                    self._insert_steps(cur, pid, project.steps)
                    self._insert_categories(cur, pid, project.categories)
        except sqlite3.Error as e:
            self._log.warning("Rolled back update of project %s: %s", pid, e)
            raise DbError(f"Error updating project: {e}", e) from e

        if rows_affected:
            self._log.info("Updated project %s%s", pid, " (children replaced)" if replace_children else "")
        else:
            self._log.info("Update matched no project with ID %s", pid)
        return rows_affected

    def delete_project(self, project_id) -> int:
        """Delete a project and its materials, steps and category links. Returns rows affected."""
        pid = _require_id(project_id)
        try:
            with self.db.transaction() as conn:
                cur = conn.cursor()
                self._delete_children(cur, pid)
                cur.execute(f"DELETE FROM {PROJECT_TABLE} WHERE project_id = ?", (pid,))
                rows_affected = cur.rowcount
        except sqlite3.Error as e:
            self._log.warning("Rolled back delete of project %s: %s", pid, e)
            raise DbError(f"Error deleting project: {e}", e) from e

        self._log.info("Deleted project %s (%d row(s))", pid, rows_affected)
        return rows_affected

    def _delete_children(self, cur: sqlite3.Cursor, project_id: int) -> None:
        # explicit so the result does not depend on foreign_keys being ON
        for table in (PROJECT_CATEGORY_TABLE, STEP_TABLE, MATERIAL_TABLE):
            cur.execute(f"DELETE FROM {table} WHERE project_id = ?", (project_id,))
