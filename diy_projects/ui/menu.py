# Rev 0.1.0

# diyProjects – console menu
from __future__ import annotations
import sys
from typing import Callable, Dict, List, Optional, TextIO

from ..models.entities import Category, Material, Project, Step
from ..models.errors import InvalidArgumentError, ProjectsError
from ..services.project_service import ProjectService
from ..utils.logging_setup import get_logger
from .parsing import (
    parse_categories,
    parse_decimal,
    parse_difficulty,
    parse_int,
    parse_materials,
    parse_steps,
    parse_text,
    parse_yes,
)

OPERATIONS = [
    "1) Add a project",
    "2) List all projects",
    "3) Update a project",
    "4) Delete a project",
    "5) Select a project",
    "6) Quick-add a project from delimited lists",
    "0) Exit",
]

DONE = "done"


class ProjectsApp:
    """
    Menu loop over ProjectService. Reads with `input_fn` and writes to `out`
    so tests can drive it with scripted lines.
    """

    def __init__(
        self,
        service: ProjectService,
        *,
        input_fn: Callable[[str], str] = input,
        out: Optional[TextIO] = None,
    ):
        self._service = service
        self._input = input_fn
        self._out = out or sys.stdout
        self._log = get_logger("ProjectsApp")
        self._handlers: Dict[int, Callable[[], None]] = {
            1: self.create_project,
            2: self.list_projects,
            3: self.update_project,
            4: self.delete_project,
            5: self.select_project,
            6: self.quick_add_project,
        }

    # ---------- loop ----------

    def run(self) -> int:
        while True:
            try:
                selection = self._get_user_selection()
            except EOFError:
                selection = 0
            except InvalidArgumentError as e:
                self._print(f"\nError: {e} Try again.")
                continue

            if selection in (None, 0):
                self._print("Exiting the application. Goodbye!")
                return 0

            handler = self._handlers.get(selection)
            if handler is None:
                self._print(f"\n{selection} is not a valid selection. Try again.")
                continue
            try:
                handler()
            except EOFError:
                self._print("Exiting the application. Goodbye!")
                return 0
            except ProjectsError as e:
                self._log.warning("Selection %s failed: %s", selection, e)
                self._print(f"\nError: {e} Try again.")

    def _get_user_selection(self) -> Optional[int]:
        self._print("\nThese are the available selections. Press the Enter key to quit:")
        for line in OPERATIONS:
            self._print(f"  {line}")
        return parse_int(self._read("Enter a menu selection"), "menu selection")

    # ---------- prompts ----------

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)

    def _read(self, prompt: str) -> Optional[str]:
        return parse_text(self._input(f"{prompt}: "))

    def _ask(self, prompt: str, parser: Callable[[Optional[str]], object], *, required: bool = False):
        """Reprompt until `parser` accepts the input (and it is non-empty when required)."""
        while True:
            raw = self._read(prompt)
            try:
                value = parser(raw)
            except InvalidArgumentError as e:
                self._print(f"Error: {e}")
                continue
            if value is None and required:
                self._print("A value is required.")
                continue
            return value

    def _ask_project_id(self, prompt: str) -> Optional[int]:
        return self._ask(prompt, lambda raw: parse_int(raw, "project ID"))

    # ---------- operations ----------

    def create_project(self) -> None:
        project = self._project_details_input()
        for material in self._materials_input():
            project = project.add_material(material)
        for step in self._steps_input():
            project = project.add_step(step)
        for category in self._categories_input():
            project = project.add_category(category)

        db_project = self._service.add_project(project)
        self._print(f"You have successfully created project: {db_project}")

    def quick_add_project(self) -> None:
        project = self._project_details_input()
        materials = parse_materials(self._read("Enter materials as name:number:cost; ..."))
        steps = parse_steps(self._read("Enter steps separated by ';'"))
        categories = parse_categories(self._read("Enter categories separated by ','"))

        errors = materials.errors + steps.errors + categories.errors
        if errors:
            self._print("Some entries could not be read:")
            for err in errors:
                self._print(f"  {err}")
            if not parse_yes(self._read("Continue without them (y/n)?")):
                self._print("Project not created.")
                return

        project = project.with_children(
            materials=materials.records, steps=steps.records, categories=categories.records
        )
        db_project = self._service.add_project(project)
        self._print(f"You have successfully created project: {db_project}")

    def _project_details_input(self) -> Project:
        name = self._ask("Enter the project name", parse_text, required=True)
        estimated_hours = self._ask("Enter the estimated hours", lambda r: parse_decimal(r, "estimated hours"))
        actual_hours = self._ask("Enter the actual hours", lambda r: parse_decimal(r, "actual hours"))
        difficulty = self._ask("Enter the project difficulty (1-5)", parse_difficulty)
        notes = self._read("Enter the project notes")
        return Project(
            id=None,
            name=name,
            estimated_hours=estimated_hours,
            actual_hours=actual_hours,
            difficulty=difficulty,
            notes=notes,
        )

    def _materials_input(self) -> List[Material]:
        materials: List[Material] = []
        while True:
            name = self._read(f"Enter the material name (or type '{DONE}' to finish)")
            if name is None or name.lower() == DONE:
                return materials
            num_required = self._ask(
                f'Enter the number required for "{name}"',
                lambda r: parse_int(r, "number required"),
                required=True,
            )
            cost = self._ask(f'Enter the cost for "{name}"', lambda r: parse_decimal(r, "cost"), required=True)
            try:
                material = Material(id=None, name=name, num_required=num_required, cost=cost)
            except InvalidArgumentError as e:
                self._print(f"Error: {e}")
                continue
            materials.append(material)
            self._print(f"Material added: {material}")

    def _steps_input(self) -> List[Step]:
        steps: List[Step] = []
        while True:
            text = self._read(f"Enter step description (or type '{DONE}' to finish)")
            if text is None or text.lower() == DONE:
                return steps
            entered = self._ask("Enter the order for this step", lambda r: parse_int(r, "step order"))
            steps.append(Step(id=None, text=text))
            position = len(steps)
            if entered is not None and entered != position:
                self._print(f"Steps are kept in the order entered; this will be step {position}.")
            self._print(f"Step added: {text}")

    def _categories_input(self) -> List[Category]:
        categories: List[Category] = []
        while True:
            name = self._read(f"Enter category name (or type '{DONE}' to finish)")
            if name is None or name.lower() == DONE:
                return categories
            category = Category(id=None, name=name)
            categories.append(category)
            self._print(f"Category added: {category}")

    def list_projects(self) -> None:
        projects = self._service.fetch_all_projects()
        self._print("\nProjects:")
        if not projects:
            self._print("  (none)")
        for project in projects:
            self._print(f"  {project.id}: {project.name}")

    def select_project(self) -> None:
        self.list_projects()
        project_id = self._ask_project_id("Enter a project ID to view details")
        if project_id is None:
            self._print("You need to enter a project ID.")
            return
        project = self._service.fetch_project_by_id(project_id)
        self._print("\nProject Details:")
        self._print(str(project))

    def update_project(self) -> None:
        self.list_projects()
        project_id = self._ask_project_id("Enter the project ID to update")
        if project_id is None:
            self._print("No project selected. Returning to main menu.")
            return
        project = self._service.fetch_project_by_id(project_id)

        changes = {}
        name = self._read(f"Enter new project name ({project.name})")
        if name is not None:
            changes["name"] = name
        for key, label, parser in (
            ("estimated_hours", "estimated hours", lambda r: parse_decimal(r, "estimated hours")),
            ("actual_hours", "actual hours", lambda r: parse_decimal(r, "actual hours")),
            ("difficulty", "difficulty (1-5)", parse_difficulty),
        ):
            raw = self._read(f"Enter new {label} ({getattr(project, key)})")
            if raw is None:
                continue
            try:
                changes[key] = parser(raw)
            except InvalidArgumentError as e:
                self._print(f"{e} Keeping existing value.")
        notes = self._read(f"Enter new project notes ({project.notes})")
        if notes is not None:
            changes["notes"] = notes

        updated = project.with_details(**changes)
        self._service.modify_project_details(updated)
        self._print(f"Project updated successfully: {updated}")

    def delete_project(self) -> None:
        self.list_projects()
        project_id = self._ask_project_id("Enter the project ID to delete")
        if project_id is None:
            self._print("No project selected. Returning to main menu.")
            return
        if not parse_yes(self._read(f"Are you sure you want to delete project with ID {project_id} (y/n)?")):
            self._print("Deletion cancelled.")
            return
        self._service.remove_project(project_id)
        self._print(f"Project with ID {project_id} has been successfully deleted.")
