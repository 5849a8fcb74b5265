# Rev 0.1.0
"""
Value records for the project schema (project, material, step, category).

Records are frozen. A Project owns its children as tuples and is grown with
add_material/add_step/add_category, each of which returns a new Project.
Identifiers stay None until the DAO stores the row.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable, Optional

from .values import check_difficulty, optional_text, require_text, to_int, to_money
from .errors import InvalidArgumentError


def _set(obj, name: str, value) -> None:
    object.__setattr__(obj, name, value)


@dataclass(frozen=True)
class Material:
    id: int | None
    name: str
    num_required: int = 0
    cost: Decimal = Decimal("0.00")
    project_id: Optional[int] = None

    def __post_init__(self):
        _set(self, "name", require_text(self.name, "Material name"))
        num = to_int(self.num_required, "number required")
        if num is None:
            num = 0
        if num < 0:
            raise InvalidArgumentError("Number required cannot be negative.")
        _set(self, "num_required", num)
        cost = to_money(self.cost, "cost")
        _set(self, "cost", Decimal("0.00") if cost is None else cost)

    def __str__(self) -> str:
        return f"ID={self.id}, materialName={self.name}, numRequired={self.num_required}, cost={self.cost}"


@dataclass(frozen=True)
class Step:
    id: int | None
    text: str
    order: Optional[int] = None     # positional; assigned by the DAO on insert
    project_id: Optional[int] = None

    def __post_init__(self):
        _set(self, "text", require_text(self.text, "Step text"))
        order = to_int(self.order, "step order")
        if order is not None and order < 1:
            raise InvalidArgumentError("Step order must be a positive number.")
        _set(self, "order", order)

    def __str__(self) -> str:
        return f"ID={self.id}, stepText={self.text}, stepOrder={self.order}"


@dataclass(frozen=True)
class Category:
    id: int | None
    name: str

    def __post_init__(self):
        _set(self, "name", require_text(self.name, "Category name"))

    def __str__(self) -> str:
        return f"Category [ID={self.id}, Name={self.name}]"


@dataclass(frozen=True)
class Project:
    id: int | None
    name: str
    estimated_hours: Optional[Decimal] = None
    actual_hours: Optional[Decimal] = None
    difficulty: Optional[int] = None     # 1..5 or None, never 0 for "unset"
    notes: Optional[str] = None
    materials: tuple[Material, ...] = field(default=())
    steps: tuple[Step, ...] = field(default=())
    categories: tuple[Category, ...] = field(default=())

    def __post_init__(self):
        _set(self, "name", require_text(self.name, "Project name"))
        _set(self, "estimated_hours", to_money(self.estimated_hours, "estimated hours"))
        _set(self, "actual_hours", to_money(self.actual_hours, "actual hours"))
        _set(self, "difficulty", check_difficulty(self.difficulty))
        _set(self, "notes", optional_text(self.notes))
        _set(self, "materials", tuple(self.materials))
        _set(self, "steps", tuple(self.steps))
        _set(self, "categories", tuple(self.categories))

    # ---------- aggregate growth ----------

    def add_material(self, material: Material) -> "Project":
        return replace(self, materials=self.materials + (material,))

    def add_step(self, step: Step) -> "Project":
        return replace(self, steps=self.steps + (step,))

    def add_category(self, category: Category) -> "Project":
        return replace(self, categories=self.categories + (category,))

    def with_children(
        self,
        materials: Iterable[Material] | None = None,
        steps: Iterable[Step] | None = None,
        categories: Iterable[Category] | None = None,
    ) -> "Project":
        changes = {}
        if materials is not None:
            changes["materials"] = tuple(materials)
        if steps is not None:
            changes["steps"] = tuple(steps)
        if categories is not None:
            changes["categories"] = tuple(categories)
        return replace(self, **changes)

    def with_details(self, **changes) -> "Project":
        """Copy with scalar fields replaced; children and id are kept."""
        allowed = {"name", "estimated_hours", "actual_hours", "difficulty", "notes"}
        unknown = set(changes) - allowed
        if unknown:
            raise InvalidArgumentError(f"Unknown project field(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def __str__(self) -> str:
        lines = [
            "",
            f"   ID={self.id}",
            f"   Name={self.name}",
            f"   Estimated Hours={self.estimated_hours}",
            f"   Actual Hours={self.actual_hours}",
            f"   Difficulty={self.difficulty}",
            f"   Notes={self.notes}",
            "   Materials:",
        ]
        lines += [f"      {m}" for m in self.materials]
        lines.append("   Steps:")
        lines += [f"      {s}" for s in self.steps]
        lines.append("   Categories:")
        lines += [f"      {c}" for c in self.categories]
        return "\n".join(lines)
