# Rev 0.1.0
"""
Text → value parsing for the console menu.
No console IO here; every function is pure and raises InvalidArgumentError
or reports per-entry errors.

Batch formats:
    materials   "Wood:4:5.00; Nails:20:0.05"     (name:number required:cost)
    steps       "Cut wood; Assemble"
    categories  "Woodworking, Outdoor"
"""
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from ..models.entities import Category, Material, Step
from ..models.errors import InvalidArgumentError
from ..models.values import check_difficulty, optional_text, to_int, to_money

T = TypeVar("T")

ENTRY_SEP = ";"
FIELD_SEP = ":"
LIST_SEP = ","


@dataclass
class ParseResult(Generic[T]):
    records: List[T] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_text(raw: Optional[str]) -> Optional[str]:
    return optional_text(raw)


def parse_decimal(raw: Optional[str], field_name: str = "value") -> Optional[Decimal]:
    return to_money(raw, field_name)


def parse_int(raw: Optional[str], field_name: str = "value") -> Optional[int]:
    return to_int(raw, field_name)


def parse_difficulty(raw: Optional[str]) -> Optional[int]:
    return check_difficulty(raw)


def parse_yes(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in {"y", "yes"}


def _entries(raw: Optional[str], sep: str) -> List[str]:
    if not raw:
        return []
    return [e.strip() for e in raw.split(sep) if e.strip()]


def parse_materials(raw: Optional[str]) -> ParseResult[Material]:
    result: ParseResult[Material] = ParseResult()
    for i, entry in enumerate(_entries(raw, ENTRY_SEP), start=1):
        parts = [p.strip() for p in entry.split(FIELD_SEP)]
        if len(parts) != 3:
            result.errors.append(f"Material {i} ('{entry}'): expected name{FIELD_SEP}number{FIELD_SEP}cost.")
            continue
        name, num, cost = parts
        try:
            result.records.append(Material(id=None, name=name, num_required=num, cost=cost))
        except InvalidArgumentError as e:
            result.errors.append(f"Material {i} ('{entry}'): {e}")
    return result


def parse_steps(raw: Optional[str]) -> ParseResult[Step]:
    result: ParseResult[Step] = ParseResult()
    for i, entry in enumerate(_entries(raw, ENTRY_SEP), start=1):
        try:
            result.records.append(Step(id=None, text=entry))
        except InvalidArgumentError as e:
            result.errors.append(f"Step {i} ('{entry}'): {e}")
    return result


def parse_categories(raw: Optional[str]) -> ParseResult[Category]:
    result: ParseResult[Category] = ParseResult()
    seen = set()
    for entry in _entries(raw, LIST_SEP):
        if entry in seen:
            continue
        seen.add(entry)
        result.records.append(Category(id=None, name=entry))
    return result
