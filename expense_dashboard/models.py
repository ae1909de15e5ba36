"""Domain records read from and written to the hosted store.

Rows arrive as JSON objects; the ``from_row`` constructors map store
column names onto the dataclasses used everywhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .config import INCOME_CATEGORY_LABEL

Amount = Union[int, float, str, None]


def is_income_category(name: Optional[str]) -> bool:
    """True for the income category, ignoring case and surrounding spaces."""
    return (name or "").strip().lower() == INCOME_CATEGORY_LABEL


@dataclass(frozen=True)
class Category:
    id: int
    name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Category":
        return cls(id=int(row["id"]), name=str(row.get("category") or ""))


def normalize_category(value: Any) -> Optional[Category]:
    """Fold an embedded category join into one optional :class:`Category`.

    The store may hand back the joined row as an object, a list holding one
    object, an empty list or null depending on how it resolves the join
    cardinality.
    """
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if isinstance(value, Category):
        return value
    if isinstance(value, Mapping) and value.get("id") is not None:
        return Category.from_row(value)
    return None


@dataclass(frozen=True)
class Expense:
    id: int
    item: str
    price: Amount
    category_id: Optional[int]
    tag: Optional[str] = None
    owner: Optional[str] = None
    date: Optional[str] = None
    category: Optional[Category] = None

    @property
    def category_name(self) -> Optional[str]:
        if self.category is None or not self.category.name:
            return None
        return self.category.name

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Expense":
        category_id = row.get("category_id")
        return cls(
            id=int(row["id"]),
            item=str(row.get("item") or ""),
            price=row.get("price"),
            category_id=int(category_id) if category_id is not None else None,
            tag=row.get("tag"),
            owner=row.get("user_id"),
            date=row.get("date"),
            category=normalize_category(row.get("category")),
        )


@dataclass(frozen=True)
class BudgetEntry:
    id: Optional[int]
    category_id: int
    year: int
    month: int
    amount: Amount
    owner: Optional[str] = None
    category: Optional[Category] = None

    @property
    def category_name(self) -> Optional[str]:
        if self.category is None or not self.category.name:
            return None
        return self.category.name

    def matches(self, category_id: int, year: int, month: int) -> bool:
        return self.category_id == category_id and self.year == year and self.month == month

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BudgetEntry":
        entry_id = row.get("id")
        return cls(
            id=int(entry_id) if entry_id is not None else None,
            category_id=int(row["category_id"]),
            year=int(row["year"]),
            month=int(row["month"]),
            amount=row.get("budget"),
            owner=row.get("user_id"),
            category=normalize_category(row.get("category")),
        )

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "category_id": self.category_id,
            "budget": self.amount,
            "year": self.year,
            "month": self.month,
        }
        if self.owner is not None:
            row["user_id"] = self.owner
        return row
