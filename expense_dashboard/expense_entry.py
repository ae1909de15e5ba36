"""Validation and submission of a new expense."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional

from .db import ExpenseGateway
from .rest_client import StoreResult

REQUIRED_FIELDS_MESSAGE = "Item and category are required."
INVALID_PRICE_MESSAGE = "Enter a valid price."
SAVED_MESSAGE = "Expense saved."


def today_iso() -> str:
    return date.today().isoformat()


def _parse_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value or "").strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


@dataclass
class ExpenseForm:
    item: str = ""
    price: str = ""
    category_id: Any = None
    tag: str = ""
    date: str = field(default_factory=today_iso)

    def validate(self) -> Optional[str]:
        """Return an error message, or ``None`` when the form can be saved."""
        if not self.item.strip() or _parse_float(self.category_id) is None:
            return REQUIRED_FIELDS_MESSAGE
        if _parse_float(self.price) is None:
            return INVALID_PRICE_MESSAGE
        return None

    def to_payload(self) -> Dict[str, Any]:
        price = _parse_float(self.price) or 0.0
        return {
            "item": self.item.strip(),
            "price": int(math.floor(price + 0.5)),
            "category_id": int(_parse_float(self.category_id) or 0),
            "tag": self.tag.strip() or None,
            "date": self.date or None,
        }

    def reset(self) -> "ExpenseForm":
        """Blank form for the next entry, keeping the chosen category."""
        return ExpenseForm(category_id=self.category_id)


def submit_expense(gateway: ExpenseGateway, owner: str, form: ExpenseForm) -> StoreResult:
    """Validate ``form`` and insert it for ``owner``.

    Validation problems come back as a failed result without calling the
    store.
    """
    problem = form.validate()
    if problem:
        return StoreResult.failure(problem)
    payload = form.to_payload()
    return gateway.insert_expense(owner, **payload)
