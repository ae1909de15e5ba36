"""Budget editing for one category in the selected month.

Opening the editor pre-fills the draft from an existing entry. When the
month has no entry yet, the previous calendar month's budget for the same
category is looked up and offered as a one-click copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .db import ExpenseGateway
from .formatting import month_label, round_half_up, to_number
from .models import BudgetEntry, Category
from .periods import previous_month
from .rest_client import StoreResult

logger = logging.getLogger(__name__)

SELECT_PERIOD_MESSAGE = "Select a year and month to edit budgets."


class BudgetEditError(ValueError):
    """Raised when a budget can't be edited for the current selection."""


@dataclass
class BudgetDraft:
    category: Category
    year: int
    month: int
    value: str = ""
    has_value: bool = False
    previous_label: str = ""
    previous_value: Optional[float] = None

    @property
    def month_label(self) -> str:
        return month_label(self.month)

    def copy_previous(self) -> None:
        if self.previous_value is not None:
            self.value = _format_amount(self.previous_value)


def _format_amount(value: float) -> str:
    number = to_number(value)
    return str(int(number)) if float(number).is_integer() else str(number)


def find_entry(budgets: Iterable[BudgetEntry], category_id: int, year: int, month: int) -> Optional[BudgetEntry]:
    return next((entry for entry in budgets if entry.matches(category_id, year, month)), None)


class BudgetEditor:
    def __init__(self, gateway: ExpenseGateway, owner: str):
        self.gateway = gateway
        self.owner = owner

    def open(
        self,
        category: Category,
        budgets: Sequence[BudgetEntry],
        year: Optional[int],
        month: Optional[int],
    ) -> BudgetDraft:
        """Start editing ``category``'s budget for ``year``/``month``.

        Args:
            category: Category whose budget is edited
            budgets: Entries already loaded for the selected year
            year: Selected year
            month: Selected month

        Returns:
            Draft with the current value, or with a previous-month suggestion

        Raises:
            BudgetEditError: If no year and month are selected
        """
        if year is None or month is None:
            raise BudgetEditError(SELECT_PERIOD_MESSAGE)

        existing = find_entry(budgets, category.id, year, month)
        if existing is not None:
            return BudgetDraft(
                category=category,
                year=year,
                month=month,
                value=_format_amount(existing.amount),
                has_value=True,
            )

        previous_year, previous_month_value = previous_month(year, month)
        draft = BudgetDraft(
            category=category,
            year=year,
            month=month,
            previous_label=f"{month_label(previous_month_value)} {previous_year}",
        )

        previous = find_entry(budgets, category.id, previous_year, previous_month_value)
        # Loaded budgets only cover the selected year
        if previous is None and previous_year != year:
            result = self.gateway.find_budget(self.owner, category.id, previous_year, previous_month_value)
            if result.ok:
                previous = result.data
            else:
                logger.info("Previous budget lookup failed: %s", result.message)

        if previous is not None:
            draft.previous_value = to_number(previous.amount)
        return draft

    def save(self, draft: BudgetDraft, budgets: Sequence[BudgetEntry]) -> StoreResult:
        """Commit the draft; unparseable input is stored as zero."""
        amount = round_half_up(draft.value)
        return self.gateway.upsert_budget(
            self.owner,
            draft.category.id,
            draft.year,
            draft.month,
            amount,
            budgets=budgets,
        )
