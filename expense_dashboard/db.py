"""Data access gateway for the category, expense and budget tables.

Every read and write is scoped to the owning identity (categories are
shared) and returns a :class:`StoreResult`; callers decide how to surface
errors.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional

from .models import BudgetEntry, Category, Expense
from .periods import period_date_range
from .rest_client import Filter, StoreClient, StoreResult

logger = logging.getLogger(__name__)

CATEGORY_TABLE = "category"
EXPENSE_TABLE = "expense"
BUDGET_TABLE = "budget"

CATEGORY_EMBED = "category(id, category)"
CATEGORY_COLUMNS = "id, category"
EXPENSE_COLUMNS = f"id, item, price, category_id, tag, user_id, date, {CATEGORY_EMBED}"
BUDGET_COLUMNS = f"id, category_id, budget, year, month, user_id, {CATEGORY_EMBED}"

# One budget row per owner, category and month
BUDGET_NATURAL_KEY = ("user_id", "category_id", "year", "month")


def _parse_rows(result: StoreResult, parser: Callable[[Any], Any]) -> StoreResult:
    if not result.ok:
        return result
    try:
        return StoreResult.success([parser(row) for row in result.data])
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Unexpected row shape from store: %s", exc)
        return StoreResult.failure(f"Unexpected row shape from store: {exc}")


class ExpenseGateway:
    def __init__(self, client: StoreClient):
        self.client = client

    def list_categories(self) -> StoreResult:
        """All categories ordered by name."""
        result = self.client.select(
            CATEGORY_TABLE,
            CATEGORY_COLUMNS,
            order=[("category", True)],
        )
        return _parse_rows(result, Category.from_row)

    def list_expenses(
        self,
        owner: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> StoreResult:
        """Owner's expenses, newest first, optionally limited to a period.

        A year narrows to that calendar year; a year and month narrow to
        that month's first through last day. A month on its own is ignored.
        """
        filters: List[Filter] = [("user_id", "eq", owner)]
        if year is not None:
            start, end = period_date_range(year, month)
            filters.append(("date", "gte", start))
            filters.append(("date", "lte", end))
        result = self.client.select(
            EXPENSE_TABLE,
            EXPENSE_COLUMNS,
            filters=filters,
            order=[("id", False)],
        )
        return _parse_rows(result, Expense.from_row)

    def list_expense_dates(self, owner: str) -> StoreResult:
        """Date of every expense the owner has, for period discovery."""
        result = self.client.select(
            EXPENSE_TABLE,
            "date",
            filters=[("user_id", "eq", owner)],
        )
        return _parse_rows(result, lambda row: row.get("date"))

    def list_budgets(self, owner: str, year: int) -> StoreResult:
        result = self.client.select(
            BUDGET_TABLE,
            BUDGET_COLUMNS,
            filters=[("user_id", "eq", owner), ("year", "eq", year)],
            order=[("month", True)],
        )
        return _parse_rows(result, BudgetEntry.from_row)

    def find_budget(self, owner: str, category_id: int, year: int, month: int) -> StoreResult:
        """The owner's budget entry for one category and month, or ``None``."""
        result = self.client.select_maybe_single(
            BUDGET_TABLE,
            BUDGET_COLUMNS,
            filters=[
                ("user_id", "eq", owner),
                ("category_id", "eq", category_id),
                ("year", "eq", year),
                ("month", "eq", month),
            ],
        )
        if not result.ok or result.data is None:
            return result
        try:
            return StoreResult.success(BudgetEntry.from_row(result.data))
        except (KeyError, TypeError, ValueError) as exc:
            return StoreResult.failure(f"Unexpected row shape from store: {exc}")

    def upsert_budget(
        self,
        owner: str,
        category_id: int,
        year: int,
        month: int,
        amount: int,
        budgets: Iterable[BudgetEntry] = (),
    ) -> StoreResult:
        """Store a category's budget for one month.

        An entry already present in ``budgets`` is updated by id. Otherwise
        the insert resolves conflicts on the natural key, so the store keeps
        a single row even when two saves race.
        """
        existing = next(
            (
                entry
                for entry in budgets
                if entry.id is not None and entry.matches(category_id, year, month)
            ),
            None,
        )
        if existing is not None:
            result = self.client.update(
                BUDGET_TABLE,
                {"budget": amount},
                filters=[("id", "eq", existing.id), ("user_id", "eq", owner)],
            )
        else:
            entry = BudgetEntry(
                id=None,
                category_id=category_id,
                year=year,
                month=month,
                amount=amount,
                owner=owner,
            )
            result = self.client.insert(
                BUDGET_TABLE,
                entry.to_row(),
                on_conflict=BUDGET_NATURAL_KEY,
            )
        if result.ok:
            logger.info("Saved budget %s for category %s in %s-%02d", amount, category_id, year, month)
        return result

    def insert_expense(
        self,
        owner: str,
        item: str,
        price: int,
        category_id: int,
        tag: Optional[str] = None,
        date: Optional[str] = None,
    ) -> StoreResult:
        payload = {
            "item": item,
            "price": price,
            "category_id": category_id,
            "tag": tag,
            "user_id": owner,
            "date": date,
        }
        result = self.client.insert(EXPENSE_TABLE, payload)
        if result.ok:
            logger.info("Inserted expense %r (%s) in category %s", item, price, category_id)
        return result

    def delete_expense(self, expense_id: int, owner: str) -> StoreResult:
        result = self.client.delete(
            EXPENSE_TABLE,
            filters=[("id", "eq", expense_id), ("user_id", "eq", owner)],
        )
        if result.ok:
            logger.info("Deleted expense %s", expense_id)
        return result
