"""Expense aggregation for the overview page.

Turns the loaded expense, category and budget rows for the selected period
into the numbers the dashboard shows: income/expense/net totals, totals
per category, budgets per category and how much of each budget is used.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .config import UNCATEGORIZED_LABEL
from .formatting import format_currency, format_date, to_number
from .models import BudgetEntry, Category, Expense, is_income_category

# Category bars fill completely at twice the budget
BAR_SCALE_PERCENT = 200.0

FRAME_COLUMNS = ["id", "Item", "Amount", "Category", "Tag", "Date"]


@dataclass(frozen=True)
class Summary:
    income: float
    expenses_total: float
    net: float
    count: int


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    total: float


@dataclass(frozen=True)
class CategoryUtilization:
    name: str
    total: float
    budget: float
    percent_used: float
    fill_width: float
    is_over: bool
    is_income: bool


@dataclass(frozen=True)
class BudgetSummary:
    spent_total: float
    budget_total: float
    percent_used: float

    @property
    def clamped_percent(self) -> float:
        return min(self.percent_used, 100.0)

    @property
    def is_over(self) -> bool:
        return self.percent_used > 100


def percent_of(total: float, budget: float) -> float:
    return (total / budget) * 100 if budget > 0 else 0.0


class ExpenseAnalytics:
    """Aggregations over one period's expenses and the year's budgets."""

    def __init__(
        self,
        expenses: Sequence[Expense],
        categories: Sequence[Category] = (),
        budgets: Sequence[BudgetEntry] = (),
        year: Optional[int] = None,
        month: Optional[int] = None,
    ):
        self.expenses = list(expenses)
        self.categories = list(categories)
        self.budgets = list(budgets)
        self.year = year
        self.month = month
        self._prepare_data()

    def _prepare_data(self) -> None:
        """Build the working frame; unparseable prices count as zero."""
        rows = [
            {
                "id": expense.id,
                "Item": expense.item,
                "Amount": to_number(expense.price),
                "Category": expense.category_name or "",
                "Tag": expense.tag or "",
                "Date": expense.date,
            }
            for expense in self.expenses
        ]
        self.data = pd.DataFrame(rows, columns=FRAME_COLUMNS)
        self.data["Amount"] = pd.to_numeric(self.data["Amount"], errors="coerce").fillna(0.0).astype(float)
        self.data["Category"] = self.data["Category"].fillna("").astype(str)
        self.data["Is Income"] = self.data["Category"].map(is_income_category).astype(bool)

    def summary(self) -> Summary:
        income = float(self.data.loc[self.data["Is Income"], "Amount"].sum())
        expenses_total = float(self.data.loc[~self.data["Is Income"], "Amount"].sum())
        return Summary(
            income=income,
            expenses_total=expenses_total,
            net=income - expenses_total,
            count=len(self.data),
        )

    def category_totals(self) -> List[CategoryTotal]:
        """Totals per category name, largest first.

        Every known category is listed even without expenses. Rows whose
        category could not be resolved are collected under
        ``UNCATEGORIZED_LABEL``. Equal totals keep first-seen order.
        """
        totals: Dict[str, float] = {category.name: 0.0 for category in self.categories}
        labels = self.data["Category"].replace("", UNCATEGORIZED_LABEL)
        grouped = self.data.assign(Label=labels).groupby("Label", sort=False)["Amount"].sum()
        for name, amount in grouped.items():
            totals[name] = totals.get(name, 0.0) + float(amount)

        ordered = sorted(totals.items(), key=lambda item: -item[1])
        return [CategoryTotal(name=name, total=total) for name, total in ordered]

    def _budgets_in_period(self) -> List[BudgetEntry]:
        if self.year is None:
            return []
        return [
            entry
            for entry in self.budgets
            if self.month is None or entry.month == self.month
        ]

    def budget_by_category(self) -> Dict[str, float]:
        """Budget amount per category name for the selected period.

        Whole-year selections add up every month's entry. Without a selected
        year there is nothing to compare against and the mapping is empty.
        """
        if self.year is None:
            return {}
        budgets: Dict[str, float] = {category.name: 0.0 for category in self.categories}
        for entry in self._budgets_in_period():
            name = entry.category_name
            if not name:
                continue
            budgets[name] = budgets.get(name, 0.0) + float(to_number(entry.amount))
        return budgets

    def category_utilization(self) -> List[CategoryUtilization]:
        budgets = self.budget_by_category()
        rows: List[CategoryUtilization] = []
        for item in self.category_totals():
            budget = budgets.get(item.name, 0.0)
            percent_used = percent_of(item.total, budget)
            clamped = min(percent_used, BAR_SCALE_PERCENT)
            rows.append(
                CategoryUtilization(
                    name=item.name,
                    total=item.total,
                    budget=budget,
                    percent_used=percent_used,
                    fill_width=(clamped / BAR_SCALE_PERCENT) * 100,
                    is_over=budget > 0 and percent_used > 100,
                    is_income=is_income_category(item.name),
                )
            )
        return rows

    def budget_summary(self) -> BudgetSummary:
        """Spending against the summed budgets of all expense categories."""
        spent = self.summary().expenses_total
        budget_total = 0.0
        for entry in self._budgets_in_period():
            name = entry.category_name
            if not name or is_income_category(name):
                continue
            budget_total += float(to_number(entry.amount))
        return BudgetSummary(
            spent_total=spent,
            budget_total=budget_total,
            percent_used=percent_of(spent, budget_total),
        )

    def expenses_frame(self) -> pd.DataFrame:
        """Display-ready activity table, newest first as loaded."""
        if self.data.empty:
            return pd.DataFrame(columns=["Dato", "Tag", "Beskrivelse", "Beløp", "Kategori"])
        categories = self.data["Category"].replace("", UNCATEGORIZED_LABEL)
        signs = self.data["Is Income"].map({True: "+", False: "-"})
        amounts = self.data["Amount"].map(format_currency)
        return pd.DataFrame(
            {
                "Dato": self.data["Date"].map(format_date),
                "Tag": self.data["Tag"],
                "Beskrivelse": self.data["Item"],
                "Beløp": signs + amounts,
                "Kategori": categories,
            }
        )
