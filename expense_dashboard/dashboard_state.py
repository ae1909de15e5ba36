"""View model behind the overview page.

One :class:`DashboardController` lives in the Streamlit session per
signed-in owner. Widgets call its methods; :meth:`DashboardController.sync`
then reloads whatever data depends on inputs that changed, much like an
effect with a dependency list. Loads carry request generations so a result
that arrives after a newer load started (or after a reset) is dropped.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from .analytics import ExpenseAnalytics
from .budget_editor import BudgetDraft, BudgetEditError, BudgetEditor
from .db import ExpenseGateway
from .generations import RequestGenerations
from .models import BudgetEntry, Category, Expense
from .periods import AvailablePeriods, PeriodNavigator, PeriodSelection

logger = logging.getLogger(__name__)

META = "meta"
CATEGORIES = "categories"
BUDGETS = "budgets"
EXPENSES = "expenses"


class DashboardController:
    def __init__(self, gateway: ExpenseGateway, owner: str, today: Optional[date] = None):
        self.gateway = gateway
        self.owner = owner
        self.navigator = PeriodNavigator(today=today)
        self.editor = BudgetEditor(gateway, owner)
        self.generations = RequestGenerations()

        self.categories: List[Category] = []
        self.expenses: List[Expense] = []
        self.budgets: List[BudgetEntry] = []
        self.loading = True
        self.status: Optional[str] = None
        self.budget_status: Optional[str] = None

        self.pending_delete: Optional[Expense] = None
        self.deleting_id: Optional[int] = None

        self.draft: Optional[BudgetDraft] = None
        self.budget_saving = False

        # Inputs each loader last ran with
        self._loaded: Dict[str, Any] = {}

    @property
    def selection(self) -> PeriodSelection:
        return self.navigator.selection

    # Loading

    def sync(self) -> None:
        """Run every load whose inputs changed since it last ran."""
        if META not in self._loaded:
            self.load_expense_meta()
        if CATEGORIES not in self._loaded:
            self.load_categories()
        selection = self.selection
        if selection.year is not None and self._loaded.get(BUDGETS) != selection.year:
            self.load_budgets(selection.year)
        if self._loaded.get(EXPENSES) != selection:
            self.load_expenses()

    def mark_stale(self) -> None:
        """Force expenses and their periods to reload on the next sync."""
        self._loaded.pop(META, None)
        self._loaded.pop(EXPENSES, None)

    def reset(self) -> None:
        """Drop everything loaded and orphan in-flight loads."""
        self.generations.invalidate()
        self._loaded.clear()
        self.categories = []
        self.expenses = []
        self.budgets = []
        self.draft = None
        self.pending_delete = None
        self.status = None
        self.budget_status = None
        self.loading = True

    def load_expense_meta(self) -> bool:
        token = self.generations.begin(META)
        result = self.gateway.list_expense_dates(self.owner)
        if not self.generations.is_current(META, token):
            return False
        self._loaded[META] = True
        if not result.ok:
            self.budget_status = result.message
            return True
        self.navigator.set_available(AvailablePeriods.from_dates(result.data))
        return True

    def load_categories(self) -> bool:
        token = self.generations.begin(CATEGORIES)
        result = self.gateway.list_categories()
        if not self.generations.is_current(CATEGORIES, token):
            return False
        self._loaded[CATEGORIES] = True
        if result.ok:
            self.categories = result.data
        else:
            self.budget_status = result.message
            self.categories = []
        return True

    def load_budgets(self, year: int) -> bool:
        self.budget_status = None
        token = self.generations.begin(BUDGETS)
        result = self.gateway.list_budgets(self.owner, year)
        if not self.generations.is_current(BUDGETS, token):
            return False
        self._loaded[BUDGETS] = year
        if result.ok:
            self.budgets = result.data
        else:
            self.budget_status = result.message
            self.budgets = []
        return True

    def load_expenses(self) -> bool:
        selection = self.selection
        logger.debug("Loading expenses for %s", selection)
        self.loading = True
        self.status = None
        token = self.generations.begin(EXPENSES)
        result = self.gateway.list_expenses(self.owner, selection.year, selection.month)
        if not self.generations.is_current(EXPENSES, token):
            return False
        self._loaded[EXPENSES] = selection
        if result.ok:
            self.expenses = result.data
        else:
            self.status = result.message
            self.expenses = []
        self.loading = False
        return True

    # Derived values

    @property
    def analytics(self) -> ExpenseAnalytics:
        selection = self.selection
        return ExpenseAnalytics(
            self.expenses,
            self.categories,
            self.budgets,
            year=selection.year,
            month=selection.month,
        )

    @property
    def empty_state(self) -> bool:
        return not self.loading and not self.expenses

    def category_by_name(self) -> Dict[str, Category]:
        return {category.name: category for category in self.categories}

    # Period navigation

    def step_backward(self) -> None:
        self.navigator.step_backward()

    def step_forward(self) -> None:
        self.navigator.step_forward()

    def select_year(self, year: Optional[int]) -> None:
        self.navigator.select_year(year)

    def select_month(self, month: Optional[int]) -> None:
        self.navigator.select_month(month)

    # Expense deletion

    def request_delete(self, expense_id: int) -> None:
        """Arm the confirmation prompt for one expense."""
        self.pending_delete = next((e for e in self.expenses if e.id == expense_id), None)

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        """Delete the armed expense; the row leaves the list only on success."""
        expense = self.pending_delete
        if expense is None:
            return False
        self.pending_delete = None
        self.deleting_id = expense.id
        self.status = None
        result = self.gateway.delete_expense(expense.id, self.owner)
        self.deleting_id = None
        if not result.ok:
            self.status = result.message
            return False
        self.expenses = [entry for entry in self.expenses if entry.id != expense.id]
        # The period may have lost its last expense
        self._loaded.pop(META, None)
        return True

    # Budget editing

    def open_budget_editor(self, category_name: str) -> None:
        selection = self.selection
        category = self.category_by_name().get(category_name)
        if category is None:
            # Uncategorized rows have no budget of their own
            return
        try:
            self.draft = self.editor.open(category, self.budgets, selection.year, selection.month)
        except BudgetEditError as exc:
            self.budget_status = str(exc)
            return
        self.budget_status = None

    def close_budget_editor(self) -> None:
        self.draft = None

    def copy_previous_budget(self) -> None:
        if self.draft is not None:
            self.draft.copy_previous()

    def save_budget(self) -> bool:
        draft = self.draft
        if draft is None:
            return False
        self.budget_saving = True
        self.budget_status = None
        result = self.editor.save(draft, self.budgets)
        if result.ok:
            self.load_budgets(draft.year)
            self.draft = None
        else:
            self.budget_status = result.message
        self.budget_saving = False
        return result.ok
