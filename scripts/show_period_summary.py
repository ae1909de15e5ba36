#!/usr/bin/env python3
"""Print income, expenses and category totals for one period."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_dashboard.analytics import ExpenseAnalytics  # noqa: E402
from expense_dashboard.app_context import build_context  # noqa: E402
from expense_dashboard.config import MissingConfigError, load_settings  # noqa: E402
from expense_dashboard.formatting import format_currency  # noqa: E402
from expense_dashboard.logging_setup import setup_logging  # noqa: E402
from expense_dashboard.periods import PeriodSelection, period_label  # noqa: E402


def main(email: str, password: str, year: int, month: Optional[int] = None) -> int:
    try:
        settings = load_settings()
    except MissingConfigError as exc:
        print(exc)
        return 1
    setup_logging(settings.log_level)
    context = build_context(settings, {})

    signed_in = context.identity.sign_in_with_password(email, password)
    if not signed_in.ok:
        print(f"Sign-in failed: {signed_in.message}")
        return 1
    owner = signed_in.data.user_id

    expenses = context.gateway.list_expenses(owner, year, month)
    categories = context.gateway.list_categories()
    budgets = context.gateway.list_budgets(owner, year)
    for result in (expenses, categories, budgets):
        if not result.ok:
            print(f"Query failed: {result.message}")
            context.identity.sign_out()
            return 1

    analytics = ExpenseAnalytics(expenses.data, categories.data, budgets.data, year=year, month=month)
    summary = analytics.summary()
    print(f"Period: {period_label(PeriodSelection(year, month))}")
    print(f"  Inntekter:     {format_currency(summary.income)}")
    print(f"  Utgifter:      {format_currency(summary.expenses_total)}")
    print(f"  Netto:         {format_currency(summary.net)}")
    print(f"  Transaksjoner: {summary.count}")

    print("\nBy category:")
    for row in analytics.category_utilization():
        budget = f" / {format_currency(row.budget)}" if row.budget > 0 else ""
        print(f"  {row.name}: {format_currency(row.total)}{budget}")

    context.identity.sign_out()
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show the expense summary for one period.')
    parser.add_argument('--email', required=True, help='Account email')
    parser.add_argument('--password', required=True, help='Account password')
    parser.add_argument('--year', type=int, required=True, help='Year to summarise')
    parser.add_argument('--month', type=int, choices=range(1, 13), help='Optional month (1-12)')
    args = parser.parse_args()
    raise SystemExit(main(args.email, args.password, args.year, args.month))
