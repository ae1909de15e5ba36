import pytest

from expense_dashboard.analytics import ExpenseAnalytics, percent_of
from expense_dashboard.models import BudgetEntry, Category, Expense

MAT = Category(1, 'mat')
INNTEKTER = Category(2, 'inntekter')
TRANSPORT = Category(3, 'transport')


def expense(expense_id, price, category=None, date='2024-03-05', item='Item', tag=None):
    return Expense(
        id=expense_id,
        item=item,
        price=price,
        category_id=category.id if category else None,
        tag=tag,
        date=date,
        category=category,
    )


def budget(category, amount, year=2024, month=3):
    return BudgetEntry(id=None, category_id=category.id, year=year, month=month, amount=amount, category=category)


def test_summary_and_totals_split_income():
    analytics = ExpenseAnalytics(
        [expense(1, 100, MAT), expense(2, 500, INNTEKTER)],
        [MAT, INNTEKTER],
    )
    summary = analytics.summary()
    assert (summary.income, summary.expenses_total, summary.net, summary.count) == (500, 100, 400, 2)

    totals = [(row.name, row.total) for row in analytics.category_totals()]
    assert totals == [('inntekter', 500), ('mat', 100)]


def test_income_category_match_ignores_case_and_spaces():
    analytics = ExpenseAnalytics([expense(1, 250, Category(9, ' Inntekter '))])
    assert analytics.summary().income == 250


def test_text_prices_are_coerced_and_garbage_counts_as_zero():
    analytics = ExpenseAnalytics([expense(1, '120', MAT), expense(2, 'abc', MAT), expense(3, None, MAT)])
    assert analytics.summary().expenses_total == 120
    assert analytics.summary().count == 3


def test_unresolved_category_goes_to_uncategorized():
    analytics = ExpenseAnalytics([expense(1, 40)], [MAT])
    totals = {row.name: row.total for row in analytics.category_totals()}
    assert totals == {'Uncategorized': 40, 'mat': 0}


def test_category_totals_include_empty_categories_in_stable_order():
    analytics = ExpenseAnalytics([], [TRANSPORT, MAT, INNTEKTER])
    assert [row.name for row in analytics.category_totals()] == ['transport', 'mat', 'inntekter']


def test_budget_utilization_under_and_over():
    analytics = ExpenseAnalytics([expense(1, 300, MAT)], [MAT], [budget(MAT, 1000)], year=2024, month=3)
    row = analytics.category_utilization()[0]
    assert row.percent_used == pytest.approx(30)
    assert row.is_over is False
    assert row.fill_width == pytest.approx(15)

    analytics = ExpenseAnalytics([expense(1, 1200, MAT)], [MAT], [budget(MAT, 1000)], year=2024, month=3)
    row = analytics.category_utilization()[0]
    assert row.percent_used == pytest.approx(120)
    assert row.is_over is True
    assert row.fill_width == pytest.approx(60)


def test_fill_width_clamps_at_twice_the_budget():
    analytics = ExpenseAnalytics([expense(1, 2500, MAT)], [MAT], [budget(MAT, 1000)], year=2024, month=3)
    row = analytics.category_utilization()[0]
    assert row.percent_used == pytest.approx(250)
    assert row.fill_width == pytest.approx(100)


def test_no_budget_means_zero_percent():
    analytics = ExpenseAnalytics([expense(1, 300, MAT)], [MAT], year=2024, month=3)
    row = analytics.category_utilization()[0]
    assert (row.budget, row.percent_used, row.is_over) == (0, 0, False)


def test_budgets_ignored_without_selected_year():
    analytics = ExpenseAnalytics([expense(1, 300, MAT)], [MAT], [budget(MAT, 1000)])
    assert analytics.budget_by_category() == {}
    assert analytics.budget_summary().budget_total == 0


def test_whole_year_sums_monthly_budgets():
    budgets = [budget(MAT, 1000, month=3), budget(MAT, 800, month=2)]
    analytics = ExpenseAnalytics([], [MAT], budgets, year=2024)
    assert analytics.budget_by_category() == {'mat': 1800}


def test_month_selection_only_uses_that_months_budget():
    budgets = [budget(MAT, 1000, month=3), budget(MAT, 800, month=2)]
    analytics = ExpenseAnalytics([], [MAT], budgets, year=2024, month=2)
    assert analytics.budget_by_category() == {'mat': 800}


def test_budget_summary_excludes_income_budgets():
    budgets = [budget(MAT, 1000), budget(INNTEKTER, 40000), budget(TRANSPORT, 1000)]
    expenses = [expense(1, 500, MAT), expense(2, 30000, INNTEKTER), expense(3, 2500, TRANSPORT)]
    analytics = ExpenseAnalytics(expenses, [MAT, INNTEKTER, TRANSPORT], budgets, year=2024, month=3)
    summary = analytics.budget_summary()
    assert summary.spent_total == 3000
    assert summary.budget_total == 2000
    assert summary.percent_used == pytest.approx(150)
    assert summary.is_over is True
    assert summary.clamped_percent == 100


def test_percent_of_zero_budget():
    assert percent_of(100, 0) == 0


def test_expenses_frame_formats_rows():
    analytics = ExpenseAnalytics(
        [expense(1, 450, MAT, item='Middag', tag='Oslo'), expense(2, 30000, INNTEKTER, date=None, item='Lønn')],
        [MAT, INNTEKTER],
    )
    frame = analytics.expenses_frame()
    assert list(frame.columns) == ['Dato', 'Tag', 'Beskrivelse', 'Beløp', 'Kategori']
    assert frame.iloc[0]['Beløp'] == '-450 kr'
    assert frame.iloc[0]['Dato'] == '05.03.24'
    assert frame.iloc[1]['Beløp'] == '+30\xa0000 kr'
    assert frame.iloc[1]['Dato'] == 'No date'


def test_expenses_frame_empty():
    frame = ExpenseAnalytics([]).expenses_frame()
    assert frame.empty
    assert 'Beløp' in frame.columns
