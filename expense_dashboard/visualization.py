"""Plotly figures for the overview page.

Functions accept the records produced by :mod:`expense_dashboard.analytics`
and return ``plotly.graph_objects.Figure`` instances that Streamlit renders
via ``st.plotly_chart``.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .analytics import CategoryUtilization
from .formatting import category_hue

INCOME_COLOR = "#2f9e6b"
OVER_BUDGET_COLOR = "#d9480f"


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def _bar_color(row: CategoryUtilization) -> str:
    if row.is_income:
        return INCOME_COLOR
    if row.is_over:
        return OVER_BUDGET_COLOR
    return f"hsl({category_hue(row.name)}, 55%, 55%)"


def create_category_budget_chart(rows: Sequence[CategoryUtilization], title: str | None = None) -> go.Figure:
    """Horizontal bars of spending per category with budget markers.

    Parameters
    ----------
    rows : sequence of CategoryUtilization
        Category totals in display order (largest first).
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Bar chart; categories with a budget get a diamond marker at the
        budgeted amount.
    """
    if not rows or all(row.total == 0 and row.budget == 0 for row in rows):
        return _empty_figure()

    df = pd.DataFrame(
        {
            "Kategori": [row.name for row in rows],
            "Brukt": [row.total for row in rows],
            "Budsjett": [row.budget for row in rows],
            "Prosent": [row.percent_used for row in rows],
        }
    )
    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=df["Brukt"],
            y=df["Kategori"],
            orientation="h",
            name="Brukt",
            marker_color=[_bar_color(row) for row in rows],
            customdata=df["Prosent"],
            hovertemplate="%{y}: %{x:,.0f} kr (%{customdata:.0f}%)<extra></extra>",
        )
    )
    budgeted = df[df["Budsjett"] > 0]
    if not budgeted.empty:
        fig.add_trace(
            go.Scatter(
                x=budgeted["Budsjett"],
                y=budgeted["Kategori"],
                mode="markers",
                name="Budsjett",
                marker={"symbol": "diamond", "size": 11, "color": "#343a40"},
                hovertemplate="%{y}: budsjett %{x:,.0f} kr<extra></extra>",
            )
        )
    fig.update_layout(
        title=title or "Kategorier mot budsjett",
        xaxis_title="kr",
        yaxis={"autorange": "reversed"},
        legend={"orientation": "h"},
        margin={"l": 10, "r": 10, "t": 40, "b": 10},
    )
    return fig


def create_income_expense_pie(income: float, expenses_total: float, title: str | None = None) -> go.Figure:
    """Pie of income against expenses for the selected period."""
    if income <= 0 and expenses_total <= 0:
        return _empty_figure()
    df = pd.DataFrame({"Type": ["Inntekter", "Utgifter"], "Beløp": [income, expenses_total]})
    fig = px.pie(
        df,
        names="Type",
        values="Beløp",
        color="Type",
        color_discrete_map={"Inntekter": INCOME_COLOR, "Utgifter": OVER_BUDGET_COLOR},
    )
    fig.update_layout(title=title or "Inntekter og utgifter")
    return fig
