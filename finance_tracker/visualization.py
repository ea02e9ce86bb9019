"""Plotly visualisation helpers for the finance tracker.

Each function accepts the plain results produced by
:mod:`finance_tracker.aggregation` or :mod:`finance_tracker.budget_health`,
shapes them into a pandas DataFrame and returns an interactive Plotly
figure that Streamlit can render via ``st.plotly_chart``.  Empty inputs
produce a blank figure titled "No data to display".
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .aggregation import MonthlyTotals
from .budget_health import BudgetProgress
from .formatting import STATUS_COLORS

PIE_COLORS = [
    "#667eea", "#764ba2", "#f093fb", "#f5576c", "#4facfe",
    "#00f2fe", "#43e97b", "#38f9d7", "#ffecd2", "#fcb69f",
]
INCOME_COLOR = "rgba(34, 197, 94, 0.8)"
EXPENSE_COLOR = "rgba(239, 68, 68, 0.8)"


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def category_totals_frame(totals: Dict[str, Decimal]) -> pd.DataFrame:
    """Category totals as a DataFrame with columns Category, Amount."""
    return pd.DataFrame(
        {'Category': list(totals.keys()), 'Amount': [float(v) for v in totals.values()]},
        columns=['Category', 'Amount'],
    )


def monthly_series_frame(series: Sequence[MonthlyTotals]) -> pd.DataFrame:
    """Monthly series as a wide DataFrame: Month, Label, Income, Expenses, Net."""
    return pd.DataFrame(
        [
            {
                'Month': item.month,
                'Label': item.label,
                'Income': float(item.income_total),
                'Expenses': float(item.expense_total),
                'Net': float(item.net),
            }
            for item in series
        ],
        columns=['Month', 'Label', 'Income', 'Expenses', 'Net'],
    )


def create_expense_pie_chart(totals: Dict[str, Decimal], title: str | None = None) -> go.Figure:
    """Doughnut chart of spending per category.

    Parameters
    ----------
    totals : dict
        Mapping of category to summed amount, as returned by
        :func:`finance_tracker.aggregation.category_totals`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Doughnut chart with one slice per category.
    """
    df = category_totals_frame(totals)
    if df.empty:
        return _empty_figure()
    fig = px.pie(
        df,
        names="Category",
        values="Amount",
        hole=0.5,
        color_discrete_sequence=PIE_COLORS,
    )
    fig.update_traces(textinfo="percent+label")
    fig.update_layout(title=title or "Expenses by Category", legend=dict(orientation="h"))
    return fig


def create_monthly_bar_chart(series: Sequence[MonthlyTotals], title: str | None = None) -> go.Figure:
    """Grouped bar chart of income against expenses per month.

    Parameters
    ----------
    series : sequence of MonthlyTotals
        Output of :func:`finance_tracker.aggregation.monthly_series`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Two bars (Income, Expenses) per month, oldest month first.
    """
    wide = monthly_series_frame(series)
    if wide.empty:
        return _empty_figure()
    long = wide.melt(
        id_vars=["Label"],
        value_vars=["Income", "Expenses"],
        var_name="Kind",
        value_name="Amount",
    )
    fig = px.bar(
        long,
        x="Label",
        y="Amount",
        color="Kind",
        barmode="group",
        category_orders={"Label": wide["Label"].tolist()},
        color_discrete_map={"Income": INCOME_COLOR, "Expenses": EXPENSE_COLOR},
    )
    fig.update_layout(
        title=title or "Monthly Income vs Expenses",
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig


def create_budget_progress_chart(progress: Sequence[BudgetProgress], title: str | None = None) -> go.Figure:
    """Horizontal bars of each budget's spent percentage, capped at 100."""
    if not progress:
        return _empty_figure()
    df = pd.DataFrame([
        {
            'Category': row.budget.category,
            'Percent': float(row.display_percentage),
            'Status': row.progress_class,
        }
        for row in progress
    ])
    fig = px.bar(
        df,
        x="Percent",
        y="Category",
        color="Status",
        orientation="h",
        range_x=[0, 100],
        color_discrete_map={k: STATUS_COLORS[k] for k in ("normal", "warning", "danger")},
    )
    fig.update_layout(title=title or "Budget Progress", xaxis_title="% of budget spent")
    return fig
