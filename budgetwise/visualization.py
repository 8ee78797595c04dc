"""Plotly visualisation helpers for the BudgetWise dashboard.

This module defines a small set of functions that accept the records
produced by :mod:`budgetwise.analytics` and return interactive Plotly
figures.  Each function is focused on one chart so pages can pick what
they need; every function returns an empty figure titled "No data to
display" when handed no data, so callers never need to special-case it.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

try:
    from .analytics import CategorySummary, ForecastPoint, MonthlySummary
except ImportError:
    from analytics import CategorySummary, ForecastPoint, MonthlySummary

COLORS = ["#4F46E5", "#22C55E", "#F97316", "#06B6D4", "#E11D48", "#8B5CF6"]
INCOME_COLOR = "#16A34A"
EXPENSE_COLOR = "#DC2626"
FORECAST_COLOR = "#7C3AED"


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def monthly_frame(series: Sequence[MonthlySummary]) -> pd.DataFrame:
    """Tabulate monthly summaries with a net column, in the given order."""
    return pd.DataFrame(
        [
            {"Month": entry.month, "Income": entry.income, "Expense": entry.expense, "Net": entry.net}
            for entry in series
        ],
        columns=["Month", "Income", "Expense", "Net"],
    )


def category_frame(categories: Sequence[CategorySummary]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Category": entry.category, "Total": entry.total} for entry in categories],
        columns=["Category", "Total"],
    )


def create_category_pie_chart(categories: Sequence[CategorySummary], title: str | None = None) -> go.Figure:
    """Generate a pie chart of spending by category.

    Parameters
    ----------
    categories : sequence of CategorySummary
        Category totals, any order.
    title : str, optional
        Title for the chart.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart.
    """
    df = category_frame(categories)
    if df.empty:
        return _empty_figure()
    fig = px.pie(df, names="Category", values="Total", color_discrete_sequence=COLORS)
    fig.update_traces(textposition="inside", textinfo="percent+label")
    fig.update_layout(title=title or "Category-wise spending")
    return fig


def create_income_expense_bar_chart(series: Sequence[MonthlySummary], title: str | None = None) -> go.Figure:
    """Grouped bars of monthly income against expense.

    Parameters
    ----------
    series : sequence of MonthlySummary
        Months to plot, already filtered and sorted.
    title : str, optional
        Title for the chart.

    Returns
    -------
    plotly.graph_objects.Figure
        Grouped bar chart.
    """
    df = monthly_frame(series)
    if df.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df["Month"], y=df["Income"], name="Income", marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(x=df["Month"], y=df["Expense"], name="Expense", marker_color=EXPENSE_COLOR))
    fig.update_layout(
        title=title or "Monthly income vs expense",
        barmode="group",
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig


def create_forecast_line_chart(points: Sequence[ForecastPoint], title: str | None = None) -> go.Figure:
    """Line chart of historical expense with the predicted month highlighted.

    The predicted point is drawn as a separate dashed segment joined to the
    last historical month.
    """
    if not points:
        return _empty_figure()
    df = pd.DataFrame(
        [{"Month": p.month, "Expense": p.expense, "Predicted": p.predicted} for p in points]
    )
    history = df[~df["Predicted"]]
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=history["Month"],
        y=history["Expense"],
        mode="lines+markers",
        name="Actual",
        line=dict(color=FORECAST_COLOR, width=2),
    ))
    predicted = df[df["Predicted"]]
    if not predicted.empty:
        bridge = pd.concat([history.tail(1), predicted])
        fig.add_trace(go.Scatter(
            x=bridge["Month"],
            y=bridge["Expense"],
            mode="lines+markers",
            name="Forecast",
            line=dict(color=FORECAST_COLOR, width=2, dash="dash"),
        ))
    fig.update_layout(
        title=title or "Expense forecast",
        xaxis_title="Month",
        yaxis_title="Expense",
    )
    return fig


def create_savings_gauge(savings_percent: int, title: str | None = None) -> go.Figure:
    """Gauge indicator for the latest month's savings percentage."""
    lower = min(0, savings_percent)
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=savings_percent,
        number={"suffix": "%"},
        gauge={
            "axis": {"range": [lower, 100]},
            "bar": {"color": FORECAST_COLOR},
            "steps": [
                {"range": [lower, 15], "color": "#FEE2E2"},
                {"range": [15, 35], "color": "#FEF9C3"},
                {"range": [35, 100], "color": "#DCFCE7"},
            ],
        },
    ))
    fig.update_layout(title=title or "Savings percentage")
    return fig
