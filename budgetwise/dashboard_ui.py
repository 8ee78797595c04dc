"""BudgetWise UI components and layout.

This module contains the Streamlit building blocks shared by the Dashboard
and Analytics pages: summary cards, the recent-transactions table, the
analytics charts, the forecast card, key highlights, and advice.  All
numbers come from :mod:`budgetwise.analytics`; these methods only lay them
out.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd
import streamlit as st

try:
    from .analytics import (
        CategorySummary,
        DerivedMetrics,
        ForecastPoint,
        PeriodTotals,
    )
    from .formatting import format_currency, format_percent
    from . import visualization as viz
except ImportError:
    from analytics import (
        CategorySummary,
        DerivedMetrics,
        ForecastPoint,
        PeriodTotals,
    )
    from formatting import format_currency, format_percent
    import visualization as viz

TIPS = [
    "Small savings every day lead to big achievements!",
    "A budget tells your money where to go instead of wondering where it went.",
    "Save before you spend, future you will thank you!",
    "Track your habits, not just your expenses.",
    "Every rupee saved is a step toward freedom.",
]


class BudgetWiseUI:
    """UI components for the BudgetWise pages."""

    def render_summary_cards(self, totals: PeriodTotals) -> None:
        """Render total income, total expenses, and net balance."""
        col1, col2, col3 = st.columns(3)

        with col1:
            st.metric(
                label="💰 Total Income",
                value=format_currency(totals.income),
                help="All income sources combined",
            )

        with col2:
            st.metric(
                label="💸 Total Expenses",
                value=format_currency(totals.expense),
                help="All your spending",
            )

        with col3:
            st.metric(
                label="💼 Net Balance",
                value=format_currency(totals.net),
                delta="Positive" if totals.net >= 0 else "Negative",
                delta_color="normal" if totals.net >= 0 else "inverse",
                help="Remaining after expenses",
            )

    def render_recent_transactions(self, transactions: Sequence[Mapping[str, Any]]) -> None:
        st.subheader("🧾 Recent Transactions")
        if not transactions:
            st.info("No transactions found yet.")
            return
        st.dataframe(transactions_frame(transactions), use_container_width=True, hide_index=True)

    def render_analytics_charts(self, metrics: DerivedMetrics, categories: Sequence[CategorySummary]) -> None:
        """Render the category pie and the income-vs-expense bars side by side."""
        col1, col2 = st.columns(2)

        with col1:
            if categories:
                st.plotly_chart(viz.create_category_pie_chart(categories), use_container_width=True)
            else:
                st.info("No category data available.")

        with col2:
            if metrics.filtered_series:
                st.plotly_chart(
                    viz.create_income_expense_bar_chart(metrics.filtered_series),
                    use_container_width=True,
                )
            else:
                st.info("No monthly data available.")

    def render_forecast(self, points: List[ForecastPoint], error: Optional[str] = None) -> None:
        st.subheader("🤖 Next-Month Expense Forecast")
        if error:
            st.warning(f"Prediction unavailable: {error}")
            return
        if not points:
            st.info("No prediction available yet. Add expenses for at least two months.")
            return
        predicted = points[-1]
        st.metric(label=f"Predicted for {predicted.month}", value=format_currency(predicted.expense))
        st.caption("Forecast based on previous months.")
        st.plotly_chart(viz.create_forecast_line_chart(points), use_container_width=True)

    def render_savings(self, metrics: DerivedMetrics) -> None:
        st.subheader("💾 Savings Percentage")
        st.plotly_chart(viz.create_savings_gauge(metrics.savings_percent), use_container_width=True)
        st.caption("Based on the latest month in range")

    def render_highlights(self, metrics: DerivedMetrics) -> None:
        """Render highest spending category and expense trend."""
        st.subheader("🔍 Key Highlights")

        if metrics.top_category is not None:
            st.metric(
                label="Highest Spending",
                value=metrics.top_category.category,
                delta=format_currency(metrics.top_category.total),
                delta_color="off",
            )
        else:
            st.caption("No category data")

        comparison = metrics.comparison
        if comparison is None:
            st.caption("Not enough monthly data")
            return
        if comparison.diff > 0:
            trend = f"↑ Increased by {format_currency(comparison.diff)}"
        elif comparison.diff < 0:
            trend = f"↓ Reduced by {format_currency(abs(comparison.diff))}"
        else:
            trend = "No Change"
        st.metric(
            label=f"Expense Trend ({comparison.prev.month} → {comparison.last.month})",
            value=trend,
            delta=format_percent(comparison.percent, signed=True),
            delta_color="inverse",
        )

    def render_advice(self, metrics: DerivedMetrics) -> None:
        st.subheader("💡 Advice")
        for line in metrics.advice_text.splitlines():
            st.info(line)


def transactions_frame(transactions: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Tabulate raw transaction records for display."""
    columns = ['id', 'date', 'type', 'category', 'amount', 'description']
    df = pd.DataFrame([dict(txn) for txn in transactions])
    if df.empty:
        return pd.DataFrame(columns=[c.title() for c in columns])
    for column in columns:
        if column not in df.columns:
            df[column] = None
    df = df[columns]
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce').fillna(0.0)
    df.columns = [c.title() for c in columns]
    return df


def filter_transactions(
    transactions: Sequence[Mapping[str, Any]],
    search_text: str = '',
    types: Optional[Sequence[str]] = None,
    categories: Optional[Sequence[str]] = None,
) -> List[Mapping[str, Any]]:
    """Apply the Transactions page filters to raw records."""
    search = (search_text or '').strip().lower()
    result = []
    for txn in transactions:
        if types and str(txn.get('type') or '').upper() not in types:
            continue
        if categories and txn.get('category') not in categories:
            continue
        if search:
            haystack = f"{txn.get('description') or ''} {txn.get('category') or ''}".lower()
            if search not in haystack:
                continue
        result.append(txn)
    return result


def goal_progress(goal: Mapping[str, Any]) -> Dict[str, float]:
    """Saved/target/remaining amounts and progress fraction for a goal."""
    try:
        target = float(goal.get('targetAmount') or 0)
    except (TypeError, ValueError):
        target = 0.0
    try:
        saved = float(goal.get('savedAmount') or 0)
    except (TypeError, ValueError):
        saved = 0.0
    progress = saved / target if target > 0 else 0.0
    return {
        'target': target,
        'saved': saved,
        'remaining': max(target - saved, 0.0),
        'progress': min(max(progress, 0.0), 1.0),
    }
