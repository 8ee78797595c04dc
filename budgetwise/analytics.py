"""Derived analytics for the Dashboard and Analytics pages.

This module turns the raw series returned by the backend analytics
endpoints into the metrics shown across the dashboard: time-range
filtered months, period totals, savings percentage, month-over-month
comparison, top spending category, advice text, and the forecast series
used by the prediction chart.

Everything here is a pure function of its inputs.  Nothing performs I/O,
nothing mutates the sequences it receives, and malformed values degrade
to zero/``None``/empty defaults instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

try:
    from .config import CURRENCY_SYMBOL, RECENT_TRANSACTION_LIMIT
    from .formatting import format_currency
except ImportError:
    from config import CURRENCY_SYMBOL, RECENT_TRANSACTION_LIMIT
    from formatting import format_currency

MONTH_NAMES = {
    'JANUARY': 1, 'FEBRUARY': 2, 'MARCH': 3, 'APRIL': 4, 'MAY': 5, 'JUNE': 6,
    'JULY': 7, 'AUGUST': 8, 'SEPTEMBER': 9, 'OCTOBER': 10, 'NOVEMBER': 11, 'DECEMBER': 12,
}
_MONTH_BY_NUMBER = {number: name for name, number in MONTH_NAMES.items()}

LOW_SAVINGS_THRESHOLD = 15
HIGH_SAVINGS_THRESHOLD = 35

NEXT_MONTH_LABEL = 'Next month'

START_TRACKING_ADVICE = "Start tracking your income and expenses to receive personalised advice."
STABLE_ADVICE = "Your finances look stable. Keep tracking your spending."


class TimeRange(str, Enum):
    """Window applied to the monthly series before aggregation."""

    LAST_3 = 'LAST_3'
    LAST_6 = 'LAST_6'
    LAST_12 = 'LAST_12'
    THIS_YEAR = 'THIS_YEAR'
    ALL = 'ALL'

    @classmethod
    def parse(cls, value: Any, default: "TimeRange | None" = None) -> "TimeRange":
        """Resolve a range name, falling back to ``default`` (LAST_6) when unknown."""
        try:
            return cls(value)
        except ValueError:
            return default or cls.LAST_6

    @property
    def label(self) -> str:
        return _RANGE_LABELS[self]

    @property
    def month_count(self) -> Optional[int]:
        return _RANGE_MONTHS.get(self)


_RANGE_LABELS = {
    TimeRange.LAST_3: 'Last 3 months',
    TimeRange.LAST_6: 'Last 6 months',
    TimeRange.LAST_12: 'Last 12 months',
    TimeRange.THIS_YEAR: 'This year',
    TimeRange.ALL: 'All time',
}
_RANGE_MONTHS = {
    TimeRange.LAST_3: 3,
    TimeRange.LAST_6: 6,
    TimeRange.LAST_12: 12,
}


@dataclass(frozen=True)
class MonthlySummary:
    """Income and expense totals for one calendar month."""

    month: str
    income: float = 0.0
    expense: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expense


@dataclass(frozen=True)
class CategorySummary:
    """Expense total for one spending category."""

    category: str
    total: float = 0.0


@dataclass(frozen=True)
class ExpenseForecast:
    """Externally computed next-month prediction plus its history."""

    months: Tuple[str, ...] = ()
    historical_totals: Dict[str, float] = field(default_factory=dict)
    predicted_next_month: float = 0.0


@dataclass(frozen=True)
class ForecastPoint:
    """One point of the plot-ready forecast series."""

    month: str
    expense: float
    predicted: bool = False


@dataclass(frozen=True)
class PeriodTotals:
    income: float = 0.0
    expense: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expense


@dataclass(frozen=True)
class MonthComparison:
    """Expense change between the two latest months in range."""

    last: MonthlySummary
    prev: MonthlySummary
    diff: float
    percent: int


@dataclass(frozen=True)
class DerivedMetrics:
    filtered_series: Tuple[MonthlySummary, ...]
    total_income: float
    total_expense: float
    savings_percent: int
    comparison: Optional[MonthComparison]
    top_category: Optional[CategorySummary]
    advice_text: str

    @property
    def net_balance(self) -> float:
        return self.total_income - self.total_expense

    @property
    def totals(self) -> PeriodTotals:
        return PeriodTotals(income=self.total_income, expense=self.total_expense)


# ---------------------------------------------------------------------------
# Payload coercion
# ---------------------------------------------------------------------------

def _to_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _non_negative(value: Any) -> float:
    return max(_to_float(value), 0.0)


def _month_text(value: Any) -> str:
    # Java YearMonth may arrive as [year, month] depending on serializer settings
    if isinstance(value, (list, tuple)) and len(value) == 2:
        try:
            return f"{int(value[0]):04d}-{int(value[1]):02d}"
        except (TypeError, ValueError):
            return ''
    if value is None:
        return ''
    return str(value).strip()


def month_key(month: str) -> Tuple[int, int]:
    """Parse a month label into a sortable ``(year, month)`` pair.

    ``"YYYY-MM"`` (optionally followed by a day) is the canonical form.
    Bare month names such as ``"MARCH"`` sort by calendar position with
    year 0; anything unparseable becomes ``(0, 0)`` and sorts first.
    """
    text = _month_text(month)
    parts = text.split('-')
    if len(parts) >= 2:
        try:
            year, number = int(parts[0]), int(parts[1])
        except ValueError:
            return (0, 0)
        if 1 <= number <= 12:
            return (year, number)
        return (0, 0)
    return (0, MONTH_NAMES.get(text.upper(), 0))


def next_month(month: str) -> str:
    """Return the label of the month after ``month``.

    ``YYYY-MM`` labels roll over into the next year.  A bare month name is
    answered with the following month name, and a label that cannot be
    parsed at all with a generic ``"Next month"``.
    """
    year, number = month_key(month)
    if number == 0:
        return NEXT_MONTH_LABEL
    if year == 0:
        return _MONTH_BY_NUMBER[number % 12 + 1]
    if number == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{number + 1:02d}"


def coerce_monthly(payload: Any) -> List[MonthlySummary]:
    """Convert the monthly-summary response into typed records.

    Entries without a month are dropped; missing or non-numeric amounts
    become 0.
    """
    if not isinstance(payload, (list, tuple)):
        return []
    result: List[MonthlySummary] = []
    for entry in payload:
        if isinstance(entry, MonthlySummary):
            entry = {'month': entry.month, 'income': entry.income, 'expense': entry.expense}
        if not isinstance(entry, Mapping):
            continue
        month = _month_text(entry.get('month'))
        if not month:
            continue
        result.append(MonthlySummary(
            month=month,
            income=_non_negative(entry.get('income')),
            expense=_non_negative(entry.get('expense')),
        ))
    return result


def coerce_categories(payload: Any) -> List[CategorySummary]:
    """Convert the category-summary response into typed records.

    The endpoint answers with a ``{category: total}`` mapping; a list of
    ``{category, total}`` objects is accepted as well.  Input order is kept.
    """
    if isinstance(payload, Mapping):
        items: Iterable[Tuple[Any, Any]] = payload.items()
    elif isinstance(payload, (list, tuple)):
        items = []
        for entry in payload:
            if isinstance(entry, CategorySummary):
                items.append((entry.category, entry.total))
            elif isinstance(entry, Mapping):
                items.append((entry.get('category', entry.get('name')), entry.get('total', entry.get('value'))))
    else:
        return []

    result = []
    for name, total in items:
        category = str(name).strip() if name is not None else ''
        if not category:
            continue
        result.append(CategorySummary(category=category, total=_non_negative(total)))
    return result


def coerce_forecast(payload: Any) -> Optional[ExpenseForecast]:
    """Convert the expense-forecast response; ``None`` when it carries no forecast."""
    if isinstance(payload, ExpenseForecast):
        return payload
    if not isinstance(payload, Mapping) or 'error' in payload:
        return None
    totals_raw = payload.get('monthlyTotals', payload.get('historicalTotals'))
    totals: Dict[str, float] = {}
    if isinstance(totals_raw, Mapping):
        for month, value in totals_raw.items():
            label = _month_text(month)
            if label:
                totals[label] = _non_negative(value)
    months_raw = payload.get('months')
    months = tuple(
        label for label in (_month_text(m) for m in (months_raw or [])) if label
    ) if isinstance(months_raw, (list, tuple)) else ()
    prediction = payload.get('nextMonthPrediction', payload.get('predictedNextMonth'))
    return ExpenseForecast(
        months=months,
        historical_totals=totals,
        predicted_next_month=_non_negative(prediction),
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _round_half_up(value: float) -> int:
    # overflowed or NaN ratios count as no change
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))


def sort_by_month(series: Sequence[MonthlySummary]) -> List[MonthlySummary]:
    return sorted(series, key=lambda entry: month_key(entry.month))


def filter_by_range(
    series: Sequence[MonthlySummary],
    time_range: Union[TimeRange, str] = TimeRange.LAST_6,
) -> List[MonthlySummary]:
    """Sort ``series`` chronologically and keep the months inside ``time_range``.

    Args:
        series: Monthly summaries in any order.
        time_range: Window to apply.  ``THIS_YEAR`` is relative to the year
            of the latest month present in the data, not the wall clock.

    Returns:
        A new list sorted ascending by month.  Shorter series are never padded.
    """
    ordered = sort_by_month(series)
    if not ordered:
        return []
    selected = TimeRange.parse(time_range)

    count = selected.month_count
    if count is not None:
        return ordered[-count:]
    if selected is TimeRange.THIS_YEAR:
        latest_year = month_key(ordered[-1].month)[0]
        return [entry for entry in ordered if month_key(entry.month)[0] == latest_year]
    return ordered


def compute_totals(filtered_series: Sequence[MonthlySummary]) -> PeriodTotals:
    return PeriodTotals(
        income=sum(entry.income for entry in filtered_series),
        expense=sum(entry.expense for entry in filtered_series),
    )


def compute_savings_percent(filtered_series: Sequence[MonthlySummary]) -> int:
    """Savings rate of the latest month, rounded to a whole percent.

    Returns 0 when there is no month or its income is 0.  Negative rates
    (spending above income) are returned as-is.
    """
    if not filtered_series:
        return 0
    last = sort_by_month(filtered_series)[-1]
    if last.income == 0:
        return 0
    return _round_half_up((last.income - last.expense) / last.income * 100)


def compare_to_previous_month(filtered_series: Sequence[MonthlySummary]) -> Optional[MonthComparison]:
    if len(filtered_series) < 2:
        return None
    ordered = sort_by_month(filtered_series)
    last, prev = ordered[-1], ordered[-2]
    diff = last.expense - prev.expense
    percent = 0 if prev.expense == 0 else _round_half_up(diff / prev.expense * 100)
    return MonthComparison(last=last, prev=prev, diff=diff, percent=percent)


def top_category(category_series: Sequence[CategorySummary]) -> Optional[CategorySummary]:
    """Category with the highest total; the first one listed wins ties."""
    if not category_series:
        return None
    return sorted(category_series, key=lambda entry: entry.total, reverse=True)[0]


def build_forecast_series(forecast: Union[ExpenseForecast, Mapping, None]) -> List[ForecastPoint]:
    """Historical monthly expense totals followed by the predicted next month.

    Returns an empty list when the forecast has no history, so callers can
    render an empty state instead of a chart.
    """
    forecast = coerce_forecast(forecast)
    if forecast is None or not forecast.historical_totals or not forecast.months:
        return []

    months = sorted(forecast.historical_totals, key=month_key)
    series = [
        ForecastPoint(month=month, expense=forecast.historical_totals[month], predicted=False)
        for month in months
    ]
    series.append(ForecastPoint(
        month=next_month(months[-1]),
        expense=forecast.predicted_next_month,
        predicted=True,
    ))
    return series


def _savings_clause(savings_percent: int) -> str:
    if savings_percent < LOW_SAVINGS_THRESHOLD:
        return (
            f"Your savings rate is {savings_percent}%. Try to save at least "
            f"{LOW_SAVINGS_THRESHOLD}% of your income by trimming non-essential spending."
        )
    if savings_percent <= HIGH_SAVINGS_THRESHOLD:
        return f"You are saving {savings_percent}% of your income. Keep up this steady pace."
    return f"Excellent! You are saving {savings_percent}% of your income."


def _category_clause(category: CategorySummary) -> str:
    return (
        f"{category.category} is your highest spending category "
        f"({format_currency(category.total, symbol=CURRENCY_SYMBOL)}). "
        f"Check whether you can reduce it by 5-10%."
    )


def _comparison_clause(comparison: MonthComparison) -> str:
    if comparison.diff > 0:
        return (
            f"Your expenses increased by +{format_currency(comparison.diff, symbol=CURRENCY_SYMBOL)} "
            f"(+{comparison.percent}%) compared to last month. Review your recent purchases."
        )
    if comparison.diff < 0:
        return (
            f"Great job! Your expenses dropped by {format_currency(abs(comparison.diff), symbol=CURRENCY_SYMBOL)} "
            f"({abs(comparison.percent)}%) compared to last month."
        )
    return "Your expenses are unchanged from last month. Aim to cut them by 5% next month."


def generate_advice(
    savings_percent: Optional[int],
    totals: Optional[PeriodTotals],
    top: Optional[CategorySummary],
    comparison: Optional[MonthComparison],
) -> str:
    """Build the advice text shown next to the analytics charts.

    Clauses are evaluated in a fixed order (savings rate, top category,
    month-over-month change) and joined one per line.  With no income, no
    expense, and no category the single start-tracking message is returned.
    """
    totals = totals or PeriodTotals()
    if totals.income == 0 and totals.expense == 0 and top is None:
        return START_TRACKING_ADVICE

    lines: List[str] = []
    if savings_percent is not None:
        lines.append(_savings_clause(savings_percent))
    if top is not None:
        lines.append(_category_clause(top))
    if comparison is not None:
        lines.append(_comparison_clause(comparison))

    if not lines:
        return STABLE_ADVICE
    return '\n'.join(line.rstrip() for line in lines).rstrip()


def aggregate(
    monthly: Sequence[MonthlySummary],
    categories: Sequence[CategorySummary],
    time_range: Union[TimeRange, str] = TimeRange.LAST_6,
) -> DerivedMetrics:
    """Compute every derived metric for one render of the analytics views."""
    filtered = filter_by_range(coerce_monthly(list(monthly or [])), time_range)
    totals = compute_totals(filtered)
    savings = compute_savings_percent(filtered)
    comparison = compare_to_previous_month(filtered)
    top = top_category(coerce_categories(list(categories or [])))
    return DerivedMetrics(
        filtered_series=tuple(filtered),
        total_income=totals.income,
        total_expense=totals.expense,
        savings_percent=savings,
        comparison=comparison,
        top_category=top,
        advice_text=generate_advice(savings, totals, top, comparison),
    )


# ---------------------------------------------------------------------------
# Dashboard helpers over the raw transaction list
# ---------------------------------------------------------------------------

def summarize_transactions(transactions: Sequence[Mapping[str, Any]]) -> PeriodTotals:
    """Total income and expense across raw transaction records."""
    income = 0.0
    expense = 0.0
    for txn in transactions or []:
        kind = str(txn.get('type') or '').upper()
        amount = _to_float(txn.get('amount'))
        if kind == 'INCOME':
            income += amount
        elif kind == 'EXPENSE':
            expense += amount
    return PeriodTotals(income=income, expense=expense)


def recent_transactions(
    transactions: Sequence[Mapping[str, Any]],
    limit: int = RECENT_TRANSACTION_LIMIT,
) -> List[Mapping[str, Any]]:
    """Latest transactions first, by their ISO ``date`` field."""
    ordered = sorted(transactions or [], key=lambda txn: str(txn.get('date') or ''), reverse=True)
    return ordered[:limit]


def budget_spent(budget: Mapping[str, Any], transactions: Sequence[Mapping[str, Any]]) -> float:
    """Expense total counted against one budget.

    A budget covers one category in one named month (``"March"``) of one
    year; expenses match on category and on the ``YYYY-MM`` prefix of
    their date.
    """
    month_number = MONTH_NAMES.get(str(budget.get('month') or '').strip().upper())
    try:
        year = int(budget.get('year'))
    except (TypeError, ValueError):
        return 0.0
    if month_number is None:
        return 0.0
    category = budget.get('category')
    spent = 0.0
    for txn in transactions or []:
        if str(txn.get('type') or '').upper() != 'EXPENSE' or txn.get('category') != category:
            continue
        if month_key(str(txn.get('date') or '')) == (year, month_number):
            spent += _to_float(txn.get('amount'))
    return spent
