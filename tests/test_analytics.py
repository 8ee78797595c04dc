import sys
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root))

from budgetwise import analytics
from budgetwise.analytics import (
    CategorySummary,
    ExpenseForecast,
    ForecastPoint,
    MonthlySummary,
    PeriodTotals,
    TimeRange,
)
from budgetwise.config import CURRENCY_SYMBOL


def _series(*rows):
    return [MonthlySummary(month=m, income=i, expense=e) for m, i, e in rows]


UNSORTED = _series(
    ('2024-03', 2000, 1500),
    ('2023-11', 500, 100),
    ('2024-01', 1000, 800),
    ('2023-12', 700, 650),
    ('2024-02', 1000, 900),
)


@pytest.mark.parametrize('time_range', list(TimeRange))
def test_filter_by_range_sorted_and_never_longer(time_range):
    result = analytics.filter_by_range(UNSORTED, time_range)
    keys = [analytics.month_key(entry.month) for entry in result]
    assert keys == sorted(keys)
    assert len(result) <= len(UNSORTED)


@pytest.mark.parametrize('time_range', list(TimeRange))
def test_filter_by_range_empty_input(time_range):
    assert analytics.filter_by_range([], time_range) == []


def test_filter_by_range_windows():
    assert [e.month for e in analytics.filter_by_range(UNSORTED, TimeRange.LAST_3)] == ['2024-01', '2024-02', '2024-03']
    assert len(analytics.filter_by_range(UNSORTED, TimeRange.LAST_6)) == 5
    assert len(analytics.filter_by_range(UNSORTED, TimeRange.LAST_12)) == 5
    assert len(analytics.filter_by_range(UNSORTED, TimeRange.ALL)) == len(UNSORTED)


def test_this_year_follows_latest_data_year():
    result = analytics.filter_by_range(UNSORTED, TimeRange.THIS_YEAR)
    assert [e.month for e in result] == ['2024-01', '2024-02', '2024-03']

    old_data = _series(('2019-05', 1, 1), ('2018-12', 1, 1), ('2019-01', 1, 1))
    assert [e.month for e in analytics.filter_by_range(old_data, 'THIS_YEAR')] == ['2019-01', '2019-05']


def test_filter_by_range_does_not_mutate_input():
    original = list(UNSORTED)
    analytics.filter_by_range(UNSORTED, TimeRange.ALL)
    assert UNSORTED == original


def test_unknown_time_range_falls_back_to_last_six():
    assert TimeRange.parse('LAST_99') is TimeRange.LAST_6
    assert TimeRange.parse(None, default=TimeRange.ALL) is TimeRange.ALL
    assert TimeRange.parse('LAST_3') is TimeRange.LAST_3
    assert TimeRange.LAST_12.label == 'Last 12 months'


def test_month_key_parsing():
    assert analytics.month_key('2024-05') == (2024, 5)
    assert analytics.month_key('2024-05-17') == (2024, 5)
    assert analytics.month_key('MARCH') == (0, 3)
    assert analytics.month_key('garbage') == (0, 0)
    assert analytics.month_key('2024-13') == (0, 0)


def test_next_month_rolls_over_year():
    assert analytics.next_month('2024-12') == '2025-01'
    assert analytics.next_month('2024-02') == '2024-03'


def test_compute_totals():
    totals = analytics.compute_totals(_series(('2024-01', 100, 40), ('2024-02', 50, 80)))
    assert totals == PeriodTotals(income=150, expense=120)
    assert totals.net == 30
    assert analytics.compute_totals([]) == PeriodTotals(0, 0)


def test_savings_percent_zero_income_guard():
    assert analytics.compute_savings_percent(_series(('2024-05', 0, 50))) == 0
    assert analytics.compute_savings_percent([]) == 0


def test_savings_percent_values():
    assert analytics.compute_savings_percent(_series(('2024-05', 1000, 800))) == 20
    # latest month wins regardless of input order
    assert analytics.compute_savings_percent(_series(('2024-06', 100, 150), ('2024-01', 1000, 0))) == -50
    assert analytics.compute_savings_percent(_series(('2024-05', 200, 175))) == 13


def test_compare_to_previous_month():
    assert analytics.compare_to_previous_month(_series(('2024-01', 0, 100))) is None
    comparison = analytics.compare_to_previous_month(_series(('2024-01', 0, 100), ('2024-02', 0, 150)))
    assert comparison.diff == 50
    assert comparison.percent == 50
    assert comparison.last.month == '2024-02'

    from_zero = analytics.compare_to_previous_month(_series(('2024-01', 0, 0), ('2024-02', 0, 150)))
    assert from_zero.percent == 0

    dropped = analytics.compare_to_previous_month(_series(('2024-01', 0, 200), ('2024-02', 0, 150)))
    assert dropped.diff == -50
    assert dropped.percent == -25


def test_top_category():
    food = CategorySummary('Food', 500)
    rent = CategorySummary('Rent', 1200)
    assert analytics.top_category([food, rent]) == rent
    assert analytics.top_category([]) is None
    tie = [CategorySummary('Travel', 300), CategorySummary('Bills', 300)]
    assert analytics.top_category(tie).category == 'Travel'


def test_build_forecast_series():
    points = analytics.build_forecast_series({
        'months': ['2024-01', '2024-02'],
        'monthlyTotals': {'2024-02': 120, '2024-01': 100},
        'nextMonthPrediction': 130,
    })
    assert len(points) == 3
    assert points[0] == ForecastPoint('2024-01', 100, False)
    assert points[-1] == ForecastPoint('2024-03', 130, True)


def test_build_forecast_series_year_rollover():
    forecast = ExpenseForecast(months=('2024-12',), historical_totals={'2024-12': 10.0}, predicted_next_month=12.0)
    assert analytics.build_forecast_series(forecast)[-1].month == '2025-01'


@pytest.mark.parametrize('payload', [
    None,
    {},
    {'error': 'Not enough data to predict.'},
    {'months': [], 'monthlyTotals': {'2024-01': 1}, 'nextMonthPrediction': 2},
    {'months': ['2024-01'], 'monthlyTotals': {}, 'nextMonthPrediction': 2},
])
def test_build_forecast_series_empty_cases(payload):
    assert analytics.build_forecast_series(payload) == []


def test_coerce_monthly_drops_bad_entries():
    result = analytics.coerce_monthly([
        {'month': '2024-01', 'income': '100.5', 'expense': None},
        {'month': '', 'income': 1},
        {'month': [2024, 2], 'income': 'abc', 'expense': -5},
        'junk',
    ])
    assert result == [
        MonthlySummary('2024-01', 100.5, 0.0),
        MonthlySummary('2024-02', 0.0, 0.0),
    ]
    assert analytics.coerce_monthly(None) == []


def test_coerce_categories_mapping_and_list():
    assert analytics.coerce_categories({'Food': 10, 'Rent': '20'}) == [
        CategorySummary('Food', 10.0),
        CategorySummary('Rent', 20.0),
    ]
    assert analytics.coerce_categories([{'category': 'Bills', 'total': 5}, {'category': ''}]) == [
        CategorySummary('Bills', 5.0),
    ]
    assert analytics.coerce_categories('nope') == []


def test_coerce_forecast_error_payload_is_none():
    assert analytics.coerce_forecast({'error': 'Not enough data to predict.'}) is None
    assert analytics.coerce_forecast([]) is None


def test_advice_start_tracking_short_circuits():
    advice = analytics.generate_advice(0, PeriodTotals(0, 0), None, None)
    assert advice == analytics.START_TRACKING_ADVICE


@pytest.mark.parametrize('percent,expected', [
    (10, "Your savings rate is 10%. Try to save at least 15% of your income by trimming non-essential spending."),
    (15, "You are saving 15% of your income. Keep up this steady pace."),
    (35, "You are saving 35% of your income. Keep up this steady pace."),
    (36, "Excellent! You are saving 36% of your income."),
])
def test_advice_savings_bands(percent, expected):
    assert analytics.generate_advice(percent, PeriodTotals(100, 50), None, None) == expected


def test_advice_full_text_order():
    metrics = analytics.aggregate(
        _series(('2024-01', 1000, 800), ('2024-02', 1000, 900), ('2024-03', 2000, 1500)),
        [CategorySummary('Food', 700), CategorySummary('Rent', 300)],
        TimeRange.LAST_6,
    )
    assert metrics.savings_percent == 25
    assert metrics.comparison.percent == 67
    assert metrics.advice_text.split('\n') == [
        "You are saving 25% of your income. Keep up this steady pace.",
        f"Food is your highest spending category ({CURRENCY_SYMBOL}700.00). Check whether you can reduce it by 5-10%.",
        f"Your expenses increased by +{CURRENCY_SYMBOL}600.00 (+67%) compared to last month. Review your recent purchases.",
    ]


def test_advice_decrease_and_unchanged():
    down = analytics.compare_to_previous_month(_series(('2024-01', 0, 200), ('2024-02', 0, 150)))
    text = analytics.generate_advice(None, PeriodTotals(0, 350), None, down)
    assert text == f"Great job! Your expenses dropped by {CURRENCY_SYMBOL}50.00 (25%) compared to last month."

    flat = analytics.compare_to_previous_month(_series(('2024-01', 0, 100), ('2024-02', 0, 100)))
    text = analytics.generate_advice(None, PeriodTotals(0, 200), None, flat)
    assert text == "Your expenses are unchanged from last month. Aim to cut them by 5% next month."


def test_advice_stable_fallback():
    assert analytics.generate_advice(None, PeriodTotals(10, 0), None, None) == analytics.STABLE_ADVICE


def test_aggregate_is_idempotent():
    categories = [CategorySummary('Food', 10)]
    first = analytics.aggregate(UNSORTED, categories, TimeRange.ALL)
    second = analytics.aggregate(UNSORTED, categories, TimeRange.ALL)
    assert first == second


def test_aggregate_empty_inputs():
    metrics = analytics.aggregate([], [], TimeRange.THIS_YEAR)
    assert metrics.filtered_series == ()
    assert metrics.total_income == 0
    assert metrics.total_expense == 0
    assert metrics.savings_percent == 0
    assert metrics.comparison is None
    assert metrics.top_category is None
    assert metrics.advice_text == analytics.START_TRACKING_ADVICE
    assert metrics.net_balance == 0


def test_net_balance_may_be_negative():
    metrics = analytics.aggregate(_series(('2024-01', 100, 300)), [], TimeRange.ALL)
    assert metrics.net_balance == -200
    assert metrics.totals == PeriodTotals(100, 300)


TRANSACTIONS = [
    {'id': 1, 'type': 'INCOME', 'category': 'Salary', 'amount': 5000, 'date': '2024-03-01'},
    {'id': 2, 'type': 'EXPENSE', 'category': 'Food', 'amount': 120.5, 'date': '2024-03-05'},
    {'id': 3, 'type': 'expense', 'category': 'Food', 'amount': '80', 'date': '2024-04-02'},
    {'id': 4, 'type': 'EXPENSE', 'category': 'Rent', 'amount': 900, 'date': '2024-03-10'},
]


def test_summarize_transactions():
    totals = analytics.summarize_transactions(TRANSACTIONS)
    assert totals.income == 5000
    assert totals.expense == pytest.approx(1100.5)
    assert analytics.summarize_transactions([]) == PeriodTotals(0, 0)


def test_recent_transactions_latest_first():
    recent = analytics.recent_transactions(TRANSACTIONS, limit=2)
    assert [txn['id'] for txn in recent] == [3, 4]


def test_budget_spent_matches_category_and_month():
    budget = {'month': 'March', 'year': 2024, 'category': 'Food', 'limitAmount': 500}
    assert analytics.budget_spent(budget, TRANSACTIONS) == pytest.approx(120.5)
    assert analytics.budget_spent({'month': 'April', 'year': 2024, 'category': 'Food'}, TRANSACTIONS) == 80
    assert analytics.budget_spent({'month': 'Smarch', 'year': 2024, 'category': 'Food'}, TRANSACTIONS) == 0


def test_savings_percent_overflowing_ratio_is_zero():
    assert analytics.compute_savings_percent(_series(('2024-05', 1e-300, 1e10))) == 0


def test_comparison_overflowing_ratio_is_zero():
    comparison = analytics.compare_to_previous_month(_series(('2024-04', 0, 1e-300), ('2024-05', 0, 1e10)))
    assert comparison.percent == 0
    assert comparison.diff > 0


def test_aggregate_scrubs_non_finite_records():
    nan = float('nan')
    metrics = analytics.aggregate(
        [MonthlySummary('2024-05', nan, 10), MonthlySummary('2024-06', 100, float('inf'))],
        [CategorySummary('Food', nan)],
        TimeRange.ALL,
    )
    assert metrics.filtered_series == (
        MonthlySummary('2024-05', 0.0, 10.0),
        MonthlySummary('2024-06', 100.0, 0.0),
    )
    assert metrics.savings_percent == 100
    assert metrics.top_category == CategorySummary('Food', 0.0)


def test_coerce_monthly_scrubs_existing_records():
    assert analytics.coerce_monthly([MonthlySummary('2024-05', float('nan'), -3)]) == [
        MonthlySummary('2024-05', 0.0, 0.0),
    ]


def test_next_month_for_bare_and_unparseable_labels():
    assert analytics.next_month('APRIL') == 'MAY'
    assert analytics.next_month('DECEMBER') == 'JANUARY'
    assert analytics.next_month('garbage') == analytics.NEXT_MONTH_LABEL


def test_forecast_series_with_month_names():
    points = analytics.build_forecast_series({
        'months': ['MARCH', 'APRIL'],
        'monthlyTotals': {'APRIL': 120, 'MARCH': 100},
        'nextMonthPrediction': 130,
    })
    assert [p.month for p in points] == ['MARCH', 'APRIL', 'MAY']
    assert points[-1].predicted
