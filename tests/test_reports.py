from datetime import date

import pytest

from tracker.models import Transaction
from tracker.reports import (
    filter_by_range,
    recent_transactions,
    resolve_range,
    summarize,
)


def _txn(id_, type_, amount, category, date_):
    return Transaction(id=id_, type=type_, amount=amount, category=category, date=date_)


TRANSACTIONS = [
    _txn(6, "expense", 9.99, "ignore", "2026-03-01"),
    _txn(5, "expense", 300.0, "Rent", "2026-02-08"),
    _txn(4, "expense", 8.0, "Food", "2026-02-07"),
    _txn(3, "expense", 12.0, "Food", "2026-02-06"),
    _txn(2, "income", 5000.0, "Paycheck", "2026-02-05"),
    _txn(1, "income", 100.0, "Gift", "2026-01-31"),
]


def test_summarize_totals_and_by_category():
    summary = summarize(TRANSACTIONS, "2026-02-01", "2026-02-28")

    assert summary["income"] == 5000.0
    assert summary["expense"] == 320.0
    assert summary["balance"] == 4680.0
    assert summary["count"] == 4
    assert summary["by_category"] == {
        "income": [{"category": "Paycheck", "amount": 5000.0}],
        "expense": [
            {"category": "Rent", "amount": 300.0},
            {"category": "Food", "amount": 20.0},
        ],
    }


def test_summarize_range_is_inclusive():
    summary = summarize(TRANSACTIONS, "2026-01-31", "2026-02-05")
    assert summary["income"] == 5100.0
    assert summary["expense"] == 0


def test_summarize_empty():
    summary = summarize([], None, None)
    assert summary["balance"] == 0
    assert summary["by_category"] == {"income": [], "expense": []}


def test_filter_by_range_open_bounds():
    assert len(filter_by_range(TRANSACTIONS, None, None)) == 6
    assert [t.id for t in filter_by_range(TRANSACTIONS, "2026-02-08", None)] == [6, 5]
    assert [t.id for t in filter_by_range(TRANSACTIONS, None, "2026-02-05")] == [2, 1]


@pytest.mark.parametrize(
    "option,expected",
    [
        ("All Time", (None, "2026-05-31")),
        ("This Month", ("2026-05-01", "2026-05-31")),
        ("Last 30 Days", ("2026-05-01", "2026-05-31")),
        ("Last 90 Days", ("2026-03-02", "2026-05-31")),
        ("Last 3 Months", ("2026-02-28", "2026-05-31")),
        ("Last 365 Days", ("2025-05-31", "2026-05-31")),
        ("This Year", ("2026-01-01", "2026-05-31")),
        ("Something Else", (None, "2026-05-31")),
    ],
)
def test_resolve_range_presets(option, expected):
    assert resolve_range(option, today=date(2026, 5, 31)) == expected


def test_resolve_range_last_3_months_crosses_year():
    assert resolve_range("Last 3 Months", today=date(2026, 1, 15)) == (
        "2025-10-15",
        "2026-01-15",
    )


def test_resolve_range_custom():
    today = date(2026, 5, 31)
    assert resolve_range(
        "Custom Range", today, custom_start="2026-01-01", custom_end="2026-01-31"
    ) == ("2026-01-01", "2026-01-31")
    assert resolve_range("Custom Range", today) == ("2026-05-31", "2026-05-31")


def test_recent_transactions_sorted_by_date():
    recent = recent_transactions(TRANSACTIONS, limit=3)
    assert [t.id for t in recent] == [6, 5, 4]


def test_recent_transactions_same_day_keeps_insertion_order():
    txns = [
        _txn(3, "expense", 1.0, "Want", "2026-01-01"),
        _txn(2, "expense", 1.0, "Want", "2026-01-02"),
        _txn(1, "expense", 1.0, "Want", "2026-01-01"),
    ]
    assert [t.id for t in recent_transactions(txns)] == [2, 3, 1]
