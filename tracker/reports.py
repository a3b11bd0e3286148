import calendar
from collections import defaultdict
from datetime import date as dt_date, timedelta

from .models import TRANSACTION_TYPES, Transaction

RANGE_OPTIONS = (
    "All Time",
    "This Month",
    "Last 30 Days",
    "Last 90 Days",
    "Last 3 Months",
    "Last 365 Days",
    "This Year",
    "Custom Range",
)


def _months_back(current: dt_date, months: int) -> dt_date:
    month_index = current.year * 12 + current.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp the day for shorter months (e.g. May 31 -> Feb 28).
    day = min(current.day, calendar.monthrange(year, month)[1])
    return dt_date(year, month, day)


def resolve_range(
    option: str,
    today: dt_date | None = None,
    custom_start: str | None = None,
    custom_end: str | None = None,
) -> tuple[str | None, str | None]:
    current = today or dt_date.today()
    end: str | None = current.isoformat()
    if option == "This Month":
        start = dt_date(current.year, current.month, 1)
    elif option == "Last 30 Days":
        start = current - timedelta(days=30)
    elif option == "Last 90 Days":
        start = current - timedelta(days=90)
    elif option == "Last 3 Months":
        start = _months_back(current, 3)
    elif option == "Last 365 Days":
        start = current - timedelta(days=365)
    elif option == "This Year":
        start = dt_date(current.year, 1, 1)
    elif option == "Custom Range":
        return custom_start or end, custom_end or end
    else:
        return None, end
    return start.isoformat(), end


def filter_by_range(
    transactions: list[Transaction], start: str | None, end: str | None
) -> list[Transaction]:
    return [
        t
        for t in transactions
        if (start is None or t.date >= start) and (end is None or t.date <= end)
    ]


def summarize(transactions: list[Transaction], start: str | None, end: str | None) -> dict:
    in_range = filter_by_range(transactions, start, end)
    totals = {type_: 0.0 for type_ in TRANSACTION_TYPES}
    by_category: dict[str, dict[str, float]] = {
        type_: defaultdict(float) for type_ in TRANSACTION_TYPES
    }
    for txn in in_range:
        if txn.type not in totals:
            continue
        totals[txn.type] += txn.amount
        by_category[txn.type][txn.category] += txn.amount

    return {
        "income": totals["income"],
        "expense": totals["expense"],
        "balance": totals["income"] - totals["expense"],
        "count": len(in_range),
        "by_category": {
            type_: [
                {"category": category, "amount": amount}
                for category, amount in sorted(
                    groups.items(), key=lambda item: (-item[1], item[0])
                )
            ]
            for type_, groups in by_category.items()
        },
    }


def recent_transactions(transactions: list[Transaction], limit: int = 5) -> list[Transaction]:
    # sorted() is stable, so same-day entries keep their newest-first order.
    return sorted(transactions, key=lambda t: t.date, reverse=True)[:limit]
