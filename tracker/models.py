import math
from dataclasses import asdict, dataclass, field

TRANSACTION_TYPES = ("income", "expense")

DEFAULT_CATEGORIES = {
    "income": ("Paycheck", "Freelance Gig", "Gift"),
    "expense": ("Need", "Want"),
}


@dataclass
class Transaction:
    id: int
    type: str
    amount: float
    category: str
    date: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        amount = data["amount"]
        if (
            isinstance(amount, bool)
            or not isinstance(amount, (int, float))
            or not math.isfinite(amount)
        ):
            raise ValueError(f"amount must be a finite number: {amount!r}")
        if data["type"] not in TRANSACTION_TYPES:
            raise ValueError(f"unknown transaction type: {data['type']!r}")
        for key in ("category", "date"):
            if not isinstance(data[key], str):
                raise ValueError(f"{key} must be a string: {data[key]!r}")
        return cls(
            id=int(data["id"]),
            type=data["type"],
            amount=amount,
            category=data["category"],
            date=data["date"],
        )


@dataclass
class CategorySet:
    income: list[str] = field(default_factory=list)
    expense: list[str] = field(default_factory=list)

    def for_type(self, type_: str) -> list[str]:
        return getattr(self, type_)

    def to_dict(self) -> dict:
        return {"income": list(self.income), "expense": list(self.expense)}

    @classmethod
    def from_dict(cls, data: dict) -> "CategorySet":
        income = data.get("income", [])
        expense = data.get("expense", [])
        if not isinstance(income, list) or not isinstance(expense, list):
            raise ValueError("custom categories must be lists")
        return cls(income=[str(c) for c in income], expense=[str(c) for c in expense])


@dataclass
class BalanceState:
    initial_balance: float = 0.0
    checkpoint_index: int = 0
