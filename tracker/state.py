"""The finance state container.

``FinanceState`` owns the transaction list (most recent first), the custom
categories and the balance checkpoint. Every mutation writes the affected
entity back to the injected key-value store as JSON. Invalid input is
ignored rather than raised.
"""

import json
import time

from .logging_setup import get_logger
from .logic import is_finite_number, is_positive_amount
from .models import (
    DEFAULT_CATEGORIES,
    TRANSACTION_TYPES,
    BalanceState,
    CategorySet,
    Transaction,
)
from .storage import KeyValueStore

logger = get_logger("tracker.state")

TRANSACTIONS_KEY = "transactions"
BALANCE_KEY = "editPageBaseBalance"
LEGACY_BALANCE_KEY = "initialBalance"
CHECKPOINT_KEY = "editPageBalanceSetIdx"
CATEGORIES_KEY = "customCategories"

EDITABLE_FIELDS = ("type", "amount", "category", "date")


class IdGenerator:
    """Millisecond timestamps that never repeat or go backwards."""

    def __init__(self, last: int = 0, clock=time.time):
        self._last = last
        self._clock = clock

    def __call__(self) -> int:
        now_ms = int(self._clock() * 1000)
        self._last = max(now_ms, self._last + 1)
        return self._last


def dump_transactions(transactions: list[Transaction]) -> str:
    return json.dumps([t.to_dict() for t in transactions])


def load_transactions(raw: str) -> list[Transaction]:
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("transactions snapshot must be a list")
    return [Transaction.from_dict(item) for item in data]


class FinanceState:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        transactions: list[Transaction] | None = None,
        categories: CategorySet | None = None,
        balance: BalanceState | None = None,
        id_generator: IdGenerator | None = None,
    ):
        self.store = store
        self.transactions = list(transactions or [])
        self.categories = categories or CategorySet()
        self.balance = balance or BalanceState()
        self._next_id = id_generator or IdGenerator(
            max((t.id for t in self.transactions), default=0)
        )

    @classmethod
    def load(cls, store: KeyValueStore) -> "FinanceState":
        """Rehydrate from ``store``; each unreadable entity falls back to its default."""
        transactions: list[Transaction] = []
        raw = store.get(TRANSACTIONS_KEY)
        if raw is not None:
            try:
                transactions = load_transactions(raw)
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("Ignoring unreadable %s snapshot: %s", TRANSACTIONS_KEY, exc)

        categories = CategorySet()
        raw = store.get(CATEGORIES_KEY)
        if raw is not None:
            try:
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise ValueError("categories snapshot must be an object")
                categories = CategorySet.from_dict(data)
            except (ValueError, TypeError) as exc:
                logger.warning("Ignoring unreadable %s snapshot: %s", CATEGORIES_KEY, exc)

        balance = BalanceState()
        raw = store.get(BALANCE_KEY)
        if raw is None:
            raw = store.get(LEGACY_BALANCE_KEY)
        if raw is not None:
            try:
                value = json.loads(raw)
                if not is_finite_number(value):
                    raise ValueError(f"not a finite number: {raw!r}")
                balance.initial_balance = float(value)
            except ValueError as exc:
                logger.warning("Ignoring unreadable %s snapshot: %s", BALANCE_KEY, exc)
        raw = store.get(CHECKPOINT_KEY)
        if raw is not None:
            try:
                value = json.loads(raw)
                if not is_finite_number(value) or value < 0:
                    raise ValueError(f"not a valid index: {raw!r}")
                balance.checkpoint_index = min(int(value), len(transactions))
            except ValueError as exc:
                logger.warning("Ignoring unreadable %s snapshot: %s", CHECKPOINT_KEY, exc)

        logger.info(
            "Loaded %d transactions, checkpoint at %d",
            len(transactions),
            balance.checkpoint_index,
        )
        return cls(store, transactions=transactions, categories=categories, balance=balance)

    def _save_transactions(self) -> None:
        self.store.set(TRANSACTIONS_KEY, dump_transactions(self.transactions))

    def _save_categories(self) -> None:
        self.store.set(CATEGORIES_KEY, json.dumps(self.categories.to_dict()))

    def _save_balance(self) -> None:
        self.store.set(BALANCE_KEY, json.dumps(self.balance.initial_balance))
        self.store.set(CHECKPOINT_KEY, json.dumps(self.balance.checkpoint_index))

    def get_transaction(self, txn_id: int) -> Transaction | None:
        for txn in self.transactions:
            if txn.id == txn_id:
                return txn
        return None

    def add_transaction(self, candidate: dict) -> Transaction | None:
        amount = candidate.get("amount")
        if not is_positive_amount(amount):
            logger.debug("Rejected transaction with amount %r", amount)
            return None
        if candidate.get("type") not in TRANSACTION_TYPES:
            logger.debug("Rejected transaction with type %r", candidate.get("type"))
            return None
        txn = Transaction(
            id=self._next_id(),
            type=candidate["type"],
            amount=float(amount),
            category=candidate.get("category", ""),
            date=candidate.get("date", ""),
        )
        self.transactions.insert(0, txn)
        self._save_transactions()
        logger.debug("Added transaction %d", txn.id)
        return txn

    def update_transaction(self, txn_id: int, field: str, value) -> None:
        if field not in EDITABLE_FIELDS:
            logger.debug("Ignored update of unknown field %r", field)
            return
        txn = self.get_transaction(txn_id)
        if txn is None:
            return
        setattr(txn, field, value)
        self._save_transactions()
        logger.debug("Updated %s of transaction %d", field, txn_id)

    def delete_transaction(self, txn_id: int) -> None:
        for pos, txn in enumerate(self.transactions):
            if txn.id == txn_id:
                break
        else:
            return
        # Positions count from the newest entry, so pre-checkpoint entries
        # are the last ``checkpoint_index`` ones.
        folded = pos >= len(self.transactions) - self.balance.checkpoint_index
        del self.transactions[pos]
        self._save_transactions()
        if folded:
            self.balance.checkpoint_index -= 1
            self._save_balance()
        logger.debug("Deleted transaction %d", txn_id)

    def add_custom_category(self, type_: str, name: str) -> None:
        if type_ not in TRANSACTION_TYPES:
            return
        trimmed = name.strip() if isinstance(name, str) else ""
        if not trimmed:
            return
        self.categories.for_type(type_).append(trimmed)
        self._save_categories()
        logger.debug("Added %s category %r", type_, trimmed)

    def set_balance_checkpoint(self, value) -> None:
        if not is_finite_number(value):
            return
        self.balance.initial_balance = float(value)
        self.balance.checkpoint_index = len(self.transactions)
        self._save_balance()
        logger.debug(
            "Balance checkpoint set to %s at index %d",
            value,
            self.balance.checkpoint_index,
        )

    def transactions_since_checkpoint(self) -> list[Transaction]:
        return self.transactions[: len(self.transactions) - self.balance.checkpoint_index]

    def current_balance(self) -> float:
        total = self.balance.initial_balance
        for txn in self.transactions_since_checkpoint():
            if txn.type == "income":
                total += txn.amount
            elif txn.type == "expense":
                total -= txn.amount
        return total

    def categories_for(self, type_: str) -> list[str]:
        if type_ not in TRANSACTION_TYPES:
            return []
        return [*DEFAULT_CATEGORIES[type_], *self.categories.for_type(type_)]

    def category_exists(self, type_: str, name: str) -> bool:
        return name.strip() in self.categories_for(type_)

    def snapshot(self) -> dict:
        return {
            "transactions": [t.to_dict() for t in self.transactions],
            "custom_categories": self.categories.to_dict(),
            "initial_balance": self.balance.initial_balance,
            "checkpoint_index": self.balance.checkpoint_index,
            "current_balance": self.current_balance(),
        }
