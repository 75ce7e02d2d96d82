"""
Dashboard Queries

Deterministic aggregations over the fetched dataset. Nothing here
touches storage: the views fetch once and derive every figure from
the same in-memory records, so totals always match the list shown.

Months are matched by the ``YYYY-MM`` prefix of the transaction date.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from lifemanager.models.records import Category, Transaction, TransactionType


OTHER_LABEL = "Other"


class MonthSummary(BaseModel):
    """Income, expense and balance for one month."""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    income: float = 0.0
    expense: float = 0.0
    count: int = 0

    @property
    def balance(self) -> float:
        return self.income - self.expense


class CategoryTotal(BaseModel):
    """Expense total for one category label."""

    label: str
    amount: float
    color: Optional[str] = None


def current_month(today: Optional[date] = None) -> str:
    return (today or date.today()).isoformat()[:7]


def transactions_in_month(
    transactions: list[Transaction],
    month: str,
) -> list[Transaction]:
    return [tx for tx in transactions if tx.month == month]


def summarize_month(transactions: list[Transaction], month: str) -> MonthSummary:
    """
    Total income and expense for the month.

    Balance is derived, so income minus expense holds by construction.
    """
    income = 0.0
    expense = 0.0
    selected = transactions_in_month(transactions, month)

    for tx in selected:
        if tx.type == TransactionType.INCOME:
            income += tx.amount
        else:
            expense += tx.amount

    return MonthSummary(
        month=month,
        income=income,
        expense=expense,
        count=len(selected),
    )


def category_breakdown(
    transactions: list[Transaction],
    categories: list[Category],
    month: str,
) -> list[CategoryTotal]:
    """
    Expense totals per category label, largest first.

    Transactions whose category no longer exists are grouped under
    ``Other``. Categories sharing a label are merged.
    """
    by_id = {category.id: category for category in categories}
    totals: dict[str, float] = {}
    colors: dict[str, Optional[str]] = {}

    for tx in transactions_in_month(transactions, month):
        if tx.type != TransactionType.EXPENSE:
            continue
        category = by_id.get(tx.category_id)
        label = category.label if category else OTHER_LABEL
        totals[label] = totals.get(label, 0.0) + tx.amount
        colors.setdefault(label, category.color if category else None)

    result = [
        CategoryTotal(label=label, amount=amount, color=colors[label])
        for label, amount in totals.items()
    ]
    result.sort(key=lambda total: total.amount, reverse=True)
    return result


def recent_transactions(
    transactions: list[Transaction],
    limit: int = 10,
) -> list[Transaction]:
    # Fetches return newest first
    return transactions[:limit]


def format_signed_amount(tx: Transaction) -> str:
    sign = "+" if tx.type == TransactionType.INCOME else "-"
    return f"{sign}{tx.amount:,.2f}"
