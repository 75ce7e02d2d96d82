"""Dashboard query package."""

from lifemanager.queries.summary import (
    OTHER_LABEL,
    CategoryTotal,
    MonthSummary,
    category_breakdown,
    current_month,
    format_signed_amount,
    recent_transactions,
    summarize_month,
    transactions_in_month,
)

__all__ = [
    "OTHER_LABEL",
    "CategoryTotal",
    "MonthSummary",
    "category_breakdown",
    "current_month",
    "format_signed_amount",
    "recent_transactions",
    "summarize_month",
    "transactions_in_month",
]
