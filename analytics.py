"""Spending breakdowns over a user's expenses.

All sums use the current ``amount`` of each expense, i.e. after settlements
have been applied.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from crud import list_expenses


@dataclass
class CategoryAmount:
    category: str
    amount: Decimal


@dataclass
class DateAmount:
    date: str
    amount: Decimal


@dataclass
class AnalysisResult:
    total_amount: Decimal = Decimal(0)
    category_wise: Dict[str, Decimal] = field(default_factory=dict)
    date_wise: Dict[str, Decimal] = field(default_factory=dict)
    monthly_wise: Dict[str, Decimal] = field(default_factory=dict)
    highest_category: Optional[CategoryAmount] = None
    lowest_category: Optional[CategoryAmount] = None
    highest_date: Optional[DateAmount] = None
    lowest_date: Optional[DateAmount] = None


def highest(totals: Dict[str, Decimal]) -> Optional[str]:
    """Key with the largest total; the first one seen wins a tie."""
    if not totals:
        return None
    return max(totals, key=totals.__getitem__)


def lowest(totals: Dict[str, Decimal]) -> Optional[str]:
    """Key with the smallest total; the first one seen wins a tie."""
    if not totals:
        return None
    return min(totals, key=totals.__getitem__)


def _add(totals: Dict[str, Decimal], key: str, amount: Decimal):
    totals[key] = totals.get(key, Decimal(0)) + amount


def analyze(expenses: Iterable) -> AnalysisResult:
    result = AnalysisResult()
    for expense in expenses:
        amount = Decimal(expense.amount)
        result.total_amount += amount
        _add(result.category_wise, expense.category, amount)
        _add(result.date_wise, expense.date.date().isoformat(), amount)
        _add(result.monthly_wise, expense.date.strftime("%Y-%m"), amount)

    # Extrema stay None for an empty expense set
    key = highest(result.category_wise)
    if key is not None:
        result.highest_category = CategoryAmount(key, result.category_wise[key])
    key = lowest(result.category_wise)
    if key is not None:
        result.lowest_category = CategoryAmount(key, result.category_wise[key])
    key = highest(result.date_wise)
    if key is not None:
        result.highest_date = DateAmount(key, result.date_wise[key])
    key = lowest(result.date_wise)
    if key is not None:
        result.lowest_date = DateAmount(key, result.date_wise[key])
    return result


def analyze_for_user(
    db: Session,
    user_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> AnalysisResult:
    return analyze(list_expenses(db, user_id, start_date, end_date))
