# crud.py
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from database import Expense
from exceptions import ExpenseNotFoundError, PersistenceError
from schemas import ExpenseUpdate

logger = logging.getLogger(__name__)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def commit(db: Session, action: str):
    """Commit the session, rolling back and raising PersistenceError on failure."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise PersistenceError(f"Failed to {action}") from e


def reload(db: Session, expense: Expense):
    """Refresh an expense and its split list after a commit."""
    try:
        db.refresh(expense, ["split_details"])
        db.refresh(expense)
    except SQLAlchemyError as e:
        logger.exception("Failed to reload expense")
        raise PersistenceError("Failed to reload expense") from e


def list_expenses(
    db: Session,
    user_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Expense]:
    query = (
        db.query(Expense)
        .options(selectinload(Expense.split_details))
        .filter(Expense.user_id == user_id)
    )
    if start_date:
        query = query.filter(Expense.date >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(
            Expense.date < datetime.combine(end_date + timedelta(days=1), time.min)
        )
    try:
        return query.order_by(Expense.id).all()
    except SQLAlchemyError as e:
        logger.exception("Failed to fetch expenses for user %s", user_id)
        raise PersistenceError("Failed to fetch expenses") from e


def get_expense(db: Session, user_id: str, expense_id: int) -> Expense:
    try:
        expense = (
            db.query(Expense)
            .options(selectinload(Expense.split_details))
            .filter(Expense.id == expense_id, Expense.user_id == user_id)
            .first()
        )
    except SQLAlchemyError as e:
        logger.exception("Failed to fetch expense %s", expense_id)
        raise PersistenceError("Failed to fetch expense") from e
    if not expense:
        raise ExpenseNotFoundError(expense_id)
    return expense


def edit_expense(
    db: Session, user_id: str, expense_id: int, changes: ExpenseUpdate
) -> Expense:
    """Apply a partial update. Split details are left as created."""
    expense = get_expense(db, user_id, expense_id)
    fields = changes.model_dump(exclude_unset=True)
    # Null for a required column means "leave unchanged"
    for field, value in fields.items():
        if value is None and field != "description":
            continue
        if field == "date":
            value = to_naive_utc(value)
        setattr(expense, field, value)

    commit(db, "update expense")
    reload(db, expense)
    logger.info("Updated expense %s fields %s", expense.id, sorted(fields))
    return expense


def delete_expense(db: Session, user_id: str, expense_id: int):
    expense = get_expense(db, user_id, expense_id)
    db.delete(expense)
    commit(db, "delete expense")
    logger.info("Deleted expense %s for user %s", expense_id, user_id)
