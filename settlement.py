"""Equal-split creation and settlement transitions for expenses.

An expense's ``amount`` doubles as the amount still outstanding: marking a
participant's share paid subtracts it, marking it unpaid adds it back. Shares
are fixed when the expense is created and never recomputed.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from crud import commit, get_expense, reload, to_naive_utc
from database import Expense, SplitDetail
from exceptions import InvalidStateTransitionError, SplitDetailNotFoundError
from schemas import CurrentUser, ExpenseCreate, SplitParticipant

logger = logging.getLogger(__name__)

SHARE_SCALE = Decimal("0.000001")
DEFAULT_PARTICIPANT_NAME = "Anonymous"
DEFAULT_INITIATOR_NAME = "You"


def participant_count(split_with: List[SplitParticipant]) -> int:
    return len(split_with) + 1 if split_with else 1


def equal_share(amount: Decimal, count: int) -> Decimal:
    # No remainder redistribution; drift below the storage scale is accepted
    return (Decimal(amount) / count).quantize(SHARE_SCALE)


def build_split_details(
    amount: Decimal, split_with: List[SplitParticipant], initiator: CurrentUser
) -> List[SplitDetail]:
    """Materialize the full split list: co-payers unpaid, initiator last and paid."""
    share = equal_share(amount, participant_count(split_with))
    details = [
        SplitDetail(
            user_id=person.user_id,
            name=person.name or DEFAULT_PARTICIPANT_NAME,
            share=share,
            has_paid=False,
        )
        for person in split_with
    ]
    details.append(
        SplitDetail(
            user_id=initiator.user_id,
            name=initiator.name or DEFAULT_INITIATOR_NAME,
            share=share,
            has_paid=True,
        )
    )
    return details


def create_expense(db: Session, payload: ExpenseCreate, user: CurrentUser) -> Expense:
    details = build_split_details(payload.amount, payload.split_with, user)
    expense = Expense(
        user_id=user.user_id,
        amount=payload.amount,
        amount_left_to_be_paid=sum(
            (d.share for d in details if not d.has_paid), Decimal(0)
        ),
        category=payload.category,
        description=payload.description,
        split_details=details,
    )
    if payload.date is not None:
        expense.date = to_naive_utc(payload.date)

    db.add(expense)
    commit(db, "add expense")
    reload(db, expense)
    logger.info(
        "Created expense %s for user %s split %d ways",
        expense.id,
        user.user_id,
        len(details),
    )
    return expense


def find_detail(
    expense: Expense,
    detail_index: Optional[int] = None,
    detail_id: Optional[int] = None,
) -> SplitDetail:
    """Resolve a split detail by position, or by its stable id."""
    if detail_id is not None:
        for detail in expense.split_details:
            if detail.id == detail_id:
                return detail
        raise SplitDetailNotFoundError(expense.id)

    if detail_index is None or not 0 <= detail_index < len(expense.split_details):
        raise SplitDetailNotFoundError(expense.id)
    return expense.split_details[detail_index]


def apply_transition(expense: Expense, detail: SplitDetail, has_paid: bool) -> None:
    if detail.has_paid == has_paid:
        raise InvalidStateTransitionError()

    if has_paid:
        expense.amount_left_to_be_paid -= detail.share
        expense.amount -= detail.share
    else:
        expense.amount_left_to_be_paid += detail.share
        expense.amount += detail.share
    detail.has_paid = has_paid


def update_settlement_status(
    db: Session,
    user: CurrentUser,
    expense_id: int,
    has_paid: bool,
    detail_index: Optional[int] = None,
    detail_id: Optional[int] = None,
) -> Expense:
    expense = get_expense(db, user.user_id, expense_id)
    detail = find_detail(expense, detail_index, detail_id)
    try:
        apply_transition(expense, detail, has_paid)
    except InvalidStateTransitionError:
        logger.warning(
            "Split detail %s of expense %s already has has_paid=%s",
            detail.id,
            expense.id,
            has_paid,
        )
        raise

    commit(db, "update payment status")
    reload(db, expense)
    logger.info(
        "Marked %s %s on expense %s",
        detail.name,
        "paid" if has_paid else "unpaid",
        expense.id,
    )
    return expense
