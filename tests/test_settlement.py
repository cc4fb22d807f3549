"""Tests for equal-split creation and settlement transitions."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from database import Expense, SplitDetail
from exceptions import (
    ExpenseNotFoundError,
    InvalidStateTransitionError,
    PersistenceError,
    SplitDetailNotFoundError,
)
from schemas import CurrentUser, ExpenseCreate, SplitParticipant
from settlement import (
    build_split_details,
    create_expense,
    equal_share,
    participant_count,
    update_settlement_status,
)


def make_payload(amount, names=(), category="Food", **kwargs):
    return ExpenseCreate(
        amount=Decimal(str(amount)),
        category=category,
        split_with=[SplitParticipant(name=n) for n in names],
        **kwargs,
    )


class TestSplitComputation:
    def test_participant_count_includes_initiator(self):
        assert participant_count([]) == 1
        assert participant_count([SplitParticipant(name="Bob")]) == 2
        assert participant_count([SplitParticipant(), SplitParticipant()]) == 3

    @pytest.mark.parametrize("k", [0, 1, 2, 4])
    def test_split_list_has_k_plus_one_equal_entries(self, alice, k):
        names = [f"P{i}" for i in range(k)]
        details = build_split_details(
            Decimal("120"), [SplitParticipant(name=n) for n in names], alice
        )

        assert len(details) == k + 1
        assert all(d.share == Decimal("120") / (k + 1) for d in details)
        assert [d.has_paid for d in details].count(True) == 1
        assert details[-1].has_paid is True
        assert details[-1].name == "Alice"

    def test_default_names(self):
        details = build_split_details(
            Decimal("30"), [SplitParticipant()], CurrentUser(user_id="u1")
        )

        assert [d.name for d in details] == ["Anonymous", "You"]
        assert details[1].user_id == "u1"

    def test_uneven_division_is_not_redistributed(self):
        assert equal_share(Decimal("100"), 3) == Decimal("33.333333")


class TestCreateExpense:
    def test_scenario_alice_and_bob(self, db, alice):
        expense = create_expense(db, make_payload(300, ["Bob"]), alice)

        assert expense.id is not None
        assert expense.user_id == "alice-id"
        assert expense.amount == Decimal("300")
        assert [(d.name, d.share, d.has_paid) for d in expense.split_details] == [
            ("Bob", Decimal("150"), False),
            ("Alice", Decimal("150"), True),
        ]
        assert expense.amount_left_to_be_paid == Decimal("150")

    def test_registered_participant_keeps_user_id(self, db, alice):
        payload = ExpenseCreate(
            amount=Decimal("50"),
            category="Taxi",
            split_with=[SplitParticipant(user_id="bob-id", name="Bob")],
        )

        expense = create_expense(db, payload, alice)

        assert expense.split_details[0].user_id == "bob-id"

    def test_explicit_date_is_stored_as_utc(self, db, alice):
        when = datetime(2024, 3, 5, 23, 30, tzinfo=timezone.utc)

        expense = create_expense(db, make_payload(10, date=when), alice)

        assert expense.date == datetime(2024, 3, 5, 23, 30)

    def test_solo_expense_has_nothing_outstanding(self, db, alice):
        expense = create_expense(db, make_payload(42), alice)

        assert len(expense.split_details) == 1
        assert expense.amount_left_to_be_paid == 0


class TestUpdateSettlementStatus:
    @pytest.fixture
    def expense(self, db, alice):
        return create_expense(db, make_payload(300, ["Bob"]), alice)

    def test_mark_paid_reduces_amount(self, db, alice, expense):
        updated = update_settlement_status(db, alice, expense.id, True, detail_index=0)

        assert updated.amount == Decimal("150")
        assert updated.amount_left_to_be_paid == 0
        assert updated.split_details[0].has_paid is True

    def test_round_trip_restores_amount(self, db, alice, expense):
        update_settlement_status(db, alice, expense.id, True, detail_index=0)
        restored = update_settlement_status(db, alice, expense.id, False, detail_index=0)

        assert restored.amount == Decimal("300")
        assert restored.amount_left_to_be_paid == Decimal("150")
        assert restored.split_details[0].has_paid is False

    def test_repeated_status_is_rejected_and_state_kept(self, db, alice, expense):
        update_settlement_status(db, alice, expense.id, True, detail_index=0)

        with pytest.raises(InvalidStateTransitionError):
            update_settlement_status(db, alice, expense.id, True, detail_index=0)

        db.refresh(expense)
        assert expense.amount == Decimal("150")
        assert expense.split_details[0].has_paid is True

    def test_initiator_is_already_paid(self, db, alice, expense):
        with pytest.raises(InvalidStateTransitionError):
            update_settlement_status(db, alice, expense.id, True, detail_index=1)

    def test_address_by_detail_id(self, db, alice, expense):
        bob_detail = expense.split_details[0]

        updated = update_settlement_status(
            db, alice, expense.id, True, detail_id=bob_detail.id
        )

        assert updated.amount == Decimal("150")

    def test_unknown_expense(self, db, alice):
        with pytest.raises(ExpenseNotFoundError):
            update_settlement_status(db, alice, 999, True, detail_index=0)

    def test_foreign_expense_is_not_found(self, db, bob, expense):
        with pytest.raises(ExpenseNotFoundError):
            update_settlement_status(db, bob, expense.id, True, detail_index=0)

    @pytest.mark.parametrize("index", [2, 10])
    def test_index_out_of_range(self, db, alice, expense, index):
        with pytest.raises(SplitDetailNotFoundError):
            update_settlement_status(db, alice, expense.id, True, detail_index=index)

    def test_unknown_detail_id(self, db, alice, expense):
        with pytest.raises(SplitDetailNotFoundError):
            update_settlement_status(db, alice, expense.id, True, detail_id=12345)


class TestPersistenceFailure:
    def test_failed_create_rolls_back(self, db, alice):
        with patch.object(db, "commit", side_effect=SQLAlchemyError("disk full")):
            with pytest.raises(PersistenceError):
                create_expense(db, make_payload(300, ["Bob"]), alice)

        assert db.query(Expense).count() == 0
        assert db.query(SplitDetail).count() == 0

    def test_failed_status_update_keeps_stored_state(
        self, db, session_factory, alice
    ):
        expense = create_expense(db, make_payload(300, ["Bob"]), alice)

        with patch.object(db, "commit", side_effect=SQLAlchemyError("disk full")):
            with pytest.raises(PersistenceError):
                update_settlement_status(db, alice, expense.id, True, detail_index=0)

        with session_factory() as other:
            stored = other.get(Expense, expense.id)
            assert stored.amount == Decimal("300")
            assert stored.split_details[0].has_paid is False
