from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable

BALANCE_KEYS = ("name", "user_id")


@dataclass
class Balances:
    total_amount_spent: Decimal = Decimal(0)
    total_amount_left_to_be_paid: Decimal = Decimal(0)
    individual_balances: Dict[str, Decimal] = field(default_factory=dict)


def participant_key(detail, key: str) -> str:
    if key == "name":
        return detail.name
    # Ids and bare names live in separate namespaces so they never merge
    if detail.user_id:
        return f"user:{detail.user_id}"
    return f"name:{detail.name}"


def reconcile(expenses: Iterable, key: str = "name") -> Balances:
    """Fold unpaid shares into outstanding balances and the net amount spent.

    With ``key="name"`` participants are joined on display name, so two
    people called "Sam" end up in one balance. ``key="user_id"`` keeps
    registered participants apart; its keys are ``"user:<id>"`` or, for
    unregistered participants, ``"name:<display name>"``.
    """
    if key not in BALANCE_KEYS:
        raise ValueError(f"Unknown balance key {key!r}")

    balances = Balances()
    gross = Decimal(0)
    for expense in expenses:
        gross += Decimal(expense.amount)
        for detail in expense.split_details:
            if detail.has_paid:
                continue
            share = Decimal(detail.share)
            balances.total_amount_left_to_be_paid += share
            name = participant_key(detail, key)
            balances.individual_balances[name] = (
                balances.individual_balances.get(name, Decimal(0)) + share
            )

    balances.total_amount_spent = gross - balances.total_amount_left_to_be_paid
    return balances

