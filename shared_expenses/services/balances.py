"""Per-user net spending within a group, recomputed from stored splits on every call."""
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from .. import db
from ..errors import NotFoundError
from ..models import Expense, ExpenseSplit, Group, User


@dataclass(frozen=True)
class NetSpendingEntry:
    """A user's position on one expense. net_spending = amount_paid - amount_owed."""

    expense_id: str
    title: str
    description: Optional[str]
    created_at: datetime
    total_amount: Decimal
    amount_paid: Decimal
    amount_owed: Decimal
    net_spending: Decimal


# PUBLIC_INTERFACE
def net_spending(group_id: str, user_id: str) -> List[NetSpendingEntry]:
    """Return the user's net spending for each expense of the group, newest first.

    Expenses on which the user's paid and owed totals are exactly equal
    (including expenses the user has no split on) are left out.
    """
    if db.session.get(Group, group_id) is None:
        raise NotFoundError("group not found")
    if db.session.get(User, user_id) is None:
        raise NotFoundError("user not found")

    expenses = (
        Expense.query.filter_by(group_id=group_id)
        .order_by(Expense.created_at.desc())
        .all()
    )
    user_splits = (
        ExpenseSplit.query.join(Expense, ExpenseSplit.expense_id == Expense.id)
        .filter(Expense.group_id == group_id, ExpenseSplit.user_id == user_id)
        .all()
    )

    paid: Dict[str, Decimal] = defaultdict(Decimal)
    owed: Dict[str, Decimal] = defaultdict(Decimal)
    for split in user_splits:
        bucket = paid if split.is_paid else owed
        bucket[split.expense_id] += Decimal(split.amount)

    entries = []
    for expense in expenses:
        amount_paid = paid[expense.id]
        amount_owed = owed[expense.id]
        net = amount_paid - amount_owed
        if net == 0:
            continue
        entries.append(
            NetSpendingEntry(
                expense_id=expense.id,
                title=expense.title,
                description=expense.description,
                created_at=expense.created_at,
                total_amount=Decimal(expense.amount),
                amount_paid=amount_paid,
                amount_owed=amount_owed,
                net_spending=net,
            )
        )
    return entries
