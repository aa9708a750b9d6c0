"""
Split reconciliation.

An expense is accepted only when every split user belongs to the expense's
group and, unless one of the incomplete flags is set, both of these hold
within the configured tolerance:

    sum(paid splits) == amount
    sum(owed splits) == amount

The two sums are checked independently: one person may pay the whole bill
while several people owe shares of it. Nothing here touches the database
except the membership lookup.
"""
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import split_tolerance
from ..errors import ValidationError
from .membership import all_members_of

logger = logging.getLogger(__name__)

# Money is stored as Numeric(12, 2)
CENT = Decimal("0.01")
MAX_MONEY = Decimal("9999999999.99")


@dataclass
class SplitDraft:
    user_id: str
    amount: Decimal
    is_paid: bool


@dataclass
class ExpenseDraft:
    """Expense fields as submitted, before (or after) reconciliation."""

    group_id: str
    added_by_user_id: str
    title: str
    amount: Decimal
    description: Optional[str] = None
    is_incomplete_amount: bool = False
    is_incomplete_split: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    splits: List[SplitDraft] = field(default_factory=list)
    id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return not (self.is_incomplete_amount or self.is_incomplete_split)


def check_money(value: Decimal, label: str = "amount") -> None:
    """Reject a value the money columns cannot store exactly."""
    if not value.is_finite() or abs(value) > MAX_MONEY:
        raise ValidationError(f"{label} out of range")
    if value.quantize(CENT) != value:
        raise ValidationError(f"{label} must have at most 2 decimal places")


# PUBLIC_INTERFACE
def validate_expense_fields(expense: ExpenseDraft) -> None:
    """Reject an expense with an empty title or an amount that is not a positive cent value."""
    if not expense.title or not expense.title.strip():
        raise ValidationError("title required")
    if expense.amount is None:
        raise ValidationError("invalid amount")
    check_money(expense.amount)
    if expense.amount <= 0:
        raise ValidationError("invalid amount")


# PUBLIC_INTERFACE
def split_totals(splits: Iterable[SplitDraft]) -> Tuple[Decimal, Decimal]:
    """Return (paid_total, owed_total) for a split set."""
    paid_total = Decimal("0")
    owed_total = Decimal("0")
    for split in splits:
        if split.is_paid:
            paid_total += split.amount
        else:
            owed_total += split.amount
    return paid_total, owed_total


# PUBLIC_INTERFACE
def validate_and_reconcile(
    expense: ExpenseDraft,
    splits: Sequence[SplitDraft],
    tolerance: Optional[Decimal] = None,
) -> ExpenseDraft:
    """Check an expense and its splits; return the expense ready for storage.

    Parameters:
        expense: The proposed expense. Its `group_id` decides the membership check.
        splits: The proposed split set. A user may appear twice (paid and owed).
        tolerance: Maximum allowed difference between a split total and the
                   amount. Defaults to the configured SPLIT_TOLERANCE.

    Returns:
        A copy of `expense` carrying `splits`.

    Raises:
        ValidationError: empty split set, a negative split amount or one finer
            than a cent, a split user
            outside the group, or a paid/owed total that misses the amount.
    """
    validate_expense_fields(expense)

    if not splits:
        raise ValidationError("no splits provided")
    for split in splits:
        if split.amount is None:
            raise ValidationError("split amount required")
        check_money(split.amount, "split amount")
        if split.amount < 0:
            raise ValidationError("split amount must not be negative")

    paid_total, owed_total = split_totals(splits)

    if not all_members_of((s.user_id for s in splits), expense.group_id):
        logger.warning("Rejected expense for group %s: split user not in group", expense.group_id)
        raise ValidationError("split user not in group")

    if expense.is_complete:
        if tolerance is None:
            tolerance = split_tolerance()
        if abs(paid_total - expense.amount) > tolerance:
            logger.warning(
                "Rejected expense for group %s: paid total %s vs amount %s",
                expense.group_id, paid_total, expense.amount,
            )
            raise ValidationError("paid split total does not match expense amount")
        if abs(owed_total - expense.amount) > tolerance:
            logger.warning(
                "Rejected expense for group %s: owed total %s vs amount %s",
                expense.group_id, owed_total, expense.amount,
            )
            raise ValidationError("owed split total does not match expense amount")

    return replace(expense, splits=list(splits))
