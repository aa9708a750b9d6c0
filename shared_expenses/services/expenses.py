"""
Expense storage.

Every write runs in a single transaction. Splits are never edited in place:
an update deletes the whole split set and inserts the new one.
"""
import logging
from typing import List, Optional

from sqlalchemy import delete, update

from .. import db
from ..errors import AuthorizationError, NotFoundError, ValidationError
from ..models import Expense, ExpenseSplit, Group
from . import atomic
from .reconciliation import ExpenseDraft, SplitDraft, validate_expense_fields

logger = logging.getLogger(__name__)


def _split_rows(expense_id: str, splits: List[SplitDraft]) -> List[ExpenseSplit]:
    return [
        ExpenseSplit(expense_id=expense_id, user_id=s.user_id, amount=s.amount, is_paid=s.is_paid)
        for s in splits
    ]


# PUBLIC_INTERFACE
def get_expense(expense_id: str) -> Expense:
    """Load an expense with its splits, or raise NotFoundError."""
    expense = db.session.get(Expense, expense_id) if expense_id else None
    if expense is None:
        raise NotFoundError("expense not found")
    return expense


# PUBLIC_INTERFACE
def list_group_expenses(group_id: str) -> List[Expense]:
    """All expenses of a group, most recent first."""
    return (
        Expense.query.filter_by(group_id=group_id)
        .order_by(Expense.created_at.desc())
        .all()
    )


# PUBLIC_INTERFACE
def ensure_can_modify(expense: Expense, actor_id: str) -> None:
    """Only the expense's creator or the group's creator may change or delete it."""
    group_creator = db.session.query(Group.created_by_user_id).filter(Group.id == expense.group_id).scalar()
    if actor_id not in (expense.added_by_user_id, group_creator):
        logger.warning("User %s may not modify expense %s", actor_id, expense.id)
        raise AuthorizationError("not authorized")


# PUBLIC_INTERFACE
def create_expense(expense: ExpenseDraft) -> Expense:
    """Insert an expense and all of its splits atomically.

    The identifier and creation timestamp are assigned here. If any split
    insert fails, the expense row is rolled back with it.
    """
    validate_expense_fields(expense)

    with atomic("create expense") as session:
        row = Expense(
            group_id=expense.group_id,
            added_by_user_id=expense.added_by_user_id,
            title=expense.title.strip(),
            description=expense.description,
            amount=expense.amount,
            is_incomplete_amount=expense.is_incomplete_amount,
            is_incomplete_split=expense.is_incomplete_split,
            latitude=expense.latitude,
            longitude=expense.longitude,
        )
        session.add(row)
        session.flush()  # to get row.id
        session.add_all(_split_rows(row.id, expense.splits))
        session.flush()

    logger.info("Created expense %s in group %s with %d splits", row.id, row.group_id, len(expense.splits))
    return get_expense(row.id)


# PUBLIC_INTERFACE
def update_expense(expense: ExpenseDraft, actor_id: Optional[str] = None) -> None:
    """Replace an expense's mutable fields and its whole split set.

    When `actor_id` is given it must be allowed to modify the expense.
    """
    if not expense.id:
        raise ValidationError("expense_id required")
    validate_expense_fields(expense)

    with atomic("update expense") as session:
        if actor_id is not None:
            ensure_can_modify(get_expense(expense.id), actor_id)

        result = session.execute(
            update(Expense)
            .where(Expense.id == expense.id)
            .values(
                title=expense.title.strip(),
                description=expense.description,
                amount=expense.amount,
                is_incomplete_amount=expense.is_incomplete_amount,
                is_incomplete_split=expense.is_incomplete_split,
                latitude=expense.latitude,
                longitude=expense.longitude,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError("expense not found")

        # Remove old splits first
        session.execute(delete(ExpenseSplit).where(ExpenseSplit.expense_id == expense.id))
        session.add_all(_split_rows(expense.id, expense.splits))
        session.flush()

    logger.info("Updated expense %s with %d splits", expense.id, len(expense.splits))


# PUBLIC_INTERFACE
def delete_expense(expense_id: str, actor_id: Optional[str] = None) -> None:
    """Delete an expense and its splits in one transaction."""
    if not expense_id:
        raise ValidationError("expense_id required")

    with atomic("delete expense") as session:
        if actor_id is not None:
            ensure_can_modify(get_expense(expense_id), actor_id)

        session.execute(delete(ExpenseSplit).where(ExpenseSplit.expense_id == expense_id))
        result = session.execute(delete(Expense).where(Expense.id == expense_id))
        if result.rowcount == 0:
            raise NotFoundError("expense not found")

    logger.info("Deleted expense %s", expense_id)
