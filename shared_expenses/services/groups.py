"""
Group lifecycle and membership management.

The group's creator is its permanent admin: the only user allowed to add or
remove members, and never removable itself.
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy import delete, select

from .. import db
from ..errors import AuthorizationError, NotFoundError, ValidationError
from ..models import Expense, ExpenseSplit, Group, GroupMember, User
from ..utils.validation import validate_name
from . import atomic

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def get_group(group_id: str) -> Group:
    """Load a group (with its members), or raise NotFoundError."""
    group = db.session.get(Group, group_id) if group_id else None
    if group is None:
        raise NotFoundError("group not found")
    return group


# PUBLIC_INTERFACE
def create_group(name: str, description: Optional[str], creator_id: str) -> Group:
    """Create a group and make its creator the first member, in one transaction."""
    name = validate_name(name)
    if db.session.get(User, creator_id) is None:
        raise NotFoundError("user not found")

    with atomic("create group") as session:
        group = Group(name=name, description=description, created_by_user_id=creator_id)
        session.add(group)
        session.flush()  # to get group.id
        session.add(GroupMember(group_id=group.id, user_id=creator_id))

    logger.info("Created group %s by user %s", group.id, creator_id)
    return group


# PUBLIC_INTERFACE
def groups_for_member(user_id: str) -> List[Group]:
    """Groups the user belongs to, most recent first."""
    return (
        Group.query.join(GroupMember, GroupMember.group_id == Group.id)
        .filter(GroupMember.user_id == user_id)
        .order_by(Group.created_at.desc())
        .all()
    )


# PUBLIC_INTERFACE
def groups_administered(user_id: str) -> List[Group]:
    """Groups the user created, most recent first."""
    return Group.query.filter_by(created_by_user_id=user_id).order_by(Group.created_at.desc()).all()


def _require_admin(group: Group, actor_id: str, action: str) -> None:
    if group.created_by_user_id != actor_id:
        logger.warning("User %s tried to %s in group %s", actor_id, action, group.id)
        raise AuthorizationError(f"only group admin can {action}")


# PUBLIC_INTERFACE
def add_members(group_id: str, actor_id: str, user_ids: Iterable[str]) -> List[str]:
    """Add existing users to the group; unknown ids are skipped.

    Returns:
        The ids of existing users that are members after the call, in request order.
    """
    group = get_group(group_id)
    _require_admin(group, actor_id, "add members")

    requested = list(dict.fromkeys(user_ids))
    existing = set(db.session.scalars(select(User.id).where(User.id.in_(requested))))
    valid_ids = [uid for uid in requested if uid in existing]
    if not valid_ids:
        raise ValidationError("no valid user IDs")

    current = set(
        db.session.scalars(
            select(GroupMember.user_id).where(
                GroupMember.group_id == group_id, GroupMember.user_id.in_(valid_ids)
            )
        )
    )
    with atomic("add group members") as session:
        session.add_all(
            [GroupMember(group_id=group_id, user_id=uid) for uid in valid_ids if uid not in current]
        )

    logger.info("Added %d members to group %s", len(valid_ids) - len(current), group_id)
    return valid_ids


# PUBLIC_INTERFACE
def remove_members(group_id: str, actor_id: str, user_ids: Iterable[str]) -> List[str]:
    """Remove users from the group. The group's creator can never be removed."""
    group = get_group(group_id)
    user_ids = list(dict.fromkeys(user_ids))
    if not user_ids:
        raise ValidationError("no user IDs provided")
    # Checked before the actor so that nobody, the admin included, can remove the admin
    if group.created_by_user_id in user_ids:
        raise AuthorizationError("cannot remove group admin")
    _require_admin(group, actor_id, "remove members")

    with atomic("remove group members") as session:
        session.execute(
            delete(GroupMember).where(
                GroupMember.group_id == group_id, GroupMember.user_id.in_(user_ids)
            )
        )

    logger.info("Removed members %s from group %s", user_ids, group_id)
    return user_ids


# PUBLIC_INTERFACE
def delete_group(group_id: str, actor_id: str) -> None:
    """Delete a group with its expenses, their splits and its memberships."""
    group = get_group(group_id)
    _require_admin(group, actor_id, "delete the group")

    expense_ids = select(Expense.id).where(Expense.group_id == group_id)
    with atomic("delete group") as session:
        session.execute(delete(ExpenseSplit).where(ExpenseSplit.expense_id.in_(expense_ids)))
        session.execute(delete(Expense).where(Expense.group_id == group_id))
        session.execute(delete(GroupMember).where(GroupMember.group_id == group_id))
        session.execute(delete(Group).where(Group.id == group_id))

    logger.info("Deleted group %s", group_id)
