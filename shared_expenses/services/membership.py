"""Membership checks: is a user (or a set of users) in a group."""
from typing import Iterable

from sqlalchemy import distinct, func, select

from .. import db
from ..errors import AuthorizationError
from ..models import GroupMember


# PUBLIC_INTERFACE
def is_member(user_id: str, group_id: str) -> bool:
    """Return True if the user currently belongs to the group."""
    row = (
        db.session.query(GroupMember.id)
        .filter(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
        .first()
    )
    return row is not None


# PUBLIC_INTERFACE
def all_members_of(user_ids: Iterable[str], group_id: str) -> bool:
    """Return True iff every distinct user in `user_ids` belongs to the group.

    The input is deduplicated first, since one user can appear twice in an
    expense's splits. Membership is decided by a single count comparison,
    not by checking users one at a time.
    """
    unique_ids = set(user_ids)
    if not unique_ids:
        return True
    matched = (
        db.session.query(func.count(distinct(GroupMember.user_id)))
        .filter(GroupMember.group_id == group_id, GroupMember.user_id.in_(unique_ids))
        .scalar()
    )
    return matched == len(unique_ids)


def require_member(user_id: str, group_id: str, message: str = "access denied") -> None:
    if not is_member(user_id, group_id):
        raise AuthorizationError(message)


# PUBLIC_INTERFACE
def users_related(user_id: str, other_user_id: str) -> bool:
    """True if both users share at least one group, or are the same user."""
    if user_id == other_user_id:
        return True
    mine = select(GroupMember.group_id).where(GroupMember.user_id == user_id)
    shared = (
        db.session.query(GroupMember.id)
        .filter(GroupMember.user_id == other_user_id, GroupMember.group_id.in_(mine))
        .first()
    )
    return shared is not None
