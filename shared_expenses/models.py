from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from . import db


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(db.Model):
    """Represents a registered (or guest) user of the shared expenses system."""
    __tablename__ = "users"
    # Allow legacy annotations without SQLAlchemy 2.0 Mapped[] wrappers
    __allow_unmapped__ = True

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    name: str = db.Column(db.String(64), nullable=False)
    # Always stored lower-cased, so uniqueness is case-insensitive
    email: str = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: Optional[str] = db.Column(db.String(255), nullable=True)
    is_guest: bool = db.Column(db.Boolean, nullable=False, default=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Relationships
    groups_created = db.relationship("Group", back_populates="created_by", lazy="select")
    group_memberships = db.relationship("GroupMember", back_populates="user", lazy="select")

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.name!r}>"


class Group(db.Model):
    """Represents a group whose members share expenses. The creator is its permanent admin."""
    __tablename__ = "groups"
    __allow_unmapped__ = True

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    name: str = db.Column(db.String(150), nullable=False)
    description: Optional[str] = db.Column(db.Text, nullable=True)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)

    created_by_user_id: str = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )

    # Relationships
    created_by = db.relationship("User", back_populates="groups_created", lazy="joined")
    members: List["GroupMember"] = db.relationship(
        "GroupMember",
        back_populates="group",
        order_by="GroupMember.joined_at",
        lazy="select",
    )
    expenses: List["Expense"] = db.relationship(
        "Expense",
        back_populates="group",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<Group id={self.id} name={self.name!r}>"


class GroupMember(db.Model):
    """Association table for group memberships between users and groups."""
    __tablename__ = "group_members"
    __allow_unmapped__ = True
    __table_args__ = (
        db.UniqueConstraint("group_id", "user_id", name="uq_group_member_group_user"),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    group_id: str = db.Column(
        db.String(36), db.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: str = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    joined_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Relationships
    group = db.relationship("Group", back_populates="members", lazy="joined")
    user = db.relationship("User", back_populates="group_memberships", lazy="joined")

    def __repr__(self) -> str:
        return f"<GroupMember group_id={self.group_id} user_id={self.user_id}>"


class Expense(db.Model):
    """Represents an expense within a group, reconciled against its splits."""
    __tablename__ = "expenses"
    __allow_unmapped__ = True

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    group_id: str = db.Column(
        db.String(36), db.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    added_by_user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    title: str = db.Column(db.String(255), nullable=False)
    description: Optional[str] = db.Column(db.Text, nullable=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)

    # Escape hatches that suspend split reconciliation
    is_incomplete_amount: bool = db.Column(db.Boolean, nullable=False, default=False)
    is_incomplete_split: bool = db.Column(db.Boolean, nullable=False, default=False)

    latitude: Optional[float] = db.Column(db.Float, nullable=True)
    longitude: Optional[float] = db.Column(db.Float, nullable=True)

    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    # Relationships
    group = db.relationship("Group", back_populates="expenses", lazy="joined")
    added_by = db.relationship("User", foreign_keys=[added_by_user_id], lazy="joined")
    splits: List["ExpenseSplit"] = db.relationship(
        "ExpenseSplit",
        back_populates="expense",
        order_by="ExpenseSplit.id",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<Expense id={self.id} amount={self.amount} title={self.title!r}>"


class ExpenseSplit(db.Model):
    """One user's portion of an expense, either paid by them or owed by them.

    A user may hold two rows on the same expense (one paid, one owed).
    """
    __tablename__ = "expense_splits"
    __allow_unmapped__ = True

    id: int = db.Column(db.Integer, primary_key=True)
    expense_id: str = db.Column(
        db.String(36), db.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: str = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    is_paid: bool = db.Column(db.Boolean, nullable=False, default=False)

    # Relationships
    expense = db.relationship("Expense", back_populates="splits")

    def __repr__(self) -> str:
        kind = "paid" if self.is_paid else "owed"
        return f"<ExpenseSplit expense_id={self.expense_id} user_id={self.user_id} {kind}={self.amount}>"
