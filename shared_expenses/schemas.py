import calendar

from marshmallow import Schema, fields
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema

from . import db
from .models import User, Group, GroupMember, Expense, ExpenseSplit


class EpochSeconds(fields.Field):
    """Dump a naive UTC datetime as integer seconds since the epoch."""

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        return calendar.timegm(value.utctimetuple())


class UserSchema(SQLAlchemyAutoSchema):
    """Schema for serializing User instances. The password hash is never dumped."""

    class Meta:
        model = User
        sqla_session = db.session
        load_instance = True
        include_fk = True
        include_relationships = False
        exclude = ("password_hash",)

    id = fields.String(dump_only=True)
    created_at = EpochSeconds(dump_only=True)


class UserSummarySchema(UserSchema):
    """The public part of a user, as shown inside a group's member list."""

    class Meta(UserSchema.Meta):
        exclude = ("password_hash", "created_at")


class GroupMemberSchema(SQLAlchemyAutoSchema):
    """Schema for serializing GroupMember instances."""

    class Meta:
        model = GroupMember
        sqla_session = db.session
        load_instance = True
        include_fk = True
        include_relationships = False
        exclude = ("id",)

    joined_at = EpochSeconds(dump_only=True)
    user = fields.Nested(UserSummarySchema, dump_only=True)


class GroupSchema(SQLAlchemyAutoSchema):
    """Schema for serializing Group instances with their members."""

    class Meta:
        model = Group
        sqla_session = db.session
        load_instance = True
        include_fk = True
        include_relationships = False

    id = fields.String(dump_only=True)
    created_at = EpochSeconds(dump_only=True)
    members = fields.Nested(GroupMemberSchema, many=True, dump_only=True)


class GroupSummarySchema(GroupSchema):
    """A group without its member list, for listings."""

    class Meta(GroupSchema.Meta):
        exclude = ("members",)


class ExpenseSplitSchema(SQLAlchemyAutoSchema):
    """Schema for serializing ExpenseSplit instances."""

    class Meta:
        model = ExpenseSplit
        sqla_session = db.session
        load_instance = True
        include_fk = True
        include_relationships = False
        exclude = ("id", "expense_id")

    amount = fields.Decimal(as_string=True)
    is_paid = fields.Bool()


class ExpenseSchema(SQLAlchemyAutoSchema):
    """Schema for serializing Expense instances with their splits."""

    class Meta:
        model = Expense
        sqla_session = db.session
        load_instance = True
        include_fk = True
        include_relationships = False

    id = fields.String(dump_only=True)
    amount = fields.Decimal(as_string=True)
    created_at = EpochSeconds(dump_only=True)
    splits = fields.Nested(ExpenseSplitSchema, many=True, dump_only=True)


class NetSpendingSchema(Schema):
    """Schema for one entry of a user's net spending in a group."""

    expense_id = fields.String()
    title = fields.String()
    description = fields.String(allow_none=True)
    created_at = EpochSeconds()
    total_amount = fields.Decimal(as_string=True)
    amount_paid = fields.Decimal(as_string=True)
    amount_owed = fields.Decimal(as_string=True)
    net_spending = fields.Decimal(as_string=True)
