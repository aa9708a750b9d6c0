from __future__ import annotations

from flask.views import MethodView
from flask_smorest import Blueprint
from marshmallow import Schema, fields, post_load, validate

from ..schemas import ExpenseSchema
from ..security import current_user_id
from ..services.expenses import create_expense, delete_expense, ensure_can_modify, get_expense, update_expense
from ..services.groups import get_group
from ..services.membership import require_member
from ..services.reconciliation import ExpenseDraft, SplitDraft, validate_and_reconcile


class SplitInputSchema(Schema):
    user_id = fields.String(required=True, metadata={"description": "User id for this split"})
    amount = fields.Decimal(
        required=True, validate=validate.Range(min=0),
        metadata={"description": "Amount paid or owed by this user"},
    )
    is_paid = fields.Boolean(
        required=True,
        metadata={"description": "True if the user paid this amount, false if the user owes it"},
    )

    @post_load
    def make_split(self, data, **kwargs):
        return SplitDraft(**data)


class ExpenseUpdateSchema(Schema):
    """Full replacement of an expense; every split must be sent again."""

    title = fields.String(required=True)
    description = fields.String(load_default=None, allow_none=True)
    amount = fields.Decimal(required=True, validate=validate.Range(min=0, min_inclusive=False))
    is_incomplete_amount = fields.Boolean(load_default=False)
    is_incomplete_split = fields.Boolean(load_default=False)
    latitude = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=-90, max=90))
    longitude = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=-180, max=180))
    splits = fields.List(fields.Nested(SplitInputSchema), load_default=list)


class ExpenseCreateSchema(ExpenseUpdateSchema):
    group_id = fields.String(required=True)


blp = Blueprint(
    "Expenses",
    __name__,
    url_prefix="/expenses",
    description="Create, read, replace and delete expenses with their paid/owed splits.",
)


@blp.route("")
class ExpensesCollection(MethodView):
    """Create expenses."""

    # PUBLIC_INTERFACE
    @blp.arguments(ExpenseCreateSchema)
    @blp.response(201, ExpenseSchema)
    @blp.doc(
        summary="Create expense",
        description="Create an expense in a group the requester belongs to. Unless an incomplete flag is set, "
                    "paid splits and owed splits must each add up to the amount.",
        tags=["Expenses"],
    )
    def post(self, data):
        """Create an expense in the group."""
        actor_id = current_user_id()
        group = get_group(data["group_id"])
        require_member(actor_id, group.id, "user not a member of group")

        splits = data.pop("splits")
        draft = ExpenseDraft(added_by_user_id=actor_id, **data)
        return create_expense(validate_and_reconcile(draft, splits))


@blp.route("/<string:expense_id>")
class ExpenseItem(MethodView):
    """Retrieve, replace, or delete a single expense."""

    # PUBLIC_INTERFACE
    @blp.response(200, ExpenseSchema)
    @blp.doc(summary="Get expense", description="Get expense details with splits. Group members only.", tags=["Expenses"])
    def get(self, expense_id: str):
        """Get a single expense."""
        actor_id = current_user_id()
        expense = get_expense(expense_id)
        require_member(actor_id, expense.group_id)
        return expense

    # PUBLIC_INTERFACE
    @blp.arguments(ExpenseUpdateSchema)
    @blp.response(200, ExpenseSchema)
    @blp.doc(
        summary="Replace expense",
        description="Replace the expense's fields and its whole split set. "
                    "Only the expense's creator or the group admin may do this.",
        tags=["Expenses"],
    )
    def put(self, data, expense_id: str):
        """Update an expense."""
        actor_id = current_user_id()
        existing = get_expense(expense_id)
        ensure_can_modify(existing, actor_id)

        splits = data.pop("splits")
        draft = ExpenseDraft(
            id=existing.id,
            group_id=existing.group_id,
            added_by_user_id=existing.added_by_user_id,
            **data,
        )
        update_expense(validate_and_reconcile(draft, splits), actor_id=actor_id)
        return get_expense(expense_id)

    # PUBLIC_INTERFACE
    @blp.response(204)
    @blp.doc(
        summary="Delete expense",
        description="Delete an expense and its splits. Only the expense's creator or the group admin may do this.",
        tags=["Expenses"],
    )
    def delete(self, expense_id: str):
        """Delete an expense."""
        delete_expense(expense_id, actor_id=current_user_id())
        return ""
