from flask.views import MethodView
from flask_smorest import Blueprint
from marshmallow import Schema, fields, validate

from ..schemas import ExpenseSchema, GroupSchema, GroupSummarySchema
from ..security import current_user_id
from ..services.expenses import list_group_expenses
from ..services.groups import create_group, delete_group, get_group, groups_administered, groups_for_member
from ..services.membership import require_member


class GroupCreateSchema(Schema):
    name = fields.String(required=True, metadata={"description": "Group name"})
    description = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(max=2000),
        metadata={"description": "Optional description"},
    )


blp = Blueprint(
    "Groups",
    __name__,
    url_prefix="/groups",
    description="Endpoints to manage groups and read their expenses.",
)


@blp.route("")
class GroupsCollection(MethodView):
    """Create new groups."""

    # PUBLIC_INTERFACE
    @blp.arguments(GroupCreateSchema)
    @blp.response(201, GroupSchema)
    @blp.doc(summary="Create group", description="Create a group; the requester becomes its admin and first member.", tags=["Groups"])
    def post(self, data):
        """Create a new group."""
        return create_group(data["name"], data.get("description"), current_user_id())


@blp.route("/me")
class MyGroups(MethodView):
    # PUBLIC_INTERFACE
    @blp.response(200, GroupSummarySchema(many=True))
    @blp.doc(summary="My groups", description="Groups the requester is a member of.", tags=["Groups"])
    def get(self):
        """List the requester's groups."""
        return groups_for_member(current_user_id())


@blp.route("/admin")
class AdministeredGroups(MethodView):
    # PUBLIC_INTERFACE
    @blp.response(200, GroupSummarySchema(many=True))
    @blp.doc(summary="Administered groups", description="Groups the requester created.", tags=["Groups"])
    def get(self):
        """List the groups the requester administers."""
        return groups_administered(current_user_id())


@blp.route("/<string:group_id>")
class GroupItem(MethodView):
    """Retrieve or delete a specific group by id."""

    # PUBLIC_INTERFACE
    @blp.response(200, GroupSchema)
    @blp.doc(summary="Get group", description="Retrieve a group and its members. Members only.", tags=["Groups"])
    def get(self, group_id: str):
        """Get a single group by id."""
        group = get_group(group_id)
        require_member(current_user_id(), group.id)
        return group

    # PUBLIC_INTERFACE
    @blp.response(204)
    @blp.doc(summary="Delete group", description="Delete a group with its expenses and memberships. Admin only.", tags=["Groups"])
    def delete(self, group_id: str):
        """Delete a group by id."""
        delete_group(group_id, current_user_id())
        return ""


@blp.route("/<string:group_id>/expenses")
class GroupExpensesCollection(MethodView):
    """List the expenses of a group."""

    # PUBLIC_INTERFACE
    @blp.response(200, ExpenseSchema(many=True))
    @blp.doc(summary="List group expenses", description="All expenses of the group, most recent first.", tags=["Groups"])
    def get(self, group_id: str):
        """List expenses for a group."""
        group = get_group(group_id)
        require_member(current_user_id(), group.id)
        return list_group_expenses(group.id)
