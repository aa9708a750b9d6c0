from flask.views import MethodView
from flask_smorest import Blueprint
from marshmallow import Schema, fields, validate

from ..schemas import GroupMemberSchema
from ..security import current_user_id
from ..services.groups import add_members, get_group, remove_members
from ..services.membership import require_member


class MemberIdsSchema(Schema):
    user_ids = fields.List(
        fields.String(), required=True, validate=validate.Length(min=1),
        metadata={"description": "IDs of users to add or remove"},
    )


blp = Blueprint(
    "Members",
    __name__,
    url_prefix="/groups/<string:group_id>/members",
    description="Manage group memberships. Only the group admin may change them.",
)


@blp.route("")
class GroupMembersCollection(MethodView):
    """List, add and remove members of a group."""

    # PUBLIC_INTERFACE
    @blp.response(200, GroupMemberSchema(many=True))
    @blp.doc(summary="List group members", description="List all members of the specified group.", tags=["Members"])
    def get(self, group_id: str):
        """Return all members for the group."""
        group = get_group(group_id)
        require_member(current_user_id(), group.id)
        return group.members

    # PUBLIC_INTERFACE
    @blp.arguments(MemberIdsSchema)
    @blp.response(200)
    @blp.doc(summary="Add members", description="Add existing users to the group; unknown ids are skipped.", tags=["Members"])
    def post(self, data, group_id: str):
        """Add users to the group."""
        added = add_members(group_id, current_user_id(), data["user_ids"])
        return {"message": "members added successfully", "added_members": added}

    # PUBLIC_INTERFACE
    @blp.arguments(MemberIdsSchema)
    @blp.response(200)
    @blp.doc(summary="Remove members", description="Remove users from the group. The admin cannot be removed.", tags=["Members"])
    def delete(self, data, group_id: str):
        """Remove users from the group."""
        removed = remove_members(group_id, current_user_id(), data["user_ids"])
        return {"message": "members removed", "removed_members": removed}
