from flask.views import MethodView
from flask_smorest import Blueprint
from marshmallow import Schema, fields

from ..errors import AuthorizationError
from ..schemas import UserSchema
from ..security import current_user_id
from ..services.membership import users_related
from ..services.users import create_guest_user, get_user, get_user_by_email


class GuestCreateSchema(Schema):
    name = fields.String(required=True)
    email = fields.Email(required=True)


blp = Blueprint(
    "Users",
    __name__,
    url_prefix="/users",
    description="Look up users and create guest users.",
)


@blp.route("/guests")
class Guests(MethodView):
    # PUBLIC_INTERFACE
    @blp.arguments(GuestCreateSchema)
    @blp.response(201, UserSchema)
    @blp.doc(summary="Create guest", description="Create a user without credentials.", tags=["Users"])
    def post(self, data):
        """Create a guest user who can be added to groups."""
        current_user_id()
        return create_guest_user(data["name"], data["email"])


@blp.route("/search/email/<string:email>")
class UserByEmail(MethodView):
    # PUBLIC_INTERFACE
    @blp.response(200, UserSchema)
    @blp.doc(summary="Find user by email", description="Look a user up by email address.", tags=["Users"])
    def get(self, email: str):
        """Return the user registered with `email`."""
        current_user_id()
        return get_user_by_email(email)


@blp.route("/<string:user_id>")
class UserItem(MethodView):
    # PUBLIC_INTERFACE
    @blp.response(200, UserSchema)
    @blp.doc(
        summary="Get user",
        description="Details of a user who shares at least one group with the requester.",
        tags=["Users"],
    )
    def get(self, user_id: str):
        """Get a related user's details."""
        requester = current_user_id()
        user = get_user(user_id)
        if not users_related(requester, user.id):
            raise AuthorizationError("access denied")
        return user
