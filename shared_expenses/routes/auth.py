from flask.views import MethodView
from flask_smorest import Blueprint
from marshmallow import Schema, fields

from ..schemas import UserSchema
from ..security import current_user_id, token_issuer
from ..services.users import authenticate, get_user, register_user


class RegisterSchema(Schema):
    name = fields.String(required=True, metadata={"description": "Display name"})
    email = fields.Email(required=True, metadata={"description": "Email address, case-insensitive"})
    password = fields.String(required=True, load_only=True)


class LoginSchema(Schema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


blp = Blueprint(
    "Auth",
    __name__,
    url_prefix="/auth",
    description="Register, log in and inspect the logged-in user.",
)


@blp.route("/register")
class Register(MethodView):
    # PUBLIC_INTERFACE
    @blp.arguments(RegisterSchema)
    @blp.response(201, UserSchema)
    @blp.doc(summary="Register", description="Create a user account.", tags=["Auth"])
    def post(self, data):
        """Register a new user."""
        return register_user(data["name"], data["email"], data["password"])


@blp.route("/login")
class Login(MethodView):
    # PUBLIC_INTERFACE
    @blp.arguments(LoginSchema)
    @blp.response(200)
    @blp.doc(summary="Log in", description="Exchange email and password for a bearer token.", tags=["Auth"])
    def post(self, data):
        """Return a bearer token for valid credentials."""
        user = authenticate(data["email"], data["password"])
        return {"message": "login successful", "token": token_issuer().issue(user.id)}


@blp.route("/me")
class Me(MethodView):
    # PUBLIC_INTERFACE
    @blp.response(200, UserSchema)
    @blp.doc(summary="Current user", description="Details of the logged-in user.", tags=["Auth"])
    def get(self):
        """Return the user behind the bearer token."""
        return get_user(current_user_id())
