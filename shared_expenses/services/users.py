"""User registration, login and lookup."""
import logging
from typing import Optional

from .. import db
from ..errors import AuthenticationError, ConflictError, NotFoundError
from ..models import User
from ..security import hash_password, verify_password
from ..utils.validation import normalize_email, validate_name
from . import atomic

logger = logging.getLogger(__name__)


def _find_by_email(email: str) -> Optional[User]:
    return User.query.filter_by(email=email).first()


def _insert_user(name: str, email: str, password_hash: Optional[str], is_guest: bool) -> User:
    name = validate_name(name)
    email = normalize_email(email)
    if _find_by_email(email) is not None:
        raise ConflictError("user with this email already exists")

    with atomic("create user") as session:
        user = User(name=name, email=email, password_hash=password_hash, is_guest=is_guest)
        session.add(user)

    logger.info("Created %s user %s", "guest" if is_guest else "registered", user.id)
    return user


# PUBLIC_INTERFACE
def register_user(name: str, email: str, password: str) -> User:
    """Create a user that can log in with `password`."""
    return _insert_user(name, email, hash_password(password), is_guest=False)


# PUBLIC_INTERFACE
def create_guest_user(name: str, email: str) -> User:
    """Create a user without credentials, so they can be added to groups and splits."""
    return _insert_user(name, email, None, is_guest=True)


# PUBLIC_INTERFACE
def authenticate(email: str, password: str) -> User:
    """Return the user matching the credentials or raise AuthenticationError."""
    user = _find_by_email(normalize_email(email))
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("invalid email or password")
    return user


# PUBLIC_INTERFACE
def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id) if user_id else None
    if user is None:
        raise NotFoundError("user not found")
    return user


# PUBLIC_INTERFACE
def get_user_by_email(email: str) -> User:
    user = _find_by_email(normalize_email(email))
    if user is None:
        raise NotFoundError("user not found")
    return user
