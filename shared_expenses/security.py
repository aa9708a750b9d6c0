"""
Password hashing and bearer-token handling.
"""
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import bcrypt
from flask import current_app, request
from jose import ExpiredSignatureError, JWTError, jwt

from .errors import AuthenticationError, ValidationError

BEARER_PREFIX = "Bearer "


def _pre_hash_password(password: str) -> bytes:
    """
    Pre-hash password with SHA256 to support passwords longer than 72 bytes.
    Returns bytes (32 bytes) which is well under bcrypt's 72-byte limit.
    """
    return hashlib.sha256(password.encode("utf-8")).digest()


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    if not password:
        raise ValidationError("empty password provided")
    hashed = bcrypt.hashpw(_pre_hash_password(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash. Users without a hash never verify."""
    if not plain_password or not hashed_password:
        return False
    return bcrypt.checkpw(_pre_hash_password(plain_password), hashed_password.encode("utf-8"))


class TokenIssuer:
    """Issues and resolves signed access tokens.

    Built once per application with a fixed secret; the secret is never
    changed afterwards.
    """

    def __init__(self, secret: str, expiry_hours: Union[int, str] = 24, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("token secret must not be empty")
        try:
            hours = int(expiry_hours)
        except (TypeError, ValueError):
            raise ValueError(f"invalid JWT_EXPIRY_HOURS value: {expiry_hours!r}, must be a positive integer")
        if hours <= 0:
            raise ValueError(f"invalid JWT_EXPIRY_HOURS value: {expiry_hours!r}, must be a positive integer")
        self._secret = secret
        self._algorithm = algorithm
        self.expiry = timedelta(hours=hours)

    def issue(self, user_id: str) -> str:
        """Create a token carrying the user's identifier."""
        expire = datetime.now(timezone.utc) + self.expiry
        claims = {"user_id": user_id, "exp": expire}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def resolve(self, authorization_header: Optional[str]) -> str:
        """Return the user id carried by an `Authorization: Bearer ...` header."""
        if not authorization_header or not authorization_header.startswith(BEARER_PREFIX):
            raise AuthenticationError("authorization header missing or malformed")
        token = authorization_header[len(BEARER_PREFIX):].strip()
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            raise AuthenticationError("expired token")
        except JWTError:
            raise AuthenticationError("invalid token")
        user_id = claims.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise AuthenticationError("invalid token claims")
        return user_id


def token_issuer() -> TokenIssuer:
    return current_app.extensions["token_issuer"]


# PUBLIC_INTERFACE
def current_user_id() -> str:
    """Resolve the acting user from the current request's Authorization header."""
    return token_issuer().resolve(request.headers.get("Authorization"))
