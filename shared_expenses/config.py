"""Settings loaded from environment variables, with defaults."""
import base64
import logging
import os
import secrets
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Base directory for this project
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

DEFAULT_SPLIT_TOLERANCE = Decimal("0.01")


def _random_secret() -> str:
    return base64.b64encode(secrets.token_bytes(32)).decode("ascii")


# PUBLIC_INTERFACE
def load_settings() -> Dict[str, Any]:
    """Return the application settings as a mapping suitable for app.config."""
    # Use DATABASE_URL if provided; otherwise default to a local SQLite file
    default_sqlite_path = os.path.join(BASE_DIR, "shared_expenses.db")
    return {
        "SQLALCHEMY_DATABASE_URI": os.getenv("DATABASE_URL", f"sqlite:///{default_sqlite_path}"),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "SPLIT_TOLERANCE": os.getenv("SPLIT_TOLERANCE", str(DEFAULT_SPLIT_TOLERANCE)),
        "JWT_SECRET": os.getenv("JWT_SECRET") or _random_secret(),
        "JWT_EXPIRY_HOURS": os.getenv("JWT_EXPIRY_HOURS", "24"),
        "JWT_ALGORITHM": os.getenv("JWT_ALGORITHM", "HS256"),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        "API_TITLE": "Shared Expenses API",
        "API_VERSION": "v1",
        "OPENAPI_VERSION": "3.0.3",
        "OPENAPI_URL_PREFIX": "/docs",
        "OPENAPI_SWAGGER_UI_PATH": "",
        "OPENAPI_SWAGGER_UI_URL": "https://cdn.jsdelivr.net/npm/swagger-ui-dist/",
    }


# PUBLIC_INTERFACE
def parse_split_tolerance(raw: Optional[Any]) -> Decimal:
    """Parse a tolerance setting, falling back to 0.01 when it is unusable.

    An absent, unparseable, non-finite or negative value is replaced by the
    default without surfacing an error.
    """
    if raw is None:
        return DEFAULT_SPLIT_TOLERANCE
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        logger.debug("Unparseable SPLIT_TOLERANCE %r, using default", raw)
        return DEFAULT_SPLIT_TOLERANCE
    if not value.is_finite() or value < 0:
        return DEFAULT_SPLIT_TOLERANCE
    return value


# PUBLIC_INTERFACE
def split_tolerance() -> Decimal:
    """Tolerance for the active app, or the environment when no app is active."""
    from flask import current_app, has_app_context

    if has_app_context():
        return parse_split_tolerance(current_app.config.get("SPLIT_TOLERANCE"))
    return parse_split_tolerance(os.getenv("SPLIT_TOLERANCE"))
