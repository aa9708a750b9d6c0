import logging
from typing import Any, Mapping, Optional

from flask import Flask
from flask_cors import CORS
from flask_smorest import Api
from flask_sqlalchemy import SQLAlchemy

from .config import load_settings

# Initialize extensions at module level to avoid circular imports
db = SQLAlchemy()


# PUBLIC_INTERFACE
def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the Flask application.

    Parameters:
        overrides: Optional settings applied on top of the environment-derived
                   configuration (tests pass an in-memory database URL here).

    Returns:
        A configured Flask app with the database, the token issuer and every
        blueprint registered.
    """
    app = Flask(__name__)
    app.url_map.strict_slashes = False

    app.config.from_mapping(load_settings())
    if overrides:
        app.config.from_mapping(overrides)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # CORS configuration - allow all origins for simplicity; tighten in production as needed
    CORS(app, resources={r"/*": {"origins": "*"}})

    db.init_app(app)
    # API and Swagger/OpenAPI settings are read from app.config
    api = Api(app)

    # The signing secret is fixed for the lifetime of this app
    from .security import TokenIssuer

    app.extensions["token_issuer"] = TokenIssuer(
        secret=app.config["JWT_SECRET"],
        expiry_hours=app.config["JWT_EXPIRY_HOURS"],
        algorithm=app.config["JWT_ALGORITHM"],
    )

    from .errors import register_error_handlers

    register_error_handlers(app)

    # Import routes after api is initialized to ensure registration works
    from .routes.health import blp as health_blp
    from .routes.auth import blp as auth_blp
    from .routes.users import blp as users_blp
    from .routes.groups import blp as groups_blp
    from .routes.members import blp as members_blp
    from .routes.expenses import blp as expenses_blp
    from .routes.balances import blp as balances_blp

    for blp in (health_blp, auth_blp, users_blp, groups_blp, members_blp, expenses_blp, balances_blp):
        api.register_blueprint(blp)

    # Import models and create tables on startup
    with app.app_context():
        # Import models to register them with SQLAlchemy's metadata
        from . import models  # noqa: F401
        # Create database tables if they do not already exist
        db.create_all()

    return app
