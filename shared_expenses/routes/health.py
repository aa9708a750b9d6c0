from flask_smorest import Blueprint
from flask.views import MethodView
from sqlalchemy import text

from .. import db

blp = Blueprint("Health", __name__, url_prefix="/health", description="Liveness and database check")


@blp.route("")
class HealthCheck(MethodView):
    """Reports whether the API and its database connection are up."""
    # PUBLIC_INTERFACE
    @blp.response(200)
    @blp.doc(
        summary="Health check",
        description="Runs a trivial query and returns ok when the database answers.",
        tags=["Health"],
    )
    def get(self):
        """Return a health status response."""
        db.session.execute(text("SELECT 1"))
        return {"status": "ok"}
