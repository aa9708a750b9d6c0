from flask.views import MethodView
from flask_smorest import Blueprint

from ..schemas import NetSpendingSchema
from ..security import current_user_id
from ..services.balances import net_spending
from ..services.groups import get_group
from ..services.membership import require_member


blp = Blueprint(
    "Balances",
    __name__,
    url_prefix="/groups/<string:group_id>/balances",
    description="Per-user net spending within a group.",
)


def _net_spending_for(group_id: str, user_id: str):
    group = get_group(group_id)
    require_member(current_user_id(), group.id)
    return net_spending(group.id, user_id)


@blp.route("/me")
class MyNetSpending(MethodView):
    # PUBLIC_INTERFACE
    @blp.response(200, NetSpendingSchema(many=True))
    @blp.doc(
        summary="My net spending",
        description="For each expense of the group, what the requester paid minus what they owe. "
                    "Expenses that net to exactly zero are omitted; most recent first.",
        tags=["Balances"],
    )
    def get(self, group_id: str):
        """Return the requester's net spending in the group."""
        return _net_spending_for(group_id, current_user_id())


@blp.route("/<string:user_id>")
class UserNetSpending(MethodView):
    # PUBLIC_INTERFACE
    @blp.response(200, NetSpendingSchema(many=True))
    @blp.doc(
        summary="User net spending",
        description="Net spending of any user in the group. Members only.",
        tags=["Balances"],
    )
    def get(self, group_id: str, user_id: str):
        """Return a user's net spending in the group."""
        return _net_spending_for(group_id, user_id)
