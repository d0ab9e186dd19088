"""Order cancellation by its owner — command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import NotFound
from ordering.order.commit import restore_stock
from ordering.order.order import CancellationActor, Order


def load_order(order_id, owner_id=None) -> Order:
    """Fetch an order. With `owner_id`, someone else's order counts as missing."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFound("Order not found", order_id=str(order_id)) from None
    if owner_id is not None and not order.is_owned_by(owner_id):
        raise NotFound("Order not found", order_id=str(order_id))
    return order


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id, owner_id=command.user_id)
        order.cancel(cancelled_by=CancellationActor.CUSTOMER.value)
        restore_stock(order)
        current_domain.repository_for(Order).add(order)
