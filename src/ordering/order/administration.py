"""Administrative order changes — status moves and refunds."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.cancellation import load_order
from ordering.order.commit import restore_stock
from ordering.order.order import Order, OrderStatus


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)


@ordering.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class OrderAdministrationHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        order = load_order(command.order_id)
        order.change_status(command.status)
        if command.status == OrderStatus.CANCELLED.value:
            restore_stock(order)
        current_domain.repository_for(Order).add(order)

    @handle(RefundOrder)
    def refund_order(self, command):
        order = load_order(command.order_id)
        if order.refund():
            restore_stock(order)
        current_domain.repository_for(Order).add(order)
