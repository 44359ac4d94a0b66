"""Order delivery: command and handler (admin)."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class MarkOrderDelivered:
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class MarkOrderDeliveredHandler:
    @handle(MarkOrderDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_delivered()
        repo.add(order)
