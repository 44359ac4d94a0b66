"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id) -> list[Order]:
        """Orders placed by a customer, newest first."""
        orders = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def newest_first(self) -> list[Order]:
        orders = self._dao.query.all().items
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def visible_to(self, order_id, customer_id, is_admin=False) -> Order:
        """Fetch an order the caller may see. Other customers' orders look like missing ones."""
        order = self.get(str(order_id))
        if not is_admin and str(order.customer_id) != str(customer_id):
            raise ObjectNotFoundError({"order": [f"Order {order_id} not found"]})
        return order
