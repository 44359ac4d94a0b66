"""Customer address book: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer
from storefront.domain import storefront


@storefront.command(part_of="Customer")
class AddAddress:
    """Add a new address to a customer's address book."""

    customer_id = Identifier(required=True)
    label = String(max_length=20)
    recipient_name = String(max_length=255)
    phone = String(max_length=30)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    is_default = Boolean(default=False)


@storefront.command(part_of="Customer")
class UpdateAddress:
    """Modify fields of an existing address, or make it the default."""

    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    label = String(max_length=20)
    recipient_name = String(max_length=255)
    phone = String(max_length=30)
    address = String(max_length=255)
    city = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)
    is_default = Boolean(default=False)


@storefront.command(part_of="Customer")
class RemoveAddress:
    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)


@storefront.command_handler(part_of=Customer)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)

        kwargs = {
            "address": command.address,
            "city": command.city,
            "postal_code": command.postal_code,
            "country": command.country,
            "recipient_name": command.recipient_name,
            "phone": command.phone,
            "is_default": bool(command.is_default),
        }
        if command.label:
            kwargs["label"] = command.label

        saved = customer.add_address(**kwargs)
        repo.add(customer)
        return str(saved.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)

        updates = {}
        for field in ("label", "recipient_name", "phone", "address", "city", "postal_code", "country"):
            value = getattr(command, field, None)
            if value is not None:
                updates[field] = value

        customer.update_address(command.address_id, is_default=command.is_default, **updates)
        repo.add(customer)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.remove_address(command.address_id)
        repo.add(customer)
