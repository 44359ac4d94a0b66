"""Customer aggregate root with the SavedAddress entity.

Only the parts of an account the storefront needs live here: the contact
email (payment receipts fall back to it) and the address book that order
placement falls back to when no shipping address is given.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, HasMany, String

from storefront.domain import storefront

MAX_ADDRESSES = 10


class AddressLabel(Enum):
    HOME = "Home"
    WORK = "Work"
    OTHER = "Other"


@storefront.entity(part_of="Customer")
class SavedAddress:
    """An address in the customer's address book."""

    label = String(choices=AddressLabel, default=AddressLabel.HOME.value)
    recipient_name = String(max_length=255)
    phone = String(max_length=30)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    is_default = Boolean(default=False)

    def as_shipping_address(self) -> dict:
        return {
            "address": self.address,
            "city": self.city,
            "postal_code": self.postal_code,
            "country": self.country,
        }


@storefront.aggregate
class Customer:
    """A registered shopper.

    Exactly one saved address is the default whenever the address book is
    not empty, so "default, else first" resolution is always well defined.
    """

    name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    addresses = HasMany(SavedAddress)
    registered_at = DateTime()

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        if len(self.addresses) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @invariant.post
    def exactly_one_default_address_when_addresses_exist(self):
        if not self.addresses:
            return
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) != 1:
            raise ValidationError({"addresses": ["Exactly one address must be marked as default"]})

    @classmethod
    def register(cls, name, email):
        if not email or email.count("@") != 1 or email.startswith("@") or email.endswith("@"):
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})
        return cls(name=name, email=email.strip().lower(), registered_at=datetime.now(UTC))

    def _find_address(self, address_id):
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise ObjectNotFoundError({"addresses": [f"Address {address_id} not found"]})
        return address

    def add_address(
        self,
        address,
        city,
        postal_code,
        country,
        label=AddressLabel.HOME.value,
        recipient_name=None,
        phone=None,
        is_default=False,
    ):
        # First address is always default
        if not self.addresses:
            is_default = True

        with atomic_change(self):
            if is_default:
                for addr in self.addresses:
                    if addr.is_default:
                        addr.is_default = False

            saved = SavedAddress(
                label=label,
                recipient_name=recipient_name,
                phone=phone,
                address=address,
                city=city,
                postal_code=postal_code,
                country=country,
                is_default=is_default,
            )
            self.add_addresses(saved)

        return saved

    def update_address(self, address_id, is_default=None, **changes):
        saved = self._find_address(address_id)

        with atomic_change(self):
            for field, value in changes.items():
                if value:
                    setattr(saved, field, value)

            if is_default:
                for addr in self.addresses:
                    if addr.is_default:
                        addr.is_default = False
                saved.is_default = True

        return saved

    def remove_address(self, address_id):
        saved = self._find_address(address_id)
        was_default = saved.is_default

        with atomic_change(self):
            self.remove_addresses(saved)

            # The first remaining address inherits the default flag
            if was_default and self.addresses:
                self.addresses[0].is_default = True

    def delivery_address(self) -> dict | None:
        """The address an order ships to when none is given: default, else first, else nothing."""
        if not self.addresses:
            return None
        chosen = next((a for a in self.addresses if a.is_default), self.addresses[0])
        return chosen.as_shipping_address()
