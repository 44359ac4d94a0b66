"""Identity port (abstract interface).

Token issuance and verification belong to the authentication service; the
storefront only needs to turn a bearer token into "who is calling". Every
cart and order operation receives that identity explicitly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """The authenticated caller."""

    customer_id: str
    is_admin: bool = False


class IdentityProvider(ABC):
    @abstractmethod
    def authenticate(self, token: str) -> Identity | None:
        """Resolve a bearer token, or return ``None`` if it is unknown or expired."""
        ...
