"""In-memory identity provider for development and testing.

Tokens are opaque random strings handed out by ``issue()``; nothing is
signed and nothing expires.
"""

from uuid import uuid4

from storefront.identity.port import Identity, IdentityProvider


class FakeIdentityProvider(IdentityProvider):
    def __init__(self) -> None:
        self._tokens: dict[str, Identity] = {}

    def issue(self, customer_id: str, is_admin: bool = False) -> str:
        token = f"fake_tok_{uuid4().hex}"
        self._tokens[token] = Identity(customer_id=str(customer_id), is_admin=is_admin)
        return token

    def revoke(self, token: str) -> None:
        self._tokens.pop(token, None)

    def authenticate(self, token: str) -> Identity | None:
        if not token:
            return None
        return self._tokens.get(token)
