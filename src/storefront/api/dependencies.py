"""Request dependencies: resolve the bearer token into the calling identity."""

from fastapi import Depends, Header, HTTPException

from storefront.identity import Identity, get_identity_provider
from storefront.utils.logging import bind_request_context


def current_identity(authorization: str = Header(default="")) -> Identity:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    identity = get_identity_provider().authenticate(token.strip())
    if identity is None:
        raise HTTPException(status_code=401, detail="Not authorized, token failed")

    bind_request_context(customer_id=identity.customer_id)
    return identity


def require_admin(identity: Identity = Depends(current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized as an admin")
    return identity
