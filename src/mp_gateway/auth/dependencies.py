"""FastAPI dependencies: identity and authorization.

Usage in any protected router:
    from src.mp_gateway.auth.dependencies import get_current_identity

    @router.get("/protected")
    async def protected(identity: Identity = Depends(get_current_identity)):
        ...
"""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.mp_common.catalog import get_catalog
from src.mp_common.errors import AdminRequiredError, UnauthenticatedError
from src.mp_gateway.auth.identity import Identity, decode_identity_token
from src.mp_gateway.auth.policy import AuthorizationPolicy, EmailAllowListPolicy

_bearer = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Identity:
    """Require a valid bearer token; raise 401 otherwise."""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()
    return decode_identity_token(credentials.credentials)


async def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Identity | None:
    """Anonymous callers get None; a present-but-invalid token is still 401."""
    if credentials is None or not credentials.credentials:
        return None
    return decode_identity_token(credentials.credentials)


@lru_cache(maxsize=1)
def get_authorization_policy() -> AuthorizationPolicy:
    return EmailAllowListPolicy.from_catalog(get_catalog())


async def require_admin(
    identity: Identity = Depends(get_current_identity),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
) -> Identity:
    if not policy.is_admin(identity):
        raise AdminRequiredError()
    return identity
