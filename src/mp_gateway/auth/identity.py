"""Identity tokens issued by the external identity provider.

This service never issues tokens. It verifies the bearer JWT and reads two
claims: ``sub`` (opaque user id) and ``email`` (used by the admin policy).
"""

from dataclasses import dataclass

from jose import JWTError, jwt

from config.settings import settings
from src.mp_common.errors import UnauthenticatedError


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str | None = None


def decode_identity_token(token: str) -> Identity:
    """Decode and validate a bearer token.

    Raises:
        UnauthenticatedError: signature/expiry invalid or ``sub`` missing.
    """
    try:
        payload = jwt.decode(
            token,
            settings.IDENTITY_JWT_SECRET,
            algorithms=[settings.IDENTITY_JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
            options={"verify_aud": False},
        )
    except JWTError:
        raise UnauthenticatedError() from None

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError()
    email = payload.get("email")
    return Identity(user_id=str(user_id), email=str(email) if email else None)
