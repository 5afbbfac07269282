"""JWT bearer token verification.

Tokens are minted by the identity service; this service only checks the
signature and expiry and reads the ``sub`` claim.
"""

from jose import JWTError, jwt

from quiz_engine.config import settings


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT. Returns payload dict or None on failure."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
