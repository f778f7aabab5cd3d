"""JWT issuing and verification for access and refresh tokens.

Access tokens carry the user id in ``sub`` and the role the user had when
the token was issued. The role claim is informational only: authorization
always reads the role from the stored user.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from staybook.config import settings

ACCESS = "access"
REFRESH = "refresh"


def _encode(claims: dict, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + lifetime, "type": token_type}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(subject: str, role: str = "user", expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token for ``subject`` (a user UUID string)."""
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode({"sub": subject, "role": role}, ACCESS, lifetime)


def create_refresh_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token for ``subject``."""
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode({"sub": subject}, REFRESH, lifetime)


def decode_token(token: str, expected_type: str | None = None) -> dict:
    """Decode and verify a JWT.

    Raises:
        jose.JWTError: If the token is invalid, expired, malformed, lacks a
            subject, or is not of ``expected_type``.
    """
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if expected_type is not None and payload.get("type") != expected_type:
        raise JWTError("Invalid token type")
    if not payload.get("sub"):
        raise JWTError("Token has no subject")
    return payload


def create_token_pair(subject: str, role: str = "user") -> dict[str, str]:
    return {
        "access_token": create_access_token(subject, role),
        "refresh_token": create_refresh_token(subject),
        "token_type": "bearer",
    }
