from datetime import datetime, timedelta, timezone

import jwt

from clinic.core import config

REQUIRED_CLAIMS = ["sub", "role", "exp"]


def create_access_token(subject: str, role: str, expires_minutes: int | None = None) -> str:
    """Sign a bearer token for ``subject`` acting as ``role`` (admin, doctor or patient)."""
    issued_at = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    claims = {
        "sub": subject.strip(),
        "role": getattr(role, "value", role),
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": REQUIRED_CLAIMS},
    )
