from datetime import datetime, timedelta, timezone

import jwt

from auth.domain.entities import Principal, Role
from shared.config import settings
from shared.exceptions import AuthenticationError


def create_access_token(principal: Principal, expires_in: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": principal.id,
        "name": principal.display_name,
        "role": principal.role.value,
        "iat": now,
        "exp": now + (expires_in or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)),
    }
    if principal.email:
        payload["email"] = principal.email
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Principal:
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")

    try:
        role = Role(payload["role"])
        return Principal(
            id=payload["sub"],
            display_name=payload.get("name") or payload["sub"],
            role=role,
            email=payload.get("email"),
        )
    except (KeyError, ValueError):
        raise AuthenticationError("Token does not carry a valid principal")
