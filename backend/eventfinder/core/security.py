"""
Credential helpers and the role tier gate.

Tokens are HS256 JWTs carrying the user id (`sub`) and role. Verifying a
token needs nothing but the shared secret, so the gate never touches the
database.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

import bcrypt
import jwt

from eventfinder.core.config import get_settings
from eventfinder.core.exceptions import ForbiddenError, UnauthenticatedError


class Role(str, Enum):
    USER = "user"
    ORGANIZER = "organizer"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def meets(self, required: "Role") -> bool:
        """True when this role's tier is at or above `required`."""
        return self.rank >= required.rank


_ROLE_RANK = {Role.USER: 0, Role.ORGANIZER: 1, Role.ADMIN: 2}


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


# -------------------------
# Password hashing (bcrypt)
# -------------------------
def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=get_settings().BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# -------------------------
# JWT tokens
# -------------------------
def create_access_token(*, user_id: int, role: Union[Role, str], expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    payload = {
        "sub": str(user_id),
        "role": Role(role).value,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: Optional[str]) -> Identity:
    """Validate a bearer token and return the caller identity it carries."""
    if not token:
        raise UnauthenticatedError("No token provided")

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise UnauthenticatedError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise UnauthenticatedError("Invalid token") from e

    try:
        return Identity(user_id=int(payload["sub"]), role=Role(payload["role"]))
    except (KeyError, TypeError, ValueError) as e:
        raise UnauthenticatedError("Malformed token claims") from e


def require_role(identity: Identity, required: Role) -> Identity:
    if not identity.role.meets(required):
        raise ForbiddenError(f"{required.value.capitalize()} access required")
    return identity
