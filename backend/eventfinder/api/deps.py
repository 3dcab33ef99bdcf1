"""
Identity and role gate dependencies.

`get_current_identity` turns the bearer token into (user_id, role);
`require_tier(role)` then checks the caller meets or exceeds that tier.
"""

from typing import Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eventfinder.core.security import Identity, Role, decode_access_token, require_role

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    identity = decode_access_token(credentials.credentials if credentials else None)
    structlog.contextvars.bind_contextvars(user_id=identity.user_id, role=identity.role.value)
    return identity


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    """Anonymous callers get None; a token that is present must still be valid."""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)


def require_tier(required: Role):
    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        return require_role(identity, required)

    return dependency


require_user = require_tier(Role.USER)
require_organizer = require_tier(Role.ORGANIZER)
require_admin = require_tier(Role.ADMIN)
