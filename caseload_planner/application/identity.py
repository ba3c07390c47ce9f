"""Resolve the current user from a bearer token."""

import logging
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from ..domain.entities import TenantScope, UserIdentity

logger = logging.getLogger(__name__)


def resolve_identity(authorization: Optional[str], secret: str, algorithm: str = "HS256") -> Optional[UserIdentity]:
    """Decode an ``Authorization: Bearer <jwt>`` header into a user identity.

    Claims: ``sub`` (user id), ``role``, and optionally ``school_id``,
    ``district_id`` and ``state_id``. A missing, malformed or undecodable
    token yields None.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        logger.warning("Authorization header is not a bearer token")
        return None

    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.warning(f"Could not decode bearer token: {e}")
        return None

    try:
        return UserIdentity(
            user_id=claims.get("sub") or "",
            role=claims.get("role") or "resource",
            scope=TenantScope(
                school_id=claims.get("school_id"),
                district_id=claims.get("district_id"),
                state_id=claims.get("state_id"),
            ),
        )
    except ValidationError as e:
        logger.warning(f"Bearer token has invalid claims: {e}")
        return None


def issue_token(identity: UserIdentity, secret: str, algorithm: str = "HS256") -> str:
    """Encode an identity as a bearer token (used by the demo seed and tests)."""
    claims = {"sub": identity.user_id, "role": identity.role.value}
    claims.update(identity.scope.model_dump(exclude_none=True))
    return jwt.encode(claims, secret, algorithm=algorithm)
