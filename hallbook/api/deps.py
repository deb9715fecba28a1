"""API dependencies for authentication and common operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hallbook.core.exceptions import AuthenticationError
from hallbook.core.security import verify_token
from hallbook.database import get_db
from hallbook.models.profile import Profile

__all__ = ["get_current_user", "get_db"]

# Security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Profile:
    """Get the signed-in profile from the identity provider's JWT."""
    payload = verify_token(credentials.credentials, token_type="access")
    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")

    try:
        profile_id = UUID(subject)
    except ValueError:
        raise AuthenticationError("Invalid token subject")

    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    profile = result.scalar_one_or_none()

    if not profile:
        raise AuthenticationError("User not found")
    if not profile.is_active:
        raise AuthenticationError("User account is deactivated")

    return profile
