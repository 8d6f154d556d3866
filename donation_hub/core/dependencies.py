"""FastAPI dependency chain: DB session → bearer token → Profile → role."""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.exceptions import AuthenticationRequired, PermissionDenied
from donation_hub.core.security import decode_access_token, identity_from_claims
from donation_hub.db.session import async_session_factory
from donation_hub.models.profile import Profile
from donation_hub.repositories.profiles import ProfileRepository

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session. Commits on success, rolls back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    if credentials is None:
        raise AuthenticationRequired("Missing authorization header")
    try:
        return await decode_access_token(credentials.credentials)
    except JWTError as e:
        raise AuthenticationRequired(f"Invalid token: {e}") from e


async def get_current_profile(
    claims: dict = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Resolve the token subject to a Profile, provisioning it on first sight."""
    try:
        identity = identity_from_claims(claims)
    except JWTError as e:
        raise AuthenticationRequired(str(e)) from e

    repo = ProfileRepository(db)
    profile = await repo.by_subject(identity.subject)
    if profile is not None:
        return profile

    # An admin may have created the profile by email before first login
    profile = await repo.by_email(identity.email)
    if profile is not None and profile.auth_subject is None:
        profile.auth_subject = identity.subject
        await repo.save(profile)
        return profile
    if profile is not None:
        raise AuthenticationRequired("Email is bound to another account")

    profile = await repo.create(
        Profile(
            auth_subject=identity.subject,
            email=identity.email,
            full_name=identity.name,
            role=identity.provisioned_role,
        )
    )
    logger.info("Provisioned profile %s with role %s", profile.id, profile.role)
    return profile


def require_role(*roles: str):
    """Dependency factory: 401 without a token, 403 with the wrong role."""

    async def _check(profile: Profile = Depends(get_current_profile)) -> Profile:
        if profile.role not in roles:
            raise PermissionDenied(f"Requires role: {' or '.join(roles)}")
        return profile

    return _check


require_admin = require_role("admin")
