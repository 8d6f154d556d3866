"""Access-token verification: Cognito RS256 via JWKS, or HS256 mock tokens.

Only identity comes from the token (``sub``, ``email``, ``name``). The role
lives on the profile row; ``cognito:groups`` is consulted once, when a
profile is first provisioned.
"""

import time
from dataclasses import dataclass

import httpx
from jose import JWTError, jwt

from donation_hub.core.config import settings

JWKS_REFRESH_INTERVAL = 3600  # 1 hour
ROLE_GROUPS = ("admin", "seller")


@dataclass
class TokenIdentity:
    subject: str
    email: str
    name: str | None
    groups: tuple[str, ...]

    @property
    def provisioned_role(self) -> str:
        """Role given to a brand-new profile for this identity."""
        for role in ROLE_GROUPS:
            if role in self.groups:
                return role
        return "user"


class JwksCache:
    def __init__(self, ttl: int = JWKS_REFRESH_INTERVAL):
        self.ttl = ttl
        self._keys: dict | None = None
        self._fetched_at = 0.0

    @property
    def issuer(self) -> str:
        return (
            f"https://cognito-idp.{settings.COGNITO_REGION}.amazonaws.com"
            f"/{settings.COGNITO_USER_POOL_ID}"
        )

    async def get(self) -> dict:
        if self._keys is None or (time.time() - self._fetched_at) > self.ttl:
            async with httpx.AsyncClient(timeout=10.0) as client:
                resp = await client.get(f"{self.issuer}/.well-known/jwks.json")
                resp.raise_for_status()
            self._keys = resp.json()
            self._fetched_at = time.time()
        return self._keys

    async def key_for(self, kid: str | None) -> dict:
        for key in (await self.get()).get("keys", []):
            if key.get("kid") == kid:
                return key
        raise JWTError("Key not found in JWKS")


_jwks = JwksCache()


async def decode_access_token(token: str) -> dict:
    """Verify a bearer token and return its claims."""
    if settings.COGNITO_MOCK:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=["HS256"],
            options={"verify_aud": False, "verify_iss": False},
        )

    key = await _jwks.key_for(jwt.get_unverified_header(token).get("kid"))
    claims = jwt.decode(
        token,
        key,
        algorithms=["RS256"],
        audience=settings.COGNITO_CLIENT_ID,
        issuer=_jwks.issuer,
        options={"verify_at_hash": False},
    )
    if claims.get("token_use") != "access":
        raise JWTError("Not an access token")
    return claims


def identity_from_claims(claims: dict) -> TokenIdentity:
    subject = claims.get("sub")
    if not subject:
        raise JWTError("Token missing sub claim")
    return TokenIdentity(
        subject=subject,
        email=claims.get("email") or f"{subject}@placeholder.local",
        name=claims.get("name"),
        groups=tuple(claims.get("cognito:groups") or ()),
    )


def create_mock_access_token(
    sub: str,
    email: str = "test@example.com",
    groups: list[str] | None = None,
    name: str | None = None,
    expires_in: int = 900,
) -> str:
    """Create a mock JWT for local dev and tests. Only accepted when COGNITO_MOCK=true."""
    now = int(time.time())
    payload = {
        "sub": sub,
        "email": email,
        "name": name or email,
        "cognito:groups": groups or [],
        "token_use": "access",
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
