"""
Clerk Backend API client.

Verifies session tokens and manages users and their public metadata.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import jwt
from jwt.exceptions import PyJWKSetError

from ...application.interfaces.services import IdentityProvider
from ...config import ClerkSettings
from ...domain.entities.user import DEFAULT_DASHBOARD_ACCESS, DEFAULT_ROLE, IdentityUser
from ...domain.exceptions import (
    ConfigurationException,
    EntityNotFoundException,
    IdentityProviderException,
)

logger = logging.getLogger(__name__)

SESSION_TOKEN_ALGORITHMS = ["RS256"]


def _from_epoch_ms(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def user_from_payload(data: Dict[str, Any]) -> IdentityUser:
    """Map a Clerk user object to an IdentityUser."""
    emails = data.get("email_addresses") or []
    metadata = data.get("public_metadata") or {}
    return IdentityUser(
        id=data["id"],
        email=emails[0].get("email_address") if emails else None,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        role=metadata.get("role") or DEFAULT_ROLE,
        dashboard_access=metadata.get("dashboardAccess") or DEFAULT_DASHBOARD_ACCESS,
        metadata=dict(metadata),
        created_at=_from_epoch_ms(data.get("created_at")),
        last_sign_in_at=_from_epoch_ms(data.get("last_sign_in_at")),
    )


class ClerkClient(IdentityProvider):
    """
    IdentityProvider backed by the Clerk Backend API.

    Session tokens are RS256 JWTs. They are verified locally with the
    configured PEM key when present, otherwise against the instance JWKS,
    which is fetched once and cached.
    """

    def __init__(
        self,
        settings: ClerkSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Clerk settings
            transport: Optional httpx transport (used by tests)

        Raises:
            ConfigurationException: If no secret key is configured
        """
        if not settings.secret_key:
            raise ConfigurationException(
                "Missing identity provider credentials: set CLERK_SECRET_KEY",
                setting='CLERK_SECRET_KEY',
            )
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.api_url,
            headers={
                "Authorization": f"Bearer {settings.secret_key}",
                "Content-Type": "application/json",
            },
            timeout=settings.timeout,
            transport=transport,
        )
        self._jwks: Optional[jwt.PyJWKSet] = None
        self._jwks_fetched_at = 0.0

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()

    # =========================================================================
    # Token verification
    # =========================================================================

    async def verify_token(self, token: str) -> Optional[str]:
        """
        Verify a session token and return its subject.

        Returns None for malformed, expired, not-yet-valid or wrongly
        signed tokens and for tokens issued to another party.
        """
        try:
            key = await self._signing_key(token)
            if key is None:
                return None

            payload = jwt.decode(
                token,
                key,
                algorithms=SESSION_TOKEN_ALGORITHMS,
                leeway=self.settings.leeway_seconds,
                options={"verify_aud": False, "require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Session token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid session token: {e}")
            return None

        authorized = self.settings.authorized_parties
        azp = payload.get("azp")
        if authorized and azp and azp not in authorized:
            logger.warning(f"Session token issued to unauthorized party {azp}")
            return None

        return payload.get("sub")

    async def _signing_key(self, token: str) -> Any:
        if self.settings.jwt_key:
            return self.settings.jwt_key

        kid = jwt.get_unverified_header(token).get("kid")
        jwks = await self._get_jwks()
        key = self._find_key(jwks, kid)
        if key is None:
            # Keys may have been rotated since the cache was filled
            jwks = await self._get_jwks(force=True)
            key = self._find_key(jwks, kid)
        if key is None:
            logger.debug(f"No signing key found for kid {kid}")
        return key

    @staticmethod
    def _find_key(jwks: jwt.PyJWKSet, kid: Optional[str]) -> Any:
        for jwk in jwks.keys:
            if kid is None or jwk.key_id == kid:
                return jwk.key
        return None

    async def _get_jwks(self, force: bool = False) -> jwt.PyJWKSet:
        age = time.monotonic() - self._jwks_fetched_at
        if self._jwks is not None and not force and age < self.settings.jwks_cache_seconds:
            return self._jwks

        data = await self._request("GET", "/jwks")
        try:
            self._jwks = jwt.PyJWKSet.from_dict(data)
        except PyJWKSetError as e:
            raise IdentityProviderException(f"Invalid JWKS: {e}")
        self._jwks_fetched_at = time.monotonic()
        logger.info(f"Fetched {len(self._jwks.keys)} signing keys")
        return self._jwks

    # =========================================================================
    # Users
    # =========================================================================

    async def get_user(self, user_id: str) -> IdentityUser:
        data = await self._request("GET", f"/users/{user_id}", entity_id=user_id)
        return user_from_payload(data)

    async def list_users(
        self,
        limit: int = 100,
        offset: int = 0,
        order_by: str = "-created_at",
    ) -> List[IdentityUser]:
        data = await self._request(
            "GET",
            "/users",
            params={"limit": limit, "offset": offset, "order_by": order_by},
        )
        # Newer API versions wrap the list in {"data": [...]}
        if isinstance(data, dict):
            data = data.get("data", [])
        return [user_from_payload(item) for item in data]

    async def update_user_metadata(
        self,
        user_id: str,
        public_metadata: Dict[str, Any],
    ) -> IdentityUser:
        data = await self._request(
            "PATCH",
            f"/users/{user_id}",
            json={"public_metadata": public_metadata},
            entity_id=user_id,
        )
        return user_from_payload(data)

    async def delete_user(self, user_id: str) -> None:
        await self._request("DELETE", f"/users/{user_id}", entity_id=user_id)

    async def _request(
        self,
        method: str,
        path: str,
        entity_id: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Identity provider request {method} {path} failed: {e}")
            raise IdentityProviderException(f"Identity provider unreachable: {e}")

        if response.status_code == 404 and entity_id is not None:
            raise EntityNotFoundException("User", entity_id)

        if response.status_code >= 400:
            logger.error(
                f"Identity provider returned {response.status_code} for {method} {path} - "
                f"{response.text}"
            )
            raise IdentityProviderException(
                f"Identity provider returned {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        return response.json()
