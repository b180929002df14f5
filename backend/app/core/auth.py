"""Bearer token validation against the Azure AD tenant signing keys.

The directory only needs to know that the caller holds a valid token and
which app roles it carries; session handling stays with the identity provider.
"""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any

from fastapi import HTTPException, status
from jose import jwk, jwt
from jose.constants import Algorithms
from jose.exceptions import ExpiredSignatureError, JWSSignatureError, JWTClaimsError, JWTError

logger = logging.getLogger(__name__)

_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_aud": True,
    "verify_iss": True,
    "verify_exp": True,
    "require": ["exp", "iss", "aud"],
}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class JwksCache:
    """Per-tenant signing key sets, refreshed once a day.

    A stale key set is served when the refresh fails, so a short identity
    provider outage does not lock administrators out.
    """

    def __init__(self, ttl_seconds: int = 24 * 60 * 60, timeout: int = 15) -> None:
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}

    def _download(self, tenant_id: str) -> dict[str, Any]:
        uri = f"https://login.microsoftonline.com/{tenant_id}/discovery/v2.0/keys"
        logger.info("Fetching JWKS from %s", uri)
        with urllib.request.urlopen(urllib.request.Request(uri), timeout=self.timeout) as resp:  # noqa: S310
            return json.loads(resp.read().decode())

    def get(self, tenant_id: str) -> dict[str, Any]:
        now = time.time()
        cached = self._entries.get(tenant_id)
        if cached and now - cached[0] < self.ttl_seconds:
            return cached[1]

        try:
            jwks = self._download(tenant_id)
        except urllib.error.URLError as e:
            logger.error("Failed to fetch JWKS: %s", e)
            if cached:
                logger.warning("Using expired JWKS for tenant %s", tenant_id)
                return cached[1]
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Could not fetch JWKS: {e}",
            ) from e

        self._entries[tenant_id] = (now, jwks)
        return jwks

    def clear(self) -> None:
        self._entries.clear()


jwks_cache = JwksCache()


def get_jwks(tenant_id: str) -> dict[str, Any]:
    return jwks_cache.get(tenant_id)


def get_signing_key(token: str, tenant_id: str) -> dict[str, str]:
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError as e:
        raise _unauthorized(f"Invalid token header: {e}") from e

    if not kid:
        raise _unauthorized("Token has no 'kid' in header")

    key = next((k for k in get_jwks(tenant_id).get("keys", []) if k.get("kid") == kid), None)
    if key is None:
        raise _unauthorized(f"No matching signing key for kid: {kid}")
    return key


def validate_token(token: str, tenant_id: str, client_id: str) -> dict[str, Any]:
    if not tenant_id or not client_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing Azure AD configuration",
        )

    signing_key = get_signing_key(token, tenant_id)
    algorithm = signing_key.get("alg", Algorithms.RS256)
    public_key = jwk.construct(signing_key, algorithm=algorithm)

    issuers = [
        f"https://login.microsoftonline.com/{tenant_id}/v2.0",
        f"https://sts.windows.net/{tenant_id}/",
    ]
    audiences = [client_id, f"api://{client_id}"]
    last_error: JWTError | None = None

    # v1 and v2 tokens differ in issuer and audience form; accept any pairing.
    for issuer in issuers:
        for audience in audiences:
            try:
                return jwt.decode(
                    token,
                    public_key,
                    algorithms=[algorithm],
                    audience=audience,
                    issuer=issuer,
                    options=_DECODE_OPTIONS,
                )
            except ExpiredSignatureError as e:
                raise _unauthorized("Token is expired") from e
            except JWSSignatureError as e:
                raise _unauthorized("Invalid token signature") from e
            except JWTError as e:
                last_error = e

    reason = str(last_error).lower() if isinstance(last_error, JWTClaimsError) else ""
    if "audience" in reason:
        raise _unauthorized(f"Invalid token audience. Expected one of: {audiences}")
    if "issuer" in reason:
        raise _unauthorized(f"Invalid token issuer. Expected one of: {issuers}")
    raise _unauthorized("Invalid authentication credentials")


def extract_roles_from_token(payload: dict[str, Any]) -> list[str]:
    roles = payload.get("roles", [])
    if not isinstance(roles, list):
        return []
    return [str(r) for r in roles if isinstance(r, str | int)]
