"""JWT acquisition from the ARXS identity endpoint."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import aiohttp

from core.errors.exceptions import AuthenticationFailure
from taskrequest.responses import read_json

logger = logging.getLogger(__name__)

# Keys checked, in order, when the token endpoint answers with an object
_TOKEN_KEYS = ("token", "access_token", "accessToken")


@dataclass(frozen=True)
class BearerToken:
    """Immutable credential for one pipeline run."""

    value: str

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.value}"

    def __repr__(self) -> str:
        return "BearerToken(value='***')"


def parse_token_payload(payload: Any) -> BearerToken:
    """Extract the JWT from the token endpoint's JSON payload.

    The endpoint answers with a bare JSON string; an object carrying the
    token under a well-known key is accepted as well.
    """
    if isinstance(payload, str) and payload:
        return BearerToken(payload)
    if isinstance(payload, Mapping):
        for key in _TOKEN_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value:
                return BearerToken(value)
    raise AuthenticationFailure(
        f"Token endpoint returned no usable token (payload type {type(payload).__name__})"
    )


class IdentityClient:
    """Fetches a JWT for an API key, optionally scoped to a tenant."""

    def __init__(
        self,
        identity_url: str,
        api_key: str,
        tenant_id: str | None = None,
        timeout_seconds: float = 30.0,
    ):
        self.identity_url = identity_url.rstrip("/") if identity_url else ""
        if not self.identity_url:
            raise ValueError("IdentityClient requires 'identity_url'")
        if not api_key:
            raise ValueError("IdentityClient requires 'api_key'")

        self._api_key = api_key
        self.tenant_id = tenant_id or None
        self.timeout_seconds = timeout_seconds

    @property
    def token_path(self) -> str:
        return f"/api/authenticate/token/{quote(self._api_key, safe='')}"

    async def get_token(self) -> BearerToken:
        """
        Request a token.

        Raises:
            AuthenticationFailure: Non-2xx response, unusable payload, timeout
                or connection error
        """
        url = f"{self.identity_url}{self.token_path}"
        headers = {"TenantId": self.tenant_id} if self.tenant_id else {}
        start_time = asyncio.get_event_loop().time()

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    if not 200 <= response.status < 300:
                        body = await response.text()
                        raise AuthenticationFailure(
                            f"Failed to retrieve JWT token: {response.status} {response.reason}",
                            path="/api/authenticate/token",
                            status_code=response.status,
                            payload=body[:500] if body else None,
                        )
                    payload = await read_json(
                        response,
                        AuthenticationFailure,
                        "Token request",
                        "/api/authenticate/token",
                    )

        except TimeoutError as e:
            raise AuthenticationFailure(
                f"Token request timed out after {self.timeout_seconds}s",
                path="/api/authenticate/token",
                cause=e,
            ) from e
        except aiohttp.ClientError as e:
            raise AuthenticationFailure(
                f"Token request connection error: {e}",
                path="/api/authenticate/token",
                cause=e,
            ) from e

        token = parse_token_payload(payload)
        duration = asyncio.get_event_loop().time() - start_time
        logger.info(
            "JWT token acquired",
            extra={
                "api_endpoint": "/api/authenticate/token",
                "duration_ms": round(duration * 1000, 2),
            },
        )
        return token
