"""Spotify HTTP client: authorization-code OAuth and the user's top items."""

import asyncio
import base64
import logging
from collections.abc import Sequence
from types import TracebackType
from typing import Any, cast
from urllib.parse import urlencode

import httpx

from musicstats.config import SpotifySettings
from musicstats.domain.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    TokenRefreshException,
)
from musicstats.domain.ports import IPlatformClient
from musicstats.domain.value_objects import TokenPair

logger = logging.getLogger(__name__)


# Retry-After may also be an HTTP date; anything that is not seconds gets exponential backoff
def _retry_delay(header: str | None, attempt: int) -> float:
    if header:
        try:
            return max(0.0, float(header))
        except ValueError:
            pass
    return float(2**attempt)


class SpotifyClient(IPlatformClient):
    """HTTP client for one user's Spotify session."""

    AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
    TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    API_BASE_URL = "https://api.spotify.com/v1"
    MAX_LIMIT = 50

    # Hey future me, one SpotifyClient = one user's tokens. The strategy factory builds a fresh
    # client per OAuth callback, so tokens never leak between users. The httpx client is created
    # lazily in _get_client() (async-friendly) unless a test hands one in.
    def __init__(
        self, settings: SpotifySettings, http_client: httpx.AsyncClient | None = None
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            http_client: Optional pre-built client (tests use httpx.MockTransport)
        """
        self.settings = settings
        self._client = http_client
        self._owns_client = http_client is None
        self._access_token: str | None = None
        self._refresh_token: str | None = None

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @property
    def refresh_token(self) -> str | None:
        return self._refresh_token

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client (only if we created it)."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SpotifyClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def authorization_url(self, state: str, scopes: Sequence[str] | None = None) -> str:
        """Build the Spotify consent URL for the authorization-code flow.

        Args:
            state: Opaque value echoed back on the callback
            scopes: OAuth scopes, defaults to the configured ones (user-top-read)

        Returns:
            Full URL to redirect the user to
        """
        params = {
            "response_type": "code",
            "client_id": self.settings.client_id,
            "scope": " ".join(scopes if scopes is not None else self.settings.scopes),
            "redirect_uri": self.settings.redirect_uri,
            "state": state,
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    def _basic_auth_header(self) -> str:
        raw = f"{self.settings.client_id}:{self.settings.client_secret}".encode()
        return "Basic " + base64.b64encode(raw).decode("ascii")

    async def _post_token_request(self, data: dict[str, str]) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.post(
                self.TOKEN_URL,
                data=data,
                headers={
                    "Authorization": self._basic_auth_header(),
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Spotify token endpoint unreachable: {e}") from e

    @staticmethod
    def _token_payload(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise AuthenticationError("token endpoint returned a non-JSON body") from e
        if not isinstance(payload, dict):
            raise AuthenticationError("token endpoint returned an unexpected body")
        return payload

    # Yo, the code is single-use and expires after ~10 minutes. redirect_uri MUST match the one
    # used for the consent URL or Spotify answers 400 invalid_grant.
    async def exchange_code_for_token(self, code: str) -> TokenPair:
        """
        Exchange an authorization code for access and refresh tokens.

        Raises:
            AuthenticationError: Spotify rejected the code or sent no access token
            ExternalServiceError: Token endpoint unreachable
        """
        if not code:
            raise AuthenticationError("authorization code is required")

        response = await self._post_token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.settings.redirect_uri,
            }
        )
        if response.status_code >= 400:
            logger.warning(
                "Spotify token exchange failed with status %s",
                response.status_code,
                extra={"status_code": response.status_code},
            )
            raise AuthenticationError(
                f"token exchange failed with status {response.status_code}"
            )

        payload = self._token_payload(response)
        access_token = payload.get("access_token")
        if not access_token:
            raise AuthenticationError("no access token")

        self._access_token = access_token
        self._refresh_token = payload.get("refresh_token")
        return TokenPair(access_token=access_token, refresh_token=self._refresh_token)

    async def refresh_access_token(self) -> str:
        """
        Refresh the access token with the stored refresh token.

        Raises:
            AuthenticationError: No refresh token or no new access token returned
            TokenRefreshException: Refresh token revoked (re-auth required)
        """
        if not self._refresh_token:
            raise AuthenticationError("no refresh token available")

        response = await self._post_token_request(
            {"grant_type": "refresh_token", "refresh_token": self._refresh_token}
        )

        if response.status_code == 400:
            try:
                error_code = response.json().get("error", "")
            except (ValueError, AttributeError):
                error_code = ""
            if error_code == "invalid_grant":
                raise TokenRefreshException(
                    message="Refresh token invalid. Please re-authenticate with Spotify.",
                    error_code=error_code,
                    http_status=400,
                )
        if response.status_code in (401, 403):
            raise TokenRefreshException(
                message="Spotify access denied. Please re-authenticate with Spotify.",
                error_code="access_denied",
                http_status=response.status_code,
            )
        if response.status_code >= 400:
            raise AuthenticationError(
                f"token refresh failed with status {response.status_code}"
            )

        payload = self._token_payload(response)
        access_token = payload.get("access_token")
        if not access_token:
            raise AuthenticationError("no new access token")

        self._access_token = access_token
        # Spotify only sometimes rotates the refresh token
        if payload.get("refresh_token"):
            self._refresh_token = payload["refresh_token"]
        return cast(str, access_token)

    # Hey future me - ALL Web API calls go through here. 429 is retried honoring Retry-After
    # (max 3 times), everything else >= 400 becomes ExternalServiceError right away. Don't
    # swallow these upstream, the use case relies on them propagating.
    async def _api_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        max_retries: int = 3,
    ) -> httpx.Response:
        """Make an authenticated API request with retry on 429.

        Raises:
            AuthenticationError: No access token yet
            ExternalServiceError: Transport failure or error status
        """
        if not self._access_token:
            raise AuthenticationError("no access token, exchange an authorization code first")

        client = await self._get_client()
        headers = {"Authorization": f"Bearer {self._access_token}"}

        for attempt in range(max_retries + 1):
            try:
                response = await client.request(method, url, params=params, headers=headers)
            except httpx.HTTPError as e:
                raise ExternalServiceError(f"Spotify API request failed: {e}") from e

            if response.status_code == 429:
                retry_after = _retry_delay(response.headers.get("Retry-After"), attempt)
                if attempt >= max_retries:
                    raise ExternalServiceError(
                        f"Spotify API rate limited (429) after {max_retries} retries",
                        status_code=429,
                    )
                logger.warning(
                    "Spotify 429 rate limit (attempt %d/%d), retrying in %.1fs",
                    attempt + 1,
                    max_retries,
                    retry_after,
                )
                await asyncio.sleep(retry_after)
                continue

            if response.status_code >= 400:
                raise ExternalServiceError(
                    f"Spotify API returned {response.status_code} for {url}",
                    status_code=response.status_code,
                )
            return response

        # Unreachable, the loop either returns or raises
        raise ExternalServiceError("Spotify API request failed")

    async def _fetch_top(self, kind: str, limit: int) -> list[dict[str, Any]]:
        limit = max(1, min(limit, self.MAX_LIMIT))
        response = await self._api_request(
            "GET", f"{self.API_BASE_URL}/me/top/{kind}", params={"limit": limit}
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                f"Spotify API returned a non-JSON body for top {kind}",
                status_code=response.status_code,
            ) from e
        if not isinstance(payload, dict):
            raise ExternalServiceError(
                f"Spotify API returned an unexpected body for top {kind}",
                status_code=response.status_code,
            )
        return cast(list[dict[str, Any]], payload.get("items", []))

    async def fetch_top_artists(self, limit: int = 3) -> list[dict[str, Any]]:
        """Get the user's top artists (Spotify artist objects, with genres)."""
        return await self._fetch_top("artists", limit)

    async def fetch_top_tracks(self, limit: int = 3) -> list[dict[str, Any]]:
        """Get the user's top tracks (Spotify track objects)."""
        return await self._fetch_top("tracks", limit)
