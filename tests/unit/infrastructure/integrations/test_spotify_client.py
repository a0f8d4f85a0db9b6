"""Tests for SpotifyClient.

Token flows use httpx.MockTransport so each test controls the full request sequence;
the top-item calls go through pytest-httpx.
"""

import base64
import re
from collections.abc import Callable
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from pytest_httpx import HTTPXMock

from musicstats.config import SpotifySettings
from musicstats.domain.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    TokenRefreshException,
)
from musicstats.infrastructure.integrations import SpotifyClient
from musicstats.infrastructure.integrations.spotify_client import _retry_delay

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def spotify_settings() -> SpotifySettings:
    return SpotifySettings(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:8000/api/statistics",
    )


def _client(settings: SpotifySettings, handler: Handler) -> SpotifyClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SpotifyClient(settings, http_client=http_client)


def _token_handler(status: int = 200, body: dict | None = None) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=body if body is not None else {})

    return handler


class TestAuthorizationUrl:
    """Tests for authorization_url()."""

    def test_contains_all_oauth_parameters(self, spotify_settings: SpotifySettings) -> None:
        client = SpotifyClient(spotify_settings)

        url = urlparse(client.authorization_url("the-state"))
        params = parse_qs(url.query)

        assert f"{url.scheme}://{url.netloc}{url.path}" == SpotifyClient.AUTHORIZE_URL
        assert params["response_type"] == ["code"]
        assert params["client_id"] == ["client-id"]
        assert params["scope"] == ["user-top-read"]
        assert params["redirect_uri"] == ["http://localhost:8000/api/statistics"]
        assert params["state"] == ["the-state"]

    def test_custom_scopes(self, spotify_settings: SpotifySettings) -> None:
        url = SpotifyClient(spotify_settings).authorization_url("s", ["a", "b"])

        assert parse_qs(urlparse(url).query)["scope"] == ["a b"]


class TestTokenExchange:
    """Tests for exchange_code_for_token()."""

    async def test_success_stores_tokens(self, spotify_settings: SpotifySettings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "acc", "refresh_token": "ref"})

        client = _client(spotify_settings, handler)

        tokens = await client.exchange_code_for_token("the-code")

        assert tokens.access_token == "acc"
        assert tokens.refresh_token == "ref"
        assert client.access_token == "acc"
        request = seen[0]
        assert str(request.url) == SpotifyClient.TOKEN_URL
        expected_auth = base64.b64encode(b"client-id:client-secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected_auth}"
        form = parse_qs(request.content.decode())
        assert form["grant_type"] == ["authorization_code"]
        assert form["code"] == ["the-code"]
        assert form["redirect_uri"] == [spotify_settings.redirect_uri]

    async def test_empty_code_rejected_without_request(
        self, spotify_settings: SpotifySettings
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(AuthenticationError):
            await _client(spotify_settings, handler).exchange_code_for_token("")

    async def test_rejected_code(self, spotify_settings: SpotifySettings) -> None:
        client = _client(spotify_settings, _token_handler(400, {"error": "invalid_grant"}))

        with pytest.raises(AuthenticationError, match="status 400"):
            await client.exchange_code_for_token("used-code")
        assert client.access_token is None

    async def test_missing_access_token(self, spotify_settings: SpotifySettings) -> None:
        client = _client(spotify_settings, _token_handler(200, {"token_type": "Bearer"}))

        with pytest.raises(AuthenticationError, match="no access token"):
            await client.exchange_code_for_token("code")

    async def test_non_json_body(self, spotify_settings: SpotifySettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        client = _client(spotify_settings, handler)

        with pytest.raises(AuthenticationError, match="non-JSON"):
            await client.exchange_code_for_token("code")
        assert client.access_token is None

    async def test_transport_error(self, spotify_settings: SpotifySettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(ExternalServiceError):
            await _client(spotify_settings, handler).exchange_code_for_token("code")


class TestTokenRefresh:
    """Tests for refresh_access_token()."""

    async def _authenticated(self, settings: SpotifySettings, refresh_handler: Handler):
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                return httpx.Response(200, json={"access_token": "acc", "refresh_token": "ref"})
            return refresh_handler(request)

        client = _client(settings, handler)
        await client.exchange_code_for_token("code")
        return client

    async def test_refresh_without_token(self, spotify_settings: SpotifySettings) -> None:
        client = _client(spotify_settings, _token_handler())

        with pytest.raises(AuthenticationError, match="no refresh token"):
            await client.refresh_access_token()

    async def test_refresh_rotates_tokens(self, spotify_settings: SpotifySettings) -> None:
        client = await self._authenticated(
            spotify_settings,
            _token_handler(200, {"access_token": "acc2", "refresh_token": "ref2"}),
        )

        assert await client.refresh_access_token() == "acc2"
        assert client.refresh_token == "ref2"

    async def test_refresh_keeps_refresh_token_when_not_rotated(
        self, spotify_settings: SpotifySettings
    ) -> None:
        client = await self._authenticated(
            spotify_settings, _token_handler(200, {"access_token": "acc2"})
        )

        await client.refresh_access_token()

        assert client.refresh_token == "ref"

    async def test_invalid_grant(self, spotify_settings: SpotifySettings) -> None:
        client = await self._authenticated(
            spotify_settings, _token_handler(400, {"error": "invalid_grant"})
        )

        with pytest.raises(TokenRefreshException) as exc_info:
            await client.refresh_access_token()
        assert exc_info.value.error_code == "invalid_grant"

    async def test_forbidden(self, spotify_settings: SpotifySettings) -> None:
        client = await self._authenticated(spotify_settings, _token_handler(403))

        with pytest.raises(TokenRefreshException) as exc_info:
            await client.refresh_access_token()
        assert exc_info.value.http_status == 403

    async def test_no_new_access_token(self, spotify_settings: SpotifySettings) -> None:
        client = await self._authenticated(spotify_settings, _token_handler(200, {}))

        with pytest.raises(AuthenticationError, match="no new access token"):
            await client.refresh_access_token()


class TestTopItems:
    """Tests for fetch_top_artists() / fetch_top_tracks() against a mocked transport."""

    TOP_ARTISTS = re.compile(r"https://api\.spotify\.com/v1/me/top/artists.*")
    TOP_TRACKS = re.compile(r"https://api\.spotify\.com/v1/me/top/tracks.*")

    async def _ready(self, settings: SpotifySettings, httpx_mock: HTTPXMock) -> SpotifyClient:
        httpx_mock.add_response(
            method="POST", url=SpotifyClient.TOKEN_URL, json={"access_token": "acc"}
        )
        client = SpotifyClient(settings)
        await client.exchange_code_for_token("code")
        return client

    async def test_requires_access_token(self, spotify_settings: SpotifySettings) -> None:
        with pytest.raises(AuthenticationError):
            await _client(spotify_settings, _token_handler()).fetch_top_artists()

    async def test_fetch_top_artists(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        client = await self._ready(spotify_settings, httpx_mock)
        httpx_mock.add_response(
            url=self.TOP_ARTISTS, json={"items": [{"name": "A", "genres": ["pop"]}]}
        )

        items = await client.fetch_top_artists(30)
        await client.close()

        assert items == [{"name": "A", "genres": ["pop"]}]
        request = httpx_mock.get_requests()[-1]
        assert request.url.path == "/v1/me/top/artists"
        assert request.url.params["limit"] == "30"
        assert request.headers["Authorization"] == "Bearer acc"

    async def test_limit_is_clamped(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        client = await self._ready(spotify_settings, httpx_mock)
        httpx_mock.add_response(url=self.TOP_TRACKS, json={"items": []})

        assert await client.fetch_top_tracks(500) == []
        await client.close()

        request = httpx_mock.get_requests()[-1]
        assert request.url.path == "/v1/me/top/tracks"
        assert request.url.params["limit"] == "50"

    async def test_error_status_raises(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        client = await self._ready(spotify_settings, httpx_mock)
        httpx_mock.add_response(url=self.TOP_TRACKS, status_code=503)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.fetch_top_tracks()
        await client.close()
        assert exc_info.value.status_code == 503

    async def test_rate_limit_retried(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        client = await self._ready(spotify_settings, httpx_mock)
        httpx_mock.add_response(url=self.TOP_TRACKS, status_code=429, headers={"Retry-After": "0"})
        httpx_mock.add_response(url=self.TOP_TRACKS, json={"items": [{"name": "Song"}]})

        assert await client.fetch_top_tracks() == [{"name": "Song"}]
        await client.close()
        assert len(httpx_mock.get_requests(url=self.TOP_TRACKS)) == 2

    async def test_non_json_body_is_upstream_error(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        client = await self._ready(spotify_settings, httpx_mock)
        httpx_mock.add_response(url=self.TOP_ARTISTS, text="<html>bad gateway</html>")

        with pytest.raises(ExternalServiceError, match="non-JSON"):
            await client.fetch_top_artists()
        await client.close()

    async def test_http_date_retry_after_falls_back_to_backoff(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock, mocker
    ) -> None:
        sleep = mocker.patch(
            "musicstats.infrastructure.integrations.spotify_client.asyncio.sleep",
            new=AsyncMock(),
        )
        client = await self._ready(spotify_settings, httpx_mock)
        httpx_mock.add_response(
            url=self.TOP_TRACKS,
            status_code=429,
            headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"},
        )
        httpx_mock.add_response(url=self.TOP_TRACKS, json={"items": []})

        assert await client.fetch_top_tracks() == []
        await client.close()
        sleep.assert_awaited_once_with(1.0)

    async def test_rate_limit_gives_up(self, spotify_settings: SpotifySettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "accounts.spotify.com":
                return httpx.Response(200, json={"access_token": "acc"})
            return httpx.Response(429, headers={"Retry-After": "0"})

        client = _client(spotify_settings, handler)
        await client.exchange_code_for_token("code")

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.fetch_top_artists()
        assert exc_info.value.status_code == 429

    async def test_injected_client_is_not_closed(self, spotify_settings: SpotifySettings) -> None:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(_token_handler()))
        client = SpotifyClient(spotify_settings, http_client=http_client)

        await client.close()

        assert not http_client.is_closed
        await http_client.aclose()


class TestRetryDelay:
    """Tests for the Retry-After parsing used on 429 responses."""

    @pytest.mark.parametrize(
        "header,attempt,expected",
        [
            ("3", 0, 3.0),
            ("0.5", 2, 0.5),
            ("-4", 0, 0.0),
            (None, 2, 4.0),
            ("", 1, 2.0),
            ("Wed, 21 Oct 2026 07:28:00 GMT", 1, 2.0),
        ],
    )
    def test_retry_delay(self, header: str | None, attempt: int, expected: float) -> None:
        assert _retry_delay(header, attempt) == expected
