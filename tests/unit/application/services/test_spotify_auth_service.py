"""Tests for SpotifyAuthService state handling."""

import base64
import json
from unittest.mock import MagicMock

import pytest

from musicstats.application.services import SpotifyAuthService
from musicstats.domain.entities import MusicPlatform
from musicstats.domain.exceptions import ValidationError


def _encode(payload: object, *, strip_padding: bool = False, standard: bool = False) -> str:
    raw = json.dumps(payload).encode("utf-8")
    encoded = (base64.b64encode if standard else base64.urlsafe_b64encode)(raw).decode("ascii")
    return encoded.rstrip("=") if strip_padding else encoded


@pytest.fixture
def service() -> SpotifyAuthService:
    client = MagicMock()
    client.authorization_url.side_effect = lambda state: f"https://auth.example/?state={state}"
    return SpotifyAuthService(client)


class TestStateEncoding:
    """Tests for encode_state() / decode_state()."""

    def test_round_trip(self, service: SpotifyAuthService) -> None:
        state = SpotifyAuthService.encode_state(42, MusicPlatform.SPOTIFY)

        decoded = service.decode_state(state)

        assert decoded.user_id == 42
        assert decoded.platform is MusicPlatform.SPOTIFY

    def test_accepts_missing_padding_and_standard_alphabet(
        self, service: SpotifyAuthService
    ) -> None:
        payload = {"userId": 7, "platform": "Spotify"}

        assert service.decode_state(_encode(payload, strip_padding=True)).user_id == 7
        assert service.decode_state(_encode(payload, standard=True)).user_id == 7

    def test_accepts_string_user_id(self, service: SpotifyAuthService) -> None:
        state = _encode({"userId": "9", "platform": "spotify"})

        assert service.decode_state(state).user_id == 9

    @pytest.mark.parametrize(
        "state",
        [
            "",
            "!!!not-base64!!!",
            base64.urlsafe_b64encode(b"not json").decode(),
            _encode(["a", "list"]),
            _encode({"platform": "spotify"}),
            _encode({"userId": "abc", "platform": "spotify"}),
            _encode({"userId": 1, "platform": "deezer"}),
            _encode({"userId": 1}),
        ],
    )
    def test_invalid_state_rejected(self, service: SpotifyAuthService, state: str) -> None:
        with pytest.raises(ValidationError, match="invalid state") as exc_info:
            service.decode_state(state)
        assert exc_info.value.field == "state"


class TestAuthorizationUrl:
    """Tests for build_authorization_url()."""

    def test_url_carries_encoded_state(self, service: SpotifyAuthService) -> None:
        url = service.build_authorization_url(42, MusicPlatform.SPOTIFY)

        state = url.split("state=", 1)[1]
        assert service.decode_state(state).user_id == 42
