"""Spotify OAuth redirect service.

Hey future me - this service only builds the consent URL and encodes/decodes
the OAuth `state`. The actual token exchange happens inside SpotifyStrategy.init()
(via the StrategyFactory), because every callback gets its own client.

OAuth flow:
1. GET /api/statistics?userId=42 -> build_authorization_url() -> 307 to Spotify
2. User grants access, Spotify redirects back with ?code=...&state=...
3. decode_state(state) tells us WHICH user and platform the code belongs to
"""

import base64
import binascii
import json
import logging
from collections.abc import Iterable

from musicstats.domain.entities import MusicPlatform
from musicstats.domain.exceptions import DomainException, ValidationError
from musicstats.domain.ports import IPlatformClient
from musicstats.domain.validation import DEFAULT_ALLOWED_PLATFORMS, parse_platform, parse_user_id
from musicstats.domain.value_objects import OAuthState

logger = logging.getLogger(__name__)


class SpotifyAuthService:
    """Builds Spotify consent URLs and round-trips the OAuth state."""

    def __init__(
        self,
        client: IPlatformClient,
        allowed_platforms: Iterable[str] = DEFAULT_ALLOWED_PLATFORMS,
    ) -> None:
        """Initialize auth service.

        Args:
            client: Platform client used only for URL building (no tokens needed)
            allowed_platforms: Platforms accepted inside a decoded state
        """
        self._client = client
        self._allowed = tuple(allowed_platforms)

    @staticmethod
    def encode_state(user_id: int, platform: MusicPlatform) -> str:
        """URL-safe base64 of {"userId": ..., "platform": ...}."""
        raw = json.dumps({"userId": user_id, "platform": platform.value}).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii")

    # Listen up, the state comes back from the browser, so treat it as hostile input. We accept
    # both base64 alphabets and missing padding, but anything that doesn't decode to our exact
    # JSON shape is a plain "invalid state" (400), never a 500.
    def decode_state(self, state: str) -> OAuthState:
        """Decode a state produced by encode_state().

        Raises:
            ValidationError: state is not valid base64 JSON with userId and platform
        """
        if not state:
            raise ValidationError("invalid state", field="state")
        try:
            normalized = state.strip().replace("+", "-").replace("/", "_")
            normalized += "=" * (-len(normalized) % 4)
            payload = json.loads(base64.urlsafe_b64decode(normalized).decode("utf-8"))
            if not isinstance(payload, dict):
                raise ValidationError("invalid state", field="state")
            user_id = parse_user_id(payload.get("userId"))
            platform = parse_platform(payload.get("platform"), self._allowed)
        except (binascii.Error, UnicodeDecodeError, ValueError, DomainException) as e:
            logger.warning("Rejected OAuth state: %s", e)
            raise ValidationError("invalid state", field="state") from e
        return OAuthState(user_id=user_id, platform=platform)

    def build_authorization_url(self, user_id: int, platform: MusicPlatform) -> str:
        """Consent URL carrying the user and platform in `state`."""
        state = self.encode_state(user_id, platform)
        return self._client.authorization_url(state)
