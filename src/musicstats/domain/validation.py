"""Boundary validators for user ids, ranks and platform names.

All of them raise ValidationError, which the API maps to 400.
"""

import re
from collections.abc import Iterable
from typing import Any

from musicstats.domain.entities import MAX_RANK, MIN_RANK, MusicPlatform
from musicstats.domain.exceptions import ValidationError

DEFAULT_ALLOWED_PLATFORMS = (MusicPlatform.SPOTIFY.value,)

# ASCII only: str.isdigit() also accepts superscripts that int() rejects
_USER_ID_PATTERN = re.compile(r"-?[0-9]+")


def parse_user_id(value: Any) -> int:
    """Accept an int or a string of digits; return the user id as int."""
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool):
        raise ValidationError("userId must be an integer", field="userId")
    if isinstance(value, int):
        user_id = value
    elif isinstance(value, str) and _USER_ID_PATTERN.fullmatch(value.strip()):
        user_id = int(value.strip())
    else:
        raise ValidationError("userId must be an integer", field="userId")
    if user_id < 0:
        raise ValidationError("userId must not be negative", field="userId")
    return user_id


def parse_rank(value: Any) -> int:
    """Accept an int or digit string within MIN_RANK..MAX_RANK."""
    if isinstance(value, bool):
        raise ValidationError("ranking must be an integer", field="ranking")
    try:
        rank = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("ranking must be an integer", field="ranking") from e
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError("ranking must be an integer", field="ranking")
    if not MIN_RANK <= rank <= MAX_RANK:
        raise ValidationError(
            f"ranking must be between {MIN_RANK} and {MAX_RANK}", field="ranking"
        )
    return rank


def parse_platform(
    value: Any, allowed: Iterable[str] = DEFAULT_ALLOWED_PLATFORMS
) -> MusicPlatform:
    """Case-insensitive check against the platform allow-list."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("music_platform is required", field="music_platform")
    normalized = value.strip().lower()
    known = {platform.value for platform in MusicPlatform}
    if normalized not in known or normalized not in {p.lower() for p in allowed}:
        raise ValidationError(
            f"music_platform '{value}' is not supported", field="music_platform"
        )
    return MusicPlatform(normalized)
