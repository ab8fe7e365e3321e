import html
import re
from typing import Any, Callable, Optional, Sequence, TypeVar

from ._errors import NoStreamsError

T = TypeVar("T")

TAG_PATTERN = re.compile(r"<[^>]+>")


def parse_duration(text: Any) -> Optional[int]:
    """
    Convert "SS", "MM:SS", "H:MM:SS" (any number of groups) into seconds.

    Returns None for non-strings or when any group is not an integer.
    """
    if not isinstance(text, str):
        return None

    seconds = 0
    for group in text.split(":"):
        # plain ASCII digits only
        if not (group.isascii() and group.isdigit()):
            return None
        seconds = seconds * 60 + int(group)
    return seconds


def coerce_duration(value: Any) -> Optional[int]:
    """Accept a formatted string or a number of seconds from an upstream field."""
    if isinstance(value, str):
        return parse_duration(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if value >= 0 else None


def _bitrate_of(candidate: Any) -> int:
    if isinstance(candidate, dict):
        value = candidate.get("bitrate")
    else:
        value = getattr(candidate, "bitrate", None)
    return value if isinstance(value, (int, float)) else 0


def select_best(candidates: Sequence[T], key: Callable[[T], int] = _bitrate_of) -> T:
    """Pick the highest-bitrate rendition; the earliest one wins a tie."""
    if not candidates:
        raise NoStreamsError()
    # max() keeps the first maximal element
    return max(candidates, key=key)


def strip_tags(text: str) -> str:
    return html.unescape(TAG_PATTERN.sub("", text))


def absolute_url(url: Optional[str], scheme: str = "https") -> str:
    if not url:
        return ""
    if url.startswith("//"):
        return f"{scheme}:{url}"
    return url


def positive_int(value: Optional[int]) -> Optional[int]:
    return value if value and value > 0 else None
