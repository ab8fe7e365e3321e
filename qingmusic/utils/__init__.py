from ._api import FailoverFetcher, HttpClient, rewrite_origin
from ._dataclass import PlaybackDetail, Song
from ._errors import (
    AllMirrorsFailedError,
    MissingContentIdError,
    NoMediaError,
    NoPlayableUrlError,
    NoStreamsError,
    QingMusicError,
    TransportError,
    UpstreamError,
    UpstreamShapeError,
    UpstreamStatusError,
)
from ._parsers import absolute_url, coerce_duration, parse_duration, positive_int, select_best, strip_tags
from ._relay import RelayTransport

__all__ = [
    "FailoverFetcher",
    "HttpClient",
    "RelayTransport",
    "rewrite_origin",
    "PlaybackDetail",
    "Song",
    "parse_duration",
    "coerce_duration",
    "select_best",
    "strip_tags",
    "absolute_url",
    "positive_int",
    "QingMusicError",
    "UpstreamError",
    "TransportError",
    "UpstreamStatusError",
    "AllMirrorsFailedError",
    "UpstreamShapeError",
    "MissingContentIdError",
    "NoMediaError",
    "NoStreamsError",
    "NoPlayableUrlError",
]
