import logging
import urllib.parse
from typing import Any, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from qingmusic import config
from qingmusic.utils import (
    FailoverFetcher,
    NoPlayableUrlError,
    NoStreamsError,
    PlaybackDetail,
    Song,
    UpstreamShapeError,
    coerce_duration,
    positive_int,
    select_best,
)
from qingmusic.utils._dataclass import PipedItem, PipedStreams

PLATFORM_LABEL = "YouTube"
PLAYABLE_TYPES = ("stream", "video")
VIDEO_ID_PARAM = "v"

logger = logging.getLogger(__name__)


def _search_items(data: Any) -> List[Any]:
    match data:
        case list():
            return data
        case {"items": list(items)}:
            return items
        case dict():
            return list(data.values())
        case _:
            raise UpstreamShapeError(f"Unexpected search response: {type(data).__name__}")


def _video_id(item: PipedItem) -> str:
    query = urllib.parse.urlsplit(item.url).query
    if ids := urllib.parse.parse_qs(query).get(VIDEO_ID_PARAM):
        return ids[0]
    if item.id:
        return item.id
    # A bare url cannot be looked up by detail(); kept as the last resort.
    logger.debug(f"No video id in {item.url!r}, using the url itself")
    return item.url


def _cover(item: PipedItem) -> str:
    if item.thumbnail:
        return item.thumbnail
    if item.thumbnails and item.thumbnails[0].url:
        return item.thumbnails[0].url
    return ""


class PipedProvider:
    """YouTube through the Piped API, mirrored across several instances."""

    def __init__(
            self,
            hosts: Sequence[str] = config.PIPED_INSTANCES,
            client: Optional[httpx.AsyncClient] = None,
    ):
        if not hosts:
            raise ValueError("At least one Piped instance is required")
        self.fetcher = FailoverFetcher(hosts, client=client)

    async def search(self, keyword: str) -> List[Song]:
        url = f"{self.fetcher.primary}/api/v1/search?q={urllib.parse.quote(keyword)}"
        data = await self.fetcher.fetch_json(url)

        songs = []
        for raw in _search_items(data):
            if not isinstance(raw, dict):
                continue
            try:
                item = PipedItem.model_validate(raw)
            except ValidationError as e:
                logger.debug(f"Skipping malformed search item: {e}")
                continue
            if item.type not in PLAYABLE_TYPES or not item.url or not item.title:
                continue
            songs.append(Song(
                id=_video_id(item),
                name=item.title,
                artist=item.uploader or item.uploaderName or PLATFORM_LABEL,
                cover=_cover(item),
                duration=coerce_duration(item.duration),
            ))
        return songs

    async def detail(self, video_id: str) -> PlaybackDetail:
        url = f"{self.fetcher.primary}/api/v1/streams/{urllib.parse.quote(video_id, safe='')}"
        data = await self.fetcher.fetch_json(url)
        try:
            streams = PipedStreams.model_validate(data)
        except ValidationError as e:
            raise UpstreamShapeError(f"Invalid streams response for {video_id}: {e}") from e

        if not streams.audioStreams:
            raise NoStreamsError()

        best = select_best(streams.audioStreams)
        if not best.url:
            raise NoPlayableUrlError(f"Best audio stream for {video_id} has no url")
        return PlaybackDetail(
            url=best.url,
            br=positive_int(best.bitrate),
            mime=best.mimeType or best.codec or "",
        )
