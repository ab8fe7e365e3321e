import logging
import urllib.parse
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from qingmusic import config
from qingmusic.utils import (
    FailoverFetcher,
    MissingContentIdError,
    NoPlayableUrlError,
    PlaybackDetail,
    Song,
    absolute_url,
    coerce_duration,
    positive_int,
    strip_tags,
)
from qingmusic.utils._dataclass import BiliAudio, BiliEnvelope, BiliPlayUrl, BiliSearchItem, BiliView

PLATFORM_LABEL = "Bilibili"
SEARCH_PATH = "/x/web-interface/search/type"
VIEW_PATH = "/x/web-interface/view"
PLAYURL_PATH = "/x/player/playurl"

# fnval=16 asks for the DASH manifest, fourk=1 unlocks the top quality tiers
DASH_FNVAL = 16
FOURK = 1

M = TypeVar("M", bound=BaseModel)

logger = logging.getLogger(__name__)


def _parse(model: Type[M], data: Any) -> Optional[M]:
    if not isinstance(data, dict):
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Ignoring malformed {model.__name__}: {e}")
        return None


def _first(items: Optional[List[BiliAudio]]) -> Optional[BiliAudio]:
    return items[0] if items else None


class BilibiliProvider:
    """Bilibili web API; one host, every call carries the site Referer."""

    def __init__(
            self,
            api_url: str = config.BILIBILI_API_URL,
            referer: str = config.BILIBILI_REFERER,
            client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.referer = referer
        self.fetcher = FailoverFetcher(client=client)

    def _headers(self) -> Dict[str, str]:
        return {"Referer": self.referer}

    async def _get_data(self, path: str, **params: Any) -> Optional[dict]:
        url = f"{self.api_url}{path}?{urllib.parse.urlencode(params)}"
        payload = await self.fetcher.fetch_json(url, headers=self._headers())
        envelope = _parse(BiliEnvelope, payload)
        if envelope is None:
            return None
        if envelope.code:
            logger.warning(f"Bilibili {path} returned code {envelope.code}: {envelope.message}")
        return envelope.data

    async def search(self, keyword: str) -> List[Song]:
        data = await self._get_data(SEARCH_PATH, search_type="video", keyword=keyword)
        result = (data or {}).get("result")
        if not isinstance(result, list):
            return []

        songs = []
        for raw in result:
            item = _parse(BiliSearchItem, raw)
            if item is None or not item.bvid:
                continue
            songs.append(Song(
                id=item.bvid,
                name=strip_tags(item.title or "") or item.bvid,
                artist=item.author or PLATFORM_LABEL,
                cover=absolute_url(item.pic),
                duration=coerce_duration(item.duration),
            ))
        return songs

    async def fetch_cid(self, bvid: str) -> int:
        """Resolve the first content part of a video; playurl needs it."""
        view = _parse(BiliView, await self._get_data(VIEW_PATH, bvid=bvid))
        if view is not None:
            if view.cid:
                return view.cid
            if view.pages and view.pages[0].cid:
                return view.pages[0].cid
        raise MissingContentIdError(bvid)

    async def fetch_playback(self, bvid: str, cid: int) -> PlaybackDetail:
        data = await self._get_data(PLAYURL_PATH, bvid=bvid, cid=cid, fnval=DASH_FNVAL, fourk=FOURK)
        play = _parse(BiliPlayUrl, data) or BiliPlayUrl()

        audio = _first(play.dash.audio if play.dash else None) or _first(play.durl)
        url = audio and (audio.baseUrl or audio.base_url or audio.url)
        if not url:
            raise NoPlayableUrlError(f"No audio url from playurl for {bvid}")
        return PlaybackDetail(
            url=url,
            br=positive_int(audio.bandwidth),
            mime=audio.mimeType or "",
        )

    async def detail(self, bvid: str) -> PlaybackDetail:
        cid = await self.fetch_cid(bvid)
        return await self.fetch_playback(bvid, cid)
