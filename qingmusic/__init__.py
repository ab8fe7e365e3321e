import logging
from typing import List, Optional, Sequence

import httpx

from qingmusic import config
from qingmusic.modules import BilibiliProvider, PipedProvider
from qingmusic.utils import HttpClient, PlaybackDetail, Song

LOGGER = logging.getLogger("QingMusic")


def setup_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=level or config.LOG_LEVEL,
        format="[%(asctime)s - %(levelname)s] - %(name)s - %(filename)s:%(lineno)d - %(message)s",
        datefmt="%d-%b-%y %H:%M:%S",
        handlers=[logging.StreamHandler()],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


class QingMusic:
    """
    The four lookups a QingMusic plugin exposes.

    Without ``client`` or ``transport`` the shared HttpClient is used.
    A ``transport`` (e.g. RelayTransport or a mock) gets its own client,
    closed by ``aclose()``.
    """

    def __init__(
            self,
            piped_instances: Optional[Sequence[str]] = None,
            bilibili_api_url: Optional[str] = None,
            client: Optional[httpx.AsyncClient] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._owns_client = client is None and transport is not None
        if self._owns_client:
            client = httpx.AsyncClient(
                transport=transport,
                timeout=httpx.Timeout(config.READ_TIMEOUT, connect=config.CONNECT_TIMEOUT),
                follow_redirects=True,
            )
        self._client = client
        self.youtube = PipedProvider(piped_instances or config.PIPED_INSTANCES, client=client)
        self.bilibili = BilibiliProvider(bilibili_api_url or config.BILIBILI_API_URL, client=client)

    async def yt_search_music(self, keyword: str) -> List[Song]:
        return await self.youtube.search(keyword)

    async def yt_music_detail(self, video_id: str) -> PlaybackDetail:
        return await self.youtube.detail(video_id)

    async def bili_search_music(self, keyword: str) -> List[Song]:
        return await self.bilibili.search(keyword)

    async def bili_music_detail(self, bvid: str) -> PlaybackDetail:
        return await self.bilibili.detail(bvid)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "QingMusic":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


_default: Optional[QingMusic] = None


def get_default() -> QingMusic:
    global _default
    if _default is None:
        _default = QingMusic()
    return _default


async def yt_search_music(keyword: str) -> List[Song]:
    return await get_default().yt_search_music(keyword)


async def yt_music_detail(video_id: str) -> PlaybackDetail:
    return await get_default().yt_music_detail(video_id)


async def bili_search_music(keyword: str) -> List[Song]:
    return await get_default().bili_search_music(keyword)


async def bili_music_detail(bvid: str) -> PlaybackDetail:
    return await get_default().bili_music_detail(bvid)


async def close() -> None:
    await HttpClient.close_client()


__all__ = [
    "QingMusic",
    "Song",
    "PlaybackDetail",
    "setup_logging",
    "yt_search_music",
    "yt_music_detail",
    "bili_search_music",
    "bili_music_detail",
    "close",
]
