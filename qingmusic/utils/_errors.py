from typing import Optional, Sequence


class QingMusicError(Exception):
    """Base class for every resolution failure."""


class UpstreamError(QingMusicError):
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class TransportError(UpstreamError):
    """Network, DNS or timeout failure before a response arrived."""


class UpstreamStatusError(UpstreamError):
    def __init__(self, status_code: int, url: Optional[str] = None):
        super().__init__(f"HTTP {status_code}", url=url)
        self.status_code = status_code


class AllMirrorsFailedError(UpstreamError):
    """Every host of a mirror list failed; ``last_error`` is the final cause."""

    def __init__(self, url: str, attempted: Sequence[str], last_error: Optional[BaseException] = None):
        super().__init__(f"All instances failed for: {url}", url=url)
        self.attempted = tuple(attempted)
        self.last_error = last_error


class UpstreamShapeError(QingMusicError):
    """JSON arrived but lacks the fields the resolution depends on."""


class MissingContentIdError(UpstreamShapeError):
    def __init__(self, bvid: str):
        super().__init__(f"Cannot get cid for {bvid}")
        self.bvid = bvid


class NoMediaError(QingMusicError):
    pass


class NoStreamsError(NoMediaError):
    def __init__(self, message: str = "No audio streams"):
        super().__init__(message)


class NoPlayableUrlError(NoMediaError):
    def __init__(self, message: str = "No audio url from playurl"):
        super().__init__(message)
