from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from typing import Any, List, Optional, Union


class Song(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    artist: str
    cover: str = ""
    duration: Optional[int] = Field(default=None, ge=0)


class PlaybackDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1)
    br: Optional[int] = Field(default=None, gt=0)
    mime: str = ""


class UpstreamModel(BaseModel):
    """Upstream payload; a field of the wrong type falls back to its default."""

    @field_validator("*", mode="wrap")
    @classmethod
    def _lenient(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            pass
        # numeric ids and labels are accepted as strings
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return handler(str(value))
            except ValidationError:
                pass
        return cls.model_fields[info.field_name].get_default(call_default_factory=True)


# --- Piped ---

class PipedThumbnail(UpstreamModel):
    url: Optional[str] = None


class PipedItem(UpstreamModel):
    type: Optional[str] = None
    url: Optional[str] = None
    title: Optional[str] = None
    id: Optional[str] = None
    uploader: Optional[str] = None
    uploaderName: Optional[str] = None
    thumbnail: Optional[str] = None
    thumbnails: Optional[List[PipedThumbnail]] = None
    duration: Union[int, float, str, None] = None


class PipedAudioStream(UpstreamModel):
    url: Optional[str] = None
    bitrate: Optional[int] = None
    mimeType: Optional[str] = None
    codec: Optional[str] = None


class PipedStreams(UpstreamModel):
    audioStreams: Optional[List[PipedAudioStream]] = None


# --- Bilibili ---

class BiliEnvelope(UpstreamModel):
    code: Optional[int] = None
    message: Optional[str] = None
    data: Optional[dict] = None


class BiliSearchItem(UpstreamModel):
    bvid: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    pic: Optional[str] = None
    duration: Union[int, float, str, None] = None


class BiliPage(UpstreamModel):
    cid: Optional[int] = None


class BiliView(UpstreamModel):
    cid: Optional[int] = None
    pages: Optional[List[BiliPage]] = None


class BiliAudio(UpstreamModel):
    baseUrl: Optional[str] = None
    base_url: Optional[str] = None
    url: Optional[str] = None
    bandwidth: Optional[int] = None
    mimeType: Optional[str] = None


class BiliDash(UpstreamModel):
    audio: Optional[List[BiliAudio]] = None


class BiliPlayUrl(UpstreamModel):
    dash: Optional[BiliDash] = None
    durl: Optional[List[BiliAudio]] = None
