from decouple import Csv, config
from typing import Optional, Tuple


DEFAULT_PIPED_INSTANCES = (
    "https://piped.video",
    "https://piped.projectsegfau.lt",
    "https://piped.lunar.icu",
    "https://piped.privacydev.net",
)

PIPED_INSTANCES: Tuple[str, ...] = (
    config("PIPED_INSTANCES", default=",".join(DEFAULT_PIPED_INSTANCES), cast=Csv(post_process=tuple))
    or DEFAULT_PIPED_INSTANCES
)
BILIBILI_API_URL: str = config("BILIBILI_API_URL", default="https://api.bilibili.com", cast=str)
BILIBILI_REFERER: str = config("BILIBILI_REFERER", default="https://www.bilibili.com", cast=str)
RELAY_URL: Optional[str] = config("RELAY_URL", default="", cast=str) or None
CONNECT_TIMEOUT = config("CONNECT_TIMEOUT", default=10.0, cast=float)
READ_TIMEOUT = config("READ_TIMEOUT", default=20.0, cast=float)
LOG_LEVEL: str = config("LOG_LEVEL", default="INFO", cast=str).upper()
