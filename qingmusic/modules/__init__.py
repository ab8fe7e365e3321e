from .bilibili import BilibiliProvider
from .piped import PipedProvider

__all__ = ["BilibiliProvider", "PipedProvider"]
