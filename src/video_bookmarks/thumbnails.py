"""缩略图解析：按画质从高到低逐个尝试，直到某个地址可用或全部失败。

每张图片对应一个独立的 :class:`ThumbnailCascade`，彼此之间不共享状态，
因此多张图片可以在同一个事件循环中并发探测。
"""
from __future__ import annotations

import asyncio
import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import requests

from .utils import build_session, thumbnail_url

logger = logging.getLogger(__name__)

THUMBNAIL_QUALITIES: Tuple[str, ...] = ("maxresdefault", "hqdefault", "mqdefault", "default")
NOT_FOUND_ALT_TEXT = "未找到缩略图"

Prober = Callable[[str], bool]
AsyncProber = Callable[[str], Awaitable[bool]]


def iter_thumbnail_candidates(
    video_id: str, qualities: Sequence[str] = THUMBNAIL_QUALITIES
) -> Iterator[Tuple[str, str]]:
    """按顺序惰性生成 ``(画质, 地址)``。"""
    for quality in qualities:
        yield quality, thumbnail_url(video_id, quality)


class CascadeState(enum.Enum):
    PROBING = "probing"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"


@dataclass(slots=True)
class ThumbnailResult:
    """一次解析的最终结果。"""

    video_id: str
    url: Optional[str]
    quality: Optional[str]
    attempted: List[str] = field(default_factory=list)
    alt_text: str = ""

    @property
    def found(self) -> bool:
        return self.url is not None


class ThumbnailCascade:
    """单张图片的加载状态机。

    ``handle_load`` / ``handle_error`` 对应图片加载成功/失败的回调。
    调用 ``detach`` 之后（例如视图已被销毁）到达的回调一律忽略。
    """

    def __init__(
        self,
        video_id: str,
        qualities: Sequence[str] = THUMBNAIL_QUALITIES,
        alt_text: str = "",
    ) -> None:
        self.video_id = video_id
        self.alt_text = alt_text
        self.state = CascadeState.PROBING
        self.quality_index = -1
        self.quality: Optional[str] = None
        self.url: Optional[str] = None
        self.attempted: List[str] = []
        self.detached = False
        self._candidates = iter_thumbnail_candidates(video_id, qualities)
        self._advance()

    @property
    def done(self) -> bool:
        return self.state is not CascadeState.PROBING

    def _advance(self) -> None:
        candidate = next(self._candidates, None)
        if candidate is None:
            self.state = CascadeState.EXHAUSTED
            self.quality = None
            self.url = None
            self.alt_text = NOT_FOUND_ALT_TEXT
            return
        self.quality_index += 1
        self.quality, self.url = candidate
        self.attempted.append(self.quality)

    def handle_load(self) -> CascadeState:
        if self.detached or self.done:
            return self.state
        self.state = CascadeState.RESOLVED
        return self.state

    def handle_error(self) -> CascadeState:
        if self.detached or self.done:
            return self.state
        logger.debug("缩略图 %s 的 %s 画质不可用", self.video_id, self.quality)
        self._advance()
        return self.state

    def detach(self) -> None:
        self.detached = True

    def result(self) -> ThumbnailResult:
        resolved = self.state is CascadeState.RESOLVED
        return ThumbnailResult(
            video_id=self.video_id,
            url=self.url if resolved else None,
            quality=self.quality if resolved else None,
            attempted=list(self.attempted),
            alt_text=self.alt_text,
        )


class HttpThumbnailProber:
    """用 HEAD 请求判断缩略图地址是否存在。

    未传入 ``session`` 时，每个线程各自持有一个会话，并发探测之间不共享连接池。
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 5.0) -> None:
        self._shared_session = session
        self._local = threading.local()
        self.timeout = timeout

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = build_session()
            self._local.session = session
        return session

    def __call__(self, url: str) -> bool:
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            logger.debug("请求 %s 失败: %s", url, exc)
            return False
        return response.status_code == 200

    async def probe_async(self, url: str) -> bool:
        return await asyncio.to_thread(self, url)


class ThumbnailResolver:
    """驱动 :class:`ThumbnailCascade` 完成探测。"""

    def __init__(
        self,
        prober: Optional[Prober] = None,
        async_prober: Optional[AsyncProber] = None,
        qualities: Sequence[str] = THUMBNAIL_QUALITIES,
    ) -> None:
        if prober is None and async_prober is None:
            http_prober = HttpThumbnailProber()
            prober = http_prober
            async_prober = http_prober.probe_async
        self.prober = prober
        self.async_prober = async_prober
        self.qualities = tuple(qualities)

    def cascade(self, video_id: str, alt_text: str = "") -> ThumbnailCascade:
        return ThumbnailCascade(video_id, self.qualities, alt_text=alt_text)

    def resolve(self, video_id: str, alt_text: str = "") -> ThumbnailResult:
        if self.prober is None:
            raise RuntimeError("未配置同步探测器")
        cascade = self.cascade(video_id, alt_text)
        while not cascade.done:
            if self.prober(cascade.url):
                cascade.handle_load()
            else:
                cascade.handle_error()
        return cascade.result()

    async def resolve_async(
        self, video_id: str, alt_text: str = "", cascade: Optional[ThumbnailCascade] = None
    ) -> ThumbnailResult:
        """异步版本：尝试、等待结果、再前进；级联被 detach 后停止探测。"""
        cascade = cascade or self.cascade(video_id, alt_text)
        while not cascade.done and not cascade.detached:
            if await self._probe_async(cascade.url):
                cascade.handle_load()
            else:
                cascade.handle_error()
        return cascade.result()

    async def resolve_many(self, video_ids: Iterable[str]) -> List[ThumbnailResult]:
        return list(await asyncio.gather(*(self.resolve_async(video_id) for video_id in video_ids)))

    async def _probe_async(self, url: str) -> bool:
        if self.async_prober is not None:
            return await self.async_prober(url)
        return await asyncio.to_thread(self.prober, url)
