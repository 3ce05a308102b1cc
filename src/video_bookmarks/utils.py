"""通用工具方法。"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

import requests

THUMBNAIL_URL_TEMPLATE = "https://img.youtube.com/vi/{video_id}/{quality}.jpg"
EMBED_URL_TEMPLATE = "https://www.youtube.com/embed/{video_id}?autoplay=1"

# watch?v= / embed/ / youtu.be/ 三种形式，取到下一个 & 或 ? 为止
VIDEO_ID_PATTERN = re.compile(r"(?:youtube\.com/(?:watch\?v=|embed/)|youtu\.be/)([^&?]*)")

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/118.0 Safari/537.36"
    ),
    "Referer": "https://www.youtube.com/",
}


def extract_video_id(url: str) -> Optional[str]:
    """从 YouTube 链接中提取视频 ID，无法识别时返回 None。"""
    if not url:
        return None
    match = VIDEO_ID_PATTERN.search(url)
    if not match:
        return None
    return match.group(1) or None


def thumbnail_url(video_id: str, quality: str) -> str:
    return THUMBNAIL_URL_TEMPLATE.format(video_id=video_id, quality=quality)


def embed_url(video_id: str) -> str:
    """返回自动播放的嵌入播放地址。"""
    return EMBED_URL_TEMPLATE.format(video_id=video_id)


def build_session() -> requests.Session:
    """构造带默认Headers的requests会话。"""
    session = requests.Session()
    session.headers.update(_DEFAULT_HEADERS)
    return session


def current_timestamp() -> str:
    """返回当前 UTC 时间的 ISO-8601 字符串，精确到毫秒，例如`2025-01-01T00:00:00.000Z`。"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
