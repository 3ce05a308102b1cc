"""数据模型定义。"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .utils import embed_url as build_embed_url
from .utils import extract_video_id


@dataclass(frozen=True, slots=True)
class VideoEntry:
    """收藏列表中的视频条目。"""

    title: str
    url: str
    added_at: str

    @property
    def video_id(self) -> Optional[str]:
        return extract_video_id(self.url)

    @property
    def embed_url(self) -> Optional[str]:
        video_id = self.video_id
        return build_embed_url(video_id) if video_id else None

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url, "addedAt": self.added_at}

    @classmethod
    def from_dict(cls, data: dict) -> "VideoEntry":
        """从存储记录构造条目；缺少 title 或 url 时抛出 ValueError。"""
        if not isinstance(data, dict):
            raise ValueError(f"记录不是对象: {data!r}")
        title = data.get("title")
        url = data.get("url")
        if not isinstance(title, str) or not title:
            raise ValueError("记录缺少 title 字段")
        if not isinstance(url, str) or not url:
            raise ValueError("记录缺少 url 字段")
        return cls(title=title, url=url, added_at=str(data.get("addedAt") or ""))


@dataclass(slots=True)
class PageView:
    """某一页的切片及分页信息，每次渲染时重新计算。"""

    current_page: int
    total_pages: int
    total_items: int
    start: int
    end: int
    can_prev: bool
    can_next: bool
    items: list[VideoEntry] = field(default_factory=list)

    @property
    def show_controls(self) -> bool:
        # 没有条目时翻页按钮整体隐藏，而不仅是禁用
        return self.total_items > 0

    @property
    def label(self) -> str:
        if self.total_items == 0:
            return "0 条"
        return f"{self.current_page}/{self.total_pages} 页"
