"""收藏列表的增删查。"""
from __future__ import annotations

import enum
import logging
from dataclasses import replace
from typing import Callable, List, Optional

from .models import PageView, VideoEntry
from .pagination import PageCursor
from .store import CollectionStore
from .utils import current_timestamp, extract_video_id

logger = logging.getLogger(__name__)


class ValidationErrorKind(enum.Enum):
    EMPTY_FIELD = "empty_field"
    INVALID_URL = "invalid_url"


_VALIDATION_MESSAGES = {
    ValidationErrorKind.EMPTY_FIELD: "请同时输入标题和URL。",
    ValidationErrorKind.INVALID_URL: "请输入有效的YouTube URL。",
}


class ValidationError(ValueError):
    """添加条目时输入校验失败。"""

    def __init__(self, kind: ValidationErrorKind) -> None:
        super().__init__(_VALIDATION_MESSAGES[kind])
        self.kind = kind


class CatalogService:
    """所有修改都走「读取→修改→整体写回」，不在调用之间缓存列表。"""

    def __init__(self, store: Optional[CollectionStore] = None) -> None:
        self.store = store or CollectionStore()

    def count(self) -> int:
        return len(self.store.load())

    def add(self, title: str, url: str, cursor: Optional[PageCursor] = None) -> VideoEntry:
        """添加新条目到列表头部并回到第1页。"""
        title = (title or "").strip()
        url = (url or "").strip()
        if not title or not url:
            raise ValidationError(ValidationErrorKind.EMPTY_FIELD)
        if not extract_video_id(url):
            raise ValidationError(ValidationErrorKind.INVALID_URL)

        entries = self.store.load()
        entry = VideoEntry(title=title, url=url, added_at=current_timestamp())
        entries.insert(0, entry)
        self.store.save(entries)
        logger.info("已添加视频: %s", title)

        if cursor is not None:
            cursor.reset()
        return entry

    def delete(
        self,
        index: int,
        confirm: Callable[[VideoEntry], bool],
        cursor: Optional[PageCursor] = None,
    ) -> Optional[VideoEntry]:
        """删除完整列表中绝对位置为 ``index`` 的条目。

        ``confirm`` 由视图层提供，返回 False 时不做任何修改并返回 None。
        删除后若当前页超出新的总页数，则退到最后一页；列表为空时回到第1页。
        """
        entries = self.store.load()
        if index < 0 or index >= len(entries):
            raise IndexError(f"序号超出范围: {index}")
        if not confirm(entries[index]):
            return None
        removed = entries.pop(index)
        self.store.save(entries)
        logger.info("已删除视频: %s", removed.title)

        if cursor is not None:
            cursor.clamp(len(entries))
        return removed

    def list(self, cursor: Optional[PageCursor] = None) -> PageView:
        """返回当前页的条目；外部修改导致页码失效时先修正游标。"""
        cursor = cursor or PageCursor()
        entries: List[VideoEntry] = self.store.load()
        cursor.clamp(len(entries))
        view = cursor.view(len(entries))
        return replace(view, items=entries[view.start:view.end])
