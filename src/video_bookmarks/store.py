"""收藏列表的持久化存储。"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from .models import VideoEntry

logger = logging.getLogger(__name__)

APP_DIR_NAME = "video_bookmarks"
STORAGE_KEY = "youtubeVideos"


class StorageReadError(RuntimeError):
    """存储内容无法读取或已损坏。"""


class StorageWriteError(RuntimeError):
    """写入存储失败。"""


def _resolve_storage_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def default_storage_path(key: str = STORAGE_KEY) -> Path:
    return _resolve_storage_dir() / f"{key}.json"


class CollectionStore:
    """以单个键对应的 JSON 文件保存完整的视频列表（最新的在前）。

    ``load`` 与 ``save`` 都不会向调用方抛出存储异常：读取失败时返回空列表，
    写入失败时保留原有文件内容，两种情况都只记录日志。
    """

    def __init__(self, storage_path: Optional[Path] = None, key: str = STORAGE_KEY) -> None:
        self.key = key
        self.storage_path = storage_path or default_storage_path(key)

    def load(self) -> List[VideoEntry]:
        try:
            raw = self._read_raw()
        except StorageReadError as exc:
            logger.error("读取存储失败，按空列表处理: %s", exc)
            return []
        if raw is None:
            return []
        entries: List[VideoEntry] = []
        for position, item in enumerate(raw):
            try:
                entries.append(VideoEntry.from_dict(item))
            except ValueError as exc:
                logger.warning("跳过第 %d 条异常记录: %s", position, exc)
        return entries

    def save(self, entries: Iterable[VideoEntry]) -> None:
        data = [entry.to_dict() for entry in entries]
        try:
            self._write_raw(data)
        except StorageWriteError as exc:
            logger.error("写入存储失败，原有数据保持不变: %s", exc)

    def _read_raw(self) -> Optional[list]:
        if not self.storage_path.exists():
            return None
        try:
            content = self.storage_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageReadError(f"无法读取 {self.storage_path}: {exc}") from exc
        if not content.strip():
            return None
        try:
            raw = json.loads(content)
        except json.JSONDecodeError as exc:
            raise StorageReadError(f"{self.storage_path} 不是有效的JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise StorageReadError(f"{self.storage_path} 的内容不是数组")
        return raw

    def _write_raw(self, data: list) -> None:
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        tmp_name: Optional[str] = None
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.storage_path.name}.", suffix=".tmp", dir=self.storage_path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.storage_path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteError(f"无法写入 {self.storage_path}: {exc}") from exc
