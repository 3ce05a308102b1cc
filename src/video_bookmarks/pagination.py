"""分页计算。"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .models import PageView

ITEMS_PER_PAGE = 10


def total_pages_for(total_items: int, page_size: int = ITEMS_PER_PAGE) -> int:
    if page_size <= 0:
        raise ValueError("page_size必须大于0")
    return math.ceil(total_items / page_size) if total_items > 0 else 0


def paginate(total_items: int, page_size: int = ITEMS_PER_PAGE, current_page: int = 1) -> PageView:
    """根据条目总数、每页大小和当前页计算页面边界与翻页状态。"""
    if current_page < 1:
        raise ValueError("current_page必须大于等于1")
    total_pages = total_pages_for(total_items, page_size)
    start = (current_page - 1) * page_size
    return PageView(
        current_page=current_page,
        total_pages=total_pages,
        total_items=total_items,
        start=start,
        end=min(start + page_size, total_items),
        can_prev=current_page > 1,
        can_next=current_page < total_pages,
    )


@dataclass(slots=True)
class PageCursor:
    """单个视图持有的当前页状态，在各次调用之间显式传递。"""

    page: int = 1
    page_size: int = ITEMS_PER_PAGE

    def view(self, total_items: int) -> PageView:
        return paginate(total_items, self.page_size, self.page)

    def next_page(self, total_items: int) -> bool:
        """翻到下一页；已在最后一页时不做任何改动并返回 False。"""
        if self.page < total_pages_for(total_items, self.page_size):
            self.page += 1
            return True
        return False

    def prev_page(self) -> bool:
        if self.page > 1:
            self.page -= 1
            return True
        return False

    def reset(self) -> None:
        self.page = 1

    def clamp(self, total_items: int) -> None:
        """条目数变化后修正页码：超出末页时退到末页，列表为空或页码小于1时回到第1页。"""
        total_pages = total_pages_for(total_items, self.page_size)
        if total_pages == 0 or self.page < 1:
            self.page = 1
        elif self.page > total_pages:
            self.page = total_pages
