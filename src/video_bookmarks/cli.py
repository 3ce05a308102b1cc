"""命令行入口：浏览模式 / 编辑模式的交互界面以及单独的子命令。"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from .catalog import CatalogService, ValidationError
from .models import PageView, VideoEntry
from .pagination import PageCursor
from .store import CollectionStore
from .thumbnails import HttpThumbnailProber, ThumbnailResolver
from .utils import extract_video_id

app = typer.Typer(add_completion=False, help="YouTube 视频收藏夹")

VIEW_MODE = "view"
EDIT_MODE = "edit"


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_catalog(storage_path: Optional[Path]) -> CatalogService:
    return CatalogService(CollectionStore(storage_path))


def _render_view_mode(view: PageView, resolver: Optional[ThumbnailResolver]) -> None:
    # 无法解析出 ID 的条目不展示
    entries = [entry for entry in view.items if entry.video_id]
    results = []
    if resolver is not None and entries:
        results = asyncio.run(resolver.resolve_many(entry.video_id for entry in entries))
    for position, entry in enumerate(entries):
        typer.secho(entry.title, bold=True)
        typer.echo(f"  播放: {entry.embed_url}")
        if not results:
            continue
        result = results[position]
        if result.found:
            typer.echo(f"  缩略图: {result.url}")
        else:
            typer.secho(f"  缩略图: {result.alt_text}", fg=typer.colors.YELLOW)


def _render_edit_mode(view: PageView) -> None:
    for offset, entry in enumerate(view.items):
        typer.echo(f"[{view.start + offset}] 标题: {entry.title}")
        typer.echo(f"      URL: {entry.url}")


def _render(view: PageView, mode: str, resolver: Optional[ThumbnailResolver] = None) -> None:
    if mode == VIEW_MODE:
        _render_view_mode(view, resolver)
    else:
        _render_edit_mode(view)
    if view.show_controls:
        prev_hint = "p=上一页" if view.can_prev else "(已是第一页)"
        next_hint = "n=下一页" if view.can_next else "(已是最后一页)"
        typer.echo(f"{view.label}  {prev_hint}  {next_hint}")
    else:
        typer.echo(view.label)


def _confirm_delete(entry: VideoEntry) -> bool:
    return typer.confirm(f"确定要从列表中删除「{entry.title}」吗？", default=False)


def _flow_add(catalog: CatalogService, cursor: PageCursor) -> None:
    title = typer.prompt("请输入标题", default="")
    url = typer.prompt("请输入 YouTube URL", default="")
    try:
        entry = catalog.add(title, url, cursor)
    except ValidationError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        return
    typer.secho(f"已添加：{entry.title}", fg=typer.colors.GREEN)


def _flow_delete(catalog: CatalogService, cursor: PageCursor) -> None:
    selection = typer.prompt("请输入要删除条目前方括号中的序号", default="").strip()
    if not selection.isdigit():
        typer.secho("请输入有效的数字序号。", fg=typer.colors.RED)
        return
    index = int(selection)
    view = catalog.list(cursor)
    if not view.start <= index < view.end:
        typer.secho("序号不在当前页。", fg=typer.colors.RED)
        return
    removed = catalog.delete(index, _confirm_delete, cursor)
    if removed is None:
        typer.echo("已取消删除。")
    else:
        typer.secho(f"已删除：{removed.title}", fg=typer.colors.GREEN)


def _display_menu(mode: str) -> str:
    typer.echo("\n请选择操作：")
    typer.echo("v. 浏览模式    e. 编辑模式")
    typer.echo("n. 下一页      p. 上一页")
    if mode == EDIT_MODE:
        typer.echo("a. 添加视频    d. 删除视频")
    typer.echo("0. 退出程序")
    return typer.prompt("输入选项", default="").strip().lower()


@app.command()
def run(
    storage_path: Optional[Path] = typer.Option(None, "--storage-path", help="自定义存储文件路径"),
    no_thumbnails: bool = typer.Option(False, "--no-thumbnails", help="浏览模式下不探测缩略图"),
) -> None:
    """启动交互式界面，默认进入浏览模式。"""
    catalog = _build_catalog(storage_path)
    resolver = None if no_thumbnails else ThumbnailResolver()
    cursor = PageCursor()
    mode = VIEW_MODE

    while True:
        _render(catalog.list(cursor), mode, resolver)
        choice = _display_menu(mode)
        if choice in ("v", "e"):
            # 切换模式时回到第1页
            mode = VIEW_MODE if choice == "v" else EDIT_MODE
            cursor.reset()
        elif choice == "n":
            cursor.next_page(catalog.count())
        elif choice == "p":
            cursor.prev_page()
        elif choice == "a" and mode == EDIT_MODE:
            _flow_add(catalog, cursor)
        elif choice == "d" and mode == EDIT_MODE:
            _flow_delete(catalog, cursor)
        elif choice == "0":
            typer.echo("已退出。")
            raise typer.Exit(code=0)
        else:
            typer.secho("无效输入，请重新选择。", fg=typer.colors.RED)


@app.command("add")
def add_command(
    title: str = typer.Argument(..., help="视频标题"),
    url: str = typer.Argument(..., help="YouTube 视频链接"),
    storage_path: Optional[Path] = typer.Option(None, "--storage-path", help="自定义存储文件路径"),
) -> None:
    """添加一个视频到列表头部。"""
    catalog = _build_catalog(storage_path)
    try:
        entry = catalog.add(title, url)
    except ValidationError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    typer.secho(f"已添加：{entry.title}", fg=typer.colors.GREEN)


@app.command("list")
def list_command(
    page: int = typer.Option(1, "--page", "-p", help="页码，从1开始"),
    mode: str = typer.Option(EDIT_MODE, "--mode", "-m", help="view 或 edit"),
    thumbnails: bool = typer.Option(False, "--thumbnails", help="浏览模式下探测缩略图"),
    storage_path: Optional[Path] = typer.Option(None, "--storage-path", help="自定义存储文件路径"),
) -> None:
    """列出指定页的视频。"""
    if page < 1:
        raise typer.BadParameter("page必须大于等于1")
    if mode not in (VIEW_MODE, EDIT_MODE):
        raise typer.BadParameter("mode只能是 view 或 edit")
    catalog = _build_catalog(storage_path)
    resolver = ThumbnailResolver() if thumbnails else None
    _render(catalog.list(PageCursor(page=page)), mode, resolver)


@app.command("delete")
def delete_command(
    index: int = typer.Argument(..., help="完整列表中的位置，从0开始"),
    yes: bool = typer.Option(False, "--yes", "-y", help="跳过确认"),
    storage_path: Optional[Path] = typer.Option(None, "--storage-path", help="自定义存储文件路径"),
) -> None:
    """删除指定位置的视频。"""
    catalog = _build_catalog(storage_path)
    confirm = (lambda entry: True) if yes else _confirm_delete
    try:
        removed = catalog.delete(index, confirm)
    except IndexError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    if removed is None:
        typer.echo("已取消删除。")
        return
    typer.secho(f"已删除：{removed.title}", fg=typer.colors.GREEN)


@app.command("thumbnail")
def thumbnail_command(
    url: str = typer.Argument(..., help="YouTube 视频链接"),
    timeout: float = typer.Option(5.0, "--timeout", help="请求超时时间(秒)"),
) -> None:
    """解析视频可用的最高画质缩略图。"""
    video_id = extract_video_id(url.strip())
    if not video_id:
        typer.secho("请输入有效的YouTube URL。", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    resolver = ThumbnailResolver(HttpThumbnailProber(timeout=timeout))
    result = resolver.resolve(video_id)
    typer.echo(f"尝试画质: {', '.join(result.attempted)}")
    if result.found:
        typer.secho(f"{result.quality}: {result.url}", fg=typer.colors.GREEN)
    else:
        typer.secho(result.alt_text, fg=typer.colors.YELLOW)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
