import asyncio
from typing import List

import pytest
import requests
import responses

from video_bookmarks.thumbnails import (
    NOT_FOUND_ALT_TEXT,
    THUMBNAIL_QUALITIES,
    CascadeState,
    HttpThumbnailProber,
    ThumbnailCascade,
    ThumbnailResolver,
    iter_thumbnail_candidates,
)
from video_bookmarks.utils import thumbnail_url


class ScriptedProber:
    """按预设结果依次返回，并记录被请求的地址。"""

    def __init__(self, outcomes: List[bool]) -> None:
        self.outcomes = list(outcomes)
        self.calls: List[str] = []

    def __call__(self, url: str) -> bool:
        self.calls.append(url)
        return self.outcomes.pop(0)


def test_candidates_follow_quality_order() -> None:
    candidates = list(iter_thumbnail_candidates("abc"))
    assert [q for q, _ in candidates] == list(THUMBNAIL_QUALITIES)
    assert candidates[0][1] == "https://img.youtube.com/vi/abc/maxresdefault.jpg"


def test_resolve_stops_at_first_success() -> None:
    prober = ScriptedProber([False, False, True, True])
    result = ThumbnailResolver(prober).resolve("abc")

    assert prober.calls == [thumbnail_url("abc", q) for q in THUMBNAIL_QUALITIES[:3]]
    assert result.found
    assert result.quality == "mqdefault"
    assert result.attempted == ["maxresdefault", "hqdefault", "mqdefault"]


def test_resolve_exhausted_never_repeats() -> None:
    prober = ScriptedProber([False] * 4)
    result = ThumbnailResolver(prober).resolve("abc", alt_text="标题")

    assert len(prober.calls) == 4
    assert len(set(prober.calls)) == 4
    assert not result.found
    assert result.url is None
    assert result.alt_text == NOT_FOUND_ALT_TEXT


def test_cascade_ignores_callbacks_after_terminal_state() -> None:
    cascade = ThumbnailCascade("abc")
    assert cascade.state is CascadeState.PROBING
    assert cascade.quality == "maxresdefault"
    assert cascade.handle_load() is CascadeState.RESOLVED
    assert cascade.handle_error() is CascadeState.RESOLVED
    assert cascade.result().quality == "maxresdefault"


def test_cascade_detached_ignores_callbacks() -> None:
    cascade = ThumbnailCascade("abc")
    cascade.detach()
    cascade.handle_error()
    assert cascade.state is CascadeState.PROBING
    assert cascade.attempted == ["maxresdefault"]


def test_cascades_are_independent() -> None:
    first = ThumbnailCascade("aaa")
    second = ThumbnailCascade("bbb")
    first.handle_error()
    first.handle_error()
    assert first.quality == "mqdefault"
    assert second.quality == "maxresdefault"


def test_resolve_many_runs_concurrently() -> None:
    available = {thumbnail_url("aaa", "hqdefault"), thumbnail_url("bbb", "maxresdefault")}

    async def probe(url: str) -> bool:
        await asyncio.sleep(0)
        return url in available

    resolver = ThumbnailResolver(async_prober=probe)
    results = asyncio.run(resolver.resolve_many(["aaa", "bbb", "ccc"]))

    assert [r.quality for r in results] == ["hqdefault", "maxresdefault", None]
    assert results[2].attempted == list(THUMBNAIL_QUALITIES)


def test_resolve_async_stops_when_detached() -> None:
    resolver = ThumbnailResolver(prober=lambda url: False)
    cascade = resolver.cascade("abc")

    async def probe(url: str) -> bool:
        cascade.detach()
        return False

    resolver.async_prober = probe
    result = asyncio.run(resolver.resolve_async("abc", cascade=cascade))
    assert cascade.attempted == ["maxresdefault"]
    assert not result.found


@responses.activate
def test_http_prober_falls_back_on_404() -> None:
    responses.add(responses.HEAD, thumbnail_url("abc", "maxresdefault"), status=404)
    responses.add(responses.HEAD, thumbnail_url("abc", "hqdefault"), status=200)

    result = ThumbnailResolver(HttpThumbnailProber()).resolve("abc")

    assert result.quality == "hqdefault"
    assert len(responses.calls) == 2


@responses.activate
def test_http_prober_treats_request_errors_as_failure() -> None:
    responses.add(
        responses.HEAD,
        thumbnail_url("abc", "maxresdefault"),
        body=requests.ConnectionError("boom"),
    )
    assert HttpThumbnailProber()(thumbnail_url("abc", "maxresdefault")) is False


@pytest.mark.parametrize("status", [200, 404])
@responses.activate
def test_http_prober_async(status: int) -> None:
    url = thumbnail_url("abc", "default")
    responses.add(responses.HEAD, url, status=status)
    assert asyncio.run(HttpThumbnailProber().probe_async(url)) is (status == 200)


def test_http_prober_uses_one_session_per_thread() -> None:
    prober = HttpThumbnailProber()

    async def sessions():
        return await asyncio.gather(asyncio.to_thread(lambda: prober.session), asyncio.to_thread(lambda: prober.session))

    main_session = prober.session
    assert prober.session is main_session
    worker_sessions = asyncio.run(sessions())
    assert all(session is not main_session for session in worker_sessions)


def test_http_prober_keeps_explicit_session() -> None:
    session = requests.Session()
    prober = HttpThumbnailProber(session=session)

    async def worker_session():
        return await asyncio.to_thread(lambda: prober.session)

    assert asyncio.run(worker_session()) is session
