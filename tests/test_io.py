from __future__ import annotations

import logging
from pathlib import Path

import aiohttp
import pytest

from crunchy_cli import io, log
from crunchy_cli.errors import CommandError

from .fakes import FakeResponse, FakeSession, messages


@pytest.mark.asyncio
async def test_fetch_retries_server_errors() -> None:
    session = FakeSession(
        FakeResponse(status=503),
        aiohttp.ClientConnectionError("reset"),
        FakeResponse(body=b"ok", headers={"X-Test": "1"}),
    )

    content, headers = await io.fetch_url_content(session, "https://example.com/a", 5, 0, log.HTTP)

    assert content == b"ok"
    assert headers["X-Test"] == "1"
    assert len(session.requested) == 3


@pytest.mark.asyncio
async def test_fetch_does_not_retry_client_errors() -> None:
    session = FakeSession(FakeResponse(status=403), FakeResponse(body=b"never"))

    content, headers = await io.fetch_url_content(session, "https://example.com/a", 5, 0, log.HTTP)

    assert (content, headers) == (None, None)
    assert len(session.requested) == 1


@pytest.mark.asyncio
async def test_fetch_not_found_returns_headers() -> None:
    session = FakeSession(FakeResponse(status=404, headers={"Server": "x"}))

    content, headers = await io.fetch_url_content(session, "https://example.com/a", 5, 0, log.HTTP)

    assert content is None
    assert headers == {"Server": "x"}


@pytest.mark.asyncio
async def test_fetch_json() -> None:
    session = FakeSession(FakeResponse(body=b'{"tag_name": "v3.1.0"}'))

    assert await io.fetch_json(session, "https://example.com/r", log.UPDATE) == {"tag_name": "v3.1.0"}


@pytest.mark.asyncio
async def test_fetch_json_rejects_invalid_body() -> None:
    session = FakeSession(FakeResponse(body=b"<html>"))

    with pytest.raises(CommandError, match="not valid json"):
        await io.fetch_json(session, "https://example.com/r", log.UPDATE)


@pytest.mark.asyncio
async def test_download_to_file_streams_body(tmp_path: Path) -> None:
    body = bytes(range(256)) * 1024
    session = FakeSession(FakeResponse(status=500), FakeResponse(body=body))
    target = tmp_path / "nested" / "video.ts"

    written = await io.download_to_file(session, "https://cdn.example.com/v.ts", target, log.DOWNLOAD, retry_delay=0)

    assert written == len(body)
    assert target.read_bytes() == body


@pytest.mark.asyncio
async def test_download_to_file_gives_up(tmp_path: Path) -> None:
    session = FakeSession(*(TimeoutError() for _ in range(3)))

    with pytest.raises(CommandError, match="after 3 attempts"):
        await io.download_to_file(
            session, "https://cdn.example.com/v.ts", tmp_path / "v.ts", log.DOWNLOAD, retries=3, retry_delay=0
        )


@pytest.mark.asyncio
async def test_download_to_file_stops_on_forbidden(tmp_path: Path) -> None:
    session = FakeSession(FakeResponse(status=403))

    with pytest.raises(CommandError, match="403"):
        await io.download_to_file(session, "https://cdn.example.com/v.ts", tmp_path / "v.ts", log.DOWNLOAD)
    assert len(session.requested) == 1


@pytest.mark.asyncio
async def test_download_to_file_logs_size(caplog: pytest.LogCaptureFixture, tmp_path: Path) -> None:
    caplog.set_level(logging.DEBUG, logger="crunchy_cli")
    session = FakeSession(FakeResponse(body=bytes(256 * 1024)))
    target = tmp_path / "v.ts"

    await io.download_to_file(session, "https://cdn.example.com/v.ts", target, log.DOWNLOAD)

    assert f"Downloaded 256.0 KiB from https://cdn.example.com/v.ts to {target}" in messages(caplog)


@pytest.mark.asyncio
async def test_get_with_retries_retries_failures_while_handling_body() -> None:
    session = FakeSession(FakeResponse(body=b"first"), FakeResponse(body=b"second"))
    seen = []

    async def handle(response: FakeResponse) -> bytes:
        body = await response.read()
        seen.append(body)
        if len(seen) == 1:
            raise aiohttp.ClientPayloadError("truncated")
        return body

    result = await io.get_with_retries(session, "https://example.com/a", 3, 0, log.HTTP, handle)

    assert result == b"second"
    assert seen == [b"first", b"second"]


@pytest.mark.asyncio
async def test_get_with_retries_keeps_status_of_client_errors() -> None:
    session = FakeSession(FakeResponse(status=404, headers={"Server": "x"}))

    async def handle(response: FakeResponse) -> bytes:
        return await response.read()

    with pytest.raises(io.RequestFailed) as exc_info:
        await io.get_with_retries(session, "https://example.com/a", 3, 0, log.HTTP, handle)

    assert exc_info.value.status == 404
    assert exc_info.value.headers == {"Server": "x"}
