import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import aiofiles
import aiohttp
from aiohttp.client_reqrep import CIMultiDictProxy

from .errors import CommandError
from .progress_bar import ProgressBar
from .utils import format_size

CHUNK_SIZE = 64 * 1024

T = TypeVar("T")


class RequestFailed(CommandError):
    def __init__(self, msg: str, status: int | None = None, headers: CIMultiDictProxy | None = None):
        super().__init__(msg)
        self.status = status
        self.headers = headers


async def get_with_retries(
    session: aiohttp.ClientSession,
    url: str,
    retries: int,
    retry_delay: float,
    log: logging.LoggerAdapter,
    handle: Callable[[aiohttp.ClientResponse], Awaitable[T]],
    **request_kwargs,
) -> T:
    """
    GETs ``url`` and returns ``handle(response)`` for the first 200 answer.

    Timeouts, connection errors (also while ``handle`` reads the body) and 5xx/429
    answers are retried with exponential backoff. Any other 4xx ends the attempts
    at once. Raises RequestFailed when no attempt succeeded.
    """
    delay = retry_delay
    for attempt in range(retries):
        try:
            async with session.get(url, **request_kwargs) as response:
                if response.status == 200:
                    return await handle(response)

                if response.status == 404:
                    log.warning(f"Nothing found at {url} (404 Not Found). Will not retry.")
                else:
                    log.warning(f"Failed request attempt for {url} (Status: {response.status})")
                if 400 <= response.status < 500 and response.status != 429:
                    raise RequestFailed(
                        f"Could not fetch {url}: server answered with {response.status}",
                        status=response.status,
                        headers=response.headers,
                    )

        except (TimeoutError, aiohttp.ClientError) as e:
            log.warning(f"Error requesting {url} on attempt {attempt + 1}: [{type(e).__name__}] {e}")

        if attempt < retries - 1:
            await asyncio.sleep(delay)
            delay *= 2

    log.error(f"Giving up on {url} after {retries} attempts.")
    raise RequestFailed(f"Giving up on {url} after {retries} attempts")


async def fetch_url_content(
    session: aiohttp.ClientSession,
    url: str,
    retries: int,
    retry_delay: float,
    log: logging.LoggerAdapter,
) -> tuple[bytes | None, CIMultiDictProxy | None]:
    async def read(response: aiohttp.ClientResponse) -> tuple[bytes, CIMultiDictProxy]:
        return await response.read(), response.headers

    try:
        return await get_with_retries(
            session, url, retries, retry_delay, log, read, timeout=aiohttp.ClientTimeout(total=10)
        )
    except RequestFailed as e:
        return None, e.headers if e.status == 404 else None


async def fetch_json(
    session: aiohttp.ClientSession,
    url: str,
    log: logging.LoggerAdapter,
    retries: int = 3,
    retry_delay: float = 1.0,
) -> Any:
    content, _ = await fetch_url_content(session, url, retries, retry_delay, log)
    if content is None:
        raise CommandError(f"Could not fetch {url}")
    try:
        return json.loads(content)
    except ValueError as e:
        raise CommandError(f"Response of {url} is not valid json: {e}") from e


async def download_to_file(
    session: aiohttp.ClientSession,
    url: str,
    path: Path,
    log: logging.LoggerAdapter,
    retries: int = 5,
    retry_delay: float = 1.0,
) -> int:
    """Stream ``url`` into ``path`` and return the number of bytes written.

    A partially written file from a failed attempt is overwritten by the next
    one. Raises CommandError once all attempts are used up.
    """

    async def write(response: aiohttp.ClientResponse) -> int:
        path.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        progress_bar = ProgressBar(path.name, total=response.content_length)
        try:
            async with aiofiles.open(path, "wb") as f:
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    await f.write(chunk)
                    written += len(chunk)
                    progress_bar.update(len(chunk))
        finally:
            progress_bar.close()
        return written

    written = await get_with_retries(session, url, retries, retry_delay, log, write)
    log.debug(f"Downloaded {format_size(written)} from {url} to {path}")
    return written
