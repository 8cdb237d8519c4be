import aiohttp
from aiohttp_socks import ProxyConnector
from yarl import URL

from . import log
from .errors import ConfigurationError

PROXY_SCHEMES = ("http", "socks4", "socks5")


def _validate_proxy(proxy: str) -> None:
    try:
        url = URL(proxy)
    except ValueError as e:
        raise ConfigurationError(f"Invalid proxy url '{proxy}': {e}") from e

    if url.scheme not in PROXY_SCHEMES:
        raise ConfigurationError(
            f"Invalid proxy url '{proxy}': scheme must be one of {', '.join(PROXY_SCHEMES)}"
        )
    if not url.host:
        raise ConfigurationError(f"Invalid proxy url '{proxy}': missing host")
    if url.explicit_port is None:
        raise ConfigurationError(f"Invalid proxy url '{proxy}': missing port")


class HttpClient:
    """The one HTTP client of an invocation.

    Construction only stores the settings; the underlying aiohttp session needs a
    running event loop and is opened with ``async with client:``.
    """

    def __init__(self, user_agent: str, proxy: str | None = None, read_timeout: float = 30.0):
        self.user_agent = user_agent
        self.proxy = proxy or None
        self.read_timeout = read_timeout
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            raise RuntimeError("HTTP client is not open")
        return self._session

    async def __aenter__(self) -> "HttpClient":
        if self._session is not None:
            raise RuntimeError("HTTP client was already opened")

        connector = None
        if self.proxy:
            connector = ProxyConnector.from_url(self.proxy)
            log.HTTP.debug(f"aiohttp proxy set: {self.proxy}")

        self._session = aiohttp.ClientSession(
            connector=connector,
            headers={"User-Agent": self.user_agent},
            timeout=aiohttp.ClientTimeout(total=None, sock_read=self.read_timeout),
        )
        log.HTTP.debug(f"HTTP client opened with user agent '{self.user_agent}'")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._session is not None:
            await self._session.close()
            log.HTTP.debug("HTTP client closed")


def create_or_default_client(proxy: str | None, user_agent: str) -> HttpClient:
    if proxy:
        _validate_proxy(proxy)
    return HttpClient(user_agent=user_agent, proxy=proxy)
