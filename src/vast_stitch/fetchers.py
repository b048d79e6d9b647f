"""
Content Fetchers

Retrieve raw VAST XML from a location. The chain resolver depends only on
the ``ContentFetcher`` protocol; which transport serves a location is the
fetcher's concern.

Supported locations:
    - local paths, absolute or relative to configured base directories
    - ``file://`` URIs
    - ``http://`` and ``https://`` URIs (httpx)
"""

import asyncio
import os
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import unquote, urljoin, urlsplit

import httpx

from .config import DEFAULT_FETCH_TIMEOUT, FetcherConfig
from .events import VastEvents
from .exceptions import VastFetchError
from .log_config import get_context_logger


@runtime_checkable
class ContentFetcher(Protocol):
    """Anything that can turn a location into raw document bytes."""

    async def fetch(self, location: str) -> bytes:
        """Return the content at ``location`` or raise VastFetchError."""
        ...


def location_scheme(location: str) -> str:
    """Return the lower-cased URI scheme, "" for plain paths.

    Single-letter schemes are Windows drive letters and count as paths.
    """
    scheme = urlsplit(location).scheme.lower()
    return "" if len(scheme) == 1 else scheme


def normalize_location(location: str) -> str:
    """Collapse ``.`` and ``..`` segments of plain paths; URIs are kept as given."""
    if location_scheme(location):
        return location
    return os.path.normpath(location)


def join_location(base: str, reference: str) -> str:
    """Resolve a ``VASTAdTagURI`` found in the document fetched from ``base``.

    Absolute URIs are returned unchanged. Inside a URI document a relative
    reference is joined with ``urljoin``; inside a local file it is taken
    relative to that file's directory.

    Examples:
        >>> join_location("https://ads.example.com/tags/a.xml", "b.xml")
        'https://ads.example.com/tags/b.xml'
        >>> join_location("samples/a.xml", "b.xml")
        'samples/b.xml'
    """
    reference = reference.strip()
    if location_scheme(reference):
        return reference
    if location_scheme(base):
        return urljoin(base, reference)
    return normalize_location(str(Path(base).parent / reference))


class FileFetcher:
    """Fetcher for local files and ``file://`` URIs.

    Relative paths are tried as given first, then against each base
    directory in order.

    Examples:
        >>> fetcher = FileFetcher(base_dirs=["samples"])
        >>> xml = await fetcher.fetch("sample_wrapper.xml")
    """

    def __init__(self, base_dirs: list[Path | str] | None = None):
        self.logger = get_context_logger("vast_file_fetcher")
        self.base_dirs = [Path(d) for d in base_dirs or []]

    def candidates(self, location: str) -> list[Path]:
        """Paths tried for a location, in order."""
        if location.lower().startswith("file://"):
            parts = urlsplit(location)
            raw = unquote(parts.path)
            # file://relative/path puts the first segment in netloc
            if parts.netloc and parts.netloc != "localhost":
                raw = f"{parts.netloc}{raw}"
        else:
            raw = location

        path = Path(raw)
        paths = [path]
        if not path.is_absolute():
            paths.extend(base / path for base in self.base_dirs)
        return paths

    async def fetch(self, location: str) -> bytes:
        self.logger.debug(VastEvents.FETCH_STARTED, location=location, transport="file")

        for path in self.candidates(location):
            if not path.is_file():
                continue
            try:
                content = await asyncio.to_thread(path.read_bytes)
            except OSError as e:
                self.logger.error(VastEvents.FETCH_FAILED, location=location, path=str(path), error=str(e))
                raise VastFetchError(
                    f"Cannot read file: {path}", location=location, cause=e
                ) from e
            self.logger.debug(
                VastEvents.FETCH_COMPLETED, location=location, path=str(path), size=len(content)
            )
            return content

        self.logger.error(VastEvents.FETCH_FAILED, location=location, error="not_found")
        raise VastFetchError(
            f"File not found: {location}",
            location=location,
            context={"searched": ", ".join(str(p) for p in self.candidates(location))},
        )


class HttpFetcher:
    """Fetcher for ``http://`` and ``https://`` locations.

    A client passed in is shared and left open; otherwise the fetcher
    creates its own ``httpx.AsyncClient`` on first use and closes it in
    ``aclose``.

    Examples:
        >>> async with HttpFetcher(timeout=3.0) as fetcher:
        ...     xml = await fetcher.fetch("https://ads.example.com/vast")
    """

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        verify_ssl: bool = True,
        follow_redirects: bool = True,
    ):
        self.logger = get_context_logger("vast_http_fetcher")
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.verify_ssl = verify_ssl
        self.follow_redirects = follow_redirects
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=self.follow_redirects,
            )
        return self._client

    async def fetch(self, location: str) -> bytes:
        """Fetch a remote VAST document.

        Raises:
            VastFetchError: On timeout, transport failure, non-2xx status or
                204 No Content
        """
        self.logger.debug(VastEvents.FETCH_STARTED, location=location, transport="http")

        try:
            response = await self.client.get(
                location,
                headers=self.headers,
                timeout=self.timeout,
                follow_redirects=self.follow_redirects,
            )
        except httpx.TimeoutException as e:
            self.logger.error(VastEvents.FETCH_FAILED, location=location, error="timeout", timeout=self.timeout)
            raise VastFetchError(
                f"Timed out after {self.timeout}s", location=location, cause=e
            ) from e
        except httpx.HTTPError as e:
            self.logger.error(VastEvents.FETCH_FAILED, location=location, error=str(e))
            raise VastFetchError(
                f"HTTP request failed: {e}", location=location, cause=e
            ) from e

        if response.status_code == 204:
            self.logger.error(VastEvents.FETCH_FAILED, location=location, status_code=204)
            raise VastFetchError("No content returned", location=location, http_status=204)

        if not response.is_success:
            self.logger.error(
                VastEvents.FETCH_FAILED, location=location, status_code=response.status_code
            )
            raise VastFetchError(
                f"Unexpected HTTP status {response.status_code}",
                location=location,
                http_status=response.status_code,
            )

        self.logger.debug(
            VastEvents.FETCH_COMPLETED,
            location=location,
            status_code=response.status_code,
            size=len(response.content),
        )
        return response.content

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


class LocationFetcher:
    """Fetcher dispatching on the location's URI scheme.

    ``http``/``https`` go to the HTTP fetcher; ``file`` and plain paths go
    to the file fetcher. Any other scheme is a fetch failure.
    """

    def __init__(
        self,
        file_fetcher: FileFetcher | None = None,
        http_fetcher: HttpFetcher | None = None,
    ):
        self.file_fetcher = file_fetcher or FileFetcher()
        self.http_fetcher = http_fetcher or HttpFetcher()

    @classmethod
    def from_config(
        cls, config: FetcherConfig, client: httpx.AsyncClient | None = None
    ) -> "LocationFetcher":
        """Build file and HTTP fetchers from a FetcherConfig."""
        return cls(
            file_fetcher=FileFetcher(base_dirs=config.base_dirs),
            http_fetcher=HttpFetcher(
                timeout=config.fetch_timeout,
                headers=config.headers,
                client=client,
                verify_ssl=config.verify_ssl,
                follow_redirects=config.follow_redirects,
            ),
        )

    async def fetch(self, location: str) -> bytes:
        scheme = location_scheme(location)
        if scheme in ("http", "https"):
            return await self.http_fetcher.fetch(location)
        if scheme in ("", "file"):
            return await self.file_fetcher.fetch(location)
        raise VastFetchError(f"Unsupported location scheme: {scheme}", location=location)

    async def aclose(self) -> None:
        await self.http_fetcher.aclose()

    async def __aenter__(self) -> "LocationFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = [
    "ContentFetcher",
    "FileFetcher",
    "HttpFetcher",
    "LocationFetcher",
    "location_scheme",
    "normalize_location",
    "join_location",
]
