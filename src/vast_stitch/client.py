"""Facade combining fetching, parsing, chain resolution and stitching."""

import httpx

from .config import ResolverConfig, StitcherConfig
from .exceptions import VastParseError
from .fetchers import ContentFetcher, LocationFetcher
from .log_config import get_context_logger
from .metrics import MetricsCollector, NoOpMetrics
from .models import ChainLink, StitchedDocument, VastDocument
from .parser import VastParser
from .resolver import ChainResolver
from .serializer import VastSerializer
from .settings import Settings, get_settings
from .stitcher import Stitcher


class VastStitchClient:
    """
    Facade for the three user-facing operations.

    - ``parse(location)``: fetch and parse one document
    - ``unwrap(location)``: resolve the wrapper chain, return the terminal InLine document
    - ``stitch(location)``: resolve and merge the chain into one document

    Examples:
        >>> async with VastStitchClient.from_settings() as client:
        ...     document = await client.stitch("sample_wrapper_nested.xml")
        ...     print(client.serialize(document, pretty=True))
    """

    def __init__(
        self,
        fetcher: ContentFetcher | None = None,
        parser: VastParser | None = None,
        serializer: VastSerializer | None = None,
        resolver_config: ResolverConfig | None = None,
        stitcher_config: StitcherConfig | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.logger = get_context_logger("vast_stitch_client")
        self.fetcher = fetcher or LocationFetcher()
        self.parser = parser or VastParser()
        self.serializer = serializer or VastSerializer()
        self.metrics = metrics or NoOpMetrics()
        self.resolver = ChainResolver(
            self.fetcher, config=resolver_config, parser=self.parser, metrics=self.metrics
        )
        self.stitcher = Stitcher(config=stitcher_config, metrics=self.metrics)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        metrics: MetricsCollector | None = None,
    ) -> "VastStitchClient":
        """Build a client from application settings.

        Args:
            settings: Settings instance (default: ``get_settings()``)
            http_client: Shared httpx client for remote locations
            metrics: Metrics collector

        Returns:
            Configured client
        """
        settings = settings or get_settings()
        return cls(
            fetcher=LocationFetcher.from_config(settings.fetcher_config(), client=http_client),
            parser=VastParser(settings.parser_config()),
            serializer=VastSerializer(settings.serializer_config()),
            resolver_config=settings.resolver_config(),
            stitcher_config=settings.stitcher_config(),
            metrics=metrics,
        )

    async def parse(self, location: str) -> VastDocument:
        """Fetch and parse a single document without following wrappers."""
        content = await self.fetcher.fetch(location)
        try:
            return self.parser.parse(content, location=location)
        except VastParseError as e:
            e.with_location(location)
            raise

    async def resolve(self, location: str) -> list[ChainLink]:
        return await self.resolver.resolve(location)

    async def unwrap(self, location: str) -> VastDocument:
        """Resolve the chain and return the document holding the InLine ad."""
        links = await self.resolver.resolve(location)
        self.logger.debug("Unwrapped chain", start_location=location, terminal=links[-1].location)
        return links[-1].document

    async def stitch(self, location: str) -> StitchedDocument:
        """Resolve the chain and merge it into one document."""
        links = await self.resolver.resolve(location)
        return self.stitcher.stitch(links)

    def serialize(self, document: VastDocument, pretty: bool | None = None) -> str:
        return self.serializer.serialize(document, pretty=pretty)

    async def aclose(self) -> None:
        close = getattr(self.fetcher, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "VastStitchClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = ["VastStitchClient"]
