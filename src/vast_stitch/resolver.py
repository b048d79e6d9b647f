"""
Wrapper Chain Resolver

Follows Wrapper -> VASTAdTagURI edges from a start location until an InLine
ad is reached, producing the ordered list of ChainLinks the stitcher merges.

Resolution is an explicit loop with two independent guards: a visited set
(cycle detection) and a hop counter bounded by ``max_depth``. Each call owns
its own state, so concurrent resolutions need no coordination. Any failure
aborts the whole call; a partial chain is never returned.

A relative ``VASTAdTagURI`` is resolved against the location of the wrapper
that contains it, so chains of sibling files work from any directory.
"""

import time

import httpx

from .config import DEFAULT_MAX_DEPTH, ResolverConfig
from .events import VastEvents
from .exceptions import (
    VastCircularReferenceError,
    VastException,
    VastFetchError,
    VastMaxDepthExceededError,
    VastNoAdError,
    VastParseError,
    VastWrapperNotAllowedError,
)
from .fetchers import ContentFetcher, join_location, location_scheme, normalize_location
from .log_config import LoggingContext, get_context_logger
from .metrics import MetricLabels, MetricsCollector, NoOpMetrics, VastMetrics
from .models import ChainLink, InLine, VastDocument, Wrapper
from .parser import VastParser


class ChainResolver:
    """Resolver for VAST wrapper chains.

    Args:
        fetcher: Strategy turning locations into bytes
        config: Resolver configuration (``max_depth``)
        parser: Parser for fetched documents
        metrics: Metrics collector (no-op by default)

    Examples:
        >>> resolver = ChainResolver(LocationFetcher(), ResolverConfig(max_depth=5))
        >>> links = await resolver.resolve("https://ads.example.com/wrapper")
        >>> isinstance(links[-1].ad, InLine)
        True
    """

    def __init__(
        self,
        fetcher: ContentFetcher,
        config: ResolverConfig | None = None,
        parser: VastParser | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.logger = get_context_logger("vast_chain_resolver")
        self.fetcher = fetcher
        self.config = config or ResolverConfig()
        self.parser = parser or VastParser()
        self.metrics = metrics or NoOpMetrics()

    async def resolve(self, start_location: str) -> list[ChainLink]:
        """Resolve the wrapper chain starting at ``start_location``.

        Args:
            start_location: Path or URI of the first VAST document

        Returns:
            Links in chain order; the first is the start location and the
            last holds an InLine ad.

        Raises:
            VastFetchError: A location could not be fetched
            VastParseError: A fetched document is not valid VAST
            VastNoAdError: A fetched document contains no Ad
            VastCircularReferenceError: A location repeats in the chain
            VastMaxDepthExceededError: More than ``max_depth`` wrappers
            VastWrapperNotAllowedError: A wrapper followed one that forbids it
        """
        max_depth = self.config.max_depth

        async with LoggingContext(operation="resolve") as ctx:
            ctx.set_namespace("chain", start_location=start_location, max_depth=max_depth)
            self.logger.info(VastEvents.CHAIN_STARTED, start_location=start_location, max_depth=max_depth)
            self.metrics.increment(VastMetrics.CHAIN_RESOLUTIONS_TOTAL)

            try:
                links = await self._resolve(start_location, max_depth)
            except VastException as e:
                self.logger.error(
                    VastEvents.CHAIN_FAILED,
                    start_location=start_location,
                    error_kind=e.kind,
                    error=str(e),
                    duration=ctx.get_duration(),
                )
                self.metrics.increment(
                    VastMetrics.CHAIN_RESOLUTIONS_FAILURE,
                    labels={MetricLabels.ERROR_TYPE: type(e).__name__},
                )
                raise

            ctx.set_namespace("result", links=len(links), wrappers=len(links) - 1)
            self.metrics.increment(VastMetrics.CHAIN_RESOLUTIONS_SUCCESS)
            self.metrics.histogram(VastMetrics.CHAIN_DEPTH, len(links) - 1)
            self.logger.info(
                VastEvents.CHAIN_COMPLETED,
                start_location=start_location,
                locations=[link.location for link in links],
                duration=ctx.get_duration(),
                **ctx.to_log_dict(),
            )
            return links

    async def _resolve(self, start_location: str, max_depth: int) -> list[ChainLink]:
        links: list[ChainLink] = []
        visited: set[str] = set()
        locations: list[str] = []
        # (location, wrapper) of the previously followed wrapper
        parent: tuple[str, Wrapper] | None = None

        location = normalize_location(start_location)
        while True:
            visited.add(location)
            locations.append(location)

            document = await self._load(location)
            if document.is_empty:
                raise VastNoAdError(
                    "VAST response contains no Ad", location=location, error_urls=document.errors
                )

            ad = document.ads[0]
            links.append(ChainLink(location=location, document=document, ad_index=0))
            self.logger.debug(
                VastEvents.CHAIN_LINK_RESOLVED,
                location=location,
                depth=len(links) - 1,
                ad_type=type(ad).__name__,
                sibling_ads=len(document.ads) - 1,
            )

            if isinstance(ad, InLine):
                return links

            next_location = join_location(location, ad.ad_tag_uri)
            if next_location in visited:
                raise VastCircularReferenceError(
                    f"Wrapper at {location} points back to {next_location}",
                    locations=locations + [next_location],
                )
            if len(links) > max_depth:
                raise VastMaxDepthExceededError(
                    f"No InLine ad within {max_depth} wrapper(s)",
                    max_depth=max_depth,
                    locations=locations,
                )
            if parent is not None and not parent[1].follow_additional_wrappers:
                raise VastWrapperNotAllowedError(
                    "Wrapper returned where followAdditionalWrappers is false",
                    location=location,
                    parent_location=parent[0],
                )

            parent = (location, ad)
            location = next_location

    async def _load(self, location: str) -> VastDocument:
        """Fetch and parse one chain document."""
        start_time = time.perf_counter()
        try:
            content = await self.fetcher.fetch(location)
        except VastFetchError:
            raise
        except (OSError, TimeoutError, httpx.HTTPError) as e:
            self.logger.error(VastEvents.FETCH_FAILED, location=location, error=str(e))
            raise VastFetchError(f"Cannot fetch {location}: {e}", location=location, cause=e) from e
        finally:
            self.metrics.timing(
                VastMetrics.CHAIN_FETCH_DURATION_MS,
                (time.perf_counter() - start_time) * 1000,
                labels={MetricLabels.SCHEME: location_scheme(location) or "file"},
            )

        try:
            return self.parser.parse(content, location=location)
        except VastParseError as e:
            e.with_location(location)
            raise


async def resolve(
    start_location: str,
    fetcher: ContentFetcher,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[ChainLink]:
    """Resolve a wrapper chain with a default parser and no metrics.

    Args:
        start_location: Path or URI of the first VAST document
        fetcher: Strategy turning locations into bytes
        max_depth: Maximum number of wrapper hops followed

    Returns:
        Links in chain order, ending with the InLine
    """
    resolver = ChainResolver(fetcher, ResolverConfig(max_depth=max_depth))
    return await resolver.resolve(start_location)


__all__ = ["ChainResolver", "resolve"]
