"""
VAST Stitcher

Merges the tracking data of every wrapper in a resolved chain into the
terminal InLine ad, producing one self-contained document.

Wrapper entries always come before the InLine's own entries, and outer
wrappers before inner ones, so the merged lists read in chain order.
"""

import copy
from collections.abc import Sequence
from dataclasses import dataclass, field

from .config import StitcherConfig
from .events import VastEvents
from .exceptions import VastNoInlineAdError, VastStitchError
from .log_config import LoggingContext, get_context_logger
from .metrics import MetricLabels, MetricsCollector, NoOpMetrics, VastMetrics
from .models import (
    ChainLink,
    ClickUri,
    Companion,
    CompanionAds,
    Creative,
    InLine,
    Linear,
    NonLinearAds,
    StitchedDocument,
    TrackingEvent,
    VastDocument,
    VideoClicks,
    Wrapper,
)


def _prepend(target: list, entries: list) -> int:
    """Insert copies of ``entries`` at the front of ``target``."""
    target[:0] = copy.deepcopy(entries)
    return len(entries)


def find_matching_creative(creatives: list[Creative], creative: Creative) -> Creative | None:
    """Find the creative a wrapper creative correlates with.

    Tries ``id``, then ``adId``, then ``sequence``; the first key that
    matches any creative wins.
    """
    if creative.id is not None:
        for candidate in creatives:
            if candidate.id == creative.id:
                return candidate
    if creative.ad_id is not None:
        for candidate in creatives:
            if candidate.ad_id == creative.ad_id:
                return candidate
    if creative.sequence is not None:
        for candidate in creatives:
            if candidate.sequence == creative.sequence:
                return candidate
    return None


@dataclass
class _PassThrough:
    """Wrapper tracking that no InLine creative could take."""

    tracking_events: list[TrackingEvent] = field(default_factory=list)
    click_tracking: list[ClickUri] = field(default_factory=list)
    custom_click: list[ClickUri] = field(default_factory=list)
    non_linear_tracking: list[TrackingEvent] = field(default_factory=list)
    companions: list[Companion] = field(default_factory=list)

    def to_creative(self, creative_id: str) -> Creative | None:
        creative = Creative(id=creative_id)
        if self.tracking_events or self.click_tracking or self.custom_click:
            video_clicks = None
            if self.click_tracking or self.custom_click:
                video_clicks = VideoClicks(
                    click_tracking=self.click_tracking, custom_click=self.custom_click
                )
            creative.linear = Linear(
                tracking_events=self.tracking_events, video_clicks=video_clicks
            )
        if self.companions:
            creative.companion_ads = CompanionAds(companions=self.companions)
        if self.non_linear_tracking:
            creative.non_linear_ads = NonLinearAds(tracking_events=self.non_linear_tracking)

        if creative.linear is None and creative.companion_ads is None and creative.non_linear_ads is None:
            return None
        return creative


class Stitcher:
    """Stitcher flattening a resolved wrapper chain.

    Examples:
        >>> links = await ChainResolver(fetcher).resolve("sample_wrapper.xml")
        >>> document = Stitcher().stitch(links)
        >>> len(document.ads)
        1
    """

    def __init__(
        self,
        config: StitcherConfig | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.logger = get_context_logger("vast_stitcher")
        self.config = config or StitcherConfig()
        self.metrics = metrics or NoOpMetrics()

    def stitch(self, links: Sequence[ChainLink]) -> StitchedDocument:
        """Merge a chain into a single InLine document.

        Args:
            links: Chain in resolution order (outermost wrapper first)

        Returns:
            Document whose first Ad is the merged InLine

        Raises:
            VastNoInlineAdError: If the chain is empty or does not end in an InLine
            VastStitchError: If a link before the last is not a Wrapper
        """
        with LoggingContext(operation="stitch") as ctx:
            self.logger.debug(VastEvents.STITCH_STARTED, links=len(links))
            try:
                terminal, wrappers = self._validate(links)
            except VastStitchError as e:
                self.logger.error(VastEvents.STITCH_FAILED, error_kind=e.kind, error=str(e))
                raise

            inline: InLine = copy.deepcopy(terminal.ad)
            counts = {"impression": 0, "error": 0, "tracking": 0, "click_tracking": 0, "custom_click": 0}
            pass_through = _PassThrough()
            own_creatives = list(inline.creatives)

            # innermost first; prepending leaves outer wrappers in front
            for wrapper in reversed(wrappers):
                counts["impression"] += _prepend(inline.impressions, wrapper.impressions)
                counts["error"] += _prepend(inline.errors, wrapper.errors)
                for creative in reversed(wrapper.creatives):
                    target = find_matching_creative(own_creatives, creative)
                    self._merge_creative(creative, target, pass_through, counts)

            synthetic = pass_through.to_creative(self.config.synthetic_creative_id)
            if synthetic is not None:
                inline.creatives.append(synthetic)

            ads = [inline]
            if wrappers and wrappers[-1].allow_multiple_ads:
                ads.extend(
                    copy.deepcopy(ad)
                    for index, ad in enumerate(terminal.document.ads)
                    if index != terminal.ad_index
                )

            document = VastDocument(
                version=terminal.document.version,
                raw_version=terminal.document.raw_version,
                ads=ads,
                errors=list(terminal.document.errors),
            )

            self.metrics.increment(VastMetrics.STITCH_DOCUMENTS_TOTAL)
            for entry_type, count in counts.items():
                if count:
                    self.metrics.increment(
                        VastMetrics.STITCH_MERGED_ENTRIES,
                        count,
                        labels={MetricLabels.ENTRY_TYPE: entry_type},
                    )

            ctx.set_namespace("result", **counts)
            self.logger.info(
                VastEvents.STITCH_COMPLETED,
                links=len(links),
                impressions=len(inline.impressions),
                creatives=len(inline.creatives),
                pass_through=synthetic is not None,
                **ctx.to_log_dict(),
            )
            return document

    def _validate(self, links: Sequence[ChainLink]) -> tuple[ChainLink, list[Wrapper]]:
        if not links:
            raise VastNoInlineAdError("Cannot stitch an empty chain")

        for link in links:
            if not 0 <= link.ad_index < len(link.document.ads):
                raise VastNoInlineAdError(
                    f"Link has no Ad at index {link.ad_index}", location=link.location
                )

        terminal = links[-1]
        if not isinstance(terminal.ad, InLine):
            raise VastNoInlineAdError(
                "Chain does not end in an InLine ad", location=terminal.location
            )

        wrappers = []
        for link in links[:-1]:
            if not isinstance(link.ad, Wrapper):
                raise VastStitchError(
                    "Only the last link of a chain may hold an InLine ad",
                    context={"location": link.location},
                )
            wrappers.append(link.ad)
        return terminal, wrappers

    def _merge_creative(
        self,
        source: Creative,
        target: Creative | None,
        pass_through: _PassThrough,
        counts: dict[str, int],
    ) -> None:
        """Prepend one wrapper creative's tracking into ``target`` or the pass-through."""
        if source.linear is not None:
            linear = target.linear if target is not None else None
            source_clicks = source.linear.video_clicks or VideoClicks()
            if linear is None:
                tracking, click_tracking, custom_click = (
                    pass_through.tracking_events,
                    pass_through.click_tracking,
                    pass_through.custom_click,
                )
            else:
                if linear.video_clicks is None and (source_clicks.click_tracking or source_clicks.custom_click):
                    linear.video_clicks = VideoClicks()
                tracking = linear.tracking_events
                click_tracking = linear.video_clicks.click_tracking if linear.video_clicks else []
                custom_click = linear.video_clicks.custom_click if linear.video_clicks else []
            counts["tracking"] += _prepend(tracking, source.linear.tracking_events)
            counts["click_tracking"] += _prepend(click_tracking, source_clicks.click_tracking)
            counts["custom_click"] += _prepend(custom_click, source_clicks.custom_click)

        if source.non_linear_ads is not None:
            non_linear_ads = target.non_linear_ads if target is not None else None
            tracking = (
                non_linear_ads.tracking_events
                if non_linear_ads is not None
                else pass_through.non_linear_tracking
            )
            counts["tracking"] += _prepend(tracking, source.non_linear_ads.tracking_events)

        if source.companion_ads is not None:
            companions = (
                target.companion_ads.companions
                if target is not None and target.companion_ads is not None
                else []
            )
            for companion in reversed(source.companion_ads.companions):
                match = next(
                    (c for c in companions if companion.id is not None and c.id == companion.id),
                    None,
                )
                if match is not None:
                    counts["tracking"] += _prepend(match.tracking_events, companion.tracking_events)
                elif companion.tracking_events:
                    counts["tracking"] += len(companion.tracking_events)
                    pass_through.companions.insert(0, copy.deepcopy(companion))


def stitch(links: Sequence[ChainLink], config: StitcherConfig | None = None) -> StitchedDocument:
    """Stitch a resolved chain with a default Stitcher."""
    return Stitcher(config).stitch(links)


__all__ = ["Stitcher", "stitch", "find_matching_creative"]
