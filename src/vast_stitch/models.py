"""
VAST Document Model

Typed representation of a VAST document: a root holding zero or more Ads,
each of which is either an InLine (terminal, playable) or a Wrapper
(redirecting to another VAST document through ``VASTAdTagURI``).

Elements the model does not interpret are kept as serialized XML fragments
in fields declared with ``compare=False``. They travel through parsing,
stitching and serialization unchanged but do not take part in model
equality.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class VastVersion(str, Enum):
    """VAST specification family of a document."""

    V2 = "2.0"
    V3 = "3.0"
    V4 = "4.0"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "VastVersion":
        """Map a ``version`` attribute to its specification family.

        Examples:
            >>> VastVersion.from_string("4.2")
            <VastVersion.V4: '4.0'>
            >>> VastVersion.from_string(None)
            <VastVersion.UNKNOWN: 'unknown'>
        """
        if not value:
            return cls.UNKNOWN
        match = re.match(r"\s*([234])(?:\.\d+)*\s*$", value)
        if match is None:
            return cls.UNKNOWN
        return {"2": cls.V2, "3": cls.V3, "4": cls.V4}[match.group(1)]


@dataclass
class AdSystem:
    """Name and version of the ad server that returned the ad."""

    name: str = ""
    version: str | None = None


@dataclass
class Impression:
    """Impression tracking URI."""

    url: str
    id: str | None = None


@dataclass
class ClickUri:
    """Click-through, click-tracking or custom-click URI."""

    url: str
    id: str | None = None


@dataclass
class Pricing:
    """Pricing information of an InLine ad."""

    value: str
    model: str | None = None
    currency: str | None = None


@dataclass
class TrackingEvent:
    """URI to request when a named playback milestone occurs.

    Attributes:
        event: Event type, free-form per VAST ("start", "complete", "progress", ...)
        uri: Tracking URI
        offset: Offset for "progress" events (HH:MM:SS or percentage)
    """

    event: str
    uri: str
    offset: str | None = None


@dataclass
class MediaFile:
    """Media file reference of a linear creative."""

    url: str
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def mime_type(self) -> str | None:
        return self.attributes.get("type")

    @property
    def delivery(self) -> str | None:
        return self.attributes.get("delivery")


@dataclass
class VideoClicks:
    """Click-through and click-tracking URIs of a linear creative."""

    click_through: ClickUri | None = None
    click_tracking: list[ClickUri] = field(default_factory=list)
    custom_click: list[ClickUri] = field(default_factory=list)


@dataclass
class Linear:
    """Linear (video/audio) creative."""

    duration: str | None = None
    skipoffset: str | None = None
    media_files: list[MediaFile] = field(default_factory=list)
    video_clicks: VideoClicks | None = None
    tracking_events: list[TrackingEvent] = field(default_factory=list)
    # AdParameters, Icons, ...
    extra: list[str] = field(default_factory=list, compare=False)
    # Mezzanine, InteractiveCreativeFile, ... inside MediaFiles
    media_files_extra: list[str] = field(default_factory=list, compare=False)


@dataclass
class Companion:
    """Companion banner; resources and click-throughs are opaque."""

    attributes: dict[str, str] = field(default_factory=dict)
    tracking_events: list[TrackingEvent] = field(default_factory=list)
    extra: list[str] = field(default_factory=list, compare=False)

    @property
    def id(self) -> str | None:
        return self.attributes.get("id")


@dataclass
class CompanionAds:
    """Container of companion banners."""

    attributes: dict[str, str] = field(default_factory=dict)
    companions: list[Companion] = field(default_factory=list)


@dataclass
class NonLinearAds:
    """Non-linear (overlay) ads; individual NonLinear elements are opaque."""

    tracking_events: list[TrackingEvent] = field(default_factory=list)
    non_linears: list[str] = field(default_factory=list, compare=False)


@dataclass
class Creative:
    """Playable unit referenced by an Ad."""

    id: str | None = None
    sequence: int | None = None
    ad_id: str | None = None
    api_framework: str | None = None
    linear: Linear | None = None
    companion_ads: CompanionAds | None = None
    non_linear_ads: NonLinearAds | None = None
    # UniversalAdId, CreativeExtensions, ...
    extra: list[str] = field(default_factory=list, compare=False)

    def iter_tracking_events(self) -> Iterator[TrackingEvent]:
        """Yield every tracking event of the creative, in document order."""
        if self.linear is not None:
            yield from self.linear.tracking_events
        if self.companion_ads is not None:
            for companion in self.companion_ads.companions:
                yield from companion.tracking_events
        if self.non_linear_ads is not None:
            yield from self.non_linear_ads.tracking_events


@dataclass
class AdBase:
    """Fields shared by both Ad variants."""

    id: str | None = None
    sequence: int | None = None
    conditional_ad: bool | None = None
    ad_system: AdSystem | None = None
    title: str | None = None
    impressions: list[Impression] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    creatives: list[Creative] = field(default_factory=list)
    extensions: list[str] = field(default_factory=list, compare=False)
    # Unknown children of InLine/Wrapper (AdVerifications, Category, ...)
    extra: list[str] = field(default_factory=list, compare=False)


@dataclass
class InLine(AdBase):
    """Ad carrying the playable creatives; terminal in a wrapper chain."""

    description: str | None = None
    advertiser: str | None = None
    survey: str | None = None
    pricing: Pricing | None = None


@dataclass
class Wrapper(AdBase):
    """Ad redirecting to another VAST document.

    Attributes:
        ad_tag_uri: Location of the next VAST document (required)
        follow_additional_wrappers: Whether the next document may itself be a Wrapper
        allow_multiple_ads: Whether the next document may return an ad pod
        fallback_on_no_ad: Whether to fall back to another ad when none is returned
    """

    ad_tag_uri: str = ""
    follow_additional_wrappers: bool = True
    allow_multiple_ads: bool = False
    fallback_on_no_ad: bool | None = None


Ad = Union[InLine, Wrapper]


def is_wrapper(ad: Ad) -> bool:
    """Return True for Wrapper ads, False for InLine ads."""
    if isinstance(ad, Wrapper):
        return True
    if isinstance(ad, InLine):
        return False
    raise TypeError(f"Not a VAST ad: {type(ad).__name__}")


def is_inline(ad: Ad) -> bool:
    """Return True for InLine ads, False for Wrapper ads."""
    return not is_wrapper(ad)


@dataclass
class VastDocument:
    """Root of a VAST document.

    Attributes:
        version: Specification family
        raw_version: Literal ``version`` attribute, kept for serialization
        ads: Ads in document order; empty signals "no ad"
        errors: Root-level Error URIs (used by "no ad" responses)
    """

    version: VastVersion = VastVersion.UNKNOWN
    raw_version: str | None = None
    ads: list[Ad] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.ads

    @property
    def primary_ad(self) -> Ad | None:
        """First Ad of the document, the one wrapper resolution follows."""
        return self.ads[0] if self.ads else None


@dataclass(frozen=True)
class ChainLink:
    """One resolved step of a wrapper chain.

    Attributes:
        location: Location the document was fetched from
        document: Parsed document
        ad_index: Index of the Ad that was followed (or that terminated the chain)
    """

    location: str
    document: VastDocument
    ad_index: int = 0

    @property
    def ad(self) -> Ad:
        return self.document.ads[self.ad_index]


# Output of the stitcher: a VastDocument whose first Ad is the merged InLine
StitchedDocument = VastDocument


__all__ = [
    "VastVersion",
    "AdSystem",
    "Impression",
    "ClickUri",
    "Pricing",
    "TrackingEvent",
    "MediaFile",
    "VideoClicks",
    "Linear",
    "Companion",
    "CompanionAds",
    "NonLinearAds",
    "Creative",
    "AdBase",
    "InLine",
    "Wrapper",
    "Ad",
    "is_wrapper",
    "is_inline",
    "VastDocument",
    "ChainLink",
    "StitchedDocument",
]
