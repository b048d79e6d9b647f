"""VAST XML serializer for the typed document model."""

from lxml import etree

from .config import SerializerConfig
from .events import VastEvents
from .log_config import get_context_logger
from .models import (
    Ad,
    ClickUri,
    Companion,
    CompanionAds,
    Creative,
    InLine,
    Linear,
    NonLinearAds,
    TrackingEvent,
    VastDocument,
    VastVersion,
    VideoClicks,
    Wrapper,
)


_FRAGMENT_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def _set_attributes(element: etree._Element, attributes: dict[str, str | None]) -> None:
    for name, value in attributes.items():
        if value is not None:
            element.set(name, value)


def _uri_element(
    parent: etree._Element,
    tag: str,
    uri: str,
    attributes: dict[str, str | None] | None = None,
) -> etree._Element:
    """Append an element whose text is a URI, wrapped in CDATA."""
    element = etree.SubElement(parent, tag)
    _set_attributes(element, attributes or {})
    if "]]>" in uri:
        # cannot be expressed as a single CDATA section
        element.text = uri
    else:
        element.text = etree.CDATA(uri)
    return element


def _text_element(parent: etree._Element, tag: str, text: str | None, **attributes: str | None) -> None:
    if text is None:
        return
    element = etree.SubElement(parent, tag)
    _set_attributes(element, attributes)
    element.text = text


def _append_fragments(parent: etree._Element, fragments: list[str]) -> None:
    for fragment in fragments:
        parent.append(etree.fromstring(fragment, parser=_FRAGMENT_PARSER))  # ruff: noqa: S320


class VastSerializer:
    """Serializer producing VAST XML from a VastDocument.

    URIs are written as CDATA sections; opaque elements kept by the parser
    are re-emitted verbatim.
    """

    def __init__(self, config: SerializerConfig | None = None):
        self.logger = get_context_logger("vast_serializer")
        self.config = config or SerializerConfig()

    def serialize(self, document: VastDocument, pretty: bool | None = None) -> str:
        """Serialize a document to VAST XML text.

        Args:
            document: Document to serialize
            pretty: Indent output; defaults to the configured value

        Returns:
            XML text, with declaration when configured
        """
        if pretty is None:
            pretty = self.config.pretty

        root = self.to_element(document)
        xml = etree.tostring(
            root,
            xml_declaration=self.config.xml_declaration,
            encoding=self.config.encoding,
            pretty_print=pretty,
        ).decode(self.config.encoding)

        self.logger.debug(
            VastEvents.SERIALIZE_COMPLETED, ads_count=len(document.ads), length=len(xml)
        )
        return xml

    def to_element(self, document: VastDocument) -> etree._Element:
        """Build the lxml element tree for a document."""
        root = etree.Element("VAST")
        version = document.raw_version
        if version is None and document.version != VastVersion.UNKNOWN:
            version = document.version.value
        _set_attributes(root, {"version": version})

        for ad in document.ads:
            self._append_ad(root, ad)
        for url in document.errors:
            _uri_element(root, "Error", url)
        return root

    def _append_ad(self, root: etree._Element, ad: Ad) -> None:
        ad_elem = etree.SubElement(root, "Ad")
        _set_attributes(
            ad_elem,
            {
                "id": ad.id,
                "sequence": None if ad.sequence is None else str(ad.sequence),
                "conditionalAd": None if ad.conditional_ad is None else _bool_text(ad.conditional_ad),
            },
        )

        if isinstance(ad, Wrapper):
            body = etree.SubElement(ad_elem, "Wrapper")
            attributes = {
                "followAdditionalWrappers": None if ad.follow_additional_wrappers else "false",
                "allowMultipleAds": "true" if ad.allow_multiple_ads else None,
                "fallbackOnNoAd": None if ad.fallback_on_no_ad is None else _bool_text(ad.fallback_on_no_ad),
            }
            _set_attributes(body, attributes)
        else:
            body = etree.SubElement(ad_elem, "InLine")

        if ad.ad_system is not None:
            _text_element(body, "AdSystem", ad.ad_system.name, version=ad.ad_system.version)
        _text_element(body, "AdTitle", ad.title)

        if isinstance(ad, Wrapper):
            _uri_element(body, "VASTAdTagURI", ad.ad_tag_uri)

        for impression in ad.impressions:
            _uri_element(body, "Impression", impression.url, {"id": impression.id})

        if isinstance(ad, InLine):
            self._append_inline_metadata(body, ad)

        for url in ad.errors:
            _uri_element(body, "Error", url)

        _append_fragments(body, ad.extra)

        if ad.extensions:
            extensions = etree.SubElement(body, "Extensions")
            _append_fragments(extensions, ad.extensions)

        if ad.creatives:
            creatives = etree.SubElement(body, "Creatives")
            for creative in ad.creatives:
                self._append_creative(creatives, creative)

    def _append_inline_metadata(self, body: etree._Element, ad: InLine) -> None:
        _text_element(body, "Description", ad.description)
        _text_element(body, "Advertiser", ad.advertiser)
        if ad.pricing is not None:
            _text_element(
                body,
                "Pricing",
                ad.pricing.value,
                model=ad.pricing.model,
                currency=ad.pricing.currency,
            )
        if ad.survey is not None:
            _uri_element(body, "Survey", ad.survey)

    def _append_creative(self, parent: etree._Element, creative: Creative) -> None:
        element = etree.SubElement(parent, "Creative")
        _set_attributes(
            element,
            {
                "id": creative.id,
                "sequence": None if creative.sequence is None else str(creative.sequence),
                "adId": creative.ad_id,
                "apiFramework": creative.api_framework,
            },
        )
        _append_fragments(element, creative.extra)

        if creative.linear is not None:
            self._append_linear(element, creative.linear)
        if creative.companion_ads is not None:
            self._append_companion_ads(element, creative.companion_ads)
        if creative.non_linear_ads is not None:
            self._append_non_linear_ads(element, creative.non_linear_ads)

    def _append_linear(self, parent: etree._Element, linear: Linear) -> None:
        element = etree.SubElement(parent, "Linear")
        _set_attributes(element, {"skipoffset": linear.skipoffset})
        _text_element(element, "Duration", linear.duration)

        if linear.media_files or linear.media_files_extra:
            media_files = etree.SubElement(element, "MediaFiles")
            for media_file in linear.media_files:
                _uri_element(media_files, "MediaFile", media_file.url, dict(media_file.attributes))
            _append_fragments(media_files, linear.media_files_extra)

        self._append_tracking_events(element, linear.tracking_events)

        if linear.video_clicks is not None:
            self._append_video_clicks(element, linear.video_clicks)

        _append_fragments(element, linear.extra)

    def _append_video_clicks(self, parent: etree._Element, clicks: VideoClicks) -> None:
        element = etree.SubElement(parent, "VideoClicks")

        def append_click(tag: str, click: ClickUri) -> None:
            _uri_element(element, tag, click.url, {"id": click.id})

        if clicks.click_through is not None:
            append_click("ClickThrough", clicks.click_through)
        for click in clicks.click_tracking:
            append_click("ClickTracking", click)
        for click in clicks.custom_click:
            append_click("CustomClick", click)

    def _append_tracking_events(self, parent: etree._Element, events: list[TrackingEvent]) -> None:
        if not events:
            return
        element = etree.SubElement(parent, "TrackingEvents")
        for event in events:
            _uri_element(
                element, "Tracking", event.uri, {"event": event.event, "offset": event.offset}
            )

    def _append_companion_ads(self, parent: etree._Element, companion_ads: CompanionAds) -> None:
        element = etree.SubElement(parent, "CompanionAds")
        _set_attributes(element, dict(companion_ads.attributes))
        for companion in companion_ads.companions:
            self._append_companion(element, companion)

    def _append_companion(self, parent: etree._Element, companion: Companion) -> None:
        element = etree.SubElement(parent, "Companion")
        _set_attributes(element, dict(companion.attributes))
        _append_fragments(element, companion.extra)
        self._append_tracking_events(element, companion.tracking_events)

    def _append_non_linear_ads(self, parent: etree._Element, non_linear_ads: NonLinearAds) -> None:
        element = etree.SubElement(parent, "NonLinearAds")
        self._append_tracking_events(element, non_linear_ads.tracking_events)
        _append_fragments(element, non_linear_ads.non_linears)


__all__ = ["VastSerializer"]
