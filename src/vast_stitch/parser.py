"""VAST XML parser producing the typed document model."""

from typing import Any

from lxml import etree

from .config import VastParserConfig
from .events import VastEvents
from .exceptions import VastInvalidError, VastMalformedXmlError
from .log_config import get_context_logger
from .models import (
    Ad,
    AdSystem,
    ClickUri,
    Companion,
    CompanionAds,
    Creative,
    Impression,
    InLine,
    Linear,
    MediaFile,
    NonLinearAds,
    Pricing,
    TrackingEvent,
    VastDocument,
    VastVersion,
    VideoClicks,
    Wrapper,
)


def local_name(element: etree._Element) -> str:
    """Tag name without namespace (VAST 4 documents may declare one)."""
    return etree.QName(element).localname


def iter_children(element: etree._Element):
    """Yield child elements, skipping comments and processing instructions."""
    for child in element:
        if isinstance(child.tag, str):
            yield child


def element_text(element: etree._Element) -> str:
    """Stripped text content; CDATA sections are already merged by lxml."""
    return (element.text or "").strip()


def to_fragment(element: etree._Element) -> str:
    """Serialize an element the model does not interpret."""
    return etree.tostring(element, encoding="unicode", with_tail=False)


def parse_bool(value: str | None) -> bool | None:
    """Parse an xs:boolean attribute value; None when absent or invalid."""
    if value is None:
        return None
    value = value.strip().lower()
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    return None


class VastParser:
    """Parser for VAST XML documents."""

    def __init__(self, config: VastParserConfig | None = None):
        self.logger = get_context_logger("vast_parser")
        self.config = config or VastParserConfig()

    def parse(self, content: bytes | str, location: str | None = None) -> VastDocument:
        """Parse VAST XML into a VastDocument.

        Args:
            content: Raw VAST XML
            location: Where the content came from, attached to errors

        Returns:
            Parsed document

        Raises:
            VastMalformedXmlError: If the markup is not well-formed
            VastInvalidError: If required VAST structure is missing
        """
        self.logger.debug(
            VastEvents.PARSE_STARTED, content_length=len(content), location=location
        )

        root = self._parse_xml(content, location)

        if local_name(root) != "VAST":
            self.logger.error(
                VastEvents.PARSE_FAILED, reason="unknown_root", root_tag=root.tag, location=location
            )
            raise VastInvalidError(
                f"Root element is <{local_name(root)}>, expected <VAST>",
                element_tag=local_name(root),
                location=location,
            )

        raw_version = root.get("version")
        document = VastDocument(
            version=VastVersion.from_string(raw_version),
            raw_version=raw_version,
        )
        if document.version == VastVersion.UNKNOWN:
            self.logger.warning("Unrecognized VAST version", version=raw_version, location=location)

        for child in iter_children(root):
            name = local_name(child)
            if name == "Ad":
                try:
                    document.ads.append(self._parse_ad(child))
                except VastInvalidError as e:
                    self.logger.error(
                        VastEvents.PARSE_FAILED, reason="invalid_vast", error=str(e), location=location
                    )
                    if location:
                        e.with_location(location)
                    raise
            elif name == "Error":
                url = element_text(child)
                if url:
                    document.errors.append(url)
            else:
                self.logger.debug("Ignoring unknown root element", tag=name)

        self.logger.info(
            VastEvents.PARSE_COMPLETED,
            location=location,
            version=document.version.value,
            ads_count=len(document.ads),
            ad_types=[type(ad).__name__ for ad in document.ads],
        )
        return document

    def _parse_xml(self, content: bytes | str, location: str | None) -> etree._Element:
        """Tokenize raw content into an lxml element tree."""
        if isinstance(content, str):
            preview = content[:200]
        else:
            preview = content[:200].decode(self.config.encoding, errors="replace")

        parser = etree.XMLParser(
            recover=self.config.recover_on_error,
            resolve_entities=False,
            no_network=True,
            remove_comments=True,
            remove_pis=True,
            huge_tree=self.config.huge_tree,
        )
        try:
            if isinstance(content, str):
                content = content.encode(self.config.encoding)
            root = etree.fromstring(content, parser=parser)  # ruff: noqa: S320
        except etree.XMLSyntaxError as e:
            self.logger.error(VastEvents.PARSE_FAILED, error=str(e), location=location)
            raise VastMalformedXmlError(
                f"Failed to parse VAST XML: {str(e)}",
                xml_preview=preview,
                parser_error=e,
                location=location,
            ) from e
        except (UnicodeError, ValueError) as e:
            self.logger.error(VastEvents.PARSE_FAILED, error=str(e), location=location)
            raise VastMalformedXmlError(
                f"Failed to decode or parse VAST XML: {str(e)}",
                xml_preview=preview,
                parser_error=e,
                location=location,
            ) from e

        # recover mode returns None for input with no recoverable element
        if root is None:
            raise VastMalformedXmlError(
                "Document contains no XML element", xml_preview=preview, location=location
            )
        return root

    def _parse_int(self, element: etree._Element, attribute: str) -> int | None:
        value = element.get(attribute)
        if value is None:
            return None
        try:
            return int(value.strip())
        except ValueError:
            self.logger.warning(
                "Ignoring non-integer attribute",
                tag=local_name(element),
                attribute=attribute,
                value=value,
            )
            return None

    def _parse_ad(self, ad_elem: etree._Element) -> Ad:
        body = next(
            (c for c in iter_children(ad_elem) if local_name(c) in ("InLine", "Wrapper")),
            None,
        )
        if body is None:
            raise VastInvalidError(
                "Ad contains neither InLine nor Wrapper", element_tag="Ad"
            )

        ad: Ad
        if local_name(body) == "InLine":
            ad = InLine()
        else:
            ad = Wrapper()
            follow = parse_bool(body.get("followAdditionalWrappers"))
            ad.follow_additional_wrappers = True if follow is None else follow
            ad.allow_multiple_ads = bool(parse_bool(body.get("allowMultipleAds")))
            ad.fallback_on_no_ad = parse_bool(body.get("fallbackOnNoAd"))

        ad.id = ad_elem.get("id")
        ad.sequence = self._parse_int(ad_elem, "sequence")
        ad.conditional_ad = parse_bool(ad_elem.get("conditionalAd"))

        self._parse_ad_body(body, ad)

        if isinstance(ad, Wrapper) and not ad.ad_tag_uri:
            raise VastInvalidError(
                "Wrapper is missing a VASTAdTagURI", element_tag="Wrapper"
            )
        return ad

    def _parse_ad_body(self, body: etree._Element, ad: Ad) -> None:
        for child in iter_children(body):
            name = local_name(child)
            if name == "AdSystem":
                ad.ad_system = AdSystem(name=element_text(child), version=child.get("version"))
            elif name == "AdTitle":
                ad.title = element_text(child)
            elif name == "Impression":
                url = element_text(child)
                if url:
                    ad.impressions.append(Impression(url=url, id=child.get("id")))
            elif name == "Error":
                url = element_text(child)
                if url:
                    ad.errors.append(url)
            elif name == "Creatives":
                ad.creatives = [
                    self._parse_creative(c)
                    for c in iter_children(child)
                    if local_name(c) == "Creative"
                ]
            elif name == "Extensions":
                ad.extensions = [to_fragment(c) for c in iter_children(child)]
            elif isinstance(ad, Wrapper) and name == "VASTAdTagURI":
                ad.ad_tag_uri = element_text(child)
            elif isinstance(ad, InLine) and name == "Description":
                ad.description = element_text(child)
            elif isinstance(ad, InLine) and name == "Advertiser":
                ad.advertiser = element_text(child)
            elif isinstance(ad, InLine) and name == "Survey":
                ad.survey = element_text(child)
            elif isinstance(ad, InLine) and name == "Pricing":
                ad.pricing = Pricing(
                    value=element_text(child),
                    model=child.get("model"),
                    currency=child.get("currency"),
                )
            else:
                ad.extra.append(to_fragment(child))

    def _parse_creative(self, elem: etree._Element) -> Creative:
        creative = Creative(
            id=elem.get("id"),
            sequence=self._parse_int(elem, "sequence"),
            ad_id=elem.get("adId") or elem.get("AdID"),
            api_framework=elem.get("apiFramework"),
        )
        for child in iter_children(elem):
            name = local_name(child)
            if name == "Linear":
                creative.linear = self._parse_linear(child)
            elif name == "CompanionAds":
                creative.companion_ads = CompanionAds(
                    attributes=dict(child.attrib),
                    companions=[
                        self._parse_companion(c)
                        for c in iter_children(child)
                        if local_name(c) == "Companion"
                    ],
                )
            elif name == "NonLinearAds":
                creative.non_linear_ads = self._parse_non_linear_ads(child)
            else:
                creative.extra.append(to_fragment(child))
        return creative

    def _parse_linear(self, elem: etree._Element) -> Linear:
        linear = Linear(skipoffset=elem.get("skipoffset"))
        for child in iter_children(elem):
            name = local_name(child)
            if name == "Duration":
                linear.duration = element_text(child)
            elif name == "MediaFiles":
                for media in iter_children(child):
                    if local_name(media) == "MediaFile":
                        url = element_text(media)
                        if url:
                            linear.media_files.append(
                                MediaFile(url=url, attributes=dict(media.attrib))
                            )
                    else:
                        linear.media_files_extra.append(to_fragment(media))
            elif name == "VideoClicks":
                linear.video_clicks = self._parse_video_clicks(child)
            elif name == "TrackingEvents":
                linear.tracking_events = self._parse_tracking_events(child)
            else:
                linear.extra.append(to_fragment(child))
        return linear

    def _parse_video_clicks(self, elem: etree._Element) -> VideoClicks:
        clicks = VideoClicks()
        for child in iter_children(elem):
            url = element_text(child)
            if not url:
                continue
            click = ClickUri(url=url, id=child.get("id"))
            name = local_name(child)
            if name == "ClickThrough":
                clicks.click_through = click
            elif name == "ClickTracking":
                clicks.click_tracking.append(click)
            elif name == "CustomClick":
                clicks.custom_click.append(click)
        return clicks

    def _parse_tracking_events(self, elem: etree._Element) -> list[TrackingEvent]:
        events = []
        for child in iter_children(elem):
            if local_name(child) != "Tracking":
                continue
            uri = element_text(child)
            if not uri:
                continue
            events.append(
                TrackingEvent(event=child.get("event", ""), uri=uri, offset=child.get("offset"))
            )
        return events

    def _parse_companion(self, elem: etree._Element) -> Companion:
        companion = Companion(attributes=dict(elem.attrib))
        for child in iter_children(elem):
            if local_name(child) == "TrackingEvents":
                companion.tracking_events = self._parse_tracking_events(child)
            else:
                companion.extra.append(to_fragment(child))
        return companion

    def _parse_non_linear_ads(self, elem: etree._Element) -> NonLinearAds:
        non_linear_ads = NonLinearAds()
        for child in iter_children(elem):
            if local_name(child) == "TrackingEvents":
                non_linear_ads.tracking_events = self._parse_tracking_events(child)
            else:
                non_linear_ads.non_linears.append(to_fragment(child))
        return non_linear_ads

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "VastParser":
        """Create parser from configuration dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            VastParser: Configured parser instance
        """
        return cls(config=VastParserConfig(**config))


__all__ = ["VastParser", "local_name", "iter_children", "element_text", "parse_bool"]
