"""Unit tests for the VAST document model."""

import pytest

from vast_stitch.models import (
    ChainLink,
    Companion,
    CompanionAds,
    Creative,
    InLine,
    Linear,
    NonLinearAds,
    TrackingEvent,
    VastDocument,
    VastVersion,
    Wrapper,
    is_inline,
    is_wrapper,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2.0", VastVersion.V2),
        ("3.0", VastVersion.V3),
        ("4", VastVersion.V4),
        ("4.2", VastVersion.V4),
        (" 4.1 ", VastVersion.V4),
        ("5.0", VastVersion.UNKNOWN),
        ("abc", VastVersion.UNKNOWN),
        ("", VastVersion.UNKNOWN),
        (None, VastVersion.UNKNOWN),
    ],
)
def test_version_from_string(raw, expected):
    assert VastVersion.from_string(raw) is expected


class TestAdVariants:
    def test_is_wrapper(self):
        assert is_wrapper(Wrapper(ad_tag_uri="next.xml"))
        assert not is_wrapper(InLine())
        assert is_inline(InLine())

    def test_non_ad_rejected(self):
        with pytest.raises(TypeError):
            is_wrapper(Creative())

    def test_wrapper_defaults(self):
        wrapper = Wrapper(ad_tag_uri="next.xml")
        assert wrapper.follow_additional_wrappers is True
        assert wrapper.allow_multiple_ads is False
        assert wrapper.impressions == []

    def test_opaque_fields_excluded_from_equality(self):
        assert InLine(extra=["<A/>"], extensions=["<Extension/>"]) == InLine()
        assert Creative(extra=["<UniversalAdId/>"]) == Creative()
        assert InLine(title="a") != InLine(title="b")


class TestCreative:
    def test_iter_tracking_events(self):
        creative = Creative(
            linear=Linear(tracking_events=[TrackingEvent("start", "https://x/l")]),
            companion_ads=CompanionAds(
                companions=[Companion(tracking_events=[TrackingEvent("creativeView", "https://x/c")])]
            ),
            non_linear_ads=NonLinearAds(tracking_events=[TrackingEvent("expand", "https://x/n")]),
        )
        assert [e.uri for e in creative.iter_tracking_events()] == [
            "https://x/l",
            "https://x/c",
            "https://x/n",
        ]

    def test_companion_id(self):
        assert Companion(attributes={"id": "banner"}).id == "banner"
        assert Companion().id is None


class TestDocument:
    def test_empty_document(self):
        document = VastDocument()
        assert document.is_empty
        assert document.primary_ad is None
        assert document.version is VastVersion.UNKNOWN

    def test_chain_link_ad(self):
        document = VastDocument(ads=[Wrapper(ad_tag_uri="a"), InLine(id="second")])
        link = ChainLink(location="loc", document=document, ad_index=1)
        assert link.ad.id == "second"

    def test_chain_link_is_frozen(self):
        link = ChainLink(location="loc", document=VastDocument())
        with pytest.raises(AttributeError):
            link.location = "other"
