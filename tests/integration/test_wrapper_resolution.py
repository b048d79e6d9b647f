"""Integration tests for wrapper chain resolution and stitching.

Runs the sample documents in ``tests/samples`` through the full
fetch -> parse -> resolve -> stitch workflow:
- sample_wrapper_nested.xml -> sample_wrapper.xml -> sample_vast.xml
- sample_wrapper_circular.xml points at itself
"""

import httpx
import pytest

from vast_stitch.config import ResolverConfig
from vast_stitch.exceptions import VastCircularReferenceError, VastFetchError, VastMaxDepthExceededError
from vast_stitch.fetchers import FileFetcher, HttpFetcher, LocationFetcher
from vast_stitch.models import InLine, Wrapper
from vast_stitch.resolver import ChainResolver
from vast_stitch.stitcher import Stitcher


pytestmark = pytest.mark.integration


@pytest.fixture
def resolver(file_fetcher) -> ChainResolver:
    return ChainResolver(file_fetcher)


class TestSampleChains:
    @pytest.mark.asyncio
    async def test_nested_chain_resolves(self, resolver):
        links = await resolver.resolve("sample_wrapper_nested.xml")

        assert [link.location for link in links] == [
            "sample_wrapper_nested.xml",
            "sample_wrapper.xml",
            "sample_vast.xml",
        ]
        assert isinstance(links[0].ad, Wrapper)
        assert isinstance(links[1].ad, Wrapper)
        assert isinstance(links[2].ad, InLine)

    @pytest.mark.asyncio
    async def test_nested_chain_stitched(self, resolver):
        stitched = Stitcher().stitch(await resolver.resolve("sample_wrapper_nested.xml"))

        assert len(stitched.ads) == 1
        ad = stitched.ads[0]
        assert isinstance(ad, InLine)
        assert ad.id == "inline-ad-1"
        assert [i.url for i in ad.impressions] == [
            "https://nested.example.com/impression",
            "https://wrapper.example.com/impression-a",
            "https://wrapper.example.com/impression-b",
            "https://inline.example.com/impression",
        ]
        assert ad.errors == [
            "https://nested.example.com/error",
            "https://wrapper.example.com/error",
            "https://inline.example.com/error?code=[ERRORCODE]",
        ]

        creative = ad.creatives[0]
        assert creative.id == "creative-1"
        assert [t.uri for t in creative.linear.tracking_events] == [
            "https://nested.example.com/start",
            "https://inline.example.com/start",
            "https://inline.example.com/complete",
        ]
        assert [c.url for c in creative.linear.video_clicks.click_tracking] == [
            "https://nested.example.com/click",
            "https://inline.example.com/click",
        ]

        # sample_wrapper.xml has a creative without id, adId or sequence
        synthetic = ad.creatives[-1]
        assert synthetic.id == "wrapper-tracking"
        assert [(t.event, t.uri) for t in synthetic.linear.tracking_events] == [
            ("start", "https://wrapper.example.com/start"),
            ("firstQuartile", "https://wrapper.example.com/q1"),
        ]

    @pytest.mark.asyncio
    async def test_single_wrapper_impressions(self, resolver):
        stitched = Stitcher().stitch(await resolver.resolve("sample_wrapper.xml"))
        assert len(stitched.ads[0].impressions) == 3

    @pytest.mark.asyncio
    async def test_inline_sample_unchanged(self, resolver, vast_parser, load_sample):
        stitched = Stitcher().stitch(await resolver.resolve("sample_vast.xml"))
        assert stitched == vast_parser.parse(load_sample("sample_vast.xml"))

    @pytest.mark.asyncio
    async def test_circular_sample(self, resolver):
        with pytest.raises(VastCircularReferenceError) as exc_info:
            await resolver.resolve("sample_wrapper_circular.xml")

        assert exc_info.value.locations == ["sample_wrapper_circular.xml"] * 2

    @pytest.mark.asyncio
    async def test_depth_bound_on_samples(self, file_fetcher):
        resolver = ChainResolver(file_fetcher, ResolverConfig(max_depth=1))
        with pytest.raises(VastMaxDepthExceededError) as exc_info:
            await resolver.resolve("sample_wrapper_nested.xml")
        assert exc_info.value.locations == ["sample_wrapper_nested.xml", "sample_wrapper.xml"]

    @pytest.mark.asyncio
    async def test_absolute_and_uri_locations(self, samples_dir):
        resolver = ChainResolver(FileFetcher(base_dirs=[samples_dir]))
        start = (samples_dir / "sample_wrapper.xml").as_uri()

        links = await resolver.resolve(start)
        assert links[0].location == start
        assert links[-1].location == (samples_dir / "sample_vast.xml").as_uri()


class TestSamplesByPath:
    """Samples addressed by full path, with no base directories configured."""

    @pytest.mark.asyncio
    async def test_nested_chain_by_absolute_path(self, samples_dir):
        start = str(samples_dir / "sample_wrapper_nested.xml")
        links = await ChainResolver(FileFetcher()).resolve(start)

        assert [link.location for link in links] == [
            start,
            str(samples_dir / "sample_wrapper.xml"),
            str(samples_dir / "sample_vast.xml"),
        ]
        stitched = Stitcher().stitch(links)
        assert len(stitched.ads[0].impressions) == 4

    @pytest.mark.asyncio
    async def test_nested_chain_by_relative_path(self, samples_dir, monkeypatch):
        monkeypatch.chdir(samples_dir.parent.parent)
        links = await ChainResolver(FileFetcher()).resolve("tests/samples/sample_wrapper_nested.xml")
        assert links[-1].location == "tests/samples/sample_vast.xml"

    @pytest.mark.asyncio
    async def test_circular_by_absolute_path(self, samples_dir):
        start = str(samples_dir / "sample_wrapper_circular.xml")
        fetcher = FileFetcher()

        with pytest.raises(VastCircularReferenceError) as exc_info:
            await ChainResolver(fetcher).resolve(start)

        assert exc_info.value.locations == [start, start]


class TestHttpChain:
    @pytest.fixture
    def http_documents(self, wrapper_xml, inline_xml):
        return {
            "/outer": wrapper_xml("https://ads.example.com/inner", impressions=["https://outer/imp"]),
            "/inner": wrapper_xml("https://ads.example.com/inline", impressions=["https://inner/imp"]),
            "/inline": inline_xml(impressions=["https://inline/imp"]),
        }

    @pytest.mark.asyncio
    async def test_remote_chain(self, http_documents):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            content = http_documents.get(request.url.path)
            if content is None:
                return httpx.Response(404)
            return httpx.Response(200, content=content.encode("utf-8"))

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with LocationFetcher(http_fetcher=HttpFetcher(client=client)) as fetcher:
            links = await ChainResolver(fetcher).resolve("https://ads.example.com/outer")
            stitched = Stitcher().stitch(links)
        await client.aclose()

        assert requested == ["/outer", "/inner", "/inline"]
        assert [i.url for i in stitched.ads[0].impressions] == [
            "https://outer/imp",
            "https://inner/imp",
            "https://inline/imp",
        ]

    @pytest.mark.asyncio
    async def test_remote_failure_mid_chain(self, http_documents):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/inner":
                return httpx.Response(503)
            return httpx.Response(200, content=http_documents[request.url.path].encode("utf-8"))

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = LocationFetcher(http_fetcher=HttpFetcher(client=client))
        with pytest.raises(VastFetchError) as exc_info:
            await ChainResolver(fetcher).resolve("https://ads.example.com/outer")
        await client.aclose()

        assert exc_info.value.location == "https://ads.example.com/inner"
        assert exc_info.value.http_status == 503

    @pytest.mark.asyncio
    async def test_remote_wrapper_to_local_file(self, samples_dir, wrapper_xml):
        content = wrapper_xml((samples_dir / "sample_vast.xml").as_uri()).encode("utf-8")
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, content=content)))
        fetcher = LocationFetcher(http_fetcher=HttpFetcher(client=client))

        links = await ChainResolver(fetcher).resolve("https://ads.example.com/tag")
        await client.aclose()
        assert links[-1].ad.id == "inline-ad-1"
