"""Pytest configuration and shared fixtures for vast-stitch tests."""

from pathlib import Path

import pytest

from vast_stitch.config import FetcherConfig, VastParserConfig
from vast_stitch.exceptions import VastFetchError
from vast_stitch.fetchers import FileFetcher
from vast_stitch.log_config import clear_context
from vast_stitch.parser import VastParser
from vast_stitch.serializer import VastSerializer
from vast_stitch.settings import get_settings


# ==================== Path Fixtures ====================


@pytest.fixture(scope="session")
def tests_dir() -> Path:
    """Get tests directory path."""
    return Path(__file__).parent


@pytest.fixture(scope="session")
def samples_dir(tests_dir) -> Path:
    """Get VAST samples directory path."""
    return tests_dir / "samples"


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Isolate logging context and cached settings between tests."""
    clear_context()
    get_settings.cache_clear()
    yield
    clear_context()
    get_settings.cache_clear()


# ==================== VAST XML Builders ====================


def make_inline(
    impressions: list[str] | None = None,
    creative_id: str | None = "creative-1",
    tracking: list[tuple[str, str]] | None = None,
    version: str = "4.0",
    ad_id: str = "inline-ad",
) -> str:
    """Build an InLine VAST document."""
    if impressions is None:
        impressions = ["https://inline.example.com/impression"]
    if tracking is None:
        tracking = [("start", "https://inline.example.com/start")]

    impression_xml = "".join(f"<Impression><![CDATA[{url}]]></Impression>" for url in impressions)
    tracking_xml = "".join(
        f'<Tracking event="{event}"><![CDATA[{url}]]></Tracking>' for event, url in tracking
    )
    creative_attr = f' id="{creative_id}"' if creative_id else ""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<VAST version="{version}">
  <Ad id="{ad_id}">
    <InLine>
      <AdSystem>Inline Server</AdSystem>
      <AdTitle>Inline</AdTitle>
      {impression_xml}
      <Creatives>
        <Creative{creative_attr}>
          <Linear>
            <Duration>00:00:10</Duration>
            <MediaFiles>
              <MediaFile delivery="progressive" type="video/mp4"><![CDATA[https://media.example.com/a.mp4]]></MediaFile>
            </MediaFiles>
            <TrackingEvents>{tracking_xml}</TrackingEvents>
          </Linear>
        </Creative>
      </Creatives>
    </InLine>
  </Ad>
</VAST>"""


def make_wrapper(
    next_location: str,
    impressions: list[str] | None = None,
    errors: list[str] | None = None,
    follow_additional_wrappers: bool | None = None,
    allow_multiple_ads: bool | None = None,
    creatives_xml: str = "",
) -> str:
    """Build a Wrapper VAST document pointing at ``next_location``."""
    if impressions is None:
        impressions = [f"https://wrapper.example.com/impression?next={next_location}"]
    attributes = ""
    if follow_additional_wrappers is not None:
        attributes += f' followAdditionalWrappers="{str(follow_additional_wrappers).lower()}"'
    if allow_multiple_ads is not None:
        attributes += f' allowMultipleAds="{str(allow_multiple_ads).lower()}"'

    impression_xml = "".join(f"<Impression><![CDATA[{url}]]></Impression>" for url in impressions)
    error_xml = "".join(f"<Error><![CDATA[{url}]]></Error>" for url in errors or [])
    creatives = f"<Creatives>{creatives_xml}</Creatives>" if creatives_xml else ""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<VAST version="4.0">
  <Ad>
    <Wrapper{attributes}>
      <AdSystem>Wrapper Server</AdSystem>
      <VASTAdTagURI><![CDATA[{next_location}]]></VASTAdTagURI>
      {impression_xml}
      {error_xml}
      {creatives}
    </Wrapper>
  </Ad>
</VAST>"""


class InMemoryFetcher:
    """ContentFetcher serving documents from a dict and recording requests."""

    def __init__(self, documents: dict[str, str | bytes | Exception]):
        self.documents = documents
        self.requests: list[str] = []

    async def fetch(self, location: str) -> bytes:
        self.requests.append(location)
        if location not in self.documents:
            raise VastFetchError(f"Unknown location: {location}", location=location)
        content = self.documents[location]
        if isinstance(content, Exception):
            raise content
        if isinstance(content, str):
            return content.encode("utf-8")
        return content


# ==================== VAST XML Fixtures ====================


@pytest.fixture
def inline_xml():
    """Builder for InLine documents."""
    return make_inline


@pytest.fixture
def wrapper_xml():
    """Builder for Wrapper documents."""
    return make_wrapper


@pytest.fixture
def memory_fetcher():
    """Factory for in-memory fetchers: ``memory_fetcher({"loc": xml})``."""
    return InMemoryFetcher


@pytest.fixture
def minimal_vast_xml() -> str:
    """Minimal valid VAST 4.0 InLine document."""
    return make_inline()


@pytest.fixture
def malformed_vast_xml() -> str:
    """Malformed VAST XML for error handling tests."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<VAST version="4.0">
  <Ad id="malformed">
    <InLine>
      <AdSystem>Test System</AdSystem>
      <!-- Missing closing tag -->
      <AdTitle>Malformed Ad
    </InLine>
  </Ad>
"""


@pytest.fixture
def empty_vast_xml() -> str:
    """Empty VAST response (no ads)."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<VAST version="4.0"><Error><![CDATA[https://ads.example.com/noad]]></Error></VAST>"""


# ==================== Component Fixtures ====================


@pytest.fixture
def parser_config() -> VastParserConfig:
    return VastParserConfig()


@pytest.fixture
def vast_parser(parser_config: VastParserConfig) -> VastParser:
    """Create VAST parser instance."""
    return VastParser(config=parser_config)


@pytest.fixture
def vast_serializer() -> VastSerializer:
    return VastSerializer()


@pytest.fixture
def file_fetcher(samples_dir: Path) -> FileFetcher:
    """File fetcher resolving bare sample names against the samples directory."""
    return FileFetcher(base_dirs=[samples_dir])


@pytest.fixture
def fetcher_config(samples_dir: Path) -> FetcherConfig:
    return FetcherConfig(fetch_timeout=1.0, base_dirs=[samples_dir])


@pytest.fixture
def load_sample(samples_dir: Path):
    """Load a sample file from the samples directory."""

    def _load(filename: str) -> str:
        return (samples_dir / filename).read_text(encoding="utf-8")

    return _load
