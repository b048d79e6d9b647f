"""
VAST Stitch Package

Parses VAST (Video Ad Serving Template) documents, resolves chains of
Wrapper ads that redirect to other VAST documents, and stitches the chain
into a single InLine ad that carries every level's tracking.

This package provides:
- VastParser / VastSerializer: XML <-> typed document model
- ChainResolver: follows Wrapper -> VASTAdTagURI edges with cycle and depth guards
- Stitcher: merges wrapper impressions, errors and tracking into the InLine
- VastStitchClient: facade over fetching, resolution and stitching

Usage:
    from vast_stitch import VastStitchClient

    async with VastStitchClient.from_settings() as client:
        document = await client.stitch("https://ads.example.com/wrapper")
        xml = client.serialize(document, pretty=True)
"""

from .client import VastStitchClient
from .config import (
    FetcherConfig,
    ResolverConfig,
    SerializerConfig,
    StitcherConfig,
    VastParserConfig,
)
from .exceptions import (
    VastChainError,
    VastCircularReferenceError,
    VastConfigError,
    VastException,
    VastFetchError,
    VastInvalidError,
    VastMalformedXmlError,
    VastMaxDepthExceededError,
    VastNoAdError,
    VastNoInlineAdError,
    VastParseError,
    VastStitchError,
    VastWrapperNotAllowedError,
)
from .fetchers import ContentFetcher, FileFetcher, HttpFetcher, LocationFetcher
from .models import (
    Ad,
    ChainLink,
    Creative,
    InLine,
    StitchedDocument,
    TrackingEvent,
    VastDocument,
    VastVersion,
    Wrapper,
)
from .parser import VastParser
from .resolver import ChainResolver, resolve
from .serializer import VastSerializer
from .stitcher import Stitcher, stitch

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "VastStitchClient",
    "VastParser",
    "VastSerializer",
    "ChainResolver",
    "Stitcher",
    "resolve",
    "stitch",
    # Fetchers
    "ContentFetcher",
    "FileFetcher",
    "HttpFetcher",
    "LocationFetcher",
    # Document model
    "VastDocument",
    "VastVersion",
    "Ad",
    "InLine",
    "Wrapper",
    "Creative",
    "TrackingEvent",
    "ChainLink",
    "StitchedDocument",
    # Configuration
    "VastParserConfig",
    "FetcherConfig",
    "ResolverConfig",
    "StitcherConfig",
    "SerializerConfig",
    # Exceptions
    "VastException",
    "VastParseError",
    "VastMalformedXmlError",
    "VastInvalidError",
    "VastChainError",
    "VastFetchError",
    "VastCircularReferenceError",
    "VastMaxDepthExceededError",
    "VastWrapperNotAllowedError",
    "VastNoAdError",
    "VastStitchError",
    "VastNoInlineAdError",
    "VastConfigError",
]
