"""
VAST Stitcher Configuration Module

Provides configuration classes for the parser, content fetchers, chain
resolver, stitcher and serializer. Settings files and environment variables
are mapped onto these classes by ``settings.Settings``.
"""

from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import VastConfigError


DEFAULT_MAX_DEPTH = 5
DEFAULT_FETCH_TIMEOUT = 3.0


@dataclass
class VastParserConfig:
    """Configuration for VAST XML parsing."""

    # lxml recovery mode; off so that tag mismatches surface as MalformedXml
    recover_on_error: bool = False
    encoding: str = "utf-8"
    huge_tree: bool = False


@dataclass
class FetcherConfig:
    """
    Configuration for content fetchers.

    Attributes:
        fetch_timeout: Timeout for a single remote fetch (seconds)
        base_dirs: Directories searched for relative local paths
        headers: Extra HTTP headers sent with remote fetches
        verify_ssl: Verify TLS certificates of remote locations
        follow_redirects: Follow HTTP redirects

    Examples:
        >>> config = FetcherConfig(fetch_timeout=5.0, base_dirs=["samples"])
    """

    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    base_dirs: list[Path] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True
    follow_redirects: bool = True

    def __post_init__(self) -> None:
        if self.fetch_timeout <= 0:
            raise VastConfigError(
                "fetch_timeout must be positive",
                config_key="fetch_timeout",
                config_value=self.fetch_timeout,
            )
        self.base_dirs = [Path(d) for d in self.base_dirs]


@dataclass
class ResolverConfig:
    """
    Configuration for wrapper-chain resolution.

    Attributes:
        max_depth: Maximum number of wrapper hops followed before giving up.
            VAST 4 recommends players follow at least 5.
    """

    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise VastConfigError(
                "max_depth must not be negative",
                config_key="max_depth",
                config_value=self.max_depth,
            )


@dataclass
class StitcherConfig:
    """Configuration for stitching."""

    # Id of the creative collecting wrapper tracking no InLine creative matches
    synthetic_creative_id: str = "wrapper-tracking"


@dataclass
class SerializerConfig:
    """Configuration for VAST XML serialization."""

    pretty: bool = False
    xml_declaration: bool = True
    encoding: str = "UTF-8"


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_FETCH_TIMEOUT",
    "VastParserConfig",
    "FetcherConfig",
    "ResolverConfig",
    "StitcherConfig",
    "SerializerConfig",
]
