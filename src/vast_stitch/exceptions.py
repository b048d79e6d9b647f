"""VAST stitcher custom exception hierarchy.

Provides specific exception types for the failure modes of parsing,
wrapper-chain resolution and stitching. Every error carries enough context
(offending location, and for cycles the full location sequence) to diagnose
the failure without re-running it.

Exception Hierarchy:
    VastException (base)
    ├── VastParseError
    │   ├── VastMalformedXmlError
    │   └── VastInvalidError
    ├── VastChainError
    │   ├── VastFetchError
    │   ├── VastCircularReferenceError
    │   ├── VastMaxDepthExceededError
    │   ├── VastWrapperNotAllowedError
    │   └── VastNoAdError
    ├── VastStitchError
    │   └── VastNoInlineAdError
    └── VastConfigError
"""

from typing import Optional


class VastException(Exception):
    """Base exception for all VAST stitcher errors.

    Attributes:
        message: Human readable error message
        context: Context dictionary rendered into ``str()``
        vast_error_code: IAB VAST error code, when one applies
    """

    kind = "VastError"
    vast_error_code: Optional[int] = None

    def __init__(self, message: str, context: Optional[dict] = None):
        """Initialize VAST exception.

        Args:
            message: Error message
            context: Optional context dictionary for debugging
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation with context."""
        if self.context:
            context_str = "; ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# Parsing Errors

class VastParseError(VastException):
    """Base exception for VAST parsing errors.

    Attributes:
        location: Location the document was fetched from, if known
    """

    kind = "ParseError"

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if location:
            context["location"] = location
        super().__init__(message, context)
        self.location = location

    def with_location(self, location: str) -> "VastParseError":
        """Attach the location the failing document came from.

        Returns:
            The same exception, for ``raise err.with_location(loc) from ...``
        """
        self.location = location
        self.context["location"] = location
        return self


class VastMalformedXmlError(VastParseError):
    """Raised when the markup is not well-formed XML.

    Attributes:
        xml_preview: First 200 characters of the offending document
        parser_error: The underlying lxml parser error
    """

    kind = "MalformedXml"
    vast_error_code = 100

    def __init__(
        self,
        message: str,
        xml_preview: Optional[str] = None,
        parser_error: Optional[Exception] = None,
        location: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if xml_preview:
            context["xml_preview"] = xml_preview[:200]
        super().__init__(message, location=location, context=context)
        self.xml_preview = xml_preview
        self.parser_error = parser_error


class VastInvalidError(VastParseError):
    """Raised when well-formed XML lacks required VAST structure.

    Attributes:
        element_tag: Tag of the element missing required content
    """

    kind = "InvalidVast"
    vast_error_code = 101

    def __init__(
        self,
        message: str,
        element_tag: Optional[str] = None,
        location: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if element_tag:
            context["element_tag"] = element_tag
        super().__init__(message, location=location, context=context)
        self.element_tag = element_tag


# Chain Resolution Errors

class VastChainError(VastException):
    """Base exception for wrapper-chain resolution errors."""

    kind = "ChainError"


class VastFetchError(VastChainError):
    """Raised when a location cannot be fetched.

    Attributes:
        location: The unreachable location
        cause: The underlying exception, if any
        http_status: HTTP status code for remote locations
    """

    kind = "FetchFailed"
    vast_error_code = 301

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        cause: Optional[Exception] = None,
        http_status: Optional[int] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if location:
            context["location"] = location
        if http_status:
            context["http_status"] = http_status
        if cause is not None:
            context["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, context)
        self.location = location
        self.cause = cause
        self.http_status = http_status


class VastCircularReferenceError(VastChainError):
    """Raised when a location repeats within one wrapper chain.

    Attributes:
        locations: Every location visited, ending with the repeated one
    """

    kind = "CircularReference"

    def __init__(self, message: str, locations: list[str], context: Optional[dict] = None):
        if context is None:
            context = {}
        context["locations"] = " -> ".join(locations)
        super().__init__(message, context)
        self.locations = list(locations)

    @property
    def location(self) -> str:
        """The location that closed the cycle."""
        return self.locations[-1]


class VastMaxDepthExceededError(VastChainError):
    """Raised when a chain is longer than the configured bound.

    Attributes:
        max_depth: Configured maximum number of wrapper hops
        locations: Locations resolved before giving up
    """

    kind = "MaxDepthExceeded"
    vast_error_code = 302

    def __init__(
        self,
        message: str,
        max_depth: int,
        locations: list[str],
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        context["max_depth"] = max_depth
        context["locations"] = " -> ".join(locations)
        super().__init__(message, context)
        self.max_depth = max_depth
        self.locations = list(locations)

    @property
    def location(self) -> str:
        """The last wrapper location that could not be followed."""
        return self.locations[-1]


class VastWrapperNotAllowedError(VastChainError):
    """Raised when a wrapper forbids further wrappers and gets one anyway.

    Attributes:
        location: Location of the disallowed wrapper
        parent_location: Location of the wrapper that set followAdditionalWrappers
    """

    kind = "WrapperNotAllowed"
    vast_error_code = 302

    def __init__(
        self,
        message: str,
        location: str,
        parent_location: str,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        context["location"] = location
        context["parent_location"] = parent_location
        super().__init__(message, context)
        self.location = location
        self.parent_location = parent_location


class VastNoAdError(VastChainError):
    """Raised when a document in the chain contains no Ad.

    Attributes:
        location: Location of the empty response
        error_urls: Root-level Error URIs the empty document declared
    """

    kind = "NoAd"
    vast_error_code = 303

    def __init__(
        self,
        message: str,
        location: str,
        error_urls: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        context["location"] = location
        super().__init__(message, context)
        self.location = location
        self.error_urls = list(error_urls or [])


# Stitching Errors

class VastStitchError(VastException):
    """Raised when a chain cannot be stitched."""

    kind = "StitchError"


class VastNoInlineAdError(VastStitchError):
    """Raised when the chain does not terminate in an InLine ad.

    Attributes:
        location: Location of the terminal link, if the chain is non-empty
    """

    kind = "NoInlineAd"

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if location:
            context["location"] = location
        super().__init__(message, context)
        self.location = location


# Configuration Errors

class VastConfigError(VastException):
    """Raised when configuration validation fails.

    Attributes:
        config_key: Configuration key that failed validation
        config_value: The invalid configuration value
    """

    kind = "ConfigError"

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[object] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = str(config_value)[:100]
        super().__init__(message, context)
        self.config_key = config_key
        self.config_value = config_value


__all__ = [
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
