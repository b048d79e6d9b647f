"""VAST event type constants."""

from enum import Enum


class VastEvents(str, Enum):
    """Event type constants for structured logging."""

    # Parser events
    PARSE_STARTED = "vast.parse.started"
    PARSE_COMPLETED = "vast.parse.completed"
    PARSE_FAILED = "vast.parse.failed"

    # Serializer events
    SERIALIZE_COMPLETED = "vast.serialize.completed"

    # Fetch events
    FETCH_STARTED = "vast.fetch.started"
    FETCH_COMPLETED = "vast.fetch.completed"
    FETCH_FAILED = "vast.fetch.failed"

    # Chain resolution events
    CHAIN_STARTED = "vast.chain.started"
    CHAIN_LINK_RESOLVED = "vast.chain.link_resolved"
    CHAIN_COMPLETED = "vast.chain.completed"
    CHAIN_FAILED = "vast.chain.failed"

    # Stitch events
    STITCH_STARTED = "vast.stitch.started"
    STITCH_COMPLETED = "vast.stitch.completed"
    STITCH_FAILED = "vast.stitch.failed"


__all__ = ["VastEvents"]
