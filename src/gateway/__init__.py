"""Gateway package — status feed adapters.

Re-exports the abstract feed, payload types and decoders so consumers can
write::

    from gateway import StatusFeed, StatusFileFeed, FeedUnavailable
"""
from gateway.base import (
    FeedUnavailable,
    SettingsPayload,
    StatusFeed,
    StatusPayload,
    decode_settings,
    decode_status,
)
from gateway.feed import StatusFileFeed

__all__ = [
    "FeedUnavailable",
    "SettingsPayload",
    "StatusFeed",
    "StatusPayload",
    "StatusFileFeed",
    "decode_settings",
    "decode_status",
]
