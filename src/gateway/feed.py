"""File-backed status feed.

Reads the JSON documents the bot writes for its dashboard (the same shape
as its ``/api/status`` and ``/api/settings`` responses) from disk.
"""
from __future__ import annotations
import asyncio
import logging
import os
from typing import Optional

from gateway.base import (
    FeedUnavailable, SettingsPayload, StatusFeed, StatusPayload,
    decode_settings, decode_status,
)

log = logging.getLogger(__name__)


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


class StatusFileFeed(StatusFeed):
    def __init__(self, status_path: str, settings_path: Optional[str] = None):
        self.status_path = status_path
        self.settings_path = settings_path

    async def _load(self, path: str) -> bytes:
        try:
            return await asyncio.to_thread(_read_bytes, path)
        except OSError as e:
            raise FeedUnavailable(f"cannot read {path}: {e}") from e

    async def fetch_status(self) -> StatusPayload:
        return decode_status(await self._load(self.status_path))

    async def fetch_settings(self) -> SettingsPayload:
        if not self.settings_path or not os.path.exists(self.settings_path):
            log.debug("No settings file, initial balance stays at config value")
            return SettingsPayload()
        return decode_settings(await self._load(self.settings_path))
