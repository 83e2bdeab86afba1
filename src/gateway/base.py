"""Abstract status feed and normalized payload types.

The chart engine consumes a bot's status and settings documents through
this interface so it stays agnostic of where they come from.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

import orjson


class FeedUnavailable(Exception):
    """The status or settings document could not be fetched or decoded."""


RawDocument = Union[bytes, str, dict]


# ── Normalized payload types ──────────────────────────────────────────

@dataclass(slots=True)
class StatusPayload:
    balance: Optional[Any] = None
    balance_history: Optional[List[Any]] = None
    today_profit: float = 0.0
    raw: dict = field(default_factory=dict)


@dataclass(slots=True)
class SettingsPayload:
    balance: Optional[Any] = None  # initial deposit
    raw: dict = field(default_factory=dict)


def decode_document(raw: RawDocument) -> dict:
    if isinstance(raw, dict):
        return raw
    try:
        doc = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise FeedUnavailable(f"undecodable document: {e}") from e
    if not isinstance(doc, dict):
        raise FeedUnavailable(f"expected a JSON object, got {type(doc).__name__}")
    return doc


def decode_status(raw: RawDocument) -> StatusPayload:
    doc = decode_document(raw)
    history = doc.get("balanceHistory")
    if history is not None and not isinstance(history, list):
        history = None
    today_profit = doc.get("todayProfitUSDT") or 0.0
    if not isinstance(today_profit, (int, float)) or isinstance(today_profit, bool):
        today_profit = 0.0
    return StatusPayload(
        balance=doc.get("balance"),
        balance_history=history,
        today_profit=float(today_profit),
        raw=doc,
    )


def decode_settings(raw: RawDocument) -> SettingsPayload:
    doc = decode_document(raw)
    return SettingsPayload(balance=doc.get("balance"), raw=doc)


# ── Feed ABC ──────────────────────────────────────────────────────────

class StatusFeed(ABC):
    """Source of status and settings documents."""

    @abstractmethod
    async def fetch_status(self) -> StatusPayload:
        """Latest status. Raises FeedUnavailable on failure."""

    @abstractmethod
    async def fetch_settings(self) -> SettingsPayload:
        """Bot settings (initial deposit). Raises FeedUnavailable on failure."""

    async def close(self) -> None:
        return None
