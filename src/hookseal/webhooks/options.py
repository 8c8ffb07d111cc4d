"""Per-call options shared by every verifier."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from hookseal.core.config import (
    DEFAULT_TOLERANCE,
    DEFAULT_WEBHOOK_SIGNATURE_HEADER,
    WebhookSettings,
)


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class VerifyOptions:
    """Options captured by a verifier when it is created.

    Every field has its default applied here, so verifiers never need to
    fall back to module constants themselves.
    """

    signature_header: str = DEFAULT_WEBHOOK_SIGNATURE_HEADER
    """Header carrying the signature (looked up case-insensitively)."""

    signature_transformer: Callable[[str | None], str | None] | None = None
    """Applied to the extracted signature before verification."""

    current_timestamp_override: int | None = None
    """Epoch ms used as "now" for tolerance checks."""

    event_timestamp: int | None = None
    """Epoch ms of the event; enables the freshness check in ``verify_event``."""

    tolerance: int = DEFAULT_TOLERANCE
    """Maximum allowed drift in ms."""

    timestamp: int | None = None
    """Epoch ms used by the timestamp scheme signer instead of now."""

    issuer: str | None = None
    """JWT ``iss`` claim to add when signing and require when verifying."""

    @classmethod
    def from_settings(cls, settings: WebhookSettings, **overrides: Any) -> VerifyOptions:
        """Build options from configured defaults."""
        options = cls(
            signature_header=settings.signature_header,
            tolerance=settings.tolerance,
        )
        return replace(options, **overrides) if overrides else options

    def current_timestamp(self) -> int:
        """Return the override when set, otherwise the wall clock."""
        if self.current_timestamp_override is not None:
            return self.current_timestamp_override
        return now_ms()

    def within_tolerance(self, timestamp: int) -> bool:
        """Whether ``timestamp`` is at most ``tolerance`` ms away from now."""
        return abs(self.current_timestamp() - timestamp) <= self.tolerance
