"""Event-facing webhook helpers.

Pull the signature and body out of an inbound request event, optionally
enforce event freshness, and hand off to the selected verifier.

Usage:
    from hookseal.webhooks import verify_event

    verify_event("sha256Verifier", event=event, secret="my-webhook-secret")
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from hookseal.core.config import get_settings
from hookseal.webhooks.errors import WebhookVerificationError
from hookseal.webhooks.options import DEFAULT_WEBHOOK_SIGNATURE_HEADER, VerifyOptions
from hookseal.webhooks.verifier import VerifierType
from hookseal.webhooks.verifiers import create_verifier

logger = structlog.get_logger()


@dataclass(frozen=True)
class WebhookEvent:
    """The parts of an inbound request a verifier needs."""

    headers: Mapping[str, str] = field(default_factory=dict)
    """Request headers."""

    body: str | bytes | None = None
    """Raw request body."""

    is_base64_encoded: bool = False
    """Whether ``body`` is base64 encoded (API Gateway style)."""

    @classmethod
    def from_mapping(cls, event: Mapping[str, Any]) -> WebhookEvent:
        """Build an event from an API-Gateway-shaped dictionary."""
        return cls(
            headers=event.get("headers") or {},
            body=event.get("body"),
            is_base64_encoded=bool(event.get("isBase64Encoded", False)),
        )

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def decoded_body(self) -> str:
        """Return the body as text, decoding base64 when flagged."""
        body = self.body or ""
        if self.is_base64_encoded:
            return base64.b64decode(body).decode("utf-8")
        if isinstance(body, bytes):
            return body.decode("utf-8")
        return body


def _as_event(event: WebhookEvent | Mapping[str, Any]) -> WebhookEvent:
    if isinstance(event, WebhookEvent):
        return event
    return WebhookEvent.from_mapping(event)


def _resolve(secret: str | None, options: VerifyOptions | None) -> tuple[str, VerifyOptions]:
    if secret is not None and options is not None:
        return secret, options

    settings = get_settings()
    return (
        secret if secret is not None else settings.secret,
        options if options is not None else VerifyOptions.from_settings(settings),
    )


def signature_from_event(
    event: WebhookEvent | Mapping[str, Any],
    signature_header: str = DEFAULT_WEBHOOK_SIGNATURE_HEADER,
) -> str | None:
    """Extract the signature header from an event.

    Args:
        event: The inbound event.
        signature_header: Header name, matched case-insensitively.

    Returns:
        The header value, or None if it is absent.
    """
    return _as_event(event).header(signature_header)


def verify_event(
    verifier_type: VerifierType | str,
    *,
    event: WebhookEvent | Mapping[str, Any],
    payload: Any = None,
    secret: str | None = None,
    options: VerifyOptions | None = None,
) -> bool:
    """Verify that an event carries a valid webhook signature.

    Args:
        verifier_type: Verifier to use.
        event: The inbound event supplying the signature header and body.
        payload: Verified instead of the event body when given.
        secret: Shared secret; defaults to the configured ``WEBHOOK_SECRET``.
        options: Header name, transformer, timestamp and tolerance options.

    Returns:
        True if the signature is verified.

    Raises:
        WebhookVerificationError: If verification fails.
        ValueError: If the verifier type is not supported.
    """
    secret, options = _resolve(secret, options)
    webhook_event = _as_event(event)

    if payload is not None:
        body = payload
    else:
        try:
            body = webhook_event.decoded_body()
        except ValueError as e:
            raise WebhookVerificationError(f"Unable to decode event body: {e}") from e

    signature = signature_from_event(webhook_event, options.signature_header)
    if options.signature_transformer:
        try:
            signature = options.signature_transformer(signature)
        except Exception as e:
            raise WebhookVerificationError(f"Unable to transform webhook signature: {e}") from e

    if options.event_timestamp is not None and not options.within_tolerance(options.event_timestamp):
        logger.debug(
            "Webhook event outside tolerance window",
            event_timestamp=options.event_timestamp,
            tolerance=options.tolerance,
        )
        raise WebhookVerificationError()

    verifier = create_verifier(verifier_type, options)
    return verifier.verify(payload=body, secret=secret, signature=signature)


def verify_signature(
    verifier_type: VerifierType | str,
    *,
    payload: Any,
    signature: str | None,
    secret: str | None = None,
    options: VerifyOptions | None = None,
) -> bool:
    """Verify a signature given the raw pieces.

    Raises:
        WebhookVerificationError: If verification fails.
        ValueError: If the verifier type is not supported.
    """
    secret, options = _resolve(secret, options)
    verifier = create_verifier(verifier_type, options)
    return verifier.verify(payload=payload, secret=secret, signature=signature)


def sign_payload(
    verifier_type: VerifierType | str,
    *,
    payload: Any,
    secret: str | None = None,
    options: VerifyOptions | None = None,
) -> str:
    """Sign a payload with the given verifier type.

    Raises:
        WebhookSignError: If the payload cannot be signed.
        ValueError: If the verifier type is not supported.
    """
    secret, options = _resolve(secret, options)
    verifier = create_verifier(verifier_type, options)
    return verifier.sign(payload=payload, secret=secret)
