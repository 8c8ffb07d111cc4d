"""Hookseal Webhook Signature Module.

Signs and verifies inbound webhook payloads using several mutually
incompatible schemes behind one interface.

Supported Verifiers:
- skipVerifier: No verification (public webhooks)
- secretKeyVerifier: Shared secret sent verbatim
- sha1Verifier / sha256Verifier: ``sha256=<hex>`` HMAC signatures
- base64Sha1Verifier / base64Sha256Verifier: base64 HMAC, base64 secret
- timestampSchemeVerifier: ``t=<ms>,v1=<hex>`` with replay protection
- jwtVerifier: HS256 JSON Web Tokens

Security Features:
- Constant-time comparison of HMAC digests
- Timestamp tolerance windows (default 5 minutes)
- Payload canonicalization shared by signer and verifier

Usage:
    from hookseal.webhooks import sign_payload, verify_event

    signature = sign_payload("sha256Verifier", payload=body, secret="secret")

    # Raises WebhookVerificationError on failure
    verify_event("sha256Verifier", event=event, secret="secret")
"""

from hookseal.webhooks.canonical import canonicalize_payload
from hookseal.webhooks.errors import (
    WebhookError,
    WebhookSignError,
    WebhookVerificationError,
)
from hookseal.webhooks.events import (
    WebhookEvent,
    sign_payload,
    signature_from_event,
    verify_event,
    verify_signature,
)
from hookseal.webhooks.options import (
    DEFAULT_TOLERANCE,
    DEFAULT_WEBHOOK_SIGNATURE_HEADER,
    VerifyOptions,
)
from hookseal.webhooks.verifier import Verifier, VerifierType
from hookseal.webhooks.verifiers import (
    VERIFIERS,
    Base64Sha1Verifier,
    Base64Sha256Verifier,
    JwtVerifier,
    SecretKeyVerifier,
    Sha1Verifier,
    Sha256Verifier,
    SkipVerifier,
    TimestampSchemeVerifier,
    create_verifier,
)

__all__ = [
    # Base classes
    "Verifier",
    "VerifierType",
    "VerifyOptions",
    # Errors
    "WebhookError",
    "WebhookSignError",
    "WebhookVerificationError",
    # Verifiers
    "SkipVerifier",
    "SecretKeyVerifier",
    "Sha1Verifier",
    "Sha256Verifier",
    "Base64Sha1Verifier",
    "Base64Sha256Verifier",
    "TimestampSchemeVerifier",
    "JwtVerifier",
    # Registry
    "VERIFIERS",
    "create_verifier",
    # Events
    "WebhookEvent",
    "signature_from_event",
    "verify_event",
    "verify_signature",
    "sign_payload",
    # Utilities
    "canonicalize_payload",
    "DEFAULT_TOLERANCE",
    "DEFAULT_WEBHOOK_SIGNATURE_HEADER",
]
