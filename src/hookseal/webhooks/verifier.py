"""Webhook verifier base class and shared primitives.

A verifier signs and verifies one payload/secret/signature triple using a
single scheme. Verifiers are stateless apart from the options captured at
construction, so one instance may be shared between threads.

Usage:
    from hookseal.webhooks import VerifierType, create_verifier

    verifier = create_verifier(VerifierType.SHA256)
    signature = verifier.sign(payload=body, secret="my-webhook-secret")
    verifier.verify(payload=body, secret="my-webhook-secret", signature=signature)
"""

from __future__ import annotations

import hmac
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar

import structlog

from hookseal.webhooks.errors import WebhookSignError, WebhookVerificationError
from hookseal.webhooks.options import VerifyOptions

logger = structlog.get_logger()

TIMESTAMP_SIGNATURE_RE = re.compile(r"t=(\d+),v1=([\da-f]+)")


class VerifierType(Enum):
    """Supported verifier types, keyed by their registry name."""

    SKIP = "skipVerifier"
    SECRET_KEY = "secretKeyVerifier"
    SHA1 = "sha1Verifier"
    SHA256 = "sha256Verifier"
    BASE64_SHA1 = "base64Sha1Verifier"
    BASE64_SHA256 = "base64Sha256Verifier"
    TIMESTAMP_SCHEME = "timestampSchemeVerifier"
    JWT = "jwtVerifier"

    @property
    def tag(self) -> str:
        """Short name, e.g. ``sha256`` for ``sha256Verifier``."""
        return self.value.removesuffix("Verifier")

    @classmethod
    def parse(cls, name: VerifierType | str) -> VerifierType:
        """Resolve an enum member, registry name or short tag.

        Raises:
            ValueError: If ``name`` is not a supported verifier type.
        """
        if isinstance(name, cls):
            return name
        for member in cls:
            if name in (member.value, member.tag):
                return member
        raise ValueError(f"Unknown webhook verifier type: {name!r}")


class Verifier(ABC):
    """Base class for webhook verifiers.

    Subclasses implement one signing convention. ``verify`` returns ``True``
    or raises :class:`WebhookVerificationError`; it never returns ``False``.
    """

    type: ClassVar[VerifierType]

    def __init__(self, options: VerifyOptions | None = None) -> None:
        self.options = options or VerifyOptions()

    @abstractmethod
    def sign(self, payload: Any, secret: str) -> str:
        """Produce a signature for ``payload``.

        Raises:
            WebhookSignError: If a signature cannot be produced.
        """
        ...

    @abstractmethod
    def verify(self, payload: Any, secret: str, signature: str | None) -> bool:
        """Check ``signature`` against ``payload``.

        Raises:
            WebhookVerificationError: If the signature does not verify.
        """
        ...

    def _rejected(
        self,
        reason: str,
        message: str | None = None,
    ) -> WebhookVerificationError:
        logger.debug("Webhook signature rejected", verifier=self.type.value, reason=reason)
        return WebhookVerificationError(message)

    def _sign_failed(self, reason: str) -> WebhookSignError:
        logger.debug("Webhook signing failed", verifier=self.type.value, reason=reason)
        return WebhookSignError(reason)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type.value!r})"


def compute_hmac(algorithm: str, key: bytes, message: str) -> bytes:
    """Return the raw HMAC digest of ``message`` under ``key``.

    Args:
        algorithm: hashlib digest name, e.g. ``sha1`` or ``sha256``.
        key: The HMAC key bytes.
        message: Text to authenticate; encoded as UTF-8.

    Raises:
        ValueError: If ``algorithm`` is not a supported digest.
    """
    return hmac.new(key, message.encode("utf-8"), algorithm).digest()


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in constant time."""
    return hmac.compare_digest(a, b)


def parse_timestamp_signature(signature: str | None) -> tuple[int, str] | None:
    """Parse a ``t=<epoch-ms>,v1=<hex>`` signature.

    Returns:
        ``(timestamp, hexdigest)``, or None if the value does not match.
    """
    if not signature:
        return None

    match = TIMESTAMP_SIGNATURE_RE.search(signature)
    if not match:
        return None

    return int(match.group(1)), match.group(2)
