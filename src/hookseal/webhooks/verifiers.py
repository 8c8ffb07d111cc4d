"""Webhook verifier implementations.

Supported Verifiers:
- skip: Accepts everything (public webhooks)
- secretKey: Shared secret sent as the signature itself
- sha1 / sha256: ``<algo>=<hex HMAC>`` with the raw secret as key
- base64Sha1 / base64Sha256: base64 HMAC with a base64-encoded secret
- timestampScheme: ``t=<epoch-ms>,v1=<hex HMAC-SHA256 of "t.payload">``
- jwt: HS256 compact JWT

Usage:
    from hookseal.webhooks.verifiers import create_verifier

    verifier = create_verifier("sha256Verifier")
    verifier.verify(payload=body, secret=secret, signature=header_value)
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any

import structlog
from authlib.jose import JsonWebSignature, JsonWebToken, JWTClaims
from authlib.jose.errors import InvalidClaimError, JoseError

from hookseal.webhooks.canonical import canonicalize_payload
from hookseal.webhooks.errors import WebhookSignError
from hookseal.webhooks.options import VerifyOptions, now_ms
from hookseal.webhooks.verifier import (
    Verifier,
    VerifierType,
    compute_hmac,
    constant_time_compare,
    parse_timestamp_signature,
)

logger = structlog.get_logger()

JWT_ALGORITHM = "HS256"
JWT_VERIFY_ALGORITHMS = ["HS256", "HS384", "HS512"]


class SkipVerifier(Verifier):
    """No signature required; every payload verifies."""

    type = VerifierType.SKIP

    def sign(self, payload: Any, secret: str) -> str:
        return ""

    def verify(self, payload: Any, secret: str, signature: str | None) -> bool:
        return True


class SecretKeyVerifier(Verifier):
    """The signature is the shared secret itself.

    Senders put the secret in the signature header verbatim, so this is a
    bearer-token check rather than a cryptographic signature.
    """

    type = VerifierType.SECRET_KEY

    def sign(self, payload: Any, secret: str) -> str:
        return secret

    def verify(self, payload: Any, secret: str, signature: str | None) -> bool:
        if signature != secret:
            raise self._rejected("secret mismatch")
        return True


class HmacHexVerifier(Verifier):
    """HMAC over the canonical payload, sent as ``<algorithm>=<hexdigest>``.

    The secret is used as the HMAC key without decoding. On verify the
    algorithm is read from the signature prefix.
    """

    algorithm: str

    def _signature(self, algorithm: str, payload: Any, secret: str) -> str:
        digest = compute_hmac(algorithm, secret.encode("utf-8"), canonicalize_payload(payload))
        return f"{algorithm}={digest.hex()}"

    def sign(self, payload: Any, secret: str) -> str:
        try:
            return self._signature(self.algorithm, payload, secret)
        except (AttributeError, TypeError, ValueError) as e:
            raise self._sign_failed(f"Unable to sign webhook payload: {e}") from e

    def verify(self, payload: Any, secret: str, signature: str | None) -> bool:
        try:
            algorithm = signature.split("=")[0]
            expected = self._signature(algorithm, payload, secret).encode("utf-8")
            provided = signature.encode("utf-8")
        except (AttributeError, TypeError, ValueError) as e:
            raise self._rejected(
                str(e),
                f"Unable to verify webhook signature: {e}",
            ) from e

        if len(provided) != len(expected):
            raise self._rejected(
                "length mismatch",
                "Unable to verify webhook signature: signature length mismatch",
            )
        if not constant_time_compare(expected, provided):
            raise self._rejected(
                "digest mismatch",
                "Unable to verify webhook signature: signature mismatch",
            )
        return True


class Sha1Verifier(HmacHexVerifier):
    """``sha1=<hex>`` signatures (GitHub legacy style)."""

    type = VerifierType.SHA1
    algorithm = "sha1"


class Sha256Verifier(HmacHexVerifier):
    """``sha256=<hex>`` signatures."""

    type = VerifierType.SHA256
    algorithm = "sha256"


class HmacBase64Verifier(Verifier):
    """HMAC with a base64-encoded secret, sent as a bare base64 digest."""

    algorithm: str

    def _digest(self, payload: Any, secret: str) -> bytes:
        key = base64.b64decode(secret)
        return compute_hmac(self.algorithm, key, canonicalize_payload(payload))

    def sign(self, payload: Any, secret: str) -> str:
        try:
            digest = self._digest(payload, secret)
        except (TypeError, ValueError) as e:
            raise self._sign_failed(f"Unable to sign webhook payload: {e}") from e
        return base64.b64encode(digest).decode("ascii")

    def verify(self, payload: Any, secret: str, signature: str | None) -> bool:
        try:
            expected = self._digest(payload, secret)
            provided = base64.b64decode(signature, validate=True)
        except (binascii.Error, TypeError, ValueError) as e:
            raise self._rejected(
                str(e),
                f"Unable to verify webhook signature: {e}",
            ) from e

        # Reject non-canonical encodings (stray padding bits decode to the
        # same bytes).
        if base64.b64encode(provided).decode("ascii") != signature:
            raise self._rejected(
                "non-canonical base64",
                "Unable to verify webhook signature: malformed signature",
            )
        if not constant_time_compare(expected, provided):
            raise self._rejected(
                "digest mismatch",
                "Unable to verify webhook signature: signature mismatch",
            )
        return True


class Base64Sha1Verifier(HmacBase64Verifier):
    """Base64 HMAC-SHA1 (e.g. Twilio style)."""

    type = VerifierType.BASE64_SHA1
    algorithm = "sha1"


class Base64Sha256Verifier(HmacBase64Verifier):
    """Base64 HMAC-SHA256 (e.g. Svix / Shopify style)."""

    type = VerifierType.BASE64_SHA256
    algorithm = "sha256"


class TimestampSchemeVerifier(Verifier):
    """Stripe-style ``t=<timestamp>,v1=<signature>`` scheme.

    The signed string is ``"<timestamp>.<payload>"`` with the timestamp in
    epoch milliseconds. Because the timestamp is part of the signed string,
    it cannot be changed without invalidating the signature; signatures
    older than the tolerance window are rejected before the HMAC is checked.
    """

    type = VerifierType.TIMESTAMP_SCHEME

    @staticmethod
    def _hexdigest(timestamp: int, payload: Any, secret: str) -> str:
        message = f"{timestamp}.{canonicalize_payload(payload)}"
        return compute_hmac("sha256", secret.encode("utf-8"), message).hex()

    def sign(self, payload: Any, secret: str) -> str:
        if not secret:
            raise self._sign_failed("Cannot sign webhook payload with an empty secret")

        timestamp = self.options.timestamp if self.options.timestamp is not None else now_ms()
        try:
            digest = self._hexdigest(timestamp, payload, secret)
        except (TypeError, ValueError) as e:
            raise self._sign_failed(f"Unable to sign webhook payload: {e}") from e
        return f"t={timestamp},v1={digest}"

    def verify(self, payload: Any, secret: str, signature: str | None) -> bool:
        parsed = parse_timestamp_signature(signature)
        if not parsed:
            raise self._rejected("invalid format")

        signed_timestamp, provided = parsed
        if not self.options.within_tolerance(signed_timestamp):
            raise self._rejected("timestamp outside tolerance")

        if not secret:
            raise self._rejected("empty secret")

        try:
            expected = self._hexdigest(signed_timestamp, payload, secret)
        except (TypeError, ValueError) as e:
            raise self._rejected(str(e)) from e

        if expected != provided:
            raise self._rejected("digest mismatch")
        return True


class JwtVerifier(Verifier):
    """HMAC JSON Web Token signatures.

    Tokens are signed with HS256; HS384 and HS512 tokens from other senders
    also verify. Object payloads become JWT claims (with ``iat`` and the
    optional ``iss``). Any other payload is signed as the raw JWS body.
    Verification checks the token against the secret only; the token body
    is not compared with the request payload. Registered time claims are
    checked against the wall clock, not ``current_timestamp_override``.
    """

    type = VerifierType.JWT

    def __init__(self, options: VerifyOptions | None = None) -> None:
        super().__init__(options)
        self._jws = JsonWebSignature(algorithms=[JWT_ALGORITHM])
        self._jwt = JsonWebToken(algorithms=[JWT_ALGORITHM])
        self._verifying_jws = JsonWebSignature(algorithms=JWT_VERIFY_ALGORITHMS)

    def sign(self, payload: Any, secret: str) -> str:
        if not secret:
            raise self._sign_failed("Cannot sign webhook payload with an empty secret")

        header = {"alg": JWT_ALGORITHM}
        try:
            if isinstance(payload, Mapping):
                claims = dict(payload)
                claims.setdefault("iat", now_ms() // 1000)
                if self.options.issuer:
                    claims["iss"] = self.options.issuer
                token = self._jwt.encode(header, claims, secret, check=False)
            else:
                if self.options.issuer:
                    raise WebhookSignError("An issuer can only be set on an object payload")
                token = self._jws.serialize_compact(header, canonicalize_payload(payload), secret)
        except (JoseError, TypeError, ValueError) as e:
            raise self._sign_failed(f"Unable to sign webhook payload: {e}") from e

        return token.decode("ascii")

    def verify(self, payload: Any, secret: str, signature: str | None) -> bool:
        if not payload:
            logger.warning("Verifying a JWT webhook signature without a payload")

        if not signature or not secret:
            raise self._rejected("missing signature or secret")

        try:
            jws = self._verifying_jws.deserialize_compact(signature, secret)
            self._validate_claims(jws.payload, jws.header)
        except (JoseError, TypeError, ValueError) as e:
            raise self._rejected(str(e)) from e
        return True

    def _validate_claims(self, body: bytes, header: dict[str, Any]) -> None:
        try:
            claims = json.loads(body)
        except ValueError:
            claims = None

        issuer = self.options.issuer
        if not isinstance(claims, dict):
            if issuer:
                raise InvalidClaimError("iss")
            return

        claims_options = {"iss": {"essential": True, "value": issuer}} if issuer else {}
        JWTClaims(claims, header, options=claims_options).validate()


# Verifier registry
VERIFIERS: dict[VerifierType, type[Verifier]] = {
    VerifierType.SKIP: SkipVerifier,
    VerifierType.SECRET_KEY: SecretKeyVerifier,
    VerifierType.SHA1: Sha1Verifier,
    VerifierType.SHA256: Sha256Verifier,
    VerifierType.BASE64_SHA1: Base64Sha1Verifier,
    VerifierType.BASE64_SHA256: Base64Sha256Verifier,
    VerifierType.TIMESTAMP_SCHEME: TimestampSchemeVerifier,
    VerifierType.JWT: JwtVerifier,
}

_unregistered = set(VerifierType) - VERIFIERS.keys()
if _unregistered:  # pragma: no cover
    raise RuntimeError(f"Verifier types without an implementation: {sorted(t.value for t in _unregistered)}")


def create_verifier(
    verifier_type: VerifierType | str,
    options: VerifyOptions | None = None,
) -> Verifier:
    """Create a verifier by type.

    Args:
        verifier_type: A :class:`VerifierType`, its registry name
            (``sha256Verifier``) or its short tag (``sha256``).
        options: Options captured by the verifier.

    Returns:
        Configured Verifier instance.

    Raises:
        ValueError: If the verifier type is not supported.
    """
    verifier_class = VERIFIERS[VerifierType.parse(verifier_type)]
    return verifier_class(options)
