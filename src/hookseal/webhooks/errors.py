"""Webhook error types.

Every verify path ends in either ``True`` or a raised
:class:`WebhookVerificationError`; a falsy return is never used to signal
failure. Signing failures raise :class:`WebhookSignError`.
"""

from __future__ import annotations

DEFAULT_VERIFICATION_MESSAGE = "You don't have access to invoke this function."
DEFAULT_SIGN_MESSAGE = "Unable to sign webhook payload."


class WebhookError(Exception):
    """Base class for webhook signing and verification failures."""

    default_message = "Webhook error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class WebhookVerificationError(WebhookError):
    """Signature absent, malformed, mismatched or stale."""

    default_message = DEFAULT_VERIFICATION_MESSAGE


class WebhookSignError(WebhookError):
    """A signature could not be produced."""

    default_message = DEFAULT_SIGN_MESSAGE
