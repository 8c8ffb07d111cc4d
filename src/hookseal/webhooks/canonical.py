"""Payload canonicalization.

Signer and verifier must hash identical bytes. Strings are used as-is;
anything else is serialized to compact JSON and every ``\\uXXXX`` escape is
rewritten with upper-case hex digits, since JSON encoders disagree on the
case they emit.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any

# A literal backslash is encoded as "\\\\"; matching it first keeps the
# following "u" from being mistaken for an escape.
_ESCAPE_RE = re.compile(r"\\\\|\\u([0-9a-fA-F]{4})")


def _dumps(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=True)


def _upper_escape(match: re.Match[str]) -> str:
    if match.group(1) is None:
        return match.group(0)
    return "\\u" + match.group(1).upper()


def normalize_unicode_escapes(text: str) -> str:
    """Upper-case the hex digits of every ``\\uXXXX`` escape in ``text``."""
    return _ESCAPE_RE.sub(_upper_escape, text)


def canonicalize_payload(
    payload: Any,
    dumps: Callable[[Any], str] | None = None,
) -> str:
    """Return the exact text that gets signed for ``payload``.

    Args:
        payload: A string, UTF-8 bytes, or any JSON-serializable value.
        dumps: Alternative JSON encoder. Its output is case-normalized the
            same way as the default encoder's.

    Returns:
        The canonical string.

    Raises:
        TypeError: If ``payload`` is not JSON-serializable.
        UnicodeDecodeError: If ``payload`` is bytes that are not UTF-8.
    """
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode("utf-8")

    encoded = (dumps or _dumps)(payload)
    return normalize_unicode_escapes(encoded)
