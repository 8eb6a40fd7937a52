"""PII (Personally Identifiable Information) utilities for safe logging."""

import hashlib
import hmac

from bill.core.config import settings


def hash_pii(value: str) -> str:
    """
    Hash a PII value (email address) for logs and span attributes.

    Uses HMAC-SHA256 keyed by PII_HASH_SECRET so common addresses cannot be
    recovered with a dictionary of plain SHA-256 digests. The same input
    always yields the same digest, which keeps log lines correlatable.

    Args:
        value: Email address to hash

    Returns:
        64-character lowercase hexadecimal digest

    Raises:
        ValueError: If PII_HASH_SECRET is empty
    """
    if not settings.PII_HASH_SECRET:
        msg = "PII_HASH_SECRET must be configured and non-empty"
        raise ValueError(msg)
    return hmac.new(settings.PII_HASH_SECRET.encode(), value.encode(), hashlib.sha256).hexdigest()
