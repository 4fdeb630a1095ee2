# src/shared/security.py
"""
Webhook signatures (X-Hub-Signature-256).

The provider signs the exact request body bytes with HMAC SHA256 using the app
secret and sends ``sha256=<lowercase hex digest>``.
"""

import hashlib
import hmac
from typing import Optional, Union

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def _as_bytes(body: Union[bytes, str]) -> bytes:
    return body.encode("utf-8") if isinstance(body, str) else body


def compute_hub_signature(body: Union[bytes, str], secret: str) -> str:
    """
    Sign a raw body.

    Args:
        body: Exact bytes that go on the wire (a str is encoded as UTF-8)
        secret: Shared app secret

    Returns:
        Header value formatted ``sha256=<hex>``
    """
    digest = hmac.new(secret.encode("utf-8"), _as_bytes(body), hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_hub_signature(body: Union[bytes, str], secret: str, signature_header: Optional[str]) -> bool:
    """Constant-time check of an X-Hub-Signature-256 header against a raw body."""
    if not secret or not signature_header:
        return False
    if not signature_header.startswith(SIGNATURE_PREFIX):
        return False
    expected = compute_hub_signature(body, secret)
    return hmac.compare_digest(expected, signature_header)
