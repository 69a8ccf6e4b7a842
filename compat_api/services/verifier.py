"""Inbound request authentication.

Two disjoint schemes, chosen by route:
- Bearer token: the app and the GitHub workflow send the shared API key.
- Ed25519 request signing: Discord signs ``timestamp + body`` for every
  interaction. This check also stands in for CSRF protection on /discord.
"""

import hmac
import logging

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


def verify_bearer(authorization: str | None, secret: str) -> bool:
    """Check an Authorization header against ``Bearer <secret>``."""
    if not secret or not authorization:
        return False
    return hmac.compare_digest(authorization.encode(), f"Bearer {secret}".encode())


def verify_discord_signature(
    public_key_hex: str,
    signature_hex: str | None,
    timestamp: str | None,
    body: bytes,
) -> bool:
    """Verify a Discord interaction signature over the raw request body."""
    if not public_key_hex or not signature_hex or not timestamp:
        return False

    try:
        key = VerifyKey(bytes.fromhex(public_key_hex))
        key.verify(timestamp.encode() + body, bytes.fromhex(signature_hex))
        return True
    except BadSignatureError:
        logger.warning("Discord signature mismatch")
        return False
    except (ValueError, TypeError) as e:
        logger.warning(f"Malformed Discord signature or key: {e}")
        return False
