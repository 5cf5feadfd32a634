import hashlib
import hmac
from typing import Optional
from app.config.settings import settings
from app.utils.logger import logger


def generate_razorpay_signature(request_body: bytes, secret: str) -> str:
    """Lowercase hex HMAC-SHA256 of the raw body, as Razorpay computes it."""
    return hmac.new(secret.encode(), request_body, hashlib.sha256).hexdigest()


def verify_razorpay_webhook(
    request_body: bytes,
    signature: Optional[str],
    secret: Optional[str] = None,
) -> bool:
    """
    Verify Razorpay webhook signature.

    The HMAC is computed over the exact bytes received on the wire. A body
    that was parsed and re-serialized may differ in key order or spacing and
    would no longer match what Razorpay signed.

    Args:
        request_body: Raw request body bytes
        signature: X-Razorpay-Signature header value
        secret: Webhook secret; defaults to RAZORPAY_WEBHOOK_SECRET

    Returns:
        True if signature is valid, False otherwise (including missing
        signature or unconfigured secret)
    """
    if secret is None:
        secret = settings.RAZORPAY_WEBHOOK_SECRET

    if not secret:
        logger.warning("RAZORPAY_WEBHOOK_SECRET not set, rejecting webhook")
        return False

    if not signature:
        return False

    computed_signature = generate_razorpay_signature(request_body, secret)

    return hmac.compare_digest(computed_signature.encode(), signature.encode())
