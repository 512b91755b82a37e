"""Security utilities for generating and comparing secrets."""

import base64
import hashlib
import hmac
import secrets


def urlsafe_b64encode_nopad(data: bytes) -> str:
    """URL-safe base64 without ``=`` padding."""
    return base64.urlsafe_b64encode(data).decode("utf-8").rstrip("=")


def generate_hashed_secret(length: int = 32) -> str:
    """Draw ``length`` random bytes and return only their SHA-256 digest.

    The raw bytes are discarded, so the result is the only form of the secret
    that ever exists.

    Returns:
        URL-safe base64 SHA-256 digest (43 characters)
    """
    raw = secrets.token_bytes(length)
    return urlsafe_b64encode_nopad(hashlib.sha256(raw).digest())


def secrets_match(presented: str | None, stored: str | None) -> bool:
    """Constant-time comparison of a presented secret with the stored one."""
    if not presented or not stored:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), stored.encode("utf-8"))
