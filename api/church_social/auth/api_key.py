"""API key generation and hashing utilities.

Keys are high-entropy random tokens, so a keyed HMAC-SHA256 digest is
stored instead of a slow password hash.
"""

import hashlib
import hmac
import secrets

from church_social.config import settings

API_KEY_PREFIX = "cs_live_"


def generate_api_key() -> tuple[str, str]:
    """
    Generate API key and its hash.

    Returns:
        Tuple of (plaintext_key, key_hash).
        The plaintext key should only be shown once to the user.
    """
    random_part = secrets.token_hex(32)
    plaintext_key = f"{API_KEY_PREFIX}{random_part}"
    key_hash = hash_api_key(plaintext_key)
    return plaintext_key, key_hash


def hash_api_key(key: str) -> str:
    """Hash API key using HMAC-SHA256 with server secret."""
    return hmac.new(
        settings.api_key_secret.encode(),
        key.encode(),
        hashlib.sha256,
    ).hexdigest()


def get_key_prefix(key: str) -> str:
    """Get first 12 chars of key for identification in listings."""
    return key[:12]
