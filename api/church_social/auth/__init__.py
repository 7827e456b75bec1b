"""Authentication utilities for the Church Social API."""

from church_social.auth.api_key import generate_api_key, get_key_prefix, hash_api_key

__all__ = [
    "generate_api_key",
    "hash_api_key",
    "get_key_prefix",
]
