"""
Cryptographic primitives for Crypter.

This module provides:
- Key derivation (PBKDF2-HMAC-SHA512)
- Authenticated encryption (AES-256-GCM)
- Secure random bytes
"""

from .kdf import derive_key, KEY_LENGTH
from .aead import seal_encrypt, open_decrypt, IV_LENGTH, TAG_LENGTH
from .utils import generate_random_bytes

__all__ = [
    'derive_key',
    'seal_encrypt',
    'open_decrypt',
    'generate_random_bytes',
    'KEY_LENGTH',
    'IV_LENGTH',
    'TAG_LENGTH',
]
