"""
Key Derivation Functions for Crypter.

Derives the per-message symmetric key from the user secret and a random
salt using PBKDF2 with HMAC-SHA-512. The same (secret, salt, iterations)
always yields the same key, which is what lets decrypt recover the key
used at encryption time.
"""

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..errors import KeyDerivationError


# Protocol constants
KEY_LENGTH = 32  # 256-bit keys for AES-256


def derive_key(secret: bytes, salt: bytes, iterations: int) -> bytes:
    """
    Derive a 32-byte encryption key with PBKDF2-HMAC-SHA512.
    
    Args:
        secret: Password bytes
        salt: Random salt taken from the envelope
        iterations: PBKDF2 iteration count
        
    Returns:
        32-byte derived key
        
    Raises:
        KeyDerivationError: If the parameters are rejected
    """
    if not secret:
        raise KeyDerivationError("Secret must not be empty")
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise KeyDerivationError(f"Iteration count must be a positive integer, got {iterations!r}")
    
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA512(),
            length=KEY_LENGTH,
            salt=bytes(salt),
            iterations=iterations,
        )
        return kdf.derive(bytes(secret))
    except (TypeError, ValueError, OverflowError) as e:
        raise KeyDerivationError(f"Key derivation failed: {e}") from e
