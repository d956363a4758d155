"""
Random number helpers for Crypter.
"""

import secrets


def generate_random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.
    
    Args:
        length: Number of random bytes to generate
        
    Returns:
        Cryptographically secure random bytes
    """
    if length < 0:
        raise ValueError("Length must be non-negative")
    return secrets.token_bytes(length)
