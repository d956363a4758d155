"""
AES-256-GCM authenticated encryption for Crypter.

The envelope stores the tag separately from the ciphertext, so these helpers
split and rejoin the tag that AESGCM appends to its output. No associated
data is used.
"""

from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import AuthenticationError
from .kdf import KEY_LENGTH


IV_LENGTH = 16
TAG_LENGTH = 16
ALGORITHM_NAME = "AES-256-GCM"


def _check_lengths(key: bytes, iv: bytes) -> None:
    if len(key) != KEY_LENGTH:
        raise ValueError(f"{ALGORITHM_NAME} requires {KEY_LENGTH}-byte key")
    if len(iv) != IV_LENGTH:
        raise ValueError(f"{ALGORITHM_NAME} requires {IV_LENGTH}-byte iv")


def seal_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> Tuple[bytes, bytes]:
    """
    Encrypt plaintext with AES-256-GCM.
    
    Args:
        key: 32-byte encryption key
        iv: 16-byte initialization vector
        plaintext: Data to encrypt
        
    Returns:
        Tuple of (ciphertext, authentication_tag); the ciphertext has the
        same length as the plaintext
    """
    _check_lengths(key, iv)
    
    ciphertext_with_tag = AESGCM(key).encrypt(iv, plaintext, None)
    
    # Tag is the last 16 bytes
    return ciphertext_with_tag[:-TAG_LENGTH], ciphertext_with_tag[-TAG_LENGTH:]


def open_decrypt(key: bytes, iv: bytes, tag: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt and authenticate ciphertext with AES-256-GCM.
    
    Args:
        key: 32-byte decryption key
        iv: 16-byte initialization vector used for encryption
        tag: 16-byte authentication tag
        ciphertext: Encrypted data
        
    Returns:
        Verified plaintext
        
    Raises:
        AuthenticationError: If the tag does not verify
    """
    _check_lengths(key, iv)
    if len(tag) != TAG_LENGTH:
        raise ValueError(f"{ALGORITHM_NAME} requires {TAG_LENGTH}-byte tag")
    
    try:
        return AESGCM(key).decrypt(iv, bytes(ciphertext) + bytes(tag), None)
    except InvalidTag as e:
        raise AuthenticationError(
            "Authentication verification failed - wrong secret, wrong options or tampered data"
        ) from e
