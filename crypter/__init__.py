"""
Crypter: password-based envelope encryption.

Encrypts short text values with AES-256-GCM under a key derived from a
secret with PBKDF2-HMAC-SHA512, and packs salt, iv, tag and ciphertext into
a single text string.

Basic Usage:
    >>> from crypter import Cipher
    >>> 
    >>> cipher = Cipher("s3cr3t")
    >>> envelope = cipher.encrypt("hello")
    >>> cipher.decrypt(envelope)
    'hello'
    >>> cipher.decrypt(cipher.encrypt(42))
    '42'
"""

__version__ = "1.0.0"
__author__ = "Crypter Team"

from .cipher import Cipher
from .config import CipherOptions, load_secret, options_from_env
from .encoding import TextCodec, get_codec, supported_encodings
from .envelope import Envelope, EnvelopeLayout, pack_envelope, unpack_envelope
from .errors import (
    CrypterError,
    ConfigurationError,
    KeyDerivationError,
    ValidationError,
    FormatError,
    AuthenticationError,
)


__all__ = [
    # Version info
    '__version__',
    
    # High-level interface
    'Cipher',
    'CipherOptions',
    'load_secret',
    'options_from_env',
    
    # Envelope codec
    'Envelope',
    'EnvelopeLayout',
    'pack_envelope',
    'unpack_envelope',
    'TextCodec',
    'get_codec',
    'supported_encodings',
    
    # Errors
    'CrypterError',
    'ConfigurationError',
    'KeyDerivationError',
    'ValidationError',
    'FormatError',
    'AuthenticationError',
]
