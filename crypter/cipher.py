"""
Password-based envelope cipher.

Encryption pipeline:
1. Generate a random iv (16B) and salt (salt_length)
2. Derive the key from (secret, salt) with PBKDF2-HMAC-SHA512
3. AES-256-GCM encrypt the UTF-8 text of the value → (ciphertext, tag)
4. Pack salt || iv || tag || ciphertext
5. Encode the envelope as text

Decryption runs the same steps in reverse and fails on any tag mismatch.
A Cipher holds only immutable configuration, so one instance can be shared
across threads; every call allocates its own salt, iv and key.
"""

import logging
from typing import Mapping, Optional, Union

from .config import CipherOptions, options_from_env, secret_from_env, warn_if_weak
from .crypto.aead import IV_LENGTH, open_decrypt, seal_encrypt
from .crypto.kdf import derive_key
from .crypto.utils import generate_random_bytes
from .encoding import get_codec
from .envelope import Envelope, EnvelopeLayout, unpack_envelope
from .errors import AuthenticationError, ConfigurationError, FormatError, ValidationError


logger = logging.getLogger(__name__)


def _coerce_text(value) -> str:
    """Turn an encrypt() argument into the text that gets encrypted."""
    if value is None:
        raise ValidationError("Value must not be None")
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        raise ValidationError("Value must be text or a number, not raw bytes")
    if isinstance(value, bool):
        return "true" if value else "false"
    # Numbers are stringified
    return str(value)


def _encode_plaintext(value) -> bytes:
    try:
        return _coerce_text(value).encode('utf-8')
    except UnicodeEncodeError as e:
        # Lone surrogates, e.g. undecodable argv bytes
        raise ValidationError("Value is not encodable as UTF-8") from e


class Cipher:
    """
    Envelope cipher bound to one secret and one set of options.

    Two instances built with the same secret and options are fully
    interchangeable: compatibility depends on configuration, not identity.
    """

    def __init__(self, secret: Union[str, bytes], options: Optional[CipherOptions] = None, *,
                 encoding: Optional[str] = None, salt_length: Optional[int] = None,
                 pbkdf2_iterations: Optional[int] = None):
        """
        Initialize the cipher.

        Args:
            secret: Password used for key derivation (text is UTF-8 encoded)
            options: Base options. Defaults to CipherOptions()
            encoding: Overrides options.encoding
            salt_length: Overrides options.salt_length
            pbkdf2_iterations: Overrides options.pbkdf2_iterations

        Raises:
            ConfigurationError: If the secret is empty or an option is invalid
        """
        if not secret:
            raise ConfigurationError("Secret key must be provided")
        if isinstance(secret, str):
            try:
                secret = secret.encode('utf-8')
            except UnicodeEncodeError as e:
                raise ConfigurationError("Secret is not encodable as UTF-8") from e
        elif isinstance(secret, (bytes, bytearray, memoryview)):
            secret = bytes(secret)
        else:
            raise ConfigurationError(f"Secret must be str or bytes, got {type(secret).__name__}")

        if options is None:
            options = CipherOptions()
        elif not isinstance(options, CipherOptions):
            raise ConfigurationError("options must be a CipherOptions instance")

        self._secret = secret
        self._options = options.override(
            encoding=encoding,
            salt_length=salt_length,
            pbkdf2_iterations=pbkdf2_iterations,
        )
        warn_if_weak(self._options)
        self._codec = get_codec(self._options.encoding)
        self._layout = EnvelopeLayout(self._options.salt_length)

        logger.debug(
            f"Cipher ready: encoding={self._options.encoding} "
            f"salt_length={self._options.salt_length} "
            f"iterations={self._options.pbkdf2_iterations}"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Cipher':
        """
        Build a cipher from CRYPTER_* environment variables.

        Raises:
            ConfigurationError: If no secret is configured or a value is invalid
        """
        return cls(secret_from_env(environ), options_from_env(environ))

    @property
    def options(self) -> CipherOptions:
        """The effective (immutable) options."""
        return self._options

    @property
    def encoding(self) -> str:
        return self._options.encoding

    @property
    def salt_length(self) -> int:
        return self._options.salt_length

    @property
    def pbkdf2_iterations(self) -> int:
        return self._options.pbkdf2_iterations

    @property
    def tag_position(self) -> int:
        """Offset of the authentication tag inside an envelope."""
        return self._layout.tag_position

    @property
    def ciphertext_position(self) -> int:
        """Offset of the ciphertext inside an envelope."""
        return self._layout.ciphertext_position

    def derive_key(self, salt: bytes) -> bytes:
        """Derive the 32-byte key for the given salt."""
        return derive_key(self._secret, salt, self._options.pbkdf2_iterations)

    def encrypt(self, value: Union[str, int, float]) -> str:
        """
        Encrypt a value into an envelope string.

        Args:
            value: Text or number; numbers are converted with str(), booleans
                become "true"/"false"

        Returns:
            Envelope encoded with the configured text encoding

        Raises:
            ValidationError: If value is None, raw bytes or not encodable as UTF-8
        """
        plaintext = _encode_plaintext(value)

        iv = generate_random_bytes(IV_LENGTH)
        salt = generate_random_bytes(self._options.salt_length)
        key = self.derive_key(salt)

        ciphertext, tag = seal_encrypt(key, iv, plaintext)
        envelope = Envelope(salt=salt, iv=iv, tag=tag, ciphertext=ciphertext).to_bytes()

        logger.debug(f"Encrypted {len(plaintext)} bytes into {len(envelope)}-byte envelope")
        return self._codec.encode(envelope)

    def decrypt(self, value: str) -> str:
        """
        Decrypt an envelope string.

        Args:
            value: Envelope produced by encrypt() with the same secret and options

        Returns:
            The original text

        Raises:
            ValidationError: If value is None or not a string
            FormatError: If value is not valid text for the encoding or is truncated
            AuthenticationError: If the tag does not verify
        """
        if value is None:
            raise ValidationError("Value must not be None")
        if not isinstance(value, str):
            raise ValidationError(f"Envelope must be a string, got {type(value).__name__}")

        envelope = unpack_envelope(self._codec.decode(value), self._layout)
        key = self.derive_key(envelope.salt)

        try:
            plaintext = open_decrypt(key, envelope.iv, envelope.tag, envelope.ciphertext)
        except AuthenticationError:
            logger.warning(f"Rejected {len(envelope)}-byte envelope: authentication failed")
            raise

        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            raise FormatError("Decrypted payload is not valid UTF-8") from e

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(encoding={self.encoding!r}, "
            f"salt_length={self.salt_length}, pbkdf2_iterations={self.pbkdf2_iterations})"
        )
