"""
Exception hierarchy for Crypter.

Every error raised by the package derives from CrypterError so callers can
catch the whole family in one place.
"""


class CrypterError(Exception):
    """Base class for all Crypter errors."""
    pass


class ConfigurationError(CrypterError):
    """Raised when the secret or cipher options are missing or invalid."""
    pass


class KeyDerivationError(ConfigurationError):
    """Raised when the key derivation primitive rejects its parameters."""
    pass


class ValidationError(CrypterError):
    """Raised when encrypt/decrypt receive an absent or unusable value."""
    pass


class FormatError(CrypterError):
    """Raised when an envelope cannot be decoded or is truncated."""
    pass


class AuthenticationError(CrypterError):
    """Raised when the authentication tag does not verify."""
    pass
