"""
Configuration management for Crypter.

CipherOptions holds the tunable parameters of a cipher. They are immutable
once built; every party that shares envelopes must use the same encoding,
salt length and iteration count, since none of them is recorded in the
envelope itself.

Options and secrets can also be loaded from the environment or a secret
file, which is what the command line front end uses.
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .encoding import DEFAULT_ENCODING, get_codec
from .envelope import DEFAULT_SALT_LENGTH
from .errors import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_PBKDF2_ITERATIONS = 100000
# Iteration counts below this weaken brute-force resistance; accepted but logged
RECOMMENDED_MIN_ITERATIONS = 100000

ENV_SECRET = "CRYPTER_SECRET"
ENV_SECRET_FILE = "CRYPTER_SECRET_FILE"
ENV_ENCODING = "CRYPTER_ENCODING"
ENV_SALT_LENGTH = "CRYPTER_SALT_LENGTH"
ENV_PBKDF2_ITERATIONS = "CRYPTER_PBKDF2_ITERATIONS"


def _check_positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return value


@dataclass(frozen=True)
class CipherOptions:
    """
    Cipher parameters.

    Fields:
        encoding: Text encoding of the envelope (hex, base64, ...)
        salt_length: Salt size in bytes
        pbkdf2_iterations: PBKDF2 iteration count
    """
    encoding: str = DEFAULT_ENCODING
    salt_length: int = DEFAULT_SALT_LENGTH
    pbkdf2_iterations: int = DEFAULT_PBKDF2_ITERATIONS

    def __post_init__(self):
        """Validate and normalize fields."""
        # Store the canonical codec name so aliases compare equal
        object.__setattr__(self, "encoding", get_codec(self.encoding).name)
        _check_positive_int("salt_length", self.salt_length)
        _check_positive_int("pbkdf2_iterations", self.pbkdf2_iterations)

    def override(self, encoding: Optional[str] = None, salt_length: Optional[int] = None,
                 pbkdf2_iterations: Optional[int] = None) -> 'CipherOptions':
        """Return a copy with every non-None argument replacing its field."""
        changes = {
            name: value for name, value in (
                ("encoding", encoding),
                ("salt_length", salt_length),
                ("pbkdf2_iterations", pbkdf2_iterations),
            ) if value is not None
        }
        return replace(self, **changes) if changes else self


def warn_if_weak(options: CipherOptions) -> None:
    """Log a warning when the iteration count is below the recommended minimum."""
    if options.pbkdf2_iterations < RECOMMENDED_MIN_ITERATIONS:
        logger.warning(
            f"PBKDF2 iteration count {options.pbkdf2_iterations} is below the recommended "
            f"minimum of {RECOMMENDED_MIN_ITERATIONS}; brute-force resistance is reduced"
        )


def _env_int(environ: Mapping[str, str], name: str) -> Optional[int]:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def options_from_env(environ: Optional[Mapping[str, str]] = None) -> CipherOptions:
    """
    Build CipherOptions from environment variables.

    Reads CRYPTER_ENCODING, CRYPTER_SALT_LENGTH and CRYPTER_PBKDF2_ITERATIONS.
    Unset or blank variables keep their defaults.

    Args:
        environ: Mapping to read from. Defaults to os.environ

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    if environ is None:
        environ = os.environ

    encoding = environ.get(ENV_ENCODING) or None
    return CipherOptions().override(
        encoding=encoding,
        salt_length=_env_int(environ, ENV_SALT_LENGTH),
        pbkdf2_iterations=_env_int(environ, ENV_PBKDF2_ITERATIONS),
    )


def load_secret(path: str) -> bytes:
    """
    Load a secret from a file.

    The file content is used verbatim, except that a single trailing
    newline (LF or CRLF) is dropped.

    Args:
        path: Path to the secret file

    Returns:
        Secret bytes

    Raises:
        ConfigurationError: If the file is missing, unreadable or empty
    """
    try:
        with open(path, 'rb') as f:
            secret = f.read()
    except FileNotFoundError:
        raise ConfigurationError(f"Secret file not found: {path}") from None
    except OSError as e:
        raise ConfigurationError(f"Failed to read secret file {path}: {e}") from e

    if secret.endswith(b"\r\n"):
        secret = secret[:-2]
    elif secret.endswith(b"\n"):
        secret = secret[:-1]

    if not secret:
        raise ConfigurationError(f"Secret file is empty: {path}")

    logger.debug(f"Loaded secret from {path}")
    return secret


def secret_from_env(environ: Optional[Mapping[str, str]] = None) -> bytes:
    """
    Resolve the secret from CRYPTER_SECRET, falling back to CRYPTER_SECRET_FILE.

    Raises:
        ConfigurationError: If neither variable provides a secret
    """
    if environ is None:
        environ = os.environ

    secret = environ.get(ENV_SECRET)
    if secret:
        # Undecodable environment bytes arrive as surrogate escapes
        return secret.encode('utf-8', 'surrogateescape')

    secret_file = environ.get(ENV_SECRET_FILE)
    if secret_file:
        return load_secret(secret_file)

    raise ConfigurationError(f"No secret configured; set {ENV_SECRET} or {ENV_SECRET_FILE}")
