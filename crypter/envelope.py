"""
Envelope structure and parsing for Crypter.

An envelope is the fixed-offset concatenation

    envelope = salt (salt_length) || iv (16B) || tag (16B) || ciphertext

The format carries no version or length prefix: salt length, iv length and
tag length must be agreed on out of band by every party sharing a secret.
"""

from dataclasses import dataclass, field

from .crypto.aead import IV_LENGTH, TAG_LENGTH
from .errors import FormatError


DEFAULT_SALT_LENGTH = 64


@dataclass(frozen=True)
class EnvelopeLayout:
    """
    Byte offsets of the envelope fields for a given salt length.
    
    The offsets are computed once and reused for every envelope parsed
    with this layout.
    """
    salt_length: int = DEFAULT_SALT_LENGTH
    tag_position: int = field(init=False)
    ciphertext_position: int = field(init=False)
    
    def __post_init__(self):
        if isinstance(self.salt_length, bool) or not isinstance(self.salt_length, int) \
                or self.salt_length < 1:
            raise ValueError("Salt length must be a positive integer")
        object.__setattr__(self, "tag_position", self.salt_length + IV_LENGTH)
        object.__setattr__(self, "ciphertext_position", self.tag_position + TAG_LENGTH)
    
    @property
    def iv_position(self) -> int:
        """Offset of the iv."""
        return self.salt_length
    
    @property
    def min_length(self) -> int:
        """Size of an envelope holding an empty ciphertext."""
        return self.ciphertext_position


@dataclass(frozen=True)
class Envelope:
    """
    Parsed envelope fields.
    
    Fields:
        salt: Key derivation salt
        iv: 16-byte initialization vector
        tag: 16-byte authentication tag
        ciphertext: Encrypted payload, same length as the plaintext
    """
    salt: bytes
    iv: bytes
    tag: bytes
    ciphertext: bytes
    
    def __post_init__(self):
        """Validate field sizes."""
        if not self.salt:
            raise ValueError("Salt must not be empty")
        if len(self.iv) != IV_LENGTH:
            raise ValueError(f"IV must be {IV_LENGTH} bytes")
        if len(self.tag) != TAG_LENGTH:
            raise ValueError(f"Authentication tag must be {TAG_LENGTH} bytes")
    
    def to_bytes(self) -> bytes:
        """Serialize the envelope to its wire layout."""
        return pack_envelope(self)
    
    def __len__(self) -> int:
        return len(self.salt) + IV_LENGTH + TAG_LENGTH + len(self.ciphertext)


def pack_envelope(envelope: Envelope) -> bytes:
    """Concatenate salt, iv, tag and ciphertext in that order."""
    return b"".join((envelope.salt, envelope.iv, envelope.tag, envelope.ciphertext))


def unpack_envelope(data: bytes, layout: EnvelopeLayout) -> Envelope:
    """
    Split raw envelope bytes into their fields.
    
    Args:
        data: Raw envelope bytes
        layout: Offsets to slice at
        
    Returns:
        Parsed Envelope
        
    Raises:
        FormatError: If data is shorter than the fixed header fields
    """
    if len(data) < layout.min_length:
        raise FormatError(
            f"Envelope too short: {len(data)} bytes, need at least {layout.min_length}"
        )
    
    return Envelope(
        salt=bytes(data[:layout.iv_position]),
        iv=bytes(data[layout.iv_position:layout.tag_position]),
        tag=bytes(data[layout.tag_position:layout.ciphertext_position]),
        ciphertext=bytes(data[layout.ciphertext_position:]),
    )
