"""
Byte-to-text codecs used to serialize envelopes.

Each codec is an exact inverse pair: decode(encode(data)) == data for all
byte strings. Decoding is strict and reports any malformed input as a
FormatError instead of skipping characters.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from .errors import ConfigurationError, FormatError


DEFAULT_ENCODING = "hex"

_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]*(={0,2})")


def _hex_decode(text: str) -> bytes:
    return binascii.unhexlify(text)


def _base64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _base64_decode(text: str) -> bytes:
    return base64.b64decode(text, validate=True)


def _base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _base64url_decode(text: str) -> bytes:
    # Padding is optional on input, but when present it must complete the last quantum
    match = _BASE64URL_RE.fullmatch(text)
    if not match:
        raise ValueError("Invalid base64url characters")
    if match.group(1) and len(text) % 4:
        raise ValueError("Invalid base64url padding")
    stripped = text.rstrip("=")
    padded = stripped + "=" * (-len(stripped) % 4)
    return base64.b64decode(padded.translate(str.maketrans("-_", "+/")), validate=True)


@dataclass(frozen=True)
class TextCodec:
    """
    A named byte-to-text codec.
    
    Fields:
        name: Canonical codec name
        encoder: Function turning bytes into text
        decoder: Function turning text back into bytes
    """
    name: str
    encoder: Callable[[bytes], str]
    decoder: Callable[[str], bytes]
    
    def encode(self, data: bytes) -> str:
        """Encode raw bytes as text."""
        return self.encoder(bytes(data))
    
    def decode(self, text: str) -> bytes:
        """
        Decode text back into raw bytes.
        
        Raises:
            FormatError: If the text is not valid under this codec
        """
        try:
            return self.decoder(text)
        except (ValueError, TypeError) as e:
            # binascii.Error and UnicodeError are ValueError subclasses
            raise FormatError(f"Value is not valid {self.name} text: {e}") from e


_CODECS: Dict[str, TextCodec] = {
    codec.name: codec for codec in (
        TextCodec("hex", lambda data: data.hex(), _hex_decode),
        TextCodec("base64", _base64_encode, _base64_decode),
        TextCodec("base64url", _base64url_encode, _base64url_decode),
        TextCodec("base32", lambda data: base64.b32encode(data).decode("ascii"), base64.b32decode),
        TextCodec("base85", lambda data: base64.b85encode(data).decode("ascii"), base64.b85decode),
        TextCodec("latin1", lambda data: data.decode("latin-1"), lambda text: text.encode("latin-1")),
    )
}

_ALIASES = {
    "latin-1": "latin1",
    "binary": "latin1",
}


def supported_encodings() -> Tuple[str, ...]:
    """Return the canonical names of all supported codecs."""
    return tuple(_CODECS)


def get_codec(name: str) -> TextCodec:
    """
    Look up a codec by name (case-insensitive, aliases accepted).
    
    Raises:
        ConfigurationError: If the name is not a supported encoding
    """
    if not isinstance(name, str):
        raise ConfigurationError(f"Encoding name must be a string, got {type(name).__name__}")
    
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return _CODECS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported encoding {name!r}; expected one of {', '.join(supported_encodings())}"
        ) from None
