"""
slipcodec - SLIP packet framing codec

Encodes byte payloads into SLIP-framed packets, decodes them back, and splits
continuous byte streams into packets. Supports the fixed Bluefruit-style
START/END/ESC set and configurable dialects such as RFC 1055 SLIP.
"""

__version__ = "0.1.0"
__author__ = "slipcodec contributors"

from slipcodec.encoding import BLUEFRUIT, STANDARD, Encoding
from slipcodec.errors import (
    DecodeError,
    EncodingConfigError,
    FrameTooShortError,
    InvalidControlCharError,
    InvalidEscapedCharError,
    MissingEndError,
    MissingStartError,
    SlipError,
    TruncatedEscapeError,
)
from slipcodec.splitter import (
    EndOfSource,
    NeedMoreData,
    Packet,
    PacketDecoder,
    PacketStream,
    iter_packets,
    split_next,
)

__all__ = [
    "BLUEFRUIT",
    "STANDARD",
    "DecodeError",
    "Encoding",
    "EncodingConfigError",
    "EndOfSource",
    "FrameTooShortError",
    "InvalidControlCharError",
    "InvalidEscapedCharError",
    "MissingEndError",
    "MissingStartError",
    "NeedMoreData",
    "Packet",
    "PacketDecoder",
    "PacketStream",
    "SlipError",
    "TruncatedEscapeError",
    "iter_packets",
    "split_next",
    "__version__",
]
