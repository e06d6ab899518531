"""
Fixed-character SLIP encoder/decoder.

Uses the bundled control-byte set:
START=0xAB, END=0xBC, ESC=0xCD, ESC_START=0xAC, ESC_END=0xBD, ESC_ESC=0xCE.

Every packet is framed as START ... END. For other dialects (including
START-less RFC 1055 SLIP) use slipcodec.encoding.Encoding.
"""

from slipcodec.encoding import Encoding

# SLIP special characters
START = 0xAB
END = 0xBC
ESC = 0xCD
ESC_START = 0xAC
ESC_END = 0xBD
ESC_ESC = 0xCE

FIXED_ENCODING = Encoding(
    start=START,
    start_escaped=ESC_START,
    end=END,
    end_escaped=ESC_END,
    esc=ESC,
    esc_escaped=ESC_ESC,
)


def is_reserved_byte(byte: int) -> bool:
    """Check if byte is START, END or ESC."""
    return FIXED_ENCODING.is_control_byte(byte)


def reserved_byte_count(data: bytes) -> int:
    """Count reserved bytes in data (each one costs an extra byte when encoded)."""
    return FIXED_ENCODING.control_byte_count(data)


def encoded_length(data: bytes) -> int:
    """Length of encode(data): payload + START + END + one byte per reserved byte."""
    return FIXED_ENCODING.encoded_length(data)


def encode(data: bytes) -> bytes:
    """
    Encode data using SLIP framing.

    Args:
        data: Raw data to encode.

    Returns:
        SLIP-encoded data with START and END delimiters.
    """
    return FIXED_ENCODING.encode(data)


def decode(data: bytes) -> bytes:
    """
    Decode one SLIP-framed packet.

    Args:
        data: SLIP-encoded packet, START and END included.

    Returns:
        Decoded payload (without SLIP framing).

    Raises:
        FrameTooShortError: If data has fewer than 2 bytes.
        MissingStartError: If data does not begin with START.
        MissingEndError: If data does not end with END.
        TruncatedEscapeError: If ESC directly precedes the final END.
        InvalidEscapedCharError: If ESC is followed by anything but a substitute.
    """
    return FIXED_ENCODING.decode(data)
