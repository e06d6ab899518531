"""
SLIP codec exceptions.

Every decode-path failure has its own exception class so callers can react to
the specific framing problem without matching on error messages. Encoding
never raises.
"""


class SlipError(Exception):
    """Base exception for SLIP codec errors."""

    pass


class EncodingConfigError(SlipError, ValueError):
    """Invalid control-byte configuration."""

    pass


class DecodeError(SlipError):
    """Base exception for malformed SLIP packets."""

    pass


class FrameTooShortError(DecodeError):
    """Packet is shorter than the smallest possible frame."""

    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(f"Frame too short: {length} bytes, need at least {minimum}")


class MissingStartError(DecodeError):
    """First byte of the packet is not the START byte."""

    def __init__(self, found: int, expected: int):
        self.found = found
        self.expected = expected
        super().__init__(f"Missing START: expected 0x{expected:02X}, found 0x{found:02X}")


class MissingEndError(DecodeError):
    """Last byte of the packet is not the END byte."""

    def __init__(self, found: int, expected: int):
        self.found = found
        self.expected = expected
        super().__init__(f"Missing END: expected 0x{expected:02X}, found 0x{found:02X}")


class TruncatedEscapeError(DecodeError):
    """ESC byte with no following byte."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Truncated escape sequence at index {index}")


class InvalidEscapedCharError(DecodeError):
    """
    Byte following ESC is not a recognized escaped substitute.

    Attributes:
        index: Position of the offending byte in the decoded buffer.
        byte: Offending byte value.
    """

    def __init__(self, index: int, byte: int):
        self.index = index
        self.byte = byte
        super().__init__(f"Invalid escaped character 0x{byte:02X} at index {index}")


class InvalidControlCharError(InvalidEscapedCharError):
    """
    Invalid escape sequence found while splitting a byte stream.

    Carries the number of bytes the malformed packet occupies (up to and
    including its END byte) so the caller can skip it and resynchronize.
    """

    def __init__(self, index: int, byte: int, consumed: int):
        self.index = index
        self.byte = byte
        self.consumed = consumed
        DecodeError.__init__(
            self, f"Invalid control character 0x{byte:02X} escaped at index {index}"
        )
