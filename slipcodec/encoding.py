"""
Configurable SLIP encoding.

An Encoding describes one SLIP dialect: the END and ESC control bytes, an
optional START byte, and the substitute byte that follows ESC for each of
them. Standard RFC 1055 SLIP has no START byte (start=None); the Bluefruit
dialect frames every packet with START ... END.

Frame layout::

    [START] payload-with-escapes END

Every control byte inside the payload is sent as ESC followed by its
substitute:

    START -> ESC START_ESCAPED
    END   -> ESC END_ESCAPED
    ESC   -> ESC ESC_ESCAPED
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from slipcodec.errors import (
    EncodingConfigError,
    FrameTooShortError,
    InvalidEscapedCharError,
    MissingEndError,
    MissingStartError,
    TruncatedEscapeError,
)


@dataclass(frozen=True)
class Encoding:
    """
    SLIP control-byte configuration.

    Attributes:
        start: START byte, or None when the dialect has no start marker.
        start_escaped: Substitute for START in payload data (None iff start is None).
        end: END byte marking the end of every packet.
        end_escaped: Substitute for END in payload data.
        esc: ESC byte introducing an escape sequence.
        esc_escaped: Substitute for ESC in payload data.

    Raises:
        EncodingConfigError: If a byte is out of range, start/start_escaped
            are not both set or both None, or the active bytes are not
            pairwise distinct.
    """

    start: Optional[int]
    start_escaped: Optional[int]
    end: int
    end_escaped: int
    esc: int
    esc_escaped: int

    # control byte -> substitute, and back
    _escapes: Dict[int, int] = field(init=False, repr=False, compare=False)
    _unescapes: Dict[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if (self.start is None) != (self.start_escaped is None):
            raise EncodingConfigError("start and start_escaped must both be set or both be None")

        pairs = {self.end: self.end_escaped, self.esc: self.esc_escaped}
        if self.start is not None:
            pairs[self.start] = self.start_escaped

        active = [self.end, self.end_escaped, self.esc, self.esc_escaped]
        if self.start is not None:
            active += [self.start, self.start_escaped]

        for value in active:
            if not isinstance(value, int) or not 0 <= value <= 0xFF:
                raise EncodingConfigError(f"Control byte out of range: {value!r}")

        if len(set(active)) != len(active):
            raise EncodingConfigError(
                "Control bytes must be pairwise distinct: "
                + " ".join(f"{value:02X}" for value in active)
            )

        object.__setattr__(self, "_escapes", pairs)
        object.__setattr__(self, "_unescapes", {sub: ctrl for ctrl, sub in pairs.items()})

    @property
    def has_start(self) -> bool:
        """Check if packets carry a START byte."""
        return self.start is not None

    @property
    def frame_overhead(self) -> int:
        """Framing bytes added to every packet (START+END, or END only)."""
        return 2 if self.start is not None else 1

    def is_control_byte(self, byte: int) -> bool:
        """Check if byte must be escaped inside a payload."""
        return byte in self._escapes

    def is_valid_escaped_byte(self, byte: int) -> bool:
        """Check if byte may legally follow ESC."""
        return byte in self._unescapes

    def control_byte_count(self, payload: bytes) -> int:
        """Count the bytes of payload that need escaping."""
        return sum(1 for byte in payload if byte in self._escapes)

    def encoded_length(self, payload: bytes) -> int:
        """Size of the framed packet that encode() produces for payload."""
        return len(payload) + self.frame_overhead + self.control_byte_count(payload)

    def encode(self, payload: bytes) -> bytes:
        """
        Encode payload as a framed SLIP packet.

        Args:
            payload: Raw bytes (may be empty).

        Returns:
            [START] + escaped payload + END.
        """
        encoded = bytearray()
        if self.start is not None:
            encoded.append(self.start)

        for byte in payload:
            substitute = self._escapes.get(byte)
            if substitute is None:
                encoded.append(byte)
            else:
                encoded.append(self.esc)
                encoded.append(substitute)

        encoded.append(self.end)
        return bytes(encoded)

    def decode(self, packet: bytes) -> bytes:
        """
        Decode a single framed SLIP packet.

        Args:
            packet: Complete packet including START (if used) and END.

        Returns:
            Original payload.

        Raises:
            FrameTooShortError: If packet is shorter than the framing overhead.
            MissingStartError: If START is used and packet does not begin with it.
            MissingEndError: If packet does not end with END.
            TruncatedEscapeError: If ESC is the last byte before END.
            InvalidEscapedCharError: If ESC is followed by an unknown substitute.
        """
        if len(packet) < self.frame_overhead:
            raise FrameTooShortError(len(packet), self.frame_overhead)

        begin = 0
        if self.start is not None:
            if packet[0] != self.start:
                raise MissingStartError(packet[0], self.start)
            begin = 1

        if packet[-1] != self.end:
            raise MissingEndError(packet[-1], self.end)

        return self.unescape(packet, begin, len(packet) - 1)

    def unescape(self, data: bytes, begin: int, stop: int) -> bytes:
        """
        Reverse escaping of data[begin:stop].

        Error indexes are positions in data, not in the slice.

        Raises:
            TruncatedEscapeError: If data[stop - 1] is ESC.
            InvalidEscapedCharError: If ESC is followed by an unknown substitute.
        """
        decoded = bytearray()
        escape_next = False

        for index in range(begin, stop):
            byte = data[index]
            if escape_next:
                original = self._unescapes.get(byte)
                if original is None:
                    raise InvalidEscapedCharError(index, byte)
                decoded.append(original)
                escape_next = False
            elif byte == self.esc:
                escape_next = True
            else:
                decoded.append(byte)

        if escape_next:
            raise TruncatedEscapeError(stop - 1)

        return bytes(decoded)


# RFC 1055 SLIP: no START byte
STANDARD = Encoding(
    start=None,
    start_escaped=None,
    end=0xC0,
    end_escaped=0xDC,
    esc=0xDB,
    esc_escaped=0xDD,
)

# Adafruit Bluefruit SLIP dialect
BLUEFRUIT = Encoding(
    start=0xAB,
    start_escaped=0xAC,
    end=0xBC,
    end_escaped=0xBD,
    esc=0xCD,
    esc_escaped=0xCE,
)

PROFILES: Dict[str, Encoding] = {
    "standard": STANDARD,
    "bluefruit": BLUEFRUIT,
}
