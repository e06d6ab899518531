"""
SLIP packet framing over a byte stream.

SLIP has no length prefix, so packet boundaries are found by scanning for
END. split_next() looks at the bytes received so far and reports one of:

    NeedMoreData  - no END yet, more bytes may arrive
    EndOfSource   - no END and the source is exhausted
    Packet        - an END was found; the packet is decoded

A malformed packet raises InvalidControlCharError, which carries the number
of bytes to skip to resynchronize after the bad packet's END.

PacketDecoder (push, feed()) and PacketStream (pull, source.read()) drive
split_next() repeatedly.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Union

from slipcodec.encoding import STANDARD, Encoding
from slipcodec.errors import (
    InvalidControlCharError,
    InvalidEscapedCharError,
    TruncatedEscapeError,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096


@dataclass(frozen=True)
class NeedMoreData:
    """No END byte yet; call again once more bytes are available."""

    consumed: int = 0


@dataclass(frozen=True)
class EndOfSource:
    """
    Source exhausted without a terminating END.

    Attributes:
        consumed: Bytes consumed (the whole buffer).
        remainder: Unterminated bytes left in the buffer (may be empty).
    """

    consumed: int
    remainder: bytes


@dataclass(frozen=True)
class Packet:
    """
    Complete packet found.

    Attributes:
        consumed: Bytes consumed, up to and including END.
        payload: Decoded packet payload.
    """

    consumed: int
    payload: bytes


SplitResult = Union[NeedMoreData, EndOfSource, Packet]

NEED_MORE_DATA = NeedMoreData()


class ByteSource(Protocol):
    """Anything with a blocking read(size) that returns b"" at end of data."""

    def read(self, size: int) -> bytes:
        ...


def split_next(encoding: Encoding, data: Union[bytes, bytearray], at_eof: bool) -> SplitResult:
    """
    Locate and decode the next packet at the front of data.

    Args:
        encoding: SLIP dialect.
        data: Bytes received so far, starting at the next unconsumed byte.
        at_eof: True if no more bytes will ever be appended to data.

    Returns:
        NeedMoreData, EndOfSource or Packet.

    Raises:
        InvalidControlCharError: If ESC inside the packet is followed by a byte
            that is not a valid substitute. index is the position in data.
    """
    end_index = data.find(encoding.end)
    if end_index == -1:
        if at_eof:
            return EndOfSource(consumed=len(data), remainder=bytes(data))
        return NEED_MORE_DATA

    consumed = end_index + 1

    begin = 0
    if encoding.start is not None and data[0] == encoding.start:
        begin = 1

    try:
        payload = encoding.unescape(data, begin, end_index)
    except TruncatedEscapeError as e:
        # ESC directly before END: END is the invalid follower
        raise InvalidControlCharError(e.index + 1, encoding.end, consumed) from e
    except InvalidEscapedCharError as e:
        raise InvalidControlCharError(e.index, e.byte, consumed) from e

    return Packet(consumed=consumed, payload=payload)


class PacketDecoder:
    """
    Incremental SLIP decoder.

    Useful for processing data as it arrives. Malformed packets are dropped,
    logged and counted; decoding resumes after their END byte.
    """

    def __init__(self, encoding: Encoding = STANDARD, skip_empty: bool = False) -> None:
        """
        Initialize decoder state.

        Args:
            encoding: SLIP dialect.
            skip_empty: Drop zero-length packets (back-to-back END bytes).
        """
        self.encoding = encoding
        self.skip_empty = skip_empty
        self.buffer = bytearray()

        # Statistics
        self.stats = {
            "bytes_rx": 0,
            "packets_rx": 0,
            "decode_errors": 0,
        }

    def feed(self, data: bytes) -> List[bytes]:
        """
        Feed data to decoder and return complete packets.

        Args:
            data: Raw bytes from the source.

        Returns:
            List of complete packets (if any).
        """
        self.buffer.extend(data)
        self.stats["bytes_rx"] += len(data)
        packets: List[bytes] = []

        while True:
            try:
                result = split_next(self.encoding, self.buffer, at_eof=False)
            except InvalidControlCharError as e:
                del self.buffer[: e.consumed]
                self.stats["decode_errors"] += 1
                logger.warning(f"RX: dropping malformed packet: {e}")
                continue

            if not isinstance(result, Packet):
                break

            del self.buffer[: result.consumed]
            if self.skip_empty and not result.payload:
                continue

            self.stats["packets_rx"] += 1
            logger.debug(f"RX: {result.payload.hex()}")
            packets.append(result.payload)

        return packets

    def finish(self) -> bytes:
        """
        Signal end of data.

        Returns:
            Unterminated bytes still buffered (discarded from the decoder).
        """
        # feed() consumes every complete packet, so no END is buffered here
        remainder = bytes(self.buffer)
        self.buffer = bytearray()
        if remainder:
            logger.warning(f"RX: {len(remainder)} unterminated bytes at end of data")
        return remainder

    def reset(self) -> None:
        """Reset decoder state (discard incomplete packet)."""
        self.buffer = bytearray()


class PacketStream:
    """
    Lazy iterator over the packets of a byte source.

    Reads source.read(chunk_size) only when the buffered bytes hold no
    complete packet. Iteration stops when the source is exhausted; any
    unterminated trailing bytes are kept in leftover.
    """

    def __init__(
        self,
        source: ByteSource,
        encoding: Encoding = STANDARD,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        strict: bool = True,
        skip_empty: bool = False,
    ):
        """
        Initialize stream.

        Args:
            source: Byte source (file, socket file object, serial port, ...).
            encoding: SLIP dialect.
            chunk_size: Maximum bytes requested per read.
            strict: Raise InvalidControlCharError on a malformed packet.
                If False, the packet is logged and skipped.
            skip_empty: Drop zero-length packets.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.source = source
        self.encoding = encoding
        self.chunk_size = chunk_size
        self.strict = strict
        self.skip_empty = skip_empty
        self.leftover: Optional[bytes] = None

        self._buffer = bytearray()
        self._at_eof = False
        self._done = False

    def __iter__(self) -> "PacketStream":
        return self

    def __next__(self) -> bytes:
        while not self._done:
            try:
                result = split_next(self.encoding, self._buffer, self._at_eof)
            except InvalidControlCharError as e:
                del self._buffer[: e.consumed]
                if self.strict:
                    raise
                logger.warning(f"RX: skipping malformed packet: {e}")
                continue

            if isinstance(result, Packet):
                del self._buffer[: result.consumed]
                if self.skip_empty and not result.payload:
                    continue
                logger.debug(f"RX: {result.payload.hex()}")
                return result.payload

            if isinstance(result, EndOfSource):
                self._buffer = bytearray()
                self._done = True
                self.leftover = result.remainder
                if result.remainder:
                    logger.warning(
                        f"RX: source exhausted with {len(result.remainder)} "
                        f"unterminated bytes: {result.remainder.hex()}"
                    )
                break

            chunk = self.source.read(self.chunk_size)
            if chunk:
                self._buffer.extend(chunk)
            else:
                self._at_eof = True

        raise StopIteration


def iter_packets(
    source: ByteSource,
    encoding: Encoding = STANDARD,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> PacketStream:
    """
    Iterate over the decoded packets of a byte source.

    Args:
        source: Byte source with a read(size) method.
        encoding: SLIP dialect.
        chunk_size: Maximum bytes requested per read.

    Returns:
        Iterator of packet payloads. Raises InvalidControlCharError on a
        malformed packet.
    """
    return PacketStream(source, encoding, chunk_size)
