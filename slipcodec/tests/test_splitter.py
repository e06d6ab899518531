"""
Unit tests for SLIP stream splitting.
"""

import io
import logging

import pytest

from slipcodec.encoding import BLUEFRUIT, STANDARD
from slipcodec.errors import InvalidControlCharError, InvalidEscapedCharError
from slipcodec.splitter import (
    EndOfSource,
    NeedMoreData,
    Packet,
    PacketDecoder,
    PacketStream,
    iter_packets,
    split_next,
)


class RecordingSource:
    """Byte source that serves fixed-size chunks and records each read."""

    def __init__(self, data: bytes):
        self.stream = io.BytesIO(data)
        self.reads = 0

    def read(self, size: int) -> bytes:
        self.reads += 1
        return self.stream.read(size)


class TestSplitNext:
    """Test the three split outcomes."""

    def test_need_more_data(self):
        """No END and more data may come."""
        result = split_next(STANDARD, b"\x01\x02", at_eof=False)

        assert isinstance(result, NeedMoreData)
        assert result.consumed == 0

    def test_need_more_data_empty(self):
        """Empty buffer before EOF."""
        assert isinstance(split_next(STANDARD, b"", at_eof=False), NeedMoreData)

    def test_end_of_source(self):
        """No END and source exhausted."""
        result = split_next(STANDARD, b"\x01\x02", at_eof=True)

        assert result == EndOfSource(consumed=2, remainder=b"\x01\x02")

    def test_end_of_source_empty(self):
        """Nothing left at EOF."""
        assert split_next(STANDARD, b"", at_eof=True) == EndOfSource(consumed=0, remainder=b"")

    def test_packet_at_boundary(self):
        """Buffer ends exactly at END."""
        result = split_next(STANDARD, b"\x01\x02\xc0", at_eof=False)

        assert result == Packet(consumed=3, payload=b"\x01\x02")

    def test_packet_with_trailing_bytes(self):
        """Only bytes up to END are consumed."""
        result = split_next(STANDARD, b"\x01\xc0\x02\x03", at_eof=False)

        assert result == Packet(consumed=2, payload=b"\x01")

    def test_packet_found_at_eof(self):
        """A terminated packet is returned even at EOF."""
        result = split_next(STANDARD, b"\x01\xc0\x02", at_eof=True)

        assert result == Packet(consumed=2, payload=b"\x01")

    def test_empty_packet(self):
        """Lone END yields an empty packet."""
        assert split_next(STANDARD, b"\xc0\x01\xc0", at_eof=False) == Packet(consumed=1, payload=b"")

    def test_mid_escape(self):
        """Buffer ending after ESC waits for more data."""
        buffer = bytearray(b"\x04\xdb")
        assert isinstance(split_next(STANDARD, buffer, at_eof=False), NeedMoreData)

        buffer.extend(b"\xdc\xc0")
        assert split_next(STANDARD, buffer, at_eof=False) == Packet(consumed=4, payload=b"\x04\xc0")

    def test_start_byte_stripped(self):
        """Leading START is not part of the payload."""
        result = split_next(BLUEFRUIT, bytes.fromhex("AB04CDACCDBDBC"), at_eof=False)

        assert result == Packet(consumed=7, payload=bytes.fromhex("04ABBC"))

    def test_start_byte_optional(self):
        """Packets without START are still split."""
        result = split_next(BLUEFRUIT, bytes.fromhex("0102BC"), at_eof=False)

        assert result == Packet(consumed=3, payload=b"\x01\x02")

    def test_invalid_control_char(self):
        """ESC followed by a raw START is rejected."""
        data = bytes.fromhex("AB04CDABCDBDBC")

        with pytest.raises(InvalidControlCharError) as exc_info:
            split_next(BLUEFRUIT, data, at_eof=False)

        assert exc_info.value.index == 3
        assert exc_info.value.byte == 0xAB
        assert exc_info.value.consumed == 7

    def test_escape_before_end(self):
        """ESC directly before END reports END as the invalid follower."""
        with pytest.raises(InvalidControlCharError) as exc_info:
            split_next(STANDARD, b"\x01\xdb\xc0\x02\xc0", at_eof=False)

        assert exc_info.value.index == 2
        assert exc_info.value.byte == 0xC0
        assert exc_info.value.consumed == 3

    def test_invalid_control_char_is_decode_error(self):
        """Splitter errors share the decoder's error type."""
        with pytest.raises(InvalidEscapedCharError):
            split_next(STANDARD, b"\xdb\x00\xc0", at_eof=False)


class TestPacketStream:
    """Test lazy packet iteration over a byte source."""

    def test_standard_stream(self):
        """Three STANDARD packets, whole buffer consumed."""
        data = bytes.fromhex("010203C0 04DBDCC0 DBDD05C0")
        stream = iter_packets(io.BytesIO(data), STANDARD)

        assert list(stream) == [
            bytes.fromhex("010203"),
            bytes.fromhex("04C0"),
            bytes.fromhex("DB05"),
        ]
        assert stream.leftover == b""

    def test_bluefruit_stream(self):
        """Three BLUEFRUIT packets."""
        data = bytes.fromhex("AB010203BC AB04CDACCDBDBC ABCDCE05BC")
        packets = list(iter_packets(io.BytesIO(data), BLUEFRUIT))

        assert packets == [
            bytes.fromhex("010203"),
            bytes.fromhex("04ABBC"),
            bytes.fromhex("CD05"),
        ]

    def test_bluefruit_invalid_control_char(self):
        """Malformed packet raises and is not yielded."""
        data = bytes.fromhex("AB04CDABCDBDBC")
        packets = []

        with pytest.raises(InvalidControlCharError):
            for packet in iter_packets(io.BytesIO(data), BLUEFRUIT):
                packets.append(packet)

        assert packets == []

    def test_byte_at_a_time(self):
        """Packets split across reads are reassembled."""
        data = bytes.fromhex("010203C0 04DBDCC0 DBDD05C0")
        packets = list(iter_packets(io.BytesIO(data), STANDARD, chunk_size=1))

        assert packets == [b"\x01\x02\x03", b"\x04\xc0", b"\xdb\x05"]

    def test_leftover_at_end_of_source(self):
        """Unterminated trailing bytes are kept, not yielded."""
        stream = PacketStream(io.BytesIO(b"\x01\xc0\x02\x03"), STANDARD)

        assert list(stream) == [b"\x01"]
        assert stream.leftover == b"\x02\x03"

    def test_leftover_is_logged(self, caplog):
        """Unterminated trailing bytes produce a warning."""
        stream = PacketStream(io.BytesIO(b"\x02\x03"), STANDARD)

        with caplog.at_level(logging.WARNING, logger="slipcodec.splitter"):
            assert list(stream) == []

        assert "unterminated" in caplog.text

    def test_empty_source(self):
        """Empty source yields nothing."""
        stream = PacketStream(io.BytesIO(b""), STANDARD)

        assert list(stream) == []
        assert stream.leftover == b""

    def test_reads_lazily(self):
        """Source is only read when no complete packet is buffered."""
        source = RecordingSource(b"\x01\xc0\x02\xc0" + b"\x03" * 100 + b"\xc0")
        stream = PacketStream(source, STANDARD, chunk_size=4)

        assert next(stream) == b"\x01"
        assert source.reads == 1
        assert next(stream) == b"\x02"
        assert source.reads == 1

    def test_stream_continues_after_error(self):
        """Iteration can resume after a malformed packet."""
        data = bytes.fromhex("01DB00C0 02C0")
        stream = PacketStream(io.BytesIO(data), STANDARD)

        with pytest.raises(InvalidControlCharError):
            next(stream)

        assert list(stream) == [b"\x02"]

    def test_non_strict_skips_malformed(self):
        """Non-strict stream skips malformed packets."""
        data = bytes.fromhex("01C0 01DB00C0 02C0")
        stream = PacketStream(io.BytesIO(data), STANDARD, strict=False)

        assert list(stream) == [b"\x01", b"\x02"]

    def test_skip_empty(self):
        """Back-to-back END bytes are ignored when skip_empty is set."""
        data = bytes.fromhex("C0 01C0 C0C0 02C0")

        assert list(PacketStream(io.BytesIO(data), STANDARD)) == [b"", b"\x01", b"", b"", b"\x02"]
        assert list(PacketStream(io.BytesIO(data), STANDARD, skip_empty=True)) == [b"\x01", b"\x02"]

    def test_invalid_chunk_size(self):
        """chunk_size must be positive."""
        with pytest.raises(ValueError):
            PacketStream(io.BytesIO(b""), STANDARD, chunk_size=0)

    def test_roundtrip_stream(self):
        """Concatenated encodings split back into the original payloads."""
        payloads = [b"", b"\x00", bytes([0xC0, 0xDB]), bytes(range(256)), b"\xdc\xdd"]

        for encoding in (STANDARD, BLUEFRUIT):
            data = b"".join(encoding.encode(p) for p in payloads)
            assert list(iter_packets(io.BytesIO(data), encoding, chunk_size=3)) == payloads


class TestPacketDecoder:
    """Test incremental packet decoder."""

    def test_decoder_simple(self):
        """Test decoder with complete packet."""
        decoder = PacketDecoder(STANDARD)

        packets = decoder.feed(STANDARD.encode(b"\x01\x02\x03\x04"))

        assert packets == [b"\x01\x02\x03\x04"]
        assert decoder.stats["packets_rx"] == 1

    def test_decoder_incremental(self):
        """Test decoder with one byte per feed."""
        decoder = PacketDecoder(BLUEFRUIT)
        data = bytes([0x01, 0xAB, 0xBC, 0xCD])
        encoded = BLUEFRUIT.encode(data)

        packets = []
        for byte in encoded:
            packets.extend(decoder.feed(bytes([byte])))

        assert packets == [data]
        assert decoder.stats["bytes_rx"] == len(encoded)

    def test_decoder_multiple_packets(self):
        """Several packets in one feed."""
        decoder = PacketDecoder(STANDARD)

        packets = decoder.feed(bytes.fromhex("010203C0 04DBDCC0 DBDD05C0"))

        assert packets == [b"\x01\x02\x03", b"\x04\xc0", b"\xdb\x05"]

    def test_decoder_split_packet(self):
        """Test decoder with packet split across feeds."""
        decoder = PacketDecoder(STANDARD)
        encoded = STANDARD.encode(b"\x01\x02\x03\x04")
        mid = len(encoded) // 2

        assert decoder.feed(encoded[:mid]) == []
        assert decoder.feed(encoded[mid:]) == [b"\x01\x02\x03\x04"]

    def test_decoder_drops_malformed(self, caplog):
        """Malformed packet is dropped, counted and logged."""
        decoder = PacketDecoder(STANDARD)

        with caplog.at_level(logging.WARNING, logger="slipcodec.splitter"):
            packets = decoder.feed(bytes.fromhex("01DB00C0 02C0"))

        assert packets == [b"\x02"]
        assert decoder.stats["decode_errors"] == 1
        assert "malformed" in caplog.text

    def test_decoder_finish(self):
        """finish() returns and clears unterminated bytes."""
        decoder = PacketDecoder(STANDARD)

        assert decoder.feed(b"\x01\xc0\x02\x03") == [b"\x01"]
        assert decoder.finish() == b"\x02\x03"
        assert decoder.finish() == b""

    def test_decoder_reset(self):
        """Test decoder reset."""
        decoder = PacketDecoder(STANDARD)

        decoder.feed(b"\x01\x02")
        decoder.reset()

        assert decoder.feed(STANDARD.encode(b"\x03\x04")) == [b"\x03\x04"]

    def test_decoder_skip_empty(self):
        """Empty packets are dropped when skip_empty is set."""
        decoder = PacketDecoder(STANDARD, skip_empty=True)

        assert decoder.feed(b"\xc0\xc0\x01\xc0\xc0") == [b"\x01"]
        assert decoder.stats["packets_rx"] == 1
