"""Unit tests for the host bridge message contract."""

import struct

import pytest
import numpy as np

from liveaudio.bridge.protocol import (
    PCM_FORMAT,
    Command,
    Topics,
    build_aggregate_message,
    build_chunk_message,
    decode_samples,
    encode_samples,
    parse_command,
)
from liveaudio.models.audio import AudioChunk


@pytest.mark.unit
class TestWireFormat:

    def test_encode_is_little_endian_float32(self):
        payload = encode_samples([0.5, -1.0])

        assert payload == struct.pack('<2f', 0.5, -1.0)

    def test_decode(self):
        samples = decode_samples(struct.pack('<3f', 0.25, 0.0, -0.75))

        np.testing.assert_array_equal(samples, np.array([0.25, 0.0, -0.75], dtype=np.float32))

    def test_decode_rejects_partial_sample(self):
        with pytest.raises(ValueError):
            decode_samples(b'\x00' * 6)

    def test_out_of_range_values_kept(self):
        samples = decode_samples(encode_samples([3.0, -4.0]))

        assert samples.tolist() == [3.0, -4.0]


@pytest.mark.unit
class TestMessages:

    def test_chunk_message(self):
        chunk = AudioChunk(
            payload=encode_samples(np.zeros(480)),
            sequence_number=7,
            timestamp=100.0,
            sample_rate=16000,
        )

        message = build_chunk_message(chunk)

        assert message.info == {
            "format": PCM_FORMAT,
            "sample_rate": 16000,
            "channels": 1,
            "sample_count": 480,
            "byte_size": 1920,
            "timestamp": 100.0,
            "sequence_number": 7,
        }
        assert message.payload is chunk.payload

    def test_aggregate_message(self):
        payload = encode_samples(np.zeros(960))

        message = build_aggregate_message(payload, sample_rate=16000, duration_seconds=1.5,
                                          chunk_count=2)

        assert message.info["format"] == "pcm_f32le"
        assert message.info["sample_count"] == 960
        assert message.info["byte_size"] == 3840
        assert message.info["duration_seconds"] == 1.5
        assert message.info["chunk_count"] == 2
        assert message.info["channels"] == 1
        assert message.payload is payload


@pytest.mark.unit
class TestCommands:

    @pytest.mark.parametrize("value,expected", [
        ("start", Command.START),
        ("STOP", Command.STOP),
        (" clear ", Command.CLEAR),
        (Command.START, Command.START),
    ])
    def test_parse_command(self, value, expected):
        assert parse_command(value) is expected

    @pytest.mark.parametrize("value", ["read", "", None, 1])
    def test_parse_unknown_command(self, value):
        with pytest.raises(ValueError):
            parse_command(value)

    def test_topics(self):
        topics = Topics("rec")

        assert topics.chunk == "rec.chunk"
        assert topics.aggregate == "rec.aggregate"
        assert topics.status == "rec.status"
        assert topics.command == "rec.command"
