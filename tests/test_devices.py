"""
Tests for assistant/devices.py — sounddevice capture (sounddevice is mocked).
"""

import asyncio
import types
from unittest.mock import patch

import pytest

from assistant.devices import SoundDeviceCapture


class _RawInputStream:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.started = False
        self.stopped = False
        self.closed = 0
        _RawInputStream.instances.append(self)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def close(self):
        self.closed += 1

    def feed(self, data):
        self.kwargs["callback"](data, len(data) // 2, None, None)


@pytest.fixture
def fake_sd():
    _RawInputStream.instances = []
    module = types.ModuleType("sounddevice")
    module.RawInputStream = _RawInputStream
    with patch.dict("sys.modules", {"sounddevice": module}):
        yield module


class TestSoundDeviceCapture:
    def test_open_configures_int16_stream(self, fake_sd):
        stream = asyncio.run(SoundDeviceCapture(sample_rate=16000, channels=1).open())
        raw = _RawInputStream.instances[0]
        assert raw.kwargs["samplerate"] == 16000
        assert raw.kwargs["channels"] == 1
        assert raw.kwargs["dtype"] == "int16"
        assert stream.mime_type == "audio/L16;rate=16000;channels=1"

    def test_open_failure_propagates(self, fake_sd):
        def fail(**kwargs):
            raise OSError("Error querying device -1")

        fake_sd.RawInputStream = fail
        with pytest.raises(OSError):
            asyncio.run(SoundDeviceCapture().open())

    def test_chunks_delivered_on_loop(self, fake_sd):
        async def scenario():
            stream = await SoundDeviceCapture().open()
            chunks = []
            stream.start(chunks.append)
            raw = _RawInputStream.instances[0]
            raw.feed(b"\x01\x00\x02\x00")
            raw.feed(bytearray(b"\x03\x00"))
            await stream.stop()
            return raw, chunks

        raw, chunks = asyncio.run(scenario())
        assert raw.started and raw.stopped
        assert chunks == [b"\x01\x00\x02\x00", b"\x03\x00"]

    def test_no_chunks_after_stop(self, fake_sd):
        async def scenario():
            stream = await SoundDeviceCapture().open()
            chunks = []
            stream.start(chunks.append)
            await stream.stop()
            _RawInputStream.instances[0].feed(b"\x00\x00")
            await asyncio.sleep(0)
            return chunks

        assert asyncio.run(scenario()) == []

    def test_track_stop_closes_stream_once(self, fake_sd):
        stream = asyncio.run(SoundDeviceCapture().open())
        track = stream.get_tracks()[0]
        track.stop()
        track.stop()
        assert _RawInputStream.instances[0].closed == 1
