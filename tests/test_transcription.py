"""
Tests for assistant/transcription.py — audio reference files and the transcriber call.
"""

import asyncio
import os
import wave

import pytest

from assistant.errors import ModelNotLoadedError
from assistant.recording import AudioUnit
from assistant.transcription import audio_reference, transcribe
from providers.stt.base import TranscriptionResult


class TestAudioReference:
    def test_encoded_audio_written_as_is(self):
        audio = AudioUnit(data=b"\x1a\x45\xdf\xa3webm", mime_type="audio/webm;codecs=opus", chunk_count=1)
        with audio_reference(audio) as path:
            assert path.endswith(".webm")
            with open(path, "rb") as f:
                assert f.read() == audio.data
        assert not os.path.exists(path)

    def test_pcm_wrapped_in_wav(self):
        samples = b"\x00\x01" * 800
        audio = AudioUnit(data=samples, mime_type="audio/L16;rate=8000;channels=1", chunk_count=4)
        with audio_reference(audio) as path:
            assert path.endswith(".wav")
            with wave.open(path, "rb") as wav:
                assert wav.getframerate() == 8000
                assert wav.getnchannels() == 1
                assert wav.getsampwidth() == 2
                assert wav.readframes(wav.getnframes()) == samples
        assert not os.path.exists(path)

    def test_unknown_type_still_written(self):
        audio = AudioUnit(data=b"raw", mime_type="application/octet-stream", chunk_count=1)
        with audio_reference(audio) as path:
            assert path.endswith(".bin")

    def test_file_removed_on_error(self):
        audio = AudioUnit(data=b"raw", mime_type="audio/ogg", chunk_count=1)
        with pytest.raises(RuntimeError):
            with audio_reference(audio) as path:
                raise RuntimeError("model crashed")
        assert not os.path.exists(path)


class TestTranscribe:
    def test_without_model(self):
        audio = AudioUnit(data=b"x", mime_type="audio/webm", chunk_count=1)
        with pytest.raises(ModelNotLoadedError, match="Voice model not loaded"):
            asyncio.run(transcribe(audio, None))

    def test_returns_text_field(self):
        paths = []

        def transcriber(path):
            paths.append(path)
            return TranscriptionResult(text="what is the capital of france")

        audio = AudioUnit(data=b"x", mime_type="audio/webm", chunk_count=1)
        assert asyncio.run(transcribe(audio, transcriber)) == "what is the capital of france"
        assert len(paths) == 1

    def test_accepts_mapping_results(self):
        audio = AudioUnit(data=b"x", mime_type="audio/webm", chunk_count=1)
        assert asyncio.run(transcribe(audio, lambda path: {"text": "hi"})) == "hi"

    def test_model_errors_propagate_unchanged(self):
        error = RuntimeError("decoder crashed")

        def transcriber(path):
            raise error

        audio = AudioUnit(data=b"x", mime_type="audio/webm", chunk_count=1)
        with pytest.raises(RuntimeError) as exc_info:
            asyncio.run(transcribe(audio, transcriber))
        assert exc_info.value is error
