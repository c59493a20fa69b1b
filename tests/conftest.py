"""Shared fixtures for fftcompress tests."""

import struct
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from fftcompress.core.models import SampleDomain, Signal


SAMPLE_RATE = 44100


def write_wav(path: Path, samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> Path:
    """Write a 16-bit PCM WAV file from a (frames, channels) int16 array."""
    samples = np.asarray(samples, dtype=np.int16)
    if samples.ndim == 1:
        samples = samples[:, np.newaxis]
    frames, channels = samples.shape
    block_align = channels * 2
    data = samples.astype("<i2").tobytes()

    with open(path, "wb") as f:
        # RIFF header
        f.write(b"RIFF")
        f.write(struct.pack("<I", 36 + len(data)))
        f.write(b"WAVE")
        # fmt chunk
        f.write(b"fmt ")
        f.write(struct.pack("<I", 16))  # chunk size
        f.write(struct.pack("<H", 1))   # PCM
        f.write(struct.pack("<H", channels))
        f.write(struct.pack("<I", sample_rate))
        f.write(struct.pack("<I", sample_rate * block_align))
        f.write(struct.pack("<H", block_align))
        f.write(struct.pack("<H", 16))
        # data chunk
        f.write(b"data")
        f.write(struct.pack("<I", len(data)))
        f.write(data)
    return path


def write_bmp(path: Path, pixels: np.ndarray) -> Path:
    """Write a BMP from a (height, width) or (height, width, 3) uint8 array."""
    Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path, format="BMP")
    return path


def two_tone(frames: int, sample_rate: int = SAMPLE_RATE, low: float = 440.0, high: float = 9000.0) -> np.ndarray:
    """Sum of a low and a high sine, as int16 at about half full scale."""
    t = np.arange(frames) / sample_rate
    wave = 0.3 * np.sin(2 * np.pi * low * t) + 0.2 * np.sin(2 * np.pi * high * t)
    return np.round(wave * 32767).astype(np.int16)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def stereo_samples():
    """0.1 s of two-channel audio: two tones left, the same tones shifted right."""
    left = two_tone(4410)
    right = two_tone(4410, low=660.0, high=12000.0)
    return np.stack([left, right], axis=1)


@pytest.fixture
def stereo_wav(tmp_path, stereo_samples):
    return write_wav(tmp_path / "stereo.wav", stereo_samples)


@pytest.fixture
def rgb_pixels():
    """20x12 RGB image: horizontal gradient, vertical gradient and a checkerboard."""
    height, width = 12, 20
    y, x = np.mgrid[0:height, 0:width]
    red = (x * 255 // (width - 1)).astype(np.uint8)
    green = (y * 255 // (height - 1)).astype(np.uint8)
    blue = np.where((x + y) % 2 == 0, 230, 20).astype(np.uint8)
    return np.stack([red, green, blue], axis=-1)


@pytest.fixture
def rgb_bmp(tmp_path, rgb_pixels):
    return write_bmp(tmp_path / "picture.bmp", rgb_pixels)


@pytest.fixture
def pcm16_domain():
    return SampleDomain.for_pcm("PCM_16")


@pytest.fixture
def audio_signal(pcm16_domain):
    """Mono 16-bit channel of 1000 samples."""
    return Signal(
        samples=two_tone(1000, sample_rate=8000, low=200.0, high=3000.0),
        channel=0,
        domain=pcm16_domain,
        sample_rate=8000,
    )
