"""Tests for WAV/BMP codecs and codec selection."""

import numpy as np
import pytest
import soundfile as sf
from PIL import Image

from fftcompress.core.engine import CompressionEngine
from fftcompress.core.media import BmpCodec, WavCodec, select_codec
from fftcompress.core.models import CompressionParameters, SampleDomain
from fftcompress.utils.errors import FormatError, MediaIOError, UnsupportedFormatError

from tests.conftest import SAMPLE_RATE, two_tone, write_bmp, write_wav


class TestWavCodec:
    def test_decode_stereo_pcm16(self, stereo_wav, stereo_samples):
        media = WavCodec().decode(stereo_wav)

        assert media.metadata.kind == "audio"
        assert media.metadata.format == "WAV"
        assert media.metadata.channels == 2
        assert media.metadata.sample_rate == SAMPLE_RATE
        assert media.metadata.frames == len(stereo_samples)
        assert media.metadata.subtype == "PCM_16"
        assert media.data.dtype == np.int16
        assert np.array_equal(media.data, stereo_samples)
        assert media.domain == SampleDomain.for_pcm("PCM_16")

    def test_encode_round_trip(self, stereo_wav, stereo_samples, tmp_path):
        codec = WavCodec()
        media = codec.decode(stereo_wav)
        output = tmp_path / "copy.wav"
        codec.encode(media, output)

        data, sample_rate = sf.read(str(output), dtype="int16", always_2d=True)
        assert sample_rate == SAMPLE_RATE
        assert sf.info(str(output)).subtype == "PCM_16"
        assert np.array_equal(data, stereo_samples)

    def test_decode_pcm24_uses_int32_domain(self, tmp_path):
        path = tmp_path / "deep.wav"
        sf.write(str(path), np.linspace(-0.5, 0.5, 64), 48000, subtype="PCM_24")
        media = WavCodec().decode(path)
        assert media.metadata.subtype == "PCM_24"
        assert media.data.dtype == np.int32
        assert media.domain.dtype == "int32"

    def test_decode_float_wav(self, tmp_path):
        path = tmp_path / "float.wav"
        sf.write(str(path), np.linspace(-0.5, 0.5, 64), 48000, subtype="FLOAT")
        media = WavCodec().decode(path)
        assert media.domain.integer is False
        assert media.data.dtype == np.float64

    def test_garbage_is_format_error(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"this is not a wav file at all")
        with pytest.raises(FormatError):
            WavCodec().decode(path)

    def test_other_container_is_unsupported(self, tmp_path):
        path = tmp_path / "sound.flac"
        sf.write(str(path), np.zeros(64), 8000, format="FLAC", subtype="PCM_16")
        with pytest.raises(UnsupportedFormatError):
            WavCodec().decode(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(MediaIOError):
            WavCodec().decode(tmp_path / "missing.wav")

    def test_extensible_multichannel_round_trip(self, tmp_path):
        frames = 2048
        samples = np.stack([
            two_tone(frames),
            two_tone(frames, low=660.0, high=12000.0),
            two_tone(frames, low=110.0, high=5000.0),
        ], axis=1)
        path = tmp_path / "surround.wav"
        sf.write(str(path), samples, SAMPLE_RATE, subtype="PCM_16", format="WAVEX")

        codec = WavCodec()
        media = codec.decode(path)
        assert media.metadata.format == "WAVEX"
        assert media.metadata.channels == 3
        assert np.array_equal(media.data, samples)
        assert codec.sniff(path.read_bytes()[:12])

        report = CompressionEngine(max_workers=1).compress_file(
            path, CompressionParameters(level=2), tmp_path / "out"
        )
        info = sf.info(str(report.output_path))
        assert info.format == "WAVEX"
        assert info.channels == 3
        assert info.frames == frames
        assert info.subtype == "PCM_16"
        assert len(report.channels) == 3

    def test_sniff(self):
        codec = WavCodec()
        assert codec.sniff(b"RIFF\x00\x00\x00\x00WAVE")
        assert not codec.sniff(b"RIFF\x00\x00\x00\x00AVI ")
        assert not codec.sniff(b"BM")


class TestBmpCodec:
    def test_decode_rgb(self, rgb_bmp, rgb_pixels):
        media = BmpCodec().decode(rgb_bmp)

        assert media.metadata.kind == "image"
        assert media.metadata.format == "BMP"
        assert media.metadata.channels == 3
        assert (media.metadata.height, media.metadata.width) == (12, 20)
        assert media.metadata.subtype == "RGB"
        assert media.metadata.sample_rate is None
        assert np.array_equal(media.data, rgb_pixels)

    def test_decode_grayscale(self, tmp_path, rgb_pixels):
        path = write_bmp(tmp_path / "gray.bmp", rgb_pixels[:, :, 0])
        media = BmpCodec().decode(path)
        assert media.metadata.channels == 1
        assert media.data.shape == (12, 20, 1)

    def test_encode_round_trip(self, rgb_bmp, rgb_pixels, tmp_path):
        codec = BmpCodec()
        output = tmp_path / "copy.bmp"
        codec.encode(codec.decode(rgb_bmp), output)

        with Image.open(output) as image:
            assert image.format == "BMP"
            assert np.array_equal(np.array(image), rgb_pixels)

    def test_encode_grayscale_keeps_single_plane(self, tmp_path, rgb_pixels):
        codec = BmpCodec()
        media = codec.decode(write_bmp(tmp_path / "gray.bmp", rgb_pixels[:, :, 1]))
        output = tmp_path / "gray_copy.bmp"
        codec.encode(media, output)
        with Image.open(output) as image:
            assert image.mode == "L"

    def test_other_image_format_is_unsupported(self, tmp_path, rgb_pixels):
        path = tmp_path / "picture.png"
        Image.fromarray(rgb_pixels).save(path, format="PNG")
        with pytest.raises(UnsupportedFormatError):
            BmpCodec().decode(path)

    def test_garbage_is_format_error(self, tmp_path):
        path = tmp_path / "broken.bmp"
        path.write_bytes(b"BM not really a bitmap")
        with pytest.raises(FormatError):
            BmpCodec().decode(path)


class TestSelectCodec:
    @pytest.mark.parametrize("name, expected", [
        ("a.wav", WavCodec), ("B.WAV", WavCodec), ("c.bmp", BmpCodec), ("d.Bmp", BmpCodec),
    ])
    def test_by_extension(self, tmp_path, name, expected):
        assert isinstance(select_codec(tmp_path / name), expected)

    def test_by_header(self, tmp_path, stereo_samples, rgb_pixels):
        wav = write_wav(tmp_path / "audio.dat", stereo_samples)
        bmp = write_bmp(tmp_path / "image.bin", rgb_pixels)
        assert isinstance(select_codec(wav), WavCodec)
        assert isinstance(select_codec(bmp), BmpCodec)

    def test_explicit_header(self, tmp_path):
        assert isinstance(select_codec(tmp_path / "x", header=b"BM\x00\x00"), BmpCodec)

    def test_unknown(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(UnsupportedFormatError):
            select_codec(path)
