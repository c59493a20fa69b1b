"""Tests for magnitude/log-magnitude analysis."""

import numpy as np
import pytest

from fftcompress.core.analyzer import analyze, log_scale
from fftcompress.core.models import SampleDomain, Signal
from fftcompress.utils.errors import InvalidParameterError


FLOAT_DOMAIN = SampleDomain.for_pcm("FLOAT")


def _cosine(n=64, k=4, sample_rate=64):
    samples = np.cos(2 * np.pi * k * np.arange(n) / n)
    return Signal(samples=samples, channel=0, domain=FLOAT_DOMAIN, sample_rate=sample_rate)


class TestAnalyzeAudio:
    def test_magnitude_peaks_at_tone_and_mirror(self):
        result = analyze(_cosine())
        assert result.magnitude[4] == pytest.approx(32.0)
        assert result.magnitude[60] == pytest.approx(32.0)
        others = np.delete(result.magnitude, [4, 60])
        assert np.max(others) < 1e-9

    def test_axes_use_sample_rate(self):
        result = analyze(_cosine(sample_rate=64))
        assert result.frequency_axis[4] == pytest.approx(4.0)
        assert result.domain_axis[1] == pytest.approx(1 / 64)
        assert result.sample_rate == 64

    def test_axes_without_sample_rate_are_indices(self):
        result = analyze(_cosine(sample_rate=None))
        assert result.frequency_axis.tolist() == list(range(64))
        assert result.domain_axis.tolist() == list(range(64))

    def test_log_magnitude(self):
        result = analyze(_cosine(), log_factor=0.5)
        np.testing.assert_allclose(result.log_magnitude, np.log1p(result.magnitude * 0.5))
        assert result.log_factor == 0.5

    def test_log_scale_is_monotone(self):
        magnitude = np.array([0.0, 1.0, 10.0, 1000.0])
        assert np.all(np.diff(log_scale(magnitude, 2.0)) > 0)

    def test_padding_extends_frequency_axis_only(self, audio_signal):
        result = analyze(audio_signal)
        assert result.values.shape == (1000,)
        assert result.domain_axis.shape == (1000,)
        assert result.magnitude.shape == (1024,)
        assert result.frequency_axis[-1] == pytest.approx(1023 * 8000 / 1024)

    def test_one_sided_view(self, audio_signal):
        frequencies, magnitude, log_magnitude = analyze(audio_signal).one_sided()
        assert len(frequencies) == len(magnitude) == len(log_magnitude) == 513
        assert frequencies[-1] == pytest.approx(4000.0)

    @pytest.mark.parametrize("log_factor", [0.0, -1.0, float("inf")])
    def test_invalid_log_factor(self, audio_signal, log_factor):
        with pytest.raises(InvalidParameterError):
            analyze(audio_signal, log_factor=log_factor)

    def test_empty_signal(self):
        signal = Signal(samples=np.array([]), channel=0, domain=FLOAT_DOMAIN, sample_rate=8000)
        result = analyze(signal)
        assert result.magnitude.shape == (0,)
        frequencies, magnitude, _ = result.one_sided()
        assert len(frequencies) == len(magnitude) == 0


class TestAnalyzeImage:
    def test_plane_analysis(self, rgb_pixels):
        plane = Signal(samples=rgb_pixels[:, :, 0], channel=2, domain=SampleDomain.for_pixels(8))
        result = analyze(plane, log_factor=0.1)

        assert result.ndim == 2
        assert result.channel == 2
        assert result.magnitude.shape == (16, 32)
        assert result.partial_log_magnitudes["rows"].shape == (16, 32)
        assert result.partial_log_magnitudes["columns"].shape == (16, 32)
        assert result.frequency_axes[0].tolist() == list(range(16))
        assert result.frequency_axes[1].tolist() == list(range(32))
        assert result.domain_axes[1].tolist() == list(range(20))
        assert result.sample_rate is None

    def test_dc_bin_is_pixel_sum(self, rgb_pixels):
        plane = Signal(samples=rgb_pixels[:, :, 1], channel=0, domain=SampleDomain.for_pixels(8))
        result = analyze(plane)
        assert result.magnitude[0, 0] == pytest.approx(float(rgb_pixels[:, :, 1].sum()))

    def test_one_sided_not_defined_for_planes(self, rgb_pixels):
        plane = Signal(samples=rgb_pixels[:, :, 0], channel=0, domain=SampleDomain.for_pixels(8))
        with pytest.raises(InvalidParameterError):
            analyze(plane).one_sided()
