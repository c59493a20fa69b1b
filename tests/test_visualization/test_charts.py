"""Tests for the matplotlib chart renderer."""

import numpy as np
import pytest

from fftcompress.core.analyzer import analyze
from fftcompress.core.models import SampleDomain, Signal
from fftcompress.utils.errors import InvalidParameterError, MediaIOError
from fftcompress.visualization import ChartStyle, MatplotlibChartRenderer, create_chart_renderer


PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def small_style():
    return ChartStyle(width=4.0, height=2.0, dpi=40)


@pytest.fixture
def plane_results(rgb_pixels):
    domain = SampleDomain.for_pixels(8)
    return [
        analyze(Signal(samples=rgb_pixels[:, :, c], channel=c, domain=domain))
        for c in range(3)
    ]


def _is_png(path):
    return path.exists() and path.read_bytes()[:8] == PNG_MAGIC


class TestMatplotlibChartRenderer:
    def test_audio_chart(self, tmp_path, audio_signal, small_style):
        output = tmp_path / "audio.png"
        written = MatplotlibChartRenderer(small_style).render([analyze(audio_signal)], "tone.wav", output)
        assert written == output
        assert _is_png(output)

    def test_audio_chart_log_scale(self, tmp_path, audio_signal):
        style = ChartStyle(width=4.0, height=2.0, dpi=40, log_scale=True)
        output = tmp_path / "audio_log.png"
        MatplotlibChartRenderer(style).render([analyze(audio_signal, log_factor=0.01)], "tone.wav", output)
        assert _is_png(output)

    def test_image_chart(self, tmp_path, plane_results, small_style):
        output = tmp_path / "image.png"
        MatplotlibChartRenderer(small_style).render(plane_results, "picture.bmp", output)
        assert _is_png(output)

    def test_empty_channel_is_drawn(self, tmp_path, small_style):
        signal = Signal(samples=np.array([]), channel=0, domain=SampleDomain.for_pcm("FLOAT"), sample_rate=8000)
        output = tmp_path / "empty.png"
        MatplotlibChartRenderer(small_style).render([analyze(signal)], "empty.wav", output)
        assert _is_png(output)

    def test_no_results(self, tmp_path):
        with pytest.raises(InvalidParameterError):
            MatplotlibChartRenderer().render([], "nothing", tmp_path / "x.png")

    def test_unwritable_destination(self, tmp_path, audio_signal, small_style):
        output = tmp_path / "missing" / "dir" / "audio.png"
        with pytest.raises(MediaIOError):
            MatplotlibChartRenderer(small_style).render([analyze(audio_signal)], "tone.wav", output)


class TestFactory:
    def test_defaults(self):
        renderer = create_chart_renderer()
        assert renderer.style == ChartStyle()

    def test_from_analysis_section(self):
        renderer = create_chart_renderer({"figure_width": 10, "dpi": 72, "log_scale": True})
        assert renderer.style.width == 10.0
        assert renderer.style.dpi == 72
        assert renderer.style.log_scale is True
