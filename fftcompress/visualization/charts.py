"""
Chart rendering for analysis results.

- ChartStyle: Figure geometry and colors
- ChartRenderer: Abstract rendering interface
- MatplotlibChartRenderer: Writes PNG files through matplotlib's Agg canvas
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from fftcompress.core.models import AnalysisResult
from fftcompress.utils.errors import InvalidParameterError, MediaIOError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartStyle:
    """Figure geometry and colors."""

    width: float = 19.0   # inches
    height: float = 8.0   # inches per audio channel / image row
    dpi: int = 100
    log_scale: bool = False
    waveform_color: str = "tab:blue"
    spectrum_color: str = "indianred"
    image_cmap: str = "gray"
    spectrum_cmap: str = "magma"


class ChartRenderer(ABC):
    """
    Abstract base class for chart renderers.

    The engine depends on this abstraction; new output formats are added
    as subclasses.
    """

    @abstractmethod
    def render(
        self,
        results: Sequence[AnalysisResult],
        title: str,
        output_path: Path,
    ) -> Path:
        """
        Render one figure for all channels and write it to output_path.

        Returns:
            Path of the written file
        """


class MatplotlibChartRenderer(ChartRenderer):
    """
    Side-by-side original-domain and frequency-domain plots.

    Audio channels get a waveform above a one-sided spectrum. Image planes
    get a 2x2 grid: pixels, full 2D spectrum, rows-only and columns-only
    spectra, each spectrum centred on the zero frequency.
    """

    def __init__(self, style: Optional[ChartStyle] = None):
        self.style = style or ChartStyle()

    def render(
        self,
        results: Sequence[AnalysisResult],
        title: str,
        output_path: Path,
    ) -> Path:
        output_path = Path(output_path)
        if not results:
            raise InvalidParameterError(
                "Nothing to render: no analysis results",
                parameter="results",
                value=len(results)
            )

        if results[0].ndim == 2:
            figure = self._image_figure(results)
        else:
            figure = self._audio_figure(results)

        figure.suptitle(title)

        try:
            figure.savefig(output_path, dpi=self.style.dpi, format="png")
        except OSError as e:
            raise MediaIOError(
                f"Failed to write chart {output_path}: {e}",
                file_path=str(output_path),
                original_error=e
            ) from e

        logger.debug(f"Rendered {len(results)} channel(s) to {output_path}")
        return output_path

    def _new_figure(self, rows: int) -> Figure:
        # Agg canvas: no display or global pyplot state needed
        figure = Figure(
            figsize=(self.style.width, self.style.height * rows),
            layout="constrained",
        )
        FigureCanvasAgg(figure)
        return figure

    def _audio_figure(self, results: Sequence[AnalysisResult]) -> Figure:
        figure = self._new_figure(len(results))
        axes = figure.subplots(2 * len(results), 1, squeeze=False)[:, 0]

        for index, result in enumerate(results):
            self._plot_waveform(axes[2 * index], result)
            self._plot_spectrum(axes[2 * index + 1], result)
        return figure

    def _plot_waveform(self, ax: Axes, result: AnalysisResult) -> None:
        ax.plot(result.domain_axis, result.values, color=self.style.waveform_color, linewidth=0.5)
        ax.set_title(f"Channel {result.channel}: time domain")
        ax.set_xlabel("Time (seconds)" if result.sample_rate else "Sample")
        ax.set_ylabel("Amplitude")
        ax.grid(True, alpha=0.3)

    def _plot_spectrum(self, ax: Axes, result: AnalysisResult) -> None:
        frequencies, magnitude, log_magnitude = result.one_sided()
        if self.style.log_scale:
            values = log_magnitude
            label = f"log(1 + {result.log_factor:g}|X|)"
        else:
            # Amplitude of each sinusoid in sample units
            values = magnitude * 2.0 / max(result.size, 1)
            label = "Amplitude"

        ax.plot(frequencies, values, color=self.style.spectrum_color, linewidth=0.5)
        ax.set_title(f"Channel {result.channel}: frequency domain")
        ax.set_xlabel("Frequency (Hz)" if result.sample_rate else "Bin")
        ax.set_ylabel(label)
        ax.grid(True, alpha=0.3)

    def _image_figure(self, results: Sequence[AnalysisResult]) -> Figure:
        style = self.style
        figure = self._new_figure(len(results))
        axes = figure.subplots(len(results), 4, squeeze=False)

        for row, result in zip(axes, results):
            panels = [
                ("pixels", result.values, style.image_cmap, False),
                ("2D spectrum", result.log_magnitude, style.spectrum_cmap, True),
                ("horizontal spectrum", result.partial_log_magnitudes.get("rows"), style.spectrum_cmap, True),
                ("vertical spectrum", result.partial_log_magnitudes.get("columns"), style.spectrum_cmap, True),
            ]
            for ax, (name, plane, cmap, centred) in zip(row, panels):
                ax.set_title(f"Channel {result.channel}: {name}")
                ax.set_xticks([])
                ax.set_yticks([])
                if plane is None or plane.size == 0:
                    ax.text(0.5, 0.5, "empty", ha="center", va="center", transform=ax.transAxes)
                    continue
                if centred:
                    plane = np.fft.fftshift(plane)
                ax.imshow(plane, cmap=cmap, interpolation="nearest")
        return figure


def create_chart_renderer(config: Optional[Dict[str, Any]] = None) -> MatplotlibChartRenderer:
    """
    Factory function to create a renderer from the analysis config section.

    Args:
        config: Optional 'analysis' configuration dict
    """
    config = config or {}
    return MatplotlibChartRenderer(ChartStyle(
        width=float(config.get('figure_width', ChartStyle.width)),
        height=float(config.get('figure_height', ChartStyle.height)),
        dpi=int(config.get('dpi', ChartStyle.dpi)),
        log_scale=bool(config.get('log_scale', ChartStyle.log_scale)),
    ))
