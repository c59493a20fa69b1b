"""
Compression engine for fftcompress.

Orchestrates the compress path (decode, transform, band-limit, inverse
transform, encode) and the analyze path (decode, transform, analyze,
render) for a single file.
"""

import logging
import os
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from fftcompress.core import codec, transform
from fftcompress.core.adapter import from_signal, merge_channels, split_channels, to_signal
from fftcompress.core.analyzer import analyze
from fftcompress.core.media import MediaCodec, require_file, select_codec
from fftcompress.core.models import (
    DEFAULT_LOG_FACTOR,
    AnalysisResult,
    ChannelReport,
    CompressionParameters,
    CompressionReport,
    DecodedMedia,
    Signal,
    Spectrum,
)
from fftcompress.utils.errors import ConfigurationError, MediaIOError
from fftcompress.utils.logging import create_logger_with_context

DEFAULT_OUTPUT_SUFFIX = "_compressed"
ANALYSIS_SUFFIX = "_analysis.png"


class CompressionEngine:
    """
    Runs the compress and analyze pipelines.

    Design:
    - Dependency Injection: codec selection and renderer are injectable
    - Parallel Execution: channels are independent and may run concurrently
    - No partial output: files are written to a temporary name and renamed
      only after encoding succeeds
    """

    def __init__(
        self,
        renderer: Optional[Any] = None,
        codec_selector=select_codec,
        max_workers: int = 4,
        output_suffix: str = DEFAULT_OUTPUT_SUFFIX,
    ):
        """
        Initialize compression engine.

        Args:
            renderer: Chart renderer with render(results, title, output_path)
            codec_selector: Callable mapping a path to a MediaCodec
            max_workers: Max parallel channel workers (1 disables threading)
            output_suffix: Appended to the input stem for compressed output
        """
        self.renderer = renderer
        self.codec_selector = codec_selector
        self.max_workers = max(1, int(max_workers))
        self.output_suffix = output_suffix
        self.executor = ThreadPoolExecutor(max_workers=self.max_workers) if self.max_workers > 1 else None
        self.logger = logging.getLogger(__name__)

    def _map_channels(self, function, signals: List[Signal]) -> list:
        """Apply function to every channel; results keep channel order."""
        if self.executor is None or len(signals) < 2:
            return [function(signal) for signal in signals]
        return list(self.executor.map(function, signals))

    @staticmethod
    def compress_signal(
        signal: Signal, params: CompressionParameters
    ) -> Tuple[np.ndarray, ChannelReport]:
        """
        Band-limit one channel and reconstruct it.

        Returns:
            Tuple of (reconstructed samples in the signal's domain dtype,
            ChannelReport)
        """
        padded, original_shape = to_signal(signal.samples, signal.shape)
        spectrum = Spectrum(
            coefficients=transform.forward_nd(padded),
            original_shape=original_shape,
            channel=signal.channel,
            sample_rate=signal.sample_rate,
        )

        representation = codec.compress(spectrum, params)
        restored = codec.decompress(representation)
        samples = from_signal(
            transform.inverse_nd(restored.coefficients),
            representation.original_shape,
            signal.domain,
        )

        if samples.size:
            error = samples.astype(np.float64) - signal.samples
            mse = float(np.mean(error ** 2))
        else:
            mse = 0.0

        return samples, ChannelReport(
            channel=signal.channel,
            retained_coefficients=representation.retained_coefficients,
            total_coefficients=representation.total_coefficients,
            mean_squared_error=mse,
        )

    def compress_media(
        self, media: DecodedMedia, params: CompressionParameters
    ) -> Tuple[DecodedMedia, CompressionReport]:
        """
        Compress decoded media in memory.

        Raises:
            FormatError: Decoded data inconsistent with its header
            InvalidParameterError: Degenerate band for these parameters
        """
        start_time = time.time()
        signals = split_channels(media)

        outcomes = self._map_channels(
            lambda signal: self.compress_signal(signal, params), signals
        )
        planes = [samples for samples, _ in outcomes]
        compressed = merge_channels(planes, media.metadata, media.domain)

        report = CompressionReport(
            parameters=params,
            metadata=media.metadata,
            channels=[channel_report for _, channel_report in outcomes],
            processing_time=time.time() - start_time,
        )
        return compressed, report

    def compress_file(
        self,
        file_path: Path,
        params: CompressionParameters,
        output_dir: Path,
    ) -> CompressionReport:
        """
        Compress a WAV or BMP file into a new container of the same format.

        Args:
            file_path: Input media file
            params: Retained band selection
            output_dir: Directory for <stem><suffix><ext>

        Returns:
            CompressionReport with output_path set

        Raises:
            MediaCompressionError: Any failure; no output file is left behind
        """
        file_path = Path(file_path)
        logger = create_logger_with_context(__name__, {'file': str(file_path)})

        require_file(file_path)
        media_codec = self.codec_selector(file_path)
        logger.info(f"Decoding {file_path} with {media_codec.name} codec")
        media = media_codec.decode(file_path)

        compressed, report = self.compress_media(media, params)

        output_path = Path(output_dir) / f"{file_path.stem}{self.output_suffix}{file_path.suffix}"
        self._write_atomically(media_codec, compressed, output_path)

        report.output_path = output_path
        logger.info(f"Compression complete: {report.get_summary()}")
        return report

    def analyze_media(
        self, media: DecodedMedia, log_factor: float = DEFAULT_LOG_FACTOR
    ) -> List[AnalysisResult]:
        """Analyze every channel of decoded media."""
        signals = split_channels(media)
        return self._map_channels(lambda signal: analyze(signal, log_factor), signals)

    def analyze_file(
        self,
        file_path: Path,
        output_dir: Path,
        log_factor: float = DEFAULT_LOG_FACTOR,
    ) -> Path:
        """
        Render time/spatial and frequency views of a file.

        Returns:
            Path of the rendered chart
        """
        if self.renderer is None:
            raise ConfigurationError(
                "Analysis requires a chart renderer",
                config_key="renderer"
            )

        file_path = Path(file_path)
        require_file(file_path)
        media_codec = self.codec_selector(file_path)
        media = media_codec.decode(file_path)

        self.logger.info(f"Analyzing {media.metadata.channels} channel(s) of {file_path}")
        results = self.analyze_media(media, log_factor)

        output_path = Path(output_dir) / f"{file_path.stem}{ANALYSIS_SUFFIX}"
        _ensure_directory(output_path.parent)
        self.renderer.render(results, title=file_path.name, output_path=output_path)
        self.logger.info(f"Analysis written to: {output_path}")
        return output_path

    def _write_atomically(
        self, media_codec: MediaCodec, media: DecodedMedia, output_path: Path
    ) -> None:
        """Encode to a temporary file next to output_path, then rename."""
        _ensure_directory(output_path.parent)
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{output_path.stem}.", suffix=output_path.suffix, dir=output_path.parent
        )
        os.close(fd)
        temp_path = Path(temp_name)
        try:
            media_codec.encode(media, temp_path)
            os.replace(temp_path, output_path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        self.logger.info(f"Wrote {output_path}")

    def shutdown(self) -> None:
        """Shutdown the engine and cleanup resources."""
        self.logger.debug("Shutting down compression engine")
        if self.executor is not None:
            self.executor.shutdown(wait=True)

    def __enter__(self) -> "CompressionEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()


def _ensure_directory(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise MediaIOError(
            f"Cannot create output directory {directory}: {e}",
            file_path=str(directory),
            original_error=e
        ) from e


def create_compression_engine(
    config: Optional[Dict[str, Any]] = None,
    renderer: Optional[Any] = None,
) -> CompressionEngine:
    """
    Factory function to create CompressionEngine with configuration.

    Args:
        config: Configuration dict (see utils.config.get_default_config)
        renderer: Optional chart renderer; built from config if omitted

    Returns:
        CompressionEngine: Configured engine
    """
    config = config or {}

    if renderer is None:
        from fftcompress.visualization.charts import create_chart_renderer
        renderer = create_chart_renderer(config.get('analysis', {}))

    return CompressionEngine(
        renderer=renderer,
        max_workers=config.get('performance', {}).get('max_workers', 4),
        output_suffix=config.get('compression', {}).get('output_suffix', DEFAULT_OUTPUT_SUFFIX),
    )
