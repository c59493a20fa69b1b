"""
Spectrum analysis for display.

Derives magnitude and log-scaled magnitude arrays, plus matching
original-domain and frequency axes, from a Signal. Nothing computed here
feeds back into compression.
"""

import logging
from typing import Dict, Optional, Tuple

import numpy as np

from fftcompress.core import transform
from fftcompress.core.adapter import to_signal
from fftcompress.core.models import DEFAULT_LOG_FACTOR, AnalysisResult, Signal, validate_log_factor

logger = logging.getLogger(__name__)


def log_scale(magnitude: np.ndarray, log_factor: float) -> np.ndarray:
    """log(1 + magnitude * log_factor); monotone, compresses dynamic range."""
    return np.log1p(magnitude * log_factor)


def _domain_axis(length: int, sample_rate: Optional[int]) -> np.ndarray:
    positions = np.arange(length, dtype=np.float64)
    if sample_rate:
        return positions / sample_rate
    return positions


def _frequency_axis(size: int, sample_rate: Optional[int]) -> np.ndarray:
    bins = np.arange(size, dtype=np.float64)
    if sample_rate and size:
        return bins * sample_rate / size
    return bins


def analyze(signal: Signal, log_factor: float = DEFAULT_LOG_FACTOR) -> AnalysisResult:
    """
    Analyze one channel.

    Args:
        signal: 1D audio channel or 2D image plane
        log_factor: Positive scale applied before the log

    Returns:
        AnalysisResult for side-by-side plotting

    Raises:
        InvalidParameterError: If log_factor is not positive
    """
    log_factor = validate_log_factor(log_factor)
    padded, original_shape = to_signal(signal.samples, signal.shape)

    partial: Dict[str, np.ndarray] = {}
    if signal.ndim == 2:
        spectrum = transform.forward_2d(padded)
        partial['rows'] = log_scale(np.abs(transform.forward_rows(padded)), log_factor)
        partial['columns'] = log_scale(np.abs(transform.forward_columns(padded)), log_factor)
        # Image axes are pixel positions and raw bin indices
        sample_rate = None
    else:
        spectrum = transform.forward(padded)
        sample_rate = signal.sample_rate

    magnitude = np.abs(spectrum)
    domain_axes: Tuple[np.ndarray, ...] = tuple(
        _domain_axis(n, sample_rate) for n in original_shape
    )
    frequency_axes: Tuple[np.ndarray, ...] = tuple(
        _frequency_axis(n, sample_rate) for n in spectrum.shape
    )

    logger.debug(
        f"Analyzed channel {signal.channel}: shape {original_shape} -> {spectrum.shape} bins"
    )

    return AnalysisResult(
        channel=signal.channel,
        values=np.array(signal.samples),
        domain_axes=domain_axes,
        frequency_axes=frequency_axes,
        magnitude=magnitude,
        log_magnitude=log_scale(magnitude, log_factor),
        log_factor=log_factor,
        sample_rate=sample_rate,
        partial_log_magnitudes=partial,
    )
