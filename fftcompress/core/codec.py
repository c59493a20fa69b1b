"""
Spectral codec: band-limits a spectrum by dropping high frequencies.

Along each axis of length N the codec keeps the low band [0, R) and its
Hermitian mirror (N-R, N); every other bin is dropped and comes back as
zero. The band is symmetric, so a spectrum of real samples stays Hermitian
and its inverse transform stays real. Kept coefficients are copied, never
quantized.
"""

import logging
import math
from typing import Optional, Sequence, Tuple

import numpy as np

from fftcompress.core.models import CompressedRepresentation, CompressionParameters, Spectrum
from fftcompress.utils.errors import InvalidParameterError

logger = logging.getLogger(__name__)


def retained_count(
    size: int,
    params: CompressionParameters,
    sample_rate: Optional[int] = None,
    keep_dc: bool = False,
) -> int:
    """
    Number of low-frequency bins R kept along an axis of length size.

    - level: R = (N // 2) // level
    - cutoff_hz: R = ceil(cutoff_hz * N / sample_rate)
    - cutoff_bin: R = cutoff_bin

    Axes shorter than 2 bins cannot be band-limited and are kept whole.
    With keep_dc a level never drops an axis below its DC bin; image
    planes use it so a narrow axis does not fail the whole plane.

    Raises:
        InvalidParameterError: If R <= 0, R > N / 2, or the cutoff exceeds
            the Nyquist frequency
    """
    if size < 2:
        return size

    half = size // 2

    if params.level is not None:
        retained = half // int(params.level)
        if keep_dc:
            retained = max(retained, 1)
    elif params.cutoff_hz is not None:
        if not sample_rate or sample_rate <= 0:
            raise InvalidParameterError(
                "A frequency cutoff in Hz needs a sample rate",
                parameter="cutoff_hz",
                value=params.cutoff_hz
            )
        nyquist = sample_rate / 2
        if params.cutoff_hz > nyquist:
            raise InvalidParameterError(
                f"Frequency cutoff {params.cutoff_hz:g} Hz exceeds the "
                f"Nyquist frequency {nyquist:g} Hz",
                parameter="cutoff_hz",
                value=params.cutoff_hz
            )
        retained = math.ceil(params.cutoff_hz * size / sample_rate)
    else:
        retained = int(params.cutoff_bin)

    if retained <= 0 or retained > half:
        raise InvalidParameterError(
            f"Degenerate retained bin count {retained} for {size} bins "
            f"({params.describe()}); must be within 1..{half}",
            parameter="retained",
            value=retained
        )
    return retained


def band_indices(size: int, retained: int) -> np.ndarray:
    """Indices [0, R) followed by (N-R, N)."""
    if retained >= size:
        return np.arange(size)
    return np.concatenate((np.arange(retained), np.arange(size - retained + 1, size)))


def band_mask(shape: Sequence[int], retained: Sequence[int]) -> np.ndarray:
    """Boolean mask of the bins a spectrum of this shape keeps."""
    mask = np.ones(tuple(shape), dtype=bool)
    for axis, (size, count) in enumerate(zip(shape, retained)):
        keep = np.zeros(size, dtype=bool)
        keep[band_indices(size, count)] = True
        view_shape = [1] * len(shape)
        view_shape[axis] = size
        mask &= keep.reshape(view_shape)
    return mask


def compress(spectrum: Spectrum, params: CompressionParameters) -> CompressedRepresentation:
    """
    Keep the low-frequency band of a spectrum.

    Args:
        spectrum: Full spectrum (1D or 2D)
        params: Selects the retained band

    Returns:
        CompressedRepresentation with the retained bins

    Raises:
        InvalidParameterError: If the parameters give a degenerate band
    """
    shape = spectrum.shape
    retained: Tuple[int, ...] = tuple(
        retained_count(size, params, spectrum.sample_rate, keep_dc=len(shape) == 2)
        for size in shape
    )
    indices = [band_indices(size, count) for size, count in zip(shape, retained)]
    kept = spectrum.coefficients[np.ix_(*indices)] if indices else spectrum.coefficients.copy()

    logger.debug(
        f"Channel {spectrum.channel}: keeping {kept.size}/{spectrum.size} bins "
        f"(R={retained}, {params.describe()})"
    )

    return CompressedRepresentation(
        coefficients=kept,
        retained=retained,
        shape=shape,
        original_shape=spectrum.original_shape,
        channel=spectrum.channel,
        sample_rate=spectrum.sample_rate,
    )


def decompress(representation: CompressedRepresentation) -> Spectrum:
    """Rebuild the full spectrum, zero outside the retained band."""
    shape = representation.shape
    coefficients = np.zeros(shape, dtype=np.complex128)
    indices = [
        band_indices(size, count)
        for size, count in zip(shape, representation.retained)
    ]
    if indices:
        coefficients[np.ix_(*indices)] = representation.coefficients

    return Spectrum(
        coefficients=coefficients,
        original_shape=representation.original_shape,
        channel=representation.channel,
        sample_rate=representation.sample_rate,
    )
