"""
Signal adapter between decoded media and the transform.

Splits decoded container data into per-channel Signals, embeds real
samples into power-of-two complex arrays for the transform, and maps
inverse-transform output back to the container's sample domain.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from fftcompress.core.models import DecodedMedia, MediaMetadata, SampleDomain, Signal
from fftcompress.utils.errors import FormatError

logger = logging.getLogger(__name__)

# Largest imaginary residue (relative to peak) tolerated silently after an inverse transform
IMAGINARY_WARNING_THRESHOLD: float = 1e-6


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n; 0 stays 0."""
    if n < 0:
        raise FormatError(f"Length cannot be negative: {n}")
    if n <= 1:
        return n
    return 1 << (n - 1).bit_length()


def padded_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    return tuple(next_power_of_two(int(n)) for n in shape)


def to_signal(samples, declared_shape: Sequence[int]) -> Tuple[np.ndarray, Tuple[int, ...]]:
    """
    Embed real samples as a zero-padded complex array.

    Args:
        samples: Real samples, 1D or 2D
        declared_shape: Shape the samples are expected to have

    Returns:
        Tuple of (complex128 array padded to powers of two on every axis,
        original shape)

    Raises:
        FormatError: If the samples do not match the declared shape
    """
    data = np.asarray(samples)
    declared = tuple(int(n) for n in declared_shape)

    if data.size != int(np.prod(declared, dtype=np.int64)):
        raise FormatError(
            f"Sample count {data.size} does not match declared shape {declared}"
        )
    if data.shape != declared:
        raise FormatError(
            f"Sample layout {data.shape} does not match declared shape {declared}"
        )

    padded = np.zeros(padded_shape(declared), dtype=np.complex128)
    padded[tuple(slice(0, n) for n in declared)] = data
    return padded, declared


def from_signal(values, original_shape: Sequence[int], domain: SampleDomain) -> np.ndarray:
    """
    Map inverse-transform output back to container samples.

    Takes the real part, trims padding, clamps into the domain (saturating,
    never wrapping) and rounds to the nearest integer for integer domains.
    """
    data = np.asarray(values)
    original = tuple(int(n) for n in original_shape)

    if len(original) != data.ndim or any(o > n for o, n in zip(original, data.shape)):
        raise FormatError(
            f"Cannot trim array of shape {data.shape} to {original}"
        )

    trimmed = data[tuple(slice(0, n) for n in original)]

    if np.iscomplexobj(trimmed) and trimmed.size:
        residue = float(np.max(np.abs(trimmed.imag)))
        peak = max(float(np.max(np.abs(trimmed.real))), 1.0)
        if residue > IMAGINARY_WARNING_THRESHOLD * peak:
            logger.warning(
                f"Inverse transform left an imaginary residue of {residue:.3g}; "
                f"spectrum was probably not Hermitian"
            )

    real = np.clip(np.real(trimmed).astype(np.float64), domain.minimum, domain.maximum)
    if domain.integer:
        real = np.rint(real)
    return real.astype(domain.dtype)


def split_channels(media: DecodedMedia) -> List[Signal]:
    """
    Split decoded media into one Signal per channel.

    Raises:
        FormatError: If the decoded data disagrees with the header metadata
    """
    data = np.asarray(media.data)
    metadata = media.metadata

    if metadata.channels < 1:
        raise FormatError(f"Invalid channel count: {metadata.channels}")

    if metadata.is_audio:
        expected: Tuple[int, ...] = (metadata.frames, metadata.channels)
        if data.ndim == 1 and metadata.channels == 1:
            data = data[:, np.newaxis]
    else:
        expected = (metadata.height, metadata.width, metadata.channels)
        if data.ndim == 2 and metadata.channels == 1:
            data = data[:, :, np.newaxis]

    if None in expected:
        raise FormatError(f"Incomplete {metadata.kind} metadata: {metadata.to_dict()}")

    if data.size != int(np.prod(expected, dtype=np.int64)) or data.shape != expected:
        raise FormatError(
            f"Decoded data of shape {data.shape} is inconsistent with "
            f"header ({metadata.kind}, expected {expected})",
            file_path=str(metadata.source) if metadata.source else None
        )

    return [
        Signal(
            samples=data[..., channel],
            channel=channel,
            domain=media.domain,
            sample_rate=metadata.sample_rate,
        )
        for channel in range(metadata.channels)
    ]


def merge_channels(
    planes: Sequence[np.ndarray],
    metadata: MediaMetadata,
    domain: SampleDomain,
) -> DecodedMedia:
    """Stack per-channel arrays back into container layout."""
    if len(planes) != metadata.channels:
        raise FormatError(
            f"Got {len(planes)} channels, header declares {metadata.channels}"
        )
    data = np.stack([np.asarray(p, dtype=domain.dtype) for p in planes], axis=-1)
    return DecodedMedia(data=data, metadata=metadata, domain=domain)
