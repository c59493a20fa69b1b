"""
Core data models for fftcompress.

Immutable domain models for per-channel signals, their spectra, the
retained-coefficient representation produced by the spectral codec and the
arrays handed to the chart renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from fftcompress.utils.errors import FormatError, InvalidParameterError

DEFAULT_LOG_FACTOR: float = 1.0


def _frozen(array: np.ndarray) -> np.ndarray:
    """Return a read-only copy of an array."""
    copied = np.array(array, copy=True)
    copied.setflags(write=False)
    return copied


@dataclass(frozen=True)
class SampleDomain:
    """
    Value range and storage type of a container's samples.

    Reconstructed samples are clamped into [minimum, maximum] and, for
    integer domains, rounded before being cast to dtype.
    """

    minimum: float
    maximum: float
    dtype: str
    integer: bool = True

    # soundfile subtype -> native read dtype
    _PCM_DTYPES = {
        'PCM_U8': 'int16',
        'PCM_S8': 'int16',
        'PCM_16': 'int16',
        'PCM_24': 'int32',
        'PCM_32': 'int32',
        'FLOAT': 'float64',
        'DOUBLE': 'float64',
    }

    @classmethod
    def for_pcm(cls, subtype: str) -> "SampleDomain":
        """Domain of WAV samples read natively for a soundfile subtype."""
        dtype = cls._PCM_DTYPES.get(subtype)
        if dtype is None:
            raise InvalidParameterError(
                f"No sample domain for PCM subtype {subtype}",
                parameter="subtype",
                value=subtype
            )
        if dtype == 'float64':
            return cls(minimum=-1.0, maximum=1.0, dtype=dtype, integer=False)
        info = np.iinfo(dtype)
        return cls(minimum=float(info.min), maximum=float(info.max), dtype=dtype)

    @classmethod
    def for_pixels(cls, bits: int = 8) -> "SampleDomain":
        """Domain of unsigned pixel intensities."""
        return cls(minimum=0.0, maximum=float(2 ** bits - 1), dtype='uint8' if bits <= 8 else 'uint16')

    @classmethod
    def supported_pcm_subtypes(cls) -> Tuple[str, ...]:
        return tuple(cls._PCM_DTYPES)

    def contains(self, samples: np.ndarray) -> bool:
        """True when every sample lies within the domain range."""
        if samples.size == 0:
            return True
        return bool(np.min(samples) >= self.minimum and np.max(samples) <= self.maximum)


@dataclass(frozen=True)
class Signal:
    """
    Immutable real-valued samples of one channel.

    1D for audio, 2D row-major (height, width) for an image plane. The
    shape recorded here is the original, pre-padding shape.
    """

    samples: np.ndarray
    channel: int
    domain: SampleDomain
    sample_rate: Optional[int] = None  # None for images

    def __post_init__(self) -> None:
        samples = np.asarray(self.samples)
        if samples.ndim not in (1, 2):
            raise FormatError(f"Signal must be 1D or 2D, got {samples.ndim} dimensions")
        if np.iscomplexobj(samples):
            raise FormatError("Signal samples must be real-valued")
        if not self.domain.contains(samples):
            raise FormatError(
                f"Channel {self.channel} samples fall outside "
                f"[{self.domain.minimum}, {self.domain.maximum}]"
            )
        object.__setattr__(self, 'samples', _frozen(samples.astype(np.float64)))

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.samples.shape

    @property
    def ndim(self) -> int:
        return self.samples.ndim

    def __len__(self) -> int:
        return self.samples.shape[0]


@dataclass(frozen=True)
class Spectrum:
    """Complex coefficients of a padded signal; index = frequency bin."""

    coefficients: np.ndarray
    original_shape: Tuple[int, ...]
    channel: int = 0
    sample_rate: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, 'coefficients', _frozen(np.asarray(self.coefficients, dtype=np.complex128))
        )
        object.__setattr__(self, 'original_shape', tuple(self.original_shape))

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.coefficients.shape

    @property
    def size(self) -> int:
        return int(self.coefficients.size)

    def is_hermitian(self, tolerance: float = 1e-9) -> bool:
        """
        Check Spectrum[k] == conj(Spectrum[N-k]) along every axis.

        Tolerance is relative to the largest coefficient magnitude.
        """
        if self.size == 0:
            return True
        coefficients = self.coefficients
        axes = tuple(range(coefficients.ndim))
        # mirrored[k] == coefficients[(N - k) % N] on every axis
        mirrored = np.roll(np.flip(coefficients, axis=axes), 1, axis=axes)
        scale = max(float(np.max(np.abs(coefficients))), 1.0)
        return bool(np.allclose(coefficients, np.conj(mirrored), rtol=0.0, atol=tolerance * scale))


@dataclass(frozen=True)
class CompressionParameters:
    """
    How much of a spectrum to keep.

    Exactly one of level, cutoff_hz or cutoff_bin selects the retained band.
    A larger level keeps fewer coefficients. log_factor only affects the
    analyzer's log-scaled magnitudes.
    """

    level: Optional[int] = None
    cutoff_hz: Optional[float] = None
    cutoff_bin: Optional[int] = None
    log_factor: float = DEFAULT_LOG_FACTOR

    def __post_init__(self) -> None:
        selected = [
            name for name in ('level', 'cutoff_hz', 'cutoff_bin')
            if getattr(self, name) is not None
        ]
        if len(selected) != 1:
            raise InvalidParameterError(
                "Exactly one of level, cutoff_hz or cutoff_bin must be given",
                parameter="compression",
                value=selected
            )

        if self.level is not None:
            if isinstance(self.level, bool) or not isinstance(self.level, (int, np.integer)):
                raise InvalidParameterError(
                    f"Compression level must be an integer, got {self.level!r}",
                    parameter="level",
                    value=self.level
                )
            if self.level < 1:
                raise InvalidParameterError(
                    f"Compression level must be >= 1, got {self.level}",
                    parameter="level",
                    value=self.level
                )

        if self.cutoff_hz is not None and not self.cutoff_hz >= 0:
            raise InvalidParameterError(
                f"Frequency cutoff must be non-negative, got {self.cutoff_hz}",
                parameter="cutoff_hz",
                value=self.cutoff_hz
            )

        if self.cutoff_bin is not None:
            if isinstance(self.cutoff_bin, bool) or not isinstance(self.cutoff_bin, (int, np.integer)):
                raise InvalidParameterError(
                    f"Cutoff bin must be an integer, got {self.cutoff_bin!r}",
                    parameter="cutoff_bin",
                    value=self.cutoff_bin
                )
            if self.cutoff_bin < 0:
                raise InvalidParameterError(
                    f"Cutoff bin must be non-negative, got {self.cutoff_bin}",
                    parameter="cutoff_bin",
                    value=self.cutoff_bin
                )

        validate_log_factor(self.log_factor)

    def describe(self) -> str:
        if self.level is not None:
            return f"level {self.level}"
        if self.cutoff_hz is not None:
            return f"cutoff {self.cutoff_hz:g} Hz"
        return f"cutoff bin {self.cutoff_bin}"


def validate_log_factor(log_factor: float) -> float:
    """Raise InvalidParameterError unless log_factor is a positive real."""
    if isinstance(log_factor, bool) or not isinstance(log_factor, (int, float, np.floating)):
        raise InvalidParameterError(
            f"Log factor must be a number, got {log_factor!r}",
            parameter="log_factor",
            value=log_factor
        )
    if not np.isfinite(log_factor) or log_factor <= 0:
        raise InvalidParameterError(
            f"Log factor must be positive, got {log_factor}",
            parameter="log_factor",
            value=log_factor
        )
    return float(log_factor)


@dataclass(frozen=True)
class CompressedRepresentation:
    """
    Retained coefficients of a band-limited spectrum.

    Along every axis of length N the bins [0, R) and (N-R, N) are kept,
    in that order. Coefficients are stored exactly as they were in the
    spectrum.
    """

    coefficients: np.ndarray
    retained: Tuple[int, ...]  # R per axis
    shape: Tuple[int, ...]     # padded spectrum shape
    original_shape: Tuple[int, ...]
    channel: int = 0
    sample_rate: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, 'coefficients', _frozen(self.coefficients))
        object.__setattr__(self, 'retained', tuple(int(r) for r in self.retained))
        object.__setattr__(self, 'shape', tuple(self.shape))
        object.__setattr__(self, 'original_shape', tuple(self.original_shape))

    @property
    def retained_coefficients(self) -> int:
        return int(self.coefficients.size)

    @property
    def total_coefficients(self) -> int:
        return int(np.prod(self.shape, dtype=np.int64)) if self.shape else 0

    @property
    def low_band(self) -> np.ndarray:
        """Bins [0, R) of a 1D spectrum."""
        self._require_1d()
        return self.coefficients[:self.retained[0]]

    @property
    def mirror_band(self) -> np.ndarray:
        """Bins (N-R, N) of a 1D spectrum."""
        self._require_1d()
        return self.coefficients[self.retained[0]:]

    def _require_1d(self) -> None:
        if len(self.shape) != 1:
            raise InvalidParameterError(
                "Low/mirror bands are only defined for 1D spectra",
                parameter="shape",
                value=self.shape
            )


@dataclass(frozen=True)
class AnalysisResult:
    """
    Arrays describing one channel for side-by-side display.

    domain_axes/frequency_axes hold one axis per signal dimension:
    time in seconds and frequency in Hz for audio with a sample rate,
    positions and bin indices otherwise.
    """

    channel: int
    values: np.ndarray
    domain_axes: Tuple[np.ndarray, ...]
    frequency_axes: Tuple[np.ndarray, ...]
    magnitude: np.ndarray
    log_magnitude: np.ndarray
    log_factor: float
    sample_rate: Optional[int] = None
    # 2D only: spectra of the rows-only and columns-only transforms
    partial_log_magnitudes: Dict[str, np.ndarray] = field(default_factory=dict)

    @property
    def ndim(self) -> int:
        return self.values.ndim

    @property
    def domain_axis(self) -> np.ndarray:
        return self.domain_axes[0]

    @property
    def frequency_axis(self) -> np.ndarray:
        return self.frequency_axes[0]

    @property
    def size(self) -> int:
        """Number of bins (padded length) along the first axis."""
        return int(self.magnitude.shape[0]) if self.magnitude.size else 0

    def one_sided(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Bins [0, N/2] of a 1D result.

        The upper half of a real signal's spectrum mirrors the lower half,
        so this is all a frequency plot needs.

        Returns:
            (frequency_axis, magnitude, log_magnitude)
        """
        if self.ndim != 1:
            raise InvalidParameterError(
                "One-sided view is only defined for 1D results",
                parameter="ndim",
                value=self.ndim
            )
        stop = self.size // 2 + 1 if self.size > 1 else self.size
        return (
            self.frequency_axis[:stop],
            self.magnitude[:stop],
            self.log_magnitude[:stop],
        )


@dataclass(frozen=True)
class MediaMetadata:
    """Container header information needed to re-encode decoded samples."""

    kind: str            # 'audio' or 'image'
    format: str          # 'WAV', 'WAVEX' or 'BMP'
    channels: int
    sample_rate: Optional[int] = None
    frames: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    subtype: Optional[str] = None   # soundfile subtype or Pillow mode
    source: Optional[Path] = None

    @property
    def is_audio(self) -> bool:
        return self.kind == 'audio'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind,
            'format': self.format,
            'channels': self.channels,
            'sample_rate': self.sample_rate,
            'frames': self.frames,
            'width': self.width,
            'height': self.height,
            'subtype': self.subtype,
            'source': str(self.source) if self.source else None,
        }


@dataclass(frozen=True)
class DecodedMedia:
    """
    Decoded container contents.

    data is (frames, channels) for audio and (height, width, channels)
    for images, in the domain's native dtype.
    """

    data: np.ndarray
    metadata: MediaMetadata
    domain: SampleDomain


@dataclass
class ChannelReport:
    """Outcome of compressing one channel."""

    channel: int
    retained_coefficients: int
    total_coefficients: int
    mean_squared_error: float

    @property
    def retained_ratio(self) -> float:
        if self.total_coefficients == 0:
            return 1.0
        return self.retained_coefficients / self.total_coefficients

    def to_dict(self) -> Dict[str, Any]:
        return {
            'channel': self.channel,
            'retained_coefficients': self.retained_coefficients,
            'total_coefficients': self.total_coefficients,
            'retained_ratio': self.retained_ratio,
            'mean_squared_error': self.mean_squared_error,
        }


@dataclass
class CompressionReport:
    """Summary of one compression run."""

    parameters: CompressionParameters
    metadata: MediaMetadata
    channels: List[ChannelReport] = field(default_factory=list)
    output_path: Optional[Path] = None
    processing_time: float = 0.0

    @property
    def retained_coefficients(self) -> int:
        return sum(c.retained_coefficients for c in self.channels)

    @property
    def total_coefficients(self) -> int:
        return sum(c.total_coefficients for c in self.channels)

    @property
    def mean_squared_error(self) -> float:
        """Mean over channels of the per-channel reconstruction MSE."""
        if not self.channels:
            return 0.0
        return float(np.mean([c.mean_squared_error for c in self.channels]))

    def get_summary(self) -> str:
        ratio = (
            self.retained_coefficients / self.total_coefficients
            if self.total_coefficients else 1.0
        )
        return (
            f"{self.metadata.format} {self.metadata.channels} ch, "
            f"{self.parameters.describe()}: kept {self.retained_coefficients}/"
            f"{self.total_coefficients} coefficients ({ratio:.1%}), "
            f"MSE {self.mean_squared_error:.4g}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parameters': {
                'level': self.parameters.level,
                'cutoff_hz': self.parameters.cutoff_hz,
                'cutoff_bin': self.parameters.cutoff_bin,
            },
            'metadata': self.metadata.to_dict(),
            'channels': [c.to_dict() for c in self.channels],
            'output_path': str(self.output_path) if self.output_path else None,
            'processing_time': self.processing_time,
        }
