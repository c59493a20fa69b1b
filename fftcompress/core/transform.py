"""
Radix-2 fast Fourier transform.

Iterative Cooley-Tukey decimation in time: the input is put in
bit-reversed order, then log2(N) butterfly stages combine transforms of
size m/2 into transforms of size m using the twiddle factors
e^{-2*pi*i*k/m}. Each stage is vectorised over every block and over any
leading axes, so a stack of rows (or channels) is transformed in one call.

All functions are pure and return new arrays.
"""

from functools import lru_cache

import numpy as np

from fftcompress.utils.errors import InvalidParameterError

# Round trip inverse(forward(x)) stays within this tolerance relative to
# max(|x|); rounding error grows roughly with log2(N).
ROUND_TRIP_TOLERANCE: float = 1e-6

_FORWARD = 1.0
_INVERSE = -1.0


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@lru_cache(maxsize=64)
def _bit_reversed_indices(n: int) -> np.ndarray:
    bits = n.bit_length() - 1
    indices = np.arange(n)
    reversed_indices = np.zeros(n, dtype=np.intp)
    for _ in range(bits):
        reversed_indices = (reversed_indices << 1) | (indices & 1)
        indices = indices >> 1
    reversed_indices.setflags(write=False)
    return reversed_indices


@lru_cache(maxsize=64)
def _twiddles(size: int, direction: float) -> np.ndarray:
    half = size // 2
    factors = np.exp(-2j * np.pi * direction * np.arange(half) / size)
    factors.setflags(write=False)
    return factors


def _transform(values, direction: float) -> np.ndarray:
    data = np.asarray(values, dtype=np.complex128)
    if data.ndim == 0:
        raise InvalidParameterError(
            "Cannot transform a scalar",
            parameter="values",
            value=data.shape
        )

    n = data.shape[-1]
    if n <= 1:
        return data.copy()
    if not is_power_of_two(n):
        raise InvalidParameterError(
            f"Transform length must be a power of two, got {n}",
            parameter="length",
            value=n
        )

    lead = data.shape[:-1]
    # Fancy indexing copies, so the caller's array is never touched
    result = data[..., _bit_reversed_indices(n)]

    size = 2
    while size <= n:
        half = size // 2
        blocks = result.reshape(lead + (n // size, size))
        evens = blocks[..., :half]
        odds = blocks[..., half:] * _twiddles(size, direction)
        result = np.concatenate((evens + odds, evens - odds), axis=-1).reshape(lead + (n,))
        size *= 2

    if direction == _INVERSE:
        result /= n
    return result


def forward(values) -> np.ndarray:
    """
    Discrete Fourier transform along the last axis.

    Args:
        values: Real or complex array whose last axis has length N,
            N a power of two (0 and 1 are accepted as-is)

    Returns:
        np.ndarray: complex128 spectrum, same shape as values

    Raises:
        InvalidParameterError: If N is not a power of two
    """
    return _transform(values, _FORWARD)


def inverse(spectrum) -> np.ndarray:
    """Inverse of forward(): sign-flipped twiddles, scaled by 1/N."""
    return _transform(spectrum, _INVERSE)


def _along_columns(function, values) -> np.ndarray:
    data = np.asarray(values)
    if data.ndim < 2:
        raise InvalidParameterError(
            "Column transforms need at least two dimensions",
            parameter="ndim",
            value=data.ndim
        )
    return np.swapaxes(function(np.swapaxes(data, -1, -2)), -1, -2)


def forward_rows(values) -> np.ndarray:
    """Transform every row (last axis) of a 2D plane."""
    return forward(values)


def inverse_rows(spectrum) -> np.ndarray:
    return inverse(spectrum)


def forward_columns(values) -> np.ndarray:
    """Transform every column (second-to-last axis) of a 2D plane."""
    return _along_columns(forward, values)


def inverse_columns(spectrum) -> np.ndarray:
    return _along_columns(inverse, spectrum)


def forward_2d(values) -> np.ndarray:
    """
    Separable 2D DFT: rows first, then the columns of the result.

    Leading axes beyond the last two (e.g. color channels) are transformed
    independently.
    """
    return forward_columns(forward_rows(values))


def inverse_2d(spectrum) -> np.ndarray:
    """Inverse of forward_2d(): columns first, then rows."""
    return inverse_rows(inverse_columns(spectrum))


def forward_nd(values) -> np.ndarray:
    """forward() for 1D inputs, forward_2d() for 2D planes."""
    data = np.asarray(values)
    return forward_2d(data) if data.ndim == 2 else forward(data)


def inverse_nd(spectrum) -> np.ndarray:
    data = np.asarray(spectrum)
    return inverse_2d(data) if data.ndim == 2 else inverse(data)
