"""
fftcompress

Lossy frequency-domain compression of WAV audio and BMP images: samples
are transformed with a radix-2 FFT, the high-frequency band is dropped,
and the inverse transform is written back to a standard container.
"""

__version__ = "1.0.0"
