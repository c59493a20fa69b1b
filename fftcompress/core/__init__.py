"""
Core module: data models, transform, signal adapter, spectral codec,
analyzer, media codecs and the pipeline engine.

Uses lazy imports for modules with heavy dependencies (soundfile, Pillow,
matplotlib).
"""

from fftcompress.core.models import (
    SampleDomain,
    Signal,
    Spectrum,
    CompressionParameters,
    CompressedRepresentation,
    AnalysisResult,
    MediaMetadata,
    DecodedMedia,
    ChannelReport,
    CompressionReport,
)

__all__ = [
    # Models (always available)
    "SampleDomain",
    "Signal",
    "Spectrum",
    "CompressionParameters",
    "CompressedRepresentation",
    "AnalysisResult",
    "MediaMetadata",
    "DecodedMedia",
    "ChannelReport",
    "CompressionReport",
    # Heavy modules (lazy loaded)
    "WavCodec",
    "BmpCodec",
    "select_codec",
    "CompressionEngine",
    "create_compression_engine",
]


def __getattr__(name: str):
    """Lazy load modules with heavy dependencies."""
    if name in ("WavCodec", "BmpCodec", "select_codec"):
        from fftcompress.core import media
        return getattr(media, name)
    elif name in ("CompressionEngine", "create_compression_engine"):
        from fftcompress.core import engine
        return getattr(engine, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
