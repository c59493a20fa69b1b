"""
Media codecs for WAV audio and BMP images.

Each codec offers the same {decode, encode} capability; the engine picks
one per file with select_codec() and never branches on media type again.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

import numpy as np
import soundfile as sf
from PIL import Image, UnidentifiedImageError

from fftcompress.core.models import DecodedMedia, MediaMetadata, SampleDomain
from fftcompress.utils.errors import FormatError, MediaIOError, UnsupportedFormatError

logger = logging.getLogger(__name__)

HEADER_BYTES: int = 12


class MediaCodec(Protocol):
    """Decode a container into per-channel samples and encode them back."""

    @property
    def name(self) -> str:
        ...

    @property
    def suffixes(self) -> Tuple[str, ...]:
        ...

    def sniff(self, header: bytes) -> bool:
        """True if the leading bytes look like this codec's container."""
        ...

    def decode(self, file_path: Path) -> DecodedMedia:
        ...

    def encode(self, media: DecodedMedia, file_path: Path) -> None:
        ...


class WavCodec:
    """PCM WAV files through soundfile (libsndfile)."""

    name = "wav"
    suffixes: Tuple[str, ...] = ('.wav', '.wave')
    # soundfile container names; WAVEX is WAVE_FORMAT_EXTENSIBLE
    containers: Tuple[str, ...] = ('WAV', 'WAVEX')

    def sniff(self, header: bytes) -> bool:
        return len(header) >= 12 and header[:4] == b'RIFF' and header[8:12] == b'WAVE'

    def decode(self, file_path: Path) -> DecodedMedia:
        """
        Read a WAV file with its samples in their native integer range.

        Raises:
            MediaIOError: File missing or unreadable
            UnsupportedFormatError: Not a WAV container or unsupported subtype
            FormatError: Header and data disagree
        """
        file_path = Path(file_path)
        require_file(file_path)

        try:
            info = sf.info(str(file_path))
        except RuntimeError as e:
            raise FormatError(f"Cannot parse WAV header: {e}", file_path=str(file_path)) from e

        if info.format not in self.containers:
            raise UnsupportedFormatError(
                f"Container {info.format} is not WAV: {file_path}",
                format=info.format
            )
        if info.subtype not in SampleDomain.supported_pcm_subtypes():
            raise UnsupportedFormatError(
                f"WAV subtype {info.subtype} not supported. "
                f"Supported subtypes: {', '.join(SampleDomain.supported_pcm_subtypes())}",
                format=info.subtype
            )

        domain = SampleDomain.for_pcm(info.subtype)

        try:
            data, sample_rate = sf.read(str(file_path), dtype=domain.dtype, always_2d=True)
        except RuntimeError as e:
            raise FormatError(f"Cannot read WAV data: {e}", file_path=str(file_path)) from e

        logger.info(
            f"Loaded audio: {sample_rate} Hz, {info.channels} ch, "
            f"{info.subtype}, {data.shape[0]} frames"
        )

        if not domain.integer:
            # Float WAV may exceed full scale; keep it inside the domain
            data = np.clip(data, domain.minimum, domain.maximum)

        metadata = MediaMetadata(
            kind='audio',
            format=info.format,
            channels=info.channels,
            sample_rate=sample_rate,
            frames=info.frames,
            subtype=info.subtype,
            source=file_path,
        )
        return DecodedMedia(data=data, metadata=metadata, domain=domain)

    def encode(self, media: DecodedMedia, file_path: Path) -> None:
        """Write samples with the original container, subtype and sample rate."""
        metadata = media.metadata
        try:
            sf.write(
                str(file_path),
                np.asarray(media.data),
                metadata.sample_rate,
                subtype=metadata.subtype,
                format=metadata.format,
            )
        except (RuntimeError, OSError) as e:
            raise MediaIOError(
                f"Failed to write WAV file {file_path}: {e}",
                file_path=str(file_path),
                original_error=e
            ) from e


class BmpCodec:
    """Uncompressed BMP images through Pillow."""

    name = "bmp"
    suffixes: Tuple[str, ...] = ('.bmp', '.dib')

    # Pillow mode -> mode the planes are decoded in
    _MODES: Dict[str, str] = {
        'L': 'L',
        'RGB': 'RGB',
        'RGBA': 'RGBA',
        'LA': 'RGBA',
        '1': 'RGB',
        'P': 'RGB',
    }

    def sniff(self, header: bytes) -> bool:
        return header[:2] == b'BM'

    def decode(self, file_path: Path) -> DecodedMedia:
        """
        Read a BMP file as a (height, width, channels) uint8 array.

        Raises:
            MediaIOError: File missing or unreadable
            UnsupportedFormatError: Not a BMP or unsupported pixel mode
            FormatError: Corrupt image data
        """
        file_path = Path(file_path)
        require_file(file_path)

        try:
            with Image.open(file_path) as image:
                if image.format not in ('BMP', 'DIB'):
                    raise UnsupportedFormatError(
                        f"Image format {image.format} is not BMP: {file_path}",
                        format=image.format
                    )
                mode = self._MODES.get(image.mode)
                if mode is None:
                    raise UnsupportedFormatError(
                        f"BMP pixel mode {image.mode} not supported",
                        format=image.mode
                    )
                if mode != image.mode:
                    logger.info(f"Converting BMP from mode {image.mode} to {mode}")
                    image = image.convert(mode)
                pixels = np.array(image, dtype=np.uint8)
        except UnidentifiedImageError as e:
            raise FormatError(f"Cannot parse BMP: {e}", file_path=str(file_path)) from e
        except OSError as e:
            raise FormatError(f"Cannot read BMP data: {e}", file_path=str(file_path)) from e

        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        height, width, channels = pixels.shape

        logger.info(f"Loaded image: {width}x{height}, mode {mode}")

        metadata = MediaMetadata(
            kind='image',
            format='BMP',
            channels=channels,
            width=width,
            height=height,
            subtype=mode,
            source=file_path,
        )
        return DecodedMedia(data=pixels, metadata=metadata, domain=SampleDomain.for_pixels(8))

    def encode(self, media: DecodedMedia, file_path: Path) -> None:
        """Write pixels back as a BMP in the decoded mode."""
        pixels = np.asarray(media.data, dtype=np.uint8)
        if pixels.ndim == 3 and pixels.shape[2] == 1:
            pixels = pixels[:, :, 0]
        try:
            Image.fromarray(pixels).save(file_path, format='BMP')
        except (ValueError, OSError) as e:
            raise MediaIOError(
                f"Failed to write BMP file {file_path}: {e}",
                file_path=str(file_path),
                original_error=e
            ) from e


CODECS: Tuple[MediaCodec, ...] = (WavCodec(), BmpCodec())


def require_file(file_path: Path) -> None:
    if not file_path.exists():
        raise MediaIOError(f"Media file not found: {file_path}", file_path=str(file_path))
    if not file_path.is_file():
        raise MediaIOError(f"Not a regular file: {file_path}", file_path=str(file_path))


def _read_header(file_path: Path) -> bytes:
    try:
        with open(file_path, 'rb') as f:
            return f.read(HEADER_BYTES)
    except OSError as e:
        raise MediaIOError(
            f"Cannot read {file_path}: {e}",
            file_path=str(file_path),
            original_error=e
        ) from e


def select_codec(file_path: Path, header: Optional[bytes] = None) -> MediaCodec:
    """
    Choose the codec for a file by extension, then by header sniffing.

    Raises:
        UnsupportedFormatError: If no codec recognises the file
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()

    for codec in CODECS:
        if suffix in codec.suffixes:
            return codec

    if header is None and file_path.exists():
        header = _read_header(file_path)

    for codec in CODECS:
        if header and codec.sniff(header):
            logger.debug(f"Detected {codec.name} container by header: {file_path}")
            return codec

    supported = sorted(s for codec in CODECS for s in codec.suffixes)
    raise UnsupportedFormatError(
        f"Format {suffix or '(none)'} not supported. "
        f"Supported formats: {', '.join(supported)}",
        format=suffix
    )
