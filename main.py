"""
fftcompress - Main Entry Point

Example usage:
    python main.py path/to/audio.wav
    python main.py --config config/config.yaml --cutoff 3000 path/to/audio.wav
    python main.py --analyze path/to/image.bmp
"""

import sys

from fftcompress.cli import main


if __name__ == "__main__":
    sys.exit(main())
