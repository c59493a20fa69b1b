"""
fftcompress - command-line interface

Compresses WAV and BMP files by dropping high frequencies, or renders an
analysis chart of a file's time/spatial and frequency domains.

Example usage:
    # Compress with the configured default level
    fftcompress song.wav

    # Keep frequencies below 3 kHz
    fftcompress --cutoff 3000 song.wav

    # Keep 1/8 of each image axis's frequency band
    fftcompress --level 8 --output-dir out/ picture.bmp

    # Analysis chart
    fftcompress --analyze --log-factor 0.5 picture.bmp
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from fftcompress import __version__
from fftcompress.core.engine import create_compression_engine
from fftcompress.core.models import CompressionParameters, CompressionReport
from fftcompress.utils.config import load_config
from fftcompress.utils.errors import (
    ConfigurationError,
    FormatError,
    InvalidParameterError,
    MediaCompressionError,
    MediaIOError,
)
from fftcompress.utils.logging import setup_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_PARAMETER = 2
EXIT_FORMAT_ERROR = 3
EXIT_IO_ERROR = 4
EXIT_CONFIGURATION_ERROR = 5

EXIT_CODES = (
    (InvalidParameterError, EXIT_INVALID_PARAMETER),
    (FormatError, EXIT_FORMAT_ERROR),
    (MediaIOError, EXIT_IO_ERROR),
    (ConfigurationError, EXIT_CONFIGURATION_ERROR),
)


def exit_code_for(error: BaseException) -> int:
    """Map an error to its process exit code."""
    for error_type, code in EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return EXIT_FAILURE


def print_report(file_path: Path, report: CompressionReport) -> None:
    """Print compression results to console."""
    print("\n" + "=" * 60)
    print("FFTCOMPRESS RESULTS")
    print("=" * 60)
    print(f"File: {file_path.name}")
    print(f"Processing Time: {report.processing_time:.3f}s")
    print("-" * 60)
    print(report.get_summary())
    print("-" * 60)
    for channel in report.channels:
        print(
            f"  Channel {channel.channel}: "
            f"{channel.retained_coefficients}/{channel.total_coefficients} "
            f"coefficients ({channel.retained_ratio:.1%}), "
            f"MSE {channel.mean_squared_error:.4g}"
        )
    if report.output_path:
        print(f"\nOutput written to: {report.output_path}")


def build_parameters(args: argparse.Namespace, config: Dict[str, Any]) -> CompressionParameters:
    """Compression parameters from arguments, falling back to config."""
    log_factor = args.log_factor
    if log_factor is None:
        log_factor = config.get('analysis', {}).get('log_factor', 1.0)

    if args.cutoff is not None:
        return CompressionParameters(cutoff_hz=args.cutoff, log_factor=log_factor)
    if args.cutoff_bin is not None:
        return CompressionParameters(cutoff_bin=args.cutoff_bin, log_factor=log_factor)

    level = args.level
    if level is None:
        level = config.get('compression', {}).get('level', 4)
    return CompressionParameters(level=level, log_factor=log_factor)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fftcompress",
        description="Compress WAV/BMP files by truncating high frequencies, or analyze their spectra",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fftcompress song.wav
  fftcompress --cutoff 3000 song.wav
  fftcompress --level 8 --output-dir out/ picture.bmp
  fftcompress --analyze --log-factor 0.5 picture.bmp

Exit codes:
  0 success, 1 unexpected error, 2 invalid parameter,
  3 format error, 4 I/O error, 5 configuration error
        """
    )

    parser.add_argument(
        "file",
        type=Path,
        help="WAV or BMP file to compress or analyze"
    )

    band = parser.add_mutually_exclusive_group()
    band.add_argument(
        "--level",
        "-l",
        type=int,
        default=None,
        help="Compression level >= 1; higher keeps fewer frequencies. Image axes always keep "
             "their DC bin (default from config)"
    )
    band.add_argument(
        "--cutoff",
        "-c",
        type=float,
        default=None,
        help="Highest frequency to keep, in Hz (audio only)"
    )
    band.add_argument(
        "--cutoff-bin",
        type=int,
        default=None,
        help="Keep frequency bins below this index"
    )

    parser.add_argument(
        "--analyze",
        "-a",
        action="store_true",
        help="Render time/frequency analysis chart instead of compressing"
    )
    parser.add_argument(
        "--log-factor",
        type=float,
        default=None,
        help="Scale applied before log(1 + x) in analysis charts (default from config)"
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=None,
        help="Directory for output files (default from config)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"fftcompress {__version__}"
    )
    return parser


def run(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """
    Execute one compress or analyze request.

    Returns:
        Exit code
    """
    params = build_parameters(args, config)
    output_dir = args.output_dir or Path(config.get('output', {}).get('directory', '.'))

    with create_compression_engine(config) as engine:
        if args.analyze:
            chart = engine.analyze_file(args.file, output_dir, log_factor=params.log_factor)
            print(f"Analysis written to: {chart}")
        else:
            print(f"Compressing: {args.file} ({params.describe()})")
            report = engine.compress_file(args.file, params, output_dir)
            print_report(args.file, report)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for fftcompress."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config_path = str(args.config) if args.config else None
        config = load_config(config_path)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR

    logging_config = config.get("logging", {})
    log_level = "DEBUG" if args.verbose else logging_config.get("level", "INFO")
    setup_logging(
        level=log_level,
        log_format=logging_config.get("format", "text"),
        log_file=logging_config.get("file"),
        colored=sys.stderr.isatty(),
        console_enabled=True
    )

    try:
        return run(args, config)
    except MediaCompressionError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return exit_code_for(e)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
