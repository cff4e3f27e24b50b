#!/usr/bin/env python3
"""
recompress_pdf.py - Text-aware PDF recompression CLI.

Pages with selectable text are kept exactly as they are; scanned or
image-only pages are re-rendered and re-encoded as JPEG.

Usage:
    python recompress_pdf.py input.pdf
    python recompress_pdf.py a.pdf b.pdf --output-dir ./compressed/
    python recompress_pdf.py scan.pdf -c 70
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent to path when running as script
if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).parent))

from pdf_recompressor.admission import MAX_FILES, FileQueue
from pdf_recompressor.formatting import format_size, quality_from_slider
from pdf_recompressor.models import InputFile
from pdf_recompressor.pipeline import DEFAULT_QUALITY, compress_batch


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Recompress PDFs page by page, keeping text pages intact.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  python recompress_pdf.py report.pdf
  python recompress_pdf.py a.pdf b.pdf --output-dir ./out/
  python recompress_pdf.py scan.pdf -c 70

Up to {MAX_FILES} PDFs (50 MB each) per run. Output files are named
<name>_compressed.pdf. Text pages are copied untouched; image-only pages
are rendered at 0.5x-2.0x and stored as JPEG.
"""
    )

    parser.add_argument(
        "input",
        nargs="+",
        type=Path,
        help="Input PDF file(s)"
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Output directory (default: next to each input)"
    )

    level = parser.add_mutually_exclusive_group()
    level.add_argument(
        "-q", "--quality",
        type=float,
        help=f"Image page quality 0.0-1.0 (default: {DEFAULT_QUALITY})"
    )
    level.add_argument(
        "-c", "--compression",
        type=int,
        help="Compression percent 0-100, the inverse of quality (e.g. 70 -> quality 0.3)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser.parse_args(argv)


def resolve_quality(args) -> float:
    if args.compression is not None:
        return quality_from_slider(args.compression)
    if args.quality is not None:
        if not 0.0 <= args.quality <= 1.0:
            raise ValueError(f"Quality must be in [0.0, 1.0], got {args.quality}")
        return args.quality
    return DEFAULT_QUALITY


def print_progress(current: int, total: int):
    """Print progress bar."""
    width = 40
    filled = int(width * current / total)
    bar = "=" * filled + "-" * (width - filled)
    pct = current / total * 100
    print(f"\r[{bar}] {current}/{total} ({pct:.0f}%)", end="", file=sys.stderr)
    if current == total:
        print(file=sys.stderr)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        quality = resolve_quality(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    queue = FileQueue()
    errors = queue.add([InputFile.from_path(p) for p in args.input if p.exists()])
    for p in args.input:
        if not p.exists():
            errors.append(f"{p}: File not found")

    for error in errors:
        print(f"Error: {error}", file=sys.stderr)

    if not len(queue):
        print("Error: No valid PDF files", file=sys.stderr)
        return 2

    files = queue.files
    results = compress_batch(files, quality, on_progress=print_progress)

    total_in = 0
    total_out = 0
    successes = 0

    for input_file, item in zip(files, results):
        if not item.success:
            print(item.error, file=sys.stderr)
            continue

        output_dir = args.output_dir or input_file.path.parent
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / item.output_name
        output_path.write_bytes(item.output_bytes)

        total_in += item.input_size
        total_out += item.output_size
        successes += 1
        print(
            f"{item.input_name}: {format_size(item.input_size)} -> "
            f"{format_size(item.output_size)} (-{item.reduction}%) -> {output_path}"
        )

    print(f"\n{'='*50}")
    print(f"Batch complete: {successes}/{len(files)} files")
    print(f"Total: {format_size(total_in)} -> {format_size(total_out)}")
    if total_in > 0:
        print(f"Reduction: {(1 - total_out/total_in)*100:.1f}%")

    return 0 if successes == len(files) and not errors else 1


if __name__ == "__main__":
    sys.exit(main())
