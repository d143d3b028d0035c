"""
Quick local test helper: runs format validation and the resize transform on a
local image and writes the JPEG to disk. This bypasses the fetch and S3
upload layers.
"""

from __future__ import annotations

import argparse
from pathlib import Path

# Ensure project root is importable when running from scripts/
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from resize_service.pipeline import process_image_bytes
from resize_service.transform import TransformOptions, parse_dimensions


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resize a local image to JPEG")
    parser.add_argument("--input", required=True, help="Path to the input JPEG or PNG")
    parser.add_argument("--output", required=True, help="Path to write the JPEG")
    parser.add_argument("--size", default="200x150", help="Target size as <width>x<height>")
    parser.add_argument("--quality", type=int, default=90, help="JPEG quality")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    input_path = Path(args.input)
    output_path = Path(args.output)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    dims = parse_dimensions(args.size)
    image_bytes = input_path.read_bytes()
    jpeg_bytes = process_image_bytes(image_bytes, dims, TransformOptions(quality=args.quality))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(jpeg_bytes)
    print(f"Wrote {dims.width}x{dims.height} JPEG to {output_path}")


if __name__ == "__main__":
    main()
