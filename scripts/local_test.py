"""
Quick local test helper: runs the background-removal pipeline on a local
image, data URL or remote URL and writes the PNG to disk. This bypasses the
HTTP layer.
"""

from __future__ import annotations

import argparse
import asyncio
import base64
from pathlib import Path

# Ensure project root is importable when running from scripts/
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import requests

from quickai_service.config import get_settings
from quickai_service.pipeline import PNG_DATA_URL_PREFIX, remove_background
from quickai_service.remover import RembgRemover


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove the background of an image")
    parser.add_argument("--input", required=True, help="Local path, http(s) URL or data: URL")
    parser.add_argument("--output", required=True, help="Path to write the PNG")
    parser.add_argument("--model", default=None, help="rembg model name (defaults to REMBG_MODEL)")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> bytes:
    settings = get_settings()
    remover = RembgRemover(args.model or settings.rembg_model)
    with requests.Session() as session:
        data_url = await remove_background(
            args.input,
            remover,
            session,
            temp_prefix=settings.temp_dir_prefix,
            fetch_timeout=settings.image_fetch_timeout_seconds,
        )
    return base64.b64decode(data_url[len(PNG_DATA_URL_PREFIX) :])


def main() -> None:
    args = parse_args()
    output_path = Path(args.output)
    png_bytes = asyncio.run(_run(args))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(png_bytes)
    print(f"Wrote PNG output to {output_path}")


if __name__ == "__main__":
    main()
