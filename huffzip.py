"""
huffzip: compress or decompress a file with Huffman coding.

How to run:
  huffzip -c notes.txt notes.huf
  huffzip -d notes.huf notes.txt --stats
"""

from __future__ import annotations

import argparse
import os
import shutil
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from container import compress_bytes, decompress_bytes


@dataclass
class Stats:
    input_bytes: int
    output_bytes: int

    @property
    def ratio(self) -> float:
        return self.output_bytes / max(1, self.input_bytes)


def _current_umask() -> int:
    # the only portable way to read the umask is to set it and put it back
    mask = os.umask(0)
    os.umask(mask)
    return mask


def read_all_bytes(path) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def write_all_bytes(path, data: bytes) -> None:
    """Write to a sibling temp file then rename, so a failure never leaves a partial file."""
    target = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        # mkstemp creates 0600; give the result the mode open(..., "wb") would
        if target.exists():
            shutil.copymode(target, tmp_name)
        else:
            os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def compress_file(src, dst) -> Stats:
    data = read_all_bytes(src)
    packed = compress_bytes(data)
    write_all_bytes(dst, packed)
    return Stats(input_bytes=len(data), output_bytes=len(packed))


def decompress_file(src, dst) -> Stats:
    blob = read_all_bytes(src)
    data = decompress_bytes(blob)
    write_all_bytes(dst, data)
    return Stats(input_bytes=len(blob), output_bytes=len(data))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffzip", description="Huffman file compressor")
    mode = ap.add_mutually_exclusive_group(required=True)
    mode.add_argument("-c", dest="mode", action="store_const", const="compress", help="Compress the input file")
    mode.add_argument("-d", dest="mode", action="store_const", const="decompress", help="Decompress the input file")
    ap.add_argument("input", type=str, help="File to read")
    ap.add_argument("output", type=str, help="File to write")
    ap.add_argument("--stats", action="store_true", help="Print sizes and ratio after the run")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.mode == "compress":
            stats = compress_file(args.input, args.output)
        else:
            stats = decompress_file(args.input, args.output)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {args.input} is not a valid compressed file: {e}", file=sys.stderr)
        return 1

    print(f"File {args.mode}ed successfully. Output file: {args.output}")
    if args.stats:
        print(f"Input: {stats.input_bytes} bytes, output: {stats.output_bytes} bytes, ratio: {stats.ratio:.3f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
