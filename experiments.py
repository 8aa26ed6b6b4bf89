"""
Measure how close huffzip gets to the entropy bound, and where the container's
bytes go.

For every input (files given on the command line and synthetic profiles at
each requested size) one row is written to metrics.csv:
  - entropy_bits vs avg_code_bits (per symbol) and their gap
  - header_bytes vs payload_bytes, plus the pad bits in the last byte
  - best-of-N encode/decode time

Charts (unless --no_plots):
  - code_length_vs_entropy.png
  - container_breakdown.png

How to run:
  python experiments.py --outdir results
  python experiments.py --outdir results --profiles skewed,single --sizes 256,4096,65536 --runs 3
  python experiments.py --outdir results --profiles "" some/file.txt other/file.bin
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import huffman as huff
from container import compress_bytes, decompress_bytes, header_size, read_container
from huffzip import read_all_bytes


def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0


def entropy_bits(ft: Dict[int, int]) -> float:
    """Shannon entropy of the byte distribution, in bits per symbol."""
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return -sum((n / total) * math.log2(n / total) for n in ft.values())

def average_code_bits(ft: Dict[int, int], code_map: Dict[int, str]) -> float:
    total = sum(ft.values())
    if total == 0:
        return 0.0
    lengths = huff.code_lengths(code_map)
    return sum(ft[s] * lengths[s] for s in ft) / total


# Synthetic profiles: size, seed -> bytes

def _weighted(weights: List[float]) -> Callable[[int, int], bytes]:
    def make(size: int, seed: int) -> bytes:
        rng = random.Random(seed)
        return bytes(rng.choices(range(len(weights)), weights=weights, k=size))
    return make

def _source_text(size: int, seed: int) -> bytes:
    # this file's own source, repeated: real text with a realistic byte spread
    text = Path(__file__).read_bytes()
    return (text * (size // len(text) + 1))[:size]

PROFILES: Dict[str, Callable[[int, int], bytes]] = {
    "uniform": _weighted([1.0] * 256),
    "skewed": _weighted([0.5 ** i for i in range(16)]),
    "text": _source_text,
    "single": lambda size, seed: b"A" * size,
}


@dataclass
class MetricRow:
    dataset: str
    size_bytes: int
    unique_symbols: int

    entropy_bits: float
    avg_code_bits: float
    redundancy_bits: float  # avg_code_bits - entropy_bits

    header_bytes: int
    payload_bytes: int
    pad_bits: int
    container_bytes: int
    ratio: float  # container_bytes / size_bytes

    encode_ms: float
    decode_ms: float
    roundtrip_ok: int  # 1 or 0


def _best_of(runs: int, fn, arg):
    best = None
    result = None
    for _ in range(max(1, runs)):
        t0 = now_ns()
        result = fn(arg)
        elapsed = now_ns() - t0
        best = elapsed if best is None else min(best, elapsed)
    return result, ns_to_ms(best)


def run_one(dataset: str, data: bytes, runs: int = 1) -> MetricRow:
    ft = huff.freq_table(data)
    code_map = huff.generate_huffman_codes(huff.build_huffman_tree(ft))

    blob, encode_ms = _best_of(runs, compress_bytes, data)
    decoded, decode_ms = _best_of(runs, decompress_bytes, blob)

    container = read_container(blob)
    h = entropy_bits(ft)
    avg = average_code_bits(ft, code_map)

    return MetricRow(
        dataset=dataset,
        size_bytes=len(data),
        unique_symbols=len(ft),
        entropy_bits=h,
        avg_code_bits=avg,
        redundancy_bits=avg - h,
        header_bytes=header_size(len(ft)),
        payload_bytes=len(container.payload),
        pad_bits=container.pad_bits,
        container_bytes=len(blob),
        ratio=len(blob) / max(1, len(data)),
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        roundtrip_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def _label(r: MetricRow) -> str:
    return f"{r.dataset}\n{r.size_bytes} B"

def plot_code_length(rows: List[MetricRow], outdir: Path) -> None:
    x = list(range(len(rows)))
    width = 0.4

    plt.figure(figsize=(max(6, len(rows)), 4))
    plt.bar([i - width / 2 for i in x], [r.entropy_bits for r in rows], width, label="entropy")
    plt.bar([i + width / 2 for i in x], [r.avg_code_bits for r in rows], width, label="huffman")
    plt.xticks(x, [_label(r) for r in rows], fontsize=8)
    plt.ylabel("Bits per Symbol")
    plt.title("Average Code Length vs Entropy")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "code_length_vs_entropy.png", dpi=200)
    plt.close()

def plot_container_breakdown(rows: List[MetricRow], outdir: Path) -> None:
    x = list(range(len(rows)))
    headers = [r.header_bytes / max(1, r.size_bytes) for r in rows]
    payloads = [r.payload_bytes / max(1, r.size_bytes) for r in rows]

    plt.figure(figsize=(max(6, len(rows)), 4))
    plt.bar(x, payloads, label="payload")
    plt.bar(x, headers, bottom=payloads, label="frequency table header")
    plt.axhline(1.0, color="gray", linestyle="--", linewidth=1)
    plt.xticks(x, [_label(r) for r in rows], fontsize=8)
    plt.ylabel("Container Bytes / Original Bytes")
    plt.title("Where the Container's Bytes Go")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "container_breakdown.png", dpi=200)
    plt.close()


def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Measure huffzip against the entropy bound")
    ap.add_argument("files", nargs="*", help="Extra input files to measure")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--profiles", type=str, default="uniform,skewed,text,single",
                    help=f"Comma-separated synthetic profiles ({', '.join(PROFILES)})")
    ap.add_argument("--sizes", type=str, default="1024,65536", help="Comma-separated synthetic sizes in bytes")
    ap.add_argument("--runs", type=int, default=3, help="Timing repetitions, best run is kept")
    ap.add_argument("--seed", type=int, default=123, help="Random seed for synthetic profiles")
    ap.add_argument("--no_plots", action="store_true", help="Only write metrics.csv")
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    profiles = parse_csv_list(args.profiles)
    unknown = [p for p in profiles if p not in PROFILES]
    if unknown:
        ap.error(f"unknown profile(s): {', '.join(unknown)}")

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    rows: List[MetricRow] = []
    for name in profiles:
        for size in (int(s) for s in parse_csv_list(args.sizes)):
            rows.append(run_one(name, PROFILES[name](size, args.seed), args.runs))
    for path in args.files:
        rows.append(run_one(Path(path).name, read_all_bytes(path), args.runs))

    metrics_csv = outdir / "metrics.csv"
    write_csv(metrics_csv, rows)
    if rows and not args.no_plots:
        plot_code_length(rows, outdir)
        plot_container_breakdown(rows, outdir)

    for r in rows:
        print(f"{r.dataset:>12} {r.size_bytes:>9} B  H={r.entropy_bits:.3f}  L={r.avg_code_bits:.3f}  "
              f"header={r.header_bytes} B  pad={r.pad_bits}  ratio={r.ratio:.3f}")
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    return 0 if all(r.roundtrip_ok for r in rows) else 1


if __name__ == "__main__":
    raise SystemExit(main())
