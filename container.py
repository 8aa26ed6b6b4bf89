"""
Self-describing container for Huffman compressed data.

Layout (all multi-byte integers little-endian):

    u16  table entry count
    count x (u8 symbol, u32 frequency), ascending by symbol
    u8   padding bits in the last payload byte (0-7)
    ...  payload bytes, MSB first, until end of data
"""

from dataclasses import dataclass, field
from typing import Dict

import huffman as huff

BYTE_ORDER = "little"
COUNT_SIZE = 2
SYMBOL_SIZE = 1
FREQUENCY_SIZE = 4
PADDING_SIZE = 1
ENTRY_SIZE = SYMBOL_SIZE + FREQUENCY_SIZE
MAX_SYMBOLS = 256
MAX_FREQUENCY = (1 << (8 * FREQUENCY_SIZE)) - 1


def header_size(num_entries: int) -> int:
    return COUNT_SIZE + num_entries * ENTRY_SIZE + PADDING_SIZE


class ContainerError(ValueError):
    """Raised for containers that are truncated or internally inconsistent."""


@dataclass
class Container:
    frequencies: Dict[int, int] = field(default_factory=dict)
    pad_bits: int = 0
    payload: bytes = b""

    @property
    def original_size(self) -> int:
        return sum(self.frequencies.values())


def write_container(container: Container) -> bytes:
    freqs = container.frequencies
    if len(freqs) > MAX_SYMBOLS:
        raise ContainerError(f"frequency table has {len(freqs)} entries, at most {MAX_SYMBOLS} allowed")
    if not 0 <= container.pad_bits <= 7:
        raise ContainerError(f"padding must be between 0 and 7 bits, got {container.pad_bits}")

    out = bytearray()
    out += len(freqs).to_bytes(COUNT_SIZE, BYTE_ORDER)
    for symbol in sorted(freqs): # fixed order keeps output byte-identical across runs
        count = freqs[symbol]
        if not 1 <= count <= MAX_FREQUENCY:
            raise ContainerError(f"frequency {count} for byte 0x{symbol:02x} does not fit the table")
        out += symbol.to_bytes(SYMBOL_SIZE, BYTE_ORDER)
        out += count.to_bytes(FREQUENCY_SIZE, BYTE_ORDER)
    out += container.pad_bits.to_bytes(PADDING_SIZE, BYTE_ORDER)
    out += container.payload
    return bytes(out)


def read_container(blob: bytes) -> Container:
    if len(blob) < COUNT_SIZE:
        raise ContainerError("truncated header: missing table entry count")
    num_entries = int.from_bytes(blob[:COUNT_SIZE], BYTE_ORDER)
    if num_entries > MAX_SYMBOLS:
        raise ContainerError(f"table claims {num_entries} entries, at most {MAX_SYMBOLS} are possible")

    needed = header_size(num_entries)
    if len(blob) < needed:
        raise ContainerError(
            f"truncated header: {num_entries} table entries need {needed} bytes, only {len(blob)} available"
        )

    frequencies: Dict[int, int] = {}
    pos = COUNT_SIZE
    for _ in range(num_entries):
        symbol = blob[pos]
        count = int.from_bytes(blob[pos + SYMBOL_SIZE:pos + ENTRY_SIZE], BYTE_ORDER)
        pos += ENTRY_SIZE
        if symbol in frequencies:
            raise ContainerError(f"byte 0x{symbol:02x} appears twice in the frequency table")
        if count == 0:
            raise ContainerError(f"byte 0x{symbol:02x} has a zero frequency")
        frequencies[symbol] = count

    pad_bits = blob[pos]
    payload = blob[pos + PADDING_SIZE:]
    if pad_bits > 7:
        raise ContainerError(f"padding must be between 0 and 7 bits, got {pad_bits}")
    if not frequencies and (payload or pad_bits):
        raise ContainerError("payload present but the frequency table is empty")
    if frequencies and not payload:
        raise ContainerError("truncated payload: no data after the header")

    return Container(frequencies=frequencies, pad_bits=pad_bits, payload=payload)


def compress_bytes(data: bytes) -> bytes:
    ft = huff.freq_table(data)
    root = huff.build_huffman_tree(ft)
    code_map = huff.generate_huffman_codes(root)
    packed, pad_bits = huff.huffman_encode(data, code_map)
    return write_container(Container(frequencies=ft, pad_bits=pad_bits, payload=packed))


def decompress_bytes(blob: bytes) -> bytes:
    container = read_container(blob)
    root = huff.build_huffman_tree(container.frequencies)
    decoded = huff.huffman_decode(container.payload, container.pad_bits, root)
    if len(decoded) != container.original_size:
        raise huff.HuffmanDecodeError(
            f"decoded {len(decoded)} bytes but the frequency table accounts for {container.original_size}"
        )
    return decoded
