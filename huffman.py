import heapq
from typing import Dict, Optional, Tuple


class HuffmanDecodeError(ValueError):
    """Raised when a packed bit-stream does not decode cleanly against its tree."""


class CodeTableError(RuntimeError):
    """Raised when a byte being encoded has no code (the table came from other data)."""


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, frequency, left=None, right=None):
        self.symbol = symbol    # byte or None
        self.frequency = frequency
        self.left = left
        self.right = right
        # smallest symbol in this subtree, used to break weight ties
        self.low = symbol if symbol is not None else min(left.low, right.low)

    def is_leaf(self) -> bool:
        return self.symbol is not None

    def __lt__(self, other):
        # equal weights: the subtree holding the lower byte value comes out of the heap first
        return (self.frequency, self.low) < (other.frequency, other.low)


def freq_table(data: bytes) -> Dict[int, int]:
    ft: Dict[int, int] = {}
    for b in data:
        ft[b] = ft.get(b, 0) + 1
    return ft


def build_huffman_tree(frequency_table: Dict[int, int]) -> Optional[HuffmanNode]: # frequency_table: dict of symbol -> frequency
    """
    Greedy min-weight merge. The first node popped becomes the left child.
    Returns None for an empty table and a lone leaf for a single symbol.
    """
    priority_queue = [HuffmanNode(symbol, frequency) for symbol, frequency in frequency_table.items()]
    if not priority_queue:
        return None
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left = heapq.heappop(priority_queue)
        right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left.frequency + right.frequency, left, right)
        heapq.heappush(priority_queue, merged_node)

    return priority_queue[0] # root of the tree


def generate_huffman_codes(root: Optional[HuffmanNode]) -> Dict[int, str]:
    codes: Dict[int, str] = {}
    if root is None:
        return codes

    # a lone leaf would get the empty code, force it to a single bit
    if root.is_leaf():
        codes[root.symbol] = '0'
        return codes

    def generate_codes_helper(node, current_code): # depth is bounded by the 256 possible symbols
        if node.is_leaf():
            codes[node.symbol] = current_code
            return
        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return codes


def code_lengths(code_map: Dict[int, str]) -> Dict[int, int]:
    return {symbol: len(code) for symbol, code in code_map.items()}


def huffman_encode(data: bytes, code_map: Dict[int, str]) -> Tuple[bytes, int]:
    """
    Converts Huffman codes into packed bytes, MSB first.
    Returns (packed_bytes, pad_bits) where pad_bits is number of 0 bits added at the end
    """
    # (value, length) per symbol so each code is shifted in at once
    table = {symbol: (int(code, 2), len(code)) for symbol, code in code_map.items()}

    out = bytearray()
    acc = 0
    acc_bits = 0

    for b in data:
        try:
            value, length = table[b]
        except KeyError:
            raise CodeTableError(f"no Huffman code for byte 0x{b:02x}") from None
        acc = (acc << length) | value
        acc_bits += length
        while acc_bits >= 8:
            acc_bits -= 8
            out.append((acc >> acc_bits) & 0xFF)
        acc &= (1 << acc_bits) - 1

    pad_bits = 0
    if acc_bits != 0:
        pad_bits = 8 - acc_bits
        out.append((acc << pad_bits) & 0xFF)

    return bytes(out), pad_bits


def huffman_decode(packed: bytes, pad_bits: int, root: Optional[HuffmanNode]) -> bytes:
    """
    Decode packed bits using Huffman tree.

    Exactly ``8 * len(packed) - pad_bits`` bits are consumed. The stream must
    end on a leaf; anything else means the payload was cut or is foreign.
    """
    if not 0 <= pad_bits <= 7:
        raise HuffmanDecodeError(f"padding must be between 0 and 7 bits, got {pad_bits}")
    total_bits = len(packed) * 8 - pad_bits
    if total_bits < 0:
        raise HuffmanDecodeError("padding is longer than the payload")
    if total_bits == 0:
        return b""
    if root is None:
        raise HuffmanDecodeError(f"{total_bits} payload bits but no symbols to decode into")

    if root.is_leaf():
        return _decode_single_symbol(packed, total_bits, root.symbol)

    decoded = bytearray()
    node = root
    bit_index = 0

    for byte in packed:
        for i in range(7, -1, -1):
            if bit_index >= total_bits:
                break
            bit = (byte >> i) & 1
            node = node.right if bit == 1 else node.left

            # Leaf
            if node.symbol is not None:
                decoded.append(node.symbol)
                node = root
            bit_index += 1

    if node is not root:
        raise HuffmanDecodeError("payload ends in the middle of a code")
    return bytes(decoded)


def _decode_single_symbol(packed: bytes, total_bits: int, symbol: int) -> bytes:
    # every bit is one occurrence of the only symbol, and its code is '0'
    full, rest = divmod(total_bits, 8)
    if any(packed[:full]) or (rest and packed[full] >> (8 - rest)):
        raise HuffmanDecodeError("single-symbol payload contains a 1 bit")
    return bytes([symbol]) * total_bits
