from typing import Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple

from bitops import BitReader, BitWriter
from errors import MalformedArtifactError, TruncatedPayloadError, UnknownSymbolError
from frequency import PROGRESS_STEP
from huffman import Leaf, Node


def encode_symbols(
    symbols: Iterable[Hashable],
    codebook: Mapping[Hashable, str],
    writer: BitWriter,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> int:
    """Append the code of every symbol to ``writer``, in stream order.

    :param symbols: The same stream the codebook was built from.
    :type symbols: Iterable[Hashable]
    :param codebook: Mapping from symbol to its bit string.
    :type codebook: Mapping[Hashable, str]
    :param writer: Destination bit stream.
    :type writer: BitWriter
    :param on_progress: Optional callback ``on_progress(done, total)``,
        used when ``symbols`` has a length.
    :type on_progress: Optional[Callable[[int, int], None]]
    :returns: Number of symbols encoded.
    :rtype: int
    :raises UnknownSymbolError: If a symbol has no codebook entry.
    """
    # (value, length) pairs for BitWriter.write_bits
    packed: Dict[Hashable, Tuple[int, int]] = {
        symbol: (int(code, 2), len(code)) for symbol, code in codebook.items()
    }
    total = len(symbols) if on_progress is not None and hasattr(symbols, "__len__") else None
    done = 0
    for symbol in symbols:
        try:
            value, length = packed[symbol]
        except KeyError:
            raise UnknownSymbolError(symbol) from None
        writer.write_bits(value, length)
        done += 1
        if total is not None and done % PROGRESS_STEP == 0:
            on_progress(done, total)
    if total is not None:
        on_progress(total, total)
    return done


def decode_symbols(
    reader: BitReader,
    tree: Optional[Node],
    count: int,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[Hashable]:
    """Decode exactly ``count`` symbols by walking ``tree`` from the root.

    The walk is a two-state machine. At the root a new symbol starts;
    while descending every bit selects the left (``0``) or right (``1``)
    child. Reaching a leaf emits its symbol and returns to the root before
    the next bit is consumed. Decoding stops after ``count`` symbols, so
    the zero bits padding the last byte are never read as data.

    A tree consisting of a single leaf spends one ``0`` bit per repetition.

    :param reader: Source bit stream, positioned at the payload.
    :type reader: BitReader
    :param tree: Decode tree; may only be ``None`` when ``count`` is zero.
    :type tree: Optional[Node]
    :param count: Number of symbols to decode.
    :type count: int
    :param on_progress: Optional callback ``on_progress(done, count)``.
    :type on_progress: Optional[Callable[[int, int], None]]
    :returns: The decoded symbols.
    :rtype: List[Hashable]
    :raises TruncatedPayloadError: If the bits run out before ``count``
        symbols were decoded.
    :raises MalformedArtifactError: If the payload cannot belong to ``tree``.
    """
    if count == 0:
        return []
    if tree is None:
        raise MalformedArtifactError(f"No decode tree for {count} symbols")

    output: List[Hashable] = []
    try:
        if isinstance(tree, Leaf):
            for _ in range(count):
                if reader.read_bit():
                    raise MalformedArtifactError("Invalid code for single-symbol tree")
                output.append(tree.symbol)
                _report(on_progress, len(output), count)
        else:
            node = tree
            while True:
                if isinstance(node, Leaf):
                    output.append(node.symbol)
                    if len(output) == count:
                        break
                    _report(on_progress, len(output), count)
                    node = tree
                    continue
                node = node.right if reader.read_bit() else node.left
    except EOFError:
        raise TruncatedPayloadError(
            f"Payload ended after {len(output)} of {count} symbols"
        ) from None

    if on_progress is not None:
        on_progress(count, count)
    return output


def _report(on_progress, done: int, total: int):
    if on_progress is not None and done % PROGRESS_STEP == 0:
        on_progress(done, total)
