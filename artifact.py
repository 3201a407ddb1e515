"""Self-describing compressed artifact.

Layout (bit packed, big-endian, MSB first):

- magic ``b"HUF"`` (24 bits)
- format version (8 bits)
- symbol kind id (8 bits), see :mod:`symbols`
- original symbol count (64 bits)
- text artifacts only: length of the source encoding name (8 bits)
  followed by the name in ASCII
- if the count is non-zero, the tree in preorder: ``1`` for an internal
  node followed by its left and right subtrees, ``0`` for a leaf followed
  by its symbol in the kind's fixed width
- the encoded payload, zero padded to a byte boundary
"""

import codecs
from typing import List, NamedTuple, Optional, Set

from bitops import BitReader, BitWriter
from errors import MalformedArtifactError, TruncatedPayloadError
from huffman import Internal, Leaf, Node
from symbols import TEXT, SymbolKind, kind_by_id

MAGIC = b"HUF"  #: Artifact magic number
VERSION = 1  #: Current artifact format version
COUNT_BITS = 64


class Header(NamedTuple):
    """Fields stored in front of the tree.

    :ivar version: Artifact format version.
    :ivar kind: Symbol alphabet of the payload.
    :ivar count: Number of symbols originally encoded.
    :ivar encoding: Codec the text was read with; ``None`` for bytes.
    """

    version: int
    kind: SymbolKind
    count: int
    encoding: Optional[str] = None


def canonical_encoding(encoding: str) -> str:
    """Return the codec's canonical name, e.g. ``"latin-1"`` -> ``"iso8859-1"``.

    :raises LookupError: If Python knows no such codec.
    """
    return codecs.lookup(encoding).name


def write_header(writer: BitWriter, kind: SymbolKind, count: int, encoding: Optional[str] = None):
    """Write magic, version, symbol kind, symbol count and text encoding.

    :param encoding: Source encoding, required for :data:`symbols.TEXT`.
    :type encoding: Optional[str]
    :raises ValueError: If ``count`` does not fit into the count field or
        the encoding name cannot be stored.
    :raises LookupError: If ``encoding`` is not a known codec.
    """
    for byte in MAGIC:
        writer.write_bits(byte, 8)
    writer.write_bits(VERSION, 8)
    writer.write_bits(kind.kind_id, 8)
    writer.write_bits(count, COUNT_BITS)
    if kind is TEXT:
        if encoding is None:
            raise ValueError("Text artifacts need a source encoding")
        name = canonical_encoding(encoding).encode("ascii")
        if len(name) > 0xFF:
            raise ValueError(f"Encoding name too long: {encoding!r}")
        writer.write_bits(len(name), 8)
        for byte in name:
            writer.write_bits(byte, 8)


def read_header(reader: BitReader) -> Header:
    """Read and validate the artifact header.

    :raises MalformedArtifactError: On bad magic, unsupported version,
        unknown symbol kind or unknown text encoding.
    :raises TruncatedPayloadError: If the header is incomplete.
    """
    try:
        magic = bytes(reader.read_bits(8) for _ in range(len(MAGIC)))
        if magic != MAGIC:
            raise MalformedArtifactError("Invalid artifact format (bad magic)")
        version = reader.read_bits(8)
        if version != VERSION:
            raise MalformedArtifactError(f"Unsupported version: {version}")
        kind = kind_by_id(reader.read_bits(8))
        count = reader.read_bits(COUNT_BITS)
        encoding = None
        if kind is TEXT:
            length = reader.read_bits(8)
            name = bytes(reader.read_bits(8) for _ in range(length))
            encoding = _decode_encoding_name(name)
    except EOFError:
        raise TruncatedPayloadError("Artifact header is truncated") from None
    return Header(version, kind, count, encoding)


def _decode_encoding_name(name: bytes) -> str:
    try:
        return canonical_encoding(name.decode("ascii"))
    except (UnicodeDecodeError, LookupError):
        raise MalformedArtifactError(f"Unknown text encoding in header: {name!r}") from None


def write_tree(writer: BitWriter, tree: Node, kind: SymbolKind):
    """Serialize ``tree`` in preorder.

    :raises ValueError: If a leaf holds a symbol outside ``kind``.
    """
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            writer.write_bit(0)
            writer.write_bits(kind.to_int(node.symbol), kind.width)
        else:
            writer.write_bit(1)
            stack.append(node.right)
            stack.append(node.left)


class _Pending:
    """Internal node under reconstruction, waiting for its children."""

    __slots__ = ("children",)

    def __init__(self):
        self.children: List[Node] = []


def read_tree(reader: BitReader, kind: SymbolKind) -> Node:
    """Rebuild a tree written by :func:`write_tree`.

    Leaves carry no weight on the wire, so every rebuilt node has weight 0.

    :raises MalformedArtifactError: If a symbol repeats, is out of range,
        or the tree holds more leaves than the alphabet.
    :raises TruncatedPayloadError: If the data ends inside the tree.
    """
    seen: Set[int] = set()
    stack: List[_Pending] = []
    root: Optional[Node] = None
    try:
        while root is None:
            if reader.read_bit():
                if len(stack) >= kind.alphabet_size:
                    raise MalformedArtifactError("Tree is deeper than the alphabet allows")
                stack.append(_Pending())
                continue
            value = reader.read_bits(kind.width)
            if value in seen:
                raise MalformedArtifactError(f"Duplicate leaf symbol {value:#x} in tree")
            seen.add(value)
            node: Node = Leaf(kind.from_int(value), 0)
            # Attach the finished node, closing every parent it completes.
            while True:
                if not stack:
                    root = node
                    break
                parent = stack[-1]
                parent.children.append(node)
                if len(parent.children) < 2:
                    break
                stack.pop()
                node = Internal(0, parent.children[0], parent.children[1])
    except EOFError:
        raise TruncatedPayloadError("Artifact tree is truncated") from None
    return root
