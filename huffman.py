import heapq
from typing import Dict, Hashable, Iterator, List, Mapping, NamedTuple, Optional, Tuple, Union


class Leaf(NamedTuple):
    """Tree node holding exactly one symbol.

    :ivar symbol: The symbol stored at this leaf.
    :ivar weight: Occurrence count of ``symbol``.
    """

    symbol: Hashable
    weight: int


class Internal(NamedTuple):
    """Merge point of the Huffman tree with exactly two children.

    :ivar weight: Sum of the children's weights.
    :ivar left: Child reached by bit ``0``.
    :ivar right: Child reached by bit ``1``.
    """

    weight: int
    left: "Node"
    right: "Node"


Node = Union[Leaf, Internal]

#: Code given to the only symbol of a single-leaf tree
SINGLE_SYMBOL_CODE = "0"


def is_leaf(node: Node) -> bool:
    """Tell whether ``node`` is a :class:`Leaf`."""
    return isinstance(node, Leaf)


def build_tree(frequencies: Mapping[Hashable, int]) -> Optional[Node]:
    """Build a Huffman tree by repeatedly merging the two lightest nodes.

    Ties between equal weights are broken by creation order: leaves are
    numbered in the iteration order of ``frequencies`` and every merged
    node takes the next number. The first node popped becomes the left
    child. The same table therefore always yields the same tree.

    :param frequencies: Mapping from symbol to positive count.
    :type frequencies: Mapping[Hashable, int]
    :returns: The root node, a lone :class:`Leaf` for a single-symbol table,
        or ``None`` for an empty table.
    :rtype: Optional[Node]
    :raises ValueError: If a count is not a positive integer.
    """
    heap: List[Tuple[int, int, Node]] = []
    for seq, (symbol, weight) in enumerate(frequencies.items()):
        if weight <= 0:
            raise ValueError(f"Frequency of {symbol!r} must be positive, got {weight}")
        heap.append((weight, seq, Leaf(symbol, weight)))

    if not heap:
        return None

    heapq.heapify(heap)
    seq = len(heap)
    while len(heap) > 1:
        left_weight, _, left = heapq.heappop(heap)
        right_weight, _, right = heapq.heappop(heap)
        merged = Internal(left_weight + right_weight, left, right)
        heapq.heappush(heap, (merged.weight, seq, merged))
        seq += 1

    return heap[0][2]


def build_codebook(tree: Optional[Node]) -> Dict[Hashable, str]:
    """Derive the symbol to bit-string mapping from a tree.

    Descending left appends ``"0"``, descending right appends ``"1"``.
    A tree made of a single leaf gets :data:`SINGLE_SYMBOL_CODE` instead
    of its empty root path, so every code holds at least one bit.

    :param tree: Root node, or ``None`` for the empty tree.
    :type tree: Optional[Node]
    :returns: Prefix-free codebook.
    :rtype: Dict[Hashable, str]
    """
    codebook: Dict[Hashable, str] = {}
    if tree is None:
        return codebook
    if is_leaf(tree):
        codebook[tree.symbol] = SINGLE_SYMBOL_CODE
        return codebook
    _collect_codes(tree, "", codebook)
    return codebook


def _collect_codes(node: Node, prefix: str, codebook: Dict[Hashable, str]):
    if isinstance(node, Leaf):
        codebook[node.symbol] = prefix
    else:
        _collect_codes(node.left, prefix + "0", codebook)
        _collect_codes(node.right, prefix + "1", codebook)


def iter_leaves(tree: Optional[Node]) -> Iterator[Leaf]:
    """Yield the leaves of ``tree`` from left to right."""
    stack = [tree] if tree is not None else []
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            yield node
        else:
            stack.append(node.right)
            stack.append(node.left)


def tree_depth(tree: Optional[Node]) -> int:
    """Length of the longest root-to-leaf path (0 for a lone leaf or no tree)."""
    if tree is None:
        return 0
    deepest = 0
    stack = [(tree, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, Leaf):
            deepest = max(deepest, depth)
        else:
            stack.append((node.left, depth + 1))
            stack.append((node.right, depth + 1))
    return deepest


def encoded_bit_length(frequencies: Mapping[Hashable, int], codebook: Mapping[Hashable, str]) -> int:
    """Total payload size in bits: ``sum(freq[s] * len(code[s]))``."""
    return sum(count * len(codebook[symbol]) for symbol, count in frequencies.items())


def format_tree(tree: Optional[Node], indent: str = "  ") -> str:
    """Render ``tree`` as indented text, one node per line.

    Internal nodes show their weight, leaves show ``symbol: weight``.
    Children are prefixed with the bit that selects them.
    """
    if tree is None:
        return "<empty>"
    lines = []
    stack = [(tree, 0, "")]
    while stack:
        node, level, bit = stack.pop()
        label = f"{bit} " if bit else ""
        if isinstance(node, Leaf):
            lines.append(f"{indent * level}{label}{node.symbol!r}: {node.weight}")
        else:
            lines.append(f"{indent * level}{label}* {node.weight}")
            stack.append((node.right, level + 1, "1"))
            stack.append((node.left, level + 1, "0"))
    return "\n".join(lines)
