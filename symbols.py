from typing import Callable, Dict, Hashable, List, Union

from errors import MalformedArtifactError


class SymbolKind:
    """A bounded symbol alphabet and its fixed-width wire encoding.

    :ivar kind_id: Identifier stored in the artifact header.
    :type kind_id: int
    :ivar name: Human-readable name (``"bytes"`` or ``"text"``).
    :type name: str
    :ivar width: Bits used to store one symbol in the serialized tree.
    :type width: int
    :ivar max_value: Largest wire integer a symbol may have.
    :type max_value: int
    """

    def __init__(
        self,
        kind_id: int,
        name: str,
        width: int,
        max_value: int,
        to_int: Callable[[Hashable], int],
        from_int: Callable[[int], Hashable],
        join: Callable[[List[Hashable]], Union[bytes, str]],
        data_type,
    ):
        self.kind_id = kind_id
        self.name = name
        self.width = width
        self.max_value = max_value
        self._to_int = to_int
        self._from_int = from_int
        self._join = join
        self.data_type = data_type

    @property
    def alphabet_size(self) -> int:
        """Number of distinct symbols the alphabet can hold."""
        return self.max_value + 1

    def to_int(self, symbol: Hashable) -> int:
        """Map a symbol to its wire integer.

        :raises ValueError: If ``symbol`` does not belong to this alphabet.
        """
        try:
            value = self._to_int(symbol)
        except TypeError:
            raise ValueError(f"{symbol!r} is not a {self.name} symbol") from None
        if not 0 <= value <= self.max_value:
            raise ValueError(f"{symbol!r} is not a {self.name} symbol")
        return value

    def from_int(self, value: int) -> Hashable:
        """Map a wire integer read from an artifact back to a symbol.

        :raises MalformedArtifactError: If ``value`` is outside the alphabet.
        """
        if value > self.max_value:
            raise MalformedArtifactError(
                f"Symbol value {value:#x} is out of range for {self.name}"
            )
        return self._from_int(value)

    def join(self, symbols: List[Hashable]) -> Union[bytes, str]:
        """Rebuild the original data from decoded symbols."""
        return self._join(symbols)

    def check_data(self, data):
        """Ensure ``data`` is a sequence of this alphabet's symbols.

        :raises TypeError: If ``data`` has the wrong type, e.g. ``str`` for bytes.
        """
        if not isinstance(data, self.data_type):
            raise TypeError(
                f"Cannot compress {type(data).__name__} as {self.name} symbols"
            )

    def __repr__(self):
        return f"SymbolKind({self.name!r})"


def _byte_to_int(symbol: int) -> int:
    if isinstance(symbol, bool) or not isinstance(symbol, int):
        raise TypeError(symbol)
    return symbol


def _char_to_int(symbol: str) -> int:
    if not isinstance(symbol, str) or len(symbol) != 1:
        raise TypeError(symbol)
    return ord(symbol)


BYTES = SymbolKind(
    kind_id=0,
    name="bytes",
    width=8,
    max_value=0xFF,
    to_int=_byte_to_int,
    from_int=int,
    join=bytes,
    data_type=(bytes, bytearray, memoryview),
)

TEXT = SymbolKind(
    kind_id=1,
    name="text",
    width=21,
    max_value=0x10FFFF,
    to_int=_char_to_int,
    from_int=chr,
    join="".join,
    data_type=str,
)

_KINDS: Dict[int, SymbolKind] = {kind.kind_id: kind for kind in (BYTES, TEXT)}


def kind_by_id(kind_id: int) -> SymbolKind:
    """Look up the alphabet stored in an artifact header.

    :raises MalformedArtifactError: If ``kind_id`` is unknown.
    """
    try:
        return _KINDS[kind_id]
    except KeyError:
        raise MalformedArtifactError(f"Unknown symbol kind: {kind_id}") from None


def kind_by_name(name: str) -> SymbolKind:
    """Look up an alphabet by name (``"bytes"`` or ``"text"``).

    :raises ValueError: If ``name`` is unknown.
    """
    for kind in _KINDS.values():
        if kind.name == name:
            return kind
    raise ValueError(f"Unknown symbol kind: {name!r}")
