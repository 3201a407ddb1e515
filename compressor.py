import contextlib
import os
import tempfile
from typing import Callable, Counter, Dict, Hashable, NamedTuple, Optional, Tuple, Union

import artifact
from bitops import BitReader, BitWriter
from coder import decode_symbols, encode_symbols
from errors import DestinationAccessError, MalformedArtifactError, SourceAccessError
from frequency import count_symbols
from huffman import Node, build_codebook, build_tree, encoded_bit_length
from symbols import BYTES, TEXT, SymbolKind, kind_by_name

Progress = Optional[Callable[[int, int], None]]

DEFAULT_ENCODING = "utf-8"
FILE_MODE = 0o644  #: Permission bits of written output files


class Analysis(NamedTuple):
    """Intermediate products of one compression run."""

    frequencies: Counter
    tree: Optional[Node]
    codebook: Dict[Hashable, str]
    payload_bits: int


class FileStats(NamedTuple):
    """Outcome of a file operation.

    :ivar input_size: Size of the file read, in bytes.
    :ivar output_size: Size of the file written, in bytes.
    :ivar symbol_count: Number of symbols encoded or decoded.
    """

    input_size: int
    output_size: int
    symbol_count: int


class _Halves:
    """Maps the progress of one of two passes onto a single 0..total range."""

    def __init__(self, on_progress: Callable[[int, int], None], second: bool):
        """Wrap ``on_progress`` for the first or the second pass.

        :param on_progress: Callback receiving the combined progress.
        :type on_progress: Callable[[int, int], None]
        :param second: ``True`` when wrapping the second pass.
        :type second: bool
        """
        self.on_progress = on_progress
        self.second = second

    def __call__(self, done: int, total: int) -> None:
        """Report ``done`` of ``total`` as progress over both passes.

        :param done: Symbols processed in this pass.
        :type done: int
        :param total: Symbols in the input.
        :type total: int
        """
        offset = total if self.second else 0
        self.on_progress(offset + done, 2 * total)


class HuffmanCompressor:
    """Huffman coder producing self-describing artifacts.

    Compression runs two passes over the buffered input: the frequency
    pass, then the encode pass with the codebook derived from the tree.
    Decompression needs only the artifact.

    :ivar VERSION: Artifact format version written by :meth:`compress`.
    :type VERSION: int
    :ivar kind: Symbol alphabet used for compression.
    :type kind: SymbolKind
    :ivar encoding: Encoding the text was read with, recorded in text artifacts.
    :type encoding: str
    """

    VERSION = artifact.VERSION

    def __init__(self, kind: Union[SymbolKind, str] = BYTES, encoding: str = DEFAULT_ENCODING):
        """Create a compressor for ``kind`` symbols.

        :param kind: A :class:`SymbolKind` or its name, ``"bytes"`` or ``"text"``.
        :type kind: Union[SymbolKind, str]
        :param encoding: Source encoding stored in text artifacts so that
            decompression can write the same bytes back.
        :type encoding: str
        """
        self.kind = kind_by_name(kind) if isinstance(kind, str) else kind
        self.encoding = encoding

    def analyze(self, data: Union[bytes, str]) -> Analysis:
        """Run the frequency pass and derive the tree and codebook.

        :param data: Input to analyze.
        :type data: Union[bytes, str]
        :returns: Frequency table, tree, codebook and payload size in bits.
        :rtype: Analysis
        """
        self.kind.check_data(data)
        frequencies = count_symbols(data)
        tree = build_tree(frequencies)
        codebook = build_codebook(tree)
        return Analysis(frequencies, tree, codebook, encoded_bit_length(frequencies, codebook))

    def compress(self, data: Union[bytes, str], on_progress: Progress = None) -> bytes:
        """Compress ``data`` into a self-describing artifact.

        :param data: ``bytes`` for the bytes alphabet, ``str`` for text.
        :type data: Union[bytes, str]
        :param on_progress: Optional callback ``on_progress(done, total)``
            covering both passes.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: The artifact. Empty input gives a header with count 0.
        :rtype: bytes
        :raises TypeError: If ``data`` does not match the alphabet.
        :raises LookupError: If the text encoding is not a known codec.
        :raises UnknownSymbolError: If the encode pass sees a symbol missing
            from the codebook.
        """
        self.kind.check_data(data)
        first = _Halves(on_progress, second=False) if on_progress else None
        second = _Halves(on_progress, second=True) if on_progress else None

        frequencies = count_symbols(data, on_progress=first)
        tree = build_tree(frequencies)

        output = BitWriter()
        artifact.write_header(
            output, self.kind, len(data), self.encoding if self.kind is TEXT else None
        )
        if tree is None:
            return output.flush()

        artifact.write_tree(output, tree, self.kind)
        codebook = build_codebook(tree)
        encode_symbols(data, codebook, output, on_progress=second)
        return output.flush()

    def decompress(self, data: bytes, on_progress: Progress = None) -> Union[bytes, str]:
        """Decompress an artifact produced by :meth:`compress`.

        :param data: The artifact.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
            counting decoded symbols.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: The original ``bytes`` or ``str``.
        :rtype: Union[bytes, str]
        :raises MalformedArtifactError: If the header, tree or padding is
            inconsistent, or the artifact holds another symbol kind.
        :raises TruncatedPayloadError: If the artifact is cut short.
        """
        reader = BitReader(data)
        header = artifact.read_header(reader)
        if header.kind is not self.kind:
            raise MalformedArtifactError(
                f"Artifact holds {header.kind.name} symbols, expected {self.kind.name}"
            )
        return decode_body(reader, header, on_progress)


def decode_body(reader: BitReader, header: artifact.Header, on_progress: Progress = None) -> Union[bytes, str]:
    """Decode the tree and payload that follow ``header``.

    :param reader: Bit stream positioned right after the header.
    :type reader: BitReader
    :param header: The header read from the same stream.
    :type header: artifact.Header
    :returns: The original ``bytes`` or ``str``.
    :rtype: Union[bytes, str]
    :raises MalformedArtifactError: If the tree or padding is inconsistent.
    :raises TruncatedPayloadError: If the artifact is cut short.
    """
    if header.count == 0:
        tree = None
    else:
        tree = artifact.read_tree(reader, header.kind)
    symbols = decode_symbols(reader, tree, header.count, on_progress=on_progress)
    if not reader.padding_is_clean():
        raise MalformedArtifactError("Unexpected data after payload")
    return header.kind.join(symbols)


def decode_artifact(data: bytes, on_progress: Progress = None) -> Tuple[artifact.Header, Union[bytes, str]]:
    """Decompress an artifact of any symbol kind, taken from its header.

    :returns: The header and the original ``bytes`` or ``str``.
    :rtype: Tuple[artifact.Header, Union[bytes, str]]
    """
    reader = BitReader(data)
    header = artifact.read_header(reader)
    return header, decode_body(reader, header, on_progress)


def read_source(path: str, kind: SymbolKind = BYTES, encoding: str = DEFAULT_ENCODING) -> Union[bytes, str]:
    """Read a whole input file, as bytes or as text.

    Text is read with newline translation disabled so line endings survive
    the round trip unchanged.

    :raises SourceAccessError: If the file cannot be opened, read or decoded.
    """
    try:
        if kind is TEXT:
            with open(path, "r", encoding=encoding, newline="") as f:
                return f.read()
        with open(path, "rb") as f:
            return f.read()
    except (OSError, UnicodeDecodeError, LookupError) as e:
        raise SourceAccessError(f"Cannot read {path}: {e}") from e


def write_destination(path: str, data: Union[bytes, str], encoding: str = DEFAULT_ENCODING):
    """Write ``data`` to ``path`` through a temporary file in the same directory.

    The destination only appears once it is completely written; on failure
    the temporary file is removed.

    :raises DestinationAccessError: If the text cannot be encoded, or the
        output cannot be created or written.
    """
    if isinstance(data, str):
        try:
            data = data.encode(encoding)
        except (UnicodeEncodeError, LookupError) as e:
            raise DestinationAccessError(f"Cannot write {path}: {e}") from e

    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix=os.path.basename(path) + ".", suffix=".part", dir=directory
        )
    except OSError as e:
        raise DestinationAccessError(f"Cannot write {path}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as out:
            out.write(data)
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, path)
    except OSError as e:
        with contextlib.suppress(OSError):
            os.remove(tmp_path)
        raise DestinationAccessError(f"Cannot write {path}: {e}") from e


def compress_file(
    src: str,
    dst: str,
    kind: Union[SymbolKind, str] = BYTES,
    encoding: str = DEFAULT_ENCODING,
    on_progress: Progress = None,
) -> FileStats:
    """Compress the file ``src`` into the artifact ``dst``.

    The whole source is buffered in memory, so both passes see the same
    data. Text artifacts record ``encoding``.

    :returns: Sizes in bytes of source and artifact, and the symbol count.
    :rtype: FileStats
    """
    compressor = HuffmanCompressor(kind, encoding)
    data = read_source(src, compressor.kind, encoding)
    comp = compressor.compress(data, on_progress=on_progress)
    write_destination(dst, comp)
    return FileStats(os.path.getsize(src), len(comp), len(data))


def decompress_file(
    src: str,
    dst: str,
    encoding: Optional[str] = None,
    on_progress: Progress = None,
) -> FileStats:
    """Decompress the artifact ``src`` into ``dst``.

    The symbol kind comes from the artifact header. Text is written with
    the encoding recorded in the artifact unless ``encoding`` overrides it.

    :returns: Sizes in bytes of artifact and output, and the symbol count.
    :rtype: FileStats
    """
    comp = read_source(src)
    header, data = decode_artifact(comp, on_progress=on_progress)
    write_destination(dst, data, encoding or header.encoding or DEFAULT_ENCODING)
    return FileStats(len(comp), os.path.getsize(dst), len(data))
