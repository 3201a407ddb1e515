import argparse
import sys
from typing import Optional

from compressor import HuffmanCompressor, compress_file, decompress_file, read_source
from errors import HuffmanError
from huffman import format_tree
from symbols import BYTES, TEXT


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Huffman compressor producing self-describing artifacts"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    compress = subparsers.add_parser(
        "compress", aliases=["c"], help="Compress a file"
    )
    compress.add_argument("source", help="File to compress")
    compress.add_argument(
        "-o", "--output", required=True, help="Output artifact path"
    )
    _add_symbol_options(compress)
    compress.add_argument(
        "-P",
        "--no-progress",
        action="store_true",
        help="Hide the progress line",
    )

    decompress = subparsers.add_parser(
        "decompress", aliases=["d"], help="Decompress an artifact"
    )
    decompress.add_argument("artifact", help="Artifact to decompress")
    decompress.add_argument(
        "-o", "--output", required=True, help="Output file path"
    )
    decompress.add_argument(
        "--encoding",
        default=None,
        help="Encoding used to write text output "
        "(default: the encoding recorded in the artifact)",
    )
    decompress.add_argument(
        "-P",
        "--no-progress",
        action="store_true",
        help="Hide the progress line",
    )

    inspect = subparsers.add_parser(
        "inspect",
        aliases=["i"],
        help="Print the frequency table, tree and codebook of a file",
    )
    inspect.add_argument("source", help="File to analyze")
    _add_symbol_options(inspect)

    return parser


def _add_symbol_options(subparser):
    subparser.add_argument(
        "--text",
        action="store_true",
        help="Treat the input as text and code characters instead of bytes",
    )
    subparser.add_argument(
        "--encoding",
        default="utf-8",
        help="Encoding used to read text input (default: utf-8)",
    )


def _print_progress(line: str) -> None:
    """Render and flush a single progress line in-place (carriage return).

    :param line: The textual progress line to display.
    :type line: str
    """
    sys.stdout.write("\r" + line)
    sys.stdout.flush()


def _fmt_pct(done: int, total: int) -> str:
    """Format a completion percentage string like `` 12.34%``.

    :param done: Units completed.
    :type done: int
    :param total: Total units to complete.
    :type total: int
    :returns: Percentage.
    :rtype: str
    """
    if total <= 0:
        return "0%"
    return f"{100.0 * done / total:6.2f}%"


def _fmt_bytes(n: float) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: float
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ["", "Ki", "Mi", "Gi", "Ti"]:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


def _fmt_symbol(symbol) -> str:
    if isinstance(symbol, int):
        return f"0x{symbol:02x}"
    return repr(symbol)


class Progress:
    """Callable progress reporter printing one line per whole percent.

    :ivar label: Action label (e.g. ``"Compressing"``).
    :type label: str
    :ivar path: Path displayed next to the percentage.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        """Initialize the reporter for one file.

        :param label: Action label (e.g. ``"Compressing"``).
        :type label: str
        :param path: Path to display.
        :type path: str
        """
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress line.

        :param done: Units processed.
        :type done: int
        :param total: Total units.
        :type total: int
        """
        if total <= 0:
            return
        percent_bucket = (done * 100) // total
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def run_compress(source: str, output: str, text: bool, encoding: str, hide_progress: bool) -> None:
    """Compress ``source`` into ``output`` and print a size report.

    :raises HuffmanError: If the source cannot be read or the output written.
    """
    on_prog = None if hide_progress else Progress("Compressing", source)
    stats = compress_file(
        source, output, TEXT if text else BYTES, encoding, on_progress=on_prog
    )
    if on_prog is not None:
        sys.stdout.write("\n")
        sys.stdout.flush()
    print("Size before compression: ", _fmt_bytes(stats.input_size))
    print("Size after compression: ", _fmt_bytes(stats.output_size))
    if stats.output_size:
        print(f"Compression ratio: {stats.input_size / stats.output_size:.2f}")


def run_decompress(archive: str, output: str, encoding: Optional[str], hide_progress: bool) -> None:
    """Decompress ``archive`` into ``output``.

    :raises HuffmanError: If the artifact is unreadable or malformed, or
        the output cannot be written.
    """
    on_prog = None if hide_progress else Progress("Decompressing", archive)
    stats = decompress_file(archive, output, encoding, on_progress=on_prog)
    if on_prog is not None:
        sys.stdout.write("\n")
        sys.stdout.flush()
    print(f"Restored {stats.symbol_count} symbols ({_fmt_bytes(stats.output_size)})")


def run_inspect(source: str, text: bool, encoding: str) -> None:
    """Print the frequency table, tree and codebook built for ``source``."""
    kind = TEXT if text else BYTES
    data = read_source(source, kind, encoding)
    analysis = HuffmanCompressor(kind).analyze(data)

    print("Frequencies:")
    for symbol, count in analysis.frequencies.most_common():
        print(f"  {_fmt_symbol(symbol)}: {count}")
    print("Tree:")
    print(format_tree(analysis.tree))
    print("Codebook:")
    for symbol, code in sorted(analysis.codebook.items(), key=lambda item: (len(item[1]), item[1])):
        print(f"  {_fmt_symbol(symbol)}: {code}")
    print(f"Payload: {analysis.payload_bits} bits for {len(data)} symbols")


def main(argv=None) -> int:
    """Entry point for the CLI tool.

    :returns: Process exit status, 0 on success and 1 on failure.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    try:
        if args.cmd in ["compress", "c"]:
            run_compress(
                args.source, args.output, args.text, args.encoding,
                getattr(args, "no_progress", False),
            )
        elif args.cmd in ["decompress", "d"]:
            run_decompress(
                args.artifact, args.output, args.encoding,
                getattr(args, "no_progress", False),
            )
        elif args.cmd in ["inspect", "i"]:
            run_inspect(args.source, args.text, args.encoding)
    except HuffmanError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
