import pytest

import artifact
from bitops import BitReader, BitWriter
from errors import MalformedArtifactError, TruncatedPayloadError
from huffman import Internal, Leaf, build_tree
from frequency import count_symbols
from symbols import BYTES, TEXT


def _header_bytes(kind_id=0, version=artifact.VERSION, magic=artifact.MAGIC, count=0):
    return magic + bytes([version, kind_id]) + count.to_bytes(8, "big")


def test_header_layout():
    writer = BitWriter()
    artifact.write_header(writer, BYTES, 11)
    data = writer.flush()
    assert data == _header_bytes(kind_id=0, count=11)

    header = artifact.read_header(BitReader(data))
    assert header == (artifact.VERSION, BYTES, 11, None)


def test_text_header_records_canonical_encoding():
    writer = BitWriter()
    artifact.write_header(writer, TEXT, 11, "latin-1")
    data = writer.flush()
    assert data == _header_bytes(kind_id=1, count=11) + b"\x09iso8859-1"

    header = artifact.read_header(BitReader(data))
    assert header == (artifact.VERSION, TEXT, 11, "iso8859-1")


def test_text_header_requires_known_encoding():
    with pytest.raises(ValueError):
        artifact.write_header(BitWriter(), TEXT, 1)
    with pytest.raises(LookupError):
        artifact.write_header(BitWriter(), TEXT, 1, "no-such-codec")


def test_read_header_rejects_unknown_encoding():
    data = _header_bytes(kind_id=1, count=3) + b"\x05bogus"
    with pytest.raises(MalformedArtifactError):
        artifact.read_header(BitReader(data))


def test_read_header_truncated_encoding_name():
    data = _header_bytes(kind_id=1, count=3) + b"\x05utf"
    with pytest.raises(TruncatedPayloadError):
        artifact.read_header(BitReader(data))


@pytest.mark.parametrize(
    "data",
    [
        _header_bytes(magic=b"ZIP"),
        _header_bytes(version=99),
        _header_bytes(kind_id=7),
    ],
)
def test_read_header_rejects_bad_fields(data):
    with pytest.raises(MalformedArtifactError):
        artifact.read_header(BitReader(data))


def test_read_header_truncated():
    with pytest.raises(TruncatedPayloadError):
        artifact.read_header(BitReader(_header_bytes(count=5)[:9]))


def test_tree_preorder_layout():
    tree = Internal(3, Leaf(ord("a"), 2), Leaf(ord("b"), 1))
    writer = BitWriter()
    artifact.write_tree(writer, tree, BYTES)
    assert writer.bits_written == 1 + 9 + 9
    # 1 | 0 01100001 | 0 01100010 | padding
    assert writer.flush() == bytes([0b10011000, 0b01001100, 0b01000000])


def test_tree_shape_survives_serialization():
    tree = build_tree(count_symbols("mississippi river"))
    writer = BitWriter()
    artifact.write_tree(writer, tree, TEXT)
    rebuilt = artifact.read_tree(BitReader(writer.flush()), TEXT)

    def shape(node):
        if isinstance(node, Leaf):
            return node.symbol
        return (shape(node.left), shape(node.right))

    assert shape(rebuilt) == shape(tree)


def test_single_leaf_tree():
    writer = BitWriter()
    artifact.write_tree(writer, Leaf(0x41, 3), BYTES)
    assert artifact.read_tree(BitReader(writer.flush()), BYTES) == Leaf(0x41, 0)


def test_write_tree_rejects_symbol_outside_alphabet():
    with pytest.raises(ValueError):
        artifact.write_tree(BitWriter(), Leaf("é", 1), BYTES)


def test_read_tree_rejects_duplicate_leaf():
    writer = BitWriter()
    writer.write_bit(1)
    writer.write_bit(0)
    writer.write_bits(0x41, 8)
    writer.write_bit(0)
    writer.write_bits(0x41, 8)
    with pytest.raises(MalformedArtifactError):
        artifact.read_tree(BitReader(writer.flush()), BYTES)


def test_read_tree_rejects_out_of_range_code_point():
    writer = BitWriter()
    writer.write_bit(0)
    writer.write_bits(0x110000, TEXT.width)
    with pytest.raises(MalformedArtifactError):
        artifact.read_tree(BitReader(writer.flush()), TEXT)


def test_read_tree_truncated():
    writer = BitWriter()
    writer.write_bit(1)
    writer.write_bit(0)
    writer.write_bits(0x41, 8)
    with pytest.raises(TruncatedPayloadError):
        artifact.read_tree(BitReader(writer.flush()), BYTES)
