import pytest

from bitops import BitReader, BitWriter
from coder import decode_symbols, encode_symbols
from errors import MalformedArtifactError, TruncatedPayloadError, UnknownSymbolError
from frequency import PROGRESS_STEP, count_symbols
from huffman import Leaf, build_codebook, build_tree


def _encode(data):
    tree = build_tree(count_symbols(data))
    writer = BitWriter()
    encode_symbols(data, build_codebook(tree), writer)
    return tree, writer


def test_encode_abracadabra_payload_bits():
    _, writer = _encode("abracadabra")
    assert writer.bits_written == 23
    assert writer.flush() == bytes([0x6E, 0x8A, 0xDC])


def test_decode_abracadabra():
    tree, writer = _encode("abracadabra")
    out = decode_symbols(BitReader(writer.flush()), tree, 11)
    assert "".join(out) == "abracadabra"


def test_decode_stops_at_count_and_ignores_padding():
    # 23 payload bits; the 24th (padding) bit must not become a symbol.
    tree, writer = _encode("abracadabra")
    reader = BitReader(writer.flush())
    decode_symbols(reader, tree, 11)
    assert reader.bits_remaining == 1
    assert reader.padding_is_clean()


def test_encode_unknown_symbol_raises():
    codebook = build_codebook(build_tree(count_symbols(b"ab")))
    with pytest.raises(UnknownSymbolError) as exc:
        encode_symbols(b"abz", codebook, BitWriter())
    assert exc.value.symbol == ord("z")


def test_single_symbol_tree_uses_one_bit_per_repetition():
    tree, writer = _encode("zzzzz")
    assert writer.bits_written == 5
    payload = writer.flush()
    assert payload == b"\x00"
    assert decode_symbols(BitReader(payload), tree, 5) == ["z"] * 5


def test_single_symbol_tree_rejects_one_bit():
    with pytest.raises(MalformedArtifactError):
        decode_symbols(BitReader(b"\x80"), Leaf("z", 0), 1)


def test_decode_truncated_payload_raises():
    tree, writer = _encode("abracadabra")
    payload = writer.flush()[:2]
    with pytest.raises(TruncatedPayloadError):
        decode_symbols(BitReader(payload), tree, 11)


def test_decode_zero_count_reads_nothing():
    reader = BitReader(b"\xff")
    assert decode_symbols(reader, None, 0) == []
    assert reader.bits_remaining == 8


def test_decode_without_tree_raises():
    with pytest.raises(MalformedArtifactError):
        decode_symbols(BitReader(b"\x00"), None, 3)


def test_encode_and_decode_report_progress(progress_recorder):
    on_prog, calls = progress_recorder
    data = b"ab" * PROGRESS_STEP
    tree = build_tree(count_symbols(data))
    writer = BitWriter()
    assert encode_symbols(data, build_codebook(tree), writer, on_progress=on_prog) == len(data)
    assert calls[-1] == (len(data), len(data))

    calls.clear()
    out = decode_symbols(BitReader(writer.flush()), tree, len(data), on_progress=on_prog)
    assert bytes(out) == data
    assert (PROGRESS_STEP, len(data)) in calls
    assert calls[-1] == (len(data), len(data))
