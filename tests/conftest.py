import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


@pytest.fixture()
def no_progress(monkeypatch, m):
    """Capture progress lines instead of writing them to stdout."""
    calls = []

    def _stub(line: str):
        calls.append(line)

    monkeypatch.setattr(m, "_print_progress", _stub)
    return calls


@pytest.fixture()
def progress_recorder():
    """Provide a reusable progress callback and its call log."""
    calls = []

    def cb(done, total):
        calls.append((done, total))

    return cb, calls


@pytest.fixture()
def binary_file(tmp_path: Path):
    path = tmp_path / "sample.bin"
    path.write_bytes(bytes(range(256)) + b"\x00" * 300 + b"abracadabra" * 20)
    return path


@pytest.fixture()
def text_file(tmp_path: Path):
    """Text with non-ASCII characters and mixed line endings."""
    path = tmp_path / "sample.txt"
    path.write_bytes(
        "Wir sind die Größten.\r\nnaïve café ✓\nlast line without newline".encode("utf-8")
    )
    return path
