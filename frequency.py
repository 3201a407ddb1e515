from collections import Counter
from typing import Callable, Hashable, Iterable, Optional

PROGRESS_STEP = 4096  #: Symbols processed between two progress reports


def count_symbols(
    stream: Iterable[Hashable],
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> Counter:
    """Build the frequency table of a finite symbol stream in one pass.

    Symbols that never occur are absent from the result. The table keeps
    first-occurrence order, which the tree builder relies on for its
    tie-break. If the stream raises, the exception propagates and no table
    is returned.

    :param stream: Finite iterable of hashable symbols.
    :type stream: Iterable[Hashable]
    :param on_progress: Optional callback ``on_progress(done, total)``.
        Only used when ``stream`` has a length.
    :type on_progress: Optional[Callable[[int, int], None]]
    :returns: Mapping from symbol to occurrence count.
    :rtype: Counter
    """
    table: Counter = Counter()
    total = len(stream) if on_progress is not None and hasattr(stream, "__len__") else None
    done = 0
    for symbol in stream:
        table[symbol] += 1
        done += 1
        if total is not None and done % PROGRESS_STEP == 0:
            on_progress(done, total)
    if total is not None:
        on_progress(total, total)
    return table
