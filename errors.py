class HuffmanError(Exception):
    """Base class for every failure reported by huffzip."""


class SourceAccessError(HuffmanError):
    """The input could not be opened or read."""


class DestinationAccessError(HuffmanError):
    """The output could not be created or written."""


class MalformedArtifactError(HuffmanError, ValueError):
    """The compressed artifact is inconsistent (header, tree or padding)."""


class TruncatedPayloadError(MalformedArtifactError, EOFError):
    """The compressed artifact ends before all declared data was read."""


class UnknownSymbolError(HuffmanError, LookupError):
    """A symbol reached the encoder without a codebook entry.

    Only possible when the encode pass sees a stream that differs from the
    one the frequency table was built from.
    """

    def __init__(self, symbol):
        super().__init__(f"Symbol {symbol!r} has no code in the codebook")
        self.symbol = symbol
