class BitWriter:
    """Bit-packing writer.

    Bits are packed MSB first into bytes. The final partial byte is padded
    with zero bits when the writer is flushed.

    :ivar buffer: Completed output bytes.
    :type buffer: bytearray
    :ivar bit_buffer: Scratch register holding the pending bits of the current byte.
    :type bit_buffer: int
    :ivar bit_count: Number of pending bits in ``bit_buffer`` (0-7).
    :type bit_count: int
    """

    def __init__(self):
        """Initialize an empty bit writer."""
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0

    @property
    def bits_written(self) -> int:
        """Total number of bits written so far, padding excluded."""
        return len(self.buffer) * 8 + self.bit_count

    def write_bit(self, bit: int):
        """Append a single bit (any truthy value counts as 1).

        :param bit: Bit to write.
        :type bit: int
        """
        self.bit_buffer = (self.bit_buffer << 1) | (1 if bit else 0)
        self.bit_count += 1
        if self.bit_count == 8:
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0

    def write_bits(self, value: int, nbits: int):
        """Write the lowest ``nbits`` of ``value``, MSB first.

        :param value: Integer whose bits will be written.
        :type value: int
        :param nbits: Number of bits of ``value`` to write.
        :type nbits: int
        :raises ValueError: If ``value`` does not fit into ``nbits`` bits.
        """
        if value < 0 or value >> nbits:
            raise ValueError(f"Value {value} does not fit in {nbits} bits")
        for i in range(nbits - 1, -1, -1):
            self.write_bit((value >> i) & 1)

    def write_code(self, code: str):
        """Write a code given as a string of ``"0"`` and ``"1"`` characters.

        :param code: Bit string, first character written first.
        :type code: str
        """
        for ch in code:
            self.write_bit(ch == "1")

    def flush(self) -> bytes:
        """Pad the pending partial byte with zeros and return all output.

        :returns: The accumulated bytes.
        :rtype: bytes
        """
        if self.bit_count > 0:
            self.bit_buffer <<= (8 - self.bit_count)
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0
        return bytes(self.buffer)


class BitReader:
    """Bit reader over a bytes-like object, MSB first.

    :ivar data: Source data.
    :type data: bytes
    :ivar pos: Index of the next byte to load from ``data``.
    :type pos: int
    :ivar bit_buffer: The byte currently being consumed.
    :type bit_buffer: int
    :ivar bit_count: Unread bits left in ``bit_buffer`` (0-8).
    :type bit_count: int
    """

    def __init__(self, data: bytes):
        """Create a bit reader for the given input ``data``.

        :param data: Source data to read from.
        :type data: bytes
        """
        self.data = data
        self.pos = 0
        self.bit_buffer = 0
        self.bit_count = 0

    @property
    def bits_remaining(self) -> int:
        """Number of bits not yet read, including any padding."""
        return self.bit_count + (len(self.data) - self.pos) * 8

    def has_more(self) -> bool:
        """Report whether at least one further bit can be read."""
        return self.bits_remaining > 0

    def read_bit(self) -> int:
        """Read one bit.

        :returns: ``0`` or ``1``.
        :rtype: int
        :raises EOFError: If the data is exhausted.
        """
        if self.bit_count == 0:
            if self.pos >= len(self.data):
                raise EOFError("Unexpected end of data")
            self.bit_buffer = self.data[self.pos]
            self.pos += 1
            self.bit_count = 8
        self.bit_count -= 1
        return (self.bit_buffer >> self.bit_count) & 1

    def read_bits(self, nbits: int) -> int:
        """Read ``nbits`` bits and return them as an integer, MSB first.

        :param nbits: Number of bits to read.
        :type nbits: int
        :returns: The integer composed of the next ``nbits`` bits.
        :rtype: int
        :raises EOFError: If the data ends before ``nbits`` bits were read.
        """
        if nbits > self.bits_remaining:
            raise EOFError("Unexpected end of data")
        result = 0
        for _ in range(nbits):
            result = (result << 1) | self.read_bit()
        return result

    def padding_is_clean(self) -> bool:
        """Check that only zero padding of the current byte is left unread.

        :returns: ``True`` if no whole byte remains and every unread bit of
            the current byte is zero.
        :rtype: bool
        """
        if self.pos < len(self.data):
            return False
        mask = (1 << self.bit_count) - 1
        return (self.bit_buffer & mask) == 0
