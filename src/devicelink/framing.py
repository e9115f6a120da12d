"""
Line framing shared by the transports. Lines on the wire end with a terminator;
inbound lines are decoded and stripped of the terminator and surrounding whitespace.
"""

default_terminator = b'\n'
default_encoding = 'utf-8'
# the longest line accepted, in bytes, not counting the terminator
max_line_length = 4096


class LineTooLongError(ValueError):
    """
    A line grew beyond the maximum length before its terminator arrived. The partial line
    has been discarded. lines holds the complete lines that preceded it in the same data.
    """
    def __init__(self, message, lines=()):
        super().__init__(message)
        self.lines = list(lines)


class LineFramer:
    """
    Splits a byte stream into text lines.

    Bytes are fed in whatever chunks the transport delivers them. Each complete line is
    returned once, in stream order; an incomplete tail is buffered until its terminator arrives.

    >>> framer = LineFramer()
    >>> framer.feed(b'PING\\r\\nPO')
    ['PING']
    >>> framer.feed(b'NG\\r\\n')
    ['PONG']
    """

    def __init__(self, terminator=default_terminator, encoding=default_encoding, max_length=max_line_length):
        if not terminator:
            raise ValueError("a line terminator is required")
        if max_length <= 0:
            raise ValueError("max_length must be positive, was %s" % max_length)
        self.terminator = terminator
        self.encoding = encoding
        self.max_length = max_length
        self._buffer = bytearray()
        self._discarding = False    # skipping the rest of an overlong line

    @property
    def pending(self) -> bytes:
        """ the bytes received since the last complete line """
        return bytes(self._buffer)

    def feed(self, data) -> list:
        """
        Appends data to the buffer and removes all complete lines from it.
        :param data: the bytes just received
        :return: the decoded lines, possibly empty
        :raises LineTooLongError: when the incomplete line left over is longer than max_length.
            The rest of that line, up to its terminator, is skipped.
        """
        if self._discarding:
            end = data.find(self.terminator)
            if end < 0:
                return []
            data = data[end + len(self.terminator):]
            self._discarding = False
        self._buffer.extend(data)
        *lines, rest = self._buffer.split(self.terminator)
        decoded = [self.decode(line) for line in lines]
        if len(rest) > self.max_length:
            self._buffer = bytearray()
            self._discarding = True
            raise LineTooLongError("line exceeds %d bytes" % self.max_length, decoded)
        self._buffer = rest
        return decoded

    def decode(self, raw) -> str:
        """ Decodes a single line. Invalid bytes are replaced rather than rejected. """
        return bytes(raw).decode(self.encoding, errors='replace').strip()

    def encode(self, text) -> bytes:
        return text.encode(self.encoding) + self.terminator

    def reset(self):
        self._buffer = bytearray()
        self._discarding = False
