# What it does: Reads tokens out of a binary stream for the object, index, tree and commit parsers
# How it does: Pulls one byte at a time until a delimiter is found, or exactly N bytes, raising KitIOError when the stream ends early
# What data structure it uses: A byte buffer (bytearray) that grows as the token is read, plus a one-byte lookahead for end-of-stream checks

import struct

from .errors import KitIOError


class ByteScanner:
    """Sequential reader over a binary file-like object.

    Every parser in the plumbing layer goes through this class so that a
    truncated input always surfaces the same way: as a KitIOError.
    """

    def __init__(self, stream):
        self.stream = stream
        self._peeked = b''

    def _read(self, size):
        if not self._peeked:
            return self.stream.read(size)
        head, self._peeked = self._peeked, b''
        if size == 1:
            return head
        return head + self.stream.read(size - 1)

    def at_end(self):
        if self._peeked:
            return False
        self._peeked = self.stream.read(1)
        return not self._peeked

    def read_until(self, delimiter): # Returns the bytes before the delimiter; the delimiter itself is consumed
        content = bytearray()
        while True:
            byte = self._read(1)
            if not byte:
                raise KitIOError(f"unexpected end of data while looking for {delimiter!r}")
            if byte == delimiter:
                return bytes(content)
            content += byte

    def read_exact(self, size):
        if size == 0:
            return b''
        data = self._read(size)
        if len(data) != size:
            raise KitIOError(f"unexpected end of data: wanted {size} bytes, got {len(data)}")
        return data

    def read_u16(self):
        return struct.unpack('>H', self.read_exact(2))[0]

    def read_u32(self):
        return struct.unpack('>I', self.read_exact(4))[0]

    def read_rest(self):
        rest = self._peeked + self.stream.read()
        self._peeked = b''
        return rest
