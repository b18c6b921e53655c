"""Byte-addressed little-endian memory of the simulated machine."""

from __future__ import annotations

MEMSIZE = 1 << 24
MEMOFFSET = 0x10000000


class MemoryAccessError(IndexError):
    """Raised when an access falls outside the simulated memory."""


class Memory:
    """A block of ``size`` bytes whose first byte lives at address ``offset``."""

    def __init__(self, size: int = MEMSIZE, offset: int = MEMOFFSET) -> None:
        if size < 0:
            raise ValueError("memory size must not be negative")
        self.size = size
        self.offset = offset
        self._bytes = bytearray(size)

    def _index(self, addr: int, width: int) -> int:
        index = addr - self.offset
        if index < 0 or index + width > self.size:
            raise MemoryAccessError(
                f"address 0x{addr & 0xFFFFFFFF:08x} is outside memory"
            )
        return index

    def _get(self, addr: int, width: int, signed: bool) -> int:
        index = self._index(addr, width)
        return int.from_bytes(self._bytes[index:index + width], "little", signed=signed)

    def _put(self, addr: int, width: int, value: int) -> None:
        index = self._index(addr, width)
        mask = (1 << (8 * width)) - 1
        self._bytes[index:index + width] = (value & mask).to_bytes(width, "little")

    def fetch(self, addr: int) -> int:
        """Return the signed 32-bit word at ``addr``."""
        return self._get(addr, 4, True)

    def sfetch(self, addr: int) -> int:
        """Return the signed 16-bit half word at ``addr``."""
        return self._get(addr, 2, True)

    def usfetch(self, addr: int) -> int:
        """Return the unsigned 16-bit half word at ``addr``."""
        return self._get(addr, 2, False)

    def cfetch(self, addr: int) -> int:
        """Return the signed byte at ``addr``."""
        return self._get(addr, 1, True)

    def ucfetch(self, addr: int) -> int:
        """Return the unsigned byte at ``addr``."""
        return self._get(addr, 1, False)

    def store(self, addr: int, value: int) -> None:
        """Store the low 32 bits of ``value`` at ``addr``."""
        self._put(addr, 4, value)

    def sstore(self, addr: int, value: int) -> None:
        """Store the low 16 bits of ``value`` at ``addr``."""
        self._put(addr, 2, value)

    def cstore(self, addr: int, value: int) -> None:
        """Store the low 8 bits of ``value`` at ``addr``."""
        self._put(addr, 1, value)

    def load(self, addr: int, data: bytes) -> None:
        """Copy ``data`` into memory starting at ``addr``."""
        index = self._index(addr, len(data))
        self._bytes[index:index + len(data)] = data

    def read(self, addr: int, length: int) -> bytes:
        """Return ``length`` bytes starting at ``addr``."""
        if length < 0:
            raise ValueError("length must not be negative")
        index = self._index(addr, length)
        return bytes(self._bytes[index:index + length])

    def read_cstring(self, addr: int) -> bytes:
        """Return the NUL-terminated byte string at ``addr``, without the NUL."""
        index = self._index(addr, 0)
        end = self._bytes.find(b"\0", index)
        if end == -1:
            raise MemoryAccessError("string runs past the end of memory")
        return bytes(self._bytes[index:end])

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"Memory(size={self.size}, offset=0x{self.offset:08x})"