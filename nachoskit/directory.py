"""A fixed-size directory table mapping short file names to header sectors."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

FILE_NAME_MAX_LEN = 9

# in_use (bool, padded to 4), sector (int), name (9 chars + NUL), padding.
_ENTRY = struct.Struct("<?3xi10s2x")


def _key(name: str) -> str:
    """Names compare on their first FILE_NAME_MAX_LEN characters only."""
    return name[:FILE_NAME_MAX_LEN]


@dataclass
class DirectoryEntry:
    """One slot of the directory: a file name and its header sector."""

    in_use: bool = False
    sector: int = 0
    name: str = ""

    SIZE: ClassVar[int] = _ENTRY.size

    def pack(self) -> bytes:
        """Return the on-disk bytes of this entry."""
        return _ENTRY.pack(self.in_use, self.sector, _key(self.name).encode("latin-1"))

    @classmethod
    def unpack(cls, data: bytes) -> DirectoryEntry:
        """Build an entry from its on-disk bytes."""
        in_use, sector, raw_name = _ENTRY.unpack(data)
        name = raw_name.split(b"\0", 1)[0].decode("latin-1")
        return cls(in_use=in_use, sector=sector, name=_key(name))


class Directory:
    """A table of ``size`` entries, each naming a file and its header sector.

    The table never grows: once every slot is used, no more names fit.
    """

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("directory size must not be negative")
        self._table = [DirectoryEntry() for _ in range(size)]

    @property
    def size(self) -> int:
        """The number of slots in the table."""
        return len(self._table)

    def _find_entry(self, name: str) -> DirectoryEntry | None:
        key = _key(name)
        return next(
            (entry for entry in self._table if entry.in_use and entry.name == key),
            None,
        )

    def find(self, name: str) -> int | None:
        """Return the header sector of ``name``, or None if it is not listed."""
        entry = self._find_entry(name)
        return None if entry is None else entry.sector

    def add(self, name: str, new_sector: int) -> bool:
        """Add ``name`` with its header at ``new_sector``.

        Returns False if the name is already present or no slot is free.
        """
        key = _key(name)
        key.encode("latin-1")
        if self._find_entry(key) is not None:
            return False
        for entry in self._table:
            if not entry.in_use:
                entry.in_use = True
                entry.name = key
                entry.sector = new_sector
                return True
        return False

    def remove(self, name: str) -> bool:
        """Remove ``name``; return False if it was not in the directory."""
        entry = self._find_entry(name)
        if entry is None:
            return False
        entry.in_use = False
        return True

    def names(self) -> list[str]:
        """Return the names in use, in table order."""
        return [entry.name for entry in self._table if entry.in_use]

    def listing(self) -> str:
        """Return the names in use, one per line."""
        return "".join(f"{name}\n" for name in self.names())

    def to_bytes(self) -> bytes:
        """Return the on-disk form of the whole table."""
        return b"".join(entry.pack() for entry in self._table)

    @classmethod
    def from_bytes(cls, data: bytes, size: int) -> Directory:
        """Read a table of ``size`` entries from its on-disk form."""
        needed = size * DirectoryEntry.SIZE
        if len(data) < needed:
            raise ValueError(
                f"directory of {size} entries needs {needed} bytes, got {len(data)}"
            )
        directory = cls(size)
        directory._table = [
            DirectoryEntry.unpack(data[start:start + DirectoryEntry.SIZE])
            for start in range(0, needed, DirectoryEntry.SIZE)
        ]
        return directory

    def __repr__(self) -> str:
        return f"Directory(size={self.size}, names={self.names()!r})"