"""Little-endian MIPS COFF headers and the simpler NOFF object header."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

MIPSELMAGIC = 0x0162
OMAGIC = 0o407
SOMAGIC = 0x0701
NOFFMAGIC = 0xBADFAD


class CoffError(ValueError):
    """Raised when an object file is malformed or of the wrong kind."""


def _unpack(layout: struct.Struct, data: bytes) -> tuple:
    if len(data) < layout.size:
        raise CoffError("File is too short")
    return layout.unpack_from(data, 0)


@dataclass
class FileHeader:
    """The COFF file header."""

    magic: int = MIPSELMAGIC
    nscns: int = 0
    timdat: int = 0
    symptr: int = 0
    nsyms: int = 0
    opthdr: int = 0
    flags: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<HHiiiHH")
    SIZE: ClassVar[int] = _LAYOUT.size

    @classmethod
    def parse(cls, data: bytes) -> FileHeader:
        """Decode a file header from the start of ``data``."""
        return cls(*_unpack(cls._LAYOUT, data))

    def pack(self) -> bytes:
        """Encode the header."""
        return self._LAYOUT.pack(
            self.magic, self.nscns, self.timdat, self.symptr,
            self.nsyms, self.opthdr, self.flags,
        )


@dataclass
class AoutHeader:
    """The COFF optional (system) header."""

    magic: int = OMAGIC
    vstamp: int = 0
    tsize: int = 0
    dsize: int = 0
    bsize: int = 0
    entry: int = 0
    text_start: int = 0
    data_start: int = 0
    bss_start: int = 0
    gprmask: int = 0
    cprmask: tuple[int, int, int, int] = (0, 0, 0, 0)
    gp_value: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<hh13i")
    SIZE: ClassVar[int] = _LAYOUT.size

    @classmethod
    def parse(cls, data: bytes) -> AoutHeader:
        """Decode an optional header from the start of ``data``."""
        values = _unpack(cls._LAYOUT, data)
        return cls(*values[:10], cprmask=tuple(values[10:14]), gp_value=values[14])

    def pack(self) -> bytes:
        """Encode the header."""
        if len(self.cprmask) != 4:
            raise CoffError("cprmask needs exactly four masks")
        return self._LAYOUT.pack(
            self.magic, self.vstamp, self.tsize, self.dsize, self.bsize,
            self.entry, self.text_start, self.data_start, self.bss_start,
            self.gprmask, *self.cprmask, self.gp_value,
        )


@dataclass
class SectionHeader:
    """One COFF section header."""

    name: str = ""
    paddr: int = 0
    vaddr: int = 0
    size: int = 0
    scnptr: int = 0
    relptr: int = 0
    lnnoptr: int = 0
    nreloc: int = 0
    nlnno: int = 0
    flags: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<8s6iHHi")
    SIZE: ClassVar[int] = _LAYOUT.size

    @classmethod
    def parse(cls, data: bytes) -> SectionHeader:
        """Decode a section header from the start of ``data``."""
        raw_name, *rest = _unpack(cls._LAYOUT, data)
        name = raw_name.split(b"\0", 1)[0].decode("latin-1")
        return cls(name, *rest)

    def pack(self) -> bytes:
        """Encode the header; the name is cut to eight bytes."""
        return self._LAYOUT.pack(
            self.name.encode("latin-1"), self.paddr, self.vaddr, self.size,
            self.scnptr, self.relptr, self.lnnoptr, self.nreloc, self.nlnno,
            self.flags,
        )


@dataclass
class CoffFile:
    """A parsed COFF file together with its raw bytes."""

    file_header: FileHeader
    aout_header: AoutHeader
    sections: list[SectionHeader]
    data: bytes

    def section(self, name: str) -> SectionHeader | None:
        """Return the first section called ``name``, or None."""
        return next((s for s in self.sections if s.name == name), None)

    def section_data(self, section: SectionHeader) -> bytes:
        """Return the raw bytes of ``section`` from the file."""
        start, size = section.scnptr, section.size
        if start < 0 or size < 0 or start + size > len(self.data):
            raise CoffError("File is too short")
        return self.data[start:start + size]


def read_coff(data: bytes) -> CoffFile:
    """Parse the headers of a little-endian MIPS COFF file."""
    data = bytes(data)
    file_header = FileHeader.parse(data)
    if file_header.magic != MIPSELMAGIC:
        raise CoffError("File is not a MIPSEL COFF file")
    offset = FileHeader.SIZE
    aout_header = AoutHeader.parse(data[offset:])
    offset += AoutHeader.SIZE
    sections = []
    for _ in range(file_header.nscns):
        sections.append(SectionHeader.parse(data[offset:]))
        offset += SectionHeader.SIZE
    return CoffFile(file_header, aout_header, sections, data)


@dataclass
class Segment:
    """Where a NOFF segment lives in memory and in the file."""

    virtual_addr: int = 0
    in_file_addr: int = 0
    size: int = 0


@dataclass
class NoffHeader:
    """Header of a NOFF object file: code, initialised and uninitialised data."""

    noff_magic: int = NOFFMAGIC
    code: Segment = field(default_factory=Segment)
    init_data: Segment = field(default_factory=Segment)
    uninit_data: Segment = field(default_factory=Segment)

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<10i")
    SIZE: ClassVar[int] = _LAYOUT.size

    def _segments(self) -> tuple[Segment, Segment, Segment]:
        return self.code, self.init_data, self.uninit_data

    def pack(self) -> bytes:
        """Encode the header."""
        values = [self.noff_magic]
        for segment in self._segments():
            values += [segment.virtual_addr, segment.in_file_addr, segment.size]
        return self._LAYOUT.pack(*values)

    @classmethod
    def parse(cls, data: bytes) -> NoffHeader:
        """Decode a NOFF header from the start of ``data``."""
        magic, *rest = _unpack(cls._LAYOUT, data)
        segments = [Segment(*rest[i:i + 3]) for i in range(0, 9, 3)]
        return cls(magic, *segments)