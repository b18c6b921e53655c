"""Turn a COFF object into a NOFF file: a header followed by code and data."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from nachoskit.coff import OMAGIC, CoffError, NoffHeader, Segment, read_coff

_CODE = frozenset({".text"})
_INIT_DATA = frozenset({".data", ".rdata"})
_UNINIT_DATA = frozenset({".bss", ".sbss"})


def _hex(value: int) -> str:
    return f"{value & 0xFFFFFFFF:x}"


def coff_to_noff(data: bytes, log: TextIO | None = None) -> bytes:
    """Return the NOFF form of a COFF file, describing each section on ``log``.

    The code segment comes first in the file after the header, then the
    initialised data; uninitialised data only has its place and size
    recorded.  Raises CoffError for anything the format cannot hold.
    """
    stream = sys.stdout if log is None else log
    coff = read_coff(data)
    if coff.aout_header.magic != OMAGIC:
        raise CoffError("File is not a OMAGIC file")

    count = len(coff.sections)
    print(f"numsections {count} ", file=stream)

    header = NoffHeader()
    body = bytearray()
    in_file = NoffHeader.SIZE
    print(f"Loading {count} sections:", file=stream)
    for section in coff.sections:
        print(
            f'\t"{section.name}", filepos 0x{_hex(section.scnptr)}, '
            f"mempos 0x{_hex(section.paddr)}, size 0x{_hex(section.size)}",
            file=stream,
        )
        if section.size == 0:
            continue
        if section.name in _CODE:
            header.code = Segment(section.paddr, in_file, section.size)
            body += coff.section_data(section)
            in_file += section.size
        elif section.name in _INIT_DATA:
            if header.init_data.size != 0:
                raise CoffError("Can't handle both data and rdata")
            header.init_data = Segment(section.paddr, in_file, section.size)
            body += coff.section_data(section)
            in_file += section.size
        elif section.name in _UNINIT_DATA:
            uninit = header.uninit_data
            if uninit.size != 0:
                if section.paddr == uninit.virtual_addr + uninit.size:
                    raise CoffError("Can't handle both bss and sbss")
                uninit.size += section.size
            else:
                header.uninit_data = Segment(section.paddr, 0, section.size)
        else:
            raise CoffError(f"Unknown segment type: {section.name}")
    return header.pack() + bytes(body)


def main(argv: Sequence[str] | None = None) -> int:
    """Convert a COFF file into a NOFF file."""
    parser = argparse.ArgumentParser(
        prog="coff2noff", description="Convert a COFF file into a NOFF file."
    )
    parser.add_argument("coff_file", help="input COFF file")
    parser.add_argument("noff_file", help="output NOFF file")
    args = parser.parse_args(argv)

    output = Path(args.noff_file)
    try:
        data = Path(args.coff_file).read_bytes()
    except OSError as exc:
        print(f"{args.coff_file}: {exc.strerror}", file=sys.stderr)
        return 1
    try:
        image = coff_to_noff(data)
    except CoffError as exc:
        print(exc, file=sys.stderr)
        output.unlink(missing_ok=True)
        return 1
    try:
        output.write_bytes(image)
    except OSError:
        print("Unable to write file", file=sys.stderr)
        output.unlink(missing_ok=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())