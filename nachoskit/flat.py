"""Turn a COFF object into a flat memory image that can be loaded as is."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from nachoskit.coff import OMAGIC, CoffError, read_coff

STACK_SIZE = 1024
_UNCOPIED = frozenset({".bss", ".sbss"})


def _hex(value: int) -> str:
    return f"{value & 0xFFFFFFFF:x}"


def coff_to_flat(data: bytes, log: TextIO | None = None) -> bytes:
    """Return the flat image of a COFF file, describing each section on ``log``.

    Section contents are written one after another, skipping .bss and
    .sbss; the image then extends past the highest section address by
    STACK_SIZE bytes and ends in a zero word.
    """
    stream = sys.stdout if log is None else log
    coff = read_coff(data)
    if coff.aout_header.magic != OMAGIC:
        raise CoffError("File is not a OMAGIC file")

    print(f"Loading {len(coff.sections)} sections:", file=stream)
    image = bytearray()
    top = 0
    for section in coff.sections:
        print(
            f'\t"{section.name}", filepos 0x{_hex(section.scnptr)}, '
            f"mempos 0x{_hex(section.paddr)}, size 0x{_hex(section.size)}",
            file=stream,
        )
        top = max(top, section.paddr + section.size)
        if section.name not in _UNCOPIED:
            image += coff.section_data(section)

    print(f"Adding stack of size: {STACK_SIZE}", file=stream)
    end = top + STACK_SIZE
    if len(image) < end:
        image.extend(bytes(end - len(image)))
    image[end - 4:end] = bytes(4)
    return bytes(image)


def main(argv: Sequence[str] | None = None) -> int:
    """Convert a COFF file into a flat image file."""
    parser = argparse.ArgumentParser(
        prog="coff2flat", description="Convert a COFF file into a flat memory image."
    )
    parser.add_argument("coff_file", help="input COFF file")
    parser.add_argument("flat_file", help="output flat file")
    args = parser.parse_args(argv)

    try:
        data = Path(args.coff_file).read_bytes()
    except OSError as exc:
        print(f"{args.coff_file}: {exc.strerror}", file=sys.stderr)
        return 1
    try:
        image = coff_to_flat(data)
    except CoffError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        Path(args.flat_file).write_bytes(image)
    except OSError:
        print("Unable to write file", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())