"""Load a COFF program into simulated memory and run it."""

from __future__ import annotations

import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from nachoskit.coff import CoffError, CoffFile, read_coff
from nachoskit.machine import Machine, UnimplementedInstruction, UnknownSyscall
from nachoskit.memory import MEMOFFSET, Memory, MemoryAccessError

DEFAULT_PROGRAM = "a.out"
_LOADED_SECTIONS = (".text", ".rdata", ".data", ".sdata", ".sbss", ".bss")


@dataclass
class Options:
    """Command-line settings of the interpreter."""

    trace: bool = False
    trap_trace: bool = False
    reg_trace: bool = False
    nrows: int = 64
    assoc: int = 1
    linesize: int = 4
    rand: bool = False
    lrd: bool = False
    filename: str = DEFAULT_PROGRAM
    program_args: list[str] = field(default_factory=lambda: [DEFAULT_PROGRAM])


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def parse_options(argv: Sequence[str]) -> Options:
    """Read leading flags, then the program file and its own arguments.

    Flags: -t trace, -T trap trace, -r register trace, and
    -m ROWS ASSOC LINESIZE POLICY for the cache settings.
    """
    args = list(argv)
    options = Options()
    while args and args[0].startswith("-"):
        flag = args.pop(0)
        for letter in flag[1:]:
            if letter == "t":
                options.trace = True
            elif letter == "T":
                options.trap_trace = True
            elif letter == "r":
                options.reg_trace = True
            elif letter == "m":
                if len(args) < 4:
                    raise ValueError("-m needs four arguments")
                rows, assoc, linesize, policy = args[:4]
                del args[:4]
                options.nrows = _atoi(rows)
                options.assoc = _atoi(assoc)
                options.linesize = _atoi(linesize)
                options.rand = policy.startswith("r")
                options.lrd = policy.startswith("lrd")
    if args:
        options.filename = args[0]
        options.program_args = args
    return options


def load_program(memory: Memory, coff_file: CoffFile, out: TextIO | None = None) -> list[str]:
    """Copy the program's sections to their virtual addresses.

    Reports each missing section on ``out`` and returns the names loaded.
    """
    stream = sys.stdout if out is None else out
    loaded = []
    for name in _LOADED_SECTIONS:
        section = coff_file.section(name)
        if section is None:
            print(f"{name[1:]} section header missing", file=stream)
            continue
        if section.scnptr == 0:
            continue
        contents = coff_file.section_data(section)
        end = section.vaddr + len(contents)
        if end - memory.offset >= memory.size:
            raise MemoryAccessError("MEMSIZE too small. Fix and recompile.")
        memory.load(section.vaddr, contents)
        loaded.append(name)
    return loaded


def main(argv: Sequence[str] | None = None) -> int:
    """Run a MIPS COFF program (default ``a.out``) in the interpreter."""
    args = sys.argv[1:] if argv is None else argv
    try:
        options = parse_options(args)
    except ValueError as exc:
        print(f"nachoskit: {exc}", file=sys.stderr)
        return 1

    try:
        data = Path(options.filename).read_bytes()
    except OSError:
        print(f"nachoskit: Could not open '{options.filename}'", file=sys.stderr)
        return 1

    memory = Memory()
    try:
        coff_file = read_coff(data)
        load_program(memory, coff_file)
    except CoffError as exc:
        print(f"nachoskit: Load read error on {options.filename}: {exc}", file=sys.stderr)
        return 1
    except MemoryAccessError as exc:
        print(exc)
        return 1

    machine = Machine(
        memory,
        trace=options.trace,
        trap_trace=options.trap_trace,
        reg_trace=options.reg_trace,
    )
    try:
        return machine.run(MEMOFFSET, options.program_args)
    except UnknownSyscall:
        return 2
    except (UnimplementedInstruction, MemoryAccessError, ZeroDivisionError) as exc:
        print(exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())