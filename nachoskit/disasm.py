"""Disassembler for little-endian MIPS instructions."""

from __future__ import annotations

import sys
from collections.abc import Iterator, Sequence
from pathlib import Path

from nachoskit.coff import CoffError, CoffFile, read_coff
from nachoskit.isa import (
    NOP,
    NORMAL_OPS,
    SPECIAL_OPS,
    BranchOp,
    Op,
    SpecialOp,
    funct,
    immed,
    off16,
    off26,
    opcode,
    rd,
    rs,
    rt,
    shamt,
    top4,
)

MEMOFFSET = 0x10000000
MEMSIZE = 1 << 24
_LOADED_SECTIONS = (".text", ".rdata", ".data", ".sdata", ".sbss", ".bss")

_REGISTERS = (
    "0", "r1", "r2", "r3", "r4", "r5", "r6", "r7", "r8", "r9",
    "r10", "r11", "r12", "r13", "r14", "r15", "r16", "r17", "r18", "r19",
    "r20", "r21", "r22", "r23", "r24", "r25", "r26", "r27", "gp", "sp",
    "r30", "r31",
)

_SHIFT_IMMEDIATE = {SpecialOp.SLL, SpecialOp.SRL, SpecialOp.SRA}
_SHIFT_VARIABLE = {SpecialOp.SLLV, SpecialOp.SRLV, SpecialOp.SRAV}
_RS_ONLY = {SpecialOp.JR, SpecialOp.JALR, SpecialOp.MFLO, SpecialOp.MTLO}
_RD_ONLY = {SpecialOp.MFHI, SpecialOp.MTHI}
_RS_RT = {SpecialOp.MULT, SpecialOp.MULTU, SpecialOp.DIV, SpecialOp.DIVU}
_THREE_REG = {
    SpecialOp.ADD, SpecialOp.ADDU, SpecialOp.SUB, SpecialOp.SUBU,
    SpecialOp.AND, SpecialOp.OR, SpecialOp.XOR, SpecialOp.NOR,
    SpecialOp.SLT, SpecialOp.SLTU,
}
_JUMPS = {Op.J, Op.JAL}
_COMPARE_BRANCHES = {Op.BEQ, Op.BNE}
_IMMEDIATE_ALU = {Op.ADDI, Op.ADDIU, Op.SLTI, Op.SLTIU, Op.ANDI, Op.ORI, Op.XORI}
_MEMORY = {
    Op.LB, Op.LH, Op.LWL, Op.LW, Op.LBU, Op.LHU, Op.LWR,
    Op.SB, Op.SH, Op.SWL, Op.SW, Op.SWR,
    Op.LWC0, Op.LWC1, Op.LWC2, Op.LWC3,
    Op.SWC0, Op.SWC1, Op.SWC2, Op.SWC3,
}
_BRANCH_NAMES = {op.value: op.name.lower() for op in BranchOp}


def register_name(index: int) -> str:
    """Return the assembler name of register ``index``."""
    if not 0 <= index < len(_REGISTERS):
        raise ValueError(f"no register {index}")
    return _REGISTERS[index]


def _hex(value: int) -> str:
    return f"{value & 0xFFFFFFFF:x}"


def _word(value: int) -> str:
    return f"{value & 0xFFFFFFFF:08x}"


def _special(word: int) -> str:
    code = funct(word)
    text = SPECIAL_OPS[code] + "\t"
    if code in _SHIFT_IMMEDIATE:
        operands = f"{register_name(rd(word))},{register_name(rt(word))},0x{_hex(shamt(word))}"
    elif code in _SHIFT_VARIABLE:
        operands = ",".join(register_name(r) for r in (rd(word), rt(word), rs(word)))
    elif code in _RS_ONLY:
        operands = register_name(rs(word))
    elif code in _RD_ONLY:
        operands = register_name(rd(word))
    elif code in _RS_RT:
        operands = f"{register_name(rs(word))},{register_name(rt(word))}"
    elif code in _THREE_REG:
        operands = ",".join(register_name(r) for r in (rd(word), rs(word), rt(word)))
    else:
        operands = ""
    return text + operands


def _bcond(word: int, pc: int) -> str:
    name = _BRANCH_NAMES.get(rt(word), "BCOND")
    return f"{name}\t{register_name(rs(word))},{_word(off16(word) + pc + 4)}"


def _normal(word: int, pc: int) -> str:
    code = opcode(word)
    text = NORMAL_OPS[code] + "\t"
    if code in _JUMPS:
        operands = _word(top4(pc) | off26(word))
    elif code in _COMPARE_BRANCHES:
        operands = (
            f"{register_name(rt(word))},{register_name(rs(word))},"
            f"{_word(off16(word) + pc + 4)}"
        )
    elif code in _IMMEDIATE_ALU:
        operands = f"{register_name(rt(word))},{register_name(rs(word))},0x{_hex(immed(word))}"
    elif code == Op.LUI:
        operands = f"{register_name(rt(word))},0x{_hex(immed(word))}"
    elif code in _MEMORY:
        operands = f"{register_name(rt(word))},0x{_hex(immed(word))}({register_name(rs(word))})"
    else:
        operands = ""
    return text + operands


def disassemble(instruction: int, pc: int, long_form: bool = True) -> str:
    """Return the assembler text of one instruction located at ``pc``.

    The long form starts with the address and the raw word.
    """
    word = instruction & 0xFFFFFFFF
    prefix = f"{_word(pc)}: {_word(word)}  " if long_form else ""
    if word == NOP:
        body = "nop"
    elif opcode(word) == Op.SPECIAL:
        body = _special(word)
    elif opcode(word) == Op.BCOND:
        body = _bcond(word, pc)
    else:
        body = _normal(word, pc)
    return f"{prefix}\t{body}"


def _load_image(coff_file: CoffFile) -> bytearray:
    image = bytearray()
    for name in _LOADED_SECTIONS:
        section = coff_file.section(name)
        if section is None or section.scnptr == 0:
            continue
        contents = coff_file.section_data(section)
        start = section.vaddr - MEMOFFSET
        end = start + len(contents)
        if start < 0 or end > MEMSIZE:
            raise CoffError("MEMSIZE too small")
        if len(image) < end:
            image.extend(bytes(end - len(image)))
        image[start:end] = contents
    return image


def disassemble_text(coff_file: CoffFile) -> Iterator[str]:
    """Yield one line per word of the text segment, starting at MEMOFFSET.

    The sections are laid out at their virtual addresses first, so the
    words are taken from that memory image.
    """
    image = _load_image(coff_file)
    text = coff_file.section(".text")
    size = 0 if text is None else text.size
    for offset in range(0, size, 4):
        raw = image[offset:offset + 4].ljust(4, b"\0")
        yield disassemble(int.from_bytes(raw, "little"), MEMOFFSET + offset)


def main(argv: Sequence[str] | None = None) -> int:
    """Disassemble the text segment of a COFF file (default ``a.out``)."""
    args = list(sys.argv[1:] if argv is None else argv)
    while args and args[0].startswith("-"):
        args.pop(0)
    filename = args[0] if args else "a.out"

    try:
        data = Path(filename).read_bytes()
    except OSError:
        print(f"disasm: Could not open '{filename}'", file=sys.stderr)
        return 1
    try:
        coff_file = read_coff(data)
        for name in _LOADED_SECTIONS:
            if coff_file.section(name) is None:
                print(f"{name[1:]} section header missing")
        for line in disassemble_text(coff_file):
            print(line)
    except CoffError as exc:
        print(f"disasm: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())