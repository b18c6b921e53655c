"""MIPS instruction fields, opcodes and mnemonics."""

from __future__ import annotations

from enum import IntEnum

NOP = 0


class Op(IntEnum):
    """Primary opcodes (bits 31..26)."""

    SPECIAL = 0o00
    BCOND = 0o01
    J = 0o02
    JAL = 0o03
    BEQ = 0o04
    BNE = 0o05
    BLEZ = 0o06
    BGTZ = 0o07
    ADDI = 0o10
    ADDIU = 0o11
    SLTI = 0o12
    SLTIU = 0o13
    ANDI = 0o14
    ORI = 0o15
    XORI = 0o16
    LUI = 0o17
    COP0 = 0o20
    COP1 = 0o21
    COP2 = 0o22
    COP3 = 0o23
    LB = 0o40
    LH = 0o41
    LWL = 0o42
    LW = 0o43
    LBU = 0o44
    LHU = 0o45
    LWR = 0o46
    SB = 0o50
    SH = 0o51
    SWL = 0o52
    SW = 0o53
    SWR = 0o56
    LWC0 = 0o60
    LWC1 = 0o61
    LWC2 = 0o62
    LWC3 = 0o63
    SWC0 = 0o70
    SWC1 = 0o71
    SWC2 = 0o72
    SWC3 = 0o73


class SpecialOp(IntEnum):
    """Function codes (bits 5..0) of SPECIAL instructions."""

    SLL = 0o00
    SRL = 0o02
    SRA = 0o03
    SLLV = 0o04
    SRLV = 0o06
    SRAV = 0o07
    JR = 0o10
    JALR = 0o11
    SYSCALL = 0o14
    BREAK = 0o15
    MFHI = 0o20
    MTHI = 0o21
    MFLO = 0o22
    MTLO = 0o23
    MULT = 0o30
    MULTU = 0o31
    DIV = 0o32
    DIVU = 0o33
    ADD = 0o40
    ADDU = 0o41
    SUB = 0o42
    SUBU = 0o43
    AND = 0o44
    OR = 0o45
    XOR = 0o46
    NOR = 0o47
    SLT = 0o52
    SLTU = 0o53


class BranchOp(IntEnum):
    """Conditions of BCOND instructions, held in the rt field."""

    BLTZ = 0o00
    BGEZ = 0o01
    BLTZAL = 0o20
    BGEZAL = 0o21


def _octal_names(count: int, known: dict[int, str]) -> tuple[str, ...]:
    return tuple(known.get(code, f"{code:03o}") for code in range(count))


NORMAL_OPS: tuple[str, ...] = _octal_names(
    64, {op.value: "special" if op is Op.SPECIAL else op.name.lower() for op in Op}
)
SPECIAL_OPS: tuple[str, ...] = _octal_names(
    64, {op.value: op.name.lower() for op in SpecialOp}
)


def rd(instruction: int) -> int:
    """Destination register field."""
    return (instruction >> 11) & 0x1F


def rt(instruction: int) -> int:
    """Target register field."""
    return (instruction >> 16) & 0x1F


def rs(instruction: int) -> int:
    """Source register field."""
    return (instruction >> 21) & 0x1F


def shamt(instruction: int) -> int:
    """Shift amount field."""
    return (instruction >> 6) & 0x1F


def immed(instruction: int) -> int:
    """The 16-bit immediate, sign-extended."""
    if instruction & 0x8000:
        return (instruction & 0x7FFF) - 0x8000
    return instruction & 0x7FFF


def off26(instruction: int) -> int:
    """The 26-bit jump target as a byte offset."""
    return (instruction & ((1 << 26) - 1)) << 2


def top4(value: int) -> int:
    """The top four bits of a 32-bit address."""
    return value & 0xF0000000


def off16(instruction: int) -> int:
    """The sign-extended immediate as a byte offset."""
    return immed(instruction) << 2


def extend(value: int, hibitmask: int) -> int:
    """Sign-extend ``value`` whose sign bit is ``hibitmask``."""
    return value | -hibitmask if value & hibitmask else value


def opcode(instruction: int) -> int:
    """Primary opcode (bits 31..26)."""
    return (instruction & 0xFFFFFFFF) >> 26


def funct(instruction: int) -> int:
    """Function code (bits 5..0)."""
    return instruction & 0x3F