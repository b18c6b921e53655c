"""Interpreter for little-endian MIPS user programs with a few system calls."""

from __future__ import annotations

import mmap
import os
import sys
from collections.abc import Sequence
from typing import TextIO

from nachoskit.disasm import disassemble
from nachoskit.isa import (
    BranchOp,
    Op,
    SpecialOp,
    funct,
    immed,
    opcode,
    rd,
    rs,
    rt,
    shamt,
)
from nachoskit.memory import Memory

SYS_EXIT = 1
SYS_READ = 3
SYS_WRITE = 4
SYS_OPEN = 5
SYS_CLOSE = 6
SYS_SBRK = 17
SYS_LSEEK = 19
SYS_IOCTL = 54
SYS_FSTAT = 62
SYS_GETPAGESIZE = 64

_STACK_RESERVE = 1024
_ARGV_SLOTS = 32
_SP = 29
_RA = 31

_COPROCESSOR_OPS = frozenset({
    Op.LWC0, Op.LWC1, Op.LWC2, Op.LWC3,
    Op.SWC0, Op.SWC1, Op.SWC2, Op.SWC3,
    Op.COP0, Op.COP1, Op.COP2, Op.COP3,
})


class ProgramExit(Exception):
    """Raised when the simulated program asks to exit."""

    def __init__(self, status: int = 0) -> None:
        super().__init__(f"program exited with status {status}")
        self.status = status


class UnimplementedInstruction(Exception):
    """Raised for an instruction the interpreter cannot execute."""


class UnknownSyscall(Exception):
    """Raised for a system call number the interpreter does not know."""

    def __init__(self, number: int) -> None:
        super().__init__(f"Unknown System call {number}")
        self.number = number


def _s32(value: int) -> int:
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


def _trunc_divmod(a: int, b: int) -> tuple[int, int]:
    if b == 0:
        raise ZeroDivisionError("integer division by zero")
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    return quotient, a - b * quotient


def _mul_parts(t1: int, t2: int) -> tuple[int, int]:
    """Low word and approximate high word, as the machine computes them."""
    lo = _s32(t1 * t2)
    t1l, t1h = t1 & 0xFFFF, (t1 >> 16) & 0xFFFF
    t2l, t2h = t2 & 0xFFFF, (t2 >> 16) & 0xFFFF
    hi = _s32(
        _s32(t1h * t2h) + (_s32(t1h * t2l) >> 16) + (_s32(t2h * t1l) >> 16)
    )
    return lo, hi


def ilog2(value: int) -> int:
    """Number of significant bits of ``value`` taken as an unsigned word."""
    return _u32(value).bit_length()


class Machine:
    """Registers, program counters and the execution loop of the simulator."""

    def __init__(
        self,
        memory: Memory,
        trace: bool = False,
        trap_trace: bool = False,
        reg_trace: bool = False,
        out: TextIO | None = None,
    ) -> None:
        self.memory = memory
        self.trace = trace
        self.trap_trace = trap_trace
        self.reg_trace = reg_trace
        self._out = out
        self.registers = [0] * 32
        self.hi = 0
        self.lo = 0
        self.pc = 0
        self.npc = 4
        self.instruction_count = 0

    @property
    def out(self) -> TextIO:
        return sys.stdout if self._out is None else self._out

    def _write(self, text: str) -> None:
        self.out.write(text)

    def setup_arguments(self, argv: Sequence[str]) -> int:
        """Place argc and argv near the top of memory and point sp at them.

        Returns the initial stack pointer.
        """
        sp = self.memory.size - _STACK_RESERVE + self.memory.offset
        self.registers[_SP] = _s32(sp)
        self.memory.store(sp, len(argv))
        slot = sp + 4
        text = slot + _ARGV_SLOTS
        for arg in argv:
            encoded = arg.encode("latin-1") + b"\0"
            self.memory.load(text, encoded)
            self.memory.store(slot, text)
            slot += 4
            text += len(encoded)
        return sp

    def step(self) -> None:
        """Fetch and execute one instruction, honouring the branch delay slot."""
        self.instruction_count += 1
        xpc = self.pc
        self.pc = self.npc
        self.npc = _u32(self.pc + 4)
        instr = _u32(self.memory.fetch(xpc))
        self.registers[0] = 0

        if instr != 0:
            code = opcode(instr)
            if code == Op.SPECIAL:
                self._special(instr, xpc)
            elif code == Op.BCOND:
                self._bcond(instr, xpc)
            else:
                self._normal(instr, xpc, code)

        if self.trace:
            self._write(disassemble(instr, xpc) + "\n")
            if self.reg_trace:
                self.dump_registers()

    def run(self, start_pc: int, argv: Sequence[str]) -> int:
        """Run from ``start_pc`` with ``argv`` until the program exits.

        Returns the exit status.
        """
        self.setup_arguments(argv)
        self.pc = _u32(start_pc)
        self.npc = _u32(start_pc + 4)
        try:
            while True:
                self.step()
        except ProgramExit as done:
            return done.status

    def _branch(self, xpc: int, instr: int) -> None:
        self.npc = _u32(xpc + 4 + (immed(instr) << 2))

    def _special(self, instr: int, xpc: int) -> None:
        reg = self.registers
        s, t, d = reg[rs(instr)], reg[rt(instr)], rd(instr)
        code = funct(instr)
        if code == SpecialOp.SLL:
            reg[d] = _s32(t << shamt(instr))
        elif code == SpecialOp.SRL:
            reg[d] = _s32(_u32(t) >> shamt(instr))
        elif code == SpecialOp.SRA:
            reg[d] = t >> shamt(instr)
        elif code == SpecialOp.SLLV:
            reg[d] = _s32(t << (s & 31))
        elif code == SpecialOp.SRLV:
            reg[d] = _s32(_u32(t) >> (s & 31))
        elif code == SpecialOp.SRAV:
            reg[d] = t >> (s & 31)
        elif code == SpecialOp.JR:
            self.npc = _u32(s)
        elif code == SpecialOp.JALR:
            self.npc = _u32(s)
            reg[d] = _s32(xpc + 8)
        elif code == SpecialOp.SYSCALL:
            self.system_trap()
        elif code == SpecialOp.BREAK:
            if self.trap_trace:
                self._write("**breakpoint ")
            self.system_trap()
        elif code == SpecialOp.MFHI:
            reg[d] = self.hi
        elif code == SpecialOp.MTHI:
            self.hi = s
        elif code == SpecialOp.MFLO:
            reg[d] = self.lo
        elif code == SpecialOp.MTLO:
            self.lo = s
        elif code == SpecialOp.MULT:
            negative = (s < 0) != (t < 0)
            lo, hi = _mul_parts(_s32(abs(s)), _s32(abs(t)))
            if negative:
                lo, hi = _s32(~lo + 1), ~hi
                if lo == 0:
                    hi = _s32(hi + 1)
            self.lo, self.hi = lo, hi
        elif code == SpecialOp.MULTU:
            self.lo, self.hi = _mul_parts(s, t)
        elif code == SpecialOp.DIV:
            quotient, remainder = _trunc_divmod(s, t)
            self.lo, self.hi = _s32(quotient), _s32(remainder)
        elif code == SpecialOp.DIVU:
            quotient, remainder = _trunc_divmod(_u32(s), _u32(t))
            self.lo, self.hi = _s32(quotient), _s32(remainder)
        elif code in (SpecialOp.ADD, SpecialOp.ADDU):
            reg[d] = _s32(s + t)
        elif code in (SpecialOp.SUB, SpecialOp.SUBU):
            reg[d] = _s32(s - t)
        elif code == SpecialOp.AND:
            reg[d] = s & t
        elif code == SpecialOp.OR:
            reg[d] = s | t
        elif code == SpecialOp.XOR:
            reg[d] = s ^ t
        elif code == SpecialOp.NOR:
            reg[d] = _s32(~(s | t))
        elif code == SpecialOp.SLT:
            reg[d] = int(s < t)
        elif code == SpecialOp.SLTU:
            reg[d] = int(_u32(s) < _u32(t))
        else:
            raise UnimplementedInstruction("Unimplemented Instruction")

    def _bcond(self, instr: int, xpc: int) -> None:
        reg = self.registers
        value = reg[rs(instr)]
        condition = rt(instr)
        if condition in (BranchOp.BLTZAL, BranchOp.BGEZAL):
            reg[_RA] = _s32(xpc + 8)
        if condition in (BranchOp.BLTZ, BranchOp.BLTZAL):
            if value < 0:
                self._branch(xpc, instr)
        elif condition in (BranchOp.BGEZ, BranchOp.BGEZAL):
            if value >= 0:
                self._branch(xpc, instr)
        else:
            raise UnimplementedInstruction("Unimplemented Instruction")

    def _normal(self, instr: int, xpc: int, code: int) -> None:
        reg = self.registers
        s, t = reg[rs(instr)], reg[rt(instr)]
        target = rt(instr)
        imm = immed(instr)
        address = _u32(s + imm)
        memory = self.memory

        if code in (Op.J, Op.JAL):
            if code == Op.JAL:
                reg[_RA] = _s32(xpc + 8)
            self.npc = (xpc & 0xF0000000) | ((instr & 0x03FFFFFF) << 2)
        elif code == Op.BEQ:
            if s == t:
                self._branch(xpc, instr)
        elif code == Op.BNE:
            if s != t:
                self._branch(xpc, instr)
        elif code == Op.BLEZ:
            if s <= 0:
                self._branch(xpc, instr)
        elif code == Op.BGTZ:
            if s > 0:
                self._branch(xpc, instr)
        elif code in (Op.ADDI, Op.ADDIU):
            reg[target] = _s32(s + imm)
        elif code == Op.SLTI:
            reg[target] = int(s < imm)
        elif code == Op.SLTIU:
            reg[target] = int(_u32(s) < _u32(imm))
        elif code == Op.ANDI:
            reg[target] = s & imm
        elif code == Op.ORI:
            reg[target] = s | imm
        elif code == Op.XORI:
            reg[target] = s ^ imm
        elif code == Op.LUI:
            reg[target] = _s32(instr << 16)
        elif code == Op.LB:
            reg[target] = memory.cfetch(address)
        elif code == Op.LH:
            reg[target] = memory.sfetch(address)
        elif code == Op.LWL:
            # The mask is all ones here, so only the shifted word is merged in.
            word = memory.fetch(address & 0xFFFFFFFC)
            reg[target] = _s32(t | (word << (8 * (address & 3))))
        elif code == Op.LW:
            reg[target] = memory.fetch(address)
        elif code == Op.LBU:
            reg[target] = memory.ucfetch(address)
        elif code == Op.LHU:
            reg[target] = memory.usfetch(address)
        elif code == Op.LWR:
            value = 0 if address & 3 == 0 else _s32(t & (-1 << (8 * (address & 3))))
            word = memory.fetch(address & 0xFFFFFFFC)
            reg[target] = _s32(value | (word >> (8 * ((-address) & 3))))
        elif code == Op.SB:
            memory.cstore(address, t)
        elif code == Op.SH:
            memory.sstore(address, t)
        elif code == Op.SW:
            memory.store(address, t)
        elif code == Op.SWL:
            raise UnimplementedInstruction("sorry, no SWL yet.")
        elif code == Op.SWR:
            raise UnimplementedInstruction("sorry, no SWR yet.")
        elif code in _COPROCESSOR_OPS:
            raise UnimplementedInstruction("Sorry, no coprocessors.")
        else:
            raise UnimplementedInstruction("Unimplemented Instruction")

    def system_trap(self) -> None:
        """Carry out the system call whose number is in r2, arguments in r4-r6."""
        reg = self.registers
        if self.trap_trace:
            self._write(f"**System call {reg[2]}\n")
            self.dump_registers()

        number, o0, o1, o2 = reg[2], reg[4], reg[5], reg[6]
        if number == SYS_EXIT:
            self.out.flush()
            raise ProgramExit(0)
        if number == SYS_READ:
            reg[1] = self._host_read(o0, o1, o2)
        elif number == SYS_WRITE:
            reg[1] = self._host_write(o0, o1, o2)
        elif number == SYS_OPEN:
            reg[1] = self._host_open(o0, o1, o2)
        elif number == SYS_CLOSE:
            reg[1] = 0
        elif number == SYS_SBRK:
            reg[1] = _s32((_trunc_divmod(o0, 8192)[0] + 1) * 8192)
        elif number == SYS_LSEEK:
            try:
                reg[1] = _s32(os.lseek(o0, o1, o2))
            except OSError:
                reg[1] = -1
        elif number == SYS_IOCTL:
            # Terminal control requests are accepted and reported as done.
            reg[1] = 0
        elif number == SYS_FSTAT:
            try:
                os.fstat(o1)
                reg[1] = 0
            except OSError:
                reg[1] = -1
        elif number == SYS_GETPAGESIZE:
            reg[1] = mmap.PAGESIZE
        else:
            self._write(f"Unknown System call {number}\n")
            if not self.trap_trace:
                self.dump_registers()
            raise UnknownSyscall(number)

        if self.trap_trace:
            self._write("**Afterwards:\n")
            self.dump_registers()

    def _host_read(self, fd: int, addr: int, count: int) -> int:
        if count < 0:
            return -1
        try:
            data = os.read(fd, count)
        except OSError:
            return -1
        self.memory.load(_u32(addr), data)
        return len(data)

    def _host_write(self, fd: int, addr: int, count: int) -> int:
        if count < 0:
            return -1
        data = self.memory.read(_u32(addr), count)
        try:
            return os.write(fd, data)
        except OSError:
            return -1

    def _host_open(self, addr: int, flags: int, mode: int) -> int:
        path = self.memory.read_cstring(_u32(addr)).decode("latin-1")
        try:
            return os.open(path, flags, mode)
        except OSError:
            return -1

    def dump_registers(self) -> str:
        """Write the 32 registers in four rows of eight and return the text."""
        rows = []
        for start in range(0, 32, 8):
            values = "".join(f" {_u32(v):08x}" for v in self.registers[start:start + 8])
            rows.append(f"{start:2d}:{values}\n")
        text = "".join(rows)
        self._write(text)
        return text