import io
import mmap
import os

import pytest

from nachoskit.disasm import disassemble
from nachoskit.isa import Op, SpecialOp
from nachoskit.machine import (
    Machine,
    ProgramExit,
    UnimplementedInstruction,
    UnknownSyscall,
    ilog2,
)
from nachoskit.memory import Memory

BASE = 0x10000000
SYSCALL = int(SpecialOp.SYSCALL)


def i_type(op, rs_, rt_, imm):
    return (int(op) << 26) | (rs_ << 21) | (rt_ << 16) | (imm & 0xFFFF)


def r_type(fn, rs_=0, rt_=0, rd_=0, sh=0):
    return (rs_ << 21) | (rt_ << 16) | (rd_ << 11) | (sh << 6) | int(fn)


def make_machine(**kwargs):
    memory = Memory(size=0x2000, offset=BASE)
    kwargs.setdefault("out", io.StringIO())
    return Machine(memory, **kwargs)


def execute(machine, word, **regs):
    machine.memory.store(BASE, word)
    machine.pc, machine.npc = BASE, BASE + 4
    for name, value in regs.items():
        machine.registers[int(name[1:])] = value
    machine.step()
    return machine


def load_program(machine, words):
    for index, word in enumerate(words):
        machine.memory.store(BASE + 4 * index, word)


def test_addu_wraps_to_32_bits():
    m = execute(make_machine(), r_type(SpecialOp.ADDU, 8, 9, 10), r8=0x7FFFFFFF, r9=1)
    assert m.registers[10] == -0x80000000


def test_subu():
    m = execute(make_machine(), r_type(SpecialOp.SUBU, 8, 9, 10), r8=3, r9=5)
    assert m.registers[10] == 3 - 5


def test_slt_and_sltu_differ_on_sign():
    m = execute(make_machine(), r_type(SpecialOp.SLT, 8, 9, 10), r8=-1, r9=1)
    assert m.registers[10] == 1
    m = execute(make_machine(), r_type(SpecialOp.SLTU, 8, 9, 10), r8=-1, r9=1)
    assert m.registers[10] == 0


def test_shifts():
    m = execute(make_machine(), r_type(SpecialOp.SRA, 0, 8, 10, 2), r8=-16)
    assert m.registers[10] == -16 >> 2
    m = execute(make_machine(), r_type(SpecialOp.SRL, 0, 8, 10, 2), r8=-16)
    assert m.registers[10] == (-16 & 0xFFFFFFFF) >> 2
    m = execute(make_machine(), r_type(SpecialOp.SLL, 0, 8, 10, 4), r8=1)
    assert m.registers[10] == 1 << 4


def test_mult_high_word():
    m = execute(make_machine(), r_type(SpecialOp.MULT, 8, 9), r8=0x10000, r9=0x10000)
    assert (m.hi, m.lo) == (1, 0)


def test_mult_negative():
    m = execute(make_machine(), r_type(SpecialOp.MULT, 8, 9), r8=-3, r9=4)
    assert m.lo == -3 * 4
    assert m.hi == -1


def test_div_truncates_toward_zero():
    m = execute(make_machine(), r_type(SpecialOp.DIV, 8, 9), r8=-7, r9=2)
    assert (m.lo, m.hi) == (-3, -1)


def test_div_by_zero():
    with pytest.raises(ZeroDivisionError):
        execute(make_machine(), r_type(SpecialOp.DIV, 8, 9), r8=1, r9=0)


def test_mflo_mfhi_round_trip():
    m = execute(make_machine(), r_type(SpecialOp.MTLO, 8), r8=42)
    execute(m, r_type(SpecialOp.MFLO, 0, 0, 11))
    assert m.registers[11] == 42


def test_lui():
    m = execute(make_machine(), i_type(Op.LUI, 0, 8, 0x1234))
    assert m.registers[8] == 0x1234 << 16


def test_addiu_sign_extends():
    m = execute(make_machine(), i_type(Op.ADDIU, 8, 9, -1), r8=10)
    assert m.registers[9] == 10 - 1


def test_store_and_load_word():
    m = execute(make_machine(), i_type(Op.SW, 8, 9, 0x100), r8=BASE, r9=-123)
    assert m.memory.fetch(BASE + 0x100) == -123
    execute(m, i_type(Op.LW, 8, 10, 0x100))
    assert m.registers[10] == -123


def test_lb_and_lbu():
    m = make_machine()
    m.memory.cstore(BASE + 0x40, 0xFF)
    execute(m, i_type(Op.LB, 8, 9, 0x40), r8=BASE)
    execute(m, i_type(Op.LBU, 8, 10, 0x40))
    assert m.registers[9] == -1
    assert m.registers[10] == 0xFF


def test_beq_taken_uses_delay_slot():
    m = execute(make_machine(), i_type(Op.BEQ, 8, 9, 3), r8=5, r9=5)
    assert m.pc == BASE + 4
    assert m.npc == BASE + 4 + (3 << 2)


def test_bne_not_taken():
    m = execute(make_machine(), i_type(Op.BNE, 8, 9, 3), r8=5, r9=5)
    assert m.npc == BASE + 8


def test_jal_links():
    word = (int(Op.JAL) << 26) | 0x40
    m = execute(make_machine(), word)
    assert m.registers[31] == BASE + 8
    assert m.npc == (BASE & 0xF0000000) | (0x40 << 2)


def test_jr():
    m = execute(make_machine(), r_type(SpecialOp.JR, 8), r8=BASE + 0x80)
    assert m.npc == BASE + 0x80


def test_unknown_special_is_unimplemented():
    with pytest.raises(UnimplementedInstruction):
        execute(make_machine(), r_type(0o01))


def test_coprocessor_rejected():
    with pytest.raises(UnimplementedInstruction, match="coprocessors"):
        execute(make_machine(), i_type(Op.COP0, 0, 0, 0))


def test_swl_rejected():
    with pytest.raises(UnimplementedInstruction, match="SWL"):
        execute(make_machine(), i_type(Op.SWL, 0, 0, 0))


def test_exit_syscall():
    with pytest.raises(ProgramExit) as info:
        execute(make_machine(), SYSCALL, r2=1)
    assert info.value.status == 0


def test_unknown_syscall_reports():
    out = io.StringIO()
    with pytest.raises(UnknownSyscall):
        execute(make_machine(out=out), SYSCALL, r2=99)
    assert "Unknown System call 99" in out.getvalue()


def test_sbrk_rounds_to_next_page():
    m = execute(make_machine(), SYSCALL, r2=17, r4=10000)
    assert m.registers[1] == 16384


def test_getpagesize():
    m = execute(make_machine(), SYSCALL, r2=64)
    assert m.registers[1] == mmap.PAGESIZE


def test_run_write_then_exit():
    read_fd, write_fd = os.pipe()
    try:
        m = make_machine()
        m.memory.load(BASE + 0x100, b"hi")
        load_program(m, [
            i_type(Op.ADDIU, 0, 4, write_fd),
            i_type(Op.LUI, 0, 5, 0x1000),
            i_type(Op.ORI, 5, 5, 0x100),
            i_type(Op.ADDIU, 0, 6, 2),
            i_type(Op.ADDIU, 0, 2, 4),
            SYSCALL,
            i_type(Op.ADDIU, 0, 2, 1),
            SYSCALL,
        ])
        assert m.run(BASE, ["prog"]) == 0
        assert os.read(read_fd, 2) == b"hi"
        assert m.registers[1] == 2
    finally:
        os.close(read_fd)
        os.close(write_fd)


def test_setup_arguments_layout():
    m = make_machine()
    sp = m.setup_arguments(["prog", "arg"])
    assert sp == BASE + 0x2000 - 1024
    assert m.registers[29] == sp
    assert m.memory.fetch(sp) == 2
    first = m.memory.fetch(sp + 4)
    second = m.memory.fetch(sp + 8)
    assert m.memory.read_cstring(first) == b"prog"
    assert m.memory.read_cstring(second) == b"arg"
    assert second == first + len("prog") + 1


def test_trace_prints_disassembly():
    out = io.StringIO()
    word = i_type(Op.ADDIU, 0, 8, 5)
    m = execute(make_machine(trace=True, out=out), word)
    assert out.getvalue() == disassemble(word, BASE) + "\n"
    assert m.registers[8] == 5


def test_dump_registers_rows():
    m = make_machine()
    m.registers[8] = -1
    text = m.dump_registers()
    lines = text.splitlines()
    assert [line[:3] for line in lines] == [" 0:", " 8:", "16:", "24:"]
    assert lines[1].split()[1] == "ffffffff"
    assert m.out.getvalue() == text


@pytest.mark.parametrize("value, expected", [(0, 0), (1, 1), (-1, 32)])
def test_ilog2(value, expected):
    assert ilog2(value) == expected


def test_ilog2_matches_powers():
    for shift in range(32):
        assert ilog2(1 << shift) == shift + 1