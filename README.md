# nachoskit

A small toolkit built around an instructional operating system. It
collects the pieces students meet first:

- simple data structures: a singly linked integer list (`IntList`), a
  doubly linked list ordered by integer keys (`DLList`), and stacks backed
  by a fixed-size array (`ArrayStack`) or by a linked list (`ListStack`);
- the flat, fixed-size file-system directory table (`Directory`) that maps
  file names to header sectors and converts itself to and from bytes;
- object-file tools for little-endian MIPS COFF executables: conversion to
  the simple NOFF format or to a flat memory image;
- a MIPS disassembler and a user-mode MIPS interpreter with a handful of
  system calls.

No third-party libraries are needed; Python 3.10 or later.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Commands

| Command | What it does |
|---------|--------------|
| `nachos-dllist [--seed N]` | Inserts ten random keys below 100 into a `DLList`, shows the keys, removes the first five and shows the keys again |
| `nachos-stacks [basic\|inherit\|template\|all]` | Pushes and pops values through the stack implementations, printing each step (default `all`) |
| `coff2noff <coffFile> <noffFile>` | Converts a COFF executable to NOFF; on error the output file is removed |
| `coff2flat <coffFile> <flatFile>` | Writes a flat memory image: section contents (without `.bss`/`.sbss`) followed by 1024 bytes of stack space ending in a zero word |
| `nachos-disasm [file]` | Disassembles the `.text` section (default `a.out`), reporting any missing sections first |
| `nachos-run [options] [file [args...]]` | Loads a MIPS COFF program (default `a.out`) and interprets it; the file name and the arguments after it become the program's `argv` |

Both converters print a line for every section they read and accept only
little-endian MIPS COFF files with the `OMAGIC` optional header. NOFF
conversion accepts `.text`, `.data` or `.rdata` (not both), and `.bss`
/`.sbss`; any other non-empty section is an error.

`nachos-run` options:

- `-t` prints every executed instruction, disassembled;
- `-r` also dumps the registers after each traced instruction;
- `-T` traces system calls, with register dumps before and after;
- `-m ROWS ASSOC LINESIZE POLICY` is accepted and stored in `Options`.

The command returns the program's exit status (0 when it calls `exit`),
1 when the file cannot be read or loaded, and 2 for an unknown system call
or an instruction the interpreter cannot execute.

## Library use

```python
from nachoskit.dllist import DLList
from nachoskit.stacks import ArrayStack, StackFullError
from nachoskit.directory import Directory

items = DLList()
items.sorted_insert("b", 20)
items.sorted_insert("a", 10)
print(items.keys())          # [10, 20]
print(items.remove())        # (10, 'a')

stack = ArrayStack(2)
stack.push(1)
stack.push(2)
try:
    stack.push(3)
except StackFullError:
    print("full")

directory = Directory(10)
directory.add("readme", 5)
print(directory.find("readme"))   # 5
data = directory.to_bytes()
same = Directory.from_bytes(data, 10)
```

Directory names are compared and stored on their first 9 characters;
`add` returns `False` when the name is already present or the table is
full, and `find` returns `None` for an unknown name.

Other entry points:

- `nachoskit.coff.read_coff` parses COFF headers into a `CoffFile`;
  `FileHeader`, `AoutHeader`, `SectionHeader` and `NoffHeader` each have
  `parse` and `pack`.
- `nachoskit.flat.coff_to_flat` and `nachoskit.noff.coff_to_noff` take the
  COFF bytes and return the converted bytes, raising `CoffError` on bad
  input.
- `nachoskit.isa` holds the instruction field helpers (`rs`, `rt`, `rd`,
  `immed`, ...) and the opcode enums `Op`, `SpecialOp`, `BranchOp`.
- `nachoskit.disasm.disassemble(instruction, pc)` renders one instruction;
  `disassemble_text(coff_file)` yields one line per text word.
- `nachoskit.machine.Machine` runs over a `nachoskit.memory.Memory`
  (16 MiB starting at address `0x10000000` by default);
  `nachoskit.runner.load_program` places a COFF program's sections in it.

## What the package does not do

- There is no simulated disk and no file system around the directory
  table: no file headers, no free-sector bitmap, no opening, reading or
  writing of files. `Directory` only keeps its table in memory and turns
  it into bytes and back.
- The `-m` cache settings of `nachos-run` are parsed but no cache is
  simulated.
- The interpreter has no coprocessors and no `swl`/`swr`. Of the system
  calls, `read`, `write`, `open`, `lseek` and `fstat` go to the host;
  `close` and `ioctl` do nothing and report success; call 17 returns the
  argument rounded up past the next 8192-byte boundary.