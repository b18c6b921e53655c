"""Teaching toolkit: linked lists and stacks, a flat directory table, COFF/NOFF converters, and a MIPS disassembler and interpreter."""

__version__ = "0.1.0"