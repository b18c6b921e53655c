[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nachoskit"
version = "0.1.0"
description = "Teaching toolkit for an instructional operating system: list and stack structures, a flat file-system directory table, COFF/NOFF object tools, and a MIPS disassembler and interpreter."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "education",
    "operating-systems",
    "mips",
    "coff",
    "noff",
    "disassembler",
    "interpreter",
    "data-structures",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: Software Development :: Disassemblers",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nachos-dllist = "nachoskit.dllist:main"
nachos-stacks = "nachoskit.stacks:main"
coff2flat = "nachoskit.flat:main"
coff2noff = "nachoskit.noff:main"
nachos-disasm = "nachoskit.disasm:main"
nachos-run = "nachoskit.runner:main"

[tool.hatch.build.targets.wheel]
packages = ["nachoskit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
