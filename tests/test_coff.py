import pytest

from nachoskit.coff import (
    MIPSELMAGIC,
    NOFFMAGIC,
    OMAGIC,
    AoutHeader,
    CoffError,
    FileHeader,
    NoffHeader,
    SectionHeader,
    Segment,
    read_coff,
)


def build_coff(sections, file_magic=MIPSELMAGIC, aout_magic=OMAGIC):
    header_size = FileHeader.SIZE + AoutHeader.SIZE + SectionHeader.SIZE * len(sections)
    headers = []
    payload = bytearray()
    for name, paddr, contents in sections:
        scnptr = header_size + len(payload)
        payload += contents
        headers.append(
            SectionHeader(name=name, paddr=paddr, vaddr=paddr, size=len(contents), scnptr=scnptr)
        )
    return (
        FileHeader(magic=file_magic, nscns=len(sections)).pack()
        + AoutHeader(magic=aout_magic).pack()
        + b"".join(h.pack() for h in headers)
        + bytes(payload)
    )


def test_header_sizes():
    assert len(FileHeader().pack()) == 20
    assert len(AoutHeader().pack()) == 56
    assert len(SectionHeader().pack()) == 40


def test_file_header_round_trip():
    header = FileHeader(magic=MIPSELMAGIC, nscns=3, timdat=99, symptr=4, nsyms=2, opthdr=56, flags=7)
    assert FileHeader.parse(header.pack()) == header


def test_file_header_magic_bytes():
    assert FileHeader().pack()[:2] == MIPSELMAGIC.to_bytes(2, "little")


def test_aout_header_round_trip():
    header = AoutHeader(magic=OMAGIC, tsize=8, dsize=4, entry=0x400, cprmask=(1, 2, 3, 4), gp_value=9)
    assert AoutHeader.parse(header.pack()) == header


def test_aout_header_bad_cprmask():
    with pytest.raises(CoffError):
        AoutHeader(cprmask=(1, 2)).pack()


def test_section_header_round_trip():
    header = SectionHeader(name=".text", paddr=16, vaddr=16, size=8, scnptr=200, nreloc=1, flags=32)
    assert SectionHeader.parse(header.pack()) == header


def test_parse_short_raises():
    with pytest.raises(CoffError):
        FileHeader.parse(b"\x00\x01")
    with pytest.raises(CoffError):
        SectionHeader.parse(bytes(10))


def test_read_coff_sections():
    data = build_coff([(".text", 0, b"\x01\x02\x03\x04"), (".data", 4, b"abcd")])
    coff = read_coff(data)
    assert [s.name for s in coff.sections] == [".text", ".data"]
    assert coff.section_data(coff.section(".data")) == b"abcd"
    assert coff.section_data(coff.section(".text")) == b"\x01\x02\x03\x04"
    assert coff.aout_header.magic == OMAGIC


def test_section_missing():
    coff = read_coff(build_coff([(".text", 0, b"1234")]))
    assert coff.section(".rdata") is None


def test_read_coff_wrong_magic():
    with pytest.raises(CoffError, match="not a MIPSEL COFF file"):
        read_coff(build_coff([], file_magic=0x1234))


def test_read_coff_truncated_section_headers():
    data = build_coff([(".text", 0, b"1234")])
    with pytest.raises(CoffError, match="too short"):
        read_coff(data[: FileHeader.SIZE + AoutHeader.SIZE + 5])


def test_section_data_past_end():
    data = build_coff([(".text", 0, b"12345678")])
    coff = read_coff(data[:-2])
    with pytest.raises(CoffError):
        coff.section_data(coff.section(".text"))


def test_noff_header_round_trip():
    header = NoffHeader(
        code=Segment(0, 40, 128),
        init_data=Segment(128, 168, 16),
        uninit_data=Segment(144, 0, 32),
    )
    assert NoffHeader.parse(header.pack()) == header


def test_noff_header_defaults():
    header = NoffHeader()
    assert header.noff_magic == NOFFMAGIC
    assert header.pack()[:4] == NOFFMAGIC.to_bytes(4, "little")
    assert header.code == Segment()


def test_noff_header_short():
    with pytest.raises(CoffError):
        NoffHeader.parse(bytes(NoffHeader.SIZE - 1))