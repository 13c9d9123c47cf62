import pytest

from elf_builder import (
    SHT_DYNSYM,
    STB_LOCAL,
    STB_WEAK,
    STT_FUNC,
    STT_OBJECT,
    ElfImage,
    Sym,
    defined,
    undef,
)
from undefsym.core.errors import (
    InvalidClass,
    InvalidEntrySize,
    TruncatedHeader,
    TruncatedSectionTable,
    TruncatedStringTable,
    TruncatedSymbolTable,
    UnsupportedEndianness,
)
from undefsym.parsers.buffer import ByteView
from undefsym.parsers.elf_layout import ElfClass
from undefsym.parsers.elf_parser import ElfSymbolScanner


def scan(data: bytes, **kwargs):
    return ElfSymbolScanner(data, "test.o", **kwargs).scan()


def names(outcome) -> list[str]:
    return [f.symbol for f in outcome.findings]


@pytest.mark.parametrize("length", [0, 1, 4, 16, 51])
def test_short_buffers_are_skipped(length: int) -> None:
    data = (b"\x7fELF\x02\x01" + b"\x00" * 64)[:length]
    outcome = scan(data)
    assert outcome.skipped
    assert outcome.findings == []


@pytest.mark.parametrize(
    "data",
    [
        b"MZ" + b"\x00" * 200,
        b"#!/bin/sh\necho hello\n" * 10,
        b"\x7fELG" + b"\x02\x01" + b"\xff" * 100,
    ],
)
def test_non_elf_buffers_are_skipped(data: bytes) -> None:
    outcome = scan(data)
    assert outcome.skipped
    assert outcome.skip_reason == "no ELF magic"
    assert outcome.findings == []


@pytest.mark.parametrize("bits", [32, 64])
def test_single_undefined_global_symbol(bits: int) -> None:
    data = ElfImage(bits=bits, symbols=[undef("foo")]).build()
    outcome = scan(data)
    assert not outcome.skipped
    assert outcome.elf_class is (ElfClass.ELF32 if bits == 32 else ElfClass.ELF64)
    assert names(outcome) == ["foo"]
    assert outcome.findings[0].path == "test.o"


@pytest.mark.parametrize("bits", [32, 64])
def test_all_defined_yields_nothing(bits: int) -> None:
    data = ElfImage(
        bits=bits,
        symbols=[defined("main"), defined("counter", STT_OBJECT), defined("x")],
    ).build()
    outcome = scan(data)
    assert outcome.findings == []
    assert outcome.symbol_tables == 1
    assert outcome.symbols_scanned == 4


def test_two_entry_table_scenario() -> None:
    data = ElfImage(
        bits=64, null_entry=False, symbols=[defined("bar"), undef("foo")]
    ).build()
    outcome = scan(data)
    assert outcome.symbols_scanned == 2
    assert [f.line for f in outcome.findings] == [
        "test.o contains undefined symbols: foo"
    ]


@pytest.mark.parametrize(
    "sym",
    [
        Sym("weak_ref", bind=STB_WEAK),
        Sym("local_ref", bind=STB_LOCAL),
        Sym("typed_func", type=STT_FUNC),
        Sym("defined_notype", shndx=1),
    ],
)
def test_only_global_notype_undef_is_reported(sym: Sym) -> None:
    outcome = scan(ElfImage(symbols=[sym]).build())
    assert outcome.findings == []


def test_findings_keep_table_order() -> None:
    symbols = [undef("zeta"), defined("mid"), undef("alpha"), undef("zeta")]
    outcome = scan(ElfImage(symbols=symbols).build())
    assert names(outcome) == ["zeta", "alpha", "zeta"]


def test_wider_entry_stride_is_honoured() -> None:
    data = ElfImage(bits=64, sym_entsize=32, symbols=[defined("a"), undef("b")]).build()
    assert names(scan(data)) == ["b"]


def test_truncated_section_table_reports_exact_overrun() -> None:
    data = ElfImage(bits=64, symbols=[undef("foo")], shnum=10).build()
    with pytest.raises(TruncatedSectionTable) as err:
        scan(data)
    assert err.value.start == 64
    assert err.value.end == 64 + 10 * 64
    assert err.value.size == len(data)
    assert err.value.overrun == 64 + 10 * 64 - len(data)
    assert f"file size is only {len(data)}" in str(err.value)


def test_section_table_offset_past_end() -> None:
    data = ElfImage(bits=32, symbols=[undef("foo")], shoff=10_000).build()
    with pytest.raises(TruncatedSectionTable) as err:
        scan(data)
    assert err.value.start == 10_000


def test_big_endian_is_rejected_before_parsing() -> None:
    data = ElfImage(symbols=[undef("foo")], ei_data=2).build()
    with pytest.raises(UnsupportedEndianness) as err:
        scan(data)
    assert err.value.value == 2


@pytest.mark.parametrize("value", [0, 3, 255])
def test_invalid_class(value: int) -> None:
    data = ElfImage(symbols=[undef("foo")], ei_class=value).build()
    with pytest.raises(InvalidClass) as err:
        scan(data)
    assert err.value.value == value
    assert str(value) in str(err.value)


def test_truncated_64bit_header() -> None:
    data = (b"\x7fELF\x02\x01\x01" + b"\x00" * 64)[:60]
    with pytest.raises(TruncatedHeader) as err:
        scan(data)
    assert err.value.end == 64
    assert err.value.size == 60


def test_32bit_header_fits_in_minimum_size() -> None:
    data = b"\x7fELF\x01\x01\x01" + b"\x00" * 45
    assert len(data) == 52
    outcome = scan(data)
    assert not outcome.skipped
    assert outcome.findings == []


def test_truncated_symbol_table() -> None:
    data = ElfImage(symbols=[undef("foo")], symtab_size=10_000).build()
    with pytest.raises(TruncatedSymbolTable) as err:
        scan(data)
    assert "section 1" in str(err.value)


@pytest.mark.parametrize("entsize", [0, 8, 23])
def test_symbol_entry_size_too_small(entsize: int) -> None:
    data = ElfImage(bits=64, symbols=[undef("foo")], sym_entsize=entsize).build()
    with pytest.raises(InvalidEntrySize) as err:
        scan(data)
    assert err.value.declared == entsize
    assert err.value.expected == 24


def test_section_header_entry_size_mismatch() -> None:
    data = ElfImage(bits=32, symbols=[undef("foo")], shentsize=64).build()
    with pytest.raises(InvalidEntrySize) as err:
        scan(data)
    assert err.value.expected == 40


def test_string_table_past_end_of_file() -> None:
    data = ElfImage(symbols=[undef("foo")], strtab_size=10_000).build()
    with pytest.raises(TruncatedStringTable):
        scan(data)


def test_name_offset_outside_string_table() -> None:
    data = ElfImage(symbols=[undef("foo")], strtab_size=1).build()
    with pytest.raises(TruncatedStringTable):
        scan(data)


def test_unterminated_name() -> None:
    # "\0foo\0" cut to "\0fo": the name runs off the end of the table.
    data = ElfImage(symbols=[undef("foo")], strtab_size=3).build()
    with pytest.raises(TruncatedStringTable) as err:
        scan(data)
    assert "unterminated" in str(err.value)


def test_string_table_link_out_of_range() -> None:
    data = ElfImage(symbols=[undef("foo")], strtab_link=9).build()
    with pytest.raises(TruncatedStringTable):
        scan(data)


def test_string_table_only_checked_when_a_name_is_needed() -> None:
    data = ElfImage(symbols=[defined("foo")], strtab_link=9).build()
    assert scan(data).findings == []


def test_no_section_headers() -> None:
    data = ElfImage(symbols=[undef("foo")], shoff=0).build()
    outcome = scan(data)
    assert outcome.findings == []
    assert outcome.symbol_tables == 0


def test_extended_section_numbering() -> None:
    data = ElfImage(symbols=[undef("foo")], shnum=0, sh0_size=3).build()
    assert names(scan(data)) == ["foo"]


def test_dynsym_only_when_enabled() -> None:
    data = ElfImage(symbols=[undef("foo")], symtab_type=SHT_DYNSYM).build()
    assert scan(data).symbol_tables == 0
    assert names(scan(data, include_dynsym=True)) == ["foo"]


def test_extra_sections_are_ignored() -> None:
    data = ElfImage(symbols=[undef("foo")], extra_sections=4).build()
    assert names(scan(data)) == ["foo"]


def test_scanning_is_idempotent() -> None:
    data = ElfImage(symbols=[undef("a"), defined("b"), undef("c")]).build()
    first = scan(data)
    second = scan(data)
    assert first.findings == second.findings

    corrupt = ElfImage(symbols=[undef("a")], shnum=50).build()
    messages = []
    for _ in range(2):
        with pytest.raises(TruncatedSectionTable) as err:
            scan(corrupt)
        messages.append(str(err.value))
    assert messages[0] == messages[1]


def test_accepts_byte_view() -> None:
    data = ElfImage(symbols=[undef("foo")]).build()
    outcome = ElfSymbolScanner(ByteView(data, "view.o"), "view.o").scan()
    assert [f.path for f in outcome.findings] == ["view.o"]
