"""Tests for relocation offset extraction."""

import pytest

from elf_test_utils import ElfBuilder, build_rodata_object, R_X86_64_64
from fwscan.elf import (
    ElfReader,
    ElfFormatError,
    RelaEntry,
    SHT_PROGBITS,
    SHT_RELA,
    STT_OBJECT,
    STT_SECTION,
)
from fwscan.relocations import parse_relocations


class TestParseRelocations:
    """Tests for parse_relocations()."""

    def test_returns_rodata_addends_in_order(self):
        """Addends come back in record order, unsorted."""
        reader = ElfReader(build_rodata_object(b"\x00" * 0x1000, [0x800, 0x10, 0x400]))
        offsets = parse_relocations(reader, ".rela.rodata", ".rodata")
        assert offsets == [0x800, 0x10, 0x400]

    def test_duplicates_kept(self):
        reader = ElfReader(build_rodata_object(b"\x00" * 0x100, [0x40, 0x40, 0x0]))
        offsets = parse_relocations(reader, ".rela.rodata", ".rodata")
        assert offsets == [0x40, 0x40, 0x0]

    def test_other_symbols_ignored(self):
        """Relocations against other sections or non-section symbols are skipped."""
        reader = ElfReader(
            build_rodata_object(
                b"\x00" * 0x100,
                [0x20],
                data_addends=[0x8, 0x10],
                func_addends=[0x30],
            )
        )
        offsets = parse_relocations(reader, ".rela.rodata", ".rodata")
        assert offsets == [0x20]

    def test_other_target_section(self):
        """The target section name selects which section symbol counts."""
        reader = ElfReader(
            build_rodata_object(b"\x00" * 0x100, [0x20], data_addends=[0x8, 0x10])
        )
        assert parse_relocations(reader, ".rela.rodata", ".data") == [0x8, 0x10]

    def test_negative_addend(self):
        reader = ElfReader(build_rodata_object(b"\x00" * 0x100, [-8, 0x40]))
        assert parse_relocations(reader, ".rela.rodata", ".rodata") == [-8, 0x40]

    def test_no_matching_relocations(self):
        reader = ElfReader(build_rodata_object(b"\x00" * 0x100, []))
        assert parse_relocations(reader, ".rela.rodata", ".rodata") == []

    def test_custom_relocation_section_name(self):
        reader = ElfReader(
            build_rodata_object(b"\x00" * 0x100, [0x10], rel_section=".rela.rodata1")
        )
        assert parse_relocations(reader, ".rela.rodata1", ".rodata") == [0x10]


class TestParseRelocationsErrors:
    """Malformed relocation data is fatal."""

    def test_length_not_multiple_of_record_size(self):
        reader = ElfReader(
            build_rodata_object(b"\x00" * 0x100, [0x10], rela_trailer=b"\x00" * 5)
        )
        with pytest.raises(ElfFormatError, match="Unexpected length for .rela.rodata"):
            parse_relocations(reader, ".rela.rodata", ".rodata")

    def test_missing_relocation_section(self):
        reader = ElfReader(build_rodata_object(b"\x00" * 0x100, [0x10]))
        with pytest.raises(ElfFormatError, match="Section not found"):
            parse_relocations(reader, ".rela.data.rel.ro", ".rodata")

    def test_missing_symbol_table(self):
        reader = ElfReader(
            build_rodata_object(b"\x00" * 0x100, [0x10], with_symtab=False)
        )
        with pytest.raises(ElfFormatError, match="No symbol table"):
            parse_relocations(reader, ".rela.rodata", ".rodata")

    def _single_reloc_object(self, sym_no: int, owner: int | None = None) -> ElfReader:
        b = ElfBuilder()
        ro = b.add_section(".rodata", SHT_PROGBITS, b"\x00" * 64)
        rela = b.add_section(".rela.rodata", SHT_RELA, entsize=RelaEntry.SIZE)
        b.add_symbol("", STT_SECTION, ro if owner is None else owner)
        b.add_symbol("obj", STT_OBJECT, 500)
        b.set_content(
            rela,
            RelaEntry(0, RelaEntry.make_info(sym_no, R_X86_64_64), 0x10).to_bytes(),
        )
        return ElfReader(b.build())

    def test_symbol_index_zero(self):
        reader = self._single_reloc_object(sym_no=0)
        with pytest.raises(ElfFormatError, match="invalid symbol 0"):
            parse_relocations(reader, ".rela.rodata", ".rodata")

    def test_symbol_index_past_end(self):
        reader = self._single_reloc_object(sym_no=9)
        with pytest.raises(ElfFormatError, match="invalid symbol 9"):
            parse_relocations(reader, ".rela.rodata", ".rodata")

    def test_section_symbol_with_bad_owner(self):
        reader = self._single_reloc_object(sym_no=1, owner=400)
        with pytest.raises(ElfFormatError, match="invalid section 400"):
            parse_relocations(reader, ".rela.rodata", ".rodata")

    def test_bad_owner_ignored_for_non_section_symbol(self):
        """Only section symbols have their owning section looked up."""
        reader = self._single_reloc_object(sym_no=2)
        assert parse_relocations(reader, ".rela.rodata", ".rodata") == []
