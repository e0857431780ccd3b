"""
Read-only ELF object reader.

The ElfReader class parses an ELF64 relocatable object once and answers the
queries the firmware scanner needs: section lookup by name or index, section
content, and the symbol table.

Design principles:
- Parse once, query many times
- Fail fast with clear error messages
- Never guess at malformed structure
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .types import (
    ElfHeader,
    SectionHeader,
    SymbolEntry,
    ELF64_SHDR_SIZE,
    SHT_SYMTAB,
    get_string,
)


class ElfFormatError(ValueError):
    """Raised when an object file does not have the structure we rely on.

    This is always fatal for a scan: the relocation-driven boundary search
    cannot proceed on a misunderstood container.
    """

    pass


@dataclass
class SectionInfo:
    """Information about a section, combining header with derived data."""

    index: int
    name: str
    header: SectionHeader

    @property
    def offset(self) -> int:
        """File offset."""
        return self.header.sh_offset

    @property
    def size(self) -> int:
        """Section size in bytes."""
        return self.header.sh_size


@dataclass
class SymbolInfo:
    """A symbol table entry with its resolved name."""

    index: int  # ELF symbol index (1-based for real symbols)
    name: str
    entry: SymbolEntry

    @property
    def type(self) -> int:
        """Symbol type (STT_*)."""
        return self.entry.st_type

    @property
    def section_index(self) -> int:
        """Index of the section this symbol belongs to."""
        return self.entry.st_shndx


class ElfReader:
    """Query interface over an ELF64 relocatable object.

    Usage:
        reader = ElfReader.load(Path("nv-kernel.o_binary"))

        rodata = reader.get_section_content(".rodata")
        rela = reader.find_section(".rela.rodata")
        symbols = reader.symbols()
    """

    def __init__(
        self,
        data: bytes | bytearray,
        path: Path | None = None,
    ):
        """Initialize with binary data.

        Prefer using ElfReader.load() for most use cases.

        Args:
            data: ELF binary data
            path: Original file path (for error messages)

        Raises:
            ElfFormatError: If the header or section table cannot be parsed
        """
        self._data = data
        self._path = path

        try:
            self._ehdr = ElfHeader.from_bytes(data)
            self._shdrs = self._parse_section_headers()
        except ValueError as e:
            raise ElfFormatError(f"Failed to parse ELF {self._describe()}: {e}") from e
        self._section_names = self._parse_section_names()
        self._symbols: list[SymbolInfo] | None = None

    @classmethod
    def load(cls, path: Path) -> "ElfReader":
        """Load an ELF object from file.

        Args:
            path: Path to ELF object

        Returns:
            ElfReader instance
        """
        return cls(path.read_bytes(), path)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def data(self) -> bytes | bytearray:
        """Access to raw binary data."""
        return self._data

    @property
    def ehdr(self) -> ElfHeader:
        """ELF header."""
        return self._ehdr

    @property
    def path(self) -> Path | None:
        """Path the object was loaded from, if any."""
        return self._path

    # =========================================================================
    # Parsing (internal)
    # =========================================================================

    def _describe(self) -> str:
        return str(self._path) if self._path is not None else "<memory>"

    def _parse_section_headers(self) -> list[SectionHeader]:
        """Parse all section headers."""
        if self._ehdr.e_shnum and self._ehdr.e_shentsize != ELF64_SHDR_SIZE:
            raise ValueError(
                f"Unexpected section header size: {self._ehdr.e_shentsize} "
                f"(expected {ELF64_SHDR_SIZE})"
            )
        shdrs = []
        for i in range(self._ehdr.e_shnum):
            offset = self._ehdr.e_shoff + i * self._ehdr.e_shentsize
            shdrs.append(SectionHeader.from_bytes(self._data, offset))
        return shdrs

    def _parse_section_names(self) -> dict[int, str]:
        """Parse section name string table."""
        names: dict[int, str] = {}
        if self._ehdr.e_shstrndx >= len(self._shdrs):
            return names

        shstrtab = self._shdrs[self._ehdr.e_shstrndx]
        for i, shdr in enumerate(self._shdrs):
            names[i] = get_string(self._data, shstrtab.sh_offset, shdr.sh_name)
        return names

    def _parse_symbols(self) -> list[SymbolInfo]:
        symtab = None
        for section in self.iter_sections():
            if section.header.sh_type == SHT_SYMTAB:
                symtab = section
                break
        if symtab is None:
            raise ElfFormatError(f"No symbol table in {self._describe()}")

        if symtab.size % SymbolEntry.SIZE != 0:
            raise ElfFormatError(
                f"Unexpected length for {symtab.name}: 0x{symtab.size:x}"
            )
        if symtab.header.end_offset > len(self._data):
            raise ElfFormatError(f"Symbol table {symtab.name} extends past end of file")

        strtab = self.get_section_by_index(symtab.header.sh_link)
        if strtab is None:
            raise ElfFormatError(
                f"Symbol table {symtab.name} links to missing string table "
                f"{symtab.header.sh_link}"
            )

        symbols = []
        count = symtab.size // SymbolEntry.SIZE
        # Index 0 is the reserved null symbol and is not returned.
        for i in range(1, count):
            entry = SymbolEntry.from_bytes(
                self._data, symtab.offset + i * SymbolEntry.SIZE
            )
            name = get_string(self._data, strtab.offset, entry.st_name)
            symbols.append(SymbolInfo(index=i, name=name, entry=entry))
        return symbols

    # =========================================================================
    # Query Operations
    # =========================================================================

    def find_section(self, name: str) -> SectionInfo | None:
        """Find a section by name.

        Args:
            name: Section name (e.g., ".rodata")

        Returns:
            SectionInfo if found, None otherwise
        """
        for idx, shdr in enumerate(self._shdrs):
            if self._section_names.get(idx) == name:
                return SectionInfo(
                    index=idx,
                    name=name,
                    header=shdr,
                )
        return None

    def get_section_by_index(self, index: int) -> SectionInfo | None:
        """Get section by index."""
        if 0 <= index < len(self._shdrs):
            return SectionInfo(
                index=index,
                name=self._section_names.get(index, ""),
                header=self._shdrs[index],
            )
        return None

    def iter_sections(self) -> Iterator[SectionInfo]:
        """Iterate over all sections."""
        for idx, shdr in enumerate(self._shdrs):
            yield SectionInfo(
                index=idx,
                name=self._section_names.get(idx, ""),
                header=shdr,
            )

    def get_section_content(self, section: SectionInfo | str) -> bytes:
        """Get content of a section.

        Args:
            section: SectionInfo or section name

        Returns:
            Section content bytes

        Raises:
            ElfFormatError: If section not found, is NOBITS, or is truncated
        """
        if isinstance(section, str):
            info = self.find_section(section)
            if info is None:
                raise ElfFormatError(
                    f"Section not found: {section} in {self._describe()}"
                )
            section = info

        if section.header.is_nobits:
            raise ElfFormatError(f"Section {section.name} is NOBITS (no file content)")

        start = section.header.sh_offset
        end = section.header.end_offset
        if end > len(self._data):
            raise ElfFormatError(
                f"Section {section.name} extends past end of file: "
                f"0x{end:x} > 0x{len(self._data):x}"
            )
        return bytes(self._data[start:end])

    def symbols(self) -> list[SymbolInfo]:
        """Return the symbol table, excluding the null symbol.

        ELF symbol index n is found at list position n - 1.

        Raises:
            ElfFormatError: If there is no usable symbol table
        """
        if self._symbols is None:
            self._symbols = self._parse_symbols()
        return self._symbols
