"""
ELF object reading package for fwscan.

This package provides the read-only ELF view the scanner works from:
- types: ELF64 struct definitions (header, sections, symbols, RELA)
- reader: ElfReader for section, content and symbol table queries
"""

from .reader import (
    ElfReader,
    ElfFormatError,
    SectionInfo,
    SymbolInfo,
)
from .types import (
    ElfHeader,
    SectionHeader,
    SymbolEntry,
    RelaEntry,
    # Constants
    ELF_MAGIC,
    ET_REL,
    # Section header types
    SHT_NULL,
    SHT_PROGBITS,
    SHT_SYMTAB,
    SHT_STRTAB,
    SHT_RELA,
    SHT_NOBITS,
    # Symbol types
    STT_NOTYPE,
    STT_OBJECT,
    STT_FUNC,
    STT_SECTION,
    STT_FILE,
)

__all__ = [
    # Reader
    "ElfReader",
    "ElfFormatError",
    "SectionInfo",
    "SymbolInfo",
    # Structs
    "ElfHeader",
    "SectionHeader",
    "SymbolEntry",
    "RelaEntry",
    # Constants
    "ELF_MAGIC",
    "ET_REL",
    # Section header types
    "SHT_NULL",
    "SHT_PROGBITS",
    "SHT_SYMTAB",
    "SHT_STRTAB",
    "SHT_RELA",
    "SHT_NOBITS",
    # Symbol types
    "STT_NOTYPE",
    "STT_OBJECT",
    "STT_FUNC",
    "STT_SECTION",
    "STT_FILE",
]
