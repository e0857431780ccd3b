"""
ELF type definitions for 64-bit little-endian relocatable objects.

Only the structures needed to walk section headers, the symbol table and
RELA records are defined here. Each struct carries its own format string so
parsing and serialization stay next to the field layout.
"""

import struct
from dataclasses import dataclass
from typing import ClassVar

# =============================================================================
# Constants
# =============================================================================

ELF_MAGIC = b"\x7fELF"

ELFCLASS64 = 2
ELFDATA2LSB = 1

ELF64_EHDR_SIZE = 64
ELF64_SHDR_SIZE = 64
ELF64_SYM_SIZE = 24
ELF64_RELA_SIZE = 24

# ELF type (e_type)
ET_NONE = 0
ET_REL = 1
ET_EXEC = 2
ET_DYN = 3

# Section header types (sh_type)
SHT_NULL = 0
SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHT_RELA = 4
SHT_NOBITS = 8

# Section flags (sh_flags)
SHF_ALLOC = 0x2
SHF_INFO_LINK = 0x40

# Special section indices (st_shndx)
SHN_UNDEF = 0
SHN_LORESERVE = 0xFF00
SHN_ABS = 0xFFF1
SHN_COMMON = 0xFFF2

# Symbol types (low nibble of st_info)
STT_NOTYPE = 0
STT_OBJECT = 1
STT_FUNC = 2
STT_SECTION = 3
STT_FILE = 4

# Symbol bindings (high nibble of st_info)
STB_LOCAL = 0
STB_GLOBAL = 1


# =============================================================================
# ELF Structures
# =============================================================================


@dataclass
class ElfHeader:
    """ELF64 file header (Elf64_Ehdr)."""

    e_ident: bytes  # 16 bytes: magic, class, endianness, version, OS/ABI, padding
    e_type: int  # Object file type (ET_*)
    e_machine: int  # Architecture (EM_*)
    e_version: int  # ELF version
    e_entry: int  # Entry point virtual address
    e_phoff: int  # Program header table file offset
    e_shoff: int  # Section header table file offset
    e_flags: int  # Processor-specific flags
    e_ehsize: int  # ELF header size
    e_phentsize: int  # Program header entry size
    e_phnum: int  # Number of program headers
    e_shentsize: int  # Section header entry size
    e_shnum: int  # Number of section headers
    e_shstrndx: int  # Section name string table index

    STRUCT_FMT: ClassVar[str] = "<16sHHIQQQIHHHHHH"

    @classmethod
    def from_bytes(cls, data: bytes | bytearray) -> "ElfHeader":
        """Parse ELF header from binary data.

        Args:
            data: At least 64 bytes of ELF header data

        Returns:
            Parsed ElfHeader

        Raises:
            ValueError: If not a valid 64-bit little-endian ELF
        """
        if len(data) < ELF64_EHDR_SIZE:
            raise ValueError(
                f"Data too short for ELF header: {len(data)} < {ELF64_EHDR_SIZE}"
            )

        if data[:4] != ELF_MAGIC:
            raise ValueError("Not an ELF file (bad magic)")

        if data[4] != ELFCLASS64:
            raise ValueError("Only 64-bit ELF supported (ELFCLASS64)")

        if data[5] != ELFDATA2LSB:
            raise ValueError("Only little-endian ELF supported (ELFDATA2LSB)")

        fields = struct.unpack_from(cls.STRUCT_FMT, data, 0)
        return cls(*fields)

    def to_bytes(self) -> bytes:
        """Serialize ELF header to binary data."""
        return struct.pack(
            self.STRUCT_FMT,
            self.e_ident,
            self.e_type,
            self.e_machine,
            self.e_version,
            self.e_entry,
            self.e_phoff,
            self.e_shoff,
            self.e_flags,
            self.e_ehsize,
            self.e_phentsize,
            self.e_phnum,
            self.e_shentsize,
            self.e_shnum,
            self.e_shstrndx,
        )


@dataclass
class SectionHeader:
    """ELF64 section header (Elf64_Shdr)."""

    sh_name: int  # Offset into section name string table
    sh_type: int  # Section type (SHT_*)
    sh_flags: int  # Section flags (SHF_*)
    sh_addr: int  # Virtual address (if SHF_ALLOC set)
    sh_offset: int  # File offset
    sh_size: int  # Section size
    sh_link: int  # Link to another section (section-type dependent)
    sh_info: int  # Additional info (section-type dependent)
    sh_addralign: int  # Alignment (power of 2, 0 or 1 means none)
    sh_entsize: int  # Entry size if section holds table

    STRUCT_FMT: ClassVar[str] = "<IIQQQQIIQQ"

    @classmethod
    def from_bytes(cls, data: bytes | bytearray, offset: int = 0) -> "SectionHeader":
        """Parse section header from binary data at offset."""
        if len(data) < offset + ELF64_SHDR_SIZE:
            raise ValueError("Data too short for section header")
        fields = struct.unpack_from(cls.STRUCT_FMT, data, offset)
        return cls(*fields)

    def to_bytes(self) -> bytes:
        """Serialize section header to binary data."""
        return struct.pack(
            self.STRUCT_FMT,
            self.sh_name,
            self.sh_type,
            self.sh_flags,
            self.sh_addr,
            self.sh_offset,
            self.sh_size,
            self.sh_link,
            self.sh_info,
            self.sh_addralign,
            self.sh_entsize,
        )

    @property
    def end_offset(self) -> int:
        """File offset of end of section content."""
        return self.sh_offset + self.sh_size

    @property
    def is_nobits(self) -> bool:
        """Check if this section has no file content (like BSS)."""
        return self.sh_type == SHT_NOBITS


@dataclass
class SymbolEntry:
    """ELF64 symbol table entry (Elf64_Sym).

    For STT_SECTION symbols, st_shndx is the index of the section the
    symbol stands for, which is what relocations against "the section
    itself" resolve through.
    """

    st_name: int  # Offset into the linked string table
    st_info: int  # Type (low nibble) and binding (high nibble)
    st_other: int  # Visibility
    st_shndx: int  # Owning section index (or SHN_*)
    st_value: int  # Value (offset within section for relocatables)
    st_size: int  # Size of the object

    STRUCT_FMT: ClassVar[str] = "<IBBHQQ"
    SIZE: ClassVar[int] = ELF64_SYM_SIZE

    @classmethod
    def from_bytes(cls, data: bytes | bytearray, offset: int = 0) -> "SymbolEntry":
        """Parse symbol entry from binary data at offset."""
        if len(data) < offset + cls.SIZE:
            raise ValueError("Data too short for symbol entry")
        fields = struct.unpack_from(cls.STRUCT_FMT, data, offset)
        return cls(*fields)

    def to_bytes(self) -> bytes:
        """Serialize symbol entry to binary data."""
        return struct.pack(
            self.STRUCT_FMT,
            self.st_name,
            self.st_info,
            self.st_other,
            self.st_shndx,
            self.st_value,
            self.st_size,
        )

    @property
    def st_type(self) -> int:
        """Extract symbol type (STT_*) from st_info."""
        return self.st_info & 0xF

    @property
    def st_bind(self) -> int:
        """Extract symbol binding (STB_*) from st_info."""
        return self.st_info >> 4

    @staticmethod
    def make_info(bind: int, type_: int) -> int:
        """Create st_info value from binding and type."""
        return ((bind & 0xF) << 4) | (type_ & 0xF)


@dataclass
class RelaEntry:
    """ELF64 relocation entry with addend (Elf64_Rela).

    Used in SHT_RELA sections for relocations that need an explicit addend.
    """

    r_offset: int  # Address to apply relocation
    r_info: int  # Symbol index and relocation type
    r_addend: int  # Addend (signed)

    STRUCT_FMT: ClassVar[str] = "<QQq"  # Note: r_addend is signed (q not Q)
    SIZE: ClassVar[int] = ELF64_RELA_SIZE

    @classmethod
    def from_bytes(cls, data: bytes | bytearray, offset: int = 0) -> "RelaEntry":
        """Parse RELA entry from binary data at offset."""
        if len(data) < offset + cls.SIZE:
            raise ValueError("Data too short for RELA entry")
        fields = struct.unpack_from(cls.STRUCT_FMT, data, offset)
        return cls(*fields)

    def to_bytes(self) -> bytes:
        """Serialize RELA entry to binary data."""
        return struct.pack(self.STRUCT_FMT, self.r_offset, self.r_info, self.r_addend)

    @property
    def r_type(self) -> int:
        """Extract relocation type from r_info."""
        return self.r_info & 0xFFFFFFFF

    @property
    def r_sym(self) -> int:
        """Extract symbol table index from r_info."""
        return self.r_info >> 32

    @staticmethod
    def make_info(sym: int, type_: int) -> int:
        """Create r_info value from symbol index and type."""
        return (sym << 32) | (type_ & 0xFFFFFFFF)


# =============================================================================
# Helper Functions
# =============================================================================


def get_string(data: bytes | bytearray, strtab_offset: int, index: int) -> str:
    """Read a NUL-terminated string from a string table.

    Args:
        data: Full ELF binary data
        strtab_offset: File offset of the string table section
        index: Offset of the string within the table

    Returns:
        The string, or "" if it runs off the end of the data
    """
    start = strtab_offset + index
    if start >= len(data):
        return ""
    end = data.find(b"\x00", start)
    if end == -1:
        return ""
    return data[start:end].decode("ascii", errors="ignore")
