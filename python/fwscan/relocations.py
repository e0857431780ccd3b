"""
Relocation-driven payload start discovery.

Firmware blobs in a driver's read-only data are referenced from code and
tables through relocations against the section symbol of that data section.
The addend of each such relocation is the offset of something the driver
points at, which makes the set of addends a good guess at where the packed
payloads begin.
"""

import logging

from .elf import ElfReader, ElfFormatError, RelaEntry, STT_SECTION

logger = logging.getLogger(__name__)


def parse_relocations(reader: ElfReader, rel_section: str, section: str) -> list[int]:
    """Collect addends of relocations that target a section.

    Only relocations whose symbol is the STT_SECTION symbol of `section` are
    kept. Offsets are returned in record order, duplicates included.

    Args:
        reader: Parsed object file
        rel_section: Name of the RELA section to read (e.g. ".rela.rodata")
        section: Name of the section the relocations must point into

    Returns:
        List of signed byte offsets into `section`

    Raises:
        ElfFormatError: If the RELA section is missing or malformed, or a
            record references a symbol or section that does not exist
    """
    rels = reader.get_section_content(rel_section)
    if len(rels) % RelaEntry.SIZE != 0:
        raise ElfFormatError(f"Unexpected length for {rel_section}: 0x{len(rels):x}")

    symbols = reader.symbols()

    offsets = []
    for pos in range(0, len(rels), RelaEntry.SIZE):
        rela = RelaEntry.from_bytes(rels, pos)

        sym_no = rela.r_sym
        if sym_no == 0 or sym_no > len(symbols):
            raise ElfFormatError(
                f"Relocation at 0x{pos:x} in {rel_section} references "
                f"invalid symbol {sym_no}"
            )
        sym = symbols[sym_no - 1]

        if sym.type != STT_SECTION:
            continue

        owner = reader.get_section_by_index(sym.section_index)
        if owner is None:
            raise ElfFormatError(
                f"Section symbol {sym_no} references invalid section "
                f"{sym.section_index}"
            )
        if owner.name != section:
            # We're only looking for relocations into the target section
            continue

        offsets.append(rela.r_addend)

    logger.debug(
        "%s: %d of %d relocations point into %s",
        rel_section,
        len(offsets),
        len(rels) // RelaEntry.SIZE,
        section,
    )
    return offsets
