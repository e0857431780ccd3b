"""Netlist archive container format.

A netlist archive is a small table of contents followed by the entry data:

  Offset | Size     | Field
  -------|----------|------
  0x00   | 4        | Magic (int32, always 0)
  0x04   | 4        | Entry count N (int32)
  0x08   | 12 * N   | Entries: id, length, offset (int32 each)
  ...    |          | Entry data, addressed from the start of the archive

All fields are little-endian. There is no other signature, so a zero magic
alone matches a lot of unrelated data. The thresholds below were tuned
against known driver blobs to keep those false positives out.
"""

import struct
from dataclasses import dataclass
from typing import ClassVar

ARCHIVE_MAGIC = 0
MAX_ARCHIVE_ENTRIES = 64
MIN_ARCHIVE_SIZE = 32768


class ArchiveBoundsError(RuntimeError):
    """Raised when an accepted archive entry points outside its payload.

    Entries have already been validated by parse_archive() at this point,
    so this indicates a broken invariant rather than unusual input.
    """

    pass


@dataclass
class ArchiveHeader:
    """Archive table-of-contents header."""

    magic: int
    count: int

    STRUCT_FMT: ClassVar[str] = "<ii"
    SIZE: ClassVar[int] = 8

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "ArchiveHeader":
        """Parse archive header from binary data at offset."""
        if len(data) < offset + cls.SIZE:
            raise ValueError("Data too short for archive header")
        return cls(*struct.unpack_from(cls.STRUCT_FMT, data, offset))

    def to_bytes(self) -> bytes:
        """Serialize archive header to binary data."""
        return struct.pack(self.STRUCT_FMT, self.magic, self.count)


@dataclass
class ArchiveEntry:
    """One archive table-of-contents entry."""

    id: int
    length: int
    offset: int

    STRUCT_FMT: ClassVar[str] = "<iii"
    SIZE: ClassVar[int] = 12

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "ArchiveEntry":
        """Parse archive entry from binary data at offset."""
        if len(data) < offset + cls.SIZE:
            raise ValueError("Data too short for archive entry")
        return cls(*struct.unpack_from(cls.STRUCT_FMT, data, offset))

    def to_bytes(self) -> bytes:
        """Serialize archive entry to binary data."""
        return struct.pack(self.STRUCT_FMT, self.id, self.length, self.offset)

    @property
    def end(self) -> int:
        """Offset one past the last byte of entry data."""
        return self.offset + self.length

    def extract(self, payload: bytes) -> bytes:
        """Slice this entry's data out of the archive payload.

        Raises:
            ArchiveBoundsError: If the entry does not fit in the payload
        """
        if self.length < 0 or self.end > len(payload):
            raise ArchiveBoundsError(
                f"Archive entry {self.id} [0x{self.offset:x}, +0x{self.length:x}) "
                f"out of bounds for {len(payload)}-byte payload"
            )
        return payload[self.offset : self.end]


def table_size(count: int) -> int:
    """Size of the header plus `count` entries."""
    return ArchiveHeader.SIZE + ArchiveEntry.SIZE * count


def parse_archive(
    payload: bytes,
    *,
    min_size: int = MIN_ARCHIVE_SIZE,
    max_entries: int = MAX_ARCHIVE_ENTRIES,
) -> list[ArchiveEntry] | None:
    """Try to read a payload as a netlist archive.

    The payload is accepted only if the magic is zero, the entry count is in
    (0, max_entries], the payload is at least `min_size` bytes, and every
    entry is present with a data offset past the entry table. Any single
    violation rejects the whole payload.

    Args:
        payload: Decompressed payload
        min_size: Minimum payload size for an archive
        max_entries: Maximum plausible entry count

    Returns:
        Entry list in table order, or None if this is not an archive
    """
    if len(payload) < min_size:
        return None

    try:
        header = ArchiveHeader.from_bytes(payload)
    except ValueError:
        return None
    if header.magic != ARCHIVE_MAGIC or not 0 < header.count <= max_entries:
        return None

    min_offset = table_size(header.count)
    entries = []
    for i in range(header.count):
        pos = ArchiveHeader.SIZE + i * ArchiveEntry.SIZE
        try:
            entry = ArchiveEntry.from_bytes(payload, pos)
        except ValueError:
            return None
        if entry.offset < min_offset:
            return None
        entries.append(entry)
    return entries


def build_archive(items: list[tuple[int, bytes]], pad_to: int = 0) -> bytes:
    """Assemble an archive payload from (id, data) pairs.

    Entry data is laid out back to back after the entry table. The result
    is zero-padded to at least `pad_to` bytes.
    """
    offset = table_size(len(items))
    table = [ArchiveHeader(ARCHIVE_MAGIC, len(items)).to_bytes()]
    blobs = []
    for entry_id, data in items:
        table.append(ArchiveEntry(entry_id, len(data), offset).to_bytes())
        blobs.append(data)
        offset += len(data)

    payload = b"".join(table + blobs)
    if len(payload) < pad_to:
        payload += b"\x00" * (pad_to - len(payload))
    return payload
