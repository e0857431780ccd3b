"""
Classification and output of decompressed payloads.

Each payload is either a netlist archive, split into one file per entry
under archive_<NN>/, or an opaque blob written whole as whole_<NNN>. Small
opaque payloads are dropped: without a compression header, short runs of
data inflate "successfully" far too often to be worth keeping.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .archive import (
    ArchiveEntry,
    parse_archive,
    MIN_ARCHIVE_SIZE,
    MAX_ARCHIVE_ENTRIES,
)
from .names import section_name

logger = logging.getLogger(__name__)

MIN_WHOLE_SIZE = 128

KIND_ARCHIVE = "archive"
KIND_WHOLE = "whole"


@dataclass
class ExtractedEntry:
    """An archive entry that was written to disk."""

    entry: ArchiveEntry
    name: str
    path: Path


@dataclass
class ProcessResult:
    """What was written for one payload."""

    kind: str  # KIND_ARCHIVE or KIND_WHOLE
    index: int  # archive_<index> or whole_<index>
    path: Path  # Archive directory or whole-blob file
    size: int  # Decompressed payload size
    entries: list[ExtractedEntry] = field(default_factory=list)


class PayloadProcessor:
    """Writes decompressed payloads into a destination directory.

    The processor owns the archive and whole-blob counters, so output names
    are unique for the lifetime of the instance. Use one instance per scan.

    Usage:
        processor = PayloadProcessor(Path("out"))
        for payload in payloads:
            processor.process(payload)
    """

    def __init__(
        self,
        dest_dir: Path,
        *,
        min_archive_size: int = MIN_ARCHIVE_SIZE,
        max_archive_entries: int = MAX_ARCHIVE_ENTRIES,
        min_whole_size: int = MIN_WHOLE_SIZE,
    ):
        self.dest_dir = dest_dir
        self.min_archive_size = min_archive_size
        self.max_archive_entries = max_archive_entries
        self.min_whole_size = min_whole_size
        self.archive_counter = 0
        self.whole_counter = 0

    def process(self, payload: bytes) -> ProcessResult | None:
        """Classify one payload and write it out.

        Args:
            payload: Decompressed payload

        Returns:
            ProcessResult describing the output, or None if dropped

        Raises:
            ArchiveBoundsError: If an accepted archive entry is out of bounds
            OSError: If output cannot be written
        """
        entries = parse_archive(
            payload,
            min_size=self.min_archive_size,
            max_entries=self.max_archive_entries,
        )
        if entries is not None:
            return self._write_archive(payload, entries)
        return self._write_whole(payload)

    def _write_archive(
        self, payload: bytes, entries: list[ArchiveEntry]
    ) -> ProcessResult:
        index = self.archive_counter
        archive_dir = self.dest_dir / f"archive_{index:02d}"
        archive_dir.mkdir(exist_ok=True)

        extracted = []
        for entry in entries:
            name = section_name(entry.id)
            path = archive_dir / name
            path.write_bytes(entry.extract(payload))
            extracted.append(ExtractedEntry(entry=entry, name=name, path=path))

        self.archive_counter += 1
        logger.debug(
            "%s: archive with %d entries (%d bytes)",
            archive_dir.name,
            len(entries),
            len(payload),
        )
        return ProcessResult(
            kind=KIND_ARCHIVE,
            index=index,
            path=archive_dir,
            size=len(payload),
            entries=extracted,
        )

    def _write_whole(self, payload: bytes) -> ProcessResult | None:
        if len(payload) < self.min_whole_size:
            return None

        index = self.whole_counter
        path = self.dest_dir / f"whole_{index:03d}"
        path.write_bytes(payload)

        self.whole_counter += 1
        logger.debug("%s: %d bytes", path.name, len(payload))
        return ProcessResult(kind=KIND_WHOLE, index=index, path=path, size=len(payload))
