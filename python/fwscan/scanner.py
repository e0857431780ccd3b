"""
Firmware scan pipeline.

Premise: a driver object keeps its firmware images and netlist archives in
its read-only data as back-to-back raw deflate streams with no headers. The
relocations against that section tell us where referenced data starts. We
assume the section is reasonably well packed and try to inflate whatever
lies between one referenced offset and the next.

Usage:
    from fwscan import scan_object_file

    report = scan_object_file(Path("nv-kernel.o_binary"), Path("out"))
    print(f"{report.archives} archives, {report.wholes} blobs")
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .archive import MIN_ARCHIVE_SIZE, MAX_ARCHIVE_ENTRIES
from .elf import ElfReader
from .inflate import try_inflate
from .processor import (
    PayloadProcessor,
    ProcessResult,
    KIND_ARCHIVE,
    KIND_WHOLE,
    MIN_WHOLE_SIZE,
)
from .relocations import parse_relocations
from .segments import Segment, segment_offsets, MIN_SEGMENT_SIZE

logger = logging.getLogger(__name__)

DEFAULT_SECTION = ".rodata"


@dataclass(frozen=True)
class ScanConfig:
    """Section names and heuristic thresholds for a scan.

    The thresholds were tuned empirically against known driver blobs; the
    defaults should be left alone unless a new blob layout calls for it.
    """

    section: str = DEFAULT_SECTION
    rel_section: str | None = None  # Defaults to ".rela" + section
    min_segment_size: int = MIN_SEGMENT_SIZE
    min_archive_size: int = MIN_ARCHIVE_SIZE
    max_archive_entries: int = MAX_ARCHIVE_ENTRIES
    min_whole_size: int = MIN_WHOLE_SIZE

    @property
    def relocation_section(self) -> str:
        """Name of the RELA section holding relocations for `section`."""
        if self.rel_section is not None:
            return self.rel_section
        return f".rela{self.section}"

    def make_processor(self, dest_dir: Path) -> PayloadProcessor:
        """Create a PayloadProcessor using these thresholds."""
        return PayloadProcessor(
            dest_dir,
            min_archive_size=self.min_archive_size,
            max_archive_entries=self.max_archive_entries,
            min_whole_size=self.min_whole_size,
        )


@dataclass
class RecoveredItem:
    """A written result together with the segment it was inflated from."""

    segment: Segment
    result: ProcessResult


@dataclass
class ScanReport:
    """Summary of one scan."""

    input_path: Path | None
    section: str
    section_size: int
    offsets_found: int = 0
    segments: int = 0
    decoded: int = 0
    dropped: int = 0
    items: list[RecoveredItem] = field(default_factory=list)

    @property
    def archives(self) -> int:
        """Number of archive directories written."""
        return sum(1 for item in self.items if item.result.kind == KIND_ARCHIVE)

    @property
    def wholes(self) -> int:
        """Number of whole blobs written."""
        return sum(1 for item in self.items if item.result.kind == KIND_WHOLE)


def scan_section(
    data: bytes,
    offsets: list[int],
    dest_dir: Path,
    config: ScanConfig | None = None,
    *,
    verbose: bool = False,
    report: ScanReport | None = None,
) -> ScanReport:
    """Segment, inflate and classify the payloads of one section.

    Args:
        data: Section content
        offsets: Candidate payload start offsets (unsorted, duplicates allowed)
        dest_dir: Existing output directory
        config: Scan thresholds (defaults used if None)
        verbose: Print progress information
        report: Report to fill in (a new one is created if None)

    Returns:
        ScanReport for the section

    Raises:
        ArchiveBoundsError: If an accepted archive entry is out of bounds
        OSError: If output cannot be written
    """
    if config is None:
        config = ScanConfig()
    if report is None:
        report = ScanReport(
            input_path=None,
            section=config.section,
            section_size=len(data),
            offsets_found=len(offsets),
        )

    segments = segment_offsets(offsets, len(data), config.min_segment_size)
    report.segments = len(segments)
    if verbose:
        print(f"  {len(segments)} candidate segment(s) in {config.section}")

    processor = config.make_processor(dest_dir)
    for segment in segments:
        payload = try_inflate(segment.slice(data))
        if payload is None:
            continue
        report.decoded += 1

        result = processor.process(payload)
        if result is None:
            logger.debug(
                "Dropped %d-byte payload from [0x%x, 0x%x)",
                len(payload),
                segment.start,
                segment.end,
            )
            report.dropped += 1
            continue

        report.items.append(RecoveredItem(segment=segment, result=result))
        if verbose:
            print(
                f"  [0x{segment.start:x}, 0x{segment.end:x}) -> "
                f"{result.path.name} ({result.size:,} bytes)"
            )

    return report


def scan_object_file(
    input_path: Path,
    dest_dir: Path,
    config: ScanConfig | None = None,
    *,
    verbose: bool = False,
) -> ScanReport:
    """Recover firmware payloads from an object file.

    Args:
        input_path: Path to the ELF relocatable object
        dest_dir: Existing output directory
        config: Section names and thresholds (defaults used if None)
        verbose: Print progress information

    Returns:
        ScanReport describing everything that was written

    Raises:
        ElfFormatError: If the object file lacks the expected structure
        ArchiveBoundsError: If an accepted archive entry is out of bounds
        OSError: If the input cannot be read or output cannot be written
    """
    if config is None:
        config = ScanConfig()

    reader = ElfReader.load(input_path)

    # The data actually resides in the target section
    data = reader.get_section_content(config.section)

    # The relocations for that section tell us where potentially
    # interesting data might start.
    offsets = parse_relocations(reader, config.relocation_section, config.section)

    if verbose:
        print(f"Scanning: {input_path}")
        print(
            f"  {config.section}: {len(data):,} bytes, "
            f"{len(offsets)} relocation offset(s)"
        )

    report = ScanReport(
        input_path=input_path,
        section=config.section,
        section_size=len(data),
        offsets_found=len(offsets),
    )
    scan_section(data, offsets, dest_dir, config, verbose=verbose, report=report)

    if verbose:
        print("\nScan complete:")
        print(f"  Segments decoded: {report.decoded}/{report.segments}")
        print(f"  Archives:         {report.archives}")
        print(f"  Whole blobs:      {report.wholes}")
        print(f"  Dropped:          {report.dropped}")

    return report
