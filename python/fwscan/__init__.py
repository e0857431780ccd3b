"""
fwscan: Recover embedded firmware from driver object files.

This package finds headerless deflate streams packed into an ELF object's
read-only data, using the relocations against that section to guess where
each stream starts. Inflated payloads are split into named files when they
are netlist archives and written whole otherwise.

    from fwscan import scan_object_file, write_manifest

    report = scan_object_file(input_path, output_dir)
    write_manifest(report, output_dir / "manifest.msgpack")

The individual stages are available for finer control:

    from fwscan import parse_relocations, segment_offsets, inflate_raw
    from fwscan import PayloadProcessor
"""

from .archive import (
    ArchiveHeader,
    ArchiveEntry,
    ArchiveBoundsError,
    parse_archive,
    build_archive,
    ARCHIVE_MAGIC,
    MAX_ARCHIVE_ENTRIES,
    MIN_ARCHIVE_SIZE,
)
from .elf import ElfReader, ElfFormatError
from .inflate import inflate_raw, try_inflate, InflateError
from .manifest import write_manifest, read_manifest, ManifestError
from .names import SECTION_NAMES, section_name
from .processor import PayloadProcessor, ProcessResult, MIN_WHOLE_SIZE
from .relocations import parse_relocations
from .scanner import ScanConfig, ScanReport, scan_object_file, scan_section
from .segments import Segment, segment_offsets, MIN_SEGMENT_SIZE

__all__ = [
    # Pipeline
    "scan_object_file",
    "scan_section",
    "ScanConfig",
    "ScanReport",
    # Stages
    "parse_relocations",
    "segment_offsets",
    "Segment",
    "inflate_raw",
    "try_inflate",
    "PayloadProcessor",
    "ProcessResult",
    # Archive format
    "ArchiveHeader",
    "ArchiveEntry",
    "parse_archive",
    "build_archive",
    "SECTION_NAMES",
    "section_name",
    # Manifest
    "write_manifest",
    "read_manifest",
    # Errors
    "ElfFormatError",
    "ArchiveBoundsError",
    "InflateError",
    "ManifestError",
    # Thresholds
    "ARCHIVE_MAGIC",
    "MAX_ARCHIVE_ENTRIES",
    "MIN_ARCHIVE_SIZE",
    "MIN_SEGMENT_SIZE",
    "MIN_WHOLE_SIZE",
    # Object file access
    "ElfReader",
]
