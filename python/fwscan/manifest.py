"""
Scan manifest serialization.

A manifest records what a scan recovered and where each item came from in
the scanned section, so results can be compared across driver versions
without re-running the scan. It is a MessagePack map:

    {
        "format_version": 1,
        "input": "nv-kernel.o_binary",
        "section": ".rodata",
        "section_size": 12345678,
        "offsets_found": 4321,
        "segments": 1234,
        "decoded": 56,
        "dropped": 7,
        "items": [
            {"kind": "archive", "index": 0, "path": "archive_00",
             "start": 4096, "end": 40960, "size": 65536,
             "entries": [{"id": 0, "name": "fecs_data",
                          "offset": 104, "length": 2048}, ...]},
            {"kind": "whole", "index": 0, "path": "whole_000",
             "start": 40960, "end": 81920, "size": 131072},
        ],
    }
"""

from pathlib import Path

import msgpack

from .processor import KIND_ARCHIVE
from .scanner import ScanReport

MANIFEST_FORMAT_VERSION = 1


class ManifestError(RuntimeError):
    """Raised when a manifest file cannot be parsed."""

    pass


def report_to_manifest(report: ScanReport) -> dict:
    """Convert a ScanReport into a plain manifest dictionary."""
    items = []
    for item in report.items:
        result = item.result
        record = {
            "kind": result.kind,
            "index": result.index,
            "path": result.path.name,
            "start": item.segment.start,
            "end": item.segment.end,
            "size": result.size,
        }
        if result.kind == KIND_ARCHIVE:
            record["entries"] = [
                {
                    "id": e.entry.id,
                    "name": e.name,
                    "offset": e.entry.offset,
                    "length": e.entry.length,
                }
                for e in result.entries
            ]
        items.append(record)

    return {
        "format_version": MANIFEST_FORMAT_VERSION,
        "input": str(report.input_path) if report.input_path is not None else None,
        "section": report.section,
        "section_size": report.section_size,
        "offsets_found": report.offsets_found,
        "segments": report.segments,
        "decoded": report.decoded,
        "dropped": report.dropped,
        "items": items,
    }


def write_manifest(report: ScanReport, path: Path) -> None:
    """Serialize a scan report to a MessagePack manifest file."""
    manifest = report_to_manifest(report)
    path.write_bytes(msgpack.packb(manifest, use_bin_type=True))


def read_manifest(path: Path) -> dict:
    """Read a manifest written by write_manifest().

    Raises:
        ManifestError: If the file is not a valid manifest
    """
    content = path.read_bytes()
    try:
        manifest = msgpack.unpackb(content, raw=False, strict_map_key=True)
    except msgpack.exceptions.UnpackException as e:
        raise ManifestError(f"Failed to parse manifest {path}: {e}") from e
    except ValueError as e:
        raise ManifestError(f"Failed to parse manifest {path}: {e}") from e

    if not isinstance(manifest, dict):
        raise ManifestError(
            f"Invalid manifest format in {path}: expected dict, "
            f"got {type(manifest).__name__}"
        )
    version = manifest.get("format_version")
    if version != MANIFEST_FORMAT_VERSION:
        raise ManifestError(f"Unsupported manifest version in {path}: {version!r}")
    return manifest
