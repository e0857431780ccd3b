#!/usr/bin/env python3
"""
Firmware recovery CLI tool.

Scans an ELF object's read-only data for headerless deflate streams located
through its relocations, and writes recovered archives and blobs to an
output directory.

Usage:
    python -m fwscan.tools.scan_firmware <object> <outdir> [--verbose]

Output:
    <outdir>/archive_<NN>/<name>   one file per netlist archive entry
    <outdir>/whole_<NNN>           one file per other recovered blob
"""

import argparse
import logging
import sys
from pathlib import Path

from fwscan.archive import ArchiveBoundsError
from fwscan.elf import ElfFormatError
from fwscan.manifest import ManifestError, write_manifest
from fwscan.scanner import DEFAULT_SECTION, ScanConfig, scan_object_file


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Recover deflated firmware blobs and netlist archives "
        "from an ELF object file"
    )
    parser.add_argument("input", type=Path, help="Path to ELF object file")
    parser.add_argument("outdir", type=Path, help="Existing output directory")
    parser.add_argument(
        "--section",
        default=DEFAULT_SECTION,
        help=f"Section holding the compressed data (default: {DEFAULT_SECTION})",
    )
    parser.add_argument(
        "--rel-section",
        default=None,
        help="RELA section for the data section (default: .rela<section>)",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        default=None,
        help="Write a MessagePack manifest of recovered items to this file",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show progress and per-segment diagnostics",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.input.exists():
        print(f"Error: {args.input} does not exist", file=sys.stderr)
        sys.exit(1)

    config = ScanConfig(section=args.section, rel_section=args.rel_section)
    try:
        report = scan_object_file(args.input, args.outdir, config, verbose=args.verbose)
        if args.manifest is not None:
            write_manifest(report, args.manifest)
    except (ElfFormatError, ArchiveBoundsError, ManifestError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
