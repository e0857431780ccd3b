"""Tests for payload classification and output."""

import struct
from pathlib import Path

import pytest

from elf_test_utils import random_bytes
from fwscan.archive import ArchiveBoundsError, build_archive, table_size, MIN_ARCHIVE_SIZE
from fwscan.processor import PayloadProcessor, KIND_ARCHIVE, KIND_WHOLE


def _archive_with_bad_entry(length: int, offset: int) -> bytes:
    data = struct.pack("<ii", 0, 1) + struct.pack("<iii", 1, length, offset)
    return data + b"\x00" * (MIN_ARCHIVE_SIZE - len(data))


class TestArchiveOutput:
    """Archives are split into one file per entry."""

    def test_round_trip(self, out_dir: Path):
        first = random_bytes(1000, seed=1)
        second = random_bytes(500, seed=2)
        payload = build_archive([(2, first), (99, second)], pad_to=MIN_ARCHIVE_SIZE)

        processor = PayloadProcessor(out_dir)
        result = processor.process(payload)

        assert result is not None
        assert result.kind == KIND_ARCHIVE
        assert result.index == 0
        assert result.path == out_dir / "archive_00"
        assert sorted(p.name for p in result.path.iterdir()) == ["gpccs_data", "unk99"]
        assert (result.path / "gpccs_data").read_bytes() == first
        assert (result.path / "unk99").read_bytes() == second
        assert [e.name for e in result.entries] == ["gpccs_data", "unk99"]
        assert processor.archive_counter == 1
        assert processor.whole_counter == 0

    def test_existing_directory_is_reused(self, out_dir: Path, archive_payload: bytes):
        (out_dir / "archive_00").mkdir()
        result = PayloadProcessor(out_dir).process(archive_payload)
        assert result.path == out_dir / "archive_00"
        assert (result.path / "fecs_data").exists()

    def test_archive_indices_are_dense(self, out_dir: Path, archive_payload: bytes):
        """Rejected payloads between archives do not consume archive indices."""
        processor = PayloadProcessor(out_dir)
        results = []
        for i in range(3):
            results.append(processor.process(archive_payload))
            processor.process(random_bytes(10))  # dropped
            processor.process(random_bytes(200, seed=i))  # whole blob

        assert [r.index for r in results] == [0, 1, 2]
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "archive_00",
            "archive_01",
            "archive_02",
            "whole_000",
            "whole_001",
            "whole_002",
        ]

    def test_entry_out_of_bounds_is_fatal(self, out_dir: Path):
        payload = _archive_with_bad_entry(length=MIN_ARCHIVE_SIZE, offset=table_size(1))
        processor = PayloadProcessor(out_dir)
        with pytest.raises(ArchiveBoundsError):
            processor.process(payload)
        assert processor.archive_counter == 0

    def test_duplicate_ids_share_a_name(self, out_dir: Path):
        payload = build_archive([(0, b"first"), (0, b"second")], pad_to=MIN_ARCHIVE_SIZE)
        result = PayloadProcessor(out_dir).process(payload)
        assert (result.path / "fecs_data").read_bytes() == b"second"


class TestOpaqueOutput:
    """Payloads that are not archives are written whole or dropped."""

    def test_size_boundary(self, out_dir: Path):
        processor = PayloadProcessor(out_dir)
        assert processor.process(random_bytes(127)) is None
        assert list(out_dir.iterdir()) == []

        result = processor.process(random_bytes(128))
        assert result.kind == KIND_WHOLE
        assert result.path == out_dir / "whole_000"
        assert result.path.read_bytes() == random_bytes(128)
        assert processor.whole_counter == 1

    def test_whole_counter_increments(self, out_dir: Path):
        processor = PayloadProcessor(out_dir)
        for i in range(3):
            processor.process(random_bytes(256, seed=i))
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "whole_000",
            "whole_001",
            "whole_002",
        ]
        assert (out_dir / "whole_002").read_bytes() == random_bytes(256, seed=2)

    def test_small_archive_like_payload_is_whole(self, out_dir: Path):
        """A well-formed table below the archive size is kept as a blob."""
        payload = build_archive([(0, random_bytes(200))])
        result = PayloadProcessor(out_dir).process(payload)
        assert result.kind == KIND_WHOLE
        assert result.path.read_bytes() == payload

    @pytest.mark.parametrize(
        "header",
        [
            struct.pack("<ii", 0, 0),
            struct.pack("<ii", 0, 65),
            struct.pack("<ii", 1, 2),
        ],
        ids=["count-zero", "count-too-large", "nonzero-magic"],
    )
    def test_rejected_headers_are_whole(self, out_dir: Path, header: bytes):
        payload = header + struct.pack("<iii", 0, 16, 0x100) * 2
        payload += b"\x00" * (0x20000 - len(payload))
        processor = PayloadProcessor(out_dir)
        result = processor.process(payload)
        assert result.kind == KIND_WHOLE
        assert processor.archive_counter == 0
        assert result.path.read_bytes() == payload

    def test_bad_entry_offset_falls_back_to_whole(self, out_dir: Path):
        """The untouched payload is written, not a partial archive."""
        payload = _archive_with_bad_entry(length=16, offset=table_size(1) - 1)
        processor = PayloadProcessor(out_dir)
        result = processor.process(payload)
        assert result.kind == KIND_WHOLE
        assert result.path.read_bytes() == payload
        assert not (out_dir / "archive_00").exists()

    def test_missing_output_directory(self, tmp_path: Path):
        processor = PayloadProcessor(tmp_path / "missing")
        with pytest.raises(OSError):
            processor.process(random_bytes(200))

    def test_custom_thresholds(self, out_dir: Path):
        processor = PayloadProcessor(out_dir, min_whole_size=16, min_archive_size=0)
        assert processor.process(random_bytes(16)).kind == KIND_WHOLE
        assert processor.process(build_archive([(4, b"abc")])).kind == KIND_ARCHIVE
