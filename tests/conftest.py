import pytest
import pathlib

from elf_test_utils import build_rodata_object, pack_streams, random_bytes
from fwscan.archive import build_archive, MIN_ARCHIVE_SIZE


@pytest.fixture
def out_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """An existing, empty output directory."""
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def archive_payload() -> bytes:
    """A well-formed two-entry archive at the minimum archive size."""
    return build_archive(
        [(0, random_bytes(1000, seed=1)), (40, random_bytes(500, seed=2))],
        pad_to=MIN_ARCHIVE_SIZE,
    )


@pytest.fixture
def firmware_object(tmp_path: pathlib.Path, archive_payload: bytes) -> pathlib.Path:
    """
    An object file laid out like a driver blob.

    .rodata holds, in order: an opaque 4KB blob, a garbage gap, a netlist
    archive, a payload too small to keep, and a second opaque blob. Every
    stream and the gap are referenced from .rela.rodata; two relocations
    reference unrelated symbols.
    """
    payloads = [
        random_bytes(4096, seed=10),
        archive_payload,
        random_bytes(64, seed=11),
        random_bytes(2048, seed=12),
    ]
    rodata, offsets = pack_streams(payloads)
    # Insert a non-deflate gap after the first stream.
    gap = b"\xff" * 48
    first_end = offsets[1]
    rodata = rodata[:first_end] + gap + rodata[first_end:]
    offsets = [offsets[0], first_end] + [o + len(gap) for o in offsets[1:]]

    path = tmp_path / "nv-kernel.o_binary"
    path.write_bytes(
        build_rodata_object(
            rodata,
            # Reverse order and a duplicate, as relocations come unsorted.
            list(reversed(offsets)) + [offsets[2]],
            data_addends=[8, 16],
            func_addends=[0],
        )
    )
    return path
