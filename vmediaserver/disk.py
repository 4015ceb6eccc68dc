"""Sector-level access to images and devices, and size queries."""

from __future__ import annotations

import os
import shutil
from typing import BinaryIO

DEVICE_PREFIX = "\\\\.\\"


class DiskError(Exception):
    """An operation on a disk, volume or image file failed."""

    def __init__(self, title: str, message: str) -> None:
        super().__init__(f"{title}: {message}")
        self.title = title
        self.message = message


def slashify(name: str) -> tuple[str, str]:
    """Return ``name`` with and without a trailing backslash."""
    if not name:
        raise ValueError("name must not be empty")
    if name.endswith("\\"):
        return name, name[:-1]
    return name + "\\", name


def file_size_in_sectors(size: int, sector_size: int) -> int:
    """Number of sectors needed to hold ``size`` bytes; 0 if sector size is 0."""
    if not sector_size:
        return 0
    whole, rest = divmod(size, sector_size)
    return whole + (1 if rest else 0)


def read_sectors(
    handle: BinaryIO, start_sector: int, num_sectors: int, sector_size: int
) -> bytes:
    """Read whole sectors; a short read is padded with zero bytes."""
    wanted = sector_size * num_sectors
    try:
        handle.seek(start_sector * sector_size)
        data = handle.read(wanted) or b""
    except (OSError, ValueError) as exc:
        raise DiskError(
            "Read Error",
            f"An error occurred when attempting to read data from handle.\n{exc}",
        ) from exc
    return bytes(data).ljust(wanted, b"\0")


def write_sectors(
    handle: BinaryIO,
    data: bytes,
    start_sector: int,
    num_sectors: int,
    sector_size: int,
) -> int:
    """Write whole sectors from ``data`` and return the number of bytes written."""
    wanted = sector_size * num_sectors
    if len(data) < wanted:
        raise ValueError(f"need {wanted} bytes of data, got {len(data)}")
    try:
        handle.seek(start_sector * sector_size)
        written = handle.write(bytes(data[:wanted]))
    except (OSError, ValueError) as exc:
        raise DiskError(
            "Write Error",
            f"An error occurred when attempting to write data to handle.\n{exc}",
        ) from exc
    return wanted if written is None else written


def space_available(location: str | os.PathLike, space_needed: int) -> bool:
    """True if ``location`` has room for ``space_needed`` bytes.

    When the free space cannot be determined the check is skipped and True
    is returned.
    """
    try:
        free = shutil.disk_usage(location).free
    except OSError:
        return True
    return space_needed <= free


def export_size(path: str | os.PathLike) -> int:
    """Size in bytes of an image file or a raw device/volume path."""
    name = os.fspath(path)
    try:
        if name.lower().startswith(DEVICE_PREFIX):
            with open(name, "rb") as handle:
                return handle.seek(0, os.SEEK_END)
        return os.stat(name).st_size
    except OSError as exc:
        raise DiskError(
            "File Error", f"Cannot determine the size of {name}: {exc}"
        ) from exc