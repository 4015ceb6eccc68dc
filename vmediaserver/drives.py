"""Discovery and tracking of removable drives that can be exported."""

from __future__ import annotations

import re
import string
from typing import Callable, Iterable, Iterator

import psutil

DRIVE_LETTERS = string.ascii_uppercase
_DRIVE_DEVICE = re.compile(r"^([A-Za-z]):")


def first_drive_from_mask(mask: int) -> str:
    """Return the letter of the lowest drive set in a unit mask (bit 0 = A:)."""
    for letter in DRIVE_LETTERS:
        if mask & 1:
            return letter
        mask >>= 1
    raise ValueError("unit mask names no drive")


def drives_from_mask(mask: int) -> list[str]:
    """Return every drive letter set in a logical-drive mask, in order."""
    if mask < 0:
        raise ValueError("drive mask must not be negative")
    return [letter for bit, letter in enumerate(DRIVE_LETTERS) if mask >> bit & 1]


def device_label(letter: str) -> str:
    """The label shown for a drive, such as ``[E:\\]``."""
    if len(letter) != 1 or letter.upper() not in DRIVE_LETTERS:
        raise ValueError(f"not a drive letter: {letter!r}")
    return f"[{letter.upper()}:\\]"


def volume_path(label: str) -> str:
    """The raw volume path for a drive label, such as ``\\\\.\\E:``."""
    if len(label) < 2 or label[1].upper() not in DRIVE_LETTERS:
        raise ValueError(f"not a drive label: {label!r}")
    return f"\\\\.\\{label[1]}:"


def _removable_letters() -> set[str]:
    """Letters of mounted partitions the system reports as removable."""
    letters = set()
    for part in psutil.disk_partitions(all=False):
        match = _DRIVE_DEVICE.match(part.device or part.mountpoint or "")
        if match and "removable" in (part.opts or "").split(","):
            letters.add(match.group(1).upper())
    return letters


def _is_removable(letter: str) -> bool:
    return letter.upper() in _removable_letters()


def list_removable_drives() -> list[str]:
    """Labels of the removable drives present, ordered by drive letter."""
    return [device_label(letter) for letter in sorted(_removable_letters())]


class DriveList:
    """The set of exportable drives, kept current as devices come and go."""

    def __init__(
        self,
        labels: Iterable[str] = (),
        checker: Callable[[str], bool] = _is_removable,
    ) -> None:
        self.labels: list[str] = list(labels)
        self._checker = checker

    def __iter__(self) -> Iterator[str]:
        return iter(self.labels)

    def __len__(self) -> int:
        return len(self.labels)

    def __contains__(self, label: object) -> bool:
        return label in self.labels

    def arrive(self, mask: int) -> str | None:
        """Add the drive named by an arrival mask; return its label if added."""
        letter = first_drive_from_mask(mask)
        label = device_label(letter)
        if label in self.labels or not self._checker(letter):
            return None
        self.labels.append(label)
        return label

    def remove(self, mask: int) -> bool:
        """Drop the drive named by a removal mask; True if it was listed."""
        label = device_label(first_drive_from_mask(mask))
        if label not in self.labels:
            return False
        self.labels.remove(label)
        return True