"""Finding live servers on the network and preparing an export."""

from __future__ import annotations

import ipaddress
import socket
from typing import Iterator

DEFAULT_TIMEOUT = 1.0
PROGRAM_NAME = "nbd-server"
EXPORT_DEVICE = 0
EXPORT_IMAGE = 1

_ADDRESS_SPACE = 1 << 32


def next_ip(address: str, step: int = 1) -> str:
    """Return the IPv4 address ``step`` places after ``address``, wrapping around."""
    value = int(ipaddress.IPv4Address(address))
    return str(ipaddress.IPv4Address((value + step) % _ADDRESS_SPACE))


def ip_range(start: str, end: str) -> Iterator[str]:
    """Yield every IPv4 address from ``start`` to ``end``, both included."""
    first = ipaddress.IPv4Address(start)
    last = ipaddress.IPv4Address(end)
    if last < first:
        raise ValueError(f"range end {end} comes before start {start}")
    for value in range(int(first), int(last) + 1):
        yield str(ipaddress.IPv4Address(value))


def port_open(ip: str, port: int, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """True if a TCP connection to ``ip``:``port`` succeeds within ``timeout``."""
    try:
        with socket.create_connection((ip, port), timeout=timeout):
            return True
    except OSError:
        return False


def scan_hosts(
    start: str, end: str, port: int, timeout: float = DEFAULT_TIMEOUT
) -> list[tuple[str, int]]:
    """Hosts in the range with ``port`` open, as (address, offset from start)."""
    return [
        (address, offset)
        for offset, address in enumerate(ip_range(start, end))
        if port_open(address, port, timeout)
    ]


def export_choices(device_available: bool, file_selected: bool) -> list[tuple[str, int]]:
    """The export types that can be offered, as (label, value) pairs."""
    choices = []
    if device_available:
        choices.append(("Device", EXPORT_DEVICE))
    if file_selected:
        choices.append(("Image", EXPORT_IMAGE))
    return choices


def server_arguments(export_path: str, ip: str, port: int | str) -> list[str]:
    """The argument vector that starts a server session for one export."""
    return [PROGRAM_NAME, f"-f{export_path}", f"-c{ip}", f"-p{port}"]