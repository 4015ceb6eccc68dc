"""NBD wire format: requests, replies, option replies and protocol constants."""

from __future__ import annotations

import errno
import struct
import sys
from dataclasses import dataclass
from enum import IntEnum

REQUEST_MAGIC = 0x25609513
REPLY_MAGIC = 0x67446698
OPTS_MAGIC = 0x49484156454F5054
OPTION_REPLY_MAGIC = 0x3E889045565A9
NBD_MAGIC = b"NBDMAGIC"
IHAVEOPT = b"IHAVEOPT"
DEFAULT_PORT = 10809

# Options that the client can select.
OPT_EXPORT_NAME = 1
OPT_ABORT = 2
OPT_LIST = 3
OPT_STARTTLS = 5

# Replies the server can send during negotiation.
REP_ACK = 1
REP_SERVER = 2
REP_INFO = 3
REP_FLAG_ERROR = 1 << 31
REP_ERR_UNSUP = 1 | REP_FLAG_ERROR
REP_ERR_POLICY = 2 | REP_FLAG_ERROR
REP_ERR_INVALID = 3 | REP_FLAG_ERROR
REP_ERR_PLATFORM = 4 | REP_FLAG_ERROR
REP_ERR_TLS_REQD = 5 | REP_FLAG_ERROR

# Handshake flags sent by the server, and their client counterparts.
FLAG_FIXED_NEWSTYLE = 1 << 0
FLAG_NO_ZEROES = 1 << 1
FLAG_C_FIXED_NEWSTYLE = FLAG_FIXED_NEWSTYLE
FLAG_C_NO_ZEROES = FLAG_NO_ZEROES

# Server-side global flags.
F_OLDSTYLE = 1
F_LIST = 2
F_NO_ZEROES = 4

# Per-export transmission flags.
FLAG_HAS_FLAGS = 1 << 0
FLAG_READ_ONLY = 1 << 1
FLAG_SEND_FLUSH = 1 << 2
FLAG_SEND_FUA = 1 << 3
FLAG_ROTATIONAL = 1 << 4
FLAG_SEND_TRIM = 1 << 5

SECTOR_SIZE = 512
REQUEST_SIZE = 28
REPLY_SIZE = 16
BUFSIZE = 1024 * 1024 + REPLY_SIZE
MAX_REQUEST_LENGTH = BUFSIZE - REPLY_SIZE

_U64_MASK = (1 << 64) - 1
_REQUEST = struct.Struct(">II8sQI")
_REPLY = struct.Struct(">II8s")
_OPTION_REPLY_HEADER = struct.Struct(">QIII")


class Command(IntEnum):
    """Transmission-phase request types."""

    READ = 0
    WRITE = 1
    DISC = 2
    FLUSH = 3
    TRIM = 4


class RequestError(ValueError):
    """A request that the export cannot serve."""


@dataclass(frozen=True)
class Request:
    """A transmission-phase request from the client."""

    magic: int
    type: int
    handle: bytes
    offset: int
    length: int

    @property
    def command(self) -> int:
        """The command number, without the flag bits in the upper half."""
        return self.type & 0xFFFF

    @classmethod
    def unpack(cls, data: bytes) -> "Request":
        """Decode a request from the first 28 bytes of ``data``."""
        if len(data) < REQUEST_SIZE:
            raise ValueError(
                f"request needs {REQUEST_SIZE} bytes, got {len(data)}"
            )
        magic, type_, handle, offset, length = _REQUEST.unpack_from(data)
        return cls(magic, type_, handle, offset, length)

    def pack(self) -> bytes:
        """Encode the request in network byte order."""
        return _REQUEST.pack(
            self.magic, self.type, self.handle, self.offset, self.length
        )


@dataclass(frozen=True)
class Reply:
    """A simple reply to a transmission-phase request."""

    handle: bytes
    error: int = 0
    magic: int = REPLY_MAGIC

    def pack(self) -> bytes:
        """Encode the reply in network byte order."""
        return _REPLY.pack(self.magic, self.error, self.handle)


def htonll(value: int) -> int:
    """Convert a 64-bit integer from host to network byte order."""
    raw = (value & _U64_MASK).to_bytes(8, sys.byteorder)
    return int.from_bytes(raw, "big")


def ntohll(value: int) -> int:
    """Convert a 64-bit integer from network to host byte order."""
    raw = (value & _U64_MASK).to_bytes(8, "big")
    return int.from_bytes(raw, sys.byteorder)


def check_length(request: Request, export_size: int) -> None:
    """Raise RequestError unless the request's range fits the export."""
    offset, length = request.offset, request.length
    if offset + length > _U64_MASK:
        raise RequestError("64 bit overflow")
    if length > MAX_REQUEST_LENGTH:
        raise RequestError("over size")
    if length == 0 or length % SECTOR_SIZE != 0 or offset + length > export_size:
        raise RequestError(f"invalid request: from {offset} length {length}")


_WINDOWS_ERRORS = {
    5: errno.EACCES,  # ERROR_ACCESS_DENIED
    19: errno.EACCES,  # ERROR_WRITE_PROTECT
    29: errno.EIO,  # ERROR_WRITE_FAULT
    30: errno.EIO,  # ERROR_READ_FAULT
    31: errno.EIO,  # ERROR_GEN_FAILURE
    25: errno.ERANGE,  # ERROR_SEEK
    131: errno.ERANGE,  # ERROR_NEGATIVE_SEEK
    20: errno.EIO,  # ERROR_BAD_UNIT
    21: errno.EIO,  # ERROR_NOT_READY
    23: errno.EIO,  # ERROR_CRC
    27: errno.EIO,  # ERROR_SECTOR_NOT_FOUND
    55: errno.EIO,  # ERROR_DEV_NOT_EXIST
    107: errno.EIO,  # ERROR_DISK_CHANGE
    170: errno.EIO,  # ERROR_BUSY
    1003: errno.EIO,  # ERROR_CAN_NOT_COMPLETE
    1005: errno.EIO,  # ERROR_UNRECOGNIZED_VOLUME
    1126: errno.EIO,  # ERROR_DISK_RECALIBRATE_FAILED
    1127: errno.EIO,  # ERROR_DISK_OPERATION_FAILED
    1128: errno.EIO,  # ERROR_DISK_RESET_FAILED
}


def map_windows_error(code: int) -> int:
    """Map a Windows system error code to the errno sent to the client."""
    return _WINDOWS_ERRORS.get(code, errno.EINVAL)


def option_reply(opt: int, reply_type: int, data: bytes | str = b"") -> bytes:
    """Build a fixed-newstyle option reply carrying ``data``."""
    payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    header = _OPTION_REPLY_HEADER.pack(
        OPTION_REPLY_MAGIC, opt, reply_type, len(payload)
    )
    return header + payload