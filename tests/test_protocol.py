import errno
import struct
import sys

import pytest

from vmediaserver.protocol import (
    BUFSIZE,
    OPTION_REPLY_MAGIC,
    REP_ERR_UNSUP,
    REPLY_MAGIC,
    REQUEST_MAGIC,
    Command,
    Reply,
    Request,
    RequestError,
    check_length,
    htonll,
    map_windows_error,
    ntohll,
    option_reply,
)


def _request(offset=0, length=512, type_=Command.READ):
    return Request(REQUEST_MAGIC, int(type_), b"ABCDEFGH", offset, length)


def test_request_round_trip():
    req = _request(offset=4096, length=1024, type_=Command.WRITE)
    data = req.pack()
    assert len(data) == 28
    assert Request.unpack(data) == req


def test_request_magic_on_wire():
    data = _request().pack()
    assert data[:4] == bytes.fromhex("25609513")


def test_request_unpack_ignores_trailing_bytes():
    req = _request(offset=512)
    assert Request.unpack(req.pack() + b"extra") == req


def test_request_unpack_too_short():
    with pytest.raises(ValueError):
        Request.unpack(b"\x00" * 27)


def test_request_command_masks_flags():
    req = Request(REQUEST_MAGIC, (1 << 16) | Command.WRITE, b"\0" * 8, 0, 512)
    assert req.command == Command.WRITE


def test_reply_pack():
    data = Reply(handle=b"12345678").pack()
    assert data[:4] == bytes.fromhex("67446698")
    assert struct.unpack(">II8s", data) == (REPLY_MAGIC, 0, b"12345678")


def test_reply_pack_error():
    data = Reply(handle=b"h" * 8, error=errno.EIO).pack()
    assert struct.unpack(">I", data[4:8])[0] == errno.EIO


@pytest.mark.parametrize("value", [0, 1, 0x0102030405060708, (1 << 64) - 1])
def test_htonll_round_trip(value):
    assert ntohll(htonll(value)) == value
    assert htonll(ntohll(value)) == value


def test_htonll_gives_network_order():
    value = 0x0102030405060708
    converted = htonll(value)
    assert converted.to_bytes(8, sys.byteorder) == value.to_bytes(8, "big")


def test_check_length_accepts_valid():
    assert check_length(_request(offset=512, length=1024), 2048) is None


@pytest.mark.parametrize(
    "offset,length,size",
    [
        (0, 0, 4096),
        (0, 100, 4096),
        (4096, 512, 4096),
        (0, BUFSIZE, 1 << 40),
        ((1 << 64) - 512, 1024, 1 << 62),
    ],
)
def test_check_length_rejects(offset, length, size):
    with pytest.raises(RequestError):
        check_length(_request(offset=offset, length=length), size)


@pytest.mark.parametrize(
    "code,expected",
    [
        (5, errno.EACCES),
        (19, errno.EACCES),
        (31, errno.EIO),
        (25, errno.ERANGE),
        (131, errno.ERANGE),
        (1128, errno.EIO),
        (2, errno.EINVAL),
    ],
)
def test_map_windows_error(code, expected):
    assert map_windows_error(code) == expected


def test_option_reply_with_text():
    message = "The given option is unknown to this server implementation"
    data = option_reply(7, REP_ERR_UNSUP, message)
    magic, opt, reply_type, size = struct.unpack(">QIII", data[:20])
    assert (magic, opt, reply_type, size) == (
        OPTION_REPLY_MAGIC,
        7,
        REP_ERR_UNSUP,
        len(message),
    )
    assert data[20:] == message.encode()


def test_option_reply_empty():
    data = option_reply(1, 1)
    assert len(data) == 20
    assert struct.unpack(">I", data[16:20])[0] == 0