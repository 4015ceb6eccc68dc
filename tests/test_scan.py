import socket

import pytest

from vmediaserver.options import parse_args
from vmediaserver.scan import (
    export_choices,
    ip_range,
    next_ip,
    port_open,
    scan_hosts,
    server_arguments,
)


@pytest.fixture
def listening_port():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(5)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


def _closed_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_next_ip_increments():
    assert next_ip("192.168.0.2", 1) == "192.168.0.3"


def test_next_ip_carries_into_next_octet():
    assert next_ip("10.0.0.255", 1) == "10.0.1.0"


def test_next_ip_wraps_around():
    assert next_ip("255.255.255.255", 1) == "0.0.0.0"


def test_next_ip_round_trip():
    start = "192.168.0.2"
    assert next_ip(next_ip(start, 7), -7) == start


def test_next_ip_rejects_garbage():
    with pytest.raises(ValueError):
        next_ip("not-an-address", 1)


def test_ip_range_single():
    assert list(ip_range("192.168.0.2", "192.168.0.2")) == ["192.168.0.2"]


def test_ip_range_consecutive():
    start = "192.168.0.2"
    end = next_ip(start, 3)
    addresses = list(ip_range(start, end))
    assert len(addresses) == 4
    assert addresses[0] == start
    assert addresses[-1] == end
    assert all(next_ip(a, 1) == b for a, b in zip(addresses, addresses[1:]))


def test_ip_range_reversed_raises():
    with pytest.raises(ValueError):
        list(ip_range("192.168.0.5", "192.168.0.2"))


def test_port_open_true(listening_port):
    assert port_open("127.0.0.1", listening_port, 1.0) is True


def test_port_open_false():
    assert port_open("127.0.0.1", _closed_port(), 1.0) is False


def test_scan_hosts_finds_listener(listening_port):
    assert scan_hosts("127.0.0.1", "127.0.0.1", listening_port, 1.0) == [
        ("127.0.0.1", 0)
    ]


def test_scan_hosts_empty_when_closed():
    assert scan_hosts("127.0.0.1", "127.0.0.1", _closed_port(), 0.5) == []


def test_export_choices():
    assert export_choices(True, True) == [("Device", 0), ("Image", 1)]
    assert export_choices(True, False) == [("Device", 0)]
    assert export_choices(False, True) == [("Image", 1)]
    assert export_choices(False, False) == []


def test_server_arguments_program_name():
    args = server_arguments("\\\\.\\E:", "192.168.0.2", 443)
    assert args[0] == "nbd-server"
    assert len(args) == 4


def test_server_arguments_round_trip():
    args = server_arguments("\\\\.\\E:", "192.168.0.2", "8000")
    options = parse_args(args[1:])
    assert options.export_path == "\\\\.\\E:"
    assert options.client_ip == "192.168.0.2"
    assert options.port == 8000