"""Command-line options of the NBD export server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

# Options the parser recognises; True marks an optional attached value.
_OPTIONAL_VALUE = {"c", "p", "f", "t", "e", "r", "k"}
_REQUIRED_VALUE = {"n"}
_FLAGS = {"h", "w", "d", "q"}


class UsageError(ValueError):
    """Raised when the arguments cannot be used; the usage text applies."""

    def __init__(self, message: str, option: str | None = None) -> None:
        super().__init__(message)
        self.option = option


@dataclass
class ServerOptions:
    """Settings for one export session."""

    client_ip: str = ""
    port: int = 0
    export_path: str = ""
    allow_write: bool = True
    debug: bool = True
    quiet: bool = False

    @property
    def websocket_url(self) -> str:
        """The websocket proxy endpoint for this session."""
        return f"wss://{self.client_ip}:{self.port}/vmws"


def usage(prog: str) -> str:
    """Return the help text for ``prog``."""
    lines = [
        f"{prog} v3.1",
        " -c     Client IP address to accept connections from",
        " -p     Port to listen on (60000 by default)",
        " -f     File to serve ( \\\\.\\PHYSICALDRIVE0 or \\\\.\\pmem for example)",
        " -n     Partition on disk to serve (0 if not specified), "
        "-n all to serve all partitions",
        " -w     Enable writing (disabled by default)",
        " -d     Enable debug messages",
        " -q     Be Quiet..no messages",
        " -h     This help text",
    ]
    return "\n".join(lines) + "\n"


def _atoi(text: str) -> int:
    """Leading-integer conversion: whitespace, optional sign, digits."""
    stripped = text.lstrip()
    sign = 1
    if stripped[:1] in ("+", "-"):
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    digits = ""
    for ch in stripped:
        if not ch.isdigit():
            break
        digits += ch
    return sign * int(digits) if digits else 0


def _tokens(argv: Sequence[str]):
    """Yield (option, value) pairs in getopt fashion; non-options are skipped."""
    args = iter(argv)
    for arg in args:
        if arg == "--":
            return
        if not arg.startswith("-") or arg == "-":
            continue
        rest = arg[1:]
        while rest:
            opt, rest = rest[0], rest[1:]
            if opt in _OPTIONAL_VALUE:
                yield opt, (rest or None)
                break
            if opt in _REQUIRED_VALUE:
                value = rest or next(args, None)
                if value is None:
                    raise UsageError(f"option requires an argument -- '{opt}'", opt)
                yield opt, value
                break
            if opt in _FLAGS:
                yield opt, None
                continue
            raise UsageError(f"invalid option -- '{opt}'", opt)


def _required(opt: str, value: str | None) -> str:
    if value is None:
        raise UsageError(f"option -{opt} needs an attached value", opt)
    return value


def parse_args(argv: Sequence[str]) -> ServerOptions:
    """Parse server arguments (without the program name) into options."""
    options = ServerOptions()
    for opt, value in _tokens(argv):
        if opt == "c":
            options.client_ip = _required(opt, value)
        elif opt == "p":
            options.port = _atoi(_required(opt, value))
        elif opt == "f":
            options.export_path = _required(opt, value)
        elif opt == "d":
            options.debug = True
        elif opt == "q":
            options.quiet = True
        elif opt == "w":
            options.allow_write = True
        elif opt == "h":
            raise UsageError("help requested", opt)
        else:
            raise UsageError(f"unsupported option -- '{opt}'", opt)
    return options