"""Minimal HTTP requests and response parsing for the login exchange."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

USER_AGENT = "NBDServer"


@dataclass(frozen=True)
class ResponseInfo:
    """What the client needs from an HTTP response's header lines."""

    sid: str | None = None
    content_length: str | None = None
    has_body: bool = False


def build_get(host: str, path: str, sid: str) -> bytes:
    """Build a GET request that carries the session cookie."""
    text = (
        f"GET {path} HTTP/1.1\r\n"
        f"User-Agent: {USER_AGENT}\r\n"
        f"Host: {host}\r\n"
        "Accept: */*\r\n"
        f"Cookie: {sid}\r\n"
        "Content-Type: application/json\r\n\r\n"
    )
    return text.encode("utf-8")


def build_post(host: str, path: str, body: str | bytes) -> bytes:
    """Build a JSON POST request, headers followed by the body."""
    payload = body.encode("utf-8") if isinstance(body, str) else bytes(body)
    header = (
        f"POST {path} HTTP/1.1\r\n"
        f"User-Agent: {USER_AGENT}\r\n"
        f"Host: {host}\r\n"
        "Accept: */*\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(payload)}\r\n\r\n"
    )
    return header.encode("utf-8") + payload


def login_body(user: str, password: str) -> str:
    """The JSON body posted to the login endpoint."""
    return f'{{"data": [ "{user}", "{password}" ] }}'


def _slice(line: str, start: int, end: int) -> str:
    """Substring from ``start`` to ``end``; a negative span means to the end."""
    if end - start < 0:
        return line[start:]
    return line[start:end]


def parse_response_headers(lines: Iterable[str | bytes]) -> ResponseInfo:
    """Pick the session cookie and content length out of response lines."""
    sid: str | None = None
    content_length: str | None = None
    has_body = False
    for raw in lines:
        line = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else raw
        lowered = line.lower()
        if lowered.startswith("set-cookie:"):
            sid = _slice(line, 12, line.rfind('"') + 1)
        elif lowered.startswith("content-length:"):
            content_length = _slice(line, 16, line.rfind("\r"))
            has_body = True
    return ResponseInfo(sid, content_length, has_body)