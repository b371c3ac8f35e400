"""Lookup of an access point address from the resolver service."""

from __future__ import annotations

import json
import logging
import socket

__all__ = ["first_ap_address", "fetch_first_ap_address", "APRESOLVE_HOST"]

log = logging.getLogger(__name__)

APRESOLVE_HOST = "apresolve.spotify.com"
_PORT = 80
_TIMEOUT = 10.0


def first_ap_address(json_text: str) -> str:
    """Return the first entry of ``ap_list`` in a resolver JSON document."""
    try:
        root, _ = json.JSONDecoder().raw_decode(json_text)
    except json.JSONDecodeError as exc:
        raise ValueError("resolver response is not valid JSON") from exc
    ap_list = root.get("ap_list") if isinstance(root, dict) else None
    if not isinstance(ap_list, list) or not ap_list or not isinstance(ap_list[0], str):
        raise ValueError("resolver response holds no access point")
    return ap_list[0]


def _request(host: str) -> bytes:
    return (
        "GET / HTTP/1.1\r\n"
        f"Host: {host}\r\n"
        "Accept: application/json\r\n"
        "Connection: close\r\n"
        "\r\n\r\n"
    ).encode("ascii")


def fetch_first_ap_address(host: str = APRESOLVE_HOST) -> str:
    """Ask the resolver for access points and return the first one as ``host:port``."""
    try:
        with socket.create_connection((host, _PORT), timeout=_TIMEOUT) as sock:
            sock.sendall(_request(host))
            received = bytearray()
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                received += chunk
    except OSError as exc:
        log.error("apresolve: cannot reach %s", host)
        raise ConnectionError("Resolve failed") from exc

    start = received.find(b"{")
    if start < 0:
        raise ValueError("resolver response holds no JSON body")
    return first_ap_address(received[start:].decode("utf-8", errors="replace"))