"""
Purge client for a caching reverse proxy (Varnish).

Sends one `PURGE` request per URL over a plain TCP connection to the proxy and
reads back the status line. A purge only counts as confirmed when the proxy
answers `HTTP/1.1 200 Purged.`; anything else is a rejection.

The client holds nothing but the proxy endpoint, so one instance can be
shared across the threads that dispatch purges.
"""

from __future__ import annotations

import socket
from typing import Optional

from varnisher.core.models import FailureReason, PurgeOutcome, url_host
from varnisher.core.scraping.normalizer import encode_url

PURGE_CONFIRMATION = "HTTP/1.1 200 Purged."

_HEADER_END = b"\r\n\r\n"


def build_purge_request(path: str, host: str) -> bytes:
    """Wire form of a purge request: path only, Host header, no body."""
    return f"PURGE {path or '/'} HTTP/1.1\r\nHost: {host}\r\n\r\n".encode("utf-8")


def status_line(response: bytes) -> str:
    """First line of a raw HTTP response, decoded leniently."""
    first = response.split(b"\n", 1)[0]
    return first.decode("latin-1").rstrip("\r")


class PurgeClient:
    """Issue PURGE requests against a fixed proxy endpoint."""

    def __init__(
        self,
        proxy_hostname: str = "localhost",
        proxy_port: int = 80,
        timeout: Optional[float] = 10,
        chunk_size: int = 4096,
    ):
        self.proxy_hostname = proxy_hostname
        self.proxy_port = proxy_port
        self.timeout = timeout
        self.chunk_size = chunk_size

    @classmethod
    def from_config(cls, config) -> "PurgeClient":
        return cls(
            proxy_hostname=config.proxy_hostname,
            proxy_port=config.proxy_port,
            timeout=config.purge_timeout,
        )

    def _read_response(self, sock: socket.socket) -> bytes:
        # The proxy may keep the connection alive, so stop at the end of the
        # headers instead of waiting for EOF.
        data = b""
        while _HEADER_END not in data:
            try:
                chunk = sock.recv(self.chunk_size)
            except TimeoutError:
                # a status line already read is enough to classify the purge
                if data:
                    break
                raise
            if not chunk:
                break
            data += chunk
        return data

    def purge(self, url: str) -> PurgeOutcome:
        """Ask the proxy to drop its cached copy of `url`."""
        try:
            p = encode_url(url)
            host = url_host(p.hostname)
        except ValueError as exc:
            return PurgeOutcome.failed(url, FailureReason.UNPARSABLE_URL, str(exc))

        request = build_purge_request(p.path, host)
        try:
            with socket.create_connection(
                (self.proxy_hostname, self.proxy_port), timeout=self.timeout
            ) as sock:
                sock.sendall(request)
                response = self._read_response(sock)
        except OSError as exc:
            return PurgeOutcome.failed(url, FailureReason.CONNECTION_ERROR, str(exc))

        line = status_line(response)
        if line == PURGE_CONFIRMATION:
            return PurgeOutcome(url=url, success=True, detail=line)
        return PurgeOutcome.failed(url, FailureReason.PROXY_REJECTED, line or None)
