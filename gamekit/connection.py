"""Polling TCP connections for a simple client/server game protocol."""

from __future__ import annotations

import enum
import logging
import select
import socket
from dataclasses import dataclass, field
from typing import Callable, List, Optional

__all__ = [
    "ConnectionEvent",
    "Connection",
    "poll_connections",
    "Server",
    "Client",
]

log = logging.getLogger(__name__)

BUFFER_SIZE = 20000


class ConnectionEvent(enum.Enum):
    OPEN = "open"
    RECV = "recv"
    CLOSE = "close"


EventCallback = Callable[["Connection", ConnectionEvent], None]


@dataclass(eq=False)
class Connection:
    """A TCP socket with buffered outgoing and incoming bytes.

    Append to ``send_buffer`` to send data; received data is appended to
    ``recv_buffer``.
    """

    sock: Optional[socket.socket] = None
    send_buffer: bytearray = field(default_factory=bytearray)
    recv_buffer: bytearray = field(default_factory=bytearray)

    def send_raw(self, data) -> None:
        """Append raw bytes to the send buffer."""
        self.send_buffer.extend(data)

    def close(self) -> None:
        """Close the socket and mark the connection for discard."""
        if self.sock is not None:
            self.sock.close()
            self.sock = None

    def __bool__(self) -> bool:
        return self.sock is not None


def _describe(sockaddr) -> str:
    return f"{sockaddr[0]}:{sockaddr[1]}"


def poll_connections(
    where: str,
    connections: List[Connection],
    on_event: Optional[EventCallback] = None,
    timeout: float = 0.0,
    listen_socket: Optional[socket.socket] = None,
) -> None:
    """Wait up to ``timeout`` seconds for socket activity and service it."""
    readable_candidates = []
    if listen_socket is not None:
        readable_candidates.append(listen_socket)
    live = [c for c in connections if c]
    readable_candidates.extend(c.sock for c in live)
    writable_candidates = [c.sock for c in live if c.send_buffer]

    try:
        readable, writable, _ = select.select(
            readable_candidates, writable_candidates, [], max(timeout, 0.0)
        )
    except (OSError, ValueError):
        log.warning("[%s] Select returned an error; will attempt to read/write anyway.", where)
        readable, writable = readable_candidates, writable_candidates
    else:
        if not readable and not writable:
            return
    readable_set = set(readable)
    writable_set = set(writable)

    if listen_socket is not None and listen_socket in readable_set:
        try:
            got, _ = listen_socket.accept()
        except OSError:
            got = None
        if got is not None:
            got.setblocking(False)
            connection = Connection(sock=got)
            connections.append(connection)
            log.info("[%s] client connected on %s.", where, got.fileno())
            if on_event:
                on_event(connection, ConnectionEvent.OPEN)

    for c in connections:
        if not c or c.sock not in readable_set:
            continue
        try:
            data = c.sock.recv(BUFFER_SIZE)
        except BlockingIOError:
            continue
        except OSError as err:
            log.warning("[%s] recv() returned error %s, disconnecting.", where, err)
            data = None
        if not data:
            if data is not None:
                log.info("[%s] port closed, disconnecting.", where)
            c.close()
            if on_event:
                on_event(c, ConnectionEvent.CLOSE)
        else:
            c.recv_buffer.extend(data)
            if on_event:
                on_event(c, ConnectionEvent.RECV)

    for c in connections:
        if not c or not c.send_buffer or c.sock not in writable_set:
            continue
        try:
            sent = c.sock.send(bytes(c.send_buffer))
        except BlockingIOError:
            break
        except OSError as err:
            log.warning("[%s] send() returned error %s, disconnecting.", where, err)
            sent = 0
        if sent <= 0 or sent > len(c.send_buffer):
            if sent:
                log.warning(
                    "[%s] send() returned strange number of bytes [%d of %d], disconnecting.",
                    where, sent, len(c.send_buffer),
                )
            c.close()
            if on_event:
                on_event(c, ConnectionEvent.CLOSE)
        else:
            del c.send_buffer[:sent]


def _resolve(host: Optional[str], port, flags: int, proto: int = 0):
    try:
        return socket.getaddrinfo(
            host, str(port), socket.AF_UNSPEC, socket.SOCK_STREAM, proto, flags
        )
    except socket.gaierror as err:
        raise RuntimeError(f"getaddrinfo error: {err}") from err


class Server:
    """Listens on a port and keeps a list of accepted connections."""

    def __init__(self, port) -> None:
        self.connections: List[Connection] = []
        self.listen_socket: Optional[socket.socket] = None

        log.info("[Server] binding to %s:", port)
        for family, socktype, proto, _, sockaddr in _resolve(None, port, socket.AI_PASSIVE):
            log.info("trying %s...", _describe(sockaddr))
            try:
                s = socket.socket(family, socktype, proto)
            except OSError as err:
                log.info("(failed to create socket: %s)", err)
                continue
            try:
                s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            except OSError:
                log.info("[note: couldn't set SO_REUSEADDR]")
            try:
                s.bind(sockaddr)
            except OSError as err:
                log.info("(failed to bind: %s)", err)
                s.close()
                continue
            log.info("success!")
            self.listen_socket = s
            break

        if self.listen_socket is None:
            raise RuntimeError(f"Failed to bind to port {port}")

        try:
            self.listen_socket.listen(5)
        except OSError:
            self.listen_socket.close()
            self.listen_socket = None
            raise
        self.listen_socket.setblocking(False)

    @property
    def port(self) -> int:
        """The port actually bound (useful when binding to port 0)."""
        return self.listen_socket.getsockname()[1]

    def poll(self, on_event: Optional[EventCallback] = None, timeout: float = 0.0) -> None:
        """Accept, read and write, then drop connections that were closed."""
        poll_connections("Server::poll", self.connections, on_event, timeout, self.listen_socket)
        self.connections[:] = [c for c in self.connections if c]

    def close(self) -> None:
        for c in self.connections:
            c.close()
        self.connections.clear()
        if self.listen_socket is not None:
            self.listen_socket.close()
            self.listen_socket = None

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class Client:
    """Holds exactly one connection to a server."""

    def __init__(self, host: str, port) -> None:
        self.connections: List[Connection] = [Connection()]

        log.info("[Client] connecting to %s:%s:", host, port)
        for family, socktype, proto, _, sockaddr in _resolve(host, port, 0, socket.IPPROTO_TCP):
            log.info("trying %s...", _describe(sockaddr))
            try:
                s = socket.socket(family, socktype, proto)
            except OSError as err:
                log.info("(failed to create socket: %s)", err)
                continue
            try:
                s.connect(sockaddr)
            except OSError as err:
                log.info("(failed to connect: %s)", err)
                s.close()
                continue
            log.info("success!")
            s.setblocking(False)
            self.connection.sock = s
            break

        if not self.connection:
            raise RuntimeError("Failed to connect to any of the addresses tried for server.")

    @property
    def connection(self) -> Connection:
        return self.connections[0]

    def poll(self, on_event: Optional[EventCallback] = None, timeout: float = 0.0) -> None:
        """Read and write the connection's pending data."""
        poll_connections("Client::poll", self.connections, on_event, timeout, None)

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc) -> None:
        self.close()