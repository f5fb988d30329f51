"""IPv4 socket addresses."""

from __future__ import annotations

import socket
from dataclasses import dataclass

ANY_IP = "0.0.0.0"


@dataclass(frozen=True)
class InetAddress:
    """An IPv4 address and port; the address defaults to INADDR_ANY."""

    port: int = 8888
    ip: str = ANY_IP

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port {self.port} out of range")
        try:
            packed = socket.inet_aton(self.ip)
        except (OSError, TypeError) as exc:
            raise ValueError(f"invalid IPv4 address {self.ip!r}") from exc
        object.__setattr__(self, "ip", socket.inet_ntoa(packed))

    @staticmethod
    def from_sockaddr(sockaddr: tuple) -> InetAddress:
        """Build from a (host, port) tuple as returned by the socket module."""
        host, port = sockaddr[0], sockaddr[1]
        return InetAddress(port, host)

    def to_ip(self) -> str:
        return self.ip

    def to_ip_port(self) -> str:
        return f"{self.ip}:{self.port}"

    def to_port(self) -> int:
        return self.port

    def sockaddr(self) -> tuple[str, int]:
        """The (host, port) tuple to pass to bind or connect."""
        return (self.ip, self.port)

    def __str__(self) -> str:
        return self.to_ip_port()