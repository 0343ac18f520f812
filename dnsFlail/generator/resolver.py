"""UDP resolver client used to fire queries at the server under test."""
from __future__ import annotations

import asyncio
import socket
from typing import Optional, Protocol

import dns.asyncquery
import dns.exception
import dns.message
import dns.name
import dns.rdataclass
import dns.rdatatype

from dnsFlail.generator.models import ResolvedServer, ServerTarget
from dnsFlail.logging_config import get_logger

logger = get_logger("generator")


class SendError(Exception):
    """A query could not complete its send/receive transaction."""

    def __init__(self, name: str, cause: str) -> None:
        super().__init__(f"{name}: {cause}")
        self.name = name
        self.cause = cause


class ServerResolutionError(OSError):
    """The configured server host could not be resolved to an address."""


class QueryTransport(Protocol):
    async def send(
        self,
        query: dns.message.Message,
        address: str,
        port: int,
        timeout: float,
    ) -> object:
        ...


class UdpTransport:
    """Single-shot UDP exchange; a fresh socket per query, so safe to share."""

    async def send(
        self,
        query: dns.message.Message,
        address: str,
        port: int,
        timeout: float,
    ) -> dns.message.Message:
        return await dns.asyncquery.udp(query, address, timeout=timeout, port=port)


async def resolve_server(target: ServerTarget) -> ResolvedServer:
    """Resolve the target host once, at startup."""
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(
            target.host, target.port, type=socket.SOCK_DGRAM
        )
    except OSError as exc:
        raise ServerResolutionError(
            f"could not resolve server address {target.host!r}: {exc}"
        ) from exc
    if not infos:
        raise ServerResolutionError(f"no addresses found for {target.host!r}")
    address = infos[0][4][0]
    logger.debug(
        f"Resolved {target.host} to {address}",
        extra={"server": address, "port": target.port},
    )
    return ResolvedServer(address=address, port=target.port, host=target.host)


def build_query(name: str) -> dns.message.Message:
    """Single-question A/IN query; the name is taken as absolute."""
    qname = dns.name.from_text(name, origin=dns.name.root)
    return dns.message.make_query(qname, dns.rdatatype.A, dns.rdataclass.IN)


class ResolverClient:
    """Sends A queries to one fixed server. One attempt per call, no TCP fallback."""

    def __init__(
        self,
        server: ResolvedServer,
        *,
        timeout: float = 10.0,
        transport: Optional[QueryTransport] = None,
    ) -> None:
        self.server = server
        self.timeout = timeout
        self.transport: QueryTransport = transport or UdpTransport()

    async def send(self, name: str) -> None:
        """Complete one query exchange or raise SendError.

        Only the transaction is checked; the response content (rcode,
        answers) is not looked at.
        """
        try:
            query = build_query(name)
            await self.transport.send(
                query, self.server.address, self.server.port, self.timeout
            )
        except (OSError, EOFError, dns.exception.DNSException) as exc:
            raise SendError(name, str(exc) or type(exc).__name__) from exc
