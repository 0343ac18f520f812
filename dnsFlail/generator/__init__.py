"""
DNS load generator for dnsFlail.

Fires A queries for names drawn at random from a corpus at a resolver
under test, at a fixed pace, and keeps running success/failure counts.

Building blocks:
- NameCorpus: the names to sample from
- ResolverClient: one UDP query per call, SendError on any I/O failure
- StatsCounter: request/success/failure counters with consistent snapshots
- LoadLoop: the driver tying them together
"""
from __future__ import annotations

from dnsFlail.generator.corpus import EmptyCorpusError, NameCorpus
from dnsFlail.generator.loop import LoadLoop, LoopState
from dnsFlail.generator.models import ResolvedServer, ServerTarget, StatsSnapshot
from dnsFlail.generator.resolver import (
    ResolverClient,
    SendError,
    ServerResolutionError,
    UdpTransport,
    build_query,
    resolve_server,
)
from dnsFlail.generator.stats import StatsCounter

__all__ = [
    "EmptyCorpusError",
    "LoadLoop",
    "LoopState",
    "NameCorpus",
    "ResolvedServer",
    "ResolverClient",
    "SendError",
    "ServerResolutionError",
    "ServerTarget",
    "StatsCounter",
    "StatsSnapshot",
    "UdpTransport",
    "build_query",
    "resolve_server",
]
