"""Command-line entry point for the DNS load generator."""
from __future__ import annotations

import argparse
import asyncio
import random
import signal
import sys
from typing import List, Optional, Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.traceback import install as install_rich_traceback

from dnsFlail.api.server import build_stats_server, create_app
from dnsFlail.generator.config import GeneratorConfig
from dnsFlail.generator.corpus import EmptyCorpusError, NameCorpus
from dnsFlail.generator.loop import LoadLoop
from dnsFlail.generator.models import ServerTarget, StatsSnapshot
from dnsFlail.generator.resolver import (
    QueryTransport,
    ResolverClient,
    ServerResolutionError,
    resolve_server,
)
from dnsFlail.generator.stats import StatsCounter
from dnsFlail.logging_config import get_logger

install_rich_traceback()
console = Console(stderr=True)
logger = get_logger("cli")

USAGE = "usage: names.txt server-address server-port"
STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        logger.error(message)
        logger.error(USAGE)
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="dnsflail",
        description="Flood a DNS server with A queries for names picked at random from a file",
    )
    parser.add_argument("names", help="File with one domain name per line")
    parser.add_argument("server_address", help="Host name or IP address of the server under test")
    parser.add_argument("server_port", help="UDP port of the server under test")
    parser.add_argument("--config", default=None, help="Optional YAML file with generator settings")
    parser.add_argument("--pace-ms", type=float, default=None, help="Delay between queries per worker (default 5)")
    parser.add_argument("--report-every", type=int, default=None, help="Log a summary every N requests (default 10)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-query timeout in seconds (default 10)")
    parser.add_argument("--workers", type=int, default=None, help="Concurrent query workers (default 1)")
    parser.add_argument("--stats-port", type=int, default=None, help="Serve counters over HTTP on this port")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _install_stop_handlers(load_loop: LoadLoop) -> List[signal.Signals]:
    loop = asyncio.get_running_loop()
    installed: List[signal.Signals] = []
    for sig in STOP_SIGNALS:
        try:
            loop.add_signal_handler(sig, load_loop.stop)
        except (NotImplementedError, RuntimeError):
            # No loop signal support here; KeyboardInterrupt ends the run instead.
            continue
        installed.append(sig)
    return installed


async def run_generator(
    corpus: NameCorpus,
    target: ServerTarget,
    cfg: GeneratorConfig,
    *,
    transport: Optional[QueryTransport] = None,
    rng: Optional[random.Random] = None,
    max_iterations: Optional[int] = None,
) -> StatsSnapshot:
    """Resolve the server, then run the load loop until interrupted."""
    server = await resolve_server(target)
    stats = StatsCounter()
    client = ResolverClient(server, timeout=cfg.timeout_seconds, transport=transport)
    load_loop = LoadLoop(
        corpus,
        client,
        stats,
        rng=rng or random.SystemRandom(),
        pace_seconds=cfg.pace_seconds,
        report_every=cfg.report_every,
        workers=cfg.workers,
    )

    stats_server = None
    stats_task = None
    if cfg.stats_port is not None:
        stats_server = build_stats_server(create_app(stats), cfg.stats_port)
        stats_task = asyncio.create_task(stats_server.serve())
        stats_task.add_done_callback(lambda _task: load_loop.stop())

    installed = _install_stop_handlers(load_loop)
    console.print(f"[green]Flailing at {server} with {len(corpus)} names", highlight=False)
    try:
        return await load_loop.run(max_iterations)
    finally:
        loop = asyncio.get_running_loop()
        for sig in installed:
            loop.remove_signal_handler(sig)
        if stats_server is not None and stats_task is not None:
            stats_server.should_exit = True
            await stats_task


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        target = ServerTarget(host=args.server_address, port=args.server_port)
    except ValidationError as exc:
        message = exc.errors()[0]["msg"]
        logger.error(f"could not parse server address/port: {message}")
        logger.error(USAGE)
        console.print(f"[red]could not parse server address/port:[/red] {message}")
        return 1

    try:
        cfg = GeneratorConfig.load(args.config) if args.config else GeneratorConfig()
        cfg = cfg.with_overrides(
            pace_ms=args.pace_ms,
            report_every=args.report_every,
            timeout_seconds=args.timeout,
            workers=args.workers,
            stats_port=args.stats_port,
        )
    except (OSError, ValueError) as exc:
        logger.error(f"Invalid configuration: {exc}", extra={"outcome": "fatal_error"})
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        return 1

    try:
        corpus = NameCorpus.load(args.names)
    except (OSError, EmptyCorpusError, UnicodeDecodeError) as exc:
        logger.error(f"could not load names: {exc}", extra={"outcome": "fatal_error"})
        console.print(f"[red]could not load names:[/red] {exc}")
        return 1

    try:
        asyncio.run(run_generator(corpus, target, cfg))
    except ServerResolutionError as exc:
        logger.error(f"{exc}", extra={"outcome": "fatal_error"})
        console.print(f"[red]{exc}")
        return 1
    except KeyboardInterrupt:
        logger.info("Generator interrupted", extra={"state": "interrupted"})
    console.print("[yellow]Stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
