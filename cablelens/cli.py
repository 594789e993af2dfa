import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .cache import Cache
from .cables import CableProvider, CableStore, RouteClassifier
from .config import MAX_HOPS
from .enrichment import HopEnricher
from .errors import TraceError
from .models import TraceResult
from .output import ConsoleOutput, JsonExporter
from .probe import ProbeOrchestrator
from .trace import TraceAnalyzer, TraceService


console = Console()


def setup_logging(verbose: bool):
    """Route library logging through rich"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True
    )


def build_service(cache: Cache, max_hops: int) -> TraceService:
    """Wire the pipeline with one cache and one cable store"""
    store = CableStore(CableProvider())
    analyzer = TraceAnalyzer(
        enricher=HopEnricher(cache=cache),
        classifier=RouteClassifier(store)
    )
    return TraceService(
        orchestrator=ProbeOrchestrator(max_hops=max_hops),
        analyzer=analyzer
    )


async def run_trace(service: TraceService, domain: str, refresh_cables: bool) -> TraceResult:
    try:
        if refresh_cables:
            dataset = await service.analyzer.classifier.store.refresh()
            console.print(f"[dim]Cable dataset refreshed: {len(dataset)} cables[/]")
        return await service.trace(domain)
    finally:
        await service.close()


@click.command()
@click.argument('domain')
@click.option('-m', '--max-hops', default=MAX_HOPS, type=int,
              help=f'Maximum hops (default: {MAX_HOPS})')
@click.option('--json', 'json_path', type=click.Path(),
              help='Export results to JSON file')
@click.option('--no-cache', is_flag=True,
              help='Disable cache (always fetch fresh data)')
@click.option('--refresh-cables', is_flag=True,
              help='Download the submarine cable map before tracing')
@click.option('-v', '--verbose', is_flag=True,
              help='Show debug logging')
@click.version_option(version=__version__)
def main(domain: str, max_hops: int, json_path: Optional[str],
         no_cache: bool, refresh_cables: bool, verbose: bool):
    """
    CableLens - network path diagnostics.

    Trace the route to DOMAIN, locate every hop and find the submarine
    cables the traffic crosses.

    Examples:

        cablelens google.com

        cablelens example.org --json trace.json

        cablelens 1.1.1.1 --refresh-cables
    """
    setup_logging(verbose)

    output = ConsoleOutput(console)
    cache = Cache(persist=False) if no_cache else Cache()
    service = build_service(cache, max_hops)

    output.print_header(domain)

    try:
        with console.status("Tracing route..."):
            result = asyncio.run(run_trace(service, domain, refresh_cables))
    except TraceError as e:
        output.print_error(e.message)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/]")
        sys.exit(130)
    finally:
        if not no_cache:
            cache.save()

    output.print_results(result)
    output.print_cables(result)
    output.print_summary(result)

    if result.total_time == 0:
        output.print_warning("No hop returned RTT data")

    if json_path:
        exporter = JsonExporter()
        exporter.add_data_source("team_cymru")
        exporter.add_data_source("ip-api.com")
        exporter.add_data_source("submarinecablemap.com")

        json_file = Path(json_path)
        exporter.export(result, json_file)
        console.print(f"\n[dim]Results exported to:[/] {json_file.absolute()}")


if __name__ == '__main__':
    main()
