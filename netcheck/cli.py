import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .config import RunConfig, PROBE_TIMEOUT, RESOLUTION_TIMEOUT, STABILITY_SAMPLES, MAX_HOPS
from .errors import InvalidTargetError
from .logging_config import configure_logging
from .models import DiagnosticReport
from .output import ConsoleOutput, JsonExporter
from .probe import NetworkProber
from .progress import FanoutSink, TraceLog
from .report import parse_target
from .scheduler import PhaseScheduler


console = Console()


async def run_diagnostic(target: str, config: RunConfig, sink) -> DiagnosticReport:
    """Run one diagnostic with the real network prober"""
    async with NetworkProber(config) as prober:
        scheduler = PhaseScheduler(prober, sink=sink, config=config)
        return await scheduler.run(target)


@click.command()
@click.argument('target')
@click.option('-t', '--timeout', default=PROBE_TIMEOUT, type=float,
              help=f'Timeout per probe in seconds (default: {PROBE_TIMEOUT:g})')
@click.option('--resolution-timeout', default=RESOLUTION_TIMEOUT, type=float,
              help=f'Timeout for name resolution in seconds (default: {RESOLUTION_TIMEOUT:g})')
@click.option('-n', '--samples', default=STABILITY_SAMPLES, type=click.IntRange(min=1),
              help=f'Stability samples (default: {STABILITY_SAMPLES})')
@click.option('-m', '--max-hops', default=MAX_HOPS, type=click.IntRange(min=1, max=64),
              help=f'Maximum traceroute hops (default: {MAX_HOPS})')
@click.option('--hop-names/--no-hop-names', default=False,
              help='Reverse-resolve traceroute hops (default: disabled)')
@click.option('--json', 'json_path', type=click.Path(),
              help='Export report and trace log to JSON file')
@click.version_option(version=__version__)
def main(target: str, timeout: float, resolution_timeout: float, samples: int,
         max_hops: int, hop_names: bool, json_path: Optional[str]):
    """
    NetCheck - Network health diagnostics.
    
    Checks DNS, connection timing, TLS, HTTP status, routing and
    connection stability for TARGET (host name or URL).
    
    Examples:
        
        netcheck example.com
        
        netcheck https://example.com/status --json report.json
    """
    configure_logging()
    
    try:
        parsed = parse_target(target)
    except InvalidTargetError as e:
        raise click.BadParameter(str(e), param_hint='TARGET')
    
    config = RunConfig(
        resolution_timeout=resolution_timeout,
        probe_timeout=timeout,
        stability_samples=samples,
        max_hops=max_hops,
        resolve_hop_names=hop_names,
    )
    
    output = ConsoleOutput(console=console)
    trace_log = TraceLog()
    
    output.print_header(parsed.url)
    
    try:
        report = asyncio.run(run_diagnostic(target, config, FanoutSink(output, trace_log)))
    except KeyboardInterrupt:
        output.print_error("Interrupted")
        sys.exit(130)
    
    output.print_report(report)
    
    if json_path:
        json_file = Path(json_path)
        JsonExporter().export(report, trace_log, json_file)
        console.print(f"\n[dim]Report exported to:[/] {json_file.absolute()}")


if __name__ == '__main__':
    main()
