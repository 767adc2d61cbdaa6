"""netsweep CLI - Main entry point."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from netsweep import __version__
from netsweep.core.config import ProberSettings, Settings
from netsweep.core.exceptions import ConfigError, TargetError
from netsweep.core.logging import configure_logging

app = typer.Typer(
    name="netsweep",
    help="Resolve scan targets, expand CIDR blocks and classify connection outcomes",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"netsweep v{__version__}")
        raise typer.Exit()


def _load_settings(config: Optional[Path]) -> Settings:
    try:
        settings = Settings.from_file_or_default(config)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    configure_logging(
        level=settings.logging.level,
        json_format=settings.logging.json_format,
        log_file=settings.logging.log_file,
    )
    return settings


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """netsweep - target resolution and connection outcome classification."""
    pass


@app.command()
def resolve(
    targets: List[str] = typer.Argument(..., help="Target specifications (ip, hostname, cidr, ip,hostname)"),
    config: Optional[Path] = typer.Option(None, help="Path to configuration file"),
    allow_cidr_hostname: bool = typer.Option(
        False,
        "--allow-cidr-hostname/--reject-cidr-hostname",
        help="Pair 'cidr,hostname' input instead of rejecting it",
    ),
) -> None:
    """Resolve each target and show what it turns into."""
    from netsweep.core.resolver import TargetResolver

    settings = _load_settings(config)
    if allow_cidr_hostname:
        settings.resolver.ambiguous_policy = "cidr_with_hostname"

    resolver = TargetResolver(settings.resolver)

    table = Table(title="Resolved Targets")
    table.add_column("Target", style="cyan")
    table.add_column("Address")
    table.add_column("Prefix", justify="right")
    table.add_column("Hostname")
    table.add_column("Error", style="red")

    failures = 0
    for target in targets:
        try:
            spec = resolver.resolve(target)
        except TargetError as e:
            failures += 1
            table.add_row(target, "", "", "", str(e))
            continue
        info = spec.describe()
        table.add_row(
            target,
            info["address"] or "-",
            str(info["prefix_length"]) if info["prefix_length"] is not None else "-",
            info["hostname"] or "-",
            "",
        )

    console.print(table)
    if failures:
        raise typer.Exit(1)


@app.command()
def expand(
    target: str = typer.Argument(..., help="Target specification to enumerate"),
    limit: int = typer.Option(256, help="Maximum number of addresses to print (0 for all)"),
    config: Optional[Path] = typer.Option(None, help="Path to configuration file"),
) -> None:
    """List the addresses a target covers."""
    from netsweep.core.enumerator import expand as expand_spec
    from netsweep.core.enumerator import format_address
    from netsweep.core.resolver import TargetResolver

    settings = _load_settings(config)

    try:
        spec = TargetResolver(settings.resolver).resolve(target)
    except TargetError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    addresses = expand_spec(spec)
    if not addresses:
        console.print(f"[yellow]{target} has no address; only hostname {spec.hostname!r}[/yellow]")
        return

    for count, addr in enumerate(addresses):
        if limit and count >= limit:
            console.print(f"[dim]... and {spec.prefix.size - limit} more[/dim]")
            break
        console.print(format_address(addr))


@app.command()
def scan(
    targets_file: Path = typer.Argument(..., help="File containing targets (one per line)"),
    output: Path = typer.Option(Path("./scan-report.json"), "--output", "-o", help="Output report file"),
    port: Optional[int] = typer.Option(None, help="Destination port"),
    mode: Optional[str] = typer.Option(None, help="Probe mode: tcp or http"),
    concurrency: Optional[int] = typer.Option(None, help="Number of concurrent probes"),
    config: Optional[Path] = typer.Option(None, help="Path to configuration file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate the target file without probing"),
) -> None:
    """Resolve, expand and probe every target in a file."""
    import asyncio
    import json

    from netsweep.core.bulk import BulkScanOrchestrator, load_targets

    if not targets_file.exists():
        console.print(f"[red]Error: Target list '{targets_file}' not found[/red]")
        raise typer.Exit(1)

    targets = load_targets(targets_file)
    if not targets:
        console.print("[red]Error: No targets found in file[/red]")
        raise typer.Exit(1)

    settings = _load_settings(config)
    overrides = {
        key: value
        for key, value in {"port": port, "mode": mode, "concurrency": concurrency}.items()
        if value is not None
    }
    if overrides:
        try:
            settings.prober = ProberSettings.model_validate(
                {**settings.prober.model_dump(), **overrides}
            )
        except ValidationError as e:
            console.print(f"[red]Error: invalid scan options: {e}[/red]")
            raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold cyan]Input:[/bold cyan] {targets_file} ({len(targets)} targets)\n"
        f"[bold cyan]Mode:[/bold cyan] {settings.prober.mode} port {settings.prober.port}\n"
        f"[bold cyan]Concurrency:[/bold cyan] {settings.prober.concurrency}\n"
        f"[bold cyan]Output:[/bold cyan] {output}",
        title="Scan Configuration",
    ))

    if dry_run:
        console.print("[yellow]DRY RUN: Validated input file. Exiting.[/yellow]")
        return

    orchestrator = BulkScanOrchestrator(settings, targets)

    async def run_bulk():
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            return await orchestrator.run(progress)

    try:
        asyncio.run(run_bulk())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(130)

    report = orchestrator.generate_master_report()
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        json.dump(report, f, indent=2)

    summary = report["summary"]
    table = Table(title="Outcomes")
    table.add_column("Outcome", style="cyan")
    table.add_column("Count", justify="right")
    for outcome, count in summary["outcomes"].items():
        table.add_row(outcome, str(count))
    console.print(table)

    console.print(f"\n[green]✓ Scan complete![/green]")
    console.print(f"  Resolved targets: [green]{summary['resolved']}[/green]")
    console.print(f"  Failed targets:   [red]{summary['failed']}[/red]")
    console.print(f"  Report:           {output}")


if __name__ == "__main__":
    app()
