"""Rate snapshot commands for RateWatch CLI.

Rates are normally refreshed by an external process; these commands let
you seed or inspect the locally cached snapshot the checker reads.
"""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ratewatch.cli.context import error_panel, get_config, get_data_store, get_rate_provider
from ratewatch.models import RateSnapshot
from ratewatch.rates.providers import JsonFileRateProvider

console = Console()


def parse_rate_pairs(pairs: tuple[str, ...]) -> dict[str, float]:
    """Parse ``CODE=RATE`` arguments into a rate mapping.

    Raises:
        click.BadParameter: If an argument is malformed.
    """
    rates: dict[str, float] = {}
    for pair in pairs:
        code, sep, value = pair.partition("=")
        if not sep or not code.strip():
            raise click.BadParameter(f"expected CODE=RATE, got {pair!r}")
        try:
            rate = float(value)
        except ValueError:
            raise click.BadParameter(f"invalid rate in {pair!r}")
        if rate < 0:
            raise click.BadParameter(f"negative rate in {pair!r}")
        rates[code.strip().upper()] = rate
    return rates


@click.group("rates")
def rates() -> None:
    """Manage the cached rate snapshot."""


@rates.command("set")
@click.argument("base")
@click.argument("pairs", nargs=-1, required=True)
def set_rates(base: str, pairs: tuple[str, ...]) -> None:
    """Cache a snapshot of rates against BASE.

    \b
    Examples:
      ratewatch rates set USD EUR=0.85 GBP=0.73 JPY=110
    """
    rate_map = parse_rate_pairs(pairs)
    rate_map.setdefault(base.upper(), 1.0)

    try:
        store = get_data_store(get_config())
        snapshot = RateSnapshot(base_currency=base, rates=rate_map)
        store.save_snapshot(snapshot)
    except Exception as e:
        error_panel(console, "Failed to save rates:", e)
        raise SystemExit(1)

    console.print(
        f"[green]✓ Cached {len(snapshot.rates)} rates against {snapshot.base_currency}[/green]"
    )


@rates.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_rates(path: Path) -> None:
    """Cache a snapshot from an exchange-rate JSON file.

    The file must contain a ``conversion_rates`` object and may name its
    base currency in ``base_code``.
    """
    snapshot = JsonFileRateProvider(path).get_snapshot()
    if snapshot is None:
        error_panel(console, "Failed to import rates:", f"{path} is not a valid rate file")
        raise SystemExit(1)

    try:
        get_data_store(get_config()).save_snapshot(snapshot)
    except Exception as e:
        error_panel(console, "Failed to save rates:", e)
        raise SystemExit(1)

    console.print(
        f"[green]✓ Imported {len(snapshot.rates)} rates against {snapshot.base_currency}[/green]"
    )


@rates.command("show")
@click.option("--json", "as_json", is_flag=True, help="Print the snapshot as JSON.")
def show_rates(as_json: bool) -> None:
    """Show the snapshot the checker would use."""
    try:
        config = get_config()
        snapshot = get_rate_provider(config, get_data_store(config)).get_snapshot()
    except Exception as e:
        error_panel(console, "Failed to read rates:", e)
        raise SystemExit(1)

    if snapshot is None:
        console.print("[yellow]No rate snapshot available[/yellow]")
        return

    if as_json:
        click.echo(json.dumps(snapshot.model_dump(mode="json"), indent=2))
        return

    table = Table(
        title=f"Rates vs {snapshot.base_currency}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Currency", style="bold")
    table.add_column("Rate", justify="right")
    for code in sorted(snapshot.rates):
        table.add_row(code, f"{snapshot.rates[code]:.6f}")

    console.print(table)
    console.print(f"\n[dim]Fetched: {snapshot.fetched_at.strftime('%Y-%m-%d %H:%M')}[/dim]")
