"""Alert management commands for RateWatch CLI.

Handles creating, listing, pausing, resuming and removing rate alerts.
"""

from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ratewatch.cli.context import error_panel, get_config, get_data_store
from ratewatch.models import Alert

console = Console()


def alert_status(alert: Alert) -> str:
    """Human-readable lifecycle state of an alert."""
    if alert.notified:
        return "fired"
    if not alert.is_active:
        return "paused"
    return "active"


_STATUS_STYLES = {
    "active": "[green]● Active[/green]",
    "paused": "[dim]‖ Paused[/dim]",
    "fired": "[yellow]✓ Fired[/yellow]",
}


def _empty_message(fired_count: int) -> str:
    if fired_count:
        return f"[dim]No pending alerts. {fired_count} fired alerts hidden, use --all to show them.[/dim]"
    return "[dim]No alerts set. Use 'ratewatch alert FROM TO above|below RATE' to create one.[/dim]"


@click.command("alert")
@click.argument("from_currency")
@click.argument("to_currency")
@click.argument("condition", type=click.Choice(["above", "below"], case_sensitive=False))
@click.argument("target", type=float)
@click.option("--owner", default="local", show_default=True, help="Alert owner.")
def create_alert(
    from_currency: str, to_currency: str, condition: str, target: float, owner: str
) -> None:
    """Create a rate alert.

    Notifies once the FROM_CURRENCY -> TO_CURRENCY rate moves ABOVE or
    BELOW the TARGET rate.

    \b
    Examples:
      ratewatch alert USD EUR below 0.84
      ratewatch alert EUR GBP above 0.90 --owner alice
    """
    try:
        alert = Alert(
            owner=owner,
            from_currency=from_currency,
            to_currency=to_currency,
            target_rate=target,
            condition=condition.lower(),
        )
    except ValidationError as e:
        error_panel(console, "Invalid alert:", e)
        raise SystemExit(1)

    try:
        store = get_data_store(get_config())
        alert_id = store.save_alert(alert)
    except Exception as e:
        error_panel(console, "Failed to create alert:", e)
        raise SystemExit(1)

    console.print(Panel(
        f"[bold green]Alert Created[/bold green]\n\n"
        f"ID:        {alert_id}\n"
        f"Pair:      {alert.pair}\n"
        f"Condition: {alert.condition} {alert.target_rate:.4f}\n"
        f"Owner:     {alert.owner}",
        title="[bold]New Alert[/bold]",
        border_style="green",
    ))


@click.command("alerts")
@click.option("--remove", "remove_id", type=int, default=None, help="Delete alert with ID.")
@click.option("--pause", "pause_id", type=int, default=None, help="Pause alert with ID.")
@click.option("--resume", "resume_id", type=int, default=None, help="Resume alert with ID.")
@click.option("--owner", default=None, help="Only show this owner's alerts.")
@click.option("--all", "show_all", is_flag=True, help="Include alerts that have already fired.")
def list_alerts(
    remove_id: Optional[int],
    pause_id: Optional[int],
    resume_id: Optional[int],
    owner: Optional[str],
    show_all: bool,
) -> None:
    """Display or manage alerts.

    \b
    Examples:
      ratewatch alerts              # List active and paused alerts
      ratewatch alerts --all        # Include fired alerts
      ratewatch alerts --pause 3    # Stop monitoring alert 3
      ratewatch alerts --resume 3   # Monitor alert 3 again
      ratewatch alerts --remove 5   # Delete alert 5
    """
    try:
        store = get_data_store(get_config())

        if remove_id is not None:
            alert = store.get_alert_by_id(remove_id)
            if alert is None:
                console.print(f"[yellow]Alert with ID {remove_id} not found[/yellow]")
                return
            store.delete_alert(remove_id)
            console.print(f"[green]✓ Removed alert {remove_id} ({alert.pair})[/green]")
            return

        for alert_id, active in ((pause_id, False), (resume_id, True)):
            if alert_id is None:
                continue
            alert = store.get_alert_by_id(alert_id)
            if alert is None:
                console.print(f"[yellow]Alert with ID {alert_id} not found[/yellow]")
                return
            if alert.notified:
                console.print(f"[yellow]Alert {alert_id} has already fired[/yellow]")
                return
            store.set_alert_active(alert_id, active)
            verb = "Resumed" if active else "Paused"
            console.print(f"[green]✓ {verb} alert {alert_id} ({alert.pair})[/green]")
            return

        alerts = store.get_alerts(owner)
        fired_count = sum(1 for alert in alerts if alert.notified)
        if not show_all:
            alerts = [alert for alert in alerts if not alert.notified]

        if not alerts:
            console.print(Panel(
                _empty_message(fired_count),
                title="[bold]Alerts[/bold]",
                border_style="dim",
            ))
            return

        table = Table(
            title="Rate Alerts",
            show_header=True,
            header_style="bold cyan",
        )

        table.add_column("ID", style="dim", width=6)
        table.add_column("Pair", style="bold")
        table.add_column("Condition")
        table.add_column("Owner", style="dim")
        table.add_column("Created", style="dim")
        table.add_column("Status", justify="center")

        for alert in alerts:
            table.add_row(
                str(alert.id),
                alert.pair,
                f"{alert.condition} {alert.target_rate:.4f}",
                alert.owner,
                alert.created_at.strftime("%Y-%m-%d %H:%M"),
                _STATUS_STYLES[alert_status(alert)],
            )

        console.print(table)
        console.print(f"\n[dim]Total: {len(alerts)} alerts[/dim]")
        if fired_count and not show_all:
            console.print(f"[dim]{fired_count} fired alerts hidden, use --all to show them[/dim]")

    except Exception as e:
        error_panel(console, "Failed to list alerts:", e)
        raise SystemExit(1)
