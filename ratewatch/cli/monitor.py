"""Alert checker commands for RateWatch CLI.

Runs the alert checker once or continuously, explains individual
alerts and shows the in-app notification inbox.
"""

import time
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ratewatch.cli.context import build_checker, error_panel, get_config, get_data_store
from ratewatch.models import PassResult
from ratewatch.notifiers.message import format_rate

console = Console()


def format_pass_result(result: PassResult) -> str:
    """Render a pass summary for display."""
    if result.skipped:
        return "[yellow]Skipped: another check is already running[/yellow]"

    lines = [
        f"Checked:     {result.checked}",
        f"Triggered:   {result.triggered}",
        f"Unpriced:    {result.unavailable}",
        f"Marked sent: {result.persisted}",
    ]
    if result.persist_failures:
        lines.append(f"[red]Not marked:  {result.persist_failures}[/red]")
    if result.fired:
        lines.append("")
        for fired in result.fired:
            line = (
                f"[bold]#{fired.alert_id}[/bold] {fired.pair} at {format_rate(fired.current_rate)} "
                f"({fired.condition} {format_rate(fired.target_rate)}) "
                f"[dim]{fired.triggered_at:%H:%M:%S}[/dim]"
            )
            if not fired.marked:
                line += " [red]not marked[/red]"
            lines.append(line)
    if result.errors:
        lines.append("")
        lines.extend(f"[red]• {error}[/red]" for error in result.errors)
    return "\n".join(lines)


@click.command("check")
@click.option("--owner", default=None, help="Only check this owner's alerts.")
def check(owner: Optional[str]) -> None:
    """Run one alert check now.

    \b
    Examples:
      ratewatch check
      ratewatch check --owner alice
    """
    try:
        config = get_config()
        checker = build_checker(config, console, owner=owner)
        result = checker.run_once()
        stats = get_data_store(config).get_stats()
    except Exception as e:
        error_panel(console, "Alert check failed:", e)
        raise SystemExit(1)

    border = "red" if result.errors else "green"
    console.print(Panel(
        format_pass_result(result),
        title="[bold]Alert Check[/bold]",
        border_style=border,
    ))
    console.print(
        f"[dim]Store: {stats['alerts']} alerts, "
        f"{stats['rate_snapshots']} rate snapshots, "
        f"{stats['notifications']} notifications[/dim]"
    )


@click.command("explain")
@click.argument("alert_id", type=int)
def explain(alert_id: int) -> None:
    """Explain how the next check would treat ALERT_ID."""
    try:
        checker = build_checker(get_config(), console)
        explanation = checker.explain_alert(alert_id)
    except Exception as e:
        error_panel(console, "Failed to explain alert:", e)
        raise SystemExit(1)

    alert = explanation.alert
    lines = [f"ID:         {alert_id}"]
    if alert is not None:
        lines.append(f"Pair:       {alert.pair}")
        lines.append(f"Condition:  {alert.condition} {alert.target_rate:.4f}")
    if explanation.cross_rate is not None:
        lines.append(f"Rate:       {explanation.cross_rate:.4f}")
    if explanation.reason is not None:
        lines.append(f"[yellow]Skipped:    {explanation.reason}[/yellow]")
    elif explanation.triggered:
        lines.append("[bold red]Would trigger[/bold red]")
    else:
        lines.append("[green]Condition not met yet[/green]")

    console.print(Panel(
        "\n".join(lines),
        title="[bold]Alert Explanation[/bold]",
        border_style="cyan",
    ))


@click.command("monitor")
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between checks (default: checker.interval_seconds).",
)
@click.option("--owner", default=None, help="Only check this owner's alerts.")
def monitor(interval: Optional[float], owner: Optional[str]) -> None:
    """Check alerts continuously until interrupted.

    The first check runs immediately.

    \b
    Examples:
      ratewatch monitor
      ratewatch monitor --interval 60
    """
    try:
        config = get_config()
        checker = build_checker(config, console, owner=owner)
        permitted = checker.notifier.request_permission()
    except Exception as e:
        error_panel(console, "Failed to start monitor:", e)
        raise SystemExit(1)

    interval = interval or config.checker.interval_seconds
    if not permitted:
        console.print(
            "[dim]Notifications are not available; fired alerts will be marked "
            "without being delivered[/dim]"
        )
    console.print(f"[bold]Monitoring alerts every {interval:g}s[/bold] [dim](Ctrl-C to stop)[/dim]")

    checker.start(interval)
    try:
        while checker.status().is_running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopping...[/dim]")
    finally:
        checker.stop(wait=True, timeout=interval)

    if checker.last_result is not None:
        console.print(Panel(
            format_pass_result(checker.last_result),
            title="[bold]Last Check[/bold]",
            border_style="dim",
        ))


@click.command("inbox")
@click.option("--limit", type=int, default=20, show_default=True, help="Number of entries.")
@click.option("--owner", default=None, help="Only show this owner's notifications.")
def inbox(limit: int, owner: Optional[str]) -> None:
    """Show recent in-app notifications."""
    try:
        records = get_data_store(get_config()).get_notifications(owner, limit=limit)
    except Exception as e:
        error_panel(console, "Failed to read inbox:", e)
        raise SystemExit(1)

    if not records:
        console.print("[dim]No notifications yet[/dim]")
        return

    table = Table(title="Notifications", show_header=True, header_style="bold cyan")
    table.add_column("When", style="dim")
    table.add_column("Alert", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Message")

    for record in records:
        table.add_row(
            record.created_at.strftime("%Y-%m-%d %H:%M"),
            str(record.alert_id) if record.alert_id is not None else "-",
            record.title,
            record.body,
        )

    console.print(table)
