"""Setup commands for RateWatch CLI."""

import click
from rich.console import Console
from rich.panel import Panel

from ratewatch.config import get_config_path, write_template_config
from ratewatch.cli.context import config_path_override

console = Console()


@click.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init(force: bool) -> None:
    """Write a template configuration file.

    \b
    Examples:
      ratewatch init
      ratewatch --config ./ratewatch.toml init
    """
    config_path = config_path_override() or get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        console.print("[dim]Use --force to overwrite it[/dim]")
        return

    written = write_template_config(config_path)
    console.print(Panel(
        f"[bold green]Config written[/bold green]\n\n{written}",
        title="[bold]RateWatch[/bold]",
        border_style="green",
    ))
