"""Shared helpers for building RateWatch objects from CLI configuration."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from ratewatch.config import Config, load_config


def error_panel(console: Console, message: str, error: object) -> None:
    """Print a red error panel."""
    console.print(Panel(
        f"[red]{message}[/red]\n\n{error}",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))


def config_path_override() -> Optional[Path]:
    ctx = click.get_current_context(silent=True)
    if ctx is None or not isinstance(ctx.find_root().obj, dict):
        return None
    return ctx.find_root().obj.get("config_path")


def get_config() -> Config:
    """Load the configuration selected on the command line.

    Raises:
        ConfigError: If the configuration file is invalid.
    """
    return load_config(config_path_override())


def get_data_store(config: Config):
    """Get the data store instance."""
    from ratewatch.db.store import DataStore

    return DataStore(config.database.path)


def get_rate_provider(config: Config, data_store):
    """Get the configured rate snapshot provider."""
    if config.rates.source == "file" and config.rates.file is not None:
        from ratewatch.rates.providers import JsonFileRateProvider

        return JsonFileRateProvider(config.rates.file.expanduser())

    from ratewatch.rates.providers import StoreRateProvider

    return StoreRateProvider(data_store)


def build_checker(config: Config, console: Console, owner: Optional[str] = None):
    """Build an AlertChecker wired from configuration.

    Args:
        config: Loaded configuration.
        console: Console for the terminal notification channel.
        owner: Owner scope; falls back to ``checker.owner``.
    """
    from ratewatch.alerts.checker import AlertChecker
    from ratewatch.alerts.retry import RetryPolicy
    from ratewatch.notifiers.channels import build_routed_notifier

    store = get_data_store(config)
    notifications = config.notifications
    notifier = build_routed_notifier(
        notifications.channels,
        {owner: entry.channels for owner, entry in notifications.owners.items()},
        store,
        console,
    )
    retry_policy = RetryPolicy(
        max_attempts=config.checker.max_attempts,
        delay_seconds=config.checker.retry_delay_seconds,
    )
    return AlertChecker(
        data_store=store,
        rate_provider=get_rate_provider(config, store),
        notifier=notifier,
        retry_policy=retry_policy,
        owner=owner or config.checker.owner,
    )
