# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
CLI commands for managing ghprs configuration.

Users can configure:
- Organization and the year of its first PR
- Local store path and duplicate policy
- Log level and log directory
"""

import click
from rich.table import Table

from ghprs.cli.helpers import console, print_error
from ghprs.utils import config as config_module
from ghprs.utils.config import CONFIG_ENV_VARS, CONFIG_KEYS, load_config, parse_duplicate_policy, save_config


@click.group(name='config', invoke_without_command=True)
@click.pass_context
def config_group(ctx):
    """CLI configuration management.

    Show current configuration (default) or set config values.
    Environment variables override the config file.

    \b
    Subcommands:
        set <key> <value>    Set a config value
    """
    if ctx.invoked_subcommand is None:
        show_config()


def show_config():
    """Display current configuration."""
    config = load_config()

    if not config:
        console.print('\n[yellow]No configuration set.[/yellow]')
        console.print('[dim]Use "ghprs config set <key> <value>" to set values.[/dim]')
        console.print(f'\n[dim]Available keys: {", ".join(CONFIG_KEYS)}[/dim]')
        return

    console.print('\n[bold cyan]ghprs Configuration[/bold cyan]\n')

    table = Table(show_header=True, header_style='bold magenta')
    table.add_column('Setting', style='cyan')
    table.add_column('Value', style='green')
    table.add_column('Env override', style='dim')

    for key, value in sorted(config.items()):
        table.add_row(key, str(value), CONFIG_ENV_VARS.get(key, ''))

    console.print(table)
    console.print(f'\n[dim]Config file: {config_module.CONFIG_FILE}[/dim]')


@config_group.command('set')
@click.argument('key', type=click.Choice(CONFIG_KEYS))
@click.argument('value', type=str)
def config_set(key: str, value: str):
    """Set a configuration value.

    \b
    Examples:
        ghprs config set org ramda
        ghprs config set first_pr_year 2013
        ghprs config set duplicate_policy upsert
    """
    if key == 'first_pr_year' and not value.isdigit():
        print_error(f'first_pr_year must be a year (got {value})')
        raise SystemExit(2)
    if key == 'duplicate_policy':
        try:
            parse_duplicate_policy(value)
        except ValueError as e:
            print_error(str(e))
            raise SystemExit(2)

    config = load_config()
    old_value = config.get(key)
    config[key] = int(value) if key == 'first_pr_year' else value

    try:
        save_config(config)
    except IOError as e:
        print_error(f'Failed to save config: {e}')
        raise SystemExit(1)

    if old_value is not None:
        console.print(f'[green]Updated {key}:[/green] {old_value} → {value}')
    else:
        console.print(f'[green]Set {key}:[/green] {value}')
