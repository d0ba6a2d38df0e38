# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
ghprs CLI - Main entry point

Usage:
    ghprs fetch              - Fetch every PR of the organization (alias: f)
    ghprs get ...            - Count or list stored PRs (alias: g)
    ghprs clear              - Remove all stored PRs
    ghprs config             - Show/set CLI configuration
"""

import asyncio
from typing import Optional, Tuple

import click

from ghprs import __version__
from ghprs.classes import DuplicatePolicy
from ghprs.cli.config_commands import config_group
from ghprs.cli.helpers import console, open_store, print_error, print_success, print_warning, resolve_settings
from ghprs.cli.tables import build_fetch_summary_table, build_pr_table
from ghprs.constants import VALID_STATES, VALID_TIMESTAMP_TYPES
from ghprs.query import InvalidFilterError
from ghprs.service import clear_prs, fetch_prs, get_prs
from ghprs.storage import StoreError
from ghprs.utils.logging import setup_logging

EXAMPLES = """
\b
Example calls:
    ghprs fetch                                          fetch PRs from GitHub
    ghprs get                                            number of all fetched PRs
    ghprs get -s merged                                  number of PRs with 'merged' state
    ghprs get -s closed -l                               list PRs with 'closed' state
    ghprs get -s closed -t created -d 3/1/2020 5/20/2022 -l
                                                         list 'closed' PRs created between the dates
    ghprs get -s merged -t closed -d 1/2/2015 1/3/2022 -l
                                                         list 'merged' PRs closed between the dates
"""


class AliasGroup(click.Group):
    """Click Group that supports command aliases without duplicate help entries."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._aliases = {}  # alias -> canonical name

    def add_alias(self, name, alias):
        """Register an alias for an existing command."""
        self._aliases[alias] = name

    def get_command(self, ctx, cmd_name):
        canonical = self._aliases.get(cmd_name, cmd_name)
        return super().get_command(ctx, canonical)

    def format_commands(self, ctx, formatter):
        """Write the help text, appending aliases to command descriptions."""
        alias_map = {}
        for alias, canonical in self._aliases.items():
            alias_map.setdefault(canonical, []).append(alias)

        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.commands.get(subcommand)
            if cmd is None or cmd.hidden:
                continue
            help_text = cmd.get_short_help_str(limit=150)
            aliases = alias_map.get(subcommand)
            if aliases:
                subcommand = f'{subcommand}, {", ".join(sorted(aliases))}'
            commands.append((subcommand, help_text))

        if commands:
            with formatter.section('Commands'):
                formatter.write_dl(commands)


@click.group(cls=AliasGroup, epilog=EXAMPLES)
@click.version_option(version=__version__, prog_name='ghprs')
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Console log level (default: GHPRS_LOG_LEVEL or WARNING)',
)
def cli(log_level: Optional[str]):
    """ghprs - Organization pull request census backed by the GitHub search API"""
    settings = resolve_settings({'log_level': log_level})
    setup_logging(settings.log_level, settings.log_dir)


@click.command(name='fetch')
@click.option('--org', default=None, help='GitHub organization (default: GHPRS_ORG or ramda)')
@click.option('--first-year', 'first_pr_year', type=int, default=None, help="Year of the organization's first PR")
@click.option('--db', 'db_path', default=None, help='Path of the local store file')
@click.option(
    '--policy',
    'duplicate_policy',
    type=click.Choice([p.value for p in DuplicatePolicy]),
    default=None,
    help='append: keep re-fetched PRs as new records; upsert: replace records by id',
)
@click.option('--concurrency', type=click.IntRange(min=1), default=1, show_default=True, help='Windows fetched in parallel')
def fetch_command(
    org: Optional[str],
    first_pr_year: Optional[int],
    db_path: Optional[str],
    duplicate_policy: Optional[str],
    concurrency: int,
):
    """Fetch ALL PRs of the organization via the GitHub v3 search API."""
    settings = resolve_settings(
        {'org': org, 'first_pr_year': first_pr_year, 'db_path': db_path, 'duplicate_policy': duplicate_policy}
    )
    if not settings.token:
        raise click.UsageError('No GitHub token found - set GITHUB_PAT, GITHUB_TOKEN or API_KEY (a .env file works)')

    store = open_store(settings)
    console.print(f'[dim]Requesting PRs for org [bold]{settings.org}[/bold] into {settings.db_path}...[/dim]')

    try:
        summary = asyncio.run(fetch_prs(settings, store, concurrency=concurrency))
    except StoreError as e:
        print_error(str(e))
        raise SystemExit(1)

    console.print(build_fetch_summary_table(summary))
    if summary.is_complete:
        print_success(f'Fetched {summary.records_inserted} PRs ({store.count} stored)')
    else:
        print_warning(
            f'Fetched {summary.records_inserted} PRs ({store.count} stored) - '
            f'{summary.pages_failed} page(s), {summary.probes_failed} probe(s) failed and '
            f'{summary.items_skipped} item(s) were skipped; the local copy is incomplete'
        )


@click.command(name='get')
@click.option(
    '-s',
    '--state',
    default='all',
    show_default=True,
    help=f'Filter by current state ({", ".join(VALID_STATES)})',
)
@click.option('-l', '--list', 'list_prs', is_flag=True, default=False, help='List the PRs')
@click.option(
    '-d',
    '--date',
    nargs=2,
    type=str,
    default=None,
    help="Filter by date range START END - format 'M/D/YYYY' (applies to the creation date unless -t is given)",
)
@click.option(
    '-t',
    '--timestamp-type',
    default=None,
    help=f'Date range applies to this timestamp ({", ".join(VALID_TIMESTAMP_TYPES)}) - MUST be used with --date',
)
@click.option('--db', 'db_path', default=None, help='Path of the local store file')
@click.pass_context
def get_command(
    ctx: click.Context,
    state: str,
    list_prs: bool,
    date: Optional[Tuple[str, str]],
    timestamp_type: Optional[str],
    db_path: Optional[str],
):
    """Look up stored PRs: count them, or list them with -l."""
    settings = resolve_settings({'db_path': db_path})
    store = open_store(settings)

    try:
        result = get_prs(store, state=state, list_prs=list_prs, date=date or None, timestamp_type=timestamp_type)
    except InvalidFilterError as e:
        print_error(str(e))
        ctx.exit(2)
    except StoreError as e:
        print_error(str(e))
        ctx.exit(1)

    if not result.has_data:
        console.print('[yellow]No data[/yellow] [dim]- run "ghprs fetch" first[/dim]')
        return

    if result.show_list and result.records:
        console.print(build_pr_table(result.records))
    console.print(f'Total: {result.count}')


@click.command(name='clear')
@click.option('--db', 'db_path', default=None, help='Path of the local store file')
@click.pass_context
def clear_command(ctx: click.Context, db_path: Optional[str]):
    """Clear all locally stored PRs."""
    settings = resolve_settings({'db_path': db_path})
    store = open_store(settings)

    try:
        removed = clear_prs(store)
    except StoreError as e:
        print_error(str(e))
        ctx.exit(1)

    print_success(f'Removed {removed} PRs from {settings.db_path}')


cli.add_command(fetch_command)
cli.add_alias('fetch', 'f')
cli.add_command(get_command)
cli.add_alias('get', 'g')
cli.add_command(clear_command)
cli.add_command(config_group)


def main():
    """Main entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
