# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Reusable Rich table presets."""

from dataclasses import dataclass
from typing import Any, Dict, List

from rich import box
from rich.markup import escape
from rich.table import Table

from ghprs.classes import FetchSummary


@dataclass(frozen=True)
class TableTheme:
    box_style: box.Box
    header_style: str
    border_style: str
    show_lines: bool
    pad_edge: bool


TABLE_THEMES = {
    # Full wrapped grid
    'square': TableTheme(
        box_style=box.SQUARE,
        header_style='bold magenta',
        border_style='grey35',
        show_lines=True,
        pad_edge=True,
    ),

    # Minimal separators with a heavier header rule
    'minimal': TableTheme(
        box_style=box.MINIMAL_HEAVY_HEAD,
        header_style='bold white',
        border_style='grey50',
        show_lines=False,
        pad_edge=False,
    ),
}

DEFAULT_TABLE_THEME = 'minimal'

STATE_COLORS: Dict[str, str] = {
    'open': 'green',
    'closed': 'red',
    'merged': 'magenta',
}


def build_table(theme: str = DEFAULT_TABLE_THEME, **kwargs) -> Table:
    """Create a Rich table using a named visual theme."""
    preset = TABLE_THEMES.get(theme, TABLE_THEMES[DEFAULT_TABLE_THEME])
    params = {
        'box': preset.box_style,
        'header_style': preset.header_style,
        'border_style': preset.border_style,
        'show_lines': preset.show_lines,
        'pad_edge': preset.pad_edge,
    }
    params.update(kwargs)
    return Table(**params)


def colorize_state(state: str) -> str:
    color = STATE_COLORS.get(state, 'white')
    return f'[{color}]{state}[/{color}]'


def build_pr_table(prs: List[Dict[str, Any]]) -> Table:
    """Build a Rich table of PRs reduced to their display fields."""
    table = build_table(show_header=True)
    table.add_column('#', style='dim', justify='right')
    table.add_column('Title', style='green', max_width=60)
    table.add_column('User', style='yellow')
    table.add_column('Created', style='cyan')
    table.add_column('Closed', style='cyan')
    table.add_column('State')

    for index, pr in enumerate(prs):
        table.add_row(
            str(index),
            escape(pr.get('title') or 'Untitled'),
            escape(pr.get('user') or 'N/A'),
            pr.get('created_at') or '',
            pr.get('closed_at') or '',
            colorize_state(pr.get('state') or ''),
        )

    return table


def build_fetch_summary_table(summary: FetchSummary) -> Table:
    """One row per window: pages fetched, failures and records inserted."""
    table = build_table(theme='square', show_header=True)
    table.add_column('Window', style='cyan')
    table.add_column('Reported', justify='right')
    table.add_column('Pages', justify='right')
    table.add_column('Failed', justify='right')
    table.add_column('Records', style='green', justify='right')

    for result in summary.windows:
        failed = len(result.failed_pages) + (0 if result.probe_ok else 1)
        table.add_row(
            str(result.window),
            str(result.total_count) if result.total_count is not None else '?',
            str(result.total_pages),
            f'[red]{failed}[/red]' if failed else '0',
            str(result.records_inserted),
        )

    return table
