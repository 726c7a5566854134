"""
Common utilities for CLI commands.

Shared helper functions for prompting and terminal output.
"""

import click

PAD = '  '
PROGRESS_BAR_WIDTH = 24
BANNER_WIDTH = 41


def pluralize(count: int, word: str) -> str:
    """Return '1 link' / '2 links' style text."""
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def progress_line(count: int, total: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    """
    Render a one-line progress bar such as [=====>      ]  40/120.

    Args:
        count: Messages processed so far
        total: Messages expected in total
        width: Number of cells inside the brackets
    """
    filled = min(round(count / total * width), width) if total else 0
    head = '>' if filled < width else ''
    rest = max(0, width - filled - len(head))
    return f"{PAD}[{'=' * filled}{head}{' ' * rest}]  {count}/{total}"


def echo_progress(count: int, total: int):
    """Redraw the progress bar in place on stderr."""
    click.echo('\r' + progress_line(count, total) + '\x1b[K', nl=False, err=True)


def banner_lines(months: int):
    """Box drawn at the top of an interactive run."""
    inner = BANNER_WIDTH - 2
    window = pluralize(months, 'month')
    lines = ['  Unsubscribe Link Extractor', f'  Connect via IMAP · Last {window}']
    return (
        ['╭' + '─' * inner + '╮']
        + ['│' + line.ljust(inner) + '│' for line in lines]
        + ['╰' + '─' * inner + '╯']
    )
