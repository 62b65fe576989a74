# ABOUTME: Shared Click options for circulation CLI commands.
# ABOUTME: Provides reusable decorators for the borrowing cap and lock timeout.

import click

from circulation.core.coordinator import DEFAULT_LOCK_TIMEOUT, MAX_BOOKS_PER_USER

max_books_option = click.option(
    "--max-books",
    type=click.IntRange(min=1),
    default=MAX_BOOKS_PER_USER,
    show_default=True,
    help="Maximum number of books a user may hold at once.",
)

lock_timeout_option = click.option(
    "--lock-timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_LOCK_TIMEOUT,
    help="Seconds to wait for a book or user lock (default: wait indefinitely).",
)
