# ABOUTME: The `circulation shell` command for running the interactive circulation desk.
# ABOUTME: Builds a fresh in-memory catalog and coordinator, then hands control to the menu loop.

import click
from rich.console import Console

from circulation.catalog.store import CatalogStore
from circulation.cli.options import lock_timeout_option, max_books_option
from circulation.cli.shell import LibraryShell
from circulation.core.coordinator import CheckoutCoordinator


@click.command("shell")
@max_books_option
@lock_timeout_option
def shell(max_books: int, lock_timeout: float | None) -> None:
    """Start the interactive circulation desk. State lasts for this session only."""
    store = CatalogStore()
    coordinator = CheckoutCoordinator(store, max_books=max_books, lock_timeout=lock_timeout)
    LibraryShell(store, coordinator, console=Console()).run()
