# ABOUTME: Interactive menu shell for the circulation desk.
# ABOUTME: Prompts for titles and user names, calls the catalog and coordinator, and renders outcomes.

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from circulation.catalog.store import CatalogStore
from circulation.core.coordinator import CheckoutCoordinator
from circulation.core.status import (
    CheckInStatus,
    CheckoutStatus,
    ListBooksStatus,
    OperationResult,
    SearchBookStatus,
    Status,
)
from circulation.core.verifier import verify_circulation

T = TypeVar("T")

_STATUS_STYLES: dict[Status, str] = {
    CheckoutStatus.SUCCESS: "green",
    CheckoutStatus.USER_NOT_FOUND: "red",
    CheckoutStatus.BOOK_NOT_FOUND: "red",
    CheckoutStatus.BOOK_ALREADY_CHECKED_OUT: "yellow",
    CheckoutStatus.MAX_BOOKS_REACHED: "yellow",
    CheckoutStatus.ALREADY_CHECKED_OUT_BY_USER: "yellow",
    CheckInStatus.SUCCESS: "green",
    CheckInStatus.USER_NOT_FOUND: "red",
    CheckInStatus.BOOK_NOT_FOUND: "red",
    CheckInStatus.BOOK_NOT_BORROWED_BY_USER: "yellow",
    CheckInStatus.CHECKED_OUT_BY_ANOTHER_USER: "yellow",
    ListBooksStatus.SUCCESS: "green",
    ListBooksStatus.NO_BOOKS_AVAILABLE: "yellow",
    SearchBookStatus.AVAILABLE: "green",
    SearchBookStatus.CHECKED_OUT: "yellow",
    SearchBookStatus.BOOK_NOT_FOUND: "red",
}

MENU_OPTIONS = [
    ("1", "[User] Add User"),
    ("2", "[User] Remove User"),
    ("3", "[Book] Add Book"),
    ("4", "[Book] Remove Book"),
    ("5", "[Book] Check Out Book"),
    ("6", "[Book] Check In Book"),
    ("7", "[Library] List All Books"),
    ("8", "[Library] Search Book"),
    ("9", "[Library] Verify Circulation"),
    ("0", "[System] Exit"),
]


class LibraryShell:
    """Menu-driven console front end over a CatalogStore and CheckoutCoordinator.

    Input is trimmed and empty values are re-prompted. All coroutines run on
    one event loop owned by the session, so per-key locks stay bound to it.
    """

    def __init__(
        self,
        store: CatalogStore,
        coordinator: CheckoutCoordinator,
        *,
        console: Console | None = None,
    ) -> None:
        self._store = store
        self._coordinator = coordinator
        self._console = console or Console()
        self._runner: asyncio.Runner | None = None
        self._actions: dict[str, Callable[[], None]] = {
            "1": self.add_user,
            "2": self.remove_user,
            "3": self.add_book,
            "4": self.remove_book,
            "5": self.checkout_book,
            "6": self.check_in_book,
            "7": self.list_books,
            "8": self.search_book,
            "9": self.verify,
        }

    def run(self) -> None:
        """Show the menu and dispatch choices until the user exits."""
        self._console.print("Welcome to the circulation desk.\n")
        with asyncio.Runner() as runner:
            self._runner = runner
            try:
                while True:
                    self._show_menu()
                    choice = click.prompt(
                        "Select an option", type=str, default="", show_default=False
                    ).strip()
                    if choice == "0":
                        self._console.print("Exiting the program. Goodbye!")
                        return
                    action = self._actions.get(choice)
                    if action is None:
                        self._console.print("[yellow]Invalid option. Please try again.[/yellow]")
                        continue
                    action()
            finally:
                self._runner = None

    # --- Menu actions ---

    def add_user(self) -> None:
        name = self._prompt_value("Enter user name", "User name")
        if self._store.user_exists(name):
            self._console.print("[red]User name already exists. Cannot add duplicate user.[/red]")
            return
        self._store.add_user(name)
        self._console.print("[green]User added successfully.[/green]")

    def remove_user(self) -> None:
        name = self._prompt_value("Enter user name", "User name")
        if not self._store.remove_user(name):
            self._console.print("[red]User not found.[/red]")
            return
        self._console.print("[green]User removed successfully.[/green]")

    def add_book(self) -> None:
        title = self._prompt_value("Enter book title", "Book title")
        if self._store.book_exists(title):
            self._console.print("[red]Book title already exists. Cannot add duplicate book.[/red]")
            return
        self._store.add_book(title)
        self._console.print("[green]Book added successfully.[/green]")

    def remove_book(self) -> None:
        title = self._prompt_value("Enter book title", "Book title")
        if not self._store.remove_book(title):
            self._console.print("[red]Book not found.[/red]")
            return
        self._console.print("[green]Book removed successfully.[/green]")

    def checkout_book(self) -> None:
        title, user_name = self._prompt_title_and_user()
        if not self._store.user_exists(user_name):
            self._store.add_user(user_name)
            self._console.print("[green]User did not exist and was created successfully.[/green]")
        result = self._run(self._coordinator.checkout_book(title, user_name))
        self._show_result(result)

    def check_in_book(self) -> None:
        title, user_name = self._prompt_title_and_user()
        result = self._run(self._coordinator.check_in_book(title, user_name))
        self._show_result(result)

    def list_books(self) -> None:
        result, listings = self._store.list_all_books()
        if listings:
            table = Table(title="Books in the library")
            table.add_column("Title", style="bold")
            table.add_column("Status")
            for listing in listings:
                status = "[yellow]Checked out[/yellow]" if listing.checked_out else "Available"
                table.add_row(escape(listing.title), status)
            self._console.print(table)
        self._show_result(result)

    def search_book(self) -> None:
        title = self._prompt_value("Enter book title", "Book title")
        self._show_result(self._store.search_book(title))

    def verify(self) -> None:
        result = verify_circulation(self._store, max_books=self._coordinator.max_books)
        if result.total_issues == 0:
            self._console.print(f"[green]All {result.ok} book(s) verified.[/green]")
            return

        table = Table()
        table.add_column("Record", style="bold")
        table.add_column("Issue", style="red")
        for book in result.orphaned_loans:
            table.add_row(escape(book.title), f"Loan to {book.checked_out_by!r} not on record")
        for user, book_key in result.stale_borrows:
            table.add_row(escape(user.name), f"Lists {book_key!r} but does not hold it")
        for user in result.over_limit:
            table.add_row(escape(user.name), f"Holds {user.book_count()} book(s)")
        self._console.print(table)
        self._console.print(
            f"\n[red]{result.total_issues} issue(s) found, {result.ok} book(s) verified.[/red]"
        )

    # --- Helpers ---

    def _show_menu(self) -> None:
        self._console.print("[cyan]----------Function Menu----------[/cyan]")
        for key, label in MENU_OPTIONS:
            self._console.print(f"{key}. {label}", style="cyan", markup=False)
        self._console.print("[cyan]---------------------------------[/cyan]")

    def _prompt_value(self, prompt: str, label: str) -> str:
        """Prompt until a non-blank value is entered, returning it trimmed."""
        while True:
            value = click.prompt(prompt, type=str, default="", show_default=False).strip()
            if value:
                return value
            self._console.print(f"[yellow]{label} cannot be empty. Please try again.[/yellow]")

    def _prompt_title_and_user(self) -> tuple[str, str]:
        while True:
            title = click.prompt(
                "Enter book title", type=str, default="", show_default=False
            ).strip()
            user_name = click.prompt(
                "Enter user name", type=str, default="", show_default=False
            ).strip()
            if title and user_name:
                return title, user_name
            self._console.print(
                "[yellow]Book title and user name cannot be empty. Please try again.[/yellow]"
            )

    def _show_result(self, result: OperationResult[Any]) -> None:
        self._console.print(result.message, style=_STATUS_STYLES[result.status], markup=False)

    def _run(self, coro: Coroutine[Any, Any, T]) -> T:
        if self._runner is None:
            return asyncio.run(coro)
        return self._runner.run(coro)
