# ABOUTME: In-memory catalog of books and users keyed by case-insensitive names.
# ABOUTME: Add, remove, list, and search entities; owns the per-key lock registries.

import logging
from dataclasses import dataclass

from circulation.catalog.entities import Book, User, normalize_key
from circulation.catalog.locks import KeyedLockRegistry
from circulation.core.status import ListBooksStatus, OperationResult, SearchBookStatus

logger = logging.getLogger(__name__)


class DuplicateKeyError(Exception):
    """Raised when adding a book or user whose normalized key already exists."""


@dataclass(frozen=True)
class BookListing:
    """One row of the catalog listing: display title and availability."""

    title: str
    checked_out: bool


class CatalogStore:
    """Owns the title -> Book and name -> User maps plus their lock registries.

    Add and remove are synchronous and never await, so within one event loop
    they cannot interleave with a coordinator step that holds the locks.
    """

    def __init__(self) -> None:
        self._books: dict[str, Book] = {}
        self._users: dict[str, User] = {}
        self.book_locks = KeyedLockRegistry("book")
        self.user_locks = KeyedLockRegistry("user")

    # --- Books ---

    def add_book(self, title: str) -> bool:
        """Add a book to the catalog.

        Raises:
            DuplicateKeyError: If a book with the same normalized title exists.
        """
        key = normalize_key(title)
        if key in self._books:
            raise DuplicateKeyError(f"Book '{title}' already exists")
        self._books[key] = Book(title=title)
        logger.info("Added book %r", title)
        return True

    def remove_book(self, title: str) -> bool:
        """Remove a book, clearing it from its borrower's record if it is on loan.

        Returns:
            True if the book was present.
        """
        key = normalize_key(title)
        book = self._books.pop(key, None)
        if book is None:
            return False

        if book.is_checked_out():
            borrower = self._users.get(book.checked_out_by)
            if borrower is not None:
                borrower.return_book(key)
            logger.warning(
                "Removed book %r while checked out by %r; loan cleared",
                book.title,
                book.checked_out_by,
            )
        else:
            logger.info("Removed book %r", book.title)
        return True

    def get_book(self, title: str) -> Book | None:
        return self._books.get(normalize_key(title))

    def book_exists(self, title: str) -> bool:
        return normalize_key(title) in self._books

    def books(self) -> list[Book]:
        """Return all books in insertion order."""
        return list(self._books.values())

    def list_all_books(self) -> tuple[OperationResult[ListBooksStatus], list[BookListing]]:
        """List every book with its availability, in the order they were added."""
        if not self._books:
            return OperationResult(False, ListBooksStatus.NO_BOOKS_AVAILABLE), []

        listings = [
            BookListing(title=book.title, checked_out=book.is_checked_out())
            for book in self._books.values()
        ]
        return OperationResult(True, ListBooksStatus.SUCCESS), listings

    def search_book(self, title: str) -> OperationResult[SearchBookStatus]:
        """Report whether a book is on the shelf, on loan, or not in the catalog."""
        book = self.get_book(title)
        if book is None:
            return OperationResult(False, SearchBookStatus.BOOK_NOT_FOUND)
        if book.is_checked_out():
            return OperationResult(True, SearchBookStatus.CHECKED_OUT)
        return OperationResult(True, SearchBookStatus.AVAILABLE)

    # --- Users ---

    def add_user(self, name: str) -> bool:
        """Register a user.

        Raises:
            DuplicateKeyError: If a user with the same normalized name exists.
        """
        key = normalize_key(name)
        if key in self._users:
            raise DuplicateKeyError(f"User '{name}' already exists")
        self._users[key] = User(name=name)
        logger.info("Added user %r", name)
        return True

    def remove_user(self, name: str) -> bool:
        """Remove a user, returning any books they hold to the shelf.

        Returns:
            True if the user was present.
        """
        key = normalize_key(name)
        user = self._users.pop(key, None)
        if user is None:
            return False

        for book_key in sorted(user.borrowed):
            book = self._books.get(book_key)
            if book is not None:
                book.set_checked_in(key)
        if user.borrowed:
            logger.warning(
                "Removed user %r holding %d book(s); books returned to the shelf",
                user.name,
                user.book_count(),
            )
            user.borrowed.clear()
        else:
            logger.info("Removed user %r", user.name)
        return True

    def get_user(self, name: str) -> User | None:
        return self._users.get(normalize_key(name))

    def user_exists(self, name: str) -> bool:
        return normalize_key(name) in self._users

    def users(self) -> list[User]:
        """Return all users in insertion order."""
        return list(self._users.values())
