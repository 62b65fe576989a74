# ABOUTME: Book and User records with self-contained state-transition guards.
# ABOUTME: Guards never mutate on failure; callers hold the per-key locks.

from dataclasses import dataclass, field


def normalize_key(text: str) -> str:
    """Return the case-insensitive lookup key for a title or user name."""
    return text.lower()


@dataclass
class Book:
    """A single-copy book in the catalog.

    `checked_out_by` holds the borrower's normalized key, or an empty string
    when the book is on the shelf.
    """

    title: str
    checked_out_by: str = ""

    @property
    def key(self) -> str:
        return normalize_key(self.title)

    def is_checked_out(self) -> bool:
        return bool(self.checked_out_by)

    def is_checked_out_by(self, user_key: str) -> bool:
        return self.checked_out_by == user_key

    def set_checked_out(self, user_key: str) -> bool:
        """Lend the book to `user_key`. Fails if it is already out."""
        if self.is_checked_out():
            return False
        self.checked_out_by = user_key
        return True

    def set_checked_in(self, user_key: str) -> bool:
        """Return the book to the shelf. Fails unless `user_key` holds it."""
        if not self.is_checked_out_by(user_key):
            return False
        self.checked_out_by = ""
        return True


@dataclass
class User:
    """A library member and the set of book keys they currently hold.

    The borrowing cap lives in the coordinator; User only refuses duplicates.
    """

    name: str
    borrowed: set[str] = field(default_factory=set)

    @property
    def key(self) -> str:
        return normalize_key(self.name)

    def book_count(self) -> int:
        return len(self.borrowed)

    def has_borrowed(self, book_key: str) -> bool:
        return book_key in self.borrowed

    def borrow_book(self, book_key: str) -> bool:
        if self.has_borrowed(book_key):
            return False
        self.borrowed.add(book_key)
        return True

    def return_book(self, book_key: str) -> bool:
        if not self.has_borrowed(book_key):
            return False
        self.borrowed.remove(book_key)
        return True
