# ABOUTME: Circulation integrity audit for the in-memory catalog.
# ABOUTME: Checks that every loan is recorded on both the book and its borrower.

from dataclasses import dataclass, field

from circulation.catalog.entities import Book, User
from circulation.catalog.store import CatalogStore
from circulation.core.coordinator import MAX_BOOKS_PER_USER


@dataclass
class VerifyResult:
    """Aggregated results from a circulation audit."""

    ok: int = 0
    orphaned_loans: list[Book] = field(default_factory=list)
    stale_borrows: list[tuple[User, str]] = field(default_factory=list)
    over_limit: list[User] = field(default_factory=list)

    @property
    def total_issues(self) -> int:
        """Total number of issues found across all categories."""
        return len(self.orphaned_loans) + len(self.stale_borrows) + len(self.over_limit)


def verify_circulation(
    store: CatalogStore, *, max_books: int = MAX_BOOKS_PER_USER
) -> VerifyResult:
    """Audit the loan records held by books and users.

    For each book on loan, its borrower must be a registered user who lists
    the book. For each user, every listed book must exist and be checked out
    to them, and the user must be within `max_books`.

    Args:
        store: The catalog to audit.
        max_books: Borrowing cap to check users against.

    Returns:
        A VerifyResult with the count of consistent books and the problem records.
    """
    result = VerifyResult()

    for book in store.books():
        if book.is_checked_out():
            borrower = store.get_user(book.checked_out_by)
            if borrower is None or not borrower.has_borrowed(book.key):
                result.orphaned_loans.append(book)
                continue
        result.ok += 1

    for user in store.users():
        for book_key in sorted(user.borrowed):
            book = store.get_book(book_key)
            if book is None or not book.is_checked_out_by(user.key):
                result.stale_borrows.append((user, book_key))
        if user.book_count() > max_books:
            result.over_limit.append(user)

    return result
