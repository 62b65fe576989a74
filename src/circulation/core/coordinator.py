# ABOUTME: Coordinates checkout and check-in across Book, User, and their per-key locks.
# ABOUTME: Always locks the book before the user, and rolls back half-applied transitions.

import logging

from circulation.catalog.entities import normalize_key
from circulation.catalog.store import CatalogStore
from circulation.core.status import CheckInStatus, CheckoutStatus, OperationResult

logger = logging.getLogger(__name__)

MAX_BOOKS_PER_USER = 3
DEFAULT_LOCK_TIMEOUT: float | None = None


class CheckoutCoordinator:
    """Runs circulation operations against a CatalogStore.

    Existence and borrowing-cap checks run before locking so that obvious
    failures never wait. Once both locks are held the book and user are
    re-resolved, because a removal may have slipped in between.
    """

    def __init__(
        self,
        store: CatalogStore,
        *,
        max_books: int = MAX_BOOKS_PER_USER,
        lock_timeout: float | None = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        if max_books < 1:
            msg = f"max_books must be at least 1, got {max_books}"
            raise ValueError(msg)
        self._store = store
        self._max_books = max_books
        self._lock_timeout = lock_timeout

    @property
    def max_books(self) -> int:
        return self._max_books

    async def checkout_book(self, title: str, user_name: str) -> OperationResult[CheckoutStatus]:
        """Lend a book to a user.

        Returns:
            SUCCESS, or the first rule the request broke: USER_NOT_FOUND,
            BOOK_NOT_FOUND, MAX_BOOKS_REACHED, BOOK_ALREADY_CHECKED_OUT,
            ALREADY_CHECKED_OUT_BY_USER.

        Raises:
            LockTimeoutError: If a lock timeout is configured and expires.
        """
        book_key = normalize_key(title)
        user_key = normalize_key(user_name)

        user = self._store.get_user(user_name)
        if user is None:
            return OperationResult(False, CheckoutStatus.USER_NOT_FOUND)
        book = self._store.get_book(title)
        if book is None:
            return OperationResult(False, CheckoutStatus.BOOK_NOT_FOUND)
        if user.book_count() >= self._max_books:
            return OperationResult(False, CheckoutStatus.MAX_BOOKS_REACHED)

        async with (
            self._store.book_locks.hold(book_key, self._lock_timeout),
            self._store.user_locks.hold(user_key, self._lock_timeout),
        ):
            if self._store.get_user(user_name) is not user:
                return OperationResult(False, CheckoutStatus.USER_NOT_FOUND)
            if self._store.get_book(title) is not book:
                return OperationResult(False, CheckoutStatus.BOOK_NOT_FOUND)
            # Another checkout for this user may have finished while we waited.
            if user.book_count() >= self._max_books:
                return OperationResult(False, CheckoutStatus.MAX_BOOKS_REACHED)

            if not book.set_checked_out(user_key):
                return OperationResult(False, CheckoutStatus.BOOK_ALREADY_CHECKED_OUT)

            if not user.borrow_book(book_key):
                book.set_checked_in(user_key)
                logger.warning(
                    "User %r already listed %r as borrowed; checkout rolled back",
                    user.name,
                    book.title,
                )
                return OperationResult(False, CheckoutStatus.ALREADY_CHECKED_OUT_BY_USER)

        logger.info("Checked out %r to %r", book.title, user.name)
        return OperationResult(True, CheckoutStatus.SUCCESS)

    async def check_in_book(self, title: str, user_name: str) -> OperationResult[CheckInStatus]:
        """Return a borrowed book to the shelf.

        Returns:
            SUCCESS, or USER_NOT_FOUND, BOOK_NOT_FOUND, BOOK_NOT_BORROWED_BY_USER,
            CHECKED_OUT_BY_ANOTHER_USER.

        Raises:
            LockTimeoutError: If a lock timeout is configured and expires.
        """
        book_key = normalize_key(title)
        user_key = normalize_key(user_name)

        user = self._store.get_user(user_name)
        if user is None:
            return OperationResult(False, CheckInStatus.USER_NOT_FOUND)
        book = self._store.get_book(title)
        if book is None:
            return OperationResult(False, CheckInStatus.BOOK_NOT_FOUND)

        async with (
            self._store.book_locks.hold(book_key, self._lock_timeout),
            self._store.user_locks.hold(user_key, self._lock_timeout),
        ):
            if self._store.get_user(user_name) is not user:
                return OperationResult(False, CheckInStatus.USER_NOT_FOUND)
            if self._store.get_book(title) is not book:
                return OperationResult(False, CheckInStatus.BOOK_NOT_FOUND)

            if not user.return_book(book_key):
                return OperationResult(False, CheckInStatus.BOOK_NOT_BORROWED_BY_USER)

            if not book.set_checked_in(user_key):
                user.borrow_book(book_key)
                logger.warning(
                    "%r listed %r as borrowed but it is held by %r; check-in rolled back",
                    user.name,
                    book.title,
                    book.checked_out_by,
                )
                return OperationResult(False, CheckInStatus.CHECKED_OUT_BY_ANOTHER_USER)

        logger.info("Checked in %r from %r", book.title, user.name)
        return OperationResult(True, CheckInStatus.SUCCESS)
