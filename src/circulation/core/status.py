# ABOUTME: Outcome codes for catalog and circulation operations, each with a fixed message.
# ABOUTME: OperationResult pairs a success flag with a status from one of the four families.

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar


class CheckoutStatus(Enum):
    SUCCESS = "success"
    USER_NOT_FOUND = "user_not_found"
    BOOK_NOT_FOUND = "book_not_found"
    BOOK_ALREADY_CHECKED_OUT = "book_already_checked_out"
    MAX_BOOKS_REACHED = "max_books_reached"
    ALREADY_CHECKED_OUT_BY_USER = "already_checked_out_by_user"


class CheckInStatus(Enum):
    SUCCESS = "success"
    USER_NOT_FOUND = "user_not_found"
    BOOK_NOT_FOUND = "book_not_found"
    BOOK_NOT_BORROWED_BY_USER = "book_not_borrowed_by_user"
    CHECKED_OUT_BY_ANOTHER_USER = "checked_out_by_another_user"


class ListBooksStatus(Enum):
    SUCCESS = "success"
    NO_BOOKS_AVAILABLE = "no_books_available"


class SearchBookStatus(Enum):
    AVAILABLE = "available"
    CHECKED_OUT = "checked_out"
    BOOK_NOT_FOUND = "book_not_found"


Status = CheckoutStatus | CheckInStatus | ListBooksStatus | SearchBookStatus

STATUS_MESSAGES: dict[Status, str] = {
    CheckoutStatus.SUCCESS: "[System]: The book has been successfully checked out.",
    CheckoutStatus.USER_NOT_FOUND: (
        "[UserManager]: Error! The system did not automatically create the user "
        "information. Please re-execute the check out process."
    ),
    CheckoutStatus.BOOK_NOT_FOUND: "[LibraryManager]: The book is not included in this library.",
    CheckoutStatus.BOOK_ALREADY_CHECKED_OUT: "[BookManager]: The book is already checked out.",
    CheckoutStatus.MAX_BOOKS_REACHED: (
        "[LibraryManager]: The user has reached the maximum number of books "
        "that can be checked out."
    ),
    CheckoutStatus.ALREADY_CHECKED_OUT_BY_USER: (
        "[UserManager]: The book is already checked out by yourself."
    ),
    CheckInStatus.SUCCESS: "[System]: The book has been successfully checked in.",
    CheckInStatus.USER_NOT_FOUND: "[UserManager]: Error! The user does not exist.",
    CheckInStatus.BOOK_NOT_FOUND: "[LibraryManager]: The book is not included in this library.",
    CheckInStatus.BOOK_NOT_BORROWED_BY_USER: (
        "[BookManager]: The book is not checked out by the user."
    ),
    CheckInStatus.CHECKED_OUT_BY_ANOTHER_USER: (
        "[UserManager]: You cannot check in a book checked out by another user."
    ),
    ListBooksStatus.SUCCESS: "[System]: Books listed successfully.",
    ListBooksStatus.NO_BOOKS_AVAILABLE: "[LibraryManager]: No books available in the library.",
    SearchBookStatus.AVAILABLE: "[LibraryManager]: The book is available in the library.",
    SearchBookStatus.CHECKED_OUT: "[LibraryManager]: The book is currently checked out.",
    SearchBookStatus.BOOK_NOT_FOUND: "[LibraryManager]: The book is not in the library.",
}


S = TypeVar("S", CheckoutStatus, CheckInStatus, ListBooksStatus, SearchBookStatus)


@dataclass(frozen=True)
class OperationResult(Generic[S]):
    """The outcome of one catalog or circulation call."""

    success: bool
    status: S

    @property
    def message(self) -> str:
        return STATUS_MESSAGES[self.status]
