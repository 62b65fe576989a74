# ABOUTME: Public API for the circulation catalog layer.
# ABOUTME: Exports the entity records, the in-memory store, and the per-key lock registry.

from circulation.catalog.entities import Book, User, normalize_key
from circulation.catalog.locks import KeyedLockRegistry, LockTimeoutError
from circulation.catalog.store import BookListing, CatalogStore, DuplicateKeyError

__all__ = [
    "Book",
    "BookListing",
    "CatalogStore",
    "DuplicateKeyError",
    "KeyedLockRegistry",
    "LockTimeoutError",
    "User",
    "normalize_key",
]
