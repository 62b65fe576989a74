# ABOUTME: Shared pytest fixtures for circulation tests.
# ABOUTME: Provides fresh in-memory stores and coordinators, empty or stocked with sample data.

import pytest

from circulation.catalog.store import CatalogStore
from circulation.core.coordinator import CheckoutCoordinator


@pytest.fixture
def store() -> CatalogStore:
    """An empty catalog."""
    return CatalogStore()


@pytest.fixture
def coordinator(store: CatalogStore) -> CheckoutCoordinator:
    """A coordinator with the default borrowing cap over the `store` fixture."""
    return CheckoutCoordinator(store)


@pytest.fixture
def stocked_store(store: CatalogStore) -> CatalogStore:
    """A catalog with five books and two users, nothing on loan.

    Books: Dune, Emma, Ulysses, Beloved, The Name of the Rose
    Users: Alice, Bob
    """
    for title in ("Dune", "Emma", "Ulysses", "Beloved", "The Name of the Rose"):
        store.add_book(title)
    for name in ("Alice", "Bob"):
        store.add_user(name)
    return store
