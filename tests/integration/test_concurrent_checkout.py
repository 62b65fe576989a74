# ABOUTME: Integration tests for concurrent checkout and check-in traffic on one event loop.
# ABOUTME: Validates single-winner checkouts, the exact borrowing cap, lock-queued re-validation, and the loan invariant.

import asyncio
import random

import pytest

from circulation.catalog import CatalogStore
from circulation.core.coordinator import CheckoutCoordinator
from circulation.core.status import CheckInStatus, CheckoutStatus
from circulation.core.verifier import verify_circulation


def _assert_invariant(store: CatalogStore) -> None:
    """Every loan is recorded on both sides and nothing else is."""
    for book in store.books():
        holders = [user for user in store.users() if user.has_borrowed(book.key)]
        if book.is_checked_out():
            assert [user.key for user in holders] == [book.checked_out_by]
        else:
            assert holders == []
    assert verify_circulation(store).total_issues == 0


class TestConcurrentCheckout:
    """Concurrent callers contending for the same books and users."""

    @pytest.mark.asyncio
    async def test_single_copy_has_one_winner(self, store: CatalogStore) -> None:
        """N users racing for one book yield one SUCCESS and N-1 BOOK_ALREADY_CHECKED_OUT."""
        store.add_book("Dune")
        names = [f"reader-{i}" for i in range(20)]
        for name in names:
            store.add_user(name)
        coordinator = CheckoutCoordinator(store)

        results = await asyncio.gather(
            *(coordinator.checkout_book("Dune", name) for name in names)
        )

        statuses = [result.status for result in results]
        assert statuses.count(CheckoutStatus.SUCCESS) == 1
        assert statuses.count(CheckoutStatus.BOOK_ALREADY_CHECKED_OUT) == len(names) - 1
        _assert_invariant(store)

    @pytest.mark.asyncio
    async def test_cap_holds_under_concurrent_checkouts(self, store: CatalogStore) -> None:
        """One user racing for many books never ends up above the cap."""
        titles = [f"Book {i}" for i in range(10)]
        for title in titles:
            store.add_book(title)
        store.add_user("Alice")
        coordinator = CheckoutCoordinator(store)

        results = await asyncio.gather(
            *(coordinator.checkout_book(title, "Alice") for title in titles)
        )

        statuses = [result.status for result in results]
        assert statuses.count(CheckoutStatus.SUCCESS) == 3
        assert statuses.count(CheckoutStatus.MAX_BOOKS_REACHED) == 7
        alice = store.get_user("Alice")
        assert alice is not None
        assert alice.book_count() == 3
        _assert_invariant(store)

    @pytest.mark.asyncio
    async def test_disjoint_pairs_all_succeed(self, store: CatalogStore) -> None:
        """Unrelated book/user pairs do not interfere."""
        for i in range(10):
            store.add_book(f"Book {i}")
            store.add_user(f"reader-{i}")
        coordinator = CheckoutCoordinator(store)

        results = await asyncio.gather(
            *(coordinator.checkout_book(f"Book {i}", f"reader-{i}") for i in range(10))
        )

        assert all(result.success for result in results)
        _assert_invariant(store)

    @pytest.mark.asyncio
    async def test_mixed_traffic_preserves_invariant(self, store: CatalogStore) -> None:
        """Random interleaved checkouts and check-ins keep both records in step."""
        rng = random.Random(1234)
        titles = [f"Book {i}" for i in range(6)]
        names = [f"reader-{i}" for i in range(4)]
        for title in titles:
            store.add_book(title)
        for name in names:
            store.add_user(name)
        coordinator = CheckoutCoordinator(store)

        async def churn(name: str) -> None:
            for _ in range(50):
                title = rng.choice(titles)
                if rng.random() < 0.6:
                    await coordinator.checkout_book(title, name)
                else:
                    await coordinator.check_in_book(title, name)
                await asyncio.sleep(0)

        await asyncio.gather(*(churn(name) for name in names))

        _assert_invariant(store)
        assert all(user.book_count() <= 3 for user in store.users())


class TestQueuedOnHeldLocks:
    """Operations that queue behind a held lock and resume after it is released.

    An uncontended asyncio.Lock never yields, so these tests take the lock
    first to make every queued task suspend inside the coordinator.
    """

    @pytest.mark.asyncio
    async def test_queued_users_one_book(self, store: CatalogStore) -> None:
        """Readers queued on one book's lock produce exactly one loan."""
        store.add_book("Dune")
        names = [f"reader-{i}" for i in range(8)]
        for name in names:
            store.add_user(name)
        coordinator = CheckoutCoordinator(store)

        async with store.book_locks.hold("dune"):
            tasks = [asyncio.create_task(coordinator.checkout_book("Dune", n)) for n in names]
            await asyncio.sleep(0)
            assert not any(task.done() for task in tasks)
        results = await asyncio.gather(*tasks)

        statuses = [result.status for result in results]
        assert statuses.count(CheckoutStatus.SUCCESS) == 1
        assert statuses.count(CheckoutStatus.BOOK_ALREADY_CHECKED_OUT) == len(names) - 1
        _assert_invariant(store)

    @pytest.mark.asyncio
    async def test_cap_rechecked_for_queued_checkouts(self, store: CatalogStore) -> None:
        """Checkouts that passed the cap check before queuing are refused once it fills."""
        titles = [f"Book {i}" for i in range(6)]
        for title in titles:
            store.add_book(title)
        store.add_user("Alice")
        coordinator = CheckoutCoordinator(store)

        async with store.user_locks.hold("alice"):
            tasks = [
                asyncio.create_task(coordinator.checkout_book(title, "Alice")) for title in titles
            ]
            await asyncio.sleep(0)
            assert not any(task.done() for task in tasks)
        results = await asyncio.gather(*tasks)

        statuses = [result.status for result in results]
        assert statuses == [CheckoutStatus.SUCCESS] * 3 + [CheckoutStatus.MAX_BOOKS_REACHED] * 3
        alice = store.get_user("Alice")
        assert alice is not None
        assert alice.book_count() == 3
        _assert_invariant(store)

    @pytest.mark.asyncio
    async def test_checkout_for_user_removed_while_queued(
        self, stocked_store: CatalogStore, coordinator: CheckoutCoordinator
    ) -> None:
        """A user removed while their checkout waits gets USER_NOT_FOUND and no loan."""
        async with stocked_store.user_locks.hold("alice"):
            task = asyncio.create_task(coordinator.checkout_book("Dune", "Alice"))
            await asyncio.sleep(0)
            assert not task.done()
            stocked_store.remove_user("Alice")
        result = await task

        assert result.success is False
        assert result.status is CheckoutStatus.USER_NOT_FOUND
        book = stocked_store.get_book("Dune")
        assert book is not None
        assert book.is_checked_out() is False
        _assert_invariant(stocked_store)

    @pytest.mark.asyncio
    async def test_check_in_for_user_removed_while_queued(
        self, stocked_store: CatalogStore, coordinator: CheckoutCoordinator
    ) -> None:
        """A user removed while their check-in waits gets USER_NOT_FOUND."""
        assert (await coordinator.checkout_book("Dune", "Alice")).success

        async with stocked_store.book_locks.hold("dune"):
            task = asyncio.create_task(coordinator.check_in_book("Dune", "Alice"))
            await asyncio.sleep(0)
            assert not task.done()
            stocked_store.remove_user("Alice")
        result = await task

        assert result.success is False
        assert result.status is CheckInStatus.USER_NOT_FOUND
        _assert_invariant(stocked_store)

    @pytest.mark.asyncio
    async def test_check_in_for_book_removed_while_queued(
        self, stocked_store: CatalogStore, coordinator: CheckoutCoordinator
    ) -> None:
        """A book removed while its check-in waits gets BOOK_NOT_FOUND."""
        assert (await coordinator.checkout_book("Dune", "Alice")).success

        async with stocked_store.user_locks.hold("alice"):
            task = asyncio.create_task(coordinator.check_in_book("Dune", "Alice"))
            await asyncio.sleep(0)
            assert not task.done()
            stocked_store.remove_book("Dune")
        result = await task

        assert result.status is CheckInStatus.BOOK_NOT_FOUND
        alice = stocked_store.get_user("Alice")
        assert alice is not None
        assert alice.book_count() == 0
        _assert_invariant(stocked_store)

    @pytest.mark.asyncio
    async def test_duplicate_check_ins_queued_on_one_book(
        self, stocked_store: CatalogStore, coordinator: CheckoutCoordinator
    ) -> None:
        """Two queued returns of the same loan succeed once."""
        assert (await coordinator.checkout_book("Dune", "Alice")).success

        async with stocked_store.book_locks.hold("dune"):
            tasks = [
                asyncio.create_task(coordinator.check_in_book("Dune", "Alice")) for _ in range(2)
            ]
            await asyncio.sleep(0)
            assert not any(task.done() for task in tasks)
        results = await asyncio.gather(*tasks)

        assert [result.status for result in results] == [
            CheckInStatus.SUCCESS,
            CheckInStatus.BOOK_NOT_BORROWED_BY_USER,
        ]
        _assert_invariant(stocked_store)

    @pytest.mark.asyncio
    async def test_queued_return_then_checkout_hands_book_over(
        self, stocked_store: CatalogStore, coordinator: CheckoutCoordinator
    ) -> None:
        """A return queued ahead of another reader's checkout lets that reader borrow."""
        assert (await coordinator.checkout_book("Dune", "Alice")).success

        async with stocked_store.book_locks.hold("dune"):
            returning = asyncio.create_task(coordinator.check_in_book("Dune", "Alice"))
            borrowing = asyncio.create_task(coordinator.checkout_book("Dune", "Bob"))
            await asyncio.sleep(0)
            assert not returning.done() and not borrowing.done()

        assert (await returning).status is CheckInStatus.SUCCESS
        assert (await borrowing).status is CheckoutStatus.SUCCESS
        book = stocked_store.get_book("Dune")
        assert book is not None
        assert book.checked_out_by == "bob"
        _assert_invariant(stocked_store)
