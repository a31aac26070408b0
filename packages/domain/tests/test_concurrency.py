"""Concurrent access to a single ledger.

Mutations are serialized by the ledger lock; these tests hammer one ledger
from several threads and check that no update is lost and readers never
observe a half-applied operation.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from pooledfund_domain import AlreadySecured, AlreadyVoted, LedgerError

from ledger_builders import OWNER, BOB, CHARLIE, build_ledger, build_funded_ledger


def _register_investors(ledger, count: int):
    account_ids = []
    for i in range(count):
        account_id = f"0xc0ffee{i:02d}"
        ledger.register_investor(OWNER, account_id, f"Investor {i}", 100)
        account_ids.append(account_id)
    return account_ids


class TestConcurrentDeposits:

    def test_no_lost_deposits(self):
        ledger = build_ledger()
        account_ids = _register_investors(ledger, 8)

        def deposit_many(account_id):
            for _ in range(200):
                ledger.deposit(account_id, 3)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(deposit_many, account_ids))

        assert ledger.total_funds == 8 * 200 * 3
        assert ledger.free_funds == ledger.total_funds
        for account_id in account_ids:
            assert ledger.investor(account_id).funds_invested == 600
        assert [e.sequence for e in ledger.history] == list(range(len(ledger.history)))
        ledger.check_invariants()


class TestConcurrentApprovals:

    def test_proposal_secures_exactly_once(self):
        """Many investors race to approve: one secures it, the rest see AlreadySecured."""
        ledger = build_ledger(threshold=10)
        account_ids = _register_investors(ledger, 10)
        for account_id in account_ids:
            ledger.deposit(account_id, 10)
        index = ledger.submit_proposal(CHARLIE, "Race", 50)

        barrier = threading.Barrier(len(account_ids))
        outcomes = []
        outcomes_lock = threading.Lock()

        def approve(account_id):
            barrier.wait()
            try:
                result = ledger.approve_proposal(account_id, index)
            except AlreadySecured:
                result = "already_secured"
            with outcomes_lock:
                outcomes.append(result)

        threads = [threading.Thread(target=approve, args=(a,)) for a in account_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count(True) == 1
        assert outcomes.count("already_secured") == len(account_ids) - 1
        assert ledger.free_funds == 50
        assert ledger.manager(CHARLIE).funds_secured == 50
        assert len(ledger.approvers(index)) == 1
        ledger.check_invariants()

    def test_duplicate_votes_from_threads(self):
        ledger = build_funded_ledger(threshold=100)
        index = ledger.submit_proposal(CHARLIE, "Needs everyone", 10)

        errors = []

        def vote():
            try:
                ledger.approve_proposal(BOB, index)
            except AlreadyVoted as exc:
                errors.append(exc)

        with ThreadPoolExecutor(max_workers=6) as pool:
            for _ in range(6):
                pool.submit(vote)

        assert ledger.approvers(index) == [BOB]
        assert len(errors) == 5


class TestReaders:

    def test_snapshots_are_consistent(self):
        """Readers running alongside writers only ever see committed state."""
        ledger = build_funded_ledger(threshold=50)
        stop = threading.Event()
        failures = []

        def writer():
            for n in range(100):
                ledger.deposit(BOB, 1)
                index = ledger.submit_proposal(CHARLIE, f"Batch {n}", 1)
                try:
                    ledger.approve_proposal(BOB, index)
                    ledger.receive_revenue(CHARLIE, index, 7)
                    ledger.distribute_revenue(OWNER, index)
                except LedgerError as exc:
                    failures.append(exc)
            stop.set()

        def reader():
            while not stop.is_set():
                try:
                    ledger.snapshot().check_invariants()
                except LedgerError as exc:
                    failures.append(exc)
                    return

        readers = [threading.Thread(target=reader) for _ in range(3)]
        for thread in readers:
            thread.start()
        writer()
        for thread in readers:
            thread.join()

        assert failures == []
        assert ledger.proposal_count == 100
        ledger.check_invariants()
