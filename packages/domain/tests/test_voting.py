"""Tests for weighted approval when free funds are short.

Tests cover:
1. Threshold met while free funds are insufficient
2. Securing on a fresh vote, on explicit re-evaluation, and on deposit
3. Competing proposals drawing on the same free funds
4. Empty pool (total_funds == 0)
"""

import pytest

from pooledfund_domain import (
    AlreadySecured,
    InsufficientFreeFunds,
    NotFound,
    Unauthorized,
)

from ledger_builders import OWNER, BOB, CHARLIE, DANA, build_ledger, build_funded_ledger


class TestAwaitingFunds:
    """Proposal passes approval before the pool can cover it."""

    def _awaiting(self, **kwargs):
        """Bob (20/30) approves a proposal for 50: threshold met, free funds 30."""
        ledger = build_funded_ledger(**kwargs)
        index = ledger.submit_proposal(CHARLIE, "Big project", 50)
        assert ledger.approve_proposal(BOB, index) is False
        return ledger, index

    def test_vote_recorded_without_securing(self):
        ledger, index = self._awaiting()

        proposal = ledger.proposal(index)
        assert proposal.secured is False
        assert proposal.approvers == [BOB]
        assert ledger.approve_share(index) == 66
        assert ledger.free_funds == 30
        assert ledger.manager(CHARLIE).funds_secured == 0

    def test_deposit_alone_does_not_secure(self):
        """Without secure_on_deposit a deposit never secures anything by itself."""
        ledger, index = self._awaiting()
        ledger.deposit(BOB, 30)

        assert ledger.proposal(index).secured is False
        assert ledger.free_funds == 60

    def test_fresh_vote_secures(self):
        ledger, index = self._awaiting()
        ledger.deposit(BOB, 30)

        assert ledger.approve_proposal(OWNER, index) is True
        assert ledger.free_funds == 10
        assert ledger.manager(CHARLIE).funds_secured == 50

    def test_reevaluate_secures(self):
        """Bob now holds 50/60 = 83%: re-evaluation secures without a new vote."""
        ledger, index = self._awaiting()
        ledger.deposit(BOB, 30)

        assert ledger.reevaluate_proposal(OWNER, index) is True

        proposal = ledger.proposal(index)
        assert proposal.secured is True
        assert proposal.approvers == [BOB]
        assert ledger.free_funds == 10

    def test_reevaluate_still_short(self):
        ledger, index = self._awaiting()
        history_length = len(ledger.history)

        with pytest.raises(InsufficientFreeFunds):
            ledger.reevaluate_proposal(BOB, index)

        assert ledger.proposal(index).secured is False
        assert len(ledger.history) == history_length

    def test_reevaluate_below_threshold(self):
        """Ali's deposit dilutes Bob to 20/60 = 33%: nothing to secure."""
        ledger, index = self._awaiting()
        ledger.deposit(OWNER, 30)
        history_length = len(ledger.history)

        assert ledger.reevaluate_proposal(BOB, index) is False
        assert ledger.proposal(index).secured is False
        assert len(ledger.history) == history_length

    def test_reevaluate_secured_proposal(self):
        ledger = build_funded_ledger()
        index = ledger.submit_proposal(CHARLIE, "Small", 10)
        ledger.approve_proposal(BOB, index)
        with pytest.raises(AlreadySecured):
            ledger.reevaluate_proposal(BOB, index)

    def test_reevaluate_requires_investor(self):
        ledger, index = self._awaiting()
        with pytest.raises(Unauthorized):
            ledger.reevaluate_proposal(CHARLIE, index)
        with pytest.raises(NotFound):
            ledger.reevaluate_proposal(BOB, 42)

    def test_secure_on_deposit(self):
        ledger, index = self._awaiting(secure_on_deposit=True)
        ledger.deposit(BOB, 30)

        assert ledger.proposal(index).secured is True
        assert ledger.free_funds == 10
        assert ledger.manager(CHARLIE).funds_secured == 50
        ledger.check_invariants()

    def test_secure_on_deposit_in_index_order(self):
        """Pending proposals are re-checked oldest first; later ones wait."""
        ledger = build_funded_ledger(secure_on_deposit=True)
        first = ledger.submit_proposal(CHARLIE, "First", 40)
        second = ledger.submit_proposal(CHARLIE, "Second", 40)
        ledger.approve_proposal(BOB, first)
        ledger.approve_proposal(BOB, second)

        ledger.deposit(BOB, 30)  # total 60, free 60, Bob 50/60

        assert ledger.proposal(first).secured is True
        assert ledger.proposal(second).secured is False
        assert ledger.free_funds == 20


class TestCompetingProposals:

    def test_free_funds_never_negative(self):
        ledger = build_funded_ledger()
        first = ledger.submit_proposal(CHARLIE, "First", 20)
        second = ledger.submit_proposal(CHARLIE, "Second", 20)

        assert ledger.approve_proposal(BOB, first) is True
        assert ledger.approve_proposal(BOB, second) is False

        assert ledger.free_funds == 10
        assert ledger.manager(CHARLIE).funds_secured == 20
        ledger.check_invariants()

    def test_exact_free_funds_secure(self):
        ledger = build_funded_ledger()
        index = ledger.submit_proposal(CHARLIE, "Everything", 30)
        assert ledger.approve_proposal(BOB, index) is True
        assert ledger.free_funds == 0
        assert ledger.total_funds == 30


class TestEmptyPool:

    def test_cannot_secure_without_funds(self):
        ledger = build_ledger()
        index = ledger.submit_proposal(CHARLIE, "Nothing yet", 10)

        assert ledger.approve_proposal(OWNER, index) is False
        assert ledger.approve_share(index) == 0
        assert ledger.proposal(index).secured is False

    def test_zero_threshold_still_needs_funds(self):
        ledger = build_ledger(threshold=0)
        index = ledger.submit_proposal(CHARLIE, "Nothing yet", 10)
        assert ledger.approve_proposal(BOB, index) is False

    def test_zero_threshold_with_funds(self):
        """A 0% threshold lets any investor vote secure, even one with no funds."""
        ledger = build_ledger(threshold=0)
        ledger.deposit(OWNER, 10)
        ledger.register_investor(OWNER, DANA, "Dana", 95)
        index = ledger.submit_proposal(CHARLIE, "Cheap", 5)

        assert ledger.approve_proposal(DANA, index) is True
        assert ledger.free_funds == 5

    def test_full_threshold(self):
        ledger = build_funded_ledger(threshold=100)
        index = ledger.submit_proposal(CHARLIE, "Unanimous", 10)
        assert ledger.approve_proposal(BOB, index) is False
        assert ledger.approve_proposal(OWNER, index) is True
