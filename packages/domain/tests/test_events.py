"""Tests for the event journal and replay.

Tests cover:
1. Committed operations are journaled in order with sequence numbers
2. Rejected operations leave state and journal untouched
3. Replaying a journal reproduces the ledger exactly
4. Applying events directly to a LedgerState
"""

import pytest

from pooledfund_domain import (
    AlreadyVoted,
    Ledger,
    LedgerCFG,
    NothingToDistribute,
    Unauthorized,
)
from pooledfund_domain.schemas import (
    FundsDeposited,
    InvestorRegistered,
    LedgerState,
    ManagerRegistered,
    ProposalApproved,
    ProposalSubmitted,
    RevenueDistributed,
)

from ledger_builders import OWNER, BOB, CHARLIE, EVE, build_ledger, build_distributed_ledger


class TestJournal:

    def test_event_types_in_order(self):
        ledger = build_distributed_ledger()
        assert [event.event_type for event in ledger.history] == [
            "investor_registered",
            "manager_registered",
            "funds_deposited",
            "funds_deposited",
            "proposal_submitted",
            "proposal_approved",
            "revenue_received",
            "revenue_distributed",
        ]

    def test_sequences_are_contiguous(self):
        ledger = build_distributed_ledger()
        assert [event.sequence for event in ledger.history] == list(range(8))

    def test_callers_recorded(self):
        ledger = build_distributed_ledger()
        callers = [event.caller for event in ledger.history]
        assert callers == [OWNER, OWNER, OWNER, BOB, CHARLIE, BOB, CHARLIE, OWNER]

    def test_rejected_operations_not_journaled(self):
        ledger = build_distributed_ledger()
        length = len(ledger.history)
        before = ledger.snapshot()

        with pytest.raises(Unauthorized):
            ledger.deposit(EVE, 10)
        with pytest.raises(Unauthorized):
            ledger.register_investor(BOB, EVE, "Eve", 95)
        with pytest.raises(NothingToDistribute):
            ledger.distribute_revenue(OWNER, 0)

        assert len(ledger.history) == length
        assert ledger.snapshot().model_dump() == before.model_dump()

    def test_history_is_a_copy(self):
        ledger = build_ledger()
        history = ledger.history
        history.clear()
        assert len(ledger.history) == 2

    def test_deposit_records_reevaluation_flag(self):
        ledger = build_ledger(secure_on_deposit=True)
        ledger.deposit(BOB, 5)
        event = ledger.history[-1]
        assert isinstance(event, FundsDeposited)
        assert event.reevaluate_pending is True


class TestReplay:

    def test_replay_reproduces_state(self):
        ledger = build_distributed_ledger()

        rebuilt = Ledger.replay(ledger.config, ledger.history)

        assert rebuilt.snapshot().model_dump() == ledger.snapshot().model_dump()
        assert len(rebuilt.history) == len(ledger.history)

    def test_replay_prefix(self):
        """Replaying the first five events stops right after submission."""
        ledger = build_distributed_ledger()

        rebuilt = Ledger.replay(ledger.config, ledger.history[:5])

        assert rebuilt.proposal_count == 1
        assert rebuilt.proposal(0).secured is False
        assert rebuilt.total_funds == 30
        assert rebuilt.free_funds == 30

    def test_replay_continues_live(self):
        ledger = build_distributed_ledger()
        rebuilt = Ledger.replay(ledger.config, ledger.history)

        rebuilt.receive_revenue(CHARLIE, 0, 30)
        split = rebuilt.distribute_revenue(OWNER, 0)

        assert split.manager_cut == 6
        assert rebuilt.history[-1].sequence == 9

    def test_replay_rejects_gap(self):
        ledger = build_distributed_ledger()
        events = ledger.history

        with pytest.raises(ValueError, match="out of order"):
            Ledger.replay(ledger.config, events[:3] + events[4:])

    def test_replay_rejects_reordered_events(self):
        ledger = build_distributed_ledger()
        events = ledger.history
        events[2], events[3] = events[3], events[2]

        with pytest.raises(ValueError, match="Event sequence 3 out of order"):
            Ledger.replay(ledger.config, events)

    def test_replay_with_different_owner_fails(self):
        ledger = build_distributed_ledger()
        config = LedgerCFG(owner_id=EVE, owner_nickname="Eve", approve_share_threshold=60)

        with pytest.raises(Unauthorized):
            Ledger.replay(config, ledger.history)

    def test_replay_ignores_live_config_for_deposits(self):
        """Re-evaluation on deposit follows the journal, not the replaying config."""
        ledger = build_ledger(secure_on_deposit=True)
        ledger.deposit(OWNER, 10)
        ledger.deposit(BOB, 20)
        index = ledger.submit_proposal(CHARLIE, "Later", 40)
        ledger.approve_proposal(BOB, index)
        ledger.deposit(BOB, 30)
        assert ledger.proposal(index).secured

        config = LedgerCFG(owner_id=OWNER, owner_nickname="Ali", approve_share_threshold=60)
        rebuilt = Ledger.replay(config, ledger.history)

        assert rebuilt.proposal(index).secured
        assert rebuilt.free_funds == ledger.free_funds


class TestApplyDirectly:

    def _state(self) -> LedgerState:
        return LedgerState.genesis(
            LedgerCFG(owner_id=OWNER, owner_nickname="Ali", approve_share_threshold=60)
        )

    def test_apply_mutates_state(self):
        state = self._state()
        InvestorRegistered(
            sequence=0, caller=OWNER, account_id=BOB, nickname="Bob", profit_rate=95
        ).apply(state)
        FundsDeposited(sequence=1, caller=BOB, amount=20).apply(state)

        assert state.investors[BOB].funds_invested == 20
        assert state.total_funds == state.free_funds == 20
        state.check_invariants()

    def test_failed_apply_leaves_state_unchanged(self):
        state = self._state()
        before = state.model_dump()

        with pytest.raises(Unauthorized):
            FundsDeposited(sequence=0, caller=BOB, amount=20).apply(state)

        assert state.model_dump() == before

    def test_out_of_order_submission(self):
        state = self._state()
        ManagerRegistered(
            sequence=0, caller=OWNER, account_id=CHARLIE, nickname="Charlie", profit_rate=20
        ).apply(state)
        with pytest.raises(ValueError, match="out of order"):
            ProposalSubmitted(
                sequence=1, caller=CHARLIE, proposal_index=3, description="x", required_funds=1
            ).apply(state)
        assert state.proposals == []

    def test_repeated_vote_rejected(self):
        ledger = build_ledger()
        ledger.deposit(BOB, 20)
        ledger.deposit(OWNER, 80)
        index = ledger.submit_proposal(CHARLIE, "Needs Ali", 10)
        ledger.approve_proposal(BOB, index)

        state = ledger.snapshot()
        with pytest.raises(AlreadyVoted):
            ProposalApproved(sequence=99, caller=BOB, proposal_index=index).apply(state)

    def test_distribution_event_by_non_owner(self):
        ledger = build_distributed_ledger()
        state = ledger.snapshot()
        with pytest.raises(Unauthorized):
            RevenueDistributed(sequence=99, caller=BOB, proposal_index=0).apply(state)
