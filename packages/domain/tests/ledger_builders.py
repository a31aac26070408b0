"""Test data builders shared by the domain tests."""

from pooledfund_domain import Ledger, LedgerCFG

OWNER = "0xa11ce"
BOB = "0xb0b"
CHARLIE = "0xc4a411e"
DANA = "0xda4a"
EVE = "0xe5e"


def build_ledger(threshold: int = 60, secure_on_deposit: bool = False) -> Ledger:
    """Ledger owned by Ali with Bob (rate 95) and Charlie (manager, rate 20)."""
    ledger = Ledger(LedgerCFG(
        owner_id=OWNER,
        owner_nickname="Ali",
        approve_share_threshold=threshold,
        secure_on_deposit=secure_on_deposit,
    ))
    ledger.register_investor(OWNER, BOB, "Bob", 95)
    ledger.register_manager(OWNER, CHARLIE, "Charlie", 20)
    return ledger


def build_funded_ledger(**kwargs) -> Ledger:
    """Ali deposits 10, Bob deposits 20: total_funds = free_funds = 30."""
    ledger = build_ledger(**kwargs)
    ledger.deposit(OWNER, 10)
    ledger.deposit(BOB, 20)
    return ledger


def build_distributed_ledger() -> Ledger:
    """Full walk-through: Charlie's 10 secured, 50 revenue returned and distributed.

    Result:
        Charlie profit 10, Ali profit 14, Bob profit 25, dust 1
    """
    ledger = build_funded_ledger()
    index = ledger.submit_proposal(CHARLIE, "Invest in project", 10)
    ledger.approve_proposal(BOB, index)
    ledger.receive_revenue(CHARLIE, index, 50)
    ledger.distribute_revenue(OWNER, index)
    return ledger
