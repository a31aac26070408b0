"""Ledger error types.

Every failure raised by a ledger operation is a LedgerError subclass. A failed
operation leaves the ledger exactly as it was before the call and is never
retried by the ledger itself.
"""


class LedgerError(Exception):
    """Base class for all ledger operation failures."""
    pass


class Unauthorized(LedgerError):
    """Caller lacks the required role or relation to the target."""
    pass


class NotFound(LedgerError):
    """Referenced proposal or account does not exist."""
    pass


class DuplicateIdentity(LedgerError):
    """Identity already holds the role it is being registered for."""
    pass


class AlreadySecured(LedgerError):
    """Proposal has already been secured."""
    pass


class AlreadyVoted(LedgerError):
    """Investor is already an approver of the proposal."""
    pass


class NotSecured(LedgerError):
    """Revenue operation on a proposal that is not secured."""
    pass


class NothingToDistribute(LedgerError):
    """Proposal has no undistributed revenue."""
    pass


class InvalidAmount(LedgerError):
    """Amount is zero, negative, or not an integer where a positive integer is required."""
    pass


class InvalidRate(InvalidAmount):
    """Profit rate is negative or not an integer."""
    pass


class InsufficientFreeFunds(LedgerError):
    """Proposal passed approval but the pool lacks free funds to secure it."""
    pass


class InvariantViolation(LedgerError):
    """Committed ledger state breaks a pool invariant."""
    pass
