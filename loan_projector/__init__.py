"""
Loan Repayment Projector

Projects loan balances forward with daily interest accrual, recommends how
to split a payment pool across loans by interest accrual, and estimates the
payoff date under a fixed monthly payment. All math uses Decimal.
"""

__version__ = "1.0.0"

from .loans import InvalidTemporalOrderError, Loan, LoanSet, Payment
from .allocation import AllocationUndefinedError, ZeroRatePolicy, allocate
from .simulation import NEVER, SimulationLimitExceededError, estimate_completion_date

__all__ = [
    "InvalidTemporalOrderError",
    "Loan",
    "LoanSet",
    "Payment",
    "AllocationUndefinedError",
    "ZeroRatePolicy",
    "allocate",
    "NEVER",
    "SimulationLimitExceededError",
    "estimate_completion_date",
]
