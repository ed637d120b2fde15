"""
Payment Allocation Module

Distributes a payment pool across loans in proportion to each loan's daily
interest accrual, so the loans accruing fastest receive the most money.
"""

from decimal import Decimal
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Union
import logging

from .amounts import ZERO, Number, to_decimal
from .config import get_config
from .loans import Loan, Payment, as_loan_list


logger = logging.getLogger(__name__)


class ZeroRatePolicy(Enum):
    """What to do when the owing loans accrue no interest at all"""
    EQUAL_SPLIT = "equal_split"      # Pool split evenly, minimums still apply
    MINIMUM_ONLY = "minimum_only"    # Each loan gets its minimum payment
    RAISE = "raise"                  # Refuse to allocate


class AllocationUndefinedError(ZeroDivisionError):
    """Raised when rate weighting is undefined and the policy is RAISE"""


def resolve_zero_rate_policy(policy: Union[ZeroRatePolicy, str, None]) -> ZeroRatePolicy:
    """Accept an enum member, its value, or None for the configured default"""
    if policy is None:
        policy = get_config().zero_rate_policy
    if isinstance(policy, ZeroRatePolicy):
        return policy
    try:
        return ZeroRatePolicy(policy)
    except ValueError:
        valid = ", ".join(p.value for p in ZeroRatePolicy)
        raise ValueError(f"Unknown zero rate policy '{policy}' (expected one of: {valid})")


def owing_loans(loans) -> List[Loan]:
    """Loans with a positive stored balance"""
    return [loan for loan in as_loan_list(loans) if loan.total_owed() > ZERO]


def allocate(
    loans,
    total_funds: Number,
    as_of: Optional[date] = None,
    zero_rate_policy: Union[ZeroRatePolicy, str, None] = None
) -> Dict[int, Payment]:
    """
    Recommend a payment for each owing loan

    Each loan's share of ``total_funds`` is its daily interest rate over the
    sum of all daily rates, raised to the loan's minimum payment when lower.
    Floors are applied without scaling the other shares down, so the
    recommendations can add up to more than ``total_funds``.

    Args:
        loans: Loans (or an id->Loan mapping) already projected to the
            payment date, unless ``as_of`` is given
        total_funds: Payment pool for this period
        as_of: Project every loan to this date first and date payments on it
        zero_rate_policy: Fallback when the summed daily rate is zero

    Returns:
        Dictionary of loan id to recommended Payment

    Raises:
        AllocationUndefinedError: Zero summed rate under ZeroRatePolicy.RAISE
    """
    total_funds = to_decimal(total_funds)
    candidates = as_loan_list(loans)
    if as_of is not None:
        candidates = [loan.project_forward(as_of) for loan in candidates]

    candidates = owing_loans(candidates)
    if not candidates:
        return {}

    rates = {loan.id: loan.daily_interest_rate() for loan in candidates}
    total_rate = sum(rates.values(), ZERO)

    if total_rate == ZERO:
        shares = _zero_rate_shares(candidates, total_funds, resolve_zero_rate_policy(zero_rate_policy))
    else:
        shares = {
            loan.id: total_funds * (rates[loan.id] / total_rate)
            for loan in candidates
        }

    recommendations = {}
    for loan in candidates:
        amount = max(shares[loan.id], loan.minimum_payment)
        recommendations[loan.id] = Payment(
            amount=amount,
            paid_on=as_of if as_of is not None else loan.principal_effective_date,
            loan_id=loan.id
        )

    allocated = sum((p.amount for p in recommendations.values()), ZERO)
    if allocated > total_funds:
        logger.warning(
            "Recommended payments %s exceed available funds %s after minimum payments",
            allocated, total_funds
        )

    return recommendations


def _zero_rate_shares(
    loans: List[Loan],
    total_funds: Decimal,
    policy: ZeroRatePolicy
) -> Dict[int, Decimal]:
    if policy == ZeroRatePolicy.RAISE:
        raise AllocationUndefinedError(
            "Cannot weight allocation by interest: owing loans accrue no interest"
        )

    if policy == ZeroRatePolicy.MINIMUM_ONLY:
        return {loan.id: ZERO for loan in loans}

    equal_share = total_funds / len(loans)
    return {loan.id: equal_share for loan in loans}
