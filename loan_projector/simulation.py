"""
Repayment Simulation Module

Estimates when a set of loans is fully repaid by a fixed monthly payment,
allocating each month's payment in proportion to interest accrual.
"""

from decimal import Decimal
from dataclasses import replace
from datetime import date
from typing import Dict, Optional, Union

from .allocation import ZeroRatePolicy, allocate
from .amounts import ZERO, Number, to_decimal
from .config import get_config
from .dates import add_months
from .loans import Loan, Payment, as_loan_list
from .logging_config import get_logger, log_action


logger = get_logger(__name__)

# Returned when the loans can never be repaid
NEVER = date.max


class SimulationLimitExceededError(RuntimeError):
    """Raised when repayment does not complete within the month bound"""

    def __init__(self, months: int, remaining_principal: Decimal):
        self.months = months
        self.remaining_principal = remaining_principal
        super().__init__(
            f"Loans not repaid after {months} months; "
            f"{remaining_principal} principal remaining"
        )


def estimate_completion_date(
    loans,
    avg_monthly_payment: Number,
    first_payment: date,
    max_months: Optional[int] = None,
    accrue_between_payments: Optional[bool] = None,
    zero_rate_policy: Union[ZeroRatePolicy, str, None] = None
) -> date:
    """
    Projects how long it will take to repay all loans with a fixed monthly payment

    Args:
        loans: Loans to estimate the repayment completion date for
        avg_monthly_payment: Amount to pay each month
        first_payment: Date of the first payment
        max_months: Give up after this many monthly payments
        accrue_between_payments: Accrue interest on each loan between
            monthly payments; when off, interest is only projected up to the
            first payment
        zero_rate_policy: Allocation fallback for loans accruing no interest

    Returns:
        Date of the last payment, or NEVER when the payment is not positive

    Raises:
        SimulationLimitExceededError: If the loans are still owing after
            ``max_months`` payments
    """
    avg_monthly_payment = to_decimal(avg_monthly_payment)
    if avg_monthly_payment <= ZERO:
        return NEVER

    config = get_config()
    if max_months is None:
        max_months = config.max_simulation_months
    if accrue_between_payments is None:
        accrue_between_payments = config.accrue_between_payments

    # Interest accumulated up to the first payment; the inputs stay untouched
    current: Dict[int, Loan] = {
        loan.id: replace(loan.project_forward(first_payment))
        for loan in as_loan_list(loans)
    }

    for month in range(max_months):
        now = add_months(first_payment, month)

        if accrue_between_payments and month > 0:
            for loan_id, loan in current.items():
                if loan.total_owed() > ZERO:
                    current[loan_id] = loan.accrue_to(now)

        payments = _monthly_payments(current, avg_monthly_payment, now, zero_rate_policy)
        for loan_id, payment in payments.items():
            current[loan_id].apply_payment(payment)

        remaining = sum((loan.principal for loan in current.values()), ZERO)
        if remaining <= ZERO:
            log_action(
                logger, "info",
                f"Loans repaid after {month + 1} monthly payments",
                action="estimate_completion_date",
                extra={"completion_date": now.isoformat(), "months": month + 1}
            )
            return now

    remaining = sum((loan.principal for loan in current.values()), ZERO)
    log_action(
        logger, "warning",
        f"Repayment simulation stopped after {max_months} months",
        action="estimate_completion_date",
        extra={"remaining_principal": str(remaining)}
    )
    raise SimulationLimitExceededError(max_months, remaining)


def _monthly_payments(
    loans: Dict[int, Loan],
    pool: Decimal,
    now: date,
    zero_rate_policy: Union[ZeroRatePolicy, str, None]
) -> Dict[int, Payment]:
    recommendations = allocate(loans, pool, zero_rate_policy=zero_rate_policy)

    payments = {}
    for loan_id, recommendation in recommendations.items():
        loan = loans[loan_id]
        amount = recommendation.amount

        # Meet minimum monthly payment requirement
        if amount < loan.minimum_payment:
            amount = loan.minimum_payment

        # Final payment: never pay more than is owed
        owed = loan.total_owed()
        if amount > owed:
            amount = owed

        payments[loan_id] = Payment(amount=amount, paid_on=now, loan_id=loan_id)

    return payments
