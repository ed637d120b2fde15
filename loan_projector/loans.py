"""
Loan Module

Loan snapshots with daily interest accrual across year boundaries, forward
balance projection and in-place payment application. All math uses Decimal.

Projection is value-style: every projected snapshot is a new Loan carrying
the same id. ``apply_payment`` is the only operation that mutates a loan.
"""

from decimal import Decimal
from datetime import date
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Mapping, Optional
import logging
import warnings

from .amounts import ZERO, Number, to_decimal
from .dates import day_of_year, days_in_year, year_end, year_start


logger = logging.getLogger(__name__)


class InvalidTemporalOrderError(ValueError):
    """Raised when a date precedes a loan's principal effective date"""

    def __init__(self, loan_id: int, effective_date: date, requested_date: date):
        self.loan_id = loan_id
        self.effective_date = effective_date
        self.requested_date = requested_date
        super().__init__(
            f"Loan {loan_id}: date {requested_date.isoformat()} is before "
            f"principal effective date {effective_date.isoformat()}"
        )


def _check_balance(principal: Decimal, accrued_interest: Decimal) -> None:
    if principal < ZERO:
        raise ValueError("Principal cannot be negative")
    if accrued_interest < ZERO:
        raise ValueError("Accrued interest cannot be negative")


@dataclass(frozen=True)
class Payment:
    """A payment amount and the date it is made"""
    amount: Decimal
    paid_on: date
    loan_id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', to_decimal(self.amount))


@dataclass
class Loan:
    """One debt instrument as of its principal effective date"""
    id: int
    interest_rate: Decimal = ZERO       # e.g., 0.05 for 5% APR
    minimum_payment: Decimal = ZERO
    name: str = ""
    principal: Decimal = ZERO
    accrued_interest: Decimal = ZERO    # Accrued but not capitalized
    principal_effective_date: Optional[date] = None

    def __post_init__(self):
        for attr in ('interest_rate', 'minimum_payment', 'principal', 'accrued_interest'):
            value = getattr(self, attr)
            if not isinstance(value, Decimal):
                setattr(self, attr, to_decimal(value))

        if self.minimum_payment < ZERO:
            raise ValueError("Minimum payment cannot be negative")
        _check_balance(self.principal, self.accrued_interest)

    @property
    def has_balance(self) -> bool:
        """Check if a balance has been set for this loan"""
        return self.principal_effective_date is not None

    def set_balance(self, principal: Number, accrued_interest: Number, as_of: date) -> None:
        """
        Set principal, accrued interest and their effective date together

        Args:
            principal: The loan's principal balance
            accrued_interest: Interest accrued and not yet capitalized
            as_of: Date as of which both amounts are reported
        """
        principal = to_decimal(principal)
        accrued_interest = to_decimal(accrued_interest)
        _check_balance(principal, accrued_interest)

        self.principal = principal
        self.accrued_interest = accrued_interest
        self.principal_effective_date = as_of

    def set_principal_balance(self, principal: Number, as_of: date) -> None:
        """
        Set principal and effective date, leaving accrued interest untouched.

        Deprecated: kept for callers that predate interest tracking.
        Use ``set_balance`` and report the accrued interest as well.
        """
        warnings.warn(
            "set_principal_balance is deprecated; use set_balance with accrued interest",
            DeprecationWarning,
            stacklevel=2
        )
        principal = to_decimal(principal)
        _check_balance(principal, self.accrued_interest)

        self.principal = principal
        self.principal_effective_date = as_of

    def daily_interest_rate(self) -> Decimal:
        """Interest accruing per day at the current principal"""
        effective = self._require_effective_date()
        return self._daily_rate_for_year(effective.year)

    def accrued_interest_as_of(self, as_of: date) -> Decimal:
        """
        Simple interest accrued from the effective date through ``as_of``

        Each calendar year is bucketed separately using that year's day
        count: the remainder of the start year, every full year in between,
        and the elapsed part of the end year.

        Raises:
            InvalidTemporalOrderError: If ``as_of`` is before the effective date
        """
        start = self._check_not_before(as_of)

        if as_of.year == start.year:
            return self._daily_rate_for_year(start.year) * (as_of - start).days

        total = ZERO
        for year in range(start.year, as_of.year + 1):
            if year == start.year:
                days = (year_end(year) - start).days
            elif year == as_of.year:
                days = (as_of - year_start(year)).days
            else:
                days = days_in_year(year)
            total += self._daily_rate_for_year(year) * days

        return total

    def total_owed(self, as_of: Optional[date] = None) -> Decimal:
        """
        Total balance owed

        Without a date this is the stored accrued interest plus principal.
        With a date it is the interest accrued up to that date plus principal.
        """
        if as_of is None:
            return self.accrued_interest + self.principal
        return self.accrued_interest_as_of(as_of) + self.principal

    def project_forward(self, to: date) -> 'Loan':
        """
        Project the principal forward to a later date

        Within one calendar year the daily rate is applied as simple
        interest. Across years the remainder of the start year is added as
        simple interest, the result compounds annually for each full year in
        between, and the destination year's elapsed share is added last.

        The last step scales the already-incremented principal by
        ``(1 + rate)`` rather than ``rate``; downstream figures depend on
        this, so it is kept as is.

        Returns:
            A new Loan with the same id, or this loan when no days elapse

        Raises:
            InvalidTemporalOrderError: If ``to`` is before the effective date
        """
        start = self._check_not_before(to)

        elapsed_days = (to - start).days
        if elapsed_days == 0:
            return self

        if to.year == start.year:
            new_principal = self.daily_interest_rate() * elapsed_days + self.principal
        else:
            remaining_days = days_in_year(start.year) - day_of_year(start)
            new_principal = remaining_days * self.daily_interest_rate() + self.principal

            growth = Decimal('1') + self.interest_rate
            for _ in range(start.year + 1, to.year):
                new_principal *= growth

            new_principal += new_principal * growth / days_in_year(to.year) * day_of_year(to)

        return replace(self, principal=new_principal, principal_effective_date=to)

    def accrue_to(self, as_of: date) -> 'Loan':
        """
        Roll the loan to ``as_of`` by adding accrued interest without
        capitalizing it

        Returns:
            A new Loan with the same id, or this loan when no days elapse
        """
        start = self._check_not_before(as_of)
        if as_of == start:
            return self

        return replace(
            self,
            accrued_interest=self.accrued_interest + self.accrued_interest_as_of(as_of),
            principal_effective_date=as_of
        )

    def apply_payment(self, payment: Payment) -> 'Loan':
        """
        Apply a payment in place: accrued interest first, then principal

        The effective date advances to the payment date. Amounts above the
        total owed are not guarded; principal goes negative.

        Raises:
            InvalidTemporalOrderError: If the payment predates the effective date
        """
        self._check_not_before(payment.paid_on)

        owed = self.total_owed()
        if payment.amount >= owed:
            # Clears the loan exactly; any excess shows as negative principal
            interest_portion = self.accrued_interest
            remaining = payment.amount - interest_portion
            self.accrued_interest = ZERO
            self.principal = owed - payment.amount
        else:
            remaining = payment.amount
            interest_portion = min(remaining, self.accrued_interest)
            self.accrued_interest -= interest_portion
            remaining -= interest_portion
            self.principal -= remaining

        self.principal_effective_date = payment.paid_on

        logger.debug(
            "Applied payment %s to loan %s (interest %s, principal %s)",
            payment.amount, self.id, interest_portion, remaining
        )
        return self

    def _daily_rate_for_year(self, year: int) -> Decimal:
        return self.principal * self.interest_rate / days_in_year(year)

    def _require_effective_date(self) -> date:
        if self.principal_effective_date is None:
            raise ValueError(f"Loan {self.id} has no balance set")
        return self.principal_effective_date

    def _check_not_before(self, value: date) -> date:
        effective = self._require_effective_date()
        if value < effective:
            raise InvalidTemporalOrderError(self.id, effective, value)
        return effective


class LoanSet(Mapping[int, Loan]):
    """
    Loans keyed by id

    The set hands out ids to the loans created through it, starting at
    ``first_id``; ids are never reused within a set.
    """

    def __init__(self, loans: Iterable[Loan] = (), first_id: int = 0):
        self._loans: Dict[int, Loan] = {}
        self._next_id = first_id
        for loan in loans:
            self.insert(loan)

    def add(
        self,
        name: str,
        interest_rate: Number,
        minimum_payment: Number = ZERO,
        principal: Optional[Number] = None,
        accrued_interest: Number = ZERO,
        as_of: Optional[date] = None
    ) -> Loan:
        """
        Create a loan with the next free id and optionally set its balance

        Returns:
            The created Loan
        """
        loan = Loan(
            id=self._next_id,
            interest_rate=interest_rate,
            minimum_payment=minimum_payment,
            name=name
        )
        if principal is not None:
            if as_of is None:
                raise ValueError("as_of is required when a principal is given")
            loan.set_balance(principal, accrued_interest, as_of)

        self.insert(loan)
        return loan

    def insert(self, loan: Loan) -> None:
        """Add an existing loan; its id must be unused"""
        if loan.id in self._loans:
            raise ValueError(f"Loan id {loan.id} already in set")
        self._loans[loan.id] = loan
        self._next_id = max(self._next_id, loan.id + 1)

    def project(self, as_of: date) -> 'LoanSet':
        """Project every loan forward to ``as_of``"""
        return LoanSet(loan.project_forward(as_of) for loan in self._loans.values())

    def total_principal(self) -> Decimal:
        return sum((loan.principal for loan in self._loans.values()), ZERO)

    def total_owed(self) -> Decimal:
        return sum((loan.total_owed() for loan in self._loans.values()), ZERO)

    def __getitem__(self, loan_id: int) -> Loan:
        return self._loans[loan_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._loans)

    def __len__(self) -> int:
        return len(self._loans)

    def __repr__(self) -> str:
        return f"LoanSet({list(self._loans.values())!r})"


def as_loan_list(loans) -> list:
    """Accept a LoanSet, any id->Loan mapping, or an iterable of loans"""
    if isinstance(loans, Mapping):
        return list(loans.values())
    return list(loans)
