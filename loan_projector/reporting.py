"""
Reporting Module

Loan status and payment recommendation reports. Rows can be exported as
dicts, CSV or JSON, or rendered as fixed-width text tables. The largest
debts, highest interest rates and fastest accruing loans are flagged.
"""

from decimal import Decimal
from datetime import date
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
from enum import Enum
import csv
import io
import json

from .amounts import ZERO, format_amount, format_rate, round_amount
from .config import get_config
from .loans import Payment, as_loan_list


class LoanWarning(Enum):
    """Reasons a loan is highlighted in the status report"""
    LARGEST_DEBT = "largest_debt"
    HIGHEST_INTEREST_RATE = "highest_interest_rate"
    HIGHEST_DAILY_RATE = "highest_daily_rate"


class ReportFormat(Enum):
    """Output formats for reports"""
    DICT = "dict"
    CSV = "csv"
    JSON = "json"


@dataclass
class LoanStatusRow:
    """One loan in the status report"""
    loan_id: int
    name: str
    interest_rate: Decimal
    principal: Decimal
    accrued_interest: Decimal
    minimum_payment: Decimal
    daily_interest_rate: Decimal
    effective_date: date
    warnings: List[LoanWarning] = field(default_factory=list)

    @property
    def is_critical(self) -> bool:
        """The loan accruing the most interest per day"""
        return LoanWarning.HIGHEST_DAILY_RATE in self.warnings

    def to_dict(self, precision: int = 2) -> Dict[str, object]:
        return {
            "loan_id": self.loan_id,
            "name": self.name,
            "interest_rate": str(self.interest_rate),
            "principal": str(round_amount(self.principal, precision)),
            "accrued_interest": str(round_amount(self.accrued_interest, precision)),
            "minimum_payment": str(round_amount(self.minimum_payment, precision)),
            "daily_interest_rate": str(round_amount(self.daily_interest_rate, 4)),
            "effective_date": self.effective_date.isoformat(),
            "warnings": [w.value for w in self.warnings]
        }


@dataclass
class RecommendationRow:
    """A recommended payment next to the loan it pays"""
    loan_id: int
    name: str
    principal: Decimal
    accrued_interest: Decimal
    payment: Decimal
    paid_on: date

    def to_dict(self, precision: int = 2) -> Dict[str, object]:
        return {
            "loan_id": self.loan_id,
            "name": self.name,
            "principal": str(round_amount(self.principal, precision)),
            "accrued_interest": str(round_amount(self.accrued_interest, precision)),
            "payment": str(round_amount(self.payment, precision)),
            "paid_on": self.paid_on.isoformat()
        }


def loan_status_report(loans, as_of: Optional[date] = None) -> List[LoanStatusRow]:
    """
    Build status rows, projecting every loan to ``as_of`` first when given

    Every loan sharing the maximum principal, interest rate or daily
    interest rate gets the matching warning.
    """
    snapshots = as_loan_list(loans)
    if as_of is not None:
        snapshots = [loan.project_forward(as_of) for loan in snapshots]
    if not snapshots:
        return []

    daily_rates = {loan.id: loan.daily_interest_rate() for loan in snapshots}
    largest_debt = max(loan.principal for loan in snapshots)
    highest_rate = max(loan.interest_rate for loan in snapshots)
    highest_daily = max(daily_rates.values())

    rows = []
    for loan in snapshots:
        warnings = []
        if loan.principal == largest_debt:
            warnings.append(LoanWarning.LARGEST_DEBT)
        if loan.interest_rate == highest_rate:
            warnings.append(LoanWarning.HIGHEST_INTEREST_RATE)
        if daily_rates[loan.id] == highest_daily:
            warnings.append(LoanWarning.HIGHEST_DAILY_RATE)

        rows.append(LoanStatusRow(
            loan_id=loan.id,
            name=loan.name,
            interest_rate=loan.interest_rate,
            principal=loan.principal,
            accrued_interest=loan.accrued_interest,
            minimum_payment=loan.minimum_payment,
            daily_interest_rate=daily_rates[loan.id],
            effective_date=loan.principal_effective_date,
            warnings=warnings
        ))

    return rows


def recommendation_report(loans, recommendations: Dict[int, Payment]) -> List[RecommendationRow]:
    """Join recommended payments back to the loans they were made for"""
    by_id = {loan.id: loan for loan in as_loan_list(loans)}

    rows = []
    for loan_id, payment in recommendations.items():
        loan = by_id[loan_id]
        rows.append(RecommendationRow(
            loan_id=loan_id,
            name=loan.name,
            principal=loan.principal,
            accrued_interest=loan.accrued_interest,
            payment=payment.amount,
            paid_on=payment.paid_on
        ))

    return rows


def export_rows(
    rows: List[Union[LoanStatusRow, RecommendationRow]],
    report_format: ReportFormat = ReportFormat.DICT,
    precision: Optional[int] = None
) -> Union[List[Dict[str, object]], str]:
    """
    Export report rows

    Returns:
        A list of dicts for DICT, otherwise the CSV or JSON text
    """
    if precision is None:
        precision = get_config().display_precision

    data = [row.to_dict(precision) for row in rows]

    if report_format == ReportFormat.DICT:
        return data

    if report_format == ReportFormat.JSON:
        return json.dumps(data, indent=2)

    if report_format == ReportFormat.CSV:
        if not data:
            return ""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=list(data[0].keys()))
        writer.writeheader()
        for item in data:
            if "warnings" in item:
                item = dict(item, warnings=";".join(item["warnings"]))
            writer.writerow(item)
        return output.getvalue()

    raise ValueError(f"Unsupported report format: {report_format}")


def render_loan_table(rows: List[LoanStatusRow], precision: Optional[int] = None) -> str:
    """
    Render status rows as a text table

    Flagged loans are marked with ``*``; the fastest accruing loan with ``!``.
    """
    if precision is None:
        precision = get_config().display_precision

    lines = [
        "-" * 72,
        "{:<3} | {:<10} | {:>9} | {:>12} | {:>9} | {:>9}".format(
            "Id", "Name", "Int. Rate", "Principal", "Acc Int", "Min Pay"),
        "----+------------+-----------+--------------+-----------+----------"
    ]
    for row in rows:
        marker = "!" if row.is_critical else ("*" if row.warnings else " ")
        lines.append("{:>3} | {:<10} | {:>9} | {:>12} | {:>9} | {:>9} {}".format(
            row.loan_id,
            row.name[:10],
            format_rate(row.interest_rate),
            format_amount(row.principal, precision),
            format_amount(row.accrued_interest, precision),
            format_amount(row.minimum_payment, precision),
            marker
        ).rstrip())

    return "\n".join(lines) + "\n"


def render_recommendation_table(rows: List[RecommendationRow], precision: Optional[int] = None) -> str:
    """Render recommended payments as a text table with a total line"""
    if precision is None:
        precision = get_config().display_precision

    lines = [
        "-" * 60,
        "{:<3} | {:<10} | {:>12} | {:>9} | {:>10}".format(
            "Id", "Name", "Principal", "Interest", "Payment"),
        "----+------------+--------------+-----------+-----------"
    ]
    for row in rows:
        lines.append("{:>3} | {:<10} | {:>12} | {:>9} | {:>10}".format(
            row.loan_id,
            row.name[:10],
            format_amount(row.principal, precision),
            format_amount(row.accrued_interest, precision),
            format_amount(row.payment, precision)
        ))

    total = sum((row.payment for row in rows), ZERO)
    lines.append("{:>45} {:>12}".format("Total", format_amount(total, precision)))

    return "\n".join(lines) + "\n"
