"""
FastAPI REST API Module

Exposes loan projection, payment allocation, completion date estimation and
the loan status report. Decimal values travel as strings.
"""

from decimal import Decimal
from datetime import date
from typing import List, Optional
from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uvicorn

from . import __version__
from .allocation import AllocationUndefinedError, allocate
from .amounts import to_decimal
from .config import get_config
from .loans import Loan, LoanSet
from .logging_config import setup_logging, log_action
from .reporting import (
    ReportFormat, export_rows, loan_status_report, recommendation_report
)
from .simulation import NEVER, SimulationLimitExceededError, estimate_completion_date


# Pydantic models for API requests/responses
class LoanModel(BaseModel):
    id: int
    name: str = ""
    interest_rate: str = Field(..., description="Annual rate as decimal fraction string, e.g. '0.05'")
    principal: str = Field(..., description="Decimal amount as string")
    accrued_interest: str = "0"
    principal_effective_date: date
    minimum_payment: str = "0"

    def to_loan(self) -> Loan:
        loan = Loan(
            id=self.id,
            interest_rate=to_decimal(self.interest_rate),
            minimum_payment=to_decimal(self.minimum_payment),
            name=self.name
        )
        loan.set_balance(
            to_decimal(self.principal),
            to_decimal(self.accrued_interest),
            self.principal_effective_date
        )
        return loan

    @classmethod
    def from_loan(cls, loan: Loan) -> 'LoanModel':
        return cls(
            id=loan.id,
            name=loan.name,
            interest_rate=str(loan.interest_rate),
            principal=str(loan.principal),
            accrued_interest=str(loan.accrued_interest),
            principal_effective_date=loan.principal_effective_date,
            minimum_payment=str(loan.minimum_payment)
        )


class ProjectionRequest(BaseModel):
    loans: List[LoanModel]
    as_of: date


class AllocationRequest(BaseModel):
    loans: List[LoanModel]
    total_funds: str = Field(..., description="Payment pool as decimal string")
    as_of: Optional[date] = None
    zero_rate_policy: Optional[str] = None


class CompletionDateRequest(BaseModel):
    loans: List[LoanModel]
    monthly_payment: str = Field(..., description="Average monthly payment as decimal string")
    first_payment: date
    max_months: Optional[int] = Field(None, gt=0)
    accrue_between_payments: Optional[bool] = None
    zero_rate_policy: Optional[str] = None


class LoanStatusRequest(BaseModel):
    loans: List[LoanModel]
    as_of: Optional[date] = None


def _loan_set(models: List[LoanModel]) -> LoanSet:
    return LoanSet(model.to_loan() for model in models)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    config = get_config()
    logger = setup_logging(
        level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file
    )

    app = FastAPI(
        title="Loan Repayment Projector API",
        description="Loan balance projection and interest-weighted payment allocation",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "loan_projector_api",
            "version": __version__
        }

    @app.post("/projections")
    async def project_loans(request: ProjectionRequest):
        """Project loans forward to a date"""
        try:
            projected = _loan_set(request.loans).project(request.as_of)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        return {
            "as_of": request.as_of.isoformat(),
            "loans": [
                dict(LoanModel.from_loan(loan).model_dump(mode="json"),
                     total_owed=str(loan.total_owed()))
                for loan in projected.values()
            ],
            "total_owed": str(projected.total_owed())
        }

    @app.post("/allocations")
    async def allocate_payments(request: AllocationRequest):
        """Recommend a payment for each loan from a payment pool"""
        try:
            loans = _loan_set(request.loans)
            total_funds = to_decimal(request.total_funds)
            recommendations = allocate(
                loans, total_funds,
                as_of=request.as_of,
                zero_rate_policy=request.zero_rate_policy
            )
            snapshots = loans.project(request.as_of) if request.as_of else loans
        except (ValueError, AllocationUndefinedError) as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        rows = recommendation_report(snapshots, recommendations)
        total = sum((p.amount for p in recommendations.values()), Decimal('0'))

        log_action(
            logger, "info", "Payment allocation computed",
            action="allocate",
            extra={"loans": len(rows), "total_funds": str(total_funds)}
        )

        return {
            "payments": export_rows(rows, ReportFormat.DICT),
            "total_recommended": str(total),
            "exceeds_funds": total > total_funds
        }

    @app.post("/completion-date")
    async def completion_date(request: CompletionDateRequest):
        """Estimate when the loans are repaid"""
        try:
            completed = estimate_completion_date(
                _loan_set(request.loans),
                to_decimal(request.monthly_payment),
                request.first_payment,
                max_months=request.max_months,
                accrue_between_payments=request.accrue_between_payments,
                zero_rate_policy=request.zero_rate_policy
            )
        except (ValueError, AllocationUndefinedError, SimulationLimitExceededError) as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        if completed == NEVER:
            return {"completion_date": None, "never": True}
        return {"completion_date": completed.isoformat(), "never": False}

    @app.post("/reports/loan-status")
    async def loan_status(request: LoanStatusRequest):
        """Loan status rows with warning flags"""
        try:
            rows = loan_status_report(_loan_set(request.loans), as_of=request.as_of)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        return {"loans": export_rows(rows, ReportFormat.DICT)}

    return app


app = create_app()


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "loan_projector.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level="info"
    )
