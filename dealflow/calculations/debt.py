"""Loan amortization for interest-only and amortizing carrying loans."""

from dataclasses import dataclass
from typing import List, Optional

import numpy_financial as npf

from ..models.line_items import LoanItem, LoanMode
from .periods import clamp_period, zeros
from .trace import trace


@dataclass
class LoanSchedule:
    """Funding and repayment series for one loan.

    All values are positive magnitudes; the carrying series applies signs
    (funding is an inflow, interest and principal are outflows).
    """
    funding: List[float]
    interest: List[float]
    principal: List[float]

    @property
    def total_interest(self) -> float:
        return sum(self.interest)

    @property
    def total_principal(self) -> float:
        return sum(self.principal)


@dataclass
class LoanPreview:
    """Payment summary shown alongside a loan row."""
    monthly_payment: float
    monthly_interest: Optional[float]  # None when it varies (amortizing)
    monthly_principal: Optional[float]


def calculate_level_payment(principal: float, monthly_rate: float, term_months: int) -> float:
    """Level monthly payment that retires `principal` over `term_months`.

    payment = principal / term                          if r == 0
    payment = principal x r x (1 + r)^n / ((1 + r)^n - 1)  otherwise

    Args:
        principal: Loan amount.
        monthly_rate: Monthly interest rate (annual / 12).
        term_months: Number of payments.

    Returns:
        Monthly payment (positive).
    """
    if term_months <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / term_months
    # numpy_financial returns the payment as a negative cash flow
    return float(-npf.pmt(rate=monthly_rate, nper=term_months, pv=principal, fv=0))


def calculate_loan_balance(
    original_principal: float,
    monthly_rate: float,
    monthly_payment: float,
    months_elapsed: int,
) -> float:
    """Calculate remaining loan balance after a number of payments.

    Uses the loan balance formula:
    Balance = P x (1 + r)^n - PMT x [((1 + r)^n - 1) / r]

    Args:
        original_principal: Original loan amount.
        monthly_rate: Monthly interest rate.
        monthly_payment: Monthly P&I payment.
        months_elapsed: Number of payments made.

    Returns:
        Remaining loan balance, never negative.
    """
    if monthly_rate == 0:
        return max(0.0, original_principal - (monthly_payment * months_elapsed))

    growth_factor = (1 + monthly_rate) ** months_elapsed
    balance = (
        original_principal * growth_factor
        - monthly_payment * ((growth_factor - 1) / monthly_rate)
    )

    return max(0.0, balance)


def calculate_interest_portion(balance: float, monthly_rate: float) -> float:
    """Interest accrued on the outstanding balance for one period."""
    return balance * monthly_rate


def calculate_principal_portion(monthly_payment: float, interest: float) -> float:
    """Principal retired by a payment after interest is covered."""
    return monthly_payment - interest


def _interest_only_schedule(
    loan: LoanItem,
    schedule: LoanSchedule,
    repayment_start: int,
    horizon: int,
) -> None:
    interest_payment = calculate_interest_portion(loan.principal, loan.monthly_rate)
    for i in range(loan.term_months):
        period = repayment_start + i
        if period >= horizon:
            break
        schedule.interest[period] += interest_payment

    # Balloon payment of the full principal at term end
    payoff_period = repayment_start + max(loan.term_months - 1, 0)
    if payoff_period < horizon:
        schedule.principal[payoff_period] += loan.principal


def _amortizing_schedule(
    loan: LoanItem,
    schedule: LoanSchedule,
    repayment_start: int,
    horizon: int,
) -> None:
    rate = loan.monthly_rate
    term = loan.term_months
    payment = trace(
        "loan.level_payment",
        calculate_level_payment(loan.principal, rate, term),
        {"loan.principal": loan.principal, "loan.monthly_rate": rate},
        notes=loan.label,
        item_id=loan.id,
    )

    remaining = loan.principal
    for i in range(term):
        period = repayment_start + i
        if period >= horizon:
            break

        interest_portion = calculate_interest_portion(remaining, rate)
        principal_portion = calculate_principal_portion(payment, interest_portion)
        # Final payment retires whatever is left so no residual balance survives
        if principal_portion > remaining or i == term - 1:
            principal_portion = remaining
        remaining -= principal_portion

        schedule.interest[period] += interest_portion
        schedule.principal[period] += principal_portion

        if remaining <= 0:
            break


def amortize_loan(loan: LoanItem, horizon: int) -> LoanSchedule:
    """Build funding, interest and principal series for a loan.

    The principal is funded at `funding_month`. Repayment starts at
    `repayment_start_month` and runs for `term_months` periods, clipped at
    the horizon:
    - Interest-only: principal x r every period, balloon at term end.
    - Amortizing: level payment split into declining interest and rising
      principal, the final period forced to retire the remaining balance.

    Args:
        loan: Validated loan item.
        horizon: Number of periods.

    Returns:
        LoanSchedule with three series of length `horizon`.
    """
    schedule = LoanSchedule(
        funding=zeros(horizon),
        interest=zeros(horizon),
        principal=zeros(horizon),
    )
    if not loan.principal or loan.term_months <= 0 or horizon <= 0:
        return schedule

    funding_month = clamp_period(loan.funding_month, horizon)
    repayment_month = (
        loan.repayment_start_month if loan.repayment_start_month is not None else funding_month
    )
    repayment_start = clamp_period(repayment_month, horizon)

    schedule.funding[funding_month] += loan.principal

    if loan.mode == LoanMode.INTEREST_ONLY:
        _interest_only_schedule(loan, schedule, repayment_start, horizon)
    else:
        _amortizing_schedule(loan, schedule, repayment_start, horizon)

    return schedule


def calculate_loan_preview(loan: LoanItem) -> LoanPreview:
    """Summarize the monthly payment of a loan.

    Interest-only loans pay a constant interest amount. Amortizing loans pay
    a level amount whose interest/principal split changes every month.
    """
    if not loan.principal or loan.term_months <= 0:
        return LoanPreview(monthly_payment=0.0, monthly_interest=0.0, monthly_principal=0.0)

    if loan.mode == LoanMode.INTEREST_ONLY:
        monthly_interest = calculate_interest_portion(loan.principal, loan.monthly_rate)
        return LoanPreview(
            monthly_payment=monthly_interest,
            monthly_interest=monthly_interest,
            monthly_principal=0.0,
        )

    return LoanPreview(
        monthly_payment=calculate_level_payment(loan.principal, loan.monthly_rate, loan.term_months),
        monthly_interest=None,
        monthly_principal=None,
    )
