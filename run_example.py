#!/usr/bin/env python3
"""Example script: project the sample deal and print its cashflow grid."""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import pandas as pd

from dealflow.calculations.cashflow import calculate_cashflow
from dealflow.calculations.debt import calculate_loan_preview
from dealflow.models.cashflow_config import CashflowConfig, ViewMode
from dealflow.sample import get_sample_project


def print_loan_previews(project) -> None:
    print("\nLoans")
    print("-" * 60)
    for loan in project.loans:
        preview = calculate_loan_preview(loan)
        split = ""
        if preview.monthly_interest is not None:
            split = f" (interest ${preview.monthly_interest:,.0f})"
        print(f"  {loan.label:<24} ${preview.monthly_payment:>12,.0f}/mo{split}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    project = get_sample_project()
    projection = calculate_cashflow(project, CashflowConfig(view_mode=ViewMode.ANNUAL))

    print("\n" + "=" * 60)
    print(f"CASHFLOW PROJECTION: {project.name}")
    print("=" * 60)

    pd.set_option("display.width", 160)
    pd.set_option("display.float_format", "{:,.0f}".format)

    print("\nAnnual view")
    print(projection.view.to_dataframe(expanded=("carrying",)))

    print("\nTax-year view")
    print(projection.regroup(ViewMode.TAX_YEAR).to_dataframe())

    print_loan_previews(project)

    print("\n" + projection.trace_context.summary())
    print(f"Ending balance: ${projection.ending_balance:,.0f}")


if __name__ == "__main__":
    main()
