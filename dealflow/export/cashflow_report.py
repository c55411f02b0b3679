"""Cashflow report generator: exports a projection to an Excel workbook.

The workbook shows the grouped grid, the per-period line items behind it
and the traced calculations so the numbers can be checked by hand.
"""

import io
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from dealflow.calculations.cashflow import CashflowProjection
from dealflow.calculations.formula_registry import FormulaCategory, FormulaRegistry
from dealflow.calculations.trace import TraceContext
from dealflow.calculations.views import CashflowView

CURRENCY_FORMAT = '"$"#,##0;-"$"#,##0;"-"'


@dataclass
class CashflowReportConfig:
    """Configuration for cashflow report generation."""
    project_name: str = "Development Project"
    include_monthly_detail: bool = True
    include_traced_values: bool = True
    include_formula_registry: bool = True
    expanded_rows: Sequence[str] = field(
        default_factory=lambda: ("revenues", "soft", "hard", "leaseup", "carrying")
    )


def format_currency_cell(value: Optional[float]) -> str:
    """Format a grid cell; empty or sub-cent amounts show as a dash."""
    if value is None:
        return "-"
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return "-"
    if not math.isfinite(amount) or abs(amount) < 0.005:
        return "-"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def _add_header_style(ws, row: int, cols: int) -> None:
    """Apply header styling to a row."""
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)

    for col in range(1, cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")


def _add_section_header(ws, title: str, row: int) -> int:
    """Add a section header and return next row."""
    ws.cell(row=row, column=1, value=title)
    ws.cell(row=row, column=1).font = Font(bold=True, size=14)
    return row + 1


def generate_cashflow_excel(
    projection: CashflowProjection,
    config: Optional[CashflowReportConfig] = None,
    view: Optional[CashflowView] = None,
) -> bytes:
    """Generate an Excel workbook for a projection.

    Args:
        projection: Result of calculate_cashflow().
        config: Optional report configuration.
        view: Grid view to export (defaults to the projection's own view).

    Returns:
        Excel file as bytes
    """
    if config is None:
        config = CashflowReportConfig()
    view = view or projection.view

    wb = Workbook()
    wb.remove(wb.active)

    _create_summary_sheet(wb.create_sheet("Summary"), projection, config)
    _create_grid_sheet(wb.create_sheet("Cashflow"), view, config)

    if config.include_monthly_detail:
        _create_monthly_detail_sheet(wb.create_sheet("Monthly Detail"), projection)

    if config.include_traced_values and projection.trace_context:
        _create_traced_calculations_sheet(wb.create_sheet("Traced Calculations"), projection.trace_context)

    if config.include_formula_registry:
        _create_formula_registry_sheet(wb.create_sheet("Formula Registry"))

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def _create_summary_sheet(ws, projection: CashflowProjection, config: CashflowReportConfig) -> None:
    """Create the summary sheet."""
    row = 1
    ws.cell(row=row, column=1, value=f"Cashflow Report: {config.project_name}")
    ws.cell(row=row, column=1).font = Font(bold=True, size=16)
    row += 1

    ws.cell(row=row, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    row += 2

    row = _add_section_header(ws, "Category Totals", row)
    row += 1

    for series in projection.rows:
        if series.id == "balance":
            continue
        ws.cell(row=row, column=1, value=series.label)
        cell = ws.cell(row=row, column=2, value=series.total)
        cell.number_format = CURRENCY_FORMAT
        if series.id == "total":
            ws.cell(row=row, column=1).font = Font(bold=True)
            cell.font = Font(bold=True)
        row += 1

    row += 1
    row = _add_section_header(ws, "Timeline", row)
    row += 1

    first = projection.calendar[0].calendar_label if projection.calendar else "-"
    last = projection.calendar[-1].calendar_label if projection.calendar else "-"
    timeline = [
        ("Periods", f"{projection.horizon} months"),
        ("First Period", first),
        ("Last Period", last),
        ("Leasing Start", _offset_label(projection, projection.leasing_start_offset)),
        ("Stabilized", _offset_label(projection, projection.stabilized_offset)),
        ("Ending Balance", format_currency_cell(projection.ending_balance)),
    ]
    for label, value in timeline:
        ws.cell(row=row, column=1, value=label)
        ws.cell(row=row, column=2, value=value)
        row += 1

    ws.column_dimensions['A'].width = 25
    ws.column_dimensions['B'].width = 20


def _offset_label(projection: CashflowProjection, offset: Optional[int]) -> str:
    if offset is None:
        return "-"
    if 0 <= offset < len(projection.calendar):
        period = projection.calendar[offset]
        return f"{period.label} ({period.calendar_label})"
    return f"M{offset + 1}"


def _create_grid_sheet(ws, view: CashflowView, config: CashflowReportConfig) -> None:
    """Create the grouped grid sheet from the view's DataFrame."""
    df = view.to_dataframe(expanded=config.expanded_rows).reset_index()

    for r_idx, values in enumerate(dataframe_to_rows(df, index=False, header=True), 1):
        for c_idx, value in enumerate(values, 1):
            cell = ws.cell(row=r_idx, column=c_idx, value=value)
            if r_idx > 1 and c_idx > 1:
                cell.number_format = CURRENCY_FORMAT
    _add_header_style(ws, 1, len(df.columns))

    category_labels = {series.label for series in view.rows}
    for r_idx in range(2, len(df) + 2):
        if ws.cell(row=r_idx, column=1).value in category_labels:
            ws.cell(row=r_idx, column=1).font = Font(bold=True)

    ws.column_dimensions['A'].width = 36
    for col in range(2, len(df.columns) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 14
    ws.freeze_panes = "B2"


def _create_monthly_detail_sheet(ws, projection: CashflowProjection) -> None:
    """One row per line item with every period as a column."""
    headers = ["Category", "Line Item"] + [
        f"{period.label} {period.calendar_label}" for period in projection.calendar
    ]
    for col, header in enumerate(headers, 1):
        ws.cell(row=1, column=col, value=header)
    _add_header_style(ws, 1, len(headers))

    row = 2
    for series in projection.rows:
        entries = series.line_items or [series]
        for item in entries:
            ws.cell(row=row, column=1, value=series.label)
            ws.cell(row=row, column=2, value=item.label if item is not series else "-")
            for offset, value in enumerate(item.period_values):
                cell = ws.cell(row=row, column=3 + offset, value=value)
                cell.number_format = CURRENCY_FORMAT
            row += 1

    ws.column_dimensions['A'].width = 18
    ws.column_dimensions['B'].width = 36
    ws.freeze_panes = "C2"


def _create_traced_calculations_sheet(ws, trace_context: TraceContext) -> None:
    """Create the Traced Calculations sheet."""
    row = 1
    row = _add_section_header(ws, "Traced Calculations - Actual Values Used", row)
    row += 2

    headers = ["Field Path", "Result", "Computed Formula", "Notes"]
    for col, header in enumerate(headers, 1):
        ws.cell(row=row, column=col, value=header)
    _add_header_style(ws, row, len(headers))
    row += 1

    for trace_key in sorted(trace_context.traces.keys()):
        traced = trace_context.traces[trace_key]
        ws.cell(row=row, column=1, value=traced.field_path)
        ws.cell(row=row, column=2, value=format_currency_cell(traced.value))
        ws.cell(row=row, column=3, value=traced.computed_formula[:100])
        ws.cell(row=row, column=4, value=traced.notes or "-")
        row += 1

    ws.column_dimensions['A'].width = 30
    ws.column_dimensions['B'].width = 18
    ws.column_dimensions['C'].width = 80
    ws.column_dimensions['D'].width = 30


def _create_formula_registry_sheet(ws) -> None:
    """Create the Formula Registry sheet."""
    row = 1
    row = _add_section_header(ws, "Formula Registry - All Calculation Definitions", row)
    row += 2

    headers = ["Category", "Name", "Field Path", "Formula", "Inputs", "Notes"]
    for col, header in enumerate(headers, 1):
        ws.cell(row=row, column=col, value=header)
    _add_header_style(ws, row, len(headers))
    row += 1

    for category in FormulaCategory:
        for formula in sorted(FormulaRegistry.get_by_category(category), key=lambda f: f.field_path):
            ws.cell(row=row, column=1, value=category.value)
            ws.cell(row=row, column=2, value=formula.name)
            ws.cell(row=row, column=3, value=formula.field_path)
            ws.cell(row=row, column=4, value=formula.formula)
            ws.cell(row=row, column=5, value=", ".join(formula.inputs) if formula.inputs else "-")
            ws.cell(row=row, column=6, value=formula.notes or "-")
            row += 1

    ws.column_dimensions['A'].width = 15
    ws.column_dimensions['B'].width = 30
    ws.column_dimensions['C'].width = 30
    ws.column_dimensions['D'].width = 50
    ws.column_dimensions['E'].width = 40
    ws.column_dimensions['F'].width = 40
