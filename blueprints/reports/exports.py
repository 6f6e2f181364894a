"""Export routes for reports (revenue Excel export)."""
import io

from flask import request, Response
from openpyxl import Workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from database import get_db
from models.occupancy import revenue_report, get_billing_rows
from utils.api_response import result_response
from utils.datetime_helpers import get_today
from utils.decorators import login_required, role_required

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def register_routes(bp):
    """Register export routes on the reports blueprint."""

    @bp.route('/revenue/export')
    @login_required
    @role_required('manager')
    def export_revenue():
        """Export billing rows of a date range to Excel."""
        return export_revenue_handler()


def export_revenue_handler() -> Response:
    """
    Generate and return the revenue Excel export.

    Query params:
        from_date, to_date: Inclusive billing date range
        branch_id: Filter by branch (optional)

    Returns:
        Response: Excel file download, or a JSON error for a bad range
    """
    db = get_db()
    branch_id = request.args.get('branch_id', type=int)

    summary = revenue_report(
        db,
        request.args.get('from_date'),
        request.args.get('to_date'),
        branch_id=branch_id
    )
    if not summary:
        return result_response(summary)

    totals = summary.data
    rows = get_billing_rows(db, totals['from_date'], totals['to_date'], branch_id)

    # Create workbook
    wb = Workbook()
    ws = wb.active
    ws.title = "Revenue"

    # Styles
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_fill = PatternFill(start_color="1A3A5C", end_color="1A3A5C", fill_type="solid")
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    thin_border = Border(
        left=Side(style='thin', color="D4D4D4"),
        right=Side(style='thin', color="D4D4D4"),
        top=Side(style='thin', color="D4D4D4"),
        bottom=Side(style='thin', color="D4D4D4")
    )
    alt_fill = PatternFill(start_color="F5F5F5", end_color="F5F5F5", fill_type="solid")
    money_format = '#,##0.00'

    # Title row
    ws.merge_cells('A1:H1')
    title_cell = ws.cell(row=1, column=1, value="Revenue Report")
    title_cell.font = Font(bold=True, size=14, color="1A3A5C")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")

    # Subtitle with range
    ws.merge_cells('A2:H2')
    subtitle_cell = ws.cell(
        row=2, column=1,
        value=f"{totals['from_date'].isoformat()} to {totals['to_date'].isoformat()} | "
              f"Paid: {totals['paid_reservations']} | Unpaid: {totals['unpaid_reservations']}"
    )
    subtitle_cell.font = Font(size=10, color="666666")
    subtitle_cell.alignment = Alignment(horizontal="center", vertical="center")

    # Headers (row 4)
    header_row = 4
    headers = [
        "Billing Date", "Reservation", "Customer", "Branch",
        "Status", "Tax", "Other Charges", "Total"
    ]
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=header_row, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border

    ws.freeze_panes = f'A{header_row + 1}'

    # Data rows
    row_idx = header_row
    for row_idx, row in enumerate(rows, header_row + 1):
        values = [
            row['billing_date'].isoformat(),
            row['reservation_id'],
            row['customer_name'],
            row['branch_name'],
            row['status'],
            float(row['tax_amount']),
            float(row['other_charges']),
            float(row['total_amount']),
        ]
        is_alt = (row_idx - header_row) % 2 == 0
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.border = thin_border
            if col >= 6:
                cell.number_format = money_format
            if is_alt:
                cell.fill = alt_fill

    # Totals row
    total_row = row_idx + 1
    ws.cell(row=total_row, column=1, value="Total").font = Font(bold=True)
    for col, key in ((6, 'tax'), (7, 'other_charges'), (8, 'total_revenue')):
        cell = ws.cell(row=total_row, column=col, value=float(totals[key]))
        cell.font = Font(bold=True)
        cell.number_format = money_format
        cell.border = thin_border

    # Column widths
    for col_cells in ws.columns:
        anchor_cell = next((cell for cell in col_cells if not isinstance(cell, MergedCell)), None)
        if anchor_cell is None:
            continue
        max_length = max(
            (len(str(cell.value)) for cell in col_cells
             if not isinstance(cell, MergedCell) and cell.row >= header_row and cell.value is not None),
            default=10
        )
        ws.column_dimensions[anchor_cell.column_letter].width = min(max(max_length, 10) + 3, 50)

    # Save to buffer
    output = io.BytesIO()
    wb.save(output)
    output.seek(0)

    filename = f"revenue_{get_today().strftime('%Y-%m-%d')}.xlsx"

    return Response(
        output.getvalue(),
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
