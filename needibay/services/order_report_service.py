# ==============================================================================
# ORDER REPORT SERVICE
# ==============================================================================
# Date filter of the admin order list and the XLSX export of what is shown.
#
# The workbook is written to a temporary file (OrderReport_MM-DD-YYYY.xlsx),
# handed to the route for download and removed right after.
# ==============================================================================

import logging
import os
import shutil
import tempfile
from datetime import date
from typing import Any, Dict, List, Optional

import xlsxwriter

from needibay.models.entities import Order, parse_date
from needibay.request_logger import profile_function
from needibay.services.results import failure, success

logger = logging.getLogger(__name__)

SHEET_NAME = 'Orders'
MAX_COLUMN_WIDTH_PX = 200
PX_PER_CHAR = 10

COLUMNS = [
    'Order id',
    'Shop Name',
    'Employee Name',
    'Distributor Name',
    'Order Date',
    'Contact Number',
    'Total Amount',
    'Payment Type',
    'Delivery Date',
    'Delivery Slot',
    'Status',
    'Products',
    'Advance Amount',
    'Balance Amount',
    'Partial Payment Due Date',
    'Partial Payment Status',
]


def _fmt_date(value: Optional[date]) -> str:
    return value.strftime('%m/%d/%Y') if value else ''


def _text(value: Any) -> str:
    return '' if value is None else str(value)


def order_row(order: Order) -> List[str]:
    """One worksheet row, in COLUMNS order. Partial columns blank without a partial payment."""
    partial = order.partial_payment
    row = [
        '' if order.id is None else str(order.id),
        order.shop_name,
        order.employee_name,
        order.distributor_name,
        _fmt_date(order.order_date),
        order.contact_number,
        f"{order.total_amount:.2f}",
        order.payment_term,
        _fmt_date(order.delivery_date),
        order.delivery_slot,
        order.status,
        '\n'.join(item.describe() for item in order.items),
        f"{partial.initial_amount:.2f}" if partial else '',
        f"{partial.remaining_amount:.2f}" if partial else '',
        _fmt_date(partial.due_date) if partial else '',
        partial.payment_status if partial else '',
    ]
    return [_text(value) for value in row]


def column_widths(rows: List[List[str]]) -> List[int]:
    """Pixel width per column from its longest line, capped."""
    widths = []
    for col, header in enumerate(COLUMNS):
        longest = len(header)
        for row in rows:
            for line in (row[col] or '').split('\n'):
                longest = max(longest, len(line))
        widths.append(min(MAX_COLUMN_WIDTH_PX, longest * PX_PER_CHAR))
    return widths


def report_filename(today: Optional[date] = None) -> str:
    return f"OrderReport_{(today or date.today()).strftime('%m-%d-%Y')}.xlsx"


class OrderReportService:

    @staticmethod
    def filter_by_date(orders: List[Order], start: Any, end: Any) -> Dict[str, Any]:
        """
        Orders whose order date lies in [start, end], both inclusive.
        Orders without a readable order date are left out.
        """
        start_date, end_date = parse_date(start), parse_date(end)
        if start_date is None or end_date is None:
            return failure('Please select both start and end dates.', orders=list(orders))
        filtered = [
            o for o in orders
            if o.order_date is not None and start_date <= o.order_date <= end_date
        ]
        return success(orders=filtered, start=start_date, end=end_date)

    @profile_function(name="Export orders XLSX")
    def export_orders(self, orders: List[Order], today: Optional[date] = None) -> Dict[str, Any]:
        """
        Write the orders to a new XLSX file.

        Returns:
            {'ok': True, 'path': ..., 'filename': ...}; the caller removes the
            file with cleanup() once it has been sent.
        """
        if not orders:
            return failure('No orders to export.')

        rows = [order_row(o) for o in orders]
        filename = report_filename(today)
        path = os.path.join(tempfile.mkdtemp(prefix='needibay-export-'), filename)

        try:
            self._write_workbook(path, rows)
        except Exception:
            self.cleanup(path)
            raise

        logger.info("Exported %d order(s) to %s", len(rows), path)
        return success(path=path, filename=filename, count=len(rows))

    @staticmethod
    def _write_workbook(path: str, rows: List[List[str]]) -> None:
        workbook = xlsxwriter.Workbook(path)
        try:
            sheet = workbook.add_worksheet(SHEET_NAME)
            cell_fmt = workbook.add_format({
                'border': 1,
                'align': 'center',
                'valign': 'vcenter',
                'text_wrap': True,
            })
            header_fmt = workbook.add_format({
                'bold': True,
                'border': 1,
                'align': 'center',
                'valign': 'vcenter',
            })

            sheet.write_row(0, 0, COLUMNS, header_fmt)
            for r, row in enumerate(rows, start=1):
                for c, value in enumerate(row):
                    sheet.write_string(r, c, value, cell_fmt)

            for c, width in enumerate(column_widths(rows)):
                sheet.set_column_pixels(c, c, width)
        finally:
            workbook.close()

    @staticmethod
    def cleanup(path: str) -> None:
        """Remove an export file and its temporary directory; missing files are fine."""
        if not path:
            return
        folder = os.path.dirname(path)
        if os.path.exists(path):
            os.remove(path)
        if os.path.basename(folder).startswith('needibay-export-'):
            shutil.rmtree(folder, ignore_errors=True)
