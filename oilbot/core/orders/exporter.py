"""
Export completed orders to XLSX format.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill

from oilbot.core.catalog import format_amount
from oilbot.core.orders.models import CompletedOrder

logger = logging.getLogger(__name__)


class OrderExporter:
    """Export orders to XLSX format."""

    # Styles
    HEADER_FONT = Font(bold=True, size=14)
    SUBHEADER_FONT = Font(bold=True, size=11)

    HEADER_FILL = PatternFill(start_color="4CAF50", end_color="4CAF50", fill_type="solid")
    HEADER_FONT_WHITE = Font(bold=True, size=11, color="FFFFFF")

    ALT_ROW_FILL = PatternFill(start_color="E8F5E9", end_color="E8F5E9", fill_type="solid")
    WARNING_FONT = Font(bold=True, size=11, color="C62828")

    THIN_BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
    LEFT_ALIGN = Alignment(horizontal='left', vertical='center')
    RIGHT_ALIGN = Alignment(horizontal='right', vertical='center')
    WRAP_ALIGN = Alignment(horizontal='left', vertical='top', wrap_text=True)

    def export(self, order: CompletedOrder, output_dir: Optional[Path] = None) -> Path:
        """
        Export order to XLSX file.

        Args:
            order: Order to export
            output_dir: Directory for output file (default: data/orders/)

        Returns:
            Path to created XLSX file
        """
        if output_dir is None:
            output_dir = Path("data/orders")

        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = output_dir / f"order_{order.order_id}_{timestamp}.xlsx"

        wb = Workbook()
        ws = wb.active
        ws.title = order.order_id

        ws.column_dimensions['A'].width = 5
        ws.column_dimensions['B'].width = 30
        ws.column_dimensions['C'].width = 14
        ws.column_dimensions['D'].width = 12
        ws.column_dimensions['E'].width = 14

        row = 1

        # === HEADER ===
        ws.merge_cells(f'A{row}:E{row}')
        cell = ws.cell(row=row, column=1, value=f"ORDER #{order.order_id}")
        cell.font = self.HEADER_FONT
        cell.alignment = self.CENTER_ALIGN
        row += 1

        ws.merge_cells(f'A{row}:E{row}')
        cell = ws.cell(row=row, column=1, value=f"completed {order.completed_at.strftime('%d.%m.%Y %H:%M')}")
        cell.alignment = self.CENTER_ALIGN
        row += 2

        # === ITEMS TABLE ===
        ws.cell(row=row, column=1, value="ITEMS:").font = self.SUBHEADER_FONT
        row += 1

        headers = ["#", "Product", "Qty (L)", "Price/L", "Subtotal"]
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.HEADER_FONT_WHITE
            cell.fill = self.HEADER_FILL
            cell.border = self.THIN_BORDER
            cell.alignment = self.CENTER_ALIGN
        row += 1

        for i, line in enumerate(order.items, 1):
            values = [
                i,
                line.item.name,
                format_amount(line.quantity),
                f"₹{format_amount(line.item.unit_price)}",
                f"₹{format_amount(line.subtotal)}",
            ]

            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.THIN_BORDER
                if col == 1:
                    cell.alignment = self.CENTER_ALIGN
                elif col in [3, 4, 5]:
                    cell.alignment = self.RIGHT_ALIGN
                else:
                    cell.alignment = self.LEFT_ALIGN

                if i % 2 == 0:
                    cell.fill = self.ALT_ROW_FILL
            row += 1

        # Total row
        ws.merge_cells(f'A{row}:B{row}')
        cell = ws.cell(row=row, column=1, value="TOTAL:")
        cell.font = self.SUBHEADER_FONT
        cell.border = self.THIN_BORDER
        cell.alignment = self.RIGHT_ALIGN

        cell = ws.cell(row=row, column=3, value=format_amount(order.total_quantity))
        cell.font = self.SUBHEADER_FONT
        cell.border = self.THIN_BORDER
        cell.alignment = self.RIGHT_ALIGN

        ws.cell(row=row, column=4, value="").border = self.THIN_BORDER

        cell = ws.cell(row=row, column=5, value=f"₹{format_amount(order.total)}")
        cell.font = self.SUBHEADER_FONT
        cell.border = self.THIN_BORDER
        cell.alignment = self.RIGHT_ALIGN
        row += 2

        # === PAYMENT ===
        ws.cell(row=row, column=1, value="PAYMENT:").font = self.SUBHEADER_FONT
        row += 1
        for label, value in [
            ("Gateway order:", order.payment_order_id or "-"),
            ("Reference:", order.payment_reference or "Not provided"),
            ("Status:", order.payment_status.value if order.payment_status else "Unknown"),
        ]:
            ws.merge_cells(f'B{row}:E{row}')
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1

        if order.needs_verification:
            ws.merge_cells(f'A{row}:E{row}')
            cell = ws.cell(row=row, column=1, value="PAYMENT NEEDS VERIFICATION")
            cell.font = self.WARNING_FONT
            row += 1
        row += 1

        # === DELIVERY ===
        ws.cell(row=row, column=1, value="DELIVERY:").font = self.SUBHEADER_FONT
        row += 1
        ws.merge_cells(f'B{row}:E{row}')
        ws.cell(row=row, column=1, value="Customer:")
        ws.cell(row=row, column=2, value=order.customer_id)
        row += 1
        ws.merge_cells(f'B{row}:E{row}')
        ws.cell(row=row, column=1, value="Address:")
        cell = ws.cell(row=row, column=2, value=order.address)
        cell.alignment = self.WRAP_ALIGN
        ws.row_dimensions[row].height = 40

        wb.save(filepath)
        logger.info(f"Order exported to {filepath}")

        return filepath


# Singleton instance
order_exporter = OrderExporter()
