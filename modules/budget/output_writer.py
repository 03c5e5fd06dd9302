"""
output_writer.py
================
Module untuk menulis dataset + pivot ke Excel (in-memory)
"""

import io
import logging
from typing import List, Sequence

import pandas as pd
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from modules.budget.aggregator import build_pivot
from modules.budget.models import BudgetRecord, PivotTable

logger = logging.getLogger(__name__)

# Header kolom sheet Data (urutan sesuai tabel detail dashboard)
DATA_COLUMNS = {
    'status': 'Status',
    'nama_user': 'Nama User',
    'tim': 'Tim',
    'periode': 'Periode Bulan',
    'nilai_tagihan': 'Nilai Tagihan',
    'no_ro': 'No RO',
    'tgl_bast': 'Tgl BAST',
    'no_bast': 'No BAST',
    'status2': 'Status2',
    'email_soft_copy': 'Kirim Email Soft Copy',
    'sa_no': 'SA No',
    'tgl_kirim_jkt': 'Tgl Kirim ke JKT',
    'reviewer_vendor': 'Reviewer I Vendor',
    'keterangan': 'Keterangan2',
}

AMOUNT_HEADERS = {'Nilai Tagihan', 'Total', 'Grand Total'}


class OutputWriter:

    def write_excel_to_bytes(
        self,
        records: Sequence[BudgetRecord],
        pivot: PivotTable = None
    ) -> bytes:

        logger.info(f"Writing {len(records)} rows to Excel (in-memory)")

        if pivot is None:
            pivot = build_pivot(records)

        data_df = self._prepare_dataframe(records)
        pivot_df = self.pivot_to_dataframe(pivot)

        buffer = io.BytesIO()

        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            # Sheet 1: Data lengkap
            data_df.to_excel(writer, sheet_name='Data', index=False)
            self._format_worksheet(writer.sheets['Data'], data_df)

            # Sheet 2: Pivot
            pivot_df.to_excel(writer, sheet_name='Pivot', index=False)
            self._format_worksheet(writer.sheets['Pivot'], pivot_df)

        buffer.seek(0)
        file_bytes = buffer.read()

        logger.info(f"Excel created in memory ({len(file_bytes) / 1024:.2f} KB, 2 sheets)")
        return file_bytes

    def _prepare_dataframe(self, records: Sequence[BudgetRecord]) -> pd.DataFrame:

        rows = [
            {label: getattr(r, attr) for attr, label in DATA_COLUMNS.items()}
            for r in records
        ]
        return pd.DataFrame(rows, columns=list(DATA_COLUMNS.values()))

    def pivot_to_dataframe(self, pivot: PivotTable) -> pd.DataFrame:
        """Pivot -> DataFrame dengan baris TOTAL di akhir."""
        rows: List[dict] = []

        for row in pivot.rows:
            entry = {'Tim': row.tim, 'Nama User': row.nama_user}
            for col in pivot.columns:
                entry[col] = row.data.get(col, 0)
            entry['Total'] = row.total
            rows.append(entry)

        total_row = {'Tim': 'Grand Total', 'Nama User': ''}
        for col in pivot.columns:
            total_row[col] = pivot.column_totals.get(col, 0)
        total_row['Total'] = pivot.grand_total
        rows.append(total_row)

        columns = ['Tim', 'Nama User'] + list(pivot.columns) + ['Total']
        return pd.DataFrame(rows, columns=columns)

    def _format_worksheet(self, worksheet, df: pd.DataFrame) -> None:

        # Define styles
        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

        border_side = Side(style='thin', color='000000')
        border = Border(left=border_side, right=border_side, top=border_side, bottom=border_side)

        for col_num in range(1, len(df.columns) + 1):
            cell = worksheet.cell(row=1, column=col_num)
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = header_alignment
            cell.border = border

        # Lebar kolom: minimum 10, maximum 50
        for column_cells in worksheet.columns:
            max_length = max(len(str(c.value)) if c.value is not None else 0 for c in column_cells)
            column_letter = get_column_letter(column_cells[0].column)
            worksheet.column_dimensions[column_letter].width = min(max(max_length + 2, 10), 50)

        # Kolom angka: semua kolom nominal + kolom status2 di sheet pivot
        amount_columns = {
            idx for idx, name in enumerate(df.columns, 1)
            if name in AMOUNT_HEADERS or pd.api.types.is_integer_dtype(df[name])
        }

        for row_num in range(2, worksheet.max_row + 1):
            for col_num in range(1, worksheet.max_column + 1):
                cell = worksheet.cell(row=row_num, column=col_num)
                cell.border = border

                if col_num in amount_columns:
                    cell.alignment = Alignment(horizontal="right", vertical="center")
                    # Rupiah tanpa desimal
                    cell.number_format = '#,##0'
                else:
                    cell.alignment = Alignment(horizontal="left", vertical="center")

        worksheet.freeze_panes = 'A2'


__all__ = ['OutputWriter', 'DATA_COLUMNS']
