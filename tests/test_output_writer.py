import io
import unittest

import openpyxl

from modules.budget.models import BudgetRecord
from modules.budget.output_writer import DATA_COLUMNS, OutputWriter


class TestOutputWriter(unittest.TestCase):

    def setUp(self):
        self.records = [
            BudgetRecord(id='1', tim='Tim A', nama_user='Andi', nilai_tagihan=100, status2='VOW'),
            BudgetRecord(id='2', tim='Tim B', nama_user='Budi', nilai_tagihan=250, status2='Lainnya'),
        ]

    def _load(self, file_bytes):
        return openpyxl.load_workbook(io.BytesIO(file_bytes))

    def test_two_sheets(self):
        wb = self._load(OutputWriter().write_excel_to_bytes(self.records))
        self.assertEqual(wb.sheetnames, ['Data', 'Pivot'])

    def test_data_sheet(self):
        ws = self._load(OutputWriter().write_excel_to_bytes(self.records))['Data']

        header = [c.value for c in ws[1]]
        self.assertEqual(header, list(DATA_COLUMNS.values()))
        self.assertEqual(ws.max_row, 3)
        self.assertEqual(ws.cell(row=2, column=header.index('Nilai Tagihan') + 1).value, 100)

    def test_pivot_sheet_grand_total(self):
        ws = self._load(OutputWriter().write_excel_to_bytes(self.records))['Pivot']

        header = [c.value for c in ws[1]]
        last_row = [c.value for c in ws[ws.max_row]]
        self.assertEqual(header[0], 'Tim')
        self.assertEqual(header[-1], 'Total')
        self.assertEqual(last_row[0], 'Grand Total')
        self.assertEqual(last_row[-1], 350)
        self.assertEqual(last_row[header.index('manual')], 250)

    def test_empty_records(self):
        wb = self._load(OutputWriter().write_excel_to_bytes([]))
        self.assertEqual(wb['Data'].max_row, 1)
        self.assertEqual(wb['Pivot'].max_row, 2)


if __name__ == '__main__':
    unittest.main()
