import os
import shutil
import tempfile
import unittest
from datetime import datetime
from decimal import Decimal

import openpyxl
import pandas as pd

from modules.budget.excel_reader import ExcelReader
from modules.budget.header_resolver import HeaderResolver
from modules.budget.importer import (
    STRATEGY_COLUMNAR,
    STRATEGY_OBJECT,
    import_columnar,
    import_file,
    import_objects,
)
from modules.budget.row_mapper import RowMapper, build_manual_record, coerce_cell, is_empty_row
from modules.budget.utils import EmptyWorksheetError, FileError, ValidationError

HEADERS = [
    'Status', 'Nama User', 'Tim', 'Periode Bulan', 'Nilai Tagihan',
    'No RO', 'Tgl BAST', 'No BAST', 'Status2',
]


class TestRowMapper(unittest.TestCase):

    def setUp(self):
        counter = iter(range(1000))
        self.mapper = RowMapper(id_factory=lambda: f"test-{next(counter)}")
        self.mapping = HeaderResolver().resolve(HEADERS)

    def test_first_non_empty(self):
        self.assertEqual(RowMapper.first_non_empty([None, '  ', 0, 'x']), 0)
        self.assertIsNone(RowMapper.first_non_empty([None, '']))

    def test_largest_amount(self):
        self.assertEqual(RowMapper.largest_amount(['1.000', -5000, None]), -5000)
        self.assertEqual(RowMapper.largest_amount([]), 0)

    def test_map_columnar_full_row(self):
        row = [
            'completed', 'Andi', 'Tim A', 'Jan-25', 'Rp 1.500.000',
            'RO-1', datetime(2025, 1, 20), 'BAST-1', 'invoice internal',
        ]
        record = self.mapper.map_columnar(row, self.mapping)

        self.assertEqual(record.id, 'test-0')
        self.assertEqual(record.status, 'Completed')
        self.assertEqual(record.nama_user, 'Andi')
        self.assertEqual(record.tim, 'Tim A')
        self.assertEqual(record.periode, 'Jan-25')
        self.assertEqual(record.nilai_tagihan, 1500000)
        self.assertEqual(record.no_ro, 'RO-1')
        self.assertEqual(record.tgl_bast, '20-01-2025')
        self.assertEqual(record.status2, 'Invoice Internal')
        self.assertEqual(record.sa_no, '')
        self.assertEqual(record.tgl_kirim_jkt, '')

    def test_map_columnar_defaults(self):
        row = [None, '', None, None, None, None, None, None, '-']
        record = self.mapper.map_columnar(row, self.mapping)

        self.assertEqual(record.status, 'On Progress')
        self.assertEqual(record.nama_user, 'Unknown')
        self.assertEqual(record.tim, 'No Team')
        self.assertEqual(record.periode, '-')
        self.assertEqual(record.nilai_tagihan, 0)
        self.assertEqual(record.status2, 'manual')

    def test_short_row(self):
        record = self.mapper.map_columnar(['Completed', 'Budi'], self.mapping)
        self.assertEqual(record.nama_user, 'Budi')
        self.assertEqual(record.tim, 'No Team')

    def test_map_object(self):
        row = {'Nama User': 'Citra', 'Team': 'Tim B', 'Nilai Tagihan': 250000}
        keys = HeaderResolver().resolve_keys(list(row.keys()))
        record = self.mapper.map_object(row, keys)

        self.assertEqual(record.nama_user, 'Citra')
        self.assertEqual(record.tim, 'Tim B')
        self.assertEqual(record.nilai_tagihan, 250000)

    def test_coerce_cell(self):
        self.assertEqual(coerce_cell(Decimal('10')), 10)
        self.assertEqual(coerce_cell(Decimal('10.5')), 10.5)
        self.assertIsNone(coerce_cell(float('nan')))
        self.assertIsNone(coerce_cell(pd.NaT))
        self.assertEqual(coerce_cell(True), 'True')
        self.assertEqual(coerce_cell(pd.Timestamp('2025-01-15')), datetime(2025, 1, 15))

    def test_is_empty_row(self):
        self.assertTrue(is_empty_row([None, '  ', float('nan')]))
        self.assertFalse(is_empty_row([None, 0]))


class TestManualRecord(unittest.TestCase):

    def test_valid_form(self):
        record = build_manual_record({
            'namaUser': 'Dedi', 'tim': 'Tim C', 'nilaiTagihan': '2.000.000'
        })
        self.assertTrue(record.id.startswith('manual-'))
        self.assertEqual(record.nilai_tagihan, 2000000)
        self.assertEqual(record.periode, 'Jan-25')
        self.assertEqual(record.status, 'On Progress')
        self.assertEqual(record.status2, 'Invoice Internal')

    def test_missing_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            build_manual_record({'namaUser': 'Dedi'})
        self.assertIn('Tim', str(ctx.exception))
        self.assertIn('Nilai Tagihan', str(ctx.exception))


class TestImportStrategies(unittest.TestCase):

    def test_import_columnar_skips_empty_rows(self):
        rows = [
            HEADERS,
            ['Completed', 'Andi', 'Tim A', 'Jan-25', 100, '', '', '', 'VOW'],
            [None, '  ', None, None, None, None, None, None, None],
            ['On Progress', 'Budi', 'Tim B', 'Feb-25', 200, '', '', '', 'REQ SA'],
        ]
        records, empty_rows = import_columnar(rows)
        self.assertEqual(len(records), 2)
        self.assertEqual(empty_rows, 1)
        self.assertEqual([r.nama_user for r in records], ['Andi', 'Budi'])

    def test_import_columnar_unrecognized_header(self):
        records, empty_rows = import_columnar([['Foo', 'Bar'], [1, 2]])
        self.assertEqual(records, [])
        self.assertEqual(empty_rows, 0)

    def test_import_objects(self):
        objects = [
            {'Nama User': 'Andi', 'Tim': 'Tim A', 'Nilai Tagihan': '100'},
            {'Nama User': None, 'Tim': '', 'Nilai Tagihan': None},
        ]
        records, empty_rows = import_objects(objects)
        self.assertEqual(len(records), 1)
        self.assertEqual(empty_rows, 1)


class TestImportFile(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_xlsx(self, rows, name='data.xlsx', sheet='Budget'):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = sheet
        for row in rows:
            ws.append(row)
        path = os.path.join(self.temp_dir, name)
        wb.save(path)
        return path

    def _write_csv(self, text, name='data.csv'):
        path = os.path.join(self.temp_dir, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
        return path

    def test_xlsx_columnar(self):
        path = self._write_xlsx([
            HEADERS,
            ['Completed', 'Andi', 'Tim A', 'Jan-25', 1500000, 'RO-1', datetime(2025, 1, 20), 'B-1', 'VOW'],
            ['  ', '', '', '', '', '', '', '', ''],
            ['On Progress', 'Budi', 'Tim B', 45689, 'Rp 2.000.000', 'RO-2', None, 'B-2', 'Review 1'],
        ])

        result = import_file(path, original_filename='Budget Januari.xlsx')

        self.assertEqual(result.strategy, STRATEGY_COLUMNAR)
        self.assertEqual(result.sheet_name, 'Budget')
        self.assertEqual(result.file_name, 'Budget Januari.xlsx')
        self.assertEqual(len(result.records), 2)
        self.assertEqual(result.empty_rows, 1)

        first, second = result.records
        self.assertEqual(first.tgl_bast, '20-01-2025')
        self.assertEqual(first.nilai_tagihan, 1500000)
        # serial 45689 = 01-02-2025
        self.assertEqual(second.periode, '01-02-2025')
        self.assertEqual(second.nilai_tagihan, 2000000)
        self.assertEqual(second.status2, 'Review 1')

    def test_csv_columnar(self):
        path = self._write_csv(
            "Nama User,Tim,Periode,Nilai Tagihan,Status2\n"
            "Andi,Tim A,Jan-25,\"Rp 1.000.000\",VOW\n"
        )
        result = import_file(path)
        self.assertEqual(result.strategy, STRATEGY_COLUMNAR)
        self.assertEqual(result.records[0].nilai_tagihan, 1000000)
        self.assertEqual(result.sheet_name, 'data')

    def test_csv_ragged_rows(self):
        path = self._write_csv(
            "Tim,Nama User,Nilai Tagihan\n"
            "A,X,1000\n"
            "B,Y,2000,catatan tambahan\n"
            "C,Z\n"
        )
        result = import_file(path)

        self.assertEqual(result.strategy, STRATEGY_COLUMNAR)
        self.assertEqual([r.nama_user for r in result.records], ['X', 'Y', 'Z'])
        self.assertEqual([r.nilai_tagihan for r in result.records], [1000, 2000, 0])

    def test_object_fallback_when_first_row_is_blank(self):
        path = self._write_csv(
            ",,\n"
            "Nama User,Tim,Nilai Tagihan\n"
            "Andi,Tim A,500\n"
        )
        result = import_file(path)
        self.assertEqual(result.strategy, STRATEGY_OBJECT)
        self.assertEqual(len(result.records), 1)
        self.assertEqual(result.records[0].nama_user, 'Andi')
        self.assertEqual(result.records[0].nilai_tagihan, 500)

    def test_unrecognized_workbook(self):
        path = self._write_xlsx([['Foo', 'Bar'], [1, 2]])
        with self.assertRaises(EmptyWorksheetError):
            import_file(path)

    def test_unsupported_extension(self):
        with self.assertRaises(FileError):
            ExcelReader(os.path.join(self.temp_dir, 'data.xls'))

    def test_missing_file(self):
        with self.assertRaises(FileError):
            import_file(os.path.join(self.temp_dir, 'missing.xlsx'))


if __name__ == '__main__':
    unittest.main()
