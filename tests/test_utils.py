import unittest

from modules.budget.utils import (
    format_currency,
    format_currency_compact,
    format_duration,
    format_months,
    format_number,
    format_percent,
)


class TestFormatting(unittest.TestCase):

    def test_format_number(self):
        self.assertEqual(format_number(1234567), '1.234.567')
        self.assertEqual(format_number(0), '0')

    def test_format_currency(self):
        self.assertEqual(format_currency(65934189945), 'Rp 65.934.189.945')
        self.assertEqual(format_currency(-2500), '-Rp 2.500')
        self.assertEqual(format_currency(1500.9), 'Rp 1.500')

    def test_format_currency_compact(self):
        self.assertEqual(format_currency_compact(65934189945), 'Rp 66 M')
        self.assertEqual(format_currency_compact(1500000000), 'Rp 1,5 M')
        self.assertEqual(format_currency_compact(250000000), 'Rp 250 jt')
        self.assertEqual(format_currency_compact(2000000000000), 'Rp 2 T')
        self.assertEqual(format_currency_compact(5000), 'Rp 5.000')

    def test_format_percent_and_months(self):
        self.assertEqual(format_percent(30.26), '30,3%')
        self.assertEqual(format_months(7.0), '7,0 bulan')
        self.assertEqual(format_months(None), 'Tidak diketahui')

    def test_format_duration(self):
        self.assertEqual(format_duration(2.5), '2.5s')
        self.assertEqual(format_duration(150), '2m 30s')


if __name__ == '__main__':
    unittest.main()
