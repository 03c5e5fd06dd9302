import unittest

from modules.budget.aggregator import (
    MODE_UNPARSEABLE,
    build_pivot,
    compute_run_rate,
    estimate_budget,
    status_summaries,
)
from modules.budget.dedup import merge_batch
from modules.budget.importer import import_columnar, import_objects
from modules.budget.period_index import build_period_index

ROWS = [
    {'tim': 'A', 'namaUser': 'X', 'periode': 'Jan-25', 'nilaiTagihan': 'Rp 1.000.000', 'status2': 'REQ SA'},
    {'tim': 'A', 'namaUser': 'X', 'periode': 'Jan-25', 'nilaiTagihan': '1000000', 'status2': 'req sa'},
]


class TestImportToPivot(unittest.TestCase):

    def _check(self, records):
        self.assertEqual(len(records), 2)
        for record in records:
            self.assertEqual(record.nilai_tagihan, 1000000)
            self.assertEqual(record.status2, 'REQ SA')

        merge = merge_batch((), records)
        self.assertEqual(len(merge.records), 1)
        self.assertEqual(merge.records[0].id, records[0].id)
        self.assertEqual(merge.skipped, 1)

        pivot = build_pivot(merge.records)
        self.assertEqual(len(pivot.rows), 1)
        self.assertEqual((pivot.rows[0].tim, pivot.rows[0].nama_user), ('A', 'X'))
        self.assertEqual(pivot.rows[0].data, {'REQ SA': 1000000})
        self.assertEqual(pivot.rows[0].total, 1000000)

    def test_object_rows(self):
        records, _ = import_objects(ROWS)
        self._check(records)

    def test_columnar_rows(self):
        header = list(ROWS[0].keys())
        rows = [header] + [[row[key] for key in header] for row in ROWS]
        records, _ = import_columnar(rows)
        self._check(records)

    def test_same_batch_twice(self):
        records, _ = import_objects(ROWS[:1])
        first = merge_batch((), records)

        again, _ = import_objects(ROWS[:1])
        second = merge_batch(first.records, again)
        self.assertEqual(len(second.added), 0)
        self.assertEqual(second.skipped, len(again))


class TestEmptyDataset(unittest.TestCase):

    def test_empty(self):
        self.assertEqual([o.value for o in build_period_index([])], ['All'])
        self.assertEqual(build_pivot([]).rows, [])
        self.assertTrue(all(v == 0 for v in status_summaries([]).values()))
        self.assertEqual(compute_run_rate([]).mode, MODE_UNPARSEABLE)

    def test_single_month_run_rate(self):
        records, _ = import_objects(ROWS[:1])
        run_rate = compute_run_rate(records)
        self.assertEqual(run_rate.months_count, 1)
        self.assertEqual(run_rate.average_per_month, 1000000)

        estimate = estimate_budget(5000000, records)
        self.assertEqual(estimate.absorbed + estimate.remaining, 5000000)
        self.assertEqual(estimate.over_budget, 0)


if __name__ == '__main__':
    unittest.main()
