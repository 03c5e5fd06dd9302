import unittest

from modules.budget.dedup import fingerprint, merge_batch
from modules.budget.models import BudgetRecord


def make_record(record_id, nama_user='Andi', tim='Tim A', nilai_tagihan=100, **kwargs):
    return BudgetRecord(id=record_id, nama_user=nama_user, tim=tim,
                        nilai_tagihan=nilai_tagihan, **kwargs)


class TestFingerprint(unittest.TestCase):

    def test_id_is_ignored(self):
        self.assertEqual(fingerprint(make_record('a')), fingerprint(make_record('b')))

    def test_case_and_whitespace_insensitive(self):
        a = make_record('a', nama_user='Andi ', no_ro='RO-1')
        b = make_record('b', nama_user='andi', no_ro=' ro-1')
        self.assertEqual(fingerprint(a), fingerprint(b))

    def test_amount_is_part_of_key(self):
        self.assertNotEqual(
            fingerprint(make_record('a', nilai_tagihan=100)),
            fingerprint(make_record('b', nilai_tagihan=101))
        )


class TestMergeBatch(unittest.TestCase):

    def test_skips_existing_and_in_batch_duplicates(self):
        existing = [make_record('old')]
        batch = [
            make_record('dup-of-old'),
            make_record('new', nama_user='Budi'),
            make_record('dup-in-batch', nama_user='budi'),
        ]
        result = merge_batch(existing, batch)

        self.assertEqual([r.id for r in result.records], ['old', 'new'])
        self.assertEqual([r.id for r in result.added], ['new'])
        self.assertEqual(result.skipped, 2)
        self.assertEqual(result.total, 3)
        self.assertIn('Ditambahkan: 1', result.message())
        self.assertIn('Duplikat dilewati: 2', result.message())

    def test_reimport_is_idempotent(self):
        batch = [make_record('a'), make_record('b', tim='Tim B')]
        first = merge_batch((), batch)
        second = merge_batch(first.records, [make_record('c'), make_record('d', tim='Tim B')])

        self.assertEqual(second.records, first.records)
        self.assertEqual(second.added, [])
        self.assertEqual(second.skipped, 2)

    def test_metadata_fields_are_ignored(self):
        existing = [make_record('a', status='On Progress', keterangan='', email_soft_copy='')]
        batch = [make_record('b', status='Completed', keterangan='sudah dikirim',
                             email_soft_copy='Sudah')]
        result = merge_batch(existing, batch)

        self.assertEqual(fingerprint(existing[0]), fingerprint(batch[0]))
        self.assertEqual(result.added, [])
        self.assertEqual(result.skipped, 1)
        self.assertEqual(result.records[0].status, 'On Progress')

    def test_empty_batch(self):
        existing = (make_record('a'),)
        result = merge_batch(existing, [])
        self.assertEqual(result.records, existing)
        self.assertEqual(result.total, 0)


if __name__ == '__main__':
    unittest.main()
