import dataclasses
import unittest

from modules.budget.models import BudgetRecord
from modules.budget.state import (
    AppState,
    StateStore,
    add_record,
    apply_import,
    clear_data,
    set_filter,
)


def make_record(record_id, nama_user='Andi', periode='Jan-25', nilai_tagihan=100):
    return BudgetRecord(id=record_id, nama_user=nama_user, periode=periode,
                        nilai_tagihan=nilai_tagihan)


class TestReducers(unittest.TestCase):

    def test_apply_import(self):
        state, merge = apply_import(AppState(), [make_record('1'), make_record('2')])
        self.assertEqual(len(state.records), 1)
        self.assertEqual(merge.skipped, 1)

    def test_add_record_does_not_mutate(self):
        original = AppState()
        updated = add_record(original, make_record('1'))
        self.assertEqual(original.records, ())
        self.assertEqual(len(updated.records), 1)

    def test_state_is_frozen(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            AppState().search_query = 'x'

    def test_set_filter(self):
        state = add_record(AppState(), make_record('1', periode='Feb-25'))

        state = set_filter(state, periode='2025-02', query='andi')
        self.assertEqual(state.filter_periode, '2025-02')
        self.assertEqual(state.search_query, 'andi')
        self.assertEqual(len(state.filtered()), 1)

        # query None mempertahankan nilai lama
        state = set_filter(state, periode='2099-01')
        self.assertEqual(state.filter_periode, 'All')
        self.assertEqual(state.search_query, 'andi')

    def test_clear_data(self):
        state = set_filter(add_record(AppState(), make_record('1')), query='x')
        cleared = clear_data(state)
        self.assertEqual(cleared, AppState())


class TestStateStore(unittest.TestCase):

    def test_dispatch_returns_extra(self):
        store = StateStore()
        merge = store.dispatch(apply_import, [make_record('1'), make_record('2', nama_user='Budi')])

        self.assertEqual(len(merge.added), 2)
        self.assertEqual(len(store.state.records), 2)

    def test_dispatch_returns_state(self):
        store = StateStore()
        result = store.dispatch(add_record, make_record('1'))
        self.assertIs(result, store.state)

        store.dispatch(set_filter, query='budi')
        self.assertEqual(store.state.filtered(), [])

        store.dispatch(clear_data)
        self.assertEqual(store.state.records, ())


if __name__ == '__main__':
    unittest.main()
