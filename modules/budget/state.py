"""
modules/budget/state.py
=======================
State aplikasi (dataset + filter) sebagai value immutable.

Setiap perubahan lewat fungsi reducer yang mengembalikan state baru;
StateStore memegang satu-satunya referensi yang bisa berubah.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from modules.budget.dedup import MergeResult, merge_batch
from modules.budget.models import BudgetRecord
from modules.budget.period_index import ALL_PERIODE_VALUE, filter_records, period_keys

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class AppState:
    records: Tuple[BudgetRecord, ...] = ()
    filter_periode: str = ALL_PERIODE_VALUE
    search_query: str = ''

    def filtered(self) -> List[BudgetRecord]:
        return filter_records(self.records, self.filter_periode, self.search_query)


# ============================================================================
# REDUCERS
# ============================================================================

def _valid_periode(records: Iterable[BudgetRecord], periode: str) -> str:
    """Periode filter yang tidak ada di dataset kembali ke 'All'."""
    if not periode or periode == ALL_PERIODE_VALUE:
        return ALL_PERIODE_VALUE
    if periode not in period_keys(records):
        return ALL_PERIODE_VALUE
    return periode


def apply_import(state: AppState, batch: Iterable[BudgetRecord]) -> Tuple[AppState, MergeResult]:
    merge = merge_batch(state.records, batch)
    return replace(state, records=merge.records), merge


def add_record(state: AppState, record: BudgetRecord) -> AppState:
    return replace(state, records=state.records + (record,))


def set_filter(
    state: AppState,
    periode: Optional[str] = None,
    query: Optional[str] = None
) -> AppState:
    new_periode = state.filter_periode if periode is None else periode
    new_query = state.search_query if query is None else query
    return replace(
        state,
        filter_periode=_valid_periode(state.records, new_periode),
        search_query=new_query,
    )


def clear_data(state: AppState) -> AppState:
    return AppState()


# ============================================================================
# STORE
# ============================================================================

class StateStore:
    """
    Pemegang state untuk view layer. Swap state dilakukan utuh di bawah
    lock, jadi pembaca selalu melihat snapshot yang konsisten.
    """

    def __init__(self, state: AppState = None):
        self._state = state or AppState()
        self._lock = threading.Lock()

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, reducer: Callable[..., T], *args, **kwargs) -> T:
        """
        Jalankan reducer terhadap state saat ini dan commit hasilnya.

        Reducer boleh return AppState atau (AppState, extra); extra
        dikembalikan ke caller.
        """
        with self._lock:
            result = reducer(self._state, *args, **kwargs)
            if isinstance(result, tuple):
                self._state, extra = result
                return extra
            self._state = result
            return result
