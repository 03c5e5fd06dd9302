"""
modules/budget/period_index.py
==============================
Daftar periode (YYYY-MM) yang ada di dataset + filter record
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from modules.budget.models import BudgetRecord
from modules.budget.value_parser import format_period_label, period_key

ALL_PERIODE_VALUE = 'All'
ALL_PERIODE_LABEL = 'Semua Periode'

# Field yang dicari oleh kotak pencarian dashboard
SEARCH_FIELDS = ('nama_user', 'tim', 'no_ro', 'no_bast', 'keterangan', 'sa_no', 'status2')


@dataclass(frozen=True)
class PeriodOption:
    value: str
    label: str

    def to_dict(self) -> dict:
        return {'value': self.value, 'label': self.label}


def period_keys(records: Iterable[BudgetRecord]) -> List[str]:
    """Kunci YYYY-MM unik, terurut (= kronologis). Periode tak terbaca diabaikan."""
    keys = {period_key(r.periode) for r in records}
    keys.discard(None)
    return sorted(keys)


def build_period_index(records: Iterable[BudgetRecord]) -> List[PeriodOption]:
    """Opsi dropdown periode, selalu diawali 'Semua Periode'."""
    options = [PeriodOption(ALL_PERIODE_VALUE, ALL_PERIODE_LABEL)]
    options.extend(PeriodOption(k, format_period_label(k)) for k in period_keys(records))
    return options


def filter_records(
    records: Sequence[BudgetRecord],
    periode: str = ALL_PERIODE_VALUE,
    query: str = ''
) -> List[BudgetRecord]:
    """
    Filter dataset berdasarkan periode (kunci YYYY-MM) dan teks pencarian.
    """
    result = list(records)

    if periode and periode != ALL_PERIODE_VALUE:
        result = [r for r in result if period_key(r.periode) == periode]

    q = (query or '').strip().lower()
    if q:
        result = [
            r for r in result
            if any(q in str(getattr(r, name)).lower() for name in SEARCH_FIELDS)
        ]

    return result
