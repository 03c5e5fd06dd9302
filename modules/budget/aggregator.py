"""
modules/budget/aggregator.py
============================
Agregasi dataset: pivot (tim, user, status2), ringkasan per status2,
serapan anggaran dan estimasi run-rate bulanan.

Semua fungsi murni: dihitung ulang penuh dari list record setiap kali
dataset atau filter berubah.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from modules.budget.models import (
    BudgetRecord,
    PivotRow,
    PivotTable,
    STATUS2_CATEGORIES,
    STATUS2_UNCLASSIFIED,
)
from modules.budget.value_parser import canonicalize_status2, period_key, split_period_key

logger = logging.getLogger(__name__)

MODE_RANGE = 'range'
MODE_UNPARSEABLE = 'unparseable'

MAX_DETAIL_ROWS = 1000


# ============================================================================
# PIVOT
# ============================================================================

def pivot_column(status2: str) -> str:
    """Kolom pivot untuk sebuah status2: kategori tetap, selain itu 'manual'."""
    canonical = canonicalize_status2(status2)
    if canonical in STATUS2_CATEGORIES:
        return canonical
    return STATUS2_UNCLASSIFIED


def build_pivot(records: Iterable[BudgetRecord]) -> PivotTable:
    """
    Pivot: baris = (tim, nama user), kolom = status2, nilai = sum nilai tagihan.

    Grand total = sum semua record = sum total baris = sum total kolom.
    """
    groups: Dict[tuple, PivotRow] = {}

    for record in records:
        key = (record.tim, record.nama_user)
        row = groups.get(key)
        if row is None:
            row = groups[key] = PivotRow(tim=record.tim, nama_user=record.nama_user)

        column = pivot_column(record.status2)
        row.data[column] = row.data.get(column, 0) + record.nilai_tagihan
        row.total += record.nilai_tagihan

    rows = sorted(groups.values(), key=lambda r: (r.tim, r.nama_user))

    pivot = PivotTable(rows=rows)
    pivot.column_totals = {col: 0 for col in pivot.columns}
    for row in rows:
        for col, amount in row.data.items():
            pivot.column_totals[col] += amount
        pivot.grand_total += row.total

    return pivot


# ============================================================================
# STATUS SUMMARY
# ============================================================================

def status_summaries(records: Iterable[BudgetRecord]) -> Dict[str, int]:
    """Total nilai tagihan per kategori status2 tetap (0 jika tidak ada)."""
    summaries = {category: 0 for category in STATUS2_CATEGORIES}
    for record in records:
        canonical = canonicalize_status2(record.status2)
        if canonical in summaries:
            summaries[canonical] += record.nilai_tagihan
    return summaries


def status2_distribution(records: Iterable[BudgetRecord]) -> Dict[str, int]:
    """Total per status2 kanonik (termasuk yang di luar kategori tetap), desc."""
    totals: Dict[str, int] = {}
    for record in records:
        canonical = canonicalize_status2(record.status2)
        totals[canonical] = totals.get(canonical, 0) + record.nilai_tagihan
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


def team_totals(records: Iterable[BudgetRecord]) -> Dict[str, int]:
    """Total per tim, urut dari pengeluaran terbesar."""
    totals: Dict[str, int] = {}
    for record in records:
        totals[record.tim] = totals.get(record.tim, 0) + record.nilai_tagihan
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


@dataclass
class Status2Detail:
    category: str
    rows: List[BudgetRecord] = field(default_factory=list)
    total: int = 0
    row_count: int = 0
    hidden_count: int = 0

    def to_dict(self) -> dict:
        return {
            'category': self.category,
            'rows': [r.to_dict() for r in self.rows],
            'total': self.total,
            'row_count': self.row_count,
            'hidden_count': self.hidden_count,
        }


def status2_detail(
    records: Iterable[BudgetRecord],
    category: str,
    max_rows: int = MAX_DETAIL_ROWS
) -> Status2Detail:
    """Drill-down satu kategori status2 (baris dibatasi max_rows)."""
    target = canonicalize_status2(category)
    matched = [r for r in records if canonicalize_status2(r.status2) == target]

    return Status2Detail(
        category=target,
        rows=matched[:max_rows],
        total=sum(r.nilai_tagihan for r in matched),
        row_count=len(matched),
        hidden_count=max(len(matched) - max_rows, 0),
    )


# ============================================================================
# RUN-RATE & ESTIMASI
# ============================================================================

@dataclass
class RunRate:
    months_count: int = 0
    months_with_data: int = 0
    average_per_month: float = 0.0
    mode: str = MODE_UNPARSEABLE

    def to_dict(self) -> dict:
        return {
            'months_count': self.months_count,
            'months_with_data': self.months_with_data,
            'average_per_month': self.average_per_month,
            'mode': self.mode,
        }


@dataclass
class BudgetEstimate:
    contract_value: int
    absorbed: int
    remaining: int
    over_budget: int
    absorbed_pct: float
    run_rate: RunRate
    estimated_months_remaining: Optional[float]

    def to_dict(self) -> dict:
        return {
            'contract_value': self.contract_value,
            'absorbed': self.absorbed,
            'remaining': self.remaining,
            'over_budget': self.over_budget,
            'absorbed_pct': self.absorbed_pct,
            'run_rate': self.run_rate.to_dict(),
            'estimated_months_remaining': self.estimated_months_remaining,
        }


def monthly_totals(records: Iterable[BudgetRecord]) -> Dict[str, int]:
    """Total per kunci YYYY-MM (urut kronologis); periode tak terbaca diabaikan."""
    totals: Dict[str, int] = {}
    for record in records:
        key = period_key(record.periode)
        if not key:
            continue
        totals[key] = totals.get(key, 0) + record.nilai_tagihan
    return dict(sorted(totals.items()))


def months_between(first_key: str, last_key: str) -> int:
    """Jumlah bulan inklusif antara dua kunci YYYY-MM."""
    min_y, min_m = split_period_key(first_key)
    max_y, max_m = split_period_key(last_key)
    return (max_y - min_y) * 12 + (max_m - min_m) + 1


def compute_run_rate(records: Iterable[BudgetRecord]) -> RunRate:
    """
    Rata-rata serapan per bulan kalender, dari bulan pertama s.d. terakhir
    (bulan tanpa data dihitung 0).
    """
    totals = monthly_totals(records)
    if not totals:
        return RunRate(mode=MODE_UNPARSEABLE)

    keys = list(totals.keys())
    months_count = months_between(keys[0], keys[-1])
    total = sum(totals.values())
    average = total / months_count if months_count > 0 else 0.0

    return RunRate(
        months_count=months_count,
        months_with_data=len(keys),
        average_per_month=average,
        mode=MODE_RANGE,
    )


def estimate_budget(contract_value: int, records: Sequence[BudgetRecord]) -> BudgetEstimate:
    """Serapan, sisa, over-budget dan estimasi sisa bulan terhadap nilai kontrak."""
    absorbed = sum(r.nilai_tagihan for r in records)
    remaining = max(contract_value - absorbed, 0)
    over_budget = max(absorbed - contract_value, 0)

    if contract_value <= 0:
        absorbed_pct = 0.0
    else:
        absorbed_pct = min(absorbed / contract_value * 100, 100.0)

    run_rate = compute_run_rate(records)

    if over_budget > 0:
        estimated = 0.0
    elif run_rate.average_per_month <= 0:
        estimated = None
    else:
        estimated = remaining / run_rate.average_per_month

    return BudgetEstimate(
        contract_value=contract_value,
        absorbed=absorbed,
        remaining=remaining,
        over_budget=over_budget,
        absorbed_pct=absorbed_pct,
        run_rate=run_rate,
        estimated_months_remaining=estimated,
    )


@dataclass
class BudgetOverview:
    # overall: dari SELURUH data, tidak berubah oleh filter
    overall: BudgetEstimate
    filtered: BudgetEstimate

    def to_dict(self) -> dict:
        return {
            'overall': self.overall.to_dict(),
            'filtered': self.filtered.to_dict(),
        }


def budget_overview(
    contract_value: int,
    all_records: Sequence[BudgetRecord],
    filtered_records: Sequence[BudgetRecord]
) -> BudgetOverview:
    return BudgetOverview(
        overall=estimate_budget(contract_value, all_records),
        filtered=estimate_budget(contract_value, filtered_records),
    )
