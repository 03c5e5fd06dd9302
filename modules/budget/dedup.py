"""
modules/budget/dedup.py
=======================
Fingerprint record dan merge batch import tanpa duplikat.

Re-import file yang sama tidak mengubah dataset: record dengan isi yang
sama (berdasarkan fingerprint) dilewati, tidak menimpa record lama.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

from modules.budget.models import BudgetRecord

logger = logging.getLogger(__name__)

FINGERPRINT_SEPARATOR = '|'

FINGERPRINT_FIELDS = (
    'nama_user',
    'tim',
    'periode',
    'nilai_tagihan',
    'no_ro',
    'tgl_bast',
    'no_bast',
    'status2',
    'sa_no',
)


def _part(value) -> str:
    return str(value or '').strip().lower()


def fingerprint(record: BudgetRecord) -> str:
    """Key deterministik dari isi record (bukan dari id)."""
    parts = []
    for name in FINGERPRINT_FIELDS:
        value = getattr(record, name)
        if name == 'nilai_tagihan':
            parts.append(str(int(value or 0)))
        else:
            parts.append(_part(value))
    return FINGERPRINT_SEPARATOR.join(parts)


@dataclass
class MergeResult:
    records: Tuple[BudgetRecord, ...] = field(default_factory=tuple)
    added: List[BudgetRecord] = field(default_factory=list)
    skipped: int = 0

    @property
    def total(self) -> int:
        return len(self.added) + self.skipped

    def message(self) -> str:
        return (
            f"Import selesai. Total baris file: {self.total}. "
            f"Ditambahkan: {len(self.added)}. Duplikat dilewati: {self.skipped}."
        )


def merge_batch(
    existing: Sequence[BudgetRecord],
    batch: Iterable[BudgetRecord]
) -> MergeResult:
    """
    Gabungkan batch baru ke dataset lama.

    - record diterima jika fingerprint-nya belum ada di dataset lama MAUPUN
      di record yang sudah diterima dari batch yang sama
    - record lama tidak pernah diubah / diganti, urutan tetap
    - record baru ditambahkan di belakang sesuai urutan batch
    """
    seen = {fingerprint(r) for r in existing}
    added: List[BudgetRecord] = []
    skipped = 0

    for record in batch:
        fp = fingerprint(record)
        if fp in seen:
            skipped += 1
            continue
        seen.add(fp)
        added.append(record)

    logger.info(f"Merge: {len(added)} added, {skipped} duplicates skipped")

    return MergeResult(
        records=tuple(existing) + tuple(added),
        added=added,
        skipped=skipped
    )
