"""
modules/budget/models.py
========================
Data model untuk record budget / tagihan dan hasil pivot
"""

import uuid
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Tuple, Any


# ============================================================================
# CONSTANTS
# ============================================================================

STATUS_VALUES = ('Completed', 'On Progress', 'Canceled')
DEFAULT_STATUS = 'On Progress'

# Urutan sesuai kolom pivot table yang dipakai user
STATUS2_CATEGORIES = (
    'Invoice Internal',
    'po belum muncul',
    'REQ Reject by my ssc(PHR)',
    'REQ SA',
    'Review 1',
    'VOW',
)

# Bucket untuk status2 kosong / tidak dikenal
STATUS2_UNCLASSIFIED = 'manual'

DEFAULT_NAMA_USER = 'Unknown'
DEFAULT_TIM = 'No Team'
EMPTY_CELL = '-'

# Mapping atribut Python -> key asli di dashboard / file export
FIELD_LABELS = {
    'id': 'id',
    'status': 'status',
    'nama_user': 'namaUser',
    'tim': 'tim',
    'periode': 'periode',
    'nilai_tagihan': 'nilaiTagihan',
    'no_ro': 'noRO',
    'tgl_bast': 'tglBAST',
    'no_bast': 'noBAST',
    'status2': 'status2',
    'email_soft_copy': 'emailSoftCopy',
    'sa_no': 'saNo',
    'tgl_kirim_jkt': 'tglKirimJKT',
    'reviewer_vendor': 'reviewerVendor',
    'keterangan': 'keterangan',
}


def new_record_id(prefix: str = 'excel') -> str:
    """ID unik untuk record baru, tidak pernah dipakai ulang."""
    return f"{prefix}-{uuid.uuid4().hex}"


# ============================================================================
# MODEL: BUDGET RECORD
# ============================================================================

@dataclass(frozen=True)
class BudgetRecord:
    """Satu baris tagihan / budget yang sudah kanonik."""

    id: str
    status: str = DEFAULT_STATUS
    nama_user: str = DEFAULT_NAMA_USER
    tim: str = DEFAULT_TIM
    periode: str = EMPTY_CELL
    nilai_tagihan: int = 0
    no_ro: str = ''
    tgl_bast: str = ''
    no_bast: str = ''
    status2: str = STATUS2_UNCLASSIFIED
    email_soft_copy: str = ''
    sa_no: str = ''
    tgl_kirim_jkt: str = ''
    reviewer_vendor: str = ''
    keterangan: str = ''

    def to_dict(self) -> Dict[str, Any]:
        """Convert ke dict dengan key camelCase (untuk JSON response)."""
        return {FIELD_LABELS[k]: v for k, v in asdict(self).items()}


# ============================================================================
# MODEL: PIVOT
# ============================================================================

@dataclass
class PivotRow:
    """Agregat satu pasangan (tim, nama user)."""

    tim: str
    nama_user: str
    data: Dict[str, int] = field(default_factory=dict)
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tim': self.tim,
            'namaUser': self.nama_user,
            'data': dict(self.data),
            'total': self.total,
        }


@dataclass
class PivotTable:
    rows: List[PivotRow] = field(default_factory=list)
    columns: Tuple[str, ...] = STATUS2_CATEGORIES + (STATUS2_UNCLASSIFIED,)
    column_totals: Dict[str, int] = field(default_factory=dict)
    grand_total: int = 0

    def grouped_by_tim(self) -> Dict[str, List[PivotRow]]:
        """Rows dikelompokkan per tim (urutan tetap mengikuti rows)."""
        groups: Dict[str, List[PivotRow]] = {}
        for row in self.rows:
            groups.setdefault(row.tim, []).append(row)
        return groups

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rows': [row.to_dict() for row in self.rows],
            'columns': list(self.columns),
            'column_totals': dict(self.column_totals),
            'grand_total': self.grand_total,
        }
