"""
modules/budget/row_mapper.py
============================
Mapping satu baris mentah spreadsheet -> BudgetRecord kanonik.

Dua bentuk input:
    - baris kolumnar (list sel) + ColumnMapping dari HeaderResolver
    - baris object (dict header -> nilai) untuk strategi fallback
"""

import math
import numbers
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from modules.budget.header_resolver import ColumnMapping
from modules.budget.models import (
    BudgetRecord,
    DEFAULT_NAMA_USER,
    DEFAULT_TIM,
    STATUS2_CATEGORIES,
    new_record_id,
)
from modules.budget.utils import ValidationError
from modules.budget.value_parser import (
    canonicalize_status,
    canonicalize_status2,
    cell_text,
    format_date_cell,
    is_blank,
    parse_amount,
)

logger = logging.getLogger(__name__)

# Field teks biasa (default string kosong)
TEXT_FIELDS = ('no_ro', 'no_bast', 'email_soft_copy', 'sa_no', 'reviewer_vendor', 'keterangan')

# Field yang dinormalisasi sebagai tanggal tampilan
DATE_FIELDS = ('tgl_bast', 'tgl_kirim_jkt')


# ============================================================================
# CELL ADAPTER
# ============================================================================

def coerce_cell(value: Any) -> Any:
    """
    Ubah nilai sel dari library (openpyxl / pandas / numpy) ke salah satu:
    None, str, int, float, datetime / date.
    """
    if value is None:
        return None

    # pandas.NaT / Timestamp -> datetime
    if isinstance(value, datetime):
        try:
            if value != value:  # NaT
                return None
        except TypeError:
            return None
        to_pydatetime = getattr(value, 'to_pydatetime', None)
        return to_pydatetime() if to_pydatetime else value

    if isinstance(value, date):
        return value

    if isinstance(value, bool):
        return str(value)

    if isinstance(value, numbers.Integral):
        return int(value)

    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        return int(value) if value == value.to_integral_value() else float(value)

    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isnan(number):
            return None
        return number

    if isinstance(value, str):
        return value

    # Tipe lain (NaTType, error cell, dll)
    text = str(value)
    if text in ('NaT', 'nan', 'None'):
        return None
    return text


def is_empty_row(cells: Sequence[Any]) -> bool:
    """Baris kosong: semua sel (di-string-kan, di-trim) adalah ''."""
    return all(cell_text(coerce_cell(c)) == '' for c in cells)


# ============================================================================
# ROW MAPPER
# ============================================================================

class RowMapper:

    def __init__(self, id_factory: Callable[[], str] = None):
        self.id_factory = id_factory or (lambda: new_record_id('excel'))

    # ------------------------------------------------------------------
    # Candidate lookup
    # ------------------------------------------------------------------

    @staticmethod
    def first_non_empty(values: Sequence[Any]) -> Optional[Any]:
        """
        Ambil nilai pertama yang tidak kosong dari daftar kandidat (urut).

        Angka 0 dianggap TIDAK kosong; hanya None / string blank yang
        dilewati.
        """
        for value in values:
            if not is_blank(value):
                return value
        return None

    @staticmethod
    def largest_amount(values: Sequence[Any]) -> int:
        """Dari beberapa kolom nominal, pilih hasil parse dengan magnitude terbesar."""
        best = 0
        for value in values:
            amount = parse_amount(value)
            if abs(amount) > abs(best):
                best = amount
        return best

    # ------------------------------------------------------------------
    # Build record
    # ------------------------------------------------------------------

    def build_record(self, lookup: Callable[[str], List[Any]]) -> BudgetRecord:
        """
        Bangun BudgetRecord dari fungsi lookup(field) -> list nilai kandidat.
        """
        def pick(field_name: str) -> Optional[Any]:
            return self.first_non_empty(lookup(field_name))

        def text(field_name: str, default: str = '') -> str:
            value = pick(field_name)
            return cell_text(value) if value is not None else default

        def as_date(field_name: str, default: str = '') -> str:
            value = pick(field_name)
            return format_date_cell(value) if value is not None else default

        values = {
            'id': self.id_factory(),
            'status': canonicalize_status(pick('status')),
            'nama_user': text('nama_user', DEFAULT_NAMA_USER),
            'tim': text('tim', DEFAULT_TIM),
            'periode': format_date_cell(pick('periode')),
            'nilai_tagihan': self.largest_amount(lookup('nilai_tagihan')),
            'status2': canonicalize_status2(pick('status2')),
        }

        for field_name in TEXT_FIELDS:
            values[field_name] = text(field_name)

        for field_name in DATE_FIELDS:
            values[field_name] = as_date(field_name)

        return BudgetRecord(**values)

    def map_columnar(self, cells: Sequence[Any], mapping: ColumnMapping) -> BudgetRecord:
        """Map satu baris list sel menggunakan ColumnMapping per worksheet."""
        cells = [coerce_cell(c) for c in cells]

        def lookup(field_name: str) -> List[Any]:
            return [cells[col] for col in mapping.get(field_name) if col < len(cells)]

        return self.build_record(lookup)

    def map_object(self, row: Mapping[Any, Any], key_mapping: Dict[str, List[Any]]) -> BudgetRecord:
        """Map satu baris dict (strategi object-keyed)."""
        def lookup(field_name: str) -> List[Any]:
            return [coerce_cell(row.get(key)) for key in key_mapping.get(field_name, [])]

        return self.build_record(lookup)


# ============================================================================
# MANUAL INPUT
# ============================================================================

def build_manual_record(form: Mapping[str, Any]) -> BudgetRecord:
    """
    Record dari form input manual (namaUser, tim, periode, nilaiTagihan,
    status, status2).

    Raises:
        ValidationError: jika user, tim, atau nilai tagihan kosong
    """
    def get(*keys: str) -> str:
        for key in keys:
            value = form.get(key)
            if not is_blank(value):
                return cell_text(value)
        return ''

    nama_user = get('namaUser', 'nama_user')
    tim = get('tim')
    nilai_raw = get('nilaiTagihan', 'nilai_tagihan')

    missing = [
        label for label, value in (
            ('Nama User', nama_user),
            ('Tim', tim),
            ('Nilai Tagihan', nilai_raw),
        ) if not value
    ]
    if missing:
        raise ValidationError(f"Mohon lengkapi data yang wajib diisi: {', '.join(missing)}")

    record = BudgetRecord(
        id=new_record_id('manual'),
        status=canonicalize_status(get('status')),
        nama_user=nama_user,
        tim=tim,
        periode=get('periode') or 'Jan-25',
        nilai_tagihan=parse_amount(nilai_raw),
        status2=canonicalize_status2(get('status2') or STATUS2_CATEGORIES[0]),
    )

    logger.info(f"📝 Manual record: {record.tim} / {record.nama_user} = {record.nilai_tagihan}")
    return record


__all__ = [
    'RowMapper',
    'coerce_cell',
    'is_empty_row',
    'build_manual_record',
]
