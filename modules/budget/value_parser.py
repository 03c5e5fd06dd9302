"""
modules/budget/value_parser.py
==============================
Parser nilai sel Excel: nominal rupiah, tanggal, kunci periode (YYYY-MM)
dan kanonikalisasi status.

Semua fungsi di sini total: input aneh tidak pernah raise, hanya
turun ke nilai default.
"""

import math
import numbers
import re
import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from modules.budget.models import (
    STATUS_VALUES,
    DEFAULT_STATUS,
    STATUS2_CATEGORIES,
    STATUS2_UNCLASSIFIED,
    EMPTY_CELL,
)

logger = logging.getLogger(__name__)


# Serial date Excel: hari ke-25569 = 1970-01-01
EXCEL_EPOCH_OFFSET = 25569
SERIAL_DATE_THRESHOLD = 30000
UNIX_EPOCH = datetime(1970, 1, 1)

# Format tanggal lengkap yang dicoba untuk teks bebas (urutan penting:
# DD/MM dicoba sebelum MM/DD)
DATE_FORMATS = [
    '%Y-%m-%d',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%d %H:%M:%S',
    '%Y/%m/%d',
    '%d/%m/%Y',
    '%d-%m-%Y',
    '%d.%m.%Y',
    '%m/%d/%Y',
    '%d %b %Y',
    '%d %B %Y',
    '%b %d, %Y',
    '%B %d, %Y',
]

# Token bulan Indonesia + Inggris (singkatan dan nama lengkap)
MONTH_TOKENS = {
    'jan': 1, 'januari': 1, 'january': 1,
    'feb': 2, 'februari': 2, 'february': 2,
    'mar': 3, 'maret': 3, 'march': 3,
    'apr': 4, 'april': 4,
    'mei': 5, 'may': 5,
    'jun': 6, 'juni': 6, 'june': 6,
    'jul': 7, 'juli': 7, 'july': 7,
    'agu': 8, 'ags': 8, 'agustus': 8, 'aug': 8, 'august': 8,
    'sep': 9, 'sept': 9, 'september': 9,
    'okt': 10, 'oktober': 10, 'oct': 10, 'october': 10,
    'nov': 11, 'november': 11,
    'des': 12, 'desember': 12, 'dec': 12, 'december': 12,
}

MONTH_NAMES_ID = {
    1: 'Januari', 2: 'Februari', 3: 'Maret', 4: 'April',
    5: 'Mei', 6: 'Juni', 7: 'Juli', 8: 'Agustus',
    9: 'September', 10: 'Oktober', 11: 'November', 12: 'Desember'
}

STATUS2_PLACEHOLDERS = {'', '-', '—', '–', 'n/a', 'na', 'null'}

_SEP = r'\s*[-/.\s]\s*'
_YEAR = r'([0-9]{2}|[0-9]{4})'

# Urutan pattern numerik TIDAK boleh diubah: day-first dulu
_NUMERIC_PERIOD_PATTERNS = [
    ('dmy', re.compile(r'([0-9]{1,2})' + _SEP + r'([0-9]{1,2})' + _SEP + _YEAR)),
    ('ymd', re.compile(r'([0-9]{4})' + _SEP + r'([0-9]{1,2})' + _SEP + r'([0-9]{1,2})')),
    ('ym', re.compile(r'([0-9]{4})' + _SEP + r'([0-9]{1,2})')),
    ('my', re.compile(r'([0-9]{1,2})' + _SEP + r'([0-9]{4})')),
    ('my2', re.compile(r'([0-9]{1,2})' + _SEP + r'([0-9]{2})')),
]

_MONTH_YEAR_RE = re.compile(r'([a-z]+)' + _SEP + _YEAR)
_YEAR_MONTH_RE = re.compile(r'([0-9]{4})' + _SEP + r'([a-z]+)')
_PERIOD_KEY_RE = re.compile(r'([0-9]{4})-([0-9]{2})')

_NUMERIC_STRING_RE = re.compile(r'[0-9]+(\.[0-9]+)?')
_CURRENCY_RE = re.compile(r'rp', re.IGNORECASE)
_WHITESPACE_RE = re.compile(r'\s+')


# ============================================================================
# HELPERS
# ============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _is_finite(value: Any) -> bool:
    try:
        return math.isfinite(value)
    except (TypeError, ValueError, OverflowError):
        return False


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(' ', text).strip()


def cell_text(value: Any) -> str:
    """
    Representasi teks dari sebuah sel.

    None / NaN -> '', float bulat -> tanpa '.0', lainnya str() + strip.
    """
    if value is None:
        return ''
    if isinstance(value, float):
        if not math.isfinite(value):
            return ''
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def is_blank(value: Any) -> bool:
    return cell_text(value) == ''


# ============================================================================
# NOMINAL (RUPIAH)
# ============================================================================

def parse_amount(value: Any) -> int:
    """
    Parse nominal rupiah jadi integer (tanpa sen).

    Menangani:
    - angka native (float dipotong ke arah nol, NaN/inf -> 0)
    - "Rp 65.934.189.945", "65,934,189,945", "65934189945"
    - notasi ilmiah "1.2E11"
    - tanda minus di depan digit
    """
    if value is None:
        return 0

    if _is_number(value):
        if isinstance(value, numbers.Integral):
            return int(value)
        if not _is_finite(value):
            return 0
        return int(value)

    raw = str(value).strip()
    if not raw:
        return 0

    # 1) Notasi ilmiah
    if 'e' in raw.lower():
        sci = _CURRENCY_RE.sub('', raw)
        sci = _WHITESPACE_RE.sub('', sci)
        sci = re.sub(r'[^0-9eE+\-.]', '', sci)
        try:
            number = float(sci)
        except ValueError:
            number = None
        if number is not None and math.isfinite(number):
            return int(number)

    # 2) Ambil semua digit, tanda minus hanya jika muncul sebelum digit pertama
    first_digit = re.search(r'[0-9]', raw)
    if not first_digit:
        return 0

    is_negative = '-' in raw[:first_digit.start()]
    magnitude = int(re.sub(r'[^0-9]', '', raw))

    return -magnitude if is_negative else magnitude


# ============================================================================
# TANGGAL (TAMPILAN DD-MM-YYYY)
# ============================================================================

def _format_ddmmyyyy(value: date) -> str:
    return f"{value.day:02d}-{value.month:02d}-{value.year:04d}"


def serial_to_datetime(serial: float) -> Optional[datetime]:
    """Excel serial day count -> datetime (None jika di luar jangkauan)."""
    try:
        millis = round((float(serial) - EXCEL_EPOCH_OFFSET) * 86400 * 1000)
        return UNIX_EPOCH + timedelta(milliseconds=millis)
    except (OverflowError, ValueError):
        return None


def _parse_date_text(text: str) -> Optional[datetime]:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def format_date_cell(value: Any) -> str:
    """
    Normalisasi sel tanggal / periode ke string tampilan 'DD-MM-YYYY'.

    Kosong -> '-'. Jika tidak bisa diinterpretasi sebagai tanggal, teks
    asli (sudah di-trim) dikembalikan apa adanya.
    """
    if is_blank(value):
        return EMPTY_CELL

    if isinstance(value, (datetime, date)):
        return _format_ddmmyyyy(value)

    if _is_number(value):
        if _is_finite(value) and value > SERIAL_DATE_THRESHOLD:
            converted = serial_to_datetime(value)
            if converted is not None:
                return _format_ddmmyyyy(converted)
            # Di luar rentang tanggal: tampilkan angka aslinya
            return str(value)
        return cell_text(value)

    text = str(value).strip()

    if _NUMERIC_STRING_RE.fullmatch(text):
        if float(text) > SERIAL_DATE_THRESHOLD:
            converted = serial_to_datetime(float(text))
            if converted is not None:
                return _format_ddmmyyyy(converted)
        return text

    if text == EMPTY_CELL:
        return text

    parsed = _parse_date_text(text)
    if parsed is not None:
        return _format_ddmmyyyy(parsed)

    return text


# ============================================================================
# KUNCI PERIODE (YYYY-MM)
# ============================================================================

def _to_year_month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def _expand_year(raw: str) -> int:
    year = int(raw)
    if len(raw) == 2:
        year += 2000
    return year


def period_key(raw: Any) -> Optional[str]:
    """
    Normalisasi label periode bebas ke kunci 'YYYY-MM'.

    Contoh yang dikenali: '15-01-2025', '2025-01-15', '2025-01', '01-2025',
    '01-25', 'Jan 2025', 'Jan-25', '2025 Januari'. Return None jika tidak
    ada pattern yang cocok atau bulan di luar 1-12.
    """
    s = cell_text(raw)
    if not s or s == EMPTY_CELL:
        return None

    for name, pattern in _NUMERIC_PERIOD_PATTERNS:
        m = pattern.fullmatch(s)
        if not m:
            continue

        if name == 'dmy':
            month, year = int(m.group(2)), _expand_year(m.group(3))
        elif name in ('ymd', 'ym'):
            year, month = int(m.group(1)), int(m.group(2))
        elif name == 'my':
            month, year = int(m.group(1)), int(m.group(2))
        else:
            month, year = int(m.group(1)), 2000 + int(m.group(2))

        if 1 <= month <= 12:
            return _to_year_month_key(year, month)

    cleaned = collapse_whitespace(s.lower().replace('_', ' '))

    m = _MONTH_YEAR_RE.fullmatch(cleaned)
    if m:
        month = MONTH_TOKENS.get(m.group(1))
        if not month:
            return None
        return _to_year_month_key(_expand_year(m.group(2)), month)

    m = _YEAR_MONTH_RE.fullmatch(cleaned)
    if m:
        month = MONTH_TOKENS.get(m.group(2))
        if not month:
            return None
        return _to_year_month_key(int(m.group(1)), month)

    return None


def split_period_key(key: str) -> Optional[tuple]:
    m = _PERIOD_KEY_RE.fullmatch(key or '')
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def format_period_label(key: str) -> str:
    """'2025-01' -> 'Januari 2025'. Input yang bukan kunci dikembalikan utuh."""
    parts = split_period_key(key)
    if not parts:
        return key

    year, month = parts
    if not year or month not in MONTH_NAMES_ID:
        return key

    return f"{MONTH_NAMES_ID[month]} {year}"


# ============================================================================
# STATUS
# ============================================================================

def canonicalize_status(value: Any) -> str:
    """Status utama: Completed / On Progress / Canceled (default On Progress)."""
    key = collapse_whitespace(cell_text(value)).lower()
    if key == 'cancelled':
        return 'Canceled'
    for status in STATUS_VALUES:
        if status.lower() == key:
            return status
    return DEFAULT_STATUS


def canonicalize_status2(value: Any) -> str:
    """
    Kanonikalisasi status billing (status2).

    1. placeholder kosong ('-', 'n/a', 'null', ...) -> bucket 'manual'
    2. exact match (case-insensitive) ke kategori tetap
    3. prefix match (case-insensitive) ke kategori tetap
    4. selain itu teks asli (whitespace dirapikan)

    Idempotent: canonicalize_status2(canonicalize_status2(x)) == canonicalize_status2(x)
    """
    text = collapse_whitespace(cell_text(value))
    key = text.lower()

    if key in STATUS2_PLACEHOLDERS:
        return STATUS2_UNCLASSIFIED
    if key == STATUS2_UNCLASSIFIED:
        return STATUS2_UNCLASSIFIED

    for category in STATUS2_CATEGORIES:
        if category.lower() == key:
            return category

    for category in STATUS2_CATEGORIES:
        if key.startswith(category.lower()):
            return category

    return text
