"""
modules/budget/header_resolver.py
=================================
Module untuk mendeteksi kolom berdasarkan teks header yang tidak seragam
("Nama User", "nama  user", "Nilai Tagihan (Rp)", "Status 2", ...)

Urutan prioritas per field:
    1. exact match header yang sudah dinormalisasi (lowercase, spasi dirapikan)
    2. exact match bentuk "compact" (tanpa spasi) atau "alnum" (hanya a-z0-9)
    3. prefix match bentuk alnum terhadap prefix kanonik field
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSpec:
    """Definisi satu field logis dan alias header-nya."""

    name: str
    aliases: tuple
    prefixes: tuple = ()
    multi: bool = False


# Urutan alias = urutan prioritas
FIELD_SPECS = (
    FieldSpec('status', ('status',)),
    FieldSpec('nama_user', ('nama user', 'user')),
    FieldSpec('tim', ('tim', 'team')),
    FieldSpec('periode', ('periode bulan', 'periode')),
    FieldSpec('tgl_bast', (
        'tgl bast-submit bast by ivend',
        'tgl bast',
        'tanggal bast',
        'tgl bast submit',
    )),
    FieldSpec(
        'nilai_tagihan',
        ('nilai tagihan', 'nilai tagihan2'),
        prefixes=('nilaitagihan',),
        multi=True,
    ),
    FieldSpec(
        'status2',
        ('status2', 'status 2', 'status billing', 'status billing2'),
        prefixes=('status2', 'statusbilling'),
    ),
    FieldSpec('no_ro', ('no ro',)),
    FieldSpec('no_bast', ('no bast / id vendor', 'no bast')),
    FieldSpec('email_soft_copy', ('kirim email soft copy',)),
    FieldSpec('sa_no', ('sa no',)),
    FieldSpec('tgl_kirim_jkt', ('tgl kirim ke jkt',)),
    FieldSpec('reviewer_vendor', ('reviewer i vendor',)),
    FieldSpec('keterangan', ('keterangan2', 'keterangan')),
)


def normalize_header(header: Any) -> str:
    """Lowercase, rapikan whitespace internal, trim."""
    if header is None:
        return ''
    return re.sub(r'\s+', ' ', str(header).lower()).strip()


def compact_key(text: str) -> str:
    return re.sub(r'\s+', '', text)


def alnum_key(text: str) -> str:
    return re.sub(r'[^a-z0-9]', '', text)


@dataclass
class ColumnMapping:
    """
    Hasil resolusi header: untuk setiap field, daftar index kolom kandidat
    (sudah urut prioritas). List kosong berarti field tidak ditemukan.
    """

    headers: List[str] = field(default_factory=list)
    candidates: Dict[str, List[int]] = field(default_factory=dict)

    def best(self, field_name: str) -> Optional[int]:
        cols = self.candidates.get(field_name) or []
        return cols[0] if cols else None

    def get(self, field_name: str) -> List[int]:
        return list(self.candidates.get(field_name) or [])

    @property
    def found_fields(self) -> List[str]:
        return [name for name, cols in self.candidates.items() if cols]

    def is_empty(self) -> bool:
        return not self.found_fields


class HeaderResolver:

    def __init__(self, specs: Sequence[FieldSpec] = FIELD_SPECS):
        self.specs = tuple(specs)

    def resolve(self, headers: Sequence[Any]) -> ColumnMapping:
        """
        Resolve header satu worksheet ke ColumnMapping.

        Tidak pernah raise; field yang tidak cocok mendapat list kosong.
        """
        normalized = [normalize_header(h) for h in headers]
        compacted = [compact_key(h) for h in normalized]
        alnums = [alnum_key(h) for h in normalized]

        mapping = ColumnMapping(headers=normalized)

        for spec in self.specs:
            cols = self._match_field(spec, normalized, compacted, alnums)
            mapping.candidates[spec.name] = cols

            if cols:
                logger.debug(
                    f"  {spec.name:16s} → cols {cols} "
                    f"('{normalized[cols[0]]}')"
                )

        logger.info(
            f"Header resolved: {len(mapping.found_fields)}/{len(self.specs)} fields found"
        )
        return mapping

    def _match_field(
        self,
        spec: FieldSpec,
        normalized: List[str],
        compacted: List[str],
        alnums: List[str]
    ) -> List[int]:
        matches: List[int] = []

        def add(col: int) -> None:
            if col not in matches:
                matches.append(col)

        # 1. Exact match
        for alias in spec.aliases:
            for col, header in enumerate(normalized):
                if header and header == alias:
                    add(col)

        # 2. Compact / alnum match
        for alias in spec.aliases:
            alias_compact = compact_key(alias)
            alias_alnum = alnum_key(alias)
            for col in range(len(normalized)):
                if not normalized[col]:
                    continue
                if compacted[col] == alias_compact or alnums[col] == alias_alnum:
                    add(col)

        # 3. Prefix match
        for prefix in spec.prefixes:
            for col, key in enumerate(alnums):
                if key and key.startswith(prefix):
                    add(col)

        return matches

    def resolve_keys(self, keys: Sequence[Any]) -> Dict[str, List[Any]]:
        """
        Variasi untuk row berbentuk dict: return field -> daftar key asli
        (urut prioritas), bukan index kolom.
        """
        keys = list(keys)
        mapping = self.resolve(keys)
        return {
            name: [keys[col] for col in cols]
            for name, cols in mapping.candidates.items()
        }
