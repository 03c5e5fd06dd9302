"""
modules/budget/importer.py
==========================
Orkestrasi import worksheet -> list BudgetRecord

Strategi:
    1. columnar  : header baris 1 di-resolve sekali, setiap baris data
                   di-map berdasarkan index kolom
    2. object    : HANYA jika columnar menghasilkan 0 record. Worksheet
                   dibaca ulang sebagai list dict (key = teks header)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from modules.budget.excel_reader import ExcelReader
from modules.budget.header_resolver import HeaderResolver
from modules.budget.models import BudgetRecord
from modules.budget.row_mapper import RowMapper, is_empty_row
from modules.budget.utils import EmptyWorksheetError

logger = logging.getLogger(__name__)

STRATEGY_COLUMNAR = 'columnar'
STRATEGY_OBJECT = 'object'


@dataclass
class ImportResult:
    """Hasil import satu file."""

    records: List[BudgetRecord] = field(default_factory=list)
    strategy: str = STRATEGY_COLUMNAR
    total_rows: int = 0
    empty_rows: int = 0
    sheet_name: str = ''
    file_name: str = ''
    duration: float = 0.0

    def to_dict(self) -> dict:
        return {
            'file_name': self.file_name,
            'sheet_name': self.sheet_name,
            'strategy': self.strategy,
            'total_rows': self.total_rows,
            'empty_rows': self.empty_rows,
            'record_count': len(self.records),
            'duration': round(self.duration, 2),
        }


def import_columnar(
    rows: Sequence[Sequence[Any]],
    resolver: HeaderResolver = None,
    mapper: RowMapper = None
) -> Tuple[List[BudgetRecord], int]:
    """
    Strategi columnar: rows[0] = header, sisanya data.

    Returns:
        (records, jumlah baris kosong yang dilewati). Records kosong jika
        tidak ada satu field pun yang dikenali di header.
    """
    resolver = resolver or HeaderResolver()
    mapper = mapper or RowMapper()

    if not rows:
        return [], 0

    mapping = resolver.resolve(rows[0])
    if mapping.is_empty():
        logger.warning("Columnar: tidak ada header yang dikenali di baris 1")
        return [], 0

    records = []
    empty_rows = 0

    for row in rows[1:]:
        if is_empty_row(row):
            empty_rows += 1
            continue
        records.append(mapper.map_columnar(row, mapping))

    logger.info(f"Columnar: {len(records)} records, {empty_rows} empty rows skipped")
    return records, empty_rows


def import_objects(
    objects: Sequence[Mapping[Any, Any]],
    resolver: HeaderResolver = None,
    mapper: RowMapper = None
) -> Tuple[List[BudgetRecord], int]:
    """
    Strategi object-keyed: setiap baris adalah dict header -> nilai.
    Lookup field dilakukan langsung terhadap key masing-masing dict.
    """
    resolver = resolver or HeaderResolver()
    mapper = mapper or RowMapper()

    records = []
    empty_rows = 0
    key_cache: Dict[tuple, Dict[str, List[Any]]] = {}

    for obj in objects:
        if is_empty_row(list(obj.values())):
            empty_rows += 1
            continue

        keys = tuple(obj.keys())
        if keys not in key_cache:
            key_cache[keys] = resolver.resolve_keys(keys)
        key_mapping = key_cache[keys]

        if not any(key_mapping.values()):
            continue

        records.append(mapper.map_object(obj, key_mapping))

    logger.info(f"Object-keyed: {len(records)} records, {empty_rows} empty rows skipped")
    return records, empty_rows


def import_file(file_path: str, original_filename: Optional[str] = None) -> ImportResult:
    """
    Import worksheet pertama dari file.

    Raises:
        FileError: file tidak bisa dibuka / format tidak didukung
        EmptyWorksheetError: 0 record dari kedua strategi
    """
    start_time = datetime.now()
    file_name = original_filename or Path(file_path).name

    logger.info(f"🔄 Importing: {file_name}")

    resolver = HeaderResolver()
    mapper = RowMapper()
    result = ImportResult(file_name=file_name)

    with ExcelReader(file_path) as reader:
        result.sheet_name = reader.sheet_name or ''

        rows = reader.read_rows()
        result.total_rows = max(len(rows) - 1, 0)

        records, empty_rows = import_columnar(rows, resolver, mapper)
        result.strategy = STRATEGY_COLUMNAR

        if not records:
            logger.info("Columnar menghasilkan 0 record, mencoba strategi object-keyed...")
            objects = reader.read_objects()
            records, empty_rows = import_objects(objects, resolver, mapper)
            result.strategy = STRATEGY_OBJECT
            result.total_rows = len(objects)

    if not records:
        logger.error(f"❌ No records imported from {file_name}")
        raise EmptyWorksheetError("File Excel kosong atau format tidak didukung.")

    result.records = records
    result.empty_rows = empty_rows
    result.duration = (datetime.now() - start_time).total_seconds()

    logger.info(
        f"✅ Imported {len(records)} records from '{result.sheet_name}' "
        f"({result.strategy}, {result.duration:.2f}s)"
    )
    return result
