"""
Budget Monitoring Package
=========================
Package untuk normalisasi data tagihan dari Excel, agregasi pivot per
status2, dan estimasi serapan anggaran terhadap nilai kontrak.

Modules:
    - config: Configuration management (nilai kontrak, AI)
    - excel_reader: Excel / CSV file operations
    - header_resolver: Deteksi kolom berdasarkan teks header
    - row_mapper: Baris mentah -> BudgetRecord
    - importer: Orkestrasi import (columnar + fallback object-keyed)
    - dedup: Fingerprint & merge tanpa duplikat
    - period_index: Daftar periode & filter
    - aggregator: Pivot, ringkasan status, run-rate
    - state: State immutable + reducer
    - output_writer: Excel export
    - ai_insight: Analisis AI dari ringkasan per tim
"""

# Import main classes untuk kemudahan akses
from modules.budget.config import ConfigLoader
from modules.budget.excel_reader import ExcelReader
from modules.budget.header_resolver import HeaderResolver
from modules.budget.row_mapper import RowMapper
from modules.budget.importer import ImportResult, import_file
from modules.budget.models import BudgetRecord, PivotTable
from modules.budget.state import AppState, StateStore
from modules.budget.output_writer import OutputWriter

# Public API
__all__ = [
    'ConfigLoader',
    'ExcelReader',
    'HeaderResolver',
    'RowMapper',
    'ImportResult',
    'import_file',
    'BudgetRecord',
    'PivotTable',
    'AppState',
    'StateStore',
    'OutputWriter',
]
