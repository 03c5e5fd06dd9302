"""
excel_reader.py
===============
Module untuk membaca worksheet pertama dari file upload (xlsx / xlsm / csv)
"""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import openpyxl
import pandas as pd

from modules.budget.row_mapper import is_empty_row
from modules.budget.utils import FileError

logger = logging.getLogger(__name__)


class ExcelReader:

    EXCEL_EXTENSIONS = {'.xlsx', '.xlsm'}
    CSV_EXTENSIONS = {'.csv'}

    def __init__(self, file_path: str):
        self.file_path = Path(file_path)
        self.workbook = None
        self.sheet_name: Optional[str] = None

        suffix = self.file_path.suffix.lower()
        if suffix not in self.EXCEL_EXTENSIONS | self.CSV_EXTENSIONS:
            raise FileError(
                f"Format file '{suffix or self.file_path.name}' tidak didukung. "
                f"Gunakan .xlsx, .xlsm, atau .csv"
            )
        self.is_csv = suffix in self.CSV_EXTENSIONS

    def __enter__(self):
        if not self.file_path.exists():
            raise FileError(f"File tidak ditemukan: {self.file_path}")

        if self.is_csv:
            self.sheet_name = self.file_path.stem
            return self

        try:
            # data_only=True: baca HASIL formula, bukan formula-nya
            self.workbook = openpyxl.load_workbook(
                self.file_path,
                data_only=True,
                read_only=True
            )
        except Exception as e:
            raise FileError(f"Tidak bisa membuka file: {str(e)}")

        # Hanya worksheet pertama yang dipakai
        self.sheet_name = self.workbook.sheetnames[0]
        logger.info(f"Excel file loaded: {self.file_path.name} (sheet '{self.sheet_name}')")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Close workbook"""
        if self.workbook:
            self.workbook.close()
            self.workbook = None
            logger.debug("Workbook closed")

    # ------------------------------------------------------------------
    # Columnar read
    # ------------------------------------------------------------------

    def read_rows(self) -> List[List[Any]]:
        """
        Semua baris worksheet pertama sebagai list nilai sel.
        Baris pertama adalah header.
        """
        if self.is_csv:
            df = self._read_csv()
            return df.values.tolist()

        if self.workbook is None:
            raise FileError("Workbook belum dibuka. Gunakan 'with ExcelReader(...)'")

        sheet = self.workbook[self.sheet_name]
        rows = [list(row) for row in sheet.iter_rows(values_only=True)]

        logger.info(f"Read {len(rows)} rows from sheet '{self.sheet_name}'")
        return rows

    # ------------------------------------------------------------------
    # Object-keyed read (fallback)
    # ------------------------------------------------------------------

    def read_objects(self) -> List[Dict[str, Any]]:
        """
        Baca ulang worksheet sebagai list dict (satu dict per baris,
        key = teks header). Header diambil dari baris tidak kosong pertama.
        """
        if self.is_csv:
            raw = self._read_csv()
        else:
            try:
                raw = pd.read_excel(self.file_path, sheet_name=0, header=None, engine='openpyxl')
            except Exception as e:
                raise FileError(f"Tidak bisa membaca worksheet: {str(e)}")

        rows = raw.values.tolist()

        header_idx = next(
            (i for i, row in enumerate(rows) if not is_empty_row(row)),
            None
        )
        if header_idx is None:
            return []

        header = []
        seen: Dict[str, int] = {}
        for col, value in enumerate(rows[header_idx]):
            text = self._header_text(value, col)
            # Header duplikat diberi suffix ".1", ".2" seperti pandas
            if text in seen:
                seen[text] += 1
                text = f"{text}.{seen[text]}"
            else:
                seen[text] = 0
            header.append(text)

        objects = [dict(zip(header, row)) for row in rows[header_idx + 1:]]

        logger.info(
            f"Read {len(objects)} object rows (header at row {header_idx + 1}) "
            f"from '{self.sheet_name}'"
        )
        return objects

    @staticmethod
    def _header_text(value: Any, col: int) -> str:
        text = '' if value is None else str(value).strip()
        if not text or text == 'nan':
            return f"__empty_{col}"
        return text

    def _csv_width(self) -> int:
        """Jumlah kolom baris terlebar (baris CSV boleh tidak rata)"""
        with open(self.file_path, newline='', encoding='utf-8-sig') as f:
            return max((len(row) for row in csv.reader(f)), default=0)

    def _read_csv(self) -> pd.DataFrame:
        try:
            width = self._csv_width()
            if width == 0:
                return pd.DataFrame()

            # names= membuat baris yang lebih panjang dari baris pertama
            # tetap terbaca; kolom kurang diisi string kosong
            df = pd.read_csv(
                self.file_path,
                header=None,
                names=list(range(width)),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
                encoding='utf-8-sig'
            )
            return df.fillna('')
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except Exception as e:
            raise FileError(f"Tidak bisa membaca CSV: {str(e)}")
