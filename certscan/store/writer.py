"""Append-only CSV ledger for scanned certs."""

import csv
import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.constants import LEDGER_COLUMNS, LEDGER_HEADER, LEDGER_PREFIX
from ..core.types import LedgerRow
from ..utils.config import ensure_scans_dir
from ..utils.error_handler import WriterError
from ..utils.log import get_logger


def resolve_ledger_path(filename: Optional[str], scans_dir: Optional[str] = None,
                        today: Optional[date] = None) -> Path:
    """Map the operator's answer to a ledger path inside the scans directory.

    Blank gives SCAN_<YYYY-MM-DD>.csv; a missing .csv suffix is added.
    """
    directory = ensure_scans_dir(scans_dir)
    name = (filename or "").strip()
    if not name:
        name = f"{LEDGER_PREFIX}{(today or date.today()).isoformat()}.csv"
    elif not name.endswith(".csv"):
        name = f"{name}.csv"
    return directory / name


class LedgerWriter:
    """CSV ledger opened once per session.

    An existing file is appended to; the header is only written into a
    new or empty file. Every row is flushed and synced before returning
    so a crash never loses a cert that was reported as written.
    """

    KEYS = [key for key, _ in LEDGER_COLUMNS]

    def __init__(self, csv_path: Union[str, Path]):
        self.logger = get_logger(__name__)
        self.csv_path = Path(csv_path)
        self.csv_path.parent.mkdir(parents=True, exist_ok=True)
        self.rows_written = 0

        is_new = not self.csv_path.exists() or self.csv_path.stat().st_size == 0
        try:
            self._file = open(self.csv_path, 'a', newline='', encoding='utf-8')
        except OSError as e:
            raise WriterError(f"Cannot open ledger: {e}", details={"path": str(self.csv_path)}) from e
        self._writer = csv.writer(self._file)

        if is_new:
            self._writer.writerow(LEDGER_HEADER)
            self._sync()
            self.logger.info("Created new ledger with header", file=str(self.csv_path))
        else:
            self.logger.info("Appending to existing ledger", file=str(self.csv_path))

    def _sync(self) -> None:
        self._file.flush()
        os.fsync(self._file.fileno())

    def write_row(self, row: Union[LedgerRow, Dict[str, Any]]) -> None:
        """Append one row in header order and sync it to disk."""
        if self._file.closed:
            raise WriterError("Ledger is closed", details={"path": str(self.csv_path)})

        row_dict = row.as_dict() if isinstance(row, LedgerRow) else row
        try:
            self._writer.writerow([row_dict.get(key, '') for key in self.KEYS])
            self._sync()
        except OSError as e:
            raise WriterError(f"Failed to write ledger row: {e}", details={"path": str(self.csv_path)}) from e

        self.rows_written += 1
        self.logger.debug("Row written to ledger", cert_number=row_dict.get("cert_number"))

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "LedgerWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
