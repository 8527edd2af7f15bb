"""
Record loaders — CSV / JSON / Excel exports of the record store.

Each table holds one row per income or expense record, with the store's own
column names (``userId``, ``amount``, ``pastIncomeHistory``...). Rows are
handed to the record builder unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from core.schema import Ledger

from .record_builder import build_ledger

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_records_table(path: PathLike) -> pd.DataFrame:
    """
    Load one record table, picking the reader from the file suffix.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        # keep ids and JSON text columns as strings
        return pd.read_csv(path, dtype={"id": str, "userId": str})
    if suffix in (".xlsx", ".xlsm"):
        return pd.read_excel(path, engine="openpyxl", dtype={"id": str, "userId": str})
    if suffix == ".json":
        return pd.read_json(path, orient="records", dtype={"id": str, "userId": str})
    raise ValueError(f"Unsupported record file type: {path.suffix!r}")


def _owner_rows(table: pd.DataFrame, owner_id: Optional[str]) -> List[Dict[str, Any]]:
    if owner_id is not None and "userId" in table.columns:
        table = table[table["userId"].astype(str) == str(owner_id)]
    return table.to_dict(orient="records")


def load_ledger_from_files(
    incomes_path: PathLike,
    expenses_path: PathLike,
    holdings_path: Optional[PathLike] = None,
    *,
    owner_id: Optional[str] = None,
    owner_age: Optional[int] = None,
) -> Ledger:
    """Build one owner's ledger from exported tables."""
    incomes = _owner_rows(load_records_table(incomes_path), owner_id)
    expenses = _owner_rows(load_records_table(expenses_path), owner_id)
    holdings = _owner_rows(load_records_table(holdings_path), owner_id) if holdings_path else []

    ledger = build_ledger(incomes, expenses, holdings, owner_age=owner_age)
    logger.debug(
        "Loaded ledger for %s: %d incomes, %d expenses, %d holdings, %d integrity warning(s)",
        owner_id or "<all>", len(ledger.incomes), len(ledger.expenses),
        ledger.holdings_count or 0, len(ledger.integrity_warnings),
    )
    return ledger


@dataclass(frozen=True)
class FileRecordRepository:
    """
    Read-only repository over a directory of exports:

        incomes.<ext>, expenses.<ext>, holdings.<ext> (optional)

    All owners share the files; rows are filtered on ``userId``.
    """
    directory: Path
    extension: str = ".csv"
    owner_ages: Optional[Dict[str, int]] = None

    def _path(self, stem: str) -> Path:
        return Path(self.directory) / f"{stem}{self.extension}"

    def load_ledger(self, owner_id: str) -> Ledger:
        holdings = self._path("holdings")
        return load_ledger_from_files(
            self._path("incomes"),
            self._path("expenses"),
            holdings if holdings.exists() else None,
            owner_id=owner_id,
            owner_age=(self.owner_ages or {}).get(owner_id),
        )
