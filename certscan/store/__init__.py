"""Storage package for the CSV ledger."""

from .writer import LedgerWriter, resolve_ledger_path

__all__ = ["LedgerWriter", "resolve_ledger_path"]
