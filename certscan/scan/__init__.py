"""Scan orchestration package."""

from .orchestrator import BatchSummary, CertOutcome, ScanOrchestrator, build_progress_bar

__all__ = ["BatchSummary", "CertOutcome", "ScanOrchestrator", "build_progress_bar"]
