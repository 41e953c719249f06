"""Cert Scanner - value graded-card certs and log them to a CSV ledger."""

__version__ = "1.0.0"
__description__ = "Paste grading certs, fetch valuations and images, append rows to a CSV ledger"

from .auth.tokens import CredentialsContext, StaticTokenProvider, build_token_provider
from .core.types import CertRequest, Credentials, Grader, ImagePair, LedgerRow, ValuationResult
from .images.psa import PSAImageClient
from .parse.certs import parse_certs
from .scan.orchestrator import BatchSummary, ScanOrchestrator
from .store.writer import LedgerWriter, resolve_ledger_path
from .utils.config import settings
from .utils.log import configure_logging, get_logger
from .valuation.cardladder import CardLadderClient

__all__ = [
    # Version info
    "__version__",
    "__description__",
    # Core components
    "configure_logging",
    "get_logger",
    "settings",
    "parse_certs",
    "CertRequest",
    "Grader",
    "ValuationResult",
    "ImagePair",
    "LedgerRow",
    "Credentials",
    "CardLadderClient",
    "PSAImageClient",
    "CredentialsContext",
    "StaticTokenProvider",
    "build_token_provider",
    "LedgerWriter",
    "resolve_ledger_path",
    "ScanOrchestrator",
    "BatchSummary",
]
