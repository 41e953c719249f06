"""Batch driver: cert list in, ledger rows out."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape

from ..auth.tokens import CredentialsContext
from ..core.constants import PROGRESS_BAR_WIDTH
from ..core.types import CertRequest, LedgerRow
from ..images.psa import PSAImageClient
from ..store.writer import LedgerWriter
from ..ui.notifier import SimpleNotifier, notifier as default_notifier
from ..utils.error_handler import CredentialsExpired, ErrorContext, TokenRefreshError, handle_error
from ..utils.log import LoggerMixin
from ..valuation.cardladder import CardLadderClient


class CertOutcome(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class BatchSummary:
    total: int
    written: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    elapsed_s: float = 0.0

    def record(self, outcome: CertOutcome) -> None:
        if outcome is CertOutcome.WRITTEN:
            self.written += 1
        elif outcome is CertOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


def build_progress_bar(current: int, total: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    """``[###---]`` with ``width`` cells filled in proportion to current/total."""
    ratio = current / total if total else 0.0
    filled = min(width, max(0, round(ratio * width)))
    return f"[{'#' * filled}{'-' * (width - filled)}]"


class ScanOrchestrator(LoggerMixin):
    """Value, image and record each cert in turn.

    Certs are handled strictly one after another; a cert's row is on
    disk before the next cert starts. Expired credentials get one
    refresh-and-retry per cert. A failed refresh stops the batch, any
    other failure only costs the cert it happened on.
    """

    def __init__(
        self,
        valuation_client: CardLadderClient,
        image_client: PSAImageClient,
        credentials: CredentialsContext,
        ledger: LedgerWriter,
        console: Optional[Console] = None,
        notifier: Optional[SimpleNotifier] = None,
    ):
        self.valuation_client = valuation_client
        self.image_client = image_client
        self.credentials = credentials
        self.ledger = ledger
        self.console = console or Console()
        self.notifier = notifier or default_notifier

    async def scan_cert(self, cert: CertRequest) -> Optional[LedgerRow]:
        """One attempt at a cert; None means the valuation service had no match."""
        valuation = await self.valuation_client.get_valuation(
            cert.cert_number, cert.grader, self.credentials.current
        )
        if valuation is None:
            return None

        images = await self.image_client.get_images(cert.cert_number, self.credentials.current)

        row = LedgerRow(cert=cert, valuation=valuation, images=images)
        self.ledger.write_row(row)
        self.notifier.beep()
        return row

    def _report_failure(self, cert: CertRequest, error: Exception) -> CertOutcome:
        handle_error(
            error,
            ErrorContext(
                operation="scan cert",
                module=__name__,
                function="process_cert",
                input_data={"grader": cert.grader.value, "cert_number": cert.cert_number},
            ),
            self.logger,
            reraise=False,
        )
        self.console.print(
            f"[red]❌ Failed {cert.grader.value} cert {cert.cert_number}: {escape(str(error))}[/red]"
        )
        return CertOutcome.FAILED

    async def process_cert(self, cert: CertRequest) -> CertOutcome:
        """Scan a cert with the refresh-and-retry-once policy.

        Raises TokenRefreshError when credentials cannot be renewed.
        """
        try:
            row = await self.scan_cert(cert)
        except CredentialsExpired as expired:
            self.console.print(
                f"\n[yellow]🔄 {expired.service} credentials expired, refreshing...[/yellow]"
            )
            await self.credentials.refresh(expired.service)
            self.console.print(f"🔄 Rescanning Cert: {cert.cert_number}")
            try:
                row = await self.scan_cert(cert)
            except Exception as e:
                return self._report_failure(cert, e)
        except Exception as e:
            return self._report_failure(cert, e)

        if row is None:
            self.console.print(
                f"[yellow]⚠ Skipping {cert.grader.value} cert {cert.cert_number}: no valuation match[/yellow]"
            )
            return CertOutcome.SKIPPED
        return CertOutcome.WRITTEN

    async def process_batch(self, certs: Iterable[CertRequest]) -> BatchSummary:
        certs: List[CertRequest] = list(certs)
        summary = BatchSummary(total=len(certs))
        start = time.monotonic()
        context = self.log_start("batch", total=summary.total)

        for position, cert in enumerate(certs, start=1):
            bar = build_progress_bar(position, summary.total)
            percent = int(position / summary.total * 100)
            self.console.print(
                f"{bar} {percent}% ({position}/{summary.total}) "
                f"Scanning {cert.grader.value} Cert: {cert.cert_number}",
                markup=False,
                highlight=False,
            )
            try:
                outcome = await self.process_cert(cert)
            except TokenRefreshError as e:
                summary.aborted = True
                summary.failed += summary.total - position + 1
                self.console.print(
                    f"[red]❌ Could not refresh credentials, stopping this batch: {escape(str(e))}[/red]"
                )
                self.log_error(context, e, position=position)
                break
            summary.record(outcome)

        summary.elapsed_s = time.monotonic() - start
        self.console.print(
            f"\n🎯 Finished scanning {summary.total} cert(s) in {summary.elapsed_s:.1f} seconds! "
            f"({summary.written} written, {summary.skipped} skipped, {summary.failed} failed)\n"
        )
        self.log_success(context, written=summary.written, skipped=summary.skipped,
                         failed=summary.failed, aborted=summary.aborted)
        return summary
