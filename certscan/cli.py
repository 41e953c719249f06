"""Command-line interface for the cert scanner."""

import asyncio
from enum import Enum
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .auth.tokens import CredentialsContext, StaticTokenProvider, build_token_provider
from .images.psa import PSAImageClient
from .parse.certs import parse_certs
from .scan.orchestrator import ScanOrchestrator
from .store.writer import LedgerWriter, resolve_ledger_path
from .ui.notifier import SimpleNotifier
from .ui.prompt import ask
from .utils.config import Settings, settings
from .utils.error_handler import CertScanError
from .utils.log import configure_logging, get_logger
from .valuation.cardladder import CardLadderClient

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Rich console
console = Console()

app = typer.Typer(
    name="certscan",
    help="Cert Scanner - paste grading certs, get valuations and images into a CSV ledger",
    add_completion=False
)

QUIT_WORDS = {"quit", "exit", "q"}
FILENAME_PROMPT = "📄 What would you like to name the CSV file? (leave blank for auto-name) "
CERT_PROMPT = "📦 Paste certs or scan a cert: "


class TokenSource(str, Enum):
    static = "static"
    browser = "browser"


def _config_for(token_source: Optional[TokenSource], scans_dir: Optional[str]) -> Settings:
    update = {}
    if token_source is not None:
        update["TOKEN_SOURCE"] = token_source.value
    if scans_dir:
        update["SCANS_DIR"] = scans_dir
    return settings.model_copy(update=update) if update else settings


async def run_session(
    config: Settings,
    output: Optional[str],
    read_line: Callable[[str], str],
    out: Console,
    notifier: Optional[SimpleNotifier] = None,
) -> int:
    """Interactive paste loop; returns the number of ledger rows written."""
    if output is None:
        output = await ask(read_line, FILENAME_PROMPT)
        if not output.strip():
            out.print("📁 No filename provided. Using auto-generated name")
    ledger_path = resolve_ledger_path(output, config.SCANS_DIR)

    credentials = CredentialsContext(build_token_provider(config, prompt=read_line))
    await credentials.load()

    valuation_client = CardLadderClient(
        config.CARDLADDER_SEARCH_URL, config.CARDLADDER_ESTIMATE_URL, config.HTTP_TIMEOUT_S
    )
    image_client = PSAImageClient(config.PSA_IMAGES_URL, config.HTTP_TIMEOUT_S)

    try:
        with LedgerWriter(ledger_path) as ledger:
            orchestrator = ScanOrchestrator(
                valuation_client, image_client, credentials, ledger,
                console=out, notifier=notifier,
            )
            out.print(f"\n🔎 Ready to start scanning into [bold]{escape(str(ledger_path))}[/bold]!")

            while True:
                try:
                    line = await ask(read_line, CERT_PROMPT)
                except (EOFError, KeyboardInterrupt):
                    out.print("\n[yellow]⚠ Scanning interrupted by user[/yellow]")
                    break
                if line.strip().lower() in QUIT_WORDS:
                    break

                certs = parse_certs(line)
                if not certs:
                    out.print("[yellow]⚠ No valid certs detected. Try again.[/yellow]")
                    continue

                out.print(f"📋 Detected {len(certs)} cert(s). Starting scan...\n")
                await orchestrator.process_batch(certs)

            return ledger.rows_written
    finally:
        await valuation_client.close()
        await image_client.close()


@app.command()
def scan(
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Ledger file name (skips the prompt)"),
    token_source: Optional[TokenSource] = typer.Option(None, "--token-source", "-t", help="Where credentials come from"),
    scans_dir: Optional[str] = typer.Option(None, "--scans-dir", help="Directory for ledger files"),
    beep: bool = typer.Option(True, "--beep/--no-beep", help="Ring the terminal bell per written row"),
):
    """Paste certs, value them and append the results to a CSV ledger."""

    console.print(Panel.fit(
        "[bold blue]Cert Scanner[/bold blue]\n"
        "[dim]paste → value → images → CSV[/dim]",
        border_style="blue"
    ))

    config = _config_for(token_source, scans_dir)

    try:
        written = asyncio.run(run_session(
            config, output, console.input, console, notifier=SimpleNotifier(enabled=beep)
        ))
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠ Scanning interrupted by user[/yellow]")
        return
    except CertScanError as e:
        console.print(f"\n[red]❌ {escape(str(e))}[/red]")
        logger.error("Scan session error", error=str(e))
        raise typer.Exit(1)

    console.print(f"\n[bold]Session complete[/bold]: {written} row(s) written")


@app.command()
def login(
    save: bool = typer.Option(False, "--save", help="Write the captured tokens into the env file"),
):
    """Log in with a scripted browser and print the captured valuation tokens."""
    from playwright.async_api import Error as PlaywrightError

    from .auth.browser import BrowserTokenProvider

    provider = BrowserTokenProvider(config=settings)
    try:
        with console.status("[bold green]Logging in...", spinner="dots"):
            tokens = asyncio.run(provider.capture())
    except (CertScanError, PlaywrightError) as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        logger.error("Token capture error", error=str(e))
        raise typer.Exit(1)

    table = Table(title="Captured tokens")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white", overflow="fold")
    table.add_row("CARDLADDER_AUTHORIZATION", tokens["authorization"])
    table.add_row("CARDLADDER_APP_CHECK", tokens["app_check"])
    console.print(table)

    if save:
        StaticTokenProvider(config=settings).persist(
            CARDLADDER_AUTHORIZATION=tokens["authorization"],
            CARDLADDER_APP_CHECK=tokens["app_check"],
        )
        console.print(f"[green]✓ Saved to {escape(settings.ENV_FILE)}[/green]")


if __name__ == "__main__":
    app()
