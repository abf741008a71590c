"""
CLI interface for Legosphere.

Provides command-line access to the drafting assistant features.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from legosphere.config.loader import load_settings
from legosphere.core.drafting import MemoRequest
from legosphere.core.errors import ProviderError
from legosphere.sdk.factory import Application, build_application
from legosphere.storage.repository import UsageRepository, initialize_schema

app = typer.Typer()
console = Console()

EXIT_CODE_OK = 0
EXIT_CODE_FAIL = 1


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML configuration file"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show diagnostic logging"
    )
):
    """Legosphere legal drafting assistant CLI."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)]
        )
    ctx.obj = {"config": config}
    if ctx.invoked_subcommand is None:
        console.print("Legosphere - Use --help to see available commands")


def _application(ctx: typer.Context) -> Application:
    try:
        settings = load_settings((ctx.obj or {}).get("config"))
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)
    application = build_application(settings)
    ctx.call_on_close(application.close)
    return application


def _read_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/] cannot read {path}: {e}")
        sys.exit(EXIT_CODE_FAIL)


def _read_input(text: Optional[str], file: Optional[Path]) -> str:
    if file is not None:
        return _read_file(file)
    if text:
        return text
    console.print("[red]Error:[/] provide text or --file")
    sys.exit(EXIT_CODE_FAIL)


def _report_invalid(error: ValueError) -> None:
    console.print(f"[red]Error:[/] {error}")
    sys.exit(EXIT_CODE_FAIL)


def _report_failure(error: ProviderError) -> None:
    """Print an actionable message naming the path that failed."""
    console.print(f"\n[red]Generation failed ({error.path}):[/] {error}")
    if error.proxy_reason:
        console.print(f"[dim]Proxy was also unavailable: {error.proxy_reason}[/]")
    console.print("[dim]Your input was not lost; try again shortly.[/]")


def _print_usage_footer(application: Application) -> None:
    ledger = application.ledger
    console.print(
        f"\n[dim]{ledger.remaining:,} words remaining ({ledger.percentage:.1f}%)[/]"
    )
    if ledger.exhausted:
        console.print("[yellow]Word quota exhausted.[/]")


@app.command()
def init(ctx: typer.Context):
    """Initialize the usage database."""
    try:
        settings = load_settings((ctx.obj or {}).get("config"))
        initialize_schema(settings.usage.db_path)
        console.print("[green]✓[/] Database initialized successfully")
        sys.exit(EXIT_CODE_OK)
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def status(
    ctx: typer.Context,
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Only count the last N days")
):
    """Show remaining words and usage per feature."""
    application = _application(ctx)
    ledger = application.ledger

    console.print("\n[bold]Word Usage[/bold]")
    console.print("-" * 40)
    console.print(f"Plan: {ledger.state.total_units:,} words")
    console.print(f"Used: {ledger.state.used_units:,} words")
    console.print(f"Remaining: {ledger.remaining:,} words ({ledger.percentage:.1f}%)")

    totals = UsageRepository(application.settings.usage.db_path).get_feature_totals(
        user_id=application.settings.usage.user_id, days=days
    )
    if totals:
        table = Table(title="Usage by feature")
        table.add_column("Feature")
        table.add_column("Words", justify="right")
        for feature, units in totals.items():
            table.add_row(feature, f"{units:,}")
        console.print(table)
    else:
        console.print("\n[dim]No usage recorded yet.[/]")


@app.command()
def generate(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Prompt to send"),
    feature: str = typer.Option("general", "--feature", "-f", help="Feature tag for accounting")
):
    """Generate text for a prompt."""
    application = _application(ctx)
    try:
        result = application.generator.generate(prompt, feature)
    except ProviderError as e:
        _report_failure(e)
        sys.exit(EXIT_CODE_FAIL)
    except ValueError as e:
        _report_invalid(e)
    console.print(result.text, markup=False, highlight=False)
    _print_usage_footer(application)


@app.command()
def stream(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Prompt to send"),
    feature: str = typer.Option("chat-pdf", "--feature", "-f", help="Feature tag for accounting")
):
    """Stream generated text as it arrives."""
    application = _application(ctx)
    try:
        application.generator.stream(prompt, _echo_chunk, feature)
    except ProviderError as e:
        _report_failure(e)
        sys.exit(EXIT_CODE_FAIL)
    except ValueError as e:
        _report_invalid(e)
    console.print()
    _print_usage_footer(application)


def _echo_chunk(chunk: str) -> None:
    console.print(chunk, end="", markup=False, highlight=False)


@app.command()
def arguments(
    ctx: typer.Context,
    text: Optional[str] = typer.Argument(None, help="Case description"),
    file: Optional[Path] = typer.Option(None, "--file", help="Read the case description from a file")
):
    """Generate legal arguments for and against the primary party."""
    application = _application(ctx)
    try:
        result = application.extractor.generate_arguments(_read_input(text, file))
    except ProviderError as e:
        _report_failure(e)
        sys.exit(EXIT_CODE_FAIL)
    console.print("\n[bold green]Arguments For[/bold green]")
    console.print(result.arguments_for, markup=False)
    console.print("\n[bold red]Arguments Against[/bold red]")
    console.print(result.arguments_against, markup=False)
    _print_usage_footer(application)


@app.command()
def flow(
    ctx: typer.Context,
    text: Optional[str] = typer.Argument(None, help="Case facts"),
    file: Optional[Path] = typer.Option(None, "--file", help="Read the case facts from a file")
):
    """Break case facts into a flowchart."""
    application = _application(ctx)
    try:
        graph = application.extractor.generate_legal_flow(_read_input(text, file))
    except ProviderError as e:
        _report_failure(e)
        sys.exit(EXIT_CODE_FAIL)

    labels = {node.id: node.label for node in graph.nodes}
    table = Table(title="Case Flow")
    table.add_column("Id")
    table.add_column("Step")
    for node in graph.nodes:
        table.add_row(node.id, node.label)
    console.print(table)
    for edge in graph.edges:
        console.print(f"{labels[edge.source]} -> {labels[edge.target]}", markup=False)
    if graph.degraded:
        console.print("\n[yellow]Could not parse a flowchart. Raw output:[/]")
        console.print(graph.raw_text, markup=False)
    _print_usage_footer(application)


@app.command("compare-law")
def compare_law(
    ctx: typer.Context,
    concept: str = typer.Argument(..., help="Legal concept or event"),
    source_country: str = typer.Option(..., "--from", help="Domestic jurisdiction"),
    target_country: str = typer.Option(..., "--to", help="Foreign jurisdiction")
):
    """Compare the laws governing a concept in two jurisdictions."""
    application = _application(ctx)
    try:
        result = application.extractor.analyze_node_law(concept, source_country, target_country)
    except ProviderError as e:
        _report_failure(e)
        sys.exit(EXIT_CODE_FAIL)

    console.print(f"\n[bold]{source_country}[/bold]")
    for citation in result.domestic:
        console.print(f"- {citation}", markup=False)
    console.print(f"\n[bold]{target_country}[/bold]")
    for citation in result.foreign:
        console.print(f"- {citation}", markup=False)
    console.print("\n[bold]Reasoning[/bold]")
    console.print(result.reasoning, markup=False)
    _print_usage_footer(application)


@app.command()
def review(
    ctx: typer.Context,
    text: Optional[str] = typer.Argument(None, help="Draft text"),
    file: Optional[Path] = typer.Option(None, "--file", help="Read the draft from a file")
):
    """Critique a legal draft."""
    application = _application(ctx)
    try:
        critique = application.extractor.review_draft(_read_input(text, file))
    except ProviderError as e:
        _report_failure(e)
        sys.exit(EXIT_CODE_FAIL)

    for title, body in (
        ("Grammar", critique.grammar),
        ("Clarity", critique.clarity),
        ("Risks", critique.risks),
        ("Suggestions", critique.suggestions),
    ):
        console.print(f"\n[bold]{title}[/bold]")
        console.print(body or "-", markup=False)
    _print_usage_footer(application)


@app.command()
def memo(
    ctx: typer.Context,
    facts: str = typer.Option(..., "--facts", help="Statement of facts"),
    issue: str = typer.Option(..., "--issue", help="Question presented"),
    to: str = typer.Option("", "--to", help="Recipient"),
    sender: str = typer.Option("", "--from", help="Author"),
    subject: str = typer.Option("", "--subject", help="Subject line")
):
    """Write a formal legal memorandum."""
    application = _application(ctx)
    try:
        request = MemoRequest(facts=facts, issue=issue, to=to, sender=sender, subject=subject)
    except ValueError as e:
        _report_invalid(e)
    try:
        result = application.drafting.write_legal_memo(request)
    except ProviderError as e:
        _report_failure(e)
        sys.exit(EXIT_CODE_FAIL)
    console.print(result.text, markup=False, highlight=False)
    _print_usage_footer(application)


@app.command()
def draft(
    ctx: typer.Context,
    request: str = typer.Argument(..., help="What to draft")
):
    """Draft a legal document section."""
    application = _application(ctx)
    try:
        result = application.drafting.draft_document(request)
    except ProviderError as e:
        _report_failure(e)
        sys.exit(EXIT_CODE_FAIL)
    except ValueError as e:
        _report_invalid(e)
    console.print(result.text, markup=False, highlight=False)
    _print_usage_footer(application)


@app.command()
def ask(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Question to ask"),
    document: Optional[Path] = typer.Option(
        None,
        "--document",
        help="Plain-text file extracted from the document to discuss"
    )
):
    """Ask a question, optionally about a document, streaming the answer."""
    application = _application(ctx)
    if document is not None:
        document_text = _read_file(document)
        try:
            application.drafting.chat_with_document(document_text, document.name, question, _echo_chunk)
        except ProviderError as e:
            _report_failure(e)
            sys.exit(EXIT_CODE_FAIL)
        except ValueError as e:
            _report_invalid(e)
        console.print()
    else:
        try:
            result = application.drafting.research(question)
        except ProviderError as e:
            _report_failure(e)
            sys.exit(EXIT_CODE_FAIL)
        except ValueError as e:
            _report_invalid(e)
        console.print(result.text, markup=False, highlight=False)
    _print_usage_footer(application)


if __name__ == "__main__":
    app()
