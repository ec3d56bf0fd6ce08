"""Typer CLI for generating artifacts and refining ideas against a local store."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown

from idea2app.config import get_settings, load_config
from idea2app.schemas.artifacts import CREDIT_COSTS, ArtifactType, Project
from idea2app.schemas.config import ProjectConfig
from idea2app.shared.errors import Idea2AppError, ModelError, PipelineTimeoutError

# Load .env file from project root (if it exists)
load_dotenv()

app = typer.Typer(
    name="idea2app",
    help="Idea2App: turn a business idea into competitive analysis, PRD, MVP plan, tech spec and mockups.",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every HTTP request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load(config: Path) -> ProjectConfig:
    try:
        return load_config(config)
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/] {exc}")
        raise typer.Exit(code=1)


def _open_store(cfg: ProjectConfig):
    from idea2app.storage.local import LocalStore

    store = LocalStore(cfg.data_file)
    store.ensure_project(
        Project(id=cfg.project_id, user_id=cfg.user_id, name=cfg.name, idea=cfg.idea),
        credits=cfg.credits,
    )
    return store


def _analysis_client(dry_run: bool):
    settings = get_settings()
    if dry_run:
        from idea2app.shared.llm_client import DryRunClient
        return DryRunClient()

    from idea2app.shared.llm_client import LLMClient

    if not settings.openrouter_api_key:
        console.print("[red]Error:[/] OPENROUTER_API_KEY is not set (use --dry-run to run offline).")
        raise typer.Exit(code=1)
    return LLMClient(
        settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        default_model=settings.analysis_model,
    )


def _report_error(exc: Idea2AppError) -> None:
    console.print(f"[red]{exc.kind}:[/] {exc}")
    if isinstance(exc, (ModelError, PipelineTimeoutError)):
        console.print("[dim]Credits consumed for this attempt are not refunded.[/]")


@app.command()
def validate(
    config: Path = typer.Option(..., "--config", "-c", help="Path to project.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Validate a project file without calling any provider."""
    _setup_logging(verbose)
    cfg = _load(config)

    console.print("[green]Config is valid![/]\n")
    console.print(f"  Project:     {cfg.name} ({cfg.project_id})")
    console.print(f"  Idea:        {cfg.idea.strip()[:80]}")
    console.print(f"  User:        {cfg.user_id}")
    console.print(f"  Credits:     {cfg.credits}")
    console.print(f"  Model:       {cfg.model or '(default)'}")
    console.print(f"  Data file:   {cfg.data_file}")
    console.print(f"  Output dir:  {cfg.output_directory}")


@app.command()
def generate(
    doc_type: ArtifactType = typer.Argument(..., help="Artifact to generate."),
    config: Path = typer.Option(..., "--config", "-c", help="Path to project.yml"),
    model: str = typer.Option("", "--model", "-m", help="Override the synthesis model."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Run the pipeline with canned data (no API calls)."),
) -> None:
    """Generate one artifact and write it to the output directory.

    Examples:

        idea2app generate competitive-analysis -c project.yml

        idea2app generate prd -c project.yml --model openai/gpt-4o
    """
    _setup_logging(verbose)
    cfg = _load(config)

    if dry_run:
        console.print("[yellow]DRY-RUN mode: no API calls will be made.[/]\n")
    console.print(
        f"[bold]Generating {doc_type.value}[/] for {cfg.name} "
        f"({CREDIT_COSTS[doc_type]} credits)\n"
    )
    asyncio.run(_run_generate(cfg, doc_type, model=model or cfg.model or None, dry_run=dry_run))


async def _run_generate(
    cfg: ProjectConfig, doc_type: ArtifactType, *, model: str | None, dry_run: bool
) -> None:
    from idea2app.output.markdown import render_legacy_sections, render_mockup_outline
    from idea2app.mockups.reconstruct import reconstruct_mockup
    from idea2app.pipelines.orchestrator import PipelineOrchestrator
    from idea2app.pipelines.service import ArtifactService
    from idea2app.pipelines.synthesis import SynthesisEngine
    from idea2app.research.fetcher import SourceFetcher, dry_run_http_client
    from idea2app.shared.progress import PipelineProgress

    settings = get_settings()
    store = _open_store(cfg)
    client = _analysis_client(dry_run)
    http_client = dry_run_http_client() if dry_run else None
    fetcher = SourceFetcher(
        settings,
        search_client=client if dry_run else None,
        http_client=http_client,
    )

    with PipelineProgress() as progress:
        progress.print_phase(f"{doc_type.value} pipeline")
        service = ArtifactService(
            orchestrator=PipelineOrchestrator(fetcher, SynthesisEngine(client), progress),
            artifacts=store,
            projects=store,
            credits=store,
            timeout=settings.pipeline_timeout,
        )
        try:
            artifact = await service.generate(cfg.project_id, doc_type, model=model)
        except Idea2AppError as exc:
            _report_error(exc)
            raise typer.Exit(code=1)
        finally:
            if http_client is not None:
                await http_client.aclose()

    out_dir = Path(cfg.output_directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{doc_type.value}.md"
    out_path.write_text(artifact.content)
    console.print(f"\n[green]{doc_type.value} written to:[/] {out_path}")
    console.print(f"[dim]Model: {artifact.metadata.model}  |  Credits left: {store.balance(cfg.user_id)}[/]")

    if doc_type is ArtifactType.MOCKUP:
        try:
            rebuilt = reconstruct_mockup(artifact.content)
        except Idea2AppError as exc:
            _report_error(exc)
            return
        outline = (
            render_legacy_sections(rebuilt.legacy) if rebuilt.is_legacy
            else render_mockup_outline(rebuilt.pages)
        )
        console.print(Markdown(outline))


@app.command()
def mockup(
    file: Path = typer.Argument(..., help="Stored mockup content (markdown or patch stream)."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Reconstruct a stored mockup and print its page outline."""
    from idea2app.mockups.catalog import validate_tree
    from idea2app.mockups.reconstruct import reconstruct_mockup
    from idea2app.output.markdown import render_legacy_sections, render_mockup_outline

    _setup_logging(verbose)
    if not file.exists():
        console.print(f"[red]No such file:[/] {file}")
        raise typer.Exit(code=1)

    try:
        rebuilt = reconstruct_mockup(file.read_text())
    except Idea2AppError as exc:
        _report_error(exc)
        raise typer.Exit(code=1)

    if rebuilt.is_legacy:
        console.print("[yellow]No JSON spec found; showing legacy sections.[/]\n")
        console.print(render_legacy_sections(rebuilt.legacy))
        return

    console.print(f"[bold]{len(rebuilt.pages)} page(s) reconstructed[/]\n")
    for page in rebuilt.pages:
        for issue in validate_tree(page.spec):
            console.print(
                f"  [yellow]{page.title}:[/] {issue.problem} at {issue.element_id} ({issue.detail})"
            )
    console.print(Markdown(render_mockup_outline(rebuilt.pages)))


def _chat_service(store, dry_run: bool):
    from idea2app.chat.service import PromptChatService

    settings = get_settings()
    client = _analysis_client(dry_run)
    return PromptChatService(
        projects=store, chats=store, credits=store, client=client,
        model=settings.chat_model if not dry_run else client.default_model,
    )


@app.command()
def chat(
    message: str = typer.Argument(..., help="Your message."),
    config: Path = typer.Option(..., "--config", "-c", help="Path to project.yml"),
    initial: bool = typer.Option(False, "--initial", help="First turn: ask clarifying questions."),
    stream: bool = typer.Option(False, "--stream", help="Print tokens as they arrive."),
    ndjson: bool = typer.Option(False, "--ndjson", help="With --stream, print raw NDJSON events."),
    model: str = typer.Option("", "--model", "-m", help="Override the chat model."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use canned replies (no API calls)."),
) -> None:
    """Send one message in the idea-refinement chat."""
    _setup_logging(verbose)
    cfg = _load(config)
    asyncio.run(
        _run_chat(cfg, message, initial=initial, stream=stream, ndjson=ndjson,
                  model=model or None, dry_run=dry_run)
    )


async def _run_chat(
    cfg: ProjectConfig,
    message: str,
    *,
    initial: bool,
    stream: bool,
    ndjson: bool,
    model: str | None,
    dry_run: bool,
) -> None:
    from idea2app.chat.events import apply_event, encode_event
    from idea2app.schemas.chat import StreamOutcome, TokenEvent

    store = _open_store(cfg)
    service = _chat_service(store, dry_run)

    try:
        if not stream:
            result = await service.send(cfg.project_id, message, is_initial=initial, model=model)
            console.print(Markdown(result.assistant_message.content))
            console.print(f"\n[dim]Stage: {result.stage.value}  |  Status: {result.status.value}[/]")
            if result.summary:
                console.print("[green]Project description updated from summary.[/]")
            return

        outcome = StreamOutcome()
        async for event in await service.stream(cfg.project_id, message, is_initial=initial, model=model):
            if ndjson:
                console.out(encode_event(event), end="")
            elif isinstance(event, TokenEvent):
                console.out(event.content, end="")
            apply_event(outcome, event)
    except Idea2AppError as exc:
        _report_error(exc)
        raise typer.Exit(code=1)

    console.print()
    if outcome.error:
        console.print(f"[red]Stream failed:[/] {outcome.error}")
        raise typer.Exit(code=1)
    if outcome.status:
        console.print(f"[dim]Status: {outcome.status.value}[/]")
    if outcome.summary:
        console.print("[green]Project description updated from summary.[/]")


@app.command()
def history(
    config: Path = typer.Option(..., "--config", "-c", help="Path to project.yml"),
    limit: int = typer.Option(40, "--limit", "-n", help="Page size (10-200)."),
    before: str = typer.Option("", "--before", help="ISO timestamp cursor from a previous page."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Show one page of the refinement chat history."""
    _setup_logging(verbose)
    cfg = _load(config)

    cursor: datetime | None = None
    if before:
        try:
            cursor = datetime.fromisoformat(before)
        except ValueError:
            console.print(f"[red]Invalid --before timestamp:[/] {before}")
            raise typer.Exit(code=1)
        if cursor.tzinfo is None:
            cursor = cursor.replace(tzinfo=timezone.utc)

    asyncio.run(_run_history(cfg, limit=limit, before=cursor))


async def _run_history(cfg: ProjectConfig, *, limit: int, before: datetime | None) -> None:
    from idea2app.chat.service import PromptChatService
    from idea2app.shared.llm_client import DryRunClient

    store = _open_store(cfg)
    # Reading history never calls the model.
    service = PromptChatService(projects=store, chats=store, credits=store, client=DryRunClient())
    try:
        page = await service.history(cfg.project_id, limit=limit, before=before)
    except Idea2AppError as exc:
        _report_error(exc)
        raise typer.Exit(code=1)

    console.print(f"[bold]Status:[/] {page.status.value}  ({len(page.messages)} messages)\n")
    for msg in page.messages:
        stamp = msg.created_at.strftime("%Y-%m-%d %H:%M:%S") if msg.created_at else "?"
        stage = f" [{msg.metadata.stage}]" if msg.metadata and msg.metadata.stage else ""
        console.print(f"[cyan]{msg.role.value}[/]{stage} [dim]{stamp}[/]")
        console.print(msg.content.strip()[:500] + "\n")
    if page.has_more and page.cursor:
        console.print(f"[dim]Older messages: --before {page.cursor.isoformat()}[/]")
