"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, Prompt
from rich.table import Table

from arete.clients.llm_client import LLMClient
from arete.clients.skill_extractor import SkillExtractor
from arete.config import AppConfig, load_config
from arete.errors import AreteError, ResponseParseError
from arete.logging.cost_calculator import calculate_cost
from arete.logging.models import UsageLog
from arete.logging.usage_store import UsageStore
from arete.models.gap import GapAnalysisResult
from arete.models.proposal import ChangeProposal
from arete.models.resume import normalize_document
from arete.parsers.resume_parser import parse_resume
from arete.pipeline.change_proposal import ChangeProposalBuilder
from arete.pipeline.gap_analyst import GapAnalyst
from arete.pipeline.gap_walk import GapWalkController, WalkPhase, WalkState
from arete.pipeline.interviewer import OPENING_QUESTION, ResumeInterviewer
from arete.pipeline.resume_structurer import ResumeStructurer
from arete.pipeline.update_strategies import UpdateStrategyRegistry

app = typer.Typer(
    name="arete",
    help="AI resume builder: gap analysis and guided tailoring against a job description",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)

WALK_HELP = "[dim]Type your answer, or: /skip  /none  /prev  /next  /goto N  /done[/dim]"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _fail(exc: AreteError) -> None:
    console.print(f"[red]{exc.message}[/red]")
    if isinstance(exc, ResponseParseError) and exc.raw_response:
        console.print(Panel(exc.raw_response[:2000], title="Raw response"))
    raise typer.Exit(1)


def _usage_store(config: AppConfig) -> UsageStore | None:
    if not config.usage.enabled:
        return None
    return UsageStore(config.usage.resolved_db_path)


def _record_session_usage(config: AppConfig, llm: LLMClient, mode: str, elapsed: float, **fields) -> None:
    """Drain the client's token log and save it as one usage entry."""
    tokens = llm.get_token_summary()
    store = _usage_store(config)
    if store is None:
        return
    log = UsageLog(
        mode=mode,
        elapsed_seconds=round(elapsed, 3),
        total_input_tokens=tokens["input"],
        total_output_tokens=tokens["output"],
        estimated_cost_usd=calculate_cost(tokens["calls"]),
        **fields,
    )
    try:
        store.save_log(log)
    except Exception:
        logger.warning("Failed to save usage log", exc_info=True)


def _load_json(path: Path) -> dict:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]{path} is not valid JSON: {exc}[/red]")
        raise typer.Exit(1)


def _write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _run_analysis(config: AppConfig, llm: LLMClient, resume: dict, jd_text: str) -> GapAnalysisResult:
    analyst = GapAnalyst(
        llm,
        model=config.llm.model,
        timeout=config.analysis.timeout_seconds,
        max_job_description_chars=config.analysis.max_job_description_chars,
        usage_store=_usage_store(config),
    )
    with Progress(SpinnerColumn(), TextColumn("{task.description}"), console=console) as progress:
        progress.add_task("Analyzing resume against the job description...", total=None)
        return asyncio.run(analyst.analyze(resume, jd_text))


def _print_analysis(analysis: GapAnalysisResult) -> None:
    table = Table(title=f"Resume gaps (match {analysis.summary.overall_match}%)")
    table.add_column("#", justify="right")
    table.add_column("Priority")
    table.add_column("Category")
    table.add_column("Gap")
    for i, gap in enumerate(analysis.gaps, start=1):
        table.add_row(str(i), gap.priority_label, gap.category, gap.title)
    console.print(table)


@app.command()
def parse(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT/MD)"),
    output: Path = typer.Option(None, "--output", "-o", help="Output JSON path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Convert a resume file into structured resume JSON."""
    _setup_logging(verbose)
    config = load_config()
    try:
        text = parse_resume(resume)
        llm = LLMClient(timeout=config.llm.timeout, default_model=config.llm.model)
        structurer = ResumeStructurer(llm, timeout=config.analysis.timeout_seconds)
        document = asyncio.run(structurer.structure(text))
    except AreteError as exc:
        _fail(exc)

    output = output or resume.with_suffix(".json")
    _write_json(output, document)
    console.print(f"[green]Structured resume saved: {output}[/green]")


@app.command()
def analyze(
    resume: Path = typer.Argument(help="Structured resume JSON"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to save the analysis JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Identify gaps between a resume and a job description."""
    _setup_logging(verbose)
    if not jd.exists():
        console.print(f"[red]Job description file not found: {jd}[/red]")
        raise typer.Exit(1)
    config = load_config()
    document = normalize_document(_load_json(resume))
    try:
        llm = LLMClient(timeout=config.llm.timeout, default_model=config.llm.model)
        analysis = _run_analysis(config, llm, document, jd.read_text(encoding="utf-8"))
    except AreteError as exc:
        _fail(exc)

    _print_analysis(analysis)
    if output:
        _write_json(output, analysis.to_data())
        console.print(f"[green]Analysis saved: {output}[/green]")


def _show_gap(state: WalkState) -> None:
    gap = state.current_gap
    console.print(
        Panel(
            f"[bold]{gap.title}[/bold]\n\n{gap.description}\n\n"
            f"[cyan]Job requirement:[/cyan] {gap.job_requirement}\n"
            f"[cyan]Current resume:[/cyan] {gap.current_resume_state}\n\n"
            f"{gap.suggested_question}",
            title=(
                f"Gap {state.gap_index + 1} of {len(state.gaps)} "
                f"({gap.priority_label} priority - {gap.category})"
            ),
            subtitle=f"Match {state.match_percentage}%",
        )
    )


def _show_proposal(proposal: ChangeProposal) -> None:
    old = json.dumps(proposal.old_value, indent=2, ensure_ascii=False) if proposal.old_value else "(empty)"
    new = json.dumps(proposal.new_value, indent=2, ensure_ascii=False)
    console.print(
        Panel(
            f"{proposal.description}\n\n[red]- {old}[/red]\n[green]+ {new}[/green]",
            title=f"Proposed change: {proposal.path}",
        )
    )


async def _walk(controller: GapWalkController) -> None:
    state = controller.state
    while state.phase != WalkPhase.COMPLETE:
        if state.phase == WalkPhase.PROPOSAL_PENDING:
            _show_proposal(state.pending_proposal)
            if Confirm.ask("Apply this change?", default=True):
                state = controller.accept_proposal()
            else:
                state = controller.reject_proposal()
            continue

        if state.error:
            console.print(f"[red]{state.error}[/red]")
        else:
            _show_gap(state)
        answer = Prompt.ask("Your answer").strip()
        try:
            if answer == "/skip":
                state = controller.skip_current_gap()
            elif answer == "/none":
                state = await controller.submit_response("", response_type="none")
            elif answer in ("/prev", "/next"):
                state = controller.navigate(answer[1:])
            elif answer.startswith("/goto"):
                state = controller.select_gap(int(answer.split()[1]) - 1)
            elif answer == "/done":
                state = controller.finalize()
            else:
                with console.status("Preparing an update..."):
                    state = await controller.submit_response(answer)
        except (AreteError, IndexError, ValueError) as exc:
            console.print(f"[yellow]{getattr(exc, 'message', exc)}[/yellow]")
            console.print(WALK_HELP)


@app.command()
def tailor(
    resume: Path = typer.Argument(help="Structured resume JSON"),
    jd: Path = typer.Option(None, "--jd", help="Job description text file"),
    analysis_file: Path = typer.Option(None, "--analysis", help="Reuse a saved analysis JSON"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to save the tailored resume"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Walk through each gap interactively and apply the accepted changes."""
    _setup_logging(verbose)
    if jd is None and analysis_file is None:
        console.print("[red]Provide --jd or --analysis.[/red]")
        raise typer.Exit(1)
    if analysis_file is None and not jd.exists():
        console.print(f"[red]Job description file not found: {jd}[/red]")
        raise typer.Exit(1)

    config = load_config()
    document = normalize_document(_load_json(resume))
    llm = LLMClient(timeout=config.llm.timeout, default_model=config.llm.model)
    try:
        if analysis_file is not None:
            analysis = GapAnalysisResult.model_validate(_load_json(analysis_file))
        else:
            analysis = _run_analysis(config, llm, document, jd.read_text(encoding="utf-8"))
    except AreteError as exc:
        _fail(exc)

    _print_analysis(analysis)
    console.print(WALK_HELP)

    registry = UpdateStrategyRegistry(SkillExtractor(llm, model=config.llm.extraction_model))
    controller = GapWalkController(document, ChangeProposalBuilder(registry))
    controller.start_gap_walk(analysis)
    start = time.monotonic()
    asyncio.run(_walk(controller))

    final = controller.state
    _record_session_usage(config, llm, "gap_walk", time.monotonic() - start, gap_count=len(final.gaps))
    console.print(
        Panel(
            f"Addressed: {len(final.addressed_ids)} | Skipped: {len(final.skipped_ids)}\n"
            f"Match: {analysis.summary.overall_match}% -> [bold green]{final.match_percentage}%[/bold green]",
            title="Tailoring complete",
        )
    )
    output = output or resume.with_name(f"{resume.stem}_tailored.json")
    _write_json(output, controller.document)
    console.print(f"[green]Tailored resume saved: {output}[/green]")


async def _interview(interviewer: ResumeInterviewer) -> None:
    while not interviewer.finished:
        answer = Prompt.ask("You").strip()
        if answer == "/done":
            return
        if not answer:
            continue
        try:
            with console.status("Arete is thinking..."):
                reply = await interviewer.reply(answer)
        except AreteError as exc:
            console.print(f"[yellow]{exc.message}[/yellow]")
            continue

        console.print(Panel(reply.display_text or "(no message)", title=f"Arete - {interviewer.step}"))
        if reply.change_proposal is not None:
            _show_proposal(reply.change_proposal)
            if Confirm.ask("Apply this change?", default=True):
                try:
                    interviewer.accept(reply.change_proposal)
                except ValueError as exc:
                    console.print(f"[yellow]Could not apply the change: {exc}[/yellow]")


@app.command()
def interview(
    resume: Path = typer.Argument(None, help="Structured resume JSON to start from"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to save the resume JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Build or complete a resume through a guided interview."""
    _setup_logging(verbose)
    config = load_config()
    document = normalize_document(_load_json(resume)) if resume is not None else {}
    llm = LLMClient(timeout=config.llm.timeout, default_model=config.llm.model)
    interviewer = ResumeInterviewer(
        llm, document, model=config.llm.model, timeout=config.analysis.timeout_seconds
    )

    console.print("[dim]Answer each question. Type /done to finish and save.[/dim]")
    console.print(Panel(OPENING_QUESTION, title="Arete - profile"))
    start = time.monotonic()
    asyncio.run(_interview(interviewer))
    _record_session_usage(config, llm, "interview", time.monotonic() - start)

    if output is None:
        output = resume.with_name(f"{resume.stem}_interview.json") if resume is not None else Path("resume.json")
    _write_json(output, interviewer.document)
    console.print(f"[green]Resume saved: {output}[/green]")


@app.command()
def usage() -> None:
    """Show usage statistics for analyses, gap walks and interviews."""
    config = load_config()
    stats = UsageStore(config.usage.resolved_db_path).get_stats()
    failures = ", ".join(f"{k}: {v}" for k, v in stats["failures"].items()) or "none"
    console.print(
        Panel(
            f"Runs: {stats['total_runs']} (success {stats['success_rate']:.0f}%)\n"
            f"Tokens: {stats['total_input_tokens']:,} in / {stats['total_output_tokens']:,} out\n"
            f"Estimated cost: ${stats['total_cost_usd']:.4f}\n"
            f"Average match: {stats['avg_overall_match'] if stats['avg_overall_match'] is not None else '-'}%\n"
            f"Failures: {failures}",
            title="Usage",
        )
    )


if __name__ == "__main__":
    app()
