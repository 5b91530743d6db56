"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from career_match.clients.llm_client import LLMClient
from career_match.config import AppConfig, load_config
from career_match.errors import CareerMatchError
from career_match.models.artifact import ArtifactKind, CoverLetter, CvAssessment
from career_match.models.profile import CandidateProfile
from career_match.parsers.document_parser import parse_document
from career_match.parsers.sanitizer import preview, sanitize_text
from career_match.pipeline.workflow import (
    ArtifactStatus,
    StepOutcome,
    WorkflowController,
    WorkflowState,
)

app = typer.Typer(
    name="career-match",
    help="Resume → profile → matching jobs → cover letters and CV tips",
    no_args_is_help=True,
)
console = Console()

JOB_TYPES = ("both", "intern", "full")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_controller(config: AppConfig) -> WorkflowController:
    llm = LLMClient(
        timeout=config.llm.timeout,
        model=config.llm.model,
        max_retries=config.llm.max_retries,
    )
    return WorkflowController(llm, config=config)


def _fail(outcome: StepOutcome) -> None:
    console.print(f"[red]⚠ {outcome.error}[/red]")
    raise typer.Exit(1)


def _print_profile(profile: CandidateProfile, fallback: bool = False) -> None:
    body = (
        f"[bold]{profile.name}[/bold], {profile.current_role}\n"
        f"Experience: {profile.experience_years:g} yrs | Education: {profile.education}\n"
        f"Skills: {', '.join(profile.skills[:14]) or '-'}\n\n"
        f"{profile.summary}"
    )
    if fallback:
        body += "\n\n[yellow]Basic profile: the resume could not be fully analyzed.[/yellow]"
    console.print(Panel(body, title="Profile"))


def _print_listings(controller: WorkflowController) -> None:
    table = Table(title="Matching jobs")
    table.add_column("#", justify="right")
    table.add_column("Role")
    table.add_column("Company")
    table.add_column("Type")
    table.add_column("Location")
    table.add_column("Match", justify="right")
    table.add_column("Ready")
    for job in controller.session.listings:
        score = f"[bold]{job.match_score}%[/bold]" if job.is_strong_match else f"{job.match_score}%"
        ready = []
        if controller.artifact(job.id, ArtifactKind.COVER_LETTER):
            ready.append("letter")
        if controller.artifact(job.id, ArtifactKind.CV_ASSESSMENT):
            ready.append("tips")
        table.add_row(
            str(job.id), job.title, job.organization, job.category,
            job.location, score, ", ".join(ready),
        )
    console.print(table)


def _print_artifact(artifact) -> None:
    if isinstance(artifact, CoverLetter):
        console.print(Panel(artifact.text, title="Cover letter"))
        return
    if not isinstance(artifact, CvAssessment):
        return
    lines = [artifact.overall_fit, ""]
    if artifact.missing_skills:
        lines.append(f"Missing skills: {', '.join(artifact.missing_skills)}")
    if artifact.missing_keywords:
        lines.append(f"Missing keywords: {', '.join(artifact.missing_keywords)}")
    for s in artifact.sections_to_add:
        lines.append(f"+ {s.section}: {s.why}")
    for imp in artifact.improvements:
        lines.append(f"* {imp.area}: {imp.tip}")
    console.print(Panel("\n".join(lines), title="CV tips"))


async def _interactive(controller: WorkflowController) -> None:
    console.print(
        "[dim]Commands: letter N | tips N | show N | list | back | search | usage | quit[/dim]"
    )
    while True:
        raw = Prompt.ask(f"[{controller.state.label}]").strip()
        cmd, _, arg = raw.partition(" ")
        cmd = cmd.lower()
        if cmd in ("quit", "q", "exit"):
            return
        if cmd == "list":
            _print_listings(controller)
        elif cmd in ("letter", "tips"):
            if not arg.isdigit():
                console.print("[yellow]Usage: letter N / tips N[/yellow]")
                continue
            kind = ArtifactKind.COVER_LETTER if cmd == "letter" else ArtifactKind.CV_ASSESSMENT
            with console.status("Generating…"):
                outcome = await controller.generate_artifact(int(arg), kind)
            if outcome.status is ArtifactStatus.READY:
                _print_artifact(outcome.artifact)
            else:
                console.print(f"[red]⚠ {outcome.error}[/red]")
        elif cmd == "show" and arg.isdigit():
            job = controller.listing(int(arg))
            if job is None:
                console.print("[yellow]No such listing.[/yellow]")
                continue
            console.print(Panel(
                f"{job.description}\n\nNeeds: {', '.join(job.key_requirements)}\n"
                f"{job.source_label} · {job.posted_label}\n{job.apply_url or ''}",
                title=f"{job.title} @ {job.organization}",
            ))
        elif cmd == "back":
            controller.back()
        elif cmd == "search":
            if controller.state is WorkflowState.OPPORTUNITIES:
                controller.back()
            with console.status("Finding matching jobs…"):
                outcome = await controller.find_opportunities()
            if outcome.error:
                console.print(f"[red]⚠ {outcome.error}[/red]")
            else:
                _print_listings(controller)
        elif cmd == "usage":
            usage = controller.session.usage
            console.print(
                f"{usage.total_input_tokens} input / {usage.total_output_tokens} output tokens, "
                f"~${usage.estimated_cost_usd:.4f}"
            )
        else:
            console.print("[yellow]Unknown command.[/yellow]")


async def _run_match(
    controller: WorkflowController, resume: Path, interactive: bool
) -> None:
    outcome = controller.load_document(resume.read_bytes(), resume.name)
    if outcome.error:
        _fail(outcome)
    controller.advance()

    with console.status("Analyzing resume…"):
        outcome = await controller.analyze_profile()
    if outcome.error:
        _fail(outcome)
    _print_profile(controller.session.profile, controller.session.profile_is_fallback)

    with console.status("Finding matching jobs worldwide…"):
        outcome = await controller.find_opportunities()
    if outcome.error:
        _fail(outcome)
    _print_listings(controller)

    if interactive:
        await _interactive(controller)


@app.command()
def match(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT)"),
    job_type: str = typer.Option("both", "--type", help="both | intern | full"),
    query: str = typer.Option("", "--query", "-q", help='Role you want, e.g. "backend dev remote"'),
    email: str = typer.Option("", "--email", help="Email for cover letters"),
    linkedin: str = typer.Option("", "--linkedin", help="LinkedIn URL for cover letters"),
    interactive: bool = typer.Option(True, "--interactive/--no-interactive", help="Stay in the job list"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Analyze a resume, find matching jobs and generate letters/tips on demand."""
    _setup_logging(verbose)
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)
    if job_type not in JOB_TYPES:
        console.print(f"[red]--type must be one of {', '.join(JOB_TYPES)}[/red]")
        raise typer.Exit(1)

    controller = _build_controller(load_config())
    controller.update_preferences(job_type=job_type, query=query, email=email, linkedin=linkedin)
    asyncio.run(_run_match(controller, resume, interactive))


@app.command()
def profile(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Extract and show the candidate profile only."""
    _setup_logging(verbose)
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)

    controller = _build_controller(load_config())
    outcome = controller.load_document(resume.read_bytes(), resume.name)
    if outcome.error:
        _fail(outcome)
    controller.advance()
    with console.status("Analyzing resume…"):
        outcome = asyncio.run(controller.analyze_profile())
    if outcome.error:
        _fail(outcome)
    _print_profile(controller.session.profile, controller.session.profile_is_fallback)


@app.command()
def check(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT)"),
) -> None:
    """Show what text would be sent for analysis (no API calls)."""
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)
    limits = load_config().sanitizer
    try:
        raw = parse_document(resume, max_bytes=limits.max_upload_bytes)
        text = sanitize_text(raw, max_chars=limits.max_chars, min_chars=limits.min_chars)
    except CareerMatchError as exc:
        console.print(f"[red]⚠ {exc}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{len(text)} characters usable[/green] (raw {len(raw)})")
    console.print(f"[dim]{preview(text)}[/dim]")


if __name__ == "__main__":
    app()
