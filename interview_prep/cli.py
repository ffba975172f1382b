"""CLI interface for the Interview Prep platform."""

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .container import ServiceContainer, build_services
from .models.interview import FeedbackResult, InterviewSession
from .models.user import User
from .services.configuration_manager import ConfigurationManager
from .services.storage_manager import StorageManager
from .utils.exceptions import InterviewPrepError
from .utils.logging import get_logger, setup_logging

T = TypeVar("T")

console = Console()
logger = get_logger("cli")

email_option = click.option("--email", "-e", required=True, help="Account email")
password_option = click.option("--password", "-p", prompt=True, hide_input=True, help="Account password")


@click.group()
@click.version_option(version="1.0.0")
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration directory path")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--data-dir", "-d", type=click.Path(), help="Override the storage directory")
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool, data_dir: Optional[str]):
    """Interview Prep - mock interviews, resume scoring and progress tracking."""
    ctx.ensure_object(dict)

    try:
        config_manager = ConfigurationManager(config or "config")
        config_manager.initialize()
    except InterviewPrepError as e:
        console.print(f"[red]Failed to load configuration: {e.message}[/red]")
        sys.exit(1)

    logging_config = config_manager.get_logging_config()
    if verbose:
        logging_config["level"] = "DEBUG"
    setup_logging(**logging_config)

    if data_dir:
        config_manager.get_config().storage.base_path = data_dir
    ctx.obj["config_manager"] = config_manager
    logger.info("CLI initialized successfully")


def _run(ctx: click.Context, action: Callable[[ServiceContainer], Awaitable[T]]) -> T:
    """Run an async action against freshly started services, exiting 1 on domain errors."""

    async def runner() -> T:
        config_manager = ctx.obj["config_manager"]
        storage = StorageManager(**config_manager.get_storage_config())
        services = build_services(config_manager.get_config(), storage=storage)
        await services.start()
        try:
            return await action(services)
        finally:
            await services.close()

    try:
        return asyncio.run(runner())
    except InterviewPrepError as e:
        console.print(f"[red]{e.public_message}[/red]")
        logger.error(f"Command failed: {e}")
        sys.exit(1)


def _require_feature(ctx: click.Context, feature_name: str) -> None:
    if not ctx.obj["config_manager"].is_feature_enabled(feature_name):
        console.print(f"[red]The {feature_name} feature is disabled[/red]")
        sys.exit(1)


async def _login(services: ServiceContainer, email: str, password: str) -> User:
    user, _ = await services.accounts.login(email, password)
    return user


@cli.command()
@click.option("--name", "-n", required=True, help="Display name")
@email_option
@click.password_option("--password", "-p", help="Account password")
@click.pass_context
def register(ctx: click.Context, name: str, email: str, password: str):
    """Create a new account."""

    async def action(services: ServiceContainer) -> User:
        user, _ = await services.accounts.register(name, email, password)
        return user

    user = _run(ctx, action)
    console.print(Panel(
        f"Welcome, {user.name}!\nLevel: {user.level.value} | XP: {user.xp_points}",
        title="Account created",
        border_style="green",
    ))


@cli.command("start-interview")
@email_option
@password_option
@click.option("--role", "-r", required=True, help="Target job role")
@click.option("--job-description", "-j", type=click.Path(exists=True), help="Path to a job description file")
@click.pass_context
def start_interview(ctx: click.Context, email: str, password: str, role: str, job_description: Optional[str]):
    """Run a mock interview and show its feedback."""
    job_text = Path(job_description).read_text(encoding="utf-8") if job_description else ""

    async def action(services: ServiceContainer) -> FeedbackResult:
        user = await _login(services, email, password)
        session = await services.orchestrator.start_interview(user.id, role, job_text)
        console.print(Panel(
            f"Role: {session.role}\nQuestions: {session.question_count}",
            title="Interview started",
            border_style="blue",
        ))
        await _interview_loop(services, user, session)
        return await services.orchestrator.generate_feedback(user.id, session.id)

    result = _run(ctx, action)
    _print_feedback(result)


async def _interview_loop(services: ServiceContainer, user: User, session: InterviewSession) -> None:
    """Ask each question in order; a blank response skips it."""
    for index, question in enumerate(session.questions):
        console.print(Panel(
            question.text,
            title=f"Question {index + 1}/{session.question_count}",
            border_style="green",
        ))
        response = click.prompt("Your answer (blank to skip)", default="", show_default=False)
        if not response.strip():
            console.print("[yellow]Question skipped.[/yellow]")
            continue
        await services.orchestrator.submit_answer(user.id, session.id, index, response)


def _print_feedback(result: FeedbackResult) -> None:
    feedback = result.feedback
    table = Table(title="Scores")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Clarity", str(feedback.clarity))
    table.add_row("Confidence", str(feedback.confidence))
    table.add_row("Filler words", str(feedback.filler_words))
    table.add_row("Keyword usage", str(feedback.keyword_usage))
    table.add_row("Emotion", feedback.emotion.value)
    table.add_row("Overall", str(feedback.overall_score))
    console.print(table)

    suggestions = "\n".join(f"- {s}" for s in feedback.suggestions)
    console.print(Panel(f"{result.summary}\n\n{suggestions}", title="Feedback", border_style="cyan"))


@cli.command()
@email_option
@password_option
@click.pass_context
def dashboard(ctx: click.Context, email: str, password: str):
    """Show progress, level and badges."""

    async def action(services: ServiceContainer):
        user = await _login(services, email, password)
        return await services.accounts.get_dashboard(user.id)

    summary = _run(ctx, action)

    table = Table(title="Dashboard")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Interviews", str(summary.interview_count))
    table.add_row("Completed", str(summary.completed_interview_count))
    table.add_row("Average score", str(summary.average_score))
    table.add_row("Progress level", summary.progress_level.value)
    table.add_row("Account level", summary.account_level.value)
    table.add_row("XP", str(summary.xp_points))
    table.add_row("Resumes", str(summary.resume_count))
    table.add_row("Latest ATS score", "-" if summary.latest_ats_score is None else str(summary.latest_ats_score))
    console.print(table)

    if summary.badges:
        console.print(Panel(
            "\n".join(f"{b.name}: {b.description}" for b in summary.badges),
            title="Badges",
            border_style="magenta",
        ))
    for role, count in sorted(summary.interviews_by_role.items()):
        console.print(f"{role}: {count}")


@cli.command("upload-resume")
@email_option
@password_option
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def upload_resume(ctx: click.Context, email: str, password: str, path: str):
    """Upload a PDF or Word resume."""
    _require_feature(ctx, "resume_analysis")
    resume_file = Path(path)
    content = resume_file.read_bytes()

    async def action(services: ServiceContainer):
        user = await _login(services, email, password)
        return await services.resume_analyzer.upload(user.id, resume_file.name, content)

    resume = _run(ctx, action)
    console.print(Panel(
        f"ID: {resume.id}\nFile: {resume.file_url}\nSkills: {', '.join(resume.skills)}",
        title="Resume uploaded",
        border_style="green",
    ))


@cli.command("analyze-resume")
@email_option
@password_option
@click.argument("resume_id")
@click.option("--role", "-r", required=True, help="Job role to compare against")
@click.pass_context
def analyze_resume(ctx: click.Context, email: str, password: str, resume_id: str, role: str):
    """Score an uploaded resume against a job role."""
    _require_feature(ctx, "resume_analysis")

    async def action(services: ServiceContainer):
        user = await _login(services, email, password)
        return await services.resume_analyzer.analyze(user.id, resume_id, role)

    analysis = _run(ctx, action)
    lines = [
        f"ATS score: {analysis.ats_score}",
        f"Keyword match: {analysis.keyword_match}",
        "",
        *[f"- {s}" for s in analysis.improvement_suggestions],
    ]
    console.print(Panel("\n".join(lines), title="Resume analysis", border_style="cyan"))


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int):
    """Serve the HTTP API."""
    import uvicorn

    from .api import create_app

    app = create_app(ctx.obj["config_manager"], configure_logging=False)
    console.print(f"[green]Serving on http://{host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port, log_level="info")


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        sys.exit(0)


if __name__ == "__main__":
    main()
