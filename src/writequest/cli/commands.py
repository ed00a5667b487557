"""CLI commands for WriteQuest.

Commands:
- init-db: Create the SQLite database
- seed-demo: Create demo student, teacher and parent accounts
- achievements: Show a student's achievement status
- analyze: Run AI feedback on a text file
- serve: Start the web API
"""

from dataclasses import replace
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from writequest.config.app_config import load_app_config
from writequest.core.achievements import get_all_achievements, is_unlocked
from writequest.core.feedback import (
    WritingAnalysisError,
    analyze_writing,
    generate_suggested_exercises,
)
from writequest.core.progress_service import default_progress, snapshot_for
from writequest.core.skills import SkillMastery
from writequest.db import links_repository, progress_repository, submissions_repository, users_repository
from writequest.db.database import init_db
from writequest.llm.client import PROVIDER_DEFAULTS, LLMClient, LLMConfig
from writequest.utils.security import hash_password

app = typer.Typer(
    name="writequest",
    help="Gamified writing practice with AI-assisted feedback.",
    no_args_is_help=True,
)

console = Console()

DEMO_PASSWORD = "password"

DEMO_SUBMISSION = """Dear Editor,

I am writing to express my concern about the lack of recycling facilities in our community. \
As a student at Westlake Middle School, I've learned about the importance of environmental \
conservation, but I've noticed that our community doesn't provide adequate resources for recycling.

I propose that the city council install recycling bins alongside existing trash containers in \
public spaces and establish a monthly curbside recycling pickup program.

Thank you for considering this important matter.

Sincerely,
A concerned student"""


def _open_database(db: Path | None) -> Path:
    """Initialize the configured database (or ``db``) and return its path."""
    path = db or load_app_config().database_path
    init_db(path)
    return path


def _build_client(provider: str | None, model: str | None) -> LLMClient:
    settings = load_app_config().llm
    if provider:
        # A different provider brings its own endpoint and key defaults
        settings = replace(settings, provider=provider, base_url=None)
    return LLMClient(config=LLMConfig.from_settings(settings), model=model)


@app.command(name="init-db")
def init_db_command(
    db: Path | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Create the database schema."""
    path = _open_database(db)
    console.print(f"[green]✓ Database ready[/green] [dim]{path}[/dim]")


@app.command(name="seed-demo")
def seed_demo(
    db: Path | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Create a demo student with sample progress, plus a linked teacher and parent."""
    _open_database(db)

    if users_repository.get_user_by_username("demo") is not None:
        console.print("[yellow]⚠ Demo data already present[/yellow]")
        raise typer.Exit(code=0)

    student = users_repository.create_user(
        username="demo",
        password=hash_password(DEMO_PASSWORD),
        display_name="Demo User",
        age=13,
        grade=7,
    )

    progress = default_progress(student.id)
    progress.skill_mastery = SkillMastery(mechanics=35, sequencing=25, voice=15)
    progress.completed_exercises = ["mechanics-1", "mechanics-2", "sequencing-1"]
    progress.completed_quests = ["town-hall-1"]
    progress.unlocked_locations = ["townHall", "library", "amphitheater"]
    progress.level = 2
    progress.currency = 45
    progress.achievements = ["first-steps", "quest-beginner", "mechanics-apprentice"]
    progress_repository.insert_progress(progress)

    submissions_repository.insert_submission(
        student.id, "town-hall-1", "Improving Our Community Parks", DEMO_SUBMISSION
    )

    for username, display_name, role in (
        ("demo-teacher", "Demo Teacher", "teacher"),
        ("demo-parent", "Demo Parent", "parent"),
    ):
        guardian = users_repository.create_user(
            username=username,
            password=hash_password(DEMO_PASSWORD),
            display_name=display_name,
            role=role,
        )
        links_repository.link_student(guardian.id, student.id, role)

    console.print("[green]✓ Demo data created[/green]")
    console.print(f"  [dim]accounts:[/dim] demo, demo-teacher, demo-parent (password: {DEMO_PASSWORD})")


@app.command()
def achievements(
    username: str = typer.Argument(..., help="Student username"),
    db: Path | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Show which achievements a student has earned or could claim."""
    _open_database(db)

    user = users_repository.get_user_by_username(username)
    if user is None:
        console.print(f"[red]✗ User not found: {username}[/red]")
        raise typer.Exit(code=1)

    progress = progress_repository.get_progress_by_user_id(user.id)
    if progress is None:
        console.print(f"[yellow]⚠ {username} has no progress yet[/yellow]")
        raise typer.Exit(code=1)

    snapshot = snapshot_for(progress)
    table = Table(title=f"Achievements for {user.display_name}")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Category", style="dim")
    table.add_column("Status")

    for achievement in get_all_achievements():
        if achievement.id in progress.achievements:
            state = "[green]earned[/green]"
        elif is_unlocked(achievement.requirements, snapshot):
            state = "[yellow]ready[/yellow]"
        else:
            state = "[dim]locked[/dim]"
        table.add_row(achievement.id, achievement.title, achievement.category, state)

    console.print(table)


@app.command()
def analyze(
    file: Path = typer.Argument(..., help="Text file with the writing sample"),
    title: str = typer.Option("Untitled", "--title", "-t", help="Title of the piece"),
    quest: str = typer.Option("town-hall-1", "--quest", "-q", help="Quest ID"),
    grade: int = typer.Option(7, "--grade", "-g", min=1, max=12, help="Student grade level"),
    provider: str | None = typer.Option(None, "--provider", help="LLM provider override"),
    model: str | None = typer.Option(None, "--model", "-m", help="LLM model override"),
) -> None:
    """Analyze a writing sample and print structured feedback."""
    if not file.exists():
        console.print(f"[red]✗ File not found: {file}[/red]")
        raise typer.Exit(code=1)

    if provider and provider not in PROVIDER_DEFAULTS:
        console.print(f"[red]✗ Unknown provider: {provider}[/red] [dim](choose from {', '.join(PROVIDER_DEFAULTS)})[/dim]")
        raise typer.Exit(code=1)

    content = file.read_text(encoding="utf-8")
    client = _build_client(provider, model)
    if not client.is_configured():
        console.print("[yellow]⚠ No API key configured, using generic feedback[/yellow]")

    console.print(f"[blue]Analyzing {file.name} ({len(content.split())} words)...[/blue]")
    try:
        analysis = analyze_writing(title, content, quest, grade, client)
    except WritingAnalysisError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    feedback = analysis.feedback
    suggested = generate_suggested_exercises(feedback, analysis.skills_assessed, client)

    console.print(f"\n[bold]Overall:[/bold] {feedback.overall_feedback}")
    console.print(f"[bold]Strengths:[/bold] {feedback.strengths_analysis}")
    console.print(f"[bold]To improve:[/bold] {feedback.areas_to_improve}")

    scores = Table(show_header=True)
    scores.add_column("Skill")
    scores.add_column("Score", justify="right")
    scores.add_column("Suggestions")
    for skill, score in (
        ("mechanics", feedback.mechanics_score),
        ("sequencing", feedback.sequencing_score),
        ("voice", feedback.voice_score),
    ):
        scores.add_row(skill, str(score), "\n".join(feedback.suggestions[skill]))
    console.print(scores)

    console.print(f"[bold]Next steps:[/bold] {feedback.next_steps}")
    console.print(f"[bold]Suggested exercises:[/bold] {', '.join(suggested)}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Start the web API with uvicorn."""
    console.print(f"[blue]Serving WriteQuest API on http://{host}:{port}[/blue]")
    uvicorn.run("writequest.web.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
