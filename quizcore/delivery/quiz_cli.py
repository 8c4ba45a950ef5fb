"""
quizcore: Main CLI for adaptive quiz practice.

A Rich terminal interface over the adaptive selection and mastery engine.

Commands:
- quizcore calibrate  - Pick a starter tier (once per learner)
- quizcore practice   - One question at a time with feedback
- quizcore test       - Timed full test, single submission
- quizcore stats      - Mastery by level and topic
- quizcore reset      - Clear learner state
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from quizcore.config import get_settings
from quizcore.core.calibration import StarterTier
from quizcore.core.errors import QuestionBankError
from quizcore.core.mastery import MasteryLevel, format_progress_bar
from quizcore.core.question import Choice, Question
from quizcore.study.session import AnswerFeedback, SessionResult, SessionState
from quizcore.study.study_service import StudyService

from .question_bank import QuestionBank, load_bank_dir
from .state_store import StateStore

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="quizcore",
    help="quizcore: adaptive quiz practice",
    no_args_is_help=True,
)
console = Console()

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "difficulty": {
        "easy": "green",
        "medium": "yellow",
        "hard": "red",
    },
}

CHOICES = [c.value for c in Choice]


# =============================================================================
# Loading
# =============================================================================

def _load_bank(bank: Optional[Path], cluster: Optional[str]) -> QuestionBank:
    """Load one question bank from a file or a directory of banks."""
    settings = get_settings()
    path = bank or settings.bank_dir

    try:
        if path.is_file():
            return QuestionBank.load(path)
    except QuestionBankError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    banks = load_bank_dir(path)
    if not banks:
        console.print(f"\n[red]No question banks found in {path.absolute()}[/red]")
        raise typer.Exit(1)

    name = cluster or settings.default_cluster or next(iter(banks))
    if name not in banks:
        console.print(f"[red]Unknown cluster '{name}'.[/red] Available: {', '.join(banks)}")
        raise typer.Exit(1)
    return banks[name]


def _open_service(bank: Optional[Path], cluster: Optional[str]) -> StudyService:
    """Load the bank, merge stored mastery, and calibrate on first run."""
    settings = get_settings()
    question_bank = _load_bank(bank, cluster)
    service = StudyService(StateStore(settings.resolved_db_path))

    if service.needs_calibration():
        tier = _ask_tier()
        service.calibrate(question_bank.questions, tier)
    else:
        service.load_pool(question_bank.questions)

    console.print(
        f"\n[bold cyan]{question_bank.cluster}[/bold cyan]  "
        f"[dim]{len(service.pool)} questions, v{question_bank.version}[/dim]"
    )
    return service


def _ask_tier() -> StarterTier:
    console.print(Panel("Choose your starting level", border_style="cyan"))
    for tier in StarterTier:
        console.print(f"  [bold]{tier.value}[/bold]  [dim]{tier.description}[/dim]")
    value = Prompt.ask("Starter tier", choices=[t.value for t in StarterTier], default="intermediate")
    return StarterTier(value)


def _ask_length(service: StudyService, count: Optional[int]) -> int:
    lengths = [str(n) for n in service.session_lengths]
    if count is not None:
        if str(count) not in lengths:
            console.print(f"[red]--count must be one of {', '.join(lengths)}[/red]")
            raise typer.Exit(1)
        return count
    return int(Prompt.ask("How many questions?", choices=lengths, default=lengths[0]))


# =============================================================================
# Display Helpers
# =============================================================================

def display_question(question: Question, index: int, total: int, selected: Choice | None = None) -> None:
    """Display a question with its choices."""
    color = STYLES["difficulty"].get(question.difficulty.value, "white")
    header = (
        f"Question {index}/{total}  |  {question.topic}  |  "
        f"[{color}]{question.difficulty.value}[/{color}]"
    )

    content = question.prompt + "\n"
    for choice in Choice:
        marker = "[bold cyan]>[/bold cyan]" if choice == selected else " "
        content += f"\n{marker} {choice.value}. {question.choices[choice]}"

    console.print(Panel(content, title=header, title_align="left", border_style="cyan", padding=(1, 2)))


def display_feedback(feedback: AnswerFeedback) -> None:
    """Reveal the correct answer and explanations."""
    if feedback.is_correct:
        style, title = STYLES["correct"], "Correct!"
    else:
        style, title = STYLES["incorrect"], "Incorrect"

    content = f"Correct answer: [bold]{feedback.correct_choice.value}[/bold]\n\n"
    content += f"[bold]Explanation for your answer:[/bold] {feedback.selected_explanation}\n"
    if not feedback.is_correct:
        content += f"\n[bold]Why the correct answer is right:[/bold] {feedback.correct_explanation}\n"
    content += f"\n[dim]Mastery {feedback.mastery_before:.0f} -> {feedback.mastery_after:.0f}[/dim]"

    console.print(Panel(content, title=title, border_style=style, padding=(1, 2)))


def display_result(result: SessionResult) -> None:
    """Show the session summary."""
    table = Table(title="Session Summary", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Score", f"{result.correct} / {result.total}  ({result.score_percent:.1f}%)")
    table.add_row("Answered", str(result.answered))
    if result.unanswered:
        table.add_row("Unanswered", f"[yellow]{result.unanswered}[/yellow]")
    if result.timed_out:
        table.add_row("Ended", "[red]Time expired[/red]")
    console.print()
    console.print(table)


# =============================================================================
# Commands
# =============================================================================

@app.command()
def calibrate(
    tier: StarterTier = typer.Option(..., "--tier", "-t", help="Starter tier"),
    bank: Optional[Path] = typer.Option(None, "--bank", "-b", help="Bank file or directory"),
    cluster: Optional[str] = typer.Option(None, "--cluster", "-c", help="Cluster name"),
) -> None:
    """
    Choose the starter tier and calibrate initial mastery.

    Has no effect on mastery once the learner has stored state.
    """
    settings = get_settings()
    question_bank = _load_bank(bank, cluster)
    service = StudyService(StateStore(settings.resolved_db_path))

    if not service.needs_calibration():
        current = service.starter_tier
        console.print(
            f"[yellow]Already calibrated[/yellow] "
            f"({current.value if current else 'existing mastery'}). Use 'reset' to start over."
        )
        raise typer.Exit(0)

    service.calibrate(question_bank.questions, tier)
    console.print(f"[green]Calibrated {len(service.pool)} questions for '{tier.value}'.[/green]")


@app.command()
def practice(
    bank: Optional[Path] = typer.Option(None, "--bank", "-b", help="Bank file or directory"),
    cluster: Optional[str] = typer.Option(None, "--cluster", "-c", help="Cluster name"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of questions"),
) -> None:
    """
    Practice with immediate feedback after every answer.
    """
    service = _open_service(bank, cluster)
    session = service.start_practice()
    session.choose_length(_ask_length(service, count))

    if session.state == SessionState.COMPLETE:
        console.print("[yellow]No questions available.[/yellow]")
        raise typer.Exit(0)

    try:
        while session.state == SessionState.AWAITING_ANSWER:
            index, total = session.progress
            console.print()
            display_question(session.current_question, index, total)

            answer = Prompt.ask("Your answer", choices=CHOICES, case_sensitive=False)
            display_feedback(session.submit_answer(answer.upper()))

            if index < total:
                Prompt.ask("[dim]Press Enter for next question[/dim]", default="", show_default=False)
            session.advance()

    except KeyboardInterrupt:
        console.print("\n\n[yellow]Session interrupted.[/yellow]")

    display_result(session.finish())
    service.finish_session(session)


@app.command()
def test(
    bank: Optional[Path] = typer.Option(None, "--bank", "-b", help="Bank file or directory"),
    cluster: Optional[str] = typer.Option(None, "--cluster", "-c", help="Cluster name"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of questions"),
    minutes: Optional[int] = typer.Option(None, "--minutes", "-m", min=1, help="Time limit"),
) -> None:
    """
    Take a timed full test.

    Navigate freely and change answers until you submit. The test is
    submitted automatically when time runs out.
    """
    service = _open_service(bank, cluster)
    if minutes is not None:
        service.full_test_seconds = minutes * 60

    session = service.start_full_test()
    session.choose_length(_ask_length(service, count))

    console.print(f"\n[bold]{session.total} questions, {service.full_test_seconds // 60} minutes.[/bold]")
    console.print("[dim]No feedback until you submit.[/dim]")
    if not Confirm.ask("Start test?", default=True):
        session.abandon()
        raise typer.Exit(0)

    timer = session.start(realtime=True)

    try:
        while session.state == SessionState.IN_PROGRESS and session.total:
            index = session.current_index
            console.print()
            console.print(
                f"[bold]Time left {timer.format_remaining()}[/bold]  "
                f"[dim]{session.answered_count}/{session.total} answered[/dim]"
            )
            display_question(session.current_question, index + 1, session.total, session.answers[index])

            command = Prompt.ask(
                "[dim]A-D answer, n next, p prev, g goto, s submit[/dim]",
                default="n",
            ).strip().lower()

            if session.state != SessionState.IN_PROGRESS:
                break

            if command.upper() in CHOICES:
                session.select_answer(index, command.upper())
                if index < session.total - 1:
                    session.next()
            elif command == "n":
                session.next()
            elif command == "p":
                session.previous()
            elif command == "g":
                target = IntPrompt.ask("Question number", default=index + 1)
                if 1 <= target <= session.total:
                    session.go_to(target - 1)
            elif command == "s":
                if Confirm.ask("Submit the test? You cannot go back.", default=False):
                    session.submit()

    except KeyboardInterrupt:
        console.print("\n\n[yellow]Test abandoned.[/yellow]")
        session.abandon()
        raise typer.Exit(1)

    if session.state == SessionState.IN_PROGRESS:
        session.submit()
    if session.state == SessionState.TIMED_OUT:
        console.print("\n[red]Time is up - your test was submitted.[/red]")

    display_result(session.result)
    _display_review(session.review())
    service.finish_session(session)


def _display_review(outcomes) -> None:
    table = Table(title="Review")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Question")
    table.add_column("Yours")
    table.add_column("Correct")
    table.add_column("Mastery")

    for i, outcome in enumerate(outcomes, 1):
        yours = outcome.selected.value if outcome.selected else "[yellow]-[/yellow]"
        style = "green" if outcome.is_correct else "red"
        table.add_row(
            str(i),
            outcome.question_id,
            f"[{style}]{yours}[/{style}]",
            outcome.correct_choice.value,
            f"{outcome.mastery_before:.0f} -> {outcome.mastery_after:.0f}",
        )
    console.print(table)


@app.command()
def stats(
    bank: Optional[Path] = typer.Option(None, "--bank", "-b", help="Bank file or directory"),
    cluster: Optional[str] = typer.Option(None, "--cluster", "-c", help="Cluster name"),
) -> None:
    """
    Show mastery by level and topic.
    """
    settings = get_settings()
    question_bank = _load_bank(bank, cluster)
    service = StudyService(StateStore(settings.resolved_db_path))
    service.load_pool(question_bank.questions)
    summary = service.stats()

    console.print(f"\n[bold]Questions:[/bold] {summary.total_questions}")
    console.print(f"[bold]Answered:[/bold] {summary.total_answered}")
    console.print(f"[bold]Accuracy:[/bold] {summary.accuracy:.1f}%")
    console.print(
        f"[bold]Average mastery:[/bold] {format_progress_bar(summary.average_mastery)} "
        f"{summary.average_mastery:.1f}"
    )

    levels = Table(title="By Level")
    levels.add_column("Level")
    levels.add_column("Questions", justify="right")
    for level in MasteryLevel:
        levels.add_row(
            f"[{level.color}]{level.display_name}[/{level.color}]",
            str(summary.by_level.get(level, 0)),
        )
    console.print(levels)

    topics = Table(title="By Topic")
    topics.add_column("Topic")
    topics.add_column("Mastery")
    for topic, mastery in summary.by_topic.items():
        topics.add_row(topic, f"{format_progress_bar(mastery)} {mastery:.0f}")
    console.print(topics)


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """
    Clear mastery, answer history and starter tier.
    """
    if not yes and not Confirm.ask("Clear all learner state?", default=False):
        raise typer.Exit(0)

    StateStore(get_settings().resolved_db_path).reset()
    console.print("[green]Learner state cleared.[/green]")


# =============================================================================
# Entry Point
# =============================================================================

def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level.upper(),
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
