#!/usr/bin/env python3
"""Run a survey in the terminal with the SurveyNavigator.

Drives one respondent session either against the YAML definitions on disk
(preview mode, nothing is persisted) or against a running survey server
(answers are stored through the REST API).

Answers are typed at the prompt.  ``:back`` returns to the previous
question, ``:quit`` aborts.  With ``--auto`` random valid answers are
chosen instead, so each run explores a different path through the rules.

Usage::

    # Preview a survey from surveys/
    python scripts/run_survey.py customer-pulse

    # Random walk through the branching, reproducible
    python scripts/run_survey.py customer-pulse --auto --seed 42

    # Run against a live server (answers are persisted)
    python scripts/run_survey.py customer-pulse --base-url http://localhost:8080 \\
        --email someone@example.com

    # List surveys on disk
    python scripts/run_survey.py --list
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
import time
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from survey_runtime.client import SurveyApiClient
from survey_runtime.models.question import (
    ChoiceQuestion,
    MultiSelectQuestion,
    Question,
    RatingQuestion,
    ScaleQuestion,
)
from survey_runtime.models.session import Stage
from survey_runtime.navigator import SurveyNavigator
from survey_runtime.store import SurveyStore

BACK = ":back"
QUIT = ":quit"

# Pool of free-text answers for --auto mode.
_RANDOM_TEXT_POOL = [
    "Works well for me",
    "Setup took longer than expected",
    "Nothing to add",
    "Please add dark mode",
    "",
]


# ---------------------------------------------------------------------------
# Answer input
# ---------------------------------------------------------------------------

def parse_answer(question: Question, raw: str) -> Any:
    """Turn prompt input into an answer value for ``question``.

    Numbers for scale/rating, an option label for choice (by label or
    1-based number), a list of labels for multi_select (comma-separated).
    Input that cannot be parsed is returned as-is so the navigator reports
    it as invalid.
    """
    raw = raw.strip()
    if not raw:
        return [] if isinstance(question, MultiSelectQuestion) else None

    if isinstance(question, (ScaleQuestion, RatingQuestion)):
        try:
            return int(raw)
        except ValueError:
            return raw

    if isinstance(question, ChoiceQuestion):
        return _option_label(question.options, raw)

    if isinstance(question, MultiSelectQuestion):
        return [_option_label(question.options, part.strip()) for part in raw.split(",") if part.strip()]

    return raw


def _option_label(options: list[str], token: str) -> str:
    if token.isdigit() and 1 <= int(token) <= len(options):
        return options[int(token) - 1]
    return token


def random_answer(question: Question, rng: random.Random) -> Any:
    """Produce a random valid answer for ``question``."""
    if isinstance(question, (ScaleQuestion, RatingQuestion)):
        return rng.randint(question.min, question.max)
    if isinstance(question, ChoiceQuestion):
        return rng.choice(question.options)
    if isinstance(question, MultiSelectQuestion):
        k = rng.randint(1, len(question.options))
        return rng.sample(question.options, k)
    text = rng.choice(_RANDOM_TEXT_POOL)
    if not text and question.required:
        text = _RANDOM_TEXT_POOL[0]
    return text


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_question(console: Console, navigator: SurveyNavigator) -> None:
    question = navigator.get_current_question()
    progress = navigator.get_progress()

    lines = [f"[bold]{question.text or question.id}[/]"]
    if isinstance(question, ScaleQuestion):
        low = f" ({question.min_label})" if question.min_label else ""
        high = f" ({question.max_label})" if question.max_label else ""
        lines.append(f"[dim]{question.min}{low} … {question.max}{high}[/]")
    elif isinstance(question, RatingQuestion):
        lines.append(f"[dim]{question.min}-{question.max} stars[/]")
    elif isinstance(question, (ChoiceQuestion, MultiSelectQuestion)):
        for i, option in enumerate(question.options, start=1):
            lines.append(f"  {i}. {option}")
        if isinstance(question, MultiSelectQuestion):
            lines.append("[dim]Select one or more, comma-separated[/]")

    current = navigator.get_current_answer()
    if current is not None:
        lines.append(f"[dim]Current answer: {current}[/]")

    required = "required" if question.required else "optional"
    console.print(Panel(
        "\n".join(lines),
        title=f"Question {progress.current_index}/{progress.total} · {required}",
        subtitle=f"{progress.percent}%",
    ))


def render_summary(console: Console, navigator: SurveyNavigator) -> None:
    table = Table(title=f"Answers: {navigator.title}", show_lines=True)
    table.add_column("Question", style="cyan")
    table.add_column("Answer")
    for qid, value in navigator.answers.items():
        table.add_row(qid, ", ".join(value) if isinstance(value, list) else str(value))
    console.print(table)


# ---------------------------------------------------------------------------
# Session loop
# ---------------------------------------------------------------------------

async def run_session(
    console: Console,
    navigator: SurveyNavigator,
    *,
    email: str,
    rng: random.Random | None,
) -> int:
    """Drive one session to completion.  Returns the process exit code."""
    await navigator.load()
    if navigator.get_stage() is Stage.ERROR:
        console.print(f"[red]{navigator.error_message}[/]")
        return 1

    console.print(Panel(navigator.survey.description or "", title=f"[bold]{navigator.title}[/]"))
    if rng is None and not Confirm.ask("Do you consent to take part in this survey?"):
        console.print("[yellow]Consent declined; nothing was recorded.[/]")
        return 0

    await navigator.accept_consent(email)
    if navigator.get_stage() is Stage.ERROR:
        console.print(f"[red]{navigator.error_message}[/]")
        return 1

    while navigator.get_stage() is Stage.IN_PROGRESS:
        render_question(console, navigator)
        question = navigator.get_current_question()

        if rng is not None:
            value: Any = random_answer(question, rng)
            console.print(f"[dim]auto:[/] {value!r}")
        else:
            raw = Prompt.ask("Answer", default="", show_default=False)
            if raw.strip() == QUIT:
                console.print("[yellow]Aborted.[/]")
                await navigator.wait_for_persistence()
                return 1
            if raw.strip() == BACK:
                navigator.go_back()
                continue
            value = parse_answer(question, raw)

        result = navigator.submit_answer(value)
        if not result.ok:
            message = "This question is required." if result.reason == "required" else result.detail
            console.print(f"[red]{message}[/]")
            continue
        navigator.advance()

    await navigator.wait_for_persistence()
    console.print("[bold green]Thank you, the survey is complete.[/]")
    render_summary(console, navigator)
    return 0


# ---------------------------------------------------------------------------
# CLI + async main
# ---------------------------------------------------------------------------

def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a survey in the terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("survey_id", nargs="?", help="Survey id (e.g. customer-pulse)")
    parser.add_argument(
        "--survey-dir",
        default=None,
        help="Directory of survey YAML files (default: surveys/ in the repo root)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Survey server URL; when set, answers are stored through the API",
    )
    parser.add_argument(
        "--email",
        default="respondent@example.com",
        help="Respondent email recorded with consent (default: respondent@example.com)",
    )
    parser.add_argument(
        "--auto",
        action="store_true",
        help="Answer with random valid values instead of prompting",
    )
    parser.add_argument(
        "--seed",
        type=int, default=None,
        help="RNG seed for --auto (default: current timestamp)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List surveys in the survey directory and exit",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show SDK log output",
    )
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    console = Console()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if args.list:
        store = SurveyStore(survey_dir=args.survey_dir)
        store.load()
        table = Table(title="Surveys")
        table.add_column("Id", style="cyan")
        table.add_column("Title")
        table.add_column("Status")
        table.add_column("Questions", justify="right")
        for sid, survey in sorted(store.surveys.items()):
            table.add_row(sid, survey.title, store.statuses[sid], str(len(survey.questions)))
        console.print(table)
        return 0

    if not args.survey_id:
        console.print("[red]A survey id is required (or use --list).[/]")
        return 2

    rng: random.Random | None = None
    if args.auto:
        seed = args.seed if args.seed is not None else int(time.time())
        rng = random.Random(seed)
        console.print(f"[dim]RNG seed: {seed}[/]")

    if args.base_url:
        async with SurveyApiClient(args.base_url) as api:
            if not await api.health_check():
                console.print(f"[red]Server at {args.base_url} is not reachable.[/]")
                return 1
            navigator = SurveyNavigator(args.survey_id, provider=api, sink=api, consent=api)
            return await run_session(console, navigator, email=args.email, rng=rng)

    store = SurveyStore(survey_dir=args.survey_dir)
    store.load()
    navigator = SurveyNavigator(args.survey_id, provider=store)
    return await run_session(console, navigator, email=args.email, rng=rng)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
