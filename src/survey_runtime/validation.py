"""Answer validation — required-field and per-kind checks.

Used by the navigator before an answer is stored and by the response
service before an item is persisted, so both sides agree on what a valid
answer looks like.
"""

from __future__ import annotations

from typing import Any

from survey_runtime.models.question import (
    ChoiceQuestion,
    MultiSelectQuestion,
    Question,
    RatingQuestion,
    ScaleQuestion,
    TextQuestion,
)
from survey_runtime.models.session import SubmitResult


def is_empty(value: Any) -> bool:
    """True for an absent answer: None, a blank string or an empty list."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def check_answer(question: Question, value: Any) -> SubmitResult:
    """Validate ``value`` for ``question``.

    Empty values are accepted for optional questions and rejected with
    reason ``"required"`` otherwise.  Non-empty values must fit the
    question kind or are rejected with reason ``"invalid"``.
    """
    if is_empty(value):
        if question.required:
            return SubmitResult.rejected("required", f"question {question.id} requires an answer")
        return SubmitResult.accepted()

    problem = _kind_problem(question, value)
    if problem is not None:
        return SubmitResult.rejected("invalid", problem)
    return SubmitResult.accepted()


def _kind_problem(question: Question, value: Any) -> str | None:
    """Return a description of why ``value`` does not fit, or None."""
    if isinstance(question, (ScaleQuestion, RatingQuestion)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"expected a number, got {type(value).__name__}"
        if isinstance(value, float) and not value.is_integer():
            return f"expected a whole number, got {value}"
        if not question.min <= value <= question.max:
            return f"{value} is outside {question.min}..{question.max}"
        return None

    if isinstance(question, TextQuestion):
        if not isinstance(value, str):
            return f"expected text, got {type(value).__name__}"
        return None

    if isinstance(question, ChoiceQuestion):
        if not isinstance(value, str):
            return f"expected an option label, got {type(value).__name__}"
        if value not in question.options:
            return f"{value!r} is not one of the options"
        return None

    if isinstance(question, MultiSelectQuestion):
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            return "expected a list of option labels"
        unknown = [v for v in value if v not in question.options]
        if unknown:
            return f"unknown options: {unknown}"
        if len(set(value)) != len(value):
            return "options must not repeat"
        return None

    return f"unsupported question kind: {question.kind}"
