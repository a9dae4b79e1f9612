"""RuleEvaluator — decides whether a branching rule matches an answer.

Matching semantics:

  - **equals / not_equals**: compare the string form of the answer with the
    string form of ``comparison_value``
  - **greater_than / less_than**: compare the numeric form of both operands;
    an operand that is not a number coerces to NaN and the comparison is
    false

Rules are evaluated in list order and the first match wins.  Malformed
rules never raise: a non-numeric operand simply fails to match.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from survey_runtime.models.rule import Rule

logger = logging.getLogger(__name__)


def as_text(value: Any) -> str:
    """String form of an answer or comparison value.

    Integral floats render without a trailing ``.0`` (so ``3.0`` equals
    ``"3"``), lists render comma-joined and a missing answer is ``""``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(as_text(v) for v in value)
    return str(value)


def as_number(value: Any) -> float:
    """Numeric form of an answer or comparison value; NaN if not numeric."""
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = as_text(value).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


class RuleEvaluator:
    """Evaluates a question's branching rules against the submitted answer."""

    def first_match(self, rules: Iterable[Rule], answer: Any) -> Rule | None:
        """Return the first rule whose condition matches ``answer``, or None."""
        for rule in rules:
            if self.matches(rule, answer):
                return rule
        return None

    def matches(self, rule: Rule, answer: Any) -> bool:
        """Apply one rule's condition to ``answer``."""
        match rule.condition:
            case "equals":
                return as_text(answer) == as_text(rule.comparison_value)
            case "not_equals":
                return as_text(answer) != as_text(rule.comparison_value)
            case "greater_than":
                # NaN on either side makes the comparison false
                return as_number(answer) > as_number(rule.comparison_value)
            case "less_than":
                return as_number(answer) < as_number(rule.comparison_value)
            case _:
                logger.warning("Unknown rule condition: %s", rule.condition)
                return False
