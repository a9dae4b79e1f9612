"""Survey runtime constants shared across the SDK.

These values are referenced by the models, the evaluator, the navigator
and the HTTP client.  A few can be overridden via environment variables so
deployments can adjust defaults without code changes.
"""

import os

# Rule target meaning "terminate the survey now".  Never a valid question id.
END_TARGET = "end"

# Question kinds understood by the runtime.
QUESTION_KINDS: tuple[str, ...] = ("scale", "text", "choice", "multi_select", "rating")

# Rating questions are always a fixed 1-5 scale.
RATING_MIN = 1
RATING_MAX = 5

# Bounds applied to scale questions that omit min/max in their definition.
# Overridable via DEFAULT_SCALE_MIN / DEFAULT_SCALE_MAX env vars.
DEFAULT_SCALE_MIN = int(os.getenv("DEFAULT_SCALE_MIN", "1"))
DEFAULT_SCALE_MAX = int(os.getenv("DEFAULT_SCALE_MAX", "10"))

# Text recorded alongside every consent given at session start.
CONSENT_TEXT = (
    "I consent to participate in this survey and allow my responses "
    "to be collected and analysed."
)

# Request timeout (seconds) for the HTTP collaborators.
# Overridable via SURVEY_HTTP_TIMEOUT env var.
HTTP_TIMEOUT = float(os.getenv("SURVEY_HTTP_TIMEOUT", "30"))

# Survey lifecycle states; only "active" surveys can be run.
SURVEY_STATUSES: tuple[str, ...] = ("draft", "active", "paused", "archived")
