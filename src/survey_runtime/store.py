"""SurveyStore — loads survey definitions from YAML files into typed models.

Each ``*.yaml`` file under the survey directory describes one survey::

    id: customer-pulse
    title: Customer pulse
    status: active            # draft | active | paused | archived
    questions:
      - id: satisfaction
        kind: scale
        min: 1
        max: 5
        position: 0
        branching_rules:
          - {condition: less_than, comparison_value: 3, target: follow_up}

The store is loaded once and then serves as a
:class:`~survey_runtime.interfaces.SurveyDefinitionProvider`.

Usage::

    store = SurveyStore()           # defaults to surveys/ relative to repo root
    store.load()
    survey = await store.fetch_survey("customer-pulse")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from survey_runtime.constants import SURVEY_STATUSES
from survey_runtime.interfaces import SurveyDefinitionProvider
from survey_runtime.models.survey import SurveyDefinition

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_survey(data: dict[str, Any]) -> tuple[SurveyDefinition, str]:
    """Validate one raw survey mapping; return ``(definition, status)``.

    Questions are sorted by ``position`` (stable, so equal positions keep
    file order) before validation.
    """
    status = str(data.get("status", "active"))
    if status not in SURVEY_STATUSES:
        raise ValueError(f"Unknown survey status {status!r} for survey {data.get('id')!r}")

    questions = sorted(data.get("questions") or [], key=lambda q: q.get("position", 0))
    definition = SurveyDefinition.model_validate({
        "id": str(data.get("id", "")),
        "title": data.get("title", ""),
        "description": data.get("description"),
        "questions": questions,
    })
    return definition, status


# ---------------------------------------------------------------------------
# SurveyStore
# ---------------------------------------------------------------------------

class SurveyStore(SurveyDefinitionProvider):
    """Loads all survey YAML from a directory and provides lookup by id.

    Attributes populated after :meth:`load`:

        surveys   — dict[id, SurveyDefinition]
        statuses  — dict[id, status string]
    """

    def __init__(self, survey_dir: str | Path | None = None) -> None:
        if survey_dir is None:
            survey_dir = find_repo_root() / "surveys"
        self._base = Path(survey_dir)

        # Populated by load()
        self.surveys: dict[str, SurveyDefinition] = {}
        self.statuses: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse every ``*.yaml`` / ``*.yml`` file under the survey directory.

        Raises ``FileNotFoundError`` if the directory is missing and
        ``ValueError`` on malformed or duplicate surveys.
        """
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing survey directory: {self._base}")

        paths = sorted([*self._base.glob("*.yaml"), *self._base.glob("*.yml")])
        for path in paths:
            data = load_yaml(path)
            if not isinstance(data, dict):
                raise ValueError(f"Survey file {path} must contain a mapping")
            definition, status = parse_survey(data)
            if definition.id in self.surveys:
                raise ValueError(f"Survey {definition.id!r} already exists ({path})")
            self.surveys[definition.id] = definition
            self.statuses[definition.id] = status

        logger.info("SurveyStore loaded: %d surveys from %s", len(self.surveys), self._base)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, survey_id: str) -> SurveyDefinition:
        """Return a survey regardless of status.  Raises ``ValueError`` if unknown."""
        try:
            return self.surveys[survey_id]
        except KeyError:
            raise ValueError(f"Survey not found: {survey_id}") from None

    async def fetch_survey(self, survey_id: str) -> SurveyDefinition:
        """Provider entry point: only active surveys can be run."""
        survey = self.get(survey_id)
        if self.statuses.get(survey_id) != "active":
            raise ValueError(f"Survey is not active: {survey_id}")
        return survey
