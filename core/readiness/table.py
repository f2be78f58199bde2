from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from core.readiness.models import ScoringTable

logger = logging.getLogger("readiness.table")


# Labels match the quiz card text on the landing page. Synonyms cover older
# copy of the same cards so submissions from cached pages still score.
DEFAULT_QUESTIONS = (
    dict(
        id="q2_owner",
        prompt="Who owns AI strategy in your organization?",
        answers={
            "No clear owner yet": 0,
            "Department head": 3,
            "CTO / CIO": 7,
            "Board / Executive": 8,
            "CEO / Founder": 10,
        },
        synonyms={
            "Board / Executive leadership": "Board / Executive",
        },
    ),
    dict(
        id="q3_data",
        prompt="How would you describe your data?",
        answers={
            "Very Limited": 0,
            "Fragmented / Siloed": 3,
            "High-quality & Governed": 10,
        },
        synonyms={
            "Very limited usable data": "Very Limited",
            "Fragmented or siloed data": "Fragmented / Siloed",
            "High-quality data with strong governance": "High-quality & Governed",
        },
    ),
    dict(
        id="q4_tech",
        prompt="How mature is your technology stack?",
        answers={
            "Low digital maturity": 0,
            "Heavy legacy infrastructure": 3,
            "Mostly digital with some legacy systems": 7,
            "Cloud-based and well integrated": 10,
        },
    ),
    dict(
        id="q5_risk",
        prompt="Have AI risk, ethics and compliance been considered?",
        answers={
            "Not yet considered": 0,
            "Partially considered": 5,
            "Yes, clearly addressed": 10,
        },
    ),
    dict(
        id="q6_capability",
        prompt="What is your current AI capability?",
        answers={
            "No AI usage yet": 0,
            "Basic Automation/ChatGPT": 4,
            "Advanced AI/ML Systems": 10,
        },
        synonyms={
            "No AI usage": "No AI usage yet",
            "Basic tools (ChatGPT, automation)": "Basic Automation/ChatGPT",
            "Advanced AI / ML systems": "Advanced AI/ML Systems",
        },
    ),
    dict(
        id="q7_budget",
        prompt="Do you have the budget and skills to execute?",
        answers={
            "Limited capacity": 0,
            "Partial budget/skills": 5,
            "Yes, fully ready": 10,
        },
    ),
    dict(
        id="q8_success",
        prompt="How will you measure success?",
        answers={
            "No clear success metrics": 0,
            "Some KPIs, flexible goals": 5,
            "Clear KPIs & ROI targets": 10,
        },
    ),
)


def default_table() -> ScoringTable:
    """Fresh table from the built-in question data; no spec objects are shared between calls."""
    return ScoringTable.model_validate({"questions": DEFAULT_QUESTIONS})


def load_table(path: Union[str, Path]) -> ScoringTable:
    """
    Load a scoring table from a JSON file shaped like ScoringTable.

    Raises pydantic.ValidationError on a malformed table and OSError when the
    file cannot be read; both are meant to stop startup.
    """
    raw = Path(path).read_text(encoding="utf-8")
    table = ScoringTable.model_validate_json(raw)
    logger.info("Scoring table loaded from %s (%d questions)", path, len(table.questions))
    return table


def build_table(path: Optional[Union[str, Path]] = None) -> ScoringTable:
    if path:
        return load_table(path)
    table = default_table()
    logger.info("Using built-in scoring table (%d questions)", len(table.questions))
    return table
