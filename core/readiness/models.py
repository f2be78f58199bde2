from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)


_WS = re.compile(r"\s+")


def normalize_label(label: Optional[str]) -> str:
    """Canonical lookup form of an answer label: trimmed, single-spaced, casefolded."""
    return _WS.sub(" ", (label or "").strip()).casefold()


class Tier(str, Enum):
    EARLY = "Early"
    STRATEGIC = "Strategic"
    LEADER = "Leader"


class QuestionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    prompt: Optional[str] = None
    # read-only after validation
    answers: Mapping[str, int]
    # alternate phrasing -> canonical label in `answers`
    synonyms: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    _lookup: Mapping[str, int] = PrivateAttr(default_factory=dict)

    @field_validator("answers")
    @classmethod
    def validate_answers(cls, v: Mapping[str, int]) -> Mapping[str, int]:
        if not v:
            raise ValueError("question must register at least one answer label")
        for label, points in v.items():
            if not label.strip():
                raise ValueError("answer labels must be non-empty")
            if points < 0:
                raise ValueError(f"points for {label!r} must be non-negative")
        return MappingProxyType(dict(v))

    @field_validator("synonyms")
    @classmethod
    def freeze_synonyms(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @model_validator(mode="after")
    def validate_synonyms(self) -> "QuestionSpec":
        for alias, canonical in self.synonyms.items():
            if canonical not in self.answers:
                raise ValueError(
                    f"{self.id}: synonym {alias!r} points at unknown label {canonical!r}"
                )

        seen: Dict[str, str] = {}
        for label in list(self.answers) + list(self.synonyms):
            key = normalize_label(label)
            canonical = self.synonyms.get(label, label)
            if key in seen and seen[key] != canonical:
                raise ValueError(
                    f"{self.id}: label {label!r} collides with {seen[key]!r} after normalization"
                )
            seen[key] = canonical
        return self

    def model_post_init(self, __context: Any) -> None:
        lookup = {normalize_label(k): v for k, v in self.answers.items()}
        for alias, canonical in self.synonyms.items():
            if canonical in self.answers:
                lookup[normalize_label(alias)] = self.answers[canonical]
        self._lookup = MappingProxyType(lookup)

    @property
    def max_points(self) -> int:
        return max(self.answers.values())

    def points_for(self, label: Optional[str]) -> Optional[int]:
        """Points for a chosen label, or None when the label is empty or unregistered."""
        key = normalize_label(label)
        if not key:
            return None
        return self._lookup.get(key)


class ScoringTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    questions: Tuple[QuestionSpec, ...]

    @field_validator("questions")
    @classmethod
    def validate_unique_ids(cls, v: Tuple[QuestionSpec, ...]) -> Tuple[QuestionSpec, ...]:
        ids = [q.id for q in v]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"duplicate question ids: {', '.join(dupes)}")
        return v

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(q.id for q in self.questions)

    def get(self, question_id: str) -> Optional[QuestionSpec]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


class ScoreResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_score: int = Field(ge=0)
    max_possible: int = Field(gt=0)
    percentage: int = Field(ge=0, le=100)
    tier: Tier

    # diagnostics, not part of the score
    answered: Tuple[str, ...] = ()
    unmatched: Tuple[str, ...] = ()
