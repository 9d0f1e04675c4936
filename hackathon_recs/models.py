"""Data models for recommendations, users and page session state."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hackathon_recs.log import get_logger

log = get_logger(__name__)

# Probe order for the embedding aliases; the first non-empty one wins.
EMBEDDING_FIELDS: tuple[str, ...] = (
    "embedding",
    "description_embedding",
    "embeddings",
    "vector",
    "text_embedding",
)

METRIC_FIELDS: tuple[str, ...] = (
    "precision",
    "recall",
    "f1_score",
    "cosine_similarity",
    "accuracy",
)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(f) else f


def _as_text_list(value: Any) -> list[str] | None:
    if not isinstance(value, (list, tuple)):
        return None
    return [_as_text(v) for v in value if v is not None]


def _as_vector(name: str, value: Any) -> list[float] | None:
    if not isinstance(value, (list, tuple)):
        return None
    vector: list[float] = []
    for v in value:
        f = _as_float(v)
        if f is None:
            log.debug("Dropping %s: non-numeric component %r", name, v)
            return None
        vector.append(f)
    return vector


@dataclass
class EvaluationMetrics:
    precision: float | None = None
    recall: float | None = None
    f1_score: float | None = None
    cosine_similarity: float | None = None
    accuracy: float | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "EvaluationMetrics":
        if not isinstance(data, dict):
            return cls()
        return cls(**{name: _as_float(data.get(name)) for name in METRIC_FIELDS})

    def to_dict(self) -> dict[str, float | None]:
        return {name: getattr(self, name) for name in METRIC_FIELDS}


@dataclass
class RecommendationRecord:
    """One hackathon entry as returned by the recommender.

    Every field except ``title`` may be missing from the payload. Values are
    coerced loosely so a partially-filled record never breaks rendering or
    export; the untouched payload stays available in ``raw``.
    """

    title: str
    description: str = ""
    requirements: list[str] = field(default_factory=list)
    prize: str = ""
    criteria: str = ""
    deadline: str = ""
    keywords: list[str] = field(default_factory=list)
    match_score: float = 0.0
    evaluation_metrics: EvaluationMetrics = field(default_factory=EvaluationMetrics)
    skill_matches: dict[str, list[tuple[str, float]]] = field(default_factory=dict)
    original_description: str | None = None
    embedding: list[float] | None = None
    description_embedding: list[float] | None = None
    embeddings: list[float] | None = None
    vector: list[float] | None = None
    text_embedding: list[float] | None = None
    countdown: list[str] | str | None = None
    keywords_from_csv: list[str] | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecommendationRecord":
        countdown = data.get("Countdown")
        if isinstance(countdown, (list, tuple)):
            countdown = _as_text_list(countdown)
        elif countdown is not None and not isinstance(countdown, str):
            countdown = None

        original = data.get("originalDescription")

        return cls(
            title=_as_text(data.get("title")),
            description=_as_text(data.get("description")),
            requirements=_as_text_list(data.get("requirements")) or [],
            prize=_as_text(data.get("prize")),
            criteria=_as_text(data.get("criteria")),
            deadline=_as_text(data.get("deadline")),
            keywords=_as_text_list(data.get("keywords")) or [],
            match_score=_as_float(data.get("match_score")) or 0.0,
            evaluation_metrics=EvaluationMetrics.from_dict(data.get("evaluation_metrics")),
            skill_matches=_parse_skill_matches(data.get("skill_matches")),
            original_description=original if isinstance(original, str) else None,
            countdown=countdown,
            keywords_from_csv=_as_text_list(data.get("KeywordsFromCSV")),
            raw=dict(data),
            **{name: _as_vector(name, data.get(name)) for name in EMBEDDING_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping using the recommender's field names."""
        out: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "requirements": list(self.requirements),
            "prize": self.prize,
            "criteria": self.criteria,
            "deadline": self.deadline,
            "keywords": list(self.keywords),
            "match_score": self.match_score,
            "evaluation_metrics": self.evaluation_metrics.to_dict(),
            "skill_matches": {
                category: [[skill, weight] for skill, weight in pairs]
                for category, pairs in self.skill_matches.items()
            },
        }
        if self.original_description is not None:
            out["originalDescription"] = self.original_description
        for name in EMBEDDING_FIELDS:
            value = getattr(self, name)
            if value is not None:
                out[name] = list(value)
        if self.countdown is not None:
            out["Countdown"] = self.countdown if isinstance(self.countdown, str) else list(self.countdown)
        if self.keywords_from_csv is not None:
            out["KeywordsFromCSV"] = list(self.keywords_from_csv)
        return out


def _parse_skill_matches(data: Any) -> dict[str, list[tuple[str, float]]]:
    if not isinstance(data, dict):
        return {}
    out: dict[str, list[tuple[str, float]]] = {}
    for category, pairs in data.items():
        if not isinstance(pairs, (list, tuple)):
            continue
        parsed: list[tuple[str, float]] = []
        for pair in pairs:
            if isinstance(pair, (list, tuple)) and len(pair) == 2:
                weight = _as_float(pair[1])
                if weight is not None:
                    parsed.append((_as_text(pair[0]), weight))
        out[_as_text(category)] = parsed
    return out


@dataclass
class UserProfile:
    id: str
    username: str = ""
    skills: list[str] = field(default_factory=list)
    email: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProfile":
        return cls(
            id=_as_text(data.get("id")),
            username=_as_text(data.get("username")),
            skills=_as_text_list(data.get("skills")) or [],
            email=_as_text(data.get("email")),
        )

    @property
    def initial(self) -> str:
        return self.username[:1].upper() if self.username else "?"


class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass
class SessionState:
    """Everything the recommendations page shows.

    Created empty on page activation and only changed through
    ``SessionController``. ``refreshing`` is an overlay on READY/FAILED so the
    previous list stays visible while a refresh is in flight.
    """

    records: list[RecommendationRecord] = field(default_factory=list)
    user: UserProfile | None = None
    status: SessionStatus = SessionStatus.IDLE
    refreshing: bool = False
    error: str = ""
    selected: RecommendationRecord | None = None
    needs_login: bool = False

    @property
    def loading(self) -> bool:
        return self.status is SessionStatus.LOADING

    @property
    def busy(self) -> bool:
        return self.loading or self.refreshing

    @property
    def is_empty(self) -> bool:
        """True when the "no recommendations" affordance should show."""
        return self.status is SessionStatus.READY and not self.error and not self.records
