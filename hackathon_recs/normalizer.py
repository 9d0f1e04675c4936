"""Derive stable display values from loosely-typed recommendation records.

Every function here is pure: records are read, never modified, and missing or
malformed data degrades to an empty value or the original text instead of
raising.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from hackathon_recs.models import EMBEDDING_FIELDS, RecommendationRecord

KEYWORD_DISPLAY_LIMIT = 5
TRUNCATION_LENGTH = 200
ELLIPSES: tuple[str, ...] = ("...", "…")

NO_DEADLINE = "No deadline specified"
DEADLINE_PASSED = "Deadline passed"

_DAY = timedelta(days=1)
_HOUR = timedelta(hours=1)
_MINUTE = timedelta(minutes=1)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[T ]|$)")


def format_percent(fraction: float | None) -> str | None:
    """``fraction`` × 100 with at most two decimals and no trailing zeros."""
    if fraction is None or not math.isfinite(fraction):
        return None
    text = f"{fraction * 100:.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def clamp_score(score: float) -> float:
    # Upper bound only; negative scores pass through unchanged.
    return min(score, 1.0)


def format_match_score(score: float) -> str:
    text = format_percent(clamp_score(score))
    return f"{text}%" if text is not None else "N/A"


def match_tier(score: float) -> str:
    if score > 0.7:
        return "high"
    if score > 0.4:
        return "medium"
    return "low"


def select_embedding(record: RecommendationRecord) -> list[float] | None:
    for name in EMBEDDING_FIELDS:
        vector = getattr(record, name)
        if vector:
            return vector
    return None


@dataclass
class KeywordSelection:
    keywords: list[str] = field(default_factory=list)
    # "csv", "original" or None when nothing is available
    source: str | None = None

    @property
    def from_original(self) -> bool:
        return self.source == "original"


def resolve_keywords(record: RecommendationRecord) -> KeywordSelection:
    if record.keywords_from_csv:
        return KeywordSelection(record.keywords_from_csv[:KEYWORD_DISPLAY_LIMIT], "csv")
    if record.keywords:
        return KeywordSelection(record.keywords[:KEYWORD_DISPLAY_LIMIT], "original")
    return KeywordSelection()


def resolve_countdown(record: RecommendationRecord) -> list[str]:
    countdown = record.countdown
    if isinstance(countdown, list):
        return list(countdown)
    if isinstance(countdown, str) and countdown:
        return [part.strip() for part in countdown.split(",")]
    return []


def is_truncated(description: str | None) -> bool:
    """Heuristic: ends with an ellipsis or is at least 200 characters long.

    Short descriptions cut without an ellipsis and long complete ones are both
    misreported; that is accepted.
    """
    if not description:
        return False
    return description.endswith(ELLIPSES) or len(description) >= TRUNCATION_LENGTH


def parse_deadline(deadline: str) -> datetime | None:
    """Parse ISO-8601-like or ``MM/DD/YYYY`` deadlines into an aware datetime.

    Date-only values are midnight UTC; date-times without an offset are taken
    as local time.
    """
    if "T" in deadline or "-" in deadline:
        return _parse_iso(deadline)
    if "/" in deadline:
        parts = deadline.split("/")
        if len(parts) != 3:
            return None
        month, day, year = (p.strip() for p in parts)
        try:
            parsed = date(int(year), int(month), int(day))
        except ValueError:
            return None
        return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)
    return None


def _parse_iso(text: str) -> datetime | None:
    text = text.strip()
    # Only calendar dates; ISO week and ordinal forms are left as text.
    if not _ISO_DATE_RE.match(text):
        return None
    try:
        if "T" not in text and " " not in text:
            d = date.fromisoformat(text)
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
    except (ValueError, OverflowError):
        # Includes local-time conversion past year 1 or 9999.
        return None
    return parsed


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'} left"


def compute_countdown_text(deadline: str, now: datetime | None = None) -> str:
    """Human-readable time left until ``deadline``, or ``deadline`` unchanged."""
    if not deadline:
        return NO_DEADLINE
    deadline_at = parse_deadline(deadline)
    if deadline_at is None:
        return deadline

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.astimezone()

    diff = deadline_at - now
    if diff <= timedelta(0):
        return DEADLINE_PASSED

    days = diff // _DAY
    hours = (diff % _DAY) // _HOUR
    minutes = (diff % _HOUR) // _MINUTE
    if days > 0:
        return _plural(days, "day")
    if hours > 0:
        return _plural(hours, "hour")
    return _plural(minutes, "minute")


@dataclass
class NormalizedRecommendation:
    """Display-safe values for one record."""

    record: RecommendationRecord
    match_text: str
    tier: str
    countdown: list[str]
    countdown_text: str
    deadline_label: str
    keywords: KeywordSelection
    embedding: list[float] | None
    truncated: bool

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None


def normalize_record(record: RecommendationRecord, now: datetime | None = None) -> NormalizedRecommendation:
    return NormalizedRecommendation(
        record=record,
        match_text=format_match_score(record.match_score),
        tier=match_tier(record.match_score),
        countdown=resolve_countdown(record),
        countdown_text=compute_countdown_text(record.deadline, now),
        deadline_label=record.deadline or "Not specified",
        keywords=resolve_keywords(record),
        embedding=select_embedding(record),
        truncated=is_truncated(record.description),
    )
