"""Serialize recommendations to a CSV download."""
from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

from hackathon_recs.log import get_logger
from hackathon_recs.models import RecommendationRecord
from hackathon_recs.normalizer import clamp_score, format_percent, is_truncated, select_embedding
from hackathon_recs.tokens import estimate_token_count

log = get_logger(__name__)

HEADERS: list[str] = [
    "Title",
    "Description",
    "Description Truncated",
    "original_token_count",
    "truncated_token_count",
    "Embedding Available",
    "Match Score",
    "Precision",
    "Recall",
    "F1 Score",
    "Accuracy",
    "Cosine Similarity",
    "Requirements",
]

MIME_TYPE = "text/csv;charset=utf-8"


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _percent(fraction: float | None) -> str:
    return format_percent(fraction) or ""


def _row(record: RecommendationRecord) -> str:
    # Text columns are always quoted; flags and numbers stay bare.
    truncated = is_truncated(record.description)
    displayed_tokens = estimate_token_count(record.description)
    if truncated and record.original_description:
        original_tokens = estimate_token_count(record.original_description)
    else:
        original_tokens = displayed_tokens

    metrics = record.evaluation_metrics
    fields = [
        _quote(record.title),
        _quote(record.description),
        _flag(truncated),
        str(original_tokens),
        str(displayed_tokens),
        _flag(select_embedding(record) is not None),
        _percent(clamp_score(record.match_score)),
        _percent(metrics.precision),
        _percent(metrics.recall),
        _percent(metrics.f1_score),
        _percent(metrics.accuracy),
        _percent(metrics.cosine_similarity),
        _quote("; ".join(record.requirements)),
    ]
    return ",".join(fields)


def build_csv(records: list[RecommendationRecord]) -> str:
    """Header plus one line per record, joined with ``\\n``."""
    lines = [",".join(HEADERS)]
    lines.extend(_row(r) for r in records)
    return "\n".join(lines)


def export_filename(today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"hackathon-recommendations-{today.isoformat()}.csv"


def write_csv(
    records: list[RecommendationRecord],
    directory: Path,
    today: date | None = None,
) -> Path | None:
    """Write the export under ``directory``; nothing is written for an empty list."""
    if not records:
        log.info("Export skipped: no recommendations to write")
        return None
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(today)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(build_csv(records))
    log.info("Exported %d recommendation(s) → %s", len(records), path.name)
    return path
