"""HTML snippets for the page. Server-supplied text is always escaped."""
from __future__ import annotations

import html

from hackathon_recs.models import UserProfile
from hackathon_recs.normalizer import NormalizedRecommendation

TIER_COLORS: dict[str, str] = {
    "high": "#27ae60",
    "medium": "#f39c12",
    "low": "#e74c3c",
}


def tags(items: list[str]) -> str:
    return "".join(f'<span class="tag">{html.escape(item.strip())}</span>' for item in items)


def avatar(user: UserProfile) -> str:
    return f'<div class="avatar">{html.escape(user.initial)}</div>'


def profile_heading(user: UserProfile) -> str:
    return f"**{html.escape(user.username)}**  \n{html.escape(user.email)}"


def card_heading(view: NormalizedRecommendation) -> str:
    return (
        f'<span class="match-badge" style="background:{TIER_COLORS[view.tier]}">'
        f"Match: {html.escape(view.match_text)}</span>"
        f"<h4>{html.escape(view.record.title)}</h4>"
    )


def deadline(label: str) -> str:
    return f'<span class="deadline">📅 Deadline Date: {html.escape(label)}</span>'
