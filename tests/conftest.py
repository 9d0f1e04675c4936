from __future__ import annotations

import pytest

from hackathon_recs.models import RecommendationRecord


def make_payload(**overrides) -> dict:
    payload = {
        "title": "Green Hack",
        "description": "Build climate tools.",
        "requirements": ["Python", "Teams of 4"],
        "prize": "$5,000",
        "criteria": "Impact",
        "deadline": "2025-03-15",
        "keywords": ["climate", "data"],
        "match_score": 0.4,
        "evaluation_metrics": {
            "precision": 0.5,
            "recall": 0.25,
            "f1_score": 0.3333,
            "cosine_similarity": 0.8765,
            "accuracy": 0.9,
        },
        "skill_matches": {"languages": [["python", 0.9]]},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_record():
    def _make(**overrides) -> RecommendationRecord:
        return RecommendationRecord.from_dict(make_payload(**overrides))

    return _make


@pytest.fixture
def payload():
    return make_payload
