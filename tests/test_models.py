from hackathon_recs.models import (
    EMBEDDING_FIELDS,
    RecommendationRecord,
    SessionState,
    SessionStatus,
    UserProfile,
)


def test_from_dict_tolerates_missing_fields():
    record = RecommendationRecord.from_dict({})
    assert record.title == ""
    assert record.description == ""
    assert record.requirements == []
    assert record.match_score == 0.0
    assert record.evaluation_metrics.precision is None
    assert record.skill_matches == {}
    assert all(getattr(record, name) is None for name in EMBEDDING_FIELDS)


def test_from_dict_tolerates_wrong_types(payload):
    record = RecommendationRecord.from_dict(
        payload(
            match_score="abc",
            requirements="not a list",
            Countdown=5,
            embedding=["a", 1],
            description_embedding="nope",
            evaluation_metrics={"precision": "0.5", "recall": None, "accuracy": True},
            skill_matches={"tools": [["git", "0.4"], ["bad"], "junk"], "other": "x"},
        )
    )
    assert record.match_score == 0.0
    assert record.requirements == []
    assert record.countdown is None
    assert record.embedding is None
    assert record.description_embedding is None
    assert record.evaluation_metrics.precision == 0.5
    assert record.evaluation_metrics.recall is None
    assert record.evaluation_metrics.accuracy is None
    assert record.skill_matches == {"tools": [("git", 0.4)]}


def test_from_dict_keeps_scores_above_one_and_negative(payload):
    assert RecommendationRecord.from_dict(payload(match_score=1.3)).match_score == 1.3
    assert RecommendationRecord.from_dict(payload(match_score=-0.5)).match_score == -0.5


def test_raw_payload_is_kept(payload):
    data = payload(extra_field="kept")
    record = RecommendationRecord.from_dict(data)
    assert record.raw["extra_field"] == "kept"
    assert record.raw is not data


def test_to_dict_round_trip(payload):
    data = payload(Countdown=["a"], KeywordsFromCSV=["k"], text_embedding=[0.1], originalDescription="full")
    record = RecommendationRecord.from_dict(data)
    again = RecommendationRecord.from_dict(record.to_dict())
    assert again.to_dict() == record.to_dict()
    assert again.countdown == ["a"]
    assert again.text_embedding == [0.1]
    assert again.skill_matches == {"languages": [("python", 0.9)]}


def test_user_profile_initial():
    assert UserProfile.from_dict({"id": 1, "username": "bob"}).initial == "B"
    assert UserProfile.from_dict({"id": 1}).initial == "?"


def test_session_state_flags():
    state = SessionState()
    assert not state.loading
    assert not state.is_empty
    state.status = SessionStatus.LOADING
    assert state.loading and state.busy
    state.status = SessionStatus.READY
    assert state.is_empty
    state.error = "boom"
    assert not state.is_empty
