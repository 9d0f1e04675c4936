import json

import pytest
import requests

from hackathon_recs.api import (
    NETWORK_FALLBACK,
    RECOMMENDATIONS_FALLBACK,
    USER_FALLBACK,
    RecommenderClient,
    RecommenderError,
)


def _response(status: int, body=None, text: str = "") -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r._content = json.dumps(body).encode() if body is not None else text.encode()
    r.encoding = "utf-8"
    return r


class FakeSession:
    def __init__(self, *results):
        self.results = list(results)
        self.calls: list[tuple[str, float]] = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("hackathon_recs.retry.time.sleep", lambda _s: None)


def _client(*results, max_attempts=3):
    session = FakeSession(*results)
    client = RecommenderClient("http://api.test/", timeout=5, max_attempts=max_attempts, session=session)
    return client, session


def test_get_user():
    client, session = _client(
        _response(200, {"id": 7, "username": "ada", "skills": ["python"], "email": "ada@example.com"})
    )
    user = client.get_user("7")
    assert user.username == "ada"
    assert user.skills == ["python"]
    assert user.initial == "A"
    assert session.calls == [("http://api.test/users/7", 5)]


def test_get_recommendations(payload):
    client, session = _client(_response(200, [payload(), payload(title="Second"), "junk"]))
    records = client.get_recommendations("7")
    assert [r.title for r in records] == ["Green Hack", "Second"]
    assert session.calls[0][0] == "http://api.test/recommendations/7"


def test_error_uses_server_detail():
    client, _ = _client(_response(404, {"detail": "User has no skills"}))
    with pytest.raises(RecommenderError) as exc:
        client.get_recommendations("7")
    assert str(exc.value) == "User has no skills"
    assert exc.value.status_code == 404


def test_error_without_detail_uses_fallback():
    client, _ = _client(_response(500, text="<html>oops</html>"))
    with pytest.raises(RecommenderError, match=RECOMMENDATIONS_FALLBACK):
        client.get_recommendations("7")


def test_user_error_fallback():
    client, _ = _client(_response(404, {"detail": ""}))
    with pytest.raises(RecommenderError, match=USER_FALLBACK):
        client.get_user("7")


@pytest.mark.parametrize("status", [400, 404, 500])
def test_http_errors_are_not_retried(status):
    client, session = _client(_response(status, {"detail": "nope"}), _response(200, []))
    with pytest.raises(RecommenderError, match="nope"):
        client.get_recommendations("7")
    assert len(session.calls) == 1


def test_gateway_errors_are_retried():
    client, session = _client(_response(503, {"detail": "busy"}), _response(502), _response(200, []))
    assert client.get_recommendations("7") == []
    assert len(session.calls) == 3


def test_persistent_gateway_error_shows_last_detail():
    client, session = _client(
        _response(503, {"detail": "busy"}),
        _response(504, {"detail": "Upstream timed out"}),
        max_attempts=2,
    )
    with pytest.raises(RecommenderError) as exc:
        client.get_user("7")
    assert str(exc.value) == "Upstream timed out"
    assert exc.value.status_code == 504
    assert len(session.calls) == 2


def test_connection_errors_are_retried():
    client, session = _client(
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
        _response(200, []),
    )
    assert client.get_recommendations("7") == []
    assert len(session.calls) == 3


def test_network_failure_after_retries():
    client, session = _client(requests.ConnectionError("refused"), requests.ConnectionError("refused"), max_attempts=2)
    with pytest.raises(RecommenderError, match=NETWORK_FALLBACK):
        client.get_user("7")
    assert len(session.calls) == 2


def test_non_list_recommendations_body():
    client, _ = _client(_response(200, {"items": []}))
    with pytest.raises(RecommenderError, match=RECOMMENDATIONS_FALLBACK):
        client.get_recommendations("7")


def test_invalid_json_success_body():
    client, _ = _client(_response(200, text="not json"))
    with pytest.raises(RecommenderError):
        client.get_user("7")
