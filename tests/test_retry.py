import pytest

from hackathon_recs.retry import RetryPolicy


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr("hackathon_recs.retry.time.sleep", delays.append)
    return delays


def test_retries_until_success(no_sleep):
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionError("down")
        return "ok"

    policy = RetryPolicy(max_attempts=3, base_delay=1.0, jitter=False)
    assert policy.call(flaky, retryable=(ConnectionError,)) == "ok"
    assert len(attempts) == 3
    assert no_sleep == [1.0, 2.0]


def test_non_retryable_error_propagates_immediately(no_sleep):
    attempts = []

    def broken():
        attempts.append(1)
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        RetryPolicy().call(broken, retryable=(ConnectionError,))
    assert len(attempts) == 1
    assert no_sleep == []


def test_gives_up_after_max_attempts(no_sleep):
    def down():
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        RetryPolicy(max_attempts=2).call(down, retryable=(ConnectionError,))
    assert len(no_sleep) == 1


def test_unusable_result_is_retried_then_returned(no_sleep):
    results = iter(["busy", "busy", "busy"])
    policy = RetryPolicy(max_attempts=3, jitter=False)
    assert policy.call(lambda: next(results), retry_if=lambda r: r == "busy") == "busy"
    assert len(no_sleep) == 2


def test_arguments_are_passed_through():
    assert RetryPolicy().call(lambda a, b: a + b, 2, 3) == 5


def test_delay_is_capped_and_jittered(monkeypatch):
    policy = RetryPolicy(base_delay=1.0, max_delay=5.0, backoff_factor=2.0, jitter=False)
    assert [policy.delay(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 5.0]

    monkeypatch.setattr("hackathon_recs.retry.random.uniform", lambda lo, hi: hi)
    assert RetryPolicy(base_delay=1.0).delay(1) == 1.5


def test_zero_attempts_still_calls_once():
    calls = []
    RetryPolicy(max_attempts=0).call(lambda: calls.append(1))
    assert calls == [1]
