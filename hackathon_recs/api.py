"""Client for the external recommendation service.

Endpoints:
  GET /users/{id}            -> user profile
  GET /recommendations/{id}  -> list of hackathon records, or {"detail": ...} on error
"""
from __future__ import annotations

from typing import Any

import requests

from hackathon_recs.config import Settings
from hackathon_recs.log import get_logger
from hackathon_recs.models import RecommendationRecord, UserProfile
from hackathon_recs.retry import RetryPolicy

log = get_logger(__name__)

USER_FALLBACK = "Failed to fetch user profile"
RECOMMENDATIONS_FALLBACK = "Failed to fetch recommendations"
NETWORK_FALLBACK = "Failed to load recommendations"

# Connection problems and gateway hiccups are worth another attempt; other
# HTTP errors are final.
_RETRYABLE = (requests.ConnectionError, requests.Timeout)
TRANSIENT_STATUSES = frozenset({502, 503, 504})


class RecommenderError(Exception):
    """A request to the recommender failed; ``str(exc)`` is shown to the user."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _detail(response: requests.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail
    return None


class RecommenderClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        max_attempts: int = 3,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.policy = RetryPolicy(max_attempts=max_attempts)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecommenderClient":
        return cls(
            settings.api_base_url,
            timeout=settings.request_timeout,
            max_attempts=settings.max_attempts,
        )

    def _get_once(self, path: str) -> requests.Response:
        return self.session.get(f"{self.base_url}{path}", timeout=self.timeout)

    def _get(self, path: str) -> requests.Response:
        return self.policy.call(
            self._get_once,
            path,
            retryable=_RETRYABLE,
            retry_if=lambda r: r.status_code in TRANSIENT_STATUSES,
            label=f"GET {path}",
        )

    def _get_json(self, path: str, fallback: str) -> Any:
        try:
            r = self._get(path)
        except requests.RequestException as exc:
            log.warning("GET %s failed: %s", path, exc)
            raise RecommenderError(NETWORK_FALLBACK) from exc

        if not r.ok:
            message = _detail(r) or fallback
            log.warning("GET %s → %d: %s", path, r.status_code, message)
            raise RecommenderError(message, status_code=r.status_code)

        try:
            return r.json()
        except ValueError as exc:
            log.warning("GET %s returned a non-JSON body", path)
            raise RecommenderError(fallback, status_code=r.status_code) from exc

    def get_user(self, user_id: str) -> UserProfile:
        data = self._get_json(f"/users/{user_id}", USER_FALLBACK)
        if not isinstance(data, dict):
            raise RecommenderError(USER_FALLBACK)
        return UserProfile.from_dict(data)

    def get_recommendations(self, user_id: str) -> list[RecommendationRecord]:
        data = self._get_json(f"/recommendations/{user_id}", RECOMMENDATIONS_FALLBACK)
        if not isinstance(data, list):
            raise RecommenderError(RECOMMENDATIONS_FALLBACK)
        records: list[RecommendationRecord] = []
        for item in data:
            if isinstance(item, dict):
                records.append(RecommendationRecord.from_dict(item))
            else:
                log.debug("Skipping non-object recommendation entry: %r", item)
        log.info("Fetched %d recommendation(s) for user %s", len(records), user_id)
        return records
