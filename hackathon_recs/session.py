"""Recommendation session controller.

States: IDLE → LOADING → READY | FAILED. A refresh from READY or FAILED sets the
``refreshing`` overlay, keeps the current list on screen, and swaps in the new
data only once both requests have succeeded.
"""
from __future__ import annotations

from hackathon_recs.api import NETWORK_FALLBACK, RecommenderClient, RecommenderError
from hackathon_recs.log import get_logger
from hackathon_recs.models import RecommendationRecord, SessionState, SessionStatus
from hackathon_recs.store import USER_ID_KEY, LocalStore, save_for_detail

log = get_logger(__name__)


class SessionController:
    def __init__(self, client: RecommenderClient, store: LocalStore) -> None:
        self.client = client
        self.store = store

    def _user_id(self, state: SessionState) -> str | None:
        user_id = self.store.user_id()
        state.needs_login = user_id is None
        if user_id is None:
            log.info("No stored user id — login required")
        return user_id

    def load(self, state: SessionState) -> SessionState:
        """Initial fetch on page entry."""
        if state.busy:
            log.info("Load ignored: a fetch is already in flight")
            return state
        user_id = self._user_id(state)
        if user_id is None:
            return state

        state.status = SessionStatus.LOADING
        self._fetch(state, user_id)
        return state

    def refresh(self, state: SessionState) -> SessionState:
        """Re-fetch profile and recommendations, keeping the old list until done."""
        if state.busy:
            log.info("Refresh ignored: a fetch is already in flight")
            return state
        user_id = self._user_id(state)
        if user_id is None:
            return state

        if state.status is SessionStatus.IDLE:
            state.status = SessionStatus.LOADING
        state.refreshing = True
        try:
            self._fetch(state, user_id)
        finally:
            state.refreshing = False
        return state

    def _fetch(self, state: SessionState, user_id: str) -> None:
        # Profile first, then recommendations; nothing is applied until both succeed.
        try:
            user = self.client.get_user(user_id)
            records = self.client.get_recommendations(user_id)
        except RecommenderError as exc:
            log.error("Error fetching recommendations: %s", exc)
            state.error = str(exc) or NETWORK_FALLBACK
            state.status = SessionStatus.FAILED
            return
        except Exception as exc:
            log.exception("Unexpected error fetching recommendations: %s", exc)
            state.error = NETWORK_FALLBACK
            state.status = SessionStatus.FAILED
            return

        state.user = user
        state.records = records
        state.selected = None
        state.error = ""
        state.status = SessionStatus.READY
        log.info("Session ready: %d recommendation(s)", len(records))

    def select(self, state: SessionState, record: RecommendationRecord) -> SessionState:
        state.selected = record
        return state

    def clear_selection(self, state: SessionState) -> SessionState:
        state.selected = None
        return state

    def open_detail(self, state: SessionState, index: int) -> int:
        """Persist the current list for the detail view and return the index to open."""
        return save_for_detail(self.store, state.records, index)

    def sign_in(self, user_id: str) -> None:
        user_id = user_id.strip()
        if not user_id:
            raise ValueError("user id must not be empty")
        self.store.set(USER_ID_KEY, user_id)
        log.info("Stored user id for session")

    def sign_out(self, state: SessionState) -> SessionState:
        self.store.remove(USER_ID_KEY)
        state.records = []
        state.user = None
        state.selected = None
        state.error = ""
        state.status = SessionStatus.IDLE
        state.needs_login = True
        return state
