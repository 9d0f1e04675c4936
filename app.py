"""Streamlit UI for personalized hackathon recommendations."""
from __future__ import annotations

import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from hackathon_recs import markup
from hackathon_recs.api import RecommenderClient
from hackathon_recs.config import SESSIONS_DIR, ensure_dirs, load_settings
from hackathon_recs.export import MIME_TYPE, build_csv, export_filename
from hackathon_recs.log import get_logger
from hackathon_recs.models import METRIC_FIELDS, RecommendationRecord, SessionState, SessionStatus
from hackathon_recs.normalizer import (
    compute_countdown_text,
    format_percent,
    normalize_record,
)
from hackathon_recs.session import SessionController
from hackathon_recs.store import load_for_detail, store_for_client

log = get_logger(__name__)

SETTINGS = load_settings()

# ── Constants ────────────────────────────────────────────────────────────

_STATE_KEY = "recs_state"
_CLIENT_ID_KEY = "_client_id"
_CONTROLLER_KEY = "_controller"
_REFRESH_KEY = "_refresh_requested"
_DETAIL_KEY = "detail_index"

_METRIC_LABELS: dict[str, str] = {
    "precision": "Precision",
    "recall": "Recall",
    "f1_score": "F1 Score",
    "cosine_similarity": "Cosine Similarity",
    "accuracy": "Accuracy",
}

_CARD_CSS = """
<style>
.block-container {
    padding-top: 2rem;
}
.match-badge {
    float: right;
    padding: 0.2rem 0.7rem;
    border-radius: 999px;
    color: #fff;
    font-weight: 600;
    font-size: 0.85rem;
}
.tag {
    display: inline-block;
    margin: 0 0.3rem 0.3rem 0;
    padding: 0.15rem 0.6rem;
    background: rgba(59,130,246,0.12);
    color: #1e40af;
    border-radius: 999px;
    font-size: 0.8rem;
}
.deadline {
    color: #ea580c;
    font-size: 0.9rem;
    font-weight: 500;
}
.avatar {
    width: 3.5rem; height: 3.5rem; border-radius: 50%;
    background: #3b82f6; color: #fff; font-size: 1.5rem; font-weight: 700;
    display: flex; align-items: center; justify-content: center;
}
</style>
"""

# ── Helpers ──────────────────────────────────────────────────────────────


def _controller() -> SessionController:
    # One controller per browser session, over that session's own store file.
    if _CONTROLLER_KEY not in st.session_state:
        ensure_dirs()
        client_id = st.session_state.setdefault(_CLIENT_ID_KEY, uuid.uuid4().hex)
        store = store_for_client(SESSIONS_DIR, client_id)
        st.session_state[_CONTROLLER_KEY] = SessionController(RecommenderClient.from_settings(SETTINGS), store)
    return st.session_state[_CONTROLLER_KEY]


def _state() -> SessionState:
    if _STATE_KEY not in st.session_state:
        st.session_state[_STATE_KEY] = SessionState()
    return st.session_state[_STATE_KEY]


@st.fragment(run_every=SETTINGS.countdown_refresh_seconds)
def _countdown(deadline: str) -> None:
    # Re-rendered on a timer; only the countdown text is recomputed.
    st.caption(f"⏳ {compute_countdown_text(deadline, datetime.now(timezone.utc))}")


@st.dialog("Match metrics", width="large")
def _metrics_dialog(record: RecommendationRecord) -> None:
    metrics = record.evaluation_metrics
    cols = st.columns(len(METRIC_FIELDS))
    for col, name in zip(cols, METRIC_FIELDS):
        value = format_percent(getattr(metrics, name))
        col.metric(_METRIC_LABELS[name], f"{value}%" if value is not None else "N/A")

    rows = [
        {"Category": category, "Skill": skill, "Weight": weight}
        for category, pairs in record.skill_matches.items()
        for skill, weight in pairs
    ]
    st.subheader("Skill matches")
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No skill matches reported.")

    if st.button("Close", use_container_width=True):
        _controller().clear_selection(_state())
        st.rerun()


# ── Page: Recommendations ────────────────────────────────────────────────


def _sidebar_profile(state: SessionState) -> None:
    user = state.user
    if user is None:
        st.caption("Loading profile…")
        return

    c1, c2 = st.columns([1, 3])
    c1.markdown(markup.avatar(user), unsafe_allow_html=True)
    c2.markdown(markup.profile_heading(user))

    st.divider()
    st.markdown("**Your Skills**")
    if user.skills:
        st.markdown(markup.tags(user.skills), unsafe_allow_html=True)
    else:
        st.caption("_No skills added yet_")

    st.divider()
    st.page_link(SIGN_IN_PAGE, label="Switch user", icon="👤")
    st.download_button(
        "Export to CSV",
        data=build_csv(state.records) if state.records else "",
        file_name=export_filename(),
        mime=MIME_TYPE,
        disabled=not state.records,
        use_container_width=True,
        type="primary",
    )


def _card(index: int, record: RecommendationRecord, now: datetime) -> None:
    view = normalize_record(record, now)
    with st.container(border=True):
        st.markdown(markup.card_heading(view), unsafe_allow_html=True)
        if record.description:
            st.write(record.description)

        c1, c2 = st.columns(2)
        with c1:
            st.markdown("**Countdown:**")
            if view.countdown:
                st.markdown(markup.tags(view.countdown), unsafe_allow_html=True)
            else:
                st.markdown(markup.tags(["No countdown info available"]), unsafe_allow_html=True)
        with c2:
            st.markdown("**Keywords:**")
            if view.keywords.keywords:
                st.markdown(markup.tags(view.keywords.keywords), unsafe_allow_html=True)
                if view.keywords.from_original:
                    st.caption("_(using original keywords)_")
            else:
                st.caption("_No keywords specified_")

        st.divider()
        f1, f2, f3 = st.columns([3, 1, 1])
        with f1:
            st.markdown(markup.deadline(view.deadline_label), unsafe_allow_html=True)
            if record.deadline:
                _countdown(record.deadline)
        if f2.button("View Metrics", key=f"metrics_{index}", use_container_width=True):
            _controller().select(_state(), record)
            _metrics_dialog(record)
        if f3.button("View Details →", key=f"details_{index}", use_container_width=True):
            st.session_state[_DETAIL_KEY] = _controller().open_detail(_state(), index)
            st.switch_page(DETAIL_PAGE)


def page_recommendations() -> None:
    controller = _controller()
    state = _state()

    if state.status is SessionStatus.IDLE and not state.needs_login:
        with st.spinner("Loading recommendations…"):
            controller.load(state)
    if state.needs_login:
        st.switch_page(SIGN_IN_PAGE)

    refresh_requested = st.session_state.get(_REFRESH_KEY, False)

    h1, h2 = st.columns([4, 1])
    h1.title("Traditional Hackathon Recommendations with SBert Model")
    if h2.button(
        "Refreshing…" if refresh_requested else "🔄 Refresh",
        disabled=refresh_requested,
        use_container_width=True,
    ):
        st.session_state[_REFRESH_KEY] = True
        st.rerun()

    if state.error:
        st.error(state.error)

    with st.sidebar:
        _sidebar_profile(state)

    now = datetime.now(timezone.utc)
    for index, record in enumerate(state.records):
        _card(index, record, now)

    if state.is_empty:
        st.info("No recommendations found. Try updating your skills!")

    # Old list is already on screen; fetch now and swap on the next run.
    if refresh_requested:
        with st.spinner("Refreshing recommendations…"):
            try:
                controller.refresh(state)
            finally:
                st.session_state[_REFRESH_KEY] = False
        if state.needs_login:
            st.switch_page(SIGN_IN_PAGE)
        st.rerun()


# ── Page: Hackathon detail ───────────────────────────────────────────────


def page_detail() -> None:
    index = st.session_state.get(_DETAIL_KEY)
    record = load_for_detail(_controller().store, index) if isinstance(index, int) else None
    st.page_link(RECOMMENDATIONS_PAGE, label="← Back to recommendations")
    if record is None:
        st.info("Hackathon not found. Open it from the recommendations list.")
        return

    view = normalize_record(record)
    st.title(record.title)
    c1, c2, c3 = st.columns(3)
    c1.metric("Match", view.match_text)
    c2.metric("Deadline", view.deadline_label)
    c3.metric("Time left", view.countdown_text)

    st.subheader("Description")
    st.write(record.original_description if view.truncated and record.original_description else record.description or "—")

    if record.prize:
        st.subheader("Prize")
        st.write(record.prize)
    if record.criteria:
        st.subheader("Judging criteria")
        st.write(record.criteria)
    if record.requirements:
        st.subheader("Requirements")
        st.markdown("\n".join(f"- {req}" for req in record.requirements))
    if view.keywords.keywords:
        st.subheader("Keywords")
        st.markdown(markup.tags(view.keywords.keywords), unsafe_allow_html=True)


# ── Page: Sign in ────────────────────────────────────────────────────────


def page_sign_in() -> None:
    st.header("Sign in")
    st.caption("Enter the user id issued by the recommendation service.")
    with st.form("sign_in"):
        user_id = st.text_input("User id")
        if st.form_submit_button("Continue", type="primary", use_container_width=True):
            if not user_id.strip():
                st.error("User id cannot be empty.")
            else:
                _controller().sign_in(user_id)
                st.session_state[_STATE_KEY] = SessionState()
                st.switch_page(RECOMMENDATIONS_PAGE)


# ── Main ─────────────────────────────────────────────────────────────────


def _inject_css() -> None:
    st.markdown(_CARD_CSS, unsafe_allow_html=True)


def _wrap_recommendations():
    _inject_css()
    page_recommendations()


def _wrap_detail():
    _inject_css()
    page_detail()


def _wrap_sign_in():
    _inject_css()
    page_sign_in()


RECOMMENDATIONS_PAGE = st.Page(
    _wrap_recommendations, title="Recommendations", icon="🏆", url_path="recommendations", default=True,
)
DETAIL_PAGE = st.Page(_wrap_detail, title="Hackathon", icon="📄", url_path="hackathon")
SIGN_IN_PAGE = st.Page(_wrap_sign_in, title="Sign in", icon="🔑", url_path="login")

nav = st.navigation([RECOMMENDATIONS_PAGE, DETAIL_PAGE, SIGN_IN_PAGE])
nav.run()
