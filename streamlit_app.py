"""Streamlit Web UI for career-match.

Four stages: Upload → Details → Profile → Jobs. All session data lives in one
SessionState object kept in ``st.session_state``.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so the LLM client can read it
if "ANTHROPIC_API_KEY" not in os.environ:
    try:
        os.environ["ANTHROPIC_API_KEY"] = st.secrets["ANTHROPIC_API_KEY"]
    except (KeyError, FileNotFoundError):
        pass

from career_match.clients.llm_client import LLMClient
from career_match.config import load_config
from career_match.models.artifact import ArtifactKind, CoverLetter
from career_match.parsers.document_parser import ACCEPTED_SUFFIXES
from career_match.parsers.sanitizer import preview
from career_match.pipeline.workflow import (
    ArtifactStatus,
    SessionState,
    WorkflowController,
    WorkflowState,
)

st.set_page_config(page_title="CareerMatch", page_icon=":briefcase:", layout="centered")

# ---------------------------------------------------------------------------
# Session + controller
# ---------------------------------------------------------------------------

if "career_session" not in st.session_state:
    st.session_state.career_session = SessionState()


def _controller() -> WorkflowController:
    config = load_config()
    try:
        llm = LLMClient(
            timeout=config.llm.timeout,
            model=config.llm.model,
            max_retries=config.llm.max_retries,
        )
    except Exception as e:
        logger.exception("LLM client initialisation failed")
        st.error(f"Could not start the LLM client. Check ANTHROPIC_API_KEY: {e}")
        st.stop()
    return WorkflowController(llm, session=st.session_state.career_session, config=config)


controller = _controller()
session = controller.session

# ---------------------------------------------------------------------------
# Header + progress
# ---------------------------------------------------------------------------

st.title("CareerMatch")
st.caption("Upload resume · Find real jobs · Generate cover letters")

cols = st.columns(len(WorkflowState))
for col, stage in zip(cols, WorkflowState):
    done = stage < controller.state
    label = f"✓ {stage.label}" if done else f"{stage.value + 1}. {stage.label}"
    if done:
        if col.button(label, key=f"nav_{stage.name}"):
            controller.go_to(stage)
            st.rerun()
    else:
        col.markdown(f"**{label}**" if stage == controller.state else f":gray[{label}]")

st.divider()


def _show_error(outcome) -> None:
    if outcome.error:
        st.error(f"⚠ {outcome.error}")


# ---------------------------------------------------------------------------
# Stage 0: Upload
# ---------------------------------------------------------------------------

if controller.state is WorkflowState.UPLOAD:
    st.subheader("Upload your resume")
    uploaded = st.file_uploader("Resume", type=ACCEPTED_SUFFIXES, help="PDF, DOCX or TXT")
    if uploaded is not None and not controller.is_current_document(uploaded.getvalue()):
        with st.spinner("Reading file…"):
            outcome = controller.load_document(uploaded.getvalue(), uploaded.name)
        _show_error(outcome)

    if session.document_text:
        st.success(f"{session.document_name} · {len(session.document_text)} characters")
        st.caption(preview(session.document_text))

    if st.button("Continue →", type="primary", disabled=not controller.can_go_to(WorkflowState.DETAILS)):
        controller.advance()
        st.rerun()

# ---------------------------------------------------------------------------
# Stage 1: Details
# ---------------------------------------------------------------------------

elif controller.state is WorkflowState.DETAILS:
    st.subheader("Your details")
    prefs = session.preferences
    linkedin = st.text_input("LinkedIn URL", value=prefs.linkedin, placeholder="linkedin.com/in/yourname")
    email = st.text_input("Email", value=prefs.email, placeholder="you@gmail.com")
    type_labels = {"both": "Both", "intern": "Internship", "full": "Full-time"}
    job_type = st.radio(
        "Job type",
        list(type_labels),
        index=list(type_labels).index(prefs.job_type),
        format_func=type_labels.get,
        horizontal=True,
    )
    query = st.text_input(
        "Role you want (optional)",
        value=prefs.query,
        placeholder='e.g. "ML intern startup" or "backend dev remote"',
    )

    back, go = st.columns([1, 3])
    if back.button("← Back"):
        controller.back()
        st.rerun()
    if go.button("Analyze resume →", type="primary"):
        controller.update_preferences(linkedin=linkedin, email=email, job_type=job_type, query=query)
        with st.spinner("Analyzing resume…"):
            outcome = asyncio.run(controller.analyze_profile())
        if outcome.advanced:
            st.rerun()
        _show_error(outcome)

# ---------------------------------------------------------------------------
# Stage 2: Profile
# ---------------------------------------------------------------------------

elif controller.state is WorkflowState.PROFILE:
    profile = session.profile
    st.subheader("Your profile")
    if session.profile_is_fallback:
        st.warning("We could not fully analyze your resume, so this is a basic profile.")
    left, right = st.columns(2)
    left.metric("Name", profile.name)
    right.metric("Role", profile.current_role)
    left.metric("Experience", f"{profile.experience_years:g} yrs")
    right.metric("Education", profile.education)
    if profile.skills:
        st.markdown(" ".join(f"`{s}`" for s in profile.skills[:14]))
    st.write(profile.summary)

    back, go = st.columns([1, 3])
    if back.button("← Back"):
        controller.back()
        st.rerun()
    if go.button("Find matching jobs →", type="primary"):
        with st.spinner("Finding matching jobs worldwide…"):
            outcome = asyncio.run(controller.find_opportunities())
        if outcome.advanced:
            st.rerun()
        _show_error(outcome)

# ---------------------------------------------------------------------------
# Stage 3: Jobs
# ---------------------------------------------------------------------------

else:
    st.subheader(f"{len(session.listings)} matching jobs")
    if st.button("← Back to profile"):
        controller.back()
        st.rerun()

    for job in session.listings:
        with st.container(border=True):
            head, score = st.columns([4, 1])
            head.markdown(f"**{job.title}**  \n{job.organization} · {job.location} · {job.category}")
            score.metric("Match", f"{job.match_score}%")
            st.caption(job.description)
            if job.key_requirements:
                st.markdown(" ".join(f"`{r}`" for r in job.key_requirements[:3]))
            meta = f"{job.source_label} · {job.posted_label}"
            if job.apply_url:
                meta += f" · [Apply]({job.apply_url})"
            st.caption(meta)

            b1, b2 = st.columns(2)
            for col, kind, label in (
                (b1, ArtifactKind.COVER_LETTER, "✉ Cover letter"),
                (b2, ArtifactKind.CV_ASSESSMENT, "📋 CV tips"),
            ):
                busy = controller.is_generating(job.id, kind)
                if col.button(label, key=f"{kind.value}_{job.id}", disabled=busy):
                    with st.spinner("Generating…"):
                        outcome = asyncio.run(controller.generate_artifact(job.id, kind))
                    if outcome.status is ArtifactStatus.FAILED:
                        st.error(f"⚠ {outcome.error}")
                    elif outcome.status is not ArtifactStatus.READY:
                        st.info(str(outcome.error))

            letter = controller.artifact(job.id, ArtifactKind.COVER_LETTER)
            if isinstance(letter, CoverLetter):
                with st.expander("Cover letter", expanded=True):
                    st.text_area("Cover letter", letter.text, height=320, key=f"letter_text_{job.id}", label_visibility="collapsed")
                    st.download_button(
                        "Download .txt",
                        letter.text,
                        file_name=f"cover_letter_{job.organization}_{job.id}.txt".replace(" ", "_"),
                        key=f"letter_dl_{job.id}",
                    )

            tips = controller.artifact(job.id, ArtifactKind.CV_ASSESSMENT)
            if tips is not None:
                with st.expander("CV tips", expanded=True):
                    st.write(tips.overall_fit)
                    if tips.missing_skills:
                        st.markdown("**Missing skills:** " + ", ".join(tips.missing_skills))
                    if tips.missing_keywords:
                        st.markdown("**Missing keywords:** " + ", ".join(tips.missing_keywords))
                    for s in tips.sections_to_add:
                        st.markdown(f"- **Add {s.section}**: {s.why}")
                    for imp in tips.improvements:
                        st.markdown(f"- **{imp.area}**: {imp.tip}")

    usage = session.usage
    st.caption(
        f"Session usage: {usage.total_input_tokens + usage.total_output_tokens} tokens "
        f"(~${usage.estimated_cost_usd:.3f})"
    )
