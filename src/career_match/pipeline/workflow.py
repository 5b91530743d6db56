"""Workflow controller - drives Upload → Details → Profile → Opportunities."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable

from career_match.cache.generation_cache import GenerationCache
from career_match.clients.llm_client import LLMClient, web_search_tool
from career_match.config import AppConfig
from career_match.errors import (
    CareerMatchError,
    ExtractionTooShort,
    GenerationInFlight,
    ServiceError,
    StaleGeneration,
    ValidationFailure,
)
from career_match.models.artifact import ArtifactKind, GeneratedArtifact
from career_match.models.opportunity import OpportunityListing
from career_match.models.profile import CandidateProfile, SearchPreferences
from career_match.parsers.document_parser import extract_text
from career_match.parsers.sanitizer import sanitize_text
from career_match.pipeline.cover_letter_writer import CoverLetterWriter
from career_match.pipeline.cv_assessor import CvAssessor
from career_match.pipeline.opportunity_finder import OpportunityFinder
from career_match.pipeline.profile_extractor import ProfileExtractor
from career_match.usage.models import SessionUsage

logger = logging.getLogger(__name__)


def _digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class WorkflowState(IntEnum):
    UPLOAD = 0
    DETAILS = 1
    PROFILE = 2
    OPPORTUNITIES = 3

    @property
    def label(self) -> str:
        return self.name.title()


@dataclass
class SessionState:
    """Everything one interactive session knows. Nothing lives outside it."""

    state: WorkflowState = WorkflowState.UPLOAD
    document_name: str = ""
    document_text: str = ""  # sanitized
    document_digest: str = ""  # sha256 of the uploaded bytes
    preferences: SearchPreferences = field(default_factory=SearchPreferences)
    profile: CandidateProfile | None = None
    profile_is_fallback: bool = False
    listings: list[OpportunityListing] = field(default_factory=list)
    artifacts: GenerationCache = field(default_factory=GenerationCache)
    usage: SessionUsage = field(default_factory=SessionUsage)


@dataclass
class StepOutcome:
    """Result of a stage action. ``error`` is set when the stage did not advance."""

    state: WorkflowState
    advanced: bool = False
    error: CareerMatchError | None = None
    notice: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


class ArtifactStatus(str, Enum):
    READY = "ready"
    PENDING = "pending"  # already in flight
    STALE = "stale"  # listing set replaced before it finished
    FAILED = "failed"


@dataclass
class ArtifactOutcome:
    status: ArtifactStatus
    artifact: GeneratedArtifact | None = None
    error: CareerMatchError | None = None


class WorkflowController:
    """Four-stage state machine over an explicit :class:`SessionState`.

    Forward moves go one stage at a time and only when the stage guard
    holds; otherwise they are no-ops. Backward moves are always allowed and
    never discard data. Long-running actions return typed outcomes instead
    of raising.
    """

    def __init__(
        self,
        llm: LLMClient,
        session: SessionState | None = None,
        config: AppConfig | None = None,
        *,
        on_phase: Callable[[str, str], None] | None = None,
    ):
        self.llm = llm
        self.session = session if session is not None else SessionState()
        self.config = config or AppConfig()
        self.on_phase = on_phase

        gen = self.config.generation
        tools: tuple[dict, ...] = ()
        if self.config.llm.web_search:
            tools = (web_search_tool(self.config.llm.web_search_max_uses),)
        self.profile_extractor = ProfileExtractor(llm, max_tokens=gen.profile_max_tokens)
        self.opportunity_finder = OpportunityFinder(
            llm,
            listing_count=gen.listing_count,
            skill_limit=gen.prompt_skill_limit,
            max_tokens=gen.search_max_tokens,
            tools=tools,
        )
        self.cover_letter_writer = CoverLetterWriter(llm, max_tokens=gen.cover_letter_max_tokens)
        self.cv_assessor = CvAssessor(llm, max_tokens=gen.assessment_max_tokens)

    # --- transitions -------------------------------------------------------

    @property
    def state(self) -> WorkflowState:
        return self.session.state

    def guard_satisfied(self, target: WorkflowState) -> bool:
        """Whether the output that ``target`` depends on is present."""
        s = self.session
        if target is WorkflowState.UPLOAD:
            return True
        if target is WorkflowState.DETAILS:
            return bool(s.document_text)
        if target is WorkflowState.PROFILE:
            return s.profile is not None
        return bool(s.listings)

    def can_go_to(self, target: WorkflowState) -> bool:
        if target < self.state:
            return True
        return target == self.state + 1 and self.guard_satisfied(target)

    def go_to(self, target: WorkflowState) -> bool:
        """Move to ``target`` if permitted; returns whether the state changed."""
        target = WorkflowState(target)
        if target == self.state or not self.can_go_to(target):
            return False
        logger.debug("Workflow %s -> %s", self.state.label, target.label)
        self.session.state = target
        return True

    def advance(self) -> bool:
        if self.state is WorkflowState.OPPORTUNITIES:
            return False
        return self.go_to(WorkflowState(self.state + 1))

    def back(self) -> bool:
        if self.state is WorkflowState.UPLOAD:
            return False
        return self.go_to(WorkflowState(self.state - 1))

    # --- stage actions -----------------------------------------------------

    def _notify(self, phase: str, detail: str = "") -> None:
        if self.on_phase:
            self.on_phase(phase, detail)

    def _record_usage(self, error: CareerMatchError | None = None) -> None:
        self.session.usage.record(self.llm.get_token_summary())
        if isinstance(error, ServiceError):
            self.session.usage.failed_calls += 1

    def is_current_document(self, data: bytes) -> bool:
        """Whether ``data`` is the upload already loaded into the session."""
        return bool(self.session.document_digest) and self.session.document_digest == _digest(data)

    def load_document(self, data: bytes, filename: str) -> StepOutcome:
        """Extract and sanitize an uploaded resume. Does not change stage."""
        limits = self.config.sanitizer
        try:
            raw = extract_text(data, filename, max_bytes=limits.max_upload_bytes)
            text = sanitize_text(raw, max_chars=limits.max_chars, min_chars=limits.min_chars)
        except CareerMatchError as exc:
            logger.warning("Rejected upload %s: %s", filename, exc)
            return StepOutcome(self.state, error=exc)
        self.session.document_name = filename
        self.session.document_text = text
        self.session.document_digest = _digest(data)
        return StepOutcome(self.state, notice=f"Read {len(text)} characters from {filename}")

    def update_preferences(self, **fields) -> SearchPreferences:
        merged = {**self.session.preferences.model_dump(), **fields}
        self.session.preferences = SearchPreferences(**merged)
        return self.session.preferences

    async def analyze_profile(self) -> StepOutcome:
        """Details → Profile: extract the candidate profile from the resume."""
        if self.state is not WorkflowState.DETAILS:
            return StepOutcome(self.state)
        text = self.session.document_text
        min_chars = self.config.sanitizer.min_chars
        if len(text) < min_chars:
            return StepOutcome(self.state, error=ExtractionTooShort(len(text), min_chars))

        self._notify("profile", "Analyzing resume…")
        try:
            result = await self.profile_extractor.extract(text)
        except CareerMatchError as exc:
            logger.error("Profile extraction failed: %s", exc)
            self._record_usage(exc)
            return StepOutcome(self.state, error=exc)
        self._record_usage()

        self.session.profile = result.profile
        self.session.profile_is_fallback = result.used_fallback
        advanced = self.go_to(WorkflowState.PROFILE)
        notice = "Could not fully read your resume; showing a basic profile." if result.used_fallback else ""
        self._notify("profile_done", result.profile.name)
        return StepOutcome(self.state, advanced=advanced, notice=notice)

    async def find_opportunities(self) -> StepOutcome:
        """Profile → Opportunities: request a fresh listing set."""
        profile = self.session.profile
        if self.state is not WorkflowState.PROFILE or profile is None:
            return StepOutcome(self.state)

        self._notify("search", "Finding matching jobs worldwide…")
        try:
            listings = await self.opportunity_finder.search(profile, self.session.preferences)
        except CareerMatchError as exc:
            logger.error("Opportunity search failed: %s", exc)
            self._record_usage(exc)
            return StepOutcome(self.state, error=exc)
        self._record_usage()

        self.session.listings = listings
        self.session.artifacts.reset()
        advanced = self.go_to(WorkflowState.OPPORTUNITIES)
        self._notify("search_done", f"{len(listings)} listings")
        return StepOutcome(self.state, advanced=advanced)

    # --- per-listing artifacts ---------------------------------------------

    def listing(self, listing_id: int) -> OpportunityListing | None:
        return next((j for j in self.session.listings if j.id == listing_id), None)

    def artifact(self, listing_id: int, kind: ArtifactKind) -> GeneratedArtifact | None:
        return self.session.artifacts.get((listing_id, ArtifactKind(kind)))

    def is_generating(self, listing_id: int, kind: ArtifactKind) -> bool:
        return self.session.artifacts.is_pending((listing_id, ArtifactKind(kind)))

    async def generate_cover_letter(self, listing_id: int) -> ArtifactOutcome:
        return await self.generate_artifact(listing_id, ArtifactKind.COVER_LETTER)

    async def generate_assessment(self, listing_id: int) -> ArtifactOutcome:
        return await self.generate_artifact(listing_id, ArtifactKind.CV_ASSESSMENT)

    async def generate_artifact(self, listing_id: int, kind: ArtifactKind) -> ArtifactOutcome:
        """Return the cached artifact for a listing or generate it once."""
        kind = ArtifactKind(kind)
        listing = self.listing(listing_id)
        profile = self.session.profile
        if listing is None or profile is None:
            return ArtifactOutcome(
                ArtifactStatus.FAILED,
                error=ValidationFailure(f"No listing with id {listing_id} in the current results"),
            )
        preferences = self.session.preferences

        async def _generate() -> GeneratedArtifact:
            if kind is ArtifactKind.COVER_LETTER:
                return await self.cover_letter_writer.write(profile, preferences, listing)
            return await self.cv_assessor.assess(profile, listing)

        try:
            artifact = await self.session.artifacts.get_or_generate((listing_id, kind), _generate)
        except GenerationInFlight as exc:
            return ArtifactOutcome(ArtifactStatus.PENDING, error=exc)
        except StaleGeneration as exc:
            self._record_usage()
            return ArtifactOutcome(ArtifactStatus.STALE, error=exc)
        except CareerMatchError as exc:
            logger.error("%s generation failed for listing %d: %s", kind.value, listing_id, exc)
            self._record_usage(exc)
            return ArtifactOutcome(ArtifactStatus.FAILED, error=exc)
        self._record_usage()
        return ArtifactOutcome(ArtifactStatus.READY, artifact=artifact)
