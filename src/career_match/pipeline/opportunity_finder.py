"""Agent 2: Opportunity Finder - requests listings matched to the profile."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from career_match.clients.llm_client import LLMClient
from career_match.errors import ParseFailure, ValidationFailure
from career_match.models.opportunity import OpportunityListing
from career_match.models.profile import CandidateProfile, SearchPreferences
from career_match.pipeline.prompts import build_search_request
from career_match.utils.json_parser import parse_structured

logger = logging.getLogger(__name__)


class OpportunityFinder:
    def __init__(
        self,
        llm: LLMClient,
        *,
        listing_count: int = 8,
        skill_limit: int = 6,
        max_tokens: int = 2500,
        tools: tuple[dict, ...] = (),
    ):
        self.llm = llm
        self.listing_count = listing_count
        self.skill_limit = skill_limit
        self.max_tokens = max_tokens
        self.tools = tools

    async def search(
        self, profile: CandidateProfile, preferences: SearchPreferences
    ) -> list[OpportunityListing]:
        """Return a fresh listing set with ids renumbered 1..N.

        Raises:
            ParseFailure: no JSON array could be recovered.
            ValidationFailure: the array was empty or held no valid listing.
        """
        request = build_search_request(
            profile,
            preferences,
            listing_count=self.listing_count,
            skill_limit=self.skill_limit,
            max_tokens=self.max_tokens,
            tools=self.tools,
        )
        response = await self.llm.complete(
            system=request.system,
            messages=request.messages,
            max_tokens=request.max_tokens,
            tools=list(request.tools) or None,
        )

        data = parse_structured(response.text, "array")
        if data is None:
            raise ParseFailure("Could not load jobs. Please try again.")
        return self._build_listings(data)

    @staticmethod
    def _build_listings(items: list) -> list[OpportunityListing]:
        listings: list[OpportunityListing] = []
        for raw in items:
            if not isinstance(raw, dict):
                logger.warning("Dropping non-object listing entry: %r", raw)
                continue
            candidate = {**raw, "id": len(listings) + 1}
            try:
                listings.append(OpportunityListing.model_validate(candidate))
            except ValidationError as exc:
                logger.warning("Dropping invalid listing %r: %s", raw.get("title"), exc)
        if not listings:
            raise ValidationFailure("Could not load jobs. Please try again.")
        return listings
