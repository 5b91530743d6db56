"""Prompt builders for profile extraction, opportunity search and artifacts.

Every builder is a pure function of the session data it is given: the same
profile, preferences and listing always render the same request, and each
embedded field is clipped so request size stays bounded.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from career_match.models.opportunity import OpportunityListing
from career_match.models.profile import CandidateProfile, SearchPreferences

DEFAULT_SKILL_LIMIT = 6
ARTIFACT_SKILL_LIMIT = 15
FIELD_MAX_CHARS = 300
REQUIREMENT_LIMIT = 6

PROFILE_SYSTEM_PROMPT = "Return only a valid JSON object. No markdown."

SEARCH_SYSTEM_PROMPT = (
    "Return ONLY a valid JSON array starting with [ and ending with ]. "
    "No markdown, no explanation."
)

COVER_LETTER_SYSTEM_PROMPT = "Write human-sounding cover letters. No AI clichés."

ASSESSMENT_SYSTEM_PROMPT = "Return only valid JSON. Be specific."

EXAMPLE_EMPLOYERS = (
    "Google, Meta, Stripe, Shopify, Notion, Figma, Vercel, OpenAI, Airbnb, "
    "Spotify, Microsoft, Apple, Netflix, Uber"
)

EXAMPLE_CAREER_URLS = (
    "https://careers.google.com, https://www.metacareers.com, "
    "https://stripe.com/jobs, https://www.shopify.com/careers"
)

BANNED_PHRASES = ("excited to apply", "passionate", "leverage", "proven track record")


@dataclass(frozen=True)
class PromptRequest:
    """A rendered completion request."""

    system: str
    user: str
    max_tokens: int
    tools: tuple[dict, ...] = field(default=())

    @property
    def messages(self) -> list[dict]:
        return [{"role": "user", "content": self.user}]


def _clip(value: object, limit: int = FIELD_MAX_CHARS) -> str:
    text = "" if value is None else str(value).strip()
    return text[:limit]


def _years(profile: CandidateProfile) -> str:
    years = profile.experience_years
    return str(int(years)) if float(years).is_integer() else f"{years:g}"


def _skills(profile: CandidateProfile, limit: int) -> str:
    return ", ".join(_clip(s, 60) for s in profile.skills[:limit])


def _requirements(listing: OpportunityListing) -> str:
    return ", ".join(_clip(r, 120) for r in listing.key_requirements[:REQUIREMENT_LIMIT])


def category_instruction(job_type: str) -> str:
    if job_type == "intern":
        return "Internship only"
    if job_type == "full":
        return "Full-time only"
    return "mix of Internship and Full-time"


def search_focus(profile: CandidateProfile, preferences: SearchPreferences) -> str:
    """The user's own query, or one derived from their role and top skill."""
    if preferences.query.strip():
        return _clip(preferences.query, 120)
    role = profile.current_role or "developer"
    top_skill = profile.skills[0] if profile.skills else ""
    return f"{role} {top_skill}".strip()


def build_profile_request(resume_text: str, max_tokens: int = 800) -> PromptRequest:
    user = (
        "Extract info from this resume as JSON. Keys: name, skills (array), "
        "experience_years (number), education, current_role, summary.\n\n"
        f"{resume_text}"
    )
    return PromptRequest(system=PROFILE_SYSTEM_PROMPT, user=user, max_tokens=max_tokens)


def build_search_request(
    profile: CandidateProfile,
    preferences: SearchPreferences,
    *,
    listing_count: int = 8,
    skill_limit: int = DEFAULT_SKILL_LIMIT,
    max_tokens: int = 2500,
    tools: tuple[dict, ...] = (),
) -> PromptRequest:
    user = f"""Generate {listing_count} realistic job listings for this candidate. Type: {category_instruction(preferences.job_type)}. Looking for: "{search_focus(profile, preferences)}". Skills: {_skills(profile, skill_limit)}. Experience: {_years(profile)} yrs as {_clip(profile.current_role, 100)}.

Use REAL company names ({EXAMPLE_EMPLOYERS}, etc) and REAL worldwide locations.
Use REAL careers URLs: {EXAMPLE_CAREER_URLS}, etc.

Return ONLY a raw JSON array. Start with [ end with ]. No markdown, no text before or after.
Each object: id(1-{listing_count}), title, company, type("Internship" or "Full-time"), location, match_score(70-97), key_requirements(array of 3 strings), description(2 sentences), apply_url(real URL), source("LinkedIn" or "Indeed" or "Company Website"), posted("2 days ago" or "1 week ago" etc)."""
    return PromptRequest(
        system=SEARCH_SYSTEM_PROMPT, user=user, max_tokens=max_tokens, tools=tuple(tools)
    )


def build_cover_letter_request(
    profile: CandidateProfile,
    preferences: SearchPreferences,
    listing: OpportunityListing,
    max_tokens: int = 900,
) -> PromptRequest:
    banned = ", ".join(f'"{p}"' for p in BANNED_PHRASES)
    user = f"""Write a cover letter for: {_clip(listing.title, 120)} at {_clip(listing.organization, 120)} ({listing.category}, {_clip(listing.location, 120)}).
Applicant: {_clip(profile.name, 120)} | {_clip(preferences.email, 120)} | {_clip(preferences.linkedin, 200)}
Skills: {_skills(profile, ARTIFACT_SKILL_LIMIT)}
{_years(profile)} yrs as {_clip(profile.current_role, 100)}. {_clip(profile.education)}.
{profile.summary}
Role needs: {_requirements(listing)}

Rules: conversational human tone, use contractions, vary sentence length. No {banned}. 3 paragraphs under 350 words. Start "Dear Hiring Manager,". End with name/email/LinkedIn."""
    return PromptRequest(system=COVER_LETTER_SYSTEM_PROMPT, user=user, max_tokens=max_tokens)


def build_assessment_request(
    profile: CandidateProfile,
    listing: OpportunityListing,
    max_tokens: int = 900,
) -> PromptRequest:
    user = f"""Career coach: analyze candidate vs job. Return ONLY valid JSON:
{{"overall_fit":"1-2 sentences","missing_skills":["s1"],"missing_keywords":["k1"],"sections_to_add":[{{"section":"s","why":"w"}}],"improvements":[{{"area":"a","tip":"t"}}]}}
Candidate: {profile.summary} | {_skills(profile, ARTIFACT_SKILL_LIMIT)} | {_years(profile)}yr {_clip(profile.current_role, 100)} | {_clip(profile.education)}
Job: {_clip(listing.title, 120)} at {_clip(listing.organization, 120)} | Needs: {_requirements(listing)} | {_clip(listing.description, 600)}"""
    return PromptRequest(system=ASSESSMENT_SYSTEM_PROMPT, user=user, max_tokens=max_tokens)
