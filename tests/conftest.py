"""Shared test fixtures."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from career_match.clients.llm_client import LLMClient, LLMResponse
from career_match.models.opportunity import OpportunityListing
from career_match.models.profile import CandidateProfile, SearchPreferences

COMPANIES = ["Google", "Stripe", "Shopify", "Notion", "Figma", "Vercel", "Spotify", "Uber"]


def make_response(text: str, input_tokens: int = 100, output_tokens: int = 50) -> LLMResponse:
    return LLMResponse(text=text, input_tokens=input_tokens, output_tokens=output_tokens)


@pytest.fixture
def sample_resume_text() -> str:
    base = """Jane Doe
jane@example.com | linkedin.com/in/janedoe

EXPERIENCE
Backend Engineer, Acme Corp (2021 - present)
- Built Python/FastAPI services handling 2M requests per day
- Cut p95 latency 40% by introducing Redis caching
- Led migration of batch jobs to Kubernetes CronJobs

Software Engineer Intern, Widgets Inc (2020)
- Wrote data pipelines in Python and SQL

EDUCATION
B.Sc. Computer Science, State University (2017 - 2021)

SKILLS
Python, FastAPI, PostgreSQL, Redis, Kubernetes, Docker, AWS
"""
    text = base
    while len(text) < 1200:
        text += "\n- Mentored junior engineers and reviewed pull requests weekly"
    return text[:1200]


@pytest.fixture
def profile_json() -> dict:
    return {
        "name": "Jane Doe",
        "skills": ["Python", "FastAPI", "PostgreSQL", "Redis", "Kubernetes"],
        "experience_years": 3,
        "education": "B.Sc. Computer Science",
        "current_role": "Backend Engineer",
        "summary": "Backend engineer focused on Python services.",
    }


@pytest.fixture
def sample_profile(profile_json) -> CandidateProfile:
    return CandidateProfile(**profile_json)


@pytest.fixture
def sample_preferences() -> SearchPreferences:
    return SearchPreferences(
        linkedin="linkedin.com/in/janedoe",
        email="jane@example.com",
        job_type="both",
        query="",
    )


@pytest.fixture
def listings_json() -> list[dict]:
    return [
        {
            "id": 100 + i,
            "title": f"Backend Engineer {i}",
            "company": company,
            "type": "Internship" if i % 2 else "Full-time",
            "location": "Remote",
            "match_score": 80 + i,
            "key_requirements": ["Python", "APIs", "SQL"],
            "description": "Build services. Ship features.",
            "apply_url": f"https://careers.example.com/{i}",
            "source": "LinkedIn",
            "posted": "2 days ago",
        }
        for i, company in enumerate(COMPANIES, 1)
    ]


@pytest.fixture
def sample_listing(listings_json) -> OpportunityListing:
    return OpportunityListing.model_validate({**listings_json[2], "id": 3})


@pytest.fixture
def assessment_json() -> dict:
    return {
        "overall_fit": "Strong backend fit, light on Go.",
        "missing_skills": ["Go"],
        "missing_keywords": ["gRPC"],
        "sections_to_add": [{"section": "Projects", "why": "Show side work"}],
        "improvements": [{"area": "Summary", "tip": "Lead with impact"}],
    }


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.complete = AsyncMock(return_value=make_response("{}"))
    client.get_token_summary = MagicMock(return_value={"input": 0, "output": 0, "calls": []})
    return client


@pytest.fixture
def scripted_llm(mock_llm_client, profile_json, listings_json, assessment_json):
    """Mock whose replies depend on which prompt was sent."""

    async def _complete(system, messages, max_tokens, tools=None, model=None):
        prompt = messages[-1]["content"]
        if prompt.startswith("Extract info from this resume"):
            return make_response(json.dumps(profile_json))
        if prompt.startswith("Generate "):
            return make_response("```json\n" + json.dumps(listings_json) + "\n```")
        if prompt.startswith("Write a cover letter"):
            return make_response("Dear Hiring Manager,\n\nHi there.\n\nJane Doe")
        if prompt.startswith("Career coach"):
            return make_response(json.dumps(assessment_json))
        raise AssertionError(f"unexpected prompt: {prompt[:40]}")

    mock_llm_client.complete.side_effect = _complete
    return mock_llm_client
