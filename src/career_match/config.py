"""Frozen settings read from config.yaml; missing keys keep their defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-5"
    timeout: int = 60
    max_retries: int = 3
    web_search: bool = False
    web_search_max_uses: int = 5


@dataclass(frozen=True)
class SanitizerConfig:
    max_chars: int = 3000
    min_chars: int = 30
    max_upload_bytes: int = 10 * 1024 * 1024


@dataclass(frozen=True)
class GenerationConfig:
    profile_max_tokens: int = 800
    search_max_tokens: int = 2500
    cover_letter_max_tokens: int = 900
    assessment_max_tokens: int = 900
    listing_count: int = 8
    prompt_skill_limit: int = 6


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    sanitizer: SanitizerConfig = field(default_factory=SanitizerConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Read ``path`` (or the first config.yaml in cwd or the project root)."""
    if path is None:
        search = (Path.cwd(), Path(__file__).resolve().parents[2])
        path = next((d / "config.yaml" for d in search if (d / "config.yaml").exists()), None)

    raw: dict = {}
    if path is not None and Path(path).exists():
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        sanitizer=SanitizerConfig(**raw.get("sanitizer", {})),
        generation=GenerationConfig(**raw.get("generation", {})),
    )
