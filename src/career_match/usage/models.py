"""In-memory token usage for one interactive session."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from career_match.usage.cost_calculator import calculate_cost


class SessionUsage(BaseModel):
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = Field(default_factory=datetime.now)
    calls: list[tuple[str, int, int]] = Field(default_factory=list)
    failed_calls: int = 0

    def record(self, token_summary: dict) -> None:
        """Fold an ``LLMClient.get_token_summary()`` result into the session."""
        self.calls.extend(token_summary.get("calls", []))

    @property
    def total_input_tokens(self) -> int:
        return sum(c[1] for c in self.calls)

    @property
    def total_output_tokens(self) -> int:
        return sum(c[2] for c in self.calls)

    @property
    def estimated_cost_usd(self) -> float:
        return calculate_cost(self.calls)
