"""Client for the external text-generation service and the draft advisor.

The generation service is treated as an opaque ``prompt -> text`` call.
Every call made through DraftAdvisor is rate limited first and wrapped in a
RequestCoordinator so a superseded request never commits its answer.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from draft_oracle.models.analytics import DraftAnalysis
from draft_oracle.models.draft import DraftSession
from draft_oracle.models.rate_limit import RateLimitResult
from draft_oracle.services.rate_limiter import RateLimiter
from draft_oracle.services.request_coordinator import CancellationToken, RequestCoordinator

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """The generation service failed or returned an unusable response."""


class AIClient:
    """Calls an OpenAI-compatible chat completions endpoint."""

    DEFAULT_API_URL = "https://api.tokenfactory.us-central1.nebius.com/v1/chat/completions"
    DEFAULT_MODEL = "deepseek-ai/DeepSeek-V3-0324-fast"
    SYSTEM_PROMPT = "You are a League of Legends draft analyst. Answer concisely."

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 15.0,
    ):
        """Initialize the client.

        Args:
            api_key: Bearer token for the service
            api_url: Chat completions URL
            model: Model identifier sent with each request
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def generate(self, prompt: str) -> str:
        """Send a prompt and return the generated text.

        Raises:
            AIServiceError: On transport errors, non-2xx responses or empty output
        """
        client = await self._get_client()
        try:
            response = await client.post(
                self.api_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": self.SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": 0.3,
                    "max_tokens": 1500,
                },
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise AIServiceError("Rate limit exceeded. Please try again in a moment.") from e
            raise AIServiceError(f"AI service error (HTTP {e.response.status_code})") from e
        except (httpx.HTTPError, ValueError) as e:
            raise AIServiceError(f"AI service unavailable: {e}") from e

        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise AIServiceError("AI returned an unexpected response") from e
        if not text or not text.strip():
            raise AIServiceError("AI returned empty response")
        return text.strip()


@dataclass
class InsightResult:
    """Outcome of one advisor request."""

    text: Optional[str] = None
    error: Optional[str] = None
    rate_limit: Optional[RateLimitResult] = None
    stale: bool = False  # Superseded by a newer request from the same subscriber

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "error": self.error,
            "stale": self.stale,
            "rate_limit": self.rate_limit.to_dict() if self.rate_limit else None,
        }


class DraftAdvisor:
    """Gates AI calls behind the rate limiter and a per-subscriber coordinator."""

    def __init__(
        self,
        ai_client: AIClient,
        rate_limiter: RateLimiter,
        max_requests: Optional[int] = None,
        window_ms: Optional[int] = None,
    ):
        self.ai_client = ai_client
        self.rate_limiter = rate_limiter
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._coordinators: dict[str, RequestCoordinator[str]] = {}

    def coordinator_for(self, subscriber: str) -> RequestCoordinator[str]:
        if subscriber not in self._coordinators:
            self._coordinators[subscriber] = RequestCoordinator()
        return self._coordinators[subscriber]

    def _release(self, subscriber: str, coordinator: RequestCoordinator[str]) -> None:
        # Keep the entry while a newer request from the same subscriber is in flight
        if self._coordinators.get(subscriber) is coordinator and not coordinator.has_pending:
            del self._coordinators[subscriber]

    async def get_insight(
        self,
        identifier: str,
        prompt: str,
        subscriber: Optional[str] = None,
    ) -> InsightResult:
        """Generate text for a prompt on behalf of a caller.

        Args:
            identifier: Rate limit identity (client address, user id)
            prompt: Prompt text
            subscriber: Coordinator key; requests with the same key supersede
                each other. Defaults to identifier.
        """
        limit = await self.rate_limiter.check_rate_limit(
            identifier,
            max_requests=self.max_requests,
            window_ms=self.window_ms,
        )
        if not limit.allowed:
            return InsightResult(error="Too many requests. Please try again later.", rate_limit=limit)

        key = subscriber or identifier
        coordinator = self.coordinator_for(key)
        tokens: list[CancellationToken] = []

        async def operation(token: CancellationToken, text: str) -> str:
            tokens.append(token)
            return await self.ai_client.generate(text)

        try:
            text = await coordinator.execute(operation, prompt)
        finally:
            self._release(key, coordinator)
        if tokens and tokens[0].cancelled:
            return InsightResult(rate_limit=limit, stale=True)
        if text is None:
            return InsightResult(error=coordinator.error, rate_limit=limit)
        return InsightResult(text=text, rate_limit=limit)

    async def close(self):
        for coordinator in self._coordinators.values():
            coordinator.cancel("Shutdown")
        await self.ai_client.close()


def build_draft_prompt(session: DraftSession, analysis: Optional[DraftAnalysis] = None) -> str:
    """Format committed rosters and analytics into a prompt."""
    turn = session.next_turn
    lines = [
        "## Current Draft State",
        f"- Format: {session.format.value}",
        f"- Phase: {turn.phase if turn else 'Complete'}",
        f"- Next: {f'{turn.team.value} {turn.action.value}' if turn else 'none'}",
        f"- Blue Picks: {session.blue_picks}",
        f"- Red Picks: {session.red_picks}",
        f"- Bans: {session.blue_bans + session.red_bans}",
    ]

    if analysis is not None:
        win_rate = analysis.win_rate
        lines.extend([
            "",
            "## Composition Analysis",
            f"- Blue strengths: {', '.join(win_rate.blue_strengths) or 'none'}",
            f"- Blue weaknesses: {', '.join(win_rate.blue_weaknesses) or 'none'}",
            f"- Red strengths: {', '.join(win_rate.red_strengths) or 'none'}",
            f"- Red weaknesses: {', '.join(win_rate.red_weaknesses) or 'none'}",
            f"- Synergy: blue {analysis.blue_synergy.total}, red {analysis.red_synergy.total}",
            f"- Estimated win rate: blue {win_rate.blue_win_rate}%, red {win_rate.red_win_rate}%",
        ])
        if turn and turn.action.value == "pick":
            counters = analysis.blue_counters if turn.team.value == "blue" else analysis.red_counters
            if counters:
                lines.append(f"- Counter candidates: {', '.join(c.champion_id for c in counters[:5])}")

    lines.extend([
        "",
        "Give a short recommendation for the next action and explain the main risk for each side.",
    ])
    return "\n".join(lines)
