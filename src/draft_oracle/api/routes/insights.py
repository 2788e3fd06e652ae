"""REST endpoint for rate-limited AI draft insights."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from draft_oracle.services.ai_client import DraftAdvisor, build_draft_prompt
from draft_oracle.services.rate_limiter import rate_limit_error_body, rate_limit_headers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/insights", tags=["insights"])


class InsightRequest(BaseModel):
    prompt: Optional[str] = None
    session_id: Optional[str] = None


def client_identifier(request: Request) -> str:
    """Rate limit identity: first forwarded address, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "anonymous"


@router.post("")
async def get_insight(request: Request, response: Response, body: InsightRequest):
    """Generate an AI insight for a prompt and/or a live draft session."""
    advisor: Optional[DraftAdvisor] = request.app.state.advisor
    if advisor is None:
        raise HTTPException(status_code=503, detail="AI insights are not configured")

    parts = []
    if body.session_id:
        session = request.app.state.session_manager.get_session(body.session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Session not found")
        parts.append(build_draft_prompt(session))
    if body.prompt and body.prompt.strip():
        parts.append(body.prompt.strip())
    if not parts:
        raise HTTPException(status_code=422, detail="prompt or session_id is required")

    identifier = client_identifier(request)
    result = await advisor.get_insight(
        identifier,
        "\n\n".join(parts),
        subscriber=body.session_id or identifier,
    )

    if result.rate_limit is not None and not result.rate_limit.allowed:
        return JSONResponse(
            status_code=429,
            content=rate_limit_error_body(result.rate_limit),
            headers=rate_limit_headers(result.rate_limit),
        )

    headers = rate_limit_headers(result.rate_limit) if result.rate_limit else {}
    if result.error:
        logger.error(f"Insight failed for {identifier}: {result.error}")
        return JSONResponse(status_code=502, content=result.to_dict(), headers=headers)

    response.headers.update(headers)
    return result.to_dict()
