"""
Chat API Routes

This module exposes the chat agent over HTTP: the main ask endpoint plus
conversation history and session statistics.
"""

import os

from fastapi import APIRouter, Depends, HTTPException

from ..config import Settings
from ..deps import get_agent, get_session_store, get_settings
from ..schemas import ChatRequest, ChatResponse, HistoryResponse
from ..services.agent import ChatAgent
from ..services.charting import plot_encoding
from ..utils.conversation_manager import InMemorySessionStore
from ..utils.logs import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def ask(req: ChatRequest, agent: ChatAgent = Depends(get_agent),
              settings: Settings = Depends(get_settings)):
    """
    Answer a chat message.

    Runs the full pipeline (classification, SQL generation, execution,
    charting, answer composition) and records both turns in the session.
    """
    if not req.message or not req.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    result = await agent.process_interaction(req.message, req.session_id)

    rows = result.rows
    if rows is not None and req.max_rows is not None:
        rows = rows[:req.max_rows]

    chart_path = None
    if settings.render_charts and result.chart is not None:
        try:
            path = plot_encoding(result.chart, out_dir=settings.charts_dir)
            chart_path = os.path.basename(path) if path else None
        except Exception as e:
            logger.warning(f"[chart_error] {e}")

    return ChatResponse(
        mode=result.mode,
        text=result.text,
        query_sql=result.query,
        rows=rows,
        chart=result.chart,
        chart_path=chart_path,
        session_id=result.session_id,
    )


@router.get("/history/{session_id}", response_model=HistoryResponse)
async def get_conversation_history(session_id: str,
                                   sessions: InMemorySessionStore = Depends(get_session_store)):
    """Get conversation history for a session."""
    return HistoryResponse(session_id=session_id, messages=sessions.get(session_id))


@router.delete("/history/{session_id}")
async def clear_conversation_history(session_id: str,
                                     sessions: InMemorySessionStore = Depends(get_session_store)):
    """Clear conversation history for a session."""
    cleared = sessions.clear(session_id)
    status = "cleared" if cleared else "not_found"
    return {"message": f"Conversation history {status} for session {session_id}"}


@router.get("/stats")
async def get_chat_stats(sessions: InMemorySessionStore = Depends(get_session_store)):
    """Get chat session statistics."""
    return {
        "status": "operational",
        "session_stats": sessions.stats(),
    }
