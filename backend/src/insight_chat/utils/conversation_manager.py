"""
Conversation Management Utilities

This module handles conversation history, session management, and context building
for maintaining conversational state across chat interactions.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, List, Any
from datetime import datetime

from ..schemas import ConversationTurn


class SessionStore(ABC):
    """Per-session bounded conversation history."""

    @abstractmethod
    def get(self, session_id: str) -> List[ConversationTurn]:
        """Return a copy of the session's turns, oldest first."""

    @abstractmethod
    def append(self, session_id: str, turn: ConversationTurn) -> None:
        """Append a turn, evicting the oldest ones past the bound."""

    @abstractmethod
    def evict(self, session_id: str) -> List[ConversationTurn]:
        """Drop turns beyond the bound (oldest first) and return them."""

    @abstractmethod
    def clear(self, session_id: str) -> bool:
        """Forget a session. Returns False if it did not exist."""

    @abstractmethod
    def lock(self, session_id: str) -> asyncio.Lock:
        """Lock that serialises interactions within one session."""


class InMemorySessionStore(SessionStore):
    """
    Process-local session store. History is lost on restart.

    Args:
        max_turns: Maximum number of turns kept per session
    """

    def __init__(self, max_turns: int = 20):
        if max_turns < 1:
            raise ValueError("max_turns must be positive")
        self.max_turns = max_turns
        self._history: Dict[str, List[ConversationTurn]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, session_id: str) -> List[ConversationTurn]:
        return list(self._history.get(session_id, []))

    def append(self, session_id: str, turn: ConversationTurn) -> None:
        self._history.setdefault(session_id, []).append(turn)
        self.evict(session_id)

    def evict(self, session_id: str) -> List[ConversationTurn]:
        turns = self._history.get(session_id)
        if not turns or len(turns) <= self.max_turns:
            return []
        overflow = len(turns) - self.max_turns
        evicted = turns[:overflow]
        del turns[:overflow]
        return evicted

    def clear(self, session_id: str) -> bool:
        lock = self._locks.get(session_id)
        if lock is not None and not lock.locked():
            del self._locks[session_id]
        if session_id in self._history:
            del self._history[session_id]
            return True
        return False

    def lock(self, session_id: str) -> asyncio.Lock:
        if session_id not in self._locks:
            self._locks[session_id] = asyncio.Lock()
        return self._locks[session_id]

    def stats(self) -> Dict[str, Any]:
        """
        Get statistics about active conversation sessions.

        Returns:
            Dictionary with session statistics
        """
        total_sessions = len(self._history)
        total_messages = sum(len(turns) for turns in self._history.values())

        active_sessions = sum(1 for turns in self._history.values()
                              if turns and (datetime.now() - turns[-1].timestamp).days < 1)

        return {
            "total_sessions": total_sessions,
            "active_sessions": active_sessions,
            "total_messages": total_messages,
            "avg_messages_per_session": total_messages / total_sessions if total_sessions > 0 else 0
        }


def serialize_history(turns: List[ConversationTurn], max_chars: int = 0) -> str:
    """
    Build a role-prefixed transcript from conversation turns.

    Args:
        turns: Turns to render, oldest first
        max_chars: Truncate each turn's text to this many characters (0 = no limit)

    Returns:
        One "role: text" line per turn, most recent last
    """
    lines = []
    for turn in turns:
        text = turn.text[:max_chars] if max_chars > 0 else turn.text
        lines.append(f"{turn.role}: {text}")
    return "\n".join(lines)


def build_conversation_context(turns: List[ConversationTurn], max_messages: int = 3,
                               max_chars: int = 0) -> str:
    """
    Build conversation context string from the most recent turns.

    Args:
        turns: Session history, oldest first
        max_messages: Maximum number of recent messages to include
        max_chars: Per-message character limit (0 = no limit)

    Returns:
        Formatted conversation context string
    """
    if not turns or max_messages <= 0:
        return ""
    return serialize_history(turns[-max_messages:], max_chars=max_chars)


def history_as_messages(turns: List[ConversationTurn]) -> List[Dict[str, str]]:
    """Convert turns into chat messages for the completion service."""
    return [{"role": t.role, "content": t.text} for t in turns]
