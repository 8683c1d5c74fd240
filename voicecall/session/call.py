"""Per-connection call session state machine."""

from __future__ import annotations

import time
import uuid
import logging
from enum import Enum
from typing import Any

from voicecall.state.models import ConversationTurn

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_SYSTEM = "system"


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ENDING = "ending"


class CallSession:
    """State and conversation history for the single call on one connection.

    Only the owning connection's handlers mutate a session; it is never
    shared or looked up globally.
    """

    def __init__(self, session_id: str | None = None) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.state = SessionState.IDLE
        self.start_time: float | None = None
        self.last_activity_time = time.time()
        self.end_reason: str | None = None
        self.history: list[ConversationTurn] = []

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def is_ending(self) -> bool:
        return self.state is SessionState.ENDING

    def touch(self) -> None:
        self.last_activity_time = time.time()

    def start(self) -> None:
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"cannot start session in state {self.state.value}")
        self.state = SessionState.ACTIVE
        self.start_time = time.time()
        self.touch()
        logger.info("call started session_id=%s", self.session_id)

    def end(self, reason: str) -> bool:
        """Move to ENDING. Returns True only for the call that made the transition."""
        if self.state is SessionState.ENDING:
            return False
        self.state = SessionState.ENDING
        self.end_reason = reason
        logger.info("call ending session_id=%s reason=%s turns=%d", self.session_id, reason, len(self.history))
        return True

    def append_user(self, content: str) -> ConversationTurn:
        turn = ConversationTurn(role=ROLE_USER, content=content)
        self.history.append(turn)
        return turn

    def append_assistant(self, content: str) -> ConversationTurn:
        turn = ConversationTurn(role=ROLE_ASSISTANT, content=content)
        self.history.append(turn)
        return turn

    def completion_messages(self, system_prompt: str, *, max_messages: int = 0) -> list[dict[str, Any]]:
        turns = self.history
        if max_messages > 0:
            turns = turns[-max_messages:]
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": ROLE_SYSTEM, "content": system_prompt})
        messages.extend({"role": t.role, "content": t.content} for t in turns)
        return messages

    def duration_s(self) -> float:
        if self.start_time is None:
            return 0.0
        return max(0.0, time.time() - self.start_time)


__all__ = ["CallSession", "ROLE_ASSISTANT", "ROLE_SYSTEM", "ROLE_USER", "SessionState"]
