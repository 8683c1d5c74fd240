from __future__ import annotations

import pytest

from voicecall.session import CallSession, SessionState
from voicecall.session.call import ROLE_USER, ROLE_SYSTEM, ROLE_ASSISTANT


def test_session_lifecycle_transitions() -> None:
    session = CallSession()
    assert session.state is SessionState.IDLE
    assert len(session.session_id) == 32

    session.start()
    assert session.is_active
    assert session.start_time is not None

    assert session.end("client_request") is True
    assert session.is_ending
    assert session.end_reason == "client_request"


def test_end_happens_once() -> None:
    session = CallSession("s1")
    session.start()
    assert session.end("heartbeat_timeout") is True
    assert session.end("client_request") is False
    assert session.end_reason == "heartbeat_timeout"


def test_cannot_restart_session() -> None:
    session = CallSession()
    session.start()
    with pytest.raises(RuntimeError):
        session.start()
    session.end("done")
    with pytest.raises(RuntimeError):
        session.start()


def test_idle_session_can_end() -> None:
    session = CallSession()
    assert session.end("connection_lost") is True
    assert session.duration_s() == 0.0


def test_completion_messages_include_prompt_and_history() -> None:
    session = CallSession()
    session.append_user("hi")
    session.append_assistant("hello")
    session.append_user("how are you")

    messages = session.completion_messages("be brief")
    assert messages[0] == {"role": ROLE_SYSTEM, "content": "be brief"}
    assert [m["role"] for m in messages[1:]] == [ROLE_USER, ROLE_ASSISTANT, ROLE_USER]
    assert messages[-1]["content"] == "how are you"


def test_completion_messages_trim_to_recent_turns() -> None:
    session = CallSession()
    for i in range(6):
        session.append_user(f"u{i}")
    messages = session.completion_messages("", max_messages=2)
    assert [m["content"] for m in messages] == ["u4", "u5"]
